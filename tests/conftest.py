import os
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("SHOPIFY_STORE_DOMAIN", "example-shop.myshopify.com")
os.environ.setdefault("SHOPIFY_ADMIN_API_VERSION", "2024-10")
os.environ.setdefault("SHOPIFY_ADMIN_ACCESS_TOKEN", "shpat_test")
os.environ.setdefault("SHOPIFY_API_SECRET", "hush")
os.environ.setdefault("PROXY_MOUNT_PREFIX", "/proxy")
os.environ.setdefault("PROXY_FALLBACK_PREFIX", "apps")
os.environ.setdefault("PROXY_FALLBACK_SUBPATH", "rfq")
os.environ.setdefault("PROXY_SKIP_SIGNATURE_VERIFICATION", "false")
os.environ.setdefault("CORS_ALLOWED_ORIGINS", '["https://example-shop.myshopify.com"]')
