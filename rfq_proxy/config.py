from __future__ import annotations

import json
import re
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_SHOP_DOMAIN_RE = re.compile(r"^[a-z0-9][a-z0-9-]*\.myshopify\.com$")


class Settings(BaseSettings):
    SHOPIFY_STORE_DOMAIN: str
    SHOPIFY_ADMIN_API_VERSION: str = "2024-10"
    SHOPIFY_ADMIN_ACCESS_TOKEN: str
    SHOPIFY_API_SECRET: str = ""
    SHOPIFY_REQUEST_TIMEOUT_SECONDS: float = 20.0

    PROXY_MOUNT_PREFIX: str = "/proxy"
    PROXY_FALLBACK_PREFIX: str = "apps"
    PROXY_FALLBACK_SUBPATH: str = "rfq"
    # Local testing only. Never enable for a storefront-facing deployment.
    PROXY_SKIP_SIGNATURE_VERIFICATION: bool = False
    PROXY_SIGNATURE_DEBUG: bool = False

    CORS_ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = []

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    SHUTDOWN_GRACE_SECONDS: int = 10
    LOG_LEVEL: str = "info"

    @field_validator("SHOPIFY_STORE_DOMAIN")
    @classmethod
    def validate_store_domain(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not _SHOP_DOMAIN_RE.fullmatch(normalized):
            raise ValueError("SHOPIFY_STORE_DOMAIN must be a valid *.myshopify.com domain")
        return normalized

    @field_validator("PROXY_MOUNT_PREFIX")
    @classmethod
    def validate_mount_prefix(cls, value: str) -> str:
        prefix = value.strip()
        if not prefix.startswith("/"):
            raise ValueError("PROXY_MOUNT_PREFIX must start with '/'")
        return prefix.rstrip("/")

    @field_validator("CORS_ALLOWED_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                return json.loads(stripped)
            return [origin.strip() for origin in stripped.split(",") if origin.strip()]
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        return value.strip().lower()

    @model_validator(mode="after")
    def validate_signing_config(self) -> "Settings":
        if not self.PROXY_SKIP_SIGNATURE_VERIFICATION and not self.SHOPIFY_API_SECRET:
            raise ValueError(
                "SHOPIFY_API_SECRET is required unless PROXY_SKIP_SIGNATURE_VERIFICATION=true"
            )
        return self

    @property
    def fallback_storefront_path(self) -> str:
        prefix = self.PROXY_FALLBACK_PREFIX.strip("/")
        subpath = self.PROXY_FALLBACK_SUBPATH.strip("/")
        return f"/{prefix}/{subpath}"

    @property
    def admin_base_url(self) -> str:
        return f"https://{self.SHOPIFY_STORE_DOMAIN}/admin/api/{self.SHOPIFY_ADMIN_API_VERSION}"

    def draft_order_admin_url(self, draft_order_id: int | str) -> str:
        return f"https://{self.SHOPIFY_STORE_DOMAIN}/admin/draft_orders/{draft_order_id}"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
