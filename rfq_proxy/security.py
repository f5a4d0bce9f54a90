"""App Proxy signature verification.

Shopify forwards storefront requests made under the proxy mount
(e.g. ``/apps/rfq/create-draft-order``) to this service under the local
mount (e.g. ``/proxy/create-draft-order``), appending ``path_prefix``,
``shop``, ``timestamp`` and the signature to the query string.

The signature is an HMAC-SHA256 over the storefront path plus the query
string exactly as it was sent, minus the ``signature``/``hmac`` pair. The
query must therefore never go through a parser that reorders parameters or
normalizes percent-encoding; every helper here works on the raw fragments.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import unquote

logger = logging.getLogger(__name__)

SIGNATURE_KEYS = ("signature", "hmac")
_SIGNATURE_FRAGMENT_PREFIXES = tuple(f"{key}=" for key in SIGNATURE_KEYS)

SignatureDiagnostics = Callable[[str, dict[str, Any]], None]


def split_query_pairs(raw_query: str) -> list[tuple[str, str]]:
    """Split a raw query string into ordered ``(key, value)`` pairs.

    Nothing is decoded. Empty fragments are skipped and a fragment without
    ``=`` yields an empty value.
    """
    pairs: list[tuple[str, str]] = []
    for fragment in raw_query.split("&"):
        if not fragment:
            continue
        key, _, value = fragment.partition("=")
        pairs.append((key, value))
    return pairs


def _first_value(raw_query: str, key: str) -> str | None:
    for pair_key, value in split_query_pairs(raw_query):
        if pair_key == key:
            return value
    return None


def _decode_path_prefix(raw_value: str) -> str:
    try:
        return unquote(raw_value, errors="strict")
    except UnicodeDecodeError:
        return raw_value


def _strip_mount_prefix(raw_path: str, mount_prefix: str) -> str:
    prefix = mount_prefix.rstrip("/")
    if prefix and (raw_path == prefix or raw_path.startswith(f"{prefix}/")):
        return raw_path[len(prefix):]
    return raw_path


def build_canonical_message(
    raw_path: str,
    raw_query: str,
    mount_prefix: str,
    fallback_path_prefix: str,
) -> str:
    """Rebuild the exact string Shopify signed for a proxied request.

    The local mount is swapped back for the storefront mount taken from
    ``path_prefix`` (or ``fallback_path_prefix`` when the platform did not
    send one), and the query keeps every fragment except the signature ones,
    in the original order and encoding.
    """
    route_suffix = _strip_mount_prefix(raw_path, mount_prefix)

    raw_path_prefix = _first_value(raw_query, "path_prefix")
    if raw_path_prefix is None:
        storefront_mount = fallback_path_prefix
    else:
        storefront_mount = _decode_path_prefix(raw_path_prefix)
    storefront_path = storefront_mount.rstrip("/") + route_suffix

    kept_fragments = [
        fragment
        for fragment in raw_query.split("&")
        if fragment and not fragment.startswith(_SIGNATURE_FRAGMENT_PREFIXES)
    ]
    if not kept_fragments:
        return storefront_path
    return f"{storefront_path}?{'&'.join(kept_fragments)}"


def extract_provided_signature(raw_query: str) -> str | None:
    """Return the first ``signature`` value, falling back to the first ``hmac`` value."""
    fragments = raw_query.split("&")
    for prefix in _SIGNATURE_FRAGMENT_PREFIXES:
        for fragment in fragments:
            if fragment.startswith(prefix):
                return fragment[len(prefix):]
    return None


def compute_signature(message: str, secret: str) -> str:
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8", "surrogateescape"),
        hashlib.sha256,
    ).hexdigest()


def secret_preview(secret: str) -> str:
    if not secret:
        return "<empty>"
    # Short secrets are fully masked.
    visible = secret[:4] if len(secret) > 8 else ""
    return f"{visible}*** (len={len(secret)})"


def verify_proxy_signature(
    raw_path: str,
    raw_query: str,
    secret: str,
    *,
    mount_prefix: str,
    fallback_path_prefix: str,
    diagnostics: SignatureDiagnostics | None = None,
) -> bool:
    """Check the App Proxy signature of a request. Never raises.

    ``diagnostics`` receives the canonical message and both digests; pass a
    sink only when operator debugging is explicitly enabled.
    """
    try:
        if not secret:
            logger.warning("Proxy signature rejected: signing secret is not configured")
            return False

        provided = extract_provided_signature(raw_query)
        if not provided:
            logger.warning("Proxy signature rejected: no signature or hmac parameter")
            return False

        message = build_canonical_message(raw_path, raw_query, mount_prefix, fallback_path_prefix)
        computed = compute_signature(message, secret)
        if diagnostics is not None:
            diagnostics(
                "proxy_signature_computed",
                {
                    "message": message,
                    "provided": provided,
                    "computed": computed,
                    "secret": secret_preview(secret),
                },
            )

        if len(provided) != len(computed):
            logger.warning("Proxy signature rejected: unexpected signature length")
            return False
        if not hmac.compare_digest(
            computed.encode("ascii"),
            provided.encode("utf-8", "surrogateescape"),
        ):
            logger.warning("Proxy signature rejected: digest mismatch")
            return False
        return True
    except Exception:  # noqa: BLE001 - any failure here is a rejection
        logger.warning("Proxy signature rejected: verification raised", exc_info=True)
        return False


def log_signature_diagnostics(event: str, details: dict[str, Any]) -> None:
    logger.debug("%s: %s", event, details)
