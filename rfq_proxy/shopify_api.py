from __future__ import annotations

import logging
from typing import Any

import httpx

from rfq_proxy.config import settings
from rfq_proxy.errors import UpstreamError

logger = logging.getLogger(__name__)


class ShopifyAdminClient:
    def __init__(
        self,
        *,
        store_domain: str | None = None,
        api_version: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._store_domain = store_domain or settings.SHOPIFY_STORE_DOMAIN
        self._api_version = api_version or settings.SHOPIFY_ADMIN_API_VERSION
        self._access_token = access_token or settings.SHOPIFY_ADMIN_ACCESS_TOKEN
        self._timeout = timeout if timeout is not None else settings.SHOPIFY_REQUEST_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def base_url(self) -> str:
        return f"https://{self._store_domain}/admin/api/{self._api_version}"

    async def search_customers_by_email(self, email: str) -> list[dict[str, Any]]:
        response = await self.admin_request(
            "/customers/search.json",
            params={"query": f"email:{email}"},
        )
        customers = response.get("customers") or []
        if not isinstance(customers, list):
            raise UpstreamError("Customer search response has a malformed customers list")
        return [customer for customer in customers if isinstance(customer, dict)]

    async def create_customer(self, customer: dict[str, Any]) -> dict[str, Any]:
        response = await self.admin_request(
            "/customers.json",
            method="POST",
            payload={"customer": customer},
        )
        created = response.get("customer")
        if not isinstance(created, dict):
            raise UpstreamError("Customer creation response is missing customer")
        return created

    async def create_draft_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self.admin_request("/draft_orders.json", method="POST", payload=payload)
        draft_order = response.get("draft_order")
        if not isinstance(draft_order, dict):
            raise UpstreamError("Draft order creation response is missing draft_order")
        return draft_order

    async def admin_request(
        self,
        path: str,
        *,
        method: str = "GET",
        payload: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self._access_token,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    json=payload,
                    params=params,
                    headers=headers,
                )
        except httpx.RequestError as exc:
            raise UpstreamError(f"Network error while calling Shopify: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "Shopify Admin API %s %s failed with status %s",
                method,
                path,
                response.status_code,
            )
            raise UpstreamError(
                f"Shopify API call failed ({response.status_code}): {response.text}",
                upstream_status=response.status_code,
                body=response.text,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Shopify API returned invalid JSON",
                upstream_status=response.status_code,
                body=response.text,
            ) from exc

        if not isinstance(body, dict):
            raise UpstreamError("Shopify API response must be a JSON object")
        return body
