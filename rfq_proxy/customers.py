from __future__ import annotations

import logging
from typing import Any

from rfq_proxy.errors import UpstreamError
from rfq_proxy.schemas import CustomerContact
from rfq_proxy.shopify_api import ShopifyAdminClient

logger = logging.getLogger(__name__)


def _customer_create_fields(contact: CustomerContact) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "email": contact.email,
        "first_name": contact.first_name,
        "last_name": contact.last_name,
        "phone": contact.phone,
    }
    customer = {key: value for key, value in fields.items() if value}
    customer["verified_email"] = bool(contact.email)
    return customer


async def resolve_customer(client: ShopifyAdminClient, contact: CustomerContact) -> int | str:
    """Find the customer by exact email, or create one.

    Two concurrent submissions for the same new email can both miss the
    search and create two customers; Shopify is the only arbiter here.
    """
    customer_id = None
    if contact.email:
        matches = await client.search_customers_by_email(contact.email)
        if matches:
            customer_id = matches[0].get("id")

    if not customer_id:
        created = await client.create_customer(_customer_create_fields(contact))
        customer_id = created.get("id")
        if not customer_id:
            raise UpstreamError("Customer creation response is missing customer.id")
        logger.info("Created Shopify customer %s for RFQ submission", customer_id)

    return customer_id
