from __future__ import annotations

from typing import Any

from rfq_proxy.schemas import CustomerContact, DraftOrderSubmission, LineItemInput, ShippingAddress

NOTE_MARKER = "RFQ from storefront"
DRAFT_ORDER_TAGS = "RFQ,DraftOrder"
DEFAULT_COUNTRY = "United States"


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def build_line_item(item: LineItemInput) -> dict[str, Any]:
    if item.variant_id:
        line: dict[str, Any] = {"variant_id": int(item.variant_id)}
    else:
        fields = {"title": item.title, "price": item.price}
        line = {key: value for key, value in fields.items() if value is not None}
    line["quantity"] = int(item.quantity or 1)
    line["properties"] = item.properties if item.properties is not None else []
    return line


def build_shipping_address(
    shipping: ShippingAddress,
    contact: CustomerContact,
) -> dict[str, str] | None:
    if not _clean(shipping.address1):
        return None
    return {
        "first_name": _clean(contact.first_name),
        "last_name": _clean(contact.last_name),
        "phone": _clean(contact.phone),
        "company": _clean(shipping.company) or _clean(contact.company),
        "address1": _clean(shipping.address1),
        "address2": _clean(shipping.address2),
        "city": _clean(shipping.city),
        "province": _clean(shipping.province),
        "zip": _clean(shipping.zip),
        "country": _clean(shipping.country) or DEFAULT_COUNTRY,
    }


def format_shipping_address(address: dict[str, str] | None) -> str:
    if not address:
        return ""
    region = ", ".join(part for part in (address["city"], address["province"]) if part)
    locality = " ".join(part for part in (region, address["zip"]) if part)
    lines = [address["address1"], address["address2"], locality, address["country"]]
    return "\n".join(line for line in lines if line)


def _contact_summary(contact: CustomerContact) -> str:
    return " | ".join(
        value for value in (_clean(contact.email), _clean(contact.phone), _clean(contact.company)) if value
    )


def compose_note(submission: DraftOrderSubmission, shipping_address: dict[str, str] | None) -> str:
    contact = submission.customer
    full_name = contact.full_name
    contact_summary = _contact_summary(contact)
    shipping_method = _clean(submission.shipping_method)
    address_block = format_shipping_address(shipping_address)
    customer_note = _clean(submission.note)

    segments = [
        NOTE_MARKER,
        f"Customer: {full_name}" if full_name else "",
        f"Contact: {contact_summary}" if contact_summary else "",
        f"Shipping method: {shipping_method}" if shipping_method else "",
        f"Installer needed: {'Yes' if submission.installer_needed else 'No'}",
        f"Ship to:\n{address_block}" if address_block else "",
        f"Notes: {customer_note}" if customer_note else "",
    ]
    return "\n".join(segment for segment in segments if segment)


def build_note_attributes(
    submission: DraftOrderSubmission,
    shipping_address: dict[str, str] | None,
) -> list[dict[str, str]]:
    contact = submission.customer
    pairs = [
        ("source", "rfq_storefront"),
        ("customer_name", contact.full_name),
        ("customer_email", _clean(contact.email)),
        ("customer_phone", _clean(contact.phone)),
        ("company", _clean(contact.company)),
        ("shipping_method", _clean(submission.shipping_method)),
        ("installer_needed", "Yes" if submission.installer_needed else "No"),
        ("shipping_address", format_shipping_address(shipping_address).replace("\n", ", ")),
        ("customer_note", _clean(submission.note)),
    ]
    return [{"name": name, "value": value} for name, value in pairs if value]


def assemble_draft_order(submission: DraftOrderSubmission, *, customer_id: int | str) -> dict[str, Any]:
    """Map an RFQ submission onto the Admin API ``draft_order`` creation body."""
    shipping_address = build_shipping_address(submission.shipping, submission.customer)

    draft_order: dict[str, Any] = {
        "line_items": [build_line_item(item) for item in submission.line_items],
        "customer": {"id": customer_id},
        "note": compose_note(submission, shipping_address),
        "note_attributes": build_note_attributes(submission, shipping_address),
        "tags": DRAFT_ORDER_TAGS,
        "use_customer_default_address": True,
    }
    if shipping_address is not None:
        draft_order["shipping_address"] = shipping_address
    return {"draft_order": draft_order}
