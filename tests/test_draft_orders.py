from __future__ import annotations

from rfq_proxy.draft_orders import assemble_draft_order, build_line_item, compose_note
from rfq_proxy.schemas import DraftOrderSubmission, LineItemInput


def test_variant_line_item_maps_to_variant_quantity_and_properties():
    assert build_line_item(LineItemInput(variant_id=123, quantity=2)) == {
        "variant_id": 123,
        "quantity": 2,
        "properties": [],
    }


def test_custom_line_item_defaults_quantity_to_one():
    assert build_line_item(LineItemInput(title="Custom rail", price="199.00")) == {
        "title": "Custom rail",
        "price": "199.00",
        "quantity": 1,
        "properties": [],
    }


def test_custom_line_item_omits_missing_title_and_price():
    assert build_line_item(LineItemInput(quantity=3)) == {"quantity": 3, "properties": []}
    assert build_line_item(LineItemInput(title="Custom rail")) == {
        "title": "Custom rail",
        "quantity": 1,
        "properties": [],
    }


def test_line_item_coerces_form_strings_and_passes_properties_through():
    item = LineItemInput.model_validate(
        {
            "variant_id": "gid://shopify/ProductVariant/456",
            "quantity": "0",
            "properties": [{"name": "Color", "value": "Black"}],
        }
    )

    assert build_line_item(item) == {
        "variant_id": 456,
        "quantity": 1,
        "properties": [{"name": "Color", "value": "Black"}],
    }


def test_assemble_full_submission():
    submission = DraftOrderSubmission.model_validate(
        {
            "line_items": [{"variant_id": 123, "quantity": 2}],
            "customer": {
                "email": "buyer@example.com",
                "first_name": "Ada",
                "last_name": "Lovelace",
                "phone": "+15555550100",
                "company": "Engines Ltd",
            },
            "shipping": {"address1": "1 Main St", "city": "Springfield", "province": "IL", "zip": "62701"},
            "note": "Need it by June",
            "installer_needed": True,
            "shipping_method": "Freight",
        }
    )

    draft_order = assemble_draft_order(submission, customer_id=555)["draft_order"]

    assert draft_order["customer"] == {"id": 555}
    assert draft_order["tags"] == "RFQ,DraftOrder"
    assert draft_order["use_customer_default_address"] is True
    assert draft_order["shipping_address"] == {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "phone": "+15555550100",
        "company": "Engines Ltd",
        "address1": "1 Main St",
        "address2": "",
        "city": "Springfield",
        "province": "IL",
        "zip": "62701",
        "country": "United States",
    }
    assert draft_order["note"] == "\n".join(
        [
            "RFQ from storefront",
            "Customer: Ada Lovelace",
            "Contact: buyer@example.com | +15555550100 | Engines Ltd",
            "Shipping method: Freight",
            "Installer needed: Yes",
            "Ship to:",
            "1 Main St",
            "Springfield, IL 62701",
            "United States",
            "Notes: Need it by June",
        ]
    )
    attributes = {item["name"]: item["value"] for item in draft_order["note_attributes"]}
    assert attributes == {
        "source": "rfq_storefront",
        "customer_name": "Ada Lovelace",
        "customer_email": "buyer@example.com",
        "customer_phone": "+15555550100",
        "company": "Engines Ltd",
        "shipping_method": "Freight",
        "installer_needed": "Yes",
        "shipping_address": "1 Main St, Springfield, IL 62701, United States",
        "customer_note": "Need it by June",
    }


def test_assemble_minimal_submission_omits_empty_segments():
    submission = DraftOrderSubmission.model_validate(
        {"line_items": [{"title": "Sample", "price": 10}], "shipping": {"city": "Nowhere"}}
    )

    draft_order = assemble_draft_order(submission, customer_id=1)["draft_order"]

    assert "shipping_address" not in draft_order
    assert draft_order["note"] == "RFQ from storefront\nInstaller needed: No"
    assert draft_order["note_attributes"] == [
        {"name": "source", "value": "rfq_storefront"},
        {"name": "installer_needed", "value": "No"},
    ]


def test_compose_note_uses_supplied_shipping_address_block():
    submission = DraftOrderSubmission(shipping_method="Pickup")
    address = {
        "address1": "9 Dock Rd",
        "address2": "Unit 4",
        "city": "",
        "province": "",
        "zip": "",
        "country": "Canada",
    }

    note = compose_note(submission, address)

    assert note == "RFQ from storefront\nShipping method: Pickup\nInstaller needed: No\nShip to:\n9 Dock Rd\nUnit 4\nCanada"
