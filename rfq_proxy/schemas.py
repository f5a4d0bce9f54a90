from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _FormModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class LineItemInput(_FormModel):
    variant_id: int | None = None
    title: str | None = None
    price: str | int | float | None = None
    quantity: int | None = None
    properties: Any = None

    @field_validator("variant_id", mode="before")
    @classmethod
    def coerce_variant_id(cls, value: Any) -> Any:
        if value in ("", 0, None):
            return None
        if isinstance(value, str) and value.startswith("gid://shopify/ProductVariant/"):
            return value.rsplit("/", 1)[-1]
        return value

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_blank_quantity(cls, value: Any) -> Any:
        if value == "":
            return None
        return value


class CustomerContact(_FormModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    company: str | None = None

    @property
    def full_name(self) -> str:
        parts = [part.strip() for part in (self.first_name, self.last_name) if part and part.strip()]
        return " ".join(parts)


class ShippingAddress(_FormModel):
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    province: str | None = None
    zip: str | None = None
    country: str | None = None
    company: str | None = None


class DraftOrderSubmission(_FormModel):
    line_items: list[LineItemInput] = Field(default_factory=list)
    customer: CustomerContact = Field(default_factory=CustomerContact)
    shipping: ShippingAddress = Field(default_factory=ShippingAddress)
    note: str | None = None
    installer_needed: bool = False
    shipping_method: str | None = None

    @field_validator("line_items", mode="before")
    @classmethod
    def default_line_items(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("customer", "shipping", mode="before")
    @classmethod
    def default_blocks(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("installer_needed", mode="before")
    @classmethod
    def default_installer_needed(cls, value: Any) -> Any:
        if value in (None, ""):
            return False
        return value


class CreateDraftOrderResponse(BaseModel):
    reference: int | str
    admin_url: str
    invoice_url: str | None = None
