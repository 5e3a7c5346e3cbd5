"""Pydantic schemas for the saved shipping address."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Address(BaseModel):
    """Shipping address. Every field is optional; unknown fields are kept."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    full_name: str | None = Field(default=None, alias="fullName")
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = Field(default=None, alias="postalCode")
    country: str | None = None
    phone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AddressResponse(BaseModel):
    address: dict[str, Any] | None = Field(
        default=None,
        description="Saved address, or null when none is stored.",
    )
