"""Pydantic schemas for purchase requests and order responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.domain.models import (
    ById,
    BySlug,
    Order,
    OrderRequestItem,
    ProductRef,
    PurchaseCommand,
)
from storefront.domain.money import cents_to_amount
from storefront.schemas.account import Address


class PurchaseItem(BaseModel):
    """One requested line; identify the product by ``slug`` or ``productId``."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str | None = Field(default=None, description="Product slug; wins over productId.")
    product_id: int | None = Field(default=None, alias="productId")
    quantity: int = Field(..., ge=1, description="Units to buy (positive integer).")

    @field_validator("quantity", mode="before")
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("quantity must be an integer")
        return value

    def to_ref(self) -> ProductRef | None:
        if self.slug:
            return BySlug(self.slug)
        if self.product_id is not None:
            return ById(self.product_id)
        return None


class PurchaseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: list[PurchaseItem] = Field(..., min_length=1)
    shipping_address: Address | None = Field(default=None, alias="shippingAddress")
    save_address: bool = Field(default=False, alias="saveAddress")

    def to_command(self) -> PurchaseCommand:
        return PurchaseCommand(
            items=tuple(
                OrderRequestItem(ref=item.to_ref(), quantity=item.quantity)
                for item in self.items
            ),
            shipping_address=(
                self.shipping_address.to_dict()
                if self.shipping_address is not None
                else None
            ),
            save_address=self.save_address,
        )


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    slug: str
    title: str
    price: float = Field(..., description="Unit price at purchase time, 2 decimal places.")
    quantity: int


class OrderResponse(BaseModel):
    """Order snapshot as persisted; money rounded to 2 decimal places."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(..., alias="userId")
    total: float
    status: str
    created_at: datetime = Field(..., alias="createdAt")
    shipping_address: dict[str, Any] | None = Field(default=None, alias="shippingAddress")
    items: list[OrderItemResponse]

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            total=cents_to_amount(order.total_cents),
            status=order.status,
            created_at=order.created_at,
            shipping_address=order.shipping_address,
            items=[
                OrderItemResponse(
                    product_id=str(line.product_id),
                    slug=line.slug,
                    title=line.title,
                    price=cents_to_amount(line.unit_price_cents),
                    quantity=line.quantity,
                )
                for line in order.lines
            ],
        )


class PurchaseResponse(BaseModel):
    order: OrderResponse
