"""Core domain types.

All types here are immutable snapshots. Orders and their lines are captured
once at purchase time and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from storefront.domain.money import line_total_cents

ORDER_STATUS_PAID = "paid"

# Row ids are signed 64-bit integers in the database
MAX_ROW_ID = 2**63 - 1


def is_storable_id(value: int) -> bool:
    return 1 <= value <= MAX_ROW_ID


@dataclass(frozen=True)
class RateLimitConfig:
    """Deployment-wide purchase limit.

    Attributes:
        limit_per_product: Max units of one product a user may buy per window.
        window_seconds: Length of the trailing window in seconds.
    """

    limit_per_product: int = 1
    window_seconds: int = 60

    def __post_init__(self) -> None:
        if self.limit_per_product < 1:
            raise ValueError("limit_per_product must be >= 1")
        if self.window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")


@dataclass(frozen=True)
class BySlug:
    slug: str

    def __str__(self) -> str:
        return self.slug


@dataclass(frozen=True)
class ById:
    product_id: int

    def __str__(self) -> str:
        return str(self.product_id)


ProductRef = Union[BySlug, ById]


@dataclass(frozen=True)
class Product:
    """Catalog product as seen by the order path."""

    id: int
    slug: str
    title: str
    unit_price_cents: int


@dataclass(frozen=True)
class CatalogProduct(Product):
    """Product with the display fields only the catalog endpoints expose."""

    subtitle: str | None = None
    description: str = ""
    rating: float = 0.0
    rating_count: int = 0
    tags: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    badges: tuple[str, ...] = ()


@dataclass(frozen=True)
class OrderRequestItem:
    """One requested line. ``ref`` is None when the caller supplied neither slug nor id."""

    ref: ProductRef | None
    quantity: Any


@dataclass(frozen=True)
class PurchaseCommand:
    items: tuple[OrderRequestItem, ...]
    shipping_address: dict[str, Any] | None = None
    save_address: bool = False


@dataclass(frozen=True)
class OrderLineSnapshot:
    product_id: int
    slug: str
    title: str
    unit_price_cents: int
    quantity: int

    @property
    def line_total_cents(self) -> int:
        return line_total_cents(self.unit_price_cents, self.quantity)


@dataclass(frozen=True)
class NewOrder:
    """Order header ready to be committed to the ledger."""

    user_id: int
    total_cents: int
    created_at: datetime
    shipping_address: dict[str, Any] | None = None
    status: str = ORDER_STATUS_PAID


@dataclass(frozen=True)
class Order:
    id: int
    user_id: int
    total_cents: int
    status: str
    created_at: datetime
    shipping_address: dict[str, Any] | None = None
    lines: tuple[OrderLineSnapshot, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RateLimitViolation:
    """Details of the first product that would exceed the limit."""

    product_id: int
    slug: str | None
    requested_quantity: int
    recently_purchased_quantity: int


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a purchase limit evaluation.

    Attributes:
        allowed: Whether the whole request fits within the limit.
        limit: Configured units per product per window.
        window_seconds: Configured window length.
        violation: First offending product when not allowed.
    """

    allowed: bool
    limit: int
    window_seconds: int
    violation: RateLimitViolation | None = None

    def __post_init__(self) -> None:
        if not self.allowed and self.violation is None:
            raise ValueError("a denied decision must name the violating product")
