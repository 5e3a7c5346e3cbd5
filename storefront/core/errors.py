"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional so each error only carries what applies to it.
    """

    field: str
    reference: str
    hint: str
    errors: list[dict[str, Any]]
    order_id: str
    slug: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class InvalidRequestError(ValidationAppError):
    """Raised when a purchase request is malformed (empty, missing refs, bad quantity)."""

    @classmethod
    def for_field(cls, field: str, message: str) -> "InvalidRequestError":
        return cls(
            code="invalid_request",
            message=message,
            details={"field": field, "errors": [{"field": field, "message": message}]},
        )


class ProductNotFoundError(ValidationAppError):
    """Raised when a purchase references a product the catalog doesn't have."""

    @classmethod
    def for_reference(cls, reference: str) -> "ProductNotFoundError":
        return cls(
            code="product_not_found",
            message=f"Product not found for {reference}",
            details={"reference": reference},
        )


@dataclass
class RateLimitExceededError(AppError):
    """Raised when a purchase would push a product over the per-user window limit."""

    limit: int = 0
    window_seconds: int = 0
    product_id: int = 0
    slug: str | None = None
    requested_quantity: int = 0
    recently_purchased_quantity: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "limit": self.limit,
            "windowSeconds": self.window_seconds,
            "product": {
                "id": str(self.product_id),
                "slug": self.slug,
                "requestedQuantity": self.requested_quantity,
                "recentPurchasedQuantity": self.recently_purchased_quantity,
            },
        }


class PersistenceAppError(AppError):
    """Raised when the storage layer fails; details stay in the logs."""


class AuthenticationAppError(AppError):
    """Raised when the caller cannot be identified."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist for this caller."""


class OrderNotFoundError(NotFoundAppError):
    """Raised when an order is missing or owned by another user."""


class CatalogItemNotFoundError(NotFoundAppError):
    """Raised when a catalog lookup by slug finds nothing."""
