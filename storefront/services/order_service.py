"""Order service orchestrating validation, purchase limits and the ledger.

A purchase runs:
- local validation of the requested items (no side effects)
- one batched catalog lookup for every referenced product
- line snapshots at the current integer-cent price
- the purchase limit check and the ledger commit, both under a per-user lock
  and both against the same ``now``

Either the whole order (and, when asked, the saved address) is committed or
nothing is.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Sequence

from storefront.adapters.catalog.base import AbstractCatalog, ProductLookup
from storefront.adapters.ledger.base import AbstractLedger
from storefront.adapters.profile.base import AbstractProfileStore
from storefront.core.clock import Clock, utc_now
from storefront.core.errors import (
    InvalidRequestError,
    ProductNotFoundError,
    RateLimitExceededError,
)
from storefront.domain.models import (
    ById,
    BySlug,
    NewOrder,
    Order,
    OrderLineSnapshot,
    OrderRequestItem,
    PurchaseCommand,
)
from storefront.services.rate_limit_evaluator import RateLimitEvaluator
from storefront.services.user_locks import UserLockRegistry

logger = logging.getLogger(__name__)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_items(items: Sequence[OrderRequestItem]) -> None:
    """Reject empty requests, missing product references and bad quantities.

    Raises:
        InvalidRequestError: Naming the first offending field.
    """
    if not items:
        raise InvalidRequestError.for_field("items", "items must be a non-empty array")

    for index, item in enumerate(items):
        if item.ref is None:
            raise InvalidRequestError.for_field(
                f"items[{index}]", f"Item {index} must include slug or productId"
            )
        if not _is_positive_int(item.quantity):
            raise InvalidRequestError.for_field(
                f"items[{index}].quantity", f"Item {index} has invalid quantity"
            )


def _lookup_products(catalog: AbstractCatalog, items: Sequence[OrderRequestItem]) -> ProductLookup:
    slugs = [item.ref.slug for item in items if isinstance(item.ref, BySlug)]
    ids = [item.ref.product_id for item in items if isinstance(item.ref, ById)]
    return catalog.find_many(slugs=slugs, ids=ids)


def build_line_snapshots(
    items: Sequence[OrderRequestItem],
    lookup: ProductLookup,
) -> list[OrderLineSnapshot]:
    """Snapshot each requested line at the product's current price.

    Raises:
        ProductNotFoundError: For the first reference the lookup couldn't resolve.
    """
    lines: list[OrderLineSnapshot] = []
    for item in items:
        ref = item.ref
        if isinstance(ref, BySlug):
            product = lookup.by_slug.get(ref.slug)
        else:
            product = lookup.by_id.get(ref.product_id)
        if product is None:
            raise ProductNotFoundError.for_reference(str(ref))

        lines.append(
            OrderLineSnapshot(
                product_id=product.id,
                slug=product.slug,
                title=product.title,
                unit_price_cents=product.unit_price_cents,
                quantity=item.quantity,
            )
        )
    return lines


def aggregate_quantities(lines: Sequence[OrderLineSnapshot]) -> "OrderedDict[int, int]":
    """Sum requested quantity per product id, keeping first-seen order."""

    totals: OrderedDict[int, int] = OrderedDict()
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    return totals


class OrderService:
    """Creates and reads orders for authenticated users."""

    def __init__(
        self,
        *,
        catalog: AbstractCatalog,
        ledger: AbstractLedger,
        profiles: AbstractProfileStore,
        evaluator: RateLimitEvaluator,
        locks: UserLockRegistry | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._profiles = profiles
        self._evaluator = evaluator
        self._locks = locks or UserLockRegistry()
        self._clock = clock

    def _resolve_shipping_address(
        self, user_id: int, command: PurchaseCommand
    ) -> dict[str, Any] | None:
        if command.shipping_address is not None:
            return dict(command.shipping_address)
        return self._profiles.get_address(user_id)

    def purchase(self, user_id: int, command: PurchaseCommand) -> Order:
        """Create a paid order, enforcing the per-product purchase limit.

        Args:
            user_id: Authenticated buyer.
            command: Items, optional shipping address and save flag.

        Returns:
            Snapshot of the committed order.

        Raises:
            InvalidRequestError: Malformed items.
            ProductNotFoundError: Unknown product reference.
            RateLimitExceededError: Some product would exceed the limit.
            PersistenceAppError: The commit failed; nothing was written.
        """
        items = tuple(command.items)
        validate_items(items)

        lookup = _lookup_products(self._catalog, items)
        lines = build_line_snapshots(items, lookup)
        requested = aggregate_quantities(lines)
        slugs = {line.product_id: line.slug for line in lines}

        with self._locks.hold(user_id):
            now = self._clock()
            decision = self._evaluator.check(user_id, requested, now=now, slugs=slugs)
            violation = decision.violation
            if violation is not None:
                label = violation.slug or str(violation.product_id)
                raise RateLimitExceededError(
                    code="purchase_rate_limited",
                    message=(
                        f"Rate limit exceeded for product '{label}'. "
                        f"Limit is {decision.limit} per {decision.window_seconds} seconds."
                    ),
                    limit=decision.limit,
                    window_seconds=decision.window_seconds,
                    product_id=violation.product_id,
                    slug=violation.slug,
                    requested_quantity=violation.requested_quantity,
                    recently_purchased_quantity=violation.recently_purchased_quantity,
                )

            total_cents = sum(line.line_total_cents for line in lines)
            shipping_address = self._resolve_shipping_address(user_id, command)
            remember = command.save_address and command.shipping_address is not None

            header = NewOrder(
                user_id=user_id,
                total_cents=total_cents,
                created_at=now,
                shipping_address=shipping_address,
            )
            order_id = self._ledger.record_order(header, lines, remember_address=remember)

        logger.info(
            "order.created",
            extra={
                "order_id": order_id,
                "user_id": user_id,
                "line_count": len(lines),
                "total_cents": total_cents,
                "address_saved": remember,
            },
        )
        return Order(
            id=order_id,
            user_id=user_id,
            total_cents=total_cents,
            status=header.status,
            created_at=now,
            shipping_address=shipping_address,
            lines=tuple(lines),
        )

    def get_order(self, user_id: int, order_id: int) -> Order:
        return self._ledger.get_order(order_id, user_id)

    def list_orders(self, user_id: int) -> list[Order]:
        return self._ledger.list_orders(user_id)
