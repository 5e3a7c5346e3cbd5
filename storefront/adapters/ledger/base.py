"""Ledger interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Sequence

from storefront.domain.models import NewOrder, Order, OrderLineSnapshot


class AbstractLedger(ABC):
    """Interface for order persistence and windowed purchase queries."""

    @abstractmethod
    def record_order(
        self,
        header: NewOrder,
        lines: Sequence[OrderLineSnapshot],
        *,
        remember_address: bool = False,
    ) -> int:
        """Persist an order header and its lines in one transaction.

        Args:
            header: Order header, including the commit timestamp.
            lines: Line snapshots; all or none are written.
            remember_address: Also store ``header.shipping_address`` as the
                user's saved address, in the same transaction.

        Returns:
            The new order id.

        Raises:
            PersistenceAppError: If the storage layer fails. Nothing is left behind.
        """
        raise NotImplementedError

    @abstractmethod
    def sum_quantity_by_product(
        self,
        user_id: int,
        product_ids: Iterable[int],
        since: datetime,
    ) -> dict[int, int]:
        """Sum quantities the user bought per product with ``created_at >= since``.

        Products with no purchases in range are absent from the result.
        """
        raise NotImplementedError

    @abstractmethod
    def get_order(self, order_id: int, user_id: int) -> Order:
        """Fetch one of the user's orders.

        Raises:
            OrderNotFoundError: If it doesn't exist or belongs to someone else.
        """
        raise NotImplementedError

    @abstractmethod
    def list_orders(self, user_id: int) -> list[Order]:
        """Return the user's orders, newest first."""
        raise NotImplementedError
