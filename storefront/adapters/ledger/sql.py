"""SQLAlchemy-backed ledger.

Reads and writes go to the same primary database, so a committed order is
visible to the next purchase-window query immediately.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Iterable, Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storefront.adapters.ledger.base import AbstractLedger
from storefront.core.errors import OrderNotFoundError, PersistenceAppError
from storefront.db.models import OrderItemModel, OrderModel, UserModel
from storefront.domain.models import NewOrder, Order, OrderLineSnapshot, is_storable_id

logger = logging.getLogger(__name__)


def _load_address(raw: str | None) -> dict[str, Any] | None:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def _line_from_row(row: OrderItemModel) -> OrderLineSnapshot:
    return OrderLineSnapshot(
        product_id=row.product_id,
        slug=row.slug,
        title=row.title,
        unit_price_cents=row.unit_price_cents,
        quantity=row.quantity,
    )


def _order_from_row(row: OrderModel, lines: Iterable[OrderItemModel]) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        total_cents=row.total_cents,
        status=row.status,
        created_at=row.created_at,
        shipping_address=_load_address(row.shipping_address),
        lines=tuple(_line_from_row(item) for item in sorted(lines, key=lambda i: i.id)),
    )


def _remember_address(session: Session, user_id: int, address: dict[str, Any]) -> None:
    user = session.get(UserModel, user_id)
    if user is None:
        user = UserModel(id=user_id, name=f"user-{user_id}")
        session.add(user)
    user.address = json.dumps(address)
    session.flush()


class SqlLedger(AbstractLedger):
    """Ledger over the ``orders`` / ``order_items`` tables."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def record_order(
        self,
        header: NewOrder,
        lines: Sequence[OrderLineSnapshot],
        *,
        remember_address: bool = False,
    ) -> int:
        order_row = OrderModel(
            user_id=header.user_id,
            total_cents=header.total_cents,
            shipping_address=(
                json.dumps(header.shipping_address)
                if header.shipping_address is not None
                else None
            ),
            status=header.status,
            created_at=header.created_at,
        )
        order_row.items = [
            OrderItemModel(
                product_id=line.product_id,
                slug=line.slug,
                title=line.title,
                unit_price_cents=line.unit_price_cents,
                quantity=line.quantity,
            )
            for line in lines
        ]

        try:
            with self._session_factory.begin() as session:
                if remember_address and header.shipping_address is not None:
                    _remember_address(session, header.user_id, header.shipping_address)
                session.add(order_row)
                session.flush()
                order_id = order_row.id
        except SQLAlchemyError as exc:
            logger.error(
                "ledger.commit_failed",
                extra={
                    "user_id": header.user_id,
                    "line_count": len(lines),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise PersistenceAppError(
                code="persistence_failure",
                message="Could not record the order",
            ) from exc

        logger.debug(
            "ledger.order_recorded",
            extra={"order_id": order_id, "user_id": header.user_id, "line_count": len(lines)},
        )
        return order_id

    def sum_quantity_by_product(
        self,
        user_id: int,
        product_ids: Iterable[int],
        since: datetime,
    ) -> dict[int, int]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        stmt = (
            select(OrderItemModel.product_id, func.sum(OrderItemModel.quantity))
            .join(OrderModel, OrderItemModel.order_id == OrderModel.id)
            .where(OrderModel.user_id == user_id)
            .where(OrderItemModel.product_id.in_(ids))
            .where(OrderModel.created_at >= since)
            .group_by(OrderItemModel.product_id)
        )
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return {int(product_id): int(total or 0) for product_id, total in rows}

    def get_order(self, order_id: int, user_id: int) -> Order:
        with self._session_factory() as session:
            row = None
            if is_storable_id(order_id):
                row = session.scalar(
                    select(OrderModel).where(
                        OrderModel.id == order_id, OrderModel.user_id == user_id
                    )
                )
            if row is None:
                raise OrderNotFoundError(
                    code="order_not_found",
                    message="Order not found",
                    details={"order_id": str(order_id)},
                )
            items = session.scalars(
                select(OrderItemModel).where(OrderItemModel.order_id == row.id)
            ).all()
            return _order_from_row(row, items)

    def list_orders(self, user_id: int) -> list[Order]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).all()
            if not rows:
                return []

            items_by_order: dict[int, list[OrderItemModel]] = defaultdict(list)
            for item in session.scalars(
                select(OrderItemModel).where(
                    OrderItemModel.order_id.in_([row.id for row in rows])
                )
            ):
                items_by_order[item.order_id].append(item)

            return [_order_from_row(row, items_by_order[row.id]) for row in rows]
