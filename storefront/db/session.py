"""Engine/session construction and schema bootstrap."""

from __future__ import annotations

import json
import logging
from typing import Iterable

from sqlalchemy import Engine, create_engine, event, func, select
from sqlalchemy.orm import Session, sessionmaker

from storefront.db.models import Base, ProductModel, UserModel
from storefront.db.seed import SEED_PRODUCTS
from storefront.domain.money import to_cents

logger = logging.getLogger(__name__)


def _enable_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections get FK enforcement and thread sharing."""

    connect_args: dict = {}
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": 5}

    engine = create_engine(url, echo=echo, future=True, connect_args=connect_args)
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_pragmas)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def _dump(value) -> str | None:
    if value is None:
        return None
    return json.dumps(value)


def seed_products(session: Session) -> int:
    """Insert the demo catalog when the products table is empty.

    Returns:
        Number of products inserted.
    """
    count = session.scalar(select(func.count()).select_from(ProductModel)) or 0
    if count:
        return 0

    for item in SEED_PRODUCTS:
        session.add(
            ProductModel(
                slug=item["slug"],
                title=item["title"],
                subtitle=item.get("subtitle"),
                price_cents=to_cents(item["price"]),
                rating=item.get("rating"),
                rating_count=item.get("rating_count"),
                tags=_dump(item.get("tags")),
                images=_dump(item.get("images", [])),
                badges=_dump(item.get("badges")),
                description=item.get("description", ""),
            )
        )
    return len(SEED_PRODUCTS)


def ensure_users(session: Session, user_ids: Iterable[int]) -> None:
    existing = set(session.scalars(select(UserModel.id)))
    for user_id in sorted(set(user_ids) - existing):
        session.add(UserModel(id=user_id, name=f"user-{user_id}"))


def init_db(
    engine: Engine,
    session_factory: sessionmaker[Session],
    *,
    seed: bool = True,
    user_ids: Iterable[int] = (),
) -> None:
    """Create tables, make sure known callers have user rows, and seed the catalog.

    Safe to call repeatedly.
    """
    Base.metadata.create_all(engine)

    with session_factory.begin() as session:
        ensure_users(session, user_ids)
        inserted = seed_products(session) if seed else 0

    logger.info(
        "db.initialized",
        extra={"seeded_products": inserted, "seed_enabled": seed},
    )
