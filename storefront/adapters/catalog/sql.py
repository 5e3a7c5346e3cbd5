"""SQLAlchemy-backed product catalog."""

from __future__ import annotations

import json
from typing import Any, Iterable

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, sessionmaker

from storefront.adapters.catalog.base import AbstractCatalog, ProductLookup
from storefront.core.errors import CatalogItemNotFoundError
from storefront.db.models import ProductModel
from storefront.domain.models import CatalogProduct, is_storable_id


def _load_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    try:
        value: Any = json.loads(raw)
    except ValueError:
        return ()
    if not isinstance(value, list):
        return ()
    return tuple(str(v) for v in value)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _product_from_row(row: ProductModel) -> CatalogProduct:
    return CatalogProduct(
        id=row.id,
        slug=row.slug,
        title=row.title,
        unit_price_cents=row.price_cents,
        subtitle=row.subtitle,
        description=row.description or "",
        rating=float(row.rating or 0),
        rating_count=int(row.rating_count or 0),
        tags=_load_list(row.tags),
        images=_load_list(row.images),
        badges=_load_list(row.badges),
    )


class SqlCatalog(AbstractCatalog):
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def find_many(self, *, slugs: Iterable[str] = (), ids: Iterable[int] = ()) -> ProductLookup:
        slug_list = sorted(set(slugs))
        id_list = sorted(i for i in set(ids) if is_storable_id(i))
        conditions = []
        if slug_list:
            conditions.append(ProductModel.slug.in_(slug_list))
        if id_list:
            conditions.append(ProductModel.id.in_(id_list))
        if not conditions:
            return ProductLookup()

        with self._session_factory() as session:
            rows = session.scalars(select(ProductModel).where(or_(*conditions))).all()

        products = [_product_from_row(row) for row in rows]
        return ProductLookup(
            by_slug={p.slug: p for p in products},
            by_id={p.id: p for p in products},
        )

    def get_by_slug(self, slug: str) -> CatalogProduct:
        with self._session_factory() as session:
            row = session.scalar(select(ProductModel).where(ProductModel.slug == slug))
        if row is None:
            raise CatalogItemNotFoundError(
                code="product_not_found",
                message="Product not found",
                details={"slug": slug},
            )
        return _product_from_row(row)

    def list_products(self, *, limit: int | None = None) -> list[CatalogProduct]:
        stmt = select(ProductModel).order_by(ProductModel.id.asc())
        if limit:
            stmt = stmt.limit(limit)
        with self._session_factory() as session:
            return [_product_from_row(row) for row in session.scalars(stmt)]

    def search(self, query: str) -> list[CatalogProduct]:
        term = query.strip().lower()
        if not term:
            return []
        like = f"%{_escape_like(term)}%"
        stmt = (
            select(ProductModel)
            .where(
                or_(
                    ProductModel.title.ilike(like, escape="\\"),
                    ProductModel.subtitle.ilike(like, escape="\\"),
                    ProductModel.description.ilike(like, escape="\\"),
                    ProductModel.tags.ilike(like, escape="\\"),
                )
            )
            .order_by(ProductModel.id.asc())
        )
        with self._session_factory() as session:
            return [_product_from_row(row) for row in session.scalars(stmt)]
