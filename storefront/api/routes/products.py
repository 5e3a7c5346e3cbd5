from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from storefront.adapters.catalog.base import AbstractCatalog
from storefront.api.deps import get_catalog
from storefront.core.rate_limit import enforce_request_throttle
from storefront.schemas.products import ProductResponse

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(enforce_request_throttle)],
)

Catalog = Annotated[AbstractCatalog, Depends(get_catalog)]


@router.get("", response_model=list[ProductResponse])
def list_products(
    catalog: Catalog,
    limit: Annotated[int | None, Query(description="Max products to return (0-100, 0 = all)")] = None,
) -> list[ProductResponse]:
    """List the catalog ordered by id."""
    clamped = max(0, min(100, limit)) if limit is not None else None
    return [ProductResponse.from_domain(p) for p in catalog.list_products(limit=clamped)]


@router.get("/search", response_model=list[ProductResponse])
def search_products(
    catalog: Catalog,
    q: Annotated[str, Query(description="Case-insensitive search text")] = "",
) -> list[ProductResponse]:
    """Search title, subtitle, description and tags. A blank query returns []."""
    return [ProductResponse.from_domain(p) for p in catalog.search(q)]


@router.get("/{slug}", response_model=ProductResponse)
def get_product(slug: str, catalog: Catalog) -> ProductResponse:
    return ProductResponse.from_domain(catalog.get_by_slug(slug))
