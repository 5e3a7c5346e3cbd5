"""Catalog interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable

from storefront.domain.models import CatalogProduct


@dataclass(frozen=True)
class ProductLookup:
    """Result of a batched lookup, indexed both ways."""

    by_slug: dict[str, CatalogProduct] = field(default_factory=dict)
    by_id: dict[int, CatalogProduct] = field(default_factory=dict)


class AbstractCatalog(ABC):
    """Read-only access to the product catalog."""

    @abstractmethod
    def find_many(self, *, slugs: Iterable[str] = (), ids: Iterable[int] = ()) -> ProductLookup:
        """Resolve many products in one query. Unknown references are simply absent."""
        raise NotImplementedError

    @abstractmethod
    def get_by_slug(self, slug: str) -> CatalogProduct:
        """Raises CatalogItemNotFoundError when the slug is unknown."""
        raise NotImplementedError

    @abstractmethod
    def list_products(self, *, limit: int | None = None) -> list[CatalogProduct]:
        raise NotImplementedError

    @abstractmethod
    def search(self, query: str) -> list[CatalogProduct]:
        raise NotImplementedError
