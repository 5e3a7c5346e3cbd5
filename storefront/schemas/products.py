"""Pydantic schemas for catalog responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from storefront.domain.models import CatalogProduct
from storefront.domain.money import cents_to_amount


class ProductResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    slug: str
    title: str
    subtitle: str | None = None
    price: float = Field(..., description="Current unit price, 2 decimal places.")
    rating: float = 0.0
    rating_count: int = Field(0, alias="ratingCount")
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    badges: list[str] = Field(default_factory=list)
    description: str = ""

    @classmethod
    def from_domain(cls, product: CatalogProduct) -> "ProductResponse":
        return cls(
            id=str(product.id),
            slug=product.slug,
            title=product.title,
            subtitle=product.subtitle,
            price=cents_to_amount(product.unit_price_cents),
            rating=product.rating,
            rating_count=product.rating_count,
            tags=list(product.tags),
            images=list(product.images),
            badges=list(product.badges),
            description=product.description,
        )
