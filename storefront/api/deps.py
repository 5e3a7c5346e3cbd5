"""FastAPI dependencies handing out the services built by the app factory."""

from __future__ import annotations

from fastapi import Request

from storefront.adapters.catalog.base import AbstractCatalog
from storefront.adapters.profile.base import AbstractProfileStore
from storefront.services.order_service import OrderService


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def get_catalog(request: Request) -> AbstractCatalog:
    return request.app.state.catalog


def get_profile_store(request: Request) -> AbstractProfileStore:
    return request.app.state.profiles
