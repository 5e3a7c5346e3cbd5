"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and the
service graph) so tests can build isolated apps against their own database.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from storefront.adapters.catalog.sql import SqlCatalog
from storefront.adapters.ledger.sql import SqlLedger
from storefront.adapters.profile.sql import SqlProfileStore
from storefront.api.routes import account_router, health_router, orders_router, products_router
from storefront.core.auth import configured_user_ids
from storefront.core.clock import Clock, utc_now
from storefront.core.config import settings
from storefront.core.exception_handlers import setup_exception_handlers
from storefront.core.logging import configure_logging
from storefront.core.middleware import request_id_middleware
from storefront.core.openapi import apply_openapi_customizations
from storefront.db.session import build_engine, build_session_factory, init_db
from storefront.domain.models import RateLimitConfig
from storefront.services.order_service import OrderService
from storefront.services.rate_limit_evaluator import RateLimitEvaluator
from storefront.services.user_locks import UserLockRegistry

logger = logging.getLogger(__name__)


def create_app(
    *,
    database_url: str | None = None,
    rate_limit: RateLimitConfig | None = None,
    clock: Clock = utc_now,
    seed_products: bool | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        database_url: Override for ``DB_URL``.
        rate_limit: Override for the purchase limit read from settings.
        clock: Time source shared by the evaluator and the order service.
        seed_products: Override for ``SKIP_INITIAL_PRODUCT_SEED``.

    Returns:
        Configured FastAPI app; tables are created on startup.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    engine = build_engine(database_url or settings.database.url, echo=settings.database.echo)
    session_factory = build_session_factory(engine)
    limit_config = rate_limit or settings.purchase_limit.to_config()
    seed = (
        seed_products
        if seed_products is not None
        else not settings.database.skip_initial_product_seed
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine, session_factory, seed=seed, user_ids=configured_user_ids())
        logger.info(
            "app.started",
            extra={
                "env": settings.app_env,
                "purchase_limit": limit_config.limit_per_product,
                "purchase_window_s": limit_config.window_seconds,
            },
        )
        yield
        engine.dispose()

    app = FastAPI(
        title="Storefront API",
        description=(
            "Storefront backend: product catalog, saved shipping addresses and "
            "purchases with a per-user, per-product sliding-window purchase limit."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    ledger = SqlLedger(session_factory)
    catalog = SqlCatalog(session_factory)
    profiles = SqlProfileStore(session_factory)
    evaluator = RateLimitEvaluator(ledger=ledger, config=limit_config, clock=clock)

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.catalog = catalog
    app.state.profiles = profiles
    app.state.order_service = OrderService(
        catalog=catalog,
        ledger=ledger,
        profiles=profiles,
        evaluator=evaluator,
        locks=UserLockRegistry(),
        clock=clock,
    )

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(orders_router, prefix="/v1")
    app.include_router(products_router, prefix="/v1")
    app.include_router(account_router, prefix="/v1")
    app.include_router(health_router)

    # OpenAPI customizations (security scheme, tags, exemptions)
    apply_openapi_customizations(app)

    return app
