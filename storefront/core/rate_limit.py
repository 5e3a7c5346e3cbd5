"""Request throttle dependency for FastAPI routes.

Wires the throttle adapter into the HTTP layer. Requests are counted per API
key, or per client IP when no key is sent. This is a flood guard only; the
per-product purchase limit lives in the order service.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Annotated

from fastapi import Header, HTTPException, Request, status

from storefront.adapters.throttle.base import AbstractRequestThrottle
from storefront.adapters.throttle.in_memory import InMemoryFixedWindowThrottle
from storefront.core.config import settings

logger = logging.getLogger(__name__)


_throttle: AbstractRequestThrottle | None = None
_throttle_config: tuple[int, int] | None = None


def get_request_throttle() -> AbstractRequestThrottle:
    """Return the process-wide throttle, rebuilding it when its settings change."""

    global _throttle, _throttle_config

    config = (settings.app.throttle_requests, settings.app.throttle_window_seconds)
    if _throttle is None or _throttle_config != config:
        _throttle = InMemoryFixedWindowThrottle(
            limit=settings.app.throttle_requests,
            window_seconds=settings.app.throttle_window_seconds,
        )
        _throttle_config = config
    return _throttle


def build_client_key(request: Request, x_api_key: str | None) -> str:
    if x_api_key:
        return f"api_key:{x_api_key}"
    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


async def enforce_request_throttle(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency counting one request against the caller's budget.

    Raises:
        HTTPException: 429 Too Many Requests when the budget is spent.
    """

    if not settings.app.throttle_enabled:
        return

    key = build_client_key(request, x_api_key)
    result = get_request_throttle().hit(key)
    if result.allowed:
        return

    logger.warning(
        "throttle.exceeded",
        extra={
            "key_type": "api_key" if x_api_key else "ip",
            "key_hash": hashlib.sha256(key.encode()).hexdigest()[:16],
            "limit": result.limit,
            "window_s": settings.app.throttle_window_seconds,
            "retry_after_s": result.retry_after_seconds,
        },
    )
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Too many requests. Try again later.",
        headers=result.headers() if settings.app.throttle_include_headers else None,
    )
