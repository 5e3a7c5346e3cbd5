from __future__ import annotations

from fastapi import APIRouter

from storefront.core.clock import utc_now
from storefront.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems to determine service health.

    Returns:
        dict: ``status`` ("ok"), the running environment and the server time.
    """

    return {"status": "ok", "env": settings.app_env, "now": utc_now().isoformat()}
