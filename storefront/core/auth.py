"""API key authentication resolving callers to user ids.

Keys are configured as comma-separated ``key:user_id`` pairs in
``APP_API_KEYS``. The dependency returns the authenticated user id; routes
never see the raw key. When ``APP_API_KEY_REQUIRED=false`` every request acts
as ``APP_DEFAULT_USER_ID`` (local development only).
"""

from __future__ import annotations

import hashlib
import logging
from typing import Annotated

from fastapi import Header

from storefront.core.config import settings
from storefront.core.errors import AuthenticationAppError
from storefront.core.logging import set_user_id

logger = logging.getLogger(__name__)


def _key_hash(api_key: str) -> str:
    return hashlib.sha256(api_key.encode()).hexdigest()[:16]


def parse_api_keys(keys_string: str | None) -> dict[str, int]:
    """Parse ``key:user_id`` pairs into a lookup table.

    Pairs that are blank, lack a colon, or carry a non-positive or non-numeric
    user id are skipped.

    Examples:
        >>> parse_api_keys("alice-key:1, bob-key:2")
        {'alice-key': 1, 'bob-key': 2}
        >>> parse_api_keys("broken,also:bad")
        {}
        >>> parse_api_keys(None)
        {}
    """
    if not keys_string:
        return {}

    keys: dict[str, int] = {}
    for pair in keys_string.split(","):
        key, sep, raw_user_id = pair.strip().rpartition(":")
        key = key.strip()
        if not sep or not key:
            continue
        try:
            user_id = int(raw_user_id.strip())
        except ValueError:
            continue
        if user_id > 0:
            keys[key] = user_id
    return keys


def resolve_user_id(provided_key: str | None) -> int:
    """Map an API key to the user it belongs to.

    Pure lookup logic without FastAPI dependencies for easy testing.

    Raises:
        AuthenticationAppError: If the key is missing, unknown, or no keys are configured.
    """
    if not settings.app.api_key_required:
        return settings.app.default_user_id

    if not provided_key:
        logger.warning("auth.missing_key", extra={"auth_required": True})
        raise AuthenticationAppError(
            code="not_authenticated",
            message="Missing API key. Provide X-API-Key header.",
        )

    valid_keys = parse_api_keys(settings.app.api_keys)
    if not valid_keys:
        logger.error(
            "auth.failed",
            extra={"reason": "api_keys_not_configured"},
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="API key authentication is enabled but no valid keys are configured",
            details={"hint": "Set APP_API_KEYS or disable auth with APP_API_KEY_REQUIRED=false"},
        )

    user_id = valid_keys.get(provided_key)
    if user_id is None:
        logger.warning(
            "auth.failed",
            extra={"reason": "invalid_api_key", "api_key_hash": _key_hash(provided_key)},
        )
        raise AuthenticationAppError(
            code="not_authenticated",
            message="Invalid or missing API key",
        )
    return user_id


async def require_user(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> int:
    """FastAPI dependency returning the authenticated user id.

    Usage:
        @router.get("/orders")
        def list_orders(user_id: Annotated[int, Depends(require_user)]): ...

    Raises:
        AuthenticationAppError: Rendered as 401 by the exception handlers.
    """
    user_id = resolve_user_id(x_api_key)
    set_user_id(user_id)
    logger.debug("auth.success", extra={"user_id": user_id})
    return user_id


def configured_user_ids() -> set[int]:
    """User ids the database must know about at startup."""

    ids = set(parse_api_keys(settings.app.api_keys).values())
    if not settings.app.api_key_required:
        ids.add(settings.app.default_user_id)
    return ids
