"""SQLAlchemy-backed profile store over the ``users`` table."""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storefront.adapters.profile.base import AbstractProfileStore
from storefront.core.errors import PersistenceAppError
from storefront.db.models import UserModel

logger = logging.getLogger(__name__)


class SqlProfileStore(AbstractProfileStore):
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_address(self, user_id: int) -> dict[str, Any] | None:
        with self._session_factory() as session:
            user = session.get(UserModel, user_id)
            raw = user.address if user else None
        if not raw:
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("profile.address_unreadable", extra={"user_id": user_id})
            return None
        return value if isinstance(value, dict) else None

    def save_address(self, user_id: int, address: dict[str, Any]) -> None:
        try:
            with self._session_factory.begin() as session:
                user = session.get(UserModel, user_id)
                if user is None:
                    user = UserModel(id=user_id, name=f"user-{user_id}")
                    session.add(user)
                user.address = json.dumps(address)
        except SQLAlchemyError as exc:
            logger.error(
                "profile.save_failed",
                extra={"user_id": user_id, "error_type": type(exc).__name__},
            )
            raise PersistenceAppError(
                code="persistence_failure",
                message="Could not save the address",
            ) from exc
        logger.info("profile.address_saved", extra={"user_id": user_id})
