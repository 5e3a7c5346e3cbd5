from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class AbstractProfileStore(ABC):
    """Saved shipping address per user."""

    @abstractmethod
    def get_address(self, user_id: int) -> dict[str, Any] | None:
        """Return the saved address, or None when unset or unreadable."""
        raise NotImplementedError

    @abstractmethod
    def save_address(self, user_id: int, address: dict[str, Any]) -> None:
        """Overwrite the saved address."""
        raise NotImplementedError
