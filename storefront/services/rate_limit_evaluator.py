"""Sliding-window purchase limit.

A user may buy at most ``limit_per_product`` units of any one product within
the trailing ``window_seconds``. Prior purchases come from the ledger, so the
window slides continuously instead of resetting on fixed boundaries.

The window start is inclusive: an order exactly ``window_seconds`` old still
counts against the user.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Mapping

from storefront.adapters.ledger.base import AbstractLedger
from storefront.core.clock import Clock, utc_now
from storefront.domain.models import RateLimitConfig, RateLimitDecision, RateLimitViolation

logger = logging.getLogger(__name__)


class RateLimitEvaluator:
    """Decide whether a set of requested quantities fits within the purchase limit."""

    def __init__(
        self,
        *,
        ledger: AbstractLedger,
        config: RateLimitConfig,
        clock: Clock = utc_now,
    ) -> None:
        self._ledger = ledger
        self._config = config
        self._clock = clock

    def window_start(self, now: datetime) -> datetime:
        return now - timedelta(seconds=self._config.window_seconds)

    def check(
        self,
        user_id: int,
        requested: Mapping[int, int],
        *,
        now: datetime | None = None,
        slugs: Mapping[int, str] | None = None,
    ) -> RateLimitDecision:
        """Evaluate requested quantities against what the user bought recently.

        Args:
            user_id: Buyer.
            requested: Product id to total requested quantity (already aggregated).
            now: Evaluation instant; defaults to the injected clock.
            slugs: Optional product id to slug map used for reporting.

        Returns:
            RateLimitDecision; ``violation`` names the first product over the limit.
        """
        limit = self._config.limit_per_product
        window = self._config.window_seconds

        if not requested:
            return RateLimitDecision(allowed=True, limit=limit, window_seconds=window)

        now = now or self._clock()
        purchased = self._ledger.sum_quantity_by_product(
            user_id, requested.keys(), self.window_start(now)
        )

        for product_id, quantity in requested.items():
            prior = purchased.get(product_id, 0)
            if prior + quantity <= limit:
                continue

            slug = (slugs or {}).get(product_id)
            logger.warning(
                "purchase_limit.exceeded",
                extra={
                    "user_id": user_id,
                    "product_id": product_id,
                    "product_slug": slug,
                    "requested_quantity": quantity,
                    "recent_quantity": prior,
                    "limit": limit,
                    "window_s": window,
                },
            )
            return RateLimitDecision(
                allowed=False,
                limit=limit,
                window_seconds=window,
                violation=RateLimitViolation(
                    product_id=product_id,
                    slug=slug,
                    requested_quantity=quantity,
                    recently_purchased_quantity=prior,
                ),
            )

        logger.info(
            "purchase_limit.allowed",
            extra={
                "user_id": user_id,
                "product_count": len(requested),
                "limit": limit,
                "window_s": window,
            },
        )
        return RateLimitDecision(allowed=True, limit=limit, window_seconds=window)
