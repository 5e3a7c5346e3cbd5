"""Unit tests for the sliding-window purchase limit evaluator.

The ledger is mocked so each test states exactly what the user bought inside
the window; one test runs against the SQL ledger to pin the boundary.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from storefront.adapters.ledger.base import AbstractLedger
from storefront.domain.models import (
    NewOrder,
    OrderLineSnapshot,
    RateLimitConfig,
    RateLimitDecision,
)
from storefront.services.rate_limit_evaluator import RateLimitEvaluator

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_ledger() -> Mock:
    ledger = Mock(spec=AbstractLedger)
    ledger.sum_quantity_by_product.return_value = {}
    return ledger


def _evaluator(ledger, limit: int = 1, window: int = 60, clock=None) -> RateLimitEvaluator:
    return RateLimitEvaluator(
        ledger=ledger,
        config=RateLimitConfig(limit_per_product=limit, window_seconds=window),
        clock=clock or Mock(return_value=T0),
    )


class TestCheck:
    def test_allows_when_nothing_bought_recently(self, mock_ledger: Mock) -> None:
        decision = _evaluator(mock_ledger).check(1, {10: 1}, now=T0)

        assert decision.allowed is True
        assert decision.violation is None
        assert decision.limit == 1
        assert decision.window_seconds == 60

    def test_queries_ledger_once_with_window_start(self, mock_ledger: Mock) -> None:
        _evaluator(mock_ledger, limit=5).check(7, {10: 1, 11: 2, 12: 1}, now=T0)

        mock_ledger.sum_quantity_by_product.assert_called_once()
        user_id, product_ids, since = mock_ledger.sum_quantity_by_product.call_args.args
        assert user_id == 7
        assert set(product_ids) == {10, 11, 12}
        assert since == T0 - timedelta(seconds=60)

    def test_empty_request_is_allowed_without_query(self, mock_ledger: Mock) -> None:
        decision = _evaluator(mock_ledger).check(1, {}, now=T0)

        assert decision.allowed is True
        mock_ledger.sum_quantity_by_product.assert_not_called()

    def test_denies_when_prior_plus_requested_exceeds_limit(self, mock_ledger: Mock) -> None:
        mock_ledger.sum_quantity_by_product.return_value = {10: 1}

        decision = _evaluator(mock_ledger).check(1, {10: 1}, now=T0, slugs={10: "kernels"})

        assert decision.allowed is False
        assert decision.violation.product_id == 10
        assert decision.violation.slug == "kernels"
        assert decision.violation.requested_quantity == 1
        assert decision.violation.recently_purchased_quantity == 1

    def test_request_alone_over_limit_is_denied(self, mock_ledger: Mock) -> None:
        decision = _evaluator(mock_ledger, limit=2).check(1, {10: 3}, now=T0)

        assert decision.allowed is False
        assert decision.violation.recently_purchased_quantity == 0

    def test_exactly_at_limit_is_allowed(self, mock_ledger: Mock) -> None:
        mock_ledger.sum_quantity_by_product.return_value = {10: 2}

        decision = _evaluator(mock_ledger, limit=3).check(1, {10: 1}, now=T0)

        assert decision.allowed is True

    def test_reports_first_violating_product_in_request_order(self, mock_ledger: Mock) -> None:
        mock_ledger.sum_quantity_by_product.return_value = {11: 1, 12: 1}

        decision = _evaluator(mock_ledger).check(1, {10: 1, 11: 1, 12: 1}, now=T0)

        assert decision.violation.product_id == 11

    def test_uses_injected_clock_when_now_omitted(self, mock_ledger: Mock) -> None:
        clock = Mock(return_value=T0 + timedelta(seconds=5))

        _evaluator(mock_ledger, clock=clock).check(1, {10: 1})

        clock.assert_called_once()
        since = mock_ledger.sum_quantity_by_product.call_args.args[2]
        assert since == T0 + timedelta(seconds=5) - timedelta(seconds=60)


class TestDecision:
    def test_denied_decision_requires_violation(self) -> None:
        with pytest.raises(ValueError):
            RateLimitDecision(allowed=False, limit=1, window_seconds=60)

    def test_allowed_decision_needs_no_violation(self) -> None:
        assert RateLimitDecision(allowed=True, limit=1, window_seconds=60).violation is None


class TestSlidingWindowAgainstLedger:
    """limit=1, window=60s; one unit of product 1 bought at T0."""

    @pytest.fixture
    def evaluator(self, ledger) -> RateLimitEvaluator:
        ledger.record_order(
            NewOrder(user_id=1, total_cents=599, created_at=T0),
            [
                OrderLineSnapshot(
                    product_id=1,
                    slug="farm-fresh-yellow-kernels",
                    title="Farm-fresh Yellow Kernels",
                    unit_price_cents=599,
                    quantity=1,
                )
            ],
        )
        return _evaluator(ledger)

    @pytest.mark.parametrize(
        "elapsed, allowed",
        [
            (0, False),
            (30, False),
            (60, False),
            (61, True),
        ],
    )
    def test_window_boundary_is_inclusive(self, evaluator, elapsed: int, allowed: bool) -> None:
        decision = evaluator.check(1, {1: 1}, now=T0 + timedelta(seconds=elapsed))

        assert decision.allowed is allowed

    def test_other_users_are_not_counted(self, evaluator) -> None:
        assert evaluator.check(2, {1: 1}, now=T0).allowed is True

    def test_other_products_are_not_counted(self, evaluator) -> None:
        assert evaluator.check(1, {2: 1}, now=T0).allowed is True
