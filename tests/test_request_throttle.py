"""Tests for the coarse per-client request throttle."""

from unittest.mock import Mock, patch

import pytest

from storefront.adapters.throttle.in_memory import InMemoryFixedWindowThrottle
from storefront.core import rate_limit


def test_allows_up_to_limit_in_same_window() -> None:
    clock = Mock(return_value=1000.0)
    throttle = InMemoryFixedWindowThrottle(limit=3, window_seconds=60, clock=clock)

    assert throttle.hit("k").allowed is True
    assert throttle.hit("k").allowed is True
    result = throttle.hit("k")
    assert result.allowed is True
    assert result.remaining == 0


def test_blocks_when_over_limit() -> None:
    clock = Mock(return_value=1000.0)
    throttle = InMemoryFixedWindowThrottle(limit=2, window_seconds=60, clock=clock)
    throttle.hit("k")
    throttle.hit("k")

    blocked = throttle.hit("k")

    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds == 20
    assert blocked.headers()["Retry-After"] == "20"


def test_resets_on_new_window() -> None:
    clock = Mock(return_value=1000.0)
    throttle = InMemoryFixedWindowThrottle(limit=1, window_seconds=10, clock=clock)

    assert throttle.hit("k").allowed is True
    assert throttle.hit("k").allowed is False

    clock.return_value = 1010.0
    assert throttle.hit("k").allowed is True


def test_isolated_by_key() -> None:
    throttle = InMemoryFixedWindowThrottle(limit=1, window_seconds=60, clock=Mock(return_value=0.0))

    assert throttle.hit("k1").allowed is True
    assert throttle.hit("k1").allowed is False
    assert throttle.hit("k2").allowed is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryFixedWindowThrottle(**kwargs)


def test_empty_key_rejected() -> None:
    with pytest.raises(ValueError):
        InMemoryFixedWindowThrottle(limit=1, window_seconds=60).hit("")


def test_endpoint_returns_429_with_headers_when_budget_spent(client, monkeypatch) -> None:
    monkeypatch.setattr(rate_limit, "_throttle", None)
    with patch.object(rate_limit, "settings") as mock_settings:
        mock_settings.app.throttle_enabled = True
        mock_settings.app.throttle_requests = 2
        mock_settings.app.throttle_window_seconds = 900
        mock_settings.app.throttle_include_headers = True

        statuses = [client.get("/v1/products").status_code for _ in range(3)]
        blocked = client.get("/v1/products")

    assert statuses == [200, 200, 429]
    assert blocked.status_code == 429
    assert blocked.headers["X-RateLimit-Limit"] == "2"
    assert "Retry-After" in blocked.headers
    assert client.get("/health").status_code == 200
