"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from storefront.core.errors import (
    AppError,
    AuthenticationAppError,
    InvalidRequestError,
    OrderNotFoundError,
    PersistenceAppError,
    RateLimitExceededError,
    ValidationAppError,
)
from storefront.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client with handlers enabled."""
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def endpoint():
            raise InvalidRequestError.for_field("items", "items must be a non-empty array")

        response = client.get("/test-validation")

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_request"
        assert error["message"] == "items must be a non-empty array"
        assert error["details"]["field"] == "items"
        assert "request_id" in error

    def test_authentication_error_returns_401(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-auth")
        async def endpoint():
            raise AuthenticationAppError(code="not_authenticated", message="Invalid or missing API key")

        response = client.get("/test-auth")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "not_authenticated"

    def test_not_found_returns_404(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-missing")
        async def endpoint():
            raise OrderNotFoundError(code="order_not_found", message="Order not found")

        assert client.get("/test-missing").status_code == 404

    def test_rate_limit_returns_429_with_top_level_fields(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-limit")
        async def endpoint():
            raise RateLimitExceededError(
                code="purchase_rate_limited",
                message="Rate limit exceeded for product 'x'. Limit is 1 per 60 seconds.",
                limit=1,
                window_seconds=60,
                product_id=9,
                slug="x",
                requested_quantity=1,
                recently_purchased_quantity=1,
            )

        response = client.get("/test-limit")

        assert response.status_code == 429
        body = response.json()
        assert body["error"]["code"] == "purchase_rate_limited"
        assert body["limit"] == 1
        assert body["windowSeconds"] == 60
        assert body["product"]["id"] == "9"
        assert body["product"]["recentPurchasedQuantity"] == 1

    def test_persistence_error_is_generic_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-db")
        async def endpoint():
            raise PersistenceAppError(
                code="persistence_failure",
                message="UNIQUE constraint failed: orders.id",
            )

        response = client.get("/test-db")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"
        assert "UNIQUE" not in response.text

    def test_error_response_format_is_consistent(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-format")
        async def endpoint():
            raise ValidationAppError(code="test", message="test")

        data = client.get("/test-format").json()

        assert set(data["error"]) >= {"code", "message", "request_id"}
        assert "details" not in data["error"]


class TestRequestValidationHandler:
    def test_body_validation_returns_400_with_fields(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        class Payload(BaseModel):
            quantity: int = Field(..., ge=1)

        @app_with_handlers.post("/test-body")
        async def endpoint(payload: Payload):
            return {"ok": True}

        response = client.post("/test-body", json={"quantity": 0})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_request"
        assert error["details"]["errors"][0]["field"] == "quantity"


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_general_exception_handler_logic(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("Unexpected error: database connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "database connection" not in data["error"]["message"]
        assert "request_id" in data["error"]

    def test_unexpected_exception_in_route(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-boom")
        async def endpoint():
            raise ValueError("secret internals")

        response = client.get("/test-boom")

        assert response.status_code == 500
        assert "secret internals" not in response.text
        assert "Traceback" not in response.text


class TestErrorHandlerIntegration:
    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers
