from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_order_service
from storefront.core.auth import require_user
from storefront.core.rate_limit import enforce_request_throttle
from storefront.schemas.orders import OrderResponse, PurchaseRequest, PurchaseResponse
from storefront.services.order_service import OrderService

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
    dependencies=[Depends(enforce_request_throttle)],
)

UserId = Annotated[int, Depends(require_user)]
Service = Annotated[OrderService, Depends(get_order_service)]


@router.post(
    "/purchase",
    response_model=PurchaseResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def purchase(payload: PurchaseRequest, user_id: UserId, service: Service) -> PurchaseResponse:
    """Buy one or more products.

    Each product is subject to the per-user purchase limit
    (``PURCHASE_RATE_LIMIT_PER_PRODUCT`` units per
    ``PURCHASE_RATE_LIMIT_WINDOW_SECONDS``). If any product would go over,
    the whole request is rejected with 429 and nothing is stored.

    Raises:
        InvalidRequestError / ProductNotFoundError: 400.
        RateLimitExceededError: 429 with limit, window and product details.
    """
    order = service.purchase(user_id, payload.to_command())
    return PurchaseResponse(order=OrderResponse.from_domain(order))


@router.get(
    "",
    response_model=list[OrderResponse],
    response_model_exclude_none=True,
)
def list_orders(user_id: UserId, service: Service) -> list[OrderResponse]:
    """List the caller's orders, newest first."""
    return [OrderResponse.from_domain(order) for order in service.list_orders(user_id)]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    response_model_exclude_none=True,
)
def get_order(order_id: int, user_id: UserId, service: Service) -> OrderResponse:
    """Fetch one of the caller's orders; 404 when missing or not theirs."""
    return OrderResponse.from_domain(service.get_order(user_id, order_id))
