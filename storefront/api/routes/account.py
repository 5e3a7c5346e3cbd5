from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from storefront.adapters.profile.base import AbstractProfileStore
from storefront.api.deps import get_profile_store
from storefront.core.auth import require_user
from storefront.core.rate_limit import enforce_request_throttle
from storefront.schemas.account import Address, AddressResponse

router = APIRouter(
    prefix="/account",
    tags=["Account"],
    dependencies=[Depends(enforce_request_throttle)],
)

UserId = Annotated[int, Depends(require_user)]
Profiles = Annotated[AbstractProfileStore, Depends(get_profile_store)]


@router.get("/address", response_model=AddressResponse)
def get_address(user_id: UserId, profiles: Profiles) -> AddressResponse:
    """Return the caller's saved shipping address (null when unset)."""
    return AddressResponse(address=profiles.get_address(user_id))


@router.put("/address", response_model=AddressResponse)
def update_address(payload: Address, user_id: UserId, profiles: Profiles) -> AddressResponse:
    """Overwrite the caller's saved shipping address."""
    address = payload.to_dict()
    profiles.save_address(user_id, address)
    return AddressResponse(address=address)
