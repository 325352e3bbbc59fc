"""
Profile Handler

Kid profiles and device push tokens.
"""

from fastapi import APIRouter, Depends, status

from safetunes.api.dependencies import CurrentOwner
from safetunes.api.dependencies.services import get_profile_service
from safetunes.shared.schemas.common import ListResponse
from safetunes.shared.schemas.library import (
    KidProfileCreate,
    KidProfileResponse,
    PushTokenRegister,
    PushTokenResponse,
)
from safetunes.shared.services.profile_service import ProfileService


kids_router = APIRouter()
devices_router = APIRouter()


@kids_router.post("", response_model=KidProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_kid(
    body: KidProfileCreate,
    owner_id: CurrentOwner,
    service: ProfileService = Depends(get_profile_service),
):
    kid = await service.create_kid(owner_id, body.name)
    return KidProfileResponse.model_validate(kid)


@kids_router.get("", response_model=ListResponse[KidProfileResponse])
async def list_kids(
    owner_id: CurrentOwner,
    service: ProfileService = Depends(get_profile_service),
):
    kids = await service.list_kids(owner_id)
    data = [KidProfileResponse.model_validate(k) for k in kids]
    return ListResponse[KidProfileResponse](data=data, count=len(data))


@devices_router.post("", response_model=PushTokenResponse)
async def register_device(
    body: PushTokenRegister,
    owner_id: CurrentOwner,
    service: ProfileService = Depends(get_profile_service),
):
    """
    Register (or re-point) an Expo push token.

    Tokens registered with a kid_profile_id receive the kid's decision pushes;
    all others receive the parent's new-request pushes.
    """
    token = await service.register_device(
        owner_id, body.token, body.platform, body.kid_profile_id
    )
    return PushTokenResponse.model_validate(token)
