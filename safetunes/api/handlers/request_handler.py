"""
Request Handler

Song and album request endpoints. Both kinds expose the same lifecycle, so the
two routers are built from one definition.

    POST   /requests/{kind}s                        create (201 new, 200 already pending)
    GET    /requests/{kind}s?status=pending         parent's queue
    GET    /requests/{kind}s/kid/{kid_profile_id}   one kid's history
    POST   /requests/{kind}s/{id}/approve
    POST   /requests/{kind}s/{id}/deny
    POST   /requests/{kind}s/{id}/undo-approval
    POST   /requests/{kind}s/{id}/undo-denial
    POST   /requests/{kind}s/{id}/approve-denied
    POST   /requests/albums/{id}/partially-approve  albums only
    POST   /requests/{kind}s/{id}/viewed

Handlers should ONLY parse HTTP requests, call the service and format
responses. Business logic belongs in ApprovalService.
"""

from typing import Optional, Type, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from safetunes.api.dependencies import CurrentOwner
from safetunes.api.dependencies.services import get_approval_service
from safetunes.shared.models.enums import RequestKind, RequestStatus
from safetunes.shared.schemas.common import ListResponse
from safetunes.shared.schemas.requests import (
    AlbumRequestCreate,
    AlbumRequestResponse,
    ApprovalResponse,
    ApproveRequest,
    DenyRequest,
    PartialApprovalRequest,
    SongRequestCreate,
    SongRequestResponse,
)
from safetunes.shared.services.approval_service import ApprovalService


ResponseModel = Union[Type[SongRequestResponse], Type[AlbumRequestResponse]]


def _target_fields(kind: RequestKind, body: Union[SongRequestCreate, AlbumRequestCreate]) -> dict:
    if kind == RequestKind.SONG:
        return {
            "target_id": body.apple_song_id,
            "content_name": body.song_name,
            "album_name": body.album_name,
        }
    return {"target_id": body.apple_album_id, "content_name": body.album_name}


def build_router(kind: RequestKind, create_model: type, response_model: ResponseModel) -> APIRouter:
    """Build the request router for one request kind."""
    router = APIRouter()

    @router.post(
        "",
        response_model=response_model,
        status_code=status.HTTP_201_CREATED,
        responses={200: {"description": "Already pending; existing request returned"}},
    )
    async def create_request(
        body: create_model,  # type: ignore[valid-type]
        response: Response,
        owner_id: CurrentOwner,
        service: ApprovalService = Depends(get_approval_service),
    ):
        """Submit a request. Re-submitting an open request returns it unchanged."""
        request, created = await service.create_request(
            kind,
            owner_id=owner_id,
            kid_profile_id=body.kid_profile_id,
            artist_name=body.artist_name,
            artwork_url=body.artwork_url,
            kid_note=body.kid_note,
            **_target_fields(kind, body),
        )
        if not created:
            response.status_code = status.HTTP_200_OK
        return response_model.model_validate(request)

    @router.get("", response_model=ListResponse[response_model])
    async def list_requests(
        owner_id: CurrentOwner,
        status_filter: Optional[RequestStatus] = Query(None, alias="status"),
        service: ApprovalService = Depends(get_approval_service),
    ):
        requests = await service.list_requests(kind, owner_id, status=status_filter)
        data = [response_model.model_validate(r) for r in requests]
        return ListResponse[response_model](data=data, count=len(data))

    @router.get("/kid/{kid_profile_id}", response_model=ListResponse[response_model])
    async def list_kid_requests(
        kid_profile_id: UUID,
        owner_id: CurrentOwner,
        service: ApprovalService = Depends(get_approval_service),
    ):
        requests = await service.list_kid_requests(kind, kid_profile_id, owner_id)
        data = [response_model.model_validate(r) for r in requests]
        return ListResponse[response_model](data=data, count=len(data))

    @router.post("/{request_id}/approve", response_model=ApprovalResponse[response_model])
    async def approve(
        request_id: UUID,
        owner_id: CurrentOwner,
        body: Optional[ApproveRequest] = None,
        service: ApprovalService = Depends(get_approval_service),
    ):
        """
        Approve a pending request.

        Album approvals unlock every track in ``tracks`` for the kid.
        """
        body = body or ApproveRequest()
        result = await service.approve(
            kind, request_id, owner_id, tracks=body.tracks, hide_artwork=body.hide_artwork
        )
        return ApprovalResponse[response_model](
            request=response_model.model_validate(result.request),
            songs_added=result.songs_added,
        )

    @router.post("/{request_id}/deny", response_model=response_model)
    async def deny(
        request_id: UUID,
        owner_id: CurrentOwner,
        body: Optional[DenyRequest] = None,
        service: ApprovalService = Depends(get_approval_service),
    ):
        reason = body.denial_reason if body else None
        request = await service.deny(kind, request_id, owner_id, denial_reason=reason)
        return response_model.model_validate(request)

    @router.post("/{request_id}/undo-approval", response_model=response_model)
    async def undo_approval(
        request_id: UUID,
        owner_id: CurrentOwner,
        service: ApprovalService = Depends(get_approval_service),
    ):
        request = await service.undo_approval(kind, request_id, owner_id)
        return response_model.model_validate(request)

    @router.post("/{request_id}/undo-denial", response_model=response_model)
    async def undo_denial(
        request_id: UUID,
        owner_id: CurrentOwner,
        service: ApprovalService = Depends(get_approval_service),
    ):
        request = await service.undo_denial(kind, request_id, owner_id)
        return response_model.model_validate(request)

    @router.post("/{request_id}/approve-denied", response_model=ApprovalResponse[response_model])
    async def approve_denied(
        request_id: UUID,
        owner_id: CurrentOwner,
        body: Optional[ApproveRequest] = None,
        service: ApprovalService = Depends(get_approval_service),
    ):
        body = body or ApproveRequest()
        result = await service.approve_denied(
            kind, request_id, owner_id, tracks=body.tracks, hide_artwork=body.hide_artwork
        )
        return ApprovalResponse[response_model](
            request=response_model.model_validate(result.request),
            songs_added=result.songs_added,
        )

    if kind == RequestKind.ALBUM:

        @router.post("/{request_id}/partially-approve", response_model=response_model)
        async def partially_approve(
            request_id: UUID,
            owner_id: CurrentOwner,
            body: Optional[PartialApprovalRequest] = None,
            service: ApprovalService = Depends(get_approval_service),
        ):
            note = body.partial_approval_note if body else None
            request = await service.mark_partially_approved(kind, request_id, owner_id, note=note)
            return response_model.model_validate(request)

    @router.post("/{request_id}/viewed", response_model=response_model)
    async def mark_viewed(
        request_id: UUID,
        owner_id: CurrentOwner,
        service: ApprovalService = Depends(get_approval_service),
    ):
        request = await service.mark_viewed(kind, request_id, owner_id)
        return response_model.model_validate(request)

    return router


song_router = build_router(RequestKind.SONG, SongRequestCreate, SongRequestResponse)
album_router = build_router(RequestKind.ALBUM, AlbumRequestCreate, AlbumRequestResponse)
