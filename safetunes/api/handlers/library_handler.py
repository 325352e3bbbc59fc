"""
Library Handler

The approved library: what a kid can play and which albums the account has
unlocked.
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from safetunes.api.dependencies import CurrentOwner
from safetunes.api.dependencies.services import get_approval_service
from safetunes.shared.schemas.common import ListResponse
from safetunes.shared.schemas.library import (
    AlbumTrackResponse,
    ApprovedAlbumResponse,
    ApprovedSongResponse,
    ArtworkToggleRequest,
)
from safetunes.shared.services.approval_service import ApprovalService


router = APIRouter()


@router.get("/kids/{kid_profile_id}/songs", response_model=ListResponse[ApprovedSongResponse])
async def list_approved_songs(
    kid_profile_id: UUID,
    owner_id: CurrentOwner,
    service: ApprovalService = Depends(get_approval_service),
):
    songs = await service.approved_songs_for_kid(kid_profile_id, owner_id)
    data = [ApprovedSongResponse.model_validate(s) for s in songs]
    return ListResponse[ApprovedSongResponse](data=data, count=len(data))


@router.get("/albums", response_model=ListResponse[ApprovedAlbumResponse])
async def list_approved_albums(
    owner_id: CurrentOwner,
    service: ApprovalService = Depends(get_approval_service),
):
    albums = await service.approved_albums_for_owner(owner_id)
    data = [ApprovedAlbumResponse.model_validate(a) for a in albums]
    return ListResponse[ApprovedAlbumResponse](data=data, count=len(data))


@router.get("/albums/{apple_album_id}/tracks", response_model=ListResponse[AlbumTrackResponse])
async def list_album_tracks(
    apple_album_id: str,
    owner_id: CurrentOwner,
    service: ApprovalService = Depends(get_approval_service),
):
    """Stored track list of an approved album, in track order."""
    tracks = await service.album_track_list(owner_id, apple_album_id)
    data = [AlbumTrackResponse.model_validate(t) for t in tracks]
    return ListResponse[AlbumTrackResponse](data=data, count=len(data))


@router.patch("/songs/{song_id}/artwork", response_model=ApprovedSongResponse)
async def set_song_artwork(
    song_id: UUID,
    body: ArtworkToggleRequest,
    owner_id: CurrentOwner,
    service: ApprovalService = Depends(get_approval_service),
):
    song = await service.set_song_artwork(song_id, owner_id, body.hide_artwork)
    return ApprovedSongResponse.model_validate(song)


@router.patch("/albums/{album_id}/artwork", response_model=ApprovedAlbumResponse)
async def set_album_artwork(
    album_id: UUID,
    body: ArtworkToggleRequest,
    owner_id: CurrentOwner,
    service: ApprovalService = Depends(get_approval_service),
):
    album = await service.set_album_artwork(album_id, owner_id, body.hide_artwork)
    return ApprovedAlbumResponse.model_validate(album)
