"""
Library Schemas

Approved content, kid profiles and device registration.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.enums import PushPlatform
from .common import BaseSchema


class ApprovedSongResponse(BaseSchema):
    id: UUID
    kid_profile_id: UUID
    apple_song_id: str
    apple_album_id: Optional[str] = None
    song_name: str
    artist_name: str
    album_name: Optional[str] = None
    artwork_url: Optional[str] = None
    duration_ms: Optional[int] = None
    is_explicit: bool = False
    hide_artwork: bool = False
    approved_at: datetime


class ApprovedAlbumResponse(BaseSchema):
    id: UUID
    apple_album_id: str
    album_name: str
    artist_name: str
    artwork_url: Optional[str] = None
    hide_artwork: bool = False
    approved_at: datetime


class AlbumTrackResponse(BaseSchema):
    apple_song_id: str
    song_name: str
    artist_name: str
    track_number: Optional[int] = None
    duration_ms: Optional[int] = None
    is_explicit: bool = False


class ArtworkToggleRequest(BaseModel):
    hide_artwork: bool


# ═══════════════════════════════════════════════════════════════════════════════
# PROFILES & DEVICES
# ═══════════════════════════════════════════════════════════════════════════════


class KidProfileCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class KidProfileResponse(BaseSchema):
    id: UUID
    name: str
    created_at: datetime


class PushTokenRegister(BaseModel):
    """
    Register an Expo push token.

    Set ``kid_profile_id`` when the device belongs to a kid.
    """

    token: str = Field(min_length=1, max_length=255)
    platform: PushPlatform
    kid_profile_id: Optional[UUID] = None


class PushTokenResponse(BaseSchema):
    id: UUID
    platform: str
    kid_profile_id: Optional[UUID] = None
