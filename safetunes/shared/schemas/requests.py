"""
Request Schemas

Pydantic schemas for song/album requests and parent decisions.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

from .common import BaseSchema


# ═══════════════════════════════════════════════════════════════════════════════
# CREATE
# ═══════════════════════════════════════════════════════════════════════════════


class SongRequestCreate(BaseModel):
    """A kid asks for one song."""

    kid_profile_id: UUID
    apple_song_id: str = Field(min_length=1, max_length=64)
    song_name: str = Field(min_length=1)
    artist_name: str = Field(min_length=1)
    album_name: Optional[str] = None
    artwork_url: Optional[str] = None
    kid_note: Optional[str] = Field(None, max_length=500, description="Why the kid wants it")


class AlbumRequestCreate(BaseModel):
    """A kid asks for a whole album."""

    kid_profile_id: UUID
    apple_album_id: str = Field(min_length=1, max_length=64)
    album_name: str = Field(min_length=1)
    artist_name: str = Field(min_length=1)
    artwork_url: Optional[str] = None
    kid_note: Optional[str] = Field(None, max_length=500)


# ═══════════════════════════════════════════════════════════════════════════════
# DECISIONS
# ═══════════════════════════════════════════════════════════════════════════════


class ApprovalTrack(BaseModel):
    """One album track unlocked alongside an album approval."""

    apple_song_id: str = Field(min_length=1, max_length=64)
    song_name: str
    artist_name: str
    track_number: Optional[int] = None
    duration_ms: Optional[int] = None
    is_explicit: bool = False


class ApproveRequest(BaseModel):
    """
    Approve a request.

    ``tracks`` is only used for albums; each track is unlocked for the kid.
    """

    hide_artwork: Optional[bool] = None
    tracks: List[ApprovalTrack] = Field(default_factory=list)


class DenyRequest(BaseModel):
    denial_reason: Optional[str] = Field(None, max_length=1000)


class PartialApprovalRequest(BaseModel):
    partial_approval_note: Optional[str] = Field(None, max_length=1000)


# ═══════════════════════════════════════════════════════════════════════════════
# RESPONSES
# ═══════════════════════════════════════════════════════════════════════════════


class RequestResponseBase(BaseSchema):
    id: UUID
    kid_profile_id: UUID
    artist_name: str
    artwork_url: Optional[str] = None
    status: str
    requested_at: datetime
    reviewed_at: Optional[datetime] = None
    kid_note: Optional[str] = None
    denial_reason: Optional[str] = None
    partial_approval_note: Optional[str] = None
    viewed_by_kid: bool = False


class SongRequestResponse(RequestResponseBase):
    apple_song_id: Optional[str] = None
    song_name: str
    album_name: Optional[str] = None


class AlbumRequestResponse(RequestResponseBase):
    apple_album_id: Optional[str] = None
    album_name: str


RequestT = TypeVar("RequestT", SongRequestResponse, AlbumRequestResponse)


class ApprovalResponse(BaseModel, Generic[RequestT]):
    """Result of an approval: the request plus how many songs were newly unlocked."""

    request: RequestT
    songs_added: int = 0
