"""
Approval Service

The request lifecycle for song and album requests.

STATE MACHINE:
==============
                create            approve              undo_approval
    (none) ─────────► pending ─────────────► approved ───────────────► pending
                       │   ▲                    ▲
                  deny │   │ undo_denial        │ approve_denied
                       ▼   │                    │
                      denied ───────────────────┘

    pending ──mark_partially_approved──► partially_approved  (viewed_by_kid = False)

Every transition is a compare-and-set on the request's status: of two
concurrent decisions on the same request exactly one wins, the other gets an
InvalidTransitionError and no side effects are applied twice.

SIDE EFFECTS:
=============
- approve / approve_denied: unlock the song for the kid, or the album for the
  account plus every supplied track for the kid (insert-or-skip, idempotent)
- undo_approval: remove the song unlock, or the album unlock
- create: email batch item + web push + mobile push to the parent
- deny / approve / approve_denied / partial: push to the kid

Notifications are enqueued after the state change is flushed and never affect
the outcome.

Usage:
======
    service = ApprovalService(db, dispatcher)
    request, created = await service.create_request(RequestKind.SONG, owner_id, ...)
    result = await service.approve(RequestKind.SONG, request.id, owner_id)
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    KidProfileNotFoundError,
    MissingReferenceError,
    NotFoundError,
    RequestNotFoundError,
)
from safetunes.shared.core.logging import get_logger
from safetunes.shared.models.approved_content import AlbumTrack, ApprovedAlbum, ApprovedSong
from safetunes.shared.models.enums import RequestKind, RequestStatus
from safetunes.shared.models.kid_profile import KidProfile
from safetunes.shared.repositories.approved_content_repository import (
    AlbumTrackRepository,
    ApprovedAlbumRepository,
    ApprovedSongRepository,
)
from safetunes.shared.repositories.profile_repository import KidProfileRepository
from safetunes.shared.repositories.request_repository import (
    AlbumRequestRepository,
    AnyRequest,
    RequestRepository,
    SongRequestRepository,
)
from safetunes.shared.schemas.requests import ApprovalTrack
from safetunes.shared.services.notification_service import (
    InMemoryNotificationQueue,
    NotificationDispatcher,
)

logger = get_logger(__name__)


@dataclass
class ApprovalResult:
    """Approved request plus the number of songs newly unlocked for the kid."""

    request: AnyRequest
    songs_added: int = 0


class ApprovalService:
    """
    Service for request decisions and the approved library.

    Handles:
    - Idempotent request creation
    - Parent transitions (approve, deny, undo, approve denied, partial)
    - Approved library reads and artwork toggles
    """

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: Optional[NotificationDispatcher] = None,
    ) -> None:
        """
        Initialize ApprovalService.

        Args:
            session: Async database session
            dispatcher: Notification dispatcher (defaults to an in-memory queue)
        """
        self.session = session
        self.dispatcher = dispatcher or NotificationDispatcher(InMemoryNotificationQueue())
        self.song_requests = SongRequestRepository(session)
        self.album_requests = AlbumRequestRepository(session)
        self.kid_repo = KidProfileRepository(session)
        self.approved_songs = ApprovedSongRepository(session)
        self.approved_albums = ApprovedAlbumRepository(session)
        self.album_tracks = AlbumTrackRepository(session)

    def _requests(self, kind: RequestKind) -> RequestRepository:
        return self.song_requests if kind == RequestKind.SONG else self.album_requests

    # ═══════════════════════════════════════════════════════════════════════════
    # LOOKUPS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_kid_profile(self, kid_profile_id: UUID, owner_id: UUID) -> KidProfile:
        """
        Raises:
            KidProfileNotFoundError: Profile does not exist
            AuthorizationError: Profile belongs to another account
        """
        kid = await self.kid_repo.get(kid_profile_id)
        if kid is None:
            raise KidProfileNotFoundError(str(kid_profile_id))
        if kid.owner_id != owner_id:
            raise AuthorizationError("Kid profile belongs to another account")
        return kid

    async def get_request(self, kind: RequestKind, request_id: UUID, owner_id: UUID) -> AnyRequest:
        """Requests of other accounts are reported as missing."""
        request = await self._requests(kind).get(request_id, fresh=True)
        if request is None or request.owner_id != owner_id:
            raise RequestNotFoundError(kind.value, str(request_id))
        return request

    async def list_requests(
        self,
        kind: RequestKind,
        owner_id: UUID,
        status: Optional[RequestStatus] = None,
    ) -> List[AnyRequest]:
        return await self._requests(kind).list_for_owner(owner_id, status=status)

    async def list_kid_requests(
        self, kind: RequestKind, kid_profile_id: UUID, owner_id: UUID
    ) -> List[AnyRequest]:
        await self.get_kid_profile(kid_profile_id, owner_id)
        return await self._requests(kind).list_for_kid(kid_profile_id)

    # ═══════════════════════════════════════════════════════════════════════════
    # CREATE
    # ═══════════════════════════════════════════════════════════════════════════

    async def create_request(
        self,
        kind: RequestKind,
        owner_id: UUID,
        kid_profile_id: UUID,
        target_id: str,
        content_name: str,
        artist_name: str,
        album_name: Optional[str] = None,
        artwork_url: Optional[str] = None,
        kid_note: Optional[str] = None,
    ) -> Tuple[AnyRequest, bool]:
        """
        Submit a request, or return the kid's open request for the same target.

        Returns:
            Tuple of (request, created)
        """
        kid = await self.get_kid_profile(kid_profile_id, owner_id)

        values: dict[str, Any] = {
            "owner_id": owner_id,
            "kid_profile_id": kid_profile_id,
            "artist_name": artist_name,
            "artwork_url": artwork_url,
            "kid_note": (kid_note or "").strip() or None,
        }
        if kind == RequestKind.SONG:
            values.update(apple_song_id=target_id, song_name=content_name, album_name=album_name)
        else:
            values.update(apple_album_id=target_id, album_name=content_name)

        request, created = await self._requests(kind).create_pending(**values)
        if not created:
            logger.info(
                "Request already pending",
                kind=kind.value,
                request_id=str(request.id),
                kid_profile_id=str(kid_profile_id),
            )
            return request, False

        logger.info(
            "Request created",
            kind=kind.value,
            request_id=str(request.id),
            kid_profile_id=str(kid_profile_id),
            target_id=target_id,
        )
        await self.dispatcher.notify_parent_of_request(request, kid.name)
        return request, True

    # ═══════════════════════════════════════════════════════════════════════════
    # TRANSITIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def approve(
        self,
        kind: RequestKind,
        request_id: UUID,
        owner_id: UUID,
        tracks: Sequence[ApprovalTrack] = (),
        hide_artwork: Optional[bool] = None,
    ) -> ApprovalResult:
        """pending → approved, then unlock the content."""
        return await self._approve_from(
            RequestStatus.PENDING, kind, request_id, owner_id, tracks, hide_artwork
        )

    async def approve_denied(
        self,
        kind: RequestKind,
        request_id: UUID,
        owner_id: UUID,
        tracks: Sequence[ApprovalTrack] = (),
        hide_artwork: Optional[bool] = None,
    ) -> ApprovalResult:
        """denied → approved directly, clearing the denial reason."""
        return await self._approve_from(
            RequestStatus.DENIED, kind, request_id, owner_id, tracks, hide_artwork,
            denial_reason=None,
        )

    async def _approve_from(
        self,
        from_status: RequestStatus,
        kind: RequestKind,
        request_id: UUID,
        owner_id: UUID,
        tracks: Sequence[ApprovalTrack],
        hide_artwork: Optional[bool],
        **extra: Any,
    ) -> ApprovalResult:
        request = await self.get_request(kind, request_id, owner_id)
        self._expect_status(request, from_status)
        if not request.target_id:
            logger.error(
                "Approval blocked by missing catalog id",
                kind=kind.value,
                request_id=str(request_id),
                content=request.content_name,
            )
            raise MissingReferenceError(kind.value, request.content_name)

        request = await self._transition(
            kind,
            request,
            from_status,
            status=RequestStatus.APPROVED.value,
            reviewed_at=datetime.now(timezone.utc),
            **extra,
        )

        if kind == RequestKind.SONG:
            songs_added = await self._unlock_song(request, hide_artwork)
        else:
            songs_added = await self._unlock_album(request, tracks, hide_artwork)

        logger.info(
            "Request approved",
            kind=kind.value,
            request_id=str(request.id),
            previous=from_status.value,
            songs_added=songs_added,
        )
        await self.dispatcher.notify_kid_of_review(request)
        return ApprovalResult(request=request, songs_added=songs_added)

    async def deny(
        self,
        kind: RequestKind,
        request_id: UUID,
        owner_id: UUID,
        denial_reason: Optional[str] = None,
    ) -> AnyRequest:
        """pending → denied."""
        request = await self.get_request(kind, request_id, owner_id)
        request = await self._transition(
            kind,
            request,
            RequestStatus.PENDING,
            status=RequestStatus.DENIED.value,
            reviewed_at=datetime.now(timezone.utc),
            denial_reason=denial_reason,
        )
        logger.info("Request denied", kind=kind.value, request_id=str(request.id))
        await self.dispatcher.notify_kid_of_review(request)
        return request

    async def undo_approval(self, kind: RequestKind, request_id: UUID, owner_id: UUID) -> AnyRequest:
        """
        approved → pending, removing the unlock the approval created.

        Songs unlocked through an album's track list stay in the kid's library,
        both when an album request is undone (only the album unlock goes) and
        when a song request for one of those tracks is undone.
        """
        request = await self.get_request(kind, request_id, owner_id)
        await self._ensure_can_reopen(kind, request)
        request = await self._transition(
            kind,
            request,
            RequestStatus.APPROVED,
            status=RequestStatus.PENDING.value,
            reviewed_at=None,
        )

        if kind == RequestKind.SONG:
            removed = await self.approved_songs.remove(
                request.owner_id, request.kid_profile_id, request.apple_song_id
            )
        else:
            removed = await self.approved_albums.remove(request.owner_id, request.apple_album_id)

        logger.info(
            "Approval undone",
            kind=kind.value,
            request_id=str(request.id),
            rows_removed=removed,
        )
        return request

    async def undo_denial(self, kind: RequestKind, request_id: UUID, owner_id: UUID) -> AnyRequest:
        """denied → pending. Nothing was unlocked on deny, so nothing is removed."""
        request = await self.get_request(kind, request_id, owner_id)
        await self._ensure_can_reopen(kind, request)
        request = await self._transition(
            kind,
            request,
            RequestStatus.DENIED,
            status=RequestStatus.PENDING.value,
            reviewed_at=None,
            denial_reason=None,
        )
        logger.info("Denial undone", kind=kind.value, request_id=str(request.id))
        return request

    async def mark_partially_approved(
        self,
        kind: RequestKind,
        request_id: UUID,
        owner_id: UUID,
        note: Optional[str] = None,
    ) -> AnyRequest:
        """pending → partially_approved; the kid sees a "new decision" badge once."""
        request = await self.get_request(kind, request_id, owner_id)
        request = await self._transition(
            kind,
            request,
            RequestStatus.PENDING,
            status=RequestStatus.PARTIALLY_APPROVED.value,
            reviewed_at=datetime.now(timezone.utc),
            partial_approval_note=note,
            viewed_by_kid=False,
        )
        logger.info("Request partially approved", kind=kind.value, request_id=str(request.id))
        await self.dispatcher.notify_kid_of_review(request)
        return request

    async def mark_viewed(self, kind: RequestKind, request_id: UUID, owner_id: UUID) -> AnyRequest:
        """The kid has seen the decision."""
        request = await self.get_request(kind, request_id, owner_id)
        if not request.viewed_by_kid:
            request = await self._requests(kind).update(request.id, viewed_by_kid=True)
        return request

    @staticmethod
    def _expect_status(request: AnyRequest, expected: RequestStatus) -> None:
        if request.status != expected.value:
            raise InvalidTransitionError(
                request.kind.value, str(request.id), expected.value, request.status
            )

    async def _transition(
        self,
        kind: RequestKind,
        request: AnyRequest,
        from_status: RequestStatus,
        **values: Any,
    ) -> AnyRequest:
        """Compare-and-set the status; a lost race surfaces as InvalidTransitionError."""
        self._expect_status(request, from_status)

        try:
            updated = await self._requests(kind).transition(request.id, from_status, **values)
        except IntegrityError as e:
            # Reopening collided with a pending request created meanwhile
            raise ConflictError(
                f"Another pending request exists for this {kind.value}",
                details={"request_id": str(request.id)},
            ) from e

        if updated is None:
            current = await self._requests(kind).get(request.id, fresh=True)
            raise InvalidTransitionError(
                kind.value,
                str(request.id),
                from_status.value,
                current.status if current else None,
            )
        return updated

    async def _ensure_can_reopen(self, kind: RequestKind, request: AnyRequest) -> None:
        """A request can only go back to pending if the kid has no other open one."""
        if not request.target_id:
            return
        other = await self._requests(kind).get_pending_for_target(
            request.kid_profile_id, request.target_id
        )
        if other is not None and other.id != request.id:
            raise ConflictError(
                f"Another pending request exists for this {kind.value}",
                details={"request_id": str(request.id), "pending_request_id": str(other.id)},
            )

    # ═══════════════════════════════════════════════════════════════════════════
    # UNLOCKS
    # ═══════════════════════════════════════════════════════════════════════════

    async def _unlock_song(self, request: AnyRequest, hide_artwork: Optional[bool]) -> int:
        inserted = await self.approved_songs.add_if_absent(
            request.owner_id,
            request.kid_profile_id,
            request.apple_song_id,
            song_name=request.song_name,
            artist_name=request.artist_name,
            album_name=request.album_name,
            artwork_url=request.artwork_url,
            hide_artwork=bool(hide_artwork),
            approved_at=datetime.now(timezone.utc),
        )
        if not inserted and hide_artwork is not None:
            existing = await self.approved_songs.get_for(
                request.owner_id, request.kid_profile_id, request.apple_song_id
            )
            if existing:
                await self.approved_songs.update(existing.id, hide_artwork=hide_artwork)
        return 1 if inserted else 0

    async def _unlock_album(
        self,
        request: AnyRequest,
        tracks: Sequence[ApprovalTrack],
        hide_artwork: Optional[bool],
    ) -> int:
        now = datetime.now(timezone.utc)
        inserted = await self.approved_albums.add_if_absent(
            request.owner_id,
            request.apple_album_id,
            album_name=request.album_name,
            artist_name=request.artist_name,
            artwork_url=request.artwork_url,
            hide_artwork=bool(hide_artwork),
            approved_at=now,
        )
        if not inserted and hide_artwork is not None:
            existing = await self.approved_albums.get_for(request.owner_id, request.apple_album_id)
            if existing:
                await self.approved_albums.update(existing.id, hide_artwork=hide_artwork)

        if not tracks:
            return 0

        stored = await self.album_tracks.store_once(
            request.owner_id,
            request.apple_album_id,
            [track.model_dump() for track in tracks],
        )
        if stored:
            logger.debug("Stored album tracks", album_id=request.apple_album_id, tracks=stored)

        songs_added = 0
        for track in tracks:
            added = await self.approved_songs.add_if_absent(
                request.owner_id,
                request.kid_profile_id,
                track.apple_song_id,
                song_name=track.song_name,
                artist_name=track.artist_name,
                album_name=request.album_name,
                apple_album_id=request.apple_album_id,
                artwork_url=request.artwork_url,
                duration_ms=track.duration_ms,
                is_explicit=track.is_explicit,
                hide_artwork=bool(hide_artwork),
                approved_at=now,
            )
            if added:
                songs_added += 1
        return songs_added

    # ═══════════════════════════════════════════════════════════════════════════
    # LIBRARY
    # ═══════════════════════════════════════════════════════════════════════════

    async def approved_songs_for_kid(self, kid_profile_id: UUID, owner_id: UUID) -> List[ApprovedSong]:
        await self.get_kid_profile(kid_profile_id, owner_id)
        return await self.approved_songs.list_for_kid(kid_profile_id)

    async def approved_albums_for_owner(self, owner_id: UUID) -> List[ApprovedAlbum]:
        return await self.approved_albums.list_for_owner(owner_id)

    async def album_track_list(self, owner_id: UUID, apple_album_id: str) -> List[AlbumTrack]:
        return await self.album_tracks.list_for_album(owner_id, apple_album_id)

    async def set_song_artwork(self, song_id: UUID, owner_id: UUID, hide_artwork: bool) -> ApprovedSong:
        song = await self.approved_songs.get(song_id)
        if song is None or song.owner_id != owner_id:
            raise NotFoundError("Approved song", str(song_id))
        return await self.approved_songs.update(song.id, hide_artwork=hide_artwork)

    async def set_album_artwork(self, album_id: UUID, owner_id: UUID, hide_artwork: bool) -> ApprovedAlbum:
        album = await self.approved_albums.get(album_id)
        if album is None or album.owner_id != owner_id:
            raise NotFoundError("Approved album", str(album_id))
        return await self.approved_albums.update(album.id, hide_artwork=hide_artwork)
