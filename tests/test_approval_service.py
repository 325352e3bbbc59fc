"""Tests for the request lifecycle and the approved library."""

import uuid

import pytest

from safetunes.shared.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    KidProfileNotFoundError,
    MissingReferenceError,
    NotFoundError,
    RequestNotFoundError,
)
from safetunes.shared.models import KidProfile, SongRequest
from safetunes.shared.models.enums import NotificationKind, RequestKind, RequestStatus
from safetunes.shared.schemas.requests import ApprovalTrack
from safetunes.shared.services.approval_service import ApprovalService


SONG = RequestKind.SONG
ALBUM = RequestKind.ALBUM

ABBEY_ROAD_TRACKS = [
    ApprovalTrack(
        apple_song_id="901",
        song_name="Come Together",
        artist_name="The Beatles",
        track_number=1,
        duration_ms=259000,
    ),
    ApprovalTrack(
        apple_song_id="902",
        song_name="Something",
        artist_name="The Beatles",
        track_number=2,
        duration_ms=182000,
    ),
]


@pytest.fixture
def service(session, dispatcher) -> ApprovalService:
    return ApprovalService(session, dispatcher)


async def request_song(service, owner_id, kid, song_id="111", name="Let It Be"):
    request, _ = await service.create_request(
        SONG,
        owner_id=owner_id,
        kid_profile_id=kid.id,
        target_id=song_id,
        content_name=name,
        artist_name="The Beatles",
        album_name="Let It Be",
    )
    return request


async def request_album(service, owner_id, kid, album_id="900"):
    request, _ = await service.create_request(
        ALBUM,
        owner_id=owner_id,
        kid_profile_id=kid.id,
        target_id=album_id,
        content_name="Abbey Road",
        artist_name="The Beatles",
    )
    return request


class TestCreateRequest:
    async def test_creates_pending_and_notifies_parent(self, service, owner_id, kid, queue):
        request, created = await service.create_request(
            SONG,
            owner_id=owner_id,
            kid_profile_id=kid.id,
            target_id="111",
            content_name="Let It Be",
            artist_name="The Beatles",
            kid_note="  for the road trip ",
        )

        assert created is True
        assert request.status == RequestStatus.PENDING.value
        assert request.apple_song_id == "111"
        assert request.kid_note == "for the road trip"
        assert request.reviewed_at is None

        kinds = [m.kind for m in queue.messages]
        assert kinds == [
            NotificationKind.EMAIL_BATCH,
            NotificationKind.PARENT_PUSH,
            NotificationKind.PARENT_MOBILE_PUSH,
        ]
        assert queue.messages[0].payload["kid_name"] == "Emma"
        assert queue.messages[1].title == "Emma requested a song"

    async def test_duplicate_pending_returns_existing(self, service, owner_id, kid, queue):
        first = await request_song(service, owner_id, kid)
        second, created = await service.create_request(
            SONG,
            owner_id=owner_id,
            kid_profile_id=kid.id,
            target_id="111",
            content_name="Let It Be",
            artist_name="The Beatles",
        )

        assert created is False
        assert second.id == first.id
        assert len(queue.messages) == 3

    async def test_concurrent_create_returns_winner(
        self, session, service, owner_id, kid, queue, monkeypatch
    ):
        repo = service.song_requests
        lookup = repo.get_pending_for_target
        winner = SongRequest(
            owner_id=owner_id,
            kid_profile_id=kid.id,
            apple_song_id="111",
            song_name="Let It Be",
            artist_name="The Beatles",
            status=RequestStatus.PENDING.value,
        )
        calls = []

        async def lookup_then_lose(kid_profile_id, target_id):
            calls.append(target_id)
            if len(calls) == 1:
                # Another transaction commits its insert right after our check
                session.add(winner)
                await session.flush()
                return None
            return await lookup(kid_profile_id, target_id)

        monkeypatch.setattr(repo, "get_pending_for_target", lookup_then_lose)

        request, created = await service.create_request(
            SONG,
            owner_id=owner_id,
            kid_profile_id=kid.id,
            target_id="111",
            content_name="Let It Be",
            artist_name="The Beatles",
        )

        assert created is False
        assert request.id == winner.id
        assert len(calls) == 2
        assert len(await repo.list_for_kid(kid.id)) == 1
        assert queue.messages == []

    async def test_can_ask_again_after_denial(self, service, owner_id, kid):
        first = await request_song(service, owner_id, kid)
        await service.deny(SONG, first.id, owner_id)

        second, created = await service.create_request(
            SONG,
            owner_id=owner_id,
            kid_profile_id=kid.id,
            target_id="111",
            content_name="Let It Be",
            artist_name="The Beatles",
        )
        assert created is True
        assert second.id != first.id

    async def test_unknown_kid(self, service, owner_id):
        with pytest.raises(KidProfileNotFoundError):
            await service.create_request(
                SONG,
                owner_id=owner_id,
                kid_profile_id=uuid.uuid4(),
                target_id="111",
                content_name="Let It Be",
                artist_name="The Beatles",
            )

    async def test_kid_of_another_account(self, service, kid):
        with pytest.raises(AuthorizationError):
            await service.create_request(
                SONG,
                owner_id=uuid.uuid4(),
                kid_profile_id=kid.id,
                target_id="111",
                content_name="Let It Be",
                artist_name="The Beatles",
            )


class TestSongTransitions:
    async def test_approve_unlocks_song_and_notifies_kid(self, service, owner_id, kid, queue):
        request = await request_song(service, owner_id, kid)
        queue.drain()

        result = await service.approve(SONG, request.id, owner_id)

        assert result.request.status == RequestStatus.APPROVED.value
        assert result.request.reviewed_at is not None
        assert result.songs_added == 1

        songs = await service.approved_songs_for_kid(kid.id, owner_id)
        assert [s.apple_song_id for s in songs] == ["111"]
        assert songs[0].song_name == "Let It Be"
        assert songs[0].hide_artwork is False

        [message] = queue.drain()
        assert message.kind == NotificationKind.KID_PUSH
        assert message.kid_profile_id == kid.id
        assert message.title == "Request approved!"

    async def test_second_approve_is_rejected(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)
        await service.approve(SONG, request.id, owner_id)

        with pytest.raises(InvalidTransitionError) as exc_info:
            await service.approve(SONG, request.id, owner_id)

        assert exc_info.value.details["actual"] == RequestStatus.APPROVED.value
        assert len(await service.approved_songs_for_kid(kid.id, owner_id)) == 1

    async def test_deny(self, service, owner_id, kid, queue):
        request = await request_song(service, owner_id, kid)
        queue.drain()

        denied = await service.deny(SONG, request.id, owner_id, denial_reason="Explicit lyrics")

        assert denied.status == RequestStatus.DENIED.value
        assert denied.denial_reason == "Explicit lyrics"
        assert denied.reviewed_at is not None
        assert await service.approved_songs_for_kid(kid.id, owner_id) == []
        [message] = queue.drain()
        assert message.payload["type"] == "request_denied"

    async def test_deny_twice_is_rejected(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)
        await service.deny(SONG, request.id, owner_id)

        with pytest.raises(InvalidTransitionError):
            await service.deny(SONG, request.id, owner_id)

    async def test_approve_denied(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)
        await service.deny(SONG, request.id, owner_id, denial_reason="Not now")

        result = await service.approve_denied(SONG, request.id, owner_id)

        assert result.request.status == RequestStatus.APPROVED.value
        assert result.request.denial_reason is None
        assert result.songs_added == 1

    async def test_approve_denied_requires_denied(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)

        with pytest.raises(InvalidTransitionError):
            await service.approve_denied(SONG, request.id, owner_id)

    async def test_undo_approval_removes_unlock(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)
        await service.approve(SONG, request.id, owner_id)

        reopened = await service.undo_approval(SONG, request.id, owner_id)

        assert reopened.status == RequestStatus.PENDING.value
        assert reopened.reviewed_at is None
        assert await service.approved_songs_for_kid(kid.id, owner_id) == []

    async def test_undo_approval_keeps_other_kids_songs(self, session, service, owner_id, kid):
        sibling = KidProfile(owner_id=owner_id, name="Liam")
        session.add(sibling)
        await session.flush()

        mine = await request_song(service, owner_id, kid)
        theirs = await request_song(service, owner_id, sibling)
        await service.approve(SONG, mine.id, owner_id)
        await service.approve(SONG, theirs.id, owner_id)

        await service.undo_approval(SONG, mine.id, owner_id)

        assert await service.approved_songs_for_kid(kid.id, owner_id) == []
        assert len(await service.approved_songs_for_kid(sibling.id, owner_id)) == 1

    async def test_undo_approval_blocked_by_newer_pending(self, service, owner_id, kid):
        first = await request_song(service, owner_id, kid)
        await service.approve(SONG, first.id, owner_id)
        second = await request_song(service, owner_id, kid)
        assert second.id != first.id

        with pytest.raises(ConflictError):
            await service.undo_approval(SONG, first.id, owner_id)

        current = await service.get_request(SONG, first.id, owner_id)
        assert current.status == RequestStatus.APPROVED.value

    async def test_undo_denial(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)
        await service.deny(SONG, request.id, owner_id, denial_reason="Not now")

        reopened = await service.undo_denial(SONG, request.id, owner_id)

        assert reopened.status == RequestStatus.PENDING.value
        assert reopened.denial_reason is None
        assert reopened.reviewed_at is None

    async def test_undo_denial_requires_denied(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)

        with pytest.raises(InvalidTransitionError):
            await service.undo_denial(SONG, request.id, owner_id)

    async def test_missing_catalog_id(self, session, service, owner_id, kid):
        legacy = SongRequest(
            owner_id=owner_id,
            kid_profile_id=kid.id,
            apple_song_id=None,
            song_name="Old Favourite",
            artist_name="Somebody",
        )
        session.add(legacy)
        await session.flush()

        with pytest.raises(MissingReferenceError):
            await service.approve(SONG, legacy.id, owner_id)

        current = await service.get_request(SONG, legacy.id, owner_id)
        assert current.status == RequestStatus.PENDING.value

    async def test_hide_artwork_on_reapproval_updates_existing(self, service, owner_id, kid):
        first = await request_song(service, owner_id, kid)
        await service.approve(SONG, first.id, owner_id)
        second = await request_song(service, owner_id, kid)

        result = await service.approve(SONG, second.id, owner_id, hide_artwork=True)

        assert result.songs_added == 0
        [song] = await service.approved_songs_for_kid(kid.id, owner_id)
        assert song.hide_artwork is True

    async def test_other_account_sees_not_found(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)

        with pytest.raises(RequestNotFoundError):
            await service.approve(SONG, request.id, uuid.uuid4())

    async def test_mark_viewed(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)
        await service.deny(SONG, request.id, owner_id)

        viewed = await service.mark_viewed(SONG, request.id, owner_id)
        assert viewed.viewed_by_kid is True


class TestAlbumTransitions:
    async def test_approve_album_unlocks_tracks_for_kid(self, service, owner_id, kid):
        request = await request_album(service, owner_id, kid)

        result = await service.approve(ALBUM, request.id, owner_id, tracks=ABBEY_ROAD_TRACKS)

        assert result.songs_added == 2
        albums = await service.approved_albums_for_owner(owner_id)
        assert [a.apple_album_id for a in albums] == ["900"]

        songs = await service.approved_songs_for_kid(kid.id, owner_id)
        assert {s.apple_song_id for s in songs} == {"901", "902"}
        assert all(s.apple_album_id == "900" for s in songs)

        tracks = await service.album_track_list(owner_id, "900")
        assert [t.song_name for t in tracks] == ["Come Together", "Something"]

    async def test_undo_album_keeps_track_unlocks(self, service, owner_id, kid):
        request = await request_album(service, owner_id, kid)
        await service.approve(ALBUM, request.id, owner_id, tracks=ABBEY_ROAD_TRACKS)

        await service.undo_approval(ALBUM, request.id, owner_id)

        assert await service.approved_albums_for_owner(owner_id) == []
        assert len(await service.approved_songs_for_kid(kid.id, owner_id)) == 2

        again = await service.approve(ALBUM, request.id, owner_id, tracks=ABBEY_ROAD_TRACKS)
        assert again.songs_added == 0
        assert len(await service.approved_albums_for_owner(owner_id)) == 1
        assert len(await service.album_track_list(owner_id, "900")) == 2

    async def test_partial_approval(self, service, owner_id, kid, queue):
        request = await request_album(service, owner_id, kid)
        queue.drain()

        partial = await service.mark_partially_approved(
            ALBUM, request.id, owner_id, note="Only the clean tracks"
        )

        assert partial.status == RequestStatus.PARTIALLY_APPROVED.value
        assert partial.partial_approval_note == "Only the clean tracks"
        assert partial.viewed_by_kid is False
        assert await service.approved_albums_for_owner(owner_id) == []

        [message] = queue.drain()
        assert message.payload["type"] == "request_partially_approved"

        viewed = await service.mark_viewed(ALBUM, request.id, owner_id)
        assert viewed.viewed_by_kid is True

    async def test_partial_approval_requires_pending(self, service, owner_id, kid):
        request = await request_album(service, owner_id, kid)
        await service.deny(ALBUM, request.id, owner_id)

        with pytest.raises(InvalidTransitionError):
            await service.mark_partially_approved(ALBUM, request.id, owner_id)


class TestLibrary:
    async def test_list_requests_by_status(self, service, owner_id, kid):
        pending = await request_song(service, owner_id, kid, song_id="1", name="One")
        denied = await request_song(service, owner_id, kid, song_id="2", name="Two")
        await service.deny(SONG, denied.id, owner_id)

        only_pending = await service.list_requests(SONG, owner_id, status=RequestStatus.PENDING)
        assert [r.id for r in only_pending] == [pending.id]
        assert len(await service.list_requests(SONG, owner_id)) == 2
        assert len(await service.list_kid_requests(SONG, kid.id, owner_id)) == 2

    async def test_toggle_song_artwork(self, service, owner_id, kid):
        request = await request_song(service, owner_id, kid)
        await service.approve(SONG, request.id, owner_id)
        [song] = await service.approved_songs_for_kid(kid.id, owner_id)

        updated = await service.set_song_artwork(song.id, owner_id, hide_artwork=True)
        assert updated.hide_artwork is True

        with pytest.raises(NotFoundError):
            await service.set_song_artwork(song.id, uuid.uuid4(), hide_artwork=False)

    async def test_toggle_album_artwork(self, service, owner_id, kid):
        request = await request_album(service, owner_id, kid)
        await service.approve(ALBUM, request.id, owner_id)
        [album] = await service.approved_albums_for_owner(owner_id)

        updated = await service.set_album_artwork(album.id, owner_id, hide_artwork=True)
        assert updated.hide_artwork is True

    async def test_undo_song_keeps_album_track_unlock(self, service, owner_id, kid):
        album = await request_album(service, owner_id, kid)
        await service.approve(ALBUM, album.id, owner_id, tracks=ABBEY_ROAD_TRACKS)
        song = await request_song(service, owner_id, kid, song_id="901", name="Come Together")

        result = await service.approve(SONG, song.id, owner_id)
        assert result.songs_added == 0

        await service.undo_approval(SONG, song.id, owner_id)

        songs = await service.approved_songs_for_kid(kid.id, owner_id)
        assert {s.apple_song_id for s in songs} == {"901", "902"}
        assert len(await service.approved_albums_for_owner(owner_id)) == 1
