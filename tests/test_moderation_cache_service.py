"""Tests for cached AI reviews, lyric lookups and album overviews."""

import uuid
from unittest.mock import AsyncMock

import pytest
from openai import OpenAIError
from sqlalchemy.exc import OperationalError

from safetunes.shared.adapters.lyrics_adapter import LyricTrack
from safetunes.shared.core.exceptions import LyricsRequiredError, ReviewNotFoundError, UpstreamError
from safetunes.shared.models.enums import AlbumRecommendation, OverallRating, ReviewType
from safetunes.shared.schemas.moderation import AlbumOverviewRequest, ContentReviewRequest
from safetunes.shared.services.moderation_cache_service import ModerationCacheService


LYRICS = "When I find myself in times of trouble, Mother Mary comes to me"

REVIEW = {
    "summary": "A comforting song about acceptance.",
    "positiveAspects": ["Hopeful message"],
    "inappropriateContent": [],
    "overallRating": "appropriate",
    "ageRecommendation": "All ages",
}

OVERVIEW = {
    "overallImpression": "Classic rock with gentle themes.",
    "artistProfile": "Long-running family-friendly band.",
    "recommendation": "Likely Safe",
    "suggestedAction": "Approve the album",
}

DISCLAIMER = "\n...\n\n******* This Lyrics is NOT for Commercial use *******"


@pytest.fixture
def service(session, fake_ai, fake_lyrics) -> ModerationCacheService:
    return ModerationCacheService(session, ai=fake_ai, lyrics=fake_lyrics)


def song_review(track_id="t1", name="Let It Be", lyrics=LYRICS) -> ContentReviewRequest:
    return ContentReviewRequest(
        review_type=ReviewType.SONG,
        apple_track_id=track_id,
        track_name=name,
        artist_name="The Beatles",
        lyrics=lyrics,
    )


def database_locked() -> OperationalError:
    return OperationalError("INSERT", {}, Exception("database is locked"))


async def cache_lyrics(service, track="Let It Be", artist="The Beatles", lyrics=LYRICS):
    return await service.review_repo.save_lyrics_if_absent(
        track_name=track,
        artist_name=artist,
        normalized_track=track.lower(),
        normalized_artist=artist.lower(),
        lyrics=lyrics,
    )


class TestReviews:
    async def test_miss_then_hit(self, service, fake_ai, completion):
        fake_ai.complete.return_value = completion(REVIEW)

        first = await service.get_or_create_review(song_review())
        second = await service.get_or_create_review(song_review())
        third = await service.get_or_create_review(song_review())

        assert first.from_cache is False
        assert first.times_reused == 0
        assert first.review.overall_rating == OverallRating.APPROPRIATE
        assert second.from_cache is True
        assert second.times_reused == 1
        assert third.times_reused == 2
        assert second.review_id == first.review_id
        assert second.review == first.review
        assert fake_ai.complete.await_count == 1

    async def test_review_settings(self, service, fake_ai, completion):
        fake_ai.complete.return_value = completion(REVIEW)

        await service.get_or_create_review(song_review())

        kwargs = fake_ai.complete.await_args.kwargs
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 3000
        assert LYRICS in kwargs["user_prompt"]

    async def test_lyrics_required_on_miss(self, service, fake_ai):
        with pytest.raises(LyricsRequiredError):
            await service.get_or_create_review(song_review(lyrics=None))

        fake_ai.complete.assert_not_awaited()

    async def test_miss_uses_cached_lyrics(self, service, fake_ai, completion):
        await cache_lyrics(service)
        fake_ai.complete.return_value = completion(REVIEW)

        response = await service.get_or_create_review(song_review(lyrics=None))

        assert response.from_cache is False
        assert LYRICS in fake_ai.complete.await_args.kwargs["user_prompt"]

    async def test_lyrics_only_entry_is_not_a_verdict(self, service, fake_ai, completion):
        await cache_lyrics(service)
        fake_ai.complete.return_value = completion(REVIEW)

        response = await service.get_or_create_review(song_review())

        assert response.from_cache is False
        fake_ai.complete.assert_awaited_once()

    async def test_unusable_payload(self, service, fake_ai, completion):
        fake_ai.complete.return_value = completion("Sorry, I can't help with that.")

        with pytest.raises(UpstreamError):
            await service.get_or_create_review(song_review())

        entries, _ = await service.review_repo.review_totals()
        assert entries == 0

    async def test_ai_failure(self, service, fake_ai):
        fake_ai.complete.side_effect = OpenAIError("Request timed out")

        with pytest.raises(UpstreamError) as exc_info:
            await service.get_or_create_review(song_review())

        assert exc_info.value.status_code == 502
        assert exc_info.value.reason == "Request timed out"

    async def test_album_review_keyed_by_album_id(self, service, fake_ai, completion):
        fake_ai.complete.return_value = completion(REVIEW)
        request = ContentReviewRequest(
            review_type=ReviewType.ALBUM,
            apple_album_id="900",
            album_name="Abbey Road",
            artist_name="The Beatles",
            lyrics=LYRICS,
        )

        await service.get_or_create_review(request)
        again = await service.get_or_create_review(request)

        assert again.from_cache is True
        entry = await service.get_review_by_id(again.review_id)
        assert entry.normalized_track == "abbey road"
        assert entry.apple_album_id == "900"

    async def test_concurrent_miss_stores_one_review(self, service, session, fake_ai, completion):
        other = ModerationCacheService(session, ai=fake_ai, lyrics=service.lyrics)
        calls = []

        async def complete(**kwargs):
            calls.append(kwargs)
            if len(calls) == 1:
                # The other caller misses too and finishes while this one waits
                await other.get_or_create_review(song_review())
            return completion(REVIEW)

        fake_ai.complete.side_effect = complete

        response = await service.get_or_create_review(song_review())

        assert response.from_cache is False
        assert len(calls) == 2
        stored = await other.get_or_create_review(song_review())
        assert stored.review_id == response.review_id
        stats = await service.get_cache_stats()
        assert stats.total_cache_entries == 1

    async def test_cache_write_failure_keeps_fresh_review(
        self, service, fake_ai, completion, monkeypatch
    ):
        await cache_lyrics(service)
        fake_ai.complete.return_value = completion(REVIEW)
        monkeypatch.setattr(
            service.review_repo,
            "save_review_if_absent",
            AsyncMock(side_effect=database_locked()),
        )

        response = await service.get_or_create_review(song_review(lyrics=None))

        assert response.from_cache is False
        assert response.review_id is None
        assert response.review.overall_rating == OverallRating.APPROPRIATE
        assert await service.review_repo.find_lyrics("let it be", "the beatles") is not None

    async def test_unknown_review_id(self, service):
        with pytest.raises(ReviewNotFoundError):
            await service.get_review_by_id(uuid.uuid4())


class TestLyrics:
    async def test_cache_hit(self, service, fake_lyrics):
        await cache_lyrics(service)

        response = await service.get_or_fetch_lyrics("Let It Be (Remastered)", "The Beatles")

        assert response.found is True
        assert response.source == "cache"
        assert response.lyrics == LYRICS
        fake_lyrics.search_tracks.assert_not_awaited()

    async def test_failed_combination_is_skipped(self, service, fake_lyrics):
        calls = []

        async def search_tracks(track_name, artist_name):
            calls.append((track_name, artist_name))
            if len(calls) == 1:
                raise UpstreamError("musixmatch", "HTTP 503")
            return [LyricTrack(track_id=7, track_name="Yesterday", artist_name="The Beatles")]

        fake_lyrics.search_tracks.side_effect = search_tracks
        fake_lyrics.fetch_lyrics.return_value = "Yesterday, all my troubles seemed so far away" + DISCLAIMER

        response = await service.get_or_fetch_lyrics("Yesterday (Remastered 2009)", "The Beatles")

        assert response.found is True
        assert response.source == "musixmatch"
        assert response.matched_track_name == "Yesterday"
        assert "Commercial" not in response.lyrics
        assert len(calls) == 2
        fake_lyrics.fetch_lyrics.assert_awaited_once_with(7)

        cached = await service.review_repo.find_lyrics("yesterday", "the beatles")
        assert cached is not None

    async def test_stored_under_requested_and_matched_names(self, service, fake_lyrics):
        fake_lyrics.search_tracks.return_value = [
            LyricTrack(track_id=8, track_name="Let It Be", artist_name="The Beatles")
        ]
        fake_lyrics.fetch_lyrics.return_value = LYRICS

        response = await service.get_or_fetch_lyrics("Let It Be", "Beatles")

        assert response.matched_artist_name == "The Beatles"
        assert await service.review_repo.find_lyrics("let it be", "beatles") is not None
        assert await service.review_repo.find_lyrics("let it be", "the beatles") is not None

        again = await service.get_or_fetch_lyrics("Let It Be", "The Beatles")
        assert again.source == "cache"
        assert fake_lyrics.search_tracks.await_count == 1

    async def test_second_cache_write_failure_keeps_first(self, service, fake_lyrics, monkeypatch):
        fake_lyrics.search_tracks.return_value = [
            LyricTrack(track_id=8, track_name="Let It Be", artist_name="The Beatles")
        ]
        fake_lyrics.fetch_lyrics.return_value = LYRICS
        save = service.review_repo.save_lyrics_if_absent
        calls = []

        async def save_then_fail(**values):
            calls.append(values["track_name"])
            if len(calls) == 2:
                raise database_locked()
            return await save(**values)

        monkeypatch.setattr(service.review_repo, "save_lyrics_if_absent", save_then_fail)

        response = await service.get_or_fetch_lyrics("Let It Be", "Beatles")

        assert response.found is True
        assert response.lyrics == LYRICS
        assert len(calls) == 2
        assert await service.review_repo.find_lyrics("let it be", "beatles") is not None
        assert await service.review_repo.find_lyrics("let it be", "the beatles") is None

    async def test_broad_search_fallback(self, service, fake_lyrics):
        fake_lyrics.search_by_query.return_value = [
            LyricTrack(track_id=9, track_name="Imagine", artist_name="John Lennon")
        ]
        fake_lyrics.fetch_lyrics.return_value = "Imagine there's no heaven, it's easy if you try"

        response = await service.get_or_fetch_lyrics("Imagine", "Lennon")

        assert response.found is True
        assert response.source == "musixmatch-fallback"
        fake_lyrics.search_by_query.assert_awaited_once_with("Imagine Lennon", page_size=5)
        assert await service.review_repo.find_lyrics("imagine", "john lennon") is not None

    async def test_short_lyrics_are_rejected(self, service, fake_lyrics):
        fake_lyrics.search_tracks.return_value = [
            LyricTrack(track_id=10, track_name="Hum", artist_name="Quiet Band")
        ]
        fake_lyrics.fetch_lyrics.return_value = "la la"

        response = await service.get_or_fetch_lyrics("Hum", "Quiet Band")

        assert response.found is False

    async def test_not_found(self, service, fake_lyrics):
        response = await service.get_or_fetch_lyrics("Unreleased Demo", "Nobody")

        assert response.found is False
        assert response.lyrics is None
        assert "Unreleased Demo" in response.message
        assert 1 <= fake_lyrics.search_tracks.await_count <= 10
        assert await service.review_repo.find_lyrics("unreleased demo", "nobody") is None


class TestAlbumOverviews:
    def overview_request(self):
        return AlbumOverviewRequest(
            apple_album_id="900",
            album_name="Abbey Road",
            artist_name="The Beatles",
            tracks=[
                {"name": "Come Together", "is_explicit": False},
                {"name": "Something", "is_explicit": False},
            ],
        )

    async def test_miss_then_hit(self, service, fake_ai, completion):
        fake_ai.complete.return_value = completion(OVERVIEW)

        first = await service.get_or_create_album_overview(self.overview_request())
        second = await service.get_or_create_album_overview(self.overview_request())

        assert first.from_cache is False
        assert first.track_count == 2
        assert first.overview.recommendation == AlbumRecommendation.LIKELY_SAFE
        assert second.from_cache is True
        assert second.overview.suggested_action == "Approve the album"
        assert fake_ai.complete.await_args.kwargs["max_tokens"] == 800
        fake_ai.complete.assert_awaited_once()

    async def test_cached_batch(self, service, fake_ai, completion):
        fake_ai.complete.return_value = completion(OVERVIEW)
        await service.get_or_create_album_overview(self.overview_request())

        cached = await service.get_cached_overviews(["900", "missing"])

        assert list(cached) == ["900"]
        assert cached["900"].recommendation == AlbumRecommendation.LIKELY_SAFE

    async def test_unusable_payload(self, service, fake_ai, completion):
        fake_ai.complete.return_value = completion({"overallImpression": "Hmm"})

        with pytest.raises(UpstreamError):
            await service.get_or_create_album_overview(self.overview_request())


class TestStatsAndAdministration:
    async def seed(self, service, fake_ai, completion):
        fake_ai.complete.return_value = completion(REVIEW)
        await service.get_or_create_review(song_review("t1", "Let It Be"))
        await service.get_or_create_review(song_review("t2", "Yesterday"))
        await service.get_or_create_review(song_review("t1", "Let It Be"))
        await service.get_or_create_review(song_review("t1", "Let It Be"))
        await cache_lyrics(service, track="Help", artist="The Beatles")

    async def test_stats(self, service, fake_ai, completion):
        await self.seed(service, fake_ai, completion)

        stats = await service.get_cache_stats()

        assert stats.total_cache_entries == 2
        assert stats.total_cache_hits == 2
        assert stats.total_api_calls == 2
        assert stats.total_requests == 4
        assert stats.cache_hit_rate == pytest.approx(0.5)
        assert stats.cost_saved == pytest.approx(0.01)
        assert stats.cost_spent == pytest.approx(0.01)
        assert [item.name for item in stats.top_reviewed] == ["Let It Be", "Yesterday"]
        assert stats.top_reviewed[0].times_reused == 2

    async def test_empty_stats(self, service):
        stats = await service.get_cache_stats()

        assert stats.total_requests == 0
        assert stats.cache_hit_rate == 0.0
        assert stats.top_reviewed == []

    async def test_clear_review(self, service, fake_ai, completion):
        await self.seed(service, fake_ai, completion)

        assert await service.clear_review("t1") == 1
        assert await service.review_repo.get_review_for_track("t1") is None
        assert await service.review_repo.get_review_for_track("t2") is not None

    async def test_clear_by_name(self, service, fake_ai, completion):
        await self.seed(service, fake_ai, completion)

        assert await service.clear_review_by_name("Yesterday (Remastered)", "The Beatles") == 1
        assert await service.review_repo.get_review_for_track("t2") is None

    async def test_clear_lyrics_only(self, service, fake_ai, completion):
        await self.seed(service, fake_ai, completion)

        assert await service.clear_lyrics_only() == 1
        entries, _ = await service.review_repo.review_totals()
        assert entries == 2

    async def test_clear_all(self, service, fake_ai, completion):
        await self.seed(service, fake_ai, completion)

        assert await service.clear_all() == 3
        assert (await service.get_cache_stats()).total_cache_entries == 0
