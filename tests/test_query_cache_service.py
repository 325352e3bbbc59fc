"""Tests for cached AI search and recommendations."""

from unittest.mock import AsyncMock

import pytest
from openai import OpenAIError
from sqlalchemy.exc import OperationalError

from safetunes.shared.core.exceptions import UpstreamError
from safetunes.shared.schemas.discovery import RecommendationRequest
from safetunes.shared.services.query_cache_service import (
    QueryCacheService,
    recommendation_key,
    search_key,
)


SEARCH_RESULT = {
    "songs": [
        {
            "songName": "Here Comes the Sun",
            "artistName": "The Beatles",
            "searchQuery": "Here Comes the Sun Beatles",
            "reason": "Bright and upbeat",
            "year": "1969",
        },
        {"songName": "Three Little Birds", "artistName": "Bob Marley & The Wailers"},
    ],
    "ageRange": "5-12",
    "genres": ["rock", "reggae"],
}

RECOMMENDATIONS = {
    "recommendations": [
        {
            "type": "artist",
            "name": "Kidz Bop",
            "reason": "Clean versions of pop hits",
            "ageAppropriate": True,
            "genres": ["pop"],
        },
        {"type": "album", "name": "Sesame Street Platinum", "genres": ["children"]},
    ]
}


@pytest.fixture
def service(session, fake_ai) -> QueryCacheService:
    return QueryCacheService(session, ai=fake_ai)


class TestKeys:
    def test_search_key_ignores_case_and_padding(self):
        assert search_key("Kids songs from the 80s ") == search_key("kids songs from the 80s")
        assert search_key("happy songs") != search_key("sad songs")

    def test_recommendation_key_ignores_genre_order(self):
        a = RecommendationRequest(
            kid_age=8, music_preferences="Upbeat pop", target_genres=["Pop", "Rock"]
        )
        b = RecommendationRequest(
            kid_age=8, music_preferences="upbeat pop ", target_genres=["rock", "pop"]
        )
        assert recommendation_key(a) == recommendation_key(b)

    def test_recommendation_key_includes_age(self):
        a = RecommendationRequest(kid_age=8, music_preferences="Upbeat pop")
        b = RecommendationRequest(kid_age=12, music_preferences="Upbeat pop")
        assert recommendation_key(a) != recommendation_key(b)


class TestSearch:
    async def test_miss_then_hit(self, service, fake_ai):
        fake_ai.complete_json.return_value = SEARCH_RESULT

        first = await service.search("Happy songs for a road trip")
        second = await service.search("happy songs for a road trip  ")

        assert first.from_cache is False
        assert [s.song_name for s in first.suggestions] == [
            "Here Comes the Sun",
            "Three Little Birds",
        ]
        assert first.age_range == "5-12"
        assert second.from_cache is True
        assert second.suggestions == first.suggestions
        assert second.genres == ["rock", "reggae"]
        fake_ai.complete_json.assert_awaited_once()
        assert fake_ai.complete_json.await_args.kwargs["max_tokens"] == 2000

        cached = await service.search_repo.get_by_hash(search_key("happy songs for a road trip"))
        cached = await service.search_repo.get(cached.id, fresh=True)
        assert cached.times_reused == 1
        assert cached.model == "gpt-4o-mini"

    async def test_ai_failure(self, service, fake_ai):
        fake_ai.complete_json.side_effect = OpenAIError("Connection error")

        with pytest.raises(UpstreamError):
            await service.search("lullabies")

    async def test_invalid_json(self, service, fake_ai):
        fake_ai.complete_json.side_effect = ValueError("Invalid JSON response from LLM")

        with pytest.raises(UpstreamError):
            await service.search("lullabies")

    async def test_malformed_suggestions(self, service, fake_ai):
        fake_ai.complete_json.return_value = {"songs": [{"title": "No names here"}]}

        with pytest.raises(UpstreamError):
            await service.search("lullabies")

        assert await service.search_repo.get_by_hash(search_key("lullabies")) is None

    async def test_cache_write_failure_still_answers(self, service, fake_ai, monkeypatch):
        fake_ai.complete_json.return_value = SEARCH_RESULT
        monkeypatch.setattr(
            service.search_repo,
            "save_if_absent",
            AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk I/O error"))),
        )

        response = await service.search("lullabies")

        assert response.from_cache is False
        assert len(response.suggestions) == 2
        assert await service.search_repo.get_by_hash(search_key("lullabies")) is None


class TestRecommendations:
    async def test_miss_then_hit(self, service, fake_ai):
        fake_ai.complete_json.return_value = RECOMMENDATIONS
        request = RecommendationRequest(
            kid_age=7,
            music_preferences="Likes singing along",
            target_genres=["Pop", "Children"],
            restrictions="No love songs",
        )

        first = await service.recommend(request)
        second = await service.recommend(request)

        assert first.from_cache is False
        assert first.recommendations[0].name == "Kidz Bop"
        assert first.recommendations[1].age_appropriate is True
        assert second.from_cache is True
        assert second.recommendations == first.recommendations
        fake_ai.complete_json.assert_awaited_once()
        assert fake_ai.complete_json.await_args.kwargs["max_tokens"] == 1500
