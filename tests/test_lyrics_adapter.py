"""Tests for the Musixmatch client's response handling."""

import httpx
import pytest

from safetunes.config.settings import settings
from safetunes.shared.adapters.lyrics_adapter import LyricsAdapter
from safetunes.shared.core.exceptions import UpstreamError


def adapter_returning(payload, status_code=200) -> LyricsAdapter:
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=payload)

    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="https://lyrics.test/ws/1.1",
    )
    adapter = LyricsAdapter(api_key="test-key", client=client)
    adapter.requests = requests
    return adapter


def envelope(body, status_code=200) -> dict:
    return {"message": {"header": {"status_code": status_code}, "body": body}}


class TestSearch:
    async def test_parses_track_list(self):
        adapter = adapter_returning(
            envelope(
                {
                    "track_list": [
                        {
                            "track": {
                                "track_id": 7,
                                "track_name": "Yesterday",
                                "artist_name": "The Beatles",
                                "album_name": "Help!",
                            }
                        },
                        {"track": {"track_name": "No id"}},
                        "garbage",
                    ]
                }
            )
        )

        tracks = await adapter.search_tracks("Yesterday", "The Beatles")

        assert [(t.track_id, t.track_name, t.album_name) for t in tracks] == [
            (7, "Yesterday", "Help!")
        ]
        params = adapter.requests[0].url.params
        assert params["q_track"] == "Yesterday"
        assert params["apikey"] == "test-key"

    async def test_provider_status_error(self):
        adapter = adapter_returning(envelope({}, status_code=401))

        with pytest.raises(UpstreamError) as exc_info:
            await adapter.search_tracks("Yesterday", "The Beatles")

        assert "401" in exc_info.value.reason

    @pytest.mark.parametrize("payload", [[1, 2, 3], {"message": "rate limited"}, "ok"])
    async def test_unexpected_payload(self, payload):
        adapter = adapter_returning(payload)

        with pytest.raises(UpstreamError) as exc_info:
            await adapter.search_by_query("Yesterday The Beatles")

        assert "unexpected payload" in exc_info.value.reason

    async def test_http_error(self):
        adapter = adapter_returning({}, status_code=503)

        with pytest.raises(UpstreamError):
            await adapter.search_tracks("Yesterday", "The Beatles")


class TestConfiguration:
    async def test_missing_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "MUSIXMATCH_API_KEY", "")
        adapter = LyricsAdapter(api_key="")

        with pytest.raises(UpstreamError) as exc_info:
            await adapter.search_tracks("Yesterday", "The Beatles")

        assert exc_info.value.reason == "API key not configured"


class TestFetchLyrics:
    async def test_lyrics_body(self):
        adapter = adapter_returning(envelope({"lyrics": {"lyrics_body": "Yesterday..."}}))

        assert await adapter.fetch_lyrics(7) == "Yesterday..."
        assert adapter.requests[0].url.params["track_id"] == "7"

    async def test_missing_lyrics(self):
        adapter = adapter_returning(envelope({"lyrics": []}))

        assert await adapter.fetch_lyrics(7) is None
