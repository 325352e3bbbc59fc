"""
Lyrics adapter - Musixmatch API client.

Provides:
- Track search by title/artist (ranked candidate list)
- Broad track search by a single query string
- Lyric text fetch by track id

Every response is wrapped in ``{"message": {"header": {...}, "body": {...}}}``;
a header status other than 200 is treated as an upstream failure.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ...config.settings import settings
from ..core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class LyricTrack:
    """One candidate returned by a track search."""

    track_id: int
    track_name: str
    artist_name: str
    album_name: Optional[str] = None


class LyricsAdapter:
    """
    Adapter for the Musixmatch lyric provider.

    Handles:
    - Track search with ranked results
    - Lyric retrieval by provider track id
    - Timeouts and status-code validation
    """

    SERVICE_NAME = "musixmatch"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key or settings.MUSIXMATCH_API_KEY
        self.base_url = (base_url or settings.MUSIXMATCH_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-loaded HTTP client."""
        if self._client is None:
            if not self.api_key:
                raise UpstreamError(self.SERVICE_NAME, "API key not configured")
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET an endpoint and return the message body."""
        try:
            response = await self.client.get(
                f"/{endpoint}",
                params={**params, "apikey": self.api_key},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("Musixmatch %s request failed: %s", endpoint, e)
            raise UpstreamError(self.SERVICE_NAME, str(e)) from e
        except ValueError as e:
            raise UpstreamError(self.SERVICE_NAME, "Invalid JSON payload") from e

        message = payload.get("message") if isinstance(payload, dict) else None
        if not isinstance(message, dict):
            raise UpstreamError(self.SERVICE_NAME, f"{endpoint} returned an unexpected payload")

        header = message.get("header")
        status_code = header.get("status_code") if isinstance(header, dict) else None
        if status_code != 200:
            raise UpstreamError(self.SERVICE_NAME, f"{endpoint} returned status {status_code}")

        body = message.get("body")
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _tracks(body: Dict[str, Any]) -> List[LyricTrack]:
        tracks = []
        for item in body.get("track_list") or []:
            track = item.get("track") if isinstance(item, dict) else None
            if not isinstance(track, dict) or "track_id" not in track:
                continue
            tracks.append(
                LyricTrack(
                    track_id=track["track_id"],
                    track_name=track.get("track_name", ""),
                    artist_name=track.get("artist_name", ""),
                    album_name=track.get("album_name"),
                )
            )
        return tracks

    async def search_tracks(
        self,
        track_name: str,
        artist_name: str,
        page_size: int = 10,
    ) -> List[LyricTrack]:
        """
        Search by track title and artist.

        Returns:
            Candidates in provider ranking order (possibly empty)

        Raises:
            UpstreamError: On transport failure or non-200 status
        """
        body = await self._get(
            "track.search",
            {"q_track": track_name, "q_artist": artist_name, "page_size": page_size},
        )
        return self._tracks(body)

    async def search_by_query(self, query: str, page_size: int = 5) -> List[LyricTrack]:
        """Broad search with a single free-text query."""
        body = await self._get("track.search", {"q": query, "page_size": page_size})
        return self._tracks(body)

    async def fetch_lyrics(self, track_id: int) -> Optional[str]:
        """
        Fetch raw lyric text for a provider track id.

        Returns:
            The lyric body, or None when the provider has no lyrics for it
        """
        body = await self._get("track.lyrics.get", {"track_id": track_id})
        lyrics = body.get("lyrics")
        if not isinstance(lyrics, dict):
            return None
        return lyrics.get("lyrics_body") or None


# Singleton instance
_lyrics_adapter: Optional[LyricsAdapter] = None


def get_lyrics_adapter() -> LyricsAdapter:
    """Get or create lyrics adapter singleton."""
    global _lyrics_adapter
    if _lyrics_adapter is None:
        _lyrics_adapter = LyricsAdapter()
    return _lyrics_adapter
