"""
Push adapter - Expo push notification client.

Provides:
- Batched push delivery to Expo push tokens
- Per-token delivery tickets
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ...config.settings import settings
from ..core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

EXPO_TOKEN_PREFIXES = ("ExponentPushToken[", "ExpoPushToken[")


@dataclass
class PushTicket:
    """Delivery ticket for one token."""

    token: str
    ok: bool
    message: Optional[str] = None


def is_expo_token(token: str) -> bool:
    return token.startswith(EXPO_TOKEN_PREFIXES)


class ExpoPushAdapter:
    """
    Adapter for the Expo push API.

    Tokens that are not Expo tokens are skipped with a failed ticket
    rather than sent.
    """

    SERVICE_NAME = "expo"

    def __init__(
        self,
        push_url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.push_url = push_url or settings.EXPO_PUSH_URL
        self.access_token = access_token if access_token is not None else settings.EXPO_ACCESS_TOKEN
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-loaded HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json", "Content-Type": "application/json"}
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"
            self._client = httpx.AsyncClient(timeout=self.timeout, headers=headers)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        tokens: List[str],
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> List[PushTicket]:
        """
        Send one notification to several devices.

        Returns:
            One ticket per token; rejected formats first

        Raises:
            ExternalServiceError: If the Expo API is unreachable or errors
        """
        valid = [token for token in tokens if is_expo_token(token)]
        tickets = [
            PushTicket(token=token, ok=False, message="invalid_token_format")
            for token in tokens
            if not is_expo_token(token)
        ]
        if not valid:
            return tickets

        messages = [
            {"to": token, "sound": "default", "title": title, "body": body, "data": data or {}}
            for token in valid
        ]

        try:
            response = await self.client.post(self.push_url, json=messages)
            response.raise_for_status()
            results = response.json().get("data") or []
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Expo push request failed: %s", e)
            raise ExternalServiceError(self.SERVICE_NAME, details={"reason": str(e)}) from e

        for token, result in zip(valid, results):
            ok = result.get("status") == "ok"
            if not ok:
                logger.warning("Push to %s... rejected: %s", token[:30], result.get("message"))
            tickets.append(PushTicket(token=token, ok=ok, message=result.get("message")))

        return tickets


# Singleton instance
_push_adapter: Optional[ExpoPushAdapter] = None


def get_push_adapter() -> ExpoPushAdapter:
    """Get or create push adapter singleton."""
    global _push_adapter
    if _push_adapter is None:
        _push_adapter = ExpoPushAdapter()
    return _push_adapter
