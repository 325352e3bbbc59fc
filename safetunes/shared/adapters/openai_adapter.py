"""
OpenAI adapter - OpenAI API client.

Provides:
- Chat completions for lyric reviews, album overviews and music discovery
- JSON completions for the discovery features
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from openai import APIConnectionError, APIError, AsyncOpenAI, RateLimitError

from ...config.settings import settings
from ..utils.review_parsing import strip_code_fences

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    """Result of LLM completion."""

    content: str
    model: str
    usage_prompt_tokens: int
    usage_completion_tokens: int


class OpenAIAdapter:
    """
    Adapter for OpenAI API operations.

    Handles:
    - LLM completions for content reviews and discovery
    - Request timeout and error logging

    Errors from the SDK are logged and re-raised; services decide whether a
    failure is fatal or becomes an UpstreamError.
    """

    COMPLETION_MAX_TOKENS = 1024

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize OpenAI adapter.

        Args:
            api_key: OpenAI API key. If not provided, uses settings.
            model: Completion model. If not provided, uses settings.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-loaded OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise ValueError("OpenAI API key not configured")
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
    ) -> CompletionResult:
        """
        Generate LLM completion.

        Args:
            system_prompt: System instruction
            user_prompt: User message
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens in response

        Returns:
            CompletionResult with generated text
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens or self.COMPLETION_MAX_TOKENS,
            )

            choice = response.choices[0]
            usage = response.usage

            return CompletionResult(
                content=choice.message.content or "",
                model=response.model,
                usage_prompt_tokens=usage.prompt_tokens if usage else 0,
                usage_completion_tokens=usage.completion_tokens if usage else 0,
            )

        except RateLimitError as e:
            logger.warning("OpenAI rate limit hit: %s", e)
            raise
        except (APIConnectionError, APIError) as e:
            logger.error("OpenAI completion error: %s", e)
            raise

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Generate LLM completion and parse as JSON.

        Raises:
            ValueError: If response is not a valid JSON object
        """
        result = await self.complete(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        content = strip_code_fences(result.content)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse JSON response: %s", content[:200])
            raise ValueError(f"Invalid JSON response from LLM: {e}") from e

        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object from LLM")
        return data


# Singleton instance for convenience
_openai_adapter: Optional[OpenAIAdapter] = None


def get_openai_adapter() -> OpenAIAdapter:
    """Get or create OpenAI adapter singleton."""
    global _openai_adapter
    if _openai_adapter is None:
        _openai_adapter = OpenAIAdapter()
    return _openai_adapter
