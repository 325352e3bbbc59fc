"""
AI Response Parsing

Pure functions that turn the AI reviewer's raw text into validated schemas.
No network I/O happens here.

Flow:
=====
    raw completion text
        │  strip_code_fences()      ```json ... ``` → ...
        ▼
    json.loads()                    not JSON        → ParseError
        │
        ▼
    Schema.model_validate()         wrong shape     → ParseError
        │
        ▼
    Parsed(value)

Usage:
======
    result = parse_review(completion.content)
    if isinstance(result, ParseError):
        raise UpstreamError("openai", result.reason)
    review = result.value
"""

import json
import re
from dataclasses import dataclass
from typing import Generic, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..schemas.moderation import AlbumOverview, ContentReview


SchemaT = TypeVar("SchemaT", bound=BaseModel)

_OPENING_FENCE = re.compile(r"^```[a-zA-Z]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?[ \t]*```$")


@dataclass(frozen=True)
class Parsed(Generic[SchemaT]):
    value: SchemaT


@dataclass(frozen=True)
class ParseError:
    reason: str
    raw: str


ParseResult = Union[Parsed[SchemaT], ParseError]


def strip_code_fences(text: str) -> str:
    """
    Remove a Markdown code fence wrapping the whole text.

    "```json\\n{...}\\n```" → "{...}". Text without a fence is returned trimmed.
    """
    content = text.strip()
    content = _OPENING_FENCE.sub("", content, count=1)
    content = _CLOSING_FENCE.sub("", content, count=1)
    return content.strip()


def parse_model(text: str, schema: Type[SchemaT]) -> ParseResult:
    """Parse fenced or bare JSON into ``schema``."""
    content = strip_code_fences(text)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        return ParseError(reason=f"Invalid JSON: {e.msg}", raw=text)

    if not isinstance(data, dict):
        return ParseError(reason="Expected a JSON object", raw=text)

    try:
        return Parsed(schema.model_validate(data))
    except ValidationError as e:
        return ParseError(reason=f"Unexpected response shape: {e.error_count()} error(s)", raw=text)


def parse_review(text: str) -> ParseResult:
    return parse_model(text, ContentReview)


def parse_album_overview(text: str) -> ParseResult:
    return parse_model(text, AlbumOverview)
