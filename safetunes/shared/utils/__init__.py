"""
Utilities Package

Contents:
=========
- security: JWT verification
- review_parsing: Fence stripping and schema validation of AI output

Usage:
======
    from safetunes.shared.utils.security import SecurityUtils
    from safetunes.shared.utils.review_parsing import parse_review, ParseError
"""

from safetunes.shared.utils.security import SecurityUtils
from safetunes.shared.utils.review_parsing import (
    Parsed,
    ParseError,
    strip_code_fences,
    parse_review,
    parse_album_overview,
)

__all__ = [
    "SecurityUtils",
    "Parsed",
    "ParseError",
    "strip_code_fences",
    "parse_review",
    "parse_album_overview",
]
