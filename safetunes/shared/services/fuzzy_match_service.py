"""
Fuzzy Match Service

Name variants and string similarity for lyric lookups.

Catalog names rarely match the lyric provider's names exactly
("Song (Remastered 2009)" vs "Song", "Artist feat. Other" vs "Artist"), so a
lookup tries several spellings and accepts the best-scoring search result.

Scoring:
========
    similarity(a, b)     0-100 on normalized strings
                         equal → 100, containment → 80,
                         else 100 × (1 − levenshtein / max_len)
    combined score       0.6 × track similarity + 0.4 × artist similarity

Usage:
======
    from safetunes.shared.services.fuzzy_match_service import FuzzyMatchService

    for track, artist in FuzzyMatchService.candidate_combinations(name, artist):
        results = await lyrics.search_tracks(track, artist)
        match = FuzzyMatchService.best_match(results, track, artist, threshold=40)
"""

import math
import re
from dataclasses import dataclass
from typing import Generic, List, Optional, Protocol, Sequence, Tuple, TypeVar


class NamedTrack(Protocol):
    track_name: str
    artist_name: str


CandidateT = TypeVar("CandidateT", bound=NamedTrack)


@dataclass(frozen=True)
class ScoredMatch(Generic[CandidateT]):
    candidate: CandidateT
    score: float
    track_similarity: int
    artist_similarity: int


_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_TRAILING_QUALIFIER = re.compile(r"\s*(\([^()]*\)|\[[^\[\]]*\])\s*$")

_ARTIST_PATTERNS = [
    re.compile(r"\s+tell\s+'?em$", re.IGNORECASE),
    re.compile(r"\s+\(.*?\)$"),
    re.compile(r"\s+featuring\b.*$", re.IGNORECASE),
    re.compile(r"\s+feat\..*$", re.IGNORECASE),
    re.compile(r"\s+ft\..*$", re.IGNORECASE),
    re.compile(r"\s+with\s.*$", re.IGNORECASE),
    re.compile(r"\s+x\s+.*$", re.IGNORECASE),
    re.compile(r"\s+&\s+.*$"),
    re.compile(r"\s*,\s+.*$"),
]
_ARTIST_FIRST_TOKEN = re.compile(r"[\s,&]+")

_TRACK_PATTERNS = [
    re.compile(r"\s+\(.*?\)$"),
    re.compile(r"\s+\[.*?\]$"),
    re.compile(r"\s+-\s+.*$"),
    re.compile(r"\s+\(feat\..*?\)", re.IGNORECASE),
    re.compile(r"\s+\(ft\..*?\)", re.IGNORECASE),
    re.compile(r"\s+\(featuring.*?\)", re.IGNORECASE),
    re.compile(r"\s+\(with\s.*?\)", re.IGNORECASE),
    re.compile(r"\s+/\s+.*$"),
    re.compile(r"\s+remastered\b.*$", re.IGNORECASE),
    re.compile(r"\s+\d{4}\s*remaster.*$", re.IGNORECASE),
    re.compile(r"\s+radio\s+edit$", re.IGNORECASE),
    re.compile(r"\s+album\s+version$", re.IGNORECASE),
    re.compile(r"\s+single\s+version$", re.IGNORECASE),
    re.compile(r"\s+live\b.*$", re.IGNORECASE),
    re.compile(r"\s+remix$", re.IGNORECASE),
    re.compile(r"\s+mix$", re.IGNORECASE),
    re.compile(r"\s+edit$", re.IGNORECASE),
    re.compile(r"\s+version$", re.IGNORECASE),
]

# Provider disclaimer block: "******* This Lyrics is NOT for Commercial use *******"
_DISCLAIMER = re.compile(r"\*{4,}.*?\*{4,}", re.DOTALL)
_TRAILING_ELLIPSIS = re.compile(r"\.\.\.$", re.MULTILINE)


def _append_unique(values: List[str], value: str, min_length: int = 1) -> None:
    if value and len(value) >= min_length and value not in values:
        values.append(value)


class FuzzyMatchService:
    """Stateless helpers; every method is a static function of its inputs."""

    TRACK_WEIGHT = 0.6
    ARTIST_WEIGHT = 0.4

    # ═══════════════════════════════════════════════════════════════════════════
    # NORMALIZATION
    # ═══════════════════════════════════════════════════════════════════════════

    @staticmethod
    def normalize(value: str) -> str:
        """Lowercase, trim, drop non-word characters."""
        return _NON_WORD.sub("", value.lower().strip())

    @staticmethod
    def normalize_cache_key(value: str) -> str:
        """
        Normalized lyric cache key.

        Trailing qualifiers are dropped before normalizing, so
        "The Beatles (Remastered)" and "The Beatles" share a key.
        """
        stripped = value.strip()
        while True:
            shorter = _TRAILING_QUALIFIER.sub("", stripped)
            if shorter == stripped or not shorter:
                break
            stripped = shorter
        normalized = FuzzyMatchService.normalize(stripped)
        return _WHITESPACE.sub(" ", normalized).strip()

    # ═══════════════════════════════════════════════════════════════════════════
    # NAME VARIANTS
    # ═══════════════════════════════════════════════════════════════════════════

    @staticmethod
    def artist_alternatives(artist_name: str) -> List[str]:
        """
        Spellings of an artist name, original first.

        "Drake feat. Rihanna" → ["Drake feat. Rihanna", "Drake"]
        """
        alternatives = [artist_name]
        for pattern in _ARTIST_PATTERNS:
            _append_unique(alternatives, pattern.sub("", artist_name).strip())

        first_token = _ARTIST_FIRST_TOKEN.split(artist_name.strip())[0]
        if len(first_token) > 2:
            _append_unique(alternatives, first_token)

        return alternatives

    @staticmethod
    def track_alternatives(track_name: str) -> List[str]:
        """
        Spellings of a track name, original first, deep-cleaned variant last.

        Each pattern is tried alone, then all of them cumulatively.
        """
        alternatives = [track_name]
        for pattern in _TRACK_PATTERNS:
            _append_unique(alternatives, pattern.sub("", track_name).strip(), min_length=3)

        deep_clean = track_name
        for pattern in _TRACK_PATTERNS:
            deep_clean = pattern.sub("", deep_clean).strip()
        _append_unique(alternatives, deep_clean, min_length=3)

        return alternatives

    @staticmethod
    def candidate_combinations(
        track_name: str,
        artist_name: str,
        limit: int = 10,
    ) -> List[Tuple[str, str]]:
        """Track-major cartesian product of the variants, capped at ``limit``."""
        combinations = [
            (track, artist)
            for track in FuzzyMatchService.track_alternatives(track_name)
            for artist in FuzzyMatchService.artist_alternatives(artist_name)
        ]
        return combinations[:limit]

    # ═══════════════════════════════════════════════════════════════════════════
    # SCORING
    # ═══════════════════════════════════════════════════════════════════════════

    @staticmethod
    def levenshtein(a: str, b: str) -> int:
        """Classic edit distance, full (m+1) × (n+1) table."""
        m, n = len(a), len(b)
        table = [[0] * (n + 1) for _ in range(m + 1)]

        for i in range(m + 1):
            table[i][0] = i
        for j in range(n + 1):
            table[0][j] = j

        for i in range(1, m + 1):
            for j in range(1, n + 1):
                if a[i - 1] == b[j - 1]:
                    table[i][j] = table[i - 1][j - 1]
                else:
                    table[i][j] = 1 + min(
                        table[i - 1][j - 1],
                        table[i - 1][j],
                        table[i][j - 1],
                    )

        return table[m][n]

    @staticmethod
    def similarity(a: str, b: str) -> int:
        """Similarity of two names, 0-100, symmetric."""
        s1 = FuzzyMatchService.normalize(a)
        s2 = FuzzyMatchService.normalize(b)

        if s1 == s2:
            return 100
        # An empty side would otherwise count as contained in anything
        if not s1 or not s2:
            return 0
        if s1 in s2 or s2 in s1:
            return 80

        distance = FuzzyMatchService.levenshtein(s1, s2)
        ratio = 1 - distance / max(len(s1), len(s2))
        return int(math.floor(ratio * 100 + 0.5))

    @classmethod
    def combined_score(cls, track_similarity: float, artist_similarity: float) -> float:
        return cls.TRACK_WEIGHT * track_similarity + cls.ARTIST_WEIGHT * artist_similarity

    @classmethod
    def best_match(
        cls,
        candidates: Sequence[CandidateT],
        track_name: str,
        artist_name: str,
        threshold: float = 40.0,
    ) -> Optional[ScoredMatch[CandidateT]]:
        """
        Highest-scoring candidate at or above ``threshold``.

        Ties keep the earliest candidate. Returns None when nothing qualifies.
        """
        best: Optional[ScoredMatch[CandidateT]] = None

        for candidate in candidates:
            track_similarity = cls.similarity(track_name, candidate.track_name)
            artist_similarity = cls.similarity(artist_name, candidate.artist_name)
            score = cls.combined_score(track_similarity, artist_similarity)

            if best is None or score > best.score:
                best = ScoredMatch(
                    candidate=candidate,
                    score=score,
                    track_similarity=track_similarity,
                    artist_similarity=artist_similarity,
                )

        if best is None or best.score < threshold:
            return None
        return best

    # ═══════════════════════════════════════════════════════════════════════════
    # LYRIC TEXT
    # ═══════════════════════════════════════════════════════════════════════════

    @staticmethod
    def clean_lyrics(raw: str) -> str:
        """Strip the provider disclaimer block and trailing ellipsis lines."""
        cleaned = _DISCLAIMER.sub("", raw)
        cleaned = _TRAILING_ELLIPSIS.sub("", cleaned)
        return cleaned.strip()
