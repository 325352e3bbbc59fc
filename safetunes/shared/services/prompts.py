"""
AI prompt builders.

Every prompt asks for bare JSON; responses still go through
strip_code_fences() because models wrap JSON in Markdown anyway.
"""

from typing import Iterable, List, Optional, Sequence


# ═══════════════════════════════════════════════════════════════════════════════
# SONG REVIEW
# ═══════════════════════════════════════════════════════════════════════════════

REVIEW_SYSTEM_PROMPT = """You are a thorough content reviewer helping parents make informed decisions about music.
Review EVERY line of the lyrics and flag ALL content any parent might care about, from strict to relaxed households.
Recognize slang, coded language and cultural references with sexual or otherwise mature meanings.
Inform, do not judge. Always return valid JSON only, with no markdown formatting."""

REVIEW_CATEGORIES = [
    "sexual-content",
    "romantic-themes",
    "substance-use",
    "mental-health",
    "body-image",
    "language",
    "religious-concerns",
    "violence",
    "behavioral-concerns",
    "emotional-intensity",
    "other-mature-themes",
]


def build_review_prompt(track_name: str, artist_name: str, lyrics: str) -> str:
    """User prompt for a full lyric review."""
    categories = ", ".join(REVIEW_CATEGORIES)
    return f"""Song: {track_name}
Artist: {artist_name}

Lyrics:
{lyrics}

Read the entire song line by line and do not stop after the first issue.

Provide:
1. summary: 2-3 sentences on what the song is about and the themes it conveys.
2. inappropriateContent: one entry for EACH concerning line, with
   - category (one of: {categories})
   - severity (mild, moderate, significant)
   - quote (exact words from the lyrics)
   - context (what it is and why different families might care)
3. overallRating:
   - "appropriate": minimal concerns, suitable for most young children
   - "use-caution": content some parents will want to review or discuss
   - "inappropriate": significant mature content
4. ageRecommendation: an age range such as "5+", "8+", "10+", "13+", "16+".

Return ONLY valid JSON in exactly this format:
{{
  "summary": "This song is about...",
  "positiveAspects": [],
  "inappropriateContent": [
    {{"category": "language", "severity": "mild", "quote": "...", "context": "..."}}
  ],
  "overallRating": "use-caution",
  "ageRecommendation": "13+"
}}

Always return an empty array for positiveAspects.
If there are no concerns, return an empty array for inappropriateContent."""


# ═══════════════════════════════════════════════════════════════════════════════
# ALBUM OVERVIEW
# ═══════════════════════════════════════════════════════════════════════════════

ALBUM_OVERVIEW_SYSTEM_PROMPT = """You are a content advisor for parents with knowledge of music artists and their typical content.
Be cautious, concise and clear: 2-3 sentences per section. Use what you know about the artist and album,
and read track titles for clues (romance, nightlife, drinking, relationships).
Only children's music is "Likely Safe". When in doubt, recommend review. Always return valid JSON only, no markdown."""


def format_track_list(tracks: Sequence[tuple[str, Optional[bool]]]) -> str:
    """
    Numbered track list with explicit markers.

    >>> format_track_list([("Intro", None), ("Song", True), ("Other", False)])
    '1. Intro\\n2. Song [EXPLICIT]\\n3. Other [CLEAN]'
    """
    lines: List[str] = []
    for index, (name, is_explicit) in enumerate(tracks, start=1):
        flag = ""
        if is_explicit is True:
            flag = " [EXPLICIT]"
        elif is_explicit is False:
            flag = " [CLEAN]"
        lines.append(f"{index}. {name}{flag}")
    return "\n".join(lines)


def build_album_overview_prompt(
    album_name: str,
    artist_name: str,
    tracks: Sequence[tuple[str, Optional[bool]]],
    editorial_notes: Optional[str] = None,
) -> str:
    explicit_count = sum(1 for _, is_explicit in tracks if is_explicit)
    editorial = f"\nCatalog description: {editorial_notes}\n" if editorial_notes else ""

    return f"""Album: "{album_name}" by {artist_name}
Tracks: {len(tracks)} total ({explicit_count} marked EXPLICIT){editorial}

{format_track_list(tracks)}

No explicit flag does not mean kid-friendly; many songs carry mature themes without one.

Provide:
1. artistProfile: what this artist typically makes, for whom, with which themes.
2. overallImpression: likely concerns given the titles and what you know of the album.
3. recommendation: "Likely Safe" (children's artists only), "Review Recommended",
   or "Detailed Review Required" (artist known for mature content).
4. suggestedAction: 1-2 sentences on why parents should or should not review it.

Return ONLY valid JSON:
{{
  "overallImpression": "string",
  "artistProfile": "string",
  "recommendation": "Likely Safe" | "Review Recommended" | "Detailed Review Required",
  "suggestedAction": "string"
}}"""


# ═══════════════════════════════════════════════════════════════════════════════
# DISCOVERY
# ═══════════════════════════════════════════════════════════════════════════════

DISCOVERY_SYSTEM_PROMPT = (
    "You are a family-friendly music expert. Only suggest music that is appropriate "
    "for children. Always return valid JSON only, with no markdown formatting."
)


def build_search_prompt(query: str) -> str:
    return f"""A parent is looking for music for their children.

Search query: "{query}"

Suggest 15-25 specific, family-friendly songs (no explicit lyrics, drugs, violence or sexual
content; no artists primarily known for explicit content) from a variety of artists.
Respect any era or decade in the query.

Return ONLY valid JSON:
{{
  "songs": [
    {{
      "songName": "Exact Song Title",
      "artistName": "Artist Name",
      "searchQuery": "Song Title Artist Name",
      "reason": "Why it fits (10 words max)",
      "year": "Release year or decade if known"
    }}
  ],
  "ageRange": "e.g. '5-12' or 'all ages'",
  "era": "time period from the query, or null",
  "genres": ["inferred genres"]
}}"""


def build_recommendation_prompt(
    kid_age: Optional[int],
    music_preferences: str,
    target_genres: Optional[Iterable[str]],
    restrictions: Optional[str],
) -> str:
    genres = ", ".join(target_genres) if target_genres else "Any appropriate genres"
    return f"""Recommend music for a child.

Kid's age: {kid_age or "Not specified"}
Music preferences: {music_preferences}
Target genres: {genres}
Restrictions: {restrictions or "General family-friendly content"}

Recommend 10-15 family-friendly artists, albums or genres. Consider the child's age and
avoid artists known for explicit content, even if they have some clean songs.

Return ONLY valid JSON:
{{
  "recommendations": [
    {{
      "type": "artist",
      "name": "Artist Name",
      "reason": "Why this fits",
      "ageAppropriate": true,
      "genres": ["Pop", "Kids"]
    }}
  ]
}}"""
