"""
Discovery Schemas

AI music search and recommendations. The AI output uses camelCase keys;
both spellings are accepted.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


class SearchRequest(BaseModel):
    query: str = Field(min_length=1, max_length=500)


class SongSuggestion(BaseModel):
    song_name: str = Field(validation_alias=AliasChoices("songName", "song_name"))
    artist_name: str = Field(validation_alias=AliasChoices("artistName", "artist_name"))
    search_query: Optional[str] = Field(
        None, validation_alias=AliasChoices("searchQuery", "search_query")
    )
    reason: Optional[str] = None
    year: Optional[str] = None


class SearchResponse(BaseModel):
    query: str
    suggestions: List[SongSuggestion]
    age_range: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    from_cache: bool


class RecommendationRequest(BaseModel):
    kid_age: Optional[int] = Field(None, ge=0, le=18)
    music_preferences: str = Field(min_length=1, max_length=1000)
    target_genres: List[str] = Field(default_factory=list)
    restrictions: Optional[str] = Field(None, max_length=1000)


class RecommendationItem(BaseModel):
    type: str
    name: str
    reason: Optional[str] = None
    age_appropriate: bool = Field(
        True, validation_alias=AliasChoices("ageAppropriate", "age_appropriate")
    )
    genres: List[str] = Field(default_factory=list)


class RecommendationResponse(BaseModel):
    recommendations: List[RecommendationItem]
    from_cache: bool
