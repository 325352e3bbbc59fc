"""Tests for turning raw AI output into review schemas."""

import json

from safetunes.shared.models.enums import AlbumRecommendation, ConcernSeverity, OverallRating
from safetunes.shared.utils.review_parsing import (
    Parsed,
    ParseError,
    parse_album_overview,
    parse_review,
    strip_code_fences,
)


REVIEW = {
    "summary": "A gentle song about loss.",
    "positiveAspects": ["Reflective", "No profanity"],
    "inappropriateContent": [
        {
            "category": "mature themes",
            "severity": "mild",
            "quote": "I said something wrong",
            "context": "Regret over a breakup",
        }
    ],
    "overallRating": "appropriate",
    "ageRecommendation": "All ages",
}


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


class TestParseReview:
    def test_camel_case_payload(self):
        result = parse_review(json.dumps(REVIEW))

        assert isinstance(result, Parsed)
        review = result.value
        assert review.overall_rating == OverallRating.APPROPRIATE
        assert review.positive_aspects == ["Reflective", "No profanity"]
        assert review.inappropriate_content[0].severity == ConcernSeverity.MILD
        assert review.age_recommendation == "All ages"

    def test_fenced_payload(self):
        result = parse_review(f"```json\n{json.dumps(REVIEW)}\n```")
        assert isinstance(result, Parsed)

    def test_empty_concerns_is_clean_verdict(self):
        payload = {**REVIEW, "inappropriateContent": []}
        result = parse_review(json.dumps(payload))
        assert result.value.inappropriate_content == []

    def test_invalid_json(self):
        result = parse_review("I think this song is fine.")
        assert isinstance(result, ParseError)
        assert result.reason.startswith("Invalid JSON")
        assert result.raw == "I think this song is fine."

    def test_not_an_object(self):
        result = parse_review("[1, 2, 3]")
        assert isinstance(result, ParseError)

    def test_unknown_rating(self):
        payload = {**REVIEW, "overallRating": "totally-fine"}
        result = parse_review(json.dumps(payload))
        assert isinstance(result, ParseError)
        assert "shape" in result.reason


class TestParseAlbumOverview:
    def test_overview(self):
        payload = {
            "overallImpression": "Upbeat pop record.",
            "artistProfile": "Family-friendly pop act.",
            "recommendation": "Likely Safe",
            "suggestedAction": "Approve",
        }
        result = parse_album_overview(json.dumps(payload))

        assert isinstance(result, Parsed)
        assert result.value.recommendation == AlbumRecommendation.LIKELY_SAFE
        assert result.value.suggested_action == "Approve"

    def test_missing_recommendation(self):
        result = parse_album_overview(json.dumps({"overallImpression": "Hmm"}))
        assert isinstance(result, ParseError)
