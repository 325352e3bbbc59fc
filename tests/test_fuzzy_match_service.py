"""Tests for name normalization, variants and similarity scoring."""

import pytest

from safetunes.shared.adapters.lyrics_adapter import LyricTrack
from safetunes.shared.services.fuzzy_match_service import FuzzyMatchService


class TestNormalizeCacheKey:
    def test_strips_trailing_qualifiers(self):
        assert FuzzyMatchService.normalize_cache_key("The Beatles (Remastered)") == "the beatles"
        assert FuzzyMatchService.normalize_cache_key("Song [Live] (2009 Remaster)") == "song"

    def test_never_strips_to_empty(self):
        assert FuzzyMatchService.normalize_cache_key("(Intro)") == "intro"

    def test_punctuation_and_whitespace(self):
        assert FuzzyMatchService.normalize_cache_key("  Don't Stop   Me!  ") == "dont stop me"

    def test_keeps_unicode_letters(self):
        assert FuzzyMatchService.normalize_cache_key("Beyoncé") == "beyoncé"

    def test_spellings_share_a_key(self):
        a = FuzzyMatchService.normalize_cache_key("Let It Be (Remastered 2009)")
        b = FuzzyMatchService.normalize_cache_key("let it be")
        assert a == b


class TestAlternatives:
    def test_artist_featuring_dropped(self):
        assert FuzzyMatchService.artist_alternatives("Drake feat. Rihanna") == [
            "Drake feat. Rihanna",
            "Drake",
        ]

    def test_artist_ampersand(self):
        assert FuzzyMatchService.artist_alternatives("Simon & Garfunkel") == [
            "Simon & Garfunkel",
            "Simon",
        ]

    def test_plain_artist_has_one_spelling(self):
        assert FuzzyMatchService.artist_alternatives("Adele") == ["Adele"]

    def test_track_parenthetical_dropped(self):
        assert FuzzyMatchService.track_alternatives("Yesterday (Remastered 2009)") == [
            "Yesterday (Remastered 2009)",
            "Yesterday",
        ]

    def test_track_dash_suffix_dropped(self):
        alternatives = FuzzyMatchService.track_alternatives("Hey Jude - Remastered 2015")
        assert alternatives[0] == "Hey Jude - Remastered 2015"
        assert "Hey Jude" in alternatives
        assert len(alternatives) == len(set(alternatives))

    def test_combinations_are_track_major_and_capped(self):
        combos = FuzzyMatchService.candidate_combinations(
            "Yesterday (Remastered 2009)", "Drake feat. Rihanna", limit=3
        )
        assert combos == [
            ("Yesterday (Remastered 2009)", "Drake feat. Rihanna"),
            ("Yesterday (Remastered 2009)", "Drake"),
            ("Yesterday", "Drake feat. Rihanna"),
        ]


class TestSimilarity:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("Hello", "hello!", 100),
            ("", "", 100),
            ("", "abc", 0),
            ("abc", "", 0),
            ("Let It Be", "Let It Be Remastered", 80),
            ("kitten", "sitting", 57),
        ],
    )
    def test_similarity(self, a, b, expected):
        assert FuzzyMatchService.similarity(a, b) == expected

    def test_symmetric(self):
        assert FuzzyMatchService.similarity("sitting", "kitten") == FuzzyMatchService.similarity(
            "kitten", "sitting"
        )

    def test_levenshtein(self):
        assert FuzzyMatchService.levenshtein("kitten", "sitting") == 3
        assert FuzzyMatchService.levenshtein("", "abc") == 3
        assert FuzzyMatchService.levenshtein("same", "same") == 0

    def test_combined_score_weights(self):
        assert FuzzyMatchService.combined_score(100, 0) == pytest.approx(60.0)
        assert FuzzyMatchService.combined_score(0, 100) == pytest.approx(40.0)


class TestBestMatch:
    def test_exact_candidate_wins(self):
        candidates = [
            LyricTrack(track_id=1, track_name="Yesterday - Live", artist_name="Tribute Band"),
            LyricTrack(track_id=2, track_name="Yesterday", artist_name="The Beatles"),
        ]
        match = FuzzyMatchService.best_match(candidates, "Yesterday", "The Beatles")
        assert match is not None
        assert match.candidate.track_id == 2
        assert match.score == pytest.approx(100.0)

    def test_ties_keep_the_first(self):
        candidates = [
            LyricTrack(track_id=1, track_name="Yesterday", artist_name="The Beatles"),
            LyricTrack(track_id=2, track_name="Yesterday", artist_name="The Beatles"),
        ]
        match = FuzzyMatchService.best_match(candidates, "Yesterday", "The Beatles")
        assert match.candidate.track_id == 1

    def test_below_threshold_is_no_match(self):
        candidates = [LyricTrack(track_id=1, track_name="Yesterday", artist_name="The Beatles")]
        assert FuzzyMatchService.best_match(candidates, "Yesterday", "The Beatles", threshold=101) is None

    def test_no_candidates(self):
        assert FuzzyMatchService.best_match([], "Yesterday", "The Beatles") is None


class TestCleanLyrics:
    def test_disclaimer_and_ellipsis_removed(self):
        raw = (
            "Yesterday, all my troubles seemed so far away\n"
            "Now it looks as though they're here to stay...\n\n"
            "******* This Lyrics is NOT for Commercial use *******"
        )
        cleaned = FuzzyMatchService.clean_lyrics(raw)
        assert "Commercial" not in cleaned
        assert not cleaned.endswith("...")
        assert cleaned.startswith("Yesterday, all my troubles")
