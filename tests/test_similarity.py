"""Tests for edit distance and string similarity."""

import pytest

from reference_recon.matching.similarity import levenshtein_distance, similarity


class TestLevenshteinDistance:
    """Test levenshtein_distance."""

    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ("", "", 0),
            ("abc", "", 3),
            ("", "abc", 3),
            ("kitten", "sitting", 3),
            ("flaw", "lawn", 2),
            ("ACME Corp", "ACME Corp.", 1),
            ("ab", "ba", 2),  # no transposition operation
            ("same", "same", 0),
        ],
    )
    def test_known_distances(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected

    def test_is_case_sensitive(self):
        assert levenshtein_distance("ABC", "abc") == 3


class TestSimilarity:
    """Test similarity."""

    def test_near_identical_names(self):
        score = similarity("ACME Corp", "ACME Corp.")

        assert score == pytest.approx(0.9)
        assert 0.85 < score < 1.0

    def test_empty_strings_are_identical(self):
        assert similarity("", "") == 1.0

    def test_empty_against_text_is_zero(self):
        assert similarity("abc", "") == 0.0

    def test_no_normalization(self):
        assert similarity("ABC", "abc") == 0.0

    @pytest.mark.parametrize(
        "a,b",
        [
            ("consulting fee", "Consulting fee March"),
            ("kitten", "sitting"),
            ("", "x"),
            ("Payment INV-1", "payment inv-1"),
            ("über", "uber"),
        ],
    )
    def test_bounded_and_symmetric(self, a, b):
        forward = similarity(a, b)

        assert 0.0 <= forward <= 1.0
        assert forward == similarity(b, a)

    @pytest.mark.parametrize("text", ["", "a", "Wire transfer BATCH 00042"])
    def test_identity(self, text):
        assert similarity(text, text) == 1.0
