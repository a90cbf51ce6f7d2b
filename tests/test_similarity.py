"""Tests for the edit-distance similarity scorer."""

import pytest

from bank_gl_match.matching.similarity import similarity


class TestSimilarity:
    """Tests for similarity()."""

    @pytest.mark.parametrize("value", ["JOHN", "a", "BANK OF AMERICA"])
    def test_identical_strings_score_one(self, value):
        assert similarity(value, value) == 1.0

    def test_comparison_is_case_insensitive(self):
        assert similarity("john", "JOHN") == 1.0
        assert similarity("Jon", "JOHN") == similarity("JON", "JOHN")

    @pytest.mark.parametrize("first,second", [("JOHN", ""), ("", "JOHN"), ("", "")])
    def test_empty_input_scores_zero(self, first, second):
        assert similarity(first, second) == 0.0

    def test_single_edit(self):
        # One insertion over the longer length of 4
        assert similarity("JON", "JOHN") == pytest.approx(0.75)

    def test_classic_levenshtein_distance(self):
        # kitten -> sitting needs 3 edits, longer length 7
        assert similarity("KITTEN", "SITTING") == pytest.approx(4 / 7)

    def test_completely_different_strings(self):
        assert similarity("JOHN", "MARY") == 0.0

    def test_score_is_bounded(self):
        for first, second in [("A", "ABCDEFGH"), ("CHASE", "CHSE"), ("X", "Y")]:
            assert 0.0 <= similarity(first, second) <= 1.0
