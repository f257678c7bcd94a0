"""Tests for the fluency heuristics."""

import pytest

from stutter_coach.analysis.heuristics import analyze, count_fillers, count_repeats, tokenize


class TestTokenize:
    def test_case_folds_and_drops_empty_tokens(self):
        assert tokenize("  Hello   WORLD \n again ") == ["hello", "world", "again"]

    def test_empty_text(self):
        assert tokenize("") == []


class TestAnalyze:
    def test_empty_text_is_perfect(self):
        result = analyze("")
        assert result.score == 100
        assert result.repeats == 0
        assert result.fillers == 0

    def test_clean_sentence(self):
        result = analyze("I went to the store yesterday")
        assert result.score == 100

    def test_repeat_costs_ten(self):
        result = analyze("I I went to the store")
        assert result.repeats == 1
        assert result.score == 90

    def test_repeat_is_case_insensitive(self):
        assert analyze("The the cat").repeats == 1

    def test_filler_costs_five(self):
        result = analyze("so um I went home")
        assert result.fillers == 1
        assert result.score == 95

    def test_leading_filler_is_counted(self):
        assert analyze("Um hello there").fillers == 1

    def test_repeated_fillers_count_both_ways(self):
        result = analyze("uh uh")
        assert result.fillers == 2
        assert result.repeats == 1
        assert result.score == 80

    def test_score_floor(self):
        result = analyze("um " * 30)
        assert result.score == 30

    @pytest.mark.parametrize(
        "text",
        ["", "hello", "like like like like", "hmm erm uh um", "a a a a a a a a a a a a"],
    )
    def test_score_in_range_and_perfect_only_when_clean(self, text):
        result = analyze(text)
        assert 30 <= result.score <= 100
        assert (result.score == 100) == (result.repeats == 0 and result.fillers == 0)


class TestCounters:
    def test_count_repeats_window_of_one(self):
        assert count_repeats(["a", "b", "a"]) == 0
        assert count_repeats(["a", "a", "a"]) == 2

    def test_count_fillers(self):
        assert count_fillers(["like", "hmm", "okay"]) == 2
