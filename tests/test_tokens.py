"""Tests for the heuristic token estimator and the shared text helpers."""

import pytest

from storyloom.context.tokens import estimate_tokens
from storyloom.utils.text import count_words, split_counts


class TestEstimateTokens:

    @pytest.mark.parametrize("text", [None, "", "   ", "\n\t  \n"])
    def test_blank_input_is_zero(self, text):
        assert estimate_tokens(text) == 0

    def test_english_words(self):
        # 6 words * 1.3 = 7.8 -> 8
        assert estimate_tokens("Hello world this is a test") == 8

    def test_cjk_characters(self):
        # 6 ideographs * 1.5 = 9
        assert estimate_tokens("从前有一座山") == 9

    def test_ten_words_has_no_float_drift(self):
        # 10 * 1.3 is exactly 13, not 14
        assert estimate_tokens(" ".join(["word"] * 10)) == 13

    def test_mixed_text(self):
        # 2 ideographs (3.0) + "Lin" "Feng" (2.6) = 5.6 -> 6
        assert estimate_tokens("Lin Feng 出发") == 6

    def test_punctuation_next_to_cjk_counts_as_a_word(self):
        # "山。" -> 1 ideograph + "。" as its own word: 1.5 + 1.3 = 2.8 -> 3
        assert estimate_tokens("山。") == 3

    def test_extension_a_and_compatibility_ranges(self):
        assert estimate_tokens("㐀豈") == 3

    def test_deterministic(self):
        text = "The 少年 walked into the 山门 at dusk."
        assert estimate_tokens(text) == estimate_tokens(text)

    def test_longer_text_never_costs_less(self):
        base = "a quiet village"
        assert estimate_tokens(base + " at dawn") > estimate_tokens(base)


class TestTextHelpers:

    def test_split_counts(self):
        assert split_counts("Hello 世界 again") == (2, 2)

    def test_count_words_mixes_ideographs_and_words(self):
        assert count_words("Hello 世界") == 3

    def test_count_words_empty(self):
        assert count_words(None) == 0
        assert count_words("") == 0
