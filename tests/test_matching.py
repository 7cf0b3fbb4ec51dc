"""Tests for matching utilities."""

from launchpad.matching import phrase_matches, term_in_text


class TestTermInText:
    """Whole-word matching."""

    def test_standalone_word(self) -> None:
        assert term_in_text("codechef starters 160", "starters") is True

    def test_case_insensitive(self) -> None:
        assert term_in_text("Google Summer of Code", "GOOGLE") is True

    def test_substring_no_match(self) -> None:
        """'ai' in 'mountain' should NOT match."""
        assert term_in_text("mountain hackathon", "ai") is False

    def test_empty(self) -> None:
        assert term_in_text("", "ai") is False
        assert term_in_text("anything", "") is False


class TestPhraseMatches:
    """Phrase matching used by search."""

    def test_full_phrase(self) -> None:
        assert phrase_matches("open source mentorship program", "open source") is True

    def test_hyphen_equals_space(self) -> None:
        """'open-source' and 'open source' are the same phrase."""
        assert phrase_matches("Open-Source Fellowship", "open source") is True
        assert phrase_matches("open source fellowship", "open-source") is True

    def test_two_words_enough(self) -> None:
        """Multi-word: at least 2 words match."""
        assert phrase_matches("machine vision and learning", "machine learning") is True

    def test_one_word_insufficient(self) -> None:
        assert phrase_matches("machine shop internship", "machine learning") is False

    def test_empty_phrase(self) -> None:
        assert phrase_matches("anything", "  ") is False
