"""Text matching used by the free-text search filter."""

import re

_SEPARATORS = re.compile(r"[-_/]+")


def _fold(text: str) -> str:
    """Lowercase and treat '-', '_' and '/' as spaces ("Open-Source" -> "open source")."""
    return _SEPARATORS.sub(" ", (text or "").lower())


def term_in_text(text: str, term: str) -> bool:
    """True if term occurs as a whole word ("ai" is not found in "mountain")."""
    term = _fold(term).strip()
    if not term or not text:
        return False
    return re.search(rf"\b{re.escape(term)}\b", _fold(text)) is not None


def phrase_matches(text: str, phrase: str) -> bool:
    """
    Single word: whole-word match.
    Several words: the phrase itself, or at least two of its words longer than two letters.
    """
    words = _fold(phrase).split()
    if not words:
        return False
    if len(words) == 1:
        return term_in_text(text, words[0])
    if " ".join(words) in _fold(text):
        return True
    hits = [w for w in words if len(w) > 2 and term_in_text(text, w)]
    return len(hits) >= 2
