"""Parsing helpers shared by the live source connectors."""

import html
import re
from datetime import datetime, timezone
from typing import Any, Optional

DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d %b %Y %H:%M:%S",
)
_TAG_PATTERN = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an upstream timestamp into an aware datetime.
    Accepts datetimes, epoch seconds, ISO-8601 strings (with 'Z', offsets or a space
    separator) and strings with a trailing ' UTC'. Naive values are read as UTC.
    Raises ValueError when nothing matches.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ValueError(f"Timestamp out of range: {value!r}") from e
    elif isinstance(value, str) and value.strip():
        parsed = _parse_timestamp_str(value.strip())
    else:
        raise ValueError(f"Unparseable timestamp: {value!r}")
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _parse_timestamp_str(value: str) -> datetime:
    text = value
    if text.upper().endswith(" UTC"):
        text = text[:-4].strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text[:19], fmt)
        except ValueError:
            continue
    raise ValueError(f"Unparseable timestamp: {value!r}")


def as_text(value: Any) -> str:
    """Raw value as stripped text; None becomes "" and numbers are stringified."""
    return "" if value is None else str(value).strip()


def strip_html(text: Optional[str]) -> str:
    """Drop tags, unescape entities and collapse whitespace."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", html.unescape(_TAG_PATTERN.sub("", text))).strip()


def truncate(text: str, limit: int, suffix: str = "...") -> str:
    """Cut text to at most `limit` chars including suffix."""
    if len(text) <= limit:
        return text
    return text[: limit - len(suffix)] + suffix


def hours_from(value: Any, unit_seconds: int) -> int:
    """Round a duration (given in units of `unit_seconds`) to whole hours."""
    return round(float(value) * unit_seconds / 3600)
