"""Field extraction from loosely structured search results (title/description/markdown)."""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

DEFAULT_SEARCH_TAG = "Innovation"
MAX_TAGS = 4

_NUMERIC_DATE = re.compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})\b")
_ISO_DATE = re.compile(r"\b(\d{4})[/-](\d{1,2})[/-](\d{1,2})\b")
_MONTH_DATE = re.compile(
    r"\b(January|February|March|April|May|June|July|August|September|October|November|December)"
    r"\s+(\d{1,2}),?\s+(\d{4})\b",
    re.IGNORECASE,
)

_LOCATION_PATTERNS = (
    re.compile(r"(?:Location|Venue|Where):\s*([^,\n]+)", re.IGNORECASE),
    re.compile(r"\b(?:in|at)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*(?:,\s*[A-Z]{2})?)"),
)

_PRIZE_PATTERNS = (
    re.compile(r"\$[\d,]+(?:\s*(?:in\s+)?prizes?)?", re.IGNORECASE),
    re.compile(r"₹[\d,]+(?:\s*(?:in\s+)?prizes?)?", re.IGNORECASE),
)

# Tag -> keywords (substring match on lowercased content)
TAG_KEYWORDS: dict[str, tuple[str, ...]] = {
    "AI": ("artificial intelligence", "machine learning", "deep learning", " ai ", " ml "),
    "Web3": ("web3", "blockchain", "crypto", "defi", "nft", "ethereum"),
    "Mobile": ("mobile", "ios", "android", "flutter", "react native"),
    "Healthcare": ("health", "medical", "biotech"),
    "FinTech": ("fintech", "finance", "banking", "payment"),
    "EdTech": ("education", "edtech", "learning", "students"),
    "Open Source": ("open source", "oss", "github"),
    "Climate": ("climate", "sustainability", "green", "environment"),
}


def _candidate_dates(content: str) -> list[datetime]:
    """All dates found in content, in textual order per pattern family."""
    found: list[datetime] = []
    for m in _MONTH_DATE.finditer(content):
        try:
            found.append(datetime.strptime(f"{m.group(1)} {m.group(2)} {m.group(3)}", "%B %d %Y"))
        except ValueError:
            continue
    for m in _ISO_DATE.finditer(content):
        try:
            found.append(datetime(int(m.group(1)), int(m.group(2)), int(m.group(3))))
        except ValueError:
            continue
    for m in _NUMERIC_DATE.finditer(content):
        month, day, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if year < 100:
            year += 2000
        try:
            # US ordering first (month/day), then day/month.
            found.append(datetime(year, month, day))
        except ValueError:
            try:
                found.append(datetime(year, day, month))
            except ValueError:
                continue
    return [d.replace(tzinfo=timezone.utc) for d in found]


def extract_deadline(content: str, now: datetime, index: int) -> datetime:
    """
    First date in content that lies in the future.
    Without one, results are spread weekly: now + (index + 1) weeks.
    """
    for candidate in _candidate_dates(content or ""):
        if candidate > now:
            return candidate
    return now + timedelta(weeks=index + 1)


def extract_location(content: str) -> Optional[str]:
    """Location from 'Location:/Venue:/Where:' labels or an 'in/at City' phrase."""
    for pattern in _LOCATION_PATTERNS:
        m = pattern.search(content or "")
        if m:
            return m.group(1).strip()
    return None


def extract_prize(content: str) -> Optional[str]:
    """First dollar or rupee amount mentioned."""
    for pattern in _PRIZE_PATTERNS:
        m = pattern.search(content or "")
        if m:
            return m.group(0).strip().rstrip(",")
    return None


def extract_tags(content: str) -> list[str]:
    """Topic tags from keyword hits, at most MAX_TAGS; never empty."""
    lowered = f" {(content or '').lower()} "
    tags = [tag for tag, keywords in TAG_KEYWORDS.items() if any(k in lowered for k in keywords)]
    return tags[:MAX_TAGS] or [DEFAULT_SEARCH_TAG]
