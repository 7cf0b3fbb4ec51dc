"""Filter rules: each returns (passed, explanation)."""

from datetime import datetime, timezone
from typing import Optional

from launchpad.matching import phrase_matches
from launchpad.models.opportunity import Opportunity, OpportunityType


def _normalize_for_match(text: Optional[str]) -> str:
    """Lowercase and strip for matching; empty string if None."""
    return (text or "").lower().strip()


def apply_deadline_rule(opp: Opportunity, now: datetime) -> tuple[bool, str]:
    """
    Deadline filter: drop opportunities whose deadline is strictly before now.
    Compares absolute instants; naive datetimes are read as UTC.
    """
    now = now if now.tzinfo else now.replace(tzinfo=timezone.utc)
    if opp.deadline < now:
        return False, f"Excluded: deadline {opp.deadline.isoformat()} has passed"
    return True, f"Deadline {opp.deadline.isoformat()} is upcoming"


def apply_type_rule(opp: Opportunity, wanted: Optional[OpportunityType]) -> tuple[bool, str]:
    """Type filter: no type selected means every type passes."""
    if wanted is None:
        return True, "Type filter not set"
    if opp.type == wanted:
        return True, f"Matches type: {wanted.value}"
    return False, f"Excluded: type {opp.type.value} is not {wanted.value}"


def apply_query_rule(opp: Opportunity, query: Optional[str]) -> tuple[bool, str]:
    """
    Free-text search over title, organization, description and tags.
    Every whitespace-separated term must match somewhere (word boundary).
    """
    terms = _normalize_for_match(query).split()
    if not terms:
        return True, "Search query not set"
    text = " ".join(
        _normalize_for_match(part)
        for part in (opp.title, opp.organization, opp.description, " ".join(opp.tags))
    )
    missing = [t for t in terms if not phrase_matches(text, t)]
    if missing:
        return False, f"Excluded: no match for {', '.join(missing)}"
    return True, f"Matches query: {query}"
