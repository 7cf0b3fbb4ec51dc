"""Merge engine: deduplicate, drop past deadlines, sort."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from launchpad.connectors.base import SourcePriority
from launchpad.models.opportunity import Opportunity, OpportunityType

from .rules import apply_deadline_rule, apply_query_rule, apply_type_rule

logger = logging.getLogger(__name__)


class SortOrder(str, Enum):
    """Result orderings offered to callers; DEADLINE is the pipeline default."""

    DEADLINE = "deadline"
    DEADLINE_DESC = "deadline-desc"
    TITLE = "title"


class MergeEngine:
    """
    Combines per-source batches into one ordered list.
    Duplicate titles resolve as "first seen wins", where "first" is defined by
    SourcePriority and then by position inside the source's batch.
    """

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime.now(timezone.utc)

    @staticmethod
    def deduplicate(records: Iterable[Opportunity]) -> list[Opportunity]:
        """Keep the first record for each normalized title, in arrival order."""
        seen: set[str] = set()
        unique: list[Opportunity] = []
        for opp in records:
            key = opp.title_key
            if key in seen:
                logger.debug("Dropping duplicate %r from %s", opp.title, opp.source)
                continue
            seen.add(key)
            unique.append(opp)
        return unique

    def filter_upcoming(self, records: Iterable[Opportunity]) -> list[Opportunity]:
        """Drop records whose deadline is before the engine's `now`."""
        return [opp for opp in records if apply_deadline_rule(opp, self.now)[0]]

    @staticmethod
    def sort(records: Iterable[Opportunity], order: SortOrder = SortOrder.DEADLINE) -> list[Opportunity]:
        """Sort by deadline ascending (default), descending, or title."""
        order = SortOrder(order)
        if order == SortOrder.TITLE:
            return sorted(records, key=lambda o: o.title.lower())
        return sorted(records, key=lambda o: o.deadline, reverse=order == SortOrder.DEADLINE_DESC)

    def merge(
        self,
        batches: dict[SourcePriority, list[Opportunity]] | Iterable[tuple[SourcePriority, list[Opportunity]]],
        order: SortOrder = SortOrder.DEADLINE,
    ) -> list[Opportunity]:
        """
        Concatenate batches in priority order, then dedup -> deadline filter -> sort.
        The result does not depend on the order in which batches were produced.
        """
        items = batches.items() if isinstance(batches, dict) else batches
        ordered = sorted(items, key=lambda item: item[0])
        combined = [opp for _, batch in ordered for opp in batch]
        return self.sort(self.filter_upcoming(self.deduplicate(combined)), order)


def filter_by_type(records: Iterable[Opportunity], wanted: Optional[OpportunityType]) -> list[Opportunity]:
    """Keep one type only; None keeps everything."""
    return [opp for opp in records if apply_type_rule(opp, wanted)[0]]


def search(records: Iterable[Opportunity], query: Optional[str]) -> list[Opportunity]:
    """Keep records matching every search term."""
    return [opp for opp in records if apply_query_rule(opp, query)[0]]
