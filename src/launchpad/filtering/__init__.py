"""Deduplication, deadline filtering and ordering of aggregated opportunities."""

from launchpad.filtering.engine import MergeEngine, SortOrder, filter_by_type, search
from launchpad.filtering.rules import apply_deadline_rule, apply_query_rule, apply_type_rule

__all__ = [
    "MergeEngine",
    "SortOrder",
    "apply_deadline_rule",
    "apply_query_rule",
    "apply_type_rule",
    "filter_by_type",
    "search",
]
