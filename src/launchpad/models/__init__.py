"""Data models for normalized opportunities and raw source records."""

from launchpad.models.opportunity import (
    DEFAULT_LOCATION,
    DEFAULT_TAG,
    Opportunity,
    OpportunityType,
    normalize_title,
)
from launchpad.models.raw import RawRecord

__all__ = [
    "DEFAULT_LOCATION",
    "DEFAULT_TAG",
    "Opportunity",
    "OpportunityType",
    "RawRecord",
    "normalize_title",
]
