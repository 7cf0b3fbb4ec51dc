"""Normalized opportunity model shared by every source."""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LOCATION = "Virtual"
DEFAULT_TAG = "General"

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_title(title: Optional[str]) -> str:
    """Lowercase and strip every non-alphanumeric character ("AI Hack!" -> "aihack")."""
    return _NON_ALNUM.sub("", (title or "").lower())


class OpportunityType(str, Enum):
    """Kind of listing."""

    HACKATHON = "hackathon"
    INTERNSHIP = "internship"
    CONTEST = "contest"


class Opportunity(BaseModel):
    """Canonical listing record produced by the store, live sources and fallback data."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique within one aggregation result, e.g. 'codeforces-2041'")
    title: str
    type: OpportunityType
    organization: str = ""
    description: str = ""
    # Contest sources put the start time here; hackathons/internships the application cutoff.
    deadline: datetime
    apply_url: str = Field(default="", alias="applyUrl")
    location: Optional[str] = DEFAULT_LOCATION
    prize: Optional[str] = None
    tags: list[str] = Field(default_factory=lambda: [DEFAULT_TAG])
    source: str = Field(..., description="Provenance label, e.g. 'Codeforces (Live)'")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("deadline")
    @classmethod
    def _deadline_aware(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @field_validator("location", mode="before")
    @classmethod
    def _default_location(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_LOCATION
        return value

    @field_validator("prize", mode="before")
    @classmethod
    def _blank_prize(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _default_tags(cls, value: Any) -> Any:
        if value is None:
            return [DEFAULT_TAG]
        if isinstance(value, (list, tuple)):
            tags = [str(t).strip() for t in value if t is not None and str(t).strip()]
            return tags or [DEFAULT_TAG]
        return value

    @property
    def title_key(self) -> str:
        """Deduplication key for this record."""
        return normalize_title(self.title)
