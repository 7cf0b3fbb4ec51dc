"""Raw upstream record before normalization."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RawRecord(BaseModel):
    """
    One item exactly as a source returned it.
    `position` is the index in the source's response, used to synthesize ids.
    """

    model_config = ConfigDict(extra="allow")

    data: dict[str, Any] = Field(default_factory=dict)
    position: int = 0
