"""Abstract base class for live source connectors."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import IntEnum
from typing import Optional

import httpx

from launchpad.models.opportunity import Opportunity
from launchpad.models.raw import RawRecord

logger = logging.getLogger(__name__)

# Raised by normalize (or a per-record filter) for one unusable record.
RECORD_ERRORS = (ValueError, TypeError, KeyError, AttributeError)


class SourcePriority(IntEnum):
    """
    Merge order of sources. When two records share a normalized title,
    the one from the lower-valued source is kept.
    """

    DATABASE = 0
    CODEFORCES = 10
    CODECHEF = 20
    HACKEREARTH = 30
    KONTESTS = 40
    FIRECRAWL = 50
    FALLBACK = 100


class SourceError(RuntimeError):
    """A source answered, but not with the envelope we expect."""


class BaseConnector(ABC):
    """
    Standard interface for live listing sources.
    Subclasses implement search (one HTTP attempt, raw records) and normalize (one record).
    """

    source_id: str = ""
    label: str = ""
    priority: SourcePriority = SourcePriority.FALLBACK

    def __init__(self, client: httpx.AsyncClient, now: Optional[datetime] = None):
        """
        Args:
            client: Shared async client for the cycle
            now: Reference time of the aggregation run; wall clock when omitted
        """
        self._client = client
        self._now = now

    def _clock(self) -> datetime:
        """Reference time of this run."""
        return self._now or datetime.now(timezone.utc)

    @abstractmethod
    async def search(self) -> list[RawRecord]:
        """
        Fetch listings from the source; returns raw records in response order.
        Raises httpx.HTTPError on network/status failure, SourceError on a bad envelope.
        """

    @abstractmethod
    def normalize(self, raw: RawRecord) -> Opportunity:
        """
        Convert one raw record to an Opportunity.
        Raises ValueError, TypeError, KeyError or AttributeError when the record has an
        unusable shape or value types.
        """

    async def _get_json(self, url: str, **kwargs):
        """GET url and decode the JSON body."""
        response = await self._client.get(url, **kwargs)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise SourceError(f"{self.source_id}: response is not JSON") from e

    async def fetch_all(self) -> list[Opportunity]:
        """
        Search, then normalize each record.
        Records that fail normalization are skipped; the rest of the batch survives.
        """
        results: list[Opportunity] = []
        for raw in await self.search():
            try:
                results.append(self.normalize(raw))
            except RECORD_ERRORS as e:
                logger.debug("Skipping %s record %d: %s", self.source_id, raw.position, e)
        return results
