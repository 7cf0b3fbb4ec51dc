"""Firecrawl search connector: hackathons found via web search.

Optional source. It is only registered for a run when an API key is configured.
Each configured query is one POST to /v1/search; queries run concurrently and a
failing query only loses its own results:
1. POST {"query", "limit", "scrapeOptions": {"formats": ["markdown"]}} with bearer auth
2. Envelope {"success": true, "data": [{"title", "description", "url", "markdown"}, ...]}
3. Dates, location, prize and tags are pulled out of the markdown text
"""

import asyncio
import logging
import re
from datetime import datetime
from typing import Optional

import httpx

from launchpad.config import DEFAULT_FIRECRAWL_QUERIES, SearchQuery
from launchpad.connectors.base import BaseConnector, SourceError, SourcePriority
from launchpad.connectors.parsers import as_text, truncate
from launchpad.models.opportunity import Opportunity, OpportunityType
from launchpad.models.raw import RawRecord

from .parsers import extract_deadline, extract_location, extract_prize, extract_tags

logger = logging.getLogger(__name__)

TITLE_LIMIT = 100
DESCRIPTION_LIMIT = 300
DEFAULT_DESCRIPTION = "Join this exciting hackathon opportunity!"


def _slug(label: str) -> str:
    return re.sub(r"\s+", "-", label.strip().lower())


class FirecrawlConnector(BaseConnector):
    """Hackathon listings discovered through the Firecrawl search API."""

    source_id = "firecrawl"
    label = "Web Search (Live)"
    priority = SourcePriority.FIRECRAWL

    SEARCH_URL = "https://api.firecrawl.dev/v1/search"
    RESULTS_PER_QUERY = 10

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str] = None,
        queries: Optional[list[SearchQuery]] = None,
        now: Optional[datetime] = None,
    ):
        """
        Args:
            client: Shared async client
            api_key: Firecrawl API key; search() raises SourceError without one
            queries: (query, label) pairs; label becomes organization and provenance
            now: Reference time for extracted and placeholder deadlines
        """
        super().__init__(client, now)
        self._api_key = api_key
        self._queries = queries if queries is not None else list(DEFAULT_FIRECRAWL_QUERIES)

    async def _post_search(self, query: str) -> dict:
        """POST one search request."""
        resp = await self._client.post(
            self.SEARCH_URL,
            headers={"Authorization": f"Bearer {self._api_key}"},
            json={
                "query": query,
                "limit": self.RESULTS_PER_QUERY,
                "scrapeOptions": {"formats": ["markdown"]},
            },
        )
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, dict) or not payload.get("success"):
            raise SourceError(f"firecrawl: search for {query!r} returned success=false")
        return payload

    async def _search_single_query(self, search: SearchQuery) -> list[dict]:
        """Run one query; failures are logged and yield no results."""
        try:
            payload = await self._post_search(search.query)
        except (httpx.HTTPError, SourceError, ValueError) as e:
            logger.warning("Search failed for %s: %s", search.label, e)
            return []
        results = payload.get("data") or []
        logger.info("Found %d results for %s", len(results), search.label)
        return [
            {**item, "_label": search.label, "_index": i}
            for i, item in enumerate(results)
            if isinstance(item, dict)
        ]

    async def search(self) -> list[RawRecord]:
        if not self._api_key:
            raise SourceError("firecrawl: no API key configured")
        batches = await asyncio.gather(*(self._search_single_query(q) for q in self._queries))
        items = [item for batch in batches for item in batch]
        return [RawRecord(data=item, position=i) for i, item in enumerate(items)]

    def normalize(self, raw: RawRecord, now: Optional[datetime] = None) -> Opportunity:
        """Convert one search hit; fields not present in the text get placeholder values."""
        d = raw.data
        label = as_text(d.get("_label")) or "Web Search"
        index = int(d.get("_index", raw.position))
        now = now or self._clock()
        markdown = as_text(d.get("markdown"))
        content = markdown or as_text(d.get("description"))

        title = as_text(d.get("title")) or f"Hackathon from {label}"
        description = as_text(d.get("description")) or markdown[:200].strip() or DEFAULT_DESCRIPTION

        return Opportunity(
            id=f"scraped-{_slug(label)}-{index}",
            title=truncate(title, TITLE_LIMIT),
            type=OpportunityType.HACKATHON,
            organization=label,
            description=truncate(description, DESCRIPTION_LIMIT),
            deadline=extract_deadline(content, now, index),
            apply_url=as_text(d.get("url")),
            location=extract_location(content),
            prize=extract_prize(content),
            tags=extract_tags(content),
            source=f"{label} (Live)",
        )
