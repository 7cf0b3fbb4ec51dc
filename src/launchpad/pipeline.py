"""Pipeline orchestration: curated store -> live sources -> fallback -> merge."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx
from pydantic import BaseModel, Field

from launchpad.config import Settings
from launchpad.connectors.base import BaseConnector, SourcePriority
from launchpad.connectors.registry import ConnectorRegistry
from launchpad.fallback import load_fallback
from launchpad.filtering import MergeEngine, SortOrder
from launchpad.models.opportunity import Opportunity
from launchpad.store import OpportunityStore

logger = logging.getLogger(__name__)

PartialCallback = Callable[[list[Opportunity]], None]


class SourceReport(BaseModel):
    """Outcome of one source in one run. Diagnostic only; failures never set the run error."""

    source_id: str
    label: str
    count: int = 0
    ok: bool = True
    error: Optional[str] = None


class AggregationResult(BaseModel):
    """Merged, deduplicated, upcoming opportunities plus run diagnostics."""

    opportunities: list[Opportunity] = Field(default_factory=list)
    error: Optional[str] = None
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sources: list[SourceReport] = Field(default_factory=list)


def build_connectors(
    settings: Settings, client: httpx.AsyncClient, now: Optional[datetime] = None
) -> list[BaseConnector]:
    """
    Instantiate enabled live connectors sharing one client and one reference time.
    Web search is skipped without an API key.
    """
    connectors: list[BaseConnector] = []
    for source_id in settings.sources:
        if source_id == "firecrawl":
            if not settings.firecrawl_api_key:
                logger.info("FIRECRAWL_API_KEY not set, skipping web search source")
                continue
            connectors.append(
                ConnectorRegistry.get(
                    source_id,
                    client=client,
                    api_key=settings.firecrawl_api_key,
                    queries=settings.firecrawl_queries,
                    now=now,
                )
            )
        else:
            connectors.append(ConnectorRegistry.get(source_id, client=client, now=now))
    return connectors


async def _fetch_source(connector: BaseConnector, timeout: float) -> tuple[list[Opportunity], SourceReport]:
    """One attempt at one source; any failure yields zero records."""
    try:
        records = await asyncio.wait_for(connector.fetch_all(), timeout)
    except Exception as e:
        reason = str(e) or type(e).__name__
        logger.warning("%s fetch failed: %s", connector.source_id, reason)
        return [], SourceReport(source_id=connector.source_id, label=connector.label, ok=False, error=reason)
    logger.info("%s: %d opportunities", connector.source_id, len(records))
    return records, SourceReport(source_id=connector.source_id, label=connector.label, count=len(records))


def _read_store(settings: Settings, store: Optional[OpportunityStore], now: datetime) -> list[Opportunity]:
    store = store if store is not None else OpportunityStore(settings.db_path)
    return store.list_active(now)


async def aggregate(
    settings: Optional[Settings] = None,
    *,
    store: Optional[OpportunityStore] = None,
    now: Optional[datetime] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    on_partial: Optional[PartialCallback] = None,
    order: SortOrder = SortOrder.DEADLINE,
) -> AggregationResult:
    """
    Run one aggregation cycle.

    The curated store is read first and handed to on_partial for an early render.
    If that read fails, the error is recorded and live sources plus fallback still run.
    Live sources are queried concurrently, each with its own timeout.
    """
    settings = settings or Settings()
    now = now or datetime.now(timezone.utc)
    engine = MergeEngine(now)
    batches: list[tuple[SourcePriority, list[Opportunity]]] = []
    reports: list[SourceReport] = []
    error: Optional[str] = None

    try:
        db_records = await asyncio.to_thread(_read_store, settings, store, now)
    except Exception as e:
        logger.error("Failed to read curated opportunities: %s", e)
        error = f"Failed to fetch opportunities: {e}"
        db_records = []
        reports.append(SourceReport(source_id="database", label="Admin", ok=False, error=str(e)))
    else:
        reports.append(SourceReport(source_id="database", label="Admin", count=len(db_records)))
        if on_partial is not None:
            on_partial(engine.merge([(SourcePriority.DATABASE, db_records)], order))
    batches.append((SourcePriority.DATABASE, db_records))

    async with httpx.AsyncClient(
        timeout=settings.source_timeout,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        transport=transport,
    ) as client:
        connectors = build_connectors(settings, client, now)
        outcomes = await asyncio.gather(*(_fetch_source(c, settings.source_timeout) for c in connectors))

    live_count = 0
    for connector, (records, report) in zip(connectors, outcomes):
        batches.append((connector.priority, records))
        reports.append(report)
        live_count += len(records)

    fallback = load_fallback(now, settings.fallback_path)
    batches.append((SourcePriority.FALLBACK, fallback))
    reports.append(SourceReport(source_id="fallback", label="Curated", count=len(fallback)))

    merged = engine.merge(batches, order)
    logger.info(
        "%d DB + %d live + %d fallback = %d total",
        len(db_records), live_count, len(fallback), len(merged),
    )
    return AggregationResult(opportunities=merged, error=error, fetched_at=now, sources=reports)


def run_pipeline(settings: Optional[Settings] = None, **kwargs) -> AggregationResult:
    """Synchronous wrapper around aggregate()."""
    return asyncio.run(aggregate(settings, **kwargs))


class OpportunityFeed:
    """
    Query-like holder for the aggregated list: opportunities, loading, error, refetch().
    Each fetch starts a new cycle; a cycle that finishes after a newer one started
    is discarded.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        store: Optional[OpportunityStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_update: Optional[Callable[["OpportunityFeed"], None]] = None,
    ):
        self.settings = settings or Settings()
        self.opportunities: list[Opportunity] = []
        self.loading = False
        self.error: Optional[str] = None
        self.last_result: Optional[AggregationResult] = None
        self._store = store
        self._transport = transport
        self._on_update = on_update
        self._generation = 0

    def _notify(self) -> None:
        if self._on_update is not None:
            self._on_update(self)

    async def fetch(self) -> Optional[AggregationResult]:
        """Run one cycle. Returns None if the cycle failed outright or was superseded."""
        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = None
        self._notify()

        def show_partial(records: list[Opportunity]) -> None:
            if generation == self._generation:
                self.opportunities = records
                self.loading = False
                self._notify()

        try:
            result = await aggregate(
                self.settings,
                store=self._store,
                transport=self._transport,
                on_partial=show_partial,
            )
        except Exception as e:
            logger.exception("Failed to fetch opportunities")
            if generation == self._generation:
                self.error = f"Failed to fetch opportunities: {e}"
                self.loading = False
                self._notify()
            return None

        if generation != self._generation:
            logger.debug("Discarding superseded fetch cycle %d", generation)
            return None

        self.opportunities = result.opportunities
        self.error = result.error
        self.loading = False
        self.last_result = result
        self._notify()
        return result

    def refetch(self) -> Optional[AggregationResult]:
        """Start a new cycle from synchronous code."""
        return asyncio.run(self.fetch())
