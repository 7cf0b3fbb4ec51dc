"""Tests for the aggregation pipeline and OpportunityFeed."""

import asyncio
import logging
import sqlite3
import threading
from datetime import timedelta
from unittest.mock import MagicMock

import httpx

from conftest import CODEFORCES_KEY, FIRECRAWL_KEY, KONTESTS_KEY, make_opp, make_transport
from launchpad.connectors.base import SourcePriority
from launchpad.fallback import load_fallback
from launchpad.filtering import MergeEngine, SortOrder
from launchpad.pipeline import OpportunityFeed, aggregate, build_connectors, run_pipeline


def _all_down() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("network unreachable", request=request)

    return httpx.MockTransport(handler)


class TestAggregate:
    """End-to-end aggregation with mocked sources."""

    def test_merges_all_tiers(self, settings, store, now, live_routes) -> None:
        store.upsert(make_opp("db-1", "Campus Build Night"))
        result = run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))

        sources = {o.source for o in result.opportunities}
        assert "Admin" in sources
        assert "Codeforces (Live)" in sources
        assert "CodeChef (Live)" in sources
        assert "HackerEarth (Live)" in sources
        assert "AtCoder (Live)" in sources
        assert any(o.id.startswith("fallback-") for o in result.opportunities)
        assert result.error is None

    def test_no_past_deadlines(self, settings, store, now, live_routes, kontests_payload) -> None:
        """A source that reports a past start as upcoming is still filtered out."""
        kontests_payload.append({
            "name": "Mislabelled Contest",
            "url": "https://example.com/late",
            "start_time": (now - timedelta(hours=3)).isoformat(),
            "site": "Toph",
            "status": "BEFORE",
        })
        store.upsert(make_opp("db-past", "Expired Workshop", deadline=now - timedelta(days=1)))
        result = run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))

        assert all(o.deadline >= now for o in result.opportunities)
        titles = {o.title for o in result.opportunities}
        assert "Mislabelled Contest" not in titles
        assert "Expired Workshop" not in titles

    def test_titles_unique_and_sorted(self, settings, store, now, live_routes) -> None:
        result = run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))
        keys = [o.title_key for o in result.opportunities]
        assert len(keys) == len(set(keys))
        deadlines = [o.deadline for o in result.opportunities]
        assert deadlines == sorted(deadlines)

    def test_all_sources_down_returns_fallback(self, settings, store, now) -> None:
        """With an empty store and every live source failing, the result is the filtered fallback."""
        result = run_pipeline(settings, store=store, now=now, transport=_all_down())

        expected = MergeEngine(now).merge({SourcePriority.FALLBACK: load_fallback(now)})
        assert [o.id for o in result.opportunities] == [o.id for o in expected]
        assert result.opportunities
        assert result.error is None
        live = [r for r in result.sources if r.source_id not in ("database", "fallback")]
        assert live and all(not r.ok for r in live)

    def test_idempotent(self, settings, store, now, live_routes) -> None:
        store.upsert(make_opp("db-1", "Campus Build Night"))
        first = run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))
        second = run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))
        assert {o.id for o in first.opportunities} == {o.id for o in second.opportunities}

    def test_database_copy_wins_duplicate(self, settings, store, now, codeforces_payload) -> None:
        """'AI Hackathon 2025' in the store beats 'AI Hackathon 2025!!' from a live source."""
        store.upsert(make_opp("db-1", "AI Hackathon 2025"))
        codeforces_payload["result"][0]["name"] = "AI Hackathon 2025!!"
        routes = {CODEFORCES_KEY: codeforces_payload}

        result = run_pipeline(settings, store=store, now=now, transport=make_transport(routes))
        matches = [o for o in result.opportunities if o.title_key == "aihackathon2025"]
        assert len(matches) == 1
        assert matches[0].id == "db-1"
        assert matches[0].source == "Admin"

    def test_priority_not_completion_order(self, settings, store, now, codeforces_payload, kontests_payload) -> None:
        """A slower higher-priority source still wins a duplicate title."""
        codeforces_payload["result"][0]["name"] = "Shared Round"
        kontests_payload[0]["name"] = "shared round"

        async def handler(request: httpx.Request) -> httpx.Response:
            key = f"{request.url.host}{request.url.path}"
            if key == CODEFORCES_KEY:
                await asyncio.sleep(0.05)
                return httpx.Response(200, json=codeforces_payload)
            if key == KONTESTS_KEY:
                return httpx.Response(200, json=kontests_payload)
            return httpx.Response(404)

        result = run_pipeline(settings, store=store, now=now, transport=httpx.MockTransport(handler))
        shared = [o for o in result.opportunities if o.title_key == "sharedround"]
        assert [o.source for o in shared] == ["Codeforces (Live)"]

    def test_one_source_failing_is_not_an_error(self, settings, store, now, live_routes) -> None:
        live_routes[CODEFORCES_KEY] = httpx.ConnectError("connection refused")
        result = run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))

        assert result.error is None
        assert not any(o.source == "Codeforces (Live)" for o in result.opportunities)
        assert any(o.source == "CodeChef (Live)" for o in result.opportunities)
        report = next(r for r in result.sources if r.source_id == "codeforces")
        assert report.ok is False
        assert report.count == 0
        assert "connection refused" in report.error

    def test_bad_envelope_is_source_failure(self, settings, store, now, live_routes) -> None:
        live_routes[CODEFORCES_KEY] = {"status": "FAILED"}
        result = run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))
        report = next(r for r in result.sources if r.source_id == "codeforces")
        assert report.ok is False
        assert result.error is None

    def test_badly_typed_records_do_not_fail_their_source(
        self, settings, store, now, live_routes, codeforces_payload, hackerearth_payload, codechef_payload
    ) -> None:
        codeforces_payload["result"].append(
            {"id": 9001, "name": "Far Future Round", "phase": "BEFORE", "startTimeSeconds": 10**15}
        )
        hackerearth_payload["response"].append(
            {"title": "Code Golf", "challenge_type": 7, "end_tz": (now + timedelta(days=3)).isoformat()}
        )
        codechef_payload["future_contests"].append(
            {"contest_code": 4242, "contest_name": "Lunchtime 4242",
             "contest_start_date_iso": (now + timedelta(days=2)).isoformat()}
        )
        result = run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))

        assert all(r.ok for r in result.sources)
        titles = {o.title for o in result.opportunities}
        assert {"Codeforces Round 990 (Div. 2)", "Starters 160", "Lunchtime 4242",
                "Monthly Easy", "Code Golf"} <= titles
        assert "Far Future Round" not in titles

    def test_slow_source_times_out(self, settings, store, now, live_routes) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            key = f"{request.url.host}{request.url.path}"
            if key == CODEFORCES_KEY:
                await asyncio.sleep(5)
            value = live_routes.get(key)
            if value is None:
                return httpx.Response(404)
            return httpx.Response(200, json=value)

        fast = settings.model_copy(update={"source_timeout": 0.2})
        result = run_pipeline(fast, store=store, now=now, transport=httpx.MockTransport(handler))

        report = next(r for r in result.sources if r.source_id == "codeforces")
        assert report.ok is False
        assert report.error == "TimeoutError"
        assert any(o.source == "CodeChef (Live)" for o in result.opportunities)

    def test_database_failure_sets_error_but_keeps_other_tiers(self, settings, now, live_routes) -> None:
        broken = MagicMock()
        broken.list_active.side_effect = sqlite3.OperationalError("database is locked")
        partials = []

        result = run_pipeline(
            settings,
            store=broken,
            now=now,
            transport=make_transport(live_routes),
            on_partial=partials.append,
        )

        assert result.error == "Failed to fetch opportunities: database is locked"
        assert any(o.source == "Codeforces (Live)" for o in result.opportunities)
        assert any(o.id.startswith("fallback-") for o in result.opportunities)
        assert result.sources[0].source_id == "database"
        assert result.sources[0].ok is False
        assert partials == []

    def test_partial_callback_runs_before_live_sources(self, settings, store, now, live_routes) -> None:
        store.upsert(make_opp("db-2", "Campus Build Night", deadline=now + timedelta(days=4)))
        store.upsert(make_opp("db-1", "Robotics Open Day", deadline=now + timedelta(days=2)))
        events: list = []

        def handler(request: httpx.Request) -> httpx.Response:
            events.append("http")
            value = live_routes.get(f"{request.url.host}{request.url.path}")
            if value is None:
                return httpx.Response(404)
            return httpx.Response(200, json=value)

        run_pipeline(
            settings,
            store=store,
            now=now,
            transport=httpx.MockTransport(handler),
            on_partial=lambda records: events.append([o.id for o in records]),
        )
        assert events[0] == ["db-1", "db-2"]
        assert events[1:] and all(e == "http" for e in events[1:])

    def test_reports_in_priority_order(self, settings, store, now, live_routes) -> None:
        result = run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))
        assert [r.source_id for r in result.sources] == [
            "database", "codeforces", "codechef", "hackerearth", "kontests", "fallback",
        ]
        assert all(r.ok for r in result.sources)

    def test_sort_order_option(self, settings, store, now, live_routes) -> None:
        result = run_pipeline(
            settings, store=store, now=now, transport=make_transport(live_routes), order=SortOrder.TITLE,
        )
        titles = [o.title.lower() for o in result.opportunities]
        assert titles == sorted(titles)

    def test_summary_logged(self, settings, store, now, live_routes, caplog) -> None:
        caplog.set_level(logging.INFO, logger="launchpad.pipeline")
        run_pipeline(settings, store=store, now=now, transport=make_transport(live_routes))
        assert any(" DB + " in r.getMessage() and "total" in r.getMessage() for r in caplog.records)


class TestBuildConnectors:
    """Tests for build_connectors."""

    def test_web_search_skipped_without_key(self, settings) -> None:
        configured = settings.model_copy(update={"sources": ["codeforces", "firecrawl"]})
        connectors = build_connectors(configured, client=MagicMock())
        assert [c.source_id for c in connectors] == ["codeforces"]

    def test_connectors_share_run_time(self, settings, now) -> None:
        configured = settings.model_copy(update={
            "sources": ["codeforces", "kontests", "firecrawl"], "firecrawl_api_key": "fc-test",
        })
        connectors = build_connectors(configured, client=MagicMock(), now=now)
        assert [c.source_id for c in connectors] == ["codeforces", "kontests", "firecrawl"]
        assert all(c._clock() == now for c in connectors)

    def test_web_search_included_with_key(self, settings, store, now) -> None:
        configured = settings.model_copy(update={"sources": ["firecrawl"], "firecrawl_api_key": "fc-test"})
        routes = {FIRECRAWL_KEY: {"success": True, "data": [{"title": "Green Code Jam", "url": "https://gcj.dev"}]}}

        result = run_pipeline(configured, store=store, now=now, transport=make_transport(routes))
        assert any(o.title == "Green Code Jam" for o in result.opportunities)


class TestOpportunityFeed:
    """Tests for the query-like feed wrapper."""

    def test_refetch_populates_state(self, settings, store, live_routes) -> None:
        store.upsert(make_opp("db-1", "Campus Build Night"))
        updates: list = []
        feed = OpportunityFeed(
            settings,
            store=store,
            transport=make_transport(live_routes),
            on_update=lambda f: updates.append((f.loading, len(f.opportunities))),
        )

        result = feed.refetch()

        assert result is not None
        assert feed.loading is False
        assert feed.error is None
        assert feed.opportunities == result.opportunities
        assert feed.last_result is result
        # loading, partial (store rows only), final
        assert updates[0] == (True, 0)
        assert updates[1] == (False, 1)
        assert updates[-1][1] == len(result.opportunities)

    def test_superseded_cycle_discarded(self, settings, live_routes) -> None:
        entered = threading.Event()
        release = threading.Event()
        calls: list = []

        def list_active(now=None):
            calls.append(now)
            if len(calls) == 1:
                entered.set()
                release.wait(5)
                return [make_opp("stale", "Stale Listing")]
            return [make_opp("fresh", "Fresh Listing")]

        slow_store = MagicMock()
        slow_store.list_active.side_effect = list_active
        feed = OpportunityFeed(settings, store=slow_store, transport=make_transport(live_routes))

        async def scenario():
            first = asyncio.create_task(feed.fetch())
            await asyncio.to_thread(entered.wait, 5)
            second = await feed.fetch()
            release.set()
            return await first, second

        first_result, second_result = asyncio.run(scenario())

        assert first_result is None
        assert second_result is not None
        titles = {o.title for o in feed.opportunities}
        assert "Fresh Listing" in titles
        assert "Stale Listing" not in titles
        assert feed.last_result is second_result

    def test_total_failure_sets_error(self, settings, store, live_routes, tmp_path) -> None:
        """A cycle that cannot finish keeps what was already shown and reports the error."""
        store.upsert(make_opp("db-1", "Campus Build Night"))
        broken = settings.model_copy(update={"fallback_path": tmp_path / "missing.yaml"})
        feed = OpportunityFeed(broken, store=store, transport=make_transport(live_routes))

        assert feed.refetch() is None
        assert feed.error.startswith("Failed to fetch opportunities:")
        assert feed.loading is False
        assert [o.id for o in feed.opportunities] == ["db-1"]

    def test_database_error_surfaces_on_feed(self, settings, live_routes) -> None:
        broken = MagicMock()
        broken.list_active.side_effect = sqlite3.OperationalError("no such table: opportunities")
        feed = OpportunityFeed(settings, store=broken, transport=make_transport(live_routes))

        result = feed.refetch()

        assert result is not None
        assert feed.error == "Failed to fetch opportunities: no such table: opportunities"
        assert feed.opportunities


def test_aggregate_is_awaitable(settings, store, now) -> None:
    result = asyncio.run(aggregate(settings, store=store, now=now, transport=_all_down()))
    assert result.fetched_at == now
