"""Pytest fixtures for launchpad tests."""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from launchpad.config import Settings
from launchpad.models.opportunity import Opportunity, OpportunityType
from launchpad.store import OpportunityStore

CODEFORCES_KEY = "codeforces.com/api/contest.list"
CODECHEF_KEY = "www.codechef.com/api/list/contests/all"
HACKEREARTH_KEY = "www.hackerearth.com/api/events/upcoming/"
KONTESTS_KEY = "kontests.net/api/v1/all"
FIRECRAWL_KEY = "api.firecrawl.dev/v1/search"


def make_opp(
    opp_id: str = "db-1",
    title: str = "AI Hackathon 2025",
    deadline: Optional[datetime] = None,
    type: OpportunityType = OpportunityType.HACKATHON,
    source: str = "Admin",
    **kwargs: Any,
) -> Opportunity:
    return Opportunity(
        id=opp_id,
        title=title,
        type=type,
        organization=kwargs.pop("organization", "Test Org"),
        description=kwargs.pop("description", "Test description"),
        deadline=deadline or datetime.now(timezone.utc) + timedelta(days=10),
        apply_url=kwargs.pop("apply_url", "https://example.com/apply"),
        source=source,
        **kwargs,
    )


def make_transport(routes: dict[str, Any]) -> httpx.MockTransport:
    """
    MockTransport keyed by host+path.
    Values: JSON-able payload (200), httpx.Response, or an exception to raise.
    Unknown routes answer 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        value = routes.get(f"{request.url.host}{request.url.path}")
        if value is None:
            return httpx.Response(404, request=request)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, httpx.Response):
            return value
        return httpx.Response(200, json=value, request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def codeforces_payload(now: datetime) -> dict:
    """contest.list envelope: two upcoming rounds, one finished, one BEFORE but in the past."""
    soon = int((now + timedelta(days=3)).timestamp())
    later = int((now + timedelta(days=6)).timestamp())
    past = int((now - timedelta(days=2)).timestamp())
    return {
        "status": "OK",
        "result": [
            {"id": 2041, "name": "Codeforces Round 990 (Div. 2)", "type": "CF", "phase": "BEFORE",
             "durationSeconds": 7200, "startTimeSeconds": soon},
            {"id": 2042, "name": "Educational Codeforces Round 170", "type": "ICPC", "phase": "BEFORE",
             "durationSeconds": 7200, "startTimeSeconds": later},
            {"id": 2000, "name": "Codeforces Round 950", "type": "CF", "phase": "FINISHED",
             "durationSeconds": 7200, "startTimeSeconds": past},
            {"id": 1999, "name": "Stale Round", "type": "CF", "phase": "BEFORE",
             "durationSeconds": 7200, "startTimeSeconds": past},
        ],
    }


@pytest.fixture
def codechef_payload(now: datetime) -> dict:
    return {
        "status": "success",
        "future_contests": [
            {
                "contest_code": "START160",
                "contest_name": "Starters 160",
                "contest_start_date_iso": (now + timedelta(days=4)).isoformat(),
                "contest_duration": "120",
            },
            {
                "contest_code": "",
                "contest_name": "Broken entry",
                "contest_start_date_iso": (now + timedelta(days=5)).isoformat(),
            },
        ],
    }


@pytest.fixture
def hackerearth_payload(now: datetime) -> dict:
    return {
        "response": [
            {
                "title": "HackerEarth Hackathon Sprint",
                "description": "<p>Build <b>something</b> great &amp; win.</p>",
                "url": "https://www.hackerearth.com/challenges/hackathon/sprint/",
                "challenge_type": "Hackathon",
                "end_tz": (now + timedelta(days=8)).strftime("%Y-%m-%d %H:%M:%S+05:30"),
            },
            {
                "title": "Monthly Easy",
                "description": "",
                "url": "https://www.hackerearth.com/challenges/competitive/monthly-easy/",
                "challenge_type": "Competitive",
                "end_tz": (now + timedelta(days=9)).isoformat(),
            },
            {
                "title": "No End Date",
                "url": "https://www.hackerearth.com/x/",
                "end_tz": "soon",
            },
        ]
    }


@pytest.fixture
def kontests_payload(now: datetime) -> list:
    fmt = "%Y-%m-%d %H:%M:%S UTC"
    return [
        {
            "name": "AtCoder Beginner Contest 380",
            "url": "https://atcoder.jp/contests/abc380",
            "start_time": (now + timedelta(days=2)).strftime(fmt),
            "end_time": (now + timedelta(days=2, hours=2)).strftime(fmt),
            "duration": "6000.0",
            "site": "AtCoder",
            "status": "BEFORE",
        },
        {
            "name": "Weekly Contest 425",
            "url": "https://leetcode.com/contest/weekly-contest-425",
            "start_time": (now + timedelta(days=1)).isoformat(),
            "end_time": (now + timedelta(days=1, hours=1)).isoformat(),
            "duration": "5400",
            "site": "LeetCode",
            "status": "CODING",
        },
        {
            "name": "Finished Contest",
            "url": "https://example.com/old",
            "start_time": (now - timedelta(days=1)).isoformat(),
            "end_time": (now - timedelta(hours=20)).isoformat(),
            "duration": "3600",
            "site": "Toph",
            "status": "FINISHED",
        },
    ]


@pytest.fixture
def live_routes(codeforces_payload, codechef_payload, hackerearth_payload, kontests_payload) -> dict:
    return {
        CODEFORCES_KEY: codeforces_payload,
        CODECHEF_KEY: codechef_payload,
        HACKEREARTH_KEY: hackerearth_payload,
        KONTESTS_KEY: kontests_payload,
    }


@pytest.fixture
def temp_db() -> Path:
    """Temporary database path for isolated tests."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    path.unlink(missing_ok=True)


@pytest.fixture
def store(temp_db: Path) -> OpportunityStore:
    """OpportunityStore with temporary database."""
    return OpportunityStore(temp_db)


@pytest.fixture
def settings(temp_db: Path) -> Settings:
    """Settings pointing at the temp database, built-in live sources only."""
    return Settings(
        db_path=temp_db,
        sources=["codeforces", "codechef", "hackerearth", "kontests"],
        source_timeout=5.0,
    )
