"""Kontests connector: one feed covering many judges (Codeforces, AtCoder, LeetCode, ...)."""

from datetime import datetime

from launchpad.connectors.base import RECORD_ERRORS, BaseConnector, SourceError, SourcePriority
from launchpad.connectors.parsers import as_text, hours_from, parse_timestamp
from launchpad.models.opportunity import Opportunity, OpportunityType
from launchpad.models.raw import RawRecord

from .constants import KONTESTS_ALL_URL, KONTESTS_LIMIT, KONTESTS_SITE_NAMES, KONTESTS_SITE_TAGS


def site_tags(site: str) -> list[str]:
    """Tags for a Kontests site name."""
    tags = ["Competitive Programming"]
    lowered = site.lower()
    for substr, tag in KONTESTS_SITE_TAGS:
        if substr in lowered:
            tags.append(tag)
    return tags


def _is_upcoming(contest: dict, now: datetime) -> bool:
    if contest.get("status") == "BEFORE":
        return True
    try:
        return parse_timestamp(contest.get("start_time")) > now
    except RECORD_ERRORS:
        return False


class KontestsConnector(BaseConnector):
    """
    Aggregated contest feed. The response is a bare list of
    {"name", "url", "start_time", "end_time", "duration", "site", "status"}.
    duration is in seconds.
    """

    source_id = "kontests"
    label = "Kontests (Live)"
    priority = SourcePriority.KONTESTS

    async def search(self) -> list[RawRecord]:
        payload = await self._get_json(KONTESTS_ALL_URL)
        if not isinstance(payload, list):
            raise SourceError("kontests: expected a JSON list")
        now = self._clock()
        upcoming = [c for c in payload if isinstance(c, dict) and _is_upcoming(c, now)]
        return [RawRecord(data=c, position=i) for i, c in enumerate(upcoming[:KONTESTS_LIMIT])]

    def normalize(self, raw: RawRecord) -> Opportunity:
        """Convert one Kontests entry; the provenance label names the judge."""
        d = raw.data
        site = as_text(d.get("site")) or "Kontests"
        description = f"Competitive programming contest on {site}."
        if d.get("duration") not in (None, ""):
            description += f" Duration: {hours_from(d['duration'], 1)} hours."
        return Opportunity(
            id=f"contest-{raw.position}",
            title=as_text(d.get("name")),
            type=OpportunityType.CONTEST,
            organization=KONTESTS_SITE_NAMES.get(site, site),
            description=description,
            deadline=parse_timestamp(d.get("start_time")),
            apply_url=as_text(d.get("url")),
            location="Virtual",
            tags=site_tags(site),
            source=f"{site} (Live)",
        )
