"""CodeChef connector using the public contest list API."""

from launchpad.connectors.base import BaseConnector, SourceError, SourcePriority
from launchpad.connectors.parsers import as_text, hours_from, parse_timestamp
from launchpad.models.opportunity import Opportunity, OpportunityType
from launchpad.models.raw import RawRecord

from .constants import CODECHEF_CONTEST_URL, CODECHEF_CONTESTS_URL, CODECHEF_LIMIT


class CodeChefConnector(BaseConnector):
    """
    Future CodeChef contests.
    Envelope: {"status": "success", "future_contests": [{"contest_code",
    "contest_name", "contest_start_date_iso", "contest_duration"}, ...]}.
    contest_duration is in minutes.
    """

    source_id = "codechef"
    label = "CodeChef (Live)"
    priority = SourcePriority.CODECHEF

    async def search(self) -> list[RawRecord]:
        payload = await self._get_json(CODECHEF_CONTESTS_URL)
        if not isinstance(payload, dict) or payload.get("status") != "success":
            raise SourceError("codechef: envelope status is not success")
        contests = payload.get("future_contests") or []
        if not isinstance(contests, list):
            raise SourceError("codechef: 'future_contests' is not a list")
        return [
            RawRecord(data=contest, position=i)
            for i, contest in enumerate(contests[:CODECHEF_LIMIT])
            if isinstance(contest, dict)
        ]

    def normalize(self, raw: RawRecord) -> Opportunity:
        """Convert one future_contests entry to an Opportunity."""
        d = raw.data
        code = as_text(d.get("contest_code"))
        if not code:
            raise ValueError("contest_code missing")
        description = "CodeChef rated contest"
        if d.get("contest_duration") not in (None, ""):
            description += f" • Duration: {hours_from(d['contest_duration'], 60)}h"
        return Opportunity(
            id=f"codechef-{code}",
            title=as_text(d.get("contest_name")) or code,
            type=OpportunityType.CONTEST,
            organization="CodeChef",
            description=description,
            deadline=parse_timestamp(d.get("contest_start_date_iso")),
            apply_url=CODECHEF_CONTEST_URL.format(code=code),
            location="Virtual",
            tags=["CodeChef", "Competitive", "Rated"],
            source=self.label,
        )
