"""Codeforces connector using the public contest.list API."""

import logging

from launchpad.connectors.base import RECORD_ERRORS, BaseConnector, SourceError, SourcePriority
from launchpad.connectors.parsers import as_text, hours_from, parse_timestamp
from launchpad.models.opportunity import Opportunity, OpportunityType
from launchpad.models.raw import RawRecord

from .constants import CODEFORCES_CONTEST_URL, CODEFORCES_CONTESTS_URL, CODEFORCES_LIMIT

logger = logging.getLogger(__name__)


class CodeforcesConnector(BaseConnector):
    """
    Upcoming Codeforces rounds.
    Envelope: {"status": "OK", "result": [{"id", "name", "type", "phase",
    "durationSeconds", "startTimeSeconds"}, ...]}.
    """

    source_id = "codeforces"
    label = "Codeforces (Live)"
    priority = SourcePriority.CODEFORCES

    async def search(self) -> list[RawRecord]:
        payload = await self._get_json(CODEFORCES_CONTESTS_URL, params={"gym": "false"})
        if not isinstance(payload, dict) or payload.get("status") != "OK":
            raise SourceError("codeforces: envelope status is not OK")
        contests = payload.get("result")
        if not isinstance(contests, list):
            raise SourceError("codeforces: 'result' is not a list")

        now = self._clock()
        upcoming = []
        for contest in contests:
            if not isinstance(contest, dict) or contest.get("phase") != "BEFORE":
                continue
            try:
                if parse_timestamp(contest.get("startTimeSeconds")) > now:
                    upcoming.append(contest)
            except RECORD_ERRORS as e:
                logger.debug("Skipping codeforces contest %s: %s", contest.get("id"), e)
        return [
            RawRecord(data=contest, position=i)
            for i, contest in enumerate(upcoming[:CODEFORCES_LIMIT])
        ]

    def normalize(self, raw: RawRecord) -> Opportunity:
        """Convert one contest.list entry to an Opportunity."""
        d = raw.data
        contest_id = d["id"]
        description = "Competitive programming contest"
        if d.get("durationSeconds") is not None:
            description += f" • Duration: {hours_from(d['durationSeconds'], 1)}h"
        return Opportunity(
            id=f"codeforces-{contest_id}",
            title=as_text(d.get("name")) or "Codeforces Contest",
            type=OpportunityType.CONTEST,
            organization="Codeforces",
            description=description,
            deadline=parse_timestamp(d["startTimeSeconds"]),
            apply_url=CODEFORCES_CONTEST_URL.format(id=contest_id),
            location="Virtual",
            tags=["Codeforces", "Competitive", as_text(d.get("type"))],
            source=self.label,
        )
