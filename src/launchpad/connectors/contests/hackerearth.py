"""HackerEarth connector for upcoming challenges and hackathons."""

from launchpad.connectors.base import BaseConnector, SourceError, SourcePriority
from launchpad.connectors.parsers import as_text, parse_timestamp, strip_html, truncate
from launchpad.models.opportunity import Opportunity, OpportunityType
from launchpad.models.raw import RawRecord

from .constants import HACKEREARTH_DESCRIPTION_LIMIT, HACKEREARTH_EVENTS_URL


def _is_hackathon(event: dict) -> bool:
    challenge_type = as_text(event.get("challenge_type")).lower()
    url = as_text(event.get("url"))
    return "hackathon" in challenge_type or "hackathon" in url


class HackerEarthConnector(BaseConnector):
    """
    Upcoming HackerEarth events.
    Envelope: {"response": [{"title", "description", "url", "challenge_type",
    "end_tz", ...}, ...]}. Events with "hackathon" in their type or URL are hackathons.
    """

    source_id = "hackerearth"
    label = "HackerEarth (Live)"
    priority = SourcePriority.HACKEREARTH

    async def search(self) -> list[RawRecord]:
        payload = await self._get_json(HACKEREARTH_EVENTS_URL)
        events = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(events, list):
            raise SourceError("hackerearth: 'response' is not a list")
        return [RawRecord(data=e, position=i) for i, e in enumerate(events) if isinstance(e, dict)]

    def normalize(self, raw: RawRecord) -> Opportunity:
        """Convert one event to an Opportunity; ends (end_tz) become the deadline."""
        d = raw.data
        description = strip_html(as_text(d.get("description")))
        if description:
            description = truncate(description, HACKEREARTH_DESCRIPTION_LIMIT + 3)
        challenge_type = as_text(d.get("challenge_type"))
        return Opportunity(
            id=f"hackerearth-{raw.position}",
            title=as_text(d.get("title")),
            type=OpportunityType.HACKATHON if _is_hackathon(d) else OpportunityType.CONTEST,
            organization="HackerEarth",
            description=description or "HackerEarth Challenge",
            deadline=parse_timestamp(d.get("end_tz")),
            apply_url=as_text(d.get("url")),
            location="Virtual / India",
            tags=["HackerEarth", challenge_type or "Challenge", "India"],
            source=self.label,
        )
