"""Static fallback opportunities, loaded from versioned YAML data."""

import logging
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from launchpad.models.opportunity import Opportunity

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_PATH = Path(__file__).parent / "data" / "fallback.yaml"


def _resolve_deadline(entry: dict[str, Any], now: datetime) -> datetime:
    """Fixed `deadline` (date or datetime) or rolling `deadline_in_days` from now."""
    if entry.get("deadline_in_days") is not None:
        return now + timedelta(days=float(entry["deadline_in_days"]))
    value = entry.get("deadline")
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError("entry needs 'deadline' or 'deadline_in_days'")


def load_fallback(now: Optional[datetime] = None, path: Optional[str | Path] = None) -> list[Opportunity]:
    """
    Materialize the fallback table for one aggregation run.
    Malformed entries are skipped with a warning; a missing file raises OSError.
    """
    now = now or datetime.now(timezone.utc)
    data = yaml.safe_load(Path(path or DEFAULT_FALLBACK_PATH).read_text(encoding="utf-8")) or {}
    entries = data.get("opportunities") or []

    opportunities: list[Opportunity] = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning("Skipping non-mapping fallback entry: %r", entry)
            continue
        try:
            fields = {k: v for k, v in entry.items() if k not in ("deadline", "deadline_in_days")}
            fields["id"] = f"fallback-{entry.get('id')}"
            fields["deadline"] = _resolve_deadline(entry, now)
            opportunities.append(Opportunity.model_validate(fields))
        except (ValueError, TypeError) as e:
            logger.warning("Skipping fallback entry %s: %s", entry.get("id"), e)
    logger.debug("Loaded %d fallback opportunities (version %s)", len(opportunities), data.get("version"))
    return opportunities
