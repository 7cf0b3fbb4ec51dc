"""SQLite-backed store of admin-curated opportunities."""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from launchpad.models.opportunity import Opportunity

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "Admin"


def _to_db_time(value: datetime) -> str:
    """UTC ISO string; a single format keeps lexical order equal to time order."""
    aware = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return aware.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


class OpportunityStore:
    """
    SQLite store for curated opportunities.
    The aggregator only reads (list_active); the write methods back the CLI.
    """

    def __init__(self, db_path: str | Path = "launchpad.db"):
        self._db_path = Path(db_path)
        self._ensure_schema()

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        with self._connection() as conn:
            conn.executescript(schema_path.read_text())

    def _row_to_opp(self, row: sqlite3.Row) -> Opportunity:
        """Map a stored row to an Opportunity (source defaults to 'Admin')."""
        tags = json.loads(row["tags"]) if row["tags"] else []
        return Opportunity(
            id=row["id"],
            title=row["title"],
            type=row["type"],
            organization=row["organization"],
            description=row["description"],
            deadline=datetime.fromisoformat(row["deadline"]),
            apply_url=row["apply_url"],
            location=row["location"],
            prize=row["prize"],
            tags=tags,
            source=row["source"] or DEFAULT_SOURCE,
        )

    def _rows_to_opps(self, rows: list[sqlite3.Row]) -> list[Opportunity]:
        """Map rows, skipping any that no longer validate (e.g. unknown type)."""
        opps: list[Opportunity] = []
        for row in rows:
            try:
                opps.append(self._row_to_opp(row))
            except (ValueError, TypeError) as e:
                logger.warning("Skipping stored opportunity %s: %s", row["id"], e)
        return opps

    def upsert(self, opp: Opportunity, is_active: bool = True) -> bool:
        """Insert or replace an opportunity. Returns True if it was new."""
        now = _to_db_time(datetime.now(timezone.utc))
        values = (
            opp.title,
            opp.type.value,
            opp.organization,
            opp.description,
            _to_db_time(opp.deadline),
            opp.apply_url,
            opp.location,
            opp.prize,
            json.dumps(opp.tags),
            opp.source,
            1 if is_active else 0,
        )
        with self._connection() as conn:
            existing = conn.execute("SELECT id FROM opportunities WHERE id = ?", (opp.id,)).fetchone()
            if existing:
                conn.execute(
                    """
                    UPDATE opportunities SET
                        title = ?, type = ?, organization = ?, description = ?, deadline = ?,
                        apply_url = ?, location = ?, prize = ?, tags = ?, source = ?,
                        is_active = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (*values, now, opp.id),
                )
            else:
                conn.execute(
                    """
                    INSERT INTO opportunities (
                        id, title, type, organization, description, deadline, apply_url,
                        location, prize, tags, source, is_active, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (opp.id, *values, now, now),
                )
            conn.commit()
        return existing is None

    def list_active(self, now: Optional[datetime] = None) -> list[Opportunity]:
        """Active opportunities with deadline at or after now, soonest first."""
        now = now or datetime.now(timezone.utc)
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM opportunities
                WHERE is_active = 1 AND deadline >= ?
                ORDER BY deadline ASC
                """,
                (_to_db_time(now),),
            ).fetchall()
        return self._rows_to_opps(rows)

    def get_all(self) -> list[Opportunity]:
        """Return every stored opportunity, active or not."""
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM opportunities ORDER BY deadline ASC").fetchall()
        return self._rows_to_opps(rows)

    def get(self, opp_id: str) -> Optional[Opportunity]:
        """Get single opportunity by id."""
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM opportunities WHERE id = ?", (opp_id,)).fetchone()
        return self._row_to_opp(row) if row else None

    def count(self, active_only: bool = False) -> int:
        """Number of stored rows."""
        query = "SELECT COUNT(*) FROM opportunities"
        if active_only:
            query += " WHERE is_active = 1"
        with self._connection() as conn:
            return conn.execute(query).fetchone()[0]

    def deactivate(self, opp_id: str) -> bool:
        """Hide an opportunity from aggregation. Returns False if it does not exist."""
        now = _to_db_time(datetime.now(timezone.utc))
        with self._connection() as conn:
            cursor = conn.execute(
                "UPDATE opportunities SET is_active = 0, updated_at = ? WHERE id = ?",
                (now, opp_id),
            )
            conn.commit()
        return cursor.rowcount > 0

    def delete(self, opp_id: str) -> bool:
        """Remove an opportunity. Returns False if it does not exist."""
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM opportunities WHERE id = ?", (opp_id,))
            conn.commit()
        return cursor.rowcount > 0
