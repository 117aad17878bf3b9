import re
from typing import List

from psycopg2 import sql

from backend.db import db_exec
from runner.models import ClearedIncident, Incident


_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

INSERT_COLUMNS = [
    "id",
    "latitude",
    "longitude",
    "common_name",
    "reason",
    "condition",
    "incident_type",
    "severity",
    "direction",
    "location",
    "county_id",
    "county_name",
    "city",
    "start_time",
    "end_time",
    "last_update",
    "road",
    "route_id",
    "lanes_closed",
    "lanes_total",
    "detour",
    "cross_street_prefix",
    "cross_street_number",
    "cross_street_suffix",
    "cross_street_common_name",
    "event",
    "created_from_concurrent",
    "movable_construction",
    "work_zone_speed_limit",
]

# refreshed on every sighting; everything else keeps its first-seen value
REFRESH_COLUMNS = [
    "latitude",
    "longitude",
    "reason",
    "condition",
    "incident_type",
    "severity",
    "end_time",
    "last_update",
    "lanes_closed",
    "detour",
]


class IncidentStore:
    def __init__(self, conn, table: str = "ncdot_incidents"):
        if not _IDENT_RE.match(table or ""):
            raise ValueError(f"invalid table name: {table!r}")
        self.conn = conn
        self.table = sql.Identifier(table)

    def upsert(self, incident: Incident) -> None:
        """
        Insert or refresh one incident keyed by id. Always leaves the row
        active with no cleared_time, so a reappearing incident is live again.
        """
        row = incident.as_row()
        stmt = sql.SQL(
            """
            INSERT INTO {table} ({cols}, status, cleared_time)
            VALUES ({vals}, 'active', NULL)
            ON CONFLICT (id) DO UPDATE SET
              {updates},
              status = 'active',
              cleared_time = NULL
            """
        ).format(
            table=self.table,
            cols=sql.SQL(", ").join(sql.Identifier(c) for c in INSERT_COLUMNS),
            vals=sql.SQL(", ").join(sql.Placeholder(c) for c in INSERT_COLUMNS),
            updates=sql.SQL(",\n              ").join(
                sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(c))
                for c in REFRESH_COLUMNS
            ),
        )
        with self.conn.cursor() as cur:
            db_exec(cur, stmt, row)

    def query_active(self, category: str) -> List[ClearedIncident]:
        stmt = sql.SQL(
            """
            SELECT id, road, location, city
            FROM {table}
            WHERE status = 'active' AND incident_type = %s
            ORDER BY id
            """
        ).format(table=self.table)
        with self.conn.cursor() as cur:
            db_exec(cur, stmt, (category,))
            rows = cur.fetchall()

        out: List[ClearedIncident] = []
        for row in rows:
            try:
                out.append(
                    ClearedIncident(
                        id=int(row["id"]),
                        road=row.get("road") or "",
                        location=row.get("location") or "",
                        city=row.get("city") or "",
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                print(f"ACTIVE_ROW_SKIP err={type(e).__name__}:{str(e)[:200]}")
        return out

    def mark_cleared(self, incident_id: int) -> int:
        stmt = sql.SQL(
            """
            UPDATE {table}
            SET status = 'cleared', cleared_time = now()
            WHERE id = %s AND status = 'active'
            """
        ).format(table=self.table)
        with self.conn.cursor() as cur:
            db_exec(cur, stmt, (incident_id,))
            return int(cur.rowcount or 0)
