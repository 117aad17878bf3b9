from typing import Dict, List

import pytest

from runner.models import ClearedIncident, Incident


class InMemoryStore:
    """Same contract as IncidentStore, backed by a dict of rows."""

    refresh = (
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
    )

    def __init__(self, fail_ids=(), fail_query=False):
        self.rows: Dict[int, dict] = {}
        self.fail_ids = set(fail_ids)
        self.fail_query = fail_query
        self.upserts: List[int] = []
        self.cleared_calls: List[int] = []

    def seed(self, incident: Incident, status: str = "active") -> None:
        row = incident.as_row()
        row["status"] = status
        row["cleared_time"] = "2024-01-01T00:00:00+00:00" if status == "cleared" else None
        self.rows[incident.id] = row

    def upsert(self, incident: Incident) -> None:
        self.upserts.append(incident.id)
        if incident.id in self.fail_ids:
            raise RuntimeError(f"boom {incident.id}")
        new = incident.as_row()
        row = self.rows.get(incident.id)
        if row is None:
            row = dict(new)
        else:
            for col in self.refresh:
                row[col] = new[col]
        row["status"] = "active"
        row["cleared_time"] = None
        self.rows[incident.id] = row

    def query_active(self, category: str) -> List[ClearedIncident]:
        if self.fail_query:
            raise RuntimeError("db gone")
        return [
            ClearedIncident(id=r["id"], road=r["road"], location=r["location"], city=r["city"])
            for r in sorted(self.rows.values(), key=lambda r: r["id"])
            if r["status"] == "active" and r["incident_type"] == category
        ]

    def mark_cleared(self, incident_id: int) -> int:
        self.cleared_calls.append(incident_id)
        row = self.rows.get(incident_id)
        if row is None or row["status"] != "active":
            return 0
        row["status"] = "cleared"
        row["cleared_time"] = "now"
        return 1


class RecordingSink:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.new: List[tuple] = []
        self.cleared: List[ClearedIncident] = []

    def notify_new(self, incident, started):
        self.new.append((incident.id, started))
        return (True, "") if self.ok else (False, "webhook_status=500 body=")

    def notify_cleared(self, cleared):
        self.cleared.append(cleared)
        return (True, "") if self.ok else (False, "webhook_status=500 body=")


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = conn.rowcount

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.conn.executed.append((sql, params))

    def fetchall(self):
        return list(self.conn.rows)

    def fetchone(self):
        return self.conn.rows[0] if self.conn.rows else None


class FakeConn:
    def __init__(self, rows=None, rowcount=1):
        self.rows = rows or []
        self.rowcount = rowcount
        self.executed = []
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def close(self):
        self.closed = True


def crash(incident_id: int, **kw) -> Incident:
    base = dict(
        id=incident_id,
        incident_type="Vehicle Crash",
        road=f"I-{incident_id}",
        city="Raleigh",
        location=f"Exit {incident_id}",
        reason="Vehicle Crash",
        start_time="2024-01-02T20:04:00Z",
    )
    base.update(kw)
    return Incident(**base)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sink():
    return RecordingSink()
