import time
from pathlib import Path

import psycopg2
import psycopg2.extras

from backend.config import database_dsn


SCHEMA_PATH = Path(__file__).resolve().parent / "sql" / "ncdot_incidents.sql"

DB_TIMER = None


def connect_db(dsn: str | None = None):
    # psycopg2 understands postgres:// and postgresql:// as well as keyword DSNs
    conn = psycopg2.connect(dsn or database_dsn(), cursor_factory=psycopg2.extras.RealDictCursor)
    # one statement per transaction: a failed upsert must not abort the rest of the run
    conn.autocommit = True
    return conn


def db_exec(cur, sql, params=None) -> None:
    start = time.time()
    if params is None:
        cur.execute(sql)
    else:
        cur.execute(sql, params)
    dur_ms = int((time.time() - start) * 1000)
    if DB_TIMER:
        DB_TIMER(dur_ms)


def ping(conn) -> None:
    with conn.cursor() as cur:
        db_exec(cur, "SELECT 1 AS ok")
        cur.fetchone()


def apply_schema(conn, path: Path = SCHEMA_PATH) -> None:
    with conn.cursor() as cur:
        db_exec(cur, path.read_text(encoding="utf-8"))
