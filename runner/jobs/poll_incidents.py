import argparse
import time
from dataclasses import replace

import backend.db as db
from backend.config import Settings, load_settings
from runner.alerts.webhook import WebhookSink
from runner.ingest.feed import fetch_incidents
from runner.ledger import LedgerError, load_notified, save_notified
from runner.models import FeedError
from runner.reconcile import reconcile
from runner.store import IncidentStore


def run_once(settings: Settings, conn=None) -> int:
    start = time.time()
    db_ms = 0

    def add_db_ms(delta_ms: int) -> None:
        nonlocal db_ms
        db_ms += delta_ms

    owns_conn = conn is None
    try:
        if owns_conn:
            conn = db.connect_db()
        db.ping(conn)
    except Exception as e:
        print(f"POLL_FAIL stage=db err={type(e).__name__}:{str(e)[:200]}")
        if owns_conn and conn is not None:
            conn.close()
        return 1
    print("DB_OK")

    try:
        db.DB_TIMER = add_db_ms
        try:
            notified = load_notified(settings.state_file)
        except LedgerError as e:
            print(f"POLL_FAIL stage=ledger err={e}")
            return 1

        try:
            snapshot = fetch_incidents(settings.feed_url, timeout_s=settings.feed_timeout_s)
        except FeedError as e:
            print(f"POLL_FAIL stage=feed err={e}")
            return 1

        if not settings.webhook_url:
            print("WEBHOOK_NOT_CONFIGURED notifications will be logged as failed")

        result = reconcile(
            snapshot,
            notified,
            IncidentStore(conn, table=settings.table),
            WebhookSink(settings.webhook_url, timeout_s=settings.webhook_timeout_s),
            category=settings.category,
            zone_name=settings.timezone,
        )

        try:
            save_notified(settings.state_file, result.notified)
        except OSError as e:
            print(f"LEDGER_SAVE_FAIL path={settings.state_file} err={e}")

        dur_ms = int((time.time() - start) * 1000)
        print(f"POLL_OK {result.stats.as_log()} db_ms={db_ms} dur_ms={dur_ms}")
        return 0
    finally:
        db.DB_TIMER = None
        if owns_conn:
            conn.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Poll the NCDOT incident feed once and notify on crashes.")
    parser.add_argument("--feed-url", default=None, help="Override NCDOT_FEED_URL.")
    parser.add_argument("--state-file", default=None, help="Override INCIDENTS_STATE_FILE.")
    parser.add_argument("--category", default=None, help="Override INCIDENT_CATEGORY.")
    parser.add_argument("--timezone", default=None, help="Override INCIDENT_TIMEZONE.")
    parser.add_argument("--env-file", default=None, help="Path to a .env file.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.env_file)
    overrides = {
        "feed_url": args.feed_url,
        "state_file": args.state_file,
        "category": args.category,
        "timezone": args.timezone,
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v})
    print(f"POLL_START category={settings.category!r} state_file={settings.state_file}")
    return run_once(settings)


if __name__ == "__main__":
    raise SystemExit(main())
