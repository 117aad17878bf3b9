"""
Per-run reconciliation of the feed snapshot against persisted state.

The ledger goes in as a plain mapping and a new mapping comes back in the
result; the caller owns loading and saving it. Store and sink are duck-typed:

  store.upsert(incident)
  store.query_active(category) -> list[ClearedIncident]
  store.mark_cleared(incident_id) -> rows updated
  sink.notify_new(incident, started) -> (ok, err)
  sink.notify_cleared(cleared) -> (ok, err)

Passes run strictly in order: upsert, notify-new, clear. Per-record failures
are logged and skipped; nothing here retries.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from runner.ingest.feed import filter_category
from runner.models import Incident
from runner.timefmt import format_feed_time, parse_feed_time


@dataclass
class ReconcileStats:
    total: int = 0
    matched: int = 0
    upserted: int = 0
    upsert_failed: int = 0
    notified_new: int = 0
    notify_failed: int = 0
    skipped_already_notified: int = 0
    tz_failed: int = 0
    cleared: int = 0
    clear_failed: int = 0

    def as_log(self) -> str:
        return " ".join(f"{k}={v}" for k, v in self.__dict__.items())


@dataclass
class ReconcileResult:
    notified: Dict[int, bool]
    stats: ReconcileStats = field(default_factory=ReconcileStats)


def _err(e: Exception) -> str:
    return f"{type(e).__name__}:{str(e)[:200]}"


def upsert_pass(store, current: Iterable[Incident], stats: ReconcileStats) -> None:
    for incident in current:
        try:
            store.upsert(incident)
            stats.upserted += 1
        except Exception as e:
            stats.upsert_failed += 1
            print(f"UPSERT_FAIL id={incident.id} err={_err(e)}")


def notify_new_pass(
    sink,
    current: Iterable[Incident],
    notified: Dict[int, bool],
    zone_name: str,
    stats: ReconcileStats,
) -> None:
    for incident in current:
        if notified.get(incident.id):
            stats.skipped_already_notified += 1
            continue

        try:
            zone = ZoneInfo(zone_name)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            # left unmarked so the next run tries again
            stats.tz_failed += 1
            print(f"TZ_FAIL id={incident.id} zone={zone_name} err={_err(e)}")
            continue

        started = format_feed_time(parse_feed_time(incident.start_time), zone)
        print(f"NOTIFY_NEW id={incident.id} road={incident.road!r}")
        ok, _err_msg = sink.notify_new(incident, started)  # already logged by the sink
        if ok:
            stats.notified_new += 1
        else:
            stats.notify_failed += 1
        # marked even on a failed send: one attempt per id
        notified[incident.id] = True


def clear_pass(store, sink, current_ids: set, category: str, stats: ReconcileStats) -> None:
    try:
        active = store.query_active(category)
    except Exception as e:
        print(f"CLEAR_QUERY_FAIL category={category!r} err={_err(e)}")
        return

    to_clear = [row for row in active if row.id not in current_ids]
    if not to_clear:
        print("CLEAR_NONE")
        return

    print(f"CLEAR_FOUND count={len(to_clear)}")
    for row in to_clear:
        try:
            updated = store.mark_cleared(row.id)
        except Exception as e:
            stats.clear_failed += 1
            print(f"CLEAR_FAIL id={row.id} err={_err(e)}")
            continue
        if not updated:
            print(f"CLEAR_SKIP id={row.id} reason=not_active")
            continue
        stats.cleared += 1
        print(f"CLEAR id={row.id}")
        ok, _err_msg = sink.notify_cleared(row)  # already logged by the sink
        if not ok:
            stats.notify_failed += 1


def reconcile(
    snapshot: Iterable[Incident],
    notified: Dict[int, bool],
    store,
    sink,
    *,
    category: str,
    zone_name: str,
) -> ReconcileResult:
    snapshot = list(snapshot)
    current = filter_category(snapshot, category)
    result = ReconcileResult(notified=dict(notified))
    stats = result.stats
    stats.total = len(snapshot)
    stats.matched = len(current)
    print(f"FEED_OK total={stats.total} matched={stats.matched} category={category!r}")

    upsert_pass(store, current, stats)
    notify_new_pass(sink, current, result.notified, zone_name, stats)
    clear_pass(store, sink, {i.id for i in current}, category, stats)
    return result
