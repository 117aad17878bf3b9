from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Union


# fixed English names; strftime %a/%b/%p follow LC_TIME
_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class ParsedInstant:
    value: datetime


@dataclass(frozen=True)
class RawString:
    value: str


FeedTime = Union[ParsedInstant, RawString]


def parse_feed_time(value: str | None) -> FeedTime:
    raw = (value or "").strip()
    if not raw:
        return RawString(value or "")
    candidate = raw[:-1] + "+00:00" if raw[-1] in "zZ" else raw
    try:
        dt = datetime.fromisoformat(candidate)
    except ValueError:
        return RawString(value)
    # RFC 3339 requires an offset; naive values are not trusted
    if dt.tzinfo is None:
        return RawString(value)
    return ParsedInstant(dt)


def format_feed_time(ft: FeedTime, zone: tzinfo) -> str:
    """Renders e.g. 'Mon, Jan 2, 3:04 PM EST'; raw strings pass through."""
    if isinstance(ft, RawString):
        return ft.value
    local = ft.value.astimezone(zone)
    hour = local.hour % 12 or 12
    ampm = "PM" if local.hour >= 12 else "AM"
    return (
        f"{_DAYS[local.weekday()]}, {_MONTHS[local.month - 1]} {local.day}, "
        f"{hour}:{local.minute:02d} {ampm} {local.tzname() or ''}"
    ).rstrip()
