import locale
from datetime import timezone
from zoneinfo import ZoneInfo

import pytest

from runner.timefmt import ParsedInstant, RawString, format_feed_time, parse_feed_time


NY = ZoneInfo("America/New_York")


def test_parses_utc_z_suffix():
    ft = parse_feed_time("2024-01-02T20:04:00Z")
    assert isinstance(ft, ParsedInstant)
    assert ft.value.utcoffset().total_seconds() == 0


def test_parses_offset():
    ft = parse_feed_time("2024-07-04T12:30:00-04:00")
    assert isinstance(ft, ParsedInstant)
    assert ft.value.astimezone(timezone.utc).hour == 16


def test_unparseable_and_naive_stay_raw():
    assert parse_feed_time("soon") == RawString("soon")
    assert parse_feed_time("2024-01-02T20:04:00") == RawString("2024-01-02T20:04:00")
    assert parse_feed_time("") == RawString("")
    assert parse_feed_time(None) == RawString("")


def test_format_winter_and_summer():
    assert format_feed_time(parse_feed_time("2024-01-02T20:04:00Z"), NY) == "Tue, Jan 2, 3:04 PM EST"
    assert format_feed_time(parse_feed_time("2024-07-04T16:30:00Z"), NY) == "Thu, Jul 4, 12:30 PM EDT"
    assert format_feed_time(parse_feed_time("2024-03-10T05:05:00Z"), NY) == "Sun, Mar 10, 12:05 AM EST"


def test_format_raw_passthrough():
    assert format_feed_time(RawString("Jan 2 afternoon"), NY) == "Jan 2 afternoon"


def test_format_is_english_regardless_of_lc_time():
    previous = locale.setlocale(locale.LC_TIME)
    for name in ("de_DE.UTF-8", "de_DE.utf8", "fr_FR.UTF-8", "fr_FR.utf8"):
        try:
            locale.setlocale(locale.LC_TIME, name)
            break
        except locale.Error:
            continue
    else:
        pytest.skip("no non-English locale installed")
    try:
        assert format_feed_time(parse_feed_time("2024-07-04T16:30:00Z"), NY) == "Thu, Jul 4, 12:30 PM EDT"
        assert format_feed_time(parse_feed_time("2024-03-10T05:05:00Z"), NY) == "Sun, Mar 10, 12:05 AM EST"
    finally:
        locale.setlocale(locale.LC_TIME, previous)
