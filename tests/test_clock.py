from __future__ import annotations

from datetime import datetime, timedelta, timezone

from rx_reminder.utils.clock import align_clock, parse_hhmm


def test_parse_hhmm() -> None:
    assert parse_hhmm("08:00") == (8, 0)
    assert parse_hhmm(" 7:30 ") == (7, 30)
    assert parse_hhmm("24:00") is None
    assert parse_hhmm("8h") is None


def test_aware_value_becomes_local_wall_clock_for_naive_reference() -> None:
    now_utc = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    aligned = align_clock(now_utc, datetime(2025, 1, 1, 8, 0))

    assert aligned.tzinfo is None
    # read back as local time it is the same instant
    assert aligned.astimezone(timezone.utc) == now_utc


def test_naive_value_takes_reference_zone() -> None:
    tz = timezone(timedelta(hours=-3))
    aligned = align_clock(datetime(2025, 1, 1, 8, 0), datetime(2025, 1, 2, 0, 0, tzinfo=tz))
    assert aligned == datetime(2025, 1, 1, 8, 0, tzinfo=tz)


def test_aware_pair_is_unchanged() -> None:
    value = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)
    assert align_clock(value, datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)) is value
