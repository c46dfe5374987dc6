from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_plan
from rx_reminder.schemas.models import TreatmentItem, TreatmentPlan
from rx_reminder.services.scheduler import (
    event_description,
    event_title,
    expand_plan_to_events,
    format_event_for_display,
)


def test_amoxicillin_every_8_hours_for_one_day(amoxicillin_plan: TreatmentPlan, start: datetime) -> None:
    events = expand_plan_to_events(amoxicillin_plan, start)

    assert [e.start for e in events] == [
        datetime(2025, 1, 1, 8, 0),
        datetime(2025, 1, 1, 16, 0),
        datetime(2025, 1, 2, 0, 0),
        datetime(2025, 1, 2, 8, 0),
    ]
    assert {e.title for e in events} == {"Take Amoxicilina 500mg"}
    assert all(e.end == e.start + timedelta(minutes=5) for e in events)
    assert all(e.description is None for e in events)


@pytest.mark.parametrize(
    ("every_hours", "days"),
    [(8, 1), (6, 7), (12, 3), (5, 2), (7, 10), (24, 5), (36, 4)],
)
def test_interval_mode_count(every_hours: int, days: int, start: datetime) -> None:
    plan = make_plan({"name": "Drug", "frequency": {"everyHours": every_hours}, "durationDays": days})
    events = expand_plan_to_events(plan, start)
    assert len(events) == (days * 24) // every_hours + 1


def test_interval_mode_drifts_across_days(start: datetime) -> None:
    plan = make_plan({"name": "Drug", "frequency": {"everyHours": 5}, "durationDays": 1})
    hours = [e.start.hour for e in expand_plan_to_events(plan, start)]
    assert hours == [8, 13, 18, 23, 4]


def test_times_per_day_spreads_from_start_hour(start: datetime) -> None:
    plan = make_plan({"name": "Drug", "frequency": {"timesPerDay": 3}, "durationDays": 2})
    events = expand_plan_to_events(plan, start)

    assert [e.start for e in events] == [
        datetime(2025, 1, 1, 8, 0),
        datetime(2025, 1, 1, 16, 0),
        datetime(2025, 1, 2, 0, 0),
        datetime(2025, 1, 2, 8, 0),
        datetime(2025, 1, 2, 16, 0),
        datetime(2025, 1, 3, 0, 0),
    ]


def test_times_per_day_truncates_fractional_hours_and_keeps_minute() -> None:
    plan = make_plan({"name": "Drug", "frequency": {"timesPerDay": 5}, "durationDays": 1})
    events = expand_plan_to_events(plan, datetime(2025, 3, 10, 8, 30, 45))

    assert [(e.start.day, e.start.hour, e.start.minute, e.start.second) for e in events] == [
        (10, 8, 30, 0),
        (10, 12, 30, 0),
        (10, 17, 30, 0),
        (10, 22, 30, 0),
        (11, 3, 30, 0),
    ]


@pytest.mark.parametrize("times_per_day", [1, 2, 3, 4, 6, 8])
def test_times_per_day_yields_k_events_per_day(times_per_day: int, start: datetime) -> None:
    plan = make_plan({"name": "Drug", "frequency": {"timesPerDay": times_per_day}, "durationDays": 4})
    assert len(expand_plan_to_events(plan, start)) == times_per_day * 4


def test_preferred_times_are_used_per_day(start: datetime) -> None:
    plan = make_plan(
        {
            "name": "Drug",
            "frequency": {"timesPerDay": 2},
            "durationDays": 2,
            "preferredTimes": ["09:15", "21:00", "23:00"],
        }
    )
    events = expand_plan_to_events(plan, start)

    assert [e.start for e in events] == [
        datetime(2025, 1, 1, 9, 15),
        datetime(2025, 1, 1, 21, 0),
        datetime(2025, 1, 2, 9, 15),
        datetime(2025, 1, 2, 21, 0),
    ]


def test_fewer_preferred_times_than_count_are_not_padded(start: datetime) -> None:
    plan = make_plan(
        {"name": "Drug", "frequency": {"timesPerDay": 3}, "durationDays": 3, "preferredTimes": ["07:00"]}
    )
    events = expand_plan_to_events(plan, start)
    assert [(e.start.day, e.start.hour) for e in events] == [(1, 7), (2, 7), (3, 7)]


def test_malformed_preferred_time_is_skipped(start: datetime) -> None:
    plan = make_plan(
        {
            "name": "Drug",
            "frequency": {"timesPerDay": 3},
            "durationDays": 1,
            "preferredTimes": ["08:00", "noon", "25:00", "20:00"],
        }
    )
    events = expand_plan_to_events(plan, start)
    # only the first three entries are considered; two of them are invalid
    assert [e.start.hour for e in events] == [8]


def test_item_without_frequency_yields_no_events_but_siblings_do(start: datetime) -> None:
    plan = make_plan(
        {"name": "Mystery", "frequency": {}, "durationDays": 3},
        {"name": "Zero", "frequency": {"everyHours": 0}, "durationDays": 3},
        {"name": "Drug", "frequency": {"timesPerDay": 1}, "durationDays": 2},
    )
    events = expand_plan_to_events(plan, start)
    assert [e.title for e in events] == ["Take Drug", "Take Drug"]


@pytest.mark.parametrize("days", [0, -2])
def test_non_positive_duration_yields_no_events(days: int, start: datetime) -> None:
    plan = make_plan({"name": "Drug", "frequency": {"everyHours": 8}, "durationDays": days})
    assert expand_plan_to_events(plan, start) == []


def test_both_frequencies_set_uses_interval_mode(start: datetime) -> None:
    plan = make_plan({"name": "Drug", "frequency": {"everyHours": 12, "timesPerDay": 4}, "durationDays": 1})
    assert len(expand_plan_to_events(plan, start)) == 3


def test_output_is_sorted_regardless_of_item_order(start: datetime) -> None:
    plan = make_plan(
        {"name": "Late", "frequency": {"timesPerDay": 1}, "durationDays": 2, "preferredTimes": ["22:00"]},
        {"name": "Early", "frequency": {"everyHours": 6}, "durationDays": 2},
        {"type": "care", "name": "Dressing", "frequency": {"timesPerDay": 2}, "durationDays": 2},
    )
    events = expand_plan_to_events(plan, start)
    starts = [e.start for e in events]
    assert starts == sorted(starts)


def test_ties_keep_item_order(start: datetime) -> None:
    plan = make_plan(
        {"name": "B", "frequency": {"everyHours": 12}, "durationDays": 1},
        {"name": "A", "frequency": {"everyHours": 12}, "durationDays": 1},
    )
    titles = [e.title for e in expand_plan_to_events(plan, start)]
    assert titles == ["Take B", "Take A"] * 3


def test_expansion_is_deterministic(amoxicillin_plan: TreatmentPlan, start: datetime) -> None:
    first = expand_plan_to_events(amoxicillin_plan, start)
    second = expand_plan_to_events(amoxicillin_plan, start)
    assert [e.model_dump_json() for e in first] == [e.model_dump_json() for e in second]


def test_event_ids_are_unique_even_for_identical_titles(start: datetime) -> None:
    plan = make_plan(
        {"name": "Dipirona", "frequency": {"everyHours": 6}, "durationDays": 1},
        {"name": "Dipirona", "frequency": {"everyHours": 6}, "durationDays": 1},
    )
    events = expand_plan_to_events(plan, start)
    assert len({e.event_id for e in events}) == len(events) == 10


def test_aware_start_keeps_its_timezone() -> None:
    tz = timezone(timedelta(hours=-3))
    plan = make_plan({"name": "Drug", "frequency": {"timesPerDay": 2}, "durationDays": 1})
    events = expand_plan_to_events(plan, datetime(2025, 1, 1, 9, 0, tzinfo=tz))
    assert [e.start for e in events] == [
        datetime(2025, 1, 1, 9, 0, tzinfo=tz),
        datetime(2025, 1, 1, 21, 0, tzinfo=tz),
    ]


def test_titles_and_descriptions() -> None:
    med = TreatmentItem.model_validate(
        {"name": "Ibuprofeno", "dose": 2.5, "unit": "ml", "route": "oral", "notes": "after meals", "durationDays": 1}
    )
    no_unit = TreatmentItem.model_validate({"name": "Dipirona", "dose": 500, "durationDays": 1})
    no_dose = TreatmentItem.model_validate({"name": "Vitamin D", "durationDays": 1})
    care = TreatmentItem.model_validate({"type": "care", "name": "wound dressing", "durationDays": 1, "dose": 1})

    assert event_title(med) == "Take Ibuprofeno 2.5ml"
    assert event_title(no_unit) == "Take Dipirona 500mg"
    assert event_title(no_dose) == "Take Vitamin D"
    assert event_title(care) == "Do wound dressing"
    assert event_description(med) == "Route: oral\nNotes: after meals"
    assert event_description(no_unit) is None


def test_format_event_for_display(amoxicillin_plan: TreatmentPlan, start: datetime) -> None:
    event = expand_plan_to_events(amoxicillin_plan, start)[2]
    assert format_event_for_display(event) == "02/01/2025 at 00:00 - Take Amoxicilina 500mg"
