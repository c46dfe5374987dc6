# rx_reminder/services/scheduler.py
"""
Expands a TreatmentPlan into concrete, time-ordered CalendarEvents.

All arithmetic is wall-clock arithmetic in the frame of the start instant
the caller passes in (naive or tz-aware). No DST special-casing: a dose that
lands in a skipped/repeated local hour is kept as computed.
"""
from datetime import datetime, timedelta
from typing import Iterator, List, Optional, Tuple

from loguru import logger

from rx_reminder.schemas.models import CalendarEvent, TreatmentItem, TreatmentPlan
from rx_reminder.utils.clock import parse_hhmm

EVENT_LENGTH = timedelta(minutes=5)
DEFAULT_UNIT = "mg"

def _positive(value: Optional[int]) -> Optional[int]:
    return value if isinstance(value, int) and value > 0 else None

def _format_dose(dose: float) -> str:
    return str(int(dose)) if float(dose).is_integer() else str(dose)

def event_title(item: TreatmentItem) -> str:
    if item.type == "medication":
        if item.dose:
            return f"Take {item.name} {_format_dose(item.dose)}{item.unit or DEFAULT_UNIT}"
        return f"Take {item.name}"
    return f"Do {item.name}"

def event_description(item: TreatmentItem) -> Optional[str]:
    lines = []
    if item.route:
        lines.append(f"Route: {item.route}")
    if item.notes:
        lines.append(f"Notes: {item.notes}")
    return "\n".join(lines) or None

def _interval_starts(start: datetime, every_hours: int, duration_days: int) -> Iterator[datetime]:
    # duration is an absolute span from the start instant, not from midnight
    step = timedelta(hours=every_hours)
    end = start + timedelta(days=duration_days)
    current = start
    while current <= end:
        yield current
        current += step

def _preferred_slots(item: TreatmentItem, times_per_day: int) -> List[Tuple[int, int]]:
    slots: List[Tuple[int, int]] = []
    for hhmm in (item.preferred_times or [])[:times_per_day]:
        parsed = parse_hhmm(hhmm)
        if parsed is None:
            logger.warning(f"Skipping malformed preferred time {hhmm!r} for {item.name!r}")
            continue
        slots.append(parsed)
    return slots

def _daily_starts(item: TreatmentItem, start: datetime, times_per_day: int) -> Iterator[datetime]:
    midnight = start.replace(hour=0, minute=0, second=0, microsecond=0)
    slots = _preferred_slots(item, times_per_day) if item.preferred_times else None

    for day in range(item.duration_days):
        day_start = midnight + timedelta(days=day)

        if slots is not None:
            for hour, minute in slots:
                yield day_start.replace(hour=hour, minute=minute)
            continue

        # K doses spread over 24h from the start hour; fractional hours are
        # truncated and the start minute is carried as-is. Hours past 23
        # belong to the next calendar day.
        for i in range(times_per_day):
            hour = start.hour + (i * 24) // times_per_day
            yield (day_start + timedelta(days=hour // 24)).replace(hour=hour % 24, minute=start.minute)

def generate_events_for_item(item: TreatmentItem, start: datetime, item_index: int = 0) -> List[CalendarEvent]:
    every_hours = _positive(item.frequency.every_hours)
    times_per_day = _positive(item.frequency.times_per_day)

    if item.duration_days <= 0:
        logger.warning(f"{item.name!r}: durationDays={item.duration_days}, no events generated")
        return []

    if every_hours and times_per_day:
        logger.warning(f"{item.name!r}: both everyHours and timesPerDay set, using everyHours")

    if every_hours:
        starts = _interval_starts(start, every_hours, item.duration_days)
    elif times_per_day:
        starts = _daily_starts(item, start, times_per_day)
    else:
        logger.warning(f"{item.name!r}: no usable frequency, no events generated")
        return []

    title = event_title(item)
    description = event_description(item)
    return [
        CalendarEvent(
            event_id=f"evt-{item_index}-{n}",
            title=title,
            description=description,
            start=when,
            end=when + EVENT_LENGTH,
        )
        for n, when in enumerate(starts)
    ]

def expand_plan_to_events(plan: TreatmentPlan, start: datetime) -> List[CalendarEvent]:
    events: List[CalendarEvent] = []
    for idx, item in enumerate(plan.items):
        events.extend(generate_events_for_item(item, start, item_index=idx))

    # stable: ties keep item order, then generation order
    events.sort(key=lambda e: e.start)
    logger.debug(f"Expanded plan {plan.plan_title!r} into {len(events)} events")
    return events

def format_event_for_display(event: CalendarEvent) -> str:
    return f"{event.start:%d/%m/%Y} at {event.start:%H:%M} - {event.title}"
