# rx_reminder/services/reminders.py
"""
Boundary to the reminder-delivery subsystem.

The core only decides WHAT to remind about and WHEN: it hands
(instant, payload) pairs to an injected scheduler. Delivery, retries and
cancellation belong to the scheduler implementation.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Protocol, Tuple

from loguru import logger

from rx_reminder.core.settings import REMINDER_WINDOW_HOURS
from rx_reminder.schemas.models import CalendarEvent, ReminderAction, TreatmentRecord
from rx_reminder.services.progress import event_key, mark_event
from rx_reminder.utils.clock import align_clock

DEFAULT_BODY = "Time for your medication!"
SNOOZE_MINUTES = 5
REMINDER_ACTIONS = [
    {"action": "taken", "title": "Taken"},
    {"action": "snooze", "title": f"Remind me in {SNOOZE_MINUTES} min"},
]

class ReminderScheduler(Protocol):
    def schedule(self, when: datetime, payload: Dict[str, Any]) -> str:
        """Register a fire-and-forget reminder; returns a registration id."""
        ...

class MockReminderScheduler:
    """In-process scheduler that only records registrations."""

    def __init__(self) -> None:
        self.registered: List[Tuple[str, datetime, Dict[str, Any]]] = []

    def schedule(self, when: datetime, payload: Dict[str, Any]) -> str:
        reminder_id = "rem_" + uuid.uuid4().hex[:10]
        self.registered.append((reminder_id, when, payload))
        logger.info(f"Reminder {reminder_id} registered for {when.isoformat()}: {payload.get('title')}")
        return reminder_id

def upcoming_events(
    events: List[CalendarEvent],
    now: datetime,
    window_hours: int = REMINDER_WINDOW_HOURS,
) -> List[CalendarEvent]:
    horizon = timedelta(hours=window_hours)
    out = []
    for e in events:
        ref = align_clock(now, e.start)
        if ref < e.start <= ref + horizon:
            out.append(e)
    return out

def reminder_payload(event: CalendarEvent, treatment_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "title": event.title,
        "body": event.description or DEFAULT_BODY,
        "eventKey": event_key(event),
        "treatmentId": treatment_id,
        "requireInteraction": True,
        "actions": REMINDER_ACTIONS,
    }

def schedule_reminders(
    events: List[CalendarEvent],
    scheduler: ReminderScheduler,
    now: datetime,
    window_hours: int = REMINDER_WINDOW_HOURS,
    treatment_id: Optional[str] = None,
) -> List[str]:
    upcoming = upcoming_events(events, now, window_hours)
    ids = [scheduler.schedule(e.start, reminder_payload(e, treatment_id)) for e in upcoming]
    logger.info(f"Scheduled {len(ids)} reminders (next {window_hours}h) out of {len(events)} events")
    return ids

def snooze_reminder(
    scheduler: ReminderScheduler,
    payload: Dict[str, Any],
    now: datetime,
    minutes: int = SNOOZE_MINUTES,
) -> str:
    snoozed = {k: v for k, v in payload.items() if k != "actions"}
    return scheduler.schedule(now + timedelta(minutes=minutes), snoozed)

def handle_reminder_action(
    record: TreatmentRecord,
    payload: Dict[str, Any],
    action: ReminderAction,
    scheduler: ReminderScheduler,
    now: datetime,
) -> TreatmentRecord:
    """
    "taken"  -> the event is marked completed (new record returned)
    "snooze" -> reminder re-registered SNOOZE_MINUTES later, record unchanged
    """
    if action == "taken":
        return mark_event(record, payload["eventKey"], True)
    if action == "snooze":
        snooze_reminder(scheduler, payload, now)
        return record
    raise ValueError(f"Unknown reminder action: {action}")
