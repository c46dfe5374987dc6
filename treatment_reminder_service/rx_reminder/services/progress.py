# rx_reminder/services/progress.py
"""
Completion tracking over a TreatmentRecord.

Every function here is pure: records come in, new records come out. Storing
them (and resolving concurrent writers) is the repository's job.
"""
from datetime import datetime
from typing import Dict, Optional

from rx_reminder.schemas.models import CalendarEvent, Progress, TreatmentRecord, TreatmentStatus
from rx_reminder.utils.clock import align_clock

def event_key(event: CalendarEvent) -> str:
    if event.event_id:
        return event.event_id
    # records saved before events carried ids
    return f"{event.start.isoformat()}-{event.title}"

def _all_completed(record: TreatmentRecord, completed: Dict[str, bool]) -> bool:
    return bool(record.events) and all(completed.get(event_key(e)) is True for e in record.events)

def _status_for(record: TreatmentRecord, completed: Dict[str, bool]) -> TreatmentStatus:
    return "completed" if _all_completed(record, completed) else "active"

def treatment_progress(record: TreatmentRecord) -> Progress:
    done = sum(1 for e in record.events if record.completed_events.get(event_key(e)) is True)
    return Progress(completed=done, total=len(record.events))

def next_event(record: TreatmentRecord, now: datetime) -> Optional[CalendarEvent]:
    best: Optional[CalendarEvent] = None
    for e in record.events:
        if record.completed_events.get(event_key(e)):
            continue
        if e.start < align_clock(now, e.start):
            continue
        # strict "<" keeps the first one in original order on ties
        if best is None or e.start < best.start:
            best = e
    return best

def set_completed_events(record: TreatmentRecord, completed_events: Dict[str, bool]) -> TreatmentRecord:
    completed = dict(completed_events)
    return record.model_copy(update={
        "completed_events": completed,
        "status": _status_for(record, completed),
    })

def mark_event(record: TreatmentRecord, key: str, completed: bool = True) -> TreatmentRecord:
    updated = dict(record.completed_events)
    updated[key] = bool(completed)
    return set_completed_events(record, updated)
