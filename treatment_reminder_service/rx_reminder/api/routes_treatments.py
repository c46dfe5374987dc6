# rx_reminder/api/routes_treatments.py
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from rx_reminder.core.settings import DEFAULT_TIMEZONE, REMINDER_WINDOW_HOURS
from rx_reminder.deps import get_treatment_repo
from rx_reminder.schemas.models import (
    CalendarEvent,
    CalendarLinkResponse,
    CompletedEventsRequest,
    CreateTreatmentRequest,
    MarkEventRequest,
    Progress,
    TreatmentRecord,
    TreatmentStatus,
)
from rx_reminder.services.ics import ICS_FILENAME, ICS_MIME_TYPE, events_to_ics, google_calendar_url
from rx_reminder.services.plan_validation import PlanValidationError, parse_treatment_plan
from rx_reminder.services.progress import next_event, treatment_progress
from rx_reminder.services.reminders import upcoming_events
from rx_reminder.services.treatment_store import TreatmentRepository
from rx_reminder.services.treatments import (
    TreatmentNotFoundError,
    UnknownEventError,
    add_treatment,
    get_treatment,
    list_treatments,
    localize_start,
    mark_treatment_event,
    update_treatment_events,
)

router = APIRouter(prefix="/treatments", tags=["treatments"])

CALENDAR_LINK_NOTE = (
    "This link adds only the first dose to your calendar. "
    "Download the .ics file to import the whole treatment."
)

def _load(repo: TreatmentRepository, treatment_id: str) -> TreatmentRecord:
    try:
        return get_treatment(repo, treatment_id)
    except TreatmentNotFoundError:
        raise HTTPException(status_code=404, detail="treatment not found")

def _now() -> datetime:
    return datetime.now(timezone.utc)

@router.post("", response_model=TreatmentRecord, status_code=201)
def create_treatment(req: CreateTreatmentRequest, repo: TreatmentRepository = Depends(get_treatment_repo)):
    try:
        plan = parse_treatment_plan(req.plan)
        start = localize_start(req.start_date_time, req.timezone or DEFAULT_TIMEZONE)
    except PlanValidationError as e:
        raise HTTPException(status_code=422, detail=e.problems)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return add_treatment(repo, plan, start)

@router.get("", response_model=List[TreatmentRecord])
def treatments(status: Optional[TreatmentStatus] = None, repo: TreatmentRepository = Depends(get_treatment_repo)):
    return list_treatments(repo, status)

@router.get("/{treatment_id}", response_model=TreatmentRecord)
def treatment(treatment_id: str, repo: TreatmentRepository = Depends(get_treatment_repo)):
    return _load(repo, treatment_id)

@router.get("/{treatment_id}/progress", response_model=Progress)
def progress(treatment_id: str, repo: TreatmentRepository = Depends(get_treatment_repo)):
    return treatment_progress(_load(repo, treatment_id))

@router.get("/{treatment_id}/next", response_model=Optional[CalendarEvent])
def upcoming(treatment_id: str, repo: TreatmentRepository = Depends(get_treatment_repo)):
    return next_event(_load(repo, treatment_id), _now())

@router.post("/{treatment_id}/events/mark", response_model=TreatmentRecord)
def mark(treatment_id: str, req: MarkEventRequest, repo: TreatmentRepository = Depends(get_treatment_repo)):
    try:
        return mark_treatment_event(repo, treatment_id, req.event_key, req.completed)
    except TreatmentNotFoundError:
        raise HTTPException(status_code=404, detail="treatment not found")
    except UnknownEventError:
        raise HTTPException(status_code=404, detail="eventKey not found in treatment events")

@router.put("/{treatment_id}/events", response_model=TreatmentRecord)
def replace_completed(treatment_id: str, req: CompletedEventsRequest, repo: TreatmentRepository = Depends(get_treatment_repo)):
    try:
        return update_treatment_events(repo, treatment_id, req.completed_events)
    except TreatmentNotFoundError:
        raise HTTPException(status_code=404, detail="treatment not found")

@router.get("/{treatment_id}/calendar.ics")
def calendar_file(treatment_id: str, repo: TreatmentRepository = Depends(get_treatment_repo)):
    record = _load(repo, treatment_id)
    return Response(
        content=events_to_ics(record.events),
        media_type=ICS_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{ICS_FILENAME}"'},
    )

@router.get("/{treatment_id}/calendar-link", response_model=CalendarLinkResponse)
def calendar_link(treatment_id: str, repo: TreatmentRepository = Depends(get_treatment_repo)):
    record = _load(repo, treatment_id)
    return CalendarLinkResponse(url=google_calendar_url(record.events), note=CALENDAR_LINK_NOTE)

@router.get("/{treatment_id}/reminders/upcoming", response_model=List[CalendarEvent])
def reminders_upcoming(treatment_id: str, hours: int = REMINDER_WINDOW_HOURS, repo: TreatmentRepository = Depends(get_treatment_repo)):
    return upcoming_events(_load(repo, treatment_id).events, _now(), hours)
