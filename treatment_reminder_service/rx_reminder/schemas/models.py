from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

ItemType = Literal["medication", "care"]
TreatmentStatus = Literal["active", "completed"]
NextStep = Literal["NEED_CONFIRMATION", "DONE"]
ReminderAction = Literal["taken", "snooze"]

SAFETY_NOTE = (
    "Not medical advice. This service only organizes the prescription you photographed. "
    "Always confirm doses and times with your doctor or pharmacist."
)

class WireModel(BaseModel):
    # camelCase on the wire (OCR output, API, stored JSON), snake_case in Python
    model_config = ConfigDict(populate_by_name=True, frozen=True)

class Frequency(WireModel):
    every_hours: Optional[int] = Field(default=None, alias="everyHours")
    times_per_day: Optional[int] = Field(default=None, alias="timesPerDay")

class TreatmentItem(WireModel):
    type: ItemType = "medication"
    name: str
    dose: Optional[float] = None
    unit: Optional[str] = None
    route: Optional[str] = None           # e.g. "oral", "IM"
    frequency: Frequency = Field(default_factory=Frequency)
    duration_days: int = Field(..., alias="durationDays")
    preferred_times: Optional[List[str]] = Field(default=None, alias="preferredTimes")  # ["08:00", "16:00"]
    notes: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0, le=1)

class TreatmentPlan(WireModel):
    plan_title: str = Field(..., alias="planTitle")
    summary: str = ""
    items: List[TreatmentItem] = Field(default_factory=list)

class CalendarEvent(WireModel):
    event_id: Optional[str] = Field(default=None, alias="eventId")
    title: str
    description: Optional[str] = None
    start: datetime = Field(..., alias="startISO")
    end: Optional[datetime] = Field(default=None, alias="endISO")

class TreatmentRecord(WireModel):
    id: str
    plan: TreatmentPlan
    events: List[CalendarEvent] = Field(default_factory=list)
    start_date_time: datetime = Field(..., alias="startDateTime")
    created_at: datetime = Field(..., alias="createdAt")
    status: TreatmentStatus = "active"
    completed_events: Dict[str, bool] = Field(default_factory=dict, alias="completedEvents")  # event key -> done

class Progress(BaseModel):
    completed: int
    total: int

# ---------------------------
# API payloads
# ---------------------------
class AnalyzeRequest(WireModel):
    image_base64: Optional[str] = Field(default=None, alias="imageBase64")
    user_notes: Optional[str] = Field(default=None, alias="userNotes")
    plan: Optional[Dict[str, Any]] = None   # already-extracted plan (skips the vision model)

class AnalyzeResponse(WireModel):
    session_id: str = Field(..., alias="sessionId")
    plan: TreatmentPlan
    next_step: Optional[NextStep] = Field(default=None, alias="nextStep")
    safety_note: str = Field(default=SAFETY_NOTE, alias="safetyNote")

class ConfirmRequest(WireModel):
    session_id: str = Field(..., alias="sessionId")
    start_date_time: datetime = Field(..., alias="startDateTime")
    timezone: Optional[str] = None
    plan: Optional[Dict[str, Any]] = None   # user edits of the proposed plan

class ConfirmResponse(WireModel):
    record: TreatmentRecord
    reminders_scheduled: int = Field(default=0, alias="remindersScheduled")
    next_step: Optional[NextStep] = Field(default="DONE", alias="nextStep")

class CreateTreatmentRequest(WireModel):
    plan: Dict[str, Any]
    start_date_time: datetime = Field(..., alias="startDateTime")
    timezone: Optional[str] = None

class MarkEventRequest(WireModel):
    event_key: str = Field(..., alias="eventKey")
    completed: bool = True

class CompletedEventsRequest(WireModel):
    completed_events: Dict[str, bool] = Field(default_factory=dict, alias="completedEvents")

class CalendarLinkResponse(BaseModel):
    url: str
    note: str
