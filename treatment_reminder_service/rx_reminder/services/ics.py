# rx_reminder/services/ics.py
"""
Calendar export: RFC 5545 (.ics) documents and a single-event
"add to Google Calendar" link.
"""
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from urllib.parse import urlencode

import vobject

from rx_reminder.schemas.models import CalendarEvent

ICS_MIME_TYPE = "text/calendar; charset=utf-8"
ICS_FILENAME = "treatment-reminders.ics"
PRODID = "-//Treatment Reminder//Prescription Schedule//EN"
UID_DOMAIN = "rx-reminder.local"
GOOGLE_CALENDAR_RENDER_URL = "https://calendar.google.com/calendar/render"

def to_utc(value: datetime) -> datetime:
    # naive datetimes are read as local time
    return value.astimezone(timezone.utc)

def format_ics_datetime(value: datetime) -> str:
    return to_utc(value).strftime("%Y%m%dT%H%M%SZ")

def _new_uid() -> str:
    return f"treatment-{uuid.uuid4().hex}@{UID_DOMAIN}"

def events_to_ics(events: Iterable[CalendarEvent], *, now: Optional[datetime] = None) -> bytes:
    """
    One VEVENT per event. An empty input gives a valid calendar with no
    VEVENT blocks. DTSTAMP is the generation time (`now`, default: current UTC).

    vobject does the text escaping, 75-octet line folding and CRLF endings.
    """
    stamp = to_utc(now or datetime.now(timezone.utc))

    cal = vobject.iCalendar()
    cal.add("prodid").value = PRODID
    cal.add("calscale").value = "GREGORIAN"
    cal.add("method").value = "PUBLISH"

    for event in events:
        vevent = cal.add("vevent")
        vevent.add("uid").value = _new_uid()
        vevent.add("dtstamp").value = stamp
        vevent.add("dtstart").value = to_utc(event.start)
        vevent.add("dtend").value = to_utc(event.end or event.start)
        vevent.add("summary").value = event.title
        if event.description:
            vevent.add("description").value = event.description

    return cal.serialize().encode("utf-8")

def google_calendar_url(events: List[CalendarEvent]) -> str:
    """
    Link for the FIRST event only; importing a whole course of treatment
    needs the .ics file.
    """
    if not events:
        return ""

    first = events[0]
    params = {
        "action": "TEMPLATE",
        "text": first.title,
        "dates": f"{format_ics_datetime(first.start)}/{format_ics_datetime(first.end or first.start)}",
        "details": first.description or "",
        "trp": "false",
    }
    return f"{GOOGLE_CALENDAR_RENDER_URL}?{urlencode(params)}"
