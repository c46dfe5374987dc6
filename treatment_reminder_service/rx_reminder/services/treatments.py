# rx_reminder/services/treatments.py
"""
Treatment lifecycle on top of an injected TreatmentRepository.

create -> (mark / update completion)* ; status flips between active and
completed as a side effect of completion updates (see progress.py).
"""
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger

from rx_reminder.schemas.models import TreatmentPlan, TreatmentRecord, TreatmentStatus
from rx_reminder.services.progress import event_key, mark_event, set_completed_events
from rx_reminder.services.scheduler import expand_plan_to_events
from rx_reminder.services.treatment_store import TreatmentRepository


class TreatmentNotFoundError(KeyError):
    pass


class UnknownEventError(KeyError):
    pass


def _treatment_id() -> str:
    return "treatment_" + uuid.uuid4().hex[:12]


def localize_start(start: datetime, tz_name: Optional[str]) -> datetime:
    """A naive start time is read as wall-clock time in `tz_name` (if given)."""
    if start.tzinfo is not None or not tz_name:
        return start
    try:
        return start.replace(tzinfo=ZoneInfo(tz_name))
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {tz_name}") from e


def build_treatment(
    plan: TreatmentPlan,
    start: datetime,
    treatment_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> TreatmentRecord:
    return TreatmentRecord(
        id=treatment_id or _treatment_id(),
        plan=plan,
        events=expand_plan_to_events(plan, start),
        start_date_time=start,
        created_at=created_at or datetime.now(timezone.utc),
        status="active",
        completed_events={},
    )


def add_treatment(repo: TreatmentRepository, plan: TreatmentPlan, start: datetime) -> TreatmentRecord:
    record = build_treatment(plan, start)
    repo.save_record(record)
    logger.info(f"Treatment {record.id} created: {plan.plan_title!r}, {len(record.events)} events")
    return record


def get_treatment(repo: TreatmentRepository, treatment_id: str) -> TreatmentRecord:
    for r in repo.load():
        if r.id == treatment_id:
            return r
    raise TreatmentNotFoundError(treatment_id)


def list_treatments(repo: TreatmentRepository, status: Optional[TreatmentStatus] = None) -> List[TreatmentRecord]:
    records = repo.load()
    if status is None:
        return records
    return [r for r in records if r.status == status]


def get_active_treatments(repo: TreatmentRepository) -> List[TreatmentRecord]:
    return list_treatments(repo, "active")


def get_completed_treatments(repo: TreatmentRepository) -> List[TreatmentRecord]:
    return list_treatments(repo, "completed")


def replace_treatment(repo: TreatmentRepository, record: TreatmentRecord) -> TreatmentRecord:
    get_treatment(repo, record.id)
    repo.save_record(record)
    return record


def update_treatment_events(
    repo: TreatmentRepository,
    treatment_id: str,
    completed_events: Dict[str, bool],
) -> TreatmentRecord:
    updated = set_completed_events(get_treatment(repo, treatment_id), completed_events)
    return replace_treatment(repo, updated)


def mark_treatment_event(
    repo: TreatmentRepository,
    treatment_id: str,
    key: str,
    completed: bool = True,
) -> TreatmentRecord:
    record = get_treatment(repo, treatment_id)
    if key not in {event_key(e) for e in record.events}:
        raise UnknownEventError(key)

    updated = mark_event(record, key, completed)
    if updated.status != record.status:
        logger.info(f"Treatment {treatment_id}: {record.status} -> {updated.status}")
    return replace_treatment(repo, updated)
