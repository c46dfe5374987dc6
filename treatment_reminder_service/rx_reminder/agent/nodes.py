# rx_reminder/agent/nodes.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from langgraph.types import interrupt
from loguru import logger

from rx_reminder.agent.state import AgentState
from rx_reminder.deps import get_reminder_scheduler, get_treatment_repo
from rx_reminder.services.llm.extraction import llm_extract_plan
from rx_reminder.services.plan_validation import parse_treatment_plan
from rx_reminder.services.reminders import ReminderScheduler, schedule_reminders
from rx_reminder.services.treatment_store import TreatmentRepository
from rx_reminder.services.treatments import add_treatment, localize_start

def _audit(state: AgentState, event: str, extra: Dict[str, Any] | None = None) -> Dict[str, Any]:
    audit = list(state.get("audit") or [])
    audit.append({"event": event, **(extra or {})})
    return {"audit": audit}

def extract_node(state: AgentState) -> Dict[str, Any]:
    if state.get("plan"):
        plan = parse_treatment_plan(state["plan"])
        return {
            "plan": plan.model_dump(mode="json", by_alias=True),
            **_audit(state, "extract.skip", {"reason": "plan already provided", "items": len(plan.items)}),
        }

    plan = llm_extract_plan(state.get("image_base64") or "", state.get("user_notes"))
    return {
        "plan": plan.model_dump(mode="json", by_alias=True),
        "image_base64": "",  # do not keep the photo in checkpoints
        **_audit(state, "extract.llm.done", {"items": len(plan.items)}),
    }

def review_node(state: AgentState) -> Dict[str, Any]:
    """
    Interrupt until the user confirms the plan and picks a start time.
    Resume payload expected: {"startDateTime": ISO str, "timezone": IANA name (optional),
    "plan": {...} (optional edits)}.
    """
    payload = {
        "type": "NEED_CONFIRMATION",
        "session_id": state["session_id"],
        "plan": state.get("plan", {}),
        "instructions": "Review the extracted plan, edit it if needed, then confirm a start date/time.",
    }

    resume = interrupt(payload)
    return {"confirmation": resume if isinstance(resume, dict) else {}, **_audit(state, "review.resumed")}

def confirm_treatment(
    state: AgentState,
    repo: TreatmentRepository,
    scheduler: ReminderScheduler,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    confirmation = state.get("confirmation") or {}
    plan = parse_treatment_plan(confirmation.get("plan") or state["plan"])
    start = localize_start(datetime.fromisoformat(confirmation["startDateTime"]), confirmation.get("timezone"))

    record = add_treatment(repo, plan, start)
    reminders = schedule_reminders(
        record.events,
        scheduler,
        now or datetime.now(timezone.utc),
        treatment_id=record.id,
    )
    logger.info(f"Session {state.get('session_id')}: treatment {record.id} confirmed")

    return {
        "plan": plan.model_dump(mode="json", by_alias=True),
        "record": record.model_dump(mode="json", by_alias=True),
        "reminders": reminders,
        **_audit(state, "schedule.done", {"treatment_id": record.id, "events": len(record.events), "reminders": len(reminders)}),
    }

def schedule_node(state: AgentState) -> Dict[str, Any]:
    return confirm_treatment(state, get_treatment_repo(), get_reminder_scheduler())
