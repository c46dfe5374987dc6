# rx_reminder/api/routes_ai.py
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from langgraph.types import Command

from rx_reminder.agent.graph import get_graph
from rx_reminder.core.settings import DEFAULT_TIMEZONE
from rx_reminder.schemas.models import (
    AnalyzeRequest, AnalyzeResponse,
    ConfirmRequest, ConfirmResponse,
    TreatmentPlan, TreatmentRecord,
)
from rx_reminder.services.hf_client import HFLLMError
from rx_reminder.services.ollama_client import OllamaError
from rx_reminder.services.plan_validation import PlanValidationError, parse_treatment_plan
from rx_reminder.services.treatments import localize_start

router = APIRouter(prefix="/ai", tags=["ai"])

def _config(session_id: str):
    return {"configurable": {"thread_id": session_id}}

def _pending_interrupt_type(snap) -> Optional[str]:
    interrupts = tuple(getattr(snap, "interrupts", None) or ())
    if not interrupts:
        interrupts = tuple(i for t in (snap.tasks or ()) for i in (getattr(t, "interrupts", None) or ()))
    if not interrupts:
        return None
    payload = interrupts[-1].value
    return payload.get("type") if isinstance(payload, dict) else None

@router.post("/analyze", response_model=AnalyzeResponse)
def ai_analyze(req: AnalyzeRequest):
    if not req.image_base64 and not req.plan:
        raise HTTPException(status_code=400, detail="Provide imageBase64 or plan.")

    session_id = "session_" + uuid.uuid4().hex
    initial_state: Dict[str, Any] = {
        "session_id": session_id,
        "image_base64": req.image_base64 or "",
        "user_notes": req.user_notes or "",
        "plan": req.plan or {},
        "audit": [],
    }

    try:
        result = get_graph().invoke(initial_state, config=_config(session_id))
    except PlanValidationError as e:
        raise HTTPException(status_code=422, detail=e.problems)
    except (OllamaError, HFLLMError) as e:
        raise HTTPException(status_code=502, detail=f"Prescription analysis failed: {e}")

    plan = result.get("plan")
    if not plan:
        raise HTTPException(status_code=500, detail="Plan missing from graph state.")

    return AnalyzeResponse(
        session_id=session_id,
        plan=TreatmentPlan.model_validate(plan),
        next_step="NEED_CONFIRMATION",
    )

@router.post("/confirm", response_model=ConfirmResponse)
def ai_confirm(req: ConfirmRequest):
    graph = get_graph()
    snap = graph.get_state(_config(req.session_id))
    if not snap.values:
        raise HTTPException(status_code=404, detail="sessionId not found")

    itype = _pending_interrupt_type(snap)
    if itype != "NEED_CONFIRMATION":
        raise HTTPException(
            status_code=409,
            detail=f"Session not waiting for confirmation. interrupt_type={itype}"
        )

    # validate before resuming so a bad request leaves the session waiting
    tz_name = req.timezone or DEFAULT_TIMEZONE
    try:
        plan = parse_treatment_plan(req.plan or snap.values["plan"])
        localize_start(req.start_date_time, tz_name)
    except PlanValidationError as e:
        raise HTTPException(status_code=422, detail=e.problems)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    # wall-clock start plus zone name; the zone is re-applied after resuming
    resume_payload = {
        "startDateTime": req.start_date_time.isoformat(),
        "timezone": tz_name,
        "plan": plan.model_dump(mode="json", by_alias=True),
    }
    final_state = graph.invoke(Command(resume=resume_payload), config=_config(req.session_id))

    record = final_state.get("record")
    if not record:
        raise HTTPException(status_code=500, detail="Treatment missing after confirmation.")

    return ConfirmResponse(
        record=TreatmentRecord.model_validate(record),
        reminders_scheduled=len(final_state.get("reminders") or []),
        next_step="DONE",
    )

@router.get("/audit")
def ai_audit(session_id: str):
    snap = get_graph().get_state(_config(session_id))
    return {"session_id": session_id, "audit": (snap.values or {}).get("audit", [])}
