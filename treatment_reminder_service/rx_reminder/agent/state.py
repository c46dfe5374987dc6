from typing import Any, Dict, List, TypedDict

class AgentState(TypedDict, total=False):
    # identity (session_id doubles as LangGraph thread_id)
    session_id: str

    # inputs
    image_base64: str        # cleared once the plan is extracted
    user_notes: str
    plan: Dict[str, Any]     # TreatmentPlan, camelCase wire dict

    # outputs
    confirmation: Dict[str, Any]   # resume payload: startDateTime (+ edited plan)
    record: Dict[str, Any]         # TreatmentRecord, camelCase wire dict
    reminders: List[str]           # reminder registration ids
    audit: List[Dict[str, Any]]
