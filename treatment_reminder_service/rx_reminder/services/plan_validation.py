# rx_reminder/services/plan_validation.py
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from rx_reminder.schemas.models import TreatmentPlan


class PlanValidationError(ValueError):
    """Raised when a plan does not have the structure the scheduler needs."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "invalid treatment plan")


def _loc(err: Dict[str, Any]) -> str:
    parts = []
    for p in err.get("loc", ()):
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(("." if parts else "") + str(p))
    return "".join(parts) or "plan"


def parse_treatment_plan(data: Union[TreatmentPlan, Dict[str, Any]]) -> TreatmentPlan:
    """
    Validate raw plan JSON once, at the boundary:
    - shape and types (pydantic)
    - planTitle / item names present
    - durationDays positive

    Items without a usable frequency are NOT rejected here; the expander
    turns them into zero events.
    """
    if isinstance(data, TreatmentPlan):
        plan = data
    else:
        if not isinstance(data, dict):
            raise PlanValidationError(["plan must be a JSON object"])
        try:
            plan = TreatmentPlan.model_validate(data)
        except ValidationError as e:
            raise PlanValidationError([f"{_loc(err)}: {err.get('msg')}" for err in e.errors()]) from e

    problems: List[str] = []
    if not plan.plan_title.strip():
        problems.append("planTitle must not be empty")
    for i, item in enumerate(plan.items):
        if not item.name.strip():
            problems.append(f"items[{i}].name must not be empty")
        if item.duration_days <= 0:
            problems.append(f"items[{i}].durationDays must be positive")

    if problems:
        raise PlanValidationError(problems)
    return plan
