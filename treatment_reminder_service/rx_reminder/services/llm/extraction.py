# rx_reminder/services/llm/extraction.py
from typing import Optional

from loguru import logger

from rx_reminder.core import settings
from rx_reminder.schemas.models import TreatmentPlan
from rx_reminder.services.hf_client import hf_chat_json
from rx_reminder.services.ollama_client import ollama_chat_json
from rx_reminder.services.llm.extraction_schema import PLAN_SCHEMA
from rx_reminder.services.llm.extraction_prompt import EXTRACT_SYSTEM_PROMPT
from rx_reminder.services.llm.extraction_sanitize import sanitize_extracted_plan
from rx_reminder.services.plan_validation import parse_treatment_plan

def llm_extract_plan(image_base64: str, user_notes: Optional[str] = None) -> TreatmentPlan:
    user = "Analyze this prescription and extract the treatment plan."
    if user_notes:
        user += f"\nPatient notes: {user_notes}"

    if settings.OCR_PROVIDER == "hf":
        raw = hf_chat_json(
            model=settings.HF_MODEL_VISION,
            system=EXTRACT_SYSTEM_PROMPT,
            user=user,
            image_base64=image_base64,
            schema=PLAN_SCHEMA,
        )
    else:
        raw = ollama_chat_json(
            model=settings.OLLAMA_MODEL_VISION,
            system=EXTRACT_SYSTEM_PROMPT,
            user=user,
            schema=PLAN_SCHEMA,
            images=[image_base64],
        )

    plan = parse_treatment_plan(sanitize_extracted_plan(raw))
    logger.info(f"Extracted plan {plan.plan_title!r} with {len(plan.items)} items ({settings.OCR_PROVIDER})")
    return plan
