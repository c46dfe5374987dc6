import json
import os
from typing import Any, Dict, List, Optional

import requests
from huggingface_hub import InferenceClient, InferenceTimeoutError
from huggingface_hub.utils import HfHubHTTPError

from rx_reminder.core.settings import (
    HF_TEMPERATURE,
    HF_MAX_TOKENS,
    HF_TIMEOUT_S,
)

class HFLLMError(RuntimeError):
    pass

def _safe_json_parse(text: str) -> Dict[str, Any]:
    text = (text or "").strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass
    raise HFLLMError(f"Model did not return valid JSON. Got: {text[:200]}...")

def hf_chat_json(
    *,
    model: str,
    system: str,
    user: str,
    image_base64: Optional[str] = None,
    schema: Optional[Dict[str, Any]] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    timeout_s: Optional[int] = None,
) -> Dict[str, Any]:
    # read token/provider at runtime (prevents stale cached value)
    token = os.getenv("HF_TOKEN", "").strip()
    if not token:
        raise HFLLMError("HF_TOKEN is missing. Set it in config.env and restart.")

    provider = os.getenv("HF_PROVIDER", "auto").strip() or "auto"

    client = InferenceClient(
        provider=provider,
        api_key=token,
        timeout=float(timeout_s or HF_TIMEOUT_S),
    )

    user_content: List[Dict[str, Any]] = [{"type": "text", "text": user}]
    if image_base64:
        user_content.append({
            "type": "image_url",
            "image_url": {"url": f"data:image/jpeg;base64,{image_base64}"},
        })

    messages = [
        {"role": "system", "content": system},
        {"role": "user", "content": user_content},
    ]

    if schema:
        response_format = {
            "type": "json_schema",
            "json_schema": {
                "name": "TreatmentPlan",
                "schema": schema,
                "strict": True,
            },
        }
    else:
        response_format = {"type": "json_object"}

    try:
        out = client.chat_completion(
            model=model,
            messages=messages,
            temperature=temperature if temperature is not None else HF_TEMPERATURE,
            max_tokens=max_tokens if max_tokens is not None else HF_MAX_TOKENS,
            response_format=response_format,
        )
    except (InferenceTimeoutError, HfHubHTTPError, requests.RequestException) as e:
        raise HFLLMError(f"Hugging Face inference failed for {model}: {e}") from e

    content = out.choices[0].message.content or ""
    return _safe_json_parse(content)
