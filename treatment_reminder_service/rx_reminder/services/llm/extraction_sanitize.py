# rx_reminder/services/llm/extraction_sanitize.py
from typing import Any, Dict, List, Optional, Tuple
import re

from rx_reminder.utils.clock import parse_hhmm

_CARE_WORDS = {"care", "cuidado", "procedure", "procedimento"}
_DOSE_RE = re.compile(r"^\s*(\d+(?:[.,]\d+)?)\s*([a-zA-Zµ%/]+)?\s*$")

def normalize_type(type_raw: Any) -> str:
    t = str(type_raw or "").strip().lower()
    return "care" if t in _CARE_WORDS else "medication"

def normalize_positive_int(v: Any, upper: int) -> Optional[int]:
    try:
        if v is None or isinstance(v, bool):
            return None
        n = int(float(v))
        if 1 <= n <= upper:
            return n
        return None
    except (TypeError, ValueError):
        return None

def normalize_dose(dose_raw: Any, unit_raw: Any) -> Tuple[Optional[float], Optional[str]]:
    """500 / "500" / "500 mg" / "2,5ml" -> (number, unit)"""
    unit = (str(unit_raw).strip() if unit_raw else "") or None
    if dose_raw is None or isinstance(dose_raw, bool):
        return None, unit
    if isinstance(dose_raw, (int, float)):
        return (float(dose_raw) if dose_raw > 0 else None), unit

    m = _DOSE_RE.match(str(dose_raw))
    if not m:
        return None, unit
    value = float(m.group(1).replace(",", "."))
    return (value if value > 0 else None), (unit or m.group(2))

def normalize_times(times_raw: Any) -> Optional[List[str]]:
    if not isinstance(times_raw, list):
        return None
    out: List[str] = []
    for t in times_raw:
        parsed = parse_hhmm(str(t))
        if parsed is None:
            continue
        hhmm = f"{parsed[0]:02d}:{parsed[1]:02d}"
        if hhmm not in out:
            out.append(hhmm)
    return out or None

def normalize_confidence(v: Any) -> Optional[float]:
    try:
        if v is None or isinstance(v, bool):
            return None
        return max(0.0, min(1.0, float(v)))
    except (TypeError, ValueError):
        return None

def _text(v: Any) -> Optional[str]:
    s = str(v).strip() if v is not None else ""
    return s or None

def sanitize_extracted_plan(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Repair what vision models typically get wrong before strict validation:
    - numbers sent as strings, dose with the unit glued on
    - zero/negative frequencies (dropped -> item yields no events)
    - preferred times not in HH:MM (dropped)
    - items without a name (dropped), duplicate items (dropped)

    A missing/invalid durationDays is left out on purpose so that validation
    rejects it instead of guessing a course length.
    """
    items = raw.get("items", []) or []
    cleaned: List[Dict[str, Any]] = []

    for it in items:
        if not isinstance(it, dict):
            continue
        name = (it.get("name") or "").strip()
        if not name:
            continue

        freq_raw = it.get("frequency") or {}
        if not isinstance(freq_raw, dict):
            freq_raw = {}
        dose, unit = normalize_dose(it.get("dose"), it.get("unit"))

        item: Dict[str, Any] = {
            "type": normalize_type(it.get("type")),
            "name": name,
            "dose": dose,
            "unit": unit,
            "route": _text(it.get("route")),
            "frequency": {
                "everyHours": normalize_positive_int(freq_raw.get("everyHours"), 24 * 7),
                "timesPerDay": normalize_positive_int(freq_raw.get("timesPerDay"), 24),
            },
            "preferredTimes": normalize_times(it.get("preferredTimes")),
            "notes": _text(it.get("notes")),
            "confidence": normalize_confidence(it.get("confidence")),
        }
        duration = normalize_positive_int(it.get("durationDays"), 365)
        if duration is not None:
            item["durationDays"] = duration
        cleaned.append(item)

    # de-duplicate by (name, dose, frequency)
    seen = set()
    out = []
    for m in cleaned:
        f = m["frequency"]
        key = (m["name"].lower(), m["dose"], f["everyHours"], f["timesPerDay"])
        if key in seen:
            continue
        seen.add(key)
        out.append(m)

    return {
        "planTitle": _text(raw.get("planTitle")) or "Treatment plan",
        "summary": _text(raw.get("summary")) or "",
        "items": out,
    }
