# rx_reminder/utils/clock.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Tuple

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

def parse_hhmm(hhmm: str) -> Optional[Tuple[int, int]]:
    """
    "08:00" -> (8, 0). Returns None for anything that is not a valid
    24-hour wall-clock time.
    """
    m = _TIME_RE.match((hhmm or "").strip())
    if not m:
        return None
    h, mi = int(m.group(1)), int(m.group(2))
    if not (0 <= h <= 23 and 0 <= mi <= 59):
        return None
    return h, mi

def align_clock(value: datetime, reference: datetime) -> datetime:
    """
    Make `value` comparable with `reference`: a naive value is read in the
    reference's zone, an aware value is converted to local wall-clock time
    when the reference is naive.
    """
    if reference.tzinfo is None:
        return value.astimezone().replace(tzinfo=None) if value.tzinfo is not None else value
    if value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value
