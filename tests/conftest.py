"""Shared fixtures for the treatment reminder tests."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path

# keep the default database out of the source tree (settings read it on import)
os.environ.setdefault("RX_DB_PATH", str(Path(tempfile.mkdtemp()) / "rx_reminder_test.db"))

import pytest

from rx_reminder.schemas.models import TreatmentPlan


@pytest.fixture
def amoxicillin_plan() -> TreatmentPlan:
    return TreatmentPlan.model_validate(
        {
            "planTitle": "Ear infection - Amoxicilina",
            "summary": "Antibiotic every 8 hours for one day.",
            "items": [
                {
                    "type": "medication",
                    "name": "Amoxicilina",
                    "dose": 500,
                    "unit": "mg",
                    "frequency": {"everyHours": 8},
                    "durationDays": 1,
                }
            ],
        }
    )


@pytest.fixture
def start() -> datetime:
    return datetime(2025, 1, 1, 8, 0)


def make_plan(*items: dict, title: str = "Test plan") -> TreatmentPlan:
    return TreatmentPlan.model_validate({"planTitle": title, "summary": "", "items": list(items)})
