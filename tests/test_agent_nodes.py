from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from rx_reminder.agent import nodes
from rx_reminder.schemas.models import TreatmentPlan
from rx_reminder.services.ics import format_ics_datetime
from rx_reminder.services.reminders import MockReminderScheduler
from rx_reminder.services.treatment_store import InMemoryTreatmentStore
from rx_reminder.services.treatments import add_treatment, localize_start


def test_extract_node_uses_provided_plan(amoxicillin_plan: TreatmentPlan) -> None:
    plan_json = amoxicillin_plan.model_dump(mode="json", by_alias=True)
    out = nodes.extract_node({"session_id": "s1", "plan": plan_json, "audit": []})

    assert out["plan"]["planTitle"] == amoxicillin_plan.plan_title
    assert out["audit"][-1]["event"] == "extract.skip"


def test_extract_node_calls_vision_model_and_drops_image(
    monkeypatch: pytest.MonkeyPatch, amoxicillin_plan: TreatmentPlan
) -> None:
    seen = {}

    def fake_extract(image_base64, user_notes=None):
        seen["args"] = (image_base64, user_notes)
        return amoxicillin_plan

    monkeypatch.setattr(nodes, "llm_extract_plan", fake_extract)
    out = nodes.extract_node({"session_id": "s1", "image_base64": "aW1n", "user_notes": "hi"})

    assert seen["args"] == ("aW1n", "hi")
    assert out["image_base64"] == ""
    assert out["plan"]["items"][0]["name"] == "Amoxicilina"
    assert out["audit"] == [{"event": "extract.llm.done", "items": 1}]


def test_confirm_treatment_creates_record_and_reminders(amoxicillin_plan: TreatmentPlan, start: datetime) -> None:
    repo = InMemoryTreatmentStore()
    scheduler = MockReminderScheduler()
    state = {
        "session_id": "s1",
        "plan": amoxicillin_plan.model_dump(mode="json", by_alias=True),
        "confirmation": {"startDateTime": start.isoformat()},
    }

    out = nodes.confirm_treatment(state, repo, scheduler, now=start - timedelta(minutes=1))

    (record,) = repo.load()
    assert out["record"]["id"] == record.id
    assert len(record.events) == 4
    assert len(out["reminders"]) == 4
    assert len(scheduler.registered) == 4
    assert out["audit"][-1]["event"] == "schedule.done"


def test_confirm_treatment_matches_direct_create_across_dst(amoxicillin_plan: TreatmentPlan) -> None:
    # New York springs forward on 2025-03-09 at 02:00
    wall_clock = datetime(2025, 3, 8, 20, 0)
    direct_repo = InMemoryTreatmentStore()
    direct = add_treatment(direct_repo, amoxicillin_plan, localize_start(wall_clock, "America/New_York"))

    repo = InMemoryTreatmentStore()
    state = {
        "session_id": "s1",
        "plan": amoxicillin_plan.model_dump(mode="json", by_alias=True),
        "confirmation": {"startDateTime": wall_clock.isoformat(), "timezone": "America/New_York"},
    }
    nodes.confirm_treatment(state, repo, MockReminderScheduler(), now=datetime(2025, 3, 8, 0, 0, tzinfo=timezone.utc))
    (confirmed,) = repo.load()

    direct_utc = [format_ics_datetime(e.start) for e in direct.events]
    confirmed_utc = [format_ics_datetime(e.start) for e in confirmed.events]
    assert confirmed_utc == direct_utc
    assert confirmed_utc[1] == "20250309T080000Z"
