# rx_reminder/deps.py
"""Process-wide collaborators: routes resolve them through Depends, the workflow calls them directly."""
from functools import lru_cache

from rx_reminder.core.settings import DB_PATH
from rx_reminder.services.reminders import MockReminderScheduler, ReminderScheduler
from rx_reminder.services.treatment_store import SQLiteTreatmentStore, TreatmentRepository


@lru_cache(maxsize=1)
def get_treatment_repo() -> TreatmentRepository:
    return SQLiteTreatmentStore(DB_PATH)


@lru_cache(maxsize=1)
def get_reminder_scheduler() -> ReminderScheduler:
    # push/local delivery lives outside this service; registrations are only recorded
    return MockReminderScheduler()
