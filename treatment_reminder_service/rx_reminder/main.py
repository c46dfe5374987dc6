from fastapi import FastAPI

from rx_reminder.core.logger import setup_logger
from rx_reminder.core.settings import LOG_FILE, LOG_LEVEL
from rx_reminder.api.routes_ai import router as ai_router
from rx_reminder.api.routes_treatments import router as treatments_router

setup_logger(level=LOG_LEVEL, log_file=LOG_FILE)

app = FastAPI(title="Treatment Reminder (prescription schedules)", version="1.0")

app.include_router(ai_router)
app.include_router(treatments_router)

@app.get("/health")
def health():
    return {"ok": True}
@app.get("/")
def root():
    return {"ok": True, "service": "Treatment Reminder (prescription schedules)"}
