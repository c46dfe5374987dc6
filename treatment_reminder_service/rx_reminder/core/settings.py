import os
from pathlib import Path

from rx_reminder.core.env import load_env

load_env()

# vision model used to read prescription photos: "ollama" or "hf"
OCR_PROVIDER = os.getenv("OCR_PROVIDER", "ollama").lower().strip()

OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/api")
OLLAMA_MODEL_VISION = os.getenv("OLLAMA_MODEL_VISION", "llama3.2-vision")
OLLAMA_TEMPERATURE = float(os.getenv("OLLAMA_TEMPERATURE", "0.1"))
OLLAMA_TIMEOUT_S = int(os.getenv("OLLAMA_TIMEOUT_S", "120"))

HF_MODEL_VISION = os.getenv("HF_MODEL_VISION", "Qwen/Qwen2.5-VL-7B-Instruct")
HF_TEMPERATURE = float(os.getenv("HF_TEMPERATURE", "0.1"))
HF_MAX_TOKENS = int(os.getenv("HF_MAX_TOKENS", "1500"))
HF_TIMEOUT_S = int(os.getenv("HF_TIMEOUT_S", "90"))

DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "America/Sao_Paulo")
REMINDER_WINDOW_HOURS = int(os.getenv("REMINDER_WINDOW_HOURS", "48"))

# Base project directory (treatment_reminder_service/)
BASE_DIR = Path(__file__).resolve().parents[2]
DB_PATH = Path(os.getenv("RX_DB_PATH", str(BASE_DIR / "rx_reminder" / "db" / "rx_reminder.db")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE") or None
