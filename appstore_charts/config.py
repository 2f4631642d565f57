# appstore_charts/config.py
"""
Settings, read from the environment (and a local .env file if present).
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


# ---------- Storage ----------
DB_PATH = os.getenv("DB_PATH", os.path.join("data", "app_data.db"))

# ---------- HTTP ----------
USER_AGENT = os.getenv("USER_AGENT", "charts-bot/1.0")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))       # feed + batch lookup
LOOKUP_TIMEOUT = float(os.getenv("LOOKUP_TIMEOUT", "15"))   # single-id lookup

# ---------- Ingestion ----------
FEED_LIMIT = int(os.getenv("FEED_LIMIT", "100"))
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))
RETRY_DELAY = float(os.getenv("RETRY_DELAY", "5"))
TASK_DELAY = float(os.getenv("TASK_DELAY", "1"))
BATCH_DELAY = float(os.getenv("BATCH_DELAY", "0.5"))

# ---------- Scheduler (22:00 UTC == 07:00 JST) ----------
SCHEDULER_ENABLED = _flag("SCHEDULER_ENABLED", "true")
SCHEDULE_HOUR_UTC = int(os.getenv("SCHEDULE_HOUR_UTC", "22"))
SCHEDULE_MINUTE_UTC = int(os.getenv("SCHEDULE_MINUTE_UTC", "0"))

# ---------- LLM (any OpenAI-compatible endpoint) ----------
LLM_API_KEY = os.getenv("LLM_API_KEY")
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")

# ---------- API ----------
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if o.strip()
]
