# dweetr/config.py

import os

# =========================
# DATABASE
# =========================

DB_USER = os.getenv("DB_USER", "dweetr_user")
DB_PASS = os.getenv("DB_PASS", "dweetr")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME", "dweetr")

# DATABASE_URL wins when set (e.g. sqlite:///./dweetr.db for local runs)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# =========================
# RETENTION
# =========================

MAX_DWEETS_PER_THING = int(os.getenv("DWEETR_MAX_DWEETS", "5"))
MAX_AGE_HOURS = float(os.getenv("DWEETR_MAX_AGE_HOURS", "24"))

# =========================
# LONG POLLING
# =========================

LISTEN_MAX_WAIT_SECONDS = float(os.getenv("DWEETR_LISTEN_MAX_WAIT", "30"))
LISTEN_POLL_INTERVAL_SECONDS = float(os.getenv("DWEETR_LISTEN_POLL_INTERVAL", "0.5"))
# Must stay above LISTEN_MAX_WAIT_SECONDS so the final response can be sent
LISTEN_DEADLINE_SECONDS = float(os.getenv("DWEETR_LISTEN_DEADLINE", "40"))

# =========================
# HTTP
# =========================

PUBLISH_RATE_LIMIT = os.getenv("DWEETR_PUBLISH_RATE_LIMIT", "120/minute")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# =========================
# LOGGING
# =========================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "false").lower() in ("1", "true", "yes")
