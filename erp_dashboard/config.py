"""
Centralized dashboard configuration.
Loads environment variables (.env locally) or st.secrets (Streamlit Cloud).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (local runs only)
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")


def _get_secret(key: str, default: str = None) -> str | None:
    """Look a setting up in st.secrets (Cloud) or os.environ (local .env)."""
    try:
        import streamlit as st
        if hasattr(st, "secrets") and key in st.secrets:
            return st.secrets[key]
    except Exception:
        # st.secrets raises when no secrets.toml exists
        pass
    return os.getenv(key, default)


# ─── ERP API ───

API_BASE_URL = _get_secret("KGC_API_BASE_URL", "http://localhost:3000/api/v1")
API_EMAIL = _get_secret("KGC_API_EMAIL")
API_PASSWORD = _get_secret("KGC_API_PASSWORD")
API_TOKEN = _get_secret("KGC_API_TOKEN")
TENANT_ID = _get_secret("KGC_TENANT_ID")

LOGIN_PATH = "/auth/login"
REFRESH_PATH = "/auth/refresh"
MIN_REQUEST_INTERVAL = 0.1  # 100ms between requests
MAX_RETRIES = 3
RETRY_BACKOFF = 1.0  # seconds
PAGE_SIZE = 100
TOKEN_EXPIRY_MARGIN = 60  # seconds

# ─── Logging ───

LOG_LEVEL = _get_secret("LOG_LEVEL", "INFO")

# ─── Cache ───

CACHE_TTL = 300  # 5 minutes

# ─── Receivables aging ───

AGING_BUCKETS = [
    ("0-30", 30),
    ("31-60", 60),
    ("61-90", 90),
    ("90+", None),
]
TOP_DEBTORS_LIMIT = 5

# ─── Rental expiration ───

EXPIRATION_URGENT_DAYS = 0
EXPIRATION_WARNING_DAYS = 3
EXPIRATION_INFO_DAYS = 7

# ─── Revenue forecast ───

TREND_STABLE_THRESHOLD = 1.0  # percent

# ─── Request parameter bounds ───

LIMIT_BOUNDS = (1, 20)
MONTHS_BOUNDS = (1, 24)
DAYS_BOUNDS = (1, 30)
