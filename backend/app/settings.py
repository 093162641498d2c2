# app/settings.py
"""
Runtime settings read from the environment (.env is loaded by app.db).

Values are read on each call so tests can monkeypatch the environment.
"""
from __future__ import annotations

import os
from typing import List


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def _env_str(name: str, default: str = "") -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip()


def auth_enforced() -> bool:
    """Return True if API-key auth should be enforced (production), False in dev."""
    return _env_bool("AUTH_ENFORCE", True)


def api_key_pepper() -> str:
    return os.getenv("API_KEY_PEPPER", "")


def encryption_key() -> str:
    return _env_str("ENCRYPTION_KEY", "")


def statement_validation_policy() -> str:
    # "confirm" (soft gate with explicit override) or "strict" (hard refusal)
    return _env_str("STATEMENT_VALIDATION_POLICY", "confirm").lower() or "confirm"


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper() or "INFO"


def cors_origins() -> List[str]:
    raw = _env_str(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
    )
    return [o.strip() for o in raw.split(",") if o.strip()]


# --- SMTP (statement delivery) ---

def smtp_host() -> str:
    return _env_str("SMTP_HOST", "")


def smtp_port() -> int:
    return _env_int("SMTP_PORT", 587)


def smtp_user() -> str:
    return _env_str("SMTP_USER", "")


def smtp_password() -> str:
    return os.getenv("SMTP_PASSWORD", "")


def smtp_from() -> str:
    return _env_str("SMTP_FROM", "statements@localhost")


def smtp_starttls() -> bool:
    return _env_bool("SMTP_STARTTLS", True)
