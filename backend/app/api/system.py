# app/api/system.py
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.db import DATABASE_URL, get_db

router = APIRouter(tags=["ops"])


def _db_driver_from_url(url: str | None) -> str | None:
    if not url or "://" not in url:
        return None
    scheme = url.split("://", 1)[0]  # e.g., "postgresql+psycopg2"
    if "+" in scheme:
        return scheme.split("+", 1)[1]  # "psycopg2"
    return scheme


@router.get("/health")
def health(db: Session = Depends(get_db)):
    """Liveness check with a lightweight DB probe."""
    probe = {"driver": _db_driver_from_url(DATABASE_URL)}
    try:
        db.execute(text("SELECT 1"))
        probe["status"] = "ok"
    except Exception as e:
        probe["status"] = f"error: {type(e).__name__}"

    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "db": probe,
    }


@router.get("/version")
def version():
    return {
        "app": "Steward Backend",
        "db_driver": _db_driver_from_url(DATABASE_URL),
    }
