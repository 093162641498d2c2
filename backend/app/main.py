import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import settings

# Ensure all SQLAlchemy models are imported so relationships resolve
import app.models  # noqa: F401

from app.api import (
    attendance,         # /attendance
    giving,             # /giving, /giving/bulk-import
    giving_categories,  # /giving-categories
    giving_statements,  # /giving-statements
    households,         # /households
)

# Ops/system endpoints (/health, /version)
from app.api.system import router as system_router

logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Steward")

# --- CORS for local frontend dev ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(system_router)  # /health, /version

app.include_router(giving_statements.router)  # /giving-statements
app.include_router(giving.router)             # /giving
app.include_router(giving_categories.router)  # /giving-categories
app.include_router(households.router)         # /households
app.include_router(attendance.router)         # /attendance
