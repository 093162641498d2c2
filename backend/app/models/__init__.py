# backend/app/models/__init__.py
"""
Central model registry.

Import this once at startup (e.g., in main.py) so SQLAlchemy sees all mapped
classes before relationships are resolved.
"""
from app.db import Base  # re-export Base

from .church import Church  # noqa: F401
from .household import Household, Member, MemberStatus  # noqa: F401
from .giving import GivingCategory, GivingRecord, GivingItem  # noqa: F401
from .giving_statement import GivingStatement  # noqa: F401
from .attendance import Service, AttendanceRecord  # noqa: F401
from .rbac import User, ChurchUser  # noqa: F401
