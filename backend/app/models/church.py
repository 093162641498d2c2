# app/models/church.py
"""SQLAlchemy model for the tenant root.

Each tenant owns exactly one Church row; the tenant id *is* the church id.
`tax_id` is stored encrypted (see app.services.encryption).
"""
from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Text, text
from sqlalchemy.sql import func

from app.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Church(Base):
    __tablename__ = "churches"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False)

    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip = Column(String(20), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)

    # IRS acknowledgement fields
    tax_id = Column(Text, nullable=True)  # encrypted at rest
    is_501c3 = Column(Boolean, nullable=True, default=True)
    tax_statement_disclaimer = Column(Text, nullable=True)
    goods_services_provided = Column(Boolean, nullable=False, default=False, server_default=text("FALSE"))
    goods_services_statement = Column(Text, nullable=True)

    # "basic" | "premium" (premium unlocks delegated editor roles)
    subscription_plan = Column(String(20), nullable=False, default="basic", server_default="basic")

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
