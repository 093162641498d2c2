# app/models/giving_statement.py
"""Persisted year-end giving statement (one per household per tax year).

Rows are created on first generation and updated in place on regeneration;
regeneration clears the send-tracking columns (see
app.services.statements.persistence). Preview generations are never stored.
"""
from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class GivingStatement(Base):
    __tablename__ = "giving_statements"
    __table_args__ = (
        UniqueConstraint(
            "household_id", "year", "preview_only",
            name="giving_statements_household_year_unique",
        ),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    church_id = Column(String(36), ForeignKey("churches.id", ondelete="CASCADE"), nullable=False, index=True)
    household_id = Column(String(36), ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    total_amount = Column(Numeric(10, 2), nullable=False)
    statement_number = Column(String(50), nullable=True)
    generated_at = Column(DateTime(timezone=True), nullable=False)
    generated_by = Column(String(36), nullable=False)

    # data:application/pdf;base64,... or an external URL
    pdf_url = Column(Text, nullable=True)

    # Send tracking; reset to NULL whenever the statement is regenerated
    email_status = Column(String(20), nullable=True)  # "sent" | "failed"
    sent_at = Column(DateTime(timezone=True), nullable=True)
    sent_by = Column(String(36), nullable=True)

    preview_only = Column(Boolean, nullable=False, default=False, server_default=text("FALSE"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    household = relationship("Household")
