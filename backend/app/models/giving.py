# app/models/giving.py
from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class GivingCategory(Base):
    __tablename__ = "giving_categories"

    id = Column(String(36), primary_key=True, default=_uuid)
    church_id = Column(String(36), ForeignKey("churches.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    display_order = Column(Integer, nullable=False, default=0, server_default=text("0"))
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("TRUE"))


class GivingRecord(Base):
    """One entry per member per date given; owns one or more GivingItems."""

    __tablename__ = "giving_records"

    id = Column(String(36), primary_key=True, default=_uuid)
    church_id = Column(String(36), ForeignKey("churches.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(String(36), ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    date_given = Column(Date, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    items = relationship(
        "GivingItem",
        back_populates="record",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    member = relationship("Member")


class GivingItem(Base):
    __tablename__ = "giving_items"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_giving_items_amount_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    giving_id = Column(String(36), ForeignKey("giving_records.id", ondelete="CASCADE"), nullable=False, index=True)
    # Nullable: an item whose category was removed still counts (as "General")
    category_id = Column(String(36), ForeignKey("giving_categories.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)

    record = relationship("GivingRecord", back_populates="items")
    category = relationship("GivingCategory")
