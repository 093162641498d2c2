# app/models/attendance.py
from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from app.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=_uuid)
    church_id = Column(String(36), ForeignKey("churches.id", ondelete="CASCADE"), nullable=False, index=True)
    service_date = Column(Date, nullable=False, index=True)
    service_type = Column(String(50), nullable=False, default="divine_service")
    notes = Column(Text, nullable=True)


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("member_id", "service_id", name="uq_attendance_member_service"),
        # took_communion => attended
        CheckConstraint("attended OR NOT took_communion", name="ck_attendance_communion_requires_attendance"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    member_id = Column(String(36), ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    attended = Column(Boolean, nullable=False, default=False, server_default=text("FALSE"))
    took_communion = Column(Boolean, nullable=False, default=False, server_default=text("FALSE"))

    member = relationship("Member")
    service = relationship("Service")
