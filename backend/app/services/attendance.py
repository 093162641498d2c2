# app/services/attendance.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.attendance import AttendanceRecord, Service
from app.models.household import Member
from app.schemas.attendance import AttendanceUpsert


def upsert_attendance(db: Session, church_id: str, data: AttendanceUpsert) -> Optional[AttendanceRecord]:
    """Insert or update the (member, service) attendance row. Returns None if either side is unknown."""
    member = db.execute(
        select(Member.id).where(Member.id == data.member_id, Member.church_id == church_id)
    ).first()
    service = db.execute(
        select(Service.id).where(Service.id == data.service_id, Service.church_id == church_id)
    ).first()
    if not member or not service:
        return None

    row = db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.member_id == data.member_id,
            AttendanceRecord.service_id == data.service_id,
        )
    ).scalars().first()
    if row is None:
        row = AttendanceRecord(member_id=data.member_id, service_id=data.service_id)
        db.add(row)
    row.attended = data.attended
    row.took_communion = data.took_communion
    db.commit()
    db.refresh(row)
    return row
