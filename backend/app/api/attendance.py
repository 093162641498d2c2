# app/api/attendance.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import require_permission
from app.schemas.attendance import AttendanceRead, AttendanceUpsert
from app.services.attendance import upsert_attendance
from app.services.statements.types import StatementContext

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.post("", response_model=AttendanceRead)
def record_attendance(
    payload: AttendanceUpsert,
    ctx: StatementContext = Depends(require_permission("attendance:write")),
    db: Session = Depends(get_db),
):
    row = upsert_attendance(db, ctx.church_id, payload)
    if not row:
        raise HTTPException(status_code=404, detail="Member or service not found")
    return row
