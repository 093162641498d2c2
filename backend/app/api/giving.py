# app/api/giving.py
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import require_permission
from app.schemas.giving import GivingCreate, GivingRead, GivingUpdate
from app.services import giving as svc
from app.services.statements.types import StatementContext

router = APIRouter(prefix="/giving", tags=["Giving"])


@router.post("", response_model=GivingRead, status_code=status.HTTP_201_CREATED)
def create_giving(
    payload: GivingCreate,
    ctx: StatementContext = Depends(require_permission("giving:write")),
    db: Session = Depends(get_db),
):
    try:
        return svc.create_giving(db, ctx.church_id, payload)
    except svc.GivingValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.get("", response_model=List[GivingRead])
def list_giving(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    skip: int = 0,
    limit: int = Query(100, le=500),
    ctx: StatementContext = Depends(require_permission("giving:view")),
    db: Session = Depends(get_db),
):
    return svc.list_giving(db, ctx.church_id, date_from, date_to, skip, limit)


@router.post(
    "/bulk-import",
    summary="Import giving records from CSV",
    openapi_extra={"requestBody": {"content": {"text/csv": {"schema": {"type": "string"}}}, "required": True}},
)
async def bulk_import(
    request: Request,
    ctx: StatementContext = Depends(require_permission("giving:write")),
    db: Session = Depends(get_db),
):
    raw = await request.body()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="CSV must be UTF-8 encoded")

    try:
        return svc.import_giving_csv(db, ctx.church_id, text)
    except svc.GivingImportError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/{giving_id}", response_model=GivingRead)
def get_giving(
    giving_id: str,
    ctx: StatementContext = Depends(require_permission("giving:view")),
    db: Session = Depends(get_db),
):
    try:
        return svc.get_giving(db, ctx.church_id, giving_id)
    except svc.GivingNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.put("/{giving_id}", response_model=GivingRead)
def update_giving(
    giving_id: str,
    payload: GivingUpdate,
    ctx: StatementContext = Depends(require_permission("giving:write")),
    db: Session = Depends(get_db),
):
    try:
        return svc.update_giving(db, ctx.church_id, giving_id, payload)
    except svc.GivingNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except svc.GivingValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.delete("/{giving_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_giving(
    giving_id: str,
    ctx: StatementContext = Depends(require_permission("giving:delete")),
    db: Session = Depends(get_db),
) -> Response:
    try:
        svc.delete_giving(db, ctx.church_id, giving_id)
    except svc.GivingNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
