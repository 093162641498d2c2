# app/api/households.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import require_permission
from app.schemas.household import HouseholdRead
from app.services import households as svc
from app.services.statements.types import StatementContext

router = APIRouter(prefix="/households", tags=["Households"])


@router.get("", response_model=List[HouseholdRead])
def list_households(
    skip: int = 0,
    limit: int = Query(100, le=500),
    ctx: StatementContext = Depends(require_permission("members:view")),
    db: Session = Depends(get_db),
):
    return svc.list_households(db, ctx.church_id, skip, limit)


@router.delete("/{household_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_household(
    household_id: str,
    ctx: StatementContext = Depends(require_permission("members:write")),
    db: Session = Depends(get_db),
) -> Response:
    try:
        svc.delete_household(db, ctx.church_id, household_id)
    except svc.HouseholdNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except svc.HouseholdInUseError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
