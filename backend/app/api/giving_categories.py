# app/api/giving_categories.py
# Display order drives statement ordering; active categories drive CSV import columns.
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_request_context, require_permission
from app.schemas.giving import CategoryCreate, CategoryRead, CategoryUpdate
from app.services import giving as svc
from app.services.statements.types import StatementContext

router = APIRouter(prefix="/giving-categories", tags=["Giving"])

_admin = require_permission("giving_categories:manage", "Only administrators can manage giving categories")


@router.get("", response_model=List[CategoryRead])
def list_categories(
    ctx: StatementContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return svc.list_categories(db, ctx.church_id)


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    ctx: StatementContext = Depends(_admin),
    db: Session = Depends(get_db),
):
    try:
        return svc.create_category(db, ctx.church_id, payload)
    except svc.CategoryConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.put("/{category_id}", response_model=CategoryRead)
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    ctx: StatementContext = Depends(_admin),
    db: Session = Depends(get_db),
):
    try:
        return svc.update_category(db, ctx.church_id, category_id, payload)
    except svc.CategoryNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except svc.CategoryConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    ctx: StatementContext = Depends(_admin),
    db: Session = Depends(get_db),
) -> Response:
    try:
        svc.delete_category(db, ctx.church_id, category_id)
    except svc.CategoryNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except svc.CategoryConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
