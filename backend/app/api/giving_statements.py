# app/api/giving_statements.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_request_context, require_permission
from app.models.church import Church
from app.models.giving_statement import GivingStatement
from app.services.encryption import decrypt_church
from app.services.mailer import get_mailer
from app.services.permissions import has_permission
from app.services.statements.delivery import send_statements
from app.services.statements.generator import GENERATE_FORBIDDEN, generate_statements
from app.services.statements.persistence import pdf_from_data_url
from app.services.statements.repository import SqlStatementRepository, household_display_name
from app.services.statements.types import (
    MANAGE_STATEMENTS,
    Confirmation,
    GenerateRequest,
    GenerationFailure,
    PreviewPdf,
    StatementContext,
    Summary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/giving-statements", tags=["Giving Statements"])

_manage = require_permission(MANAGE_STATEMENTS, "You do not have permission to manage giving statements")


# --- helpers -----------------------------------------------------------------
def _to_float(x) -> float:
    if x is None:
        return 0.0
    if isinstance(x, Decimal):
        return float(x)
    return float(x)


def _error(status_code: int, error: str, details: Optional[str] = None, **extra: Any) -> JSONResponse:
    body: Dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    body.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(status_code=status_code, content=body)


def _summary_body(summary: Summary) -> Dict[str, Any]:
    results = []
    for r in summary.results:
        row: Dict[str, Any] = {
            "householdId": r.household_id,
            "householdName": r.household_name,
            "statementNumber": r.statement_number,
            "totalAmount": _to_float(r.total_amount),
            "status": r.status,
        }
        if r.statement_id:
            row["statementId"] = r.statement_id
        results.append(row)

    body: Dict[str, Any] = {
        "success": True,
        "year": summary.year,
        "preview": summary.preview,
        "generated": summary.generated,
        "results": results,
    }
    if summary.errors:
        body["errors"] = [
            {k: v for k, v in {
                "householdId": e.household_id,
                "householdName": e.household_name,
                "error": e.error,
            }.items() if v is not None}
            for e in summary.errors
        ]
    return body


def _statement_row(st: GivingStatement) -> Dict[str, Any]:
    return {
        "id": st.id,
        "householdId": st.household_id,
        "householdName": household_display_name(st.household) if st.household else None,
        "year": st.year,
        "statementNumber": st.statement_number,
        "totalAmount": _to_float(st.total_amount),
        "generatedAt": st.generated_at.isoformat() if st.generated_at else None,
        "generatedBy": st.generated_by,
        "emailStatus": st.email_status,
        "sentAt": st.sent_at.isoformat() if st.sent_at else None,
        "hasPdf": bool(st.pdf_url),
    }


def _get_statement(db: Session, church_id: str, statement_id: str) -> GivingStatement:
    st = db.execute(
        select(GivingStatement).where(
            GivingStatement.id == statement_id,
            GivingStatement.church_id == church_id,
        )
    ).scalars().first()
    if not st:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Statement not found")
    return st


# --- generation --------------------------------------------------------------
@router.post(
    "/generate",
    summary="Generate year-end giving statements",
    responses={
        200: {
            "description": "Batch summary, confirmation request, or an inline PDF for a single-household preview",
            "content": {"application/json": {}, "application/pdf": {}},
        },
    },
)
def generate(
    payload: dict = Body(...),  # raw dict so a non-numeric year maps to 400 rather than 422
    ctx: StatementContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    # authorize before looking at the payload
    if not has_permission(ctx.permissions, MANAGE_STATEMENTS):
        return _error(403, GENERATE_FORBIDDEN)

    year = payload.get("year")
    if isinstance(year, bool) or not isinstance(year, int):
        return _error(400, "Year is required and must be a number")

    household_id = payload.get("householdId")
    if household_id is not None and not isinstance(household_id, str):
        return _error(400, "householdId must be a string")

    request = GenerateRequest(
        year=year,
        household_id=household_id or None,
        preview=payload.get("preview") is True,
        skip_validation=payload.get("skipValidation") is True,
    )

    try:
        outcome = generate_statements(ctx, request, SqlStatementRepository(db))
    except Exception as exc:
        logger.exception("Giving statement generation failed for church %s", ctx.church_id)
        db.rollback()
        return _error(500, "Failed to generate giving statements", details=str(exc) or type(exc).__name__)

    if isinstance(outcome, Confirmation):
        return {"requiresConfirmation": True, "missing": outcome.missing, "message": outcome.message}
    if isinstance(outcome, PreviewPdf):
        return Response(
            content=outcome.content,
            media_type="application/pdf",
            headers={"Content-Disposition": f'inline; filename="{outcome.filename}"'},
        )
    if isinstance(outcome, GenerationFailure):
        return _error(outcome.status_code, outcome.error, details=outcome.details, missing=outcome.missing)
    return _summary_body(outcome)


# --- stored statements -------------------------------------------------------
@router.get("", summary="List generated statements")
def list_statements(
    year: Optional[int] = Query(None),
    household_id: Optional[str] = Query(None, alias="householdId"),
    skip: int = 0,
    limit: int = Query(100, le=500),
    ctx: StatementContext = Depends(_manage),
    db: Session = Depends(get_db),
):
    conds = [GivingStatement.church_id == ctx.church_id, GivingStatement.preview_only.is_(False)]
    if year is not None:
        conds.append(GivingStatement.year == year)
    if household_id:
        conds.append(GivingStatement.household_id == household_id)

    rows = db.execute(
        select(GivingStatement)
        .where(*conds)
        .order_by(GivingStatement.generated_at.desc(), GivingStatement.id)
        .offset(skip)
        .limit(limit)
    ).scalars().all()
    return [_statement_row(st) for st in rows]


@router.get("/{statement_id}/download", summary="Download a stored statement PDF")
def download_statement(
    statement_id: str,
    ctx: StatementContext = Depends(_manage),
    db: Session = Depends(get_db),
):
    st = _get_statement(db, ctx.church_id, statement_id)
    if not st.pdf_url:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PDF not found for statement")

    pdf = pdf_from_data_url(st.pdf_url)
    if pdf is None:
        return RedirectResponse(st.pdf_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    filename = f"giving-statement-{st.year}-{st.statement_number or st.id}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{statement_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a statement")
def delete_statement(
    statement_id: str,
    ctx: StatementContext = Depends(_manage),
    db: Session = Depends(get_db),
) -> Response:
    st = _get_statement(db, ctx.church_id, statement_id)
    db.delete(st)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- delivery ----------------------------------------------------------------
@router.post("/send", summary="Email stored statements to their households")
def send(
    payload: dict = Body(...),
    ctx: StatementContext = Depends(_manage),
    db: Session = Depends(get_db),
    mailer=Depends(get_mailer),
):
    ids = payload.get("statementIds")
    if not isinstance(ids, list) or not ids or not all(isinstance(i, str) for i in ids):
        return _error(400, "statementIds is required and must be a non-empty array")

    church = db.get(Church, ctx.church_id)
    if not church:
        return _error(404, "Church not found")

    statements = db.execute(
        select(GivingStatement)
        .where(
            GivingStatement.id.in_(ids),
            GivingStatement.church_id == ctx.church_id,
            GivingStatement.preview_only.is_(False),
        )
        .order_by(GivingStatement.generated_at, GivingStatement.id)
    ).scalars().all()
    if not statements:
        return _error(404, "No statements found")

    return send_statements(db, ctx, decrypt_church(church), statements, mailer)
