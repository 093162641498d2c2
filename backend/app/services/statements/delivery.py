"""Email delivery of persisted giving statements."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.giving_statement import GivingStatement
from app.models.household import Member
from app.services.statements.persistence import pdf_from_data_url
from app.services.statements.repository import household_display_name
from app.services.statements.types import ChurchInfo, StatementContext

logger = logging.getLogger(__name__)


def _to_float(x) -> float:
    if x is None:
        return 0.0
    return float(x)


def find_household_contact(db: Session, church_id: str, household_id: str) -> Optional[Member]:
    """Head of household with an email, else the first member with an email.

    GUEST members never receive statements.
    """
    members = (
        db.execute(
            select(Member)
            .where(Member.household_id == household_id, Member.church_id == church_id)
            .order_by(Member.is_head_of_household.desc(), Member.created_at, Member.id)
        )
        .scalars()
        .all()
    )
    return next((m for m in members if m.email and m.email.strip() and not m.is_guest), None)


def _mark_failed(db: Session, statement: GivingStatement) -> None:
    statement.email_status = "failed"
    db.commit()


def send_statements(
    db: Session,
    ctx: StatementContext,
    church: ChurchInfo,
    statements: Sequence[GivingStatement],
    mailer,
) -> Dict[str, Any]:
    results: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []

    for st in statements:
        name = household_display_name(st.household) if st.household else None
        try:
            contact = find_household_contact(db, ctx.church_id, st.household_id)
            if contact is None:
                errors.append({"statementId": st.id, "householdName": name,
                               "error": "No contact email found for household"})
                _mark_failed(db, st)
                continue

            pdf = pdf_from_data_url(st.pdf_url)
            if pdf is None:
                errors.append({"statementId": st.id, "householdName": name,
                               "error": "PDF not found for statement"})
                continue

            outcome = mailer.send_statement(
                to=contact.email.strip(),
                recipient_name=contact.full_name,
                church_name=church.name,
                year=st.year,
                total_amount=st.total_amount,
                pdf=pdf,
                statement_number=st.statement_number,
            )
            if outcome.success:
                st.email_status = "sent"
                st.sent_at = datetime.now(timezone.utc)
                st.sent_by = ctx.actor_id
                db.commit()
                results.append({"statementId": st.id, "householdName": name,
                                 "email": contact.email.strip(), "status": "sent",
                                 "totalAmount": _to_float(st.total_amount)})
            else:
                _mark_failed(db, st)
                errors.append({"statementId": st.id, "householdName": name,
                               "error": outcome.error or "Failed to send email"})
        except Exception as exc:
            logger.exception("Error sending statement %s", st.id)
            db.rollback()
            errors.append({"statementId": st.id, "householdName": name, "error": str(exc)})
            try:
                _mark_failed(db, st)
            except Exception:
                logger.exception("Could not record failed send for statement %s", st.id)
                db.rollback()

    body: Dict[str, Any] = {
        "success": True,
        "sent": len(results),
        "failed": len(errors),
        "results": results,
    }
    if errors:
        body["errors"] = errors
    return body
