from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.giving_statement import GivingStatement
from app.services.statements.aggregation import tax_year_bounds

logger = logging.getLogger(__name__)

PDF_DATA_URL_PREFIX = "data:application/pdf;base64,"


@dataclass
class UpsertOutcome:
    statement: GivingStatement
    created: bool


def pdf_to_data_url(content: bytes) -> str:
    return PDF_DATA_URL_PREFIX + base64.b64encode(content).decode("ascii")


def pdf_from_data_url(url: Optional[str]) -> Optional[bytes]:
    """Decode an inline PDF reference; None for external URLs or empty values."""
    if not url or not url.startswith(PDF_DATA_URL_PREFIX):
        return None
    return base64.b64decode(url[len(PDF_DATA_URL_PREFIX):])


def clear_send_tracking(statement: GivingStatement) -> None:
    """A regenerated statement must not appear sent: its content changed."""
    statement.email_status = None
    statement.sent_at = None
    statement.sent_by = None


def find_statement(db: Session, church_id: str, household_id: str, year: int) -> Optional[GivingStatement]:
    return (
        db.execute(
            select(GivingStatement).where(
                GivingStatement.church_id == church_id,
                GivingStatement.household_id == household_id,
                GivingStatement.year == year,
                GivingStatement.preview_only.is_(False),
            )
        )
        .scalars()
        .first()
    )


def upsert_statement(
    db: Session,
    *,
    church_id: str,
    household_id: str,
    year: int,
    total: Decimal,
    statement_number: str,
    pdf_ref: str,
    actor_id: str,
) -> UpsertOutcome:
    """
    Create or update the (household, year) statement row.

    Updates overwrite the computed fields and clear email_status / sent_at /
    sent_by. Flushes but does not commit.
    """
    now = datetime.now(timezone.utc)
    total = Decimal(total).quantize(Decimal("0.01"))
    existing = find_statement(db, church_id, household_id, year)

    if existing:
        if existing.email_status == "sent":
            logger.warning(
                "regenerating statement %s (household=%s year=%s) discards its sent record (sent_at=%s)",
                existing.id, household_id, year, existing.sent_at,
            )
        existing.total_amount = total
        existing.statement_number = statement_number
        existing.generated_at = now
        existing.generated_by = actor_id
        existing.pdf_url = pdf_ref
        clear_send_tracking(existing)
        db.flush()
        return UpsertOutcome(statement=existing, created=False)

    start, end = tax_year_bounds(year)
    stmt = GivingStatement(
        church_id=church_id,
        household_id=household_id,
        year=year,
        start_date=start,
        end_date=end,
        total_amount=total,
        statement_number=statement_number,
        generated_at=now,
        generated_by=actor_id,
        pdf_url=pdf_ref,
        preview_only=False,
    )
    db.add(stmt)
    db.flush()
    return UpsertOutcome(statement=stmt, created=True)
