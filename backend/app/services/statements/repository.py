"""
Storage seam for statement generation.

The orchestrator only talks to a StatementRepository; SqlStatementRepository is
the SQLAlchemy implementation used by the API, and tests can supply an
in-memory fake with the same methods.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.church import Church
from app.models.giving import GivingCategory, GivingItem, GivingRecord
from app.models.household import Household, Member
from app.services.encryption import decrypt_church
from app.services.statements import persistence
from app.services.statements.aggregation import DEFAULT_CATEGORY_NAME, UNCATEGORIZED_ORDER
from app.services.statements.types import ChurchInfo, GivingLine, HouseholdInfo


@dataclass(frozen=True)
class StoredStatement:
    id: str
    created: bool


class StatementRepository(Protocol):
    def get_church(self, church_id: str) -> Optional[ChurchInfo]: ...

    def resolve_household_ids(self, church_id: str, start: date, end: date) -> List[str]: ...

    def get_household(self, church_id: str, household_id: str) -> Optional[HouseholdInfo]: ...

    def find_household_member_ids(self, church_id: str, household_id: str) -> List[str]: ...

    def find_giving_record_ids(
        self, church_id: str, member_ids: Sequence[str], start: date, end: date
    ) -> List[str]: ...

    def find_giving_items_for_records(self, record_ids: Sequence[str]) -> List[GivingLine]: ...

    def upsert_statement(
        self,
        *,
        church_id: str,
        household_id: str,
        year: int,
        total: Decimal,
        statement_number: str,
        pdf_ref: str,
        actor_id: str,
    ) -> StoredStatement: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


def household_display_name(household: Household) -> str:
    """Household name, else head of household (or first member), else 'Household'."""
    if household.name and household.name.strip():
        return household.name.strip()
    members = list(household.members or [])
    head = next((m for m in members if m.is_head_of_household), None)
    pick = head or (members[0] if members else None)
    if pick is not None:
        return pick.full_name
    return "Household"


class SqlStatementRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_church(self, church_id: str) -> Optional[ChurchInfo]:
        church = self.db.get(Church, church_id)
        return decrypt_church(church) if church else None

    def resolve_household_ids(self, church_id: str, start: date, end: date) -> List[str]:
        stmt = (
            select(Household.id)
            .join(Member, Member.household_id == Household.id)
            .join(GivingRecord, GivingRecord.member_id == Member.id)
            .where(
                Household.church_id == church_id,
                GivingRecord.date_given >= start,
                GivingRecord.date_given <= end,
            )
            .distinct()
            .order_by(Household.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_household(self, church_id: str, household_id: str) -> Optional[HouseholdInfo]:
        h = (
            self.db.execute(
                select(Household).where(Household.id == household_id, Household.church_id == church_id)
            )
            .scalars()
            .first()
        )
        if not h:
            return None
        return HouseholdInfo(
            id=h.id,
            name=household_display_name(h),
            address1=h.address1,
            address2=h.address2,
            city=h.city,
            state=h.state,
            zip=h.zip,
        )

    def find_household_member_ids(self, church_id: str, household_id: str) -> List[str]:
        stmt = select(Member.id).where(Member.household_id == household_id, Member.church_id == church_id)
        return list(self.db.execute(stmt).scalars().all())

    def find_giving_record_ids(
        self, church_id: str, member_ids: Sequence[str], start: date, end: date
    ) -> List[str]:
        stmt = (
            select(GivingRecord.id)
            .where(
                GivingRecord.church_id == church_id,
                GivingRecord.member_id.in_(list(member_ids)),
                GivingRecord.date_given >= start,
                GivingRecord.date_given <= end,
            )
            .order_by(GivingRecord.date_given, GivingRecord.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def find_giving_items_for_records(self, record_ids: Sequence[str]) -> List[GivingLine]:
        # Outer join: an item whose category is gone still counts as "General"
        stmt = (
            select(
                GivingRecord.date_given,
                GivingCategory.name,
                GivingCategory.display_order,
                GivingItem.amount,
            )
            .join(GivingRecord, GivingRecord.id == GivingItem.giving_id)
            .outerjoin(GivingCategory, GivingCategory.id == GivingItem.category_id)
            .where(GivingItem.giving_id.in_(list(record_ids)))
            .order_by(GivingRecord.date_given, GivingItem.id)
        )
        lines: List[GivingLine] = []
        for date_given, cat_name, display_order, amount in self.db.execute(stmt).all():
            if cat_name is None:
                cat_name, display_order = DEFAULT_CATEGORY_NAME, UNCATEGORIZED_ORDER
            lines.append(
                GivingLine(
                    date_given=date_given,
                    category_name=cat_name,
                    amount=Decimal(amount if amount is not None else "0"),
                    display_order=display_order if display_order is not None else 0,
                )
            )
        return lines

    def upsert_statement(
        self,
        *,
        church_id: str,
        household_id: str,
        year: int,
        total: Decimal,
        statement_number: str,
        pdf_ref: str,
        actor_id: str,
    ) -> StoredStatement:
        outcome = persistence.upsert_statement(
            self.db,
            church_id=church_id,
            household_id=household_id,
            year=year,
            total=total,
            statement_number=statement_number,
            pdf_ref=pdf_ref,
            actor_id=actor_id,
        )
        return StoredStatement(id=outcome.statement.id, created=outcome.created)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
