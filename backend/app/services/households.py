# app/services/households.py
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.household import Household, Member

logger = logging.getLogger(__name__)


class HouseholdNotFound(LookupError):
    pass


class HouseholdInUseError(ValueError):
    """Household still has members."""


def list_households(db: Session, church_id: str, skip: int = 0, limit: int = 100) -> List[Household]:
    stmt = (
        select(Household)
        .where(Household.church_id == church_id)
        .order_by(Household.name, Household.id)
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def delete_household(db: Session, church_id: str, household_id: str) -> None:
    household = db.execute(
        select(Household).where(Household.id == household_id, Household.church_id == church_id)
    ).scalars().first()
    if not household:
        raise HouseholdNotFound("Household not found")

    member_count = db.execute(
        select(func.count(Member.id)).where(Member.household_id == household_id, Member.church_id == church_id)
    ).scalar_one()
    if member_count:
        raise HouseholdInUseError("Cannot delete household with members. Remove all members first.")

    db.delete(household)
    db.commit()
    logger.info("deleted household %s for church %s", household_id, church_id)
