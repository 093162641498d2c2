# app/services/giving.py
"""
Giving entry: single records from the weekly entry form and bulk CSV import.

CSV layout (header names are case-insensitive):

    Envelope Number | Member ID, Date Given | Date, Notes, <one column per category>

Category columns match active category names; the legacy "Amount" and
"General Fund" columns map to the "Current" category.
"""
from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.giving import GivingCategory, GivingItem, GivingRecord
from app.models.household import Member
from app.schemas.giving import CategoryCreate, CategoryUpdate, GivingCreate, GivingUpdate

logger = logging.getLogger(__name__)

ENVELOPE_KEYS = ("envelope number", "envelopenumber", "envelope_number")
MEMBER_KEYS = ("member id", "memberid", "member_id")
DATE_KEYS = ("date given", "dategiven", "date_given", "date")
NOTES_KEYS = ("notes", "note")
LEGACY_CURRENT_KEYS = ("amount", "general fund", "generalfund")


class GivingValidationError(ValueError):
    """Input refers to something that does not exist for this church."""


class GivingImportError(ValueError):
    """The CSV as a whole cannot be imported (bad header, empty file)."""


class GivingNotFound(LookupError):
    pass


class CategoryNotFound(LookupError):
    pass


class CategoryConflictError(ValueError):
    """Duplicate name, or a delete that would orphan giving items."""


# ---------------------------------------------------------------------------
# Single record
# ---------------------------------------------------------------------------

def _check_categories(db: Session, church_id: str, category_ids) -> None:
    cat_ids = set(category_ids)
    found = set(
        db.execute(
            select(GivingCategory.id).where(GivingCategory.id.in_(cat_ids), GivingCategory.church_id == church_id)
        ).scalars().all()
    )
    unknown = cat_ids - found
    if unknown:
        raise GivingValidationError(f"categoryId does not exist: {', '.join(sorted(unknown))}")


def create_giving(db: Session, church_id: str, data: GivingCreate) -> GivingRecord:
    member = db.execute(
        select(Member).where(Member.id == data.member_id, Member.church_id == church_id)
    ).scalars().first()
    if not member:
        raise GivingValidationError("memberId does not exist")

    _check_categories(db, church_id, (i.category_id for i in data.items))

    record = GivingRecord(
        church_id=church_id,
        member_id=member.id,
        date_given=data.date_given,
        notes=(data.notes or None),
        items=[GivingItem(category_id=i.category_id, amount=i.amount) for i in data.items if i.amount > 0],
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def get_giving(db: Session, church_id: str, giving_id: str) -> GivingRecord:
    record = db.execute(
        select(GivingRecord).where(GivingRecord.id == giving_id, GivingRecord.church_id == church_id)
    ).scalars().first()
    if not record:
        raise GivingNotFound("Giving record not found")
    return record


def update_giving(db: Session, church_id: str, giving_id: str, data: GivingUpdate) -> GivingRecord:
    record = get_giving(db, church_id, giving_id)
    fields = data.model_fields_set

    if data.items is not None:
        _check_categories(db, church_id, (i.category_id for i in data.items))
        record.items = [GivingItem(category_id=i.category_id, amount=i.amount) for i in data.items if i.amount > 0]
    if data.date_given is not None:
        record.date_given = data.date_given
    if "notes" in fields:
        record.notes = data.notes or None

    db.commit()
    db.refresh(record)
    return record


def delete_giving(db: Session, church_id: str, giving_id: str) -> None:
    record = get_giving(db, church_id, giving_id)
    db.delete(record)
    db.commit()


def list_giving(
    db: Session,
    church_id: str,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[GivingRecord]:
    conds = [GivingRecord.church_id == church_id]
    if date_from is not None:
        conds.append(GivingRecord.date_given >= date_from)
    if date_to is not None:
        conds.append(GivingRecord.date_given <= date_to)
    stmt = (
        select(GivingRecord)
        .where(*conds)
        .order_by(GivingRecord.date_given.desc(), GivingRecord.id)
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

def list_categories(db: Session, church_id: str) -> List[GivingCategory]:
    stmt = (
        select(GivingCategory)
        .where(GivingCategory.church_id == church_id)
        .order_by(GivingCategory.display_order, GivingCategory.name)
    )
    return list(db.execute(stmt).scalars().all())


def _get_category(db: Session, church_id: str, category_id: str) -> GivingCategory:
    cat = db.execute(
        select(GivingCategory).where(GivingCategory.id == category_id, GivingCategory.church_id == church_id)
    ).scalars().first()
    if not cat:
        raise CategoryNotFound("Category not found")
    return cat


def _name_taken(db: Session, church_id: str, name: str, exclude_id: Optional[str] = None) -> bool:
    conds = [GivingCategory.church_id == church_id, func.lower(GivingCategory.name) == name.lower()]
    if exclude_id:
        conds.append(GivingCategory.id != exclude_id)
    return db.execute(select(GivingCategory.id).where(*conds)).first() is not None


def create_category(db: Session, church_id: str, data: CategoryCreate) -> GivingCategory:
    if _name_taken(db, church_id, data.name):
        raise CategoryConflictError("A category with this name already exists")

    display_order = data.display_order
    if display_order is None:
        current_max = db.execute(
            select(func.max(GivingCategory.display_order)).where(GivingCategory.church_id == church_id)
        ).scalar()
        display_order = 0 if current_max is None else current_max + 1

    cat = GivingCategory(church_id=church_id, name=data.name, display_order=display_order, is_active=data.is_active)
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


def update_category(db: Session, church_id: str, category_id: str, data: CategoryUpdate) -> GivingCategory:
    cat = _get_category(db, church_id, category_id)

    if data.name is not None and data.name != cat.name:
        if _name_taken(db, church_id, data.name, exclude_id=cat.id):
            raise CategoryConflictError("A category with this name already exists")
        cat.name = data.name
    if data.display_order is not None:
        cat.display_order = data.display_order
    if data.is_active is not None:
        cat.is_active = data.is_active

    db.commit()
    db.refresh(cat)
    return cat


def delete_category(db: Session, church_id: str, category_id: str) -> None:
    cat = _get_category(db, church_id, category_id)
    in_use = db.execute(select(GivingItem.id).where(GivingItem.category_id == cat.id).limit(1)).first()
    if in_use:
        raise CategoryConflictError("Cannot delete category that has giving records. Deactivate it instead.")
    logger.info("deleting giving category %s (%s) for church %s", cat.id, cat.name, church_id)
    db.delete(cat)
    db.commit()


# ---------------------------------------------------------------------------
# CSV import
# ---------------------------------------------------------------------------

def _parse_date(raw: str) -> Optional[date]:
    raw = raw.strip()
    for fmt in ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y"):
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def _parse_amount(raw: str) -> Optional[Decimal]:
    cleaned = raw.strip().replace("$", "").replace(",", "")
    try:
        return Decimal(cleaned).quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


def _pick_envelope_member(candidates: List[Member]) -> Member:
    head = next((m for m in candidates if m.is_head_of_household), None)
    return head or candidates[0]


def import_giving_csv(db: Session, church_id: str, text: str) -> Dict[str, object]:
    rows = [r for r in csv.reader(io.StringIO(text)) if any(c.strip() for c in r)]
    if len(rows) < 2:
        raise GivingImportError("CSV file must have at least a header row and one data row")

    header = {h.strip().lower(): idx for idx, h in enumerate(rows[0])}

    categories = db.execute(
        select(GivingCategory).where(GivingCategory.church_id == church_id, GivingCategory.is_active.is_(True))
    ).scalars().all()
    by_name = {c.name.lower(): c for c in categories}

    column_category: Dict[str, GivingCategory] = {}
    for col in header:
        target = by_name.get(col)
        if target is not None:
            column_category[col] = target
    current = by_name.get("current")
    legacy_cols = [k for k in LEGACY_CURRENT_KEYS if k in header and k not in column_category]

    if not column_category and not legacy_cols:
        raise GivingImportError(
            "Missing required column: at least one category amount column is required. "
            "Available categories: " + ", ".join(c.name for c in categories)
        )
    if not any(k in header for k in DATE_KEYS):
        raise GivingImportError("Missing required column: dateGiven (or 'date given' or 'date')")
    if not any(k in header for k in ENVELOPE_KEYS + MEMBER_KEYS):
        raise GivingImportError(
            "Missing required column: envelopeNumber (or 'envelope number') or memberId (or 'member id')"
        )

    members = db.execute(
        select(Member).where(Member.church_id == church_id).order_by(Member.created_at, Member.id)
    ).scalars().all()
    members_by_id = {m.id: m for m in members}
    members_by_envelope: Dict[int, List[Member]] = {}
    for m in members:
        if m.envelope_number is not None:
            members_by_envelope.setdefault(m.envelope_number, []).append(m)

    success, failed = 0, 0
    errors: List[str] = []
    pending: List[GivingRecord] = []

    for line_no, values in enumerate(rows[1:], start=2):
        def get(keys: Tuple[str, ...]) -> Optional[str]:
            for k in keys:
                idx = header.get(k)
                if idx is not None and idx < len(values) and values[idx].strip():
                    return values[idx].strip()
            return None

        date_raw = get(DATE_KEYS)
        if not date_raw:
            failed += 1
            errors.append(f"Row {line_no}: Missing required field (dateGiven)")
            continue
        date_given = _parse_date(date_raw)
        if date_given is None:
            failed += 1
            errors.append(f"Row {line_no}: Invalid date format (use YYYY-MM-DD)")
            continue

        member: Optional[Member] = None
        member_raw = get(MEMBER_KEYS)
        envelope_raw = get(ENVELOPE_KEYS)
        if member_raw:
            member = members_by_id.get(member_raw)
        elif envelope_raw:
            try:
                candidates = members_by_envelope.get(int(envelope_raw), [])
            except ValueError:
                candidates = []
            member = _pick_envelope_member(candidates) if candidates else None
        if member is None:
            failed += 1
            errors.append(f"Row {line_no}: Member not found ({member_raw or envelope_raw or 'no identifier'})")
            continue

        items: List[GivingItem] = []
        row_ok = True
        amount_cols = [(col, cat) for col, cat in column_category.items()]
        amount_cols += [(col, current) for col in legacy_cols]
        for col, cat in amount_cols:
            raw = get((col,))
            if not raw:
                continue
            amount = _parse_amount(raw)
            if amount is None or amount < 0:
                row_ok = False
                errors.append(f"Row {line_no}: Invalid amount for {col} (must be non-negative)")
                break
            if amount == 0:
                continue
            if cat is None:
                row_ok = False
                errors.append(f"Row {line_no}: No 'Current' category for column {col}")
                break
            items.append(GivingItem(category_id=cat.id, amount=amount))

        if not row_ok:
            failed += 1
            continue
        if not items:
            failed += 1
            errors.append(f"Row {line_no}: At least one amount is required")
            continue

        pending.append(GivingRecord(
            church_id=church_id,
            member_id=member.id,
            date_given=date_given,
            notes=get(NOTES_KEYS),
            items=items,
        ))
        success += 1

    db.add_all(pending)
    db.commit()
    logger.info("giving import church=%s imported=%s failed=%s", church_id, success, failed)
    return {"success": success, "failed": failed, "errors": errors}
