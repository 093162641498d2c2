from __future__ import annotations

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Tuple

from app.services.statements.types import CategoryTotal, GivingLine, GivingSummary

DEFAULT_CATEGORY_NAME = "General"
# Items without a category sort after categorized items given the same day
UNCATEGORIZED_ORDER = 2**31 - 1

NO_MEMBERS = "No members found in household"
NO_RECORDS = "No giving records found for this period"
NO_ITEMS = "No giving items found for this period"


class HouseholdDataError(Exception):
    """A household cannot produce a statement (no members, no giving...)."""


def tax_year_bounds(year: int) -> Tuple[date, date]:
    """Inclusive calendar-date range for a tax year."""
    return date(year, 1, 1), date(year, 12, 31)


def sort_giving_lines(lines: Iterable[GivingLine]) -> List[GivingLine]:
    return sorted(lines, key=lambda ln: (ln.date_given, ln.display_order, ln.category_name))


def summarize_giving(lines: Iterable[GivingLine]) -> GivingSummary:
    """Order the lines and total them per category and overall (exact Decimal math)."""
    items = sort_giving_lines(lines)

    by_category: "OrderedDict[str, Decimal]" = OrderedDict()
    total = Decimal("0.00")
    for ln in items:
        amount = Decimal(ln.amount)
        by_category[ln.category_name] = by_category.get(ln.category_name, Decimal("0.00")) + amount
        total += amount

    return GivingSummary(
        items=items,
        category_totals=[CategoryTotal(category_name=k, total=v) for k, v in by_category.items()],
        total=total.quantize(Decimal("0.01")),
    )


def aggregate_household_giving(repo, church_id: str, household_id: str, year: int) -> GivingSummary:
    """
    Collect a household's giving for the tax year.

    Raises HouseholdDataError (message suitable for the summary's errors list)
    when the household has no members, no records, or no items in range.
    """
    start, end = tax_year_bounds(year)

    member_ids = repo.find_household_member_ids(church_id, household_id)
    if not member_ids:
        raise HouseholdDataError(NO_MEMBERS)

    record_ids = repo.find_giving_record_ids(church_id, member_ids, start, end)
    if not record_ids:
        raise HouseholdDataError(NO_RECORDS)

    lines = repo.find_giving_items_for_records(record_ids)
    if not lines:
        raise HouseholdDataError(NO_ITEMS)

    return summarize_giving(lines)
