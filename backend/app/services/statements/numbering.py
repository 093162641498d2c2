from __future__ import annotations

import hashlib
import re


def generate_statement_number(year: int, household_id: str) -> str:
    """
    Deterministic statement number: YEAR-HOUSEHOLD8-CHECK.

    HOUSEHOLD8 is the first eight alphanumerics of the household id, upper-cased;
    CHECK is four hex digits of sha256("{year}:{household_id}"). Regenerating a
    statement for the same household and year keeps the same number.
    """
    prefix = re.sub(r"[^0-9A-Za-z]", "", str(household_id))[:8].upper()
    check = hashlib.sha256(f"{year}:{household_id}".encode("utf-8")).hexdigest()[:4].upper()
    return f"{year}-{prefix}-{check}"
