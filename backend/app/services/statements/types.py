# app/services/statements/types.py
"""
Value types shared by the giving-statement pipeline.

Everything here is plain data: the orchestrator returns one of the outcome
variants (Confirmation, PreviewPdf, Summary, GenerationFailure) and the
HTTP layer maps each to its response.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import FrozenSet, List, Optional, Union

MANAGE_STATEMENTS = "giving_statements:manage"


@dataclass(frozen=True)
class StatementContext:
    """Caller identity threaded explicitly into the orchestrator."""
    church_id: str
    actor_id: str
    permissions: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class GenerateRequest:
    year: int
    household_id: Optional[str] = None
    preview: bool = False
    skip_validation: bool = False


# ---- church / household snapshots (decrypted, detached from the session) ----

@dataclass(frozen=True)
class ChurchInfo:
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    tax_id: Optional[str] = None
    is_501c3: Optional[bool] = None
    tax_statement_disclaimer: Optional[str] = None
    goods_services_provided: Optional[bool] = None
    goods_services_statement: Optional[str] = None


@dataclass(frozen=True)
class HouseholdInfo:
    id: str
    name: str
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


# ---- aggregation ----

@dataclass(frozen=True)
class GivingLine:
    date_given: date
    category_name: str
    amount: Decimal
    display_order: int = 0


@dataclass(frozen=True)
class CategoryTotal:
    category_name: str
    total: Decimal


@dataclass(frozen=True)
class GivingSummary:
    items: List[GivingLine]
    category_totals: List[CategoryTotal]
    total: Decimal


# ---- per-household results ----

@dataclass
class StatementResult:
    household_id: str
    household_name: str
    statement_number: str
    total_amount: Decimal
    status: str  # "created" | "updated" | "preview"
    statement_id: Optional[str] = None


@dataclass
class StatementError:
    household_id: str
    error: str
    household_name: Optional[str] = None


# ---- orchestrator outcomes ----

@dataclass(frozen=True)
class Confirmation:
    missing: List[str]
    message: str


@dataclass(frozen=True)
class PreviewPdf:
    content: bytes
    filename: str


@dataclass
class Summary:
    year: int
    preview: bool
    results: List[StatementResult] = field(default_factory=list)
    errors: List[StatementError] = field(default_factory=list)

    @property
    def generated(self) -> int:
        return len(self.results)


@dataclass(frozen=True)
class GenerationFailure:
    status_code: int
    error: str
    details: Optional[str] = None
    missing: Optional[List[str]] = None


GenerationOutcome = Union[Confirmation, PreviewPdf, Summary, GenerationFailure]
