from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional

from app.services.statements.types import ChurchInfo

# Human-readable labels for the confirmation prompt
FIELD_LABELS = {
    "name": "Church Name",
    "address": "Address",
    "city": "City",
    "state": "State",
    "zip": "ZIP Code",
    "taxId": "Tax ID / EIN",
    "is501c3": "501(c)(3) Status",
    "goodsServicesStatement": "Goods/Services Statement",
}


class ValidationPolicy(str, enum.Enum):
    STRICT = "strict"    # refuse generation when fields are missing
    CONFIRM = "confirm"  # ask for explicit confirmation (skipValidation) first

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ValidationPolicy":
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.CONFIRM


@dataclass(frozen=True)
class TaxValidation:
    valid: bool
    missing: List[str]

    @property
    def message(self) -> str:
        labels = ", ".join(FIELD_LABELS.get(k, k) for k in self.missing)
        return f"The following fields are recommended for IRS-compliant statements: {labels}."


def _blank(v: Optional[str]) -> bool:
    return v is None or str(v).strip() == ""


def validate_church_tax_info(church: ChurchInfo) -> TaxValidation:
    missing: List[str] = []

    for key, value in (
        ("name", church.name),
        ("address", church.address),
        ("city", church.city),
        ("state", church.state),
        ("zip", church.zip),
        ("taxId", church.tax_id),
    ):
        if _blank(value):
            missing.append(key)

    if church.is_501c3 is None:
        missing.append("is501c3")

    if church.goods_services_provided and _blank(church.goods_services_statement):
        missing.append("goodsServicesStatement")

    return TaxValidation(valid=not missing, missing=missing)
