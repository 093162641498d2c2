# app/schemas/household.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class HouseholdRead(BaseModel):
    id: str
    name: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
