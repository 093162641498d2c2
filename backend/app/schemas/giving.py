# app/schemas/giving.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GivingItemIn(BaseModel):
    category_id: str = Field(alias="categoryId")
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)

    model_config = ConfigDict(populate_by_name=True)


class GivingCreate(BaseModel):
    member_id: str = Field(alias="memberId")
    date_given: date = Field(alias="dateGiven")
    notes: Optional[str] = None
    items: List[GivingItemIn] = Field(min_length=1)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _needs_positive_amount(self) -> "GivingCreate":
        if not any(i.amount > 0 for i in self.items):
            raise ValueError("At least one item must have a positive amount")
        return self


class GivingItemRead(BaseModel):
    id: str
    category_id: Optional[str] = Field(default=None, serialization_alias="categoryId")
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class GivingRead(BaseModel):
    id: str
    member_id: str = Field(serialization_alias="memberId")
    date_given: date = Field(serialization_alias="dateGiven")
    notes: Optional[str] = None
    items: List[GivingItemRead]

    model_config = ConfigDict(from_attributes=True)


class GivingUpdate(BaseModel):
    """Partial update; items, when given, replace the record's items."""

    date_given: Optional[date] = Field(default=None, alias="dateGiven")
    notes: Optional[str] = None
    items: Optional[List[GivingItemIn]] = Field(default=None, min_length=1)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _needs_positive_amount(self) -> "GivingUpdate":
        if self.items is not None and not any(i.amount > 0 for i in self.items):
            raise ValueError("At least one item must have a positive amount")
        return self


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    display_order: Optional[int] = Field(default=None, alias="displayOrder", ge=0)
    is_active: bool = Field(default=True, alias="isActive")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    display_order: Optional[int] = Field(default=None, alias="displayOrder", ge=0)
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class CategoryRead(BaseModel):
    id: str
    name: str
    display_order: int = Field(serialization_alias="displayOrder")
    is_active: bool = Field(serialization_alias="isActive")

    model_config = ConfigDict(from_attributes=True)
