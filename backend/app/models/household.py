# app/models/household.py
from __future__ import annotations

import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db import Base

GUEST_MEMBERSHIP_CODE = "GUEST"


def _uuid() -> str:
    return str(uuid.uuid4())


class MemberStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"
    deceased = "deceased"
    homebound = "homebound"
    military = "military"
    school = "school"


class Household(Base):
    __tablename__ = "households"

    id = Column(String(36), primary_key=True, default=_uuid)
    church_id = Column(String(36), ForeignKey("churches.id", ondelete="CASCADE"), nullable=False, index=True)

    # Optional; statements fall back to a member-derived name
    name = Column(String(200), nullable=True)
    address1 = Column(String(255), nullable=True)
    address2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    members = relationship(
        "Member",
        back_populates="household",
        lazy="selectin",
        order_by="Member.created_at",
    )


class Member(Base):
    __tablename__ = "members"

    id = Column(String(36), primary_key=True, default=_uuid)
    church_id = Column(String(36), ForeignKey("churches.id", ondelete="CASCADE"), nullable=False, index=True)
    household_id = Column(
        String(36),
        ForeignKey("households.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=False)
    suffix = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    status = Column(Enum(MemberStatus, name="member_status"), nullable=False, default=MemberStatus.active)
    # Shared across a household for giving attribution
    envelope_number = Column(Integer, nullable=True, index=True)
    membership_code = Column(String(20), nullable=True)
    is_head_of_household = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    household = relationship("Household", back_populates="members")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_guest(self) -> bool:
        return (self.membership_code or "").upper() == GUEST_MEMBERSHIP_CODE
