# app/models/rbac.py
import uuid
from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(100), nullable=True)
    api_key_hash = Column(String(64), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("TRUE"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    memberships = relationship(
        "ChurchUser",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class ChurchUser(Base):
    """
    Association between a User and a Church (tenant), carrying the user's role there.
    Composite PK (user_id, church_id): one role per user per church.
    """
    __tablename__ = "church_users"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    church_id = Column(String(36), ForeignKey("churches.id", ondelete="CASCADE"), primary_key=True)
    # admin | viewer | members_editor | giving_editor | attendance_editor | reports_viewer | analytics_viewer
    role = Column(String(50), nullable=False, default="viewer")

    user = relationship("User", back_populates="memberships")
    church = relationship("Church")
