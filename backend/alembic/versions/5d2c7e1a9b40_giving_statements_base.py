"""Base schema: churches, households/members, giving, statements, attendance, users.

Revision ID: 5d2c7e1a9b40
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5d2c7e1a9b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "churches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(50), nullable=True),
        sa.Column("zip", sa.String(20), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("tax_id", sa.Text(), nullable=True),
        sa.Column("is_501c3", sa.Boolean(), nullable=True),
        sa.Column("tax_statement_disclaimer", sa.Text(), nullable=True),
        sa.Column("goods_services_provided", sa.Boolean(), nullable=False, server_default=sa.text("FALSE")),
        sa.Column("goods_services_statement", sa.Text(), nullable=True),
        sa.Column("subscription_plan", sa.String(20), nullable=False, server_default="basic"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("api_key_hash", sa.String(64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("TRUE")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_api_key_hash", "users", ["api_key_hash"])

    op.create_table(
        "church_users",
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("church_id", sa.String(36), sa.ForeignKey("churches.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role", sa.String(50), nullable=False),
    )

    op.create_table(
        "households",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("church_id", sa.String(36), sa.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("address1", sa.String(255), nullable=True),
        sa.Column("address2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(50), nullable=True),
        sa.Column("zip", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_households_church_id", "households", ["church_id"])

    member_status = sa.Enum(
        "active", "inactive", "deceased", "homebound", "military", "school", name="member_status"
    )
    op.create_table(
        "members",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("church_id", sa.String(36), sa.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("household_id", sa.String(36), sa.ForeignKey("households.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("middle_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("suffix", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("status", member_status, nullable=False),
        sa.Column("envelope_number", sa.Integer(), nullable=True),
        sa.Column("membership_code", sa.String(20), nullable=True),
        sa.Column("is_head_of_household", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_members_church_id", "members", ["church_id"])
    op.create_index("ix_members_household_id", "members", ["household_id"])
    op.create_index("ix_members_envelope_number", "members", ["envelope_number"])

    op.create_table(
        "giving_categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("church_id", sa.String(36), sa.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("TRUE")),
    )
    op.create_index("ix_giving_categories_church_id", "giving_categories", ["church_id"])

    op.create_table(
        "giving_records",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("church_id", sa.String(36), sa.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("member_id", sa.String(36), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date_given", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_giving_records_church_id", "giving_records", ["church_id"])
    op.create_index("ix_giving_records_member_id", "giving_records", ["member_id"])
    op.create_index("ix_giving_records_date_given", "giving_records", ["date_given"])

    op.create_table(
        "giving_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("giving_id", sa.String(36), sa.ForeignKey("giving_records.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("giving_categories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_giving_items_amount_non_negative"),
    )
    op.create_index("ix_giving_items_giving_id", "giving_items", ["giving_id"])

    op.create_table(
        "giving_statements",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("church_id", sa.String(36), sa.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("household_id", sa.String(36), sa.ForeignKey("households.id", ondelete="CASCADE"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("statement_number", sa.String(50), nullable=True),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("generated_by", sa.String(36), nullable=False),
        sa.Column("pdf_url", sa.Text(), nullable=True),
        sa.Column("email_status", sa.String(20), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sent_by", sa.String(36), nullable=True),
        sa.Column("preview_only", sa.Boolean(), nullable=False, server_default=sa.text("FALSE")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("household_id", "year", "preview_only", name="giving_statements_household_year_unique"),
    )
    op.create_index("ix_giving_statements_church_id", "giving_statements", ["church_id"])
    op.create_index("ix_giving_statements_household_id", "giving_statements", ["household_id"])
    op.create_index("ix_giving_statements_year", "giving_statements", ["year"])

    op.create_table(
        "services",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("church_id", sa.String(36), sa.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("service_date", sa.Date(), nullable=False),
        sa.Column("service_type", sa.String(50), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_services_church_id", "services", ["church_id"])
    op.create_index("ix_services_service_date", "services", ["service_date"])

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("member_id", sa.String(36), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("service_id", sa.String(36), sa.ForeignKey("services.id", ondelete="CASCADE"), nullable=False),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.text("FALSE")),
        sa.Column("took_communion", sa.Boolean(), nullable=False, server_default=sa.text("FALSE")),
        sa.UniqueConstraint("member_id", "service_id", name="uq_attendance_member_service"),
        sa.CheckConstraint(
            "attended OR NOT took_communion",
            name="ck_attendance_communion_requires_attendance",
        ),
    )
    op.create_index("ix_attendance_records_member_id", "attendance_records", ["member_id"])
    op.create_index("ix_attendance_records_service_id", "attendance_records", ["service_id"])


def downgrade() -> None:
    op.drop_table("attendance_records")
    op.drop_table("services")
    op.drop_table("giving_statements")
    op.drop_table("giving_items")
    op.drop_table("giving_records")
    op.drop_table("giving_categories")
    op.drop_table("members")
    sa.Enum(name="member_status").drop(op.get_bind(), checkfirst=True)
    op.drop_table("households")
    op.drop_table("church_users")
    op.drop_table("users")
    op.drop_table("churches")
