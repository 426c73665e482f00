"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-01 00:00:00.000000

Children carry ownership in two single-parent columns only
(legacy_parent_id, legacy_owner_id); multi-parent support arrives in 002.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.Enum("guest", "parent", "admin", name="userrole"),
            nullable=False,
            server_default="guest",
        ),
        sa.Column("child_ids", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("ix_users_email", "users", ["email"])

    # Children table
    op.create_table(
        "children",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("external_id", sa.String(64), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("medical_condition", sa.Text(), nullable=False),
        sa.Column("special_notes", sa.Text(), nullable=False),
        sa.Column("legacy_parent_id", sa.Integer(), nullable=True),
        sa.Column("legacy_owner_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        # NULL external ids are not compared, so codeless children are exempt
        sa.UniqueConstraint("external_id"),
        sa.ForeignKeyConstraint(["legacy_parent_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["legacy_owner_id"], ["users.id"], ondelete="SET NULL"),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("ix_children_legacy_parent_id", "children", ["legacy_parent_id"])
    op.create_index("ix_children_legacy_owner_id", "children", ["legacy_owner_id"])

    # Authorized pickups
    op.create_table(
        "authorized_pickups",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("child_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(40), nullable=False),
        sa.Column("photo_url", sa.String(500), nullable=False),
        sa.Column("added_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["child_id"], ["children.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["added_by"], ["users.id"], ondelete="SET NULL"),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("ix_authorized_pickups_child_id", "authorized_pickups", ["child_id"])

    # Daily reports
    op.create_table(
        "daily_reports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("child_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column(
            "report_type",
            sa.Enum("pre_sleep", "post_sleep", name="dailyreporttype"),
            nullable=False,
        ),
        sa.Column("meals", sa.JSON(), nullable=False),
        sa.Column("milk_ml", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("sleep_minutes", sa.Integer(), nullable=True),
        sa.Column("bathroom_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("photos", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["child_id"], ["children.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("child_id", "date", "report_type", name="uq_daily_report_identity"),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("ix_daily_reports_child_id", "daily_reports", ["child_id"])

    # Monthly reports
    op.create_table(
        "monthly_reports",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("child_id", sa.Integer(), nullable=False),
        sa.Column("month", sa.String(7), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("milestones", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["child_id"], ["children.id"]),
        sa.UniqueConstraint("child_id", "month", name="uq_monthly_report_identity"),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("ix_monthly_reports_child_id", "monthly_reports", ["child_id"])


def downgrade() -> None:
    op.drop_table("monthly_reports")
    op.drop_table("daily_reports")
    op.drop_table("authorized_pickups")
    op.drop_table("children")
    op.drop_table("users")
