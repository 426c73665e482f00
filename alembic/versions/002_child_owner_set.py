"""Add child_owners (multi-parent owner set) and backfill it from legacy columns

Revision ID: 002
Revises: 001
Create Date: 2026-10-08 00:00:00.000000

The legacy single-owner columns stay in place: older readers still expect
them, and writers keep stamping them with a current owner. Ownership is the
union of all three shapes from this revision on.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "child_owners",
        sa.Column("child_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("child_id", "user_id"),
        sa.ForeignKeyConstraint(["child_id"], ["children.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("ix_child_owners_user_id", "child_owners", ["user_id"])

    # Seed the owner set from whichever legacy column is populated
    op.execute(
        """
        INSERT INTO child_owners (child_id, user_id)
        SELECT id, legacy_parent_id FROM children WHERE legacy_parent_id IS NOT NULL
        """
    )
    op.execute(
        """
        INSERT INTO child_owners (child_id, user_id)
        SELECT c.id, c.legacy_owner_id FROM children c
        WHERE c.legacy_owner_id IS NOT NULL
          AND (c.legacy_parent_id IS NULL OR c.legacy_parent_id <> c.legacy_owner_id)
        """
    )


def downgrade() -> None:
    op.drop_index("ix_child_owners_user_id", table_name="child_owners")
    op.drop_table("child_owners")
