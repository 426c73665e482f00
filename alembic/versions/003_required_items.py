"""Add required_items notices

Revision ID: 003
Revises: 002
Create Date: 2026-10-20 00:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "required_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("child_id", sa.Integer(), nullable=False),
        sa.Column("diapers", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("wet_wipes", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("clothing", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("other", sa.Text(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["child_id"], ["children.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("ix_required_items_child_id", "required_items", ["child_id"])


def downgrade() -> None:
    op.drop_index("ix_required_items_child_id", table_name="required_items")
    op.drop_table("required_items")
