"""add bill_series marks

Revision ID: 20241015_000002
Revises: 20241001_000001
Create Date: 2024-10-15 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20241015_000002"
down_revision = "20241001_000001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "bill_series",
        sa.Column("owner_email", sa.String(), nullable=False),
        sa.Column("series_id", sa.String(), nullable=False),
        sa.Column("last_due_date", sa.String(), nullable=False),
        sa.Column("last_generated", sa.String(), nullable=False),
        sa.Column("updated_at", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("owner_email", "series_id"),
    )


def downgrade() -> None:
    op.drop_table("bill_series")
