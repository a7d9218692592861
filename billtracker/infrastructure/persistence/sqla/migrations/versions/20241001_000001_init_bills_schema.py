"""init bills schema

Revision ID: 20241001_000001
Revises:
Create Date: 2024-10-01 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20241001_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "bills",
        sa.Column("pk", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("bill_id", sa.String(), nullable=False),
        sa.Column("owner_email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("amount", sa.String(), nullable=False),
        sa.Column("due_date", sa.String(), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False),
        sa.Column("date_paid", sa.String(), nullable=True),
        sa.Column("recurring", sa.String(), nullable=False),
        sa.Column("last_generated", sa.String(), nullable=True),
        sa.Column("series_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.String(), nullable=True),
        sa.Column("updated_at", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("pk"),
        sa.UniqueConstraint("owner_email", "bill_id", name="uq_bills_owner_bill"),
        sa.UniqueConstraint(
            "owner_email", "series_id", "due_date", name="uq_bills_owner_series_due"
        ),
    )
    op.create_index("idx_bills_owner_due", "bills", ["owner_email", "due_date"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_bills_owner_due", table_name="bills")
    op.drop_table("bills")
