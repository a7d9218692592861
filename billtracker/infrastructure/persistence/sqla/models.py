from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)

metadata = MetaData()

bills = Table(
    "bills",
    metadata,
    Column("pk", Integer, primary_key=True, autoincrement=True),
    Column("bill_id", String, nullable=False),
    Column("owner_email", String, nullable=False),
    Column("name", String, nullable=False),
    Column("category", String, nullable=False),
    # Decimal text, always two places.
    Column("amount", String, nullable=False),
    Column("due_date", String, nullable=False),
    Column("is_paid", Boolean, nullable=False, default=False),
    Column("date_paid", String),
    Column("recurring", String, nullable=False, default="none"),
    Column("last_generated", String),
    Column("series_id", String),
    Column("created_at", String),
    Column("updated_at", String),
    UniqueConstraint("owner_email", "bill_id", name="uq_bills_owner_bill"),
    UniqueConstraint("owner_email", "series_id", "due_date", name="uq_bills_owner_series_due"),
)

Index("idx_bills_owner_due", bills.c.owner_email, bills.c.due_date)

# High-water mark per recurring series; survives deletion of its bills.
bill_series = Table(
    "bill_series",
    metadata,
    Column("owner_email", String, primary_key=True),
    Column("series_id", String, primary_key=True),
    Column("last_due_date", String, nullable=False),
    Column("last_generated", String, nullable=False),
    Column("updated_at", String),
)
