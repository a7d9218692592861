from __future__ import annotations

from collections.abc import Callable
from datetime import date

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, Engine

from billtracker.domain.models.bill import Bill
from billtracker.domain.recurrence import SeriesMark

from .mappers import bill_to_row, row_to_bill, row_to_series_mark
from .models import bill_series, bills, metadata
from .session import connection_scope


def ensure_bills_schema(conn: Connection) -> None:
    metadata.create_all(bind=conn, checkfirst=True)


def _owned(owner_email: str, bill_id: str):
    return and_(bills.c.owner_email == owner_email, bills.c.bill_id == bill_id)


class SqlBillRepository:
    """Bills table access. Every statement carries the owner filter."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        with connection_scope(engine) as conn:
            ensure_bills_schema(conn)

    def list_bills(self, owner_email: str) -> list[Bill]:
        stmt = (
            select(bills)
            .where(bills.c.owner_email == owner_email)
            .order_by(bills.c.due_date, bills.c.pk)
        )
        with connection_scope(self._engine) as conn:
            return [row_to_bill(r) for r in conn.execute(stmt)]

    def get_bill(self, owner_email: str, bill_id: str) -> Bill | None:
        with connection_scope(self._engine) as conn:
            row = conn.execute(select(bills).where(_owned(owner_email, bill_id))).first()
        return row_to_bill(row) if row is not None else None

    def insert_bill(self, bill: Bill) -> Bill:
        with connection_scope(self._engine) as conn:
            conn.execute(insert(bills).values(**bill_to_row(bill)))
        return bill

    def update_bill(
        self, owner_email: str, bill_id: str, mutate: Callable[[Bill], Bill]
    ) -> Bill | None:
        with connection_scope(self._engine) as conn:
            row = conn.execute(select(bills).where(_owned(owner_email, bill_id))).first()
            if row is None:
                return None
            changed = mutate(row_to_bill(row))
            values = bill_to_row(changed)
            for key in ("bill_id", "owner_email", "created_at"):
                values.pop(key)
            conn.execute(update(bills).where(_owned(owner_email, bill_id)).values(**values))
        return changed

    def delete_bill(self, owner_email: str, bill_id: str) -> int:
        with connection_scope(self._engine) as conn:
            result = conn.execute(delete(bills).where(_owned(owner_email, bill_id)))
            return int(result.rowcount or 0)

    def occurrence_exists(self, owner_email: str, series_id: str, due_date: date) -> bool:
        stmt = select(bills.c.pk).where(
            bills.c.owner_email == owner_email,
            bills.c.series_id == series_id,
            bills.c.due_date == due_date.isoformat(),
        )
        with connection_scope(self._engine) as conn:
            return conn.execute(stmt).first() is not None

    def series_marks(self, owner_email: str) -> dict[str, SeriesMark]:
        stmt = select(bill_series).where(bill_series.c.owner_email == owner_email)
        with connection_scope(self._engine) as conn:
            marks = [row_to_series_mark(r) for r in conn.execute(stmt)]
        return {m.series_id: m for m in marks}

    def insert_occurrence(self, bill: Bill) -> Bill:
        """Insert a generated bill and advance its series mark atomically."""
        if bill.last_generated is None:
            raise ValueError(f"generated bill {bill.id} has no last_generated date")
        series_id = bill.series_id or bill.id
        mark = {
            "last_due_date": bill.due_date.isoformat(),
            "last_generated": bill.last_generated.isoformat(),
            "updated_at": bill.created_at,
        }
        upsert = sqlite_insert(bill_series).values(
            owner_email=bill.owner_email, series_id=series_id, **mark
        )
        upsert = upsert.on_conflict_do_update(
            index_elements=[bill_series.c.owner_email, bill_series.c.series_id],
            set_=mark,
        )
        with connection_scope(self._engine) as conn:
            conn.execute(insert(bills).values(**bill_to_row(bill)))
            conn.execute(upsert)
        return bill
