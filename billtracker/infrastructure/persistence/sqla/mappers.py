from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy.engine import Row

from billtracker.domain.enums import BillCategory, Recurrence
from billtracker.domain.models.bill import Bill
from billtracker.domain.recurrence import SeriesMark


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    return date.fromisoformat(value)


def row_to_bill(row: Row[Any]) -> Bill:
    data = row._mapping
    return Bill(
        id=data["bill_id"],
        owner_email=data["owner_email"],
        name=data["name"],
        category=BillCategory(data["category"]),
        amount=Decimal(data["amount"]),
        due_date=date.fromisoformat(data["due_date"]),
        is_paid=bool(data["is_paid"]),
        date_paid=_parse_date(data["date_paid"]),
        recurring=Recurrence.parse(data["recurring"]),
        last_generated=_parse_date(data["last_generated"]),
        series_id=data["series_id"],
        created_at=data["created_at"] or "",
        updated_at=data["updated_at"],
    )


def bill_to_row(bill: Bill) -> dict[str, Any]:
    return {
        "bill_id": bill.id,
        "owner_email": bill.owner_email,
        "name": bill.name,
        "category": str(bill.category),
        "amount": f"{bill.amount:.2f}",
        "due_date": bill.due_date.isoformat(),
        "is_paid": bill.is_paid,
        "date_paid": bill.date_paid.isoformat() if bill.date_paid else None,
        "recurring": str(bill.recurring),
        "last_generated": bill.last_generated.isoformat() if bill.last_generated else None,
        "series_id": bill.series_id,
        "created_at": bill.created_at,
        "updated_at": bill.updated_at,
    }


def row_to_series_mark(row: Row[Any]) -> SeriesMark:
    data = row._mapping
    return SeriesMark(
        series_id=data["series_id"],
        last_due_date=date.fromisoformat(data["last_due_date"]),
        last_generated=date.fromisoformat(data["last_generated"]),
    )
