from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from billtracker.domain.enums import BillCategory, Recurrence
from billtracker.domain.errors import ValidationError

_INT_LITERAL = re.compile(r"[+-]?\d+")
_CENTS = Decimal("0.01")


@dataclass(slots=True)
class Bill:
    id: str
    owner_email: str
    name: str
    category: BillCategory
    amount: Decimal
    due_date: date
    is_paid: bool = False
    date_paid: date | None = None
    recurring: Recurrence = Recurrence.NONE
    last_generated: date | None = None
    series_id: str | None = None
    created_at: str = ""
    updated_at: str | None = None


def normalize_bill_id(value: Any) -> str:
    """
    Canonical text form of a bill identifier.

    Clients send ids as JSON numbers (timestamps) or as strings, and path
    parameters always arrive as strings, so ``1700000000000``,
    ``"1700000000000"`` and ``1700000000000.0`` must all address the same row.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("bill id is required", details={"id": value})
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise ValidationError("bill id must be finite", details={"id": value})
        return str(int(value)) if value.is_integer() else str(value)
    text = str(value).strip()
    if not text:
        raise ValidationError("bill id is required", details={"id": value})
    if _INT_LITERAL.fullmatch(text):
        return str(int(text))
    return text


def present_bill_id(value: str) -> int | str:
    if _INT_LITERAL.fullmatch(value):
        return int(value)
    return value


def quantize_amount(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("amount must be a number", details={"amount": value}) from exc
    if not amount.is_finite() or amount < 0:
        raise ValidationError("amount must be a non-negative number", details={"amount": value})
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def pair_paid_date(bill: Bill, today: date) -> Bill:
    """Keep ``date_paid`` present exactly when the bill is paid."""
    if not bill.is_paid:
        if bill.date_paid is None:
            return bill
        return replace(bill, date_paid=None)
    if bill.date_paid is None:
        return replace(bill, date_paid=today)
    return bill


def apply_changes(bill: Bill, changes: dict[str, Any], *, today: date, now: str) -> Bill:
    """
    Merge a partial field set into ``bill``.

    ``id`` and ``owner_email`` never change; a transition to paid without an
    explicit ``date_paid`` is stamped with ``today``.
    """
    allowed = {
        "name",
        "category",
        "amount",
        "due_date",
        "is_paid",
        "date_paid",
        "recurring",
        "last_generated",
    }
    updates = {k: v for k, v in changes.items() if k in allowed}
    if "amount" in updates:
        updates["amount"] = quantize_amount(updates["amount"])
    try:
        if "recurring" in updates:
            updates["recurring"] = Recurrence.parse(updates["recurring"])
        if "category" in updates:
            updates["category"] = BillCategory(updates["category"])
    except ValueError as exc:
        raise ValidationError(str(exc), details=changes) from exc

    becomes_paid = updates.get("is_paid") is True and not bill.is_paid
    if becomes_paid and "date_paid" not in updates:
        updates["date_paid"] = today

    merged = replace(bill, **updates, updated_at=now)
    if merged.recurring != Recurrence.NONE and merged.series_id is None:
        merged = replace(merged, series_id=merged.id)
    elif merged.recurring == Recurrence.NONE and merged.series_id is not None:
        # A bill turned one-time leaves its series.
        merged = replace(merged, series_id=None)
    return pair_paid_date(merged, today)


def toggle_paid(bill: Bill, *, today: date, now: str) -> Bill:
    if bill.is_paid:
        return replace(bill, is_paid=False, date_paid=None, updated_at=now)
    return replace(bill, is_paid=True, date_paid=today, updated_at=now)


def bill_to_payload(bill: Bill) -> dict[str, Any]:
    return {
        "id": present_bill_id(bill.id),
        "owner_email": bill.owner_email,
        "name": bill.name,
        "category": str(bill.category),
        "amount": f"{bill.amount:.2f}",
        "due_date": bill.due_date.isoformat(),
        "is_paid": bill.is_paid,
        "date_paid": bill.date_paid.isoformat() if bill.date_paid else None,
        "recurring": str(bill.recurring),
        "last_generated": bill.last_generated.isoformat() if bill.last_generated else None,
        "series_id": present_bill_id(bill.series_id) if bill.series_id else None,
        "created_at": bill.created_at,
        "updated_at": bill.updated_at,
    }
