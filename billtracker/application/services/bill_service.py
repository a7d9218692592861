from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from billtracker.domain.enums import BillCategory, Recurrence
from billtracker.domain.errors import NotFoundError, StoreError, ValidationError
from billtracker.domain.models.bill import (
    Bill,
    apply_changes,
    bill_to_payload,
    normalize_bill_id,
    pair_paid_date,
    quantize_amount,
    toggle_paid,
)
from billtracker.domain.ports.bill_repository import BillRepositoryPort
from billtracker.logger import get_logger


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@contextmanager
def store_guard(method: str, owner_email: str) -> Iterator[None]:
    try:
        yield
    except IntegrityError as exc:
        get_logger().bind(owner=owner_email).warning(f"{method}: constraint violation: {exc.orig}")
        raise StoreError(
            "bill conflicts with an existing record",
            method=method,
            reason=str(exc.orig),
        ) from exc
    except SQLAlchemyError as exc:
        get_logger().bind(owner=owner_email).opt(exception=True).error(
            f"{method}: database operation failed"
        )
        raise StoreError("database operation failed", method=method, reason=str(exc)) from exc


def allocate_bill_id(
    repo: BillRepositoryPort,
    owner_email: str,
    *,
    taken: set[str] | None = None,
) -> str:
    """Millisecond timestamp id, bumped past anything this owner already uses."""
    candidate = int(time.time() * 1000)
    taken = taken or set()
    while str(candidate) in taken or repo.get_bill(owner_email, str(candidate)) is not None:
        candidate += 1
    return str(candidate)


def _require_bill(repo: BillRepositoryPort, owner_email: str, bill_id: str) -> Bill:
    bill = repo.get_bill(owner_email, bill_id)
    if bill is None:
        raise NotFoundError("Bill not found", details={"id": bill_id})
    return bill


def list_bills_payload(repo: BillRepositoryPort, owner_email: str) -> dict[str, Any]:
    with store_guard("list", owner_email):
        bills = repo.list_bills(owner_email)
    return {"bills": [bill_to_payload(b) for b in bills]}


def get_bill_payload(repo: BillRepositoryPort, owner_email: str, raw_id: Any) -> dict[str, Any]:
    bill_id = normalize_bill_id(raw_id)
    with store_guard("get", owner_email):
        bill = _require_bill(repo, owner_email, bill_id)
    return bill_to_payload(bill)


def create_bill_payload(
    repo: BillRepositoryPort,
    owner_email: str,
    fields: dict[str, Any],
    *,
    today: date | None = None,
) -> dict[str, Any]:
    today = today or date.today()
    name = str(fields.get("name") or "").strip()
    if not name:
        raise ValidationError("bill name is required")
    try:
        category = BillCategory(fields.get("category"))
        recurring = Recurrence.parse(fields.get("recurring"))
    except ValueError as exc:
        raise ValidationError(str(exc), details=fields) from exc
    due_date = fields.get("due_date")
    if not isinstance(due_date, date):
        raise ValidationError("due_date must be a date", details={"due_date": due_date})

    with store_guard("create", owner_email):
        raw_id = fields.get("id")
        if raw_id is None:
            bill_id = allocate_bill_id(repo, owner_email)
        else:
            bill_id = normalize_bill_id(raw_id)
        bill = Bill(
            id=bill_id,
            owner_email=owner_email,
            name=name,
            category=category,
            amount=quantize_amount(fields.get("amount", Decimal("0"))),
            due_date=due_date,
            is_paid=bool(fields.get("is_paid", False)),
            date_paid=fields.get("date_paid"),
            recurring=recurring,
            last_generated=fields.get("last_generated"),
            series_id=bill_id if recurring != Recurrence.NONE else None,
            created_at=utc_now_iso(),
        )
        bill = repo.insert_bill(pair_paid_date(bill, today))

    get_logger().bind(owner=owner_email).info(f"created bill id={bill.id} recurring={bill.recurring}")
    return bill_to_payload(bill)


def update_bill_payload(
    repo: BillRepositoryPort,
    owner_email: str,
    raw_id: Any,
    changes: dict[str, Any],
    *,
    today: date | None = None,
) -> dict[str, Any]:
    today = today or date.today()
    bill_id = normalize_bill_id(raw_id)
    now = utc_now_iso()
    with store_guard("update", owner_email):
        updated = repo.update_bill(
            owner_email,
            bill_id,
            lambda bill: apply_changes(bill, changes, today=today, now=now),
        )
    if updated is None:
        raise NotFoundError("Bill not found", details={"id": bill_id, "matched_count": 0})

    get_logger().bind(owner=owner_email).info(
        f"updated bill id={bill_id} fields={sorted(changes)}"
    )
    return {"success": True, "matched_count": 1, "bill": bill_to_payload(updated)}


def toggle_paid_payload(
    repo: BillRepositoryPort,
    owner_email: str,
    raw_id: Any,
    *,
    today: date | None = None,
) -> dict[str, Any]:
    today = today or date.today()
    bill_id = normalize_bill_id(raw_id)
    now = utc_now_iso()
    with store_guard("toggle_paid", owner_email):
        updated = repo.update_bill(
            owner_email,
            bill_id,
            lambda bill: toggle_paid(bill, today=today, now=now),
        )
    if updated is None:
        raise NotFoundError("Bill not found", details={"id": bill_id})
    get_logger().bind(owner=owner_email).info(f"bill id={bill_id} is_paid={updated.is_paid}")
    return bill_to_payload(updated)


def delete_bill_payload(repo: BillRepositoryPort, owner_email: str, raw_id: Any) -> dict[str, Any]:
    bill_id = normalize_bill_id(raw_id)
    with store_guard("delete", owner_email):
        deleted = repo.delete_bill(owner_email, bill_id)
    if deleted == 0:
        raise NotFoundError("Bill not found", details={"id": bill_id, "deleted_count": 0})
    get_logger().bind(owner=owner_email).info(f"deleted bill id={bill_id}")
    return {"success": True, "deleted_count": deleted}


def summary_payload(repo: BillRepositoryPort, owner_email: str) -> dict[str, Any]:
    with store_guard("summary", owner_email):
        bills = repo.list_bills(owner_email)
    unpaid = [b for b in bills if not b.is_paid]
    total_unpaid = sum((b.amount for b in unpaid), Decimal("0.00"))
    return {
        "total_unpaid": f"{total_unpaid:.2f}",
        "unpaid_count": len(unpaid),
        "paid_count": len(bills) - len(unpaid),
        "total_count": len(bills),
    }
