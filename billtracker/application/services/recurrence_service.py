from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy.exc import IntegrityError

from billtracker.application.services.bill_service import (
    allocate_bill_id,
    store_guard,
    utc_now_iso,
)
from billtracker.domain.models.bill import Bill, bill_to_payload
from billtracker.domain.ports.bill_repository import BillRepositoryPort
from billtracker.domain.recurrence import is_series_due, next_occurrence, series_heads
from billtracker.logger import get_logger


def expand_recurring(
    repo: BillRepositoryPort,
    owner_email: str,
    *,
    today: date | None = None,
) -> list[Bill]:
    """
    Insert the next occurrence of every recurring series that is due.

    Only the newest surviving bill of a series is evaluated, advanced past the
    series mark recorded with every generated occurrence. An occurrence whose
    ``(series_id, due_date)`` already exists is skipped, so running this on
    every read generates each period at most once, even after occurrences are
    deleted or edited.
    """
    today = today or date.today()
    logger = get_logger().bind(owner=owner_email)
    generated: list[Bill] = []
    with store_guard("expand_recurring", owner_email):
        taken: set[str] = set()
        marks = repo.series_marks(owner_email)
        for head in series_heads(repo.list_bills(owner_email)):
            mark = marks.get(head.series_id or head.id)
            if not is_series_due(head, today, mark):
                continue
            new_id = allocate_bill_id(repo, owner_email, taken=taken)
            occurrence = next_occurrence(
                head, today=today, new_id=new_id, now=utc_now_iso(), mark=mark
            )
            if occurrence is None:
                continue
            series_id = occurrence.series_id or occurrence.id
            if repo.occurrence_exists(owner_email, series_id, occurrence.due_date):
                continue
            try:
                repo.insert_occurrence(occurrence)
            except IntegrityError:
                # Another request generated this period first.
                logger.debug(
                    f"occurrence series={occurrence.series_id} due={occurrence.due_date} already exists"
                )
                continue
            taken.add(new_id)
            generated.append(occurrence)
            logger.info(
                f"generated bill id={occurrence.id} series={occurrence.series_id} "
                f"due={occurrence.due_date.isoformat()} from id={head.id}"
            )
    return generated


def expand_recurring_payload(
    repo: BillRepositoryPort,
    owner_email: str,
    *,
    today: date | None = None,
) -> dict[str, Any]:
    generated = expand_recurring(repo, owner_email, today=today)
    return {"generated": [bill_to_payload(b) for b in generated], "count": len(generated)}
