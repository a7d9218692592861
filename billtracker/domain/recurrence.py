"""
Recurring-bill expansion rules.

Everything here is pure: the same ``(recurring, due_date, last_generated,
today)`` and series mark always give the same decision, which lets the store
layer call it as often as it likes without generating duplicates.

A series' progress is the later of its newest surviving bill and its
``SeriesMark``. The mark outlives deleted or edited occurrences, so removing a
generated bill neither brings that period back nor stalls the series.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date

from dateutil.relativedelta import relativedelta

from billtracker.domain.enums import Recurrence
from billtracker.domain.models.bill import Bill

_INTERVAL_MONTHS = {
    Recurrence.MONTHLY: 1,
    Recurrence.QUARTERLY: 3,
    Recurrence.YEARLY: 12,
}


@dataclass(slots=True, frozen=True)
class SeriesMark:
    """Last period a series produced: its due date and when it was generated."""

    series_id: str
    last_due_date: date
    last_generated: date


def interval_for(recurring: Recurrence | str | None) -> relativedelta | None:
    months = _INTERVAL_MONTHS.get(Recurrence.parse(recurring))
    if months is None:
        return None
    return relativedelta(months=months)


def is_due(
    recurring: Recurrence | str | None,
    last_generated: date | None,
    today: date,
) -> bool:
    step = interval_for(recurring)
    if step is None or last_generated is None:
        return False
    return last_generated + step <= today


def series_progress(bill: Bill, mark: SeriesMark | None = None) -> tuple[date, date | None]:
    """``(due date to advance from, last generated)`` for ``bill``'s series."""
    if mark is None:
        return bill.due_date, bill.last_generated
    last_generated = mark.last_generated
    if bill.last_generated is not None and bill.last_generated > last_generated:
        last_generated = bill.last_generated
    return max(bill.due_date, mark.last_due_date), last_generated


def is_series_due(bill: Bill, today: date, mark: SeriesMark | None = None) -> bool:
    _, last_generated = series_progress(bill, mark)
    return is_due(bill.recurring, last_generated, today)


def next_occurrence(
    bill: Bill,
    *,
    today: date,
    new_id: str,
    now: str,
    mark: SeriesMark | None = None,
) -> Bill | None:
    step = interval_for(bill.recurring)
    base_due, last_generated = series_progress(bill, mark)
    if step is None or last_generated is None or last_generated + step > today:
        return None
    return replace(
        bill,
        id=new_id,
        due_date=base_due + step,
        is_paid=False,
        date_paid=None,
        last_generated=today,
        series_id=bill.series_id or bill.id,
        created_at=now,
        updated_at=None,
    )


def series_heads(bills: Iterable[Bill]) -> list[Bill]:
    """Latest occurrence of every recurring series; older ones are superseded."""
    heads: dict[str, Bill] = {}
    for bill in bills:
        if bill.recurring == Recurrence.NONE:
            continue
        key = bill.series_id or bill.id
        current = heads.get(key)
        if current is None or (bill.due_date, bill.created_at) > (current.due_date, current.created_at):
            heads[key] = bill
    return list(heads.values())
