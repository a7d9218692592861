from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Protocol

from billtracker.domain.models.bill import Bill
from billtracker.domain.recurrence import SeriesMark


class BillRepositoryPort(Protocol):
    def list_bills(self, owner_email: str) -> list[Bill]: ...

    def get_bill(self, owner_email: str, bill_id: str) -> Bill | None: ...

    def insert_bill(self, bill: Bill) -> Bill: ...

    def update_bill(
        self, owner_email: str, bill_id: str, mutate: Callable[[Bill], Bill]
    ) -> Bill | None: ...

    def delete_bill(self, owner_email: str, bill_id: str) -> int: ...

    def occurrence_exists(self, owner_email: str, series_id: str, due_date: date) -> bool: ...

    def series_marks(self, owner_email: str) -> dict[str, SeriesMark]: ...

    def insert_occurrence(self, bill: Bill) -> Bill: ...
