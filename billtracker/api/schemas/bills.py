from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import Field, field_validator

from billtracker.api.schemas.common import RequestModel
from billtracker.domain.enums import BillCategory, Recurrence


class CreateBillPayload(RequestModel):
    id: int | str | None = None
    name: str = Field(min_length=1, max_length=200)
    category: BillCategory
    amount: Decimal = Field(ge=0)
    due_date: date
    is_paid: bool = False
    date_paid: date | None = None
    recurring: Recurrence = Recurrence.NONE
    last_generated: date | None = None

    @field_validator("recurring", mode="before")
    @classmethod
    def parse_recurring(cls, value: object) -> Recurrence:
        return Recurrence.parse(value)


class UpdateBillPayload(RequestModel):
    # Accepted for clients that echo the whole record back; never applied.
    id: int | str | None = None
    name: str | None = Field(default=None, min_length=1, max_length=200)
    category: BillCategory | None = None
    amount: Decimal | None = Field(default=None, ge=0)
    due_date: date | None = None
    is_paid: bool | None = None
    date_paid: date | None = None
    recurring: Recurrence | None = None
    last_generated: date | None = None

    @field_validator("recurring", mode="before")
    @classmethod
    def parse_recurring(cls, value: object) -> Recurrence:
        return Recurrence.parse(value)

    def changes(self) -> dict[str, object]:
        fields = self.model_dump(exclude_unset=True, exclude={"id"})
        # These columns are NOT NULL; an explicit null means "leave as is".
        for key in ("name", "category", "amount", "due_date", "is_paid"):
            if key in fields and fields[key] is None:
                fields.pop(key)
        return fields
