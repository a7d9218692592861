from __future__ import annotations

from enum import StrEnum


class BillCategory(StrEnum):
    UTILITIES = "Utilities"
    CREDIT_CARD = "Credit Card"
    RENT_MORTGAGE = "Rent/Mortgage"
    INSURANCE = "Insurance"
    PHONE_INTERNET = "Phone/Internet"
    OTHER = "Other"


class Recurrence(StrEnum):
    NONE = "none"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: object) -> "Recurrence":
        # Empty and null both mean a one-time bill.
        if value is None:
            return cls.NONE
        text = str(value).strip().lower()
        if not text:
            return cls.NONE
        return cls(text)
