import unittest
from datetime import date
from decimal import Decimal

from billtracker.domain.enums import BillCategory, Recurrence
from billtracker.domain.models.bill import Bill
from billtracker.domain.recurrence import (
    SeriesMark,
    interval_for,
    is_due,
    is_series_due,
    next_occurrence,
    series_heads,
    series_progress,
)

NOW = "2024-01-02T08:00:00+00:00"


def _bill(**overrides) -> Bill:
    fields = dict(
        id="1",
        owner_email="alice@example.com",
        name="Phone",
        category=BillCategory.PHONE_INTERNET,
        amount=Decimal("45.00"),
        due_date=date(2024, 1, 31),
        recurring=Recurrence.MONTHLY,
        last_generated=date(2023, 12, 1),
        series_id="1",
        created_at="2023-12-01T00:00:00+00:00",
    )
    fields.update(overrides)
    return Bill(**fields)


class IsDueTests(unittest.TestCase):
    def test_monthly_after_one_full_month(self) -> None:
        self.assertFalse(is_due("monthly", date(2024, 1, 15), date(2024, 2, 14)))
        self.assertTrue(is_due("monthly", date(2024, 1, 15), date(2024, 2, 15)))

    def test_quarterly_needs_three_months(self) -> None:
        self.assertFalse(is_due("quarterly", date(2024, 1, 1), date(2024, 3, 31)))
        self.assertTrue(is_due("quarterly", date(2024, 1, 1), date(2024, 4, 1)))

    def test_yearly_needs_a_year(self) -> None:
        self.assertFalse(is_due("yearly", date(2023, 2, 1), date(2024, 1, 31)))
        self.assertTrue(is_due("yearly", date(2023, 2, 1), date(2024, 2, 1)))

    def test_one_time_never_due(self) -> None:
        for value in ("", None, "none", Recurrence.NONE):
            self.assertFalse(is_due(value, date(2000, 1, 1), date(2024, 1, 1)))

    def test_missing_last_generated_never_due(self) -> None:
        self.assertFalse(is_due("monthly", None, date(2030, 1, 1)))

    def test_interval_months(self) -> None:
        self.assertEqual(interval_for("quarterly").months, 3)
        self.assertEqual(interval_for("yearly").years, 1)
        self.assertIsNone(interval_for(""))


class NextOccurrenceTests(unittest.TestCase):
    def test_leap_year_month_end_rollover(self) -> None:
        source = _bill(is_paid=True, date_paid=date(2024, 1, 1))
        nxt = next_occurrence(source, today=date(2024, 1, 2), new_id="2", now=NOW)
        assert nxt is not None
        self.assertEqual(nxt.id, "2")
        self.assertEqual(nxt.due_date, date(2024, 2, 29))
        self.assertEqual(nxt.last_generated, date(2024, 1, 2))
        self.assertFalse(nxt.is_paid)
        self.assertIsNone(nxt.date_paid)
        self.assertEqual(nxt.series_id, "1")
        self.assertEqual(nxt.name, source.name)
        self.assertEqual(nxt.amount, source.amount)
        self.assertEqual(nxt.created_at, NOW)

    def test_advances_from_previous_due_date_not_today(self) -> None:
        source = _bill(
            recurring=Recurrence.QUARTERLY,
            due_date=date(2023, 11, 30),
            last_generated=date(2023, 6, 1),
        )
        nxt = next_occurrence(source, today=date(2024, 5, 20), new_id="2", now=NOW)
        assert nxt is not None
        self.assertEqual(nxt.due_date, date(2024, 2, 29))

    def test_not_due_yields_nothing(self) -> None:
        source = _bill(last_generated=date(2023, 12, 20))
        self.assertIsNone(next_occurrence(source, today=date(2024, 1, 2), new_id="2", now=NOW))

    def test_one_time_never_generates(self) -> None:
        source = _bill(recurring=Recurrence.NONE, series_id=None, last_generated=date(2000, 1, 1))
        self.assertIsNone(next_occurrence(source, today=date(2024, 1, 2), new_id="2", now=NOW))

    def test_same_inputs_same_decision(self) -> None:
        source = _bill()
        first = next_occurrence(source, today=date(2024, 1, 2), new_id="2", now=NOW)
        second = next_occurrence(source, today=date(2024, 1, 2), new_id="2", now=NOW)
        self.assertEqual(first, second)


class SeriesHeadsTests(unittest.TestCase):
    def test_latest_occurrence_supersedes_source(self) -> None:
        source = _bill()
        newer = _bill(id="2", due_date=date(2024, 2, 29), last_generated=date(2024, 1, 2))
        one_time = _bill(id="3", recurring=Recurrence.NONE, series_id=None)
        other_series = _bill(id="4", series_id="4", recurring=Recurrence.YEARLY)

        heads = series_heads([newer, source, one_time, other_series])
        self.assertEqual(sorted(h.id for h in heads), ["2", "4"])

    def test_bill_without_series_id_is_its_own_series(self) -> None:
        heads = series_heads([_bill(series_id=None)])
        self.assertEqual([h.id for h in heads], ["1"])


class SeriesMarkTests(unittest.TestCase):
    def test_without_mark_progress_comes_from_the_bill(self) -> None:
        source = _bill()
        self.assertEqual(series_progress(source), (date(2024, 1, 31), date(2023, 12, 1)))

    def test_mark_blocks_a_period_whose_bill_was_deleted(self) -> None:
        # The head is the source again, but the series already produced 2024-02-29.
        source = _bill()
        mark = SeriesMark("1", last_due_date=date(2024, 2, 29), last_generated=date(2024, 1, 2))
        self.assertFalse(is_series_due(source, date(2024, 1, 2), mark))
        self.assertIsNone(
            next_occurrence(source, today=date(2024, 1, 2), new_id="3", now=NOW, mark=mark)
        )

        nxt = next_occurrence(source, today=date(2024, 2, 2), new_id="3", now=NOW, mark=mark)
        assert nxt is not None
        self.assertEqual(nxt.due_date, date(2024, 3, 29))
        self.assertEqual(nxt.series_id, "1")

    def test_newer_bill_wins_over_stale_mark(self) -> None:
        head = _bill(id="2", due_date=date(2024, 3, 29), last_generated=date(2024, 2, 2))
        mark = SeriesMark("1", last_due_date=date(2024, 2, 29), last_generated=date(2024, 1, 2))
        self.assertEqual(series_progress(head, mark), (date(2024, 3, 29), date(2024, 2, 2)))
        self.assertFalse(is_series_due(head, date(2024, 3, 1), mark))
        self.assertTrue(is_series_due(head, date(2024, 3, 2), mark))
