import unittest
from datetime import date
from decimal import Decimal

from billtracker.domain.enums import BillCategory, Recurrence
from billtracker.domain.errors import ValidationError
from billtracker.domain.models.bill import (
    Bill,
    apply_changes,
    bill_to_payload,
    normalize_bill_id,
    present_bill_id,
    quantize_amount,
    toggle_paid,
)

NOW = "2024-03-05T10:00:00+00:00"


def _bill(**overrides) -> Bill:
    fields = dict(
        id="1700000000000",
        owner_email="alice@example.com",
        name="Power",
        category=BillCategory.UTILITIES,
        amount=Decimal("80.00"),
        due_date=date(2024, 3, 10),
        created_at="2024-03-01T00:00:00+00:00",
    )
    fields.update(overrides)
    return Bill(**fields)


class NormalizeBillIdTests(unittest.TestCase):
    def test_numeric_and_textual_forms_agree(self) -> None:
        self.assertEqual(normalize_bill_id(1700000000000), "1700000000000")
        self.assertEqual(normalize_bill_id("1700000000000"), "1700000000000")
        self.assertEqual(normalize_bill_id(" 1700000000000 "), "1700000000000")
        self.assertEqual(normalize_bill_id(1700000000000.0), "1700000000000")
        self.assertEqual(normalize_bill_id("007"), "7")

    def test_non_numeric_ids_kept(self) -> None:
        self.assertEqual(normalize_bill_id("rent-2024"), "rent-2024")

    def test_rejects_missing_ids(self) -> None:
        for value in (None, "", "   ", True):
            with self.assertRaises(ValidationError):
                normalize_bill_id(value)

    def test_present_restores_numbers(self) -> None:
        self.assertEqual(present_bill_id("1700000000000"), 1700000000000)
        self.assertEqual(present_bill_id("rent-2024"), "rent-2024")


class AmountTests(unittest.TestCase):
    def test_two_decimal_places(self) -> None:
        self.assertEqual(quantize_amount(1200), Decimal("1200.00"))
        self.assertEqual(quantize_amount("19.995"), Decimal("20.00"))

    def test_rejects_negative_and_garbage(self) -> None:
        with self.assertRaises(ValidationError):
            quantize_amount(-1)
        with self.assertRaises(ValidationError):
            quantize_amount("lots")


class PaidPairingTests(unittest.TestCase):
    def test_toggle_keeps_date_paid_paired(self) -> None:
        bill = _bill()
        for step in range(4):
            bill = toggle_paid(bill, today=date(2024, 3, 5 + step), now=NOW)
            self.assertEqual(bill.date_paid is not None, bill.is_paid)
        self.assertFalse(bill.is_paid)

    def test_toggle_to_paid_stamps_today(self) -> None:
        bill = toggle_paid(_bill(), today=date(2024, 3, 5), now=NOW)
        self.assertTrue(bill.is_paid)
        self.assertEqual(bill.date_paid, date(2024, 3, 5))
        self.assertEqual(bill.updated_at, NOW)

    def test_update_to_paid_without_date(self) -> None:
        bill = apply_changes(_bill(), {"is_paid": True}, today=date(2024, 3, 5), now=NOW)
        self.assertEqual(bill.date_paid, date(2024, 3, 5))

    def test_update_to_unpaid_clears_date(self) -> None:
        paid = _bill(is_paid=True, date_paid=date(2024, 3, 1))
        bill = apply_changes(paid, {"is_paid": False}, today=date(2024, 3, 5), now=NOW)
        self.assertIsNone(bill.date_paid)

    def test_date_paid_ignored_while_unpaid(self) -> None:
        bill = apply_changes(_bill(), {"date_paid": date(2024, 3, 2)}, today=date(2024, 3, 5), now=NOW)
        self.assertFalse(bill.is_paid)
        self.assertIsNone(bill.date_paid)

    def test_explicit_date_paid_kept(self) -> None:
        bill = apply_changes(
            _bill(),
            {"is_paid": True, "date_paid": date(2024, 3, 2)},
            today=date(2024, 3, 5),
            now=NOW,
        )
        self.assertEqual(bill.date_paid, date(2024, 3, 2))


class ApplyChangesTests(unittest.TestCase):
    def test_identity_and_owner_immutable(self) -> None:
        bill = apply_changes(
            _bill(),
            {"id": "999", "owner_email": "mallory@example.com", "name": "Water"},
            today=date(2024, 3, 5),
            now=NOW,
        )
        self.assertEqual(bill.id, "1700000000000")
        self.assertEqual(bill.owner_email, "alice@example.com")
        self.assertEqual(bill.name, "Water")

    def test_becoming_recurring_starts_a_series(self) -> None:
        bill = apply_changes(_bill(), {"recurring": "monthly"}, today=date(2024, 3, 5), now=NOW)
        self.assertEqual(bill.recurring, Recurrence.MONTHLY)
        self.assertEqual(bill.series_id, bill.id)

    def test_becoming_one_time_leaves_the_series(self) -> None:
        member = _bill(recurring=Recurrence.MONTHLY, series_id="1690000000000")
        bill = apply_changes(member, {"recurring": "none"}, today=date(2024, 3, 5), now=NOW)
        self.assertEqual(bill.recurring, Recurrence.NONE)
        self.assertIsNone(bill.series_id)

    def test_unknown_category_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            apply_changes(_bill(), {"category": "Groceries"}, today=date(2024, 3, 5), now=NOW)

    def test_payload_shape(self) -> None:
        payload = bill_to_payload(_bill())
        self.assertEqual(payload["id"], 1700000000000)
        self.assertEqual(payload["amount"], "80.00")
        self.assertEqual(payload["due_date"], "2024-03-10")
        self.assertEqual(payload["category"], "Utilities")
        self.assertEqual(payload["recurring"], "none")
        self.assertIsNone(payload["date_paid"])
