#!/usr/bin/env python3
"""
Tests for the quotation status lifecycle gate.
"""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from quotation_engine.errors import IneligibleReason, IneligibleTransition
from quotation_engine.lifecycle import (
    QuotationStatus,
    can_cancel,
    can_convert,
    cancel,
    cancel_eligibility,
    convert_eligibility,
    ensure_can_cancel,
    ensure_can_convert,
    filter_by_status,
    normalize_status,
    status_counts,
)
from quotation_engine.models import Quotation

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def quotation(status=None, valid_until=None):
    raw = {"_id": "Q1", "code": "QT-1"}
    if status is not None:
        raw["status"] = status
    if valid_until is not None:
        raw["valid_until"] = valid_until
    return Quotation.from_dict(raw)


class TestNormalizeStatus(unittest.TestCase):

    def test_known_statuses_and_alias(self):
        self.assertIs(normalize_status("valid"), QuotationStatus.VALID)
        self.assertIs(normalize_status("cancelled"), QuotationStatus.CANCELED)
        self.assertIs(normalize_status("Canceled"), QuotationStatus.CANCELED)
        self.assertIsNone(normalize_status(None))
        self.assertIsNone(normalize_status("draft"))


class TestCancelGate(unittest.TestCase):
    """Test cases for cancel eligibility."""

    def test_canceled_is_refused(self):
        for status in ("canceled", "cancelled"):
            with self.subTest(status=status):
                self.assertFalse(can_cancel(quotation(status), NOW))
                self.assertEqual(cancel_eligibility(quotation(status), NOW), IneligibleReason.ALREADY_CANCELED)

    def test_past_expiry_is_refused(self):
        past = (NOW - timedelta(days=1)).isoformat()
        self.assertFalse(can_cancel(quotation("valid", past), NOW))
        self.assertEqual(cancel_eligibility(quotation("valid", past), NOW), IneligibleReason.EXPIRED)

    def test_valid_without_or_with_future_expiry(self):
        self.assertTrue(can_cancel(quotation("valid"), NOW))
        self.assertTrue(can_cancel(quotation("valid", "2025-12-31T00:00:00.000Z"), NOW))

    def test_absent_status_counts_as_valid(self):
        self.assertTrue(can_cancel(quotation(), NOW))

    def test_expiry_equal_to_now_is_not_expired(self):
        self.assertTrue(can_cancel(quotation("valid", NOW.isoformat()), NOW))

    def test_end_date_field_is_an_expiry(self):
        q = Quotation.from_dict({"_id": "Q1", "status": "valid", "endDate": "2025-05-01"})
        self.assertFalse(can_cancel(q, NOW))

    def test_naive_now_is_treated_as_utc(self):
        q = quotation("valid", "2025-06-01T11:00:00Z")
        self.assertFalse(can_cancel(q, datetime(2025, 6, 1, 12, 0)))

    def test_ensure_can_cancel_raises(self):
        with self.assertRaises(IneligibleTransition) as ctx:
            ensure_can_cancel(quotation("canceled"), NOW)
        self.assertEqual(ctx.exception.reason, IneligibleReason.ALREADY_CANCELED)


class TestConvertGate(unittest.TestCase):

    def test_only_explicit_valid_converts(self):
        self.assertFalse(can_convert(quotation()))
        self.assertTrue(can_convert(quotation("valid")))
        for status in ("expired", "canceled", "cancelled", "invalid", "used", "converted", "draft"):
            with self.subTest(status=status):
                self.assertFalse(can_convert(quotation(status)))
                self.assertEqual(convert_eligibility(quotation(status)), IneligibleReason.NOT_VALID)

    def test_ensure_can_convert_raises(self):
        with self.assertRaises(IneligibleTransition):
            ensure_can_convert(quotation())
        ensure_can_convert(quotation("valid"))


class TestCancel(unittest.IsolatedAsyncioTestCase):

    async def test_refused_without_calling_store(self):
        store = AsyncMock()
        outcome = await cancel(quotation("cancelled"), store, NOW)
        self.assertFalse(outcome.performed)
        self.assertEqual(outcome.reason, IneligibleReason.ALREADY_CANCELED)
        store.cancel_quotation.assert_not_called()

    async def test_performed_calls_store_once(self):
        store = AsyncMock()
        store.cancel_quotation.return_value = {"success": True}
        q = quotation("valid")
        outcome = await cancel(q, store, NOW)
        self.assertTrue(outcome.performed)
        self.assertEqual(outcome.response, {"success": True})
        store.cancel_quotation.assert_awaited_once_with("Q1")
        # The caller owns the status update
        self.assertEqual(q.status, "valid")

    async def test_gate_is_re_evaluated_each_call(self):
        store = AsyncMock()
        q = quotation("valid")
        self.assertTrue((await cancel(q, store, NOW)).performed)
        q.status = "canceled"
        self.assertFalse((await cancel(q, store, NOW)).performed)
        self.assertEqual(store.cancel_quotation.await_count, 1)

    async def test_transport_error_propagates(self):
        store = AsyncMock()
        store.cancel_quotation.side_effect = RuntimeError("boom")
        with self.assertRaises(RuntimeError):
            await cancel(quotation("valid"), store, NOW)


class TestStatusStatistics(unittest.TestCase):

    def setUp(self):
        self.quotations = [
            quotation(), quotation("valid"), quotation("cancelled"), quotation("canceled"),
            quotation("expired"), quotation("converted"), quotation("used"),
        ]

    def test_status_counts(self):
        self.assertEqual(status_counts(self.quotations), {
            "total": 7, "valid": 2, "expired": 1, "canceled": 2, "converted": 1, "other": 1,
        })

    def test_filter_by_status_matches_aliases(self):
        self.assertEqual(len(filter_by_status(self.quotations, "canceled")), 2)
        self.assertEqual(len(filter_by_status(self.quotations, "cancelled")), 2)
        self.assertEqual(len(filter_by_status(self.quotations, "")), 7)
        self.assertEqual(len(filter_by_status(self.quotations, "draft")), 0)


if __name__ == '__main__':
    unittest.main()
