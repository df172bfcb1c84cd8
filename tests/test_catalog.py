#!/usr/bin/env python3
"""
Tests for the catalog index.
"""

import unittest
from decimal import Decimal

from quotation_engine.catalog import build_entries, build_index, find_entries


class TestCatalogIndex(unittest.TestCase):
    """Test cases for build_index."""

    def setUp(self):
        """Set up test fixtures."""
        self.entries = [
            {"_id": "A1", "name": "Floor mats", "price": 100000},
            {"_id": "A2", "name": "Roof rack", "price": 2500000.5},
        ]

    def test_bare_array(self):
        index = build_index(self.entries)
        self.assertEqual(index, {"A1": Decimal("100000"), "A2": Decimal("2500000.5")})

    def test_wrapped_array_in_each_candidate_field(self):
        for name in ("data", "items", "records", "results"):
            with self.subTest(field=name):
                self.assertEqual(set(build_index({name: self.entries})), {"A1", "A2"})

    def test_one_and_two_levels_of_nesting(self):
        self.assertEqual(len(build_index({"success": True, "data": {"items": self.entries}})), 2)
        self.assertEqual(len(build_index({"data": {"data": {"results": self.entries}}})), 2)

    def test_nesting_is_bounded(self):
        raw = {"data": {"data": {"data": {"data": self.entries}}}}
        self.assertEqual(build_index(raw), {})

    def test_field_order_is_fixed(self):
        raw = {
            "results": [{"_id": "R", "price": 1}],
            "data": [{"_id": "D", "price": 2}],
        }
        self.assertEqual(build_index(raw), {"D": Decimal("2")})

    def test_empty_array_ends_search(self):
        raw = {"data": [], "items": self.entries}
        self.assertEqual(find_entries(raw), [])
        self.assertEqual(build_index(raw), {})

    def test_null_candidate_is_skipped(self):
        raw = {"data": None, "items": self.entries}
        self.assertEqual(len(build_index(raw)), 2)

    def test_unrecognized_shapes_yield_empty_mapping(self):
        for raw in (None, "oops", 42, {"message": "ok"}, {"data": {"count": 3}}):
            with self.subTest(raw=raw):
                self.assertEqual(build_index(raw), {})
        self.assertIsNone(find_entries({"message": "ok"}))

    def test_identifier_fallbacks(self):
        raw = [
            {"id": "B1", "price": 10},
            {"option_id": "O1", "price": 20},
            {"accessory_id": 7, "price": 30},
        ]
        self.assertEqual(build_index(raw), {
            "B1": Decimal("10"),
            "O1": Decimal("20"),
            "7": Decimal("30"),
        })

    def test_missing_or_non_numeric_price_is_omitted(self):
        raw = [
            {"_id": "NONE"},
            {"_id": "NULL", "price": None},
            {"_id": "TEXT", "price": "abc"},
            {"_id": "STR", "price": "1000"},
            {"_id": "BOOL", "price": True},
            {"_id": "NEG", "price": -5},
            {"_id": "ZERO", "price": 0},
            {"price": 10},
            "not an entry",
        ]
        index = build_index(raw)
        self.assertEqual(index, {"ZERO": Decimal("0")})
        self.assertIn("ZERO", index)
        self.assertNotIn("NONE", index)

    def test_first_duplicate_wins(self):
        raw = [{"_id": "A1", "price": 1}, {"_id": "A1", "price": 2}]
        self.assertEqual(build_index(raw), {"A1": Decimal("1")})
        self.assertEqual(len(build_entries(raw)), 2)

    def test_idempotent(self):
        raw = {"data": {"items": self.entries}}
        self.assertEqual(build_index(raw), build_index(raw))

    def test_input_is_not_modified(self):
        raw = {"data": list(self.entries)}
        build_index(raw)
        self.assertEqual(raw, {"data": self.entries})


if __name__ == '__main__':
    unittest.main()
