#!/usr/bin/env python3
"""
Tests for quotation request payload preparation.
"""

import unittest

from quotation_engine.draft import sanitize_item


class TestSanitizeItem(unittest.TestCase):

    def test_drops_empty_selections_and_defaults_quantities(self):
        item = sanitize_item(
            "V1",
            options=[{"option_id": "O1"}, {"option_id": None}, None],
            accessories=[
                {"accessory_id": "A1", "quantity": 0},
                {"accessory_id": "A2", "quantity": 3},
                {"accessory_id": ""},
            ],
            color="Trắng",
        )
        self.assertEqual(item, {
            "vehicle_id": "V1",
            "quantity": 1,
            "color": "Trắng",
            "options": [{"option_id": "O1"}],
            "accessories": [
                {"accessory_id": "A1", "quantity": 1},
                {"accessory_id": "A2", "quantity": 3},
            ],
        })

    def test_omits_empty_add_on_lists(self):
        item = sanitize_item("V1", quantity=2, discount=500000, promotion_id="P1")
        self.assertEqual(item, {"vehicle_id": "V1", "quantity": 2, "discount": 500000, "promotion_id": "P1"})

    def test_vehicle_is_required(self):
        with self.assertRaises(ValueError):
            sanitize_item("")


if __name__ == '__main__':
    unittest.main()
