#!/usr/bin/env python3
"""
Tests for environment configuration.
"""

import os
import unittest
from unittest.mock import patch

from quotation_engine.config import DEFAULT_TIMEOUT, Settings


class TestSettings(unittest.TestCase):

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.base_url, "http://localhost:5000")
        self.assertIsNone(settings.token)
        self.assertEqual(settings.timeout, DEFAULT_TIMEOUT)
        self.assertEqual(settings.currency, "VND")
        self.assertEqual(settings.page_size, 10)

    def test_from_environment(self):
        env = {
            "QUOTATION_API_BASE_URL": "https://dealer.example.com/",
            "QUOTATION_API_TOKEN": "abc",
            "QUOTATION_API_TIMEOUT": "5.5",
            "QUOTATION_CURRENCY": "usd",
            "QUOTATION_PAGE_SIZE": "25",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.base_url, "https://dealer.example.com")
        self.assertEqual(settings.token, "abc")
        self.assertEqual(settings.timeout, 5.5)
        self.assertEqual(settings.currency, "USD")
        self.assertEqual(settings.page_size, 25)

    def test_invalid_numbers_fall_back(self):
        env = {"QUOTATION_API_TIMEOUT": "soon", "QUOTATION_PAGE_SIZE": "many"}
        with patch.dict(os.environ, env, clear=True):
            with self.assertLogs("quotation_engine.config", level="WARNING"):
                settings = Settings.from_env()
        self.assertEqual(settings.timeout, DEFAULT_TIMEOUT)
        self.assertEqual(settings.page_size, 10)


if __name__ == '__main__':
    unittest.main()
