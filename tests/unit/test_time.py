# PATH: tests/unit/test_time.py
"""
Unit tests for time utilities.
"""

import time
import unittest

from core.time import (
    elapsed_since,
    now_iso,
    now_seconds,
    now_utc,
    seconds_to_iso,
)


class TestNowFunctions(unittest.TestCase):
    """Tests for now_* functions."""

    def test_now_utc(self):
        """now_utc returns timezone-aware datetime."""
        self.assertIsNotNone(now_utc().tzinfo)

    def test_now_iso(self):
        """now_iso returns ISO string."""
        self.assertIn("T", now_iso())

    def test_now_seconds(self):
        """now_seconds is an int close to time.time()."""
        value = now_seconds()
        self.assertIsInstance(value, int)
        self.assertLessEqual(abs(value - time.time()), 2)


class TestConversions(unittest.TestCase):

    def test_never_is_none(self):
        self.assertIsNone(seconds_to_iso(0))

    def test_seconds_to_iso(self):
        self.assertEqual(seconds_to_iso(1_767_225_600), "2026-01-01T00:00:00+00:00")

    def test_elapsed_since(self):
        self.assertEqual(elapsed_since(100, 160), 60)
        self.assertEqual(elapsed_since(160, 100), -60)


if __name__ == "__main__":
    unittest.main()
