#!/usr/bin/env python3
"""
Unit tests for Range Utilities module
"""
import unittest

from cath.exceptions import ParseError
from cath.utils.range_utils import (
    parse_segment, split_range_tokens
)


class TestRangeUtils(unittest.TestCase):
    """Test cases for range utility functions"""

    def test_parse_segment(self):
        """Test parse_segment with and without tags"""
        self.assertEqual(parse_segment("1-50:A"), (1, 50, "A"))
        self.assertEqual(parse_segment("60-100"), (60, 100, None))

        # Negative residue numbers
        self.assertEqual(parse_segment("-3-45:A"), (-3, 45, "A"))
        self.assertEqual(parse_segment("-10--2:B"), (-10, -2, "B"))

        # Single residue segment
        self.assertEqual(parse_segment("7-7:A"), (7, 7, "A"))

    def test_parse_segment_malformed(self):
        """Malformed bounds raise ParseError"""
        for token in ("abc-12", "12-abc", "12", "1-2-3", "", "1.5-4:A", "-:A"):
            with self.subTest(token=token):
                with self.assertRaises(ParseError):
                    parse_segment(token)

    def test_parse_segment_reversed(self):
        """Start after end is rejected"""
        with self.assertRaises(ParseError) as ctx:
            parse_segment("50-10:A")
        self.assertEqual(ctx.exception.details['token'], "50-10:A")

    def test_split_range_tokens(self):
        """Commas and whitespace both separate tokens"""
        self.assertEqual(split_range_tokens("1-50:A,60-100:A"), ["1-50:A", "60-100:A"])
        self.assertEqual(split_range_tokens("1-50:A 60-100:A"), ["1-50:A", "60-100:A"])
        self.assertEqual(split_range_tokens(" 1-5:A, 7-9:A "), ["1-5:A", "7-9:A"])
        self.assertEqual(split_range_tokens(""), [])


if __name__ == '__main__':
    unittest.main()
