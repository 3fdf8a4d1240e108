#!/usr/bin/env python3
# tests/test_json_extract.py
"""
PulseCraft — JSON Extraction and Repair Tests

Run with: python -m pytest tests/test_json_extract.py -v
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest


class TestExtractJson(unittest.TestCase):
    """Test outermost-object extraction from provider output."""

    def test_fenced_json_with_prose(self):
        from council.json_extract import extract_json

        text = 'Here is the result:\n```json\n{"a":1}\n```\nThanks!'
        self.assertEqual(extract_json(text), {"a": 1})

    def test_no_json_raises(self):
        from council.json_extract import extract_json
        from core.errors import MalformedJson

        with self.assertRaises(MalformedJson):
            extract_json("no json here")

    def test_braces_inside_strings(self):
        from council.json_extract import extract_json

        text = 'prefix {"tone": "curly {brace} talk", "n": {"x": 2}} suffix'
        self.assertEqual(extract_json(text), {"tone": "curly {brace} talk", "n": {"x": 2}})

    def test_reversed_braces_raise(self):
        from council.json_extract import extract_json
        from core.errors import MalformedJson

        with self.assertRaises(MalformedJson):
            extract_json("} nothing {")

    def test_invalid_json_raises_with_raw(self):
        from council.json_extract import extract_json
        from core.errors import MalformedJson

        with self.assertRaises(MalformedJson) as ctx:
            extract_json("{tone: bold}")
        self.assertEqual(ctx.exception.raw, "{tone: bold}")

    def test_non_string_and_empty_raise(self):
        from council.json_extract import extract_json
        from core.errors import MalformedJson

        for value in (None, "", 42, {"a": 1}):
            with self.assertRaises(MalformedJson):
                extract_json(value)


class TestRepairs(unittest.TestCase):
    """Test the named repair steps."""

    def test_unwrap_properties(self):
        from council.repairs import unwrap_properties

        data = {"properties": {"archetype": "", "tone": "Emergent"}}
        self.assertEqual(unwrap_properties(data), {"archetype": "", "tone": "Emergent"})

    def test_unwrap_leaves_plain_payload(self):
        from council.repairs import unwrap_properties

        data = {"tone": "Bold"}
        self.assertIs(unwrap_properties(data), data)

    def test_coerce_scalar_lists(self):
        from council.repairs import coerce_scalar_lists

        fixed = coerce_scalar_lists({"dnaTags": " Rebellion ", "samplePhrases": ["a"], "tone": "x"})
        self.assertEqual(fixed["dnaTags"], ["Rebellion"])
        self.assertEqual(fixed["samplePhrases"], ["a"])
        self.assertEqual(fixed["tone"], "x")

    def test_drop_non_string_items(self):
        from council.repairs import drop_non_string_items

        fixed = drop_non_string_items({"symbolAnchors": ["Star", 3, None, "  ", "Sea"]})
        self.assertEqual(fixed["symbolAnchors"], ["Star", "Sea"])

    def test_apply_chain_in_order(self):
        from council.repairs import ALCHEMY_REPAIRS, apply_repairs

        data = {"properties": {"dnaTags": "Fusion", "phrasesToAvoid": [1, "Dull"]}}
        fixed = apply_repairs(data, ALCHEMY_REPAIRS)
        self.assertEqual(fixed, {"dnaTags": ["Fusion"], "phrasesToAvoid": ["Dull"]})


if __name__ == "__main__":
    unittest.main()
