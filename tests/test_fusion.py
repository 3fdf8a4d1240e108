#!/usr/bin/env python3
# tests/test_fusion.py
"""
PulseCraft — Fusion Engine Tests

Run with: python -m pytest tests/test_fusion.py -v
"""

import json
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest


REBEL_JSON = json.dumps({
    "tone": "Bold",
    "vocabulary": "Punchy",
    "phrasingStyle": "Short sentences",
    "archetype": "The Rebel",
    "samplePhrases": ["We break rules"],
    "phrasesToAvoid": ["corporate jargon"],
    "dnaTags": ["Rebellion"],
    "symbolAnchors": ["Broken Chains"],
})


class TestFuseField(unittest.TestCase):
    """Test the isolated string-append helper."""

    def test_template(self):
        from council.fusion import SUBTEXT_TEMPLATE, fuse_field

        self.assertEqual(fuse_field("Bold", "hope", SUBTEXT_TEMPLATE), "Bold (Subtext: hope)")

    def test_braces_in_values_are_literal(self):
        from council.fusion import fuse_field

        self.assertEqual(fuse_field("{x}", "{y}", "{base}+{addition}"), "{x}+{y}")


class TestNormalizeKit(unittest.TestCase):
    """Test post-fusion default filling."""

    def test_fills_every_missing_field(self):
        from council.fusion import DEFAULT_LISTS, DEFAULT_STRINGS, normalize_kit
        from core.models import REQUIRED_LIST_FIELDS, REQUIRED_STRING_FIELDS

        result = normalize_kit({"tone": "", "dnaTags": [], "symbolAnchors": "not a list"})

        for key in REQUIRED_STRING_FIELDS:
            self.assertEqual(result[key], DEFAULT_STRINGS[key])
        for key in REQUIRED_LIST_FIELDS:
            self.assertEqual(result[key], list(DEFAULT_LISTS[key]))

    def test_present_values_kept(self):
        from council.fusion import normalize_kit

        result = normalize_kit({"tone": "Warm", "dnaTags": ["Care"]})
        self.assertEqual(result["tone"], "Warm")
        self.assertEqual(result["dnaTags"], ["Care"])

    def test_idempotent(self):
        from council.fusion import normalize_kit

        samples = [
            {},
            {"tone": "Warm", "samplePhrases": []},
            {"archetype": None, "dnaTags": ["A"], "extra": 1},
        ]
        for data in samples:
            once = normalize_kit(data)
            self.assertEqual(normalize_kit(once), once)

    def test_does_not_mutate_input(self):
        from council.fusion import normalize_kit

        data = {"tone": ""}
        normalize_kit(data)
        self.assertEqual(data, {"tone": ""})


class TestFuseExtraction(unittest.TestCase):
    """Test extraction fusion."""

    def test_end_to_end_scenario(self):
        from council.fusion import fuse_extraction

        kit = fuse_extraction(
            REBEL_JSON,
            "Subtext: defiant hope beneath the bravado",
            "Short, concise structure throughout.",
        )

        self.assertTrue(kit.ok)
        self.assertEqual(kit.tone, "Bold (Subtext: defiant hope beneath the bravado)")
        self.assertEqual(kit.phrasing_style, "Short sentences | Detected Preference: Concise Pacing")
        self.assertEqual(kit.vocabulary, "Punchy")
        self.assertEqual(kit.archetype, "The Rebel")
        self.assertEqual(kit.sample_phrases, ("We break rules",))
        self.assertEqual(kit.phrases_to_avoid, ("corporate jargon",))
        self.assertEqual(kit.dna_tags, ("Rebellion",))
        self.assertEqual(kit.symbol_anchors, ("Broken Chains",))

    def test_both_supplements_missing(self):
        """Authoritative only: unaugmented but schema-complete."""
        from council.fusion import fuse_extraction

        kit = fuse_extraction(REBEL_JSON, None, None)
        self.assertEqual(kit.tone, "Bold")
        self.assertEqual(kit.phrasing_style, "Short sentences")

    def test_both_preferences_appended_in_order(self):
        from council.fusion import fuse_extraction

        kit = fuse_extraction(REBEL_JSON, None, "- Academic register\n- Complex clauses, short paragraphs")
        self.assertEqual(
            kit.phrasing_style,
            "Short sentences | Detected Preference: Concise Pacing | Detected Preference: High Complexity",
        )

    def test_first_line_used_without_label(self):
        from council.fusion import fuse_extraction

        kit = fuse_extraction(REBEL_JSON, "Quiet defiance\nMore detail here", None)
        self.assertEqual(kit.tone, "Bold (Subtext: Quiet defiance)")

    def test_snippet_truncated_to_100_chars(self):
        from council.fusion import subtext_snippet

        self.assertEqual(subtext_snippet("Subtext: " + "x" * 150), "x" * 100)

    def test_empty_snippet_falls_back(self):
        from council.fusion import subtext_snippet

        self.assertEqual(subtext_snippet("\nsecond line"), "Deep Resonance")

    def test_missing_tone_filled_before_append(self):
        from council.fusion import fuse_extraction

        kit = fuse_extraction('{"vocabulary": "Plain"}', "Subtext: calm", "concise")
        self.assertEqual(kit.tone, "Emergent Tone (Subtext: calm)")
        self.assertEqual(kit.phrasing_style, "Dynamic and impactful phrasing | Detected Preference: Concise Pacing")

    def test_scalar_list_repaired(self):
        from council.fusion import fuse_extraction

        kit = fuse_extraction('{"tone": "Bold", "dnaTags": "Rebellion"}', None, None)
        self.assertEqual(kit.dna_tags, ("Rebellion",))

    def test_every_field_populated(self):
        from council.fusion import fuse_extraction
        from core.models import REQUIRED_FIELDS

        for payload in ('{}', '{"tone": ""}', 'Sure! {"archetype": "The Sage"} hope this helps'):
            data = fuse_extraction(payload, "Subtext: x", "analysis").to_dict()
            for key in REQUIRED_FIELDS:
                self.assertTrue(data[key], f"{key} empty for {payload!r}")

    def test_malformed_authoritative_is_fatal(self):
        from council.fusion import fuse_extraction
        from core.errors import ExtractionFailed, MalformedJson

        with self.assertRaises(ExtractionFailed) as ctx:
            fuse_extraction("I could not analyze this text.", "Subtext: x", "y")
        self.assertIsInstance(ctx.exception.cause, MalformedJson)

    def test_missing_authoritative_is_fatal(self):
        from council.fusion import fuse_extraction
        from core.errors import ExtractionFailed

        with self.assertRaises(ExtractionFailed):
            fuse_extraction(None, "Subtext: x", "y")


class TestFuseAlchemy(unittest.TestCase):
    """Test alchemy fusion."""

    def test_properties_envelope_scenario(self):
        from council.fusion import fuse_alchemy

        kit = fuse_alchemy(
            '{"properties":{"archetype":"","tone":"Emergent"}}',
            "The Quantum Sage",
            "Here are the bridge words: Flux, Horizon, Crucible",
        )

        self.assertEqual(kit.archetype, "Emergent Archetype, The Quantum Sage")
        self.assertEqual(kit.tone, "Emergent, evoking The Quantum Sage")
        self.assertEqual(kit.vocabulary, "Evolved Vocabulary, featuring: Flux, Horizon, Crucible")
        self.assertEqual(kit.dna_tags, ("Fusion", "Evolution", "Resonance"))

    def test_supplements_missing(self):
        from council.fusion import fuse_alchemy

        kit = fuse_alchemy('{"archetype": "The Sage-Rebel", "tone": "Wry"}', None, None)
        self.assertEqual(kit.archetype, "The Sage-Rebel")
        self.assertEqual(kit.tone, "Wry")
        self.assertEqual(kit.vocabulary, "Evolved Vocabulary")

    def test_blank_supplement_after_cleaning_is_skipped(self):
        from council.fusion import fuse_alchemy

        kit = fuse_alchemy('{"archetype": "The Sage"}', "\n \n", "Here:")
        self.assertEqual(kit.archetype, "The Sage")
        self.assertEqual(kit.vocabulary, "Evolved Vocabulary")

    def test_multiline_bridge_list_joined(self):
        from council.fusion import fuse_alchemy

        kit = fuse_alchemy('{"vocabulary": "Crisp"}', None, "Here are the words:\n- Flux\n- Horizon\n- Crucible")
        self.assertEqual(kit.vocabulary, "Crisp, featuring: Flux, Horizon, Crucible")

    def test_archetype_starting_with_here_kept_whole(self):
        from council.fusion import fuse_alchemy

        kit = fuse_alchemy('{"archetype": "The Sage", "tone": "Wry"}', "Heretic Sage: Unbound", None)
        self.assertEqual(kit.archetype, "The Sage, Heretic Sage: Unbound")
        self.assertEqual(kit.tone, "Wry, evoking Heretic Sage: Unbound")

    def test_malformed_is_fatal(self):
        from council.fusion import fuse_alchemy
        from core.errors import ExtractionFailed

        with self.assertRaises(ExtractionFailed):
            fuse_alchemy("not json", "The Sage", "a, b, c")


class TestCleanArchetype(unittest.TestCase):
    """Test emergent archetype cleaning."""

    def test_newlines_become_spaces(self):
        from council.fusion import clean_archetype

        self.assertEqual(clean_archetype("The Quantum\nSage\r\n"), "The Quantum Sage")

    def test_leading_here_kept(self):
        from council.fusion import clean_archetype

        self.assertEqual(clean_archetype("Heretic Sage: Unbound"), "Heretic Sage: Unbound")

    def test_asterisks_kept(self):
        from council.fusion import clean_archetype

        self.assertEqual(clean_archetype("The *Quantum* Sage"), "The *Quantum* Sage")


class TestCleanBridgeWords(unittest.TestCase):
    """Test bridge-word cleaning."""

    def test_preamble_and_asterisks(self):
        from council.fusion import clean_bridge_words

        self.assertEqual(clean_bridge_words("Here are three words: **Flux**, Horizon"), "Flux, Horizon")

    def test_leading_bullet(self):
        from council.fusion import clean_bridge_words

        self.assertEqual(clean_bridge_words("- Flux, Horizon, Crucible"), "Flux, Horizon, Crucible")

    def test_bulleted_lines_joined(self):
        from council.fusion import clean_bridge_words

        text = "Here are the words:\n- Flux\n• Horizon\r\n  - Crucible\n"
        self.assertEqual(clean_bridge_words(text), "Flux, Horizon, Crucible")

    def test_preamble_only_on_first_line(self):
        from council.fusion import clean_bridge_words

        self.assertEqual(clean_bridge_words("Flux\nHere: kept"), "Flux, Here: kept")


if __name__ == "__main__":
    unittest.main()
