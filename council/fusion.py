# council/fusion.py
"""
PulseCraft — Result Fusion

Turns one authoritative JSON payload plus two free-text supplements into a
single canonical VoiceKit.

The "merge" is deliberately textual: supplementary signal is appended into
existing string fields through fuse_field() templates, which downstream
consumers already expect. It is not idempotent, so fuse each provider
triple exactly once.

Two paths:
- fuse_extraction(): tone gets the subtext snippet, phrasingStyle gets
  keyword-detected pacing preferences
- fuse_alchemy(): unwraps a `properties` envelope, applies alchemy defaults,
  then appends the emergent archetype and the bridge words

Both finish with normalize_kit(), which guarantees every required field is
non-empty.
"""

import logging
import re
from typing import Any, Dict, Optional

from core.errors import ExtractionFailed, MalformedJson
from core.models import REQUIRED_LIST_FIELDS, REQUIRED_STRING_FIELDS, VoiceKit
from council.json_extract import extract_json
from council.repairs import ALCHEMY_REPAIRS, EXTRACTION_REPAIRS, apply_repairs

logger = logging.getLogger("pulsecraft.council.fusion")


# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULT_STRINGS: Dict[str, str] = {
    "tone": "Emergent Tone",
    "vocabulary": "Rich and expressive lexicon",
    "phrasingStyle": "Dynamic and impactful phrasing",
    "archetype": "The Alchemist",
}

DEFAULT_LISTS: Dict[str, tuple] = {
    "samplePhrases": ("Synthesized insight", "New resonant truth"),
    "phrasesToAvoid": ("Stagnation", "Limitation"),
    "dnaTags": ("Fusion", "Evolution", "Resonance"),
    "symbolAnchors": ("New Horizon", "Deep Current", "Guiding Star"),
}

ALCHEMY_DEFAULTS: Dict[str, str] = {
    "archetype": "Emergent Archetype",
    "tone": "Synthesized Tone",
    "vocabulary": "Evolved Vocabulary",
}


# -----------------------------------------------------------------------------
# Templates
# -----------------------------------------------------------------------------

SUBTEXT_TEMPLATE = "{base} (Subtext: {addition})"
PACING_TEMPLATE = "{base} | Detected Preference: {addition}"
ARCHETYPE_TEMPLATE = "{base}, {addition}"
TONE_EVOKING_TEMPLATE = "{base}, evoking {addition}"
VOCABULARY_TEMPLATE = "{base}, featuring: {addition}"

SUBTEXT_MAX_CHARS = 100
SUBTEXT_FALLBACK = "Deep Resonance"

CONCISE_KEYWORDS = ("concise", "short")
COMPLEX_KEYWORDS = ("complex", "academic")
CONCISE_PREFERENCE = "Concise Pacing"
COMPLEX_PREFERENCE = "High Complexity"

_SUBTEXT_LABEL = re.compile(r"Subtext:\s*(.*)", re.IGNORECASE)
_FIRST_LINE = re.compile(r"(.*)")
_PREAMBLE = re.compile(r"^Here.*:", re.IGNORECASE)
_BULLET = re.compile(r"^[ \t]*[-•][ \t]+")
_WHITESPACE_RUN = re.compile(r"[ \t]{2,}")


def fuse_field(base: str, addition: str, template: str) -> str:
    """Append `addition` to `base` through a `{base}`/`{addition}` template."""
    return template.format(base=base, addition=addition)


# -----------------------------------------------------------------------------
# Normalization
# -----------------------------------------------------------------------------

def normalize_kit(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill every falsy required string and every empty/non-list required list
    with its placeholder. Present values are never overwritten, so running
    this twice is the same as running it once.
    """
    result = dict(data)
    for key in REQUIRED_STRING_FIELDS:
        if not result.get(key):
            result[key] = DEFAULT_STRINGS[key]
    for key in REQUIRED_LIST_FIELDS:
        value = result.get(key)
        if not isinstance(value, list) or len(value) == 0:
            result[key] = list(DEFAULT_LISTS[key])
    return result


def _parse_authoritative(base_json: Optional[str], path: str) -> Dict[str, Any]:
    if base_json is None:
        raise ExtractionFailed(f"{path}: authoritative provider returned nothing")
    try:
        return extract_json(base_json)
    except MalformedJson as e:
        logger.error("%s: authoritative output is not valid JSON: %s (raw=%r)", path, e, e.raw)
        raise ExtractionFailed(f"{path}: {e}", cause=e) from e


# -----------------------------------------------------------------------------
# Extraction Fusion
# -----------------------------------------------------------------------------

def subtext_snippet(text: str) -> str:
    """The labeled 'Subtext:' line if present, else the first line; ≤100 chars."""
    match = _SUBTEXT_LABEL.search(text) or _FIRST_LINE.match(text)
    snippet = match.group(1)[:SUBTEXT_MAX_CHARS].strip() if match else ""
    return snippet or SUBTEXT_FALLBACK


def detected_preferences(text: str) -> list:
    """Pacing preferences sniffed from the analysis text, in append order."""
    lowered = text.lower()
    found = []
    if any(word in lowered for word in CONCISE_KEYWORDS):
        found.append(CONCISE_PREFERENCE)
    if any(word in lowered for word in COMPLEX_KEYWORDS):
        found.append(COMPLEX_PREFERENCE)
    return found


def fuse_extraction_dict(
    base_json: Optional[str],
    subtext_text: Optional[str],
    analysis_text: Optional[str],
) -> Dict[str, Any]:
    """Wire-shape variant of fuse_extraction()."""
    parsed = apply_repairs(_parse_authoritative(base_json, "extraction"), EXTRACTION_REPAIRS)

    if subtext_text:
        base_tone = parsed.get("tone") or DEFAULT_STRINGS["tone"]
        parsed["tone"] = fuse_field(base_tone, subtext_snippet(subtext_text), SUBTEXT_TEMPLATE)

    if analysis_text:
        for preference in detected_preferences(analysis_text):
            base_style = parsed.get("phrasingStyle") or DEFAULT_STRINGS["phrasingStyle"]
            parsed["phrasingStyle"] = fuse_field(base_style, preference, PACING_TEMPLATE)

    return normalize_kit(parsed)


def fuse_extraction(
    base_json: Optional[str],
    subtext_text: Optional[str],
    analysis_text: Optional[str],
) -> VoiceKit:
    """
    Fuse one extraction triple.

    Args:
        base_json: Raw authoritative output (JSON, possibly wrapped in prose)
        subtext_text: Subtext provider output, or None if that branch failed
        analysis_text: Analysis provider output, or None if that branch failed

    Raises:
        ExtractionFailed: authoritative output missing or not JSON
    """
    return VoiceKit.from_dict(fuse_extraction_dict(base_json, subtext_text, analysis_text))


# -----------------------------------------------------------------------------
# Alchemy Fusion
# -----------------------------------------------------------------------------

def clean_archetype(text: str) -> str:
    """The emergent archetype name on one line: line breaks become spaces."""
    return _WHITESPACE_RUN.sub(" ", text.replace("\r", " ").replace("\n", " ")).strip()


def clean_bridge_words(text: str) -> str:
    """
    Bridge words as one comma-separated string.

    A leading 'Here are...:' preamble and '*' markup are dropped; bullets are
    stripped per line and the remaining lines are joined with ", ".
    """
    text = _PREAMBLE.sub("", text).replace("*", "")
    lines = [_BULLET.sub("", line).strip() for line in text.splitlines()]
    return ", ".join(line for line in lines if line)


def fuse_alchemy_dict(
    base_json: Optional[str],
    archetype_text: Optional[str],
    bridge_text: Optional[str],
) -> Dict[str, Any]:
    """Wire-shape variant of fuse_alchemy()."""
    parsed = apply_repairs(_parse_authoritative(base_json, "alchemy"), ALCHEMY_REPAIRS)

    for key, default in ALCHEMY_DEFAULTS.items():
        parsed[key] = parsed.get(key) or default

    soul = clean_archetype(archetype_text) if archetype_text else ""
    if soul:
        parsed["archetype"] = fuse_field(parsed["archetype"], soul, ARCHETYPE_TEMPLATE)
        parsed["tone"] = fuse_field(parsed["tone"], soul, TONE_EVOKING_TEMPLATE)

    bridge = clean_bridge_words(bridge_text) if bridge_text else ""
    if bridge:
        parsed["vocabulary"] = fuse_field(parsed["vocabulary"], bridge, VOCABULARY_TEMPLATE)

    return normalize_kit(parsed)


def fuse_alchemy(
    base_json: Optional[str],
    archetype_text: Optional[str],
    bridge_text: Optional[str],
) -> VoiceKit:
    """
    Fuse one alchemy triple.

    Raises:
        ExtractionFailed: authoritative output missing or not JSON
    """
    return VoiceKit.from_dict(fuse_alchemy_dict(base_json, archetype_text, bridge_text))


__all__ = [
    "DEFAULT_STRINGS",
    "DEFAULT_LISTS",
    "ALCHEMY_DEFAULTS",
    "fuse_field",
    "normalize_kit",
    "subtext_snippet",
    "detected_preferences",
    "clean_archetype",
    "clean_bridge_words",
    "fuse_extraction",
    "fuse_extraction_dict",
    "fuse_alchemy",
    "fuse_alchemy_dict",
]
