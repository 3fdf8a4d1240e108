# council/json_extract.py
"""
PulseCraft — Robust JSON Extraction

Providers are free-text generators that sometimes wrap JSON in prose or
markdown fences. extract_json() slices from the first '{' to the last '}'
and lets the standard parser validate the slice, so braces inside string
values are fine. Anything that is not a JSON object fails loudly with
MalformedJson; callers decide whether that is fatal or a default.
"""

import json
from typing import Any, Dict

from core.errors import MalformedJson

# Raw text kept on the exception / in logs is truncated to this many chars
RAW_PREVIEW_CHARS = 200


def extract_json(text: Any) -> Dict[str, Any]:
    """
    Extract the outermost JSON object from provider output.

    Raises:
        MalformedJson: no braces, braces in the wrong order, invalid JSON,
            or a top-level value that is not an object
    """
    if not isinstance(text, str) or not text:
        raise MalformedJson("Provider output is empty or not text")

    preview = text[:RAW_PREVIEW_CHARS]
    start = text.find("{")
    end = text.rfind("}")

    if start == -1 or end == -1 or end < start:
        raise MalformedJson("No JSON object found in provider output", raw=preview)

    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise MalformedJson(f"JSON decode error: {e}", raw=preview) from e

    if not isinstance(parsed, dict):
        raise MalformedJson(f"Expected JSON object, got {type(parsed).__name__}", raw=preview)

    return parsed


__all__ = ["extract_json"]
