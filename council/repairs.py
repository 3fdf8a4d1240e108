# council/repairs.py
"""
PulseCraft — JSON Repair Steps

Small named fixes for known provider quirks, applied to a parsed payload
before defaults and validation. Each step takes a dict and returns a dict
(new or the same); none of them raise.
"""

import logging
from typing import Any, Callable, Dict, Iterable, Tuple

from core.models import REQUIRED_LIST_FIELDS

logger = logging.getLogger("pulsecraft.council.repairs")

RepairStep = Callable[[Dict[str, Any]], Dict[str, Any]]


def unwrap_properties(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Unwrap one level of a `properties` envelope.

    The strict-JSON provider sometimes echoes the schema shape back,
    returning {"properties": {...fields...}} instead of the fields.
    """
    inner = data.get("properties")
    if isinstance(inner, dict):
        logger.info("Nested schema envelope detected. Unwrapping 'properties'")
        return dict(inner)
    return data


def coerce_scalar_lists(data: Dict[str, Any]) -> Dict[str, Any]:
    """A bare non-empty string where a list is expected becomes [string]."""
    fixed = dict(data)
    for key in REQUIRED_LIST_FIELDS:
        value = fixed.get(key)
        if isinstance(value, str) and value.strip():
            fixed[key] = [value.strip()]
    return fixed


def drop_non_string_items(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only non-blank string items in list fields."""
    fixed = dict(data)
    for key in REQUIRED_LIST_FIELDS:
        value = fixed.get(key)
        if isinstance(value, list):
            fixed[key] = [item for item in value if isinstance(item, str) and item.strip()]
    return fixed


EXTRACTION_REPAIRS: Tuple[RepairStep, ...] = (
    coerce_scalar_lists,
    drop_non_string_items,
)

ALCHEMY_REPAIRS: Tuple[RepairStep, ...] = (
    unwrap_properties,
    coerce_scalar_lists,
    drop_non_string_items,
)


def apply_repairs(data: Dict[str, Any], chain: Iterable[RepairStep]) -> Dict[str, Any]:
    """Run each repair step in order."""
    for step in chain:
        data = step(data)
    return data


__all__ = [
    "RepairStep",
    "unwrap_properties",
    "coerce_scalar_lists",
    "drop_non_string_items",
    "EXTRACTION_REPAIRS",
    "ALCHEMY_REPAIRS",
    "apply_repairs",
]
