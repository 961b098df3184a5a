"""
Module 01 - Schemas & Canonicalization
File: canonical.py

Purpose: Deterministic serialization for Merkle leaves, signed digests
and messages crossing the session channel.

CRITICAL: All outputs from this module MUST be deterministic across runs.
Integers are emitted at full precision; fact values are never narrowed.
"""

import json
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

# Canonical JSON separators - no whitespace
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def _validate_float(value: float, path: str = "") -> None:
    """
    Validate that a float is finite (not NaN or Infinity).

    Raises:
        CanonicalizationException: If the float is NaN or Infinity.
    """
    if not math.isfinite(value):
        raise CanonicalizationException(
            message=f"Non-finite float value encountered: {value}",
            details={"path": path, "value": str(value)},
        )


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Recursively canonicalize a value for deterministic JSON serialization.

    Args:
        value: Any Python value to canonicalize.
        path: Current path for error reporting.

    Returns:
        A JSON-serializable canonical representation.

    Raises:
        CanonicalizationException: If the value cannot be canonicalized.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        # Must check bool before int since bool is subclass of int
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        _validate_float(value, path)
        return value

    if isinstance(value, str):
        return value

    if isinstance(value, Enum):
        return value.value

    if isinstance(value, BaseModel):
        dumped = value.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
        )
        return canonicalize_value(dumped, path)

    if isinstance(value, dict):
        # Keys will be sorted during JSON serialization
        return {
            str(k): canonicalize_value(v, f"{path}.{k}" if path else str(k))
            for k, v in value.items()
            if v is not None
        }

    if isinstance(value, (list, tuple)):
        return [
            canonicalize_value(item, f"{path}[{i}]")
            for i, item in enumerate(value)
        ]

    if isinstance(value, (set, frozenset)):
        # Sets have no order; sort their canonical forms
        items = [canonicalize_value(item, f"{path}[]") for item in value]
        return sorted(items, key=lambda item: json.dumps(item, sort_keys=True))

    if isinstance(value, bytes):
        return value.hex()

    raise CanonicalizationException(
        message=f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def to_canonical_json_dict(obj: Any) -> dict[str, Any]:
    """
    Convert an object to a canonical JSON-serializable dictionary.

    Raises:
        CanonicalizationException: If the object does not serialize to a dict.
    """
    canonicalized = canonicalize_value(obj)

    if not isinstance(canonicalized, dict):
        raise CanonicalizationException(
            message="to_canonical_json_dict expects an object that serializes to a dict",
            details={"type": type(obj).__name__, "result_type": type(canonicalized).__name__},
        )

    return canonicalized


def dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to canonical JSON string.

    Returns:
        A canonical JSON string with:
            - Sorted keys
            - No extra whitespace
            - None fields excluded
            - Enums as string values
            - Bytes as lowercase hex
            - No NaN/Infinity floats

    Raises:
        CanonicalizationException: If serialization fails.

    Example:
        >>> dumps_canonical({"value": 29, "index": 10})
        '{"index":10,"value":29}'
    """
    try:
        canonicalized = canonicalize_value(obj)
        return json.dumps(
            canonicalized,
            sort_keys=True,
            separators=CANONICAL_JSON_SEPARATORS,
            ensure_ascii=False,
        )
    except CanonicalizationException:
        raise
    except Exception as e:
        raise CanonicalizationException(
            message=f"Failed to serialize to canonical JSON: {e}",
            details={"type": type(obj).__name__, "error": str(e)},
        ) from e


def loads_canonical(json_str: str) -> Any:
    """Parse a canonical JSON string."""
    return json.loads(json_str)


def canonical_equals(obj1: Any, obj2: Any) -> bool:
    """Check if two objects have identical canonical representations."""
    try:
        return dumps_canonical(obj1) == dumps_canonical(obj2)
    except CanonicalizationException:
        return False
