"""
Module 01 - Schemas & Canonicalization
File: canonical.py

Purpose: Deterministic serialization used for master-data fingerprints and
for any payload that must hash identically across producers.

Canonical form:
    - compact separators, no insignificant whitespace
    - object keys sorted ascending, recursively
    - UTF-8, non-ASCII characters kept as-is
    - NaN / Infinity rejected

CRITICAL: Every producer and consumer of a fingerprint must use this exact
form. A divergence silently breaks fingerprints.
"""

import json
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

# Canonical JSON separators - no whitespace
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def format_datetime_canonical(dt: datetime) -> str:
    """
    Format a datetime as ISO-8601 with Z suffix. Naive datetimes are
    treated as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    if dt.microsecond == 0:
        return dt.strftime("%Y-%m-%dT%H:%M:%SZ")
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def canonicalize_value(value: Any, path: str = "", *, drop_none: bool = False) -> Any:
    """
    Recursively convert a value into JSON-native types.

    Args:
        value: Any Python value.
        path: Current path, used in error details.
        drop_none: Remove dict entries whose value is None. Fingerprints keep
            them, so the default is False.

    Raises:
        CanonicalizationException: For non-finite floats, non-string keys or
            types with no JSON representation.
    """
    if value is None or isinstance(value, (bool, str)):
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if not math.isfinite(value):
            raise CanonicalizationException(
                f"Non-finite float value encountered: {value}",
                details={"path": path, "value": str(value)},
            )
        return value

    if isinstance(value, datetime):
        return format_datetime_canonical(value)

    if isinstance(value, Enum):
        return canonicalize_value(value.value, path, drop_none=drop_none)

    if isinstance(value, BaseModel):
        dumped = value.model_dump(mode="json", by_alias=True, exclude_none=drop_none)
        return canonicalize_value(dumped, path, drop_none=drop_none)

    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise CanonicalizationException(
                    f"Object keys must be strings, got {type(key).__name__}",
                    details={"path": path, "key": repr(key)},
                )
            if item is None and drop_none:
                continue
            result[key] = canonicalize_value(
                item, f"{path}.{key}" if path else key, drop_none=drop_none
            )
        return result

    if isinstance(value, (list, tuple)):
        return [
            canonicalize_value(item, f"{path}[{i}]", drop_none=drop_none)
            for i, item in enumerate(value)
        ]

    if isinstance(value, bytes):
        return "0x" + value.hex()

    raise CanonicalizationException(
        f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def dumps_canonical(obj: Any, *, drop_none: bool = False) -> str:
    """
    Serialize an object to its canonical JSON string.

    Example:
        >>> dumps_canonical({"b": 2, "a": {"d": None, "c": 1}})
        '{"a":{"c":1,"d":null},"b":2}'
    """
    try:
        canonicalized = canonicalize_value(obj, drop_none=drop_none)
        return json.dumps(
            canonicalized,
            sort_keys=True,
            separators=CANONICAL_JSON_SEPARATORS,
            ensure_ascii=False,
            allow_nan=False,
        )
    except CanonicalizationException:
        raise
    except (TypeError, ValueError) as e:
        raise CanonicalizationException(
            f"Failed to serialize to canonical JSON: {e}",
            details={"type": type(obj).__name__, "error": str(e)},
        ) from e


def loads_canonical(json_str: str) -> Any:
    """Parse a canonical JSON string. Datetimes stay strings."""
    return json.loads(json_str)


def canonical_equals(obj1: Any, obj2: Any) -> bool:
    """Check whether two objects have the same canonical form."""
    try:
        return dumps_canonical(obj1) == dumps_canonical(obj2)
    except CanonicalizationException:
        return False
