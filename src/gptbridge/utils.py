"""Shared utility functions for gptbridge.

Contains the JSON and payload helpers used by both translation directions.
"""

from __future__ import annotations

import json
from typing import Any


def to_json_string(value: Any) -> str:
    """Serialize *value* to a compact JSON string.

    Args:
        value: Any JSON-serializable value.

    Returns:
        The JSON text, with non-ASCII characters kept as-is.
    """
    return json.dumps(value, ensure_ascii=False)


def parse_json_or_raw(raw: str | None) -> Any:
    """Parse *raw* as JSON, falling back to the raw value.

    Empty or missing input is returned unchanged, as is any text that is
    not valid JSON.

    Args:
        raw: JSON text (or arbitrary text) to parse.

    Returns:
        The decoded value, or *raw* itself when it cannot be decoded.
    """
    if not raw:
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def prune_empty_fields(payload: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *payload* without falsy top-level values.

    ``None``, ``0``, ``False``, empty strings and empty collections are
    all dropped.

    Args:
        payload: A flat request body.

    Returns:
        A new dict holding only the fields with meaningful content.
    """
    return {key: value for key, value in payload.items() if value}
