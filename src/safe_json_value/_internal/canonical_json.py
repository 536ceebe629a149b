"""Centralized canonical JSON serialization.

This module provides the single JSON text form used everywhere: safe_dumps()
output, size accounting during conversion, test snapshots.
"""

import json
from typing import Any


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization for byte-stable output.

    Rules:
    - UTF-8 encoding
    - Sorted keys
    - Stable separators (",", ":")
    - NaN and Infinity rejected (they are not JSON)
    - No trailing whitespace

    Args:
        obj: JSON-safe Python object to serialize

    Returns:
        Canonical JSON string (UTF-8 encoded)

    Raises:
        ValueError: If obj contains non-finite floats or ints too long to render
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,  # UTF-8 encoding
        allow_nan=False
    )


def json_size(obj: Any) -> int:
    """Length of the canonical JSON text of a primitive or a key."""
    return len(canonical_dumps(obj))
