"""Public API for safe_json_value package.

High-level functions that return complete, structured results.
Callers should use these functions instead of importing from kernel or _internal.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

# Internal imports (not exposed to users)
from safe_json_value.contracts import ChangeEntry, UNDEFINED
from safe_json_value.kernel.change_log import ChangeLog, ROOT_PATH
from safe_json_value.kernel.walker import WalkState, transform_value
from safe_json_value._internal.canonical_json import canonical_dumps
from safe_json_value._internal.options import ConvertOptions, DEFAULT_MAX_DEPTH, DEFAULT_MAX_SIZE


class ConversionResult(BaseModel):
    """Stable result model for convert()."""
    value: Any  # JSON-safe value, UNDEFINED when the root itself was omitted
    changes: List[ChangeEntry]  # In traversal order
    change_summary: Dict[str, int] = Field(default_factory=dict)  # Counts by reason


def _build_conversion_result(value: Any, changes: ChangeLog) -> ConversionResult:
    """Build ConversionResult from the converted value and its change log."""
    change_summary: Dict[str, int] = {}
    for entry in changes:
        change_summary[entry.reason.value] = change_summary.get(entry.reason.value, 0) + 1

    return ConversionResult(
        value=value,
        changes=changes.entries(),
        change_summary=change_summary,
    )


def convert(
    value: Any,
    *,
    max_size: int = DEFAULT_MAX_SIZE,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ConversionResult:
    """
    Convert any value into JSON-safe data and report every change made.

    Never raises because of `value`: raising getters, raising to_json()
    hooks, cycles and unsupported types all end up as entries in
    `changes`. Each call owns its own change log, so a to_json() hook may
    call convert() again.

    Args:
        value: Any Python value
        max_size: Upper bound on the serialized length of the output
        max_depth: Deepest nesting level kept in the output (root is 0)

    Returns:
        ConversionResult with the converted value and the ordered changes

    Raises:
        pydantic.ValidationError: If max_size or max_depth is not a positive int
    """
    options = ConvertOptions(max_size=max_size, max_depth=max_depth)
    changes = ChangeLog()
    state = WalkState(changes=changes, options=options)
    converted = transform_value(value, state, ROOT_PATH)
    return _build_conversion_result(converted, changes)


def safe_dumps(
    value: Any,
    *,
    max_size: int = DEFAULT_MAX_SIZE,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Canonical JSON text of convert(value).value.

    An omitted root is rendered as ``null``.
    """
    converted = convert(value, max_size=max_size, max_depth=max_depth).value
    if converted is UNDEFINED:
        converted = None
    return canonical_dumps(converted)
