"""Exception normalization.

Turns a caught exception into an ErrorInfo. Every step reads user code
(``__str__``, ``__repr__``, tracebacks), so each one falls back to a fixed
value instead of raising.
"""

import traceback
from typing import Callable, Optional, Set

from safe_json_value.contracts import ErrorInfo

# Chained causes deeper than this are dropped.
MAX_CAUSE_DEPTH = 8


def _safe_text(read: Callable[[], str], fallback: str) -> str:
    try:
        text = read()
    except Exception:
        return fallback
    return text if isinstance(text, str) else fallback


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def _chained(error: BaseException) -> Optional[BaseException]:
    cause = error.__cause__
    if cause is None and not error.__suppress_context__:
        cause = error.__context__
    return cause if isinstance(cause, BaseException) else None


def normalize_exception(error: object) -> ErrorInfo:
    """Normalize an exception into an ErrorInfo record.

    Non-exception values are wrapped as if raised with ``Exception(value)``.
    Never raises.

    Args:
        error: The caught exception

    Returns:
        ErrorInfo with name, message, stack and the normalized cause chain
    """
    return _normalize(error, set(), 0)


def _normalize(error: object, seen: Set[int], depth: int) -> ErrorInfo:
    if not isinstance(error, BaseException):
        message = _safe_text(lambda: str(error), "")
        return ErrorInfo(name="Exception", message=message, stack="")

    seen.add(id(error))
    name = _safe_text(lambda: type(error).__name__, "Exception")
    message = _safe_text(lambda: str(error), "")
    stack = _safe_text(lambda: _format_stack(error), "")

    cause_info = None
    try:
        cause = _chained(error)
    except Exception:
        cause = None
    if cause is not None and id(cause) not in seen and depth < MAX_CAUSE_DEPTH:
        cause_info = _normalize(cause, seen, depth + 1)

    return ErrorInfo(name=name, message=message, stack=stack, cause=cause_info)
