"""Custom serialization hooks (``to_json()``).

A value may supply its own JSON representation. The hook is called at most
once per visited value and its result is then validated as plain data: a
hook found on the result is not called in the same step.
"""

import datetime
import logging
from contextvars import ContextVar
from typing import Any, Callable, FrozenSet, Optional

from pydantic import BaseModel

from safe_json_value.codes import ChangeReason
from safe_json_value.contracts import UNDEFINED
from safe_json_value.kernel.access import safe_get_change_prop
from safe_json_value.kernel.change_log import ChangeLog, Path, format_path
from safe_json_value._internal.exceptions import normalize_exception

logger = logging.getLogger(__name__)

TO_JSON_ATTRIBUTE = "to_json"

PRIMITIVE_TYPES = (type(None), bool, int, float, str)

_DATE_TYPES = (datetime.datetime, datetime.date, datetime.time)

# ids of values whose hook is running on the current call stack.
# A hook that converts its own owner sees that owner as hook-less.
_running_hooks: ContextVar[FrozenSet[int]] = ContextVar(
    "safe_json_value_running_hooks", default=frozenset()
)


def call_to_json(value: Any, changes: ChangeLog, path: Path) -> Any:
    """Replace `value` by the result of its hook, if it has one.

    Returns `value` unchanged (and records nothing) when there is no
    callable hook. Returns UNDEFINED when the hook raises.
    """
    hook = get_to_json(value)
    if hook is None:
        return value

    token = _running_hooks.set(_running_hooks.get() | {id(value)})
    try:
        result = hook()
    except Exception as error:
        logger.debug("Serialization hook raised at %s (%s)", format_path(path), type(error).__name__)
        changes.record(
            path,
            value,
            UNDEFINED,
            ChangeReason.UNSAFE_TO_JSON,
            error=normalize_exception(error),
        )
        return UNDEFINED
    finally:
        _running_hooks.reset(token)

    changes.record(path, value, result, ChangeReason.TO_JSON)
    return result


def get_to_json(value: Any) -> Optional[Callable[[], Any]]:
    """The zero-argument hook of `value`, or None.

    A ``to_json`` attribute wins over the built-in hooks. A ``to_json``
    attribute that is not callable is not a hook.
    """
    if value is UNDEFINED or issubclass(type(value), PRIMITIVE_TYPES):
        return None
    # Classes expose their hook unbound
    if issubclass(type(value), type):
        return None
    if id(value) in _running_hooks.get():
        return None

    to_json = safe_get_change_prop(value, TO_JSON_ATTRIBUTE, attribute=True)
    if callable(to_json):
        return to_json
    return _get_builtin_hook(value)


def _get_builtin_hook(value: Any) -> Optional[Callable[[], Any]]:
    value_type = type(value)
    if issubclass(value_type, _DATE_TYPES):
        return lambda: value.isoformat()
    if issubclass(value_type, BaseModel):
        return lambda: value.model_dump()
    if issubclass(value_type, BaseException):
        return lambda: normalize_exception(value).model_dump()
    return None
