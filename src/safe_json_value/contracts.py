"""Public record models for safe_json_value package."""

from typing import Any, Optional, Tuple
from pydantic import BaseModel, ConfigDict

from safe_json_value.codes import ChangeReason


class _Undefined:
    """An absent value.

    ``None`` is JSON ``null`` and therefore a real value, so omitted
    properties, failed reads and failed hooks use this marker instead.
    Hooks may also return it to say "no value".
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return "UNDEFINED"


UNDEFINED = _Undefined()


class ErrorInfo(BaseModel):
    """Normalized record of a caught exception."""
    name: str  # exception class name, e.g. "ValueError"
    message: str
    stack: str  # formatted traceback, empty when unavailable
    cause: Optional["ErrorInfo"] = None  # __cause__ or __context__, normalized

    model_config = ConfigDict(extra="forbid", frozen=True)


class ChangeEntry(BaseModel):
    """One place where the converted value deviates from the input.

    old_value/new_value are kept by reference, never copied.
    """
    path: Tuple[Any, ...]  # keys/indices from the root, () is the root
    old_value: Any = UNDEFINED
    new_value: Any = UNDEFINED
    reason: ChangeReason
    error: Optional[ErrorInfo] = None  # only set when a caught failure caused the entry

    model_config = ConfigDict(extra="forbid", frozen=True)
