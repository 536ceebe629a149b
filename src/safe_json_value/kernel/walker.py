"""Depth-first conversion of a value into JSON-safe data.

Each value is first given to call_to_json(), then validated by type.
Containers are rebuilt property by property with safe_get_prop().
Changes at a value are recorded before its children are visited.
"""

import logging
import math
import types
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List, Set

from safe_json_value.codes import ChangeReason
from safe_json_value.contracts import UNDEFINED
from safe_json_value.kernel.access import get_instance_dict, safe_get_prop
from safe_json_value.kernel.change_log import ChangeLog, Path, child_path, format_path
from safe_json_value.kernel.hooks import PRIMITIVE_TYPES, call_to_json
from safe_json_value._internal.canonical_json import json_size
from safe_json_value._internal.exceptions import normalize_exception
from safe_json_value._internal.options import ConvertOptions

logger = logging.getLogger(__name__)

# "{}" / "[]"
_BRACKETS_SIZE = 2


@dataclass
class WalkState:
    """Mutable state of one top-level conversion. Never shared between calls."""
    changes: ChangeLog
    options: ConvertOptions
    ancestors: Set[int] = field(default_factory=set)
    size: int = 0


def transform_value(value: Any, state: WalkState, path: Path, depth: int = 0) -> Any:
    """Convert `value` found at `path`. Returns UNDEFINED when it is omitted."""
    if depth > state.options.max_depth:
        logger.debug("Max depth exceeded at %s", format_path(path))
        state.changes.record(path, value, UNDEFINED, ChangeReason.UNSAFE_DEPTH)
        return UNDEFINED

    if _is_cycle(value, state, path):
        return UNDEFINED

    resolved = call_to_json(value, state.changes, path)
    if resolved is not value and _is_cycle(resolved, state, path):
        return UNDEFINED

    pushed = {id(item) for item in (value, resolved) if _is_reference(item)}
    state.ancestors.update(pushed)
    try:
        return _transform_type(resolved, state, path, depth)
    finally:
        state.ancestors.difference_update(pushed)


def _is_reference(value: Any) -> bool:
    return value is not UNDEFINED and not issubclass(type(value), PRIMITIVE_TYPES)


def _is_cycle(value: Any, state: WalkState, path: Path) -> bool:
    if not _is_reference(value) or id(value) not in state.ancestors:
        return False
    logger.debug("Cycle at %s", format_path(path))
    state.changes.record(path, value, UNDEFINED, ChangeReason.UNSAFE_CYCLE)
    return True


def _transform_type(value: Any, state: WalkState, path: Path, depth: int) -> Any:
    value_type = type(value)

    if value is UNDEFINED:
        return _invalid_type(value, state, path)
    if value is None or value_type is bool:
        return _transform_primitive(value, state, path)
    if issubclass(value_type, str):
        return _transform_primitive(str.__str__(value), state, path)
    if issubclass(value_type, int):
        return _transform_primitive(int.__int__(value), state, path)
    if issubclass(value_type, float):
        if not math.isfinite(value):
            return _invalid_type(value, state, path)
        return _transform_primitive(float.__float__(value), state, path)

    if issubclass(value_type, Mapping):
        return _transform_mapping(value, state, path, depth)
    if issubclass(value_type, (list, tuple)):
        return _transform_sequence(value, state, path, depth)
    if _is_plain_object(value):
        return _transform_object(value, state, path, depth)

    return _invalid_type(value, state, path)


def _invalid_type(value: Any, state: WalkState, path: Path) -> Any:
    state.changes.record(path, value, UNDEFINED, ChangeReason.INVALID_TYPE)
    return UNDEFINED


def _transform_primitive(value: Any, state: WalkState, path: Path) -> Any:
    try:
        size = json_size(value)
    except ValueError:
        # ints above the interpreter's int -> str digit limit
        return _invalid_type(value, state, path)
    if _exceeds_size(value, state, path, size):
        return UNDEFINED
    return value


def _exceeds_size(value: Any, state: WalkState, path: Path, size: int) -> bool:
    if state.size + size > state.options.max_size:
        logger.debug("Max size exceeded at %s", format_path(path))
        state.changes.record(path, value, UNDEFINED, ChangeReason.UNSAFE_SIZE)
        return True
    state.size += size
    return False


def _transform_mapping(value: Mapping, state: WalkState, path: Path, depth: int) -> Any:
    keys = _safe_keys(lambda: list(value.keys()), state, path)
    if _exceeds_size(value, state, path, _BRACKETS_SIZE):
        return UNDEFINED

    result = {}
    for key in keys:
        if not issubclass(type(key), str):
            state.changes.record(child_path(path, key), key, UNDEFINED, ChangeReason.INVALID_KEY)
            continue
        output_key = str.__str__(key)
        prop = _transform_property(value, key, output_key, bool(result), state, path, depth)
        if prop is not UNDEFINED:
            result[output_key] = prop
    return result


def _transform_sequence(value: Any, state: WalkState, path: Path, depth: int) -> Any:
    indexes = _safe_keys(lambda: list(range(len(value))), state, path)
    if _exceeds_size(value, state, path, _BRACKETS_SIZE):
        return UNDEFINED

    result = []
    for index in indexes:
        prop = _transform_property(value, index, None, bool(result), state, path, depth)
        if prop is not UNDEFINED:
            result.append(prop)
    return result


def _transform_object(value: Any, state: WalkState, path: Path, depth: int) -> Any:
    names = _safe_keys(lambda: get_object_keys(value), state, path)
    if _exceeds_size(value, state, path, _BRACKETS_SIZE):
        return UNDEFINED

    result = {}
    if type(value) is not types.SimpleNamespace:
        state.changes.record(path, value, result, ChangeReason.UNRESOLVED_CLASS)

    for name in names:
        output_key = str.__str__(name)
        prop = _transform_property(value, name, output_key, bool(result), state, path, depth)
        if prop is not UNDEFINED:
            result[output_key] = prop
    return result


def _transform_property(
    parent: Any,
    key: Any,
    output_key: Any,
    has_previous: bool,
    state: WalkState,
    path: Path,
    depth: int,
) -> Any:
    prop_path = child_path(path, key)
    size_before = state.size
    if has_previous:
        state.size += 1  # ","
    if output_key is not None:
        state.size += json_size(output_key) + 1  # "key":

    prop, safe = safe_get_prop(parent, key, state.changes, prop_path)
    if not safe:
        state.size = size_before
        return UNDEFINED

    result = transform_value(prop, state, prop_path, depth + 1)
    if result is UNDEFINED:
        state.size = size_before
    return result


def _safe_keys(list_keys, state: WalkState, path: Path) -> List[Any]:
    """Keys of a container. Listing keys runs user code and may raise."""
    try:
        return list_keys()
    except Exception as error:
        logger.debug("Listing keys raised at %s (%s)", format_path(path), type(error).__name__)
        state.changes.record(
            path,
            UNDEFINED,
            UNDEFINED,
            ChangeReason.UNSAFE_GETTER,
            error=normalize_exception(error),
        )
        return []


def _is_plain_object(value: Any) -> bool:
    """Instances with attribute storage. Callables, classes and modules are not data."""
    value_type = type(value)
    if callable(value) or issubclass(value_type, (type, types.ModuleType)):
        return False
    return get_instance_dict(value) is not None or _has_slots(value_type)


def _has_slots(cls: type) -> bool:
    return any("__slots__" in klass.__dict__ for klass in cls.__mro__ if klass is not object)


def get_object_keys(value: Any) -> List[str]:
    """Public attribute names of an instance.

    Order: instance ``__dict__`` keys, then set ``__slots__`` members, then
    ``property`` names from base classes to the concrete class.
    Names starting with an underscore are skipped.
    """
    names: List[str] = []
    instance_dict = get_instance_dict(value)
    if instance_dict is not None:
        names.extend(key for key in instance_dict if isinstance(key, str))

    mro = [klass for klass in reversed(type(value).__mro__) if klass is not object]
    for klass in mro:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            member = klass.__dict__.get(slot)
            if isinstance(member, types.MemberDescriptorType) and _is_slot_set(member, value):
                names.append(slot)

    for klass in mro:
        names.extend(name for name, attr in klass.__dict__.items() if isinstance(attr, property))

    seen = set()
    public = []
    for name in names:
        if name.startswith("_") or name in seen:
            continue
        seen.add(name)
        public.append(name)
    return public


def _is_slot_set(member: types.MemberDescriptorType, value: Any) -> bool:
    try:
        member.__get__(value, type(value))
    except AttributeError:
        return False
    return True
