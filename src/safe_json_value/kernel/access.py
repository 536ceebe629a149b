"""Safe property reads (pure logic apart from change log appends).

``parent[key]`` may be a ``property`` getter, a ``__getattr__`` hook or an
object whose ``__getattribute__`` raises. A trapped object cannot be detected
except when it raises, so every read goes through a failure boundary.
"""

import logging
import types
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional

from safe_json_value.codes import ChangeReason
from safe_json_value.contracts import UNDEFINED
from safe_json_value.kernel.change_log import ChangeLog, Path, format_path
from safe_json_value._internal.exceptions import normalize_exception

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyDescriptor:
    """Per-property attributes of an object attribute.

    Accessors carry get/set, stored values carry value.
    writable/configurable are None when they do not apply.
    """
    value: Any = UNDEFINED
    get: Optional[Callable] = None
    set: Optional[Callable] = None
    writable: Optional[bool] = None
    configurable: Optional[bool] = None

    @property
    def is_accessor(self) -> bool:
        return self.get is not None or self.set is not None


class SafeProp(NamedTuple):
    """Result of an audited read. safe is False when the read raised."""
    prop: Any
    safe: bool


def is_item_container(parent: Any) -> bool:
    """Mappings, lists and tuples are read by subscription, everything else by attribute."""
    return issubclass(type(parent), (Mapping, list, tuple))


def read_prop(parent: Any, key: Any, attribute: bool = False) -> Any:
    if attribute or not is_item_container(parent):
        return getattr(parent, key)
    return parent[key]


def safe_get_change_prop(parent: Any, key: Any, attribute: bool = False) -> Any:
    """Same as safe_get_prop() but without any change log.

    Returns UNDEFINED when the read raises.
    """
    try:
        return read_prop(parent, key, attribute=attribute)
    except Exception:
        return UNDEFINED


def safe_get_prop(parent: Any, key: Any, changes: ChangeLog, path: Path) -> SafeProp:
    """Read `parent[key]`, recording descriptor hazards at `path`.

    If the read raises, an ``unsafeGetter`` change is recorded and the
    property must be omitted by the caller.
    """
    try:
        prop = _get_prop(parent, key, changes, path)
        return SafeProp(prop, True)
    except Exception as error:
        logger.debug("Property read raised at %s (%s)", format_path(path), type(error).__name__)
        changes.record(
            path,
            UNDEFINED,
            UNDEFINED,
            ChangeReason.UNSAFE_GETTER,
            error=normalize_exception(error),
        )
        return SafeProp(UNDEFINED, False)


def _get_prop(parent: Any, key: Any, changes: ChangeLog, path: Path) -> Any:
    # The descriptor is retrieved first in case a getter modifies it
    descriptor = get_prop_descriptor(parent, key)
    prop = read_prop(parent, key)
    if descriptor is not None:
        _add_getter_change(changes, path, prop, descriptor)
        _add_descriptor_change(changes, path, prop, descriptor)
    return prop


def _add_getter_change(changes: ChangeLog, path: Path, prop: Any, descriptor: PropertyDescriptor) -> None:
    if descriptor.is_accessor:
        changes.record(path, descriptor.get, prop, ChangeReason.UNRESOLVED_GETTER)


def _add_descriptor_change(changes: ChangeLog, path: Path, prop: Any, descriptor: PropertyDescriptor) -> None:
    # The output is plain data: read-only attributes become ordinary dict items
    if descriptor.writable is False:
        changes.record(path, prop, prop, ChangeReason.DESCRIPTOR_NOT_WRITABLE)
    if descriptor.configurable is False:
        changes.record(path, prop, prop, ChangeReason.DESCRIPTOR_NOT_CONFIGURABLE)


def get_prop_descriptor(parent: Any, key: Any) -> Optional[PropertyDescriptor]:
    """Descriptor of `key` on `parent`, or None when there is none to report.

    Mapping items and sequence items have no attribute-level descriptor.
    May raise; callers treat that as a failed read.
    """
    if is_item_container(parent):
        return None
    return describe_attribute(parent, key)


def describe_attribute(obj: Any, name: str) -> Optional[PropertyDescriptor]:
    """Mirror Python attribute lookup without calling any getter.

    Data descriptors on the type win over the instance ``__dict__``, which
    wins over plain class attributes.
    """
    cls = type(obj)
    class_attr = lookup_type_attribute(cls, name)
    mutable = not is_frozen_instance(obj)

    if class_attr is not UNDEFINED and _is_data_descriptor(class_attr):
        if isinstance(class_attr, property):
            return PropertyDescriptor(
                get=class_attr.fget,
                set=class_attr.fset,
                writable=class_attr.fset is not None,
                configurable=class_attr.fdel is not None,
            )
        if isinstance(class_attr, types.MemberDescriptorType):
            # __slots__ member: a stored value
            return PropertyDescriptor(
                value=class_attr.__get__(obj, cls),
                writable=mutable,
                configurable=mutable,
            )
        descriptor_type = type(class_attr)
        return PropertyDescriptor(
            get=class_attr.__get__,
            set=getattr(class_attr, "__set__", None),
            writable=hasattr(descriptor_type, "__set__"),
            configurable=hasattr(descriptor_type, "__delete__"),
        )

    instance_dict = get_instance_dict(obj)
    if instance_dict is not None and name in instance_dict:
        return PropertyDescriptor(value=instance_dict[name], writable=mutable, configurable=mutable)

    if class_attr is not UNDEFINED:
        return PropertyDescriptor(value=class_attr, writable=mutable, configurable=mutable)

    return None


def lookup_type_attribute(cls: type, name: str) -> Any:
    """First `name` found in the MRO class dicts, without invoking descriptors."""
    for klass in cls.__mro__:
        namespace = klass.__dict__
        if name in namespace:
            return namespace[name]
    return UNDEFINED


def get_instance_dict(obj: Any) -> Optional[dict]:
    """The instance ``__dict__``, bypassing any ``__getattribute__`` override."""
    try:
        instance_dict = object.__getattribute__(obj, "__dict__")
    except Exception:
        # a __dict__ property on the class may raise anything
        return None
    return instance_dict if isinstance(instance_dict, dict) else None


def is_frozen_instance(obj: Any) -> bool:
    """Frozen dataclass instances reject both assignment and deletion."""
    params = lookup_type_attribute(type(obj), "__dataclass_params__")
    return params is not UNDEFINED and bool(getattr(params, "frozen", False))


def _is_data_descriptor(attr: Any) -> bool:
    attr_type = type(attr)
    return hasattr(attr_type, "__get__") and (
        hasattr(attr_type, "__set__") or hasattr(attr_type, "__delete__")
    )
