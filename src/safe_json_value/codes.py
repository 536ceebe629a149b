"""Change reason constants for safe_json_value.convert().

These constants prevent stringly-typed reasons and give downstream tooling
a stable vocabulary to pattern-match on.
"""

from enum import Enum


class ChangeReason(str, Enum):
    """Why a value in the output differs from the input."""

    # Descriptors (property reads)
    UNRESOLVED_GETTER = "unresolvedGetter"
    DESCRIPTOR_NOT_WRITABLE = "descriptorNotWritable"
    DESCRIPTOR_NOT_CONFIGURABLE = "descriptorNotConfigurable"
    UNSAFE_GETTER = "unsafeGetter"

    # Custom serialization hooks
    TO_JSON = "toJSON"
    UNSAFE_TO_JSON = "unsafeToJSON"

    # Validation (walker)
    INVALID_TYPE = "invalidType"
    INVALID_KEY = "invalidKey"
    UNRESOLVED_CLASS = "unresolvedClass"
    UNSAFE_CYCLE = "unsafeCycle"
    UNSAFE_SIZE = "unsafeSize"
    UNSAFE_DEPTH = "unsafeDepth"
