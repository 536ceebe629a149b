"""Conversion limits.

Defaults can be overridden per call through convert() keyword arguments.
"""

from pydantic import BaseModel, ConfigDict, Field

# Upper bound on the estimated length of the serialized output, in characters.
DEFAULT_MAX_SIZE = 10**7

# Deepest nesting level kept in the output. The root is level 0.
# Keeps the walker well below the interpreter recursion limit.
DEFAULT_MAX_DEPTH = 100


class ConvertOptions(BaseModel):
    """Validated options for one conversion."""
    max_size: int = Field(default=DEFAULT_MAX_SIZE, gt=0)
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, gt=0)

    model_config = ConfigDict(extra="forbid", frozen=True)
