"""safe_json_value: convert any value to JSON-safe data with an audit trail."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("safe-json-value")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from safe_json_value.api import convert, safe_dumps, ConversionResult
from safe_json_value.contracts import ChangeEntry, ErrorInfo, UNDEFINED
from safe_json_value.codes import ChangeReason
from safe_json_value._internal.exceptions import normalize_exception

__all__ = [
    "__version__",
    "convert",
    "safe_dumps",
    "ConversionResult",
    "ChangeEntry",
    "ChangeReason",
    "ErrorInfo",
    "UNDEFINED",
    "normalize_exception",
]
