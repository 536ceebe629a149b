"""Append-only change log shared by every step of one conversion."""

from typing import Any, Iterator, List, Optional, Tuple

from safe_json_value.codes import ChangeReason
from safe_json_value.contracts import ChangeEntry, ErrorInfo

# Keys/indices from the root to a value. () is the root.
Path = Tuple[Any, ...]

ROOT_PATH: Path = ()


def child_path(path: Path, key: Any) -> Path:
    """Path of property `key` under the value at `path`."""
    return path + (key,)


def format_path(path: Path) -> str:
    """Render a path for log messages, e.g. ``$.prop[0]``."""
    parts = ["$"]
    for key in path:
        if isinstance(key, int) and not isinstance(key, bool):
            parts.append(f"[{key}]")
        elif isinstance(key, str):
            parts.append(f".{key}")
        else:
            parts.append(f"[{type(key).__name__}]")
    return "".join(parts)


class ChangeLog:
    """Ordered record of ChangeEntry, in traversal order.

    Owned by one top-level conversion and passed by reference to every
    nested step. Entries can only be appended.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: List[ChangeEntry] = []

    def record(
        self,
        path: Path,
        old_value: Any,
        new_value: Any,
        reason: ChangeReason,
        error: Optional[ErrorInfo] = None,
    ) -> ChangeEntry:
        entry = ChangeEntry(
            path=path,
            old_value=old_value,
            new_value=new_value,
            reason=reason,
            error=error,
        )
        self._entries.append(entry)
        return entry

    def entries(self) -> List[ChangeEntry]:
        """Snapshot of the entries recorded so far."""
        return list(self._entries)

    def reasons(self) -> List[ChangeReason]:
        return [entry.reason for entry in self._entries]

    def __iter__(self) -> Iterator[ChangeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> ChangeEntry:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"ChangeLog({len(self._entries)} entries)"


