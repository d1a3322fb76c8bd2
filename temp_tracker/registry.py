"""
Ordered, lock-guarded registry of tracked temp resources.

The lock is re-entrant: signal handlers run on the main thread, so a sweep
triggered by SIGINT may need the lock while an interrupted add() still holds it.
Entries leave the registry one at a time through pop_oldest(), a single
OrderedDict.popitem() call, so two sweeps can never claim the same entry.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator


class PathKind(Enum):
    """Kind of filesystem entry a TrackedPath refers to."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class TrackedPath:
    """A temp resource created by the tracker and awaiting removal."""

    path: Path
    kind: PathKind
    created_at: float = field(default_factory=time.time)

    @property
    def is_dir(self) -> bool:
        """Return True when the resource is a directory."""
        return self.kind is PathKind.DIRECTORY


class TempRegistry:
    """Insertion-ordered set of TrackedPath entries, unique by path."""

    def __init__(self) -> None:
        self._entries: OrderedDict[Path, TrackedPath] = OrderedDict()
        self._lock = threading.RLock()

    def add(self, entry: TrackedPath) -> None:
        """Register entry.

        Raises:
            ValueError: If the path is already registered
        """
        with self._lock:
            if entry.path in self._entries:
                raise ValueError(f"{entry.path} is already tracked")
            self._entries[entry.path] = entry

    def discard(self, path: Path) -> TrackedPath | None:
        """Unregister path and return its entry, or None if it was not tracked."""
        with self._lock:
            return self._entries.pop(path, None)

    def pop_oldest(self) -> TrackedPath | None:
        """Remove and return the earliest registered entry, or None when empty."""
        with self._lock:
            try:
                _, entry = self._entries.popitem(last=False)
            except KeyError:
                return None
            return entry

    def snapshot(self) -> list[TrackedPath]:
        with self._lock:
            return list(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._entries

    def __iter__(self) -> Iterator[TrackedPath]:
        return iter(self.snapshot())
