"""
Temporary file/directory allocation and sweeping.

Every resource handed out by TempResourceTracker is recorded in its registry
and removed exactly once by cleanup_all(), release(), or the exit hooks.
"""

from __future__ import annotations

import logging
import os
import secrets
import signal
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from .config import TrackerConfig, load_config
from .errors import AllocationError, CleanupError
from .file_ops import format_bytes, get_path_size, remove_path
from .registry import PathKind, TempRegistry, TrackedPath

FILE_MODE = 0o600
DIR_MODE = 0o700
DEFERRED_SIGNALS = {signal.SIGINT, signal.SIGTERM}


@contextmanager
def _deferred_signals() -> Iterator[None]:
    """Hold SIGINT/SIGTERM until the block ends so a handler never sees half-done state."""
    if not hasattr(signal, "pthread_sigmask"):
        yield
        return
    previous = signal.pthread_sigmask(signal.SIG_BLOCK, DEFERRED_SIGNALS)
    try:
        yield
    finally:
        signal.pthread_sigmask(signal.SIG_SETMASK, previous)


@dataclass
class CleanupReport:
    """Outcome of one sweep."""

    removed: list[TrackedPath] = field(default_factory=list)
    errors: list[CleanupError] = field(default_factory=list)
    bytes_freed: int = 0

    @property
    def ok(self) -> bool:
        """Return True when every swept path was removed."""
        return not self.errors


def _check_name_component(value: str, label: str) -> None:
    if os.sep in value or (os.altsep and os.altsep in value):
        raise ValueError(f"{label} must not contain a path separator: {value!r}")


def _create_file(path: Path) -> None:
    fd = os.open(path, os.O_RDWR | os.O_CREAT | os.O_EXCL, FILE_MODE)
    os.close(fd)


def _create_dir(path: Path) -> None:
    path.mkdir(mode=DIR_MODE)


class TempResourceTracker:
    """Issues uniquely-named temp resources and guarantees their removal."""

    def __init__(self, config: Optional[TrackerConfig] = None, registry: Optional[TempRegistry] = None):
        self.config = config if config is not None else load_config()
        self.registry = registry if registry is not None else TempRegistry()

    def __enter__(self) -> "TempResourceTracker":
        return self

    def __exit__(self, exception_type, exception_value, traceback) -> None:
        self.cleanup_all()

    def __len__(self) -> int:
        return len(self.registry)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, os.PathLike)) and Path(path) in self.registry

    @property
    def tracked_paths(self) -> list[Path]:
        """Return tracked paths in allocation order."""
        return [entry.path for entry in self.registry]

    def allocate_temp_file(self, prefix: Optional[str] = None, suffix: str = "") -> Path:
        """Create and register an empty temp file.

        Raises:
            AllocationError: If the temp root is unusable or no free name was found
            ValueError: If prefix or suffix contains a path separator
        """
        return self._allocate(PathKind.FILE, prefix, suffix, _create_file)

    def allocate_temp_dir(self, prefix: Optional[str] = None) -> Path:
        """Create and register an empty temp directory.

        Raises:
            AllocationError: If the temp root is unusable or no free name was found
            ValueError: If prefix contains a path separator
        """
        return self._allocate(PathKind.DIRECTORY, prefix, "", _create_dir)

    def _usable_temp_root(self) -> Path:
        root = self.config.temp_root
        if not root.is_dir():
            raise AllocationError(f"Temp directory {root} does not exist or is not a directory")
        if not os.access(root, os.W_OK | os.X_OK):
            raise AllocationError(f"Temp directory {root} is not writable")
        return root

    def _candidate_name(self, prefix: Optional[str], suffix: str) -> str:
        parts = [self.config.name_prefix]
        if prefix:
            parts.append(prefix)
        parts.append(secrets.token_hex(self.config.token_bytes))
        return ".".join(parts) + suffix

    def _allocate(
        self,
        kind: PathKind,
        prefix: Optional[str],
        suffix: str,
        create: Callable[[Path], None],
    ) -> Path:
        if prefix:
            _check_name_component(prefix, "prefix")
        if suffix:
            _check_name_component(suffix, "suffix")
        root = self._usable_temp_root()

        for attempt in range(1, self.config.max_attempts + 1):
            candidate = root / self._candidate_name(prefix, suffix)
            with _deferred_signals():
                try:
                    create(candidate)
                except FileExistsError:
                    logging.debug("Temp name collision on %s (attempt %d)", candidate, attempt)
                    continue
                except OSError as exc:
                    raise AllocationError(
                        f"Cannot create temporary {kind.value} in {root}: {exc}"
                    ) from exc
                self.registry.add(TrackedPath(path=candidate, kind=kind))
            logging.debug("Allocated temporary %s %s", kind.value, candidate)
            return candidate

        raise AllocationError(
            f"No free temporary name in {root} after {self.config.max_attempts} attempt(s)"
        )

    def _sweep_entry(self, entry: TrackedPath, report: CleanupReport) -> None:
        try:
            size = get_path_size(entry.path)
        except OSError as exc:
            logging.warning("Cannot size temporary %s %s: %s", entry.kind.value, entry.path, exc)
            size = 0
        try:
            removed = remove_path(entry.path, is_dir=entry.is_dir)
        except OSError as exc:
            logging.exception("Failed to remove temporary %s %s", entry.kind.value, entry.path)
            report.errors.append(CleanupError(entry.path, exc))
            return
        if removed:
            report.bytes_freed += size
        else:
            logging.debug("Temporary %s %s was already gone", entry.kind.value, entry.path)
        report.removed.append(entry)

    def cleanup_all(self) -> CleanupReport:
        """Remove every tracked resource and empty the registry.

        Failures are logged and collected in the report; the sweep always
        continues with the remaining entries.
        """
        report = CleanupReport()
        while True:
            # An entry is claimed and removed in one step; a signal handler
            # sweeping re-entrantly only ever sees whole entries.
            with _deferred_signals():
                entry = self.registry.pop_oldest()
                if entry is None:
                    break
                self._sweep_entry(entry, report)

        if report.removed or report.errors:
            logging.info(
                "Removed %d temporary resource(s), freed %s",
                len(report.removed),
                format_bytes(report.bytes_freed),
            )
        if report.errors:
            logging.warning("%d temporary resource(s) could not be removed", len(report.errors))
        return report

    def release(self, path: Union[str, os.PathLike]) -> bool:
        """Remove one tracked resource ahead of the final sweep.

        Returns:
            False if path is not tracked by this tracker

        Raises:
            CleanupError: If removal fails; the path stays tracked for the final sweep
        """
        with _deferred_signals():
            entry = self.registry.discard(Path(path))
            if entry is None:
                return False
            try:
                remove_path(entry.path, is_dir=entry.is_dir)
            except OSError as exc:
                self.registry.add(entry)
                raise CleanupError(entry.path, exc) from exc
        logging.debug("Released temporary %s %s", entry.kind.value, entry.path)
        return True
