"""
Find and remove temp resources left behind by earlier runs.

A run killed with SIGKILL never gets to sweep; its resources keep the
"<name_prefix>." naming and can be recognised by age on the next run.
"""

from __future__ import annotations

import logging
import stat
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from .file_ops import get_path_size, remove_path
from .registry import PathKind
from .tracker import TempResourceTracker

DEFAULT_STALE_AGE_SECONDS = 24 * 60 * 60


@dataclass
class StaleResource:
    """A leftover temp resource found in the temp root."""

    path: Path
    kind: PathKind
    size_bytes: int
    mtime: float

    @property
    def iso_mtime(self) -> str:
        """Return modification time as ISO format string."""
        return datetime.fromtimestamp(self.mtime, tz=timezone.utc).isoformat()


def find_stale_resources(
    temp_root: Path,
    *,
    name_prefix: str,
    older_than_seconds: float,
    now: Optional[float] = None,
    exclude: Iterable[Path] = (),
) -> list[StaleResource]:
    """List direct children of temp_root named "<name_prefix>.*" and older than the cutoff.

    Raises:
        ValueError: If older_than_seconds is negative
    """
    if older_than_seconds < 0:
        raise ValueError("older_than_seconds must not be negative")
    cutoff = (time.time() if now is None else now) - older_than_seconds
    marker = f"{name_prefix}."
    skip = set(exclude)

    try:
        entries = sorted(temp_root.iterdir())
    except FileNotFoundError:
        logging.warning("Temp root %s does not exist; nothing to sweep", temp_root)
        return []
    except OSError as exc:
        logging.warning("Cannot list temp root %s: %s", temp_root, exc)
        return []

    stale: list[StaleResource] = []
    for entry in entries:
        if not entry.name.startswith(marker) or entry in skip:
            continue
        try:
            info = entry.lstat()
        except OSError:
            continue
        if info.st_mtime >= cutoff:
            continue
        kind = PathKind.DIRECTORY if stat.S_ISDIR(info.st_mode) else PathKind.FILE
        stale.append(
            StaleResource(
                path=entry,
                kind=kind,
                size_bytes=get_path_size(entry),
                mtime=info.st_mtime,
            )
        )
    return stale


def remove_stale_resources(
    resources: list[StaleResource], *, root: Path
) -> list[tuple[StaleResource, Exception]]:
    """Delete stale resources, returning list of (resource, error) for failures."""
    errors: list[tuple[StaleResource, Exception]] = []
    resolved_root = root.resolve()
    for resource in resources:
        try:
            resource.path.parent.resolve().relative_to(resolved_root)
        except ValueError:
            errors.append((resource, ValueError(f"{resource.path} escapes root {root}")))
            continue
        try:
            remove_path(resource.path, is_dir=resource.kind is PathKind.DIRECTORY)
        except OSError as exc:
            logging.exception("Failed to delete stale %s", resource.path)
            errors.append((resource, exc))
        else:
            logging.info("Deleted stale %s %s", resource.kind.value, resource.path)
    return errors


def sweep_stale(
    tracker: TempResourceTracker,
    older_than_seconds: float = DEFAULT_STALE_AGE_SECONDS,
) -> tuple[list[StaleResource], list[tuple[StaleResource, Exception]]]:
    """Remove leftovers of earlier runs from the tracker's temp root.

    Paths the tracker currently owns are never touched.
    """
    config = tracker.config
    resources = find_stale_resources(
        config.temp_root,
        name_prefix=config.name_prefix,
        older_than_seconds=older_than_seconds,
        exclude=tracker.tracked_paths,
    )
    errors = remove_stale_resources(resources, root=config.temp_root)
    return resources, errors
