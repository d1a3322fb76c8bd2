"""
Filesystem helpers shared by the tracker and the stale sweeper.

Stat wrappers never follow symlinks, so a link inside a temp directory is
sized and removed as the link itself.
"""

from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path
from typing import Optional

BYTES_PER_KIB = 1024
BYTES_PER_MIB = 1024**2
BYTES_PER_GIB = 1024**3
BYTES_PER_TIB = 1024**4


def format_bytes(
    num_bytes: Optional[int],
    decimal_places: int = 2,
    binary_units: bool = False,
) -> str:
    """
    Format byte count as human-readable string with appropriate units.

    Args:
        num_bytes: Number of bytes to format (None returns "n/a")
        decimal_places: Number of decimal places to display (default: 2)
        binary_units: Use binary units (KiB) vs decimal labels (KB) (default: False)

    Returns:
        Formatted string like "1.23 MB" or "456.78 KiB"

    Examples:
        >>> format_bytes(1536, decimal_places=1)
        '1.5 KB'
        >>> format_bytes(1024, binary_units=True)
        '1.00 KiB'
        >>> format_bytes(None)
        'n/a'
    """
    if num_bytes is None:
        return "n/a"

    if binary_units:
        units = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]
    else:
        units = ["B", "KB", "MB", "GB", "TB", "PB"]

    value = float(num_bytes)
    for unit in units[:-1]:
        if abs(value) < BYTES_PER_KIB:
            return f"{value:.{decimal_places}f} {unit}"
        value /= BYTES_PER_KIB
    return f"{value:.{decimal_places}f} {units[-1]}"


def get_file_size(path: Path) -> int:
    """Return the size in bytes of a single filesystem entry (0 if it is gone)."""
    try:
        return path.lstat().st_size
    except FileNotFoundError:
        return 0


def get_file_mtime(path: Path) -> Optional[float]:
    """Return the modification time of path, or None if it no longer exists."""
    try:
        return path.lstat().st_mtime
    except FileNotFoundError:
        return None


def get_path_size(path: Path) -> int:
    """Return the total size of a file or directory tree, skipping unreadable entries."""
    try:
        info = path.lstat()
    except FileNotFoundError:
        return 0
    if not stat.S_ISDIR(info.st_mode):
        return info.st_size

    total = 0
    for dirpath, dirnames, filenames in os.walk(path):
        for name in filenames + dirnames:
            try:
                entry = os.lstat(os.path.join(dirpath, name))
            except OSError:
                continue
            if not stat.S_ISDIR(entry.st_mode):
                total += entry.st_size
    return total


def remove_path(path: Path, *, is_dir: bool) -> bool:
    """
    Remove a file or a directory tree.

    Returns:
        True if something was removed, False if the path was already gone

    Raises:
        OSError: If the entry exists but could not be removed
    """
    try:
        if is_dir and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except FileNotFoundError:
        return False
    return True
