"""
Process-wide default tracker and entry-point helpers.

The default tracker is created on first use and has its exit hooks installed
exactly once; code that wants its own lifetime can build a TempResourceTracker
directly and wrap it in tracked_session().
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import load_config
from .exit_hooks import ExitHooks
from .tracker import CleanupReport, TempResourceTracker

_default_tracker: Optional[TempResourceTracker] = None
_default_hooks: Optional[ExitHooks] = None
_default_lock = threading.Lock()


def get_default_tracker() -> TempResourceTracker:
    """Return the process-wide tracker, creating it and its exit hooks on first use."""
    global _default_tracker, _default_hooks  # pylint: disable=global-statement
    with _default_lock:
        if _default_tracker is None:
            tracker = TempResourceTracker(load_config())
            hooks = ExitHooks(tracker)
            hooks.install()
            _default_tracker, _default_hooks = tracker, hooks
        return _default_tracker


def reset_default_tracker() -> Optional[CleanupReport]:
    """Sweep the default tracker and forget it, uninstalling its hooks."""
    global _default_tracker, _default_hooks  # pylint: disable=global-statement
    with _default_lock:
        tracker, hooks = _default_tracker, _default_hooks
        _default_tracker = _default_hooks = None
    if tracker is None:
        return None
    report = tracker.cleanup_all()
    if hooks is not None:
        hooks.uninstall()
    return report


def allocate_temp_file(prefix: Optional[str] = None, suffix: str = "") -> Path:
    return get_default_tracker().allocate_temp_file(prefix, suffix)


def allocate_temp_dir(prefix: Optional[str] = None) -> Path:
    return get_default_tracker().allocate_temp_dir(prefix)


def cleanup_all() -> CleanupReport:
    """Sweep the default tracker (no-op when it was never created)."""
    tracker = _default_tracker
    if tracker is None:
        return CleanupReport()
    return tracker.cleanup_all()


@contextmanager
def tracked_session(tracker: Optional[TempResourceTracker] = None) -> Iterator[TempResourceTracker]:
    """Scope a tracker to a block, sweeping on every exit path.

    Without an explicit tracker the process default is used; its hooks are
    already installed. An explicit tracker gets its own hooks for the duration.
    """
    owned_hooks: Optional[ExitHooks] = None
    if tracker is None:
        tracker = get_default_tracker()
    else:
        owned_hooks = ExitHooks(tracker)
        owned_hooks.install()
    try:
        yield tracker
    finally:
        tracker.cleanup_all()
        if owned_hooks is not None:
            owned_hooks.uninstall()
