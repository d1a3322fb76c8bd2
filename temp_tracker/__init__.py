"""
Temporary resource tracker package.

Issue uniquely-named temp files and directories and remove them exactly once,
including when the process is interrupted.
"""

from . import config, errors, exit_hooks, file_ops, registry, runtime, stale, tracker
from .config import TrackerConfig, load_config
from .errors import AllocationError, CleanupError, ConfigurationError, TempTrackerError
from .exit_hooks import ExitHooks
from .registry import PathKind, TempRegistry, TrackedPath
from .runtime import (
    allocate_temp_dir,
    allocate_temp_file,
    cleanup_all,
    get_default_tracker,
    reset_default_tracker,
    tracked_session,
)
from .tracker import CleanupReport, TempResourceTracker

__all__ = [
    "AllocationError",
    "CleanupError",
    "CleanupReport",
    "ConfigurationError",
    "ExitHooks",
    "PathKind",
    "TempRegistry",
    "TempResourceTracker",
    "TempTrackerError",
    "TrackedPath",
    "TrackerConfig",
    "allocate_temp_dir",
    "allocate_temp_file",
    "cleanup_all",
    "config",
    "errors",
    "exit_hooks",
    "file_ops",
    "get_default_tracker",
    "load_config",
    "registry",
    "reset_default_tracker",
    "runtime",
    "stale",
    "tracked_session",
    "tracker",
]
