"""
Exception hierarchy for temp_tracker.

Allocation failures surface to the caller immediately; cleanup failures are
collected per path so a sweep can keep going.
"""

from __future__ import annotations

from pathlib import Path


class TempTrackerError(RuntimeError):
    """Base class for temp_tracker errors."""


class ConfigurationError(TempTrackerError):
    """Raised when tracker configuration values are invalid."""


class AllocationError(TempTrackerError):
    """Raised when a temporary file or directory cannot be created."""


class CleanupError(TempTrackerError):
    """Raised (or collected) when a tracked path cannot be removed."""

    def __init__(self, path: Path, cause: BaseException):
        super().__init__(f"Failed to remove {path}: {cause}")
        self.path = path
        self.cause = cause
