"""
Configuration and path resolution for temp_tracker.

Values come from the process environment, optionally seeded from a .env file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_NAME_PREFIX = "mole"
DEFAULT_MAX_ATTEMPTS = 100
TOKEN_BYTES = 6


@dataclass(frozen=True)
class TrackerConfig:
    """Settings used by TempResourceTracker when naming and placing resources."""

    temp_root: Path
    name_prefix: str = DEFAULT_NAME_PREFIX
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    token_bytes: int = TOKEN_BYTES


def _resolve_env_path(env_path: Optional[str] = None) -> str:
    """
    Determine which .env file should seed the environment.

    Priority order:
      1. Explicit parameter
      2. MOLE_ENV_FILE environment variable
      3. ~/.env
    """
    if env_path:
        return env_path
    mole_env_file = os.environ.get("MOLE_ENV_FILE")
    if mole_env_file:
        return mole_env_file
    return str(Path.home() / ".env")


def determine_temp_root() -> Path:
    """Return the directory new temp resources are created in."""
    override = os.environ.get("MOLE_TMPDIR")
    if override:
        return Path(override).expanduser()
    return Path(tempfile.gettempdir())


def _load_name_prefix() -> str:
    prefix = os.environ.get("MOLE_TEMP_PREFIX", "").strip() or DEFAULT_NAME_PREFIX
    if os.sep in prefix or (os.altsep and os.altsep in prefix):
        raise ConfigurationError(f"MOLE_TEMP_PREFIX must not contain a path separator: {prefix!r}")
    return prefix


def _load_max_attempts() -> int:
    raw = os.environ.get("MOLE_TEMP_MAX_ATTEMPTS")
    if raw is None or not raw.strip():
        return DEFAULT_MAX_ATTEMPTS
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"MOLE_TEMP_MAX_ATTEMPTS must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigurationError(f"MOLE_TEMP_MAX_ATTEMPTS must be >= 1, got {value}")
    return value


def load_config(env_path: Optional[str] = None) -> TrackerConfig:
    """
    Build a TrackerConfig from the environment.

    Args:
        env_path: Optional .env override (defaults to MOLE_ENV_FILE, then ~/.env)

    Returns:
        TrackerConfig with the resolved temp root, name prefix and retry budget

    Raises:
        ConfigurationError: If an environment value is malformed
    """
    resolved_path = _resolve_env_path(env_path)
    if load_dotenv(resolved_path):
        logging.debug("Loaded environment overrides from %s", resolved_path)

    return TrackerConfig(
        temp_root=determine_temp_root(),
        name_prefix=_load_name_prefix(),
        max_attempts=_load_max_attempts(),
    )
