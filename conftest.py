"""Pytest configuration and shared fixtures for the temp resource tracker."""

# pylint: disable=wrong-import-position

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from temp_tracker import runtime
from temp_tracker.config import TrackerConfig
from temp_tracker.tracker import TempResourceTracker


@pytest.fixture(autouse=True)
def isolated_env_file(tmp_path, monkeypatch):
    """Auto-use fixture that points MOLE_ENV_FILE at an empty temporary .env file.

    Keeps a developer's ~/.env from leaking MOLE_* overrides into tests and
    clears any overrides already present in the environment.
    """
    env_file = tmp_path / ".env"
    env_file.write_text("")
    monkeypatch.setenv("MOLE_ENV_FILE", str(env_file))
    for name in ("MOLE_TMPDIR", "MOLE_TEMP_PREFIX", "MOLE_TEMP_MAX_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)
    yield str(env_file)


@pytest.fixture(autouse=True)
def reset_default_tracker():
    """Drop the process-wide tracker (and its hooks) after every test."""
    yield
    runtime.reset_default_tracker()


@pytest.fixture(name="temp_root")
def fixture_temp_root(tmp_path):
    """Provide an empty directory used as the tracker's temp root."""
    root = tmp_path / "tmp"
    root.mkdir()
    return root


@pytest.fixture(name="tracker_config")
def fixture_tracker_config(temp_root):
    return TrackerConfig(temp_root=temp_root)


@pytest.fixture(name="tracker")
def fixture_tracker(tracker_config):
    """Tracker bound to the temporary root; swept after the test."""
    tracker = TempResourceTracker(tracker_config)
    yield tracker
    tracker.cleanup_all()
