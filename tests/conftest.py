"""Shared pytest fixtures for test files."""

from __future__ import annotations

import os
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
CHILD_TIMEOUT_SECONDS = 30


@pytest.fixture(name="run_child")
def fixture_run_child(tmp_path):
    """Run a Python snippet in a fresh interpreter that can import temp_tracker.

    Returns a callable taking the script source and extra argv, returning the
    CompletedProcess with text output.
    """

    def _run(source: str, *args: str, extra_env: dict[str, str] | None = None):
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
        env["MOLE_ENV_FILE"] = str(tmp_path / "child.env")
        if extra_env:
            env.update(extra_env)
        return subprocess.run(
            [sys.executable, "-c", textwrap.dedent(source), *args],
            capture_output=True,
            text=True,
            env=env,
            cwd=tmp_path,
            timeout=CHILD_TIMEOUT_SECONDS,
            check=False,
        )

    return _run
