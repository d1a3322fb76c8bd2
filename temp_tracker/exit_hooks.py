"""
Process-exit hooks that sweep a tracker on normal exit and on SIGINT/SIGTERM.
"""

from __future__ import annotations

import atexit
import logging
import signal
from typing import Iterable, Optional

from .tracker import CleanupReport, TempResourceTracker

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ExitHooks:
    """Installs atexit and signal handlers bound to one TempResourceTracker."""

    def __init__(self, tracker: TempResourceTracker, signals: Iterable[int] = HANDLED_SIGNALS):
        self.tracker = tracker
        self.signals = tuple(signals)
        self.installed = False
        self.fired = False
        self._previous_handlers: dict[int, object] = {}

    def install(self) -> None:
        """Register the hooks; calling it again is a no-op."""
        if self.installed:
            return
        atexit.register(self._on_exit)
        for signum in self.signals:
            try:
                self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)
            except ValueError:
                logging.warning(
                    "Cannot install %s handler outside the main thread; relying on atexit",
                    signal.Signals(signum).name,
                )
        self.installed = True

    def uninstall(self) -> None:
        """Restore previous signal handlers and drop the atexit callback."""
        if not self.installed:
            return
        atexit.unregister(self._on_exit)
        for signum, previous in self._previous_handlers.items():
            try:
                signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
            except ValueError:
                logging.warning(
                    "Cannot restore %s handler outside the main thread",
                    signal.Signals(signum).name,
                )
        self._previous_handlers.clear()
        self.installed = False

    def sweep_once(self) -> Optional[CleanupReport]:
        """Run the hook sweep unless a hook already ran it."""
        if self.fired:
            return None
        self.fired = True
        return self.tracker.cleanup_all()

    def _on_exit(self) -> None:
        self.sweep_once()

    def _handle_signal(self, signum, frame):
        """Sweep tracked resources, chain to the handler installed before us, and
        terminate with the conventional 128+N status."""
        logging.warning(
            "Received %s, removing %d temporary resource(s)",
            signal.Signals(signum).name,
            len(self.tracker),
        )
        self.fired = True
        # A signal arriving mid-sweep lands here again and finishes the remaining entries.
        self.tracker.cleanup_all()
        previous = self._previous_handlers.get(signum)
        # Python's own SIGINT handler would turn the exit into KeyboardInterrupt.
        if callable(previous) and previous is not signal.default_int_handler:
            previous(signum, frame)
        raise SystemExit(128 + signum)
