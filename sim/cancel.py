#!/usr/bin/env python3
"""
sim/cancel.py
=============
Cooperative cancellation shared by every process loop.

A :class:`CancellationToken` is created by the process entry point, passed
explicitly into its loop, and flipped from a signal handler.  Loops check
it once per iteration; in-flight framed reads/writes are never aborted.
"""

from __future__ import annotations

import logging
import signal
import threading
from typing import Iterable, Optional

log = logging.getLogger(__name__)


class CancellationToken:
    """One-way flag: starts running, can only be cancelled."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "") -> None:
        if not self._event.is_set():
            self.reason = reason
            log.info("cancel requested reason=%s", reason or "-")
        self._event.set()

    def wait(self, timeout: Optional[float]) -> bool:
        """Sleep up to *timeout* seconds; return early (True) once cancelled."""
        return self._event.wait(timeout)


def install_signal_handlers(
    token: CancellationToken,
    signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM),
) -> None:
    """Route *signals* to ``token.cancel`` instead of the default handlers."""

    def _handler(signum, _frame) -> None:
        token.cancel(signal.Signals(signum).name)

    for signum in signals:
        signal.signal(signum, _handler)
