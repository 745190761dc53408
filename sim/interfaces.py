#!/usr/bin/env python3
"""
sim/interfaces.py
=================
Collaborators the coordinator talks to but does not own: the renderer
(start menu, help screen, map) and a fire-and-forget event notifier.

The pygame implementations live in :mod:`ui`; the headless ones here are
used for tests and ``--headless`` runs.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Protocol

from sim.world import WorldSnapshot

log = logging.getLogger(__name__)


class MenuChoice(Enum):
    START = 0
    INSTRUCTIONS = 1
    QUIT = 2


class Renderer(Protocol):
    """Read-only consumer of world snapshots."""

    def show_menu(self) -> MenuChoice: ...

    def show_instructions(self) -> None: ...

    def draw(self, snapshot: WorldSnapshot) -> None: ...

    def close(self) -> None: ...


class Notifier(Protocol):
    """Fire-and-forget sink for gameplay events (e.g. a sound on a hit)."""

    def notify(self, event: str, **details: Any) -> None: ...


class HeadlessRenderer:
    """Renderer that starts immediately and keeps the last snapshot."""

    def __init__(self) -> None:
        self.last_snapshot = None
        self.frames = 0

    def show_menu(self) -> MenuChoice:
        return MenuChoice.START

    def show_instructions(self) -> None:
        pass

    def draw(self, snapshot: WorldSnapshot) -> None:
        self.last_snapshot = snapshot
        self.frames += 1

    def close(self) -> None:
        pass


class LogNotifier:
    """Notifier that only writes the event to the log."""

    def notify(self, event: str, **details: Any) -> None:
        log.info("event=%s %s", event, " ".join(f"{k}={v}" for k, v in details.items()))
