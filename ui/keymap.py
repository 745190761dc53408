#!/usr/bin/env python3
"""
ui/keymap.py
============
Translate one key press into the next :class:`~ipc.records.CommandState`.

Layout (``y`` grows downwards, like the map)::

    q w e        ↖ ↑ ↗
    a s d        ← ■ →
    z x c        ↙ ↓ ↘

``s`` / space brake, ``r`` resets the drone, ``Q`` quits.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Dict, Tuple

from ipc.records import CommandState
from sim.params import SimParams

_INV_SQRT2 = 1.0 / math.sqrt(2.0)

# key → unit force direction
_DIRECTIONS: Dict[str, Tuple[float, float]] = {
    "q": (-_INV_SQRT2, -_INV_SQRT2),
    "w": (0.0, -1.0),
    "e": (_INV_SQRT2, -_INV_SQRT2),
    "a": (-1.0, 0.0),
    "d": (1.0, 0.0),
    "z": (-_INV_SQRT2, _INV_SQRT2),
    "x": (0.0, 1.0),
    "c": (_INV_SQRT2, _INV_SQRT2),
}

BRAKE_KEYS = ("s", " ")
RESET_KEY = "r"
QUIT_KEY = "Q"


def clamp(v: float, limit: float) -> float:
    """Clamp *v* to ``[-limit, +limit]``."""
    return max(-limit, min(limit, v))


def apply_key(cmd: CommandState, key: str, params: SimParams) -> CommandState:
    """Return the command that follows *cmd* after pressing *key*.

    ``brake`` and ``reset`` only stay set for the key press that set them.
    Unknown keys just update ``last_key``.
    """
    fx, fy = cmd.fx, cmd.fy
    brake = reset = 0
    quit_flag = cmd.quit

    if key in _DIRECTIONS:
        ux, uy = _DIRECTIONS[key]
        fx += params.force_step * ux
        fy += params.force_step * uy
    elif key in BRAKE_KEYS:
        fx = fy = 0.0
        brake = 1
    elif key == RESET_KEY:
        fx = fy = 0.0
        reset = 1
    elif key == QUIT_KEY:
        quit_flag = 1

    return replace(
        cmd,
        fx=clamp(fx, params.max_force),
        fy=clamp(fy, params.max_force),
        brake=brake,
        reset=reset,
        quit=quit_flag,
        last_key=ord(key[0]) if key else 0,
    )
