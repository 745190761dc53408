#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

These are the built-in defaults used when the parameter file is missing
or a key is absent (see :mod:`sim.params`).  This module is a thin,
import-safe leaf: it never imports from other project packages.
"""

import os

# ── World geometry ───────────────────────────────────────────────────────────
DEFAULT_WORLD_WIDTH: float = 50.0
DEFAULT_WORLD_HEIGHT: float = 50.0

# ── Drone dynamics ───────────────────────────────────────────────────────────
DEFAULT_MASS: float = 1.0
DEFAULT_DAMPING: float = 1.0
DEFAULT_DT: float = 0.05
DEFAULT_TICK_INTERVAL: float = 1.0 / 30.0

# ── User command forces ──────────────────────────────────────────────────────
DEFAULT_FORCE_STEP: float = 1.5
DEFAULT_MAX_FORCE: float = 15.0

# ── Potential-field repulsion ────────────────────────────────────────────────
DEFAULT_RHO: float = 5.0
DEFAULT_ETA: float = 1.0

# ── Environment population ───────────────────────────────────────────────────
OBSTACLE_CAPACITY: int = 64
TARGET_CAPACITY: int = 32
DEFAULT_NUM_OBSTACLES: int = 20
DEFAULT_NUM_TARGETS: int = 20
DEFAULT_OBSTACLE_RADIUS: float = 1.0
DEFAULT_TARGET_RADIUS: float = 1.0
DEFAULT_HIT_RADIUS: float = 1.0
DEFAULT_OBSTACLE_SPAWN_INTERVAL: float = 10.0
DEFAULT_TARGET_SPAWN_INTERVAL: float = 15.0
DEFAULT_OBSTACLE_RESPAWN_COUNT: int = 4
DEFAULT_TARGET_RESPAWN_COUNT: int = 2

# ── Files ────────────────────────────────────────────────────────────────────
PROJECT_ROOT: str = os.path.abspath(os.path.dirname(__file__))
CONFIG_ENV_VAR: str = "DRONE_SIM_CONFIG"
DEFAULT_CONFIG_REL_PATH: str = "conf/drone_parameters.conf"
LOG_DIR_REL_PATH: str = "log"

# ── UI defaults ──────────────────────────────────────────────────────────────
WINDOW_WIDTH: int = 900
WINDOW_HEIGHT: int = 700
PAD_WINDOW_WIDTH: int = 420
PAD_WINDOW_HEIGHT: int = 360
TARGET_FPS: int = 30
