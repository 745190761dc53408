#!/usr/bin/env python3
"""
sim/params.py
=============
Runtime simulation parameters.  Every tunable lives in the frozen
:class:`SimParams` dataclass; each process loads it once at start-up from
the shared parameter file and never mutates it afterwards.

File format: one setting per line, either ``key value`` or ``key=value``::

    # comment
    // also a comment
    mass 1.0
    rho=5.0

Unknown keys are ignored.  A missing or unreadable file, or a value that
does not parse, is logged and the built-in default from :mod:`config`
stays in effect.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import config

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimParams:
    """Immutable bag of every tunable simulation parameter.

    Groups: world geometry, drone dynamics, user forces, repulsion,
    collision, environment population.
    """

    # ── World geometry ────────────────────────────────────────────────────
    world_width: float = config.DEFAULT_WORLD_WIDTH
    """Width of the world in simulation units; x spans ``[0, world_width]``."""

    world_height: float = config.DEFAULT_WORLD_HEIGHT
    """Height of the world; y spans ``[0, world_height]``."""

    # ── Drone dynamics ────────────────────────────────────────────────────
    mass: float = config.DEFAULT_MASS
    """Drone mass (kg)."""

    damping: float = config.DEFAULT_DAMPING
    """Viscous damping coefficient (N·s/m)."""

    dt: float = config.DEFAULT_DT
    """Integrator timestep (s)."""

    tick_interval: float = config.DEFAULT_TICK_INTERVAL
    """Coordinator bounded-wait period (s)."""

    # ── User command forces ───────────────────────────────────────────────
    force_step: float = config.DEFAULT_FORCE_STEP
    """Force increment per key press (N)."""

    max_force: float = config.DEFAULT_MAX_FORCE
    """Clamp applied per axis at the input boundary (N)."""

    # ── Potential-field repulsion ─────────────────────────────────────────
    rho: float = config.DEFAULT_RHO
    """Radius of effect for walls; obstacles use ``1.5 * rho``."""

    eta: float = config.DEFAULT_ETA
    """Repulsion gain."""

    # ── Collision ─────────────────────────────────────────────────────────
    hit_radius: float = config.DEFAULT_HIT_RADIUS
    """Disc radius around a target that counts as a hit."""

    # ── Environment population ────────────────────────────────────────────
    num_obstacles: int = config.DEFAULT_NUM_OBSTACLES
    """Obstacles in the initial burst (clamped to capacity)."""

    num_targets: int = config.DEFAULT_NUM_TARGETS
    """Targets in the initial burst (clamped to capacity)."""

    obstacle_radius: float = config.DEFAULT_OBSTACLE_RADIUS
    target_radius: float = config.DEFAULT_TARGET_RADIUS

    obstacle_spawn_interval: float = config.DEFAULT_OBSTACLE_SPAWN_INTERVAL
    """Seconds between obstacle batch updates."""

    target_spawn_interval: float = config.DEFAULT_TARGET_SPAWN_INTERVAL
    """Seconds between target batch updates."""

    obstacle_respawn_count: int = config.DEFAULT_OBSTACLE_RESPAWN_COUNT
    """Oldest obstacle slots replaced on each update."""

    target_respawn_count: int = config.DEFAULT_TARGET_RESPAWN_COUNT
    """Oldest target slots replaced on each update."""

    @property
    def repulsion_enabled(self) -> bool:
        return self.rho > 0.0 and self.eta > 0.0

    @property
    def center(self) -> Tuple[float, float]:
        return self.world_width / 2.0, self.world_height / 2.0


# Legacy short names accepted in the parameter file.
_ALIASES: Dict[str, str] = {
    "width": "world_width",
    "height": "world_height",
    "obstacles": "num_obstacles",
    "targets": "num_targets",
    "coefficient": "damping",
    "refresh": "dt",
    "radius": "rho",
}

_CASTS = {"int": int, "float": float}


def default_config_path() -> str:
    """``$DRONE_SIM_CONFIG`` if set, else ``conf/drone_parameters.conf`` under the project root."""
    env = os.environ.get(config.CONFIG_ENV_VAR)
    if env:
        return env
    return os.path.join(config.PROJECT_ROOT, config.DEFAULT_CONFIG_REL_PATH)


def _split_line(line: str) -> Optional[Tuple[str, str]]:
    text = line.strip()
    if not text or text.startswith("#") or text.startswith("//"):
        return None
    if "=" in text:
        key, _, value = text.partition("=")
    else:
        parts = text.split(None, 1)
        if len(parts) != 2:
            return None
        key, value = parts
    key, value = key.strip(), value.strip()
    if not key or not value:
        return None
    # Trailing comments on the value side
    value = value.split("#", 1)[0].strip()
    return key, value


def parse_params(text: str, base: Optional[SimParams] = None) -> SimParams:
    """Apply the settings found in *text* on top of *base* (defaults if omitted)."""
    base = base or SimParams()
    types = {f.name: _CASTS[str(f.type)] for f in dataclasses.fields(SimParams)}
    overrides: Dict[str, object] = {}

    for lineno, line in enumerate(text.splitlines(), start=1):
        pair = _split_line(line)
        if pair is None:
            continue
        key, value = pair
        name = _ALIASES.get(key, key)
        cast = types.get(name)
        if cast is None:
            log.debug("unknown_key line=%d key=%s", lineno, key)
            continue
        try:
            overrides[name] = cast(float(value)) if cast is int else cast(value)
        except (ValueError, OverflowError):
            log.warning("bad_value line=%d key=%s value=%r (keeping default)", lineno, key, value)

    return dataclasses.replace(base, **overrides)


def load_params(path: Optional[str] = None) -> SimParams:
    """Load parameters from *path*, falling back to built-in defaults.

    Parameters
    ----------
    path : str or None
        Parameter file; :func:`default_config_path` when omitted.

    Returns
    -------
    SimParams
        Defaults overridden by every valid key found in the file.  Never
        raises for a missing or unreadable file.
    """
    use_path = path or default_config_path()
    try:
        with open(use_path, "r", encoding="utf-8") as fh:
            text = fh.read()
    except OSError as exc:
        log.warning("config_load_failed path=%s err=%s (using built-in defaults)", use_path, exc)
        return SimParams()

    params = parse_params(text)
    log.info("config_loaded path=%s", use_path)
    return params
