#!/usr/bin/env python3
"""
sim/repulsion.py
================
Potential-field repulsion (Khatib / Latombe style) that the coordinator
superimposes on the user's force when the drone moves close to a wall or
an active obstacle.

Every helper here is a pure function of geometry and velocity:

* :func:`repulsive_magnitude`: scalar law for one influence source.
* :func:`wall_repulsion`: per-axis push away from the four walls.
* :func:`obstacle_repulsion`: radial push away from each active obstacle.
* :func:`compute_repulsion`: total of the two.
"""

from __future__ import annotations

import math
from typing import Iterable, Tuple

from ipc.records import KinematicState, Obstacle

MIN_DISTANCE: float = 0.1
"""Below this distance no force is produced (avoids the 1/d³ singularity)."""

OBSTACLE_RADIUS_FACTOR: float = 1.5
"""Obstacles act over ``1.5 * rho`` instead of ``rho``."""


def repulsive_magnitude(d: float, radius: float, eta: float, speed: float) -> float:
    """Repulsion strength at distance *d* from a source with radius of effect *radius*.

    ``eta * ((1/d - 1/R) / d²) * |v|`` inside ``(MIN_DISTANCE, R]``, zero
    elsewhere, never negative.  A stationary drone feels nothing.
    """
    if d <= MIN_DISTANCE or d > radius or speed <= 0.0:
        return 0.0
    f = eta * ((1.0 / d - 1.0 / radius) / (d * d)) * speed
    return max(0.0, f)


def wall_repulsion(
    state: KinematicState,
    width: float,
    height: float,
    rho: float,
    eta: float,
) -> Tuple[float, float]:
    """Sum of the four wall contributions, each acting on its own axis.

    ``x``/``y`` near zero push positive, near ``width``/``height`` push
    negative.
    """
    speed = state.speed
    fx = repulsive_magnitude(state.x, rho, eta, speed)
    fx -= repulsive_magnitude(width - state.x, rho, eta, speed)
    fy = repulsive_magnitude(state.y, rho, eta, speed)
    fy -= repulsive_magnitude(height - state.y, rho, eta, speed)
    return fx, fy


def obstacle_repulsion(
    state: KinematicState,
    obstacles: Iterable[Obstacle],
    rho: float,
    eta: float,
) -> Tuple[float, float]:
    """Superposition of radial pushes from every active obstacle in range.

    Distance is measured from the obstacle centre; the push points from
    the centre towards the drone.  Contributions are summed without cap.
    """
    radius = OBSTACLE_RADIUS_FACTOR * rho
    speed = state.speed
    fx = fy = 0.0
    for ob in obstacles:
        if not ob.active:
            continue
        dx = state.x - ob.x
        dy = state.y - ob.y
        d = math.hypot(dx, dy)
        f = repulsive_magnitude(d, radius, eta, speed)
        if f > 0.0:
            fx += f * dx / d
            fy += f * dy / d
    return fx, fy


def compute_repulsion(
    state: KinematicState,
    obstacles: Iterable[Obstacle],
    width: float,
    height: float,
    rho: float,
    eta: float,
) -> Tuple[float, float]:
    """Total corrective force: walls + obstacles.

    Returns ``(0.0, 0.0)`` when repulsion is disabled (``rho <= 0`` or
    ``eta <= 0``).
    """
    if rho <= 0.0 or eta <= 0.0:
        return 0.0, 0.0
    wx, wy = wall_repulsion(state, width, height, rho, eta)
    ox, oy = obstacle_repulsion(state, obstacles, rho, eta)
    return wx + ox, wy + oy
