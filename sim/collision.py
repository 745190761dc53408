#!/usr/bin/env python3
"""
sim/collision.py
================
Swept collision between the drone and the targets.

The drone's motion over one tick is the segment from its previous to its
current position; a target is hit when that segment comes within the hit
radius of the target centre.
"""

from __future__ import annotations

import logging
import random
from typing import List, Sequence, Tuple

from ipc.records import Target

log = logging.getLogger("world")

Point = Tuple[float, float]

MOVE_EPSILON_SQ: float = 1e-6
"""Squared movement below which a tick is treated as stationary."""


def moved_enough(prev: Point, cur: Point, eps_sq: float = MOVE_EPSILON_SQ) -> bool:
    dx = cur[0] - prev[0]
    dy = cur[1] - prev[1]
    return dx * dx + dy * dy >= eps_sq


def closest_point_on_segment(p0: Point, p1: Point, c: Point) -> Point:
    """Point of segment *p0*→*p1* nearest to *c* (degenerate segment → *p0*)."""
    sx = p1[0] - p0[0]
    sy = p1[1] - p0[1]
    seg_len_sq = sx * sx + sy * sy
    if seg_len_sq <= 0.0:
        return p0
    t = ((c[0] - p0[0]) * sx + (c[1] - p0[1]) * sy) / seg_len_sq
    t = max(0.0, min(1.0, t))
    return p0[0] + t * sx, p0[1] + t * sy


def segment_hits_disc(p0: Point, p1: Point, center: Point, radius: float) -> bool:
    """True if segment *p0*→*p1* intersects the closed disc (*center*, *radius*).

    An end point inside the disc counts as a hit.
    """
    qx, qy = closest_point_on_segment(p0, p1, center)
    dx = qx - center[0]
    dy = qy - center[1]
    return dx * dx + dy * dy <= radius * radius


def respawn_target(target: Target, width: float, height: float, rng: random.Random) -> None:
    """Move *target* to a uniform random spot in the world; id and active flag are kept."""
    target.x = rng.uniform(0.0, width)
    target.y = rng.uniform(0.0, height)
    target.active = 1


def resolve_collisions(
    prev: Point,
    cur: Point,
    targets: Sequence[Target],
    hit_radius: float,
    width: float,
    height: float,
    rng: random.Random,
) -> List[Target]:
    """Test every active target against the tick's motion segment.

    Each hit target is relocated in place.  Every target is judged
    against the same segment, so several can be hit in one tick and
    the result does not depend on their order.

    Parameters
    ----------
    prev, cur : (float, float)
        Drone position at the previous and the current tick.
    targets : sequence of Target
        Current target slots (inactive slots are skipped).
    hit_radius : float
        Disc radius around each target centre.
    width, height : float
        World bounds for relocation.
    rng : random.Random
        Source of relocation coordinates.

    Returns
    -------
    list of Target
        Targets hit this tick (already relocated); empty when the drone
        barely moved.
    """
    if not moved_enough(prev, cur):
        return []

    hits = [
        t for t in targets
        if t.active and segment_hits_disc(prev, cur, (t.x, t.y), hit_radius)
    ]
    for t in hits:
        old = (t.x, t.y)
        respawn_target(t, width, height, rng)
        log.debug(
            "target_hit id=%d at=(%.2f, %.2f) moved_to=(%.2f, %.2f)",
            t.id, old[0], old[1], t.x, t.y,
        )
    return hits
