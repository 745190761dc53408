#!/usr/bin/env python3
"""
sim/world.py
============
The blackboard: the canonical world snapshot owned by the coordinator.

:class:`WorldState` is mutated only by the coordinator's loop.  Everything
else (the renderer in particular) sees an immutable :class:`WorldSnapshot`
built by :meth:`WorldState.snapshot`.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from ipc.records import CommandState, KinematicState, Obstacle, Target
from sim.collision import resolve_collisions
from sim.params import SimParams

log = logging.getLogger("world")


@dataclass(frozen=True)
class WorldSnapshot:
    """Read-only copy of the world handed to the renderer."""

    drone: KinematicState
    command: CommandState
    obstacles: Tuple[Obstacle, ...]
    targets: Tuple[Target, ...]
    score: int
    repulsion: Tuple[float, float] = (0.0, 0.0)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def num_obstacles(self) -> int:
        return sum(1 for o in self.obstacles if o.active)

    @property
    def num_targets(self) -> int:
        return sum(1 for t in self.targets if t.active)


class WorldState:
    """Drone, command, population collections and score.

    Parameters
    ----------
    params : SimParams
        World geometry and collision radius.
    rng : random.Random or None
        Source of target relocation coordinates.
    """

    def __init__(self, params: SimParams, rng: Optional[random.Random] = None) -> None:
        self.params = params
        self.rng = rng or random.Random()

        self.drone = KinematicState()
        self.has_drone = False
        self.previous_position: Optional[Tuple[float, float]] = None
        self.command = CommandState()
        self.obstacles: List[Obstacle] = []
        self.targets: List[Target] = []
        self.score = 0
        self.repulsion: Tuple[float, float] = (0.0, 0.0)

    # ── counts ────────────────────────────────────────────────────────────
    @property
    def num_obstacles(self) -> int:
        return sum(1 for o in self.obstacles if o.active)

    @property
    def num_targets(self) -> int:
        return sum(1 for t in self.targets if t.active)

    @property
    def position(self) -> Tuple[float, float]:
        return self.drone.x, self.drone.y

    # ── updates from producers ───────────────────────────────────────────
    def update_drone(self, state: KinematicState) -> None:
        """Overwrite kinematics, keeping the old position for the swept test."""
        self.previous_position = self.position if self.has_drone else None
        self.drone = state
        self.has_drone = True

    def replace_obstacles(self, batch: List[Obstacle]) -> None:
        self.obstacles = list(batch)
        log.debug("obstacles replaced active=%d", self.num_obstacles)

    def replace_targets(self, batch: List[Target]) -> None:
        self.targets = list(batch)
        log.debug("targets replaced active=%d", self.num_targets)

    # ── scoring ───────────────────────────────────────────────────────────
    def score_collisions(self) -> List[Target]:
        """Run the swept collision test for the latest move and add one point per hit."""
        if self.previous_position is None or self.num_targets == 0:
            return []
        hits = resolve_collisions(
            self.previous_position,
            self.position,
            self.targets,
            self.params.hit_radius,
            self.params.world_width,
            self.params.world_height,
            self.rng,
        )
        if hits:
            self.score += len(hits)
            log.info("score=%d (+%d)", self.score, len(hits))
        return hits

    # ── views ─────────────────────────────────────────────────────────────
    def snapshot(self, metrics: Optional[Dict[str, Any]] = None) -> WorldSnapshot:
        return WorldSnapshot(
            drone=replace(self.drone),
            command=replace(self.command),
            obstacles=tuple(replace(o) for o in self.obstacles),
            targets=tuple(replace(t) for t in self.targets),
            score=self.score,
            repulsion=self.repulsion,
            metrics=dict(metrics or {}),
        )
