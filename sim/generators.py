#!/usr/bin/env python3
"""
sim/generators.py
=================
Obstacle and target producers.

Each generator process owns a fixed-capacity batch, sends it once at start
(initial burst) and then, every spawn interval, replaces its oldest slots
with fresh random records and resends the whole batch.  Slot order is the
creation order, so a ring cursor over the live slots always points at the
oldest one.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

import numpy as np

import config
from ipc import Obstacle, Target, TransferStatus, pack_batch, write_exact
from sim.cancel import CancellationToken
from sim.params import SimParams

log = logging.getLogger(__name__)


class _Population:
    """Shared ring-buffer bookkeeping for a batch of circular records."""

    record_type: type = Obstacle

    def __init__(
        self,
        params: SimParams,
        count: int,
        capacity: int,
        radius: float,
        respawn_count: int,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.params = params
        self.capacity = capacity
        self.count = max(0, min(count, capacity))
        self.radius = radius
        self.respawn_count = max(0, min(respawn_count, self.count))
        self.clock = clock
        self._rng = np.random.default_rng(seed)
        self._cursor = 0
        self.records: List = []

    def _positions(self, n: int) -> np.ndarray:
        """*n* uniform points inside the world, one radius away from each wall."""
        r = self.radius
        x_hi = max(r, self.params.world_width - r)
        y_hi = max(r, self.params.world_height - r)
        return self._rng.uniform((r, r), (x_hi, y_hi), size=(n, 2))

    def _make(self, x: float, y: float):
        raise NotImplementedError

    def populate(self) -> List:
        """Build the initial burst."""
        self.records = [self._make(float(x), float(y)) for x, y in self._positions(self.count)]
        self._cursor = 0
        return self.records

    def respawn(self) -> List[int]:
        """Replace the oldest ``respawn_count`` slots; return their indices."""
        replaced: List[int] = []
        if not self.records or self.respawn_count == 0:
            return replaced
        for x, y in self._positions(self.respawn_count):
            idx = self._cursor
            self.records[idx] = self._make(float(x), float(y))
            replaced.append(idx)
            self._cursor = (self._cursor + 1) % len(self.records)
        return replaced

    def pack(self) -> bytes:
        return pack_batch(self.records, self.record_type, self.capacity)


class ObstacleField(_Population):
    """Static obstacles of one fixed radius."""

    record_type = Obstacle

    def __init__(self, params: SimParams, seed: Optional[int] = None,
                 capacity: int = config.OBSTACLE_CAPACITY, **kwargs) -> None:
        super().__init__(
            params, params.num_obstacles, capacity, params.obstacle_radius,
            params.obstacle_respawn_count, seed=seed, **kwargs,
        )

    def _make(self, x: float, y: float) -> Obstacle:
        return Obstacle(x=x, y=y, radius=self.radius, active=1)


class TargetField(_Population):
    """Targets; every newly created target gets the next id."""

    record_type = Target

    def __init__(self, params: SimParams, seed: Optional[int] = None,
                 capacity: int = config.TARGET_CAPACITY, **kwargs) -> None:
        super().__init__(
            params, params.num_targets, capacity, params.target_radius,
            params.target_respawn_count, seed=seed, **kwargs,
        )
        self._next_id = 1

    def _make(self, x: float, y: float) -> Target:
        t = Target(x=x, y=y, radius=self.radius, id=self._next_id,
                   active=1, created=self.clock())
        self._next_id += 1
        return t


def run_generator(
    fd_out: int,
    population: _Population,
    interval: float,
    token: CancellationToken,
) -> int:
    """Generator process loop: initial burst, then one update per *interval*.

    Returns 0 on cancellation and 1 when the batch can no longer be written.
    """
    name = population.record_type.__name__.lower()
    population.populate()
    log.info("%s: sending initial batch of %d (capacity %d)",
             name, population.count, population.capacity)

    while True:
        if write_exact(fd_out, population.pack()) is not TransferStatus.COMPLETE:
            log.error("%s: batch write failed, exiting", name)
            return 1
        # A non-positive interval means "initial burst only".
        if token.wait(interval if interval > 0.0 else None):
            log.info("%s: cancelled (%s)", name, token.reason or "-")
            return 0
        replaced = population.respawn()
        log.info("%s: replaced slots %s", name, replaced)
