#!/usr/bin/env python3
"""
sim/coordinator.py
==================
The blackboard server: a single-threaded, fixed-rate loop that multiplexes
every producer pipe, folds their records into :class:`~sim.world.WorldState`,
runs collision scoring and repulsion, and forwards corrected commands to
the drone.

Phases
------
``MENU_SELECTION`` → ``RUNNING`` → ``SHUTTING_DOWN``

Per tick (``RUNNING``)
----------------------
1. wait at most one tick for any open source to become readable;
2. read exactly one record from each ready source, in the fixed order
   drone state, input, obstacles, targets;
3. score collisions for the new drone position;
4. add repulsion to the user force and forward it when anything changed;
5. publish a snapshot to the renderer.

End-of-stream on a population source only stops listening to it; on the
drone or input pipe it ends the run, as does any read/write error.
"""

from __future__ import annotations

import logging
import os
import random
import selectors
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional

import config
from ipc import (
    COMMAND_SIZE,
    STATE_SIZE,
    ChannelMetrics,
    CommandState,
    KinematicState,
    Obstacle,
    Target,
    TransferStatus,
    batch_size,
    read_exact,
    unpack_batch,
    write_exact,
)
from sim.cancel import CancellationToken
from sim.interfaces import HeadlessRenderer, LogNotifier, MenuChoice, Notifier, Renderer
from sim.params import SimParams
from sim.repulsion import compute_repulsion
from sim.world import WorldState

log = logging.getLogger("coordinator")


class Phase(Enum):
    MENU_SELECTION = "menu_selection"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


@dataclass(frozen=True)
class CoordinatorChannels:
    """Pipe descriptors owned by the coordinator process."""

    drone_state_in: int
    drone_cmd_out: int
    input_cmd_in: int
    obstacles_in: int
    targets_in: int

    def all_fds(self) -> List[int]:
        return [
            self.drone_state_in,
            self.drone_cmd_out,
            self.input_cmd_in,
            self.obstacles_in,
            self.targets_in,
        ]


@dataclass
class _Source:
    """One readable pipe and the fixed size of what it carries."""

    name: str
    fd: int
    size: int
    mandatory: bool
    open: bool = True


class Coordinator:
    """Owns the world snapshot and drives the per-tick multiplexed loop.

    Parameters
    ----------
    params : SimParams
        Loaded parameter set.
    channels : CoordinatorChannels
        Pipe descriptors (closed by :meth:`shutdown` when *close_fds*).
    renderer : Renderer or None
        Menu + map; :class:`~sim.interfaces.HeadlessRenderer` when omitted.
    notifier : Notifier or None
        Told about every target hit.
    token : CancellationToken or None
        Checked once per tick.
    rng : random.Random or None
        Target relocation source.
    """

    def __init__(
        self,
        params: SimParams,
        channels: CoordinatorChannels,
        renderer: Optional[Renderer] = None,
        notifier: Optional[Notifier] = None,
        token: Optional[CancellationToken] = None,
        rng: Optional[random.Random] = None,
        *,
        obstacle_capacity: int = config.OBSTACLE_CAPACITY,
        target_capacity: int = config.TARGET_CAPACITY,
        close_fds: bool = True,
    ) -> None:
        self.params = params
        self.channels = channels
        self.renderer: Renderer = renderer or HeadlessRenderer()
        self.notifier: Notifier = notifier or LogNotifier()
        self.token = token or CancellationToken()
        self.world = WorldState(params, rng)
        self.metrics = ChannelMetrics()

        self.obstacle_capacity = obstacle_capacity
        self.target_capacity = target_capacity
        self._close_fds = close_fds

        self.phase = Phase.MENU_SELECTION
        self.exit_code = 0
        self._quit_sent = False
        self._repulsion_active = False
        self._closed = False

        # Service order is the list order.
        self._sources: List[_Source] = [
            _Source("drone_state", channels.drone_state_in, STATE_SIZE, True),
            _Source("input", channels.input_cmd_in, COMMAND_SIZE, True),
            _Source("obstacles", channels.obstacles_in,
                    batch_size(Obstacle, obstacle_capacity), False),
            _Source("targets", channels.targets_in,
                    batch_size(Target, target_capacity), False),
        ]
        self._drone_state = self._sources[0]
        self._selector = selectors.DefaultSelector()
        for src in self._sources:
            self._selector.register(src.fd, selectors.EVENT_READ, src)

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def run(self) -> int:
        """Menu, then tick until shutdown.  Returns the process exit code."""
        try:
            self.select_from_menu()
            while self.phase is Phase.RUNNING:
                self.tick()
        finally:
            self.shutdown()
        return self.exit_code

    def select_from_menu(self) -> None:
        while self.phase is Phase.MENU_SELECTION:
            if self.token.cancelled:
                self._begin_shutdown("cancelled in menu")
                return
            choice = self.renderer.show_menu()
            if choice is MenuChoice.START:
                self.start()
            elif choice is MenuChoice.INSTRUCTIONS:
                self.renderer.show_instructions()
            else:
                self._begin_shutdown("quit from menu")

    def start(self) -> None:
        log.info("entering main loop (tick=%.4fs, repulsion=%s)",
                 self.params.tick_interval, self.params.repulsion_enabled)
        self.phase = Phase.RUNNING

    def shutdown(self) -> None:
        """Tell the drone to quit, close every descriptor and the renderer."""
        if self._closed:
            return
        self._closed = True
        self.phase = Phase.SHUTTING_DOWN

        # A closed state pipe means the drone has already exited.
        if not self._quit_sent and self._drone_state.open:
            self._quit_sent = True
            quit_cmd = replace(self.world.command, quit=1)
            if write_exact(self.channels.drone_cmd_out, quit_cmd.pack()) is TransferStatus.COMPLETE:
                self.metrics.record_out("drone_cmd")

        self._selector.close()
        if self._close_fds:
            for fd in self.channels.all_fds():
                try:
                    os.close(fd)
                except OSError as exc:
                    log.warning("close failed fd=%d err=%s", fd, exc)
        self.renderer.close()
        log.info("exited code=%d score=%d metrics=%s",
                 self.exit_code, self.world.score, self.metrics.report())

    def _begin_shutdown(self, reason: str, exit_code: int = 0) -> None:
        if self.phase is not Phase.SHUTTING_DOWN:
            log.info("shutting down: %s", reason)
        self.phase = Phase.SHUTTING_DOWN
        self.exit_code = max(self.exit_code, exit_code)

    # ── Multiplexed wait ──────────────────────────────────────────────────

    def wait_ready(self, timeout: float) -> List[_Source]:
        """Open sources readable within *timeout*, in service order.

        An interrupted wait resumes with whatever is left of the timeout.
        """
        deadline = time.monotonic() + timeout
        while True:
            try:
                events = self._selector.select(max(0.0, deadline - time.monotonic()))
                break
            except InterruptedError:
                continue
        ready = {key.data.name for key, _mask in events}
        return [s for s in self._sources if s.open and s.name in ready]

    def _close_source(self, src: _Source) -> None:
        src.open = False
        self._selector.unregister(src.fd)

    # ── Tick ──────────────────────────────────────────────────────────────

    def tick(self, timeout: Optional[float] = None) -> None:
        """Run one iteration of the ``RUNNING`` loop."""
        if self.token.cancelled:
            self._begin_shutdown(f"cancelled ({self.token.reason or 'token'})")
            return
        self.metrics.ticks += 1

        new_state = False
        new_input = False
        wait = self.params.tick_interval if timeout is None else timeout
        for src in self.wait_ready(wait):
            data, status = read_exact(src.fd, src.size)
            if status is TransferStatus.COMPLETE:
                self.metrics.record_in(src.name)
                if src.name == "drone_state":
                    self.world.update_drone(KinematicState.unpack(data))
                    new_state = True
                elif src.name == "input":
                    new_input = True
                    self._on_input(CommandState.unpack(data))
                elif src.name == "obstacles":
                    self.world.replace_obstacles(
                        unpack_batch(data, Obstacle, self.obstacle_capacity)
                    )
                else:
                    self.world.replace_targets(
                        unpack_batch(data, Target, self.target_capacity)
                    )
            elif status is TransferStatus.END_OF_STREAM:
                self.metrics.eof(src.name)
                self._close_source(src)
                if src.mandatory:
                    self._begin_shutdown(f"{src.name} closed")
                else:
                    log.info("%s closed; keeping last batch", src.name)
            else:
                self.metrics.error(src.name)
                self._close_source(src)
                self._begin_shutdown(f"{src.name} read error", exit_code=1)

            if self.phase is Phase.SHUTTING_DOWN:
                return

        if new_state:
            for hit in self.world.score_collisions():
                self.notifier.notify("target_hit", id=hit.id, score=self.world.score)

        if self.params.repulsion_enabled:
            self._forward_with_repulsion(new_input)
            if self.phase is Phase.SHUTTING_DOWN:
                return

        self.renderer.draw(self.world.snapshot(self.metrics.report()))

    def _on_input(self, cmd: CommandState) -> None:
        self.world.command = cmd
        if cmd.quit:
            self._send_command(cmd)
            self._quit_sent = True
            self._begin_shutdown("quit requested")
        elif not self.params.repulsion_enabled:
            self._send_command(cmd)

    def _forward_with_repulsion(self, new_input: bool) -> None:
        p = self.params
        rx, ry = compute_repulsion(
            self.world.drone, self.world.obstacles,
            p.world_width, p.world_height, p.rho, p.eta,
        )
        self.world.repulsion = (rx, ry)
        active = rx != 0.0 or ry != 0.0

        # Also send once after repulsion drops to zero so the drone falls
        # back to the plain user force.
        if new_input or active or self._repulsion_active:
            cmd = self.world.command
            # The sum is not reclamped to max_force.
            self._send_command(replace(cmd, fx=cmd.fx + rx, fy=cmd.fy + ry))
        self._repulsion_active = active

    def _send_command(self, cmd: CommandState) -> bool:
        if write_exact(self.channels.drone_cmd_out, cmd.pack()) is TransferStatus.COMPLETE:
            self.metrics.record_out("drone_cmd")
            return True
        self.metrics.error("drone_cmd")
        self._quit_sent = True
        self._begin_shutdown("drone command write failed", exit_code=1)
        return False
