#!/usr/bin/env python3
"""
sim/physics.py
==============
Drone dynamics: a point mass with viscous damping, integrated with a
semi-implicit Euler step and clamped to the world rectangle.

:class:`DroneIntegrator` owns the kinematic state of the drone process;
:func:`run_drone` is that process's loop (command pipe in, state pipe out).
"""

from __future__ import annotations

import logging
import selectors
import time
from typing import Optional

from ipc import (
    COMMAND_SIZE,
    CommandState,
    KinematicState,
    TransferStatus,
    read_exact,
    write_exact,
)
from sim.cancel import CancellationToken
from sim.params import SimParams

log = logging.getLogger("drone")

VELOCITY_EPSILON = 1e-3
"""Velocity components smaller than this are snapped to zero."""


def apply_world_bounds(d: KinematicState, width: float, height: float) -> KinematicState:
    """Keep *d* inside ``[0, width] × [0, height]``.

    A clamped axis also loses the velocity component pointing further
    into that wall.  Already in-bounds states are left untouched.
    """
    if d.x < 0.0:
        d.x = 0.0
        if d.vx < 0.0:
            d.vx = 0.0
    elif d.x > width:
        d.x = width
        if d.vx > 0.0:
            d.vx = 0.0

    if d.y < 0.0:
        d.y = 0.0
        if d.vy < 0.0:
            d.vy = 0.0
    elif d.y > height:
        d.y = height
        if d.vy > 0.0:
            d.vy = 0.0
    return d


def euler_step(d: KinematicState, fx: float, fy: float, params: SimParams) -> KinematicState:
    """Advance *d* in place by one timestep ``params.dt`` under force *(fx, fy)*.

    Parameters
    ----------
    d : KinematicState
        State to update.
    fx, fy : float
        Applied force (N).
    params : SimParams
        Supplies ``mass``, ``damping``, ``dt`` and the world size.
    """
    dt = params.dt
    ax = (fx - params.damping * d.vx) / params.mass
    ay = (fy - params.damping * d.vy) / params.mass

    d.vx += ax * dt
    d.vy += ay * dt

    # Anti-jitter near rest
    if abs(d.vx) < VELOCITY_EPSILON:
        d.vx = 0.0
    if abs(d.vy) < VELOCITY_EPSILON:
        d.vy = 0.0

    d.x += d.vx * dt
    d.y += d.vy * dt

    return apply_world_bounds(d, params.world_width, params.world_height)


class DroneIntegrator:
    """Kinematic state of the drone plus the last command received.

    Parameters
    ----------
    params : SimParams
        Dynamics and world geometry.
    state : KinematicState or None
        Initial state; the world centre at rest when omitted.
    """

    def __init__(self, params: SimParams, state: Optional[KinematicState] = None) -> None:
        self.params = params
        if state is None:
            cx, cy = params.center
            state = KinematicState(x=cx, y=cy)
        self.state = state
        self.command = CommandState()
        self._reset_pending = False

    def apply_command(self, cmd: CommandState) -> bool:
        """Adopt *cmd* as the current command.

        Returns ``False`` when the command carries the quit flag.
        A 0→1 transition of ``reset`` arms a reset for the next step.
        """
        if cmd.reset and not self.command.reset:
            self._reset_pending = True
        self.command = cmd
        return not cmd.quit

    def reset(self) -> None:
        cx, cy = self.params.center
        self.state = KinematicState(x=cx, y=cy)
        log.info("reset to centre (%.2f, %.2f)", cx, cy)

    def step(self) -> KinematicState:
        """Run one timestep and return the (mutated) state."""
        if self._reset_pending:
            self._reset_pending = False
            self.reset()
            return self.state
        return euler_step(self.state, self.command.fx, self.command.fy, self.params)


def run_drone(
    fd_cmd_in: int,
    fd_state_out: int,
    params: SimParams,
    token: CancellationToken,
) -> int:
    """Drone process loop.

    Waits up to ``dt`` for a command, integrates one step and publishes
    the new :class:`KinematicState`.  Returns the process exit code:
    0 on quit / end-of-stream / cancellation, 1 on an I/O error.
    """
    integrator = DroneIntegrator(params)
    sel = selectors.DefaultSelector()
    sel.register(fd_cmd_in, selectors.EVENT_READ)
    log.info(
        "started (dt=%.3f, M=%.3f, K=%.3f)", params.dt, params.mass, params.damping
    )

    exit_code = 0
    next_step = time.monotonic() + params.dt
    try:
        while not token.cancelled:
            timeout = max(0.0, next_step - time.monotonic())
            if sel.select(timeout):
                data, status = read_exact(fd_cmd_in, COMMAND_SIZE)
                if status is TransferStatus.END_OF_STREAM:
                    log.info("cmd pipe EOF, exiting")
                    break
                if status is TransferStatus.ERROR:
                    exit_code = 1
                    break
                if not integrator.apply_command(CommandState.unpack(data)):
                    log.info("quit flag set, exiting")
                    break

            now = time.monotonic()
            if now < next_step:
                continue
            next_step = max(next_step + params.dt, now)

            state = integrator.step()
            if write_exact(fd_state_out, state.pack()) is not TransferStatus.COMPLETE:
                exit_code = 1
                break
    finally:
        sel.close()

    log.info("exiting (code=%d)", exit_code)
    return exit_code
