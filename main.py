#!/usr/bin/env python3
"""
main.py
=======
Entry point for every simulator process.

``python main.py`` (or ``python main.py supervisor``) creates the pipes,
spawns one child per role with the descriptor numbers on its command line,
and waits for the coordinator to finish.  Each child re-enters this file
with its role::

    main.py coordinator <drone_state_in> <drone_cmd_out> <input_cmd_in> <obstacles_in> <targets_in>
    main.py drone       <cmd_in> <state_out>
    main.py input       <cmd_out>
    main.py obstacles   <batch_out>
    main.py targets     <batch_out>

Exit codes: 0 clean shutdown, 1 fatal I/O error, 2 descriptor setup failure.
"""

import argparse
import logging
import os
import subprocess
import sys
from typing import Dict, List, Optional, Sequence

from logging_setup import setup_logging
from sim.cancel import CancellationToken, install_signal_handlers
from sim.params import load_params

EXIT_SETUP_FAILURE = 2

log = logging.getLogger("main")


# ── Descriptor arguments ─────────────────────────────────────────────────────

def check_fds(fds: Sequence[int]) -> bool:
    """True if every descriptor in *fds* is open in this process."""
    for fd in fds:
        try:
            os.fstat(fd)
        except OSError as exc:
            log.error("bad descriptor fd=%d err=%s", fd, exc)
            return False
    return True


# ── Process supervisor ───────────────────────────────────────────────────────

class ProcessSupervisor:
    """Spawns role processes of this program and keeps their handles."""

    def __init__(self, config_path: Optional[str] = None) -> None:
        self.script = os.path.abspath(__file__)
        self.config_path = config_path
        self.children: Dict[str, subprocess.Popen] = {}

    def spawn(self, name: str, fds: Sequence[int], args: Sequence[str] = ()) -> subprocess.Popen:
        argv = [sys.executable, self.script]
        if self.config_path:
            argv += ["--config", self.config_path]
        argv += [name, *map(str, fds), *args]
        proc = subprocess.Popen(argv, pass_fds=tuple(fds))
        self.children[name] = proc
        log.info("spawned %s pid=%d fds=%s", name, proc.pid, list(fds))
        return proc

    def terminate_all(self, timeout: float = 2.0) -> None:
        for name, proc in self.children.items():
            if proc.poll() is None:
                proc.terminate()
        for name, proc in self.children.items():
            try:
                proc.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                log.warning("%s did not exit, killing", name)
                proc.kill()
                proc.wait()
            log.info("%s exited code=%s", name, proc.returncode)


def run_supervisor(args: argparse.Namespace) -> int:
    setup_logging("supervisor")
    drone_cmd_r, drone_cmd_w = os.pipe()
    drone_state_r, drone_state_w = os.pipe()
    input_r, input_w = os.pipe()
    obstacles_r, obstacles_w = os.pipe()
    targets_r, targets_w = os.pipe()
    all_fds = [drone_cmd_r, drone_cmd_w, drone_state_r, drone_state_w,
               input_r, input_w, obstacles_r, obstacles_w, targets_r, targets_w]

    sup = ProcessSupervisor(config_path=args.config)
    coord_args = ["--headless"] if args.headless else []
    try:
        coordinator = sup.spawn(
            "coordinator",
            [drone_state_r, drone_cmd_w, input_r, obstacles_r, targets_r],
            coord_args,
        )
        sup.spawn("drone", [drone_cmd_r, drone_state_w])
        sup.spawn("input", [input_w])
        sup.spawn("obstacles", [obstacles_w])
        sup.spawn("targets", [targets_w])
    except OSError:
        log.exception("spawn failed")
        sup.terminate_all()
        return EXIT_SETUP_FAILURE
    finally:
        for fd in all_fds:
            os.close(fd)

    try:
        code = coordinator.wait()
    except KeyboardInterrupt:
        log.info("interrupted, waiting for coordinator")
        code = coordinator.wait()
    log.info("coordinator exited code=%d", code)
    sup.terminate_all()
    return code


# ── Roles ────────────────────────────────────────────────────────────────────

def _role_setup(role: str, args: argparse.Namespace, fds: List[int]):
    setup_logging(role)
    if not check_fds(fds):
        return None, None
    params = load_params(args.config)
    token = CancellationToken()
    install_signal_handlers(token)
    return params, token


def run_coordinator(args: argparse.Namespace) -> int:
    from sim.coordinator import Coordinator, CoordinatorChannels

    fds = [args.drone_state_in, args.drone_cmd_out, args.input_cmd_in,
           args.obstacles_in, args.targets_in]
    params, token = _role_setup("coordinator", args, fds)
    if params is None:
        return EXIT_SETUP_FAILURE

    if args.headless:
        renderer = None
    else:
        from ui.pygame_view import PygameWorldView
        renderer = PygameWorldView(params.world_width, params.world_height, token=token)

    coordinator = Coordinator(params, CoordinatorChannels(*fds), renderer=renderer, token=token)
    return coordinator.run()


def run_drone_role(args: argparse.Namespace) -> int:
    from sim.physics import run_drone

    params, token = _role_setup("drone", args, [args.cmd_in, args.state_out])
    if params is None:
        return EXIT_SETUP_FAILURE
    try:
        return run_drone(args.cmd_in, args.state_out, params, token)
    finally:
        os.close(args.cmd_in)
        os.close(args.state_out)


def run_input_role(args: argparse.Namespace) -> int:
    from ui.input_pad import run_input_pad

    params, token = _role_setup("input", args, [args.cmd_out])
    if params is None:
        return EXIT_SETUP_FAILURE
    try:
        return run_input_pad(args.cmd_out, params, token)
    finally:
        os.close(args.cmd_out)


def _run_generator_role(role: str, args: argparse.Namespace) -> int:
    from sim.generators import ObstacleField, TargetField, run_generator

    params, token = _role_setup(role, args, [args.batch_out])
    if params is None:
        return EXIT_SETUP_FAILURE
    if role == "obstacles":
        population, interval = ObstacleField(params), params.obstacle_spawn_interval
    else:
        population, interval = TargetField(params), params.target_spawn_interval
    try:
        return run_generator(args.batch_out, population, interval, token)
    finally:
        os.close(args.batch_out)


# ── CLI ──────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pipe-coordinated drone simulator.")
    parser.add_argument("--config", default=None,
                        help="parameter file (default: $DRONE_SIM_CONFIG or conf/drone_parameters.conf)")
    sub = parser.add_subparsers(dest="role")

    p = sub.add_parser("supervisor", help="create pipes and spawn every process (default)")
    p.add_argument("--headless", action="store_true", help="run the coordinator without a window")

    p = sub.add_parser("coordinator")
    for name in ("drone_state_in", "drone_cmd_out", "input_cmd_in", "obstacles_in", "targets_in"):
        p.add_argument(name, type=int)
    p.add_argument("--headless", action="store_true")

    p = sub.add_parser("drone")
    p.add_argument("cmd_in", type=int)
    p.add_argument("state_out", type=int)

    p = sub.add_parser("input")
    p.add_argument("cmd_out", type=int)

    for role in ("obstacles", "targets"):
        p = sub.add_parser(role)
        p.add_argument("batch_out", type=int)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    role = args.role or "supervisor"
    if role == "supervisor":
        args.headless = getattr(args, "headless", False)
        return run_supervisor(args)
    if role == "coordinator":
        return run_coordinator(args)
    if role == "drone":
        return run_drone_role(args)
    if role == "input":
        return run_input_role(args)
    return _run_generator_role(role, args)


if __name__ == "__main__":
    sys.exit(main())
