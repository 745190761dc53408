#!/usr/bin/env python3
"""
Tests for the coordinator tick loop, driven over real pipes.
"""

from __future__ import annotations

import os
import random
import unittest
from unittest import mock
from typing import List

from ipc import COMMAND_SIZE, CommandState, KinematicState, Obstacle, Target, pack_batch
from sim.cancel import CancellationToken
from sim.coordinator import Coordinator, CoordinatorChannels, Phase
from sim.interfaces import HeadlessRenderer, MenuChoice
from sim.params import SimParams

CAPACITY = 4


class RecordingNotifier:
    def __init__(self) -> None:
        self.events = []

    def notify(self, event, **details) -> None:
        self.events.append((event, details))


class QuitMenuRenderer(HeadlessRenderer):
    def show_menu(self) -> MenuChoice:
        return MenuChoice.QUIT


class CoordinatorHarness(unittest.TestCase):
    """Builds a coordinator wired to fresh pipes; the test keeps the far ends."""

    params = SimParams()
    renderer_factory = HeadlessRenderer

    def setUp(self) -> None:
        self.state_r, self.state_w = os.pipe()
        self.cmd_r, self.cmd_w = os.pipe()
        self.input_r, self.input_w = os.pipe()
        self.obs_r, self.obs_w = os.pipe()
        self.tgt_r, self.tgt_w = os.pipe()
        os.set_blocking(self.cmd_r, False)
        self._test_fds = {self.state_w, self.cmd_r, self.input_w, self.obs_w, self.tgt_w}

        self.renderer = self.renderer_factory()
        self.notifier = RecordingNotifier()
        self.token = CancellationToken()
        self.coord = self._make(self.renderer)

    def _make(self, renderer: HeadlessRenderer) -> Coordinator:
        channels = CoordinatorChannels(self.state_r, self.cmd_w, self.input_r, self.obs_r, self.tgt_r)
        return Coordinator(
            self.params, channels,
            renderer=renderer, notifier=self.notifier, token=self.token,
            rng=random.Random(1),
            obstacle_capacity=CAPACITY, target_capacity=CAPACITY,
        )

    def tearDown(self) -> None:
        self.coord.shutdown()
        for fd in self._test_fds:
            os.close(fd)

    def close_test_end(self, fd: int) -> None:
        os.close(fd)
        self._test_fds.discard(fd)

    def tick(self) -> None:
        self.coord.start()
        self.coord.tick(timeout=0.05)

    def sent_commands(self) -> List[CommandState]:
        cmds = []
        while True:
            try:
                data = os.read(self.cmd_r, COMMAND_SIZE)
            except BlockingIOError:
                break
            if not data:
                break
            cmds.append(CommandState.unpack(data))
        return cmds


class TickTests(CoordinatorHarness):
    params = SimParams(rho=0.0)

    def test_drone_state_reaches_the_snapshot(self) -> None:
        state = KinematicState(x=3.0, y=4.0, vx=1.0, vy=0.0)
        os.write(self.state_w, state.pack())
        self.tick()
        self.assertEqual(self.coord.world.drone, state)
        self.assertEqual(self.renderer.last_snapshot.drone, state)
        self.assertEqual(self.coord.metrics.records_in["drone_state"], 1)

    def test_input_is_forwarded_unchanged_without_repulsion(self) -> None:
        cmd = CommandState(fx=3.0, fy=-1.5, last_key=ord("d"))
        os.write(self.input_w, cmd.pack())
        self.tick()
        self.assertEqual(self.sent_commands(), [cmd])
        self.assertEqual(self.coord.world.command, cmd)

    def test_quiet_tick_still_renders(self) -> None:
        self.tick()
        self.assertEqual(self.renderer.frames, 1)
        self.assertEqual(self.sent_commands(), [])
        self.assertIs(self.coord.phase, Phase.RUNNING)

    def test_batches_replace_the_collections(self) -> None:
        two = [Target(10.0, 10.0, 1.0, 1, 1, 0.0), Target(20.0, 20.0, 1.0, 2, 1, 0.0)]
        os.write(self.tgt_w, pack_batch(two, Target, CAPACITY))
        self.tick()
        self.assertEqual(self.coord.world.num_targets, 2)
        self.assertEqual(len(self.coord.world.targets), CAPACITY)

        os.write(self.tgt_w, pack_batch(two[:1], Target, CAPACITY))
        self.tick()
        self.assertEqual(self.coord.world.num_targets, 1)
        self.assertEqual(self.renderer.last_snapshot.num_targets, 1)

    def test_obstacle_end_of_stream_keeps_last_batch(self) -> None:
        obs = [Obstacle(5.0, 5.0, 1.0, 1)]
        os.write(self.obs_w, pack_batch(obs, Obstacle, CAPACITY))
        self.tick()
        self.close_test_end(self.obs_w)
        self.tick()
        self.tick()
        self.assertIs(self.coord.phase, Phase.RUNNING)
        self.assertEqual(self.coord.world.num_obstacles, 1)
        self.assertEqual(self.coord.metrics.end_of_stream, {"obstacles": 1})

    def test_drone_end_of_stream_shuts_down_cleanly(self) -> None:
        self.close_test_end(self.state_w)
        self.tick()
        self.assertIs(self.coord.phase, Phase.SHUTTING_DOWN)
        self.coord.shutdown()
        self.assertEqual(self.coord.exit_code, 0)
        # the drone is gone, so no quit command is written to it
        self.assertEqual(self.sent_commands(), [])
        self.assertEqual(self.coord.metrics.errors, {})

    def test_input_end_of_stream_is_fatal(self) -> None:
        self.close_test_end(self.input_w)
        self.tick()
        self.assertIs(self.coord.phase, Phase.SHUTTING_DOWN)
        self.assertEqual(self.coord.metrics.end_of_stream, {"input": 1})
        self.coord.shutdown()
        self.assertEqual(self.coord.exit_code, 0)
        self.assertEqual([c.quit for c in self.sent_commands()], [1])

    def test_truncated_batch_is_fatal(self) -> None:
        os.write(self.tgt_w, b"\x00" * 17)
        self.close_test_end(self.tgt_w)
        self.tick()
        self.assertIs(self.coord.phase, Phase.SHUTTING_DOWN)
        self.assertEqual(self.coord.exit_code, 1)
        self.assertEqual(self.coord.metrics.errors, {"targets": 1})

    def test_interrupted_wait_is_retried(self) -> None:
        selector = self.coord._selector
        real_select = selector.select
        calls = []

        def select_once_interrupted(timeout=None):
            calls.append(timeout)
            if len(calls) == 1:
                raise InterruptedError()
            return real_select(timeout)

        state = KinematicState(x=7.0, y=8.0)
        os.write(self.state_w, state.pack())
        with mock.patch.object(selector, "select", side_effect=select_once_interrupted):
            self.tick()
        self.assertEqual(len(calls), 2)
        self.assertLessEqual(calls[1], calls[0])
        self.assertEqual(self.coord.world.drone, state)
        self.assertIs(self.coord.phase, Phase.RUNNING)

    def test_truncated_record_is_fatal(self) -> None:
        os.write(self.state_w, b"\x00" * 10)
        self.close_test_end(self.state_w)
        self.tick()
        self.assertIs(self.coord.phase, Phase.SHUTTING_DOWN)
        self.assertEqual(self.coord.exit_code, 1)
        self.assertEqual(self.coord.metrics.errors, {"drone_state": 1})

    def test_quit_is_forwarded_once(self) -> None:
        os.write(self.input_w, CommandState(quit=1, last_key=ord("Q")).pack())
        self.tick()
        self.assertIs(self.coord.phase, Phase.SHUTTING_DOWN)
        self.coord.shutdown()
        self.assertEqual([c.quit for c in self.sent_commands()], [1])
        self.assertEqual(self.coord.exit_code, 0)

    def test_hits_score_and_notify(self) -> None:
        target = Target(10.0, 10.0, 1.0, 9, 1, 0.0)
        os.write(self.tgt_w, pack_batch([target], Target, CAPACITY))
        os.write(self.state_w, KinematicState(x=9.0, y=10.0).pack())
        self.tick()
        os.write(self.state_w, KinematicState(x=11.0, y=10.0).pack())
        self.tick()
        self.assertEqual(self.coord.world.score, 1)
        self.assertEqual(self.renderer.last_snapshot.score, 1)
        self.assertEqual(self.notifier.events, [("target_hit", {"id": 9, "score": 1})])

    def test_cancellation_stops_the_loop(self) -> None:
        self.coord.start()
        self.token.cancel("test")
        self.coord.tick(timeout=0.05)
        self.assertIs(self.coord.phase, Phase.SHUTTING_DOWN)
        self.assertEqual(self.coord.metrics.ticks, 0)


class RepulsionForwardingTests(CoordinatorHarness):
    params = SimParams(rho=5.0, eta=1.0)

    def test_user_force_plus_repulsion_is_sent(self) -> None:
        os.write(self.state_w, KinematicState(x=1.0, y=25.0, vx=-2.0).pack())
        os.write(self.input_w, CommandState(fx=2.0, last_key=ord("d")).pack())
        self.tick()
        sent = self.sent_commands()
        self.assertEqual(len(sent), 1)
        self.assertAlmostEqual(sent[0].fx, 3.6)
        self.assertAlmostEqual(sent[0].fy, 0.0)
        self.assertEqual(sent[0].last_key, ord("d"))
        self.assertAlmostEqual(self.renderer.last_snapshot.repulsion[0], 1.6)

    def test_state_is_applied_before_input_in_the_same_tick(self) -> None:
        os.write(self.input_w, CommandState(fx=2.0).pack())
        os.write(self.state_w, KinematicState(x=1.0, y=25.0, vx=-2.0).pack())
        self.tick()
        sent = self.sent_commands()
        self.assertEqual(len(sent), 1)
        self.assertAlmostEqual(sent[0].fx, 3.6)
        self.assertEqual(self.coord.world.drone.x, 1.0)

    def test_idle_tick_sends_nothing(self) -> None:
        os.write(self.state_w, KinematicState(x=25.0, y=25.0).pack())
        self.tick()
        self.assertEqual(self.sent_commands(), [])

    def test_one_command_after_repulsion_fades(self) -> None:
        os.write(self.state_w, KinematicState(x=1.0, y=25.0, vx=-2.0).pack())
        self.tick()
        self.assertEqual(len(self.sent_commands()), 1)

        os.write(self.state_w, KinematicState(x=25.0, y=25.0, vx=1.0).pack())
        self.tick()
        self.assertEqual(self.sent_commands(), [CommandState()])

        os.write(self.state_w, KinematicState(x=25.5, y=25.0, vx=1.0).pack())
        self.tick()
        self.assertEqual(self.sent_commands(), [])

    def test_raw_input_is_not_sent_twice(self) -> None:
        os.write(self.input_w, CommandState(fx=1.5).pack())
        self.tick()
        self.assertEqual(self.sent_commands(), [CommandState(fx=1.5)])


class MenuQuitTests(CoordinatorHarness):
    renderer_factory = QuitMenuRenderer

    def test_quit_from_menu(self) -> None:
        self.assertEqual(self.coord.run(), 0)
        self.assertEqual(self.coord.metrics.ticks, 0)
        self.assertEqual([c.quit for c in self.sent_commands()], [1])


class RunTests(CoordinatorHarness):
    def test_run_until_drone_closes(self) -> None:
        os.write(self.state_w, KinematicState(x=2.0, y=2.0).pack())
        self.close_test_end(self.state_w)
        self.assertEqual(self.coord.run(), 0)
        self.assertEqual(self.renderer.frames, 1)
        self.assertEqual(self.coord.world.drone.x, 2.0)

    def test_population_read_error_ends_the_run(self) -> None:
        os.write(self.obs_w, b"\x01" * 30)
        self.close_test_end(self.obs_w)
        self.assertEqual(self.coord.run(), 1)
        self.assertIs(self.coord.phase, Phase.SHUTTING_DOWN)
        self.assertEqual(self.coord.metrics.errors, {"obstacles": 1})


if __name__ == "__main__":
    unittest.main()
