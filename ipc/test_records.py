#!/usr/bin/env python3
"""
Tests for the fixed wire layouts and batch codecs.
"""

from __future__ import annotations

import struct
import unittest

from ipc.records import (
    COMMAND_SIZE,
    STATE_SIZE,
    CommandState,
    KinematicState,
    Obstacle,
    Target,
    batch_size,
    pack_batch,
    unpack_batch,
)


class WireLayoutTests(unittest.TestCase):
    def test_record_sizes_have_no_padding(self) -> None:
        self.assertEqual(STATE_SIZE, 32)
        self.assertEqual(COMMAND_SIZE, 32)
        self.assertEqual(Obstacle.WIRE.size, 28)
        self.assertEqual(Target.WIRE.size, 40)

    def test_command_is_little_endian_doubles_then_ints(self) -> None:
        raw = struct.pack("<2d4i", 1.5, -2.0, 1, 0, 0, ord("w"))
        cmd = CommandState.unpack(raw)
        self.assertEqual(cmd, CommandState(fx=1.5, fy=-2.0, brake=1, last_key=ord("w")))
        self.assertEqual(cmd.pack(), raw)

    def test_speed(self) -> None:
        self.assertAlmostEqual(KinematicState(vx=3.0, vy=4.0).speed, 5.0)


class BatchTests(unittest.TestCase):
    def test_batch_is_padded_with_inactive_slots(self) -> None:
        obstacles = [Obstacle(1.0, 2.0, 1.0, 1), Obstacle(3.0, 4.0, 1.0, 1)]
        data = pack_batch(obstacles, Obstacle, 8)
        self.assertEqual(len(data), batch_size(Obstacle, 8))

        decoded = unpack_batch(data, Obstacle, 8)
        self.assertEqual(len(decoded), 8)
        self.assertEqual(decoded[:2], obstacles)
        self.assertTrue(all(o == Obstacle() for o in decoded[2:]))
        self.assertEqual(sum(o.active for o in decoded), 2)

    def test_target_fields_survive_a_batch(self) -> None:
        t = Target(x=10.0, y=11.0, radius=1.0, id=7, active=1, created=1700000000.25)
        decoded = unpack_batch(pack_batch([t], Target, 4), Target, 4)
        self.assertEqual(decoded[0], t)

    def test_overfull_batch_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            pack_batch([Obstacle()] * 3, Obstacle, 2)

    def test_wrong_length_batch_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            unpack_batch(b"\x00" * (Obstacle.WIRE.size * 3 - 1), Obstacle, 3)


if __name__ == "__main__":
    unittest.main()
