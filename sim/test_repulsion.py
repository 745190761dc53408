#!/usr/bin/env python3
"""
Tests for wall and obstacle repulsion.
"""

from __future__ import annotations

import math
import unittest

from ipc.records import KinematicState, Obstacle
from sim.repulsion import (
    MIN_DISTANCE,
    compute_repulsion,
    obstacle_repulsion,
    repulsive_magnitude,
    wall_repulsion,
)

W = H = 50.0


class MagnitudeTests(unittest.TestCase):
    def test_known_value(self) -> None:
        # eta * ((1/1 - 1/5) / 1) * 2
        self.assertAlmostEqual(repulsive_magnitude(1.0, 5.0, 1.0, 2.0), 1.6)

    def test_zero_outside_the_band(self) -> None:
        self.assertEqual(repulsive_magnitude(MIN_DISTANCE, 5.0, 1.0, 2.0), 0.0)
        self.assertEqual(repulsive_magnitude(0.05, 5.0, 1.0, 2.0), 0.0)
        self.assertEqual(repulsive_magnitude(5.01, 5.0, 1.0, 2.0), 0.0)
        self.assertEqual(repulsive_magnitude(5.0, 5.0, 1.0, 2.0), 0.0)

    def test_stationary_drone_feels_nothing(self) -> None:
        self.assertEqual(repulsive_magnitude(1.0, 5.0, 1.0, 0.0), 0.0)

    def test_grows_as_distance_shrinks(self) -> None:
        near = repulsive_magnitude(0.5, 5.0, 1.0, 1.0)
        far = repulsive_magnitude(2.0, 5.0, 1.0, 1.0)
        self.assertGreater(near, far)
        self.assertGreater(far, 0.0)


class WallTests(unittest.TestCase):
    def test_left_wall_pushes_right(self) -> None:
        fx, fy = wall_repulsion(KinematicState(x=1.0, y=25.0, vx=-2.0), W, H, 5.0, 1.0)
        self.assertAlmostEqual(fx, 1.6)
        self.assertEqual(fy, 0.0)

    def test_far_walls_push_back(self) -> None:
        fx, fy = wall_repulsion(KinematicState(x=49.0, y=49.0, vx=2.0), W, H, 5.0, 1.0)
        self.assertAlmostEqual(fx, -1.6)
        self.assertAlmostEqual(fy, -1.6)

    def test_centre_is_force_free(self) -> None:
        self.assertEqual(wall_repulsion(KinematicState(x=25.0, y=25.0, vx=3.0), W, H, 5.0, 1.0), (0.0, 0.0))


class ObstacleTests(unittest.TestCase):
    def test_push_points_away_from_the_centre(self) -> None:
        state = KinematicState(x=22.0, y=25.0, vy=1.0)
        fx, fy = obstacle_repulsion(state, [Obstacle(x=25.0, y=25.0, radius=1.0, active=1)], 5.0, 1.0)
        self.assertLess(fx, 0.0)
        self.assertAlmostEqual(fy, 0.0)
        # obstacles act over 1.5 * rho
        self.assertAlmostEqual(-fx, repulsive_magnitude(3.0, 7.5, 1.0, 1.0))

    def test_reaches_beyond_the_wall_radius(self) -> None:
        state = KinematicState(x=19.0, y=25.0, vx=1.0)
        fx, _ = obstacle_repulsion(state, [Obstacle(x=25.0, y=25.0, radius=1.0, active=1)], 5.0, 1.0)
        self.assertLess(fx, 0.0)

    def test_inactive_obstacles_are_ignored(self) -> None:
        state = KinematicState(x=24.0, y=25.0, vx=1.0)
        self.assertEqual(
            obstacle_repulsion(state, [Obstacle(x=25.0, y=25.0, radius=1.0, active=0)], 5.0, 1.0),
            (0.0, 0.0),
        )

    def test_contributions_superpose(self) -> None:
        state = KinematicState(x=25.0, y=25.0, vx=1.0)
        a = Obstacle(x=23.0, y=25.0, radius=1.0, active=1)
        b = Obstacle(x=25.0, y=23.0, radius=1.0, active=1)
        fx, fy = obstacle_repulsion(state, [a, b], 5.0, 1.0)
        ax, _ = obstacle_repulsion(state, [a], 5.0, 1.0)
        _, by = obstacle_repulsion(state, [b], 5.0, 1.0)
        self.assertAlmostEqual(fx, ax)
        self.assertAlmostEqual(fy, by)
        self.assertAlmostEqual(fx, fy)
        self.assertAlmostEqual(math.hypot(fx, fy), math.sqrt(2.0) * ax)


class ComputeRepulsionTests(unittest.TestCase):
    def test_disabled_when_rho_or_eta_not_positive(self) -> None:
        state = KinematicState(x=1.0, y=1.0, vx=-2.0, vy=-2.0)
        obs = [Obstacle(x=2.0, y=2.0, radius=1.0, active=1)]
        self.assertEqual(compute_repulsion(state, obs, W, H, 0.0, 1.0), (0.0, 0.0))
        self.assertEqual(compute_repulsion(state, obs, W, H, 5.0, 0.0), (0.0, 0.0))
        self.assertEqual(compute_repulsion(state, obs, W, H, -1.0, 1.0), (0.0, 0.0))

    def test_walls_and_obstacles_add_up(self) -> None:
        state = KinematicState(x=1.0, y=25.0, vx=-2.0)
        obs = [Obstacle(x=1.0, y=23.0, radius=1.0, active=1)]
        fx, fy = compute_repulsion(state, obs, W, H, 5.0, 1.0)
        self.assertAlmostEqual(fx, 1.6)
        self.assertGreater(fy, 0.0)


if __name__ == "__main__":
    unittest.main()
