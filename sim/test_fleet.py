#!/usr/bin/env python3
"""
Fleet tests: turn draws, spawning cadence, removal and statistics.
"""

from __future__ import annotations

import math
import random
import unittest

from sim.fleet import FleetManager, Stats, pick_turn
from sim.paths import spawn_pose
from sim.settings import SimulationSettings
from sim.signals import SignalBank
from sim.traffic_policy import TrafficPolicy
from sim.types import Direction, SignalColor, TurnIntent
from sim.vehicle import Vehicle


class PickTurnTests(unittest.TestCase):
    def test_thresholds(self) -> None:
        self.assertIs(pick_turn(0.0, 25.0), TurnIntent.LEFT)
        self.assertIs(pick_turn(0.12, 25.0), TurnIntent.LEFT)
        self.assertIs(pick_turn(0.2, 25.0), TurnIntent.RIGHT)
        self.assertIs(pick_turn(0.25, 25.0), TurnIntent.STRAIGHT)
        self.assertIs(pick_turn(0.0, 0.0), TurnIntent.STRAIGHT)
        self.assertIs(pick_turn(0.99, 100.0), TurnIntent.RIGHT)

    def test_distribution_matches_turn_rate(self) -> None:
        rng = random.Random(3)
        n = 20000
        counts = {t: 0 for t in TurnIntent}
        for _ in range(n):
            counts[pick_turn(rng.random(), 25.0)] += 1
        self.assertAlmostEqual(counts[TurnIntent.LEFT] / n, 0.125, delta=0.015)
        self.assertAlmostEqual(counts[TurnIntent.RIGHT] / n, 0.125, delta=0.015)
        self.assertAlmostEqual(counts[TurnIntent.STRAIGHT] / n, 0.75, delta=0.02)


class SpawningTests(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = TrafficPolicy()
        self.fleet = FleetManager(self.policy, seed=1)
        self.settings = SimulationSettings(car_spawn_rate=4.0)
        self.lights = SignalBank(SignalColor.GREEN)

    def _step(self, n: int, dt: float = 0.5) -> None:
        for _ in range(n):
            self.fleet.update(dt, self.lights, self.settings)

    def test_one_vehicle_per_direction_per_interval(self) -> None:
        self._step(4)
        self.assertEqual(self.fleet.vehicles, [])
        self._step(1)
        self.assertEqual(len(self.fleet.vehicles), 4)
        self.assertEqual([v.id for v in self.fleet.vehicles], [1, 2, 3, 4])
        self.assertEqual(
            [v.direction for v in self.fleet.vehicles],
            [Direction.NORTH, Direction.WEST, Direction.SOUTH, Direction.EAST],
        )
        self.assertEqual(self.fleet.stats.current_cars, 4)

    def test_blocked_spawn_is_deferred(self) -> None:
        pose = spawn_pose(Direction.NORTH, self.policy)
        blocker = Vehicle(
            id=100,
            direction=Direction.NORTH,
            turn=TurnIntent.STRAIGHT,
            x=pose.x,
            y=pose.y,
            heading=pose.heading,
            target_speed=0.0,
        )
        self.fleet.vehicles.append(blocker)
        self._step(5)
        self.assertEqual(len(self.fleet.vehicles_in_direction(Direction.NORTH)), 1)
        self.assertEqual(len(self.fleet.vehicles_in_direction(Direction.EAST)), 1)
        self.assertGreaterEqual(self.fleet.spawn_timers[Direction.NORTH], 2.5)

        self.fleet.vehicles.remove(blocker)
        self._step(1)
        self.assertEqual(len(self.fleet.vehicles_in_direction(Direction.NORTH)), 1)
        self.assertEqual(self.fleet.spawn_timers[Direction.NORTH], 0.0)

    def test_zero_rate_disables_spawning(self) -> None:
        self.settings = SimulationSettings(car_spawn_rate=0.0)
        self._step(100)
        self.assertEqual(self.fleet.vehicles, [])

    def test_reset_replays_the_same_draws(self) -> None:
        settings = SimulationSettings(turn_rate=50.0)
        first = [self.fleet.spawn(Direction.SOUTH, settings) for _ in range(8)]
        self.fleet.reset()
        second = [self.fleet.spawn(Direction.SOUTH, settings) for _ in range(8)]
        self.assertEqual([(v.id, v.turn, v.color) for v in first], [(v.id, v.turn, v.color) for v in second])

    def test_spawned_vehicle_uses_car_speed(self) -> None:
        v = self.fleet.spawn(Direction.WEST, SimulationSettings(car_speed=40.0), TurnIntent.RIGHT)
        self.assertEqual(v.target_speed, 40.0)
        self.assertIs(v.turn, TurnIntent.RIGHT)


class RemovalTests(unittest.TestCase):
    def test_off_screen_vehicle_is_counted(self) -> None:
        policy = TrafficPolicy()
        fleet = FleetManager(policy, seed=1)
        gone = Vehicle(
            id=7,
            direction=Direction.WEST,
            turn=TurnIntent.STRAIGHT,
            x=-200.0,
            y=480.0,
            heading=math.pi,
            target_speed=0.0,
            total_wait_time=4.0,
        )
        fleet.vehicles.append(gone)
        removed = fleet.update(0.5, SignalBank(), SimulationSettings(car_spawn_rate=0.0))
        self.assertEqual(removed, [gone])
        self.assertEqual(fleet.vehicles, [])
        self.assertEqual(fleet.stats.total_cars_passed, 1)
        self.assertAlmostEqual(fleet.stats.direction_average_wait(Direction.WEST), 4.5)
        self.assertEqual(fleet.stats.current_cars, 0)


class StatsTests(unittest.TestCase):
    def test_averages_and_export_form(self) -> None:
        stats = Stats()
        stats.add_car_passed(Direction.NORTH, 2.0)
        stats.add_car_passed(Direction.NORTH, 4.0)
        stats.add_car_passed(Direction.EAST, 3.0)
        self.assertEqual(stats.total_cars_passed, 3)
        self.assertAlmostEqual(stats.average_wait_time(), 3.0)
        data = stats.as_dict()
        self.assertEqual(data["totalCarsPassed"], 3)
        self.assertEqual(data["directionStats"]["North"], {"passed": 2, "totalWait": 6.0, "averageWait": 3.0})
        self.assertEqual(data["directionStats"]["West"]["averageWait"], 0.0)

    def test_empty_average_is_zero(self) -> None:
        self.assertEqual(Stats().average_wait_time(), 0.0)

    def test_reset(self) -> None:
        stats = Stats()
        stats.add_car_passed(Direction.SOUTH, 1.0)
        stats.reset()
        self.assertEqual(stats.total_cars_passed, 0)
        self.assertEqual(stats.direction_stats[Direction.SOUTH].passed, 0)


if __name__ == "__main__":
    unittest.main()
