#!/usr/bin/env python3
"""
Signal controller tests: fixed cycle timing, adaptive priority switching
and mode changes.
"""

from __future__ import annotations

import math
import unittest
from typing import Any, Dict

from sim.sensors import SensorArray
from sim.settings import SimulationSettings
from sim.signals import (
    AdaptivePriorityController,
    AdaptiveState,
    FixedTimerController,
    SignalBank,
    TrafficController,
    exclusive_axes,
)
from sim.traffic_policy import TrafficPolicy
from sim.types import ControllerMode, Direction, SignalColor, TurnIntent, VehicleState
from sim.vehicle import Vehicle

_R, _Y, _G = SignalColor.RED, SignalColor.YELLOW, SignalColor.GREEN


class StubSensors:
    """Feeds fixed priority inputs to the adaptive controller."""

    def __init__(self) -> None:
        self.data: Dict[Direction, Dict[str, Any]] = {}

    def demand(self, direction: Direction, waiting: int, avg_wait: float = 0.0) -> None:
        self.data[direction] = {"waiting_count": waiting, "avg_wait_time": avg_wait, "total_cars": waiting}

    def clear(self) -> None:
        self.data = {}

    def priority_data(self) -> Dict[Direction, Dict[str, Any]]:
        return dict(self.data)


class FixedTimerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.lights = SignalBank()
        self.ctrl = FixedTimerController(10.0, 3.0, 3.0)
        self.ctrl.reset(self.lights)

    def _step(self, n: int, dt: float = 0.5) -> None:
        for _ in range(n):
            self.ctrl.update(dt, self.lights)
            self.assertTrue(exclusive_axes(self.lights))

    def test_reset_starts_with_east_west_green(self) -> None:
        self.assertEqual(self.ctrl.phase, 0)
        self.assertIs(self.lights.get(Direction.EAST), _G)
        self.assertIs(self.lights.get(Direction.WEST), _G)
        self.assertIs(self.lights.get(Direction.NORTH), _R)
        self.assertIs(self.lights.get(Direction.SOUTH), _R)

    def test_phase_sequence_and_timing(self) -> None:
        self._step(19)
        self.assertEqual(self.ctrl.phase, 0)
        self._step(1)
        self.assertEqual(self.ctrl.phase, 1)
        self.assertEqual(self.ctrl.timer, 0.0)
        self.assertIs(self.lights.get(Direction.EAST), _Y)
        self._step(6)
        self.assertEqual(self.ctrl.phase_name, "All Red")
        self.assertEqual(self.lights.non_red(), [])
        self._step(6)
        self.assertEqual(self.ctrl.phase_name, "North-South Green")
        self.assertIs(self.lights.get(Direction.NORTH), _G)
        self.assertIs(self.lights.get(Direction.EAST), _R)
        self._step(20 + 6)
        self.assertEqual(self.ctrl.phase_name, "All Red")
        self.assertEqual(self.ctrl.phase, 5)
        self._step(6)
        self.assertEqual(self.ctrl.phase, 0)

    def test_one_advance_per_tick(self) -> None:
        self.ctrl.update(100.0, self.lights)
        self.assertEqual(self.ctrl.phase, 1)
        self.assertEqual(self.ctrl.timer, 0.0)

    def test_current_info(self) -> None:
        self._step(5)
        info = self.ctrl.current_info()
        self.assertEqual(info.phase, "East-West Green")
        self.assertAlmostEqual(info.remaining, 7.5)
        self.assertAlmostEqual(info.progress, 0.25)

    def test_timing_change_applies_to_running_phase(self) -> None:
        self._step(8)
        self.ctrl.update_timings(5.0, 3.0, 3.0)
        self._step(1)
        self.assertEqual(self.ctrl.phase, 0)
        self._step(1)
        self.assertEqual(self.ctrl.phase, 1)


class AdaptiveControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = TrafficPolicy()
        self.lights = SignalBank()
        self.sensors = StubSensors()
        self.ctrl = AdaptivePriorityController(self.policy, 3.0, 3.0)
        self.ctrl.reset(self.lights)

    def _step(self, n: int, dt: float = 0.5) -> None:
        for _ in range(n):
            self.ctrl.update(dt, self.lights, self.sensors)
            self.assertLessEqual(len(self.lights.non_red()), 1)

    def test_idle_without_demand(self) -> None:
        self._step(10)
        self.assertIs(self.ctrl.state, AdaptiveState.IDLE)
        self.assertEqual(self.lights.non_red(), [])
        self.assertEqual(self.ctrl.current_info().phase, "Adaptive - Waiting")

    def test_demand_gets_green_at_next_check(self) -> None:
        self.sensors.demand(Direction.SOUTH, 10)
        self._step(1)
        self.assertIs(self.ctrl.state, AdaptiveState.IDLE)
        self._step(1)
        self.assertIs(self.ctrl.state, AdaptiveState.GREEN)
        self.assertIs(self.ctrl.green_direction, Direction.SOUTH)
        self.assertEqual(self.lights.non_red(), [Direction.SOUTH])
        self.assertAlmostEqual(self.ctrl.last_priorities[Direction.SOUTH], 10.0)

    def _green_south(self) -> None:
        self.sensors.demand(Direction.SOUTH, 10)
        self._step(2)
        self.assertIs(self.ctrl.green_direction, Direction.SOUTH)
        self.sensors.clear()

    def test_min_green_then_yellow_all_red_and_next_green(self) -> None:
        self._green_south()
        self.sensors.demand(Direction.EAST, 20)
        self._step(9)
        self.assertIs(self.ctrl.state, AdaptiveState.GREEN)
        self._step(1)
        self.assertIs(self.ctrl.state, AdaptiveState.YELLOW)
        self.assertIs(self.lights.get(Direction.SOUTH), _Y)
        self.assertIs(self.ctrl.next_direction, Direction.EAST)
        self.assertEqual(self.ctrl.current_info().phase, "South Yellow")
        self._step(6)
        self.assertIs(self.ctrl.state, AdaptiveState.ALL_RED)
        self.assertEqual(self.lights.non_red(), [])
        self._step(6)
        self.assertIs(self.ctrl.state, AdaptiveState.GREEN)
        self.assertEqual(self.lights.non_red(), [Direction.EAST])
        self.assertEqual(self.ctrl.current_info().phase, "East Green")

    def test_hysteresis_blocks_marginal_challenger(self) -> None:
        self._green_south()
        self.sensors.demand(Direction.EAST, 1)
        self._step(20)
        self.assertIs(self.ctrl.green_direction, Direction.SOUTH)
        self.assertIs(self.ctrl.state, AdaptiveState.GREEN)

        self.sensors.demand(Direction.EAST, 1, avg_wait=0.5)
        self._step(2)
        self.assertIs(self.ctrl.state, AdaptiveState.YELLOW)

    def test_max_green_ends_without_demand(self) -> None:
        self._green_south()
        self._step(59)
        self.assertIs(self.ctrl.state, AdaptiveState.GREEN)
        self._step(1)
        self.assertIs(self.ctrl.state, AdaptiveState.YELLOW)
        self._step(12)
        self.assertIs(self.ctrl.state, AdaptiveState.IDLE)
        self.assertIsNone(self.ctrl.green_direction)
        self.assertEqual(self.lights.non_red(), [])

    def test_ties_go_to_lowest_direction(self) -> None:
        self.sensors.demand(Direction.EAST, 5)
        self.sensors.demand(Direction.WEST, 5)
        self._step(2)
        self.assertIs(self.ctrl.green_direction, Direction.WEST)

    def test_queue_in_a_real_detection_zone_wins_green(self) -> None:
        sensors = SensorArray(self.policy, 80.0)
        queue = [
            Vehicle(
                id=i + 1,
                direction=Direction.NORTH,
                turn=TurnIntent.STRAIGHT,
                x=480.0,
                y=661.0 + 4.0 * i,
                heading=-math.pi / 2,
                target_speed=25.0,
                state=VehicleState.APPROACHING,
                wait_time=10.0,
            )
            for i in range(5)
        ]
        sensors.update(queue)
        self.assertEqual(sensors.priority_data()[Direction.NORTH]["waiting_count"], 5)
        self.ctrl.update(0.5, self.lights, sensors)
        self.assertIs(self.ctrl.state, AdaptiveState.IDLE)
        self.ctrl.update(0.5, self.lights, sensors)
        self.assertIs(self.ctrl.state, AdaptiveState.GREEN)
        self.assertEqual(self.lights.non_red(), [Direction.NORTH])
        # 5 waiting cars x 1.0 + 10 s average wait x 0.5
        self.assertAlmostEqual(self.ctrl.last_priorities[Direction.NORTH], 10.0)
        self.assertEqual(self.ctrl.last_priorities[Direction.SOUTH], 0.0)

    def test_no_checks_without_sensors(self) -> None:
        for _ in range(10):
            self.ctrl.update(0.5, self.lights, None)
        self.assertIs(self.ctrl.state, AdaptiveState.IDLE)

    def test_non_positive_durations_keep_previous(self) -> None:
        self.ctrl.update_settings(SimulationSettings(yellow_duration=0.0, red_duration=-1.0))
        self.assertEqual(self.ctrl.yellow_time, 3.0)
        self.assertEqual(self.ctrl.all_red_time, 3.0)
        self.ctrl.update_settings(SimulationSettings(yellow_duration=4.0, red_duration=2.0))
        self.assertEqual(self.ctrl.yellow_time, 4.0)
        self.assertEqual(self.ctrl.all_red_time, 2.0)


class TrafficControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.lights = SignalBank()
        self.ctrl = TrafficController(TrafficPolicy(), SimulationSettings())
        self.ctrl.reset(self.lights)

    def test_default_mode_is_fixed(self) -> None:
        self.assertIs(self.ctrl.mode, ControllerMode.FIXED)
        self.assertIs(self.ctrl.active, self.ctrl.fixed)
        self.assertEqual(set(self.lights.non_red()), {Direction.EAST, Direction.WEST})

    def test_switch_to_adaptive_drops_to_all_red(self) -> None:
        for _ in range(30):
            self.ctrl.update(0.5, self.lights)
        self.ctrl.set_mode("adaptive", self.lights)
        self.assertIs(self.ctrl.mode, ControllerMode.ADAPTIVE)
        self.assertEqual(self.lights.non_red(), [])
        self.assertIs(self.ctrl.adaptive.state, AdaptiveState.IDLE)

    def test_switch_back_to_fixed_restarts_cycle(self) -> None:
        self.ctrl.set_mode(ControllerMode.ADAPTIVE, self.lights)
        self.ctrl.set_mode("fixed", self.lights)
        self.assertEqual(self.ctrl.fixed.phase, 0)
        self.assertEqual(self.ctrl.fixed.timer, 0.0)
        self.assertEqual(set(self.lights.non_red()), {Direction.EAST, Direction.WEST})

    def test_unknown_mode_raises_and_keeps_mode(self) -> None:
        with self.assertRaises(ValueError):
            self.ctrl.set_mode("roundabout", self.lights)
        self.assertIs(self.ctrl.mode, ControllerMode.FIXED)

    def test_settings_reach_both_strategies(self) -> None:
        settings = SimulationSettings(green_duration=12.0, yellow_duration=4.0, red_duration=2.0)
        self.ctrl.update(0.1, self.lights, None, settings)
        self.assertEqual(self.ctrl.fixed.durations, [12.0, 4.0, 2.0, 12.0, 4.0, 2.0])
        self.assertEqual(self.ctrl.adaptive.yellow_time, 4.0)


if __name__ == "__main__":
    unittest.main()
