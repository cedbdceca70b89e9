#!/usr/bin/env python3
"""
World-level tests: long-run signal safety, settings overrides, snapshots,
exports and the background bridge.
"""

from __future__ import annotations

import json
import os
import tempfile
import time
import unittest
from typing import Tuple

from sim.settings import SimulationSettings
from sim.sim_bridge import MAX_DT, SimBridge
from sim.signals import exclusive_axes
from sim.traffic_policy import TrafficPolicy
from sim.types import ControllerMode, Direction, SignalColor
from sim.world import World

_DT = 1.0 / 30.0


class LongRunSafetyTests(unittest.TestCase):
    def _run(self, mode: str, seconds: float) -> Tuple[World, int]:
        """Drive a busy world; return it with the number of ticks that showed a green light."""
        world = World(
            settings=SimulationSettings(mode=mode, car_spawn_rate=6.0, turn_rate=40.0),
            seed=11,
        )
        green_ticks = 0
        for _ in range(int(seconds / _DT)):
            world.update(_DT)
            self.assertTrue(exclusive_axes(world.lights), msg=f"t={world.sim_time:.2f} {world.signal_colors()}")
            if any(world.lights.get(d) is SignalColor.GREEN for d in Direction):
                green_ticks += 1
            for v in world.fleet.vehicles:
                self.assertGreaterEqual(v.speed, 0.0)
                self.assertLessEqual(v.speed, v.target_speed)
                # Removal must always happen before the path runs out.
                self.assertFalse(v.path_finished, msg=f"#{v.id} ran out of path at ({v.x:.1f}, {v.y:.1f})")
        return world, green_ticks

    def test_fixed_mode_keeps_axes_exclusive_and_flows(self) -> None:
        world, green_ticks = self._run("fixed", 120.0)
        self.assertGreater(green_ticks, 0)
        self.assertGreater(world.stats.total_cars_passed, 0)

    def test_adaptive_mode_serves_queues(self) -> None:
        world, green_ticks = self._run("adaptive", 180.0)
        self.assertGreater(green_ticks, 0)
        self.assertGreater(world.stats.total_cars_passed, 0)
        self.assertLessEqual(len(world.lights.non_red()), 1)

    def test_abrupt_stops_leave_adaptive_idle(self) -> None:
        world = World(
            settings=SimulationSettings(mode=ControllerMode.ADAPTIVE),
            policy=TrafficPolicy(stop_line_braking=False),
            seed=11,
        )
        for _ in range(int(30.0 / _DT)):
            world.update(_DT)
        self.assertEqual(world.lights.non_red(), [])
        self.assertEqual(world.stats.total_cars_passed, 0)

    def test_same_seed_replays_identically(self) -> None:
        a = World(seed=5)
        b = World(seed=5)
        for _ in range(300):
            a.update(_DT)
            b.update(_DT)
        self.assertEqual(
            [(v["id"], v["turn"], v["x"], v["y"]) for v in a.vehicles()],
            [(v["id"], v["turn"], v["x"], v["y"]) for v in b.vehicles()],
        )


class SettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.world = World(seed=1)

    def test_partial_camel_case_overrides(self) -> None:
        self.world.update(_DT, {"greenDuration": 20, "carSpeed": None})
        self.assertEqual(self.world.settings.green_duration, 20.0)
        self.assertEqual(self.world.settings.car_speed, 25.0)
        self.assertEqual(self.world.controller.fixed.durations[0], 20.0)

    def test_unknown_key_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.world.update(_DT, {"warpSpeed": 9})

    def test_mode_override_switches_controller(self) -> None:
        self.world.update(_DT, {"mode": "adaptive"})
        self.assertIs(self.world.mode, ControllerMode.ADAPTIVE)
        self.assertEqual(self.world.lights.non_red(), [])
        self.assertEqual(self.world.settings.mode, ControllerMode.ADAPTIVE)

    def test_detector_distance_reaches_sensors_clamped(self) -> None:
        self.world.update(_DT, {"detectorDistance": 1000})
        self.assertEqual(self.world.sensors.detector_distance, self.world.policy.detector_max)

    def test_negative_dt_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.world.update(-_DT)

    def test_signal_color_accepts_names(self) -> None:
        self.assertIs(self.world.signal_color("east"), SignalColor.GREEN)
        self.assertIs(self.world.signal_color(Direction.NORTH), SignalColor.RED)


class OutputTests(unittest.TestCase):
    def test_snapshot_keys(self) -> None:
        world = World(seed=1)
        for _ in range(90):
            world.update(_DT)
        snap = world.snapshot()
        self.assertEqual(
            set(snap),
            {"tick", "time", "mode", "settings", "signals", "phase", "vehicles",
             "stats", "sensors", "zones", "priorities"},
        )
        self.assertEqual(snap["tick"], 90)
        self.assertEqual(snap["mode"], "fixed")
        self.assertEqual(set(snap["phase"]), {"phase", "remaining", "progress"})
        json.dumps(snap)

    def test_export_json_writes_document(self) -> None:
        world = World(seed=1)
        for _ in range(30):
            world.update(_DT)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "stats.json")
            world.export_json(path)
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        self.assertEqual(set(data), {"timestamp", "settings", "stats", "sensorStats"})
        self.assertEqual(data["settings"]["mode"], "fixed")
        self.assertEqual(data["settings"]["greenDuration"], 10.0)
        self.assertEqual(set(data["sensorStats"]), {"North", "West", "South", "East"})

    def test_reset_clears_everything(self) -> None:
        world = World(seed=1)
        for _ in range(200):
            world.update(_DT)
        world.reset()
        self.assertEqual(world.tick_count, 0)
        self.assertEqual(world.vehicles(), [])
        self.assertEqual(world.stats.total_cars_passed, 0)
        self.assertEqual(world.controller.fixed.phase, 0)


class BridgeTests(unittest.TestCase):
    def test_step_caps_dt(self) -> None:
        bridge = SimBridge(random_seed=1)
        bridge.step(0.5)
        self.assertAlmostEqual(bridge.world.sim_time, MAX_DT)
        self.assertEqual(bridge.get_snapshot()["tick"], 1)

    def test_settings_apply_at_next_tick(self) -> None:
        bridge = SimBridge(random_seed=1)
        bridge.apply_settings(greenDuration=15)
        self.assertEqual(bridge.get_settings()["greenDuration"], 10.0)
        bridge.step(_DT)
        self.assertEqual(bridge.get_settings()["greenDuration"], 15.0)

    def test_effective_settings_include_queued_overrides(self) -> None:
        bridge = SimBridge(random_seed=1)
        bridge.apply_settings(greenDuration=15)
        bridge.apply_settings(carSpeed=30)
        effective = bridge.effective_settings()
        self.assertEqual(effective["greenDuration"], 15.0)
        self.assertEqual(effective["carSpeed"], 30.0)
        self.assertEqual(bridge.get_settings()["greenDuration"], 10.0)
        bridge.step(_DT)
        self.assertEqual(bridge.get_settings(), effective)

    def test_invalid_settings_rejected_immediately(self) -> None:
        bridge = SimBridge(random_seed=1)
        with self.assertRaises(ValueError):
            bridge.apply_settings(bogus=1)
        with self.assertRaises(ValueError):
            bridge.apply_settings(mode="sideways")

    def test_set_mode_is_immediate(self) -> None:
        bridge = SimBridge(random_seed=1)
        bridge.set_mode("adaptive")
        self.assertEqual(bridge.get_snapshot()["mode"], "adaptive")
        self.assertEqual(bridge.get_signals(), {"North": "red", "West": "red", "South": "red", "East": "red"})

    def test_background_thread_ticks(self) -> None:
        bridge = SimBridge(tick_rate_hz=60.0, random_seed=1)
        bridge.start()
        try:
            time.sleep(0.3)
        finally:
            bridge.stop()
        self.assertGreater(bridge.get_snapshot()["tick"], 0)


if __name__ == "__main__":
    unittest.main()
