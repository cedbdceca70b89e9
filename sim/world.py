#!/usr/bin/env python3
"""
sim/world.py
============
The intersection world.

:class:`World` owns the engine constants, the runtime settings, the signal
heads, the detection zones, the signal controller and the fleet.  One call
to :meth:`World.update` runs one tick in a fixed order:

1. apply settings overrides (mode switches go through :meth:`set_mode`);
2. rescan detection zones;
3. advance the active signal controller;
4. spawn, move and remove vehicles.

Everything the viewer, the API or an export needs is read back through the
accessors at the bottom of the class.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from sim.fleet import FleetManager, Stats
from sim.sensors import SensorArray
from sim.settings import SimulationSettings
from sim.signals import SignalBank, TrafficController
from sim.traffic_policy import TrafficPolicy
from sim.types import ControllerMode, Direction, PhaseInfo, SignalColor

log = logging.getLogger("world")

SettingsLike = Union[SimulationSettings, Mapping[str, Any], None]

_DEBUG_EVERY_TICKS = 30


class World:
    """Single four-way intersection.

    Parameters
    ----------
    settings : SimulationSettings or None
        Initial runtime settings; defaults when *None*.
    policy : TrafficPolicy or None
        Engine constants; defaults when *None*.
    seed : int or None
        Seed of the fleet's RNG, reused on :meth:`reset`.
    """

    def __init__(
        self,
        settings: Optional[SimulationSettings] = None,
        policy: Optional[TrafficPolicy] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.policy = policy or TrafficPolicy()
        self.settings = settings or SimulationSettings()
        self.lights = SignalBank()
        self.sensors = SensorArray(self.policy, self.settings.detector_distance)
        self.controller = TrafficController(self.policy, self.settings)
        self.fleet = FleetManager(self.policy, seed=seed)
        self.controller.reset(self.lights)
        self._tick_count = 0
        self.sim_time = 0.0

    # ── settings / mode ───────────────────────────────────────────────────

    def apply_settings(self, settings: SettingsLike) -> SimulationSettings:
        """Merge *settings* into the current ones and push them to the components.

        Accepts a full :class:`SimulationSettings` or a mapping of overrides.
        """
        if settings is None:
            return self.settings
        if isinstance(settings, SimulationSettings):
            new = settings
        else:
            new = self.settings.merged(settings)
        if new.mode is not self.settings.mode:
            self.set_mode(new.mode)
        self.settings = new
        self.sensors.set_detector_distance(new.detector_distance)
        self.controller.update_settings(new)
        return new

    def set_mode(self, mode: Any) -> None:
        """Switch the signal strategy; signals drop to the new strategy's safe state.

        Raises
        ------
        ValueError
            If *mode* is unknown.
        """
        parsed = ControllerMode.parse(mode)
        self.controller.set_mode(parsed, self.lights)
        self.settings = replace(self.settings, mode=parsed)

    # ── tick ──────────────────────────────────────────────────────────────

    def update(self, dt: float, settings: SettingsLike = None) -> None:
        """Advance the world by *dt* seconds.

        Raises
        ------
        ValueError
            If *dt* is negative or *settings* holds an unknown key or mode.
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        self.apply_settings(settings)

        self.sensors.update(self.fleet.vehicles)
        self.controller.update(dt, self.lights, self.sensors, self.settings)
        self.fleet.update(dt, self.lights, self.settings)

        self._tick_count += 1
        self.sim_time += dt
        if self._tick_count % _DEBUG_EVERY_TICKS == 1:
            info = self.phase_info()
            log.debug(
                "=== TICK %d t=%.2f === mode=%s phase=%s rem=%.1f cars=%d passed=%d signals=%s",
                self._tick_count, self.sim_time, self.settings.mode.value,
                info.phase, info.remaining, len(self.fleet.vehicles),
                self.fleet.stats.total_cars_passed, self.lights.as_dict(),
            )
            for v in self.fleet.vehicles:
                log.debug(
                    "  #%d %s/%s pos=(%.1f,%.1f) hdg=%.2f spd=%.1f state=%s wait=%.1f",
                    v.id, v.direction.label, v.turn.name.lower(), v.x, v.y,
                    v.heading, v.speed, v.state.value, v.wait_time,
                )

    def reset(self) -> None:
        """Drop every vehicle and statistic and restart the active controller."""
        self.fleet.reset()
        self.sensors.reset()
        self.controller.reset(self.lights)
        self._tick_count = 0
        self.sim_time = 0.0
        log.info("World reset (mode=%s)", self.settings.mode.value)

    # ── accessors ─────────────────────────────────────────────────────────

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def stats(self) -> Stats:
        return self.fleet.stats

    @property
    def mode(self) -> ControllerMode:
        return self.controller.mode

    def signal_color(self, direction: Any) -> SignalColor:
        return self.lights.get(Direction.parse(direction))

    def signal_colors(self) -> Dict[str, str]:
        return self.lights.as_dict()

    def vehicles(self) -> List[Dict[str, Any]]:
        return [v.as_dict() for v in self.fleet.vehicles]

    def phase_info(self) -> PhaseInfo:
        return self.controller.current_info()

    def sensor_stats(self) -> Dict[str, Dict[str, int]]:
        return self.sensors.stats()

    def zones(self) -> Dict[str, Tuple[float, float, float, float]]:
        return {d.label: tuple(z.rect) for d, z in self.sensors.zones.items()}

    def priorities(self) -> Dict[str, float]:
        return {d.label: p for d, p in self.controller.adaptive.last_priorities.items()}

    def snapshot(self) -> Dict[str, Any]:
        """Flat, JSON-ready view of the whole world."""
        info = self.phase_info()
        return {
            "tick": self._tick_count,
            "time": self.sim_time,
            "mode": self.mode.value,
            "settings": self.settings.as_dict(),
            "signals": self.signal_colors(),
            "phase": info._asdict(),
            "vehicles": self.vehicles(),
            "stats": self.stats.as_dict(),
            "sensors": self.sensor_stats(),
            "zones": self.zones(),
            "priorities": self.priorities(),
        }

    def export_data(self) -> Dict[str, Any]:
        """Settings, statistics and per-direction sensor counts."""
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "settings": self.settings.as_dict(),
            "stats": self.stats.as_dict(),
            "sensorStats": self.sensor_stats(),
        }

    def export_json(self, path: str) -> Dict[str, Any]:
        data = self.export_data()
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2)
        log.info("Exported statistics to %s", path)
        return data
