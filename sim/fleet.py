#!/usr/bin/env python3
"""
sim/fleet.py
============
Vehicle population: spawning, per-tick updates, removal and statistics.

:class:`FleetManager` is the only place vehicles are created or destroyed,
and the only writer of :class:`Stats`.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sim.physics import distance
from sim.paths import spawn_pose
from sim.settings import SimulationSettings
from sim.traffic_policy import TrafficPolicy
from sim.types import Direction, TurnIntent
from sim.vehicle import Vehicle

log = logging.getLogger("fleet")

# Vehicle palette, picked per spawn from the seeded RNG.
VEHICLE_COLORS: Sequence[Tuple[int, int, int]] = (
    (55, 66, 250),
    (47, 53, 66),
    (255, 71, 87),
    (46, 213, 115),
    (255, 165, 2),
    (95, 39, 205),
)


@dataclass
class DirectionStats:
    passed: int = 0
    total_wait: float = 0.0

    @property
    def average_wait(self) -> float:
        return self.total_wait / self.passed if self.passed > 0 else 0.0


@dataclass
class Stats:
    """Cumulative throughput and wait statistics."""

    total_cars_passed: int = 0
    total_wait_time: float = 0.0
    current_cars: int = 0
    direction_stats: Dict[Direction, DirectionStats] = field(
        default_factory=lambda: {d: DirectionStats() for d in Direction}
    )

    def add_car_passed(self, direction: Direction, wait_time: float) -> None:
        self.total_cars_passed += 1
        self.total_wait_time += wait_time
        entry = self.direction_stats[Direction.parse(direction)]
        entry.passed += 1
        entry.total_wait += wait_time

    def average_wait_time(self) -> float:
        if self.total_cars_passed == 0:
            return 0.0
        return self.total_wait_time / self.total_cars_passed

    def direction_average_wait(self, direction: Direction) -> float:
        return self.direction_stats[Direction.parse(direction)].average_wait

    def reset(self) -> None:
        self.total_cars_passed = 0
        self.total_wait_time = 0.0
        self.current_cars = 0
        self.direction_stats = {d: DirectionStats() for d in Direction}

    def as_dict(self) -> Dict[str, Any]:
        """Export form (camelCase, direction names as keys)."""
        return {
            "totalCarsPassed": self.total_cars_passed,
            "averageWaitTime": self.average_wait_time(),
            "currentCars": self.current_cars,
            "directionStats": {
                d.label: {
                    "passed": s.passed,
                    "totalWait": s.total_wait,
                    "averageWait": s.average_wait,
                }
                for d, s in self.direction_stats.items()
            },
        }


def pick_turn(draw: float, turn_rate: float) -> TurnIntent:
    """Map one uniform draw in [0, 1) to a turn intent.

    Half of ``turn_rate`` percent turn left, the other half right.
    """
    if draw < turn_rate / 200.0:
        return TurnIntent.LEFT
    if draw < turn_rate / 100.0:
        return TurnIntent.RIGHT
    return TurnIntent.STRAIGHT


class FleetManager:
    """Spawns, updates and removes vehicles.

    Parameters
    ----------
    policy : TrafficPolicy
        Engine constants.
    seed : int or None
        Seed of the private RNG (turn draws and colours); reused on reset.
    """

    def __init__(self, policy: Optional[TrafficPolicy] = None, seed: Optional[int] = None) -> None:
        self.policy = policy or TrafficPolicy()
        self._seed = seed
        self._rng = random.Random(seed)
        self.vehicles: List[Vehicle] = []
        self.stats = Stats()
        self.spawn_timers: Dict[Direction, float] = {d: 0.0 for d in Direction}
        self._next_id = 1

    # ── spawning ──────────────────────────────────────────────────────────
    def _spawn_is_clear(self, direction: Direction) -> bool:
        pose = spawn_pose(direction, self.policy)
        for v in self.vehicles:
            if distance(pose.x, pose.y, v.x, v.y) < self.policy.safe_distance:
                return False
        return True

    def spawn(
        self,
        direction: Direction,
        settings: SimulationSettings,
        turn: Optional[TurnIntent] = None,
    ) -> Vehicle:
        """Create a vehicle on *direction*; the turn is drawn unless given."""
        if turn is None:
            turn = pick_turn(self._rng.random(), settings.turn_rate)
        color = VEHICLE_COLORS[self._rng.randrange(len(VEHICLE_COLORS))]
        vehicle = Vehicle.spawn(
            self._next_id, direction, turn, settings.car_speed, self.policy, color,
        )
        self._next_id += 1
        self.vehicles.append(vehicle)
        log.debug("Spawned #%d from %s (%s)", vehicle.id, direction.label, turn.name.lower())
        return vehicle

    def _update_spawning(self, dt: float, settings: SimulationSettings) -> None:
        """Advance the per-direction timers and spawn where an interval elapsed.

        A spawn whose point is occupied is deferred: the timer is not reset
        and stays armed, so the spawn is retried every tick until the point
        clears.
        """
        if settings.car_spawn_rate <= 0:
            return
        interval = 10.0 / settings.car_spawn_rate
        for d in Direction:
            self.spawn_timers[d] += dt
            if self.spawn_timers[d] < interval:
                continue
            if self._spawn_is_clear(d):
                self.spawn(d, settings)
                self.spawn_timers[d] = 0.0

    # ── per-tick ──────────────────────────────────────────────────────────
    def update(self, dt: float, lights: Any, settings: SimulationSettings) -> List[Vehicle]:
        """Spawn, move every vehicle and remove those past the bounds.

        Returns the vehicles removed during this tick.
        """
        self._update_spawning(dt, settings)

        for vehicle in list(self.vehicles):
            vehicle.update(dt, lights.get(vehicle.direction), self.vehicles, self.policy)

        removed = [v for v in self.vehicles if v.is_off_screen(self.policy)]
        if removed:
            self.vehicles = [v for v in self.vehicles if not v.is_off_screen(self.policy)]
            for v in removed:
                self.stats.add_car_passed(v.direction, v.total_wait_time)
                log.debug("Removed #%d (waited %.1fs)", v.id, v.total_wait_time)
        self.stats.current_cars = len(self.vehicles)
        return removed

    def reset(self) -> None:
        self.vehicles = []
        self.stats.reset()
        self.spawn_timers = {d: 0.0 for d in Direction}
        self._rng = random.Random(self._seed)
        self._next_id = 1

    # ── queries ───────────────────────────────────────────────────────────
    def vehicles_in_direction(self, direction: Direction) -> List[Vehicle]:
        return [v for v in self.vehicles if v.direction == direction]
