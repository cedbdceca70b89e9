#!/usr/bin/env python3
"""
sim/vehicle.py
==============
A single simulated vehicle.

Each :class:`Vehicle` owns a precomputed path (see :mod:`sim.paths`) and
walks it every tick at a speed decided by two rules: obey the signal head
of its own approach, and never close in on the same-direction vehicle
ahead.  The fleet manager in :mod:`sim.fleet` owns creation and removal.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sim.paths import build_path, spawn_pose
from sim.physics import axial_distance, distance, dot, inbound_heading_vector, lerp
from sim.traffic_policy import TrafficPolicy, stop_line_brake_distance
from sim.types import Direction, SignalColor, TurnIntent, VehicleState, Waypoint

_EPS = 1e-9


@dataclass
class Vehicle:
    """A vehicle entering from ``direction`` and leaving per ``turn``.

    Attributes
    ----------
    id : int
        Unique, monotonically increasing identifier.
    direction : Direction
        Approach arm the vehicle entered from.
    turn : TurnIntent
        Manoeuvre fixed at spawn time.
    x, y : float
        World position (y axis pointing north).
    heading : float
        Radians, counter-clockwise from +x.
    speed, target_speed : float
        Current and cruise speed in world units per second.
    wait_time : float
        Seconds spent below the stopped threshold since last moving.
    total_wait_time : float
        Lifetime seconds spent below the stopped threshold.
    """

    id: int
    direction: Direction
    turn: TurnIntent
    x: float
    y: float
    heading: float
    target_speed: float
    speed: float = 0.0
    state: VehicleState = VehicleState.APPROACHING
    wait_time: float = 0.0
    total_wait_time: float = 0.0
    color: Tuple[int, int, int] = (86, 168, 255)
    path_index: int = 0
    _path: List[Waypoint] = field(default_factory=list, repr=False)
    _segment_offset: float = field(default=0.0, repr=False)
    """Distance already covered on the segment starting at ``path_index``."""

    @classmethod
    def spawn(
        cls,
        vehicle_id: int,
        direction: Direction,
        turn: TurnIntent,
        target_speed: float,
        policy: TrafficPolicy,
        color: Tuple[int, int, int] = (86, 168, 255),
    ) -> "Vehicle":
        """Create a vehicle at the spawn point of *direction* with its path."""
        pose = spawn_pose(direction, policy)
        return cls(
            id=vehicle_id,
            direction=direction,
            turn=turn,
            x=pose.x,
            y=pose.y,
            heading=pose.heading,
            target_speed=max(0.0, float(target_speed)),
            color=color,
            _path=build_path(direction, turn, policy),
        )

    @property
    def path(self) -> Tuple[Waypoint, ...]:
        """Read-only view of the precomputed path."""
        return tuple(self._path)

    @property
    def path_finished(self) -> bool:
        return self.path_index >= len(self._path) - 1

    # ── geometry queries ──────────────────────────────────────────────────
    def distance_to_stop_line(self, policy: TrafficPolicy) -> float:
        """Signed distance to this approach's stop line (positive before it)."""
        c = policy.center
        return axial_distance(self.x, self.y, c, c, self.direction, policy.stop_line_distance)

    def is_ahead(self, other: "Vehicle") -> bool:
        """True if *other* is further along this vehicle's inbound axis."""
        hx, hy = inbound_heading_vector(self.direction)
        return dot(other.x - self.x, other.y - self.y, hx, hy) > 0.0

    def car_ahead(self, others: Iterable["Vehicle"]) -> Optional["Vehicle"]:
        """Nearest same-direction vehicle ahead, by Euclidean distance."""
        best: Optional[Vehicle] = None
        best_dist = math.inf
        for other in others:
            if other is self or other.id == self.id or other.direction != self.direction:
                continue
            if not self.is_ahead(other):
                continue
            d = distance(self.x, self.y, other.x, other.y)
            if d < best_dist:
                best, best_dist = other, d
        return best

    def is_inside_intersection(self, policy: TrafficPolicy) -> bool:
        c = policy.center
        half = policy.half_intersection
        return abs(self.x - c) <= half and abs(self.y - c) <= half

    def is_off_screen(self, policy: TrafficPolicy) -> bool:
        m = policy.removal_margin
        size = policy.canvas_size
        return self.x < -m or self.x > size + m or self.y < -m or self.y > size + m

    # ── per-tick update ───────────────────────────────────────────────────
    def update(
        self,
        dt: float,
        light: SignalColor,
        others: Iterable["Vehicle"],
        policy: TrafficPolicy,
    ) -> None:
        """Advance the vehicle by *dt* seconds.

        Order: wait accounting, stop decision (signal + car ahead), speed
        integration, path walk, lifecycle transition.
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        if self.speed < policy.stopped_speed:
            self.wait_time += dt
            self.total_wait_time += dt
        else:
            self.wait_time = 0.0

        leader = self.car_ahead(others)
        should_stop = self._must_stop_for_signal(light, policy)
        gap = math.inf
        if leader is not None:
            gap = distance(self.x, self.y, leader.x, leader.y)
            if gap < policy.safe_distance:
                should_stop = True

        if should_stop:
            self.speed = max(0.0, self.speed - policy.deceleration * dt)
        else:
            self.speed = min(self.target_speed, self.speed + policy.acceleration * dt)
        self.speed = max(0.0, min(self.target_speed, self.speed))

        budget = self.speed * dt
        if leader is not None:
            allowed = max(0.0, gap - policy.standstill_gap)
            if budget > allowed:
                budget = allowed
                self.speed = min(self.speed, leader.speed)
        self._advance(budget)
        self._update_state(policy)

    def _must_stop_for_signal(self, light: SignalColor, policy: TrafficPolicy) -> bool:
        if self.state is VehicleState.EXITING:
            return False
        d = self.distance_to_stop_line(policy)
        if d <= policy.committed_distance:
            return False
        if light is SignalColor.RED:
            stop = True
        elif light is SignalColor.YELLOW:
            stop = d < policy.yellow_stop_distance
        else:
            return False
        if stop and policy.stop_line_braking:
            stop = d <= stop_line_brake_distance(self.speed, policy)
        return stop

    def _advance(self, budget: float) -> None:
        """Walk *budget* units along the path, keeping partial-segment progress."""
        path = self._path
        remaining = budget
        while remaining > _EPS and self.path_index < len(path) - 1:
            cur = path[self.path_index]
            nxt = path[self.path_index + 1]
            seg_len = distance(cur.x, cur.y, nxt.x, nxt.y)
            left_on_seg = seg_len - self._segment_offset
            if left_on_seg <= remaining:
                remaining -= left_on_seg
                self.path_index += 1
                self._segment_offset = 0.0
                self.x, self.y, self.heading = nxt
            else:
                self._segment_offset += remaining
                t = self._segment_offset / seg_len
                self.x = lerp(cur.x, nxt.x, t)
                self.y = lerp(cur.y, nxt.y, t)
                self.heading = nxt.heading
                remaining = 0.0

    def _update_state(self, policy: TrafficPolicy) -> None:
        if self.state is VehicleState.APPROACHING:
            if self.distance_to_stop_line(policy) <= 0.0:
                self.state = VehicleState.CROSSING
        elif self.state is VehicleState.CROSSING:
            if not self.is_inside_intersection(policy):
                self.state = VehicleState.EXITING

    # ── serialisation ─────────────────────────────────────────────────────
    def as_dict(self) -> Dict[str, Any]:
        """Read-only render view."""
        return {
            "id": self.id,
            "direction": self.direction.label,
            "turn": self.turn.name.lower(),
            "x": self.x,
            "y": self.y,
            "heading": self.heading,
            "speed": self.speed,
            "target_speed": self.target_speed,
            "state": self.state.value,
            "wait_time": self.wait_time,
            "total_wait_time": self.total_wait_time,
            "color": self.color,
        }
