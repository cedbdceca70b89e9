#!/usr/bin/env python3
"""
sim/traffic_policy.py
=====================
Engine constants for the intersection simulation.  Every constant lives in
the frozen :class:`TrafficPolicy` dataclass so that experiments can swap
policies without touching code.

Also provides stateless helpers built on the policy:

* :func:`priority_score`: adaptive-controller score for one approach.
* :func:`stop_line_brake_distance`: how close to the line a red/yellow
  light starts to matter when stop-line braking is enabled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from sim.physics import braking_distance


@dataclass(frozen=True)
class TrafficPolicy:
    """Immutable bag of every engine constant.

    Groups: geometry, longitudinal control, signal obedience, car
    following, path generation, removal, detection zones, adaptive
    controller.
    """

    # ── Geometry ──────────────────────────────────────────────────────────
    canvas_size: float = 1000.0
    """Side of the square world; the centre sits at half of it."""

    road_width: float = 80.0
    """Full width of each arm (one inbound plus one outbound lane)."""

    lane_width: float = 40.0
    """Width of a single lane; lane centres sit half of it off the road axis."""

    intersection_size: float = 160.0
    """Side of the square intersection footprint."""

    stop_line_distance: float = 80.0
    """Distance from the intersection centre to every stop line."""

    road_length: float = 400.0
    """Length of the visible road from the centre to the canvas edge."""

    spawn_offset: float = 50.0
    """Extra distance beyond ``road_length`` at which vehicles appear."""

    exit_overrun: float = 150.0
    """How far past the canvas edge every path keeps going."""

    # ── Longitudinal control ──────────────────────────────────────────────
    acceleration: float = 30.0
    """Speed gained per second while not stopping (units/s²)."""

    deceleration: float = 40.0
    """Speed lost per second while stopping (units/s²)."""

    stopped_speed: float = 1.0
    """Below this speed a vehicle counts as stopped and accrues wait time."""

    # ── Signal obedience ──────────────────────────────────────────────────
    yellow_stop_distance: float = 50.0
    """On yellow, vehicles closer than this to the line stop."""

    committed_distance: float = -10.0
    """Signed distance past which a vehicle ignores the light."""

    stop_line_braking: bool = True
    """Defer red/yellow braking until the braking distance to the line.

    With ``False`` a vehicle stops wherever it first sees red, which on an
    empty road is the spawn point, far upstream of every detection zone.
    """

    stop_line_buffer: float = 5.0
    """Extra margin added to the braking distance with ``stop_line_braking``."""

    # ── Car following ─────────────────────────────────────────────────────
    safe_distance: float = 35.0
    """Leader closer than this (centre to centre) forces a stop."""

    standstill_gap: float = 25.0
    """The path walk never brings a follower closer than this to its leader."""

    # ── Path generation ───────────────────────────────────────────────────
    turning_radius: float = 60.0
    """Nominal turn radius; control points are pulled 0.6 × this."""

    bezier_step: float = 0.05
    """Parameter step of the turn curve (21 samples from 0 to 1)."""

    straight_samples: int = 100
    """Number of interpolation steps of a straight path."""

    approach_spacing: float = 10.0
    """Sample spacing of the straight approach / run-out of a turning path."""

    # ── Removal ───────────────────────────────────────────────────────────
    removal_margin: float = 100.0
    """Vehicles further than this outside the canvas are removed."""

    # ── Detection zones ───────────────────────────────────────────────────
    detector_min: float = 30.0
    detector_max: float = 150.0
    zone_depth: float = 20.0
    """Depth of a detection zone along its road."""

    # ── Adaptive controller ───────────────────────────────────────────────
    min_green: float = 5.0
    """Green time before the adaptive controller may switch away."""

    max_green: float = 30.0
    """Green time after which the adaptive controller must switch away."""

    car_weight: float = 1.0
    """Score per waiting vehicle."""

    time_weight: float = 0.5
    """Score per second of average wait."""

    check_interval: float = 1.0
    """Simulated seconds between priority evaluations."""

    hysteresis: float = 1.0
    """Score margin a challenger must exceed to take the green."""

    def __post_init__(self) -> None:
        if self.min_green > self.max_green:
            raise ValueError(
                f"min_green ({self.min_green}) must not exceed max_green ({self.max_green})"
            )
        for name in ("acceleration", "deceleration", "check_interval", "canvas_size"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.detector_min > self.detector_max:
            raise ValueError("detector_min must not exceed detector_max")
        if self.standstill_gap > self.safe_distance:
            raise ValueError("standstill_gap must not exceed safe_distance")

    # ── Derived values ────────────────────────────────────────────────────
    @property
    def center(self) -> float:
        return self.canvas_size / 2.0

    @property
    def half_intersection(self) -> float:
        return self.intersection_size / 2.0

    @property
    def spawn_distance(self) -> float:
        return self.road_length + self.spawn_offset

    @property
    def exit_distance(self) -> float:
        """Distance from the centre at which every path ends."""
        return self.center + self.exit_overrun

    @property
    def bezier_samples(self) -> int:
        return int(round(1.0 / self.bezier_step))


def priority_score(data: Mapping[str, Any], policy: TrafficPolicy) -> float:
    """Adaptive priority of one approach.

    ``waiting_count × car_weight + avg_wait_time × time_weight``.
    """
    waiting = float(data.get("waiting_count", 0))
    avg_wait = float(data.get("avg_wait_time", 0.0))
    return waiting * policy.car_weight + avg_wait * policy.time_weight


def stop_line_brake_distance(speed: float, policy: TrafficPolicy) -> float:
    """Distance before the line at which a red/yellow light starts braking."""
    return braking_distance(speed, policy.deceleration) + policy.stop_line_buffer
