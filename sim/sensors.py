#!/usr/bin/env python3
"""
sim/sensors.py
==============
Detection zones feeding the adaptive signal controller.

One :class:`DetectionZone` sits upstream of every stop line.  Each tick the
:class:`SensorArray` rescans all vehicles; a zone only sees vehicles that
entered from its own direction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple

from sim.physics import arm_vector, clamp
from sim.traffic_policy import TrafficPolicy
from sim.types import Direction, VehicleState
from sim.vehicle import Vehicle

log = logging.getLogger("sensors")


class Rect(NamedTuple):
    """Axis-aligned rectangle in world coordinates (y up)."""

    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def center(self):
        return ((self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0)

    def contains_point(self, x: float, y: float) -> bool:
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max


def zone_rect(direction: Direction, detector_distance: float, policy: TrafficPolicy) -> Rect:
    """Rectangle of the zone on arm *direction*.

    Spans the full road width; its near edge is *detector_distance* beyond
    the stop line and it extends ``zone_depth`` further out.
    """
    ux, uy = arm_vector(direction)
    near = policy.stop_line_distance + detector_distance
    far = near + policy.zone_depth
    half = policy.road_width / 2.0
    c = policy.center
    # Perpendicular to the arm is (uy, -ux); its sign does not matter here.
    px, py = uy, -ux
    xs = [c + ux * s + px * t for s in (near, far) for t in (-half, half)]
    ys = [c + uy * s + py * t for s in (near, far) for t in (-half, half)]
    return Rect(min(xs), min(ys), max(xs), max(ys))


@dataclass
class DetectionZone:
    direction: Direction
    rect: Rect
    detected: List[Vehicle] = field(default_factory=list, repr=False)

    def contains(self, vehicle: Vehicle) -> bool:
        return vehicle.direction == self.direction and self.rect.contains_point(vehicle.x, vehicle.y)

    def update(self, vehicles: Iterable[Vehicle]) -> None:
        self.detected = [v for v in vehicles if self.contains(v)]

    @property
    def count(self) -> int:
        return len(self.detected)

    def waiting_vehicles(self, stopped_speed: float = 1.0) -> List[Vehicle]:
        return [
            v for v in self.detected
            if v.state is VehicleState.APPROACHING and v.speed < stopped_speed
        ]

    def clear(self) -> None:
        self.detected = []


class SensorArray:
    """One detection zone per direction.

    Parameters
    ----------
    policy : TrafficPolicy
        Supplies geometry and the detector distance bounds.
    detector_distance : float
        Initial distance from each stop line to the near zone edge.
    """

    def __init__(self, policy: TrafficPolicy, detector_distance: float = 80.0) -> None:
        self.policy = policy
        self.detector_distance = clamp(detector_distance, policy.detector_min, policy.detector_max)
        self.zones: Dict[Direction, DetectionZone] = {}
        self._rebuild()

    def _rebuild(self) -> None:
        old = self.zones
        self.zones = {
            d: DetectionZone(d, zone_rect(d, self.detector_distance, self.policy))
            for d in Direction
        }
        for d, zone in old.items():
            self.zones[d].detected = zone.detected

    def set_detector_distance(self, value: float) -> None:
        """Move every zone; out-of-range values are clamped silently."""
        clamped = clamp(float(value), self.policy.detector_min, self.policy.detector_max)
        if clamped != value:
            log.debug("Detector distance %.1f clamped to %.1f", value, clamped)
        if clamped == self.detector_distance:
            return
        self.detector_distance = clamped
        self._rebuild()

    def update(self, vehicles: Iterable[Vehicle]) -> None:
        vehicles = list(vehicles)
        for zone in self.zones.values():
            zone.update(vehicles)

    def detected_in(self, direction: Direction) -> int:
        return self.zones[direction].count

    def priority_data(self) -> Dict[Direction, Dict[str, Any]]:
        """Per-direction inputs of the adaptive priority score."""
        data: Dict[Direction, Dict[str, Any]] = {}
        for d, zone in self.zones.items():
            waiting = zone.waiting_vehicles(self.policy.stopped_speed)
            avg = sum(v.wait_time for v in waiting) / len(waiting) if waiting else 0.0
            data[d] = {
                "waiting_count": len(waiting),
                "avg_wait_time": avg,
                "total_cars": zone.count,
            }
        return data

    def stats(self) -> Dict[str, Dict[str, int]]:
        """Per direction name: ``{detected, waiting}`` (export form)."""
        return {
            d.label: {
                "detected": zone.count,
                "waiting": len(zone.waiting_vehicles(self.policy.stopped_speed)),
            }
            for d, zone in self.zones.items()
        }

    def reset(self) -> None:
        for zone in self.zones.values():
            zone.clear()
