#!/usr/bin/env python3
"""
sim/paths.py
============
Precomputed vehicle paths.

A path is an ordered list of :class:`~sim.types.Waypoint` generated once at
spawn time.  Straight paths are a linear interpolation from the spawn point
to a point past the far edge of the canvas; turning paths are a straight
approach to the stop line, a cubic Bézier across the intersection and a
straight run-out on the exit road.

Every path ends beyond the removal boundary, so a vehicle is always removed
before it can exhaust its path.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from sim.physics import (
    Vec,
    arm_vector,
    bezier_point,
    heading_of,
    inbound_heading_vector,
    lerp,
    right_of,
)
from sim.traffic_policy import TrafficPolicy
from sim.types import Direction, TurnIntent, Waypoint


def exit_direction(origin: Direction, turn: TurnIntent) -> Direction:
    """Arm a vehicle entering from *origin* leaves by."""
    return origin.rotated(turn.exit_offset)


def inbound_lane_point(origin: Direction, dist: float, policy: TrafficPolicy) -> Vec:
    """Point on the inbound lane of *origin*, *dist* units from the centre."""
    ux, uy = arm_vector(origin)
    rx, ry = right_of(*inbound_heading_vector(origin))
    half = policy.lane_width / 2.0
    c = policy.center
    return (c + ux * dist + rx * half, c + uy * dist + ry * half)


def outbound_lane_point(exit_dir: Direction, dist: float, policy: TrafficPolicy) -> Vec:
    """Point on the outbound lane of *exit_dir*, *dist* units from the centre."""
    ux, uy = arm_vector(exit_dir)
    rx, ry = right_of(ux, uy)
    half = policy.lane_width / 2.0
    c = policy.center
    return (c + ux * dist + rx * half, c + uy * dist + ry * half)


def spawn_pose(origin: Direction, policy: TrafficPolicy) -> Waypoint:
    """Spawn position and heading for a vehicle entering from *origin*."""
    x, y = inbound_lane_point(origin, policy.spawn_distance, policy)
    return Waypoint(x, y, heading_of(*inbound_heading_vector(origin)))


def bezier_curve(p0: Vec, p1: Vec, p2: Vec, p3: Vec, samples: int) -> List[Vec]:
    """Sample the curve at ``t = i / samples`` for ``i = 0 .. samples``."""
    return [bezier_point(p0, p1, p2, p3, i / samples) for i in range(samples + 1)]


def _segment(start: Vec, end: Vec, steps: int) -> List[Vec]:
    return [
        (lerp(start[0], end[0], i / steps), lerp(start[1], end[1], i / steps))
        for i in range(steps + 1)
    ]


def _steps_for(start: Vec, end: Vec, spacing: float) -> int:
    return max(1, int(math.ceil(math.hypot(end[0] - start[0], end[1] - start[1]) / spacing)))


def _with_headings(points: Sequence[Vec], first_heading: float) -> List[Waypoint]:
    path = [Waypoint(points[0][0], points[0][1], first_heading)]
    for (px, py), (x, y) in zip(points, points[1:]):
        path.append(Waypoint(x, y, heading_of(x - px, y - py)))
    return path


def straight_path(origin: Direction, policy: TrafficPolicy) -> List[Waypoint]:
    spawn = spawn_pose(origin, policy)
    end = outbound_lane_point(
        exit_direction(origin, TurnIntent.STRAIGHT), policy.exit_distance, policy
    )
    points = _segment((spawn.x, spawn.y), end, policy.straight_samples)
    return [Waypoint(x, y, spawn.heading) for x, y in points]


def turn_control_points(
    origin: Direction, turn: TurnIntent, policy: TrafficPolicy
) -> Tuple[Vec, Vec, Vec, Vec]:
    """Bézier control points of the turn from *origin* with intent *turn*.

    The curve runs from the stop line of the inbound lane to where the exit
    lane leaves the intersection footprint.  The inner control points are
    pulled ``0.6 × turning_radius`` forward along the entry heading and back
    along the exit heading, in the approach's own frame, so every arm gets
    the same curve rotated.
    """
    exit_dir = exit_direction(origin, turn)
    pull = 0.6 * policy.turning_radius
    hx, hy = inbound_heading_vector(origin)
    ex, ey = arm_vector(exit_dir)

    p0 = inbound_lane_point(origin, policy.stop_line_distance, policy)
    p3 = outbound_lane_point(exit_dir, policy.half_intersection, policy)
    p1 = (p0[0] + hx * pull, p0[1] + hy * pull)
    p2 = (p3[0] - ex * pull, p3[1] - ey * pull)
    return p0, p1, p2, p3


def turning_path(origin: Direction, turn: TurnIntent, policy: TrafficPolicy) -> List[Waypoint]:
    spawn = spawn_pose(origin, policy)
    p0, p1, p2, p3 = turn_control_points(origin, turn, policy)
    far = outbound_lane_point(exit_direction(origin, turn), policy.exit_distance, policy)

    approach = _segment((spawn.x, spawn.y), p0, _steps_for((spawn.x, spawn.y), p0, policy.approach_spacing))
    curve = bezier_curve(p0, p1, p2, p3, policy.bezier_samples)
    runout = _segment(p3, far, _steps_for(p3, far, policy.approach_spacing))

    # Drop the shared endpoints so no two consecutive waypoints coincide.
    points = approach[:-1] + curve + runout[1:]
    return _with_headings(points, spawn.heading)


def build_path(origin: Direction, turn: TurnIntent, policy: TrafficPolicy) -> List[Waypoint]:
    """Full waypoint list for a vehicle entering from *origin*."""
    if turn is TurnIntent.STRAIGHT:
        return straight_path(origin, policy)
    return turning_path(origin, turn, policy)
