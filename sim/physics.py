#!/usr/bin/env python3
"""
sim/physics.py
==============
Low-level geometry and kinematics helpers used by :mod:`sim.paths`,
:mod:`sim.vehicle` and :mod:`sim.sensors`.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.
"""

from __future__ import annotations

import math
from typing import Tuple

Vec = Tuple[float, float]

# Outward unit vector of every arm, indexed by Direction value (N, W, S, E).
_ARM_VECTORS: Tuple[Vec, ...] = (
    (0.0, 1.0),
    (-1.0, 0.0),
    (0.0, -1.0),
    (1.0, 0.0),
)


def arm_vector(direction: int) -> Vec:
    """Unit vector pointing from the centre out along arm *direction*."""
    return _ARM_VECTORS[int(direction) % 4]


def inbound_heading_vector(direction: int) -> Vec:
    """Unit travel vector of a vehicle entering from arm *direction*."""
    ux, uy = arm_vector(direction)
    return (-ux, -uy)


def right_of(vx: float, vy: float) -> Vec:
    """Unit vector to the right of travel vector *(vx, vy)* in a y-up frame."""
    return (vy, -vx)


def heading_of(vx: float, vy: float) -> float:
    """Heading in radians (counter-clockwise from +x) of vector *(vx, vy)*."""
    return math.atan2(vy, vx)


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(bx - ax, by - ay)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def dot(ax: float, ay: float, bx: float, by: float) -> float:
    return ax * bx + ay * by


def bezier_point(p0: Vec, p1: Vec, p2: Vec, p3: Vec, t: float) -> Vec:
    """Point on the cubic Bézier curve ``p0..p3`` at parameter *t* in [0, 1]."""
    u = 1.0 - t
    b0 = u * u * u
    b1 = 3.0 * u * u * t
    b2 = 3.0 * u * t * t
    b3 = t * t * t
    return (
        b0 * p0[0] + b1 * p1[0] + b2 * p2[0] + b3 * p3[0],
        b0 * p0[1] + b1 * p1[1] + b2 * p2[1] + b3 * p3[1],
    )


def braking_distance(speed: float, decel: float) -> float:
    """Stopping distance assuming constant deceleration.

    Parameters
    ----------
    speed : float
        Current speed in world units per second.
    decel : float
        Deceleration rate in world units per second squared.

    Returns
    -------
    float
        Distance in world units needed to reach zero speed.
    """
    v = max(0.0, float(speed))
    a = max(0.1, float(decel))
    return (v * v) / (2.0 * a)


def axial_distance(
    x: float,
    y: float,
    cx: float,
    cy: float,
    direction: int,
    offset: float,
) -> float:
    """Signed distance from *(x, y)* to the stop line of arm *direction*.

    The line sits *offset* units from the centre *(cx, cy)* along the arm.
    Positive → the point has not yet reached the line.
    Zero / negative → the point has passed it.
    """
    ux, uy = arm_vector(direction)
    return dot(x - cx, y - cy, ux, uy) - offset
