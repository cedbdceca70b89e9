#!/usr/bin/env python3
"""
sim/types.py
============
Enumerations and small value types shared by every simulation module.

Directions are numbered counter-clockwise (North, West, South, East) so
that ``(d + 1) % 4`` is the arm on a driver's right and ``(d + 3) % 4`` the
arm on a driver's left.  A vehicle's :class:`Direction` is the arm it
enters from; the same value identifies its inbound lane, stop line,
detection zone and signal head.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import NamedTuple, Tuple


class Direction(IntEnum):
    """Approach arm of the intersection (one inbound lane each)."""

    NORTH = 0
    WEST = 1
    SOUTH = 2
    EAST = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def axis(self) -> "Axis":
        return Axis.NS if self in (Direction.NORTH, Direction.SOUTH) else Axis.EW

    def rotated(self, steps: int) -> "Direction":
        return Direction((int(self) + steps) % 4)

    @classmethod
    def parse(cls, value: object) -> "Direction":
        """Accept a member, an index 0..3, a name (``"north"``) or an initial (``"N"``)."""
        if isinstance(value, Direction):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            if 0 <= value < 4:
                return cls(value)
            raise ValueError(f"direction index out of range: {value!r}")
        text = str(value).strip().upper()
        for member in cls:
            if text in (member.name, member.name[0]):
                return member
        raise ValueError(f"unknown direction: {value!r}")


class Axis(str, Enum):
    NS = "NS"
    EW = "EW"

    @property
    def directions(self) -> Tuple[Direction, Direction]:
        if self is Axis.NS:
            return (Direction.NORTH, Direction.SOUTH)
        return (Direction.EAST, Direction.WEST)


class TurnIntent(IntEnum):
    """Manoeuvre chosen at spawn time."""

    STRAIGHT = 0
    LEFT = 1
    RIGHT = 2

    @property
    def exit_offset(self) -> int:
        return _EXIT_OFFSETS[self]

    @classmethod
    def parse(cls, value: object) -> "TurnIntent":
        if isinstance(value, TurnIntent):
            return value
        text = str(value).strip().upper()
        if text == "FORWARD":
            return cls.STRAIGHT
        try:
            return cls[text]
        except KeyError:
            raise ValueError(f"unknown turn intent: {value!r}") from None


_EXIT_OFFSETS = {
    TurnIntent.STRAIGHT: 2,
    TurnIntent.LEFT: 3,
    TurnIntent.RIGHT: 1,
}


class SignalColor(str, Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class VehicleState(str, Enum):
    """Forward-only lifecycle of a vehicle."""

    APPROACHING = "approaching"
    CROSSING = "crossing"
    EXITING = "exiting"


class ControllerMode(str, Enum):
    FIXED = "fixed"
    ADAPTIVE = "adaptive"

    @classmethod
    def parse(cls, value: object) -> "ControllerMode":
        if isinstance(value, ControllerMode):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text == member.value:
                return member
        raise ValueError(f"unknown controller mode: {value!r}")


class Waypoint(NamedTuple):
    """One precomputed path sample: position plus heading (radians, CCW from +x)."""

    x: float
    y: float
    heading: float


class PhaseInfo(NamedTuple):
    """Display data for the active signal controller."""

    phase: str
    remaining: float
    progress: float
