#!/usr/bin/env python3
"""
sim/settings.py
===============
Runtime knobs of the simulation (:class:`SimulationSettings`).

Unlike :class:`~sim.traffic_policy.TrafficPolicy`, these may change at any
tick boundary.  Overrides are partial: a ``None`` value keeps the prior
setting, and both the Python field names and the camelCase names used by
the JSON export are accepted.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from sim.types import ControllerMode

# camelCase names used in exported JSON → field names
CAMEL_ALIASES: Dict[str, str] = {
    "greenDuration": "green_duration",
    "yellowDuration": "yellow_duration",
    "redDuration": "red_duration",
    "carSpawnRate": "car_spawn_rate",
    "carSpeed": "car_speed",
    "turnRate": "turn_rate",
    "detectorDistance": "detector_distance",
}


@dataclass(frozen=True)
class SimulationSettings:
    """Snapshot of the user-adjustable settings."""

    mode: ControllerMode = ControllerMode.FIXED
    green_duration: float = 10.0
    """Fixed-timer green phase length (s)."""

    yellow_duration: float = 3.0
    """Yellow length for both controllers (s)."""

    red_duration: float = 3.0
    """All-red clearance length for both controllers (s)."""

    car_spawn_rate: float = 4.0
    """Cars per 10 s per direction; zero or less disables spawning."""

    car_speed: float = 25.0
    """Cruise speed given to newly spawned vehicles (units/s)."""

    turn_rate: float = 25.0
    """Percentage of vehicles that turn (split evenly left / right)."""

    detector_distance: float = 80.0
    """Distance from the stop line to the near edge of each detection zone."""

    def __post_init__(self) -> None:
        # Frozen: coerce through object.__setattr__ so "adaptive" works as a mode.
        object.__setattr__(self, "mode", ControllerMode.parse(self.mode))

    def merged(self, overrides: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "SimulationSettings":
        """Return a copy with *overrides* applied.

        Raises
        ------
        ValueError
            On an unknown key or an unknown controller mode.
        """
        changes: Dict[str, Any] = {}
        items = dict(overrides or {})
        items.update(kwargs)
        known = {f.name for f in fields(self)}
        for key, value in items.items():
            name = CAMEL_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"unknown setting: {key!r}")
            if value is None:
                continue
            if name == "mode":
                changes[name] = ControllerMode.parse(value)
            else:
                changes[name] = float(value)
        if not changes:
            return self
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        """camelCase export form (matches the JSON export)."""
        data = asdict(self)
        out: Dict[str, Any] = {"mode": self.mode.value}
        for camel, name in CAMEL_ALIASES.items():
            out[camel] = data[name]
        return out
