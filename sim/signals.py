#!/usr/bin/env python3
"""
sim/signals.py
==============
Signal heads and the two signal-control strategies.

* :class:`SignalBank`: one colour per approach.
* :class:`FixedTimerController`: six-phase cycle (EW green, EW yellow,
  all red, NS green, NS yellow, all red).
* :class:`AdaptivePriorityController`: tick-driven state machine that
  gives the green to whichever approach scores highest on its detection
  zone (waiting vehicles and their average wait), subject to minimum and
  maximum green times and a hysteresis margin.
* :class:`TrafficController`: dispatches to the active strategy by
  :class:`~sim.types.ControllerMode`.

Both strategies keep the same safety invariant: the non-red approaches are
empty, a single approach, or one axis pair, never both axes at once.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from sim.settings import SimulationSettings
from sim.traffic_policy import TrafficPolicy, priority_score
from sim.types import Axis, ControllerMode, Direction, PhaseInfo, SignalColor

log = logging.getLogger("signals")

_R, _Y, _G = SignalColor.RED, SignalColor.YELLOW, SignalColor.GREEN


class SignalBank:
    """Current colour of every approach's signal head."""

    def __init__(self, initial: SignalColor = SignalColor.RED) -> None:
        self._colors: Dict[Direction, SignalColor] = {d: initial for d in Direction}

    def get(self, direction: Direction) -> SignalColor:
        return self._colors[direction]

    def set(self, direction: Direction, color: SignalColor) -> None:
        self._colors[direction] = color

    def set_all(self, color: SignalColor) -> None:
        for d in Direction:
            self._colors[d] = color

    def apply(self, table: Mapping[Direction, SignalColor]) -> None:
        for d, color in table.items():
            self._colors[d] = color

    def non_red(self) -> List[Direction]:
        return [d for d, c in self._colors.items() if c is not SignalColor.RED]

    def axes_open(self) -> Set[Axis]:
        """Set of axes with at least one non-red head."""
        return {d.axis for d in self.non_red()}

    def as_dict(self) -> Dict[str, str]:
        return {d.label: c.value for d, c in self._colors.items()}


def _table(ns: SignalColor, ew: SignalColor) -> Dict[Direction, SignalColor]:
    return {
        Direction.NORTH: ns,
        Direction.SOUTH: ns,
        Direction.EAST: ew,
        Direction.WEST: ew,
    }


# (display name, settings duration key, colour table)
FIXED_PHASES: Tuple[Tuple[str, str, Dict[Direction, SignalColor]], ...] = (
    ("East-West Green", "green", _table(_R, _G)),
    ("East-West Yellow", "yellow", _table(_R, _Y)),
    ("All Red", "red", _table(_R, _R)),
    ("North-South Green", "green", _table(_G, _R)),
    ("North-South Yellow", "yellow", _table(_Y, _R)),
    ("All Red", "red", _table(_R, _R)),
)


def _ratio(part: float, whole: float) -> float:
    return part / whole if whole > 0 else 0.0


# ── Fixed timer ──────────────────────────────────────────────────────────────


class FixedTimerController:
    """Six-phase cyclic timer.

    Durations are ``[green, yellow, red, green, yellow, red]`` and are
    refreshed from the settings every tick, so a change takes effect on the
    phase currently running.
    """

    def __init__(self, green: float = 10.0, yellow: float = 3.0, red: float = 3.0) -> None:
        self.phase = 0
        self.timer = 0.0
        self._durations = {"green": green, "yellow": yellow, "red": red}

    @property
    def durations(self) -> List[float]:
        return [self._durations[key] for _, key, _ in FIXED_PHASES]

    @property
    def phase_name(self) -> str:
        return FIXED_PHASES[self.phase][0]

    def update_timings(self, green: float, yellow: float, red: float) -> None:
        self._durations = {
            "green": max(0.0, float(green)),
            "yellow": max(0.0, float(yellow)),
            "red": max(0.0, float(red)),
        }

    def update_settings(self, settings: SimulationSettings) -> None:
        self.update_timings(settings.green_duration, settings.yellow_duration, settings.red_duration)

    def current_duration(self) -> float:
        return self._durations[FIXED_PHASES[self.phase][1]]

    def update(self, dt: float, lights: SignalBank, sensors: Optional[Any] = None) -> None:
        self.timer += dt
        if self.timer >= self.current_duration():
            self.advance(lights)

    def advance(self, lights: SignalBank) -> None:
        self.timer = 0.0
        self.phase = (self.phase + 1) % len(FIXED_PHASES)
        lights.apply(FIXED_PHASES[self.phase][2])
        log.info("Fixed timer → phase %d (%s)", self.phase, self.phase_name)

    def reset(self, lights: SignalBank) -> None:
        self.phase = 0
        self.timer = 0.0
        lights.apply(FIXED_PHASES[0][2])

    def current_info(self) -> PhaseInfo:
        duration = self.current_duration()
        return PhaseInfo(
            phase=self.phase_name,
            remaining=max(0.0, duration - self.timer),
            progress=_ratio(self.timer, duration),
        )


# ── Adaptive priority ────────────────────────────────────────────────────────


class AdaptiveState(str, Enum):
    IDLE = "idle"
    GREEN = "green"
    YELLOW = "yellow"
    ALL_RED = "all_red"


class AdaptivePriorityController:
    """Sensor-driven single-approach green.

    Every ``check_interval`` seconds (while idle or green, and once the
    minimum green has elapsed) each approach other than the green one is
    scored with :func:`~sim.traffic_policy.priority_score`.  The best score
    takes over only if it beats the current approach (always 0) by more
    than ``hysteresis``.  A green that reaches ``max_green`` is ended
    regardless of demand.
    """

    def __init__(
        self,
        policy: Optional[TrafficPolicy] = None,
        yellow_time: float = 3.0,
        all_red_time: float = 3.0,
    ) -> None:
        self.policy = policy or TrafficPolicy()
        self.yellow_time = yellow_time
        self.all_red_time = all_red_time
        self.state = AdaptiveState.IDLE
        self.green_direction: Optional[Direction] = None
        self.next_direction: Optional[Direction] = None
        self.green_timer = 0.0
        self.transition_timer = 0.0
        self.check_timer = 0.0
        self.last_priorities: Dict[Direction, float] = {}

    def update_settings(self, settings: SimulationSettings) -> None:
        """Take yellow / all-red durations from *settings*; non-positive keeps the previous value."""
        if settings.yellow_duration > 0:
            self.yellow_time = settings.yellow_duration
        if settings.red_duration > 0:
            self.all_red_time = settings.red_duration

    def update(self, dt: float, lights: SignalBank, sensors: Optional[Any] = None) -> None:
        self.check_timer += dt

        if self.state is AdaptiveState.YELLOW:
            self.transition_timer += dt
            if self.transition_timer >= self.yellow_time:
                self._start_all_red(lights)
            return
        if self.state is AdaptiveState.ALL_RED:
            self.transition_timer += dt
            if self.transition_timer >= self.all_red_time:
                self._complete_all_red(lights)
            return

        if self.state is AdaptiveState.GREEN:
            self.green_timer += dt

        if self.check_timer >= self.policy.check_interval:
            self.check_timer = 0.0
            if sensors is not None:
                self.check_priorities(lights, sensors)

        if self.state is AdaptiveState.GREEN and self.green_timer >= self.policy.max_green:
            log.info("Adaptive: %s reached max green", self.green_direction.label)
            self._start_yellow(lights)

    def check_priorities(self, lights: SignalBank, sensors: Any) -> None:
        if self.state is AdaptiveState.GREEN and self.green_timer < self.policy.min_green:
            return
        data = sensors.priority_data()
        priorities: Dict[Direction, float] = {}
        for d in Direction:
            if d == self.green_direction:
                priorities[d] = 0.0
            else:
                priorities[d] = priority_score(data.get(d, {}), self.policy)
        self.last_priorities = priorities

        best: Optional[Direction] = None
        best_score = 0.0
        for d in Direction:
            if priorities[d] > best_score:
                best, best_score = d, priorities[d]
        if best is None:
            return

        current = priorities[self.green_direction] if self.green_direction is not None else 0.0
        if best_score <= current + self.policy.hysteresis:
            return

        if self.state is AdaptiveState.IDLE:
            log.info("Adaptive: idle → %s green (priority %.2f)", best.label, best_score)
            self._start_green(best, lights)
        else:
            log.info(
                "Adaptive: %s → %s queued (priority %.2f)",
                self.green_direction.label, best.label, best_score,
            )
            self.next_direction = best
            self._start_yellow(lights)

    def _start_green(self, direction: Direction, lights: SignalBank) -> None:
        lights.set_all(SignalColor.RED)
        lights.set(direction, SignalColor.GREEN)
        self.state = AdaptiveState.GREEN
        self.green_direction = direction
        self.next_direction = None
        self.green_timer = 0.0

    def _start_yellow(self, lights: SignalBank) -> None:
        if self.green_direction is not None:
            lights.set(self.green_direction, SignalColor.YELLOW)
        self.state = AdaptiveState.YELLOW
        self.transition_timer = 0.0

    def _start_all_red(self, lights: SignalBank) -> None:
        lights.set_all(SignalColor.RED)
        self.state = AdaptiveState.ALL_RED
        self.transition_timer = 0.0

    def _complete_all_red(self, lights: SignalBank) -> None:
        self.green_direction = None
        self.transition_timer = 0.0
        if self.next_direction is not None:
            log.info("Adaptive: all red → %s green", self.next_direction.label)
            self._start_green(self.next_direction, lights)
        else:
            self.state = AdaptiveState.IDLE

    def reset(self, lights: SignalBank) -> None:
        self.state = AdaptiveState.IDLE
        self.green_direction = None
        self.next_direction = None
        self.green_timer = 0.0
        self.transition_timer = 0.0
        self.check_timer = 0.0
        self.last_priorities = {}
        lights.set_all(SignalColor.RED)

    def current_info(self) -> PhaseInfo:
        if self.state is AdaptiveState.YELLOW:
            return PhaseInfo(
                phase=f"{self.green_direction.label} Yellow",
                remaining=max(0.0, self.yellow_time - self.transition_timer),
                progress=_ratio(self.transition_timer, self.yellow_time),
            )
        if self.state is AdaptiveState.ALL_RED:
            return PhaseInfo(
                phase="All Red",
                remaining=max(0.0, self.all_red_time - self.transition_timer),
                progress=_ratio(self.transition_timer, self.all_red_time),
            )
        if self.state is AdaptiveState.GREEN:
            return PhaseInfo(
                phase=f"{self.green_direction.label} Green",
                remaining=max(0.0, self.policy.max_green - self.green_timer),
                progress=_ratio(self.green_timer, self.policy.max_green),
            )
        return PhaseInfo(phase="Adaptive - Waiting", remaining=0.0, progress=0.0)


# ── Dispatch ─────────────────────────────────────────────────────────────────


class TrafficController:
    """Routes every call to the controller of the active mode."""

    def __init__(
        self,
        policy: Optional[TrafficPolicy] = None,
        settings: Optional[SimulationSettings] = None,
    ) -> None:
        self.policy = policy or TrafficPolicy()
        settings = settings or SimulationSettings()
        self.fixed = FixedTimerController(
            settings.green_duration, settings.yellow_duration, settings.red_duration,
        )
        self.adaptive = AdaptivePriorityController(
            self.policy, settings.yellow_duration, settings.red_duration,
        )
        self._controllers = {
            ControllerMode.FIXED: self.fixed,
            ControllerMode.ADAPTIVE: self.adaptive,
        }
        self.mode = ControllerMode.parse(settings.mode)

    @property
    def active(self):
        return self._controllers[self.mode]

    def set_mode(self, mode: Any, lights: SignalBank) -> None:
        """Switch strategy, resetting both and applying the new one's safe state.

        Raises
        ------
        ValueError
            If *mode* is not a known controller mode.
        """
        self.mode = ControllerMode.parse(mode)
        self.reset(lights)
        log.info("Controller mode → %s", self.mode.value)

    def update_settings(self, settings: SimulationSettings) -> None:
        self.fixed.update_settings(settings)
        self.adaptive.update_settings(settings)

    def update(
        self,
        dt: float,
        lights: SignalBank,
        sensors: Optional[Any] = None,
        settings: Optional[SimulationSettings] = None,
    ) -> None:
        if settings is not None:
            self.update_settings(settings)
        self.active.update(dt, lights, sensors)

    def reset(self, lights: SignalBank) -> None:
        # Inactive first so the active controller's colours are the ones left applied.
        for mode, controller in self._controllers.items():
            if mode is not self.mode:
                controller.reset(lights)
        self.active.reset(lights)

    def current_info(self) -> PhaseInfo:
        return self.active.current_info()


def exclusive_axes(lights: SignalBank) -> bool:
    """True if at most one axis shows a non-red colour."""
    return len(lights.axes_open()) <= 1
