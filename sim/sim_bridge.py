"""
sim/sim_bridge.py
=================
Background-thread driver for :class:`sim.world.World`.  The UI and the
API poll the bridge for the latest snapshot without blocking.

Public API consumed by :mod:`ui.pygame_view` and :mod:`api`
-----------------------------------------------------------
* ``get_vehicles()``       → ``List[dict]``
* ``get_signals()``        → ``Dict[str, str]``
* ``get_phase_info()``     → ``dict``
* ``get_stats()``          → ``dict``
* ``get_snapshot()``       → ``dict``
* ``get_settings()``       → ``dict``
* ``effective_settings()`` → ``dict`` (includes queued overrides)
* ``apply_settings(**kw)`` → ``None`` (applied at the next tick)
* ``set_mode(mode)``       → ``None``
* ``export(path)``         → ``dict``
* ``export_data()``        → ``dict``
* ``reset()``              → ``None``
* ``set_paused(bool)``     → ``None``
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional

from sim.settings import SimulationSettings
from sim.traffic_policy import TrafficPolicy
from sim.types import ControllerMode
from sim.world import World

log = logging.getLogger("sim_bridge")

MAX_DT = 1.0 / 30.0


class SimBridge:
    """Simulation driver running in a background thread.

    The thread calls :meth:`step` at ``tick_rate_hz``, advancing the
    :class:`~sim.world.World` by the elapsed wall time (capped at
    :data:`MAX_DT`) and caching a snapshot for the UI thread.

    Parameters
    ----------
    tick_rate_hz : float
        Simulation ticks per second.
    random_seed : int or None
        Seed for reproducibility.
    settings : SimulationSettings or None
        Initial runtime settings.
    policy : TrafficPolicy or None
        Engine constants.
    time_scale : float
        Simulated seconds per wall-clock second (before the cap).
    """

    def __init__(
        self,
        tick_rate_hz: float = 30.0,
        random_seed: Optional[int] = None,
        settings: Optional[SimulationSettings] = None,
        policy: Optional[TrafficPolicy] = None,
        time_scale: float = 1.0,
    ) -> None:
        if tick_rate_hz <= 0:
            raise ValueError(f"tick_rate_hz must be positive, got {tick_rate_hz}")
        self._tick_rate_hz = tick_rate_hz
        self._time_scale = max(0.0, time_scale)
        self._world = World(settings=settings, policy=policy, seed=random_seed)

        self._lock = threading.Lock()
        # Guards the world itself; the UI never touches it directly.
        self._world_lock = threading.RLock()
        self._pending: Dict[str, Any] = {}

        # Cached state: written by the sim thread, read by the UI thread
        self._snapshot: Dict[str, Any] = self._world.snapshot()

        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._paused = False

    @property
    def world(self) -> World:
        return self._world

    @property
    def paused(self) -> bool:
        return self._paused

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Spawn the background simulation thread."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name="SimBridge"
        )
        self._thread.start()
        log.info("SimBridge started at %.1f Hz", self._tick_rate_hz)

    def stop(self) -> None:
        """Signal the thread to stop and wait for it to join."""
        self._running = False
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None
        log.info("SimBridge stopped")

    def reset(self) -> None:
        """Re-initialise the world so the scenario replays."""
        with self._world_lock:
            self._world.reset()
            snapshot = self._world.snapshot()
        with self._lock:
            self._snapshot = snapshot
        log.info("SimBridge reset")

    def set_paused(self, paused: bool) -> None:
        """Pause / unpause the simulation tick."""
        self._paused = bool(paused)
        log.info("SimBridge %s", "paused" if self._paused else "resumed")

    # ── Commands ──────────────────────────────────────────────────────────────

    def apply_settings(self, **overrides: Any) -> None:
        """Queue setting overrides; they take effect at the next tick.

        Raises
        ------
        ValueError
            On an unknown key or mode (checked now, not at the tick).
        """
        with self._lock:
            merged = dict(self._pending)
            merged.update(overrides)
            # Validate against the current settings before queueing.
            self._world.settings.merged(merged)
            self._pending = merged

    def set_mode(self, mode: Any) -> None:
        """Switch the controller immediately.

        Raises
        ------
        ValueError
            If *mode* is unknown.
        """
        parsed = ControllerMode.parse(mode)
        with self._world_lock:
            self._world.set_mode(parsed)
            snapshot = self._world.snapshot()
        with self._lock:
            self._pending.pop("mode", None)
            self._snapshot = snapshot

    def export(self, path: str) -> Dict[str, Any]:
        with self._world_lock:
            return self._world.export_json(path)

    def export_data(self) -> Dict[str, Any]:
        with self._world_lock:
            return self._world.export_data()

    # ── Read API ──────────────────────────────────────────────────────────────

    def get_snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._snapshot)

    def get_vehicles(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._snapshot.get("vehicles", []))

    def get_signals(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._snapshot.get("signals", {}))

    def get_phase_info(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._snapshot.get("phase", {}))

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._snapshot.get("stats", {}))

    def get_settings(self) -> Dict[str, Any]:
        with self._world_lock:
            return self._world.settings.as_dict()

    def effective_settings(self) -> Dict[str, Any]:
        """Settings as they will be after the next tick (queued overrides applied)."""
        with self._lock:
            pending = dict(self._pending)
        with self._world_lock:
            return self._world.settings.merged(pending).as_dict()


    # ── tick ──────────────────────────────────────────────────────────────────

    def step(self, dt: float) -> None:
        """Advance one tick of *dt* seconds (capped) and refresh the snapshot."""
        dt = min(max(0.0, dt), MAX_DT)
        with self._lock:
            pending, self._pending = self._pending, {}
        with self._world_lock:
            self._world.update(dt, pending or None)
            snapshot = self._world.snapshot()
        # Atomic swap; the UI thread reads this via the public methods.
        with self._lock:
            self._snapshot = snapshot

    # ── Background loop ───────────────────────────────────────────────────────

    def _loop(self) -> None:
        period = 1.0 / self._tick_rate_hz
        last = time.perf_counter()
        while self._running:
            t0 = time.perf_counter()
            elapsed, last = t0 - last, t0
            if not self._paused:
                try:
                    self.step(elapsed * self._time_scale)
                except Exception:
                    log.exception("SimBridge tick error")
            time.sleep(max(0.0, period - (time.perf_counter() - t0)))
