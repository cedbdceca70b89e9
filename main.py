#!/usr/bin/env python3
"""
main.py
=======
Entry point.

* ``python main.py``                       Pygame viewer
* ``python main.py --api``                 viewer plus the FastAPI server
* ``python main.py --api --no-ui``         API server only
* ``python main.py --headless 120``        run 120 simulated seconds, export JSON

Defaults come from :mod:`config`; ``TRAFFIC_SIM_*`` environment variables
override them and CLI flags override both.
"""

from __future__ import annotations

import argparse
import logging
import os
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import config
from logging_setup import setup_logging
from sim.settings import SimulationSettings
from sim.traffic_policy import TrafficPolicy
from sim.world import World

log = logging.getLogger("main")


def _env(name: str, default: Any, cast: Callable[[str], Any] = str) -> Any:
    raw = os.environ.get(f"TRAFFIC_SIM_{name}")
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise SystemExit(f"Invalid TRAFFIC_SIM_{name}={raw!r}: {exc}")


def _optional_int(raw: str) -> Optional[int]:
    return None if raw.lower() in ("none", "") else int(raw)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Four-way intersection traffic simulator")
    parser.add_argument("--seed", type=_optional_int,
                        default=_env("SEED", config.DEFAULT_SEED, _optional_int))
    parser.add_argument("--mode", choices=("fixed", "adaptive"),
                        default=_env("MODE", config.DEFAULT_MODE))
    parser.add_argument("--tick-rate", type=float,
                        default=_env("TICK_RATE", config.DEFAULT_TICK_RATE_HZ, float))
    parser.add_argument("--time-scale", type=float,
                        default=_env("TIME_SCALE", config.DEFAULT_TIME_SCALE, float))
    parser.add_argument("--headless", type=float, metavar="SECONDS", default=None,
                        help="run without a window for SECONDS of simulated time")
    parser.add_argument("--dt", type=float, default=config.HEADLESS_DT,
                        help="fixed step for --headless runs")
    parser.add_argument("--export", default=_env("EXPORT_PATH", config.EXPORT_PATH))
    parser.add_argument("--width", type=int, default=_env("WIDTH", config.WINDOW_WIDTH, int))
    parser.add_argument("--height", type=int, default=_env("HEIGHT", config.WINDOW_HEIGHT, int))
    parser.add_argument("--fps", type=int, default=config.TARGET_FPS)
    parser.add_argument("--api", action="store_true", help="serve the FastAPI reporting server")
    parser.add_argument("--no-ui", action="store_true", help="with --api, do not open a window")
    parser.add_argument("--host", default=_env("API_HOST", config.API_HOST))
    parser.add_argument("--port", type=int, default=_env("API_PORT", config.API_PORT, int))
    parser.add_argument("--log-level", default=_env("LOG_LEVEL", config.LOG_LEVEL))
    for name, flag in (
        ("green_duration", "--green"),
        ("yellow_duration", "--yellow"),
        ("red_duration", "--red"),
        ("car_spawn_rate", "--spawn-rate"),
        ("car_speed", "--car-speed"),
        ("turn_rate", "--turn-rate"),
        ("detector_distance", "--detector-distance"),
    ):
        parser.add_argument(flag, dest=name, type=float, default=None)
    return parser


def settings_from_args(args: argparse.Namespace) -> SimulationSettings:
    overrides: Dict[str, Any] = {"mode": args.mode}
    for name in (
        "green_duration", "yellow_duration", "red_duration",
        "car_spawn_rate", "car_speed", "turn_rate", "detector_distance",
    ):
        overrides[name] = getattr(args, name)
    return SimulationSettings().merged(overrides)


def run_headless(
    duration: float,
    dt: float,
    settings: Optional[SimulationSettings] = None,
    policy: Optional[TrafficPolicy] = None,
    seed: Optional[int] = None,
    export_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Run *duration* simulated seconds in fixed *dt* steps; return the export document."""
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    world = World(settings=settings, policy=policy, seed=seed)
    steps = int(round(duration / dt))
    for _ in range(steps):
        world.update(dt)
    data = world.export_json(export_path) if export_path else world.export_data()
    stats = data["stats"]
    log.info(
        "Headless run: %.1fs simulated, %d passed, avg wait %.2fs, %d on road",
        world.sim_time, stats["totalCarsPassed"], stats["averageWaitTime"], stats["currentCars"],
    )
    return data


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(
        getattr(logging, str(args.log_level).upper(), logging.INFO),
        log_file=config.LOG_FILE,
        world_debug_file=config.WORLD_DEBUG_LOG_FILE,
    )
    try:
        settings = settings_from_args(args)
    except ValueError as exc:
        raise SystemExit(str(exc))
    policy = TrafficPolicy()
    log.info("Starting (mode=%s, seed=%s)", settings.mode.value, args.seed)

    if args.headless is not None:
        run_headless(args.headless, args.dt, settings, policy, args.seed, args.export)
        return

    from sim.sim_bridge import SimBridge

    bridge = SimBridge(
        tick_rate_hz=args.tick_rate,
        random_seed=args.seed,
        settings=settings,
        policy=policy,
        time_scale=args.time_scale,
    )
    bridge.start()
    try:
        if args.api:
            from api import serve

            if args.no_ui:
                serve(bridge, args.host, args.port)
                return
            threading.Thread(
                target=serve, args=(bridge, args.host, args.port), daemon=True, name="api",
            ).start()
        elif args.no_ui:
            log.info("No UI and no API requested; running until interrupted")
            while True:
                time.sleep(1.0)

        from ui import run_pygame_view

        run_pygame_view(
            bridge, width=args.width, height=args.height, fps=args.fps, export_path=args.export,
        )
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        bridge.stop()


if __name__ == "__main__":
    main()
