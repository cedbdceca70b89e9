#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables and CLI flags (see
:mod:`main`).  This module is a thin, import-safe leaf — it never imports
from other project packages.
"""

# ── Simulation defaults ──────────────────────────────────────────────────────
DEFAULT_TICK_RATE_HZ: float = 30.0
DEFAULT_TIME_SCALE: float = 1.0
DEFAULT_MODE: str = "fixed"
DEFAULT_SEED = None

# ── Headless run defaults ────────────────────────────────────────────────────
HEADLESS_DT: float = 1.0 / 30.0
HEADLESS_DURATION_S: float = 120.0

# ── Export ───────────────────────────────────────────────────────────────────
EXPORT_PATH: str = "traffic_stats.json"

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL: str = "INFO"
LOG_FILE: str = "traffic_sim.log"
WORLD_DEBUG_LOG_FILE: str = "world_debug.log"

# ── UI defaults ──────────────────────────────────────────────────────────────
WINDOW_WIDTH: int = 1200
WINDOW_HEIGHT: int = 900
TARGET_FPS: int = 60

# ── API server ───────────────────────────────────────────────────────────────
API_HOST: str = "127.0.0.1"
API_PORT: int = 8000
