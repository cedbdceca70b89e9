#!/usr/bin/env python3
"""Visual constants shared across all renderers."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from .types import ColorRGB, KeyBinding


class ViewConstants:
    """Mixin providing every visual / layout constant."""

    BG_COLOR: ColorRGB = (15, 15, 15)
    GRASS_COLOR: ColorRGB = (38, 74, 44)
    ROAD_COLOR: ColorRGB = (44, 44, 44)
    SIDEWALK_COLOR: ColorRGB = (142, 142, 142)
    INTERSECTION_COLOR: ColorRGB = (44, 44, 44)
    LANE_MARKING_COLOR: ColorRGB = (255, 255, 255)
    STOP_LINE_COLOR: ColorRGB = (255, 255, 255)
    HUD_BG_COLOR: ColorRGB = (22, 22, 22)
    HUD_BORDER_COLOR: ColorRGB = (42, 42, 42)
    HUD_TEXT_COLOR: ColorRGB = (230, 230, 235)
    HUD_DIM_COLOR: ColorRGB = (150, 150, 150)
    WARNING_COLOR: ColorRGB = (255, 60, 60)

    ZONE_COLOR: ColorRGB = (255, 165, 0)
    ZONE_FILL_ALPHA = 76
    ZONE_OUTLINE_ALPHA = 204

    LIGHT_COLORS: Dict[str, ColorRGB] = {
        "red": (255, 71, 87),
        "yellow": (255, 165, 2),
        "green": (46, 213, 115),
    }
    LIGHT_OFF_COLOR: ColorRGB = (70, 70, 70)
    LIGHT_HOUSING_COLOR: ColorRGB = (34, 34, 34)
    LIGHT_OFFSET = 25.0
    """World units between a stop line and its signal head."""

    LANE_MARKING_WIDTH = 2
    STOP_LINE_WIDTH = 4
    DASH_LEN = 20.0
    DASH_GAP = 20.0
    SIDEWALK_WIDTH = 12.0

    VEHICLE_LENGTH = 28.0
    VEHICLE_WIDTH = 16.0

    HUD_WIDTH = 300
    HUD_BLINK_MS = 500

    KEY_BINDINGS: Sequence[KeyBinding] = (
        KeyBinding("SPACE", "pause / resume"),
        KeyBinding("R", "reset"),
        KeyBinding("M", "toggle fixed / adaptive"),
        KeyBinding("1 / 2", "green -/+ 1 s"),
        KeyBinding("3 / 4", "yellow -/+ 1 s"),
        KeyBinding("5 / 6", "spawn rate -/+ 1"),
        KeyBinding("7 / 8", "car speed -/+ 5"),
        KeyBinding("9 / 0", "turn rate -/+ 5 %"),
        KeyBinding("[ / ]", "detector -/+ 10"),
        KeyBinding("S", "show / hide sensors"),
        KeyBinding("E", "export JSON"),
        KeyBinding("F12", "screenshot"),
        KeyBinding("F3", "debug overlay"),
        KeyBinding("H", "show / hide help"),
    )

    # (setting, step, minimum, maximum) per nudge key name
    SETTING_NUDGES: Dict[str, Tuple[str, float, float, float]] = {
        "1": ("greenDuration", -1.0, 1.0, 60.0),
        "2": ("greenDuration", 1.0, 1.0, 60.0),
        "3": ("yellowDuration", -1.0, 1.0, 10.0),
        "4": ("yellowDuration", 1.0, 1.0, 10.0),
        "5": ("carSpawnRate", -1.0, 0.0, 20.0),
        "6": ("carSpawnRate", 1.0, 0.0, 20.0),
        "7": ("carSpeed", -5.0, 5.0, 80.0),
        "8": ("carSpeed", 5.0, 5.0, 80.0),
        "9": ("turnRate", -5.0, 0.0, 100.0),
        "0": ("turnRate", 5.0, 0.0, 100.0),
        "[": ("detectorDistance", -10.0, 30.0, 150.0),
        "]": ("detectorDistance", 10.0, 30.0, 150.0),
    }

    SCREENSHOT_DIR = "screenshots"
