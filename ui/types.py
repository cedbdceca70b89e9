"""
ui/types.py
===========
Lightweight data containers used across every UI module.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

ColorRGB = Tuple[int, int, int]
ColorRGBA = Tuple[int, int, int, int]


@dataclass
class Camera:
    """Viewport mapping world coordinates (y up) to screen pixels (y down)."""
    screen_w: int
    screen_h: int
    world_x: float = 500.0
    world_y: float = 500.0
    zoom: float = 0.7

    def world_to_screen(self, wx: float, wy: float) -> Tuple[float, float]:
        cx = self.screen_w / 2
        cy = self.screen_h / 2
        sx = cx + (wx - self.world_x) * self.zoom
        sy = cy - (wy - self.world_y) * self.zoom
        return sx, sy

    def screen_to_world(self, sx: float, sy: float) -> Tuple[float, float]:
        cx = self.screen_w / 2
        cy = self.screen_h / 2
        wx = (sx - cx) / self.zoom + self.world_x
        wy = -((sy - cy) / self.zoom) + self.world_y
        return wx, wy

    def fit(self, screen_w: int, screen_h: int, world_size: float, margin: float = 0.0) -> None:
        """Resize the viewport and zoom so a square of *world_size* fills it."""
        self.screen_w = screen_w
        self.screen_h = screen_h
        self.zoom = max(0.05, (min(screen_w, screen_h) - 2 * margin) / world_size)


@dataclass
class KeyBinding:
    """One keyboard shortcut shown in the help panel."""
    key: str
    label: str
