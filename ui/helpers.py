"""
ui/helpers.py
=============
Utilities shared across UI modules: alpha-surface drawing, text rendering,
world → screen transforms and the :class:`ViewHelpers` mixin.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Tuple

import pygame

# ── Alpha drawing helpers ────────────────────────────────────────────────────

def draw_alpha_rect(
    target: pygame.Surface,
    color: Tuple[int, ...],
    rect: pygame.Rect,
    border_radius: int = 0,
    width: int = 0,
) -> None:
    """Draw a semi-transparent rectangle (colour tuple with 4 channels)."""
    if rect.w <= 0 or rect.h <= 0:
        return
    tmp = pygame.Surface((rect.w, rect.h), pygame.SRCALPHA)
    pygame.draw.rect(tmp, color, (0, 0, rect.w, rect.h), width=width, border_radius=border_radius)
    target.blit(tmp, rect.topleft)


def draw_dashed_line(
    surface: pygame.Surface,
    color: Tuple[int, ...],
    start: Tuple[float, float],
    end: Tuple[float, float],
    dash: float,
    gap: float,
    width: int = 1,
) -> None:
    """Dashed straight line in screen pixels."""
    length = math.hypot(end[0] - start[0], end[1] - start[1])
    if length <= 0 or dash <= 0:
        return
    ux = (end[0] - start[0]) / length
    uy = (end[1] - start[1]) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + dash, length)
        pygame.draw.line(
            surface,
            color,
            (start[0] + ux * pos, start[1] + uy * pos),
            (start[0] + ux * seg_end, start[1] + uy * seg_end),
            width,
        )
        pos += dash + gap


# ── Text helper ──────────────────────────────────────────────────────────────

def render_text(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: Tuple[int, int],
    color: Tuple[int, ...] = (230, 230, 235),
    anchor: str = "topleft",
) -> pygame.Rect:
    """Render text with flexible *anchor* ('topleft', 'center', 'midright' …)."""
    img = font.render(text, True, color)
    rect = img.get_rect(**{anchor: pos})
    surface.blit(img, rect)
    return rect


class ViewHelpers:
    """Mixin with coordinate and font helpers bound to the view's camera."""

    @staticmethod
    def _load_font(size: int, bold: bool = False) -> pygame.font.Font:
        for name in ("dejavusansmono", "consolas", "menlo", "couriernew"):
            path = pygame.font.match_font(name, bold=bold)
            if path:
                return pygame.font.Font(path, size)
        return pygame.font.Font(None, size + 4)

    def _to_screen(self, wx: float, wy: float) -> Tuple[int, int]:
        sx, sy = self.camera.world_to_screen(wx, wy)
        return int(round(sx)), int(round(sy))

    def _scale(self, world_len: float) -> int:
        return max(1, int(round(world_len * self.camera.zoom)))

    def _world_rect(self, x_min: float, y_min: float, x_max: float, y_max: float) -> pygame.Rect:
        """Screen rect of a world-space axis-aligned box (y flipped)."""
        left, top = self._to_screen(x_min, y_max)
        right, bottom = self._to_screen(x_max, y_min)
        return pygame.Rect(left, top, max(1, right - left), max(1, bottom - top))

    @staticmethod
    def _get(item: Any, key: str, default: Any = None) -> Any:
        if isinstance(item, Mapping):
            return item.get(key, default)
        return getattr(item, key, default)

    @staticmethod
    def _format_seconds(value: float) -> str:
        return f"{value:4.1f}s"
