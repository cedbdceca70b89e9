"""
ui/draw_road.py
===============
Renders the intersection: grass background, road surfaces, sidewalks,
lane markings, stop lines, detection zones and signal heads.

All methods are *pure renderers*: they read snapshot data and draw to a
surface.
"""

from __future__ import annotations

from typing import Any, Mapping, Tuple

import pygame

from sim.physics import arm_vector, inbound_heading_vector, right_of
from sim.types import Direction
from ui.helpers import draw_alpha_rect, draw_dashed_line, render_text


class RoadRenderer:
    """Mixin that draws the static road layout and the signal / sensor overlays."""

    # ------------------------------------------------------------------ #
    #  Road surface                                                        #
    # ------------------------------------------------------------------ #

    def draw_road(self, surface: pygame.Surface) -> None:
        p = self.policy
        c = p.center
        half = p.road_width / 2.0
        size = p.canvas_size
        side = self.SIDEWALK_WIDTH

        surface.fill(self.GRASS_COLOR, self._world_rect(0.0, 0.0, size, size))

        # Sidewalks first, roads drawn over them.
        pygame.draw.rect(surface, self.SIDEWALK_COLOR,
                         self._world_rect(c - half - side, 0.0, c + half + side, size))
        pygame.draw.rect(surface, self.SIDEWALK_COLOR,
                         self._world_rect(0.0, c - half - side, size, c + half + side))
        pygame.draw.rect(surface, self.ROAD_COLOR, self._world_rect(c - half, 0.0, c + half, size))
        pygame.draw.rect(surface, self.ROAD_COLOR, self._world_rect(0.0, c - half, size, c + half))

        box = p.half_intersection
        pygame.draw.rect(surface, self.INTERSECTION_COLOR,
                         self._world_rect(c - box, c - box, c + box, c + box))

    def draw_lane_markings(self, surface: pygame.Surface) -> None:
        p = self.policy
        c = p.center
        width = max(1, self._scale(self.LANE_MARKING_WIDTH))
        dash = self.DASH_LEN * self.camera.zoom
        gap = self.DASH_GAP * self.camera.zoom
        for d in Direction:
            ux, uy = arm_vector(d)
            start = self._to_screen(c + ux * p.stop_line_distance, c + uy * p.stop_line_distance)
            end = self._to_screen(c + ux * p.center, c + uy * p.center)
            draw_dashed_line(surface, self.LANE_MARKING_COLOR, start, end, dash, gap, width)

    def draw_stop_lines(self, surface: pygame.Surface) -> None:
        p = self.policy
        c = p.center
        width = max(1, self._scale(self.STOP_LINE_WIDTH))
        for d in Direction:
            ux, uy = arm_vector(d)
            rx, ry = right_of(*inbound_heading_vector(d))
            x0 = c + ux * p.stop_line_distance
            y0 = c + uy * p.stop_line_distance
            pygame.draw.line(
                surface,
                self.STOP_LINE_COLOR,
                self._to_screen(x0, y0),
                self._to_screen(x0 + rx * p.lane_width, y0 + ry * p.lane_width),
                width,
            )

    # ------------------------------------------------------------------ #
    #  Detection zones                                                     #
    # ------------------------------------------------------------------ #

    def draw_detection_zones(
        self,
        surface: pygame.Surface,
        zones: Mapping[str, Tuple[float, float, float, float]],
        sensor_stats: Mapping[str, Mapping[str, int]],
    ) -> None:
        for label, (x_min, y_min, x_max, y_max) in zones.items():
            rect = self._world_rect(x_min, y_min, x_max, y_max)
            draw_alpha_rect(surface, (*self.ZONE_COLOR, self.ZONE_FILL_ALPHA), rect)
            draw_alpha_rect(surface, (*self.ZONE_COLOR, self.ZONE_OUTLINE_ALPHA), rect, width=2)
            stats = sensor_stats.get(label, {})
            if self.font_tiny is not None:
                render_text(
                    surface,
                    self.font_tiny,
                    f"{stats.get('detected', 0)}/{stats.get('waiting', 0)}",
                    rect.center,
                    self.HUD_TEXT_COLOR,
                    anchor="center",
                )

    # ------------------------------------------------------------------ #
    #  Signal heads                                                        #
    # ------------------------------------------------------------------ #

    def draw_signals(self, surface: pygame.Surface, signals: Mapping[str, Any]) -> None:
        p = self.policy
        c = p.center
        radius = max(2, self._scale(6))
        spacing = self._scale(14)
        for d in Direction:
            color_name = str(signals.get(d.label, "red")).lower()
            ux, uy = arm_vector(d)
            rx, ry = right_of(*inbound_heading_vector(d))
            dist = p.stop_line_distance + self.LIGHT_OFFSET
            # Beside the road, on the driver's right.
            off = p.road_width / 2.0 + self.SIDEWALK_WIDTH
            sx, sy = self._to_screen(c + ux * dist + rx * off, c + uy * dist + ry * off)

            housing = pygame.Rect(0, 0, radius * 3, spacing * 2 + radius * 3)
            housing.center = (sx, sy)
            pygame.draw.rect(surface, self.LIGHT_HOUSING_COLOR, housing, border_radius=3)
            for i, name in enumerate(("red", "yellow", "green")):
                lamp = self.LIGHT_COLORS[name] if name == color_name else self.LIGHT_OFF_COLOR
                pygame.draw.circle(surface, lamp, (sx, housing.top + radius + radius // 2 + i * spacing), radius)
