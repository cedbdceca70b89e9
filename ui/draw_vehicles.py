#!/usr/bin/env python3
"""Vehicle sprite rendering (mixin)."""

from __future__ import annotations

import math
from typing import Any, Sequence

import pygame


class VehicleRenderer:
    """Mixin that draws vehicles as rotated sprites."""

    # ------------------------------------------------------------------ #
    #  Public draw methods                                                 #
    # ------------------------------------------------------------------ #

    def draw_vehicles(self, surface: pygame.Surface, vehicles: Sequence[Any]) -> None:
        for vehicle in vehicles:
            self.draw_vehicle(surface, vehicle)

    def draw_vehicle(self, surface: pygame.Surface, vehicle: Any) -> None:
        w = self._scale(self.VEHICLE_LENGTH)
        h = self._scale(self.VEHICLE_WIDTH)
        color = tuple(self._get(vehicle, "color", (86, 168, 255)))
        sprite = pygame.Surface((w, h), pygame.SRCALPHA)

        # Body
        body = pygame.Rect(0, 0, w, h)
        pygame.draw.rect(sprite, color, body, border_radius=3)

        # Windshield
        ws_rect = pygame.Rect(max(0, w - max(3, w // 3)), 2, max(2, w // 4), max(1, h - 4))
        pygame.draw.rect(sprite, (135, 206, 235), ws_rect, border_radius=2)

        # Border
        pygame.draw.rect(sprite, (0, 0, 0), body, width=1, border_radius=3)

        # Stopped vehicles get red tail lights.
        if float(self._get(vehicle, "speed", 0.0)) < 1.0:
            tl = max(1, h // 6)
            pygame.draw.circle(sprite, self.WARNING_COLOR, (tl, tl + 1), tl)
            pygame.draw.circle(sprite, self.WARNING_COLOR, (tl, h - tl - 1), tl)

        # Heading is CCW from +x in a y-up world; screen y is flipped, so
        # the same angle rotates the sprite counter-clockwise on screen.
        angle = math.degrees(float(self._get(vehicle, "heading", 0.0)))
        rotated = pygame.transform.rotate(sprite, angle)
        centre = self._to_screen(float(self._get(vehicle, "x", 0.0)), float(self._get(vehicle, "y", 0.0)))
        surface.blit(rotated, rotated.get_rect(center=centre))
