#!/usr/bin/env python3
"""HUD panel, key help, debug overlay, status toast and pause banner (mixin)."""

from __future__ import annotations

from typing import Any, Mapping

import pygame

from ui.helpers import render_text


class HudRenderer:
    """Mixin that draws every overlay / HUD element."""

    # ------------------------------------------------------------------ #
    #  Main HUD panel                                                      #
    # ------------------------------------------------------------------ #

    def draw_hud(self, surface: pygame.Surface, snapshot: Mapping[str, Any], tick: float) -> None:
        if self.font_small is None or self.font_tiny is None:
            return

        panel_rect = pygame.Rect(self.width - self.HUD_WIDTH, 0, self.HUD_WIDTH, self.height)
        pygame.draw.rect(surface, self.HUD_BG_COLOR, panel_rect)
        pygame.draw.line(surface, self.HUD_BORDER_COLOR, panel_rect.topleft, panel_rect.bottomleft)

        x = panel_rect.x + 14
        y = 14
        mode = str(snapshot.get("mode", "fixed")).upper()
        render_text(surface, self.font_small, f"MODE  {mode}", (x, y), self.HUD_TEXT_COLOR)
        y += 22

        # Phase + progress bar
        phase = snapshot.get("phase", {})
        render_text(surface, self.font_small, str(phase.get("phase", "")), (x, y), self.HUD_TEXT_COLOR)
        y += 18
        render_text(
            surface, self.font_tiny,
            f"REMAINING {self._format_seconds(float(phase.get('remaining', 0.0)))}",
            (x, y), self.HUD_DIM_COLOR,
        )
        y += 16
        bar_w = self.HUD_WIDTH - 28
        progress = max(0.0, min(1.0, float(phase.get("progress", 0.0))))
        pygame.draw.rect(surface, (40, 40, 40), (x, y, bar_w, 6), border_radius=2)
        if progress > 0:
            pygame.draw.rect(surface, self.LIGHT_COLORS["green"], (x, y, int(bar_w * progress), 6), border_radius=2)
        y += 16

        # Signals
        signals = snapshot.get("signals", {})
        for label, color_name in signals.items():
            lamp = self.LIGHT_COLORS.get(str(color_name), self.LIGHT_OFF_COLOR)
            pygame.draw.circle(surface, lamp, (x + 5, y + 7), 5)
            render_text(surface, self.font_tiny, f"{label:<6} {str(color_name).upper()}", (x + 16, y), self.HUD_TEXT_COLOR)
            y += 16
        y += 8

        # Settings
        y = self._draw_section(surface, "SETTINGS", x, y)
        settings = snapshot.get("settings", {})
        rows = (
            ("green", f"{settings.get('greenDuration', 0):.0f}s"),
            ("yellow", f"{settings.get('yellowDuration', 0):.0f}s"),
            ("all red", f"{settings.get('redDuration', 0):.0f}s"),
            ("spawn", f"{settings.get('carSpawnRate', 0):.0f} / 10s"),
            ("speed", f"{settings.get('carSpeed', 0):.0f}"),
            ("turns", f"{settings.get('turnRate', 0):.0f}%"),
            ("detector", f"{settings.get('detectorDistance', 0):.0f}"),
        )
        for name, value in rows:
            render_text(surface, self.font_tiny, f"{name:<10}{value}", (x, y), self.HUD_TEXT_COLOR)
            y += 15
        y += 8

        # Statistics
        y = self._draw_section(surface, "STATISTICS", x, y)
        stats = snapshot.get("stats", {})
        render_text(surface, self.font_tiny, f"passed    {stats.get('totalCarsPassed', 0)}", (x, y), self.HUD_TEXT_COLOR)
        y += 15
        render_text(surface, self.font_tiny, f"on road   {stats.get('currentCars', 0)}", (x, y), self.HUD_TEXT_COLOR)
        y += 15
        render_text(
            surface, self.font_tiny,
            f"avg wait  {self._format_seconds(float(stats.get('averageWaitTime', 0.0)))}",
            (x, y), self.HUD_TEXT_COLOR,
        )
        y += 18
        sensors = snapshot.get("sensors", {})
        priorities = snapshot.get("priorities", {})
        for label, entry in stats.get("directionStats", {}).items():
            sensor = sensors.get(label, {})
            line = (
                f"{label:<6}{entry.get('passed', 0):>4} "
                f"{entry.get('averageWait', 0.0):5.1f}s "
                f"{sensor.get('detected', 0)}/{sensor.get('waiting', 0)}"
            )
            if mode == "ADAPTIVE" and label in priorities:
                line += f"  p={priorities[label]:.1f}"
            render_text(surface, self.font_tiny, line, (x, y), self.HUD_DIM_COLOR)
            y += 15

    def _draw_section(self, surface: pygame.Surface, title: str, x: int, y: int) -> int:
        render_text(surface, self.font_tiny, title, (x, y), self.HUD_DIM_COLOR)
        pygame.draw.line(surface, self.HUD_BORDER_COLOR, (x, y + 15), (x + self.HUD_WIDTH - 28, y + 15))
        return y + 20

    # ------------------------------------------------------------------ #
    #  Key help                                                            #
    # ------------------------------------------------------------------ #

    def _draw_help(self, surface: pygame.Surface) -> None:
        if self.font_tiny is None:
            return
        row_h = 14
        box_h = len(self.KEY_BINDINGS) * row_h + 12
        box = pygame.Rect(12, self.height - box_h - 12, 230, box_h)
        pygame.draw.rect(surface, self.HUD_BG_COLOR, box, border_radius=4)
        pygame.draw.rect(surface, self.HUD_BORDER_COLOR, box, width=1, border_radius=4)
        y = box.y + 6
        for binding in self.KEY_BINDINGS:
            render_text(surface, self.font_tiny, f"{binding.key:<7}{binding.label}", (box.x + 8, y), (200, 200, 200))
            y += row_h

    # ------------------------------------------------------------------ #
    #  Debug / FPS overlay                                                 #
    # ------------------------------------------------------------------ #

    def _draw_debug_overlay(self, surface: pygame.Surface, snapshot: Mapping[str, Any], dt: float) -> None:
        if self.font_tiny is None:
            return
        fps = self.clock.get_fps() if self.clock else 0.0
        lines = [
            f"FPS  {fps:.1f}",
            f"DT   {dt * 1000:.1f} ms",
            f"TICK {snapshot.get('tick', 0)}",
            f"SIM  {float(snapshot.get('time', 0.0)):.1f}s",
            f"VEH  {len(snapshot.get('vehicles', []))}",
        ]
        x, y = 12, 12
        for line in lines:
            render_text(surface, self.font_tiny, line, (x, y), (0, 255, 127))
            y += 14

    # ------------------------------------------------------------------ #
    #  Status toast                                                        #
    # ------------------------------------------------------------------ #

    def _draw_toast(self, surface: pygame.Surface) -> None:
        if not self._toast_text or self.time_seconds > self._toast_until or self.font_small is None:
            return
        map_w = self.width - self.HUD_WIDTH
        img = self.font_small.render(self._toast_text, True, (240, 240, 240))
        rect = img.get_rect(midtop=(map_w // 2, 12))
        pygame.draw.rect(surface, self.HUD_BG_COLOR, rect.inflate(16, 8), border_radius=4)
        surface.blit(img, rect)

    # ------------------------------------------------------------------ #
    #  Pause banner                                                        #
    # ------------------------------------------------------------------ #

    def _draw_pause_banner(self, surface: pygame.Surface) -> None:
        map_w = self.width - self.HUD_WIDTH
        overlay = pygame.Surface((map_w, self.height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 100))
        surface.blit(overlay, (0, 0))
        if self.font_title:
            text = self.font_title.render("PAUSED", True, (220, 220, 220))
            surface.blit(text, text.get_rect(center=(map_w // 2, self.height // 2)))
