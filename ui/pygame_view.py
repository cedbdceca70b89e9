#!/usr/bin/env python3
"""
Main view class — combines all UI mixins into one runnable Pygame window.

Module layout
─────────────
    ui/
    ├── types.py           – ColorRGB, ColorRGBA, Camera, KeyBinding
    ├── constants.py       – ViewConstants mixin (all class-level constants)
    ├── helpers.py         – ViewHelpers mixin  (transforms, fonts, drawing utils)
    ├── draw_road.py       – RoadRenderer mixin (roads, lanes, zones, signals)
    ├── draw_vehicles.py   – VehicleRenderer mixin (sprites)
    ├── hud.py             – HudRenderer mixin  (HUD, help, debug, toast)
    └── pygame_view.py     – PygameIntersectionView (this file – main loop)
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

import pygame

from sim.traffic_policy import TrafficPolicy

from .constants import ViewConstants
from .draw_road import RoadRenderer
from .draw_vehicles import VehicleRenderer
from .helpers import ViewHelpers
from .hud import HudRenderer
from .types import Camera

log = logging.getLogger("ui")


class PygameIntersectionView(
    ViewConstants,
    ViewHelpers,
    RoadRenderer,
    VehicleRenderer,
    HudRenderer,
):
    """Traffic-intersection visualiser powered by Pygame.

    Inherits drawing logic from focused mixin modules so each file
    stays small and single-purpose.  All simulation state is read from
    *bridge* (a :class:`~sim.sim_bridge.SimBridge`); every keyboard
    command is forwarded to it.
    """

    def __init__(
        self,
        bridge: Any,
        width: int = 1200,
        height: int = 900,
        fps: int = 60,
        export_path: str = "traffic_stats.json",
        policy: Optional[TrafficPolicy] = None,
    ):
        self.bridge = bridge
        self.width = width
        self.height = height
        self.fps = fps
        self.export_path = export_path
        self.policy = policy or getattr(getattr(bridge, "world", None), "policy", None) or TrafficPolicy()

        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font_small: Optional[pygame.font.Font] = None
        self.font_tiny: Optional[pygame.font.Font] = None
        self.font_title: Optional[pygame.font.Font] = None

        self.camera = Camera(max(1, width - self.HUD_WIDTH), height)
        self.camera.fit(max(1, width - self.HUD_WIDTH), height, self.policy.canvas_size)
        self.time_seconds = 0.0

        # UI state
        self.paused = False
        self.show_debug = False
        self.show_help = True
        self.show_sensors = True
        self._toast_text = ""
        self._toast_until = 0.0
        self._screenshot_flash_until = 0.0

    # ------------------------------------------------------------------ #
    #  Resize                                                              #
    # ------------------------------------------------------------------ #
    def _handle_resize(self, new_w: int, new_h: int) -> None:
        self.width = max(self.HUD_WIDTH + 300, new_w)
        self.height = max(400, new_h)
        self.camera.fit(self.width - self.HUD_WIDTH, self.height, self.policy.canvas_size)
        self.screen = pygame.display.set_mode(
            (self.width, self.height), pygame.RESIZABLE
        )

    # ------------------------------------------------------------------ #
    #  Commands                                                            #
    # ------------------------------------------------------------------ #
    def _toast(self, text: str, seconds: float = 2.0) -> None:
        self._toast_text = text
        self._toast_until = self.time_seconds + seconds

    def _take_screenshot(self) -> None:
        if self.screen is None:
            return
        os.makedirs(self.SCREENSHOT_DIR, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = os.path.join(self.SCREENSHOT_DIR, f"sim_{stamp}.png")
        pygame.image.save(self.screen, path)
        self._screenshot_flash_until = self.time_seconds + 0.35

    def _export(self) -> None:
        try:
            self.bridge.export(self.export_path)
        except OSError as exc:
            log.error("Export to %s failed: %s", self.export_path, exc)
            self._toast(f"export failed: {exc}")
            return
        self._toast(f"exported {self.export_path}")

    def _toggle_mode(self) -> None:
        current = str(self.bridge.get_settings().get("mode", "fixed"))
        new_mode = "adaptive" if current == "fixed" else "fixed"
        self.bridge.set_mode(new_mode)
        self._toast(f"mode: {new_mode}")

    def _nudge_setting(self, key_char: str) -> None:
        key, step, lo, hi = self.SETTING_NUDGES[key_char]
        current = float(self.bridge.effective_settings().get(key, 0.0))
        value = max(lo, min(hi, current + step))
        self.bridge.apply_settings(**{key: value})
        self._toast(f"{key} = {value:g}")

    def _reset(self) -> None:
        self.paused = False
        self.bridge.reset()
        self.bridge.set_paused(False)
        self._toast("reset")

    def _handle_key(self, event: pygame.event.Event) -> bool:
        """Dispatch one KEYDOWN; returns False when the window should close."""
        if event.key == pygame.K_ESCAPE:
            return False
        if event.key == pygame.K_SPACE:
            self.paused = not self.paused
            self.bridge.set_paused(self.paused)
        elif event.key == pygame.K_r:
            self._reset()
        elif event.key == pygame.K_m:
            self._toggle_mode()
        elif event.key == pygame.K_e:
            self._export()
        elif event.key == pygame.K_s:
            self.show_sensors = not self.show_sensors
        elif event.key == pygame.K_h:
            self.show_help = not self.show_help
        elif event.key == pygame.K_F3:
            self.show_debug = not self.show_debug
        elif event.key == pygame.K_F12:
            self._take_screenshot()
        elif event.unicode in self.SETTING_NUDGES:
            self._nudge_setting(event.unicode)
        return True

    # ------------------------------------------------------------------ #
    #  Main loop                                                           #
    # ------------------------------------------------------------------ #
    def run(self) -> None:
        pygame.init()
        pygame.display.set_caption("FOUR-WAY INTERSECTION SIM")
        self.screen = pygame.display.set_mode(
            (self.width, self.height), pygame.RESIZABLE
        )
        self.clock = pygame.time.Clock()
        self.font_small = self._load_font(13, bold=False)
        self.font_tiny = self._load_font(11, bold=False)
        self.font_title = self._load_font(28, bold=True)

        running = True
        while running:
            delta_time = self.clock.tick(self.fps) / 1000.0
            self.time_seconds += delta_time

            # ---- events ------------------------------------------------- #
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    self._handle_resize(event.w, event.h)
                elif event.type == pygame.KEYDOWN:
                    try:
                        running = self._handle_key(event) and running
                    except ValueError as exc:
                        log.warning("Rejected command: %s", exc)
                        self._toast(str(exc))

            snapshot: Dict[str, Any] = self.bridge.get_snapshot()

            # ---- render ------------------------------------------------- #
            self.screen.fill(self.BG_COLOR)
            self.draw_road(self.screen)
            self.draw_lane_markings(self.screen)
            self.draw_stop_lines(self.screen)
            if self.show_sensors:
                self.draw_detection_zones(
                    self.screen, snapshot.get("zones", {}), snapshot.get("sensors", {})
                )
            self.draw_signals(self.screen, snapshot.get("signals", {}))
            self.draw_vehicles(self.screen, snapshot.get("vehicles", []))

            # HUD layers (drawn on top)
            self.draw_hud(self.screen, snapshot, self.time_seconds)
            if self.show_help:
                self._draw_help(self.screen)
            if self.show_debug:
                self._draw_debug_overlay(self.screen, snapshot, delta_time)
            if self.paused:
                self._draw_pause_banner(self.screen)
            self._draw_toast(self.screen)
            if self.time_seconds < self._screenshot_flash_until:
                flash = pygame.Surface(
                    (self.width, self.height), pygame.SRCALPHA
                )
                flash.fill((255, 255, 255, 40))
                self.screen.blit(flash, (0, 0))

            pygame.display.flip()

        pygame.quit()


# ---------------------------------------------------------------------- #
#  Convenience entry point                                                 #
# ---------------------------------------------------------------------- #
def run_pygame_view(
    bridge: Any,
    width: int = 1200,
    height: int = 900,
    fps: int = 60,
    export_path: str = "traffic_stats.json",
) -> None:
    view = PygameIntersectionView(
        bridge=bridge, width=width, height=height, fps=fps, export_path=export_path,
    )
    view.run()


if __name__ == "__main__":
    raise SystemExit(
        "pygame_view.py needs a SimBridge. Run `python main.py` "
        "or call run_pygame_view(your_bridge)."
    )
