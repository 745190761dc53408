#!/usr/bin/env python3
"""
Main view class: the coordinator's renderer, powered by Pygame.

Module layout
─────────────
    ui/
    ├── types.py           – ColorRGB, Camera, ButtonRect
    ├── constants.py       – ViewConstants mixin (all class-level constants)
    ├── hud.py             – HudRenderer mixin  (score / state strip)
    ├── keymap.py          – key press → CommandState
    ├── input_pad.py       – input process window
    └── pygame_view.py     – PygameWorldView (this file – menu + map)

The view is read-only: it receives :class:`~sim.world.WorldSnapshot`
copies and never touches the coordinator's state.  Closing the window
cancels the coordinator's token.
"""

from __future__ import annotations

from typing import List, Optional

import pygame

import config
from sim.cancel import CancellationToken
from sim.interfaces import MenuChoice
from sim.world import WorldSnapshot

from .constants import ViewConstants
from .hud import HudRenderer
from .types import ButtonRect, Camera


class PygameWorldView(ViewConstants, HudRenderer):
    """Start menu, instructions screen and live map of the world.

    Implements the :class:`~sim.interfaces.Renderer` protocol.
    """

    def __init__(
        self,
        world_w: float,
        world_h: float,
        token: Optional[CancellationToken] = None,
        width: int = config.WINDOW_WIDTH,
        height: int = config.WINDOW_HEIGHT,
        fps: int = config.TARGET_FPS,
    ) -> None:
        self.width = width
        self.height = height
        self.fps = fps
        self.token = token or CancellationToken()
        self.camera = Camera(width, height, world_w, world_h, top=self.HUD_HEIGHT)

        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font_small: Optional[pygame.font.Font] = None
        self.font_tiny: Optional[pygame.font.Font] = None
        self.font_title: Optional[pygame.font.Font] = None
        self._buttons: List[ButtonRect] = []

    # ------------------------------------------------------------------ #
    #  Setup / teardown                                                    #
    # ------------------------------------------------------------------ #
    def _ensure_open(self) -> None:
        if self.screen is not None:
            return
        pygame.init()
        pygame.display.set_caption("Drone Simulator - blackboard")
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font_title = pygame.font.SysFont("monospace", 32, bold=True)
        self.font_small = pygame.font.SysFont("monospace", 16)
        self.font_tiny = pygame.font.SysFont("monospace", 13)

    def close(self) -> None:
        if self.screen is not None:
            pygame.quit()
            self.screen = None

    def _handle_resize(self, new_w: int, new_h: int) -> None:
        self.width = max(400, new_w)
        self.height = max(300, new_h)
        self.camera.screen_w = self.width
        self.camera.screen_h = self.height
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)

    # ------------------------------------------------------------------ #
    #  Menu                                                                #
    # ------------------------------------------------------------------ #
    def _draw_menu(self, choice: int) -> None:
        surface = self.screen
        surface.fill(self.BG_COLOR)
        title = self.font_title.render("=== DRONE SIMULATOR ===", True, self.TITLE_COLOR)
        surface.blit(title, title.get_rect(center=(self.width // 2, self.height // 5)))

        self._buttons = []
        start_y = self.height // 2 - len(self.MENU_OPTIONS) * 24
        for i, label in enumerate(self.MENU_OPTIONS):
            text = self.font_small.render(
                label, True,
                self.MENU_SELECTED_FG if i == choice else self.MENU_ITEM_COLOR,
            )
            rect = text.get_rect(center=(self.width // 2, start_y + i * 48))
            box = rect.inflate(24, 12)
            if i == choice:
                pygame.draw.rect(surface, self.MENU_SELECTED_BG, box, border_radius=4)
            surface.blit(text, rect)
            self._buttons.append(ButtonRect(label, box.x, box.y, box.w, box.h))
        pygame.display.flip()

    def show_menu(self) -> MenuChoice:
        self._ensure_open()
        choice = 0
        n = len(self.MENU_OPTIONS)
        while not self.token.cancelled:
            self._draw_menu(choice)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.token.cancel("window closed")
                    return MenuChoice.QUIT
                if event.type == pygame.VIDEORESIZE:
                    self._handle_resize(event.w, event.h)
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_UP:
                        choice = (choice - 1) % n
                    elif event.key == pygame.K_DOWN:
                        choice = (choice + 1) % n
                    elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                        return MenuChoice(choice)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    for i, button in enumerate(self._buttons):
                        if button.contains(*event.pos):
                            return MenuChoice(i)
            self.clock.tick(self.fps)
        return MenuChoice.QUIT

    def show_instructions(self) -> None:
        self._ensure_open()
        while not self.token.cancelled:
            self.screen.fill(self.BG_COLOR)
            y = 60
            for line in self.INSTRUCTIONS:
                self.screen.blit(self.font_small.render(line, True, self.TEXT_COLOR), (60, y))
                y += 26
            pygame.display.flip()
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.token.cancel("window closed")
                    return
                if event.type in (pygame.KEYDOWN, pygame.MOUSEBUTTONDOWN):
                    return
            self.clock.tick(self.fps)

    # ------------------------------------------------------------------ #
    #  Map                                                                 #
    # ------------------------------------------------------------------ #
    def draw(self, snap: WorldSnapshot) -> None:
        self._ensure_open()
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.token.cancel("window closed")
            elif event.type == pygame.VIDEORESIZE:
                self._handle_resize(event.w, event.h)

        surface = self.screen
        cam = self.camera
        surface.fill(self.BG_COLOR)

        x0, y0 = cam.world_to_screen(0.0, 0.0)
        x1, y1 = cam.world_to_screen(cam.world_w, cam.world_h)
        world_rect = pygame.Rect(x0, y0, x1 - x0, y1 - y0)
        pygame.draw.rect(surface, self.WORLD_BG_COLOR, world_rect)
        pygame.draw.rect(surface, self.WORLD_BORDER_COLOR, world_rect, width=2)

        for ob in snap.obstacles:
            if ob.active:
                pygame.draw.circle(surface, self.OBSTACLE_COLOR,
                                   cam.world_to_screen(ob.x, ob.y), cam.length(ob.radius))

        for t in snap.targets:
            if not t.active:
                continue
            center = cam.world_to_screen(t.x, t.y)
            pygame.draw.circle(surface, self.TARGET_COLOR, center, cam.length(t.radius), width=2)
            label = self.font_tiny.render(str(t.id), True, self.TARGET_COLOR)
            surface.blit(label, label.get_rect(center=center))

        d = snap.drone
        drone_px = cam.world_to_screen(d.x, d.y)
        pygame.draw.circle(surface, self.DRONE_COLOR, drone_px, self.DRONE_RADIUS_PX)
        self._draw_arrow(surface, drone_px, snap.command.fx, snap.command.fy, self.FORCE_COLOR)
        self._draw_arrow(surface, drone_px, *snap.repulsion, self.REPULSION_COLOR)

        self.draw_hud(surface, snap)
        pygame.display.flip()

    def _draw_arrow(self, surface: pygame.Surface, origin, fx: float, fy: float, color) -> None:
        if fx == 0.0 and fy == 0.0:
            return
        end = (origin[0] + int(fx * self.FORCE_ARROW_SCALE),
               origin[1] + int(fy * self.FORCE_ARROW_SCALE))
        pygame.draw.line(surface, color, origin, end, width=2)
