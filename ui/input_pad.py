#!/usr/bin/env python3
"""Input process: a small Pygame window that turns key presses into commands.

Every handled key press writes exactly one :class:`~ipc.records.CommandState`
to the coordinator.  ``Q`` (or closing the window) sends a command with the
quit flag and ends the process.
"""

from __future__ import annotations

import logging

import pygame

import config
from ipc import CommandState, TransferStatus, write_exact
from sim.cancel import CancellationToken
from sim.params import SimParams

from .constants import ViewConstants
from .keymap import BRAKE_KEYS, QUIT_KEY, apply_key

log = logging.getLogger("input")


class InputPad(ViewConstants):
    """Direction pad window plus the command it has produced so far."""

    def __init__(self, params: SimParams,
                 width: int = config.PAD_WINDOW_WIDTH,
                 height: int = config.PAD_WINDOW_HEIGHT) -> None:
        self.params = params
        self.width = width
        self.height = height
        self.command = CommandState()
        self.screen = None
        self.font = None

    def open(self) -> None:
        pygame.init()
        pygame.display.set_caption("Drone Simulator - input")
        self.screen = pygame.display.set_mode((self.width, self.height))
        self.font = pygame.font.SysFont("monospace", 16)

    def close(self) -> None:
        pygame.quit()

    def press(self, key: str) -> CommandState:
        self.command = apply_key(self.command, key, self.params)
        return self.command

    def draw(self) -> None:
        surface = self.screen
        surface.fill(self.BG_COLOR)
        surface.blit(self.font.render("INPUT - direction pad:", True, self.TEXT_COLOR), (12, 10))

        highlighted = chr(self.command.last_key) if self.command.last_key else ""
        if highlighted in BRAKE_KEYS:
            highlighted = "s"

        cell = 44
        for row, keys in enumerate(self.PAD_LAYOUT):
            for col, key in enumerate(keys):
                rect = pygame.Rect(20 + col * cell, 40 + row * cell, cell - 4, cell - 4)
                if key == highlighted:
                    pygame.draw.rect(surface, self.KEY_HIGHLIGHT_COLOR, rect)
                pygame.draw.rect(surface, self.WORLD_BORDER_COLOR, rect, width=1)
                label = self.font.render(key, True, self.TEXT_COLOR)
                surface.blit(label, label.get_rect(center=rect.center))

        c = self.command
        lines = (
            "s/SPACE brake   r reset   Q quit",
            "",
            f"fx = {c.fx:6.2f}  fy = {c.fy:6.2f}",
            f"brake = {c.brake}  reset = {c.reset}  quit = {c.quit}",
            f"last_key = {c.last_key}",
        )
        y = 40 + 3 * cell + 12
        for line in lines:
            surface.blit(self.font.render(line, True, self.TEXT_COLOR), (12, y))
            y += 22
        pygame.display.flip()


def run_input_pad(fd_cmd_out: int, params: SimParams, token: CancellationToken) -> int:
    """Input process loop.  Returns 0 on quit/cancel, 1 if the pipe breaks."""
    pad = InputPad(params)
    pad.open()
    clock = pygame.time.Clock()
    log.info("started (force_step=%.2f, max_force=%.2f)", params.force_step, params.max_force)

    exit_code = 0
    try:
        while not token.cancelled:
            pad.draw()
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    key = QUIT_KEY
                elif event.type == pygame.KEYDOWN and event.unicode:
                    key = event.unicode
                else:
                    continue

                cmd = pad.press(key)
                if write_exact(fd_cmd_out, cmd.pack()) is not TransferStatus.COMPLETE:
                    exit_code = 1
                    token.cancel("command pipe broken")
                    break
                if cmd.quit:
                    log.info("quit requested, exiting")
                    token.cancel("quit")
                    break
            clock.tick(config.TARGET_FPS)
    finally:
        pad.close()

    log.info("exiting (code=%d)", exit_code)
    return exit_code
