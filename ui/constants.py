#!/usr/bin/env python3
"""Visual constants shared across all renderers."""

from __future__ import annotations

from typing import Sequence

from .types import ColorRGB


class ViewConstants:
    """Mixin providing every visual / layout constant."""

    BG_COLOR: ColorRGB = (15, 15, 15)
    WORLD_BG_COLOR: ColorRGB = (24, 24, 28)
    WORLD_BORDER_COLOR: ColorRGB = (90, 90, 90)
    HUD_BG_COLOR: ColorRGB = (22, 22, 22)
    HUD_BORDER_COLOR: ColorRGB = (42, 42, 42)
    TEXT_COLOR: ColorRGB = (200, 200, 200)
    DIM_TEXT_COLOR: ColorRGB = (120, 120, 120)
    TITLE_COLOR: ColorRGB = (200, 110, 255)
    MENU_SELECTED_BG: ColorRGB = (0, 170, 190)
    MENU_SELECTED_FG: ColorRGB = (0, 0, 0)
    MENU_ITEM_COLOR: ColorRGB = (246, 191, 90)

    DRONE_COLOR: ColorRGB = (86, 168, 255)
    OBSTACLE_COLOR: ColorRGB = (255, 136, 0)
    TARGET_COLOR: ColorRGB = (0, 255, 127)
    FORCE_COLOR: ColorRGB = (255, 255, 255)
    REPULSION_COLOR: ColorRGB = (255, 60, 60)
    KEY_HIGHLIGHT_COLOR: ColorRGB = (86, 168, 255)

    HUD_HEIGHT = 64
    DRONE_RADIUS_PX = 6
    FORCE_ARROW_SCALE = 4.0

    MENU_OPTIONS: Sequence[str] = ("Start Simulation", "Instructions", "Quit")

    INSTRUCTIONS: Sequence[str] = (
        "Fly the drone through the green targets to score.",
        "Orange obstacles and the walls push the drone away",
        "while it moves close to them.",
        "",
        "In the INPUT window:",
        "  q w e / a s d / z x c   add force in that direction",
        "  s or SPACE              brake (zero force)",
        "  r                       reset drone to the centre",
        "  Q                       quit the simulation",
        "",
        "Press any key to return to the menu.",
    )

    PAD_LAYOUT: Sequence[Sequence[str]] = (
        ("q", "w", "e"),
        ("a", "s", "d"),
        ("z", "x", "c"),
    )
