"""
ui/types.py
===========
Lightweight data containers used across every UI module.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

ColorRGB = Tuple[int, int, int]


@dataclass
class Camera:
    """Viewport mapping the world rectangle onto a screen area.

    World ``y`` grows downwards, like screen ``y``; the world is scaled
    uniformly to fit inside the area minus *margin* on every side.
    """
    screen_w: int
    screen_h: int
    world_w: float
    world_h: float
    margin: int = 20
    top: int = 0

    @property
    def scale(self) -> float:
        usable_w = max(1, self.screen_w - 2 * self.margin)
        usable_h = max(1, self.screen_h - self.top - 2 * self.margin)
        return min(usable_w / self.world_w, usable_h / self.world_h)

    @property
    def origin(self) -> Tuple[float, float]:
        s = self.scale
        ox = (self.screen_w - self.world_w * s) / 2
        oy = self.top + (self.screen_h - self.top - self.world_h * s) / 2
        return ox, oy

    def world_to_screen(self, wx: float, wy: float) -> Tuple[int, int]:
        ox, oy = self.origin
        s = self.scale
        return int(ox + wx * s), int(oy + wy * s)

    def length(self, world_len: float) -> int:
        return max(1, int(world_len * self.scale))


@dataclass
class ButtonRect:
    """Stores a button's screen rect and label for click detection."""
    label: str
    x: int
    y: int
    w: int
    h: int

    def contains(self, mx: int, my: int) -> bool:
        return self.x <= mx <= self.x + self.w and self.y <= my <= self.y + self.h
