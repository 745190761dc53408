#!/usr/bin/env python3

from .types import ButtonRect, Camera, ColorRGB
from .constants import ViewConstants
from .keymap import apply_key
from .hud import HudRenderer
from .pygame_view import PygameWorldView
from .input_pad import InputPad, run_input_pad

__all__ = [
    "ButtonRect",
    "Camera",
    "ColorRGB",
    "ViewConstants",
    "apply_key",
    "HudRenderer",
    "PygameWorldView",
    "InputPad",
    "run_input_pad",
]
