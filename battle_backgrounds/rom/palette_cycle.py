"""
Palette cycling strategies.

A battle background entry carries palette cycle parameters (type, two index
ranges and a speed), but how the game animates colours from them is not
decoded here. Layers draw through a PaletteCycle so an animating strategy
can be supplied to BackgroundLayer; the default keeps the palette static.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np

from ..common.interfaces import PaletteCycle

if TYPE_CHECKING:
    from .background import BattleBackground
    from .palette import BackgroundPalette

logger = logging.getLogger("BattleBackgrounds.ROM.PaletteCycle")


class StaticPaletteCycle(PaletteCycle):
    """Palette that never changes."""

    def __init__(self, palette: 'BackgroundPalette'):
        self.colors = palette.get_color_matrix().copy()

    def cycle(self) -> bool:
        return False

    def get_colors(self, sub_palette: int) -> np.ndarray:
        return self.colors[sub_palette % len(self.colors)]


def create_palette_cycle(entry: 'BattleBackground', palette: 'BackgroundPalette') -> PaletteCycle:
    """
    Default palette cycle factory used by BackgroundLayer.

    Args:
        entry: Background entry carrying the cycle parameters
        palette: Palette the background draws with

    Returns:
        A StaticPaletteCycle over the palette
    """
    if entry.palette_cycle_type and entry.palette_cycle_speed:
        logger.debug(f"Background {entry.index}: palette cycle type {entry.palette_cycle_type} "
                     f"at speed {entry.palette_cycle_speed} drawn static")
    return StaticPaletteCycle(palette)
