"""
A single animated battle background layer.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

from ..common.interfaces import Layer, PaletteCycle
from ..constants import LAYER_WIDTH, LAYER_HEIGHT, SNES_WIDTH, SNES_HEIGHT, BYTES_PER_PIXEL
from .background import BattleBackground
from .distorter import Distorter
from .palette import BackgroundPalette
from .palette_cycle import create_palette_cycle

if TYPE_CHECKING:
    from .rom import ROM

logger = logging.getLogger("BattleBackgrounds.ROM.Layer")

PaletteCycleFactory = Callable[[BattleBackground, BackgroundPalette], PaletteCycle]


class BackgroundLayer(Layer):
    """
    Combines the graphics, palette animation and distortion of one entry.

    The layer keeps its own 256x256 pixel buffer. On every frame the palette
    is advanced, the tiles are redrawn into the buffer and the buffer is
    distorted into the caller's frame.
    """

    def __init__(self, rom: 'ROM', entry: int,
                 palette_cycle_factory: Optional[PaletteCycleFactory] = None):
        """
        Build a layer for a background entry.

        Args:
            rom: ROM catalog
            entry: Background entry index
            palette_cycle_factory: Builds the palette animation from the entry
                and its palette; defaults to create_palette_cycle
        """
        self.rom = rom
        self.entry = entry

        background = rom.get_battle_background(entry)
        self.background = background

        self.graphics = rom.get_background_graphics(background.graphics_index)
        factory = palette_cycle_factory or create_palette_cycle
        self.palette_cycle = factory(background, rom.get_background_palette(background.palette_index))

        self.pixels = np.zeros((LAYER_HEIGHT, LAYER_WIDTH, BYTES_PER_PIXEL), dtype=np.uint8)
        self.distortion = rom.get_distortion_effect(background.distortion_index)
        self.distorter = Distorter(self.distortion, self.pixels)

        logger.info(f"Layer {entry}: graphics {background.graphics_index}, "
                    f"palette {background.palette_index}, "
                    f"distortion {background.distortion_index} ({self.distortion.type.name})")

    def overlay_frame(self, bitmap: np.ndarray, letterbox: int, ticks: int,
                      alpha: float, erase: bool) -> np.ndarray:
        """
        Render one frame of this layer into a frame buffer.

        Args:
            bitmap: (224, 256, 4) uint8 frame
            letterbox: Height in pixels of the black bands at top and bottom
            ticks: Time value of the frame to compute
            alpha: Blending weight
            erase: Whether to discard the frame's existing contents

        Returns:
            The frame buffer
        """
        if self.palette_cycle is not None:
            self.palette_cycle.cycle()
            self.graphics.draw(self.pixels, self.palette_cycle)
        return self.distorter.overlay_frame(bitmap, letterbox, ticks, alpha, erase)

    def render(self, ticks: int) -> np.ndarray:
        """Render this layer alone into a new frame."""
        frame = np.zeros((SNES_HEIGHT, SNES_WIDTH, BYTES_PER_PIXEL), dtype=np.uint8)
        return self.overlay_frame(frame, 0, ticks, 1.0, True)
