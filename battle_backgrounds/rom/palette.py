"""
Battle background palettes.

Colours are stored as 15-bit BGR555 words (0bbbbbgg gggrrrrr). Each
component is scaled to 8 bits by multiplying by 8, so full intensity is
0xF8 rather than 0xFF. Decoded colours are packed 32-bit ARGB integers
with the alpha byte forced opaque.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np

from .address import snes_to_hex
from .block import Block
from ..utils.error_handler import InvalidBitDepthError, InvalidSubpaletteCountError

if TYPE_CHECKING:
    from .rom import ROM

logger = logging.getLogger("BattleBackgrounds.ROM.Palette")


def bgr555_to_argb(value: int) -> int:
    """
    Convert a 15-bit BGR555 colour to a packed opaque 32-bit colour.

    Args:
        value: 16-bit colour word

    Returns:
        0xFFRRGGBB colour
    """
    b = ((value >> 10) & 31) * 8
    g = ((value >> 5) & 31) * 8
    r = (value & 31) * 8
    return (0xFF << 24) | (r << 16) | (g << 8) | b


class BackgroundPalette:
    """
    A palette referenced by one or more battle backgrounds.

    Holds `count` subpalettes of 2**bits_per_pixel colours each.
    """

    def __init__(self, rom: 'ROM', index: int, bits_per_pixel: int, count: int = 1):
        """
        Read a palette through the palette pointer table.

        Args:
            rom: ROM catalog
            index: Palette index
            bits_per_pixel: Colour depth of the graphics using this palette
            count: Number of subpalettes to read
        """
        self.index = index
        self.bits_per_pixel = bits_per_pixel
        self.colors = np.zeros((0, 0), dtype=np.uint32)

        pointer = rom.read_block(rom.layout["palette_pointer_table"] + index * 4)
        self.address = snes_to_hex(pointer.read_u32(), rom.layout["header"])

        self.read_palette(rom.read_block(self.address), count)

        logger.debug(f"Palette {index}: {count} x {2 ** bits_per_pixel} colours at {self.address:#x}")

    @classmethod
    def from_block(cls, block: Block, bits_per_pixel: int, count: int = 1) -> 'BackgroundPalette':
        """
        Decode a palette directly from a block, bypassing the pointer table.

        Args:
            block: Block positioned at the first colour word
            bits_per_pixel: Colour depth (2 or 4)
            count: Number of subpalettes

        Returns:
            The decoded palette
        """
        palette = cls.__new__(cls)
        palette.index = None
        palette.address = block.location
        palette.bits_per_pixel = bits_per_pixel
        palette.colors = np.zeros((0, 0), dtype=np.uint32)
        palette.read_palette(block, count)
        return palette

    def read_palette(self, block: Block, count: int) -> None:
        """
        Read palette data from a block into this palette's colour table.

        Args:
            block: Block to read colour words from
            count: Number of subpalettes to read

        Raises:
            InvalidBitDepthError: If the colour depth is not 2 or 4
            InvalidSubpaletteCountError: If count is less than one
        """
        if self.bits_per_pixel not in (2, 4):
            raise InvalidBitDepthError(
                f"Palette error: incorrect color depth {self.bits_per_pixel} specified")
        if count < 1:
            raise InvalidSubpaletteCountError(
                "Palette error: must specify positive number of subpalettes")

        power = 2 ** self.bits_per_pixel
        colors = np.zeros((count, power), dtype=np.uint32)
        for palette in range(count):
            for i in range(power):
                colors[palette, i] = bgr555_to_argb(block.read_u16())

        self.colors = colors

    @property
    def subpalette_count(self) -> int:
        return self.colors.shape[0]

    def get_colors(self, palette: int) -> np.ndarray:
        """
        Get the colours of one subpalette.

        Args:
            palette: Subpalette index

        Returns:
            Array of packed 32-bit colours
        """
        return self.colors[palette]

    def get_color_matrix(self) -> np.ndarray:
        """Get all subpalettes as a (count, colours) array."""
        return self.colors

    def to_rgba(self) -> np.ndarray:
        """
        Unpack the colour table into 8-bit channels.

        Returns:
            uint8 array of shape (count, colours, 4) in RGBA order
        """
        c = self.colors
        return np.stack([(c >> 16) & 0xFF, (c >> 8) & 0xFF, c & 0xFF, (c >> 24) & 0xFF],
                        axis=-1).astype(np.uint8)
