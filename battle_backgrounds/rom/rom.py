"""
Catalog of the battle background assets stored in a ROM image.
"""

import logging
import os
from typing import Dict, List, Optional

from .background import BattleBackground
from .block import Block
from .distortion import DistortionEffect
from .graphics import BackgroundGraphics
from .palette import BackgroundPalette
from ..rom_layout import ROM_LAYOUTS, DEFAULT_LAYOUT
from ..utils.error_handler import InvalidBitDepthError, InconsistentBitDepthError

logger = logging.getLogger("BattleBackgrounds.ROM")


class ROM:
    """
    Owns a ROM image and resolves backgrounds, palettes, graphics and
    distortion effects from its fixed tables.

    Every background entry is read at load time so that each palette and
    graphics set gets exactly one colour depth. Palettes, graphics and
    effects are decoded from the image when they are looked up.
    """

    def __init__(self, data: bytes, layout: str = DEFAULT_LAYOUT):
        """
        Load a ROM image.

        Args:
            data: Complete image, copier header included
            layout: Name of the table layout in ROM_LAYOUTS

        Raises:
            KeyError: If the layout is unknown
            InvalidBitDepthError: If an entry uses a colour depth other than 2 or 4
            InconsistentBitDepthError: If two entries give a palette or
                graphics set different colour depths
        """
        if layout not in ROM_LAYOUTS:
            raise KeyError(f"Unknown ROM layout: {layout}")

        self.data = bytes(data)
        self.layout_name = layout
        self.layout = ROM_LAYOUTS[layout]

        self.battle_backgrounds: List[BattleBackground] = []
        self._palette_bits: Dict[int, int] = {}
        self._graphics_bits: Dict[int, int] = {}

        self._load_backgrounds()

        logger.info(f"ROM loaded: {len(self.data)} bytes, {len(self.battle_backgrounds)} backgrounds, "
                    f"{len(self._palette_bits)} palettes, {len(self._graphics_bits)} graphics sets")

    @classmethod
    def from_file(cls, path: str, layout: str = DEFAULT_LAYOUT) -> 'ROM':
        """
        Load a ROM image from disk.

        Args:
            path: Path to the image
            layout: Name of the table layout

        Returns:
            The loaded catalog
        """
        logger.info(f"Loading ROM from {path}")
        with open(path, 'rb') as f:
            data = f.read()
        logger.debug(f"Read {len(data)} bytes from {os.path.basename(path)}")
        return cls(data, layout)

    def _record_bits(self, table: Dict[int, int], kind: str, index: int, bits: int) -> None:
        known = table.get(index)
        if known is not None and known != bits:
            logger.error(f"Inconsistent bit depth for {kind} {index}: {known} and {bits}")
            raise InconsistentBitDepthError(
                f"BattleBackground {kind} error: inconsistent bit depth for {kind} {index}")
        table[index] = bits

    def _load_backgrounds(self) -> None:
        for i in range(self.layout["battle_background_count"]):
            background = BattleBackground(self, i)
            self.battle_backgrounds.append(background)

            if background.is_empty:
                continue

            bits = background.bits_per_pixel
            if bits not in (2, 4):
                logger.error(f"Background {i} has invalid bit depth {bits}")
                raise InvalidBitDepthError(f"Background {i}: invalid bit depth {bits}")

            self._record_bits(self._palette_bits, "palette", background.palette_index, bits)
            self._record_bits(self._graphics_bits, "graphics", background.graphics_index, bits)

    @staticmethod
    def _check_index(index: int, count: int, kind: str) -> None:
        if not 0 <= index < count:
            raise IndexError(f"{kind} index {index} out of range 0..{count - 1}")

    @property
    def background_count(self) -> int:
        return len(self.battle_backgrounds)

    def palette_bits(self, index: int) -> Optional[int]:
        """Colour depth of a palette, or None if no entry uses it."""
        return self._palette_bits.get(index)

    def graphics_bits(self, index: int) -> Optional[int]:
        """Colour depth of a graphics set, or None if no entry uses it."""
        return self._graphics_bits.get(index)

    def get_battle_background(self, index: int) -> BattleBackground:
        self._check_index(index, self.background_count, "Background")
        return self.battle_backgrounds[index]

    def get_background_palette(self, index: int) -> BackgroundPalette:
        """
        Decode a palette at the colour depth recorded at load time.

        Args:
            index: Palette index

        Returns:
            The decoded palette

        Raises:
            IndexError: If the index is outside the palette table
            InvalidBitDepthError: If no background uses the palette
        """
        self._check_index(index, self.layout["palette_count"], "Palette")
        bits = self._palette_bits.get(index)
        if bits is None:
            raise InvalidBitDepthError(f"Palette {index} is not used by any background")
        return BackgroundPalette(self, index, bits)

    def get_background_graphics(self, index: int) -> BackgroundGraphics:
        """
        Decode a graphics set at the colour depth recorded at load time.

        Args:
            index: Graphics set index

        Returns:
            The decoded tiles and arrangement

        Raises:
            IndexError: If the index is outside the graphics tables
            InvalidBitDepthError: If no background uses the graphics set
        """
        self._check_index(index, self.layout["graphics_count"], "Graphics")
        bits = self._graphics_bits.get(index)
        if bits is None:
            raise InvalidBitDepthError(f"Graphics set {index} is not used by any background")
        return BackgroundGraphics(self, index, bits)

    def get_distortion_effect(self, index: int) -> DistortionEffect:
        self._check_index(index, self.layout["distortion_count"], "Distortion")
        return DistortionEffect(self, index)

    def read_block(self, location: int) -> Block:
        """Create a read cursor at a file offset."""
        return Block(self, location)

    def measure_size(self, location: int) -> int:
        """Decompressed size of the stream at a file offset."""
        return self.read_block(location).measure()

    def decompress(self, location: int) -> bytearray:
        """Decompress the stream at a file offset."""
        return self.read_block(location).decompress()
