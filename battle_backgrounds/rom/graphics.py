"""
Bit-planar tile graphics.

Tiles are 8x8 pixels stored as interleaved bit-plane pairs: for each row,
planes 0 and 1 occupy two adjacent bytes, and the next pair of planes starts
16 bytes later. A tile therefore takes 8 * bpp bytes. A background is drawn
from a 32x32 arrangement of 16-bit cells selecting a tile, a subpalette and
horizontal/vertical flips.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np

from ..common.interfaces import PaletteCycle
from ..constants import LAYER_WIDTH, LAYER_HEIGHT
from .address import snes_to_hex
from .block import Block

if TYPE_CHECKING:
    from .rom import ROM

logger = logging.getLogger("BattleBackgrounds.ROM.Graphics")

TILE_SIZE = 8
GRID_SIZE = 32
ARRANGEMENT_CELLS = GRID_SIZE * GRID_SIZE

# Arrangement cell fields
TILE_MASK = 0x3FF
HORIZONTAL_FLIP = 0x4000
VERTICAL_FLIP = 0x8000


class ROMGraphics:
    """
    Decoder for one set of bit-planar tiles.
    """

    def __init__(self, bits_per_pixel: int):
        self.bits_per_pixel = bits_per_pixel
        self.data = bytearray()
        self.tiles = np.zeros((0, TILE_SIZE, TILE_SIZE), dtype=np.uint8)

    def load_graphics(self, block: Block) -> None:
        """
        Decompress graphics from a block and build the tile set.

        Args:
            block: Block positioned at the compressed graphics
        """
        self.data = block.decompress()
        self.build_tiles(self.data)

    def build_tiles(self, blob: bytes) -> np.ndarray:
        """
        Split a decompressed graphics blob into colour-index tiles.

        A trailing partial tile is kept with its missing bytes read as zero.

        Args:
            blob: Decompressed graphics data

        Returns:
            uint8 array indexed [tile, y, x]
        """
        bpp = self.bits_per_pixel
        tile_bytes = TILE_SIZE * bpp
        tile_count = -(-len(blob) // tile_bytes)

        raw = np.zeros(tile_count * tile_bytes, dtype=np.uint8)
        raw[:len(blob)] = np.frombuffer(bytes(blob), dtype=np.uint8)

        # [tile, plane pair, row, low/high plane] -> bits, most significant bit first
        planes = raw.reshape(tile_count, bpp // 2, TILE_SIZE, 2)
        bits = np.unpackbits(planes[..., np.newaxis], axis=-1)

        pairs = np.arange(bpp // 2).reshape(1, -1, 1, 1, 1)
        halves = np.arange(2).reshape(1, 1, 1, -1, 1)
        weights = (1 << (2 * pairs + halves)).astype(np.uint8)

        self.tiles = (bits * weights).sum(axis=(1, 3)).astype(np.uint8)

        logger.debug(f"Built {tile_count} tiles at {bpp} bpp from {len(blob)} bytes")
        return self.tiles

    def draw(self, bitmap: np.ndarray, palette: PaletteCycle, arrangement: bytes) -> np.ndarray:
        """
        Paint the 32x32 tile arrangement into a layer buffer.

        Only the red, green and blue channels are written; alpha is left as
        it was.

        Args:
            bitmap: (256, 256, 4) uint8 buffer to draw into
            palette: Source of the current subpalette colours
            arrangement: Decompressed arrangement data, 1024 little-endian words

        Returns:
            The bitmap that was drawn into
        """
        # Missing bytes, including a trailing odd byte, read as zero
        raw = bytearray(ARRANGEMENT_CELLS * 2)
        data = bytes(arrangement[:len(raw)])
        raw[:len(data)] = data
        cells = np.frombuffer(bytes(raw), dtype='<u2').astype(np.uint16)

        pixels = self.tiles[cells & TILE_MASK]

        horizontal = (cells & HORIZONTAL_FLIP) != 0
        vertical = (cells & VERTICAL_FLIP) != 0
        pixels = np.where(horizontal[:, None, None], pixels[:, :, ::-1], pixels)
        pixels = np.where(vertical[:, None, None], pixels[:, ::-1, :], pixels)

        sub_palettes = (cells >> 10) & 7
        rgb = np.zeros(pixels.shape, dtype=np.uint32)
        for sub_palette in np.unique(sub_palettes):
            mask = sub_palettes == sub_palette
            colors = np.asarray(palette.get_colors(int(sub_palette)), dtype=np.uint32)
            rgb[mask] = colors[pixels[mask]]

        # [cell_y, cell_x, y, x] -> [row, column]
        image = rgb.reshape(GRID_SIZE, GRID_SIZE, TILE_SIZE, TILE_SIZE)
        image = image.transpose(0, 2, 1, 3).reshape(LAYER_HEIGHT, LAYER_WIDTH)

        bitmap[:, :, 0] = (image >> 16) & 0xFF
        bitmap[:, :, 1] = (image >> 8) & 0xFF
        bitmap[:, :, 2] = image & 0xFF

        return bitmap


class BackgroundGraphics:
    """
    Tile set and arrangement of one background graphics index.
    """

    def __init__(self, rom: 'ROM', index: int, bits_per_pixel: int):
        """
        Read and decompress the graphics and arrangement of a set.

        Args:
            rom: ROM catalog
            index: Graphics set index
            bits_per_pixel: Colour depth shared by every background using it
        """
        self.index = index
        self.bits_per_pixel = bits_per_pixel
        self.rom_graphics = ROMGraphics(bits_per_pixel)

        header = rom.layout["header"]

        graphics_pointer = rom.read_block(rom.layout["graphics_pointer_table"] + index * 4)
        self.rom_graphics.load_graphics(rom.read_block(snes_to_hex(graphics_pointer.read_u32(), header)))

        arrangement_pointer = rom.read_block(rom.layout["arrangement_pointer_table"] + index * 4)
        self.arrangement = rom.read_block(snes_to_hex(arrangement_pointer.read_u32(), header)).decompress()

        logger.debug(f"Graphics set {index}: {len(self.rom_graphics.tiles)} tiles, "
                     f"{len(self.arrangement)} arrangement bytes")

    @property
    def tiles(self) -> np.ndarray:
        return self.rom_graphics.tiles

    def draw(self, bitmap: np.ndarray, palette: PaletteCycle) -> np.ndarray:
        return self.rom_graphics.draw(bitmap, palette, self.arrangement)
