"""
Battle background entries.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .rom import ROM

# Size of one entry in the background table
ENTRY_SIZE = 17

# Columns produced by BattleBackground.to_dict()
TABLE_FIELDS = ["index", "graphics", "palette", "bpp", "cycle_type", "cycle_speed",
                "distortion", "animation"]


def _signed8(value: int) -> int:
    return value - 0x100 if value & 0x80 else value


class BattleBackground:
    """
    One entry of the battle background table.

    Entry layout (17 bytes):
        0      graphics / arrangement set index
        1      palette index
        2      bits per pixel (2 or 4, 0 for an unused slot)
        3      palette cycle type
        4, 5   palette cycle 1 start / end
        6, 7   palette cycle 2 start / end
        8      palette cycle speed
        9, 10  horizontal / vertical movement
        11, 12 horizontal / vertical acceleration
        13-16  animation bytes, the first two select distortion effects
    """

    def __init__(self, rom: 'ROM', index: int):
        """
        Read an entry from the background table.

        Args:
            rom: ROM catalog
            index: Entry index
        """
        block = rom.read_block(rom.layout["battle_background_table"] + index * ENTRY_SIZE)
        self.index = index
        self._decode(block.read_bytes(ENTRY_SIZE))

    @classmethod
    def from_bytes(cls, record: bytes, index: int = 0) -> 'BattleBackground':
        """Build an entry from a raw 17-byte record."""
        if len(record) < ENTRY_SIZE:
            raise ValueError(f"Background entry needs {ENTRY_SIZE} bytes, got {len(record)}")

        background = cls.__new__(cls)
        background.index = index
        background._decode(bytes(record[:ENTRY_SIZE]))
        return background

    def _decode(self, data: bytes) -> None:
        self.data = data

    @property
    def graphics_index(self) -> int:
        return self.data[0]

    @property
    def palette_index(self) -> int:
        return self.data[1]

    @property
    def bits_per_pixel(self) -> int:
        return self.data[2]

    @property
    def is_empty(self) -> bool:
        return self.bits_per_pixel == 0

    @property
    def palette_cycle_type(self) -> int:
        return self.data[3]

    @property
    def palette_cycle1_start(self) -> int:
        return self.data[4]

    @property
    def palette_cycle1_end(self) -> int:
        return self.data[5]

    @property
    def palette_cycle2_start(self) -> int:
        return self.data[6]

    @property
    def palette_cycle2_end(self) -> int:
        return self.data[7]

    @property
    def palette_cycle_speed(self) -> int:
        return self.data[8]

    @property
    def horizontal_movement(self) -> int:
        return _signed8(self.data[9])

    @property
    def vertical_movement(self) -> int:
        return _signed8(self.data[10])

    @property
    def horizontal_acceleration(self) -> int:
        return _signed8(self.data[11])

    @property
    def vertical_acceleration(self) -> int:
        return _signed8(self.data[12])

    @property
    def animation(self) -> int:
        """The four animation bytes packed big-endian."""
        return ((self.data[13] << 24) | (self.data[14] << 16)
                | (self.data[15] << 8) | self.data[16])

    @property
    def distortion_index(self) -> int:
        """Effect shown by a layer: the second animation byte, else the first."""
        first = (self.animation >> 24) & 0xFF
        second = (self.animation >> 16) & 0xFF
        return second or first

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "graphics": self.graphics_index,
            "palette": self.palette_index,
            "bpp": self.bits_per_pixel,
            "cycle_type": self.palette_cycle_type,
            "cycle_speed": self.palette_cycle_speed,
            "distortion": self.distortion_index,
            "animation": f"{self.animation:08X}",
        }
