"""
Sequential reader over the cartridge image.
"""

import logging
from typing import TYPE_CHECKING

from . import codec
from ..utils.error_handler import DecompressionError, DecompressionErrorCode

if TYPE_CHECKING:
    from .rom import ROM

logger = logging.getLogger("BattleBackgrounds.ROM.Block")

class Block:
    """
    A read cursor into the ROM image.

    A block corresponds to one contiguous area of data: a table entry, a
    palette or the start of a compressed stream. Integer reads advance the
    cursor; decompression starts at the current position.
    """

    def __init__(self, rom: 'ROM', location: int):
        """
        Initialize the cursor.

        Args:
            rom: ROM catalog owning the image
            location: File offset to start reading at
        """
        self.rom = rom
        self.location = location

    def read_u8(self) -> int:
        """
        Read an 8-bit integer and advance by one byte.

        Returns:
            Byte value at the current position

        Raises:
            IndexError: If the position is outside the image
        """
        if not 0 <= self.location < len(self.rom.data):
            raise IndexError(f"Read outside image at offset {self.location}")
        value = self.rom.data[self.location]
        self.location += 1
        return value

    def read_u16(self) -> int:
        """Read a little-endian 16-bit integer and advance by two bytes."""
        return self.read_u8() | (self.read_u8() << 8)

    def read_u32(self) -> int:
        """Read a little-endian 32-bit integer and advance by four bytes."""
        return (self.read_u8()
                | (self.read_u8() << 8)
                | (self.read_u8() << 16)
                | (self.read_u8() << 24))

    def read_bytes(self, count: int) -> bytes:
        """
        Read a fixed-size record and advance past it.

        Args:
            count: Number of bytes to read

        Returns:
            The record bytes
        """
        return bytes(self.read_u8() for _ in range(count))

    def measure(self) -> int:
        """
        Measure the decompressed size of the stream at the current position.

        Returns:
            Decompressed size in bytes
        """
        return codec.get_compressed_size(self.rom.data, self.location)

    def decompress(self) -> bytearray:
        """
        Decompress the stream starting at the current position.

        The stream is measured first so the output can be allocated at its
        exact size, then expanded.

        Returns:
            Decompressed data

        Raises:
            DecompressionError: If the stream is malformed or empty
        """
        size = self.measure()
        if size < 1:
            raise DecompressionError(DecompressionErrorCode.EMPTY_OUTPUT,
                                     f"Invalid compressed data at {self.location:#x}: size {size}",
                                     self.location)

        logger.debug(f"Block at {self.location:#x} expands to {size} bytes")
        return codec.decompress(self.rom.data, self.location, size)
