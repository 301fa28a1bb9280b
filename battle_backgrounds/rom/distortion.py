"""
Distortion effect records.
"""

import logging
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .rom import ROM

logger = logging.getLogger("BattleBackgrounds.ROM.Distortion")

# Size of one record in the distortion table
RECORD_SIZE = 17


class EffectType(IntEnum):
    """How a distortion offset is applied to a scanline."""
    HORIZONTAL = 1
    HORIZONTAL_INTERLACED = 2
    VERTICAL = 3


def _signed16(low: int, high: int) -> int:
    value = low | (high << 8)
    return value - 0x10000 if value & 0x8000 else value


def _signed8(value: int) -> int:
    return value - 0x100 if value & 0x80 else value


class DistortionEffect:
    """
    Parameters of one sinusoidal scanline distortion.

    Record layout (17 bytes):
        0-1    duration (not decoded)
        2      effect type
        3-4    frequency
        5-6    amplitude
        7      unused
        8-9    compression
        10-11  frequency acceleration
        12-13  amplitude acceleration
        14     speed (signed byte)
        15-16  compression acceleration

    Multi-byte fields are little-endian signed 16-bit integers.
    """

    def __init__(self, rom: 'ROM', index: int = 0):
        """
        Read a record from the distortion table.

        Args:
            rom: ROM catalog
            index: Effect index
        """
        block = rom.read_block(rom.layout["distortion_table"] + index * RECORD_SIZE)
        self.index = index
        self._decode(block.read_bytes(RECORD_SIZE))
        logger.debug(f"Distortion {index}: {self}")

    @classmethod
    def from_bytes(cls, record: bytes, index: int = 0) -> 'DistortionEffect':
        """
        Build an effect from a raw 17-byte record.

        Args:
            record: Record bytes
            index: Index to report for the effect

        Returns:
            The decoded effect

        Raises:
            ValueError: If the record is shorter than 17 bytes
        """
        if len(record) < RECORD_SIZE:
            raise ValueError(f"Distortion record needs {RECORD_SIZE} bytes, got {len(record)}")

        effect = cls.__new__(cls)
        effect.index = index
        effect._decode(bytes(record[:RECORD_SIZE]))
        return effect

    @staticmethod
    def sanitize(value: int) -> EffectType:
        """Map a raw type byte to a known effect type, defaulting to interlaced."""
        if value == EffectType.HORIZONTAL:
            return EffectType.HORIZONTAL
        if value == EffectType.VERTICAL:
            return EffectType.VERTICAL
        return EffectType.HORIZONTAL_INTERLACED

    def _decode(self, data: bytes) -> None:
        self.data = data
        self.type = self.sanitize(data[2])
        self.frequency = _signed16(data[3], data[4])
        self.amplitude = _signed16(data[5], data[6])
        self.compression = _signed16(data[8], data[9])
        self.frequency_acceleration = _signed16(data[10], data[11])
        self.amplitude_acceleration = _signed16(data[12], data[13])
        self.speed = _signed8(data[14])
        self.compression_acceleration = _signed16(data[15], data[16])

    def to_dict(self) -> dict:
        return {
            "type": self.type.name,
            "frequency": self.frequency,
            "amplitude": self.amplitude,
            "compression": self.compression,
            "frequency_acceleration": self.frequency_acceleration,
            "amplitude_acceleration": self.amplitude_acceleration,
            "compression_acceleration": self.compression_acceleration,
            "speed": self.speed,
        }

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value}" for key, value in self.to_dict().items())
        return f"DistortionEffect({fields})"
