"""
Per-scanline distortion and compositing.

Every destination scanline is displaced by a sinusoid whose amplitude,
frequency and compression drift linearly with time. Horizontal effects shift
the sampled column; vertical effects pick a different source row. The
displaced layer is then blended additively into the frame.
"""

import logging
import math

import numpy as np

from ..constants import SNES_WIDTH, SNES_HEIGHT
from .distortion import DistortionEffect, EffectType

logger = logging.getLogger("BattleBackgrounds.ROM.Distorter")

# Scale factors for amplitude, frequency and speed
C1 = 1 / 512
C2 = 8 * math.pi / (1024 * 256)
C3 = math.pi / 60

# Rows addressable by a vertical offset
SOURCE_ROWS = 256


def floor_mod(n, m):
    """
    Modulo whose result takes the sign of the divisor.

    Works on Python integers and numpy integer arrays alike.

    Args:
        n: Dividend
        m: Positive divisor

    Returns:
        Value in [0, m)
    """
    if m <= 0:
        raise ValueError(f"Divisor must be positive, got {m}")
    return ((n % m) + m) % m


class Distorter:
    """
    Applies one distortion effect to a layer's pixel buffer.
    """

    def __init__(self, effect: DistortionEffect, bitmap: np.ndarray):
        """
        Initialize the distorter.

        Args:
            effect: Distortion parameters
            bitmap: (256, 256, 4) layer buffer sampled on every frame
        """
        self.effect = effect
        self.bitmap = bitmap

    def compute_offsets(self, ticks: int) -> np.ndarray:
        """
        Evaluate the distortion for every destination scanline.

        For horizontal effects the offset is the number of pixels the line
        is shifted by. For vertical effects it is the source row drawn on
        that line.

        Args:
            ticks: Time value of the frame

        Returns:
            int64 array of SNES_HEIGHT offsets
        """
        effect = self.effect
        t2 = ticks * 2

        amplitude = C1 * (effect.amplitude + effect.amplitude_acceleration * t2)
        compression = 1 + (effect.compression + effect.compression_acceleration * t2) / 256
        frequency = C2 * (effect.frequency + effect.frequency_acceleration * t2)
        speed = C3 * effect.speed * ticks

        y = np.arange(SNES_HEIGHT)
        # Round half up
        s = np.floor(amplitude * np.sin(frequency * y + speed) + 0.5)

        if effect.type == EffectType.HORIZONTAL:
            offsets = s
        elif effect.type == EffectType.HORIZONTAL_INTERLACED:
            offsets = np.where(y % 2 == 0, -s, s)
        else:
            offsets = floor_mod(np.floor(s + y * compression).astype(np.int64), SOURCE_ROWS)

        return offsets.astype(np.int64)

    def overlay_frame(self, destination: np.ndarray, letterbox: int, ticks: int,
                      alpha: float, erase: bool) -> np.ndarray:
        """
        Composite the distorted layer into a frame.

        Each channel becomes dst + alpha * src (or alpha * src when erasing),
        truncated and wrapped to 8 bits without clamping. Letterbox rows
        are filled with opaque black. Alpha is always set to 255.

        Args:
            destination: (224, 256, 4) uint8 frame, modified in place
            letterbox: Height of the black bands at the top and bottom
            ticks: Time value of the frame
            alpha: Blend weight of this layer
            erase: Whether to ignore the existing frame contents

        Returns:
            The destination frame
        """
        offsets = self.compute_offsets(ticks)
        rows = np.arange(SNES_HEIGHT)
        columns = np.arange(SNES_WIDTH)

        if self.effect.type == EffectType.VERTICAL:
            source_rows = offsets[:, np.newaxis]
            source_columns = columns[np.newaxis, :]
        else:
            source_rows = rows[:, np.newaxis]
            source_columns = floor_mod(columns[np.newaxis, :] + offsets[:, np.newaxis], SNES_WIDTH)

        sampled = self.bitmap[source_rows, source_columns, :3].astype(np.float64)

        if erase:
            blended = alpha * sampled
        else:
            blended = destination[:, :, :3].astype(np.float64) + alpha * sampled

        # Unsigned 8-bit store: truncate, then wrap
        blended = np.trunc(blended).astype(np.int64) % 256

        visible = ~((rows < letterbox) | (rows > SNES_HEIGHT - letterbox))
        destination[visible, :, :3] = blended[visible]
        destination[~visible, :, :3] = 0
        destination[:, :, 3] = 255

        return destination
