"""
Tests for distortion records and the scanline compositor.
"""
import math
import unittest
import numpy as np

from battle_backgrounds.rom.distortion import DistortionEffect, EffectType
from battle_backgrounds.rom.distorter import Distorter, floor_mod, C1, C2, C3
from rom_fixtures import distortion_bytes

def effect(**kwargs) -> DistortionEffect:
    return DistortionEffect.from_bytes(distortion_bytes(**kwargs))

class TestDistortionEffect(unittest.TestCase):
    """
    Test cases for decoding DistortionEffect records.
    """

    def test_fields(self):
        e = effect(effect_type=3, frequency=100, amplitude=-200, compression=300,
                   frequency_acceleration=-4, amplitude_acceleration=5, speed=-16,
                   compression_acceleration=-7)
        self.assertEqual(e.type, EffectType.VERTICAL)
        self.assertEqual(e.frequency, 100)
        self.assertEqual(e.amplitude, -200)
        self.assertEqual(e.compression, 300)
        self.assertEqual(e.frequency_acceleration, -4)
        self.assertEqual(e.amplitude_acceleration, 5)
        self.assertEqual(e.speed, -16)
        self.assertEqual(e.compression_acceleration, -7)

    def test_raw_layout(self):
        """Bytes 3-4 hold frequency, 14 speed and 15-16 compression acceleration."""
        record = bytearray(17)
        record[2] = 1
        record[3], record[4] = 0xFF, 0xFF
        record[14] = 0x80
        record[15], record[16] = 0x00, 0x80
        e = DistortionEffect.from_bytes(bytes(record))
        self.assertEqual(e.frequency, -1)
        self.assertEqual(e.speed, -128)
        self.assertEqual(e.compression_acceleration, -32768)

    def test_sanitize(self):
        """Unknown types fall back to interlaced horizontal."""
        self.assertEqual(DistortionEffect.sanitize(1), EffectType.HORIZONTAL)
        self.assertEqual(DistortionEffect.sanitize(3), EffectType.VERTICAL)
        for value in (0, 2, 4, 255):
            self.assertEqual(DistortionEffect.sanitize(value), EffectType.HORIZONTAL_INTERLACED)

    def test_short_record(self):
        with self.assertRaises(ValueError):
            DistortionEffect.from_bytes(bytes(16))

    def test_to_dict(self):
        self.assertEqual(effect(effect_type=2, amplitude=9).to_dict()["amplitude"], 9)

class TestFloorMod(unittest.TestCase):
    """
    Test cases for floor_mod().
    """

    def test_negative(self):
        self.assertEqual(floor_mod(-1, 256), 255)
        self.assertEqual(floor_mod(-256, 256), 0)
        self.assertEqual(floor_mod(-257, 256), 255)

    def test_range(self):
        for n in range(-1000, 1000, 7):
            self.assertTrue(0 <= floor_mod(n, 256) < 256)

    def test_array(self):
        result = floor_mod(np.array([-3, 0, 5, 260]), 256)
        self.assertEqual(list(result), [253, 0, 5, 4])

    def test_non_positive_divisor(self):
        with self.assertRaises(ValueError):
            floor_mod(1, 0)

class TestDistorter(unittest.TestCase):
    """
    Test cases for the Distorter class.
    """

    def setUp(self):
        """Set up test fixtures."""
        self.source = np.zeros((256, 256, 4), dtype=np.uint8)
        self.frame = np.zeros((224, 256, 4), dtype=np.uint8)

    def test_erase_reproduces_patch(self):
        """With erase and alpha 1 a still source is copied exactly."""
        self.source[0:2, 0:2, :3] = [[[10, 20, 30], [40, 50, 60]],
                                     [[70, 80, 90], [100, 110, 120]]]
        self.frame[:] = 99

        Distorter(effect(effect_type=1), self.source).overlay_frame(self.frame, 0, 0, 1.0, True)

        self.assertTrue((self.frame[0:2, 0:2, :3] == self.source[0:2, 0:2, :3]).all())
        self.assertTrue((self.frame[:, :, 3] == 255).all())
        self.assertTrue((self.frame[2:, :, :3] == 0).all())

    def test_additive_wrap(self):
        """Blending adds without clamping and wraps at 256."""
        self.source[:, :, :3] = 100
        self.frame[:, :, :3] = 200
        Distorter(effect(effect_type=1), self.source).overlay_frame(self.frame, 0, 0, 1.0, False)
        self.assertTrue((self.frame[:, :, :3] == 44).all())

    def test_alpha_truncates(self):
        self.source[:, :, :3] = 101
        Distorter(effect(effect_type=1), self.source).overlay_frame(self.frame, 0, 0, 0.5, True)
        self.assertTrue((self.frame[:, :, :3] == 50).all())

    def test_letterbox(self):
        """Rows inside the letterbox are opaque black."""
        self.source[:, :, :3] = 255
        Distorter(effect(effect_type=1), self.source).overlay_frame(self.frame, 16, 0, 1.0, True)

        for row in (0, 15, 209, 223):
            self.assertTrue((self.frame[row, :, :3] == 0).all(), row)
        for row in (16, 100, 208):
            self.assertTrue((self.frame[row, :, :3] == 255).all(), row)
        self.assertTrue((self.frame[:, :, 3] == 255).all())

    def test_horizontal_shift(self):
        """A horizontal offset of 3 samples three columns to the right."""
        e = effect(effect_type=1, amplitude=1536, speed=30)
        self.source[:, 10, 0] = 200
        distorter = Distorter(e, self.source)

        self.assertTrue((distorter.compute_offsets(1) == 3).all())
        distorter.overlay_frame(self.frame, 0, 1, 1.0, True)
        self.assertTrue((self.frame[:, 7, 0] == 200).all())
        self.assertEqual(int(self.frame[:, :, 0].sum()), 200 * 224)

    def test_horizontal_wraps(self):
        e = effect(effect_type=1, amplitude=1536, speed=30)
        self.source[:, 1, 1] = 50
        Distorter(e, self.source).overlay_frame(self.frame, 0, 1, 1.0, True)
        self.assertTrue((self.frame[:, 254, 1] == 50).all())

    def test_interlaced(self):
        """Even lines move the opposite way to odd lines."""
        e = effect(effect_type=2, amplitude=1536, speed=30)
        offsets = Distorter(e, self.source).compute_offsets(1)
        self.assertTrue((offsets[0::2] == -3).all())
        self.assertTrue((offsets[1::2] == 3).all())

    def test_vertical_identity(self):
        """With no parameters a vertical effect maps each line to itself."""
        offsets = Distorter(effect(effect_type=3), self.source).compute_offsets(5)
        self.assertEqual(list(offsets), list(range(224)))

    def test_vertical_remap(self):
        e = effect(effect_type=3, amplitude=1536, speed=30)
        self.source[50, :, 2] = 77
        distorter = Distorter(e, self.source)
        self.assertEqual(list(distorter.compute_offsets(1)), [y + 3 for y in range(224)])

        distorter.overlay_frame(self.frame, 0, 1, 1.0, True)
        self.assertTrue((self.frame[47, :, 2] == 77).all())
        self.assertTrue((self.frame[48, :, 2] == 0).all())

    def test_vertical_range(self):
        """Vertical offsets stay inside the 256 source rows."""
        for params in ({"amplitude": 30000, "compression": -30000, "frequency": 5000},
                       {"amplitude": -32768, "compression": 32767, "amplitude_acceleration": 300,
                        "compression_acceleration": -1000, "speed": -128}):
            distorter = Distorter(effect(effect_type=3, **params), self.source)
            for tick in (0, 1, 17, 1000, 12345):
                offsets = distorter.compute_offsets(tick)
                self.assertTrue(((offsets >= 0) & (offsets < 256)).all())

    def test_offset_formula(self):
        """Offsets follow round(amplitude * sin(frequency * y + speed)) with drift."""
        e = effect(effect_type=1, frequency=3000, amplitude=4000, frequency_acceleration=2,
                   amplitude_acceleration=-3, speed=7)
        ticks = 11
        offsets = Distorter(e, self.source).compute_offsets(ticks)

        t2 = ticks * 2
        amplitude = C1 * (4000 - 3 * t2)
        frequency = C2 * (3000 + 2 * t2)
        speed = C3 * 7 * ticks
        for y in (0, 1, 57, 223):
            expected = math.floor(amplitude * math.sin(frequency * y + speed) + 0.5)
            self.assertEqual(offsets[y], expected)

if __name__ == '__main__':
    unittest.main()
