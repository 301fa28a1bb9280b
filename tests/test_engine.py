"""
Tests for multi-layer composition and frame output.
"""
import os
import tempfile
import unittest
import numpy as np

from battle_backgrounds.engine import Engine, configured_layers, default_alpha
from battle_backgrounds.common.interfaces import Layer
from battle_backgrounds.common.visualizer import FrameVisualizer
from battle_backgrounds.rom.distorter import Distorter
from battle_backgrounds.rom.rom import ROM
from battle_backgrounds.utils.config_manager import ConfigManager
from battle_backgrounds.utils.error_handler import ConfigurationError
from rom_fixtures import make_rom_data

class RecordingLayer(Layer):
    """Layer that records its calls and writes the tick into the red channel."""

    def __init__(self):
        self.calls = []

    def overlay_frame(self, bitmap, letterbox, ticks, alpha, erase):
        self.calls.append((letterbox, ticks, alpha, erase))
        if erase:
            bitmap[:, :, 0] = 0
        bitmap[:, :, 0] += np.uint8(ticks)
        bitmap[:, :, 3] = 255
        return bitmap

    def render(self, ticks):
        return self.overlay_frame(np.zeros((224, 256, 4), dtype=np.uint8), 0, ticks, 1.0, True)

class TestEngine(unittest.TestCase):
    """
    Test cases for the Engine class.
    """

    def setUp(self):
        """Set up test fixtures."""
        self.first = RecordingLayer()
        self.second = RecordingLayer()
        self.engine = Engine([self.first, self.second], alpha=[0.25, 0.75],
                             aspect_ratio=16, frame_skip=3)

    def test_default_alpha(self):
        self.assertEqual(default_alpha(1), [1.0])
        self.assertEqual(default_alpha(2), [0.5, 0.5])
        self.assertEqual(Engine([self.first]).alpha, [1.0])

    def test_alpha_count(self):
        with self.assertRaises(ConfigurationError):
            Engine([self.first, self.second], alpha=[1.0])

    def test_render_frame(self):
        """The first layer erases and every layer gets its own alpha."""
        self.engine.render_frame(np.zeros((224, 256, 4), dtype=np.uint8), 6)
        self.assertEqual(self.first.calls, [(16, 6, 0.25, True)])
        self.assertEqual(self.second.calls, [(16, 6, 0.75, False)])

    def test_next_frame_advances(self):
        self.engine.next_frame()
        self.engine.next_frame()
        self.assertEqual([c[1] for c in self.first.calls], [0, 3])
        self.assertEqual(self.engine.tick, 6)

    def test_pre_render(self):
        """Pre-rendered frames use ticks i * frame_skip and then loop."""
        frames = self.engine.pre_render(3, show_progress=False)

        self.assertEqual(len(frames), 3)
        self.assertEqual([c[1] for c in self.first.calls], [0, 3, 6])
        self.assertEqual(int(frames[2][0, 0, 0]), 12)

        played = [int(self.engine.next_frame()[0, 0, 0]) for _ in range(4)]
        self.assertEqual(played, [0, 6, 12, 0])
        self.assertEqual(len(self.first.calls), 3)

    def test_reset(self):
        self.engine.next_frame()
        self.engine.reset()
        self.assertEqual(self.engine.tick, 0)

class TestEngineFromConfig(unittest.TestCase):
    """
    Test cases for building engines from configuration.
    """

    def setUp(self):
        """Set up test fixtures."""
        self.rom = ROM(make_rom_data())
        self.config = ConfigManager()

    def test_default_layers(self):
        engine = Engine.from_config(self.rom, self.config)
        self.assertEqual([layer.entry for layer in engine.layers], [219, 218])
        self.assertEqual(engine.alpha, [0.5, 0.5])

    def test_single_layer(self):
        self.config.set("layers.layer2", 0)
        self.config.set("layers.layer1", 1)
        engine = Engine.from_config(self.rom, self.config)
        self.assertEqual([layer.entry for layer in engine.layers], [1])
        self.assertEqual(engine.alpha, [1.0])

    def test_no_layers_falls_back(self):
        self.config.set("layers.layer1", 0)
        self.config.set("layers.layer2", 0)
        engine = Engine.from_config(self.rom, self.config)
        self.assertEqual(len(engine.layers), 2)

    def test_two_layers_blend(self):
        """Two identical layers at half weight add up to the original colour."""
        engine = Engine.from_config(self.rom, self.config)
        frame = engine.next_frame()
        self.assertEqual(list(frame[100, 100, :3]), [0xF8, 0, 0])
        self.assertTrue((frame[:, :, 3] == 255).all())

    def test_configured_layers(self):
        self.assertEqual(configured_layers(self.config), [219, 218])
        self.config.set("layers.layer1", 0)
        self.assertEqual(configured_layers(self.config), [218])
        self.config.set("layers.layer2", 0)
        self.assertEqual(configured_layers(self.config), [219, 218])

    def test_alpha_mismatch(self):
        self.config.set("alpha", [1.0])
        with self.assertRaises(ConfigurationError):
            Engine.from_config(self.rom, self.config)

        self.config.set("layers.layer2", 0)
        self.assertEqual(Engine.from_config(self.rom, self.config).alpha, [1.0])

    def test_letterbox(self):
        self.config.set("aspect_ratio", 48)
        frame = Engine.from_config(self.rom, self.config).next_frame()
        self.assertTrue((frame[47, :, :3] == 0).all())
        self.assertEqual(list(frame[48, 100, :3]), [0xF8, 0, 0])

class TestFrameVisualizer(unittest.TestCase):
    """
    Test cases for the FrameVisualizer class.
    """

    def setUp(self):
        """Set up test fixtures."""
        self.visualizer = FrameVisualizer(dark_mode=False)
        self.rom = ROM(make_rom_data())

    def test_save_frames(self):
        frames = [np.full((224, 256, 4), 255, dtype=np.uint8) for _ in range(2)]
        with tempfile.TemporaryDirectory() as directory:
            paths = self.visualizer.save_frames(frames, os.path.join(directory, "out"))
            self.assertEqual(len(paths), 2)
            self.assertTrue(all(os.path.exists(p) for p in paths))
            self.assertTrue(paths[1].endswith("frame_0001.png"))

    def test_palette_swatch(self):
        swatch = self.visualizer.palette_swatch(self.rom.get_background_palette(0), cell=4)
        self.assertEqual(swatch.shape, (4, 16, 4))
        self.assertEqual(list(swatch[0, 4]), [0xF8, 0, 0, 0xFF])

    def test_plot_offsets(self):
        distorter = Distorter(self.rom.get_distortion_effect(1), None)
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "offsets.png")
            self.visualizer.plot_offsets(distorter, [0, 10], path)
            self.assertTrue(os.path.exists(path))

if __name__ == '__main__':
    unittest.main()
