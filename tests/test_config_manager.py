"""
Tests for the ConfigManager module.
"""
import json
import os
import tempfile
import unittest
import yaml

from battle_backgrounds.utils.config_manager import ConfigManager

class TestConfigManager(unittest.TestCase):
    """
    Test cases for the ConfigManager class.
    """

    def setUp(self):
        """Set up test fixtures."""
        self.config = ConfigManager()
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        """Clean up temporary files."""
        self.temp_dir.cleanup()

    def write(self, name, content):
        path = os.path.join(self.temp_dir.name, name)
        with open(path, 'w') as f:
            f.write(content)
        return path

    def test_defaults(self):
        self.assertEqual(self.config.get("layers.layer1"), 219)
        self.assertEqual(self.config.get("layers.layer2"), 218)
        self.assertEqual(self.config.get("frame_skip"), 1)
        self.assertEqual(self.config.get("aspect_ratio"), 0)
        self.assertIsNone(self.config.get("alpha"))
        self.assertEqual(self.config.get("rom.layout"), "earthbound")
        self.assertNotIn("fps", self.config.config)
        self.assertNotIn("pre_render_frames", self.config.config)

    def test_get_missing(self):
        self.assertEqual(self.config.get("output.missing", "fallback"), "fallback")
        self.assertIsNone(self.config.get("frame_skip.nested"))

    def test_set_and_reset(self):
        self.config.set("layers.layer1", 5)
        self.assertEqual(self.config.get("layers.layer1"), 5)
        self.assertIn("layers.layer1", self.config.modified_keys)

        self.config.reset("layers.layer1")
        self.assertEqual(self.config.get("layers.layer1"), 219)

        self.config.set("frame_skip", 5)
        self.config.reset()
        self.assertEqual(self.config.get("frame_skip"), 1)
        self.assertEqual(self.config.modified_keys, set())

    def test_validation(self):
        """Out-of-range settings are reported, valid ones are not."""
        self.assertEqual(self.config.validate_config(self.config.as_dict()), [])

        errors = self.config.validate_config({
            "layers": {"layer1": 327, "layer2": -1},
            "aspect_ratio": 20,
            "frame_skip": 11,
            "alpha": ["a"],
            "rom": {"layout": "unknown"},
            "logging": {"level": "LOUD"},
            "output": {"format": "gif"},
        })
        self.assertEqual(len(errors), 8)

    def test_validation_bounds(self):
        self.assertEqual(self.config.validate_config({"layers": {"layer1": 0, "layer2": 326},
                                                      "frame_skip": 10, "aspect_ratio": 64,
                                                      "alpha": [0.5, 1]}), [])
        self.assertEqual(len(self.config.validate_config({"frame_skip": 0})), 1)
        self.assertEqual(len(self.config.validate_config({"frame_skip": True})), 1)

    def test_load_from_dict_merges(self):
        """Nested settings merge without dropping sibling keys."""
        self.assertTrue(self.config.load_from_dict({"layers": {"layer2": 0}}))
        self.assertEqual(self.config.get("layers.layer1"), 219)
        self.assertEqual(self.config.get("layers.layer2"), 0)
        self.assertNotIn("layer2", self.config.config)
        self.assertEqual(self.config.get_modified_config(), {"layers": {"layer2": 0}})

    def test_load_from_dict_invalid(self):
        self.assertFalse(self.config.load_from_dict({"frame_skip": 99}))
        self.assertEqual(self.config.get("frame_skip"), 1)

    def test_load_yaml(self):
        path = self.write("config.yaml", "layers:\n  layer1: 10\naspect_ratio: 16\n")
        self.assertTrue(self.config.load_config(path))
        self.assertEqual(self.config.get("layers.layer1"), 10)
        self.assertEqual(self.config.get("aspect_ratio"), 16)

    def test_load_json(self):
        path = self.write("config.json", json.dumps({"frame_skip": 4, "alpha": [1.0, 0.0]}))
        self.assertTrue(self.config.load_config(path))
        self.assertEqual(self.config.get("frame_skip"), 4)
        self.assertEqual(self.config.get("alpha"), [1.0, 0.0])

    def test_load_failures(self):
        self.assertFalse(self.config.load_config(os.path.join(self.temp_dir.name, "missing.yaml")))
        self.assertFalse(self.config.load_config(self.write("config.ini", "x=1")))
        self.assertFalse(self.config.load_config(self.write("bad.json", "{")))
        self.assertFalse(self.config.load_config(self.write("list.yaml", "- 1\n- 2\n")))
        self.assertFalse(self.config.load_config(self.write("invalid.yaml", "frame_skip: 50\n")))

    def test_save_round_trip(self):
        self.config.set("layers.layer1", 42)
        for fmt in ("json", "yaml"):
            path = os.path.join(self.temp_dir.name, "saved", f"config.{fmt}")
            self.assertTrue(self.config.save_config(path, fmt))

            loaded = ConfigManager(path)
            self.assertEqual(loaded.get("layers.layer1"), 42)

        with open(os.path.join(self.temp_dir.name, "saved", "config.yaml")) as f:
            self.assertEqual(yaml.safe_load(f)["layers"]["layer1"], 42)

    def test_save_unsupported(self):
        self.assertFalse(self.config.save_config(os.path.join(self.temp_dir.name, "c.txt"), "txt"))

    def test_layout(self):
        self.assertEqual(self.config.get_layout()["palette_count"], 114)

    def test_as_dict_is_copy(self):
        snapshot = self.config.as_dict()
        snapshot["layers"]["layer1"] = 1
        self.assertEqual(self.config.get("layers.layer1"), 219)

if __name__ == '__main__':
    unittest.main()
