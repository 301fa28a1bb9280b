"""
Configuration management for Battle Backgrounds.

This module loads, validates and provides access to rendering settings:
which background layers to show, how they blend, letterboxing, frame
pacing and output locations. JSON and YAML files are supported.
"""

import os
import json
import logging
import copy
from typing import Dict, Any, Optional, List
import yaml

from ..constants import MAX_LAYER_INDEX, ASPECT_RATIOS, MAX_FRAME_SKIP, DEFAULT_LAYER1, DEFAULT_LAYER2
from ..rom_layout import ROM_LAYOUTS, DEFAULT_LAYOUT

logger = logging.getLogger("BattleBackgrounds.ConfigManager")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
IMAGE_FORMATS = ["png", "jpg", "jpeg", "bmp", "tiff"]

class ConfigManager:
    """
    Configuration management for Battle Backgrounds.

    Holds a deep copy of the defaults with user settings merged on top and
    tracks which keys were changed.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to configuration file (None for default values)
        """
        self.defaults = {
            "rom": {
                "path": None,
                "layout": DEFAULT_LAYOUT
            },
            "layers": {
                "layer1": DEFAULT_LAYER1,
                "layer2": DEFAULT_LAYER2
            },
            "alpha": None,
            "aspect_ratio": ASPECT_RATIOS['full'],
            "frame_skip": 1,
            "output": {
                "directory": "./output",
                "format": "png"
            },
            "logging": {
                "level": "INFO",
                "file": None
            }
        }

        self.config = copy.deepcopy(self.defaults)
        self.modified_keys = set()

        if config_path:
            self.load_config(config_path)

        logger.debug("ConfigManager initialized")

    def load_config(self, config_path: str) -> bool:
        """
        Load configuration from file.

        Args:
            config_path: Path to configuration file

        Returns:
            True if configuration loaded successfully, False otherwise
        """
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found: {config_path}")
            return False

        _, ext = os.path.splitext(config_path)
        ext = ext.lower()

        try:
            if ext == '.json':
                with open(config_path, 'r') as f:
                    user_config = json.load(f)
            elif ext in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    user_config = yaml.safe_load(f) or {}
            else:
                logger.error(f"Unsupported configuration format: {ext}")
                return False
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            logger.error(f"Error loading configuration: {e}")
            return False

        if not isinstance(user_config, dict):
            logger.error(f"Configuration root must be a mapping: {config_path}")
            return False

        validation_errors = self.validate_config(user_config)
        if validation_errors:
            for error in validation_errors:
                logger.error(f"Configuration validation error: {error}")
            return False

        self._merge_config(user_config, self.config)

        logger.info(f"Configuration loaded from {config_path}")
        return True

    def _merge_config(self, user_config: Dict[str, Any], target: Dict[str, Any], path: str = "") -> None:
        """
        Merge user configuration into a target dictionary, tracking modified keys.

        Args:
            user_config: User configuration dictionary
            target: Dictionary being merged into
            path: Current key path for tracking (internal use)
        """
        for key, value in user_config.items():
            current_path = f"{path}.{key}" if path else key

            if isinstance(value, dict) and isinstance(target.get(key), dict):
                self._merge_config(value, target[key], current_path)
            else:
                target[key] = copy.deepcopy(value)
                self.modified_keys.add(current_path)

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """
        Validate configuration against schema.

        Args:
            config: Configuration dictionary to validate

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if "rom" in config:
            rom_config = config["rom"] or {}
            if "layout" in rom_config and rom_config["layout"] not in ROM_LAYOUTS:
                valid_layouts = ", ".join(ROM_LAYOUTS.keys())
                errors.append(f"Invalid rom.layout: {rom_config['layout']}. Valid options: {valid_layouts}")

        if "layers" in config:
            layer_config = config["layers"] or {}
            for key in ["layer1", "layer2"]:
                if key in layer_config:
                    value = layer_config[key]
                    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= MAX_LAYER_INDEX:
                        errors.append(f"Invalid layers.{key}: {value}. "
                                      f"Must be an integer between 0 and {MAX_LAYER_INDEX}")

        if "alpha" in config and config["alpha"] is not None:
            alpha = config["alpha"]
            if (not isinstance(alpha, list)
                    or not all(isinstance(a, (int, float)) and not isinstance(a, bool) for a in alpha)):
                errors.append(f"Invalid alpha: {alpha}. Must be a list of numbers")

        if "aspect_ratio" in config and config["aspect_ratio"] not in ASPECT_RATIOS.values():
            valid_ratios = ", ".join(str(v) for v in ASPECT_RATIOS.values())
            errors.append(f"Invalid aspect_ratio: {config['aspect_ratio']}. Valid options: {valid_ratios}")

        if "frame_skip" in config:
            value = config["frame_skip"]
            if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= MAX_FRAME_SKIP:
                errors.append(f"Invalid frame_skip: {value}. Must be an integer between 1 and {MAX_FRAME_SKIP}")

        if "output" in config:
            output_config = config["output"] or {}
            if "format" in output_config and output_config["format"] not in IMAGE_FORMATS:
                valid_formats = ", ".join(IMAGE_FORMATS)
                errors.append(f"Invalid output.format: {output_config['format']}. Valid options: {valid_formats}")

        if "logging" in config:
            log_config = config["logging"] or {}
            if "level" in log_config and log_config["level"] not in LOG_LEVELS:
                valid_levels = ", ".join(LOG_LEVELS)
                errors.append(f"Invalid logging.level: {log_config['level']}. Valid options: {valid_levels}")

        return errors

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key path.

        Args:
            key: Configuration key path (e.g., 'layers.layer1')
            default: Default value if key not found

        Returns:
            Configuration value or default if not found
        """
        value = self.config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value by key path.

        Args:
            key: Configuration key path (e.g., 'output.directory')
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config or not isinstance(config[k], dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        self.modified_keys.add(key)

        logger.debug(f"Configuration updated: {key} = {value}")

    def reset(self, key: Optional[str] = None) -> None:
        """
        Reset configuration to defaults.

        Args:
            key: Key path to reset (None for all)
        """
        if key is None:
            self.config = copy.deepcopy(self.defaults)
            self.modified_keys.clear()
            logger.info("Configuration reset to defaults")
            return

        keys = key.split('.')
        default_value = self._get_default_value(keys)

        config = self.config
        for k in keys[:-1]:
            if k not in config:
                return
            config = config[k]

        config[keys[-1]] = default_value
        self.modified_keys.discard(key)
        logger.info(f"Configuration key reset to default: {key}")

    def _get_default_value(self, keys: List[str]) -> Any:
        value = self.defaults
        for k in keys:
            if not isinstance(value, dict) or k not in value:
                return None
            value = value[k]
        return copy.deepcopy(value)

    def save_config(self, config_path: str, format: str = 'json') -> bool:
        """
        Save current configuration to file.

        Args:
            config_path: Path to output file
            format: Output format ('json' or 'yaml')

        Returns:
            True if saved successfully, False otherwise
        """
        if format.lower() not in ['json', 'yaml', 'yml']:
            logger.error(f"Unsupported configuration format: {format}")
            return False

        try:
            directory = os.path.dirname(config_path)
            if directory and not os.path.exists(directory):
                os.makedirs(directory)

            with open(config_path, 'w') as f:
                if format.lower() == 'json':
                    json.dump(self.config, f, indent=2)
                else:
                    yaml.safe_dump(self.config, f, default_flow_style=False)
        except OSError as e:
            logger.error(f"Error saving configuration: {e}")
            return False

        logger.info(f"Configuration saved to {config_path}")
        return True

    def get_modified_config(self) -> Dict[str, Any]:
        """
        Get a dictionary containing only modified configuration values.

        Returns:
            Dictionary with modified values
        """
        modified_config = {}

        for key in self.modified_keys:
            keys = key.split('.')
            current = modified_config
            for k in keys[:-1]:
                current = current.setdefault(k, {})
            current[keys[-1]] = self.get(key)

        return modified_config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> bool:
        """
        Load configuration from dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            True if loaded successfully, False otherwise
        """
        validation_errors = self.validate_config(config_dict)
        if validation_errors:
            for error in validation_errors:
                logger.error(f"Configuration validation error: {error}")
            return False

        self._merge_config(config_dict, self.config)

        logger.debug("Configuration loaded from dictionary")
        return True

    def get_layout(self) -> Dict[str, Any]:
        """Table layout selected by rom.layout."""
        return ROM_LAYOUTS.get(self.get("rom.layout", DEFAULT_LAYOUT), ROM_LAYOUTS[DEFAULT_LAYOUT])

    def as_dict(self) -> Dict[str, Any]:
        """
        Get full configuration as dictionary.

        Returns:
            Configuration dictionary
        """
        return copy.deepcopy(self.config)
