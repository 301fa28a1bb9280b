"""
Frame composition across background layers.
"""

import logging
from typing import List, Optional, Sequence, TYPE_CHECKING

import numpy as np
from tqdm import tqdm

from .common.interfaces import Layer
from .constants import (SNES_WIDTH, SNES_HEIGHT, BYTES_PER_PIXEL, DEFAULT_LAYER1,
                        DEFAULT_LAYER2, DEFAULT_FRAME_SKIP)
from .rom.background_layer import BackgroundLayer
from .utils.error_handler import ConfigurationError

if TYPE_CHECKING:
    from .rom.rom import ROM
    from .utils.config_manager import ConfigManager

logger = logging.getLogger("BattleBackgrounds.Engine")


def default_alpha(layer_count: int) -> List[float]:
    """Equal blend weights: 1.0 for a single layer, 0.5 each for two."""
    if layer_count <= 1:
        return [1.0] * layer_count
    return [0.5] * layer_count


def configured_layers(config: 'ConfigManager') -> List[int]:
    """
    Background entries selected by configuration, in compositing order.

    A layer index of 0 disables that layer. When both are disabled the
    default pair is used.

    Args:
        config: Configuration manager

    Returns:
        Entry indices of the active layers
    """
    layer1 = config.get("layers.layer1", DEFAULT_LAYER1)
    layer2 = config.get("layers.layer2", DEFAULT_LAYER2)
    if not layer1 and not layer2:
        layer1, layer2 = DEFAULT_LAYER1, DEFAULT_LAYER2
    return [index for index in (layer1, layer2) if index]


def check_alpha(alpha: Optional[Sequence[float]], layer_count: int) -> None:
    """
    Make sure there is one blend weight per active layer.

    Raises:
        ConfigurationError: If fewer weights than layers are given
    """
    if alpha is not None and len(alpha) < layer_count:
        raise ConfigurationError(f"Need {layer_count} alpha values, got {len(alpha)}")


class Engine:
    """
    Composes the active layers into SNES-sized frames.

    The first layer overwrites the frame and every later layer is added on
    top of it with its own weight. Frames are either rendered on demand or
    pre-rendered once and then played back in a loop.
    """

    def __init__(self, layers: Sequence[Layer], alpha: Optional[Sequence[float]] = None,
                 aspect_ratio: int = 0, frame_skip: int = DEFAULT_FRAME_SKIP):
        """
        Initialize the engine.

        Args:
            layers: Layers in compositing order
            alpha: Blend weight per layer (None for equal weights)
            aspect_ratio: Letterbox height in pixels
            frame_skip: Ticks to advance per frame

        Raises:
            ConfigurationError: If fewer alpha values than layers are given
        """
        self.layers = list(layers)
        check_alpha(alpha, len(self.layers))
        self.alpha = list(alpha) if alpha is not None else default_alpha(len(self.layers))

        self.aspect_ratio = aspect_ratio
        self.frame_skip = frame_skip
        self.tick = 0

        self.frame = np.zeros((SNES_HEIGHT, SNES_WIDTH, BYTES_PER_PIXEL), dtype=np.uint8)
        self.pre_rendered_frames: List[np.ndarray] = []
        self.current_frame_index = 0

        logger.info(f"Engine initialized with {len(self.layers)} layers, "
                    f"letterbox {aspect_ratio}, frame skip {frame_skip}")

    @classmethod
    def from_config(cls, rom: 'ROM', config: 'ConfigManager') -> 'Engine':
        """
        Build an engine and its layers from configuration.

        Args:
            rom: Loaded ROM catalog
            config: Configuration manager

        Returns:
            Configured engine

        Raises:
            ConfigurationError: If the alpha list is shorter than the active layers
        """
        entries = configured_layers(config)
        alpha = config.get("alpha")
        check_alpha(alpha, len(entries))

        layers = [BackgroundLayer(rom, index) for index in entries]

        return cls(layers,
                   alpha=alpha,
                   aspect_ratio=config.get("aspect_ratio", 0),
                   frame_skip=config.get("frame_skip", DEFAULT_FRAME_SKIP))

    def render_frame(self, buffer: np.ndarray, tick: int) -> np.ndarray:
        """
        Render every layer at a tick into a frame buffer.

        Args:
            buffer: (224, 256, 4) uint8 frame
            tick: Time value of the frame

        Returns:
            The frame buffer
        """
        for i, layer in enumerate(self.layers):
            layer.overlay_frame(buffer, self.aspect_ratio, tick, self.alpha[i], i == 0)
        return buffer

    def next_frame(self) -> np.ndarray:
        """
        Produce the next frame of the animation.

        Pre-rendered frames are replayed in a loop when present; otherwise
        the frame is rendered at the current tick and the tick advances by
        the frame skip.

        Returns:
            The frame
        """
        if self.pre_rendered_frames:
            frame = self.pre_rendered_frames[self.current_frame_index]
            self.current_frame_index = (self.current_frame_index + 1) % len(self.pre_rendered_frames)
            self.frame[...] = frame
            return self.frame

        self.render_frame(self.frame, self.tick)
        self.tick += self.frame_skip
        return self.frame

    def pre_render(self, frame_count: int, show_progress: bool = True) -> List[np.ndarray]:
        """
        Render a fixed number of frames ahead of playback.

        Frame i is rendered at tick i * frame_skip.

        Args:
            frame_count: Number of frames to render (0 disables playback from
                pre-rendered frames)
            show_progress: Whether to display a progress bar

        Returns:
            The rendered frames
        """
        self.pre_rendered_frames = []
        self.current_frame_index = 0

        logger.info(f"Pre-rendering {frame_count} frames...")
        for i in tqdm(range(frame_count), desc="Pre-rendering frames", disable=not show_progress):
            frame = np.zeros((SNES_HEIGHT, SNES_WIDTH, BYTES_PER_PIXEL), dtype=np.uint8)
            self.render_frame(frame, i * self.frame_skip)
            self.pre_rendered_frames.append(frame)

        logger.info(f"Pre-rendered {len(self.pre_rendered_frames)} frames")
        return self.pre_rendered_frames

    def reset(self) -> None:
        self.tick = 0
        self.current_frame_index = 0
        self.frame.fill(0)
