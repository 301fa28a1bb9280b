"""
Image and plot output for rendered frames, palettes and distortion curves.
"""
import os
import numpy as np
import matplotlib.pyplot as plt
import logging
from typing import List, Optional, Sequence, Tuple

from ..rom.distorter import Distorter
from ..rom.distortion import EffectType
from ..rom.palette import BackgroundPalette

logger = logging.getLogger("BattleBackgrounds.Visualizer")

class FrameVisualizer:
    """
    Writes frames and palettes to image files and plots distortion offsets.
    """

    def __init__(self, dark_mode: bool = True, scale: int = 1):
        """
        Initialize the visualizer.

        Args:
            dark_mode: Whether to use dark background for plots
            scale: Integer upscaling factor applied to saved frames
        """
        self.dark_mode = dark_mode
        self.scale = max(1, int(scale))

        if self.dark_mode:
            plt.style.use('dark_background')
        else:
            plt.style.use('default')

        logger.info("Initialized frame visualizer")

    @staticmethod
    def _ensure_directory(path: str) -> None:
        directory = os.path.dirname(path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

    def save_frame(self, frame: np.ndarray, path: str) -> str:
        """
        Save an RGBA frame as an image.

        Args:
            frame: (height, width, 4) uint8 frame
            path: Output file; the format follows the extension

        Returns:
            The path written
        """
        image = frame
        if self.scale > 1:
            image = np.repeat(np.repeat(frame, self.scale, axis=0), self.scale, axis=1)

        self._ensure_directory(path)
        plt.imsave(path, image)
        logger.debug(f"Saved frame to {path}")
        return path

    def save_frames(self, frames: Sequence[np.ndarray], directory: str,
                    prefix: str = "frame", image_format: str = "png") -> List[str]:
        """
        Save a sequence of frames with numbered file names.

        Args:
            frames: Frames in playback order
            directory: Output directory
            prefix: File name prefix
            image_format: Image file extension

        Returns:
            Paths written, in order
        """
        paths = []
        for i, frame in enumerate(frames):
            path = os.path.join(directory, f"{prefix}_{i:04d}.{image_format}")
            paths.append(self.save_frame(frame, path))

        logger.info(f"Saved {len(paths)} frames to {directory}")
        return paths

    def palette_swatch(self, palette: BackgroundPalette, cell: int = 16) -> np.ndarray:
        """
        Build an image with one row of colour cells per subpalette.

        Args:
            palette: Palette to draw
            cell: Size in pixels of each colour cell

        Returns:
            uint8 RGBA image
        """
        rgba = palette.to_rgba()
        return np.repeat(np.repeat(rgba, cell, axis=0), cell, axis=1)

    def save_palette(self, palette: BackgroundPalette, path: str, cell: int = 16) -> str:
        self._ensure_directory(path)
        plt.imsave(path, self.palette_swatch(palette, cell))
        logger.debug(f"Saved palette swatch to {path}")
        return path

    def plot_offsets(self, distorter: Distorter, ticks: Sequence[int],
                     path: Optional[str] = None, figsize: Tuple[int, int] = (10, 6)) -> None:
        """
        Plot per-scanline distortion offsets at several ticks.

        Args:
            distorter: Distorter whose effect is evaluated
            ticks: Ticks to plot, one curve each
            path: File to save the figure to (None to show it)
            figsize: Figure size (width, height) in inches
        """
        effect = distorter.effect
        fig, ax = plt.subplots(figsize=figsize)

        for tick in ticks:
            offsets = distorter.compute_offsets(tick)
            ax.plot(offsets, np.arange(len(offsets)), alpha=0.8, label=f"tick {tick}")

        ax.invert_yaxis()
        ax.set_title(f"Distortion {getattr(effect, 'index', '?')} ({effect.type.name})")
        ax.set_xlabel("Source row" if effect.type == EffectType.VERTICAL else "Horizontal offset")
        ax.set_ylabel("Scanline")
        ax.grid(True, alpha=0.3)
        ax.legend(loc="upper right")
        fig.tight_layout()

        if path:
            self._ensure_directory(path)
            fig.savefig(path)
            plt.close(fig)
            logger.info(f"Saved offset plot to {path}")
        else:
            plt.show()
