# common/interfaces.py
from abc import ABC, abstractmethod

import numpy as np

class PaletteCycle(ABC):
    @abstractmethod
    def cycle(self) -> bool:
        """Advance the colour animation by one frame. Return True if colours changed."""
        pass

    @abstractmethod
    def get_colors(self, sub_palette: int) -> np.ndarray:
        """Return the current packed 32-bit colours of a subpalette."""
        pass

class Layer(ABC):
    @abstractmethod
    def overlay_frame(self, bitmap: np.ndarray, letterbox: int, ticks: int,
                      alpha: float, erase: bool) -> np.ndarray:
        """Composite this layer at the given tick into an RGBA frame buffer."""
        pass

    @abstractmethod
    def render(self, ticks: int) -> np.ndarray:
        """Render this layer alone at the given tick into a new RGBA frame."""
        pass
