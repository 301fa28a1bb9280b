"""
Common functionality shared across the renderer.
"""
from .interfaces import PaletteCycle, Layer
