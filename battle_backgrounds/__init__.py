"""
Battle Backgrounds

Extracts the animated battle backgrounds stored in an SNES cartridge image and
renders them frame by frame: compressed tile graphics, palettes and the
per-scanline distortion effects that make them wobble.
"""

__version__ = "0.1.0"
