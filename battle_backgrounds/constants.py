"""
Global constants for Battle Backgrounds.
"""

# Output frame geometry (SNES native resolution)
SNES_WIDTH = 256
SNES_HEIGHT = 224

# Layer source bitmap geometry (32x32 tiles of 8x8 pixels)
LAYER_WIDTH = 256
LAYER_HEIGHT = 256
BYTES_PER_PIXEL = 4

# Highest valid battle background entry index
MAX_LAYER_INDEX = 326

# Letterbox heights in pixels, by aspect ratio name
ASPECT_RATIOS = {
    'full': 0,     # 8:7
    'wide': 16,    # 4:3
    'medium': 48,  # 2:1
    'narrow': 64   # 8:3
}

# Frame defaults
DEFAULT_LAYER1 = 219
DEFAULT_LAYER2 = 218
DEFAULT_FRAME_SKIP = 1
MAX_FRAME_SKIP = 10

