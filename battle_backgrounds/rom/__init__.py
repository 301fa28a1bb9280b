"""
Cartridge image decoding: address translation, decompression, tile graphics,
palettes, distortion effects and background layers.
"""
from .rom import ROM
from .block import Block
from .background import BattleBackground
from .background_layer import BackgroundLayer
from .distortion import DistortionEffect, EffectType
from .distorter import Distorter
