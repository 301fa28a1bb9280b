"""
Fixed data layout of supported cartridge images.

All offsets are file offsets into the image (after address translation,
copier header assumed present).
"""

ROM_LAYOUTS = {
    "earthbound": {
        "header": True,
        "battle_background_table": 0xDCA1,
        "battle_background_count": 327,
        "graphics_pointer_table": 0xD7A1,
        "arrangement_pointer_table": 0xD93D,
        "graphics_count": 103,
        "palette_pointer_table": 0xDAD9,
        "palette_count": 114,
        "distortion_table": 0xF708,
        "distortion_count": 135,
    },
}

DEFAULT_LAYOUT = "earthbound"
