"""
SNES address translation.

Pointers stored in the cartridge image are logical SNES addresses in the
HiROM banks. Two logical ranges are mapped: $40:0000-$5F:FFFF, which maps
onto itself, and $C0:0000-$FF:FFFF, which mirrors the start of the ROM. The
image this package reads starts $0A:0000 bytes into the ROM, so every
translated offset is shifted back by that amount (plus the copier header).
"""

from ..utils.error_handler import AddressOutOfRange

# Logical address ranges
LOWER_BANK_START = 0x400000
LOWER_BANK_END = 0x600000
UPPER_BANK_START = 0xC00000
UPPER_BANK_END = 0x1000000

# Size of the copier header
HEADER_SIZE = 0x200

# Position of file offset 0 inside the ROM, header included
IMAGE_BASE = 0xA0200


def snes_to_hex(address: int, header: bool = True) -> int:
    """
    Convert an SNES address to a file offset.

    Args:
        address: Logical SNES address
        header: Whether the image carries a 512-byte copier header

    Returns:
        File offset into the image

    Raises:
        AddressOutOfRange: If the address is in neither mapped range
    """
    if LOWER_BANK_START <= address < LOWER_BANK_END:
        offset = address
    elif UPPER_BANK_START <= address < UPPER_BANK_END:
        offset = address - UPPER_BANK_START
    else:
        raise AddressOutOfRange(f"SNES address out of range: ${address:06X}")

    if header:
        offset += HEADER_SIZE

    return offset - IMAGE_BASE


def hex_to_snes(offset: int, header: bool = True) -> int:
    """
    Convert a file offset back to the SNES address it was translated from.

    Args:
        offset: File offset into the image
        header: Whether the image carries a 512-byte copier header

    Returns:
        Logical SNES address

    Raises:
        AddressOutOfRange: If the offset maps to neither logical range
    """
    rom_offset = offset + IMAGE_BASE

    if header:
        rom_offset -= HEADER_SIZE

    if 0 <= rom_offset < LOWER_BANK_START:
        return rom_offset + UPPER_BANK_START
    elif LOWER_BANK_START <= rom_offset < LOWER_BANK_END:
        return rom_offset

    raise AddressOutOfRange(f"File offset out of range: {offset:#x}")
