"""
Decompression codec for battle background assets.

Graphics, arrangements and other large assets are stored as a stream of
commands. Each command starts with a header byte whose top three bits select
the command type and whose low five bits hold the run length minus one. Type
7 is an escape that takes the real type from bits 4-2 and widens the length
to ten bits using the following byte. Back-reference commands (types 4-6)
are followed by a big-endian offset into the output produced so far. The
stream ends with a 0xFF header byte.

Decompression runs in two passes over the same commands: a size pass that
only accumulates the output length, and an expansion pass that writes into a
buffer of exactly that length.
"""

import logging
from enum import IntEnum
from typing import Optional, Tuple

from ..utils.error_handler import DecompressionError, DecompressionErrorCode

logger = logging.getLogger("BattleBackgrounds.ROM.Codec")

# Header byte terminating a compressed stream
TERMINATOR = 0xFF

class CompressionType(IntEnum):
    """Command types of the compressed stream."""
    UNCOMPRESSED_BLOCK = 0
    RUN_LENGTH_ENCODED_BYTE = 1
    RUN_LENGTH_ENCODED_SHORT = 2
    INCREMENTAL_SEQUENCE = 3
    REPEAT_PREVIOUS_DATA = 4
    REVERSE_BITS = 5
    COPY_REVERSED = 6
    UNKNOWN = 7


def generate_reversed_bytes() -> bytes:
    """
    Build the 256-entry bit reversal table.

    Returns:
        Table mapping every byte to the byte with its bit order reversed
    """
    table = bytearray(256)

    for i in range(256):
        x = i
        x = ((x & 0b11110000) >> 4) | ((x & 0b00001111) << 4)
        x = ((x & 0b11001100) >> 2) | ((x & 0b00110011) << 2)
        x = ((x & 0b10101010) >> 1) | ((x & 0b01010101) << 1)
        table[i] = x

    return bytes(table)


REVERSED_BYTES = generate_reversed_bytes()


def reverse_bits(value: int) -> int:
    """Reverse the bit order of a byte."""
    return REVERSED_BYTES[value & 0xFF]


def _byte(data: bytes, pos: int) -> int:
    if not 0 <= pos < len(data):
        raise DecompressionError(DecompressionErrorCode.UNEXPECTED_END,
                                 f"Read outside compressed data at {pos}", pos)
    return data[pos]


def _read_command(data: bytes, pos: int) -> Tuple[int, int, Optional[int], int]:
    """
    Parse one command header.

    Args:
        data: Compressed stream
        pos: Position of the header byte

    Returns:
        Tuple of (command type, length, back-reference source or None,
        position of the command's payload)
    """
    header = _byte(data, pos)
    command_type = header >> 5
    length = (header & 0x1F) + 1

    if command_type == 7:
        command_type = (header & 0x1C) >> 2
        length = ((header & 0x03) << 8) + _byte(data, pos + 1) + 1
        pos += 1

    pos += 1

    source = None
    if command_type >= 4:
        source = (_byte(data, pos) << 8) + _byte(data, pos + 1)
        pos += 2

    return command_type, length, source, pos


def get_compressed_size(data: bytes, start: int) -> int:
    """
    Compute the decompressed size of a stream without expanding it.

    Args:
        data: Buffer holding the compressed stream
        start: Offset of the first command

    Returns:
        Number of bytes the stream expands to

    Raises:
        DecompressionError: If the stream is malformed
    """
    pos = start
    bpos = 0

    while _byte(data, pos) != TERMINATOR:
        command_pos = pos
        command_type, length, source, pos = _read_command(data, pos)

        if command_type == CompressionType.UNCOMPRESSED_BLOCK:
            bpos += length
            pos += length
        elif command_type == CompressionType.RUN_LENGTH_ENCODED_BYTE:
            bpos += length
            pos += 1
        elif command_type == CompressionType.RUN_LENGTH_ENCODED_SHORT:
            bpos += 2 * length
            pos += 2
        elif command_type == CompressionType.INCREMENTAL_SEQUENCE:
            bpos += length
            pos += 1
        elif command_type in (CompressionType.REPEAT_PREVIOUS_DATA, CompressionType.REVERSE_BITS):
            bpos += length
        elif command_type == CompressionType.COPY_REVERSED:
            if source - length + 1 < 0:
                raise DecompressionError(DecompressionErrorCode.NEGATIVE_SOURCE,
                                         f"Reversed copy from ${source:04X} reads before output start",
                                         command_pos)
            bpos += length
        else:
            raise DecompressionError(DecompressionErrorCode.UNKNOWN_COMMAND,
                                     f"Unknown compression command at {command_pos:#x}",
                                     command_pos)

    return bpos


def decompress(data: bytes, start: int, size: int) -> bytearray:
    """
    Expand a compressed stream into a buffer of a declared size.

    Args:
        data: Buffer holding the compressed stream
        start: Offset of the first command
        size: Expected decompressed size, usually from get_compressed_size()

    Returns:
        Decompressed bytes, exactly `size` long

    Raises:
        DecompressionError: If the stream is malformed or does not produce
            exactly `size` bytes
    """
    if size < 0:
        raise DecompressionError(DecompressionErrorCode.INVALID_SIZE,
                                 f"Invalid decompressed size: {size}")

    output = bytearray(size)
    pos = start
    bpos = 0

    while _byte(data, pos) != TERMINATOR:
        command_pos = pos
        command_type, length, source, pos = _read_command(data, pos)

        if bpos + length > size:
            raise DecompressionError(DecompressionErrorCode.OUTPUT_OVERFLOW,
                                     f"Command at {command_pos:#x} writes past {size} bytes",
                                     command_pos)

        if source is not None and source >= size:
            raise DecompressionError(DecompressionErrorCode.SOURCE_OUT_OF_RANGE,
                                     f"Back-reference ${source:04X} outside {size} bytes",
                                     command_pos)

        if command_type == CompressionType.UNCOMPRESSED_BLOCK:
            chunk = data[pos:pos + length]
            if pos < 0 or len(chunk) < length:
                raise DecompressionError(DecompressionErrorCode.UNEXPECTED_END,
                                         "Unexpected end of compressed data", len(data))
            output[bpos:bpos + length] = chunk
            bpos += length
            pos += length

        elif command_type == CompressionType.RUN_LENGTH_ENCODED_BYTE:
            output[bpos:bpos + length] = bytes((_byte(data, pos),)) * length
            bpos += length
            pos += 1

        elif command_type == CompressionType.RUN_LENGTH_ENCODED_SHORT:
            if bpos + 2 * length > size:
                raise DecompressionError(DecompressionErrorCode.OUTPUT_OVERFLOW,
                                         f"Command at {command_pos:#x} writes past {size} bytes",
                                         command_pos)
            pair = bytes((_byte(data, pos), _byte(data, pos + 1)))
            output[bpos:bpos + 2 * length] = pair * length
            bpos += 2 * length
            pos += 2

        elif command_type == CompressionType.INCREMENTAL_SEQUENCE:
            seed = _byte(data, pos)
            output[bpos:bpos + length] = bytes((seed + i) & 0xFF for i in range(length))
            bpos += length
            pos += 1

        elif command_type == CompressionType.REPEAT_PREVIOUS_DATA:
            if source + length > size:
                raise DecompressionError(DecompressionErrorCode.SOURCE_OUT_OF_RANGE,
                                         f"Back-reference ${source:04X}+{length} outside {size} bytes",
                                         command_pos)
            if source + length <= bpos:
                output[bpos:bpos + length] = output[source:source + length]
            else:
                # Overlapping run: later bytes repeat what this command just wrote
                for i in range(length):
                    output[bpos + i] = output[source + i]
            bpos += length

        elif command_type == CompressionType.REVERSE_BITS:
            if source + length > size:
                raise DecompressionError(DecompressionErrorCode.SOURCE_OUT_OF_RANGE,
                                         f"Back-reference ${source:04X}+{length} outside {size} bytes",
                                         command_pos)
            if source + length <= bpos:
                output[bpos:bpos + length] = output[source:source + length].translate(REVERSED_BYTES)
            else:
                for i in range(length):
                    output[bpos + i] = REVERSED_BYTES[output[source + i]]
            bpos += length

        elif command_type == CompressionType.COPY_REVERSED:
            if source - length + 1 < 0:
                raise DecompressionError(DecompressionErrorCode.NEGATIVE_SOURCE,
                                         f"Reversed copy from ${source:04X} reads before output start",
                                         command_pos)
            if source < bpos:
                output[bpos:bpos + length] = output[source - length + 1:source + 1][::-1]
            else:
                for i in range(length):
                    output[bpos + i] = output[source - i]
            bpos += length

        else:
            raise DecompressionError(DecompressionErrorCode.UNKNOWN_COMMAND,
                                     f"Unknown compression command at {command_pos:#x}",
                                     command_pos)

    if bpos != size:
        raise DecompressionError(DecompressionErrorCode.SIZE_MISMATCH,
                                 f"Stream produced {bpos} bytes, expected {size}",
                                 pos)

    logger.debug(f"Decompressed {size} bytes from {start:#x}")
    return output
