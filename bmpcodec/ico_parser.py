# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
ICO/CUR (Icon/Cursor) single-image extraction

An icon file is a directory of images. Each BMP-style entry is a DIB
without a file header whose declared height covers two stacked bitmaps:
the color (XOR) image followed by a 1-bit transparency (AND) mask.

This module selects one entry and decodes it through the regular DIB
pipeline. When the color image has no alpha channel the AND mask becomes
one, so icons decode to RGBA.

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Tuple

from bmpcodec.byte_io import ByteReader
from bmpcodec.bmp_header import read_dib_header
from bmpcodec.bmp_parser import decode_dib
from bmpcodec.config import DecodeConfig
from bmpcodec.descriptor import BmpDescriptor
from bmpcodec.exceptions import (
    MalformedHeaderError,
    InvalidDimensionsError,
    UnsupportedFormatError,
)
from bmpcodec.stride import compute_dib_meta, padded_row_width, verify_data_size

logger = logging.getLogger(__name__)


ICON_DIR_SIZE = 6
ICON_ENTRY_SIZE = 16
ICON_TYPES = {1: 'ICO', 2: 'CUR'}
PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'
ICON_ALPHA_MASK = 0xFF000000


@dataclass(frozen=True)
class IconEntry:
    """
    One ICONDIRENTRY.

    For cursors ``planes`` and ``bits_per_pixel`` hold the hotspot
    coordinates instead.
    """
    width: int
    height: int
    color_count: int
    planes: int
    bits_per_pixel: int
    size: int
    offset: int


def read_icon_directory(data: bytes) -> Tuple[str, List[IconEntry]]:
    """
    Parse the ICONDIR header and its entries.

    Returns:
        Tuple of (container type 'ICO' or 'CUR', list of entries)

    Raises:
        MalformedHeaderError: Bad reserved field or type, or truncated directory
    """
    reader = ByteReader(data)
    reader.require(0, ICON_DIR_SIZE, "icon directory")

    if reader.u16(0) != 0:
        raise MalformedHeaderError("Invalid ICO/CUR file: invalid reserved field")
    file_type = reader.u16(2)
    if file_type not in ICON_TYPES:
        raise MalformedHeaderError(f"Invalid ICO/CUR file: invalid type {file_type}")

    count = reader.u16(4)
    reader.require(ICON_DIR_SIZE, count * ICON_ENTRY_SIZE, "icon directory entries")

    entries = []
    for i in range(count):
        offset = ICON_DIR_SIZE + i * ICON_ENTRY_SIZE
        # Width and height of 0 mean 256
        entries.append(IconEntry(
            width=reader.u8(offset) or 256,
            height=reader.u8(offset + 1) or 256,
            color_count=reader.u8(offset + 2),
            planes=reader.u16(offset + 4),
            bits_per_pixel=reader.u16(offset + 6),
            size=reader.u32(offset + 8),
            offset=reader.u32(offset + 12),
        ))
    return ICON_TYPES[file_type], entries


def _apply_and_mask(
    pixels: bytes,
    descriptor: BmpDescriptor,
    reader: ByteReader,
    mask_offset: int,
    mask_stride: int,
) -> Tuple[bytes, BmpDescriptor]:
    width, height = descriptor.width, descriptor.height
    rgba = bytearray(width * height * 4)
    rgba[0::4] = pixels[0::3]
    rgba[1::4] = pixels[1::3]
    rgba[2::4] = pixels[2::3]

    for y in range(height):
        row = reader.bytes_at(mask_offset + (height - 1 - y) * mask_stride, mask_stride)
        dest = y * width * 4 + 3
        for x in range(width):
            transparent = (row[x >> 3] >> (7 - (x & 7))) & 1
            rgba[dest] = 0 if transparent else 255
            dest += 4

    return bytes(rgba), BmpDescriptor(width=width, height=height, channels=4)


def decode_icon(data: bytes, index: int = 0) -> Tuple[bytes, BmpDescriptor]:
    """
    Decode a single image from an ICO or CUR file.

    Args:
        data: Complete ICO/CUR file content
        index: Directory entry to decode

    Returns:
        Tuple of (top-down pixels, descriptor)

    Raises:
        ValueError: ``index`` is outside the directory
        UnsupportedFormatError: The entry is stored as PNG
        BMPDecodeError: The entry's DIB is invalid
    """
    kind, entries = read_icon_directory(data)
    if not 0 <= index < len(entries):
        raise ValueError(f"Icon index {index} out of range ({len(entries)} images)")
    entry = entries[index]

    payload = ByteReader(ByteReader(data).bytes_at(entry.offset, entry.size))
    if len(payload) >= len(PNG_SIGNATURE) and payload.bytes_at(0, len(PNG_SIGNATURE)) == PNG_SIGNATURE:
        raise UnsupportedFormatError(f"{kind} image {index} is PNG-compressed")

    stored = read_dib_header(payload, 0)
    if stored.height < 2:
        raise InvalidDimensionsError(f"Invalid icon height: {stored.height}")
    header = replace(stored, height=stored.height // 2)
    if header.bits_per_pixel == 32 and not header.alpha_mask:
        # 32-bit icon entries carry alpha in the fourth byte
        header = replace(header, alpha_mask=ICON_ALPHA_MASK)

    mask_stride = padded_row_width(header.width, 1)
    mask_size = mask_stride * header.height
    meta = verify_data_size(header, compute_dib_meta(header), icon_mask_size=mask_size)

    palette_offset = header.header_size
    pixel_data_offset = palette_offset
    if header.is_palette:
        colors = header.colors_used or (1 << header.bits_per_pixel)
        pixel_data_offset += colors * 4

    pixels, descriptor = decode_dib(
        payload, header, meta, pixel_data_offset, palette_offset,
        DecodeConfig(implicit_palette=True),
    )

    mask_offset = pixel_data_offset + meta.expected_data_size
    if descriptor.channels == 3 and mask_offset + mask_size <= len(payload):
        pixels, descriptor = _apply_and_mask(pixels, descriptor, payload, mask_offset, mask_stride)

    logger.debug(
        "Decoded %s image %d: %dx%d, %d channels",
        kind, index, descriptor.width, descriptor.height, descriptor.channels,
    )
    return pixels, descriptor
