# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
BMP file header and DIB header parsing

This module reads the 14-byte file header and the variable-size DIB header
that follows it, and normalizes the six historical DIB layouts into one
canonical record.

DIB header variants (size in bytes):
- 12:  BITMAPCOREHEADER (OS/2 1.x), 16-bit width and height
- 40:  BITMAPINFOHEADER
- 52:  BITMAPV2INFOHEADER, adds RGB masks
- 56:  BITMAPV3INFOHEADER, adds the alpha mask
- 108: BITMAPV4HEADER, adds color space, endpoints and gamma
- 124: BITMAPV5HEADER, adds rendering intent and ICC profile location

Each larger variant is a prefix-compatible extension of the 40-byte form,
so every reader below delegates to the next smaller one and adds the
fields its size contains.

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Any, Optional, Tuple

from bmpcodec.byte_io import ByteReader
from bmpcodec.config import DecodeConfig
from bmpcodec.exceptions import (
    MalformedHeaderError,
    InvalidDimensionsError,
    InvalidPlanesError,
    UnsupportedCompressionError,
    UnsupportedBitDepthError,
)

logger = logging.getLogger(__name__)


FILE_HEADER_SIZE = 14
MIN_DIB_HEADER_SIZE = 12

SUPPORTED_BIT_DEPTHS = (1, 2, 4, 8, 16, 24, 32)
PALETTE_BIT_DEPTHS = (1, 2, 4, 8)

RGB555_MASKS = (0x7C00, 0x03E0, 0x001F)
RGB888_MASKS = (0x00FF0000, 0x0000FF00, 0x000000FF)

# Offset of the first field beyond the V3 masks; everything from here to
# the end of a V4/V5 header is carried through untouched.
_COLORIMETRY_OFFSET = 56


class DibVariant(IntEnum):
    """DIB header layouts, keyed by their declared header size."""
    CORE = 12
    INFO = 40
    V2 = 52
    V3 = 56
    V4 = 108
    V5 = 124

    @classmethod
    def from_size(cls, size: int) -> 'DibVariant':
        try:
            return cls(size)
        except ValueError:
            raise MalformedHeaderError(f"Invalid DIB header size: {size}") from None


class Compression(IntEnum):
    """DIB compression identifiers."""
    RGB = 0
    RLE8 = 1
    RLE4 = 2
    BITFIELDS = 3
    JPEG = 4
    PNG = 5
    ALPHABITFIELDS = 6
    CMYK = 11
    CMYKRLE8 = 12
    CMYKRLE4 = 13


SUPPORTED_COMPRESSIONS = (Compression.RGB, Compression.BITFIELDS, Compression.ALPHABITFIELDS)


@dataclass(frozen=True)
class FileHeader:
    """The 14-byte BITMAPFILEHEADER."""
    signature: bytes
    file_size: int
    reserved1: int
    reserved2: int
    pixel_data_offset: int


@dataclass(frozen=True)
class CanonicalDibHeader:
    """
    Superset of every DIB header variant.

    ``header_size`` is the effective size: the declared size plus any
    bitfield masks stored immediately after a 40-byte header. The palette,
    when present, starts right after it.
    """
    variant: DibVariant
    header_size: int
    width: int
    height: int
    planes: int
    bits_per_pixel: int
    compression: Compression = Compression.RGB
    declared_data_size: int = 0
    horizontal_resolution: int = 96
    vertical_resolution: int = 96
    colors_used: int = 0
    important_colors: int = 0
    red_mask: int = 0
    green_mask: int = 0
    blue_mask: int = 0
    alpha_mask: int = 0
    colorimetry: bytes = b''

    @property
    def is_palette(self) -> bool:
        return self.bits_per_pixel in PALETTE_BIT_DEPTHS

    @property
    def color_space_type(self) -> Optional[int]:
        """LCS color space tag of a V4/V5 header, or None for older variants."""
        if len(self.colorimetry) < 4:
            return None
        return int.from_bytes(self.colorimetry[:4], 'little')


def _read_core_header(reader: ByteReader, offset: int) -> Dict[str, Any]:
    return {
        'width': reader.u16(offset + 4),
        'height': reader.u16(offset + 6),
        'planes': reader.u16(offset + 8),
        'bits_per_pixel': reader.u16(offset + 10),
    }


def _read_info_header(reader: ByteReader, offset: int) -> Dict[str, Any]:
    return {
        'width': reader.i32(offset + 4),
        'height': reader.i32(offset + 8),
        'planes': reader.u16(offset + 12),
        'bits_per_pixel': reader.u16(offset + 14),
        'compression': reader.u32(offset + 16),
        'declared_data_size': reader.u32(offset + 20),
        'horizontal_resolution': reader.u32(offset + 24),
        'vertical_resolution': reader.u32(offset + 28),
        'colors_used': reader.u32(offset + 32),
        'important_colors': reader.u32(offset + 36),
    }


def _read_v2_header(reader: ByteReader, offset: int) -> Dict[str, Any]:
    fields = _read_info_header(reader, offset)
    fields['red_mask'] = reader.u32(offset + 40)
    fields['green_mask'] = reader.u32(offset + 44)
    fields['blue_mask'] = reader.u32(offset + 48)
    return fields


def _read_v3_header(reader: ByteReader, offset: int) -> Dict[str, Any]:
    fields = _read_v2_header(reader, offset)
    fields['alpha_mask'] = reader.u32(offset + 52)
    return fields


def _read_v4_header(reader: ByteReader, offset: int) -> Dict[str, Any]:
    fields = _read_v3_header(reader, offset)
    fields['colorimetry'] = reader.bytes_at(offset + _COLORIMETRY_OFFSET, DibVariant.V4 - _COLORIMETRY_OFFSET)
    return fields


def _read_v5_header(reader: ByteReader, offset: int) -> Dict[str, Any]:
    fields = _read_v3_header(reader, offset)
    fields['colorimetry'] = reader.bytes_at(offset + _COLORIMETRY_OFFSET, DibVariant.V5 - _COLORIMETRY_OFFSET)
    return fields


_VARIANT_READERS = {
    DibVariant.CORE: _read_core_header,
    DibVariant.INFO: _read_info_header,
    DibVariant.V2: _read_v2_header,
    DibVariant.V3: _read_v3_header,
    DibVariant.V4: _read_v4_header,
    DibVariant.V5: _read_v5_header,
}


def full_bit_mask(bits_per_pixel: int) -> int:
    """Mask covering the low ``bits_per_pixel`` bits of a pixel value."""
    return (1 << bits_per_pixel) - 1


def read_dib_header(reader: ByteReader, offset: int) -> CanonicalDibHeader:
    """
    Read and normalize the DIB header starting at ``offset``.

    Args:
        reader: Reader over the whole input
        offset: Position of the header-size field

    Returns:
        Canonical header with bitfield masks resolved to their final values

    Raises:
        MalformedHeaderError: Unknown header size or truncated fields
        InvalidDimensionsError: Width or height is not positive
        InvalidPlanesError: Planes is not 1
        UnsupportedCompressionError: Compression is not RGB or bitfields
        UnsupportedBitDepthError: Bits per pixel is not a supported depth
    """
    variant = DibVariant.from_size(reader.u32(offset))
    reader.require(offset, variant, "DIB header")
    fields = _VARIANT_READERS[variant](reader, offset)

    if fields['width'] <= 0 or fields['height'] <= 0:
        raise InvalidDimensionsError(
            f"Invalid image dimensions: {fields['width']} x {fields['height']}"
        )
    if fields['planes'] != 1:
        raise InvalidPlanesError(f"Invalid color planes: {fields['planes']} (must be 1)")

    compression = fields.get('compression', Compression.RGB)
    if compression not in SUPPORTED_COMPRESSIONS:
        try:
            name = Compression(compression).name
        except ValueError:
            name = f"Unknown ({compression})"
        raise UnsupportedCompressionError(f"Unsupported compression: {name}")
    fields['compression'] = Compression(compression)

    bits_per_pixel = fields['bits_per_pixel']
    if bits_per_pixel not in SUPPORTED_BIT_DEPTHS:
        raise UnsupportedBitDepthError(bits_per_pixel)

    header_size = int(variant)
    if variant <= DibVariant.INFO:
        # Masks stored after a 40-byte header rather than inside it
        mask_offset = offset + variant
        if compression == Compression.BITFIELDS:
            fields['red_mask'] = reader.u32(mask_offset)
            fields['green_mask'] = reader.u32(mask_offset + 4)
            fields['blue_mask'] = reader.u32(mask_offset + 8)
            header_size += 12
        elif compression == Compression.ALPHABITFIELDS:
            fields['red_mask'] = reader.u32(mask_offset)
            fields['green_mask'] = reader.u32(mask_offset + 4)
            fields['blue_mask'] = reader.u32(mask_offset + 8)
            fields['alpha_mask'] = reader.u32(mask_offset + 12)
            header_size += 16

    if not (fields.get('red_mask') or fields.get('green_mask') or fields.get('blue_mask')):
        defaults = RGB555_MASKS if bits_per_pixel == 16 else RGB888_MASKS
        fields['red_mask'], fields['green_mask'], fields['blue_mask'] = defaults

    pixel_bits = full_bit_mask(bits_per_pixel)
    for name in ('red_mask', 'green_mask', 'blue_mask', 'alpha_mask'):
        fields[name] = fields.get(name, 0) & pixel_bits

    header = CanonicalDibHeader(variant=variant, header_size=header_size, **fields)
    logger.debug(
        "DIB header variant=%s size=%d width=%d height=%d bpp=%d compression=%s",
        variant.name, header_size, header.width, header.height,
        header.bits_per_pixel, header.compression.name,
    )
    return header


def parse_file_header(reader: ByteReader, config: Optional[DecodeConfig] = None) -> FileHeader:
    """
    Read and validate the 14-byte file header.

    Raises:
        MalformedHeaderError: Buffer too small, bad magic or file size mismatch
    """
    config = config or DecodeConfig()

    if len(reader) <= FILE_HEADER_SIZE + MIN_DIB_HEADER_SIZE:
        raise MalformedHeaderError(f"Invalid BMP file: too short ({len(reader)} bytes)")

    signature = reader.bytes_at(0, 2)
    if signature not in config.accepted_signatures:
        raise MalformedHeaderError(f"Invalid BMP file: unrecognised signature {signature!r}")

    header = FileHeader(
        signature=signature,
        file_size=reader.u32(2),
        reserved1=reader.u16(6),
        reserved2=reader.u16(8),
        pixel_data_offset=reader.u32(10),
    )
    if header.file_size != len(reader):
        raise MalformedHeaderError(
            f"Declared file size {header.file_size} does not match input length {len(reader)}"
        )
    return header


def parse_headers(
    reader: ByteReader,
    config: Optional[DecodeConfig] = None
) -> Tuple[FileHeader, CanonicalDibHeader]:
    """
    Parse the file header and the DIB header of a complete BMP file.

    Returns:
        Tuple of (file header, canonical DIB header)
    """
    file_header = parse_file_header(reader, config)

    dib_size = reader.u32(FILE_HEADER_SIZE)
    if len(reader) < FILE_HEADER_SIZE + dib_size:
        raise MalformedHeaderError(
            f"Input too small for a {dib_size}-byte DIB header ({len(reader)} bytes)"
        )

    offset = file_header.pixel_data_offset
    if offset < FILE_HEADER_SIZE + dib_size:
        raise MalformedHeaderError(f"Pixel data offset {offset} overlaps the DIB header")
    if offset > len(reader):
        raise MalformedHeaderError(f"Pixel data offset {offset} is beyond the end of the input")

    logger.debug(
        "File header signature=%r size=%d data_offset=%d",
        file_header.signature, file_header.file_size, offset,
    )
    return file_header, read_dib_header(reader, FILE_HEADER_SIZE)
