# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
BMP (Bitmap) decoder

This module decodes a complete BMP file held in memory into a flat,
top-down RGB or RGBA pixel buffer.

Supported pixel formats:
- Palette images at 1, 2, 4 and 8 bits per pixel (always decoded to RGB)
- Direct images at 16, 24 and 32 bits per pixel, with default masks or
  BITFIELDS / ALPHABITFIELDS masks (RGBA when an alpha mask is present)

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

from bmpcodec.byte_io import ByteReader
from bmpcodec.bmp_header import (
    FILE_HEADER_SIZE,
    CanonicalDibHeader,
    FileHeader,
    parse_headers,
)
from bmpcodec.config import DecodeConfig
from bmpcodec.descriptor import BmpDescriptor
from bmpcodec.exceptions import (
    InvalidPaletteSizeError,
    InvalidDataOffsetError,
)
from bmpcodec.masks import resolve_masks
from bmpcodec.stride import DibMeta, compute_dib_meta, verify_data_size

logger = logging.getLogger(__name__)


MAX_PALETTE_COLORS = 256


@dataclass(frozen=True)
class BMPHeaderInfo:
    """Everything known about a BMP file before its pixels are walked."""
    file_header: FileHeader
    dib_header: CanonicalDibHeader
    meta: DibMeta

    def to_metadata(self) -> Dict[str, Any]:
        """
        Flatten the headers into BMP:-prefixed tags.

        Returns:
            Dictionary of tag name to value
        """
        dib = self.dib_header
        metadata = {
            'BMP:Signature': self.file_header.signature.decode('latin-1'),
            'BMP:FileSize': self.file_header.file_size,
            'BMP:DataOffset': self.file_header.pixel_data_offset,
            'BMP:DIBHeaderSize': int(dib.variant),
            'BMP:HeaderVariant': dib.variant.name,
            'BMP:ImageWidth': dib.width,
            'BMP:ImageHeight': dib.height,
            'BMP:ColorPlanes': dib.planes,
            'BMP:BitsPerPixel': dib.bits_per_pixel,
            'BMP:Compression': dib.compression.name,
            'BMP:ImageSize': self.meta.expected_data_size,
            'BMP:RowStride': self.meta.padded_row_width,
        }
        if dib.horizontal_resolution:
            metadata['BMP:XPixelsPerMeter'] = dib.horizontal_resolution
        if dib.vertical_resolution:
            metadata['BMP:YPixelsPerMeter'] = dib.vertical_resolution
        if dib.is_palette:
            metadata['BMP:ColorsUsed'] = dib.colors_used
            if dib.important_colors:
                metadata['BMP:ImportantColors'] = dib.important_colors
        else:
            metadata['BMP:RedMask'] = f"0x{dib.red_mask:08X}"
            metadata['BMP:GreenMask'] = f"0x{dib.green_mask:08X}"
            metadata['BMP:BlueMask'] = f"0x{dib.blue_mask:08X}"
            metadata['BMP:AlphaMask'] = f"0x{dib.alpha_mask:08X}"
            metadata['BMP:HasAlpha'] = self.meta.has_alpha_channel
        if dib.color_space_type is not None:
            metadata['BMP:ColorSpaceType'] = f"0x{dib.color_space_type:08X}"
        return metadata


def _read_header(reader: ByteReader, config: Optional[DecodeConfig]) -> BMPHeaderInfo:
    file_header, dib_header = parse_headers(reader, config)
    meta = verify_data_size(dib_header, compute_dib_meta(dib_header))
    return BMPHeaderInfo(file_header=file_header, dib_header=dib_header, meta=meta)


def read_header(data: bytes, config: Optional[DecodeConfig] = None) -> BMPHeaderInfo:
    """
    Parse and validate the headers of a BMP file without decoding pixels.

    Args:
        data: Complete BMP file content
        config: Optional decode configuration

    Returns:
        BMPHeaderInfo with the file header, canonical DIB header and stride
    """
    return _read_header(ByteReader(data), config)


def _decode_palette(
    reader: ByteReader,
    header: CanonicalDibHeader,
    meta: DibMeta,
    pixel_data_offset: int,
    palette_offset: int,
    config: DecodeConfig,
) -> Tuple[bytes, BmpDescriptor]:
    bpp = header.bits_per_pixel
    colors = header.colors_used
    if colors == 0 and config.implicit_palette:
        colors = 1 << bpp

    if not 1 <= colors <= MAX_PALETTE_COLORS:
        raise InvalidPaletteSizeError(f"Invalid palette size: {colors} colors")
    if pixel_data_offset < palette_offset + colors * 4:
        raise InvalidDataOffsetError(
            f"Pixel data offset {pixel_data_offset} overlaps the {colors}-entry palette "
            f"at offset {palette_offset}"
        )

    # Entries are stored B, G, R, reserved
    raw_palette = reader.bytes_at(palette_offset, colors * 4)
    palette = [
        bytes((raw_palette[i + 2], raw_palette[i + 1], raw_palette[i]))
        for i in range(0, colors * 4, 4)
    ]

    width, height = header.width, header.height
    stride = meta.padded_row_width
    pixels_per_byte = 8 // bpp
    index_mask = (1 << bpp) - 1

    output = bytearray(width * height * 3)
    dest = 0
    for y in range(height):
        # Bottom row is stored first
        row = reader.bytes_at(pixel_data_offset + (height - 1 - y) * stride, stride)
        for x in range(width):
            shift = 8 - (x % pixels_per_byte + 1) * bpp
            index = (row[x // pixels_per_byte] >> shift) & index_mask
            if index >= colors:
                raise InvalidPaletteSizeError(
                    f"Palette index {index} at ({x}, {y}) exceeds palette of {colors} colors"
                )
            output[dest:dest + 3] = palette[index]
            dest += 3

    return bytes(output), BmpDescriptor(width=width, height=height, channels=3)


def _decode_direct(
    reader: ByteReader,
    header: CanonicalDibHeader,
    meta: DibMeta,
    pixel_data_offset: int,
) -> Tuple[bytes, BmpDescriptor]:
    masks = resolve_masks(header)
    channels = 4 if masks.has_alpha else 3

    # Absent channels keep their zero byte
    extractors = [
        (slot, channel)
        for slot, channel in enumerate((masks.red, masks.green, masks.blue, masks.alpha))
        if channel.present
    ]

    width, height = header.width, header.height
    stride = meta.padded_row_width
    bytes_per_pixel = header.bits_per_pixel // 8

    output = bytearray(width * height * channels)
    for y in range(height):
        row = reader.bytes_at(pixel_data_offset + (height - 1 - y) * stride, stride)
        dest = y * width * channels
        for x in range(width):
            start = x * bytes_per_pixel
            value = int.from_bytes(row[start:start + bytes_per_pixel], 'little')
            for slot, channel in extractors:
                output[dest + slot] = channel.extract(value)
            dest += channels

    return bytes(output), BmpDescriptor(width=width, height=height, channels=channels)


def decode_dib(
    reader: ByteReader,
    header: CanonicalDibHeader,
    meta: DibMeta,
    pixel_data_offset: int,
    palette_offset: int,
    config: Optional[DecodeConfig] = None,
) -> Tuple[bytes, BmpDescriptor]:
    """
    Decode the pixel array described by a normalized DIB header.

    Args:
        reader: Reader over the buffer holding the pixel data
        header: Normalized DIB header
        meta: Stride information for ``header``
        pixel_data_offset: Start of the bottom row in ``reader``
        palette_offset: End of the DIB header (start of the palette, if any)
        config: Optional decode configuration

    Returns:
        Tuple of (top-down pixel bytes, descriptor)
    """
    config = config or DecodeConfig()

    if header.is_palette:
        reader.require(pixel_data_offset, meta.expected_data_size, "pixel data")
        return _decode_palette(reader, header, meta, pixel_data_offset, palette_offset, config)

    if pixel_data_offset < palette_offset:
        raise InvalidDataOffsetError(
            f"Pixel data offset {pixel_data_offset} overlaps the bitfield masks ending at {palette_offset}"
        )
    reader.require(pixel_data_offset, meta.expected_data_size, "pixel data")
    return _decode_direct(reader, header, meta, pixel_data_offset)


def decode(data: bytes, config: Optional[DecodeConfig] = None) -> Tuple[bytes, BmpDescriptor]:
    """
    Decode a complete BMP file.

    Args:
        data: Full on-disk BMP file content
        config: Optional decode configuration

    Returns:
        Tuple of (pixels, descriptor). Pixels are top-down, R, G, B[, A]
        interleaved, ``descriptor.channels`` bytes per pixel.

    Raises:
        BMPDecodeError: Any structural problem with the input
    """
    reader = ByteReader(data)
    info = _read_header(reader, config)
    pixels, descriptor = decode_dib(
        reader,
        info.dib_header,
        info.meta,
        info.file_header.pixel_data_offset,
        FILE_HEADER_SIZE + info.dib_header.header_size,
        config,
    )
    logger.debug(
        "Decoded %dx%d image with %d channels",
        descriptor.width, descriptor.height, descriptor.channels,
    )
    return pixels, descriptor


class BMPParser:
    """
    Parser for BMP files.

    Wraps the module-level functions for callers that start from a path.
    """

    def __init__(
        self,
        file_path: Optional[str] = None,
        file_data: Optional[bytes] = None,
        config: Optional[DecodeConfig] = None,
    ):
        """
        Initialize BMP parser.

        Args:
            file_path: Path to BMP file
            file_data: BMP file data bytes
            config: Optional decode configuration
        """
        if file_path:
            self.file_path = Path(file_path)
            self.file_data = None
        elif file_data is not None:
            self.file_data = file_data
            self.file_path = None
        else:
            raise ValueError("Either file_path or file_data must be provided")
        self.config = config or DecodeConfig()

    def _load(self) -> bytes:
        if self.file_data is None:
            self.file_data = self.file_path.read_bytes()
        return self.file_data

    def read_header(self) -> BMPHeaderInfo:
        return read_header(self._load(), self.config)

    def parse(self) -> Dict[str, Any]:
        """
        Parse BMP header metadata.

        Returns:
            Dictionary of BMP metadata
        """
        return self.read_header().to_metadata()

    def decode(self) -> Tuple[bytes, BmpDescriptor]:
        return decode(self._load(), self.config)
