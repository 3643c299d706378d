# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
BMP encoder

This module serializes a flat, top-down RGB or RGBA pixel buffer into a
BMP byte stream. Output always uses a 56-byte DIB header:
- 3 channels: 24 bits per pixel, no compression
- 4 channels: 32 bits per pixel, BITFIELDS with A8R8G8B8 masks

Headers are written field by field in file order.

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Union

from bmpcodec.byte_io import ByteWriter
from bmpcodec.bmp_header import (
    FILE_HEADER_SIZE,
    CanonicalDibHeader,
    Compression,
    DibVariant,
    RGB888_MASKS,
)
from bmpcodec.descriptor import BmpDescriptor
from bmpcodec.exceptions import (
    InvalidDimensionsError,
    SizeMismatchError,
    UnsupportedChannelCountError,
)
from bmpcodec.stride import compute_dib_meta

logger = logging.getLogger(__name__)


ENCODE_SIGNATURE = b'BM'
ENCODE_RESOLUTION = 96
ALPHA_MASK = 0xFF000000


def build_encode_header(descriptor: BmpDescriptor) -> CanonicalDibHeader:
    """
    Build the DIB header used for encoding ``descriptor``.

    The declared data size is filled in from the computed stride.
    """
    if descriptor.channels not in (3, 4):
        raise UnsupportedChannelCountError(descriptor.channels)
    if descriptor.width <= 0 or descriptor.height <= 0:
        raise InvalidDimensionsError(
            f"Invalid image dimensions: {descriptor.width} x {descriptor.height}"
        )

    if descriptor.channels == 4:
        red, green, blue = RGB888_MASKS
        header = CanonicalDibHeader(
            variant=DibVariant.V3,
            header_size=int(DibVariant.V3),
            width=descriptor.width,
            height=descriptor.height,
            planes=1,
            bits_per_pixel=32,
            compression=Compression.BITFIELDS,
            horizontal_resolution=ENCODE_RESOLUTION,
            vertical_resolution=ENCODE_RESOLUTION,
            red_mask=red,
            green_mask=green,
            blue_mask=blue,
            alpha_mask=ALPHA_MASK,
        )
    else:
        header = CanonicalDibHeader(
            variant=DibVariant.V3,
            header_size=int(DibVariant.V3),
            width=descriptor.width,
            height=descriptor.height,
            planes=1,
            bits_per_pixel=24,
            compression=Compression.RGB,
            horizontal_resolution=ENCODE_RESOLUTION,
            vertical_resolution=ENCODE_RESOLUTION,
        )

    meta = compute_dib_meta(header)
    return replace(header, declared_data_size=meta.expected_data_size)


def write_dib_header(writer: ByteWriter, header: CanonicalDibHeader) -> None:
    """
    Serialize ``header`` in the layout of its variant.

    Fields a variant does not contain are not written; the colorimetry
    block of V4/V5 headers is written back as stored, zero-filled if short.
    """
    variant = header.variant
    writer.u32(variant)
    if variant == DibVariant.CORE:
        writer.u16(header.width).u16(header.height)
        writer.u16(header.planes).u16(header.bits_per_pixel)
        return

    writer.i32(header.width).i32(header.height)
    writer.u16(header.planes).u16(header.bits_per_pixel)
    writer.u32(header.compression)
    writer.u32(header.declared_data_size)
    writer.u32(header.horizontal_resolution).u32(header.vertical_resolution)
    writer.u32(header.colors_used).u32(header.important_colors)
    if variant >= DibVariant.V2:
        writer.u32(header.red_mask).u32(header.green_mask).u32(header.blue_mask)
    if variant >= DibVariant.V3:
        writer.u32(header.alpha_mask)
    if variant >= DibVariant.V4:
        tail_size = variant - DibVariant.V3
        tail = header.colorimetry[:tail_size]
        writer.raw(tail).zeros(tail_size - len(tail))


def encode(pixels: Union[bytes, bytearray, memoryview], descriptor: BmpDescriptor) -> bytes:
    """
    Encode a pixel buffer as a BMP file.

    Args:
        pixels: Top-down, R, G, B[, A] interleaved pixel bytes
        descriptor: Width, height and channel count of ``pixels``

    Returns:
        Complete BMP file content

    Raises:
        UnsupportedChannelCountError: ``descriptor.channels`` is not 3 or 4
        InvalidDimensionsError: Width or height is not positive
        SizeMismatchError: ``pixels`` is not width * height * channels bytes
    """
    header = build_encode_header(descriptor)
    if len(pixels) != descriptor.buffer_size:
        raise SizeMismatchError(len(pixels), descriptor.buffer_size)

    meta = compute_dib_meta(header)
    channels = descriptor.channels
    row_length = descriptor.row_length
    stride = meta.padded_row_width

    body = bytearray(meta.expected_data_size)
    src_pixels = bytes(pixels)
    for file_row in range(descriptor.height):
        # File rows run bottom-up
        y = descriptor.height - 1 - file_row
        src = src_pixels[y * row_length:(y + 1) * row_length]
        row = bytearray(row_length)
        row[0::channels] = src[2::channels]
        row[1::channels] = src[1::channels]
        row[2::channels] = src[0::channels]
        if channels == 4:
            row[3::4] = src[3::4]
        start = file_row * stride
        body[start:start + row_length] = row

    pixel_data_offset = FILE_HEADER_SIZE + header.header_size
    file_size = pixel_data_offset + len(body)

    writer = ByteWriter()
    writer.raw(ENCODE_SIGNATURE).u32(file_size).u16(0).u16(0).u32(pixel_data_offset)
    write_dib_header(writer, header)
    writer.raw(body)

    logger.debug(
        "Encoded %dx%d %d-channel image into %d bytes",
        descriptor.width, descriptor.height, channels, file_size,
    )
    return writer.getvalue()


class BMPWriter:
    """
    Writer for BMP files.
    """

    def encode(self, pixels: bytes, descriptor: BmpDescriptor) -> bytes:
        return encode(pixels, descriptor)

    def write_bmp(
        self,
        pixels: bytes,
        descriptor: BmpDescriptor,
        output_path: Union[str, Path]
    ) -> None:
        """
        Encode ``pixels`` and write the result to ``output_path``.

        Args:
            pixels: Top-down pixel buffer
            descriptor: Shape of ``pixels``
            output_path: Path to output BMP file
        """
        Path(output_path).write_bytes(encode(pixels, descriptor))
