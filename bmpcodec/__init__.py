# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
bmpcodec - A Pure Python Windows Bitmap Codec

Decodes BMP files held in memory into flat, top-down RGB/RGBA pixel
buffers and encodes such buffers back into canonical BMP files.

Handles every DIB header variant (12, 40, 52, 56, 108 and 124 bytes),
palette images at 1/2/4/8 bits per pixel and direct images at 16/24/32
bits per pixel with arbitrary bitfield masks.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from bmpcodec.bmp_parser import BMPParser, BMPHeaderInfo, decode, read_header
from bmpcodec.bmp_writer import BMPWriter, encode
from bmpcodec.config import DecodeConfig
from bmpcodec.descriptor import BmpDescriptor
from bmpcodec.exceptions import (
    BMPError,
    BMPDecodeError,
    BMPEncodeError,
    MalformedHeaderError,
    InvalidDimensionsError,
    InvalidPlanesError,
    UnsupportedCompressionError,
    InvalidPaletteSizeError,
    InvalidDataOffsetError,
    DataSizeMismatchError,
    UnsupportedBitDepthError,
    UnsupportedChannelCountError,
    SizeMismatchError,
    UnsupportedFormatError,
)
from bmpcodec.ico_parser import decode_icon

__all__ = [
    "decode",
    "encode",
    "read_header",
    "decode_icon",
    "BMPParser",
    "BMPWriter",
    "BMPHeaderInfo",
    "BmpDescriptor",
    "DecodeConfig",
    "BMPError",
    "BMPDecodeError",
    "BMPEncodeError",
    "MalformedHeaderError",
    "InvalidDimensionsError",
    "InvalidPlanesError",
    "UnsupportedCompressionError",
    "InvalidPaletteSizeError",
    "InvalidDataOffsetError",
    "DataSizeMismatchError",
    "UnsupportedBitDepthError",
    "UnsupportedChannelCountError",
    "SizeMismatchError",
    "UnsupportedFormatError",
]
