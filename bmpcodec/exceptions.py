# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for bmpcodec

This module defines the exceptions raised by the BMP decoder and encoder.
Every failure is reported as exactly one of these; no partial output is
ever returned alongside an error.

Copyright 2025 DNAi inc.
"""


class BMPError(Exception):
    """
    Base exception for all bmpcodec errors.

    All bmpcodec exceptions inherit from this class, allowing
    catch-all error handling for any decode or encode failure.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.

        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class BMPDecodeError(BMPError):
    """
    Raised when a BMP byte stream cannot be decoded.

    Subclasses identify which structural rule the input violated.
    """
    pass


class BMPEncodeError(BMPError):
    """
    Raised when a pixel buffer cannot be encoded.

    Subclasses identify which part of the caller's contract was violated.
    """
    pass


class MalformedHeaderError(BMPDecodeError):
    """
    Raised when the file or DIB header is structurally invalid.

    This exception is raised when:
    - The buffer is truncated or a field lies outside the buffer
    - The magic bytes are not an accepted BMP signature
    - The declared file size does not match the buffer length
    - The DIB header size is not a known variant
    - The pixel data offset lies outside the valid range
    """
    pass


class InvalidDimensionsError(BMPDecodeError):
    """Raised when width or height is not strictly positive."""
    pass


class InvalidPlanesError(BMPDecodeError):
    """Raised when the color plane count is not 1."""
    pass


class UnsupportedCompressionError(BMPDecodeError):
    """Raised for compression modes other than RGB, BITFIELDS and ALPHABITFIELDS."""
    pass


class InvalidPaletteSizeError(BMPDecodeError):
    """Raised when a palette image declares fewer than 1 or more than 256 colors."""
    pass


class InvalidDataOffsetError(BMPDecodeError):
    """Raised when pixel data would overlap the header or palette region."""
    pass


class DataSizeMismatchError(BMPDecodeError):
    """
    Raised when the declared pixel data size disagrees with the size
    computed from width, height and bit depth.
    """
    def __init__(self, declared: int, expected: int):
        self.declared = declared
        self.expected = expected
        super().__init__(f"Declared data size {declared} does not match expected size {expected}")


class UnsupportedBitDepthError(BMPDecodeError):
    """Raised when bits per pixel is not one of 1, 2, 4, 8, 16, 24 or 32."""
    def __init__(self, bits_per_pixel: int):
        self.bits_per_pixel = bits_per_pixel
        super().__init__(f"Unsupported bit depth: {bits_per_pixel}")


class UnsupportedChannelCountError(BMPEncodeError):
    """Raised when an encode descriptor asks for anything but 3 or 4 channels."""
    def __init__(self, channels: int):
        self.channels = channels
        super().__init__(f"Only 3 and 4 channels are supported, got {channels}")


class SizeMismatchError(BMPEncodeError):
    """Raised when the pixel buffer length is not width * height * channels."""
    def __init__(self, actual: int, expected: int):
        self.actual = actual
        self.expected = expected
        super().__init__(f"Pixel buffer has {actual} bytes, expected {expected}")


class UnsupportedFormatError(BMPError):
    """
    Raised when the input is a recognised container whose payload
    this package does not decode (for example a PNG-compressed icon).
    """
    pass
