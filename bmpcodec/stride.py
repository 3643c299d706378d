# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Row stride and pixel data size

BMP rows are padded to a multiple of 32 bits. The helpers here derive the
padded row width from a header and check the declared data size against it.

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import dataclass, replace

from bmpcodec.bmp_header import CanonicalDibHeader
from bmpcodec.exceptions import DataSizeMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DibMeta:
    """Values derived from a DIB header, computed once per decode or encode."""
    padded_row_width: int
    expected_data_size: int
    has_alpha_channel: bool
    has_icon_mask: bool = False


def padded_row_width(width: int, bits_per_pixel: int) -> int:
    """
    Bytes per stored row, rounded up to a 4-byte boundary.

    >>> padded_row_width(33, 1)
    8
    """
    row_width_bits = width * bits_per_pixel
    padding_bits = (32 - row_width_bits % 32) % 32
    return (row_width_bits + padding_bits) // 8


def compute_dib_meta(header: CanonicalDibHeader) -> DibMeta:
    row_width = padded_row_width(header.width, header.bits_per_pixel)
    return DibMeta(
        padded_row_width=row_width,
        expected_data_size=header.height * row_width,
        has_alpha_channel=header.alpha_mask != 0,
    )


def verify_data_size(
    header: CanonicalDibHeader,
    meta: DibMeta,
    icon_mask_size: int = 0
) -> DibMeta:
    """
    Check the header's declared data size against the computed one.

    A declared size of 0 means "not specified" and adopts the computed
    size. When ``icon_mask_size`` is given, a declared size covering both
    the color data and a trailing icon AND mask is accepted as well.

    Returns:
        ``meta``, with ``has_icon_mask`` set when the declared size
        includes the AND mask

    Raises:
        DataSizeMismatchError: The declared size disagrees with the stride
    """
    declared = header.declared_data_size
    if declared == 0 or declared == meta.expected_data_size:
        logger.debug(
            "Row stride=%d data size=%d (declared %d)",
            meta.padded_row_width, meta.expected_data_size, declared,
        )
        return meta
    if icon_mask_size and declared == meta.expected_data_size + icon_mask_size:
        return replace(meta, has_icon_mask=True)
    raise DataSizeMismatchError(declared, meta.expected_data_size)
