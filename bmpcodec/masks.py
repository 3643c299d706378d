# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Bitfield mask resolution

Converts 32-bit channel masks into a right-shift and a channel mask of at
most 8 bits, plus the factor that stretches the extracted value onto 0-255.

Channels wider than 8 bits keep their 8 most significant bits; the low
bits are dropped. A 10-bit red channel at 0x3FF00000 therefore resolves to
shift 22 with an 8-bit mask.

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from bmpcodec.bmp_header import CanonicalDibHeader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelMask:
    """Extraction parameters for one color channel."""
    shift: int
    bit_mask: int

    @property
    def present(self) -> bool:
        return self.bit_mask != 0

    @property
    def scale(self) -> Optional[float]:
        """Multiplier from the extracted value to 0-255; None for an absent channel."""
        if self.bit_mask == 0:
            return None
        return 255.0 / self.bit_mask

    def extract(self, value: int) -> int:
        """
        Extract this channel from a packed pixel and expand it to 8 bits.

        The result equals ``int(channel * scale)``, computed in integers so
        that a full-scale value always maps to exactly 255.
        """
        return ((value >> self.shift) & self.bit_mask) * 255 // self.bit_mask


@dataclass(frozen=True)
class ResolvedMasks:
    red: ChannelMask
    green: ChannelMask
    blue: ChannelMask
    alpha: ChannelMask

    @property
    def has_alpha(self) -> bool:
        return self.alpha.present

    def present_channels(self) -> Tuple[ChannelMask, ...]:
        """Channels in R, G, B, A output order, skipping absent ones."""
        return tuple(c for c in (self.red, self.green, self.blue, self.alpha) if c.present)


def resolve_channel(mask: int) -> ChannelMask:
    """
    Resolve a single 32-bit channel mask.

    Args:
        mask: Bitfield mask as stored in the header (0 if absent)

    Returns:
        ChannelMask with shift and a mask of at most 8 bits
    """
    mask &= 0xFFFFFFFF
    if mask == 0:
        return ChannelMask(shift=0, bit_mask=0)

    trailing_zeros = ((mask & -mask).bit_length() - 1) % 32
    width = mask.bit_length() - trailing_zeros

    if width <= 8:
        shift = trailing_zeros
    else:
        shift = trailing_zeros + width - 8
    shift = max(shift, 0)

    return ChannelMask(shift=shift, bit_mask=(1 << min(width, 8)) - 1)


def resolve_masks(header: CanonicalDibHeader) -> ResolvedMasks:
    """Resolve all four channel masks of a normalized header."""
    masks = ResolvedMasks(
        red=resolve_channel(header.red_mask),
        green=resolve_channel(header.green_mask),
        blue=resolve_channel(header.blue_mask),
        alpha=resolve_channel(header.alpha_mask),
    )
    logger.debug(
        "Resolved masks R=%s G=%s B=%s A=%s",
        masks.red, masks.green, masks.blue, masks.alpha,
    )
    return masks
