# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Public image descriptor shared by the decoder and the encoder.

Copyright 2025 DNAi inc.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BmpDescriptor:
    """
    Shape of a flat, top-down, channel-interleaved pixel buffer.

    ``channels`` is 3 for RGB and 4 for RGBA.
    """
    width: int
    height: int
    channels: int

    @property
    def row_length(self) -> int:
        return self.width * self.channels

    @property
    def buffer_size(self) -> int:
        return self.width * self.height * self.channels
