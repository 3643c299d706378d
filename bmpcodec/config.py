# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Decoder configuration

The defaults reproduce the strict decoding rules; callers that need to
read looser files opt in explicitly.

Copyright 2025 DNAi inc.
"""

from typing import Iterable, Optional, FrozenSet


# File header magic values accepted by the decoder
DEFAULT_SIGNATURES: FrozenSet[bytes] = frozenset({
    b'BM',  # Windows bitmap
    b'BA',  # OS/2 bitmap array
    b'CI',  # OS/2 color icon
    b'CP',  # OS/2 color pointer
    b'IC',  # OS/2 icon
    b'PT',  # OS/2 pointer
})


class DecodeConfig:
    """
    Configuration for decode operations.

    Attributes:
        accepted_signatures: Two-byte magic values allowed at offset 0
        implicit_palette: Treat colors_used == 0 as a full 2**bpp palette
            instead of rejecting the image
    """

    def __init__(
        self,
        accepted_signatures: Optional[Iterable[bytes]] = None,
        implicit_palette: bool = False,
    ):
        """
        Initialize decode configuration.

        Args:
            accepted_signatures: Override for the accepted magic values
            implicit_palette: Allow palette images that leave colors_used at 0
        """
        if accepted_signatures is None:
            self.accepted_signatures = DEFAULT_SIGNATURES
        else:
            signatures = frozenset(bytes(sig) for sig in accepted_signatures)
            for sig in signatures:
                if len(sig) != 2:
                    raise ValueError(f"Signature must be exactly 2 bytes: {sig!r}")
            self.accepted_signatures = signatures
        self.implicit_palette = implicit_palette

    def __repr__(self) -> str:
        signatures = sorted(sig.decode('latin-1') for sig in self.accepted_signatures)
        return f"DecodeConfig(accepted_signatures={signatures}, implicit_palette={self.implicit_palette})"
