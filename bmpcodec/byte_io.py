# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Bounds-checked little-endian byte access

ByteReader wraps an input buffer and exposes typed field getters at
arbitrary offsets. Every access is checked against the buffer length, so
a corrupt offset in a header surfaces as MalformedHeaderError instead of
a struct.error or a silently short slice.

ByteWriter is the encode-side counterpart: fields are appended one by one
in the order they appear in the file.

Copyright 2025 DNAi inc.
"""

import struct
from typing import Union

from bmpcodec.exceptions import MalformedHeaderError


_U16 = struct.Struct('<H')
_U32 = struct.Struct('<I')
_I32 = struct.Struct('<i')


class ByteReader:
    """
    Read-only view over a byte buffer with little-endian field getters.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._data = bytes(data)

    def __len__(self) -> int:
        return len(self._data)

    def require(self, offset: int, length: int, what: str = "field") -> None:
        """
        Ensure that ``length`` bytes starting at ``offset`` are inside the buffer.

        Raises:
            MalformedHeaderError: If the range is out of bounds
        """
        if offset < 0 or length < 0 or offset + length > len(self._data):
            raise MalformedHeaderError(
                f"Truncated input: {what} needs {length} bytes at offset {offset}, "
                f"buffer has {len(self._data)}"
            )

    def u8(self, offset: int) -> int:
        self.require(offset, 1)
        return self._data[offset]

    def u16(self, offset: int) -> int:
        self.require(offset, 2)
        return _U16.unpack_from(self._data, offset)[0]

    def u32(self, offset: int) -> int:
        self.require(offset, 4)
        return _U32.unpack_from(self._data, offset)[0]

    def i32(self, offset: int) -> int:
        self.require(offset, 4)
        return _I32.unpack_from(self._data, offset)[0]

    def uint(self, offset: int, size: int) -> int:
        """Read an unsigned little-endian integer of 1 to 4 bytes."""
        self.require(offset, size)
        return int.from_bytes(self._data[offset:offset + size], 'little')

    def bytes_at(self, offset: int, length: int) -> bytes:
        """Return a private copy of ``length`` bytes at ``offset``."""
        self.require(offset, length)
        return self._data[offset:offset + length]


class ByteWriter:
    """
    Sequential little-endian writer used to serialize headers field by field.
    """

    def __init__(self):
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def u16(self, value: int) -> 'ByteWriter':
        self._buffer += _U16.pack(value)
        return self

    def u32(self, value: int) -> 'ByteWriter':
        self._buffer += _U32.pack(value)
        return self

    def i32(self, value: int) -> 'ByteWriter':
        self._buffer += _I32.pack(value)
        return self

    def raw(self, data: Union[bytes, bytearray]) -> 'ByteWriter':
        self._buffer += data
        return self

    def zeros(self, count: int) -> 'ByteWriter':
        self._buffer += bytes(count)
        return self

    def getvalue(self) -> bytes:
        return bytes(self._buffer)
