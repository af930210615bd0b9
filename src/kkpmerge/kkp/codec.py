"""
Binary codec for the KKP wire format.

Fixed-width little-endian integers, IEEE 754 floats and zero-terminated
strings. Every read either returns a value of exactly the requested width
or raises TruncatedError, so callers never have to test for end of stream.
"""

import math
import struct
from typing import BinaryIO

from kkpmerge.kkp.errors import InvalidFieldError, TruncatedError

# Hard cap on a zero-terminated string, terminator included
STRING_MAX = 0x400

DEFAULT_ENCODING = "utf-8"

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_F32 = struct.Struct("<f")
_F64 = struct.Struct("<d")


class BinaryReader:
    """
    Reads KKP primitives from a binary stream.

    Usage:
        reader = BinaryReader(stream)
        count = reader.read_u32()
        name = reader.read_string()
    """

    def __init__(self, stream: BinaryIO, encoding: str = DEFAULT_ENCODING):
        self.stream = stream
        self.encoding = encoding
        self.offset = 0

    def read_exact(self, size: int) -> bytes:
        """Read exactly `size` bytes or raise TruncatedError."""
        data = self.stream.read(size)
        if len(data) != size:
            raise TruncatedError(
                f"needed {size} bytes, stream ended after {len(data)}",
                offset=self.offset,
            )
        self.offset += size
        return data

    def _unpack(self, fmt: struct.Struct):
        return fmt.unpack(self.read_exact(fmt.size))[0]

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_f32(self) -> float:
        return self._unpack(_F32)

    def read_f64(self) -> float:
        return self._unpack(_F64)

    def read_string(self) -> str:
        """Read bytes up to a zero terminator (at most STRING_MAX bytes in total)."""
        start = self.offset
        buf = bytearray()
        while len(buf) < STRING_MAX:
            ch = self.stream.read(1)
            if not ch:
                raise TruncatedError("unterminated string at end of stream", offset=start)
            self.offset += 1
            if ch == b"\x00":
                return buf.decode(self.encoding, errors="surrogateescape")
            buf += ch
        raise InvalidFieldError(f"string longer than {STRING_MAX - 1} bytes", offset=start)

    def at_eof(self) -> bool:
        """True if nothing is left in the stream. Consumes one byte otherwise."""
        return not self.stream.read(1)


class BinaryWriter:
    """Writes KKP primitives to a binary stream."""

    def __init__(self, stream: BinaryIO, encoding: str = DEFAULT_ENCODING):
        self.stream = stream
        self.encoding = encoding

    def write_bytes(self, data: bytes) -> None:
        self.stream.write(data)

    def write_u8(self, value: int) -> None:
        self.stream.write(_U8.pack(value))

    def write_u16(self, value: int) -> None:
        self.stream.write(_U16.pack(value))

    def write_u32(self, value: int) -> None:
        self.stream.write(_U32.pack(value))

    def write_f32(self, value: float) -> None:
        try:
            data = _F32.pack(value)
        except OverflowError:
            # Too large for float32: saturate to infinity, like a C float cast
            data = _F32.pack(math.copysign(math.inf, value))
        self.stream.write(data)

    def write_f64(self, value: float) -> None:
        self.stream.write(_F64.pack(value))

    def write_string(self, value: str) -> None:
        self.stream.write(value.encode(self.encoding, errors="surrogateescape") + b"\x00")
