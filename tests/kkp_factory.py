"""
Raw KKP builders for tests.

Files are assembled byte by byte with struct, independently of kkpmerge's
own writer, so loader and writer tests check the wire layout rather than
each other.
"""

import struct


def _u16(value):
    return 0xFFFF if value is None else value


def kkp_bytes(sources=(), symbols=(), trace=(), byte_count=None, magic=b"KK64", trailing=b""):
    """
    Assemble a KKP file.

    Args:
        sources: (name, packed_size, unpacked_size) tuples
        symbols: (name, packed_size, unpacked_size, is_code, source_file, position) tuples
        trace: (data, symbol, packed_size, source_line, source_file) tuples, None = absent
        byte_count: Declared byte count (defaults to len(trace))
    """
    out = bytearray(magic)
    out += struct.pack("<II", len(trace) if byte_count is None else byte_count, len(sources))
    for name, packed, unpacked in sources:
        out += name.encode("utf-8") + b"\x00"
        out += struct.pack("<fI", packed, unpacked)
    out += struct.pack("<I", len(symbols))
    for name, packed, unpacked, is_code, source_file, position in symbols:
        out += name.encode("utf-8") + b"\x00"
        out += struct.pack("<dIBII", packed, unpacked, is_code, source_file, position)
    for data, sym, packed, line, source in trace:
        out += struct.pack("<BHdHH", data, _u16(sym), packed, _u16(line), _u16(source))
    return bytes(out + trailing)


def span(sym, count, source=None, line=None, packed=0.5, data=0x90):
    """`count` trace entries owned by `sym` with uniform attribution."""
    return [(data, sym, packed, line, source) for _ in range(count)]


def symbol(name, position, source_file=0, is_code=True):
    return (name, 1.0, 0, 1 if is_code else 0, source_file, position)
