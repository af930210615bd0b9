"""
KKP document writer.

Field order and widths mirror the loader exactly, so a document that is
loaded and written back unchanged reproduces its input (source packed
sizes only to float32 precision, which is their wire width).
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Union

from kkpmerge.kkp.codec import DEFAULT_ENCODING, BinaryWriter
from kkpmerge.kkp.model import MAGIC, Document, encode_index

logger = logging.getLogger(__name__)


def write_document(doc: Document, stream: BinaryIO, encoding: str = DEFAULT_ENCODING) -> None:
    """Serialize `doc` to a binary stream."""
    w = BinaryWriter(stream, encoding)

    w.write_bytes(MAGIC)
    w.write_u32(doc.byte_count)

    w.write_u32(len(doc.sources))
    for source in doc.sources:
        w.write_string(source.name)
        w.write_f32(source.packed_size)
        w.write_u32(source.unpacked_size)

    w.write_u32(len(doc.symbols))
    for sym in doc.symbols:
        w.write_string(sym.name)
        w.write_f64(sym.packed_size)
        w.write_u32(sym.unpacked_size)
        w.write_u8(sym.is_code)
        w.write_u32(sym.source_file)
        w.write_u32(sym.position)

    for record in doc.trace:
        w.write_u8(record.data)
        w.write_u16(encode_index(record.symbol))
        w.write_f64(record.packed_size)
        w.write_u16(encode_index(record.source_line))
        w.write_u16(encode_index(record.source_file))


def encode_document(doc: Document, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Serialize `doc` to bytes."""
    buf = io.BytesIO()
    write_document(doc, buf, encoding)
    return buf.getvalue()


def write_file(doc: Document, path: Union[str, Path], encoding: str = DEFAULT_ENCODING) -> int:
    """
    Write `doc` to `path`.

    The document is encoded in memory first so a failure during encoding
    never leaves a partial file behind.

    Returns:
        Number of bytes written
    """
    data = encode_document(doc, encoding)
    with open(path, "wb") as f:
        f.write(data)
    logger.info(f"Wrote {path} ({len(data)} bytes)")
    return len(data)
