"""
kkpmerge.kkp - KKP debug attribution format

Binary codec, document model, loader and writer for "KK64" files.
"""

from kkpmerge.kkp.errors import (
    KKPError,
    MalformedHeaderError,
    TruncatedError,
    InvalidFieldError,
    Diagnostic,
)
from kkpmerge.kkp.codec import BinaryReader, BinaryWriter, STRING_MAX
from kkpmerge.kkp.model import (
    MAGIC,
    NONE_U16,
    NO_SOURCE_NAME,
    Source,
    Symbol,
    ByteRecord,
    Document,
)
from kkpmerge.kkp.loader import DocumentLoader, load_document, load_file
from kkpmerge.kkp.writer import write_document, encode_document, write_file

__all__ = [
    # Errors
    "KKPError",
    "MalformedHeaderError",
    "TruncatedError",
    "InvalidFieldError",
    "Diagnostic",
    # Codec
    "BinaryReader",
    "BinaryWriter",
    "STRING_MAX",
    # Model
    "MAGIC",
    "NONE_U16",
    "NO_SOURCE_NAME",
    "Source",
    "Symbol",
    "ByteRecord",
    "Document",
    # Loader / writer
    "DocumentLoader",
    "load_document",
    "load_file",
    "write_document",
    "encode_document",
    "write_file",
]
