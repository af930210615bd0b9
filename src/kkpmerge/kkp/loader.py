"""
KKP document loader.

Decodes a byte stream into a Document, validating the header, table
bounds and trace structure as it goes. Each source name is interned in
the Source Registry during the same pass, which yields the document's
local-to-global source map.
"""

import logging
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from kkpmerge.kkp.codec import DEFAULT_ENCODING, BinaryReader
from kkpmerge.kkp.errors import (
    SYMBOL_POSITION_OUT_OF_RANGE,
    TRAILING_BYTES,
    Diagnostic,
    InvalidFieldError,
    KKPError,
    MalformedHeaderError,
    warn,
)
from kkpmerge.kkp.model import (
    MAGIC,
    MAX_TABLE_SIZE,
    ByteRecord,
    Document,
    Source,
    Symbol,
    decode_index,
)
from kkpmerge.merge.sources import SourceRegistry

logger = logging.getLogger(__name__)


class DocumentLoader:
    """
    Reads one KKP document from a stream.

    Usage:
        loader = DocumentLoader(stream, registry, name="packer.kkp")
        doc = loader.load()
        loader.diagnostics   # non-fatal warnings
    """

    def __init__(
        self,
        stream: BinaryIO,
        registry: Optional[SourceRegistry] = None,
        name: str = "<stream>",
        encoding: str = DEFAULT_ENCODING,
        diagnostics: Optional[List[Diagnostic]] = None,
    ):
        self.reader = BinaryReader(stream, encoding)
        self.registry = registry if registry is not None else SourceRegistry()
        self.name = name
        self.diagnostics: List[Diagnostic] = diagnostics if diagnostics is not None else []

    def load(self) -> Document:
        """Decode the whole document. Raises KKPError on any fatal problem."""
        try:
            return self._load()
        except KKPError as e:
            if e.path is None:
                e.with_path(self.name)
            raise

    def _invalid(self, message: str) -> InvalidFieldError:
        return InvalidFieldError(message, path=self.name, offset=self.reader.offset)

    def _load(self) -> Document:
        r = self.reader
        doc = Document(name=self.name)

        magic = r.read_exact(len(MAGIC))
        if magic != MAGIC:
            raise MalformedHeaderError(f"bad magic {magic!r}, expected {MAGIC!r}",
                                       path=self.name, offset=0)

        byte_count = r.read_u32()
        source_count = r.read_u32()
        if source_count > MAX_TABLE_SIZE:
            raise self._invalid(f"source count {source_count} exceeds {MAX_TABLE_SIZE}")

        for _ in range(source_count):
            source = Source(
                name=r.read_string(),
                packed_size=r.read_f32(),
                unpacked_size=r.read_u32(),
            )
            doc.sources.append(source)
            doc.source_map.append(self.registry.intern(source.name))

        symbol_count = r.read_u32()
        if symbol_count > MAX_TABLE_SIZE:
            raise self._invalid(f"symbol count {symbol_count} exceeds {MAX_TABLE_SIZE}")

        for _ in range(symbol_count):
            sym = Symbol(
                name=r.read_string(),
                packed_size=r.read_f64(),
                unpacked_size=r.read_u32(),
                is_code=r.read_u8(),
                source_file=r.read_u32(),
                position=r.read_u32(),
            )
            if sym.source_file > MAX_TABLE_SIZE:
                raise self._invalid(f"symbol {sym.name}: source index {sym.source_file} out of range")
            if sym.position >= byte_count:
                warn(self.diagnostics, SYMBOL_POSITION_OUT_OF_RANGE,
                     f"symbol {sym.name}: position {sym.position:08X} out of range",
                     document=self.name, symbol=sym.name)
            doc.symbols.append(sym)

        self._read_trace(doc, byte_count)

        if not r.at_eof():
            warn(self.diagnostics, TRAILING_BYTES, f"junk at end of file {self.name}",
                 document=self.name)

        logger.debug(f"Loaded {self.name}: {len(doc.sources)} sources, "
                     f"{len(doc.symbols)} symbols, {doc.byte_count} bytes")
        return doc

    def _read_trace(self, doc: Document, byte_count: int) -> None:
        r = self.reader
        symbols = doc.symbols
        source_count = len(doc.sources)

        for i in range(byte_count):
            record = ByteRecord(
                data=r.read_u8(),
                symbol=decode_index(r.read_u16()),
                packed_size=r.read_f64(),
                source_line=decode_index(r.read_u16()),
                source_file=decode_index(r.read_u16()),
            )
            if record.source_file is not None and record.source_file >= source_count:
                raise self._invalid(f"byte {i:08X}: source index {record.source_file} out of range")
            doc.trace.append(record)

            if record.symbol is None:
                continue
            if record.symbol >= len(symbols):
                raise self._invalid(f"byte {i:08X}: symbol index {record.symbol} out of range")

            # Symbol size runs from its position to the last byte that names it
            sym = symbols[record.symbol]
            if sym.position >= byte_count:
                continue
            if sym.position > i:
                raise self._invalid(
                    f"byte {i:08X} claimed by symbol {sym.name} starting at {sym.position:08X}")
            sym.size = i + 1 - sym.position


def load_document(
    stream: BinaryIO,
    registry: Optional[SourceRegistry] = None,
    name: str = "<stream>",
    encoding: str = DEFAULT_ENCODING,
    diagnostics: Optional[List[Diagnostic]] = None,
) -> Document:
    """Decode a KKP document from an open binary stream."""
    return DocumentLoader(stream, registry, name, encoding, diagnostics).load()


def load_file(
    path: Union[str, Path],
    registry: Optional[SourceRegistry] = None,
    encoding: str = DEFAULT_ENCODING,
    diagnostics: Optional[List[Diagnostic]] = None,
) -> Document:
    """Decode a KKP document from a file."""
    with open(path, "rb") as f:
        return load_document(f, registry, str(path), encoding, diagnostics)
