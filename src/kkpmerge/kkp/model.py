"""
In-memory model of one KKP document.

A document is three ordered tables: the sources that contributed to the
binary, the symbols defined in it, and one ByteRecord per output byte.
Absent references (0xFFFF on the wire) are None here, never an integer.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

MAGIC = b"KK64"

# Wire value for "no symbol / line / source"
NONE_U16 = 0xFFFF

# Largest table a document may declare
MAX_TABLE_SIZE = 0xFFFF

NO_SOURCE_NAME = "<no source>"


def decode_index(value: int) -> Optional[int]:
    """Map a wire u16 to an optional index."""
    return None if value == NONE_U16 else value


def encode_index(value: Optional[int]) -> int:
    """Map an optional index back to its wire u16."""
    return NONE_U16 if value is None else value


@dataclass
class Source:
    """A source file contributing to the binary. Identity is the name."""
    name: str
    packed_size: float = 0.0
    unpacked_size: int = 0


@dataclass
class Symbol:
    """A named, contiguous run of output bytes."""
    name: str
    packed_size: float = 0.0
    unpacked_size: int = 0
    is_code: int = 0  # raw flag byte, nonzero for code
    source_file: int = 0
    position: int = 0
    # Derived from the byte trace on load, not stored on disk
    size: int = 0

    def __repr__(self):
        return f"Symbol({self.name!r}, @{self.position:#x}+{self.size})"


@dataclass
class ByteRecord:
    """Attribution of a single output byte."""
    data: int = 0
    symbol: Optional[int] = None
    packed_size: float = 0.0
    source_line: Optional[int] = None
    source_file: Optional[int] = None


@dataclass
class Document:
    """
    One parsed KKP artifact.

    `source_map` translates local source indices into the global Source
    Registry. It is filled in by the loader and dropped along with the
    document once the merge step for it is done.
    """
    name: str = "<memory>"
    sources: List[Source] = field(default_factory=list)
    symbols: List[Symbol] = field(default_factory=list)
    trace: List[ByteRecord] = field(default_factory=list)
    source_map: List[int] = field(default_factory=list)

    @property
    def byte_count(self) -> int:
        return len(self.trace)

    def symbol_index(self) -> Dict[str, int]:
        """Name -> index of the first symbol with that name."""
        index: Dict[str, int] = {}
        for i, sym in enumerate(self.symbols):
            index.setdefault(sym.name, i)
        return index

    def global_source(self, local: int) -> int:
        """Global registry index for a local source index."""
        return self.source_map[local]
