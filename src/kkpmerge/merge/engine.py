"""
Merge engine - overlays reference attribution onto the primary layout.

The first document added becomes the merged result. Its bytes, symbols
and layout are authoritative; later documents only contribute source and
line attribution, copied onto bytes of same-named symbols. Byte values
are never compared (relocations make them differ legitimately).
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from kkpmerge.kkp.errors import (
    DISCONTIGUOUS_SYMBOL,
    LOOSE_SYMBOL_MATCH,
    SIZE_MISMATCH,
    SYMBOL_SOURCE_OUT_OF_RANGE,
    Diagnostic,
    warn,
)
from kkpmerge.kkp.model import Document, Symbol
from kkpmerge.merge.report import DocumentStats, MergeReport
from kkpmerge.merge.sizes import recompute_source_sizes
from kkpmerge.merge.sources import NO_SOURCE, SourceRegistry

logger = logging.getLogger(__name__)


class SymbolMatching(Enum):
    """How reference symbols are paired with merged symbols."""
    STRICT = "strict"   # exact name
    PREFIX = "prefix"   # leading '_' ignored, shorter name is a prefix of the longer


def prefix_match(merged_name: str, ref_name: str) -> bool:
    """Loose name comparison used by SymbolMatching.PREFIX."""
    if merged_name.startswith("_"):
        merged_name = merged_name[1:]
    n = min(len(merged_name), len(ref_name))
    return merged_name[:n] == ref_name[:n]


class MergeEngine:
    """
    Accumulates documents into a single merged result.

    Usage:
        engine = MergeEngine(registry)
        for doc in documents:
            engine.add(doc)
        output = engine.finalize()
    """

    def __init__(
        self,
        registry: Optional[SourceRegistry] = None,
        matching: SymbolMatching = SymbolMatching.STRICT,
        report: Optional[MergeReport] = None,
    ):
        self.registry = registry if registry is not None else SourceRegistry()
        self.matching = SymbolMatching(matching)
        self.report = report if report is not None else MergeReport()
        self.merged: Optional[Document] = None
        self._by_name: Dict[str, int] = {}

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return self.report.diagnostics

    def add(self, doc: Document) -> DocumentStats:
        """Merge one document. The first call adopts `doc` as the primary."""
        if self.merged is None:
            stats = self._adopt_primary(doc)
        else:
            stats = self._merge_reference(doc)
        self.report.documents.append(stats)
        return stats

    # =========================================================================
    # Primary
    # =========================================================================

    def _adopt_primary(self, doc: Document) -> DocumentStats:
        """Take `doc` as the merged result, switching it to global source indices."""
        for record in doc.trace:
            if record.source_file is not None:
                record.source_file = doc.global_source(record.source_file)

        for sym in doc.symbols:
            if sym.source_file < len(doc.source_map):
                sym.source_file = doc.global_source(sym.source_file)
            else:
                warn(self.diagnostics, SYMBOL_SOURCE_OUT_OF_RANGE,
                     f"symbol {sym.name}: source index {sym.source_file} not in source table",
                     document=doc.name, symbol=sym.name)
                sym.source_file = NO_SOURCE

        # Local indices are gone from the merged result from here on
        doc.source_map = []
        self.merged = doc
        self._by_name = doc.symbol_index()

        logger.info(f"Primary {doc.name}: {len(doc.symbols)} symbols, {doc.byte_count} bytes")
        return DocumentStats(
            name=doc.name,
            role="primary",
            sources=len(doc.sources),
            symbols=len(doc.symbols),
            bytes=doc.byte_count,
        )

    # =========================================================================
    # References
    # =========================================================================

    def find_match(self, sym: Symbol) -> Optional[int]:
        """Index of the first merged symbol paired with `sym`, or None."""
        if self.matching is SymbolMatching.STRICT:
            return self._by_name.get(sym.name)

        for i, candidate in enumerate(self.merged.symbols):
            if prefix_match(candidate.name, sym.name):
                return i
        return None

    def _merge_reference(self, doc: Document) -> DocumentStats:
        stats = DocumentStats(
            name=doc.name,
            role="reference",
            sources=len(doc.sources),
            symbols=len(doc.symbols),
            bytes=doc.byte_count,
        )

        for si, sym in enumerate(doc.symbols):
            mi = self.find_match(sym)
            if mi is None:
                stats.unmatched += 1
                continue

            overlaid = self._merge_symbol(doc, si, mi)
            if overlaid is None:
                stats.abandoned += 1
            else:
                stats.matched += 1
                stats.bytes_overlaid += overlaid

        logger.info(f"Reference {doc.name}: {stats.matched} matched, "
                    f"{stats.abandoned} abandoned, {stats.unmatched} unmatched")
        return stats

    def _merge_symbol(self, doc: Document, si: int, mi: int) -> Optional[int]:
        """
        Overlay attribution of reference symbol `si` onto merged symbol `mi`.

        Returns:
            Number of merged bytes that received attribution, or None if the
            match was abandoned because either side is not contiguous.
        """
        merged = self.merged
        sym = doc.symbols[si]
        msym = merged.symbols[mi]

        if msym.name != sym.name:
            warn(self.diagnostics, LOOSE_SYMBOL_MATCH,
                 f"matching {msym.name} with {sym.name}",
                 document=doc.name, symbol=sym.name)

        overlap = min(msym.size, sym.size)

        # Validate the whole range before touching anything
        for offset in range(overlap):
            mbyte = merged.trace[msym.position + offset]
            rbyte = doc.trace[sym.position + offset]
            if mbyte.symbol != mi or rbyte.symbol != si:
                warn(self.diagnostics, DISCONTIGUOUS_SYMBOL,
                     f"ignoring discontiguous symbol {sym.name}",
                     document=doc.name, symbol=sym.name)
                return None

        if overlap < msym.size or overlap < sym.size:
            warn(self.diagnostics, SIZE_MISMATCH,
                 f"symbol {sym.name}: size {sym.size} differs from primary size {msym.size}",
                 document=doc.name, symbol=sym.name)

        overlaid = 0
        for offset in range(overlap):
            rbyte = doc.trace[sym.position + offset]
            if rbyte.source_file is None:
                continue
            mbyte = merged.trace[msym.position + offset]
            mbyte.source_file = doc.global_source(rbyte.source_file)
            mbyte.source_line = rbyte.source_line
            overlaid += 1
        return overlaid

    # =========================================================================
    # Output
    # =========================================================================

    def finalize(self) -> Document:
        """
        Recompute per-source sizes and build the output document.

        The output's source table is the global registry; its symbols and
        trace are the merged result's.
        """
        if self.merged is None:
            raise ValueError("no documents were merged")

        recompute_source_sizes(self.registry, self.merged)
        return Document(
            name=self.merged.name,
            sources=self.registry.sources,
            symbols=self.merged.symbols,
            trace=self.merged.trace,
            source_map=list(range(len(self.registry))),
        )


def merge_documents(
    documents: List[Document],
    registry: SourceRegistry,
    matching: SymbolMatching = SymbolMatching.STRICT,
    report: Optional[MergeReport] = None,
) -> Document:
    """
    Merge already-loaded documents (first is primary) and return the output.

    Every document must have been loaded against `registry`.
    """
    engine = MergeEngine(registry, matching, report)
    for doc in documents:
        engine.add(doc)
    return engine.finalize()
