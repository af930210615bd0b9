"""
kkpmerge.merge - Attribution merge

Source registry, merge engine and size recomputation.
"""

from kkpmerge.merge.sources import SourceRegistry, NO_SOURCE
from kkpmerge.merge.sizes import recompute_source_sizes
from kkpmerge.merge.report import DocumentStats, MergeReport
from kkpmerge.merge.engine import MergeEngine, SymbolMatching, merge_documents, prefix_match

__all__ = [
    "SourceRegistry",
    "NO_SOURCE",
    "recompute_source_sizes",
    "DocumentStats",
    "MergeReport",
    "MergeEngine",
    "SymbolMatching",
    "merge_documents",
    "prefix_match",
]
