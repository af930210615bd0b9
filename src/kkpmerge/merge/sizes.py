"""
Per-source size recomputation.

Source totals in the output are a projection of the final byte
attribution, not values copied from any one input.
"""

from kkpmerge.kkp.model import Document
from kkpmerge.merge.sources import NO_SOURCE, SourceRegistry


def recompute_source_sizes(registry: SourceRegistry, merged: Document) -> None:
    """
    Reset every registry entry and re-accumulate it from `merged`.

    `merged` must already carry global source indices in its trace.
    Unattributed bytes are charged to the "<no source>" entry.
    """
    registry.reset_sizes()
    for record in merged.trace:
        index = NO_SOURCE if record.source_file is None else record.source_file
        source = registry[index]
        source.unpacked_size += 1
        source.packed_size += record.packed_size
