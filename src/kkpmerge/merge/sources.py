"""
Global Source Registry.

One deduplicated table of source names shared by every document in a run.
Index 0 is always the "<no source>" sentinel. Entries are only ever
appended, so a global index stays valid for the whole run.
"""

import logging
from typing import Dict, Iterator, List, Optional

from kkpmerge.kkp.model import NO_SOURCE_NAME, Source

logger = logging.getLogger(__name__)

NO_SOURCE = 0


class SourceRegistry:
    """
    Name-keyed, insertion-ordered source table.

    Usage:
        registry = SourceRegistry()
        idx = registry.intern("main.c")
    """

    def __init__(self):
        self._sources: List[Source] = [Source(NO_SOURCE_NAME)]
        self._by_name: Dict[str, int] = {NO_SOURCE_NAME: NO_SOURCE}

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self) -> Iterator[Source]:
        return iter(self._sources)

    def __getitem__(self, index: int) -> Source:
        return self._sources[index]

    def lookup(self, name: str) -> Optional[int]:
        return self._by_name.get(name)

    def intern(self, name: str) -> int:
        """Return the global index for `name`, adding a new entry if needed."""
        index = self._by_name.get(name)
        if index is None:
            index = len(self._sources)
            # Sizes are regenerated from the merged trace at the end
            self._sources.append(Source(name))
            self._by_name[name] = index
            logger.debug(f"Registered source #{index}: {name}")
        return index

    def reset_sizes(self) -> None:
        for source in self._sources:
            source.packed_size = 0.0
            source.unpacked_size = 0

    @property
    def sources(self) -> List[Source]:
        return list(self._sources)
