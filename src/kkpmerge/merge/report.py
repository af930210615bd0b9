"""
Merge report - per-document statistics and collected diagnostics.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from kkpmerge.kkp.errors import Diagnostic


@dataclass
class DocumentStats:
    """What one input contributed to the merge."""
    name: str
    role: str  # "primary" or "reference"
    sources: int = 0
    symbols: int = 0
    bytes: int = 0
    matched: int = 0
    abandoned: int = 0
    unmatched: int = 0
    bytes_overlaid: int = 0


@dataclass
class MergeReport:
    """Everything that happened during a run, for logging or export."""
    documents: List[DocumentStats] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    output_path: str = ""

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "warning"]

    def codes(self) -> List[str]:
        return [d.code for d in self.diagnostics]

    def summary(self) -> str:
        matched = sum(d.matched for d in self.documents)
        overlaid = sum(d.bytes_overlaid for d in self.documents)
        return (f"{len(self.documents)} documents, {matched} symbols matched, "
                f"{overlaid} bytes re-attributed, {len(self.warnings)} warnings")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_path": self.output_path,
            "documents": [asdict(d) for d in self.documents],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def write_json(self, path: Union[str, Path]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
