"""
KKP error taxonomy and non-fatal diagnostics.

Fatal conditions raise a KKPError subclass and abort the whole run.
Non-fatal conditions become Diagnostic records: they are logged and
collected, and processing continues.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class KKPError(Exception):
    """Base class for fatal KKP document errors."""

    kind = "kkp error"

    def __init__(self, message: str, path: Optional[str] = None, offset: Optional[int] = None):
        self.message = message
        self.path = path
        self.offset = offset
        super().__init__(self._format())

    def _format(self) -> str:
        where = ""
        if self.path:
            where += f" in {self.path}"
        if self.offset is not None:
            where += f" at offset 0x{self.offset:08X}"
        return f"{self.kind}{where}: {self.message}"

    def with_path(self, path: str) -> "KKPError":
        """Attach the document path after the fact (codec errors don't know it)."""
        self.path = path
        self.args = (self._format(),)
        return self


class MalformedHeaderError(KKPError):
    """Wrong magic tag."""
    kind = "malformed kkp format"


class TruncatedError(KKPError):
    """Stream ended in the middle of a structure."""
    kind = "truncated kkp format"


class InvalidFieldError(KKPError):
    """Count or index out of bounds, or a structural violation in the trace."""
    kind = "invalid kkp data"


# Diagnostic codes
SYMBOL_POSITION_OUT_OF_RANGE = "symbol-position-out-of-range"
DISCONTIGUOUS_SYMBOL = "discontiguous-symbol"
SIZE_MISMATCH = "size-mismatch"
TRAILING_BYTES = "trailing-bytes"
LOOSE_SYMBOL_MATCH = "loose-symbol-match"
SYMBOL_SOURCE_OUT_OF_RANGE = "symbol-source-out-of-range"


@dataclass
class Diagnostic:
    """A non-fatal problem found while loading or merging."""
    code: str
    message: str
    document: Optional[str] = None
    symbol: Optional[str] = None
    severity: str = "warning"

    def __str__(self):
        prefix = f"{self.document}: " if self.document else ""
        return f"{self.severity}: {prefix}{self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "document": self.document,
            "symbol": self.symbol,
        }


def warn(sink: List[Diagnostic], code: str, message: str,
         document: Optional[str] = None, symbol: Optional[str] = None) -> Diagnostic:
    """Record a warning in `sink` and log it."""
    diag = Diagnostic(code=code, message=message, document=document, symbol=symbol)
    sink.append(diag)
    logger.warning(str(diag))
    return diag
