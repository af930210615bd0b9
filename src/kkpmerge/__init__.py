"""
kkpmerge - KKP debug attribution merger

Overlays source/line attribution from reference (debug) builds onto the
byte layout of a packer-produced KKP file.
"""

__version__ = "0.1.0"
__author__ = "kkpmerge contributors"

from kkpmerge.kkp import (
    KKPError,
    MalformedHeaderError,
    TruncatedError,
    InvalidFieldError,
    Document,
    load_document,
    load_file,
    encode_document,
    write_document,
)
from kkpmerge.merge import MergeEngine, MergeReport, SourceRegistry, SymbolMatching
from kkpmerge.pipeline import merge_files
