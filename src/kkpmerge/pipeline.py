"""
Merge pipeline - load every input, merge, recompute sizes, write.

Inputs are processed strictly in order, each loaded and merged before the
next is opened. Any fatal error aborts the run before the output file is
created.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from kkpmerge.config import MergeConfig
from kkpmerge.kkp.loader import load_file
from kkpmerge.kkp.writer import encode_document
from kkpmerge.merge.engine import MergeEngine, SymbolMatching
from kkpmerge.merge.report import MergeReport
from kkpmerge.merge.sources import SourceRegistry

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def merge_files(
    paths: Sequence[PathLike],
    output_path: Optional[PathLike] = None,
    config: Optional[MergeConfig] = None,
    report_path: Optional[PathLike] = None,
) -> MergeReport:
    """
    Merge KKP files and write the result.

    Args:
        paths: Primary document first, then references
        output_path: Overrides config.output_path
        config: Run configuration (defaults if omitted)
        report_path: JSON report destination, overrides config.report_path

    Returns:
        MergeReport with per-document stats and all warnings

    Raises:
        KKPError: an input is malformed; nothing is written
        OSError: an input can't be read, or the report or output can't be
            written; a failed report leaves no output file
    """
    if not paths:
        raise ValueError("at least one input document is required")

    config = config or MergeConfig(use_env=False)
    output = Path(output_path) if output_path is not None else config.output_path
    report_path = Path(report_path) if report_path is not None else config.report_path
    encoding = config.string_encoding

    registry = SourceRegistry()
    report = MergeReport(output_path=str(output))
    engine = MergeEngine(registry, SymbolMatching(config.symbol_matching), report)

    for path in paths:
        logger.info(f"{path}")
        doc = load_file(path, registry, encoding, report.diagnostics)
        engine.add(doc)

    data = encode_document(engine.finalize(), encoding)
    if report_path:
        report.write_json(report_path)
    with open(output, "wb") as f:
        f.write(data)
    logger.info(f"Wrote {output} ({len(data)} bytes)")
    logger.info(report.summary())
    return report
