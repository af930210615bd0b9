"""
Pytest configuration and shared fixtures.
"""

import io
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kkpmerge.kkp import load_document
from kkpmerge.merge import SourceRegistry

from kkp_factory import kkp_bytes, span, symbol


# =============================================================================
# LOADING FIXTURES
# =============================================================================

@pytest.fixture
def registry():
    """Fresh global source registry."""
    return SourceRegistry()


@pytest.fixture
def load(registry):
    """Load raw KKP bytes against the shared registry."""
    def _load(data, name="test.kkp", diagnostics=None):
        return load_document(io.BytesIO(data), registry, name, diagnostics=diagnostics)
    return _load


# =============================================================================
# DOCUMENT FIXTURES
# =============================================================================

@pytest.fixture
def primary_bytes():
    """
    Packer-side document, 16 bytes, one source (p.c).

    0-9    symbol "pre"  (p.c line 1)
    10-13  symbol "A"    (p.c line 2)
    14-15  no symbol, no source
    """
    return kkp_bytes(
        sources=[("p.c", 7.0, 14)],
        symbols=[symbol("pre", 0), symbol("A", 10)],
        trace=span(0, 10, source=0, line=1) + span(1, 4, source=0, line=2) + span(None, 2),
    )


@pytest.fixture
def reference_bytes():
    """Debug-side document: symbol "A" at 0, 4 bytes from ref.c (local source 2) line 7."""
    return kkp_bytes(
        sources=[("x.c", 0.0, 0), ("y.c", 0.0, 0), ("ref.c", 2.0, 4)],
        symbols=[symbol("A", 0, source_file=2)],
        trace=span(0, 4, source=2, line=7),
    )


@pytest.fixture
def kkp_files(tmp_path, primary_bytes, reference_bytes):
    """Primary and reference written to disk."""
    primary = tmp_path / "packer.kkp"
    reference = tmp_path / "debug.kkp"
    primary.write_bytes(primary_bytes)
    reference.write_bytes(reference_bytes)
    return primary, reference


@pytest.fixture
def no_config(monkeypatch, tmp_path):
    """Isolate from user config files and KKPMERGE_* environment."""
    monkeypatch.setattr("kkpmerge.config.CONFIG_SEARCH_PATHS", [])
    for var in ("KKPMERGE_OUTPUT", "KKPMERGE_SYMBOL_MATCHING", "KKPMERGE_LOG_LEVEL", "KKPMERGE_REPORT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
