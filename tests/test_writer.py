"""
Tests for the KKP writer.
"""

import io
import math

import pytest
from kkpmerge.kkp import ByteRecord, Document, Source, Symbol, encode_document, load_document
from kkpmerge.kkp.writer import write_file
from kkpmerge.merge import merge_documents

from kkp_factory import kkp_bytes, span, symbol


class TestRoundTrip:
    """Load then write reproduces the input."""

    def test_primary_roundtrip(self, load, primary_bytes):
        assert encode_document(load(primary_bytes)) == primary_bytes

    def test_reference_roundtrip(self, load, reference_bytes):
        assert encode_document(load(reference_bytes)) == reference_bytes

    def test_empty_roundtrip(self, load):
        data = kkp_bytes()
        assert encode_document(load(data)) == data

    def test_out_of_range_symbol_roundtrip(self, load):
        """Symbols with unusable positions are written back as they were."""
        data = kkp_bytes(
            sources=[("a.c", 0.25, 3)],
            symbols=[symbol("gone", 99), symbol("data", 0, is_code=False)],
            trace=span(1, 3, source=0, line=0xFFFE, packed=0.125),
        )
        assert encode_document(load(data)) == data

    def test_is_code_byte_preserved(self, load):
        """The code flag is a raw byte; values other than 0 and 1 survive."""
        data = kkp_bytes(symbols=[("f", 1.0, 0, 2, 0, 0)], trace=span(0, 1))
        doc = load(data)
        assert doc.symbols[0].is_code == 2
        assert encode_document(doc) == data

    def test_source_packed_size_narrowed(self):
        """Source packed sizes are float32 on the wire."""
        doc = Document(sources=[Source("a.c", packed_size=0.1, unpacked_size=1)])
        reloaded = load_document(io.BytesIO(encode_document(doc)))
        assert reloaded.sources[0].packed_size == pytest.approx(0.1, rel=1e-6)
        assert reloaded.sources[0].packed_size != 0.1


class TestLayout:
    """Writer output matches the wire layout byte for byte."""

    def test_model_to_bytes(self):
        doc = Document(
            sources=[Source("s.c", 1.0, 2)],
            symbols=[Symbol("f", packed_size=1.0, is_code=1, source_file=0, position=0)],
            trace=[
                ByteRecord(data=0x90, symbol=0, packed_size=0.5, source_line=3, source_file=0),
                ByteRecord(data=0x00),
            ],
        )
        expected = kkp_bytes(
            sources=[("s.c", 1.0, 2)],
            symbols=[("f", 1.0, 0, 1, 0, 0)],
            trace=[(0x90, 0, 0.5, 3, 0), (0x00, None, 0.0, None, None)],
        )
        assert encode_document(doc) == expected

    def test_write_file(self, tmp_path, load, primary_bytes):
        out = tmp_path / "out.kkp"
        written = write_file(load(primary_bytes), out)
        assert written == len(primary_bytes)
        assert out.read_bytes() == primary_bytes


class TestMergedOutput:
    """Writing the result of a merge."""

    def test_source_total_beyond_float32_saturates(self, registry, load):
        """Summed packed sizes too large for float32 become infinity, not an error."""
        doc = load(kkp_bytes(
            sources=[("big.c", 0.0, 0)],
            symbols=[symbol("f", 0)],
            trace=span(0, 2, source=0, packed=1e300),
        ))
        output = merge_documents([doc], registry)
        assert output.sources[1].packed_size == 2e300

        reloaded = load_document(io.BytesIO(encode_document(output)))
        assert reloaded.sources[1].packed_size == math.inf
        assert reloaded.sources[1].unpacked_size == 2
        # Per-byte sizes are float64 on the wire and keep their value
        assert reloaded.trace[0].packed_size == 1e300
