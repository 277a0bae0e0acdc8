"""
Tests for the hand-built agreement confirmation PDF.
"""

import datetime as dt
import re

import pytest

from velaris.agreement_pdf import (
    agreement_pdf_filename,
    build_agreement_pdf,
    document_id,
    estimate_max_chars,
    wrap_text,
)
from velaris.pdf_writer import (
    ContentStream,
    assemble_pdf,
    escape_pdf_text,
    fmt_num,
    object_offsets,
    unescape_pdf_text,
)
from velaris.store import AgreementSubmission

GENERATED = dt.datetime(2025, 3, 14, 9, 30, tzinfo=dt.timezone.utc)


def _submission(**overrides) -> AgreementSubmission:
    fields = dict(
        id="abc1234567890",
        client_name="Jane Doe",
        company_name="Acme Logistics",
        email="jane@acme.test",
        whatsapp="+62 812 0000 1111",
        project_name="Fleet KPI Dashboard",
        agreed_payment_terms=False,
        understood_scope_change_impact=False,
        signature_name="Jane Doe",
        approved_proceed=True,
        signed_date="2025-03-14",
    )
    fields.update(overrides)
    return AgreementSubmission(**fields)


def _content_stream(pdf: bytes) -> bytes:
    match = re.search(rb"<< /Length (\d+) >>\nstream\n", pdf)
    start = match.end()
    return pdf[start:start + int(match.group(1))]


def _tj(text: str) -> bytes:
    return f"({escape_pdf_text(text)}) Tj".encode("utf-8")


# --------------------------------------------------------------------------- #
# Text layout
# --------------------------------------------------------------------------- #

class TestTextLayout:
    def test_estimate_max_chars(self):
        assert estimate_max_chars(11, 220.5) == 38
        assert estimate_max_chars(9, 463) == 98

    def test_estimate_max_chars_floor_of_eight(self):
        assert estimate_max_chars(11, 10) == 8

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_blank_input_gives_placeholder(self, text):
        assert wrap_text(text, 20) == ["—"]

    def test_whitespace_collapsed(self):
        assert wrap_text("  a   b \n\t c ", 20) == ["a b c"]

    def test_greedy_packing(self):
        assert wrap_text("the quick brown fox", 9) == ["the quick", "brown fox"]

    def test_long_word_hard_split(self):
        assert wrap_text("abcdefghijklmnopqrstuvwxyz", 8) == [
            "abcdefgh", "ijklmnop", "qrstuvwx", "yz",
        ]

    def test_split_remainder_keeps_packing(self):
        assert wrap_text("abcdefghij xy", 8) == ["abcdefgh", "ij xy"]

    @pytest.mark.parametrize("max_chars", [1, 2, 3, 5, 8, 13, 40])
    def test_no_line_exceeds_limit(self, max_chars):
        samples = [
            "Scope changes require an additional written agreement and may affect cost & timeline.",
            "supercalifragilisticexpialidocious is long",
            "a bb ccc dddd eeeee ffffff",
            "x",
        ]
        for text in samples:
            lines = wrap_text(text, max_chars)
            assert lines
            assert all(0 < len(line) <= max_chars for line in lines)
            assert "".join(lines).replace(" ", "") == text.replace(" ", "")

    def test_zero_limit_treated_as_one(self):
        assert wrap_text("ab", 0) == ["a", "b"]

    def test_byte_order_mark_and_nbsp_separate_words(self):
        assert wrap_text("a\ufeffb\u00a0c", 20) == ["a b c"]
        assert wrap_text("\ufeff\u3000", 20) == ["—"]

    def test_information_separators_are_not_whitespace(self):
        assert wrap_text("a\x1cb \x1f", 20) == ["a\x1cb \x1f"]


# --------------------------------------------------------------------------- #
# PDF primitives
# --------------------------------------------------------------------------- #

class TestPdfPrimitives:
    def test_escape(self):
        assert escape_pdf_text("a(b)c\\d") == "a\\(b\\)c\\\\d"

    @pytest.mark.parametrize("text", [
        "plain", "(paren)", "back\\slash", "\\(", "))((", "\\\\", "mixed (a\\b) end",
    ])
    def test_escape_roundtrip_leaves_nothing_bare(self, text):
        escaped = escape_pdf_text(text)
        assert unescape_pdf_text(escaped) == text
        stripped = re.sub(r"\\[\\()]", "", escaped)
        assert not set(stripped) & set("\\()")

    def test_fmt_num(self):
        assert fmt_num(1.0) == "1"
        assert fmt_num(220.5) == "220.5"
        assert fmt_num(48) == "48"
        assert fmt_num(0.04) == "0.04"

    def test_colors_are_clamped(self):
        s = ContentStream()
        s.set_fill_color((1.5, -0.2, 0.5))
        assert s.ops == ["1 0 0.5 rg"]

    def test_draw_text_operators(self):
        s = ContentStream()
        s.draw_text("F2", 12, 66, 678, "Hi (there)")
        assert s.ops == ["BT", "/F2 12 Tf", "1 0 0 1 66 678 Tm", "(Hi \\(there\\)) Tj", "ET"]

    def test_object_offsets_are_cumulative(self):
        assert object_offsets([b"ab", b"cde", b""]) == [9, 11, 14]
        assert object_offsets([b"ab"], start=0) == [0]

    def test_assemble_minimal_document(self):
        pdf = assemble_pdf([b"<< /Type /Catalog /Pages 2 0 R >>", b"<< /Type /Pages /Kids [] /Count 0 >>"])
        assert pdf.startswith(b"%PDF-1.4\n1 0 obj\n")
        assert b"xref\n0 3\n0000000000 65535 f \n0000000009 00000 n \n" in pdf
        assert b"trailer\n<< /Size 3 /Root 1 0 R >>\n" in pdf


# --------------------------------------------------------------------------- #
# Document structure
# --------------------------------------------------------------------------- #

class TestDocumentStructure:
    @pytest.fixture(params=["template", "populated"])
    def pdf(self, request):
        submission = None if request.param == "template" else _submission()
        return build_agreement_pdf(GENERATED, submission)

    def test_header_and_eof(self, pdf):
        assert pdf.startswith(b"%PDF-1.4\n")
        assert pdf.rstrip().endswith(b"%%EOF")

    def test_single_xref_with_all_objects(self, pdf):
        assert pdf.count(b"\nxref\n") == 1
        section = pdf[pdf.index(b"\nxref\n") + 1:pdf.index(b"trailer")]
        lines = section.decode("ascii").splitlines()
        assert lines[1] == "0 7"
        assert lines[2] == "0000000000 65535 f "
        assert len(lines[2:]) == 7

    def test_offsets_point_at_objects(self, pdf):
        section = pdf[pdf.index(b"\nxref\n") + 1:pdf.index(b"trailer")]
        entries = section.decode("ascii").splitlines()[3:]
        for number, entry in enumerate(entries, start=1):
            assert re.fullmatch(r"\d{10} 00000 n ", entry)
            offset = int(entry[:10])
            assert pdf[offset:].startswith(f"{number} 0 obj\n".encode("ascii"))

    def test_startxref_points_at_xref(self, pdf):
        match = re.search(rb"startxref\n(\d+)\n%%EOF", pdf)
        assert pdf[int(match.group(1)):].startswith(b"xref\n")

    def test_trailer(self, pdf):
        assert b"trailer\n<< /Size 7 /Root 1 0 R >>\n" in pdf

    def test_stream_length_is_exact(self, pdf):
        match = re.search(rb"<< /Length (\d+) >>\nstream\n", pdf)
        end = match.end() + int(match.group(1))
        assert pdf[end:].startswith(b"\nendstream\nendobj\n")

    def test_page_and_fonts(self, pdf):
        assert b"/MediaBox [0 0 595 842]" in pdf
        assert b"/Contents 4 0 R" in pdf
        assert b"/Resources << /Font << /F1 5 0 R /F2 6 0 R >> >>" in pdf
        assert b"5 0 obj\n<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>" in pdf
        assert b"6 0 obj\n<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica-Bold >>" in pdf

    def test_boxes_stack_without_overlap(self, pdf):
        ops = _content_stream(pdf).decode("utf-8").split("\n")
        boxes = [
            [float(v) for v in ops[i].split()[:4]]
            for i in range(len(ops) - 1)
            if ops[i].endswith(" re") and ops[i + 1] == "B"
        ]
        assert [(y, h) for _, y, _, h in boxes] == [(548, 156), (324, 208), (120, 188)]
        for upper, lower in zip(boxes, boxes[1:]):
            assert lower[1] + lower[3] < upper[1]

    def test_deterministic(self):
        sub = _submission()
        assert build_agreement_pdf(GENERATED, sub) == build_agreement_pdf(GENERATED, sub)

    def test_generation_date_changes_output(self):
        later = GENERATED + dt.timedelta(days=1)
        assert build_agreement_pdf(GENERATED, None) != build_agreement_pdf(later, None)


# --------------------------------------------------------------------------- #
# Content
# --------------------------------------------------------------------------- #

class TestDocumentContent:
    def test_placeholder_document(self):
        stream = _content_stream(build_agreement_pdf(GENERATED, None))
        assert _tj("Document: AG-TEMPLATE") in stream
        # 5 client fields + 4 clause bullets + signature name + signed date
        assert stream.count(_tj("—")) == 11
        assert stream.count(_tj("NO")) == 3
        assert _tj("YES") not in stream

    def test_populated_document(self):
        stream = _content_stream(build_agreement_pdf(GENERATED, _submission()))
        assert _tj("Document: AG-ABC1234567") in stream
        assert _tj("Jane Doe") in stream
        assert _tj("Acme Logistics") in stream
        assert stream.count(_tj("YES")) == 1
        assert stream.count(_tj("NO")) == 2
        assert _tj("2025-03-14") in stream

    def test_generated_date_in_utc(self):
        moment = dt.datetime(2025, 1, 1, 2, 0, tzinfo=dt.timezone(dt.timedelta(hours=5)))
        stream = _content_stream(build_agreement_pdf(moment, None))
        assert _tj("Generated: 2024-12-31") in stream

    def test_parentheses_in_values_are_escaped(self):
        stream = _content_stream(build_agreement_pdf(GENERATED, _submission(client_name="Jane (JD) Doe")))
        assert b"(Jane \\(JD\\) Doe) Tj" in stream

    def test_blank_project_name_uses_placeholder(self):
        stream = _content_stream(build_agreement_pdf(GENERATED, _submission(project_name=None)))
        assert stream.count(_tj("—")) == 5

    def test_long_value_wraps_within_column(self):
        name = "Maximilian Alexander Konstantin von Hohenberg-Schwarzenfeld"
        stream = _content_stream(build_agreement_pdf(GENERATED, _submission(client_name=name)))
        assert _tj(name) not in stream
        for line in wrap_text(name, estimate_max_chars(11, 220.5)):
            assert _tj(line) in stream

    def test_partial_mapping_record(self):
        pdf = build_agreement_pdf(GENERATED, {"id": "xyz", "approved_proceed": True})
        stream = _content_stream(pdf)
        assert _tj("Document: AG-XYZ") in stream
        assert stream.count(_tj("YES")) == 1

    def test_unencodable_text_is_replaced(self):
        pdf = build_agreement_pdf(GENERATED, {"id": "x", "client_name": "\ud800"})
        assert b"(?) Tj" in _content_stream(pdf)

        section = pdf[pdf.index(b"\nxref\n") + 1:pdf.index(b"trailer")]
        entries = section.decode("ascii").splitlines()[3:]
        assert len(entries) == 6
        for number, entry in enumerate(entries, start=1):
            assert pdf[int(entry[:10]):].startswith(f"{number} 0 obj\n".encode("ascii"))

        match = re.search(rb"<< /Length (\d+) >>\nstream\n", pdf)
        end = match.end() + int(match.group(1))
        assert pdf[end:].startswith(b"\nendstream\nendobj\n")

    def test_document_id(self):
        assert document_id(None) == "AG-TEMPLATE"
        assert document_id(_submission(id="abc1234567890")) == "AG-ABC1234567"
        assert document_id(_submission(id="")) == "AG-TEMPLATE"

    def test_filename(self):
        assert agreement_pdf_filename(None) == "Velaris-Project-Agreement.pdf"
        assert agreement_pdf_filename(_submission()) == "Velaris-Project-Agreement-abc1234567.pdf"


# --------------------------------------------------------------------------- #
# Template script
# --------------------------------------------------------------------------- #

def test_template_script_writes_pdf(tmp_path):
    import importlib.util
    from pathlib import Path

    script = Path(__file__).resolve().parent.parent / "scripts" / "generate_agreement_pdf.py"
    spec = importlib.util.spec_from_file_location("generate_agreement_pdf", script)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    out = module.main([str(tmp_path / "out" / "agreement.pdf")])
    data = out.read_bytes()
    assert data.startswith(b"%PDF-1.4\n")
    assert b"AG-TEMPLATE" in data
