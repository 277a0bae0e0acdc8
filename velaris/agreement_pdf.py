"""
Project agreement confirmation PDF.

Lays out a single A4 page from an agreement submission: a header band, three
stacked boxes (client information, agreement summary, digital confirmation)
and a footer. There is no text measurement; line breaks come from an average
glyph width estimate.
"""

from __future__ import annotations

import datetime as dt
import math
import re
from collections.abc import Mapping
from typing import Any, Optional

from velaris.config import (
    AGREEMENT_CLAUSES,
    AGREEMENT_DOC_PREFIX,
    AGREEMENT_PDF_BASENAME,
    AGREEMENT_TEMPLATE_DOC_ID,
    BRAND_NAME,
    BRAND_TAGLINE,
)
from velaris.pdf_writer import Color, ContentStream, assemble_pdf, stream_object_body

PLACEHOLDER = "—"

PAGE_W = 595   # ISO A4 width (pt)
PAGE_H = 842   # ISO A4 height (pt)
MARGIN = 48
HEADER_H = 112
BOX_GAP = 16
BOX_W = PAGE_W - MARGIN * 2
BOX_PAD = 18
CHAR_WIDTH_RATIO = 0.52

# Whitespace as matched by the JavaScript \s class (no \x1c-\x1f, plus \ufeff).
_WHITESPACE = re.compile(
    "[\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]+"
)

REGULAR = "F1"
BOLD = "F2"

HEADER_BG: Color = (0.04, 0.06, 0.12)
ACCENT: Color = (0.10, 0.78, 0.73)
WHITE: Color = (1, 1, 1)
MUTED_LIGHT: Color = (0.82, 0.86, 0.92)
BOX_FILL: Color = (0.97, 0.98, 0.99)
BOX_STROKE: Color = (0.88, 0.90, 0.93)
RULE: Color = (0.90, 0.92, 0.95)
TITLE: Color = (0.06, 0.09, 0.16)
LABEL: Color = (0.34, 0.39, 0.47)
VALUE: Color = (0.08, 0.11, 0.17)
BODY: Color = (0.13, 0.16, 0.22)
PAGE_NO: Color = (0.55, 0.60, 0.68)


# --------------------------------------------------------------------------- #
# Text layout
# --------------------------------------------------------------------------- #
def estimate_max_chars(font_size: float, width: float) -> int:
    """Characters per line for *width* points, assuming glyphs ~0.52 em wide."""
    return max(8, math.floor(width / (font_size * CHAR_WIDTH_RATIO)))


def wrap_text(text: Optional[str], max_chars: int) -> list[str]:
    """
    Greedy word wrap on whitespace.

    Words longer than *max_chars* are split into *max_chars*-sized fragments,
    so no returned line is longer than *max_chars*. Blank input yields a
    single placeholder line.
    """
    limit = max(1, max_chars)
    words = [w for w in _WHITESPACE.split(str(text if text is not None else "")) if w]
    if not words:
        return [PLACEHOLDER]

    lines: list[str] = []
    line = ""
    for word in words:
        candidate = f"{line} {word}" if line else word
        if len(candidate) <= limit:
            line = candidate
            continue
        if line:
            lines.append(line)
        while len(word) > limit:
            lines.append(word[:limit])
            word = word[limit:]
        line = word

    if line:
        lines.append(line)
    return lines


# --------------------------------------------------------------------------- #
# Submission access
# --------------------------------------------------------------------------- #
def _field(submission: Any, name: str) -> Any:
    if submission is None:
        return None
    if isinstance(submission, Mapping):
        return submission.get(name)
    return getattr(submission, name, None)


def _text(submission: Any, name: str) -> str:
    value = _field(submission, name)
    if value is None:
        return PLACEHOLDER
    value = str(value)
    return value if _WHITESPACE.sub("", value) else PLACEHOLDER


def _yes_no(submission: Any, name: str) -> str:
    return "YES" if _field(submission, name) else "NO"


def document_id(submission: Any) -> str:
    sid = _field(submission, "id")
    if not sid:
        return AGREEMENT_TEMPLATE_DOC_ID
    return f"{AGREEMENT_DOC_PREFIX}{str(sid)[:10].upper()}"


def agreement_pdf_filename(submission: Any) -> str:
    sid = _field(submission, "id")
    suffix = f"-{str(sid)[:10]}" if sid else ""
    return f"{AGREEMENT_PDF_BASENAME}{suffix}.pdf"


def _utc_date(moment: dt.datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(dt.timezone.utc)
    return moment.strftime("%Y-%m-%d")


# --------------------------------------------------------------------------- #
# Page drawing
# --------------------------------------------------------------------------- #
class _AgreementPage:
    """Drawing state for one page: the content stream and the box cursor."""

    def __init__(self) -> None:
        self.stream = ContentStream()
        self.cursor_top = PAGE_H - HEADER_H - 26

    def wrapped_text(
        self,
        font: str,
        size: float,
        x: float,
        y: float,
        width: float,
        line_height: float,
        text: Optional[str],
    ) -> float:
        """Draw *text* wrapped to *width*; return the baseline below the last line."""
        for line in wrap_text(text, estimate_max_chars(size, width)):
            self.stream.draw_text(font, size, x, y, line)
            y -= line_height
        return y

    def box(self, title: str, height: float) -> tuple[float, float]:
        y_top = self.cursor_top
        y_bottom = y_top - height

        self.stream.fill_stroke_rect(MARGIN, y_bottom, BOX_W, height, BOX_FILL, BOX_STROKE, 1)
        self.stream.stroke_line(MARGIN, y_top - 38, MARGIN + BOX_W, y_top - 38, RULE, 1)
        self.stream.set_fill_color(TITLE)
        self.stream.draw_text(BOLD, 12, MARGIN + BOX_PAD, y_top - 26, title.upper())

        self.cursor_top = y_bottom - BOX_GAP
        return y_top, y_bottom

    def field(self, x: float, y: float, width: float, label: str, value: str) -> None:
        self.stream.set_fill_color(LABEL)
        self.stream.draw_text(REGULAR, 8, x, y, label.upper())
        self.stream.set_fill_color(VALUE)
        self.wrapped_text(BOLD, 11, x, y - 16, width, 14, value)


def _draw_header(page: _AgreementPage, generated_at: dt.datetime, doc_id: str) -> None:
    s = page.stream
    s.fill_rect(0, PAGE_H - HEADER_H, PAGE_W, HEADER_H, HEADER_BG)
    s.fill_rect(0, PAGE_H - HEADER_H, PAGE_W, 3, ACCENT)

    s.set_fill_color(WHITE)
    s.draw_text(BOLD, 22, MARGIN, PAGE_H - 54, BRAND_NAME)
    s.draw_text(REGULAR, 11, MARGIN, PAGE_H - 78, "Project Agreement Confirmation")

    s.set_fill_color(MUTED_LIGHT)
    s.draw_text(REGULAR, 9, MARGIN, PAGE_H - 96, f"Generated: {_utc_date(generated_at)}")
    s.draw_text(REGULAR, 9, PAGE_W - MARGIN - 180, PAGE_H - 96, f"Document: {doc_id}")


def _draw_client_box(page: _AgreementPage, submission: Any) -> None:
    y_top, _ = page.box("Client Information", 156)

    col_gap = 22
    col_w = (BOX_W - col_gap - BOX_PAD * 2) / 2
    left_x = MARGIN + BOX_PAD
    right_x = left_x + col_w + col_gap
    row_y = y_top - 60

    page.field(left_x, row_y, col_w, "Client Name", _text(submission, "client_name"))
    page.field(right_x, row_y, col_w, "Company", _text(submission, "company_name"))
    page.field(left_x, row_y - 56, col_w, "Email", _text(submission, "email"))
    page.field(right_x, row_y - 56, col_w, "WhatsApp", _text(submission, "whatsapp"))
    page.field(
        left_x, row_y - 112, BOX_W - BOX_PAD * 2, "Project Name",
        _text(submission, "project_name"),
    )


def _draw_agreement_box(page: _AgreementPage) -> None:
    y_top, y_bottom = page.box("Agreement Summary", 208)
    x = MARGIN + BOX_PAD
    y = y_top - 58

    page.stream.set_fill_color(BODY)
    for clause in AGREEMENT_CLAUSES:
        page.stream.draw_text(BOLD, 11, x, y, PLACEHOLDER)
        y = page.wrapped_text(REGULAR, 11, x + 14, y, BOX_W - BOX_PAD * 2 - 14, 16, clause) - 6

    page.stream.set_fill_color(LABEL)
    page.wrapped_text(
        REGULAR, 9, x, y_bottom + 24, BOX_W - BOX_PAD * 2, 12,
        "This document is generated from a digital confirmation submitted via "
        "the Project Agreement page.",
    )


def _draw_confirmation_box(page: _AgreementPage, submission: Any) -> None:
    y_top, y_bottom = page.box("Digital Confirmation", 188)
    x = MARGIN + BOX_PAD
    y = y_top - 60

    rows = [
        ("Agreed payment terms", _yes_no(submission, "agreed_payment_terms")),
        ("Understood scope change impact", _yes_no(submission, "understood_scope_change_impact")),
        ("Approved proceed", _yes_no(submission, "approved_proceed")),
        ("Signature name", _text(submission, "signature_name")),
        ("Signed date", _text(submission, "signed_date")),
    ]
    for key, value in rows:
        page.stream.set_fill_color(LABEL)
        page.stream.draw_text(REGULAR, 9, x, y, key.upper())
        page.stream.set_fill_color(VALUE)
        page.stream.draw_text(BOLD, 11, x + 210, y - 1, value)
        y -= 22

    page.stream.set_fill_color(LABEL)
    page.wrapped_text(
        REGULAR, 9, x, y_bottom + 24, BOX_W - BOX_PAD * 2, 12,
        f"For any questions, contact {BRAND_NAME} via the email in your proposal or invoice.",
    )


def _draw_footer(page: _AgreementPage) -> None:
    page.stream.set_fill_color(LABEL)
    page.stream.draw_text(REGULAR, 9, MARGIN, 28, f"{BRAND_NAME} • {BRAND_TAGLINE}")
    page.stream.set_fill_color(PAGE_NO)
    page.stream.draw_text(REGULAR, 9, PAGE_W - MARGIN - 54, 28, "1 / 1")


def build_agreement_pdf(generated_at: dt.datetime, submission: Any = None) -> bytes:
    """
    Render the agreement confirmation for *submission* as PDF bytes.

    Parameters
    ----------
    generated_at : datetime
        Shown as the generation date (UTC calendar day for aware datetimes).
    submission : AgreementSubmission | Mapping | None
        The stored submission. ``None`` renders the blank template with every
        field showing a placeholder. Missing attributes never raise.

    Returns
    -------
    bytes
        A complete PDF 1.4 file. Identical inputs give identical bytes.
    """
    page = _AgreementPage()
    _draw_header(page, generated_at, document_id(submission))
    _draw_client_box(page, submission)
    _draw_agreement_box(page)
    _draw_confirmation_box(page, submission)
    _draw_footer(page)

    page_obj = " ".join([
        "<< /Type /Page",
        "/Parent 2 0 R",
        f"/MediaBox [0 0 {PAGE_W} {PAGE_H}]",
        "/Contents 4 0 R",
        f"/Resources << /Font << /{REGULAR} 5 0 R /{BOLD} 6 0 R >> >>",
        ">>",
    ])
    return assemble_pdf([
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        page_obj.encode("ascii"),
        stream_object_body(page.stream.to_bytes()),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica-Bold >>",
    ])
