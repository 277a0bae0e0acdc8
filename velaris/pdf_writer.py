"""
Minimal PDF 1.4 writer without external dependencies.

Covers what a single-page, text-and-rectangles document needs: a content
stream builder for drawing operators and an assembler that numbers the
indirect objects, records their byte offsets and writes the cross-reference
table and trailer.
"""

from __future__ import annotations

from typing import Sequence

HEADER = b"%PDF-1.4\n"

Color = tuple[float, float, float]


def escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def unescape_pdf_text(text: str) -> str:
    """Inverse of :func:`escape_pdf_text` for literal strings it produced."""
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] in "\\()":
            out.append(text[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def fmt_num(value: float) -> str:
    """Shortest textual form of a number: ``1.0`` -> ``1``, ``0.5`` -> ``0.5``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _clamp01(value: float) -> float:
    return max(0, min(1, value))


def rgb(color: Color) -> str:
    return " ".join(fmt_num(_clamp01(c)) for c in color)


class ContentStream:
    """Accumulates content-stream operators, one per line."""

    def __init__(self) -> None:
        self.ops: list[str] = []

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self.ops.append(f"{fmt_num(x)} {fmt_num(y)} {fmt_num(w)} {fmt_num(h)} re")

    def set_fill_color(self, fill: Color) -> None:
        self.ops.append(f"{rgb(fill)} rg")

    def set_stroke_color(self, stroke: Color) -> None:
        self.ops.append(f"{rgb(stroke)} RG")

    def fill_rect(self, x: float, y: float, w: float, h: float, fill: Color) -> None:
        self.set_fill_color(fill)
        self.rect(x, y, w, h)
        self.ops.append("f")

    def fill_stroke_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        fill: Color,
        stroke: Color,
        line_width: float = 1,
    ) -> None:
        self.set_fill_color(fill)
        self.set_stroke_color(stroke)
        self.ops.append(f"{fmt_num(line_width)} w")
        self.rect(x, y, w, h)
        self.ops.append("B")

    def stroke_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        stroke: Color,
        line_width: float = 1,
    ) -> None:
        self.set_stroke_color(stroke)
        self.ops.append(f"{fmt_num(line_width)} w")
        self.ops.append(f"{fmt_num(x1)} {fmt_num(y1)} m")
        self.ops.append(f"{fmt_num(x2)} {fmt_num(y2)} l")
        self.ops.append("S")

    def draw_text(self, font: str, size: float, x: float, y: float, text: str) -> None:
        self.ops.append("BT")
        self.ops.append(f"/{font} {fmt_num(size)} Tf")
        self.ops.append(f"1 0 0 1 {fmt_num(x)} {fmt_num(y)} Tm")
        self.ops.append(f"({escape_pdf_text(text)}) Tj")
        self.ops.append("ET")

    def to_bytes(self) -> bytes:
        return "\n".join(self.ops).encode("utf-8", errors="replace")


# --------------------------------------------------------------------------- #
# Object serialization
# --------------------------------------------------------------------------- #
def stream_object_body(data: bytes) -> bytes:
    return f"<< /Length {len(data)} >>\nstream\n".encode("ascii") + data + b"\nendstream"


def serialize_object(number: int, body: bytes) -> bytes:
    return f"{number} 0 obj\n".encode("ascii") + body + b"\nendobj\n"


def object_offsets(chunks: Sequence[bytes], start: int = len(HEADER)) -> list[int]:
    """Byte offset of each chunk when laid out back to back after *start* bytes."""
    offsets: list[int] = []
    pos = start
    for chunk in chunks:
        offsets.append(pos)
        pos += len(chunk)
    return offsets


def assemble_pdf(bodies: Sequence[bytes]) -> bytes:
    """
    Serialize *bodies* as indirect objects ``1..N`` and wrap them into a file.

    Object 1 must be the document catalog; the trailer names it as root.
    Offsets are derived from cumulative chunk lengths, so the xref entries
    always point at the first byte of each ``N 0 obj`` line.
    """
    objects = [serialize_object(i, body) for i, body in enumerate(bodies, start=1)]
    offsets = object_offsets(objects)
    xref_start = len(HEADER) + sum(len(obj) for obj in objects)
    count = len(objects) + 1

    xref_lines = [f"xref\n0 {count}\n", "0000000000 65535 f \n"]
    xref_lines.extend(f"{off:010d} 00000 n \n" for off in offsets)
    trailer = (
        "trailer\n"
        f"<< /Size {count} /Root 1 0 R >>\n"
        "startxref\n"
        f"{xref_start}\n"
        "%%EOF\n"
    )

    chunks = [HEADER, *objects, "".join(xref_lines).encode("ascii"), trailer.encode("ascii")]
    return b"".join(chunks)
