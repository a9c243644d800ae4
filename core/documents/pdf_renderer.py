"""
Rewardify Documents - PDF Renderer
==================================
Generates a minimal, deterministic invoice PDF from an invoice plan dict.

Implementation: pure Python stdlib, no external dependencies.
Generates a valid PDF 1.4 file with Helvetica text (built-in PDF font).

Doctrine:
- Same invoice plan -> same PDF bytes.
- All content is escaped for PDF string encoding.
- Object ids are assigned up front; catalog is 1 and page tree is 2.
"""

from __future__ import annotations

import io
from typing import Any, Optional


# ---------------------------------------------------------------------------
# PDF string encoding
# ---------------------------------------------------------------------------

def _pdf_str(value: Any) -> str:
    """Encode a value as a PDF literal string (parentheses form)."""
    text = str(value) if value is not None else ""
    text = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    # Built-in fonts only cover ASCII reliably
    safe = "".join(c if ord(c) < 128 else "?" for c in text)
    return f"({safe})"


def _fmt(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def _text_width(text: str, size: float) -> float:
    # Helvetica averages roughly half an em per glyph
    return len(text) * size * 0.5


# ---------------------------------------------------------------------------
# Minimal PDF writer
# ---------------------------------------------------------------------------

class _PdfWriter:
    """
    Writes a minimal, valid PDF 1.4 file.

    Page size: A4 (595 x 842 pts)
    Font: Helvetica, Helvetica-Bold, Helvetica-Oblique
    Content model: lines of text with auto-pagination.
    """

    PAGE_W = 595
    PAGE_H = 842
    MARGIN_LEFT = 40
    MARGIN_RIGHT = 40
    MARGIN_TOP = 800
    MARGIN_BOTTOM = 60
    LINE_HEIGHT = 13
    FONT_SIZE_SMALL = 8
    FONT_SIZE_NORMAL = 9
    FONT_SIZE_TITLE = 14
    FONT_SIZE_COMPANY = 16

    FONTS = {"regular": "/F1", "bold": "/F2", "italic": "/F3"}

    def __init__(self, footer: Optional[str] = None):
        self._footer = footer
        self._page_streams: list[str] = []
        self._lines: list[str] = []
        self._y: float = self.MARGIN_TOP

    @property
    def content_width(self) -> float:
        return self.PAGE_W - self.MARGIN_LEFT - self.MARGIN_RIGHT

    # -- stream helpers ------------------------------------------------------

    def text_at(self, x: float, y: float, text: str, *, style: str = "regular", size: float = FONT_SIZE_NORMAL) -> None:
        font = self.FONTS[style]
        self._lines.append(f"BT {font} {size} Tf {x:.2f} {y:.2f} Td {_pdf_str(text)} Tj ET")

    def hline(self, y: float) -> None:
        x1 = self.MARGIN_LEFT
        x2 = self.PAGE_W - self.MARGIN_RIGHT
        self._lines.append(f"0.5 w {x1} {y:.2f} m {x2} {y:.2f} l S")

    # -- page management -----------------------------------------------------

    def _finish_page(self) -> None:
        if self._footer:
            size = self.FONT_SIZE_SMALL
            x = (self.PAGE_W - _text_width(self._footer, size)) / 2
            self.text_at(x, self.MARGIN_BOTTOM - 30, self._footer, style="italic", size=size)
        self._page_streams.append("\n".join(self._lines))
        self._lines = []
        self._y = self.MARGIN_TOP

    def ensure_space(self, needed: float) -> None:
        if self._y - needed < self.MARGIN_BOTTOM:
            self._finish_page()

    # -- content helpers -----------------------------------------------------

    def add_line(self, text: str, *, style: str = "regular", size: float = FONT_SIZE_NORMAL, x: Optional[float] = None) -> None:
        self.ensure_space(self.LINE_HEIGHT)
        self.text_at(self.MARGIN_LEFT if x is None else x, self._y, text, style=style, size=size)
        self._y -= self.LINE_HEIGHT

    def add_centered(self, text: str, *, style: str = "bold", size: float = FONT_SIZE_TITLE) -> None:
        self.ensure_space(size + 6)
        x = (self.PAGE_W - _text_width(text, size)) / 2
        self.text_at(x, self._y, text, style=style, size=size)
        self._y -= size + 6

    def add_pair(self, left: str, right: str) -> None:
        """Two texts on one line, the second right-aligned."""
        self.ensure_space(self.LINE_HEIGHT)
        self.text_at(self.MARGIN_LEFT, self._y, left)
        right_x = self.PAGE_W - self.MARGIN_RIGHT - _text_width(right, self.FONT_SIZE_NORMAL)
        self.text_at(right_x, self._y, right)
        self._y -= self.LINE_HEIGHT

    def add_separator(self) -> None:
        self.ensure_space(8)
        self._y -= 3
        self.hline(self._y)
        self._y -= 9

    def add_vspace(self, pts: float = 8) -> None:
        self._y -= pts

    def add_table_header(self, columns: list[str], col_widths: list[float]) -> None:
        self.ensure_space(self.LINE_HEIGHT + 4)
        x = self.MARGIN_LEFT
        for col_text, width in zip(columns, col_widths):
            self.text_at(x, self._y, col_text, style="bold", size=self.FONT_SIZE_SMALL)
            x += width
        self._y -= 4
        self.hline(self._y)
        self._y -= self.LINE_HEIGHT - 2

    def add_table_row(self, cells: list[Any], col_widths: list[float]) -> None:
        self.ensure_space(self.LINE_HEIGHT)
        x = self.MARGIN_LEFT
        for cell_value, width in zip(cells, col_widths):
            text = _fmt(cell_value)
            max_chars = max(3, int(width / (self.FONT_SIZE_SMALL * 0.5)) - 1)
            if len(text) > max_chars:
                text = text[: max_chars - 1] + "."
            self.text_at(x, self._y, text, size=self.FONT_SIZE_SMALL)
            x += width
        self._y -= self.LINE_HEIGHT

    # -- finalise ------------------------------------------------------------

    def build(self) -> bytes:
        """Flush remaining content, build xref table, return PDF bytes."""
        if self._lines or not self._page_streams:
            self._finish_page()

        # 1 catalog, 2 pages, 3-5 fonts, then (content, page) per page
        font_ids = {"/F1": 3, "/F2": 4, "/F3": 5}
        objects: dict[int, str] = {
            3: "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
            4: "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica-Bold >>",
            5: "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica-Oblique >>",
        }
        font_refs = " ".join(f"{name} {obj_id} 0 R" for name, obj_id in font_ids.items())

        page_ids: list[int] = []
        next_id = 6
        for stream_text in self._page_streams:
            stream_id, page_id = next_id, next_id + 1
            next_id += 2
            length = len(stream_text.encode("latin-1"))
            objects[stream_id] = f"<< /Length {length} >>\nstream\n{stream_text}\nendstream"
            objects[page_id] = (
                f"<< /Type /Page /Parent 2 0 R "
                f"/MediaBox [0 0 {self.PAGE_W} {self.PAGE_H}] "
                f"/Contents {stream_id} 0 R "
                f"/Resources << /Font << {font_refs} >> >> >>"
            )
            page_ids.append(page_id)

        kids = " ".join(f"{pid} 0 R" for pid in page_ids)
        objects[1] = "<< /Type /Catalog /Pages 2 0 R >>"
        objects[2] = f"<< /Type /Pages /Kids [{kids}] /Count {len(page_ids)} >>"

        out = io.BytesIO()
        out.write(b"%PDF-1.4\n")
        out.write(b"%\xe2\xe3\xcf\xd3\n")
        offsets: list[int] = []
        for obj_id in sorted(objects):
            offsets.append(out.tell())
            out.write(f"{obj_id} 0 obj\n".encode("latin-1"))
            out.write(objects[obj_id].encode("latin-1"))
            out.write(b"\nendobj\n")

        xref_offset = out.tell()
        total = len(objects) + 1
        out.write(f"xref\n0 {total}\n".encode("latin-1"))
        out.write(b"0000000000 65535 f \n")
        for offset in offsets:
            out.write(f"{offset:010d} 00000 n \n".encode("latin-1"))
        out.write(
            f"trailer\n<< /Size {total} /Root 1 0 R >>\n"
            f"startxref\n{xref_offset}\n%%EOF\n".encode("latin-1")
        )
        return out.getvalue()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

INVOICE_COLUMNS = [
    "S.No", "Items", "Qty", "Price", "Subtotal", "Disc %",
    "Disc Amt", "Tax %", "Tax Type", "Tax Amt", "Total",
]
_COLUMN_WEIGHTS = [22, 95, 26, 42, 44, 32, 42, 30, 40, 42, 48]


def render_invoice_pdf(plan: dict) -> bytes:
    """
    Render an invoice plan dict to PDF bytes.

    Expected keys: company (name, lines), title, reference_number, date,
    bill_to (list of lines), rows (list of 11-cell rows), summary (list of
    (label, value) pairs), total, terms, footer.

    Raises:
        ValueError: if plan is not a dict.
    """
    if not isinstance(plan, dict):
        raise ValueError("plan must be a dict.")

    writer = _PdfWriter(footer=plan.get("footer"))

    company = plan.get("company") or {}
    if company.get("name"):
        writer.add_line(company["name"], style="bold", size=_PdfWriter.FONT_SIZE_COMPANY)
        writer.add_vspace(4)
    for line in company.get("lines", []):
        writer.add_line(line, size=_PdfWriter.FONT_SIZE_SMALL)

    writer.add_vspace(12)
    writer.add_centered(plan.get("title", "INVOICE"))
    writer.add_separator()
    writer.add_pair(
        f"Ref No: {plan.get('reference_number', '')}",
        f"Date: {plan.get('date', '')}",
    )

    bill_to = plan.get("bill_to") or []
    writer.add_vspace(6)
    writer.add_line("Bill To:", style="bold")
    for line in bill_to:
        writer.add_line(line)

    writer.add_vspace(10)
    scale = writer.content_width / sum(_COLUMN_WEIGHTS)
    col_widths = [w * scale for w in _COLUMN_WEIGHTS]
    writer.add_table_header(INVOICE_COLUMNS, col_widths)
    for row in plan.get("rows", []):
        writer.add_table_row(list(row), col_widths)
    writer.add_separator()

    summary_x = _PdfWriter.PAGE_W - _PdfWriter.MARGIN_RIGHT - 160
    for label, value in plan.get("summary", []):
        writer.add_line(f"{label:<10} {_fmt(float(value))}", x=summary_x)
    writer.add_line(f"Total:     {_fmt(float(plan.get('total', 0)))}", style="bold", x=summary_x)

    terms = plan.get("terms")
    if terms:
        writer.add_vspace(12)
        writer.add_line("Terms & Conditions:", style="bold")
        for line in _wrap(str(terms), int(writer.content_width / (_PdfWriter.FONT_SIZE_SMALL * 0.5))):
            writer.add_line(line, size=_PdfWriter.FONT_SIZE_SMALL)

    return writer.build()


def _wrap(text: str, max_chars: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) > max_chars and current:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines
