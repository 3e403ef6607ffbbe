"""Unit test conftest: no database, OCR binary or network required."""

from __future__ import annotations

import pytest


def _pdf(pages: list[list[str]]) -> bytes:
    fpdf = pytest.importorskip("fpdf")
    pdf = fpdf.FPDF()
    pdf.set_font("Helvetica", size=11)
    for lines in pages:
        pdf.add_page()
        for line in lines:
            pdf.cell(text=line)
            pdf.ln()
    return bytes(pdf.output())


@pytest.fixture
def make_pdf():
    """Factory: list of pages (each a list of lines) -> PDF bytes via fpdf2."""
    return _pdf


@pytest.fixture
def text_pdf_bytes() -> bytes:
    """A 2-page PDF with enough native text per page to skip OCR."""
    return _pdf(
        [
            [
                "FORM 31 Proof of Claim",
                "In the matter of the bankruptcy of Acme Widgets Ltd.",
                "Creditor name: Northern Supply Inc.",
                "Amount claimed: $12,500.00",
            ],
            [
                "The creditor states that the debtor was indebted on the date of bankruptcy.",
                "Dated: April 8, 2025 at Toronto, Ontario.",
            ],
        ]
    )


@pytest.fixture
def blank_pdf_bytes() -> bytes:
    """A 1-page PDF with no text content."""
    return _pdf([[]])


class FakeDocument:
    """In-memory page source: each page is its native text or an exception to raise."""

    def __init__(self, pages, *, render_error: Exception | None = None, size=(612.0, 792.0)):
        self._pages = list(pages)
        self._render_error = render_error
        self._size = size
        self.closed = False
        self.rendered: list[tuple[int, float]] = []

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def page_text(self, page_number: int) -> str:
        page = self._pages[page_number - 1]
        if isinstance(page, Exception):
            raise page
        return page

    def page_size(self, page_number: int):
        return self._size

    def render(self, page_number: int, scale: float):
        from PIL import Image

        if self._render_error is not None:
            raise self._render_error
        self.rendered.append((page_number, scale))
        w, h = self._size
        return Image.new("RGB", (int(w * scale), int(h * scale)), "white")

    def close(self) -> None:
        self.closed = True


class FakeEngine:
    """OCR engine returning canned text per page number (or raising)."""

    name = "fake"

    def __init__(self, results: dict | None = None, default: str = ""):
        self._results = results or {}
        self._default = default
        self.calls: list[int] = []
        self.timeouts: list[float | None] = []

    def recognize(self, image, *, timeout_s=None) -> str:
        self.calls.append(image.page_number)
        self.timeouts.append(timeout_s)
        result = self._results.get(image.page_number, self._default)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_document():
    return FakeDocument


@pytest.fixture
def fake_engine():
    return FakeEngine
