"""Shared fixtures: a deterministic measurer and element/document factories."""

from typing import Optional

import fitz
import pytest

from layout_editor.services.constraints import calculate_constraints
from layout_editor.services.layout_models import (
    BoundingBox,
    Document,
    FontDescriptor,
    FontWeight,
    Page,
    TextElement,
)


class CharWidthMeasurer:
    """Every character is ``char_width`` points wide, whatever the font."""

    def __init__(self, char_width: float = 10.0):
        self.char_width = char_width
        self.calls = 0

    def measure(self, text: str, font: FontDescriptor) -> float:
        self.calls += 1
        return len(text) * self.char_width


@pytest.fixture
def measurer():
    return CharWidthMeasurer(10.0)


@pytest.fixture
def make_element():
    def _make(
        element_id: str = "0_0",
        x: float = 0,
        y: float = 0,
        width: float = 100,
        height: float = 20,
        font_size: float = 12,
        content: str = "Hello",
        family: str = "Helvetica",
        weight: FontWeight = FontWeight.NORMAL,
        page_index: int = 0,
        multiline: Optional[bool] = None,
    ) -> TextElement:
        bbox = BoundingBox(x, y, width, height)
        font = FontDescriptor(family, font_size, weight)
        if multiline is None:
            multiline = height > font_size * 1.5
        constraints = calculate_constraints(bbox, font, multiline)
        return TextElement(
            id=element_id,
            page_index=page_index,
            content=content,
            bbox=bbox,
            font=font,
            multiline=multiline,
            max_chars_per_line=constraints.max_chars_per_line,
            max_lines=constraints.max_lines,
            max_total_chars=constraints.max_total_chars,
        )
    return _make


@pytest.fixture
def make_document():
    def _make(*elements: TextElement, width: float = 612, height: float = 792) -> Document:
        page_indexes = sorted({el.page_index for el in elements}) or [0]
        pages = tuple(
            Page(
                index=idx,
                width=width,
                height=height,
                elements=tuple(el for el in elements if el.page_index == idx),
            )
            for idx in page_indexes
        )
        return Document(pages=pages, metadata={"page_count": len(pages)})
    return _make


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Two-page PDF with Helvetica and Times-Bold text."""
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_text((72, 100), "Quarterly Report", fontsize=18, fontname="tibo")
    page.insert_text((72, 160), "Revenue grew by 12 percent", fontsize=12, fontname="helv")
    page.insert_text((72, 220), "Contact: sales@example.com", fontsize=10, fontname="cour")
    page = doc.new_page(width=612, height=792)
    page.insert_text((72, 100), "Appendix", fontsize=14, fontname="helv")
    data = doc.tobytes()
    doc.close()
    return data
