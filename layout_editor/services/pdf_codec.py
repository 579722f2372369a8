"""
PDF codec built on PyMuPDF.

extract: PDF bytes → positioned glyph runs → Document (via the element builder)
render:  RenderPlan → new PDF bytes drawn with base-14 fonts
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

import fitz  # PyMuPDF

from layout_editor.core.errors import CodecError
from layout_editor.services.element_builder import build_page
from layout_editor.services.layout_models import (
    DEFAULT_CONFIG,
    Document,
    GlyphRun,
    LayoutConfig,
    PageRuns,
)
from layout_editor.services.reconstructor import RenderPlan

logger = logging.getLogger(__name__)


def _open_pdf(raw_bytes: bytes) -> fitz.Document:
    if not raw_bytes:
        raise CodecError("Empty document")
    try:
        doc = fitz.open(stream=raw_bytes, filetype="pdf")
    except Exception as e:
        raise CodecError(f"Failed to open PDF: {e}") from e
    if doc.page_count == 0:
        doc.close()
        raise CodecError("PDF has no pages")
    return doc


def _span_to_run(span: dict, direction, page_height: float) -> GlyphRun:
    """Express a PyMuPDF span as a bottom-up PDF text matrix run."""
    size = span["size"]
    cos, sin = direction
    x0, y0, x1, y1 = span["bbox"]
    ox, oy = span["origin"]
    return GlyphRun(
        text=span["text"],
        transform=(size * cos, -size * sin, size * sin, size * cos, ox, page_height - oy),
        width=x1 - x0,
        height=y1 - y0,
        font_name=span["font"],
    )


class PdfCodec:
    """Reads and writes PDFs for the editing pipeline."""

    def __init__(self, config: LayoutConfig = DEFAULT_CONFIG):
        self.config = config

    def extract_runs(self, raw_bytes: bytes) -> List[PageRuns]:
        doc = _open_pdf(raw_bytes)
        pages: List[PageRuns] = []
        try:
            for page_num in range(len(doc)):
                page = doc[page_num]
                rect = page.rect
                runs: List[GlyphRun] = []
                blocks = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)["blocks"]
                for block in blocks:
                    if block["type"] != 0:
                        continue
                    for line in block["lines"]:
                        for span in line["spans"]:
                            runs.append(_span_to_run(span, line["dir"], rect.height))
                pages.append(PageRuns(page_num, rect.width, rect.height, tuple(runs)))
        finally:
            doc.close()

        total = sum(len(p.runs) for p in pages)
        logger.info(f"[CODEC] Extracted {total} runs from {len(pages)} pages")
        return pages

    def extract(self, raw_bytes: bytes, file_name: Optional[str] = None) -> Document:
        pages = tuple(build_page(p, self.config) for p in self.extract_runs(raw_bytes))
        metadata = {
            "page_count": len(pages),
            "extracted_at": datetime.now(timezone.utc).isoformat(),
            "file_size": len(raw_bytes),
        }
        if file_name:
            metadata["file_name"] = file_name
        return Document(pages=pages, metadata=metadata)

    def render(self, plan: RenderPlan) -> bytes:
        doc = fitz.open()
        try:
            for page_plan in plan.pages:
                page = doc.new_page(width=page_plan.width, height=page_plan.height)
                for op in page_plan.ops:
                    if not op.text.strip() or op.font_size <= 0:
                        continue
                    page.insert_text(
                        fitz.Point(op.x, op.baseline_y),
                        op.text,
                        fontsize=op.font_size,
                        fontname=op.font_handle,
                        lineheight=op.line_height / op.font_size,
                        color=(0, 0, 0),
                    )
            output = doc.tobytes(garbage=4, deflate=True)
        except Exception as e:
            raise CodecError(f"Failed to render PDF: {e}") from e
        finally:
            doc.close()

        logger.info(f"[CODEC] Rendered {len(plan.pages)} pages ({len(output)} bytes)")
        return output
