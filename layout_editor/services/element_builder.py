"""
Element builder: groups raw glyph runs into logical text elements.

Single forward pass in document order. A run joins the open element when it
sits on the same text line and starts right where the element ends;
otherwise the element is closed and the run opens a new one.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List

from layout_editor.services.constraints import calculate_constraints
from layout_editor.services.layout_models import (
    DEFAULT_CONFIG,
    BoundingBox,
    FontDescriptor,
    FontWeight,
    GlyphRun,
    LayoutConfig,
    Page,
    PageRuns,
    TextElement,
)

logger = logging.getLogger(__name__)


@dataclass
class _Accumulator:
    """Mutable open element while scanning a page."""
    content: str
    x: float
    y: float
    width: float
    height: float
    font_size: float
    font_name: str

    def accepts(self, x: float, y: float, config: LayoutConfig) -> bool:
        same_line = abs(y - self.y) < config.same_line_epsilon
        contiguous = abs(x - (self.x + self.width)) < config.merge_gap
        return same_line and contiguous

    def extend(self, text: str, width: float):
        self.content += text
        self.width += width


def _run_geometry(run: GlyphRun, page_height: float):
    """Convert a bottom-up baseline transform into a top-down box origin."""
    x = run.transform[4]
    y = page_height - run.transform[5] - run.height
    return x, y


def _font_weight(font_name: str) -> FontWeight:
    return FontWeight.BOLD if "Bold" in (font_name or "") else FontWeight.NORMAL


def _finalize(acc: _Accumulator, page_index: int, seq: int, config: LayoutConfig) -> TextElement:
    bbox = BoundingBox(acc.x, acc.y, acc.width, acc.height)
    font = FontDescriptor(
        family=acc.font_name,
        size=acc.font_size,
        weight=_font_weight(acc.font_name),
    )
    multiline = bbox.height > font.size * config.multiline_factor
    constraints = calculate_constraints(bbox, font, multiline, config)
    if bbox.is_malformed:
        logger.warning(
            f"[BUILD] Element {page_index}_{seq} has malformed bbox "
            f"({bbox.width:.1f}x{bbox.height:.1f})"
        )
    return TextElement(
        id=f"{page_index}_{seq}",
        page_index=page_index,
        content=acc.content,
        bbox=bbox,
        font=font,
        multiline=multiline,
        max_chars_per_line=constraints.max_chars_per_line,
        max_lines=constraints.max_lines,
        max_total_chars=constraints.max_total_chars,
    )


def build_elements(
    page_index: int,
    page_height: float,
    runs: Iterable[GlyphRun],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> List[TextElement]:
    """Group one page's runs into text elements, preserving input order."""
    elements: List[TextElement] = []
    current = None

    for run in runs:
        if run.is_blank:
            continue
        x, y = _run_geometry(run, page_height)

        if current is not None and current.accepts(x, y, config):
            current.extend(run.text, run.width)
            continue

        if current is not None:
            elements.append(_finalize(current, page_index, len(elements), config))
        current = _Accumulator(
            content=run.text,
            x=x,
            y=y,
            width=run.width,
            height=run.height,
            font_size=run.font_size,
            font_name=run.font_name,
        )

    if current is not None:
        elements.append(_finalize(current, page_index, len(elements), config))

    return elements


def build_page(page_runs: PageRuns, config: LayoutConfig = DEFAULT_CONFIG) -> Page:
    elements = build_elements(page_runs.index, page_runs.height, page_runs.runs, config)
    logger.info(
        f"[BUILD] Page {page_runs.index}: {len(page_runs.runs)} runs → {len(elements)} elements"
    )
    return Page(
        index=page_runs.index,
        width=page_runs.width,
        height=page_runs.height,
        elements=tuple(elements),
    )
