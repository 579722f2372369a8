"""
Truncation engine: shrink text to the largest form that fits an element.

Single-line text is cut to the longest prefix that still fits once the
ellipsis is appended (binary search, rendered width is non-decreasing in
prefix length). Multiline text keeps as many lines as the box height allows,
truncating over-wide lines individually.
"""

import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from layout_editor.services.fit_validator import available_width, uses_multiline_mode
from layout_editor.services.layout_models import (
    DEFAULT_CONFIG,
    LayoutConfig,
    TextElement,
)
from layout_editor.services.text_measurement import TextMeasurer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TruncationOutcome:
    text: str
    changed: bool = False
    exhausted: bool = False   # nothing fit; first character returned anyway


def _single_line_pseudo(element: TextElement) -> TextElement:
    one_line = element.bbox.with_height(element.font_size * 1.5)
    return dataclasses.replace(element, bbox=one_line, multiline=False)


def _strip_ellipsis(line: str, ellipsis: str) -> str:
    if ellipsis and line.endswith(ellipsis):
        return line[:-len(ellipsis)]
    return line


def truncate_single_line(
    text: str, element: TextElement, measurer: TextMeasurer,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> TruncationOutcome:
    max_width = available_width(element, config)
    if measurer.measure(text, element.font) <= max_width:
        return TruncationOutcome(text)

    ellipsis = config.ellipsis
    left, right = 0, len(text)
    best = 0
    while left <= right:
        mid = (left + right) // 2
        if measurer.measure(text[:mid] + ellipsis, element.font) <= max_width:
            best = mid
            left = mid + 1
        else:
            right = mid - 1

    if best > 0:
        return TruncationOutcome(text[:best] + ellipsis, changed=True)

    logger.warning(
        f"[TRUNCATE] Element {element.id}: nothing fits in {max_width:.1f}pt, "
        f"keeping first character"
    )
    return TruncationOutcome(text[:1], changed=True, exhausted=True)


def truncate_multiline(
    text: str, element: TextElement, measurer: TextMeasurer,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> TruncationOutcome:
    lines = text.split("\n")
    line_height = element.font_size * config.line_height_factor
    max_lines = max(1, math.floor(element.bbox.height / line_height))
    max_width = available_width(element, config)
    one_line = _single_line_pseudo(element)

    kept: List[str] = []
    exhausted = False
    for line in lines:
        if len(kept) >= max_lines:
            break
        if measurer.measure(line, element.font) > max_width:
            outcome = truncate_single_line(line, one_line, measurer, config)
            exhausted = exhausted or outcome.exhausted
            line = _strip_ellipsis(outcome.text, config.ellipsis)
        kept.append(line)

    if len(lines) > max_lines and kept:
        last = kept[-1]
        if len(last) > 3:
            kept[-1] = last[:-3] + config.ellipsis

    result = "\n".join(kept)
    return TruncationOutcome(result, changed=result != text, exhausted=exhausted)


def truncate_with_outcome(
    text: str,
    element: TextElement,
    measurer: Optional[TextMeasurer],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> TruncationOutcome:
    if measurer is None:
        return TruncationOutcome(text)
    if uses_multiline_mode(text, element):
        outcome = truncate_multiline(text, element, measurer, config)
    else:
        outcome = truncate_single_line(text, element, measurer, config)
    if outcome.changed:
        logger.info(
            f"[TRUNCATE] Element {element.id}: {len(text)} → {len(outcome.text)} chars"
        )
    return outcome


def truncate_to_fit(
    text: str,
    element: TextElement,
    measurer: Optional[TextMeasurer],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> str:
    """Return ``text`` unchanged if it fits, else its truncated form."""
    return truncate_with_outcome(text, element, measurer, config).text
