"""
Fit validator: does a candidate text fit an element's original footprint?

Single-line text is measured once against the padded width and the font size
against the box height. Multiline text (multiline element and an explicit
line break in the text) is measured line by line.
"""

import logging
from typing import Optional

from layout_editor.services.layout_models import (
    DEFAULT_CONFIG,
    FitResult,
    LayoutConfig,
    TextElement,
)
from layout_editor.services.text_measurement import TextMeasurer

logger = logging.getLogger(__name__)


def uses_multiline_mode(text: str, element: TextElement) -> bool:
    return element.multiline and "\n" in text


def available_width(element: TextElement, config: LayoutConfig = DEFAULT_CONFIG) -> float:
    return element.bbox.width - config.padding


def _unmeasured() -> FitResult:
    return FitResult(fits_width=True, fits_height=True, confidence=1.0, measured=False)


def _build_result(
    width: float, height: float, avail_w: float, avail_h: float, line_count: int,
) -> FitResult:
    fits_width = width <= avail_w
    fits_height = height <= avail_h
    ratios = [
        width / avail_w if avail_w > 0 else float("inf"),
        height / avail_h if avail_h > 0 else float("inf"),
    ]
    return FitResult(
        fits_width=fits_width,
        fits_height=fits_height,
        actual_width=width,
        actual_height=height,
        exceeds_width=max(0.0, width - avail_w),
        exceeds_height=max(0.0, height - avail_h),
        confidence=1.0 if fits_width and fits_height else 0.0,
        utilization=max(ratios) if line_count > 1 else ratios[0],
        line_count=line_count,
    )


def validate_single_line(
    text: str, element: TextElement, measurer: TextMeasurer,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> FitResult:
    width = measurer.measure(text, element.font)
    return _build_result(
        width, element.font_size,
        available_width(element, config), element.bbox.height, 1,
    )


def validate_multiline(
    text: str, element: TextElement, measurer: TextMeasurer,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> FitResult:
    lines = text.split("\n")
    line_height = element.font_size * config.line_height_factor

    max_width = 0.0
    total_height = 0.0
    for line in lines:
        if line.strip():
            max_width = max(max_width, measurer.measure(line, element.font))
            total_height += line_height
        else:
            total_height += line_height * 0.5

    return _build_result(
        max_width, total_height,
        available_width(element, config), element.bbox.height, len(lines),
    )


def validate_text_fit(
    text: str,
    element: TextElement,
    measurer: Optional[TextMeasurer],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> FitResult:
    """Check ``text`` against ``element``; fails open when no measurer is given."""
    if measurer is None:
        logger.debug(f"[FIT] No measurer for element {element.id}, treating as fitting")
        return _unmeasured()
    if element.bbox.is_malformed:
        return _unmeasured()

    if uses_multiline_mode(text, element):
        result = validate_multiline(text, element, measurer, config)
    else:
        result = validate_single_line(text, element, measurer, config)

    if not result.fits:
        logger.info(
            f"[FIT] Element {element.id}: {result.actual_width:.1f}x{result.actual_height:.1f} "
            f"exceeds by {result.exceeds_width:.1f}w/{result.exceeds_height:.1f}h"
        )
    return result
