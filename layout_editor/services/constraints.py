"""
Character budget calculator.

A coarse average-glyph-width heuristic: it prunes obviously oversized
proposals and gives the content proposer a soft budget. Exact fit is always
re-checked by the fit validator with real font metrics.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict

from layout_editor.services.layout_models import (
    DEFAULT_CONFIG,
    BoundingBox,
    FontDescriptor,
    LayoutConfig,
    TextElement,
)

# Average glyph width as a fraction of the font size.
AVG_CHAR_WIDTH_RATIOS: Dict[str, float] = {
    "Times": 0.5,
    "Helvetica": 0.55,
    "Arial": 0.55,
    "Courier": 0.6,
}
DEFAULT_CHAR_WIDTH_RATIO = 0.55


@dataclass(frozen=True)
class TextConstraints:
    max_chars_per_line: int
    max_lines: int
    max_total_chars: int


def average_char_width(font: FontDescriptor) -> float:
    ratio = DEFAULT_CHAR_WIDTH_RATIO
    for family, family_ratio in AVG_CHAR_WIDTH_RATIOS.items():
        if family in (font.family or ""):
            ratio = family_ratio
            break
    return font.size * ratio


def calculate_constraints(
    bbox: BoundingBox,
    font: FontDescriptor,
    multiline: bool,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> TextConstraints:
    """Derive max chars per line, max lines and total budget from geometry."""
    avg_cw = average_char_width(font)
    if avg_cw <= 0 or bbox.is_malformed:
        return TextConstraints(1, 1, 1)

    max_chars_per_line = max(1, math.floor(bbox.width / avg_cw))
    if multiline:
        line_height = font.size * config.constraint_line_height
        max_lines = max(1, math.floor(bbox.height / line_height))
    else:
        max_lines = 1

    return TextConstraints(
        max_chars_per_line=max_chars_per_line,
        max_lines=max_lines,
        max_total_chars=max_chars_per_line * max_lines,
    )


def build_constraint_summary(element: TextElement) -> Dict[str, Any]:
    """Budget description handed to the content proposer for one element."""
    bbox = element.bbox
    return {
        "max_chars": element.max_total_chars,
        "bbox_description": f"{round(bbox.width)}x{round(bbox.height)}pt",
        "font_size": element.font_size,
        "multiline": element.multiline,
    }
