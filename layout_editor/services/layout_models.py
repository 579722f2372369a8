"""
Layout data model shared by the text-fitting engine.

Everything here is an immutable snapshot: elements are created once during
extraction and edits never mutate them, they produce ValidatedEdit records.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# ─── Configuration ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LayoutConfig:
    """Geometric thresholds used by the builder, validator, truncator and resolver."""
    padding: float = 4.0                    # subtracted from bbox width before fitting
    line_height_factor: float = 1.3         # validator / truncation line height
    constraint_line_height: float = 1.2     # constraint calculator line height
    multiline_factor: float = 1.5           # bbox taller than size * factor → multiline
    same_line_epsilon: float = 5.0          # builder: max y drift on one text line
    merge_gap: float = 10.0                 # builder: max x gap between contiguous runs
    overlap_gap: float = 10.0               # resolver: gap kept before the blocking element
    min_overlap_width: float = 50.0         # resolver: narrowed width never goes below this
    ellipsis: str = "..."


DEFAULT_CONFIG = LayoutConfig()


# ─── Enums ─────────────────────────────────────────────────────────────────

class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"


class TruncationReason(str, Enum):
    NONE = "none"
    WIDTH = "width"
    HEIGHT = "height"


class LayoutIssue(str, Enum):
    """Non-fatal conditions reported on a ValidatedEdit instead of raised."""
    MEASUREMENT_UNAVAILABLE = "measurement_unavailable"
    DANGLING_ELEMENT_REFERENCE = "dangling_element_reference"
    MALFORMED_BOUNDING_BOX = "malformed_bounding_box"
    TRUNCATION_EXHAUSTED = "truncation_exhausted"
    UNRESOLVED_OVERLAP = "unresolved_overlap"
    BOX_OUTSIDE_PAGE = "box_outside_page"


# ─── Geometry ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in page space, y measured down from the page top."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_malformed(self) -> bool:
        values = (self.x, self.y, self.width, self.height)
        if not all(math.isfinite(v) for v in values):
            return True
        return self.width <= 0 or self.height <= 0

    def intersects(self, other: "BoundingBox") -> bool:
        # Closed intervals: boxes that share an edge overlap.
        return (
            self.x <= other.right and other.x <= self.right
            and self.y <= other.bottom and other.y <= self.bottom
        )

    def with_width(self, width: float) -> "BoundingBox":
        return BoundingBox(self.x, self.y, width, self.height)

    def with_height(self, height: float) -> "BoundingBox":
        return BoundingBox(self.x, self.y, self.width, height)

    def within(self, page_width: float, page_height: float) -> bool:
        return (
            self.x >= 0 and self.y >= 0
            and self.right <= page_width and self.bottom <= page_height
        )


@dataclass(frozen=True)
class FontDescriptor:
    family: str
    size: float
    weight: FontWeight = FontWeight.NORMAL

    @property
    def is_bold(self) -> bool:
        return self.weight == FontWeight.BOLD


# ─── Raw extraction input ──────────────────────────────────────────────────

@dataclass(frozen=True)
class GlyphRun:
    """A positioned text run as produced by the document codec.

    ``transform`` is the PDF text matrix (a, b, c, d, e, f) with the origin at
    the page's bottom-left corner; (e, f) is the baseline start.
    """
    text: str
    transform: Tuple[float, float, float, float, float, float]
    width: float
    height: float
    font_name: str = "Helvetica"

    @property
    def font_size(self) -> float:
        a, b = self.transform[0], self.transform[1]
        # one decimal, halves rounded up
        return math.floor(math.hypot(a, b) * 10 + 0.5) / 10

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class PageRuns:
    index: int
    width: float
    height: float
    runs: Tuple[GlyphRun, ...]


# ─── Document model ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TextElement:
    id: str
    page_index: int
    content: str
    bbox: BoundingBox
    font: FontDescriptor
    multiline: bool = False
    max_chars_per_line: int = 1
    max_lines: int = 1
    max_total_chars: int = 1

    @property
    def font_size(self) -> float:
        return self.font.size


@dataclass(frozen=True)
class Page:
    index: int
    width: float
    height: float
    elements: Tuple[TextElement, ...] = ()


@dataclass(frozen=True)
class Document:
    pages: Tuple[Page, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def elements(self) -> List[TextElement]:
        return [el for page in self.pages for el in page.elements]

    def element_index(self) -> Dict[str, TextElement]:
        return {el.id: el for el in self.elements}


# ─── Edit records ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EditProposal:
    element_id: str
    proposed_text: str


@dataclass(frozen=True)
class FitResult:
    fits_width: bool
    fits_height: bool
    actual_width: float = 0.0
    actual_height: float = 0.0
    exceeds_width: float = 0.0
    exceeds_height: float = 0.0
    confidence: float = 1.0
    utilization: float = 0.0
    line_count: int = 1
    measured: bool = True

    @property
    def fits(self) -> bool:
        return self.fits_width and self.fits_height

    @property
    def exceeds_by(self) -> Dict[str, float]:
        return {"width": self.exceeds_width, "height": self.exceeds_height}


@dataclass(frozen=True)
class ValidatedEdit:
    element_id: str
    final_text: str
    original_text: Optional[str] = None
    truncated: bool = False
    truncation_reason: TruncationReason = TruncationReason.NONE
    fits_width: bool = True
    fits_height: bool = True
    has_overlap: bool = False
    truncated_for_overlap: bool = False
    original_length: int = 0
    truncated_length: int = 0
    issues: Tuple[LayoutIssue, ...] = ()
    fit: Optional[FitResult] = None

    @property
    def changed(self) -> bool:
        """Dangling edits have no original text and always count as changed."""
        return self.original_text is None or self.final_text != self.original_text


@dataclass(frozen=True)
class SummaryStats:
    total: int = 0
    edited: int = 0
    truncated: int = 0


@dataclass(frozen=True)
class EditResult:
    validated_edits: Tuple[ValidatedEdit, ...]
    summary_stats: SummaryStats
