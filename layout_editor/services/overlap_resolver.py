"""
Overlap resolver: narrows edited elements that collide with earlier ones.

Elements are placed in reading order (page, top, left). Each element is
checked against the already-placed elements of its page; on the first
collision its width is narrowed to stop before the blocking element and its
text is re-truncated against that width. Only the first collision is handled,
so three or more elements competing for the same space may still collide;
such cases are reported through ``has_overlap``.
"""

import dataclasses
import logging
from dataclasses import dataclass
from itertools import groupby
from typing import Dict, Iterable, List, Optional, Tuple

from layout_editor.services.layout_models import (
    DEFAULT_CONFIG,
    BoundingBox,
    LayoutConfig,
    TextElement,
)
from layout_editor.services.text_measurement import TextMeasurer
from layout_editor.services.truncation import truncate_with_outcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlapCandidate:
    element: TextElement
    text: str


@dataclass(frozen=True)
class OverlapResolution:
    element_id: str
    text: str
    bbox: BoundingBox              # footprint after any narrowing
    has_overlap: bool = False
    truncated_for_overlap: bool = False
    exhausted: bool = False
    blocked_by: Optional[str] = None


def _reading_order_key(candidate: OverlapCandidate) -> Tuple[int, float, float]:
    el = candidate.element
    return (el.page_index, el.bbox.y, el.bbox.x)


def _resolve_one(
    candidate: OverlapCandidate,
    placed: List[OverlapResolution],
    measurer: Optional[TextMeasurer],
    config: LayoutConfig,
) -> OverlapResolution:
    element = candidate.element
    bbox = element.bbox

    # Placed elements block with their narrowed footprint, not the original bbox.
    other = next((p for p in placed if bbox.intersects(p.bbox)), None)
    if other is None:
        return OverlapResolution(element.id, candidate.text, bbox)

    adjusted_width = max(config.min_overlap_width, other.bbox.x - bbox.x - config.overlap_gap)
    if 0 < adjusted_width < bbox.width:
        narrowed = bbox.with_width(adjusted_width)
        pseudo = dataclasses.replace(element, bbox=narrowed)
        outcome = truncate_with_outcome(candidate.text, pseudo, measurer, config)
        still_overlaps = narrowed.intersects(other.bbox)
        if still_overlaps:
            logger.warning(
                f"[OVERLAP] Element {element.id} narrowed to {adjusted_width:.1f}pt "
                f"but still collides with {other.element_id}"
            )
        else:
            logger.info(
                f"[OVERLAP] Element {element.id} narrowed to {adjusted_width:.1f}pt "
                f"to clear {other.element_id}"
            )
        return OverlapResolution(
            element_id=element.id,
            text=outcome.text,
            bbox=narrowed,
            has_overlap=still_overlaps,
            truncated_for_overlap=True,
            exhausted=outcome.exhausted,
            blocked_by=other.element_id,
        )

    logger.warning(
        f"[OVERLAP] Element {element.id} collides with {other.element_id}; "
        f"adjusted width {adjusted_width:.1f}pt does not narrow it, leaving as-is"
    )
    return OverlapResolution(
        element_id=element.id,
        text=candidate.text,
        bbox=bbox,
        has_overlap=True,
        blocked_by=other.element_id,
    )


def resolve_page_overlaps(
    candidates: Iterable[OverlapCandidate],
    measurer: Optional[TextMeasurer],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> List[OverlapResolution]:
    """Resolve one page's candidates in reading order."""
    placed: List[OverlapResolution] = []
    for candidate in sorted(candidates, key=_reading_order_key):
        placed.append(_resolve_one(candidate, placed, measurer, config))
    return placed


def resolve_overlaps(
    candidates: Iterable[OverlapCandidate],
    measurer: Optional[TextMeasurer],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Dict[str, OverlapResolution]:
    """Resolve collisions page by page; malformed boxes are skipped.

    Returns resolutions keyed by element id.
    """
    usable = []
    for candidate in candidates:
        if candidate.element.bbox.is_malformed:
            logger.warning(
                f"[OVERLAP] Element {candidate.element.id} has malformed bbox, "
                f"excluded from overlap checks"
            )
            continue
        usable.append(candidate)

    resolutions: Dict[str, OverlapResolution] = {}
    usable.sort(key=_reading_order_key)
    for page_index, page_candidates in groupby(usable, key=lambda c: c.element.page_index):
        for resolution in resolve_page_overlaps(page_candidates, measurer, config):
            resolutions[resolution.element_id] = resolution

    unresolved = sum(1 for r in resolutions.values() if r.has_overlap)
    if unresolved:
        logger.warning(f"[OVERLAP] {unresolved} element(s) left with unresolved overlap")
    return resolutions
