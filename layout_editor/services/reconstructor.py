"""
Document reconstructor: merges original geometry with final texts.

Produces a codec-independent render plan (one same-size page per original
page, one draw operation per element). Element geometry is copied, never
recomputed; only the text changes.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Protocol, Tuple

from layout_editor.services.font_map import resolve_font_handle
from layout_editor.services.layout_models import (
    DEFAULT_CONFIG,
    Document,
    LayoutConfig,
    ValidatedEdit,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrawTextOp:
    element_id: str
    text: str
    x: float
    y: float               # top of the element box, top-down
    baseline_y: float      # first baseline, top-down
    font_size: float
    font_handle: str
    line_height: float
    max_width: float
    edited: bool = False


@dataclass(frozen=True)
class PagePlan:
    index: int
    width: float
    height: float
    ops: Tuple[DrawTextOp, ...] = ()


@dataclass(frozen=True)
class RenderPlan:
    pages: Tuple[PagePlan, ...]
    metadata: Dict


class DocumentRenderer(Protocol):
    def render(self, plan: RenderPlan) -> bytes:
        ...


def final_texts(edits: Iterable[ValidatedEdit]) -> Dict[str, str]:
    return {edit.element_id: edit.final_text for edit in edits}


def build_render_plan(
    document: Document,
    edits: Iterable[ValidatedEdit],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> RenderPlan:
    texts = final_texts(edits)
    known_ids = set()
    pages: List[PagePlan] = []

    for page in document.pages:
        ops: List[DrawTextOp] = []
        for element in page.elements:
            known_ids.add(element.id)
            edited = element.id in texts
            text = texts[element.id] if edited else element.content
            ops.append(DrawTextOp(
                element_id=element.id,
                text=text,
                x=element.bbox.x,
                y=element.bbox.y,
                baseline_y=element.bbox.y + element.font_size,
                font_size=element.font_size,
                font_handle=resolve_font_handle(element.font),
                line_height=element.font_size * config.constraint_line_height,
                max_width=element.bbox.width,
                edited=edited,
            ))
        pages.append(PagePlan(page.index, page.width, page.height, tuple(ops)))

    ignored = [eid for eid in texts if eid not in known_ids]
    if ignored:
        logger.warning(f"[RENDER] Ignoring edits for unknown elements: {ignored}")

    edited_count = sum(1 for p in pages for op in p.ops if op.edited)
    logger.info(f"[RENDER] Plan: {len(pages)} pages, {edited_count} edited elements")
    return RenderPlan(pages=tuple(pages), metadata=dict(document.metadata))


def reconstruct(
    document: Document,
    edits: Iterable[ValidatedEdit],
    renderer: DocumentRenderer,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> bytes:
    """Render ``document`` with ``edits`` applied through the given codec."""
    return renderer.render(build_render_plan(document, edits, config))
