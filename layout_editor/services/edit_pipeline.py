"""
Edit validation pipeline: proposals → validated, layout-safe final texts.

    proposal → fit check → truncation (if needed) → per-page overlap resolution

Nothing here is fatal. Unknown element ids pass through unchanged, elements
with unusable boxes are accepted as-is, and a missing measurer means every
text is treated as fitting. Each such case is recorded as a LayoutIssue.
"""

import dataclasses
import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from layout_editor.services.fit_validator import validate_text_fit
from layout_editor.services.layout_models import (
    DEFAULT_CONFIG,
    Document,
    EditProposal,
    EditResult,
    FitResult,
    LayoutConfig,
    LayoutIssue,
    Page,
    SummaryStats,
    TextElement,
    TruncationReason,
    ValidatedEdit,
)
from layout_editor.services.overlap_resolver import OverlapCandidate, resolve_overlaps
from layout_editor.services.text_measurement import TextMeasurer
from layout_editor.services.truncation import truncate_with_outcome

logger = logging.getLogger(__name__)


def _dedupe(proposals: Iterable[EditProposal]) -> "OrderedDict[str, EditProposal]":
    unique: "OrderedDict[str, EditProposal]" = OrderedDict()
    for proposal in proposals:
        if proposal.element_id in unique:
            logger.warning(
                f"[PIPELINE] Duplicate proposal for {proposal.element_id}, keeping the last one"
            )
            del unique[proposal.element_id]
        unique[proposal.element_id] = proposal
    return unique


def _dangling_edit(proposal: EditProposal) -> ValidatedEdit:
    logger.warning(
        f"[PIPELINE] Proposal references unknown element {proposal.element_id}, passing through"
    )
    text = proposal.proposed_text
    return ValidatedEdit(
        element_id=proposal.element_id,
        final_text=text,
        original_length=len(text),
        truncated_length=len(text),
        issues=(LayoutIssue.DANGLING_ELEMENT_REFERENCE,),
    )


def _fit_edit(
    element: TextElement,
    page: Optional[Page],
    text: str,
    measurer: Optional[TextMeasurer],
    config: LayoutConfig,
) -> ValidatedEdit:
    issues: List[LayoutIssue] = []
    if measurer is None:
        issues.append(LayoutIssue.MEASUREMENT_UNAVAILABLE)
    if element.bbox.is_malformed:
        logger.warning(f"[PIPELINE] Element {element.id} has malformed bbox, accepting text as-is")
        issues.append(LayoutIssue.MALFORMED_BOUNDING_BOX)
    elif page is not None and not element.bbox.within(page.width, page.height):
        logger.warning(f"[PIPELINE] Element {element.id} extends past page {page.index} bounds")
        issues.append(LayoutIssue.BOX_OUTSIDE_PAGE)

    fit: FitResult = validate_text_fit(text, element, measurer, config)
    if fit.fits:
        return ValidatedEdit(
            element_id=element.id,
            final_text=text,
            original_text=element.content,
            fits_width=True,
            fits_height=True,
            original_length=len(text),
            truncated_length=len(text),
            issues=tuple(issues),
            fit=fit,
        )

    outcome = truncate_with_outcome(text, element, measurer, config)
    if outcome.exhausted:
        issues.append(LayoutIssue.TRUNCATION_EXHAUSTED)
    reason = TruncationReason.HEIGHT if fit.fits_width else TruncationReason.WIDTH
    logger.info(f"[PIPELINE] Truncating element {element.id} due to {reason.value} overflow")
    return ValidatedEdit(
        element_id=element.id,
        final_text=outcome.text,
        original_text=element.content,
        truncated=True,
        truncation_reason=reason,
        fits_width=fit.fits_width,
        fits_height=fit.fits_height,
        original_length=len(text),
        truncated_length=len(outcome.text),
        issues=tuple(issues),
        fit=fit,
    )


def _apply_overlaps(
    edits: "OrderedDict[str, ValidatedEdit]",
    elements: Dict[str, TextElement],
    measurer: Optional[TextMeasurer],
    config: LayoutConfig,
):
    candidates = [
        OverlapCandidate(elements[eid], edit.final_text)
        for eid, edit in edits.items()
        if eid in elements
    ]
    for eid, resolution in resolve_overlaps(candidates, measurer, config).items():
        edit = edits[eid]
        issues = list(edit.issues)
        if resolution.has_overlap:
            issues.append(LayoutIssue.UNRESOLVED_OVERLAP)
        if resolution.exhausted and LayoutIssue.TRUNCATION_EXHAUSTED not in issues:
            issues.append(LayoutIssue.TRUNCATION_EXHAUSTED)
        edits[eid] = dataclasses.replace(
            edit,
            final_text=resolution.text,
            has_overlap=resolution.has_overlap,
            truncated_for_overlap=resolution.truncated_for_overlap,
            truncated_length=len(resolution.text),
            issues=tuple(issues),
        )


def summarize(edits: Iterable[ValidatedEdit]) -> SummaryStats:
    edits = list(edits)
    return SummaryStats(
        total=len(edits),
        edited=sum(1 for e in edits if e.changed),
        truncated=sum(1 for e in edits if e.truncated or e.truncated_for_overlap),
    )


def validate_edits(
    document: Document,
    proposals: Iterable[EditProposal],
    measurer: Optional[TextMeasurer],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> EditResult:
    """Turn proposed texts into layout-safe ValidatedEdits for ``document``."""
    elements = document.element_index()
    pages = {page.index: page for page in document.pages}
    edits: "OrderedDict[str, ValidatedEdit]" = OrderedDict()

    for eid, proposal in _dedupe(proposals).items():
        element = elements.get(eid)
        if element is None:
            edits[eid] = _dangling_edit(proposal)
        else:
            edits[eid] = _fit_edit(
                element, pages.get(element.page_index), proposal.proposed_text, measurer, config,
            )

    _apply_overlaps(edits, elements, measurer, config)

    validated = tuple(edits.values())
    stats = summarize(validated)
    logger.info(
        f"[PIPELINE] {stats.total} proposals → {stats.edited} edited, {stats.truncated} truncated"
    )
    return EditResult(validated_edits=validated, summary_stats=stats)
