# File: layout_editor/schemas/document.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from layout_editor.services.layout_models import (
    BoundingBox,
    Document,
    EditProposal,
    EditResult,
    FitResult,
    FontDescriptor,
    FontWeight,
    LayoutIssue,
    Page,
    TextElement,
    TruncationReason,
    ValidatedEdit,
)


class BoundingBoxSchema(BaseModel):
    x: float
    y: float
    width: float
    height: float

    def to_domain(self) -> BoundingBox:
        return BoundingBox(self.x, self.y, self.width, self.height)


class FontSchema(BaseModel):
    family: str = "Helvetica"
    size: float
    weight: FontWeight = FontWeight.NORMAL


class TextElementSchema(BaseModel):
    id: str
    page_index: int
    content: str
    bbox: BoundingBoxSchema
    font: FontSchema
    multiline: bool = False
    max_chars_per_line: int = 1
    max_lines: int = 1
    max_total_chars: int = 1

    def to_domain(self) -> TextElement:
        return TextElement(
            id=self.id,
            page_index=self.page_index,
            content=self.content,
            bbox=self.bbox.to_domain(),
            font=FontDescriptor(self.font.family, self.font.size, self.font.weight),
            multiline=self.multiline,
            max_chars_per_line=self.max_chars_per_line,
            max_lines=self.max_lines,
            max_total_chars=self.max_total_chars,
        )

    @classmethod
    def from_domain(cls, el: TextElement) -> "TextElementSchema":
        return cls(
            id=el.id,
            page_index=el.page_index,
            content=el.content,
            bbox=BoundingBoxSchema(x=el.bbox.x, y=el.bbox.y, width=el.bbox.width, height=el.bbox.height),
            font=FontSchema(family=el.font.family, size=el.font.size, weight=el.font.weight),
            multiline=el.multiline,
            max_chars_per_line=el.max_chars_per_line,
            max_lines=el.max_lines,
            max_total_chars=el.max_total_chars,
        )


class PageSchema(BaseModel):
    index: int
    width: float
    height: float
    elements: List[TextElementSchema] = Field(default_factory=list)


class DocumentSchema(BaseModel):
    pages: List[PageSchema]
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> Document:
        return Document(
            pages=tuple(
                Page(p.index, p.width, p.height, tuple(e.to_domain() for e in p.elements))
                for p in self.pages
            ),
            metadata=dict(self.metadata),
        )

    @classmethod
    def from_domain(cls, doc: Document) -> "DocumentSchema":
        return cls(
            pages=[
                PageSchema(
                    index=p.index,
                    width=p.width,
                    height=p.height,
                    elements=[TextElementSchema.from_domain(e) for e in p.elements],
                )
                for p in doc.pages
            ],
            metadata=dict(doc.metadata),
        )


class EditProposalSchema(BaseModel):
    element_id: str
    proposed_text: str

    def to_domain(self) -> EditProposal:
        return EditProposal(self.element_id, self.proposed_text)


class FitSchema(BaseModel):
    fits_width: bool
    fits_height: bool
    actual_width: float
    actual_height: float
    exceeds_by: Dict[str, float]
    confidence: float
    utilization: float
    line_count: int
    measured: bool

    @classmethod
    def from_domain(cls, fit: FitResult) -> "FitSchema":
        return cls(
            fits_width=fit.fits_width,
            fits_height=fit.fits_height,
            actual_width=fit.actual_width,
            actual_height=fit.actual_height,
            exceeds_by=fit.exceeds_by,
            confidence=fit.confidence,
            utilization=fit.utilization,
            line_count=fit.line_count,
            measured=fit.measured,
        )


class ValidatedEditSchema(BaseModel):
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
    issues: List[LayoutIssue] = Field(default_factory=list)
    validation_details: Optional[FitSchema] = None

    def to_domain(self) -> ValidatedEdit:
        return ValidatedEdit(
            element_id=self.element_id,
            final_text=self.final_text,
            original_text=self.original_text,
            truncated=self.truncated,
            truncation_reason=self.truncation_reason,
            fits_width=self.fits_width,
            fits_height=self.fits_height,
            has_overlap=self.has_overlap,
            truncated_for_overlap=self.truncated_for_overlap,
            original_length=self.original_length,
            truncated_length=self.truncated_length,
            issues=tuple(self.issues),
        )

    @classmethod
    def from_domain(cls, edit: ValidatedEdit) -> "ValidatedEditSchema":
        return cls(
            element_id=edit.element_id,
            final_text=edit.final_text,
            original_text=edit.original_text,
            truncated=edit.truncated,
            truncation_reason=edit.truncation_reason,
            fits_width=edit.fits_width,
            fits_height=edit.fits_height,
            has_overlap=edit.has_overlap,
            truncated_for_overlap=edit.truncated_for_overlap,
            original_length=edit.original_length,
            truncated_length=edit.truncated_length,
            issues=list(edit.issues),
            validation_details=FitSchema.from_domain(edit.fit) if edit.fit else None,
        )


class SummaryStatsSchema(BaseModel):
    total: int
    edited: int
    truncated: int


class ValidateRequest(BaseModel):
    document: DocumentSchema
    proposals: List[EditProposalSchema]


class EditRequest(BaseModel):
    document: DocumentSchema
    instruction: str
    element_ids: Optional[List[str]] = None


class EditResponse(BaseModel):
    validated_edits: List[ValidatedEditSchema]
    summary_stats: SummaryStatsSchema

    @classmethod
    def from_domain(cls, result: EditResult) -> "EditResponse":
        stats = result.summary_stats
        return cls(
            validated_edits=[ValidatedEditSchema.from_domain(e) for e in result.validated_edits],
            summary_stats=SummaryStatsSchema(
                total=stats.total, edited=stats.edited, truncated=stats.truncated,
            ),
        )


class GenerateRequest(BaseModel):
    document: DocumentSchema
    edits: List[ValidatedEditSchema] = Field(default_factory=list)
