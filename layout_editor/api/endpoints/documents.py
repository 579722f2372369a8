# File: layout_editor/api/endpoints/documents.py
"""
Document editing API: extract, validate proposals, prompt-based edit and generate.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response
from typing import Any
import logging

from layout_editor.core.config import settings
from layout_editor.core.errors import CodecError, ContentProposerError
from layout_editor.llm.gemini_client import GeminiContentProposer
from layout_editor.schemas.document import (
    DocumentSchema,
    EditRequest,
    EditResponse,
    GenerateRequest,
    ValidateRequest,
)
from layout_editor.services.edit_pipeline import validate_edits
from layout_editor.services.pdf_codec import PdfCodec
from layout_editor.services.reconstructor import reconstruct
from layout_editor.services.text_measurement import FitzTextMeasurer

router = APIRouter()
logger = logging.getLogger(__name__)


def get_codec() -> PdfCodec:
    return PdfCodec(settings.layout_config())


def get_measurer() -> FitzTextMeasurer:
    # One measurer per request; instances are not shared between workers.
    return FitzTextMeasurer()


def get_content_proposer() -> GeminiContentProposer:
    try:
        return GeminiContentProposer()
    except ContentProposerError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/extract", response_model=DocumentSchema)
async def extract_document(
    pdf: UploadFile = File(...),
    codec: PdfCodec = Depends(get_codec),
) -> Any:
    """Parse an uploaded PDF into text elements with layout constraints."""
    if not (pdf.filename or "").lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="File must be a PDF")

    content = await pdf.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File size must be less than {settings.MAX_UPLOAD_MB}MB",
        )

    try:
        document = codec.extract(content, file_name=pdf.filename)
    except CodecError as e:
        logger.error(f"[API] Failed to extract {pdf.filename}: {e}")
        raise HTTPException(status_code=422, detail=f"Failed to extract PDF content: {e}")

    logger.info(f"[API] Extracted {len(document.elements)} elements from {pdf.filename}")
    return DocumentSchema.from_domain(document)


@router.post("/validate", response_model=EditResponse)
def validate_proposals(
    request: ValidateRequest,
    measurer: FitzTextMeasurer = Depends(get_measurer),
) -> Any:
    """Validate proposed texts against the layout and truncate where needed."""
    document = request.document.to_domain()
    proposals = [p.to_domain() for p in request.proposals]
    result = validate_edits(document, proposals, measurer, settings.layout_config())
    return EditResponse.from_domain(result)


@router.post("/edit", response_model=EditResponse)
async def edit_document(
    request: EditRequest,
    proposer: GeminiContentProposer = Depends(get_content_proposer),
    measurer: FitzTextMeasurer = Depends(get_measurer),
) -> Any:
    """
    Apply a prompt-based edit:
    1. Ask the content proposer for replacement texts within each element's budget
    2. Validate, truncate and resolve overlaps
    """
    document = request.document.to_domain()
    elements = document.elements
    if request.element_ids:
        wanted = set(request.element_ids)
        elements = [el for el in elements if el.id in wanted]
    if not elements:
        raise HTTPException(status_code=400, detail="Document has no text elements to edit")

    try:
        proposals = await proposer.propose_edits(elements, request.instruction)
    except ContentProposerError as e:
        logger.error(f"[API] Content proposer failed: {e}")
        raise HTTPException(status_code=502, detail=f"AI processing failed: {e}")

    result = validate_edits(document, proposals, measurer, settings.layout_config())
    return EditResponse.from_domain(result)


@router.post("/generate")
def generate_document(
    request: GenerateRequest,
    codec: PdfCodec = Depends(get_codec),
) -> Response:
    """Render the document with final texts into a new PDF."""
    document = request.document.to_domain()
    edits = [e.to_domain() for e in request.edits]
    try:
        pdf_bytes = reconstruct(document, edits, codec, settings.layout_config())
    except CodecError as e:
        logger.error(f"[API] Failed to generate PDF: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to generate PDF: {e}")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="edited-document.pdf"'},
    )
