# File: layout_editor/llm/gemini_client.py
"""Content proposer backed by the Google Gemini API.

Turns an editing instruction plus the document's text elements into
EditProposal values. Each element is sent with its character budget so the
model can stay inside the original footprint; the layout pipeline still
validates and truncates whatever comes back.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import httpx

from layout_editor.core.config import settings
from layout_editor.core.errors import ContentProposerError
from layout_editor.services.constraints import build_constraint_summary
from layout_editor.services.layout_models import EditProposal, TextElement

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional PDF content editor with strict layout preservation "
    "requirements. Replacement text MUST fit in the original space."
)


def build_layout_prompt(elements: Sequence[TextElement], instruction: str) -> str:
    """User prompt listing every element with its layout budget."""
    described = []
    for element in elements:
        summary = build_constraint_summary(element)
        described.append({
            "id": element.id,
            "originalText": element.content,
            "maxChars": summary["max_chars"],
            "bbox": summary["bbox_description"],
            "fontSize": summary["font_size"],
            "multiline": summary["multiline"],
        })

    return f"""CRITICAL LAYOUT RULES:
1. NEVER exceed maxChars - text MUST fit in the original space
2. Preserve numerical values, dates, and important data when possible
3. Use abbreviations if content is too long
4. Only include elements you actually changed
5. Return ONLY valid JSON without any markdown formatting

EDITING INSTRUCTION: {instruction}

DOCUMENT ELEMENTS WITH CONSTRAINTS:
{json.dumps(described, indent=2)}

Return ONLY this JSON structure:
{{"editedElements": [{{"id": "element_id", "newText": "edited text within character limits"}}]}}"""


def parse_proposals(text: str) -> List[EditProposal]:
    """Parse the model's JSON reply into proposals.

    Tolerates markdown fences and chatter around the JSON object. Items
    without an id or text are skipped.
    """
    cleaned = re.sub(r"```(?:json)?", "", text or "").strip()
    match = re.search(r"\{[\s\S]*\}", cleaned)
    if not match:
        raise ContentProposerError("No JSON object in content proposer response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ContentProposerError(f"Invalid JSON from content proposer: {e}") from e

    items = parsed.get("editedElements") if isinstance(parsed, dict) else None
    if not isinstance(items, list):
        raise ContentProposerError("Invalid response structure - missing editedElements array")

    proposals: List[EditProposal] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        element_id = item.get("id")
        new_text = item.get("newText")
        if not isinstance(element_id, str) or not isinstance(new_text, str):
            logger.warning(f"[GEMINI] Skipping malformed edited element: {item}")
            continue
        proposals.append(EditProposal(element_id=element_id, proposed_text=new_text))
    return proposals


def _extract_text(data: Dict[str, Any]) -> str:
    parts = data.get("candidates", [{}])[0].get("content", {}).get("parts", [])
    return "".join(p.get("text", "") for p in parts)


class GeminiContentProposer:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.GEMINI_API_KEY
        if not self.api_key:
            raise ContentProposerError("GEMINI_API_KEY environment variable not set")
        self.model = model or settings.GEMINI_MODEL
        self.base_url = "https://generativelanguage.googleapis.com/v1beta"
        self._transport = transport
        logger.info(f"Initialized GeminiContentProposer with model: {self.model}")

    def _endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent?key={self.api_key}"

    @staticmethod
    def _build_body(system_prompt: str, user_prompt: str, max_tokens: int = 8192) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "generationConfig": {
                "maxOutputTokens": max_tokens,
                "temperature": 0.3,
                "responseMimeType": "application/json",
            },
        }

    async def _send_request(self, system_prompt: str, user_prompt: str) -> str:
        logger.info(f"Sending request to Gemini API with model: {self.model}")
        body = self._build_body(system_prompt, user_prompt)
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(
                    self._endpoint(),
                    json=body,
                    headers={"Content-Type": "application/json"},
                    timeout=settings.GEMINI_TIMEOUT,
                )
        except httpx.HTTPError as e:
            logger.error(f"Error in Gemini API request: {e}")
            raise ContentProposerError(f"Gemini request failed: {e}") from e

        if resp.status_code != 200:
            logger.error(f"Gemini API failed {resp.status_code}: {resp.text[:500]}")
            raise ContentProposerError(f"Gemini API failed with status {resp.status_code}")

        text = _extract_text(resp.json())
        logger.info(f"Received Gemini response (first 100 chars): {text[:100]}...")
        return text

    async def propose_edits(
        self, elements: Sequence[TextElement], instruction: str,
    ) -> List[EditProposal]:
        if not elements:
            return []
        text = await self._send_request(SYSTEM_PROMPT, build_layout_prompt(elements, instruction))
        proposals = parse_proposals(text)
        logger.info(f"[GEMINI] {len(proposals)} proposals for {len(elements)} elements")
        return proposals
