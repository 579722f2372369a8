"""Gemini content proposer: prompt building, reply parsing and HTTP handling."""

import asyncio
import json

import httpx
import pytest

from layout_editor.core.config import settings
from layout_editor.core.errors import ContentProposerError
from layout_editor.llm.gemini_client import (
    GeminiContentProposer,
    build_layout_prompt,
    parse_proposals,
)
from layout_editor.services.layout_models import EditProposal


def _gemini_reply(text: str, status_code: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        handler.requests.append(request)
        return httpx.Response(
            status_code,
            json={"candidates": [{"content": {"parts": [{"text": text}]}}]},
        )
    handler.requests = []
    return handler


class TestParseProposals:

    def test_fenced_json(self):
        reply = '```json\n{"editedElements": [{"id": "0_1", "newText": "Shorter"}]}\n```'
        assert parse_proposals(reply) == [EditProposal("0_1", "Shorter")]

    def test_chatter_around_object(self):
        reply = 'Sure! {"editedElements": [{"id": "0_0", "newText": "A"}]} Hope that helps.'
        assert parse_proposals(reply) == [EditProposal("0_0", "A")]

    def test_malformed_items_skipped(self):
        reply = json.dumps({"editedElements": [
            {"id": "0_0", "newText": "ok"},
            {"id": "0_1"},
            {"newText": "orphan"},
            "junk",
        ]})
        assert parse_proposals(reply) == [EditProposal("0_0", "ok")]

    @pytest.mark.parametrize("reply", [
        "no json here",
        '{"somethingElse": []}',
        '{"editedElements": "nope"}',
        "{not valid json}",
    ])
    def test_invalid_replies_raise(self, reply):
        with pytest.raises(ContentProposerError):
            parse_proposals(reply)


class TestPrompt:

    def test_lists_elements_with_budgets(self, make_element):
        el = make_element("0_3", width=120, height=20, font_size=12, content="Total: $1,200")
        prompt = build_layout_prompt([el], "Translate to French")

        assert "Translate to French" in prompt
        assert '"id": "0_3"' in prompt
        assert '"originalText": "Total: $1,200"' in prompt
        assert f'"maxChars": {el.max_total_chars}' in prompt
        assert "editedElements" in prompt


class TestGeminiContentProposer:

    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
        with pytest.raises(ContentProposerError):
            GeminiContentProposer()

    def test_propose_edits(self, make_element):
        handler = _gemini_reply('{"editedElements": [{"id": "0_0", "newText": "Bonjour"}]}')
        proposer = GeminiContentProposer(
            api_key="test-key", model="gemini-test", transport=httpx.MockTransport(handler),
        )
        el = make_element("0_0", content="Hello")

        proposals = asyncio.run(proposer.propose_edits([el], "Translate to French"))

        assert proposals == [EditProposal("0_0", "Bonjour")]
        request = handler.requests[0]
        assert "models/gemini-test:generateContent" in str(request.url)
        body = json.loads(request.content)
        assert body["generationConfig"]["responseMimeType"] == "application/json"
        assert "Translate to French" in body["contents"][0]["parts"][0]["text"]

    def test_no_elements_skips_request(self):
        handler = _gemini_reply("{}")
        proposer = GeminiContentProposer(api_key="k", transport=httpx.MockTransport(handler))
        assert asyncio.run(proposer.propose_edits([], "anything")) == []
        assert handler.requests == []

    def test_error_status_raises(self, make_element):
        handler = _gemini_reply("", status_code=500)
        proposer = GeminiContentProposer(api_key="k", transport=httpx.MockTransport(handler))
        with pytest.raises(ContentProposerError):
            asyncio.run(proposer.propose_edits([make_element()], "anything"))

    def test_transport_error_raises(self, make_element):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        proposer = GeminiContentProposer(api_key="k", transport=httpx.MockTransport(handler))
        with pytest.raises(ContentProposerError):
            asyncio.run(proposer.propose_edits([make_element()], "anything"))
