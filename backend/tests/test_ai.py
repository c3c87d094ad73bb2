# tests for journal analysis: parsing, fallback and the analyze endpoint
# tests for friendai/services/ai_service.py and friendai/routers/ai.py

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from friendai.config import settings
from friendai.errors import UpstreamError
from friendai.services.ai_service import FALLBACK_SUMMARY, analyze_journal, fallback_analysis, parse_ai_response
from friendai.services.storage import JournalQuery

GOOD_OUTPUT = """Here you go:
{
  "summary": " You had a productive day. ",
  "consolation": "",
  "suggestions": ["Sleep early", "Drink water"],
  "moodScore": 8,
  "motivation": "Keep it up",
  "knowledgeNugget": "Walking helps."
}"""


class TestParseResponse:
    """model output normalization"""

    def test_extracts_json_from_prose(self):
        result = parse_ai_response(GOOD_OUTPUT)
        assert result.summary == "You had a productive day."
        assert result.suggestions == ["Sleep early", "Drink water"]
        assert result.mood_score == 8

    def test_clamps_mood(self):
        result = parse_ai_response('{"summary": "s", "suggestions": ["a"], "moodScore": 14}')
        assert result.mood_score == 10

    def test_non_numeric_mood_defaults_to_five(self):
        result = parse_ai_response('{"summary": "s", "suggestions": ["a"], "moodScore": "great"}')
        assert result.mood_score == 5

    @pytest.mark.parametrize("raw, expected", [("1e999", 10), ("-1e999", 1), ("Infinity", 10), ("NaN", 5)])
    def test_non_finite_mood_is_clamped(self, raw, expected):
        result = parse_ai_response('{"summary": "s", "suggestions": ["a"], "moodScore": ' + raw + "}")
        assert result.mood_score == expected

    def test_single_suggestion_becomes_list(self):
        result = parse_ai_response('{"summary": "s", "suggestions": "rest", "moodScore": 4}')
        assert result.suggestions == ["rest"]

    @pytest.mark.parametrize("text", [
        "no json here",
        '{"summary": "s"}',
        '{"summary": "s", "suggestions": [], "moodScore": 5}',
        "{broken",
    ])
    def test_unusable_output_raises(self, text):
        with pytest.raises(UpstreamError):
            parse_ai_response(text)


class TestFallback:
    """keyword sentiment"""

    def test_positive(self):
        result = fallback_analysis("What a great, happy and amazing day")
        assert result.mood_score == 9
        assert result.consolation == ""

    def test_negative(self):
        result = fallback_analysis("I feel sad and stressed")
        assert result.mood_score == 3
        assert result.consolation

    def test_neutral(self):
        result = fallback_analysis("I went to the store")
        assert result.mood_score == 5
        assert len(result.suggestions) == 3


class TestAnalyzeJournal:
    """upstream failures degrade to the fallback"""

    async def test_unparsable_output_uses_fallback(self):
        with patch("friendai.services.ai_service._generate", new=AsyncMock(return_value="not json at all")):
            result = await analyze_journal("a happy day")
        assert 1 <= result.mood_score <= 10
        assert result.suggestions

    async def test_no_api_key_uses_fallback(self):
        result = await analyze_journal("a terrible day")
        assert result.mood_score < 5

    async def test_valid_output_is_used(self):
        with patch("friendai.services.ai_service._generate", new=AsyncMock(return_value=GOOD_OUTPUT)):
            result = await analyze_journal("productive")
        assert result.motivation == "Keep it up"

    async def test_huge_mood_score_still_analyses(self):
        output = '{"summary": "s", "suggestions": ["a"], "moodScore": 1e999}'
        with patch("friendai.services.ai_service._generate", new=AsyncMock(return_value=output)):
            result = await analyze_journal("a good day")
        assert result.mood_score == 10

    async def test_unexpected_parse_error_uses_fallback(self):
        with patch("friendai.services.ai_service._generate", new=AsyncMock(return_value=GOOD_OUTPUT)), \
                patch("friendai.services.ai_service.parse_ai_response", side_effect=RuntimeError("boom")):
            result = await analyze_journal("I feel sad")
        assert result.summary == FALLBACK_SUMMARY

    async def test_timeout_uses_fallback(self, monkeypatch):
        async def slow(_inputs):
            await asyncio.sleep(1)
            return GOOD_OUTPUT

        monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
        monkeypatch.setattr(settings, "AI_TIMEOUT_SECONDS", 0.05)
        chain = MagicMock()
        chain.ainvoke = slow
        with patch("friendai.services.ai_service.get_analysis_chain", return_value=chain):
            result = await analyze_journal("a happy day")
        assert result.summary == FALLBACK_SUMMARY
        assert result.mood_score == 7

    async def test_upstream_exception_uses_fallback(self, monkeypatch):
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
        chain = MagicMock()
        chain.ainvoke = AsyncMock(side_effect=ConnectionError("quota exceeded"))
        with patch("friendai.services.ai_service.get_analysis_chain", return_value=chain):
            result = await analyze_journal("a terrible day")
        assert result.summary == FALLBACK_SUMMARY
        assert result.mood_score < 5
        chain.ainvoke.assert_awaited_once()


class TestAnalyzeEndpoint:
    """analysis plus persistence"""

    async def test_analyze_persists_entry(self, auth_client, storage, user_id):
        with patch("friendai.services.ai_service._generate", new=AsyncMock(return_value=GOOD_OUTPUT)):
            resp = await auth_client.post("/api/ai/analyze", json={"transcription": "Worked hard today"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["moodScore"] == 8
        assert data["knowledgeNugget"] == "Walking helps."

        entries = await storage.journal_entries.find_many(JournalQuery(user_id=user_id))
        assert len(entries) == 1
        assert entries[0].mood_score == 8
        assert entries[0].ai_response["summary"] == "You had a productive day."

    async def test_infinite_mood_score_is_clamped(self, auth_client):
        output = '{"summary": "s", "suggestions": ["a"], "moodScore": Infinity}'
        with patch("friendai.services.ai_service._generate", new=AsyncMock(return_value=output)):
            resp = await auth_client.post("/api/ai/analyze", json={"transcription": "a big day"})
        assert resp.status_code == 200
        assert resp.json()["moodScore"] == 10

    async def test_missing_transcription(self, auth_client):
        resp = await auth_client.post("/api/ai/analyze", json={})
        assert resp.status_code == 400

    async def test_persist_failure_still_returns_analysis(self, auth_client):
        with patch(
            "friendai.services.journal_service.record_entry",
            new=AsyncMock(side_effect=RuntimeError("disk full")),
        ):
            resp = await auth_client.post("/api/ai/analyze", json={"transcription": "a calm day"})
        assert resp.status_code == 200
        assert resp.json()["summary"]

    async def test_journal_lists_analysed_entry(self, auth_client):
        await auth_client.post("/api/ai/analyze", json={"transcription": "first"})
        await auth_client.post("/api/ai/analyze", json={"transcription": "second"})
        entries = (await auth_client.get("/api/journal")).json()
        assert [e["transcription"] for e in entries] == ["second", "first"]
