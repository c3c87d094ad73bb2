# ai service: journal analysis with gemini via langchain
# any upstream problem (no key, timeout, error, unparsable output) degrades to a
# deterministic keyword-sentiment fallback, analyze_journal never raises

import asyncio
import json
import logging
import math
import re
from typing import Any

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI

from friendai.config import settings
from friendai.errors import UpstreamError
from friendai.models.journal import AnalysisResult

logger = logging.getLogger(__name__)

POSITIVE_WORDS = ["good", "great", "amazing", "wonderful", "happy", "excited", "proud", "accomplished", "successful", "joy"]
NEGATIVE_WORDS = ["bad", "terrible", "awful", "sad", "depressed", "angry", "frustrated", "stressed", "worried", "difficult"]

FALLBACK_SUMMARY = (
    "Thank you for sharing your thoughts with me today. "
    "I appreciate your openness in reflecting on your experiences."
)
FALLBACK_SUGGESTIONS = [
    "Take a few minutes for deep breathing or meditation",
    "Write down three things you're grateful for today",
    "Plan one enjoyable activity for tomorrow",
]
FALLBACK_NUGGET = (
    "Research shows that daily reflection can improve emotional awareness by up to 23%. "
    "You're on the right path!"
)


def get_llm() -> ChatGoogleGenerativeAI:
    """create a gemini llm instance for journal analysis"""
    return ChatGoogleGenerativeAI(
        model=settings.GEMINI_MODEL,
        google_api_key=settings.GEMINI_API_KEY,
        temperature=0.7,
        max_output_tokens=1024,
    )


ANALYSIS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are an empathetic AI wellness companion and personal friend.
Analyze the user's daily journal entry and provide supportive insights.

Instructions:
1. Provide a warm, supportive summary of their day (2-3 sentences)
2. Offer empathetic consolation if they faced challenges (empty if the day was positive)
3. Suggest 2-3 practical, actionable improvements for tomorrow
4. Assign a mood score from 1-10 based on their overall emotional tone
5. Share an uplifting motivational message
6. Include a relevant wellness tip, quote, or interesting fact

Your response MUST be valid JSON in this exact format:
{{
  "summary": "...",
  "consolation": "...",
  "suggestions": ["...", "...", "..."],
  "moodScore": 7,
  "motivation": "...",
  "knowledgeNugget": "..."
}}"""),
    ("human", """--- USER'S JOURNAL ENTRY ---
{transcription}
--- END OF ENTRY ---

Respond with only the JSON object:"""),
])

_chain = None


def get_analysis_chain():
    """get or create the journal analysis chain"""
    global _chain
    if _chain is None:
        _chain = ANALYSIS_PROMPT | get_llm() | StrOutputParser()
    return _chain


def _clamp_mood(value: Any) -> int:
    if isinstance(value, bool):
        return 5
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 5
    if not math.isfinite(score):
        return 5 if math.isnan(score) else (10 if score > 0 else 1)
    score = int(score)
    return max(1, min(10, score))


def parse_ai_response(text: str) -> AnalysisResult:
    """extract and normalize the json object in the model output.
    raises UpstreamError when the output cannot be turned into an analysis."""
    match = re.search(r"\{[\s\S]*\}", text or "")
    raw = match.group(0) if match else (text or "")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise UpstreamError(f"AI response is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise UpstreamError("AI response is not a JSON object")
    if not data.get("summary") or not data.get("suggestions") or not data.get("moodScore"):
        raise UpstreamError("AI response is missing required fields")

    suggestions = data["suggestions"]
    if not isinstance(suggestions, list):
        suggestions = [suggestions]
    suggestions = [str(s).strip() for s in suggestions if s and str(s).strip()]
    if not suggestions:
        raise UpstreamError("AI response has no suggestions")

    return AnalysisResult(
        summary=str(data["summary"]).strip(),
        consolation=str(data.get("consolation") or "").strip(),
        suggestions=suggestions,
        moodScore=_clamp_mood(data["moodScore"]),
        motivation=str(data.get("motivation") or "").strip(),
        knowledgeNugget=str(data.get("knowledgeNugget") or "").strip(),
    )


def fallback_analysis(transcription: str) -> AnalysisResult:
    """keyword-count sentiment over fixed word lists with canned suggestions"""
    lowered = (transcription or "").lower()
    positive = sum(1 for w in POSITIVE_WORDS if w in lowered)
    negative = sum(1 for w in NEGATIVE_WORDS if w in lowered)

    mood_score = 5
    consolation = ""
    motivation = "Every day is a step forward in your journey."
    if positive > negative:
        mood_score = min(9, 6 + positive)
        motivation = "It sounds like you had a positive day! Keep building on this momentum."
    elif negative > positive:
        mood_score = max(2, 5 - negative)
        consolation = "It sounds like today brought some challenges. Remember that difficult days are temporary."
        motivation = "Tomorrow is a fresh start with new possibilities. You've got this!"

    return AnalysisResult(
        summary=FALLBACK_SUMMARY,
        consolation=consolation,
        suggestions=list(FALLBACK_SUGGESTIONS),
        moodScore=mood_score,
        motivation=motivation,
        knowledgeNugget=FALLBACK_NUGGET,
    )


async def _generate(transcription: str) -> str:
    if not settings.GEMINI_API_KEY:
        raise UpstreamError("Gemini API key not configured", status_code=503)
    chain = get_analysis_chain()
    try:
        return await asyncio.wait_for(
            chain.ainvoke({"transcription": transcription}),
            timeout=settings.AI_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        raise UpstreamError(f"Gemini did not respond within {settings.AI_TIMEOUT_SECONDS}s", status_code=504)
    except Exception as e:
        raise UpstreamError(f"Gemini request failed: {e}")


async def analyze_journal(transcription: str) -> AnalysisResult:
    """analyze a journal entry, falling back to keyword sentiment on any upstream failure"""
    try:
        text = await _generate(transcription)
        logger.info(f"Raw AI response: {(text or '')[:200]}...")
        return parse_ai_response(text)
    except UpstreamError as e:
        logger.warning(f"AI analysis unavailable, using fallback: {e.detail}")
        return fallback_analysis(transcription)
    except Exception as e:
        logger.error(f"AI analysis failed, using fallback: {e}", exc_info=True)
        return fallback_analysis(transcription)
