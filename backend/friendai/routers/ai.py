# ai router: journal analysis and text to speech
# analysis always answers (fallback on upstream failure), speech may fail with a fallback hint

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from friendai.dependencies import get_current_user
from friendai.errors import UpstreamError, ValidationError
from friendai.models.journal import AnalysisResult, AnalyzeRequest, SpeakRequest
from friendai.services import ai_service, journal_service, speech_service
from friendai.services.db import get_storage
from friendai.services.storage import Storage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/ai", tags=["ai"])

FALLBACK_MESSAGE = "Use browser text-to-speech instead"


@router.post("/analyze", response_model=AnalysisResult, response_model_by_alias=True)
async def analyze(
    body: AnalyzeRequest,
    user_id: str = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """analyze a journal entry and save it to the user's journal"""
    transcription = (body.transcription or "").strip()
    if not transcription:
        raise ValidationError("Transcription is required")

    logger.info(f"Analyzing journal entry for user {user_id} ({len(transcription)} chars)")
    analysis = await ai_service.analyze_journal(transcription)

    # the analysis is returned even when saving it fails
    try:
        await journal_service.record_entry(
            storage, user_id, transcription, analysis.model_dump(by_alias=True),
        )
    except Exception as e:
        logger.error(f"Failed to save journal entry for user {user_id}: {e}", exc_info=True)

    return analysis


@router.post("/speak")
async def speak(body: SpeakRequest, user_id: str = Depends(get_current_user)):
    """mp3 audio for the given text"""
    text = (body.text or "").strip()
    if not text:
        raise ValidationError("Text is required")

    try:
        audio = await speech_service.synthesize_speech(text)
    except UpstreamError as e:
        # the client falls back to local speech synthesis
        return JSONResponse(
            status_code=e.status_code,
            content={"detail": e.detail, "fallback": True, "message": FALLBACK_MESSAGE},
        )
    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Content-Length": str(len(audio)), "Cache-Control": "no-cache"},
    )
