# speech service: text to speech through the elevenlabs http api
# failures raise UpstreamError so the caller can tell the client to use local tts

import logging

import httpx

from friendai.config import settings
from friendai.errors import UpstreamError

logger = logging.getLogger(__name__)

ELEVENLABS_TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"


def prepare_text(text: str) -> str:
    limit = settings.TTS_MAX_CHARS
    return text[:limit] + "..." if len(text) > limit else text


async def synthesize_speech(text: str) -> bytes:
    """return mp3 audio for the text"""
    if not settings.ELEVENLABS_API_KEY:
        raise UpstreamError("TTS service not available", status_code=503)

    processed = prepare_text(text)
    logger.info(f"Generating TTS for: {processed[:100]}...")

    try:
        async with httpx.AsyncClient(timeout=settings.TTS_TIMEOUT_SECONDS) as client:
            response = await client.post(
                ELEVENLABS_TTS_URL.format(voice_id=settings.ELEVENLABS_VOICE_ID),
                headers={
                    "Accept": "audio/mpeg",
                    "Content-Type": "application/json",
                    "xi-api-key": settings.ELEVENLABS_API_KEY,
                },
                json={
                    "text": processed,
                    "model_id": settings.ELEVENLABS_MODEL,
                    "voice_settings": {
                        "stability": 0.75,
                        "similarity_boost": 0.85,
                        "style": 0.15,
                        "use_speaker_boost": True,
                    },
                },
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        code = e.response.status_code
        logger.warning(f"ElevenLabs TTS error: HTTP {code}")
        if code == 429:
            raise UpstreamError("TTS rate limit exceeded", status_code=429)
        if code == 401:
            raise UpstreamError("TTS service temporarily unavailable", status_code=503)
        raise UpstreamError("Text-to-speech failed")
    except httpx.HTTPError as e:
        logger.warning(f"ElevenLabs TTS unreachable: {e}")
        raise UpstreamError("TTS service temporarily unavailable", status_code=503)

    return response.content
