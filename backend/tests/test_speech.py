# tests for text to speech: elevenlabs client and the speak endpoint
# tests for friendai/services/speech_service.py, http calls are mocked with httpx.MockTransport

import httpx
import pytest

from friendai.config import settings
from friendai.errors import UpstreamError
from friendai.services import speech_service
from friendai.services.speech_service import prepare_text, synthesize_speech

MP3_BYTES = b"ID3\x04fake-mp3"


@pytest.fixture
def elevenlabs(monkeypatch):
    """configure a key and route httpx clients through a mock transport.
    returns the list of captured requests and a setter for the response."""
    monkeypatch.setattr(settings, "ELEVENLABS_API_KEY", "test-key")
    captured = []
    state = {"response": httpx.Response(200, content=MP3_BYTES)}

    def handler(request):
        captured.append(request)
        return state["response"]

    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(speech_service.httpx, "AsyncClient", client_factory)

    def respond_with(response):
        state["response"] = response

    return captured, respond_with


class TestPrepareText:
    """length limit"""

    def test_short_text_unchanged(self):
        assert prepare_text("hello") == "hello"

    def test_long_text_truncated(self):
        text = "a" * (settings.TTS_MAX_CHARS + 50)
        prepared = prepare_text(text)
        assert prepared.endswith("...")
        assert len(prepared) == settings.TTS_MAX_CHARS + 3


class TestSynthesize:
    """elevenlabs request and error mapping"""

    async def test_not_configured(self):
        with pytest.raises(UpstreamError) as exc:
            await synthesize_speech("hello")
        assert exc.value.status_code == 503

    async def test_returns_audio(self, elevenlabs):
        captured, _ = elevenlabs
        audio = await synthesize_speech("hello there")
        assert audio == MP3_BYTES
        request = captured[0]
        assert request.headers["xi-api-key"] == "test-key"
        assert request.url.path.endswith(settings.ELEVENLABS_VOICE_ID)

    @pytest.mark.parametrize("status, expected", [(429, 429), (401, 503), (500, 502)])
    async def test_http_errors(self, elevenlabs, status, expected):
        _, respond_with = elevenlabs
        respond_with(httpx.Response(status))
        with pytest.raises(UpstreamError) as exc:
            await synthesize_speech("hello")
        assert exc.value.status_code == expected


class TestSpeakEndpoint:
    """audio or a fallback hint"""

    async def test_speak_returns_mpeg(self, auth_client, elevenlabs):
        resp = await auth_client.post("/api/ai/speak", json={"text": "hello"})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "audio/mpeg"
        assert resp.content == MP3_BYTES

    async def test_speak_unconfigured_returns_fallback(self, auth_client):
        resp = await auth_client.post("/api/ai/speak", json={"text": "hello"})
        assert resp.status_code == 503
        data = resp.json()
        assert data["fallback"] is True
        assert data["message"]

    async def test_speak_requires_text(self, auth_client):
        resp = await auth_client.post("/api/ai/speak", json={"text": "  "})
        assert resp.status_code == 400
