"""Relay and Whisper transcription backends."""
import json
from types import SimpleNamespace

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from audioscribe.constants import RELAY_API_KEY_HEADER, WHISPER_MODEL
from audioscribe.errors import ErrorCategory, TranscriptionError
from audioscribe.models import ModelTier
from audioscribe.payload.builder import AudioPayload
from audioscribe.transcription.client import TranscriptionClient
from audioscribe.transcription.relay import RelayTranscriptionClient
from audioscribe.transcription.whisper import WhisperTranscriptionClient, parse_words

RELAY_URL = "https://relay.test/api/whisper"
PAYLOAD = AudioPayload(content=b"m4a-bytes", filename="audio.m4a", content_type="audio/m4a")


def _relay(handler) -> RelayTranscriptionClient:
    return RelayTranscriptionClient(RELAY_URL, transport=httpx.MockTransport(handler))


def _mock_openai(response=None, side_effect=None) -> MagicMock:
    mock_openai = MagicMock()
    mock_openai.audio.transcriptions.create = AsyncMock(return_value=response, side_effect=side_effect)
    return mock_openai


def test_backends_implement_abc():
    assert issubclass(RelayTranscriptionClient, TranscriptionClient)
    assert issubclass(WhisperTranscriptionClient, TranscriptionClient)


# ── relay ─────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_relay_posts_multipart_with_key_and_model():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"transcription": "  bonjour le monde  "})

    result = await _relay(handler).transcribe(PAYLOAD, "relay-key", ModelTier.MEDIUM)

    assert result.text == "bonjour le monde"
    assert result.words == ()
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == RELAY_URL
    assert request.headers[RELAY_API_KEY_HEADER] == "relay-key"
    assert b'name="model"' in request.content
    assert b"medium" in request.content
    assert b'filename="audio.m4a"' in request.content
    assert b"m4a-bytes" in request.content


@pytest.mark.asyncio
async def test_relay_defaults_to_small_model():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"transcription": "ok"})

    await _relay(handler).transcribe(PAYLOAD, "relay-key")
    assert b"small" in seen[0].content


@pytest.mark.asyncio
async def test_relay_rejects_missing_key_without_request():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"transcription": "ok"})

    with pytest.raises(TranscriptionError) as exc_info:
        await _relay(handler).transcribe(PAYLOAD, "")
    assert exc_info.value.category == ErrorCategory.AUTHENTICATION
    assert seen == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, expected",
    [
        (401, ErrorCategory.AUTHENTICATION),
        (404, ErrorCategory.SERVICE_NOT_FOUND),
        (413, ErrorCategory.PAYLOAD_TOO_LARGE),
        (429, ErrorCategory.RATE_LIMITED),
        (502, ErrorCategory.SERVICE_UNAVAILABLE),
    ],
)
async def test_relay_error_statuses_are_classified(status, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text="nope")

    with pytest.raises(TranscriptionError) as exc_info:
        await _relay(handler).transcribe(PAYLOAD, "relay-key")
    assert exc_info.value.category == expected
    assert exc_info.value.status == status


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        json.dumps({"text": "wrong field"}),
        json.dumps({"transcription": "   "}),
        json.dumps(["transcription"]),
        "not json",
    ],
)
async def test_relay_unusable_body_is_unknown(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=body)

    with pytest.raises(TranscriptionError) as exc_info:
        await _relay(handler).transcribe(PAYLOAD, "relay-key")
    assert exc_info.value.category == ErrorCategory.UNKNOWN


@pytest.mark.asyncio
@pytest.mark.parametrize("status, expected", [(405, True), (200, True), (204, True), (500, False), (404, False)])
async def test_relay_health_check_status(status, expected):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status)

    assert await _relay(handler).health_check() is expected
    assert seen[0].method == "GET"
    assert seen[0].headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_relay_health_check_network_error_is_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    assert await _relay(handler).health_check() is False


# ── whisper ───────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_whisper_transcribe_calls_openai_with_audio():
    response = SimpleNamespace(text=" salut ", words=[])
    mock_openai = _mock_openai(response)

    with patch("audioscribe.transcription.whisper.AsyncOpenAI", return_value=mock_openai) as ctor:
        result = await WhisperTranscriptionClient(language="fr").transcribe(PAYLOAD, "sk-test")

    assert result.text == "salut"
    assert ctor.call_args.kwargs["api_key"] == "sk-test"
    assert ctor.call_args.kwargs["max_retries"] == 0
    kwargs = mock_openai.audio.transcriptions.create.call_args.kwargs
    assert kwargs["model"] == WHISPER_MODEL
    assert kwargs["file"] == ("audio.m4a", b"m4a-bytes", "audio/m4a")
    assert kwargs["language"] == "fr"
    assert kwargs["response_format"] == "verbose_json"
    assert kwargs["timestamp_granularities"] == ["word"]


@pytest.mark.asyncio
async def test_whisper_returns_sorted_word_timings():
    response = SimpleNamespace(
        text="bonjour le monde",
        words=[
            SimpleNamespace(word="monde", start=1.0, end=1.4),
            {"word": "bonjour", "start": 0.0, "end": 0.5},
            {"word": "le", "start": 0.6, "end": 0.7},
        ],
    )

    with patch("audioscribe.transcription.whisper.AsyncOpenAI", return_value=_mock_openai(response)):
        result = await WhisperTranscriptionClient().transcribe(PAYLOAD, "sk-test")

    assert [w.text for w in result.words] == ["bonjour", "le", "monde"]
    assert all(w.speaker_id is None for w in result.words)


@pytest.mark.asyncio
async def test_whisper_empty_text_is_unknown():
    response = SimpleNamespace(text="", words=None)

    with patch("audioscribe.transcription.whisper.AsyncOpenAI", return_value=_mock_openai(response)):
        with pytest.raises(TranscriptionError) as exc_info:
            await WhisperTranscriptionClient().transcribe(PAYLOAD, "sk-test")
    assert exc_info.value.category == ErrorCategory.UNKNOWN


@pytest.mark.asyncio
async def test_whisper_missing_key_never_builds_client():
    with patch("audioscribe.transcription.whisper.AsyncOpenAI") as ctor:
        with pytest.raises(TranscriptionError) as exc_info:
            await WhisperTranscriptionClient().transcribe(PAYLOAD, "")
    assert exc_info.value.category == ErrorCategory.AUTHENTICATION
    ctor.assert_not_called()


@pytest.mark.asyncio
async def test_whisper_propagates_api_errors():
    mock_openai = _mock_openai(side_effect=Exception("API error"))

    with patch("audioscribe.transcription.whisper.AsyncOpenAI", return_value=mock_openai):
        with pytest.raises(Exception, match="API error"):
            await WhisperTranscriptionClient().transcribe(PAYLOAD, "sk-test")


def test_parse_words_skips_malformed_entries():
    words = parse_words([
        {"word": "ok", "start": 0.0, "end": 0.2},
        {"word": "no-start", "end": 0.4},
        {"start": 0.5, "end": 0.6},
        "garbage",
    ])
    assert [w.text for w in words] == ["ok"]


def test_parse_words_handles_none():
    assert parse_words(None) == ()


@pytest.mark.asyncio
async def test_relay_health_check_invalid_url_is_unavailable():
    assert await RelayTranscriptionClient("http://[::1").health_check() is False
