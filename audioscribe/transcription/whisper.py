"""WhisperTranscriptionClient — OpenAI Whisper speech-to-text backend."""
import logging
from typing import Any, Optional

from openai import AsyncOpenAI

from audioscribe.constants import (
    DEFAULT_OPENAI_BASE_URL,
    DEFAULT_TRANSCRIPTION_LANGUAGE,
    WHISPER_MODEL,
    WHISPER_RESPONSE_FORMAT,
    WHISPER_TEMPERATURE,
    WHISPER_TIMESTAMP_GRANULARITIES,
)
from audioscribe.errors import ErrorCategory, TranscriptionError
from audioscribe.models import RawTranscript, WordTiming
from audioscribe.payload.builder import AudioPayload
from audioscribe.transcription.client import TranscriptionClient

logger = logging.getLogger(__name__)


def _field(item: Any, *names: str) -> Any:
    """First non-None value among names, read as dict keys or attributes."""
    for name in names:
        value = item.get(name) if isinstance(item, dict) else getattr(item, name, None)
        if value is not None:
            return value
    return None


def parse_words(raw_words: Optional[list]) -> tuple[WordTiming, ...]:
    words = []
    for item in raw_words or []:
        text = _field(item, "word", "text")
        start = _field(item, "start")
        end = _field(item, "end")
        match (text, start, end):
            case (str(), int() | float(), int() | float()):
                words.append(WordTiming(text=text.strip(), start=float(start), end=float(end)))
            case _:
                logger.debug("Skipping malformed word entry: %r", item)
    return tuple(sorted(words, key=lambda w: w.start))


class WhisperTranscriptionClient(TranscriptionClient):

    def __init__(
        self,
        language: str = DEFAULT_TRANSCRIPTION_LANGUAGE,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
    ) -> None:
        self._language = language
        self._base_url = base_url

    async def transcribe(self, payload: AudioPayload, api_key: str) -> RawTranscript:
        if not api_key:
            raise TranscriptionError(ErrorCategory.AUTHENTICATION)
        # max_retries=0: the retry state machine owns retries and timeouts.
        client = AsyncOpenAI(api_key=api_key, base_url=self._base_url, max_retries=0)
        response = await client.audio.transcriptions.create(
            model=WHISPER_MODEL,
            file=payload.as_multipart(),
            response_format=WHISPER_RESPONSE_FORMAT,
            temperature=WHISPER_TEMPERATURE,
            language=self._language,
            timestamp_granularities=WHISPER_TIMESTAMP_GRANULARITIES,
        )
        text = _field(response, "text")
        match text:
            case str() if text.strip():
                return RawTranscript(text=text.strip(), words=parse_words(_field(response, "words")))
            case _:
                logger.error("Whisper response contained no text")
                raise TranscriptionError(ErrorCategory.UNKNOWN)
