"""TranscriptionService — AudioHandle in, TranscriptionResult out, for either backend."""
import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

from audioscribe.config import Config
from audioscribe.constants import DEFAULT_MESSAGE_LANGUAGE, MSG_TRANSCRIBED
from audioscribe.errors import ErrorCategory, TranscriptionError
from audioscribe.models import Backend, ModelTier, RawTranscript, Speaker, TranscriptionResult
from audioscribe.payload.builder import AudioHandle, AudioPayload, PayloadBuilder
from audioscribe.payload.factory import payload_builder_for
from audioscribe.postprocess.chat import ChatPostProcessor
from audioscribe.postprocess.speakers import SpeakerChooser, assign_speakers
from audioscribe.transcription.relay import RelayTranscriptionClient
from audioscribe.transcription.retry import RetryPolicy, run_with_retry
from audioscribe.transcription.whisper import WhisperTranscriptionClient

logger = logging.getLogger(__name__)


class TranscriptionService:
    """Single-flight per call: validate → (probe) → retry loop → post-process.

    Every failure surfaces as a TranscriptionError whose message is in the
    configured language.
    """

    def __init__(
        self,
        payload_builder: PayloadBuilder,
        relay: RelayTranscriptionClient,
        whisper: WhisperTranscriptionClient,
        post_processor: ChatPostProcessor,
        policies: dict[Backend, RetryPolicy],
        health_check: bool = True,
        message_language: str = DEFAULT_MESSAGE_LANGUAGE,
        speaker_chooser: Optional[SpeakerChooser] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._builder = payload_builder
        self._relay = relay
        self._whisper = whisper
        self._post = post_processor
        self._policies = policies
        self._health_check = health_check
        self._language = message_language
        self._chooser = speaker_chooser
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: Config) -> "TranscriptionService":
        return cls(
            payload_builder=payload_builder_for(config.audio_platform),
            relay=RelayTranscriptionClient(config.relay_url, config.relay_model),
            whisper=WhisperTranscriptionClient(config.transcription_language, config.openai_base_url),
            post_processor=ChatPostProcessor(config.transcription_language, config.openai_base_url),
            policies={b: config.retry_policy_for(b) for b in Backend},
            health_check=config.health_check,
            message_language=config.message_language,
        )

    async def transcribe(
        self,
        handle: Optional[AudioHandle],
        backend: Backend,
        api_key: Optional[str],
        *,
        speakers: Sequence[Speaker] = (),
        model_tier: Optional[ModelTier] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> TranscriptionResult:
        backend = Backend(backend)
        start = time.monotonic()
        try:
            payload = await self._builder.build(handle)
            if not api_key:
                raise TranscriptionError(ErrorCategory.AUTHENTICATION)
            match backend:
                case Backend.RELAY:
                    result = await self._transcribe_relay(payload, api_key, model_tier, cancel_event)
                case Backend.VENDOR:
                    result = await self._transcribe_vendor(payload, api_key, speakers, cancel_event)
        except TranscriptionError as exc:
            raise exc.localized(self._language) from exc

        logger.info(MSG_TRANSCRIBED, len(result.text), backend.value, time.monotonic() - start)
        return result

    async def summarize(self, text: str, api_key: Optional[str]) -> str:
        try:
            return await self._post.summarize(text, api_key or "")
        except TranscriptionError as exc:
            raise exc.localized(self._language) from exc

    async def _transcribe_relay(
        self,
        payload: AudioPayload,
        api_key: str,
        model_tier: Optional[ModelTier],
        cancel_event: Optional[asyncio.Event],
    ) -> TranscriptionResult:
        if self._health_check and not await self._relay.health_check():
            raise TranscriptionError(ErrorCategory.SERVICE_UNAVAILABLE)
        raw = await self._run(
            Backend.RELAY,
            lambda: self._relay.transcribe(payload, api_key, model_tier),
            cancel_event,
        )
        return TranscriptionResult(text=raw.text, backend=Backend.RELAY, raw_text=raw.text)

    async def _transcribe_vendor(
        self,
        payload: AudioPayload,
        api_key: str,
        speakers: Sequence[Speaker],
        cancel_event: Optional[asyncio.Event],
    ) -> TranscriptionResult:
        raw = await self._run(
            Backend.VENDOR,
            lambda: self._whisper.transcribe(payload, api_key),
            cancel_event,
        )
        text = await self._post.clean(raw.text, api_key)
        words = assign_speakers(raw.words, speakers, chooser=self._chooser)
        return TranscriptionResult(text=text, backend=Backend.VENDOR, raw_text=raw.text, words=words)

    async def _run(
        self,
        backend: Backend,
        operation: Callable[[], Awaitable[RawTranscript]],
        cancel_event: Optional[asyncio.Event],
    ) -> RawTranscript:
        return await run_with_retry(
            operation,
            self._policies.get(backend, RetryPolicy()),
            label=backend.value,
            cancel_event=cancel_event,
            sleep=self._sleep,
        )
