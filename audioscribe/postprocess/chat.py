"""ChatPostProcessor — OpenAI chat completions for transcript cleanup and summaries."""
import logging

from openai import AsyncOpenAI

from audioscribe.constants import (
    CHAT_MODEL,
    CHAT_TEMPERATURE,
    CHAT_TIMEOUT,
    CLEANUP_SYSTEM_PROMPT,
    DEFAULT_OPENAI_BASE_URL,
    DEFAULT_TRANSCRIPTION_LANGUAGE,
    LANGUAGE_NAMES,
    MSG_CLEANUP_FAILED,
    SUMMARY_MAX_TOKENS,
    SUMMARY_SYSTEM_PROMPT,
)
from audioscribe.errors import ErrorCategory, TranscriptionError, to_transcription_error

logger = logging.getLogger(__name__)


class ChatPostProcessor:

    def __init__(
        self,
        language: str = DEFAULT_TRANSCRIPTION_LANGUAGE,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        model: str = CHAT_MODEL,
    ) -> None:
        self._language = language
        self._base_url = base_url
        self._model = model

    async def _complete(self, api_key: str, system: str, text: str, **extra) -> str:
        client = AsyncOpenAI(
            api_key=api_key, base_url=self._base_url, timeout=CHAT_TIMEOUT, max_retries=0
        )
        response = await client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": text},
            ],
            temperature=CHAT_TEMPERATURE,
            **extra,
        )
        content = response.choices[0].message.content if response.choices else None
        return content.strip() if content else ""

    async def clean(self, text: str, api_key: str) -> str:
        """Fix punctuation and paragraphs. Never fails: falls back to the raw text."""
        language = LANGUAGE_NAMES.get(self._language, self._language)
        try:
            cleaned = await self._complete(api_key, CLEANUP_SYSTEM_PROMPT % language, text)
        except Exception as exc:
            logger.warning(MSG_CLEANUP_FAILED, exc)
            return text
        return cleaned or text

    async def summarize(self, text: str, api_key: str) -> str:
        """Short 3–5 line summary. Raises TranscriptionError on failure."""
        if not api_key:
            raise TranscriptionError(ErrorCategory.AUTHENTICATION)
        try:
            summary = await self._complete(
                api_key, SUMMARY_SYSTEM_PROMPT, text, max_tokens=SUMMARY_MAX_TOKENS
            )
        except Exception as exc:
            logger.error("Summary generation failed: %s", exc)
            raise to_transcription_error(exc) from exc
        match summary:
            case "":
                raise TranscriptionError(ErrorCategory.UNKNOWN)
            case _:
                return summary
