"""RelayTranscriptionClient — self-hosted Whisper relay over plain HTTP."""
import logging
from typing import Optional

import httpx

from audioscribe.constants import (
    DEFAULT_RELAY_URL,
    MSG_HEALTH_FAILED,
    RELAY_API_KEY_HEADER,
    RELAY_HEALTH_TIMEOUT,
    RELAY_RESPONSE_FIELD,
)
from audioscribe.errors import ErrorCategory, TranscriptionError, error_from_response
from audioscribe.models import ModelTier, RawTranscript
from audioscribe.payload.builder import AudioPayload
from audioscribe.transcription.client import TranscriptionClient

logger = logging.getLogger(__name__)


class RelayTranscriptionClient(TranscriptionClient):

    def __init__(
        self,
        url: str = DEFAULT_RELAY_URL,
        model_tier: ModelTier = ModelTier.SMALL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._model_tier = model_tier
        self._transport = transport

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=timeout)

    async def transcribe(
        self,
        payload: AudioPayload,
        api_key: str,
        model_tier: Optional[ModelTier] = None,
    ) -> RawTranscript:
        if not api_key:
            raise TranscriptionError(ErrorCategory.AUTHENTICATION)
        tier = model_tier or self._model_tier
        # Attempt timeout is enforced by the retry loop, not by httpx.
        async with self._client() as client:
            response = await client.post(
                self._url,
                headers={RELAY_API_KEY_HEADER: api_key},
                files={"file": payload.as_multipart()},
                data={"model": ModelTier(tier).value},
            )
        match response.is_success:
            case False:
                logger.warning("Relay returned %d: %s", response.status_code, response.text[:200])
                raise error_from_response(response.status_code, response.text)
            case True:
                pass
        try:
            body = response.json()
        except ValueError as exc:
            raise TranscriptionError(ErrorCategory.UNKNOWN) from exc
        text = body.get(RELAY_RESPONSE_FIELD) if isinstance(body, dict) else None
        match text:
            case str() if text.strip():
                return RawTranscript(text=text.strip())
            case _:
                logger.error("Relay response has no %r field", RELAY_RESPONSE_FIELD)
                raise TranscriptionError(ErrorCategory.UNKNOWN)

    async def health_check(self) -> bool:
        """GET the endpoint. 2xx or 405 (POST-only) means the relay is up."""
        try:
            async with self._client(timeout=RELAY_HEALTH_TIMEOUT) as client:
                response = await client.get(self._url, headers={"Accept": "application/json"})
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(MSG_HEALTH_FAILED, exc)
            return False
        match response.status_code:
            case 405:
                return True
            case _ if response.is_success:
                return True
            case status:
                logger.warning(MSG_HEALTH_FAILED, status)
                return False
