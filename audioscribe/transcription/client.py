"""TranscriptionClient — abstract base for the relay and vendor speech-to-text backends."""
from abc import ABC, abstractmethod

from audioscribe.models import RawTranscript
from audioscribe.payload.builder import AudioPayload


class TranscriptionClient(ABC):
    @abstractmethod
    async def transcribe(self, payload: AudioPayload, api_key: str) -> RawTranscript:
        """Send one request with the payload. Raises on failure; retrying is the caller's job."""
        ...
