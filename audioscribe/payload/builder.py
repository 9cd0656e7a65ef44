"""PayloadBuilder — abstract base turning an AudioHandle into a transfer-ready payload."""
import base64
import binascii
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import unquote_to_bytes

from audioscribe.constants import DATA_URI_PREFIX, MAX_AUDIO_BYTES, MSG_PAYLOAD_READY
from audioscribe.errors import ErrorCategory, TranscriptionError

logger = logging.getLogger(__name__)

_DATA_URI_HEADER = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(;[^,]*)?),", re.IGNORECASE)


@dataclass(frozen=True)
class AudioHandle:
    """Reference to recorded audio: exactly one of path, data or data_uri is set."""

    path: Optional[Path] = None
    data: Optional[bytes] = None
    data_uri: Optional[str] = None
    mime_type: Optional[str] = None

    def __post_init__(self) -> None:
        sources = [s for s in (self.path, self.data, self.data_uri) if s is not None]
        if len(sources) != 1:
            raise ValueError("AudioHandle needs exactly one of path, data or data_uri")

    @classmethod
    def from_path(cls, path: str | Path, mime_type: Optional[str] = None) -> "AudioHandle":
        return cls(path=Path(path), mime_type=mime_type)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: Optional[str] = None) -> "AudioHandle":
        return cls(data=bytes(data), mime_type=mime_type)

    @classmethod
    def from_data_uri(cls, uri: str, mime_type: Optional[str] = None) -> "AudioHandle":
        return cls(data_uri=uri, mime_type=mime_type)

    @classmethod
    def from_uri(cls, uri: str, mime_type: Optional[str] = None) -> "AudioHandle":
        """A stored recording URI: either an embedded data URI or a file path."""
        match uri.startswith(DATA_URI_PREFIX):
            case True:
                return cls.from_data_uri(uri, mime_type)
            case False:
                return cls.from_path(uri, mime_type)

    @property
    def kind(self) -> str:
        match (self.path, self.data):
            case (Path(), _):
                return "path"
            case (_, bytes()):
                return "bytes"
            case _:
                return "data_uri"


@dataclass(frozen=True)
class AudioPayload:
    content: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    def as_multipart(self) -> tuple[str, bytes, str]:
        return (self.filename, self.content, self.content_type)


def decode_data_uri(uri: str) -> tuple[bytes, Optional[str]]:
    """Decode a `data:<mime>;base64,<payload>` URI into (bytes, mime)."""
    match _DATA_URI_HEADER.match(uri):
        case None:
            raise TranscriptionError(ErrorCategory.INVALID_AUDIO)
        case header:
            mime = header.group("mime") or None
            raw = uri[header.end():]
            is_base64 = ";base64" in header.group("params").lower()
    try:
        content = base64.b64decode(raw, validate=True) if is_base64 else unquote_to_bytes(raw)
    except (binascii.Error, ValueError) as exc:
        raise TranscriptionError(ErrorCategory.INVALID_AUDIO) from exc
    return content, mime


def check_size(size: int) -> None:
    """Local, pre-network size gate. Never retried."""
    match size:
        case 0:
            raise TranscriptionError(ErrorCategory.INVALID_AUDIO)
        case n if n > MAX_AUDIO_BYTES:
            raise TranscriptionError(ErrorCategory.PAYLOAD_TOO_LARGE)
        case _:
            pass


def filename_for(mime: str, default_mime: str, default_filename: str) -> str:
    match mime:
        case m if m == default_mime:
            return default_filename
        case m if "/" in m:
            return "audio." + m.split("/", 1)[1].split(";", 1)[0]
        case _:
            return default_filename


class PayloadBuilder(ABC):
    """Capability chosen once per platform; build() never touches the network."""

    default_mime: str
    default_filename: str

    async def build(self, handle: Optional[AudioHandle]) -> AudioPayload:
        """Validate the handle and return the payload. Raises TranscriptionError on bad audio."""
        if handle is None:
            raise TranscriptionError(ErrorCategory.INVALID_AUDIO)
        payload = await self._load(handle)
        check_size(payload.size)
        logger.info(MSG_PAYLOAD_READY, handle.kind, payload.size, payload.content_type)
        return payload

    @abstractmethod
    async def _load(self, handle: AudioHandle) -> AudioPayload:
        ...

    def _from_memory(self, content: bytes, mime: Optional[str]) -> AudioPayload:
        content_type = mime or self.default_mime
        return AudioPayload(
            content=content,
            filename=filename_for(content_type, self.default_mime, self.default_filename),
            content_type=content_type,
        )

    def _decode(self, handle: AudioHandle) -> AudioPayload:
        content, uri_mime = decode_data_uri(handle.data_uri)
        return self._from_memory(content, handle.mime_type or uri_mime)
