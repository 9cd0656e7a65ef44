"""NativePayloadBuilder — device capture: files on disk, plus imported blobs."""
import asyncio
import logging
import mimetypes
from pathlib import Path

from audioscribe.constants import MAX_AUDIO_BYTES, NATIVE_AUDIO_FILENAME, NATIVE_AUDIO_MIME
from audioscribe.errors import ErrorCategory, TranscriptionError
from audioscribe.payload.builder import AudioHandle, AudioPayload, PayloadBuilder

logger = logging.getLogger(__name__)


def _read_file(path: Path) -> bytes:
    try:
        size = path.stat().st_size
    except FileNotFoundError as exc:
        logger.error("Audio file not found: %s", path)
        raise TranscriptionError(ErrorCategory.INVALID_AUDIO) from exc
    match size:
        case 0:
            logger.error("Audio file is empty: %s", path)
            raise TranscriptionError(ErrorCategory.INVALID_AUDIO)
        case n if n > MAX_AUDIO_BYTES:
            raise TranscriptionError(ErrorCategory.PAYLOAD_TOO_LARGE)
        case _:
            pass
    try:
        return path.read_bytes()
    except OSError as exc:
        logger.error("Audio file unreadable: %s (%s)", path, exc)
        raise TranscriptionError(ErrorCategory.INVALID_AUDIO) from exc


class NativePayloadBuilder(PayloadBuilder):

    default_mime = NATIVE_AUDIO_MIME
    default_filename = NATIVE_AUDIO_FILENAME

    async def _load(self, handle: AudioHandle) -> AudioPayload:
        match handle.kind:
            case "path":
                content = await asyncio.to_thread(_read_file, handle.path)
                guessed, _ = mimetypes.guess_type(handle.path.name)
                return AudioPayload(
                    content=content,
                    filename=handle.path.name,
                    content_type=handle.mime_type or guessed or self.default_mime,
                )
            case "bytes":
                return self._from_memory(handle.data, handle.mime_type)
            case _:
                return self._decode(handle)
