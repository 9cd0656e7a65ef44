"""WebPayloadBuilder — browser capture: in-memory blobs and base64 data URIs."""
import logging

from audioscribe.constants import WEB_AUDIO_FILENAME, WEB_AUDIO_MIME
from audioscribe.errors import ErrorCategory, TranscriptionError
from audioscribe.payload.builder import AudioHandle, AudioPayload, PayloadBuilder

logger = logging.getLogger(__name__)


class WebPayloadBuilder(PayloadBuilder):

    default_mime = WEB_AUDIO_MIME
    default_filename = WEB_AUDIO_FILENAME

    async def _load(self, handle: AudioHandle) -> AudioPayload:
        match handle.kind:
            case "data_uri":
                return self._decode(handle)
            case "bytes":
                return self._from_memory(handle.data, handle.mime_type)
            case _:
                logger.warning("Web capture cannot read file paths: %s", handle.path)
                raise TranscriptionError(ErrorCategory.INVALID_AUDIO)
