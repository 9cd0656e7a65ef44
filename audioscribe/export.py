"""Plain-text transcript files for sharing."""
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from audioscribe.constants import EXPORT_FORMATS
from audioscribe.recordings_store import Recording

logger = logging.getLogger(__name__)


def safe_filename(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", title) or "transcript"


def _require_transcript(recording: Recording) -> str:
    match recording.transcript:
        case str() as text if text.strip():
            return text
        case _:
            raise ValueError(f"Recording {recording.id} has no transcript to export")


def export_transcript(
    recording: Recording,
    directory: Path,
    fmt: str = "txt",
    now: Optional[datetime] = None,
) -> Path:
    """Write the transcript to transcript-<timestamp>.<fmt>. Returns the path."""
    text = _require_transcript(recording)
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    stamp = re.sub(r"[:.]", "-", (now or datetime.now(timezone.utc)).isoformat())
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / f"transcript-{stamp}.{fmt}"
    target.write_text(text, encoding="utf-8")
    logger.info("Exported transcript to %s", target)
    return target


def save_transcript_file(recording: Recording, directory: Path) -> Path:
    """Write the bare transcript to <sanitized title>.txt."""
    text = _require_transcript(recording)
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / f"{safe_filename(recording.title)}.txt"
    target.write_text(text, encoding="utf-8")
    logger.info("Transcript saved to: %s", target)
    return target
