import json
import logging
import uuid
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from audioscribe.constants import (
    DATA_URI_PREFIX,
    DEFAULT_RECORDING_TITLE,
    DEFAULT_RECORDINGS_PATH,
    DEFAULT_SPEAKER_ID,
    DEFAULT_SPEAKER_NAME,
    SPEAKER_COLORS,
)
from audioscribe.models import Speaker, WordTiming

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recording:
    id: str
    title: str
    uri: str
    duration: float = 0.0
    date: str = ""
    transcript: Optional[str] = None
    summary: Optional[str] = None
    words: tuple[WordTiming, ...] = ()
    speakers: tuple[Speaker, ...] = ()
    current_speaker_id: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict) -> "Recording":
        return cls(
            id=str(raw["id"]),
            title=raw.get("title", ""),
            uri=raw.get("uri", ""),
            duration=float(raw.get("duration", 0.0)),
            date=raw.get("date", ""),
            transcript=raw.get("transcript"),
            summary=raw.get("summary"),
            words=tuple(WordTiming(**w) for w in raw.get("words") or []),
            speakers=tuple(Speaker(**s) for s in raw.get("speakers") or []),
            current_speaker_id=raw.get("current_speaker_id"),
        )


def _title_from_uri(uri: str) -> str:
    match uri.startswith(DATA_URI_PREFIX):
        case True:
            return DEFAULT_RECORDING_TITLE
        case False:
            return Path(uri).stem or DEFAULT_RECORDING_TITLE


def new_recording(uri: str, title: Optional[str] = None, duration: float = 0.0) -> Recording:
    now = datetime.now(timezone.utc)
    return Recording(
        id=uuid.uuid4().hex,
        title=title or _title_from_uri(uri),
        uri=uri,
        duration=duration,
        date=now.isoformat(),
    )


class RecordingsStore:
    """JSON-file list of recordings, newest first."""

    def __init__(self, path: Path = Path(DEFAULT_RECORDINGS_PATH)) -> None:
        self._path = Path(path)
        self._recordings: list[Recording] = []
        self._load()

    def _load(self) -> None:
        match self._path.exists():
            case True:
                try:
                    with open(self._path) as f:
                        raw = json.load(f)
                    self._recordings = [Recording.from_dict(r) for r in raw]
                except Exception as e:
                    logger.warning("Recordings load failed: %s, starting fresh", e)
                    self._recordings = []
            case False:
                pass

    def _save(self) -> None:
        try:
            with open(self._path, "w") as f:
                json.dump([r.to_dict() for r in self._recordings], f, indent=2, ensure_ascii=False)
        except Exception as e:
            logger.warning("Recordings save failed: %s", e)

    def _update(self, recording_id: str, **changes) -> Optional[Recording]:
        updated = None
        for i, rec in enumerate(self._recordings):
            if rec.id == recording_id:
                updated = replace(rec, **changes)
                self._recordings[i] = updated
        match updated:
            case None:
                logger.warning("Unknown recording id: %s", recording_id)
            case _:
                self._save()
        return updated

    def all(self) -> list[Recording]:
        return list(self._recordings)

    def get(self, recording_id: str) -> Optional[Recording]:
        return next((r for r in self._recordings if r.id == recording_id), None)

    def add(self, recording: Recording) -> Recording:
        default = Speaker(id=DEFAULT_SPEAKER_ID, name=DEFAULT_SPEAKER_NAME, color=SPEAKER_COLORS[0])
        stored = replace(recording, speakers=(default,), current_speaker_id=DEFAULT_SPEAKER_ID)
        self._recordings.insert(0, stored)
        self._save()
        return stored

    def delete(self, recording_id: str) -> None:
        before = len(self._recordings)
        self._recordings = [r for r in self._recordings if r.id != recording_id]
        match len(self._recordings) != before:
            case True:
                self._save()
            case False:
                pass

    def update_transcript(
        self, recording_id: str, transcript: str, words: tuple[WordTiming, ...] = ()
    ) -> Optional[Recording]:
        return self._update(recording_id, transcript=transcript, words=tuple(words))

    def update_summary(self, recording_id: str, summary: str) -> Optional[Recording]:
        return self._update(recording_id, summary=summary)

    def add_speaker(self, recording_id: str, name: str) -> Optional[Recording]:
        match self.get(recording_id):
            case None:
                logger.warning("Unknown recording id: %s", recording_id)
                return None
            case rec:
                speaker = Speaker(
                    id=str(len(rec.speakers) + 1),
                    name=name,
                    color=SPEAKER_COLORS[len(rec.speakers) % len(SPEAKER_COLORS)],
                )
                return self._update(recording_id, speakers=rec.speakers + (speaker,))

    def update_current_speaker(self, recording_id: str, speaker_id: str) -> Optional[Recording]:
        return self._update(recording_id, current_speaker_id=speaker_id)
