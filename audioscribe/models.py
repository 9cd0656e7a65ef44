from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class Backend(str, Enum):
    RELAY = "relay"
    VENDOR = "vendor"


class ModelTier(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"


@dataclass(frozen=True)
class Speaker:
    id: str
    name: str
    color: str = ""


@dataclass(frozen=True)
class WordTiming:
    text: str
    start: float
    end: float
    speaker_id: Optional[str] = None

    def with_speaker(self, speaker_id: Optional[str]) -> "WordTiming":
        return replace(self, speaker_id=speaker_id)


@dataclass(frozen=True)
class RawTranscript:
    text: str
    words: tuple[WordTiming, ...] = ()


@dataclass(frozen=True)
class TranscriptionResult:
    text: str
    backend: Backend
    raw_text: str = ""
    words: tuple[WordTiming, ...] = field(default_factory=tuple)
