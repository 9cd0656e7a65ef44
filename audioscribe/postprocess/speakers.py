"""Naive speaker tagging from pauses between words.

This is not diarization: a pause longer than the threshold only hints that
someone else may be talking. The default chooser rotates through the
speaker set so the same transcript always gets the same tags.
"""
import random
from typing import Callable, Iterable, Optional, Sequence

from audioscribe.constants import SPEAKER_PAUSE_SECONDS
from audioscribe.models import Speaker, WordTiming

# (speakers, current speaker id) -> next speaker id
SpeakerChooser = Callable[[Sequence[Speaker], Optional[str]], Optional[str]]


def round_robin_chooser(speakers: Sequence[Speaker], current: Optional[str]) -> Optional[str]:
    ids = [s.id for s in speakers]
    match (ids, current):
        case ([], _):
            return None
        case (_, str() as cur) if cur in ids:
            return ids[(ids.index(cur) + 1) % len(ids)]
        case _:
            return ids[0]


def random_speaker_chooser(rng: Optional[random.Random] = None) -> SpeakerChooser:
    """Pick any known speaker at random on each pause. Seed the rng for repeatable output."""
    source = rng or random.Random()

    def _choose(speakers: Sequence[Speaker], current: Optional[str]) -> Optional[str]:
        return source.choice(speakers).id if speakers else None

    return _choose


def assign_speakers(
    words: Iterable[WordTiming],
    speakers: Sequence[Speaker],
    pause_threshold: float = SPEAKER_PAUSE_SECONDS,
    chooser: Optional[SpeakerChooser] = None,
) -> tuple[WordTiming, ...]:
    choose = chooser or round_robin_chooser
    current = speakers[0].id if speakers else None
    previous_end: Optional[float] = None
    tagged = []
    for word in sorted(words, key=lambda w: w.start):
        if previous_end is not None and word.start - previous_end > pause_threshold:
            current = choose(speakers, current)
        tagged.append(word.with_speaker(current))
        previous_end = word.end
    return tuple(tagged)
