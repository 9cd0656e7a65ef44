"""Entry point — wires Config → TranscriptionService → RecordingsStore."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from audioscribe.config import Config
from audioscribe.constants import (
    MSG_EXPORTED,
    MSG_NO_RECORDINGS,
    MSG_NO_TRANSCRIPT,
    MSG_RECORDING_NOT_FOUND,
    MSG_SERVICE_AVAILABLE,
    MSG_STARTING,
)
from audioscribe.errors import TranscriptionError
from audioscribe.export import export_transcript, save_transcript_file
from audioscribe.models import Backend, ModelTier
from audioscribe.payload.builder import AudioHandle
from audioscribe.recordings_store import RecordingsStore, new_recording
from audioscribe.service import TranscriptionService
from audioscribe.transcription.relay import RelayTranscriptionClient

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="audioscribe", description="Transcribe recordings via a relay or OpenAI Whisper.")
    sub = parser.add_subparsers(dest="command", required=True)

    transcribe = sub.add_parser("transcribe", help="transcribe an audio file or data URI")
    transcribe.add_argument("audio", help="audio file path or data: URI")
    transcribe.add_argument("--title")
    transcribe.add_argument("--backend", choices=[b.value for b in Backend])
    transcribe.add_argument("--model", choices=[t.value for t in ModelTier])
    transcribe.add_argument("--export", action="store_true", help="also write a timestamped .txt export")

    summarize = sub.add_parser("summarize", help="summarize a stored transcript")
    summarize.add_argument("recording_id")

    sub.add_parser("list", help="list stored recordings")
    sub.add_parser("health", help="probe the relay endpoint")
    return parser


async def _transcribe(args: argparse.Namespace, config: Config, store: RecordingsStore) -> str:
    backend = Backend(args.backend) if args.backend else config.backend
    recording = store.add(new_recording(args.audio, title=args.title))
    service = TranscriptionService.from_config(config)
    result = await service.transcribe(
        AudioHandle.from_uri(args.audio),
        backend,
        config.api_key_for(backend),
        speakers=recording.speakers,
        model_tier=ModelTier(args.model) if args.model else None,
    )
    updated = store.update_transcript(recording.id, result.text, result.words)
    save_transcript_file(updated, Path(config.export_dir))
    match args.export:
        case True:
            logger.info(MSG_EXPORTED, export_transcript(updated, Path(config.export_dir)))
        case False:
            pass
    return result.text


async def _summarize(args: argparse.Namespace, config: Config, store: RecordingsStore) -> str:
    recording = store.get(args.recording_id)
    match recording:
        case None:
            return MSG_RECORDING_NOT_FOUND % args.recording_id
        case r if not r.transcript:
            return MSG_NO_TRANSCRIPT % r.id
        case r:
            summary = await TranscriptionService.from_config(config).summarize(r.transcript, config.openai_api_key)
            store.update_summary(r.id, summary)
            return summary


def _list(store: RecordingsStore) -> str:
    match store.all():
        case []:
            return MSG_NO_RECORDINGS
        case recordings:
            return "\n".join(
                f"{r.id}  {r.date[:19]}  {r.title}  {'✓' if r.transcript else '·'}"
                for r in recordings
            )


async def _health(config: Config) -> str:
    ok = await RelayTranscriptionClient(config.relay_url, config.relay_model).health_check()
    return MSG_SERVICE_AVAILABLE % ("yes" if ok else "no")


async def run(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = Config.from_env()
    _setup_logging(config.log_level)
    logger.info(MSG_STARTING)
    store = RecordingsStore(Path(config.recordings_path))

    try:
        match args.command:
            case "transcribe":
                output = await _transcribe(args, config, store)
            case "summarize":
                output = await _summarize(args, config, store)
            case "list":
                output = _list(store)
            case "health":
                output = await _health(config)
    except TranscriptionError as exc:
        print(exc.message, file=sys.stderr)
        return 1
    print(output)
    return 0


def main() -> None:
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
