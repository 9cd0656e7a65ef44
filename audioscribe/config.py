from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from audioscribe.constants import (
    BACKOFF_BASE,
    BACKOFF_CAP,
    DEFAULT_EXPORT_DIR,
    DEFAULT_MESSAGE_LANGUAGE,
    DEFAULT_OPENAI_BASE_URL,
    DEFAULT_RECORDINGS_PATH,
    DEFAULT_RELAY_URL,
    DEFAULT_TRANSCRIPTION_LANGUAGE,
    ERROR_MESSAGES,
    RELAY_MAX_ATTEMPTS,
    RELAY_TIMEOUT,
    VENDOR_MAX_ATTEMPTS,
    VENDOR_TIMEOUT,
)
from audioscribe.models import Backend, ModelTier
from audioscribe.transcription.retry import RetryPolicy


@dataclass(frozen=True)
class Config:
    backend: Backend
    relay_url: str
    relay_api_key: Optional[str]
    relay_model: ModelTier
    openai_api_key: Optional[str]
    openai_base_url: str
    transcription_language: str
    message_language: str
    audio_platform: str
    relay_timeout: float
    vendor_timeout: float
    relay_max_attempts: int
    vendor_max_attempts: int
    backoff_base: float
    backoff_cap: float
    health_check: bool
    recordings_path: str
    export_dir: str
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        return cls._validate(
            backend=os.getenv("TRANSCRIPTION_BACKEND", Backend.RELAY.value),
            relay_url=os.getenv("RELAY_URL", DEFAULT_RELAY_URL),
            relay_api_key=os.getenv("RELAY_API_KEY") or None,
            relay_model=os.getenv("RELAY_MODEL", ModelTier.SMALL.value),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_base_url=os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL),
            transcription_language=os.getenv("TRANSCRIPTION_LANGUAGE", DEFAULT_TRANSCRIPTION_LANGUAGE),
            message_language=os.getenv("MESSAGE_LANGUAGE", DEFAULT_MESSAGE_LANGUAGE),
            audio_platform=os.getenv("AUDIO_PLATFORM", "native"),
            relay_timeout=float(os.getenv("RELAY_TIMEOUT", str(RELAY_TIMEOUT))),
            vendor_timeout=float(os.getenv("VENDOR_TIMEOUT", str(VENDOR_TIMEOUT))),
            relay_max_attempts=int(os.getenv("RELAY_MAX_ATTEMPTS", str(RELAY_MAX_ATTEMPTS))),
            vendor_max_attempts=int(os.getenv("VENDOR_MAX_ATTEMPTS", str(VENDOR_MAX_ATTEMPTS))),
            backoff_base=float(os.getenv("BACKOFF_BASE", str(BACKOFF_BASE))),
            backoff_cap=float(os.getenv("BACKOFF_CAP", str(BACKOFF_CAP))),
            health_check=os.getenv("HEALTH_CHECK", "true").strip().lower() in ("1", "true", "yes"),
            recordings_path=os.getenv("RECORDINGS_PATH", DEFAULT_RECORDINGS_PATH),
            export_dir=os.getenv("EXPORT_DIR", DEFAULT_EXPORT_DIR),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    @staticmethod
    def _validate(
        backend: str,
        relay_model: str,
        message_language: str,
        audio_platform: str,
        relay_max_attempts: int,
        vendor_max_attempts: int,
        **rest,
    ) -> "Config":
        match backend.strip().lower():
            case "relay" | "remote":
                selected = Backend.RELAY
            case "vendor" | "openai":
                selected = Backend.VENDOR
            case other:
                raise ValueError(f"TRANSCRIPTION_BACKEND must be relay or vendor, got {other!r}")

        match relay_model.strip().lower():
            case "small" | "medium" as tier:
                model = ModelTier(tier)
            case other:
                raise ValueError(f"RELAY_MODEL must be small or medium, got {other!r}")

        match audio_platform.strip().lower():
            case "web" | "native" as p:
                platform = p
            case other:
                raise ValueError(f"AUDIO_PLATFORM must be web or native, got {other!r}")

        match message_language:
            case lang if lang in ERROR_MESSAGES:
                pass
            case other:
                raise ValueError(f"MESSAGE_LANGUAGE must be one of {sorted(ERROR_MESSAGES)}, got {other!r}")

        match (relay_max_attempts, vendor_max_attempts):
            case (r, v) if r >= 1 and v >= 1:
                pass
            case _:
                raise ValueError("RELAY_MAX_ATTEMPTS and VENDOR_MAX_ATTEMPTS must be >= 1")

        return Config(
            backend=selected,
            relay_model=model,
            message_language=message_language,
            audio_platform=platform,
            relay_max_attempts=relay_max_attempts,
            vendor_max_attempts=vendor_max_attempts,
            **rest,
        )

    def api_key_for(self, backend: Backend) -> Optional[str]:
        match backend:
            case Backend.RELAY:
                return self.relay_api_key
            case Backend.VENDOR:
                return self.openai_api_key

    def retry_policy_for(self, backend: Backend) -> RetryPolicy:
        match backend:
            case Backend.RELAY:
                return RetryPolicy(
                    max_attempts=self.relay_max_attempts,
                    attempt_timeout=self.relay_timeout,
                    backoff_base=self.backoff_base,
                    backoff_cap=self.backoff_cap,
                )
            case Backend.VENDOR:
                return RetryPolicy(
                    max_attempts=self.vendor_max_attempts,
                    attempt_timeout=self.vendor_timeout,
                    backoff_base=self.backoff_base,
                    backoff_cap=self.backoff_cap,
                )
