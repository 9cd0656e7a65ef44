"""Config.from_env: defaults, overrides and validation."""
import pytest

from audioscribe.config import Config
from audioscribe.constants import DEFAULT_RELAY_URL
from audioscribe.models import Backend, ModelTier

ENV_VARS = (
    "TRANSCRIPTION_BACKEND",
    "RELAY_URL",
    "RELAY_API_KEY",
    "RELAY_MODEL",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "TRANSCRIPTION_LANGUAGE",
    "MESSAGE_LANGUAGE",
    "AUDIO_PLATFORM",
    "RELAY_TIMEOUT",
    "VENDOR_TIMEOUT",
    "RELAY_MAX_ATTEMPTS",
    "VENDOR_MAX_ATTEMPTS",
    "BACKOFF_BASE",
    "BACKOFF_CAP",
    "HEALTH_CHECK",
    "RECORDINGS_PATH",
    "EXPORT_DIR",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr("audioscribe.config.load_dotenv", lambda **_: None)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_config_defaults():
    """No env at all: relay backend, French, three attempts."""
    config = Config.from_env()

    assert config.backend == Backend.RELAY
    assert config.relay_url == DEFAULT_RELAY_URL
    assert config.relay_model == ModelTier.SMALL
    assert config.relay_api_key is None
    assert config.openai_api_key is None
    assert config.transcription_language == "fr"
    assert config.message_language == "fr"
    assert config.audio_platform == "native"
    assert config.relay_timeout == 60.0
    assert config.relay_max_attempts == 3
    assert config.health_check is True
    assert config.log_level == "INFO"


def test_config_overrides(monkeypatch):
    monkeypatch.setenv("TRANSCRIPTION_BACKEND", "OpenAI")
    monkeypatch.setenv("RELAY_MODEL", "medium")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("MESSAGE_LANGUAGE", "en")
    monkeypatch.setenv("AUDIO_PLATFORM", "web")
    monkeypatch.setenv("VENDOR_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("HEALTH_CHECK", "no")

    config = Config.from_env()

    assert config.backend == Backend.VENDOR
    assert config.relay_model == ModelTier.MEDIUM
    assert config.openai_api_key == "sk-test"
    assert config.message_language == "en"
    assert config.audio_platform == "web"
    assert config.vendor_max_attempts == 5
    assert config.health_check is False


def test_config_remote_alias_selects_relay(monkeypatch):
    monkeypatch.setenv("TRANSCRIPTION_BACKEND", "remote")
    assert Config.from_env().backend == Backend.RELAY


def test_config_blank_keys_are_none(monkeypatch):
    monkeypatch.setenv("RELAY_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    config = Config.from_env()
    assert config.relay_api_key is None
    assert config.openai_api_key is None


@pytest.mark.parametrize(
    "name, value, match",
    [
        ("TRANSCRIPTION_BACKEND", "azure", "TRANSCRIPTION_BACKEND"),
        ("RELAY_MODEL", "large", "RELAY_MODEL"),
        ("AUDIO_PLATFORM", "desktop", "AUDIO_PLATFORM"),
        ("MESSAGE_LANGUAGE", "de", "MESSAGE_LANGUAGE"),
        ("RELAY_MAX_ATTEMPTS", "0", "MAX_ATTEMPTS"),
    ],
)
def test_config_rejects_bad_values(monkeypatch, name, value, match):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=match):
        Config.from_env()


def test_config_immutable():
    """Frozen dataclass: attribute assignment must fail."""
    config = Config.from_env()
    with pytest.raises(Exception):
        config.relay_url = "other"


def test_api_key_for_backend(monkeypatch):
    monkeypatch.setenv("RELAY_API_KEY", "relay-key")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    config = Config.from_env()
    assert config.api_key_for(Backend.RELAY) == "relay-key"
    assert config.api_key_for(Backend.VENDOR) == "sk-test"


def test_retry_policy_for_backend(monkeypatch):
    monkeypatch.setenv("RELAY_TIMEOUT", "30")
    monkeypatch.setenv("BACKOFF_CAP", "8")
    config = Config.from_env()

    relay = config.retry_policy_for(Backend.RELAY)
    vendor = config.retry_policy_for(Backend.VENDOR)

    assert relay.attempt_timeout == 30.0
    assert relay.backoff_cap == 8.0
    assert vendor.attempt_timeout == 600.0
