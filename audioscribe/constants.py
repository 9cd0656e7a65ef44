"""Magic values and message templates. Other modules import from here instead of inlining literals."""

# Audio limits / defaults
MAX_AUDIO_BYTES = 25 * 1024 * 1024
WEB_AUDIO_MIME = "audio/webm"
WEB_AUDIO_FILENAME = "audio.webm"
NATIVE_AUDIO_MIME = "audio/m4a"
NATIVE_AUDIO_FILENAME = "audio.m4a"
DATA_URI_PREFIX = "data:"

# Relay backend
DEFAULT_RELAY_URL = "https://gilardinservice.shop/api/whisper"
RELAY_API_KEY_HEADER = "X-API-KEY"
RELAY_RESPONSE_FIELD = "transcription"
RELAY_HEALTH_TIMEOUT: float = 5.0

# Vendor backend
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
WHISPER_MODEL = "whisper-1"
WHISPER_RESPONSE_FORMAT = "verbose_json"
WHISPER_TEMPERATURE: float = 0.2
WHISPER_TIMESTAMP_GRANULARITIES = ["word"]
DEFAULT_TRANSCRIPTION_LANGUAGE = "fr"

# Chat post-processing
CHAT_MODEL = "gpt-3.5-turbo"
CHAT_TEMPERATURE: float = 0.3
SUMMARY_MAX_TOKENS = 200
CHAT_TIMEOUT: float = 60.0
CLEANUP_SYSTEM_PROMPT = (
    "You are a helpful assistant that improves transcriptions. Format the text "
    "with proper punctuation, paragraphs, and correct any obvious errors while "
    "maintaining the original meaning. Never shorten or summarize the content. "
    "The text is in %s, so ensure the formatting and punctuation rules of that "
    "language are followed."
)
SUMMARY_SYSTEM_PROMPT = (
    "Tu es un assistant expert en résumé de texte. Génère un résumé concis et "
    "structuré du texte fourni en français. Le résumé doit être clair, précis et "
    "capturer les points essentiels du texte original. Limite le résumé à 3-5 "
    "lignes maximum."
)
LANGUAGE_NAMES = {"fr": "French", "en": "English"}

# Retry / backoff defaults (seconds)
RELAY_TIMEOUT: float = 60.0
VENDOR_TIMEOUT: float = 600.0
RELAY_MAX_ATTEMPTS = 3
VENDOR_MAX_ATTEMPTS = 3
BACKOFF_BASE: float = 1.0
BACKOFF_CAP: float = 10.0

# Speaker heuristic
SPEAKER_PAUSE_SECONDS: float = 2.0
DEFAULT_SPEAKER_ID = "1"
DEFAULT_SPEAKER_NAME = "Speaker 1"
SPEAKER_COLORS = (
    "#EF4444",
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#8B5CF6",
    "#EC4899",
    "#14B8A6",
    "#F97316",
)

# Storage / export
DEFAULT_RECORDINGS_PATH = ".recordings.json"
DEFAULT_EXPORT_DIR = "exports"
DEFAULT_RECORDING_TITLE = "Recording"
EXPORT_FORMATS = ("txt",)

# Log messages
MSG_STARTING = "audioscribe starting…"
MSG_ATTEMPT = "Transcription attempt %d/%d via %s"
MSG_ATTEMPT_FAILED = "Attempt %d/%d failed: %s (%s)"
MSG_RETRYING = "Retrying in %.1fs…"
MSG_GIVING_UP = "Giving up after %d attempt(s): %s"
MSG_TRANSCRIBED = "✓ Transcribed %d chars via %s (%.1fs)"
MSG_CLEANUP_FAILED = "Transcript cleanup failed, keeping raw text: %s"
MSG_HEALTH_FAILED = "Relay health check failed: %s"
MSG_PAYLOAD_READY = "Audio payload ready: %s, %d bytes, %s"

# User-facing error messages, per language, keyed by ErrorCategory value
DEFAULT_MESSAGE_LANGUAGE = "fr"
ERROR_MESSAGES: dict[str, dict[str, str]] = {
    "fr": {
        "invalid_audio": "Le fichier audio est introuvable, vide ou illisible. Veuillez réenregistrer votre audio.",
        "payload_too_large": "Le fichier audio est trop volumineux. La taille maximale est de 25 Mo.",
        "authentication": "Erreur d'authentification API. Veuillez vérifier votre clé API.",
        "service_not_found": "Le service de transcription est introuvable. Veuillez vérifier l'adresse du service.",
        "method_not_allowed": "Le service de transcription est mal configuré (méthode non autorisée).",
        "service_unavailable": "Le service de transcription est indisponible. Veuillez réessayer plus tard.",
        "rate_limited": "Limite de requêtes API atteinte. Veuillez réessayer plus tard.",
        "timeout": "Timeout - Le service de transcription met trop de temps à répondre. Veuillez réessayer.",
        "network_unreachable": "Erreur de connexion réseau. Veuillez vérifier votre connexion internet et réessayer.",
        "quota_exceeded": "Quota API insuffisant. Veuillez vérifier votre abonnement OpenAI.",
        "unknown": "Erreur inconnue lors de la transcription.",
    },
    "en": {
        "invalid_audio": "The audio file is missing, empty or unreadable. Please record it again.",
        "payload_too_large": "The audio file is too large. The maximum size is 25 MB.",
        "authentication": "API authentication failed. Please check your API key.",
        "service_not_found": "The transcription service was not found. Please check the service URL.",
        "method_not_allowed": "The transcription service is misconfigured (method not allowed).",
        "service_unavailable": "The transcription service is unavailable. Please try again later.",
        "rate_limited": "API rate limit reached. Please try again later.",
        "timeout": "Timeout - the transcription service took too long to respond. Please try again.",
        "network_unreachable": "Network error. Please check your internet connection and try again.",
        "quota_exceeded": "Insufficient API quota. Please check your OpenAI plan.",
        "unknown": "Unknown transcription error.",
    },
}

# CLI replies
MSG_NO_TRANSCRIPT = "Recording %s has no transcript yet."
MSG_RECORDING_NOT_FOUND = "No recording with id %s."
MSG_NO_RECORDINGS = "No recordings yet."
MSG_SERVICE_AVAILABLE = "Relay service available: %s"
MSG_EXPORTED = "Transcript exported to %s"
