"""Configuration constants, language mappings, and .env loading.

WHY: Centralizes every configurable value (API location, language codes,
MIME fallbacks, output defaults) so it is easy to find and override, and
keeps the Deepgram API key out of source code.

HOW: python-dotenv loads the .env file on import. Constants are module-level
dicts and strings read from the environment with defaults. load_api_key()
gives a clear error when the key is missing.

RULES:
- LANGUAGE_MAP keys are the CLI's language names (e.g. "en_gb"); values are
  Deepgram language codes (e.g. "en-GB").
- Unknown language names fall back to "en" with a logged warning.
- The API key is read from DEEPGRAM_API_KEY, never hardcoded.
- Nothing here holds mutable runtime state.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from the directory the tool is run from
load_dotenv()

# ---------------------------------------------------------------------------
# Language mapping: CLI name -> Deepgram language code
# ---------------------------------------------------------------------------

LANGUAGE_MAP: dict[str, str] = {
    "zh": "zh",
    "zh_cn": "zh-CN",
    "zh_tw": "zh-TW",
    "nl": "nl",
    "en": "en",
    "en_au": "en-AU",
    "en_gb": "en-GB",
    "en_in": "en-IN",
    "en_nz": "en-NZ",
    "en_us": "en-US",
    "fr": "fr",
    "fr_ca": "fr-CA",
    "de": "de",
    "hi": "hi",
    "hi_latn": "hi-Latn",
    "id": "id",
    "it": "it",
    "ja": "ja",
    "ko": "ko",
    "pt": "pt",
    "pt_br": "pt-BR",
    "ru": "ru",
    "es": "es",
    "es_419": "es-419",
    "sv": "sv",
    "tr": "tr",
    "uk": "uk",
}

FALLBACK_LANGUAGE = "en"


def map_language(name: str | None) -> str:
    """Map a CLI language name to a Deepgram language code.

    Accepts either the map key ("en_gb") or the dashed form ("en-GB").
    None means DEFAULT_LANGUAGE.
    """
    if name is None:
        name = DEFAULT_LANGUAGE
    key = name.strip().lower().replace("-", "_")
    if key not in LANGUAGE_MAP:
        logger.warning("Unknown language %r, falling back to %r", name, FALLBACK_LANGUAGE)
        return FALLBACK_LANGUAGE
    return LANGUAGE_MAP[key]


# ---------------------------------------------------------------------------
# Media types
# ---------------------------------------------------------------------------

EXTRA_MIME_TYPES: dict[str, str] = {
    ".aac": "audio/aac",
    ".amr": "audio/amr",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".mka": "audio/x-matroska",
    ".mkv": "video/x-matroska",
    ".oga": "audio/ogg",
    ".ogg": "audio/ogg",
    ".opus": "audio/ogg",
    ".wav": "audio/wav",
    ".webm": "video/webm",
}
"""Extensions missing from some platform MIME tables (lowercase, with dot)."""

ACCEPTED_MEDIA_TYPES = ("audio", "video")
"""Top-level MIME types Deepgram can transcribe."""

# ---------------------------------------------------------------------------
# API and output defaults
# ---------------------------------------------------------------------------

DEEPGRAM_BASE_URL = os.getenv("DEEPGRAM_BASE_URL", "https://api.deepgram.com/v1")
DEEPGRAM_MODEL = os.getenv("DEEPGRAM_MODEL", "").strip() or None
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en_us")
DEFAULT_PRESET = os.getenv("DEFAULT_CAPTION_PRESET", "broadcast")
DEFAULT_OUTPUT_PATH = "transcript.srt"
UPLOAD_CHUNK_SIZE = 64 * 1024


def load_api_key() -> str:
    """Load the Deepgram API key from the environment.

    Raises:
        ValueError: If DEEPGRAM_API_KEY is missing or empty.
    """
    key = os.getenv("DEEPGRAM_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Deepgram API key not configured. "
            "Set DEEPGRAM_API_KEY in the environment or a .env file, "
            "or pass --deepgram-api-key."
        )
    return key
