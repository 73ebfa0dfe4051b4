"""Resolve the CLI input into something Deepgram can transcribe.

WHY: The tool accepts either a media URL (Deepgram fetches it) or a local
file (we stream its bytes). Files need a Content-Type, and a file that is
not audio or video should be rejected before any upload starts.

HOW: http(s) inputs become URL sources. Everything else is treated as a
path: it must exist, and its MIME type comes from --mime-type, then
EXTRA_MIME_TYPES, then the platform's mimetypes table.

RULES:
- Only http and https count as URLs.
- A guess that is not audio/* or video/* raises InvalidMimeTypeError.
- No guess at all raises MimeGuessError (the user can pass --mime-type).
- All errors are SourceError, a ValueError.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from lamarck.config import ACCEPTED_MEDIA_TYPES, EXTRA_MIME_TYPES


class SourceError(ValueError):
    """Base class for input resolution errors."""


class InputNotFoundError(SourceError):
    """Raised when the input is neither a URL nor an existing file."""


class MimeGuessError(SourceError):
    """Raised when no MIME type can be guessed for the input file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            "Couldn't guess a mime type for {}, try specifying it with --mime-type.".format(path)
        )


class InvalidMimeTypeError(SourceError):
    """Raised when the input file is not audio or video."""

    def __init__(self, path: Path, mime_type: str) -> None:
        self.path = path
        self.mime_type = mime_type
        super().__init__(
            "Media type {} of {} is not audio or video. "
            "Deepgram requires an audio or video file.".format(mime_type, path)
        )


@dataclass(frozen=True)
class MediaSource:
    """Either a remote URL or a local file with its MIME type."""

    url: str | None = None
    path: Path | None = None
    mime_type: str | None = None

    @property
    def is_url(self) -> bool:
        return self.url is not None

    @property
    def name(self) -> str:
        """Short display name (file name or URL)."""
        if self.path is not None:
            return self.path.name
        return self.url or ""

    @property
    def size(self) -> int | None:
        if self.path is not None:
            return self.path.stat().st_size
        return None


def is_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def guess_mime_type(path: Path) -> str | None:
    """Guess a MIME type from the file extension."""
    ext = path.suffix.lower()
    if ext in EXTRA_MIME_TYPES:
        return EXTRA_MIME_TYPES[ext]
    guess, _encoding = mimetypes.guess_type(path.name)
    return guess


def resolve_source(value: str, mime_type: str | None = None) -> MediaSource:
    """Turn a CLI input string into a MediaSource.

    Args:
        value: URL or file path.
        mime_type: Explicit MIME type for files, skipping the guess.

    Raises:
        InputNotFoundError: Not a URL and not an existing file.
        MimeGuessError: No MIME type could be determined.
        InvalidMimeTypeError: The MIME type is not audio/* or video/*.
    """
    if is_url(value):
        return MediaSource(url=value)

    path = Path(value).expanduser()
    if not path.is_file():
        raise InputNotFoundError(
            "Failed to parse a URL or find a file for input: {}".format(value)
        )

    resolved = mime_type or guess_mime_type(path)
    if resolved is None:
        raise MimeGuessError(path)
    if resolved.split("/", 1)[0] not in ACCEPTED_MEDIA_TYPES:
        raise InvalidMimeTypeError(path, resolved)

    return MediaSource(path=path.resolve(), mime_type=resolved)
