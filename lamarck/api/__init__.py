"""Deepgram API client package — async HTTP interface to the transcription service.

WHY: All Deepgram communication (auth, options, streaming upload, error
bodies) lives behind one client class so the rest of lamarck only sees typed
response objects.

HOW: DeepgramClient wraps httpx.AsyncClient; models.py holds the response
dataclasses.

RULES:
- All HTTP requests go through DeepgramClient
- Callers see DeepgramAPIError, DeepgramResponseError or httpx.HTTPError, never raw KeyErrors
"""

from lamarck.api.client import DeepgramAPIError, DeepgramClient, DeepgramResponseError
from lamarck.api.models import DeepgramResponse, DeepgramWord

__all__ = [
    "DeepgramAPIError",
    "DeepgramClient",
    "DeepgramResponse",
    "DeepgramResponseError",
    "DeepgramWord",
]
