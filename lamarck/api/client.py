"""Async HTTP client for the Deepgram pre-recorded speech-to-text API.

WHY: The tool needs to send a media file (streamed from disk) or a media
URL to Deepgram and get back a word-timed transcript. This module keeps the
HTTP details (auth header, query options, streaming body, error bodies)
behind one client class so the pipeline and tests never touch httpx
directly.

HOW: Uses httpx.AsyncClient. DeepgramClient is an async context manager:
enter it to get an authenticated connection pool, exit to close it.
transcribe() issues a single POST /listen. Local files are streamed in
chunks through an async generator that reports bytes sent to on_progress.

RULES:
- Always use the async context manager (async with DeepgramClient(...) as client:)
- Auth header is "Authorization: Token <key>"
- URL sources send JSON {"url": ...}; file sources send raw bytes with the
  file's Content-Type and an explicit Content-Length
- Non-2xx responses raise DeepgramAPIError; 2xx bodies that cannot be parsed
  raise DeepgramResponseError; transport errors propagate as httpx.HTTPError;
  nothing is retried
- on_status / on_progress callbacks are optional
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from pathlib import Path

import httpx

from lamarck.api.models import DeepgramResponse
from lamarck.config import DEEPGRAM_BASE_URL, DEEPGRAM_MODEL, UPLOAD_CHUNK_SIZE, load_api_key
from lamarck.core.source import MediaSource

logger = logging.getLogger(__name__)


class DeepgramAPIError(Exception):
    """Raised when Deepgram answers with a non-2xx status.

    Attributes:
        status_code: HTTP status.
        message: err_msg from the body when present, else the body text.
        err_code: Deepgram's err_code, if any.
        request_id: Deepgram's request_id, if any.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        err_code: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.err_code = err_code
        self.request_id = request_id
        detail = "{}: {}".format(err_code, message) if err_code else message
        super().__init__("Deepgram reported an error {}: {}".format(status_code, detail))

    @classmethod
    def from_response(cls, resp: httpx.Response) -> DeepgramAPIError:
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            return cls(
                resp.status_code,
                str(body.get("err_msg") or body.get("message") or resp.text),
                err_code=body.get("err_code"),
                request_id=body.get("request_id"),
            )
        return cls(resp.status_code, resp.text)


class DeepgramResponseError(ValueError):
    """Raised when a 2xx answer from Deepgram cannot be parsed.

    Covers bodies that are not JSON and JSON that lacks the fields the
    transcript needs (results.channels, word start/end, ...).
    """

    def __init__(self, detail: str, request_id: str | None = None) -> None:
        self.detail = detail
        self.request_id = request_id
        super().__init__("Deepgram returned an unreadable response: {}".format(detail))


async def _iter_file(
    path: Path,
    chunk_size: int,
    on_progress: Callable[[int], None] | None,
) -> AsyncIterator[bytes]:
    """Yield a file's bytes chunk by chunk, reporting each chunk's size."""
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            if on_progress:
                on_progress(len(chunk))
            yield chunk


class DeepgramClient:
    """Async client for Deepgram's POST /v1/listen endpoint.

    RULES:
    - api_key defaults to load_api_key() (DEEPGRAM_API_KEY)
    - base_url defaults to DEEPGRAM_BASE_URL
    - model defaults to DEEPGRAM_MODEL; when None the parameter is omitted
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        chunk_size: int = UPLOAD_CHUNK_SIZE,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or DEEPGRAM_BASE_URL).rstrip("/")
        self._model = model or DEEPGRAM_MODEL
        self._transport = transport
        self._chunk_size = chunk_size
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> DeepgramClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": "Token {}".format(self._api_key)},
            timeout=httpx.Timeout(300.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "DeepgramClient must be used as an async context manager: "
                "async with DeepgramClient() as client: ..."
            )
        return self._client

    def build_params(
        self,
        language: str,
        punctuate: bool = True,
        utterances: bool = True,
    ) -> dict[str, str]:
        """Query parameters for /listen (booleans as "true"/"false")."""
        params = {
            "punctuate": "true" if punctuate else "false",
            "utterances": "true" if utterances else "false",
            "language": language,
        }
        if self._model:
            params["model"] = self._model
        return params

    async def transcribe(
        self,
        source: MediaSource,
        language: str,
        punctuate: bool = True,
        utterances: bool = True,
        on_status: Callable[[str], None] | None = None,
        on_progress: Callable[[int], None] | None = None,
    ) -> DeepgramResponse:
        """Transcribe a URL or local file and return the parsed response.

        Args:
            source: Resolved media source.
            language: Deepgram language code, e.g. "en-US".
            punctuate: Ask Deepgram for punctuated words.
            utterances: Ask Deepgram for speaker-turn utterances.
            on_status: Optional callback for status messages.
            on_progress: Optional callback with the byte count of each
                uploaded chunk (file sources only).

        Raises:
            DeepgramAPIError: On any non-2xx response.
            DeepgramResponseError: On a 2xx body that is not a transcript.
            httpx.HTTPError: On transport failures.
        """
        client = self._ensure_client()
        params = self.build_params(language, punctuate=punctuate, utterances=utterances)
        logger.debug("POST /listen params=%s source=%s", params, source.name)

        if source.is_url:
            if on_status:
                on_status("Sending URL to Deepgram...")
            resp = await client.post("/listen", params=params, json={"url": source.url})
        else:
            if on_status:
                on_status("Uploading {} to Deepgram...".format(source.name))
            headers = {"Content-Type": source.mime_type or "application/octet-stream"}
            size = source.size
            if size is not None:
                headers["Content-Length"] = str(size)
            resp = await client.post(
                "/listen",
                params=params,
                headers=headers,
                content=_iter_file(source.path, self._chunk_size, on_progress),
            )

        if resp.status_code not in (200, 201):
            error = DeepgramAPIError.from_response(resp)
            logger.debug("Deepgram error body: %s", resp.text)
            raise error

        if on_status:
            on_status("Processing Deepgram response...")
        response = _parse_response(resp)
        logger.info(
            "Deepgram request %s: %.1fs of media, %d channel(s)",
            response.metadata.request_id,
            response.metadata.duration,
            len(response.channels),
        )
        return response


def _parse_response(resp: httpx.Response) -> DeepgramResponse:
    """Parse a 2xx body, turning any structural problem into DeepgramResponseError."""
    request_id = resp.headers.get("dg-request-id")
    try:
        data = resp.json()
    except ValueError as e:
        logger.debug("Non-JSON Deepgram body: %s", resp.text[:500])
        raise DeepgramResponseError("body is not JSON ({})".format(e), request_id) from e
    if not isinstance(data, dict):
        raise DeepgramResponseError(
            "expected a JSON object, got {}".format(type(data).__name__), request_id
        )
    try:
        return DeepgramResponse.from_dict(data)
    except KeyError as e:
        raise DeepgramResponseError("missing field {}".format(e), request_id) from e
    except (TypeError, ValueError, AttributeError) as e:
        raise DeepgramResponseError(str(e), request_id) from e
