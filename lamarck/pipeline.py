"""The transcribe-and-caption pipeline.

WHY: The CLI, tests and any future front end need the same sequence:
validate where output goes, resolve the input, transcribe, validate the
transcript, render every requested output, write files. Keeping it here,
driven by an explicitly passed RunContext, keeps the CLI thin and keeps
the HTTP client and progress bar out of module-level state.

HOW: run() awaits the Deepgram task, then runs the pure steps. All outputs
are rendered in memory before the first file is written, so a formatting
error never leaves a truncated set of caption files behind. A failed write
removes the files written before it.

RULES:
- The output directory must already exist (OutputDirNotExistError).
- Existing files are never overwritten: -2, -3, ... is inserted before the
  extension instead.
- The caption formatter only runs after the transcription task resolved.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from caption_formatter import CaptionConfig
from lamarck.api.client import DeepgramClient
from lamarck.core.assembler import KEEP_ALL, ConfidencePolicy, build_transcript
from lamarck.core.ir import Transcript
from lamarck.core.source import resolve_source
from lamarck.formatters import build_formatter
from lamarck.formatters.base import FormatterOutput
from lamarck.progress import ProgressReporter

logger = logging.getLogger(__name__)


class OutputDirNotExistError(ValueError):
    """Raised when the directory of the output path does not exist."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        super().__init__(
            "The output directory {} doesn't exist. "
            "Create it if you wish to write files there.".format(output_dir)
        )


@dataclass
class CaptionRequest:
    """Everything the user asked for in one run."""

    input: str
    output_path: Path
    language: str
    formats: List[str]
    caption_config: CaptionConfig
    confidence_policy: ConfidencePolicy = KEEP_ALL
    mime_type: Optional[str] = None


@dataclass
class RunContext:
    """Collaborators for one run, constructed by the caller.

    Attributes:
        client_factory: Returns a fresh (not yet entered) DeepgramClient.
        progress: Progress bar and status line sink.
    """

    client_factory: Callable[[], DeepgramClient]
    progress: ProgressReporter = field(default_factory=lambda: ProgressReporter(enabled=False))


def check_output_location(output_path: Path) -> Path:
    """Return the directory outputs go to, or raise if it doesn't exist."""
    parent = output_path.parent
    if str(parent) in ("", "."):
        return Path.cwd()
    if not parent.is_dir():
        raise OutputDirNotExistError(parent)
    return parent


def resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Return ``output_dir/{stem}{suffix}``, adding -2, -3, ... on conflict.

    The counter goes before the final extension:
    ``transcript-channel-0-alternative-0-2.srt``, ``transcript-2.txt``.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx >= 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def render_outputs(
    transcript: Transcript,
    format_keys: List[str],
    config: CaptionConfig,
    on_status: Optional[Callable[[str], None]] = None,
) -> List[FormatterOutput]:
    """Run every requested formatter, keeping all results in memory.

    Raises:
        caption_formatter.FormatError: If any caption output cannot be built.
    """
    outputs = []  # type: List[FormatterOutput]
    for key in format_keys:
        formatter = build_formatter(key, config)
        if on_status:
            on_status("  Running {} formatter...".format(formatter.name))
        outputs.extend(formatter.format(transcript))
    return outputs


def save_outputs(outputs: List[FormatterOutput], stem: str, output_dir: Path) -> List[Path]:
    """Write rendered outputs to disk and return their paths.

    If a write fails, every file this call created (including a partly
    written one) is removed before the OSError propagates. They are always
    new files, so nothing the user had before is touched.
    """
    saved = []  # type: List[Path]
    try:
        for output in outputs:
            path = resolve_output_path(stem, output.suffix, output_dir)
            saved.append(path)
            path.write_text(output.content, encoding="utf-8")
            logger.debug("Wrote %s (%s, %d chars)", path, output.media_type, len(output.content))
    except OSError:
        for path in saved:
            logger.debug("Removing %s after a failed write", path)
            path.unlink(missing_ok=True)
        raise
    return saved


async def transcribe(ctx: RunContext, request: CaptionRequest) -> Transcript:
    """Resolve the input, call Deepgram and return the validated Transcript."""
    source = resolve_source(request.input, request.mime_type)
    ctx.progress.set_total(source.size)

    async with ctx.client_factory() as client:
        ctx.progress.status("Waiting for Deepgram...")
        response = await client.transcribe(
            source,
            request.language,
            on_status=ctx.progress.status,
            on_progress=ctx.progress.advance,
        )

    transcript = build_transcript(
        response,
        source_name=source.name,
        language=request.language,
        policy=request.confidence_policy,
        source_url=source.url,
    )
    for diagnostic in transcript.diagnostics:
        ctx.progress.status("  [{}] {}".format(diagnostic.code, diagnostic.message))
    return transcript


async def run(ctx: RunContext, request: CaptionRequest) -> List[Path]:
    """Execute the full pipeline and return the written file paths.

    Raises:
        OutputDirNotExistError, SourceError: Before any network call.
        DeepgramAPIError, DeepgramResponseError, httpx.HTTPError: Transcription failed.
        FormatError: The transcript could not be captioned; nothing written.
    """
    output_dir = check_output_location(request.output_path)
    stem = request.output_path.stem or "transcript"

    transcript = await transcribe(ctx, request)

    ctx.progress.status("Formatting output...")
    outputs = render_outputs(
        transcript, request.formats, request.caption_config, on_status=ctx.progress.status
    )
    return save_outputs(outputs, stem, output_dir)
