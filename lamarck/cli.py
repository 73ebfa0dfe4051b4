"""Command-line interface for lamarck.

WHY: Users want one command that takes a recording (a file or a URL) and
leaves caption files next to it. The CLI turns flags into a CaptionRequest,
builds the RunContext and reports the result.

HOW: argparse parses the flags. Every local check (API key, caption limits,
confidence policy, output directory) happens before the async pipeline
starts, so bad configuration never costs a Deepgram request. The pipeline
runs under asyncio.run(). Status lines and the tqdm bar go to stderr.

RULES:
- -i/--input is required: a file path or an http(s) URL
- Output types: --raw, -s/--srt, --vtt, -b/--beast-captions, -t/--transcript,
  -m/--markdown; SRT when none are given
- Caption limits start from --preset and are overridden by individual flags
- Output naming: {output-stem}{suffix} in the output path's directory,
  numeric suffix for conflicts (transcript-channel-0-alternative-0-2.srt)
- Errors: "Error: <message>" on stderr, exit 1; Ctrl-C exits 130
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from caption_formatter import PRESETS, CaptionConfig, FormatError, get_preset
from lamarck import __version__
from lamarck.api.client import DeepgramAPIError, DeepgramClient, DeepgramResponseError
from lamarck.config import (
    DEFAULT_LANGUAGE,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_PRESET,
    load_api_key,
    map_language,
)
from lamarck.core.assembler import CONFIDENCE_MODES, ConfidencePolicy
from lamarck.core.source import SourceError
from lamarck.pipeline import CaptionRequest, RunContext, check_output_location, run
from lamarck.progress import ProgressReporter

# (flag dest, formatter key), in output order
_OUTPUT_FLAGS = (
    ("raw", "raw"),
    ("srt", "srt"),
    ("vtt", "vtt"),
    ("beast_captions", "beast"),
    ("transcript", "transcript"),
    ("markdown", "markdown"),
)


def _selected_formats(args: argparse.Namespace) -> List[str]:
    keys = [key for dest, key in _OUTPUT_FLAGS if getattr(args, dest)]
    return keys or ["srt"]


def _caption_config(args: argparse.Namespace) -> CaptionConfig:
    """Preset limits with any per-flag overrides applied.

    Raises:
        ValueError: Unknown preset.
        ConfigurationError: The resulting limits are inconsistent.
    """
    return get_preset(args.preset).replace(
        max_chars_per_line=args.max_chars_per_line,
        max_lines_per_block=args.max_lines_per_block,
        max_block_duration=args.max_block_duration,
        min_block_duration=args.min_block_duration,
        min_gap=args.min_gap,
    )


def _confidence_policy(args: argparse.Namespace) -> ConfidencePolicy:
    return ConfidencePolicy(args.low_confidence, args.confidence_threshold)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


async def _run_pipeline(args: argparse.Namespace) -> None:
    """Validate everything local, then run the pipeline and report."""
    try:
        api_key = args.deepgram_api_key or load_api_key()
        request = CaptionRequest(
            input=args.input,
            output_path=Path(args.output_path).expanduser(),
            language=map_language(args.lang),
            formats=_selected_formats(args),
            caption_config=_caption_config(args),
            confidence_policy=_confidence_policy(args),
            mime_type=args.mime_type,
        )
        output_dir = check_output_location(request.output_path)
    except ValueError as e:
        # Missing key, bad limits, bad policy, missing output directory
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    progress = ProgressReporter(enabled=not args.no_progress)
    ctx = RunContext(
        client_factory=lambda: DeepgramClient(api_key=api_key),
        progress=progress,
    )

    try:
        saved_files = await run(ctx, request)
    except httpx.HTTPError as e:
        progress.close()
        print("Error: request to Deepgram failed: {}".format(e), file=sys.stderr)
        sys.exit(1)
    except (DeepgramAPIError, DeepgramResponseError, FormatError, SourceError, OSError) as e:
        progress.close()
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    progress.close("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    for f in saved_files:
        print("  {}".format(f.name), file=sys.stderr, flush=True)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Kept separate from main() so tests can parse arguments without running
    the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="lamarck",
        description="Transcribe audio or video with Deepgram and write captions.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Media file path or http(s) URL to transcribe",
    )
    parser.add_argument(
        "-o", "--output-path",
        default=DEFAULT_OUTPUT_PATH,
        help="Output path; its directory and stem name every output file "
             "(default: %(default)s)",
    )
    parser.add_argument(
        "--deepgram-api-key",
        default=None,
        help="Deepgram API key (default: DEEPGRAM_API_KEY from the environment or .env)",
    )
    parser.add_argument(
        "-l", "--lang",
        default=DEFAULT_LANGUAGE,
        help="Spoken language, e.g. en_us, en_gb, de, pt_br (default: %(default)s)",
    )
    parser.add_argument(
        "--mime-type",
        default=None,
        help="MIME type of the input file when it cannot be guessed, e.g. audio/mpeg",
    )

    outputs = parser.add_argument_group("outputs (SRT when none are given)")
    outputs.add_argument("--raw", action="store_true", help="Raw Deepgram JSON response")
    outputs.add_argument("-s", "--srt", action="store_true", help="SRT captions")
    outputs.add_argument("--vtt", action="store_true", help="WebVTT captions")
    outputs.add_argument(
        "-b", "--beast-captions",
        action="store_true",
        help="One-word-per-block SRT captions",
    )
    outputs.add_argument("-t", "--transcript", action="store_true", help="Plain text transcript")
    outputs.add_argument(
        "-m", "--markdown",
        action="store_true",
        help="Markdown transcript with timestamps",
    )

    captions = parser.add_argument_group("caption layout")
    captions.add_argument(
        "--preset",
        default=DEFAULT_PRESET,
        choices=sorted(PRESETS),
        help="Caption limits preset (default: %(default)s)",
    )
    captions.add_argument("--max-chars-per-line", type=int, default=None)
    captions.add_argument("--max-lines-per-block", type=int, default=None)
    captions.add_argument(
        "--max-block-duration", type=float, default=None, help="Seconds",
    )
    captions.add_argument(
        "--min-block-duration", type=float, default=None, help="Seconds",
    )
    captions.add_argument("--min-gap", type=float, default=None, help="Seconds")
    captions.add_argument(
        "--low-confidence",
        default="keep",
        choices=CONFIDENCE_MODES,
        help="What to do with words below --confidence-threshold (default: %(default)s)",
    )
    captions.add_argument(
        "--confidence-threshold",
        type=float,
        default=None,
        help="Word confidence (0-1) below which --low-confidence applies",
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Don't show the progress bar",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``lamarck`` and ``python -m lamarck``.

    argv=None means sys.argv; tests pass an explicit list.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        asyncio.run(_run_pipeline(args))
    except KeyboardInterrupt:
        print("\nCancelled by user.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
