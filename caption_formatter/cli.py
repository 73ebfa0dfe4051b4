"""Offline CLI for the caption formatter.

WHY: Re-captioning a transcript with different limits should not need a new
(paid) transcription. This command formats a saved Deepgram response or a
word list straight into SRT or WebVTT.

HOW: Reads JSON from a file or stdin, extracts TimedUnits, resolves the
preset plus any limit overrides, formats, and writes to a file or stdout.

RULES:
- Usage:
    python -m caption_formatter input.json output.srt
    python -m caption_formatter input.json --preset social --format vtt
    cat input.json | python -m caption_formatter - output.srt
- Exit codes: 0 = success, 1 = error.
- Messages go to stderr; caption text goes to stdout when no output is given.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .core import format_units_with_diagnostics
from .parsing import parse_input, try_parse_json
from .presets import PRESETS, get_preset
from .render import RENDERERS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="caption_formatter",
        description="Format a saved transcript (Deepgram JSON or word list) into captions.",
    )
    parser.add_argument("input", help="Transcript JSON file, or '-' for stdin.")
    parser.add_argument("output", nargs="?", default=None,
                        help="Output caption file (default: stdout).")
    parser.add_argument("--preset", default="broadcast",
                        help="Caption preset: {} (default: %(default)s).".format(
                            ", ".join(PRESETS.keys())))
    parser.add_argument("--format", dest="fmt", choices=sorted(RENDERERS.keys()),
                        default="srt", help="Output format (default: %(default)s).")
    parser.add_argument("--channel", type=int, default=0,
                        help="Deepgram channel to read (default: %(default)s).")
    parser.add_argument("--alternative", type=int, default=0,
                        help="Deepgram alternative to read (default: %(default)s).")
    parser.add_argument("--max-chars-per-line", type=int, default=None)
    parser.add_argument("--max-lines-per-block", type=int, default=None)
    parser.add_argument("--max-block-duration", type=float, default=None)
    parser.add_argument("--min-block-duration", type=float, default=None)
    parser.add_argument("--min-gap", type=float, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Run the caption formatter CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
    """
    args = build_parser().parse_args(argv)

    try:
        config = get_preset(args.preset).replace(
            max_chars_per_line=args.max_chars_per_line,
            max_lines_per_block=args.max_lines_per_block,
            max_block_duration=args.max_block_duration,
            min_block_duration=args.min_block_duration,
            min_gap=args.min_gap,
        )
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    if args.input == "-":
        raw = sys.stdin.read()
    else:
        try:
            with open(args.input, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            print("Error: {}".format(e), file=sys.stderr)
            sys.exit(1)

    try:
        data = try_parse_json(raw)
        units = parse_input(data, channel=args.channel, alternative=args.alternative)
        result = format_units_with_diagnostics(units, config)
    except ValueError as e:
        # FormatError or unparseable JSON
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    for diagnostic in result.diagnostics:
        print("  [{}] {}".format(diagnostic.code, diagnostic.message), file=sys.stderr)

    document = RENDERERS[args.fmt](result.blocks)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(document)
        print(
            "Wrote {} captions ({} preset) to {}".format(
                len(result.blocks), args.preset, args.output
            ),
            file=sys.stderr,
        )
    else:
        sys.stdout.write(document)


if __name__ == "__main__":
    main()
