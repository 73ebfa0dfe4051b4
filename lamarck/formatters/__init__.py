"""Output formatter registry.

WHY: The CLI maps output flags (--srt, --vtt, --raw, ...) to formatters. A
central dict keeps that mapping in one place: adding an output type is one
new module plus one line here.

HOW: FORMATTERS maps a key to a formatter *class*. Caption formatters are
constructed with the run's CaptionConfig, the others without arguments;
build_formatter() hides that difference.

RULES:
- Keys match the CLI flag names
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from caption_formatter import CaptionConfig
from lamarck.formatters.base import BaseFormatter
from lamarck.formatters.captions import (
    BeastCaptionFormatter,
    SRTCaptionFormatter,
    VTTCaptionFormatter,
)
from lamarck.formatters.markdown import MarkdownFormatter
from lamarck.formatters.plain_text import PlainTextFormatter
from lamarck.formatters.raw_response import RawResponseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "raw": RawResponseFormatter,
    "srt": SRTCaptionFormatter,
    "vtt": VTTCaptionFormatter,
    "beast": BeastCaptionFormatter,
    "transcript": PlainTextFormatter,
    "markdown": MarkdownFormatter,
}

CAPTION_FORMATTERS = frozenset({"srt", "vtt", "beast"})


def build_formatter(key: str, config: CaptionConfig) -> BaseFormatter:
    """Instantiate the formatter registered under key.

    Raises:
        KeyError: If key is not registered.
    """
    cls = FORMATTERS[key]
    if key in CAPTION_FORMATTERS:
        return cls(config)  # type: ignore[call-arg]
    return cls()
