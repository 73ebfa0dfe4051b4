"""SRT, WebVTT and single-word caption formatters.

WHY: Captions are the main product of lamarck. Multi-channel recordings and
requests with several alternatives each deserve their own caption file, and
burn-in social video wants one word per caption instead of full lines.

HOW: Every channel/alternative's TimedUnits go through
caption_formatter.format_units_with_diagnostics() with the formatter's
CaptionConfig, then through the SRT or WebVTT renderer. The three public
classes only differ in renderer, config and suffix.

RULES:
- One output per channel/alternative that has words:
  ``-channel-{c}-alternative-{a}.srt`` (``.vtt``, ``-beast.srt``).
- Alternatives without words are skipped with a warning.
- Formatting diagnostics are logged at debug level.
- Beast captions always use the "word" preset limits.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Iterable, List

from caption_formatter import (
    CaptionBlock,
    CaptionConfig,
    format_units_with_diagnostics,
    get_preset,
    to_srt,
    to_vtt,
)
from lamarck.core.ir import Transcript
from lamarck.formatters.base import BaseFormatter, FormatterOutput

logger = logging.getLogger(__name__)


class _CaptionFileFormatter(BaseFormatter):
    """Shared loop over channel/alternatives."""

    _extension = ".srt"
    _tag = ""
    _media_type = "application/x-subrip"

    def __init__(self, config: CaptionConfig) -> None:
        self.config = config

    @abstractmethod
    def _render(self, blocks: Iterable[CaptionBlock]) -> str:
        """Serialise the blocks as a caption document."""

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        outputs = []  # type: List[FormatterOutput]
        for alt in transcript.alternatives:
            if not alt.units:
                logger.warning(
                    "Skipping %s for channel %d alternative %d: no words",
                    self.name, alt.channel, alt.alternative,
                )
                continue
            result = format_units_with_diagnostics(alt.units, self.config)
            for diagnostic in result.diagnostics:
                logger.debug("[%s] %s", diagnostic.code, diagnostic.message)
            outputs.append(FormatterOutput(
                suffix="-channel-{}-alternative-{}{}{}".format(
                    alt.channel, alt.alternative, self._tag, self._extension
                ),
                content=self._render(result.blocks),
                media_type=self._media_type,
            ))
        return outputs


class SRTCaptionFormatter(_CaptionFileFormatter):
    """SubRip captions, one file per channel/alternative."""

    @property
    def name(self) -> str:
        return "SRT captions"

    def _render(self, blocks: Iterable[CaptionBlock]) -> str:
        return to_srt(blocks)


class VTTCaptionFormatter(_CaptionFileFormatter):
    """WebVTT captions, one file per channel/alternative."""

    _extension = ".vtt"
    _media_type = "text/vtt"

    @property
    def name(self) -> str:
        return "WebVTT captions"

    def _render(self, blocks: Iterable[CaptionBlock]) -> str:
        return to_vtt(blocks)


class BeastCaptionFormatter(SRTCaptionFormatter):
    """Single-word SRT captions, as burned into fast-paced social video.

    The caller's line width is kept; grouping limits come from the "word" preset.
    """

    _tag = "-beast"

    def __init__(self, config: CaptionConfig) -> None:
        word = get_preset("word")
        super().__init__(word.replace(max_chars_per_line=config.max_chars_per_line))

    @property
    def name(self) -> str:
        return "Beast captions"

