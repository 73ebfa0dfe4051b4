"""Markdown transcript with timestamps.

WHY: Show notes and video descriptions want a readable transcript where
each paragraph can be jumped to. For URL inputs the timestamps become links
to the media at that point in time.

HOW: One paragraph per channel-0 utterance (falling back to caption-sized
chunks of the primary alternative when Deepgram returned no utterances),
each prefixed by its start time. A heading names the source.

RULES:
- Timestamps are H:MM:SS (hours always shown)
- URL sources: ``[0:01:05](<url>#t=65)``; file sources: plain ``**0:01:05**``
- Speaker labels ("Speaker 1") are added when Deepgram reported speakers
- Output suffix ".md", media type "text/markdown"
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from caption_formatter import format_units, get_preset
from lamarck.core.ir import Transcript
from lamarck.formatters.base import BaseFormatter, FormatterOutput


def format_timestamp(seconds: float) -> str:
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return "{}:{:02d}:{:02d}".format(hours, minutes, secs)


def _paragraphs(transcript: Transcript) -> List[Tuple[float, Optional[int], str]]:
    """(start, speaker, text) for every paragraph, in time order."""
    paragraphs = [
        (u.start, u.speaker, u.transcript.strip())
        for u in transcript.utterances
        if u.channel == 0 and u.transcript.strip()
    ]
    if paragraphs:
        return paragraphs

    primary = transcript.primary()
    if primary is None or not primary.units:
        return []
    blocks = format_units(primary.units, get_preset("broadcast"))
    return [(b.start, None, " ".join(b.lines)) for b in blocks]


class MarkdownFormatter(BaseFormatter):
    """Timestamped markdown transcript."""

    @property
    def name(self) -> str:
        return "Markdown transcript"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        lines = ["# Transcript of {}".format(transcript.source_name), ""]

        for start, speaker, text in _paragraphs(transcript):
            stamp = format_timestamp(start)
            if transcript.source_url:
                stamp = "[{}]({}#t={})".format(stamp, transcript.source_url, int(start))
            else:
                stamp = "**{}**".format(stamp)
            if speaker is not None:
                stamp = "{} Speaker {}:".format(stamp, speaker + 1)
            lines.append("{} {}".format(stamp, text))
            lines.append("")

        return [FormatterOutput(
            suffix=".md",
            content="\n".join(lines),
            media_type="text/markdown",
        )]
