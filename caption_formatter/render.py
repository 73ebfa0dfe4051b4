"""SRT and WebVTT serialisation of caption blocks.

WHY: The formatter produces timing and line layout; players need the exact
text encodings of SubRip and WebVTT. Keeping serialisation separate means
the same blocks can be written in either format.

HOW: Timestamps are rounded to whole milliseconds once, then split into
hours, minutes, seconds and milliseconds. Each block becomes its header
line(s), its text lines and a terminating blank line.

RULES:
- SRT: "index", "HH:MM:SS,mmm --> HH:MM:SS,mmm", text lines, blank line.
- WebVTT: "WEBVTT" header, blank line, then timestamp line with "." before
  the milliseconds, text lines, blank line.
- Hours are not wrapped at 24.
- An empty block list renders as an empty SRT string (a bare header for VTT).
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .models import CaptionBlock


def _split_timestamp(seconds: float) -> Tuple[int, int, int, int]:
    total_ms = int(round(max(0.0, seconds) * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return hours, minutes, secs, millis


def seconds_to_srt_time(seconds: float) -> str:
    """Convert seconds to an SRT timestamp: HH:MM:SS,mmm"""
    return "{:02d}:{:02d}:{:02d},{:03d}".format(*_split_timestamp(seconds))


def seconds_to_vtt_time(seconds: float) -> str:
    """Convert seconds to a WebVTT timestamp: HH:MM:SS.mmm"""
    return "{:02d}:{:02d}:{:02d}.{:03d}".format(*_split_timestamp(seconds))


def to_srt(blocks: Iterable[CaptionBlock]) -> str:
    """Render blocks as a SubRip document."""
    out = []  # type: List[str]
    for block in blocks:
        out.append(str(block.index))
        out.append("{} --> {}".format(
            seconds_to_srt_time(block.start), seconds_to_srt_time(block.end)
        ))
        out.extend(block.lines)
        out.append("")
    if not out:
        return ""
    return "\n".join(out) + "\n"


def to_vtt(blocks: Iterable[CaptionBlock]) -> str:
    """Render blocks as a WebVTT document."""
    out = ["WEBVTT", ""]
    for block in blocks:
        out.append("{} --> {}".format(
            seconds_to_vtt_time(block.start), seconds_to_vtt_time(block.end)
        ))
        out.extend(block.lines)
        out.append("")
    return "\n".join(out) + "\n"


RENDERERS = {
    "srt": to_srt,
    "vtt": to_vtt,
}
