"""Data models for the caption formatter.

WHY: The formatter turns timed words into timed caption blocks. Both sides
of that transformation, and the knobs that steer it, need explicit typed
shapes so that callers cannot pass a half-filled config or mutate a block
after it has been emitted.

HOW: Frozen dataclasses. TimedUnit is the input, CaptionBlock the output,
CaptionConfig the (required, validated) limits, Diagnostic a non-fatal note
about something the formatter had to adjust.

RULES:
- Timestamps are float seconds, never milliseconds.
- TimedUnit.text is never rewritten, only wrapped onto lines.
- CaptionConfig has no defaults: every limit is chosen by the caller or a preset.
- CaptionConfig validates itself on construction (ConfigurationError).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import ConfigurationError


@dataclass(frozen=True)
class TimedUnit:
    """One recognized word or short phrase.

    Attributes:
        text: The word text as it should be displayed.
        start: Start time in seconds.
        end: End time in seconds.
        confidence: Recognizer confidence 0.0-1.0, if the provider sent one.
    """

    text: str
    start: float
    end: float
    confidence: Optional[float] = None


@dataclass(frozen=True)
class CaptionBlock:
    """One rendered subtitle entry."""

    index: int
    start: float
    end: float
    lines: Tuple[str, ...]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class CaptionConfig:
    """Limits applied while grouping units into blocks.

    Attributes:
        max_chars_per_line: Widest allowed line, in characters.
        max_lines_per_block: Most lines a single block may show.
        max_block_duration: Longest a block may stay on screen, in seconds.
            A single unit longer than this still gets its own block.
        min_block_duration: Shortest on-screen time; short blocks are
            extended up to this, never into the next block's gap.
        min_gap: Seconds kept free between one block's end and the next start.
        max_units_per_block: Most units in one block, or None for no cap.
    """

    max_chars_per_line: int
    max_lines_per_block: int
    max_block_duration: float
    min_block_duration: float
    min_gap: float
    max_units_per_block: Optional[int]

    def __post_init__(self) -> None:
        if self.max_chars_per_line <= 0:
            raise ConfigurationError(
                "max_chars_per_line must be positive, got {}".format(self.max_chars_per_line)
            )
        if self.max_lines_per_block <= 0:
            raise ConfigurationError(
                "max_lines_per_block must be positive, got {}".format(self.max_lines_per_block)
            )
        if self.max_block_duration <= 0:
            raise ConfigurationError(
                "max_block_duration must be positive, got {}".format(self.max_block_duration)
            )
        if self.min_block_duration < 0:
            raise ConfigurationError(
                "min_block_duration must not be negative, got {}".format(self.min_block_duration)
            )
        if self.min_block_duration > self.max_block_duration:
            raise ConfigurationError(
                "min_block_duration ({}) exceeds max_block_duration ({})".format(
                    self.min_block_duration, self.max_block_duration
                )
            )
        if self.min_gap < 0:
            raise ConfigurationError(
                "min_gap must not be negative, got {}".format(self.min_gap)
            )
        if self.max_units_per_block is not None and self.max_units_per_block <= 0:
            raise ConfigurationError(
                "max_units_per_block must be positive or None, got {}".format(
                    self.max_units_per_block
                )
            )

    def replace(self, **overrides) -> CaptionConfig:
        """Return a validated copy with some limits changed.

        None values are ignored so CLI flags that were not given can be
        passed straight through.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal note about an adjustment made while formatting.

    Attributes:
        code: Stable identifier, e.g. ``"caption::overlap_clamped"``.
        message: Human-readable description.
        time: Media time (seconds) the note refers to.
    """

    code: str
    message: str
    time: float


@dataclass
class FormatResult:
    """Blocks plus the diagnostics gathered while producing them."""

    blocks: List[CaptionBlock] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
