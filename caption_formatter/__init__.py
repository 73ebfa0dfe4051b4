"""Caption formatter library: timed words in, timed caption blocks out.

WHY: Every caption output of lamarck (SRT, WebVTT, single-word captions)
needs the same grouping of words into readable, non-overlapping blocks.
This package holds that logic with no network, file or global state, so it
can be tested on its own and called concurrently.

HOW: format_units(units, config) runs the greedy grouping pass and returns
CaptionBlocks; to_srt()/to_vtt() serialise them. format_srt()/format_vtt()
are shortcuts that resolve a preset name and do both steps.

RULES:
- The formatter is a pure function of (units, config).
- Every failure is a FormatError subclass raised before any output exists.
- Presets are immutable CaptionConfig values.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .core import format_units, format_units_with_diagnostics, validate_units, wrap_text
from .errors import (
    ConfigurationError,
    EmptyInputError,
    FormatError,
    InvalidTimingError,
    InvalidUnitError,
)
from .models import CaptionBlock, CaptionConfig, Diagnostic, FormatResult, TimedUnit
from .presets import PRESETS, get_preset
from .render import seconds_to_srt_time, seconds_to_vtt_time, to_srt, to_vtt

__all__ = [
    "CaptionBlock",
    "CaptionConfig",
    "ConfigurationError",
    "Diagnostic",
    "EmptyInputError",
    "FormatError",
    "FormatResult",
    "InvalidTimingError",
    "InvalidUnitError",
    "PRESETS",
    "TimedUnit",
    "format_srt",
    "format_units",
    "format_units_with_diagnostics",
    "format_vtt",
    "get_preset",
    "seconds_to_srt_time",
    "seconds_to_vtt_time",
    "to_srt",
    "to_vtt",
    "validate_units",
    "wrap_text",
]


def _resolve(preset: str, config: Optional[CaptionConfig]) -> CaptionConfig:
    return config if config is not None else get_preset(preset)


def format_srt(
    units: Iterable[TimedUnit],
    preset: str = "broadcast",
    config: Optional[CaptionConfig] = None,
) -> str:
    """Format units into an SRT document.

    Args:
        units: Time-ordered TimedUnits.
        preset: Preset name, ignored when config is given.
        config: Explicit limits.

    Raises:
        ValueError: Unknown preset name.
        FormatError: Empty or malformed input.
    """
    return to_srt(format_units(units, _resolve(preset, config)))


def format_vtt(
    units: Iterable[TimedUnit],
    preset: str = "broadcast",
    config: Optional[CaptionConfig] = None,
) -> str:
    """Format units into a WebVTT document (see format_srt())."""
    return to_vtt(format_units(units, _resolve(preset, config)))
