"""Core caption formatting: validation, grouping, line wrapping and timing.

WHY: A transcript arrives as a flat list of timed words. Viewers need short,
readable blocks that stay on screen long enough, never overlap, and never
exceed the line width of the target format. This module is the single place
where that transformation happens.

HOW: A greedy single pass, left to right over time-ordered units:
  1. validate_units() rejects empty input and malformed timing up front.
  2. _resolve_overlaps() clamps an earlier unit's end onto the next start.
  3. _group() fills one pending block at a time, re-wrapping its last line
     at word boundaries (words wider than a line start a fresh line and
     are hard-broken at the width) and closing the block when a line,
     duration or unit limit would be crossed.
  4. _finalize() applies minimum duration and minimum gap and assigns
     contiguous 1-based indices.

RULES:
- Pure functions only: no I/O, no globals, no mutation of the caller's units.
- Every limit comes from the CaptionConfig argument.
- Input order is authoritative; units with equal starts keep their order.
- Nothing is emitted when validation fails (all-or-nothing).
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .errors import EmptyInputError, InvalidTimingError, InvalidUnitError
from .models import CaptionBlock, CaptionConfig, Diagnostic, FormatResult, TimedUnit

# Smallest on-screen time a block can get (one SRT/VTT millisecond).
_MIN_DISPLAY_S = 0.001

# Float slack when comparing a block end against the next start.
_EPSILON = 1e-9


@dataclass
class _Span:
    """A unit after whitespace normalisation and overlap clamping."""

    text: str
    start: float
    end: float


@dataclass
class _Draft:
    """The pending block while it is being filled."""

    start: float
    end: float
    lines: List[str]
    units: int


# =============================================================================
# Validation
# =============================================================================

def validate_units(units: Sequence[TimedUnit]) -> None:
    """Check that a unit sequence can be formatted.

    Raises:
        EmptyInputError: If there are no units.
        InvalidUnitError: If a unit has blank text.
        InvalidTimingError: If a unit starts before zero, does not end after
            it starts, or starts before the unit preceding it.
    """
    if not units:
        raise EmptyInputError()

    previous_start = None  # type: Optional[float]
    for position, unit in enumerate(units):
        if not unit.text or not unit.text.strip():
            raise InvalidUnitError(
                "unit {} at {:.3f}s has no text".format(position, unit.start),
                position=position,
            )
        if unit.start < 0:
            raise InvalidTimingError(
                "unit {} ({!r}) starts at negative time {:.3f}s".format(
                    position, unit.text, unit.start
                ),
                position=position,
            )
        if unit.start >= unit.end:
            raise InvalidTimingError(
                "unit {} ({!r}) has start {:.3f}s >= end {:.3f}s".format(
                    position, unit.text, unit.start, unit.end
                ),
                position=position,
            )
        if previous_start is not None and unit.start < previous_start:
            raise InvalidTimingError(
                "unit {} ({!r}) starts at {:.3f}s, before the previous unit at {:.3f}s".format(
                    position, unit.text, unit.start, previous_start
                ),
                position=position,
            )
        previous_start = unit.start


# =============================================================================
# Public entry points
# =============================================================================

def format_units(units: Iterable[TimedUnit], config: CaptionConfig) -> List[CaptionBlock]:
    """Group timed units into caption blocks.

    Args:
        units: Time-ordered units (words or short phrases).
        config: The limits to honour.

    Returns:
        Blocks with contiguous indices starting at 1.

    Raises:
        EmptyInputError, InvalidUnitError, InvalidTimingError: see validate_units().
    """
    return format_units_with_diagnostics(units, config).blocks


def format_units_with_diagnostics(
    units: Iterable[TimedUnit],
    config: CaptionConfig,
) -> FormatResult:
    """Same as format_units(), also returning what had to be adjusted."""
    unit_list = list(units)
    validate_units(unit_list)

    diagnostics = []  # type: List[Diagnostic]
    spans = _resolve_overlaps(unit_list, config.min_gap, diagnostics)
    drafts = _group(spans, config, diagnostics)
    blocks = _finalize(drafts, config, diagnostics)
    return FormatResult(blocks=blocks, diagnostics=diagnostics)


# =============================================================================
# Overlaps
# =============================================================================

def _resolve_overlaps(
    units: Sequence[TimedUnit],
    min_gap: float,
    diagnostics: List[Diagnostic],
) -> List[_Span]:
    """Clamp each unit's end so it does not run into the next unit.

    Only the earlier unit moves. Its end never drops below its own start.
    """
    spans = [_Span(" ".join(u.text.split()), u.start, u.end) for u in units]

    for current, following in zip(spans, spans[1:]):
        if following.start < current.end:
            clamped = max(current.start, following.start - min_gap)
            diagnostics.append(Diagnostic(
                code="caption::overlap_clamped",
                message="{!r} ended at {:.3f}s, after {!r} started at {:.3f}s; end clamped to {:.3f}s".format(
                    current.text, current.end, following.text, following.start, clamped
                ),
                time=current.start,
            ))
            current.end = clamped

    return spans


# =============================================================================
# Grouping and line wrapping
# =============================================================================

def wrap_text(text: str, width: int) -> List[str]:
    """Wrap text at word boundaries, hard-splitting words wider than width."""
    return textwrap.wrap(
        text,
        width=width,
        break_long_words=True,
        break_on_hyphens=False,
    )


def _group(
    spans: List[_Span],
    config: CaptionConfig,
    diagnostics: List[Diagnostic],
) -> List[_Draft]:
    width = config.max_chars_per_line
    max_lines = config.max_lines_per_block

    drafts = []  # type: List[_Draft]
    pending = None  # type: Optional[_Draft]

    for span in spans:
        hard_wrapped = any(len(word) > width for word in span.text.split())
        if hard_wrapped:
            diagnostics.append(Diagnostic(
                code="caption::hard_wrapped",
                message="{!r} is wider than {} characters and was hard-wrapped".format(
                    span.text, width
                ),
                time=span.start,
            ))

        if pending is not None and _must_close_before(pending, span, config):
            drafts.append(pending)
            pending = None

        if pending is not None:
            if hard_wrapped:
                # over-wide words start on their own line and break at the width
                rewrapped = pending.lines + wrap_text(span.text, width)
            else:
                rewrapped = pending.lines[:-1] + wrap_text(pending.lines[-1] + " " + span.text, width)
            if len(rewrapped) <= max_lines:
                pending.lines = rewrapped
                pending.end = span.end
                pending.units += 1
                continue
            drafts.append(pending)
            pending = None

        lines = wrap_text(span.text, width)

        if len(lines) <= max_lines:
            pending = _Draft(span.start, span.end, lines, 1)
            continue

        pieces = _split_span(span, lines, max_lines)
        diagnostics.append(Diagnostic(
            code="caption::unit_split",
            message="{!r} needs {} lines and was split across {} blocks".format(
                span.text, len(lines), len(pieces)
            ),
            time=span.start,
        ))
        drafts.extend(pieces[:-1])
        pending = pieces[-1]

    if pending is not None:
        drafts.append(pending)

    return drafts


def _must_close_before(pending: _Draft, span: _Span, config: CaptionConfig) -> bool:
    """True when adding span would break the duration or unit-count limit."""
    if span.end - pending.start > config.max_block_duration:
        return True
    if config.max_units_per_block is not None and pending.units >= config.max_units_per_block:
        return True
    return False


def _split_span(span: _Span, lines: List[str], max_lines: int) -> List[_Draft]:
    """Cut one over-long unit into several drafts, sharing its time by characters."""
    chunks = [lines[k:k + max_lines] for k in range(0, len(lines), max_lines)]
    total_chars = sum(len(line) for line in lines)
    duration = span.end - span.start

    drafts = []  # type: List[_Draft]
    consumed = 0
    piece_start = span.start
    for position, chunk in enumerate(chunks):
        consumed += sum(len(line) for line in chunk)
        if position == len(chunks) - 1:
            piece_end = span.end
        else:
            piece_end = span.start + duration * consumed / total_chars
        drafts.append(_Draft(piece_start, piece_end, list(chunk), 1))
        piece_start = piece_end

    return drafts


# =============================================================================
# Timing
# =============================================================================

def _finalize(
    drafts: List[_Draft],
    config: CaptionConfig,
    diagnostics: List[Diagnostic],
) -> List[CaptionBlock]:
    """Apply minimum duration and minimum gap, then number the blocks."""
    blocks = []  # type: List[CaptionBlock]
    previous_end = None  # type: Optional[float]

    for position, draft in enumerate(drafts):
        start = draft.start
        if previous_end is not None and start < previous_end + config.min_gap - _EPSILON:
            start = previous_end + config.min_gap
            diagnostics.append(Diagnostic(
                code="caption::start_shifted",
                message="block {} moved from {:.3f}s to {:.3f}s to keep the gap".format(
                    position + 1, draft.start, start
                ),
                time=draft.start,
            ))
        if previous_end is not None and start < previous_end:
            # within float slack of the previous end; never start before it
            start = previous_end

        natural_end = max(draft.end, start)
        end = natural_end
        if end - start < config.min_block_duration:
            end = start + config.min_block_duration

        if position + 1 < len(drafts):
            limit = drafts[position + 1].start - config.min_gap
            if end > limit:
                if limit < natural_end:
                    diagnostics.append(Diagnostic(
                        code="caption::gap_enforced",
                        message="block {} end trimmed from {:.3f}s to {:.3f}s".format(
                            position + 1, natural_end, limit
                        ),
                        time=start,
                    ))
                end = limit

        if end - start < _MIN_DISPLAY_S:
            end = start + _MIN_DISPLAY_S

        if end > natural_end:
            diagnostics.append(Diagnostic(
                code="caption::duration_extended",
                message="block {} extended from {:.3f}s to {:.3f}s".format(
                    position + 1, natural_end - start, end - start
                ),
                time=start,
            ))

        blocks.append(CaptionBlock(
            index=position + 1,
            start=start,
            end=end,
            lines=tuple(draft.lines),
        ))
        previous_end = end

    return blocks
