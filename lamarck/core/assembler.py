"""Map a Deepgram response onto the validated Transcript IR.

WHY: Deepgram's word objects are dynamic JSON. Formatters should only ever
see strongly typed, already-validated TimedUnits, so validation happens
exactly once, right after deserialization, and a malformed response fails
fast before any caption is produced.

HOW: For every channel/alternative, each DeepgramWord becomes a TimedUnit
(punctuated text preferred). The confidence policy is applied, then the
units are checked with caption_formatter.validate_units().

RULES:
- Timing problems are surfaced (InvalidTimingError), never auto-corrected.
- Alternatives without words are kept but empty; if every alternative is
  empty the transcript raises EmptyInputError ("nothing to caption").
- ConfidencePolicy modes: keep (no change), drop (remove units below the
  threshold), flag (keep them, record a lamarck::low_confidence diagnostic).
- Units without a confidence value are never dropped or flagged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from caption_formatter import (
    ConfigurationError,
    Diagnostic,
    EmptyInputError,
    InvalidTimingError,
    InvalidUnitError,
    TimedUnit,
    validate_units,
)
from lamarck.api.models import DeepgramAlternative, DeepgramResponse
from lamarck.core.ir import Transcript, TranscriptAlternative

logger = logging.getLogger(__name__)

CONFIDENCE_MODES = ("keep", "drop", "flag")


@dataclass(frozen=True)
class ConfidencePolicy:
    """What to do with words the recognizer is unsure about.

    Attributes:
        mode: "keep", "drop" or "flag".
        threshold: Confidence below which a word counts as low confidence.
            Required for "drop" and "flag".
    """

    mode: str
    threshold: Optional[float] = None

    def __post_init__(self) -> None:
        if self.mode not in CONFIDENCE_MODES:
            raise ConfigurationError(
                "Unknown low-confidence mode '{}'. Available: {}".format(
                    self.mode, ", ".join(CONFIDENCE_MODES)
                )
            )
        if self.mode != "keep":
            if self.threshold is None:
                raise ConfigurationError(
                    "low-confidence mode '{}' needs a confidence threshold".format(self.mode)
                )
            if not 0.0 <= self.threshold <= 1.0:
                raise ConfigurationError(
                    "confidence threshold must be between 0 and 1, got {}".format(self.threshold)
                )

    def is_low(self, unit: TimedUnit) -> bool:
        return (
            self.threshold is not None
            and unit.confidence is not None
            and unit.confidence < self.threshold
        )


KEEP_ALL = ConfidencePolicy(mode="keep")


def alternative_to_units(alternative: DeepgramAlternative) -> List[TimedUnit]:
    """Convert Deepgram words to TimedUnits without validating them."""
    return [
        TimedUnit(
            text=word.display_text,
            start=word.start,
            end=word.end,
            confidence=word.confidence,
        )
        for word in alternative.words
    ]


def apply_confidence_policy(
    units: List[TimedUnit],
    policy: ConfidencePolicy,
    diagnostics: List[Diagnostic],
) -> List[TimedUnit]:
    """Drop or flag low-confidence units according to policy."""
    if policy.mode == "keep":
        return units

    kept = []  # type: List[TimedUnit]
    for unit in units:
        if not policy.is_low(unit):
            kept.append(unit)
            continue
        if policy.mode == "flag":
            diagnostics.append(Diagnostic(
                code="lamarck::low_confidence",
                message="{!r} at {:.3f}s has confidence {:.2f} (< {:.2f})".format(
                    unit.text, unit.start, unit.confidence, policy.threshold
                ),
                time=unit.start,
            ))
            kept.append(unit)
        else:
            logger.debug("Dropping low-confidence word %r at %.3fs", unit.text, unit.start)
    return kept


def build_transcript(
    response: DeepgramResponse,
    source_name: str,
    language: str,
    policy: ConfidencePolicy = KEEP_ALL,
    source_url: Optional[str] = None,
) -> Transcript:
    """Build and validate the Transcript IR from a Deepgram response.

    Args:
        response: Parsed Deepgram response.
        source_name: File name or URL, for output naming and headers.
        language: Deepgram language code that was requested.
        policy: Low-confidence handling.
        source_url: Original URL when the input was remote.

    Raises:
        EmptyInputError: No alternative contains any word.
        InvalidTimingError / InvalidUnitError: A word has malformed timing
            or text; the message names the channel and alternative.
    """
    diagnostics = []  # type: List[Diagnostic]
    alternatives = []  # type: List[TranscriptAlternative]

    for channel_index, channel in enumerate(response.channels):
        for alt_index, alternative in enumerate(channel.alternatives):
            units = alternative_to_units(alternative)
            units = apply_confidence_policy(units, policy, diagnostics)
            if units:
                try:
                    validate_units(units)
                except InvalidTimingError as e:
                    raise InvalidTimingError(
                        "channel {} alternative {}: {}".format(channel_index, alt_index, e),
                        position=e.position,
                    ) from e
                except InvalidUnitError as e:
                    raise InvalidUnitError(
                        "channel {} alternative {}: {}".format(channel_index, alt_index, e),
                        position=e.position,
                    ) from e
            else:
                logger.warning(
                    "Channel %d alternative %d has no words", channel_index, alt_index
                )
            alternatives.append(TranscriptAlternative(
                channel=channel_index,
                alternative=alt_index,
                text=alternative.transcript,
                confidence=alternative.confidence,
                units=units,
            ))

    if not any(alt.units for alt in alternatives):
        raise EmptyInputError()

    flagged = sum(1 for d in diagnostics if d.code == "lamarck::low_confidence")
    if flagged:
        logger.warning("%d low-confidence word(s) flagged", flagged)

    return Transcript(
        alternatives=alternatives,
        utterances=list(response.utterances),
        source_name=source_name,
        language=language,
        duration_s=response.metadata.duration,
        source_url=source_url,
        raw=response.raw,
        diagnostics=diagnostics,
    )
