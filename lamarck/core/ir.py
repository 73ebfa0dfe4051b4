"""Intermediate representation of a validated transcript.

WHY: Deepgram's response nests words under channels and alternatives and
carries fields formatters don't care about. Formatters need one stable,
already-validated shape: TimedUnits per channel/alternative, plus the
context required for naming and linking output files.

HOW: Two dataclasses:
  TranscriptAlternative — one channel/alternative pair with its TimedUnits
  Transcript            — every alternative plus utterances, source info,
                          the raw response and boundary diagnostics

RULES:
- units are validated once by the assembler; formatters trust them
- alternatives are ordered by (channel, alternative)
- raw is the unmodified Deepgram JSON
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from caption_formatter import Diagnostic, TimedUnit
from lamarck.api.models import DeepgramUtterance


@dataclass
class TranscriptAlternative:
    """Words of one channel/alternative as TimedUnits."""

    channel: int
    alternative: int
    text: str
    confidence: float
    units: list[TimedUnit] = field(default_factory=list)


@dataclass
class Transcript:
    """The complete, validated transcript that formatters receive.

    RULES:
    - source_name: file name or URL the audio came from
    - source_url: set only for URL inputs (used for timestamp links)
    - language: the Deepgram language code that was requested
    - duration_s: media duration reported by Deepgram
    """

    alternatives: list[TranscriptAlternative]
    utterances: list[DeepgramUtterance]
    source_name: str
    language: str
    duration_s: float
    source_url: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def primary(self) -> TranscriptAlternative | None:
        """The first alternative of the first channel, if any."""
        return self.alternatives[0] if self.alternatives else None
