"""Deepgram pre-recorded API response dataclasses.

WHY: Deepgram answers with nested JSON (metadata, channels, alternatives,
words, utterances). Typed dataclasses make that structure explicit so field
mismatches fail at the boundary instead of deep inside a formatter.

HOW: Each dataclass maps to one JSON object and has a from_dict() factory.
Fields that only appear when a feature is enabled (punctuation, utterances,
diarization) are Optional.

RULES:
- start/end are float seconds, as sent by Deepgram.
- punctuated_word is None unless punctuate=true was requested.
- speaker is None unless diarize=true was requested.
- DeepgramResponse.raw keeps the untouched JSON for the "raw" output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class DeepgramWord:
    """One recognized word with timing and confidence."""

    word: str
    start: float
    end: float
    confidence: float
    punctuated_word: str | None = None
    speaker: int | None = None

    @property
    def display_text(self) -> str:
        return self.punctuated_word or self.word

    @classmethod
    def from_dict(cls, data: dict) -> DeepgramWord:
        return cls(
            word=data["word"],
            start=float(data["start"]),
            end=float(data["end"]),
            confidence=float(data.get("confidence", 0.0)),
            punctuated_word=data.get("punctuated_word"),
            speaker=data.get("speaker"),
        )


@dataclass
class DeepgramAlternative:
    """One transcription hypothesis for a channel."""

    transcript: str
    confidence: float
    words: list[DeepgramWord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> DeepgramAlternative:
        return cls(
            transcript=data.get("transcript", ""),
            confidence=float(data.get("confidence", 0.0)),
            words=[DeepgramWord.from_dict(w) for w in data.get("words", [])],
        )


@dataclass
class DeepgramChannel:
    """All alternatives for one audio channel."""

    alternatives: list[DeepgramAlternative] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> DeepgramChannel:
        return cls(
            alternatives=[DeepgramAlternative.from_dict(a) for a in data.get("alternatives", [])],
        )


@dataclass
class DeepgramUtterance:
    """A speaker turn, returned when utterances=true.

    RULES:
    - channel is the index into DeepgramResponse.channels
    - words carry the same shape as alternative words
    """

    start: float
    end: float
    confidence: float
    channel: int
    transcript: str
    speaker: int | None = None
    words: list[DeepgramWord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> DeepgramUtterance:
        return cls(
            start=float(data["start"]),
            end=float(data["end"]),
            confidence=float(data.get("confidence", 0.0)),
            channel=int(data.get("channel", 0)),
            transcript=data.get("transcript", ""),
            speaker=data.get("speaker"),
            words=[DeepgramWord.from_dict(w) for w in data.get("words", [])],
        )


@dataclass
class DeepgramMetadata:
    """Request metadata: id, media duration, channel count."""

    request_id: str
    duration: float
    channels: int

    @classmethod
    def from_dict(cls, data: dict) -> DeepgramMetadata:
        return cls(
            request_id=data.get("request_id", ""),
            duration=float(data.get("duration", 0.0)),
            channels=int(data.get("channels", 0)),
        )


@dataclass
class DeepgramResponse:
    """Full response from POST /v1/listen.

    WHY: Formatters need channels/alternatives for captions, utterances for
    the markdown transcript, and the raw JSON for archiving.

    RULES:
    - results.channels is required; utterances may be absent
    - raw is the parsed JSON exactly as received
    """

    metadata: DeepgramMetadata
    channels: list[DeepgramChannel]
    utterances: list[DeepgramUtterance] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> DeepgramResponse:
        results = data["results"]
        return cls(
            metadata=DeepgramMetadata.from_dict(data.get("metadata", {})),
            channels=[DeepgramChannel.from_dict(c) for c in results["channels"]],
            utterances=[DeepgramUtterance.from_dict(u) for u in results.get("utterances") or []],
            raw=data,
        )
