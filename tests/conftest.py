"""Shared test fixtures for the lamarck and caption_formatter test suites.

WHY: Several test modules need the same Deepgram response, the same
TimedUnits and the same validated Transcript. Centralizing them here keeps
the expected values in one place.

HOW: DEEPGRAM_RESPONSE is a trimmed but structurally complete answer from
POST /v1/listen (punctuate=true, utterances=true, one channel, one
alternative, two speakers). Fixtures hand out deep copies so tests can
mutate them freely.

RULES:
- Word timings are in seconds, as Deepgram sends them.
- "lamarck" has a deliberately low confidence (0.41) for policy tests.
- Fixtures never touch the network or the real environment's API key.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List

import pytest

from caption_formatter import CaptionConfig
from lamarck.api.models import DeepgramResponse
from lamarck.core.assembler import build_transcript


# ---------------------------------------------------------------------------
# Sample Deepgram response
# ---------------------------------------------------------------------------

SAMPLE_WORDS: List[Dict[str, Any]] = [
    {"word": "hello",   "start": 0.08, "end": 0.48, "confidence": 0.99, "punctuated_word": "Hello",    "speaker": 0},
    {"word": "world",   "start": 0.48, "end": 0.96, "confidence": 0.97, "punctuated_word": "world.",   "speaker": 0},
    {"word": "this",    "start": 1.50, "end": 1.70, "confidence": 0.95, "punctuated_word": "This",     "speaker": 1},
    {"word": "is",      "start": 1.70, "end": 1.82, "confidence": 0.92, "punctuated_word": "is",       "speaker": 1},
    {"word": "lamarck", "start": 1.82, "end": 2.40, "confidence": 0.41, "punctuated_word": "Lamarck.", "speaker": 1},
]

DEEPGRAM_RESPONSE: Dict[str, Any] = {
    "metadata": {
        "request_id": "6f1c2b9e-0d1a-4c55-9a3e-2d7f0c4b8a11",
        "duration": 2.5,
        "channels": 1,
    },
    "results": {
        "channels": [
            {
                "alternatives": [
                    {
                        "transcript": "Hello world. This is Lamarck.",
                        "confidence": 0.93,
                        "words": SAMPLE_WORDS,
                    }
                ]
            }
        ],
        "utterances": [
            {
                "start": 0.08, "end": 0.96, "confidence": 0.98, "channel": 0,
                "transcript": "Hello world.", "speaker": 0,
                "words": SAMPLE_WORDS[:2],
            },
            {
                "start": 1.50, "end": 2.40, "confidence": 0.76, "channel": 0,
                "transcript": "This is Lamarck.", "speaker": 1,
                "words": SAMPLE_WORDS[2:],
            },
        ],
    },
}


@pytest.fixture
def deepgram_response_dict() -> Dict[str, Any]:
    """Deep copy of the sample Deepgram JSON."""
    return copy.deepcopy(DEEPGRAM_RESPONSE)


@pytest.fixture
def deepgram_response(deepgram_response_dict) -> DeepgramResponse:
    """The sample response parsed into dataclasses."""
    return DeepgramResponse.from_dict(deepgram_response_dict)


@pytest.fixture
def sample_transcript(deepgram_response):
    """Validated Transcript built from the sample response (keep-all policy)."""
    return build_transcript(deepgram_response, source_name="talk.mp3", language="en-US")


# ---------------------------------------------------------------------------
# Caption formatter helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def example_config() -> CaptionConfig:
    """Limits of the "Four score and" worked example."""
    return CaptionConfig(
        max_chars_per_line=20,
        max_lines_per_block=2,
        max_block_duration=5.0,
        min_block_duration=1.0,
        min_gap=0.1,
        max_units_per_block=None,
    )


@pytest.fixture(autouse=True)
def _no_real_api_key(monkeypatch):
    """Tests must never pick up a developer's real key."""
    monkeypatch.delenv("DEEPGRAM_API_KEY", raising=False)
