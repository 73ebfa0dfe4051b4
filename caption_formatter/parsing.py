"""Turn saved transcript JSON into TimedUnit lists.

WHY: The caption_formatter CLI works offline on transcripts saved earlier,
either a full Deepgram response (as written by ``lamarck --raw``) or a plain
list of word objects exported from another tool.

HOW: try_parse_json() reads the text, repairing a truncated file by trying
closing brackets. parse_input() detects the shape and maps word objects to
TimedUnits, preferring punctuated text when present.

RULES:
- Word keys accepted: punctuated_word, word, text (first non-empty wins).
- Time keys accepted: start/end (seconds).
- Malformed entries are skipped here; timing is validated by the formatter.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List

from .models import TimedUnit

_TEXT_KEYS = ("punctuated_word", "word", "text")

_CLOSING_SUFFIXES = ["", "]", "}]", "}]}", "]}", "]}}", "]}]", "]}]}]}}"]


def try_parse_json(raw: str) -> Any:
    """Parse JSON, attempting to close a truncated document.

    Raises:
        ValueError: If no repair produces valid JSON.
    """
    raw = raw.replace("\r\n", "\n").replace("\r", "\n").strip()

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass

    cleaned = re.sub(r",\s*$", "", raw)
    for candidate in (cleaned, raw):
        for suffix in _CLOSING_SUFFIXES:
            try:
                return json.loads(candidate + suffix)
            except json.JSONDecodeError:
                continue

    raise ValueError("Could not parse JSON input (even with attempted fixes)")


def _word_to_unit(item: Dict[str, Any]) -> TimedUnit | None:
    text = ""
    for key in _TEXT_KEYS:
        value = item.get(key)
        if value:
            text = str(value).strip()
            break
    if not text or "start" not in item:
        return None
    start = float(item["start"])
    end = float(item.get("end", start))
    confidence = item.get("confidence")
    return TimedUnit(
        text=text,
        start=start,
        end=end,
        confidence=float(confidence) if confidence is not None else None,
    )


def parse_input(data: Any, channel: int = 0, alternative: int = 0) -> List[TimedUnit]:
    """Extract TimedUnits from a Deepgram response or a list of word objects.

    Args:
        data: Parsed JSON.
        channel: Channel to read from a Deepgram response.
        alternative: Alternative to read from a Deepgram response.
    """
    words = []  # type: List[Any]

    if isinstance(data, dict) and "results" in data:
        channels = data["results"].get("channels") or []
        if channel < len(channels):
            alternatives = channels[channel].get("alternatives") or []
            if alternative < len(alternatives):
                words = alternatives[alternative].get("words") or []
    elif isinstance(data, dict) and isinstance(data.get("words"), list):
        words = data["words"]
    elif isinstance(data, list):
        words = data

    units = []  # type: List[TimedUnit]
    for item in words:
        if not isinstance(item, dict):
            continue
        unit = _word_to_unit(item)
        if unit is not None:
            units.append(unit)
    return units
