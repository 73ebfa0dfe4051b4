"""Named caption configurations.

WHY: Different delivery targets need different limits: broadcast TV shows
two long lines, vertical social video one short line, burn-in "word"
captions a single word at a time. Naming these lets callers pick a target
without knowing every limit.

HOW: Each preset is a frozen CaptionConfig. PRESETS maps names to them and
get_preset() resolves a name with a helpful error.

RULES:
- Presets are immutable; use CaptionConfig.replace() to derive variants.
- "some" is an alias for "social".
"""

from __future__ import annotations

from typing import Dict

from .models import CaptionConfig

# 16:9 TV subtitles
PRESET_BROADCAST = CaptionConfig(
    max_chars_per_line=42,
    max_lines_per_block=2,
    max_block_duration=7.0,
    min_block_duration=1.2,
    min_gap=0.05,
    max_units_per_block=None,
)

# 9:16 vertical video, single line
PRESET_SOCIAL = CaptionConfig(
    max_chars_per_line=25,
    max_lines_per_block=1,
    max_block_duration=3.5,
    min_block_duration=0.6,
    min_gap=0.05,
    max_units_per_block=None,
)

# One word per block, shown for exactly as long as it is spoken
PRESET_WORD = CaptionConfig(
    max_chars_per_line=32,
    max_lines_per_block=1,
    max_block_duration=2.0,
    min_block_duration=0.0,
    min_gap=0.0,
    max_units_per_block=1,
)

PRESETS: Dict[str, CaptionConfig] = {
    "broadcast": PRESET_BROADCAST,
    "social": PRESET_SOCIAL,
    "some": PRESET_SOCIAL,
    "word": PRESET_WORD,
}


def get_preset(name: str) -> CaptionConfig:
    """Look up a preset by (case-insensitive) name.

    Raises:
        ValueError: If the name is unknown.
    """
    key = name.lower()
    if key not in PRESETS:
        raise ValueError(
            "Unknown preset '{}'. Available: {}".format(name, ", ".join(PRESETS.keys()))
        )
    return PRESETS[key]
