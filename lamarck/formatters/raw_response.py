"""Raw Deepgram response formatter.

Writes the untouched JSON response, pretty printed, so a transcript can be
re-captioned later with ``python -m caption_formatter`` without paying for
a second transcription.
"""

from __future__ import annotations

import json
from typing import List

from lamarck.core.ir import Transcript
from lamarck.formatters.base import BaseFormatter, FormatterOutput


class RawResponseFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "Raw Deepgram response"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        content = json.dumps(transcript.raw, indent=2, ensure_ascii=False) + "\n"
        return [FormatterOutput(
            suffix=".raw.json",
            content=content,
            media_type="application/json",
        )]
