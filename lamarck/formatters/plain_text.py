"""Plain text transcript formatter.

WHY: Editors often want the words without any timing: for review, search,
show notes. Deepgram already returns the punctuated transcript per
alternative, so this output is the primary alternative's text.

HOW: Takes channel 0 / alternative 0's transcript string. When Deepgram
returned utterances, each utterance becomes its own paragraph, which reads
far better for long recordings.

RULES:
- Output suffix: ".txt", media type "text/plain"
- Paragraphs separated by a blank line; file ends with a newline
- Only utterances from channel 0 are used
"""

from __future__ import annotations

from typing import List

from lamarck.core.ir import Transcript
from lamarck.formatters.base import BaseFormatter, FormatterOutput


class PlainTextFormatter(BaseFormatter):
    """Transcript text of the primary channel/alternative."""

    @property
    def name(self) -> str:
        return "Transcript"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        paragraphs = [
            u.transcript.strip()
            for u in transcript.utterances
            if u.channel == 0 and u.transcript.strip()
        ]
        if not paragraphs:
            primary = transcript.primary()
            text = primary.text.strip() if primary else ""
            paragraphs = [text] if text else []

        content = "\n\n".join(paragraphs)
        if content:
            content += "\n"

        return [FormatterOutput(suffix=".txt", content=content, media_type="text/plain")]
