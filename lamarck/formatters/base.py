"""Abstract base formatter and output container.

WHY: Every output type (SRT, WebVTT, word captions, transcript text, raw
JSON, markdown) consumes the same Transcript IR but produces different file
content. A shared interface lets the pipeline run any selection of them
generically and keep every result in memory until all have succeeded.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method. FormatterOutput bundles a file suffix with its content and MIME type.

RULES:
- ``format()`` returns a list: caption formatters return one item per
  channel/alternative, the others return one item
- ``suffix`` is appended to the output stem, e.g. ``"-channel-0-alternative-0.srt"``
- Formatters never touch the filesystem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from lamarck.core.ir import Transcript


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: Appended to the output stem, e.g. ``".txt"`` →
                ``"transcript.txt"``.
        content: File content as text.
        media_type: MIME type, e.g. ``"application/x-subrip"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output type:
    1. Create a module in formatters/
    2. Subclass BaseFormatter, implement ``name`` and ``format()``
    3. Register it in FORMATTERS in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SRT captions'."""

    @abstractmethod
    def format(self, transcript: Transcript) -> list[FormatterOutput]:
        """Convert the Transcript IR into one or more output files.

        Raises:
            caption_formatter.FormatError: When captions cannot be built.
        """
