"""lamarck: Deepgram transcription to SRT/WebVTT captions.

WHY: Deepgram returns word-level timings, but video players and editors
want caption files: short lines, a bounded number of lines per block and
blocks that never overlap. lamarck sends a recording to Deepgram and turns
the response into those files.

HOW: Three stages. The API client (lamarck.api) transcribes a file or URL;
the assembler (lamarck.core) validates the response into a Transcript of
TimedUnits; formatters (lamarck.formatters) render captions through the
caption_formatter library and write them out (lamarck.pipeline).

RULES:
- All formatters consume the same Transcript
- Adding an output type = one new formatter module plus a registry entry
- Caption layout lives in caption_formatter, never in lamarck
"""

__version__ = "0.1.0"
