"""Terminal progress reporting.

WHY: Uploading a long recording and waiting for Deepgram can take minutes.
Users need to see bytes moving and which step is running, without the
status lines garbling the bar.

HOW: ProgressReporter wraps one tqdm bar on stderr. Upload progress advances
the bar in bytes; status() writes a line above the bar with tqdm.write()
and shows the step as the bar's description.

RULES:
- Everything goes to stderr so stdout stays clean.
- enabled=False hides the bar but status lines are still written.
- close() must be called once; it is idempotent.
"""

from __future__ import annotations

import sys
from typing import IO, Optional

from tqdm import tqdm


class ProgressReporter:
    """Byte/step progress bar plus status lines."""

    def __init__(self, enabled: bool = True, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream if stream is not None else sys.stderr
        self._bar = tqdm(
            total=None,
            desc="generating captions",
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            file=self._stream,
            disable=not enabled,
            leave=False,
        )
        self._closed = False

    def status(self, message: str) -> None:
        """Write a status line and show it as the current step."""
        tqdm.write(message, file=self._stream)
        self._bar.set_description_str(message.strip().rstrip(".").lower(), refresh=True)

    def set_total(self, total: Optional[int]) -> None:
        """Set the expected byte count (None for an indeterminate bar)."""
        self._bar.reset(total=total)

    def advance(self, n_bytes: int) -> None:
        self._bar.update(n_bytes)

    def close(self, message: Optional[str] = None) -> None:
        if self._closed:
            return
        self._closed = True
        self._bar.close()
        if message:
            tqdm.write(message, file=self._stream)
