"""Typed errors raised by the caption formatter.

WHY: Callers (the lamarck CLI, the caption_formatter CLI, tests) need to
tell "nothing to caption" apart from malformed upstream timing and from a
bad configuration, and report each one differently.

HOW: A small hierarchy rooted at FormatError. FormatError subclasses
ValueError so generic "bad input" handlers still catch it.

RULES:
- None of these are retried by the formatter.
- The formatter raises before emitting any block, so a caught FormatError
  always means no caption output was produced.
"""

from __future__ import annotations


class FormatError(ValueError):
    """Base class for every error raised while formatting captions."""


class EmptyInputError(FormatError):
    """Raised when the formatter receives zero units."""

    def __init__(self, message: str = "nothing to caption") -> None:
        super().__init__(message)


class InvalidTimingError(FormatError):
    """Raised for negative timestamps, start >= end, or out-of-order units.

    The position of the offending unit is kept on ``position`` (0-based)
    so boundary code can point at the bad word.
    """

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        super().__init__(message)


class InvalidUnitError(FormatError):
    """Raised when a unit carries no displayable text."""

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        super().__init__(message)


class ConfigurationError(FormatError):
    """Raised when a CaptionConfig has a non-positive or inconsistent limit."""
