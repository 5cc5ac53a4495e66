"""Exceptions raised while loading, validating and exporting decks."""

from __future__ import annotations

from typing import Iterable, Optional


class SlideForgeError(Exception):
    """Base class for errors raised by this package."""


class DeckValidationError(SlideForgeError, ValueError):
    """A deck payload or generation request failed validation.

    ``issues`` holds every problem found, so callers can show them all at
    once; ``source`` names where the payload came from (a file path, the
    generation output) when known.
    """

    def __init__(self, issues: Iterable[str], *, source: Optional[str] = None):
        self.issues = [str(i).strip() for i in issues if str(i).strip()] or ["Invalid deck"]
        self.source = source
        header = f"Deck validation failed for {source}:" if source else "Deck validation failed:"
        super().__init__("\n".join([header] + [f"- {issue}" for issue in self.issues]))


class ImagePayloadError(SlideForgeError, ValueError):
    """An image data URI cannot be decoded into an embeddable image."""
