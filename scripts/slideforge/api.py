"""Public API helpers for programmatic deck export."""

from __future__ import annotations

import json
from pathlib import Path

from .models import AuthorDetails, SlideDeck
from .serializer import export_document
from .templates import get_template
from .validation import validate_deck_file


def load_deck(deck_path: Path) -> SlideDeck:
    """Read and validate a deck JSON file."""
    return SlideDeck.from_dict(validate_deck_file(Path(deck_path)))


def export_deck_from_file(
    *,
    deck_path: Path,
    output_dir: Path,
    author: AuthorDetails,
    template_name: str = "Professional",
) -> Path:
    """Export a deck JSON file with the named template and return the written .pptx path."""
    deck = load_deck(deck_path)
    return export_document(deck, get_template(template_name), author, output_dir)


def write_deck(deck: SlideDeck, path: Path) -> Path:
    """Write a deck as JSON and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(deck.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
