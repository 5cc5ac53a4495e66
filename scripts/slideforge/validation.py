"""Structural validation for deck JSON payloads and generation requests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import DeckValidationError

MIN_SLIDES = 1
MAX_SLIDES = 10


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _pick(data: Dict[str, Any], camel: str, snake: str) -> Any:
    return data[camel] if camel in data else data.get(snake)


def _check_title_slide(title_slide: Any, issues: list[str]) -> None:
    if not isinstance(title_slide, dict):
        issues.append("titleSlide is required and must be an object")
        return
    if not _is_non_empty_str(title_slide.get("title")):
        issues.append("titleSlide.title is required and must be a non-empty string")
    if "subtitle" in title_slide and not isinstance(title_slide.get("subtitle"), str):
        issues.append("titleSlide.subtitle must be a string when provided")


def _check_body_slide(slide: Any, idx: int, issues: list[str]) -> None:
    prefix = f"bodySlides[{idx}]"
    if not isinstance(slide, dict):
        issues.append(f"{prefix} must be an object")
        return

    for field in ("heading", "content"):
        if not isinstance(slide.get(field), str):
            issues.append(f"{prefix}.{field} is required and must be a string")

    prompt = _pick(slide, "imagePrompt", "image_prompt")
    if prompt is not None and not isinstance(prompt, str):
        issues.append(f"{prefix}.imagePrompt must be a string when provided")

    uri = _pick(slide, "imageDataUri", "image_data_uri")
    if uri is not None:
        if not isinstance(uri, str):
            issues.append(f"{prefix}.imageDataUri must be a string when provided")
        elif uri and not uri.startswith("data:"):
            issues.append(f"{prefix}.imageDataUri must be a data: URI")


def validate_deck(payload: Any, *, source: Optional[str] = None) -> Dict[str, Any]:
    """Check a deck payload and return it unchanged; every problem is reported at once."""
    if not isinstance(payload, dict):
        raise DeckValidationError(["Root JSON value must be an object"], source=source)

    issues: list[str] = []
    _check_title_slide(_pick(payload, "titleSlide", "title_slide"), issues)

    slides = _pick(payload, "bodySlides", "body_slides")
    if slides is None:
        slides = []
    if not isinstance(slides, list):
        issues.append("bodySlides must be a list")
    else:
        for idx, slide in enumerate(slides):
            _check_body_slide(slide, idx, issues)

    if issues:
        raise DeckValidationError(issues, source=source)
    return payload


def validate_deck_file(path: Path) -> Dict[str, Any]:
    """Load and validate a deck JSON file."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DeckValidationError([f"Deck file not found: {path}"], source=str(path)) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DeckValidationError(
            [f"Invalid JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}"], source=str(path)
        ) from exc

    return validate_deck(data, source=str(path))


def validate_request(request) -> None:
    """Apply the input-form rules to a generation request."""
    issues: list[str] = []
    if len(str(request.username or "").strip()) < 2:
        issues.append("username must be at least 2 characters")
    if len(str(request.institution or "").strip()) < 2:
        issues.append("institution must be at least 2 characters")
    if not str(request.presentation_date or "").strip():
        issues.append("presentation date is required")
    if len(str(request.topic or "").strip()) < 5:
        issues.append("topic must be at least 5 characters")

    count = request.slide_count
    if isinstance(count, bool) or not isinstance(count, int):
        issues.append("slide count must be an integer")
    elif not MIN_SLIDES <= count <= MAX_SLIDES:
        issues.append(f"slide count must be between {MIN_SLIDES} and {MAX_SLIDES}")

    if issues:
        raise DeckValidationError(issues)
