"""Seam for the content-generation collaborator.

The model call itself lives outside this package; this module builds the
instruction prompt from a generation request and turns the structured
output back into a SlideDeck.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Union

from .errors import DeckValidationError
from .models import AuthorDetails, SlideDeck
from .validation import validate_deck

GENERATION_SOURCE = "generation output"

OUTPUT_SCHEMA = {
    "titleSlide": {"title": "string", "subtitle": "string"},
    "bodySlides": [{"heading": "string", "content": "string", "imagePrompt": "string"}],
}

_PROMPT = """You are an AI assistant designed to generate slide content for presentations.

The user is named {username} and is affiliated with {institution}.
The presentation date is {date} and the topic is {topic}.
The user wants {slide_count} slides for the presentation.

Generate content for the title slide (title and subtitle) and the body slides.
Each body slide needs a heading, its content as one point per line, and an
imagePrompt: a short description of an illustration that fits the slide.
Ensure the content is informative and engaging.

Output the slide content as a JSON object that conforms to the following schema:
{schema}

Make sure the JSON is valid and parsable.
"""


@dataclass(frozen=True)
class GenerationRequest:
    username: str
    institution: str
    presentation_date: str
    topic: str
    slide_count: int = 3

    @property
    def author(self) -> AuthorDetails:
        return AuthorDetails(username=self.username, institution=self.institution, date=self.presentation_date)


def build_prompt(request: GenerationRequest) -> str:
    return _PROMPT.format(
        username=request.username,
        institution=request.institution,
        date=request.presentation_date,
        topic=request.topic,
        slide_count=request.slide_count,
        schema=json.dumps(OUTPUT_SCHEMA),
    )


def parse_generation_output(payload: Union[str, Dict[str, Any]]) -> SlideDeck:
    """Convert a generation result (dict or JSON text) into a SlideDeck."""
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise DeckValidationError(
                [f"Generation output is not valid JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}"],
                source=GENERATION_SOURCE,
            ) from exc
    return SlideDeck.from_dict(validate_deck(payload, source=GENERATION_SOURCE))
