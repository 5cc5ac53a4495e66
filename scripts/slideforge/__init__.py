"""Deck model, template registry and PPTX export for SlideForge."""

from .api import export_deck_from_file, load_deck, write_deck
from .cli import run_cli
from .errors import DeckValidationError, ImagePayloadError, SlideForgeError
from .generation import GenerationRequest, build_prompt, parse_generation_output
from .images import contain_geometry, decode_data_uri, mark_generating, populate_images, regenerate_image
from .models import AuthorDetails, BodySlide, SlideDeck, TitleSlide
from .serializer import build_presentation, export_document, output_filename, render_document
from .templates import Template, TemplateColors, get_template, list_templates, resolve_master_names
from .validation import validate_deck, validate_deck_file, validate_request

__all__ = [
    "AuthorDetails",
    "BodySlide",
    "DeckValidationError",
    "GenerationRequest",
    "ImagePayloadError",
    "SlideDeck",
    "SlideForgeError",
    "Template",
    "TemplateColors",
    "TitleSlide",
    "build_presentation",
    "build_prompt",
    "contain_geometry",
    "decode_data_uri",
    "export_deck_from_file",
    "export_document",
    "get_template",
    "list_templates",
    "load_deck",
    "mark_generating",
    "output_filename",
    "parse_generation_output",
    "populate_images",
    "regenerate_image",
    "render_document",
    "resolve_master_names",
    "run_cli",
    "validate_deck",
    "validate_deck_file",
    "validate_request",
    "write_deck",
]
