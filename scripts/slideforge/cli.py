"""CLI orchestration for deck export."""

from __future__ import annotations

import argparse
import sys
import traceback
from datetime import date
from pathlib import Path

from loguru import logger

from .api import load_deck
from .errors import DeckValidationError
from .models import AuthorDetails
from .serializer import export_document
from .templates import default_template, get_template, list_templates


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export a generated slide deck to a PPTX presentation")
    parser.add_argument("--deck", help="Path to the deck JSON (titleSlide + bodySlides)")
    parser.add_argument("--output-dir", default=".", help="Directory the .pptx is written to (default: .)")
    parser.add_argument(
        "--template",
        default=default_template().name,
        help=f'Template name (default: "{default_template().name}"; unknown names fall back to it)',
    )
    parser.add_argument("--username", default="", help="Author name for the byline and document properties")
    parser.add_argument("--institution", default="", help="Institution for the byline and document properties")
    parser.add_argument(
        "--date",
        default=None,
        help="Presentation date printed on the title slide (default: today, ISO format)",
    )
    parser.add_argument("--list-templates", action="store_true", help="Print the available templates and exit")
    parser.add_argument("--verbose", action="store_true", help="Log per-slide details")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show full traceback for unexpected errors",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="DEBUG" if verbose else "INFO",
    )


def run_cli(argv: list[str] | None = None, *, configure_logging: bool = False) -> None:
    """Parse ``argv`` and export the deck.

    Logging sinks are left alone unless ``configure_logging`` is set; the
    console entry point sets it to install a stderr sink for the run.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    if configure_logging:
        _configure_logging(args.verbose)

    if args.list_templates:
        for i, template in enumerate(list_templates()):
            print(f"{i}\t{template.name}\t{template.ai_hint}")
        return

    if not args.deck:
        parser.error("--deck is required unless --list-templates is given")

    try:
        deck = load_deck(Path(args.deck).resolve())
        template = get_template(args.template)
        if template.name != args.template:
            logger.warning(f"Unknown template {args.template!r}; using {template.name!r}")

        author = AuthorDetails(
            username=args.username,
            institution=args.institution,
            date=args.date or date.today().isoformat(),
        )
        saved = export_document(deck, template, author, Path(args.output_dir).resolve())
        print(saved)
    except DeckValidationError as e:
        raise SystemExit(str(e)) from e
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        raise SystemExit(f"Export failed: {e}") from e


def main() -> None:
    run_cli(configure_logging=True)
