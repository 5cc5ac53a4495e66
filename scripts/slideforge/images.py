"""Image payload helpers: data URI decoding, contain-fit geometry and per-slide fan-out."""

from __future__ import annotations

import base64
import binascii
import io
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, Optional, Tuple
from urllib.parse import unquote_to_bytes

from loguru import logger
from PIL import Image, UnidentifiedImageError

from .errors import ImagePayloadError
from .models import SlideDeck

ImageGenerator = Callable[[str], str]


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """Split a ``data:`` URI into (mime type, raw bytes)."""
    if not isinstance(uri, str) or not uri.startswith("data:"):
        raise ImagePayloadError("Image payload must be a data: URI")
    header, sep, payload = uri[len("data:"):].partition(",")
    if not sep:
        raise ImagePayloadError("Image data URI has no ',' separating header and payload")

    params = [p.strip() for p in header.split(";")]
    mime = params[0] or "text/plain"
    if "base64" in params[1:]:
        try:
            blob = base64.b64decode("".join(payload.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImagePayloadError(f"Image data URI has invalid base64 payload: {exc}") from exc
    else:
        blob = unquote_to_bytes(payload)

    if not blob:
        raise ImagePayloadError("Image data URI has an empty payload")
    return mime, blob


def image_size(blob: bytes) -> Tuple[int, int]:
    try:
        with Image.open(io.BytesIO(blob)) as im:
            return im.size
    except (UnidentifiedImageError, OSError) as exc:
        raise ImagePayloadError(f"Image payload is not a readable image: {exc}") from exc


def contain_geometry(image_px: Tuple[int, int], *, x: int, y: int, cx: int, cy: int) -> Tuple[int, int, int, int]:
    """Fit an image of ``image_px`` inside the box, centered, keeping its aspect ratio."""
    iw, ih = image_px
    box_w = float(int(cx))
    box_h = float(int(cy))
    if box_w <= 0 or box_h <= 0 or iw <= 0 or ih <= 0:
        return int(x), int(y), int(cx), int(cy)

    ratio = iw / ih
    box_ratio = box_w / box_h
    if ratio >= box_ratio:
        w = box_w
        h = box_w / ratio
    else:
        h = box_h
        w = box_h * ratio
    left = int(int(x) + (box_w - w) / 2)
    top = int(int(y) + (box_h - h) / 2)
    return left, top, int(w), int(h)


def mark_generating(deck: SlideDeck, indices: Iterable[int]) -> SlideDeck:
    for idx in indices:
        deck = deck.with_body_slide(idx, is_generating_image=True)
    return deck


def _prompted_indices(deck: SlideDeck) -> list[int]:
    return [i for i, slide in enumerate(deck.body_slides) if slide.image_prompt]


def populate_images(
    deck: SlideDeck,
    generate_image: ImageGenerator,
    *,
    max_workers: int = 4,
    indices: Optional[Iterable[int]] = None,
) -> SlideDeck:
    """Generate images for slides that carry an image prompt.

    Each slide is an independent task; results land in that slide's own slot
    once every task has settled. A failed task is logged and leaves the slot's
    previous image in place.
    """
    targets = list(indices) if indices is not None else _prompted_indices(deck)
    targets = [i for i in targets if deck.body_slides[i].image_prompt]
    if not targets:
        return deck

    def run(idx: int) -> Optional[str]:
        prompt = deck.body_slides[idx].image_prompt
        try:
            return generate_image(prompt)
        except Exception as exc:
            logger.warning(f"Image generation failed for slide {idx + 1}: {exc}")
            return None

    results: Dict[int, Optional[str]] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(targets)))) as pool:
        futures = {idx: pool.submit(run, idx) for idx in targets}
        for idx, future in futures.items():
            results[idx] = future.result()

    generated = 0
    for idx in targets:
        uri = results.get(idx)
        if uri:
            deck = deck.with_body_slide(idx, image_data_uri=uri, is_generating_image=False)
            generated += 1
        else:
            deck = deck.with_body_slide(idx, is_generating_image=False)

    logger.info(f"Generated {generated}/{len(targets)} slide images")
    return deck


def regenerate_image(deck: SlideDeck, index: int, generate_image: ImageGenerator) -> SlideDeck:
    """Regenerate one slide's image, overwriting whatever was there."""
    return populate_images(deck, generate_image, max_workers=1, indices=[index])
