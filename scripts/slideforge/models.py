"""Slide content model shared by generation, editing and export.

All types are frozen dataclasses. Edits go through the ``with_*`` helpers,
which return a new deck with one element replaced wholesale, so a deck handed
to the exporter is never mutated behind its back.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class TitleSlide:
    title: str
    subtitle: str = ""


@dataclass(frozen=True)
class BodySlide:
    heading: str
    content: str
    image_prompt: Optional[str] = None
    image_data_uri: Optional[str] = None
    is_generating_image: bool = False

    @property
    def has_image(self) -> bool:
        return bool(self.image_data_uri)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BodySlide":
        return cls(
            heading=str(data.get("heading") or ""),
            content=str(data.get("content") or ""),
            image_prompt=_pick(data, "imagePrompt", "image_prompt") or None,
            image_data_uri=_pick(data, "imageDataUri", "image_data_uri") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"heading": self.heading, "content": self.content}
        if self.image_prompt is not None:
            out["imagePrompt"] = self.image_prompt
        if self.image_data_uri is not None:
            out["imageDataUri"] = self.image_data_uri
        return out


@dataclass(frozen=True)
class SlideDeck:
    """A title slide followed by ordered body slides."""

    title_slide: TitleSlide
    body_slides: Tuple[BodySlide, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable but always store a tuple.
        object.__setattr__(self, "body_slides", tuple(self.body_slides))

    @property
    def slide_count(self) -> int:
        return 1 + len(self.body_slides)

    def with_title(self, **changes: Any) -> "SlideDeck":
        return replace(self, title_slide=replace(self.title_slide, **changes))

    def with_body_slide(self, index: int, **changes: Any) -> "SlideDeck":
        return self.replace_body_slide(index, replace(self._slide_at(index), **changes))

    def replace_body_slide(self, index: int, slide: BodySlide) -> "SlideDeck":
        self._slide_at(index)
        slides = list(self.body_slides)
        slides[index] = slide
        return replace(self, body_slides=tuple(slides))

    def with_body_slides(self, slides: Iterable[BodySlide]) -> "SlideDeck":
        return replace(self, body_slides=tuple(slides))

    def _slide_at(self, index: int) -> BodySlide:
        if not 0 <= index < len(self.body_slides):
            raise IndexError(f"body slide index {index} out of range (0..{len(self.body_slides) - 1})")
        return self.body_slides[index]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SlideDeck":
        """Build a deck from generation output (camelCase or snake_case keys)."""
        title_data = _pick(data, "titleSlide", "title_slide") or {}
        slides_data = _pick(data, "bodySlides", "body_slides") or []
        return cls(
            title_slide=TitleSlide(
                title=str(title_data.get("title") or ""),
                subtitle=str(title_data.get("subtitle") or ""),
            ),
            body_slides=tuple(BodySlide.from_dict(item) for item in slides_data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "titleSlide": {"title": self.title_slide.title, "subtitle": self.title_slide.subtitle},
            "bodySlides": [slide.to_dict() for slide in self.body_slides],
        }


@dataclass(frozen=True)
class AuthorDetails:
    username: str
    institution: str
    date: str

    @property
    def byline(self) -> str:
        return f"By {self.username}, {self.institution}\n{self.date}"
