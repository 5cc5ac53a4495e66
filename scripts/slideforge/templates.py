"""Template registry: named visual presets for exported decks.

Each entry carries its own colors, master identifiers, master builder and
layout offsets, so adding a template is one table row plus one builder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from .masters import MasterCanvas

BRAND = "SlideForge"

DEFAULT_MASTER_NAMES: Tuple[str, str] = ("TITLE_SLIDE", "BODY_SLIDE")


@dataclass(frozen=True)
class TemplateColors:
    bg: str
    text: str
    primary: str
    muted: str


@dataclass(frozen=True)
class Template:
    name: str
    colors: TemplateColors
    build_masters: Callable[[MasterCanvas, "Template"], None]
    title_master: str = DEFAULT_MASTER_NAMES[0]
    body_master: str = DEFAULT_MASTER_NAMES[1]
    heading_left: float = 0.5
    content_left: float = 0.5
    image_left: float = 5.0
    ai_hint: str = ""

    def register_masters(self, canvas: MasterCanvas) -> None:
        self.build_masters(canvas, self)


def _banner_body_master(canvas: MasterCanvas, template: Template) -> None:
    c = template.colors
    body = canvas.define(template.body_master, background=c.bg)
    body.rect(x=0, y=0, h=0.75, fill=c.primary)
    body.text(
        f"{BRAND} Presentation", x=0.5, y=0, w=9, h=0.75, color="FFFFFF", size=16, bold=True, middle=True
    )


def _build_professional(canvas: MasterCanvas, template: Template) -> None:
    c = template.colors
    title = canvas.define(template.title_master, background=c.bg)
    title.rect(x=0, y=5.1, h=0.5, fill=c.primary)
    title.text(BRAND, x=0.5, y=5.2, w=9, color="FFFFFF", size=12, align="right")
    _banner_body_master(canvas, template)


def _build_creative(canvas: MasterCanvas, template: Template) -> None:
    c = template.colors
    title = canvas.define(template.title_master, background=c.bg)
    title.rule(x=0, y=2.75, color=c.primary, weight=3)
    title.text(BRAND, x=0.5, y=5.2, w=9, color=c.primary, size=12, align="right")
    _banner_body_master(canvas, template)


def _build_minimalist(canvas: MasterCanvas, template: Template) -> None:
    c = template.colors
    title = canvas.define(template.title_master, background=c.bg)
    title.rule(x=0.5, y=5.2, w=9, color=c.primary, weight=1)
    title.slide_number(x=0.5, y=5.25, w=0.5, color=c.muted, size=10)

    body = canvas.define(template.body_master, background=c.bg)
    body.slide_number(x=9, y=5.25, w=0.5, color=c.muted, size=10, align="right")


def _build_corporate(canvas: MasterCanvas, template: Template) -> None:
    c = template.colors
    title = canvas.define(template.title_master, background=c.bg)
    title.rect(x=0, y=0, h=0.3, fill=c.primary)
    title.rect(x=0, y=5.32, h=0.3, fill=c.primary)

    body = canvas.define(template.body_master, background=c.bg)
    body.rect(x=0, y=0, w=0.4, fill=c.primary)
    body.rule(x=0.6, y=1.5, w=8.9, color=c.primary, weight=1)
    body.slide_number(x=0.6, y=5.2, w=9, color=c.muted, size=10, align="right", prefix="Slide ")


PROFESSIONAL = Template(
    name="Professional",
    colors=TemplateColors(bg="F4F3F4", text="383838", primary="79579F", muted="6C757D"),
    build_masters=_build_professional,
    ai_hint="minimalist abstract",
)

CREATIVE = Template(
    name="Creative",
    colors=TemplateColors(bg="1A1A1A", text="FFFFFF", primary="9F5779", muted="CCCCCC"),
    build_masters=_build_creative,
    title_master="TITLE_SLIDE_CREATIVE",
    body_master="BODY_SLIDE_CREATIVE",
    ai_hint="colorful geometric",
)

MINIMALIST = Template(
    name="Minimalist",
    colors=TemplateColors(bg="FFFFFF", text="212529", primary="007BFF", muted="6C757D"),
    build_masters=_build_minimalist,
    title_master="TITLE_SLIDE_MINIMALIST",
    body_master="BODY_SLIDE_MINIMALIST",
    ai_hint="monochrome abstract line",
)

# The left accent bar pushes text and image right.
CORPORATE = Template(
    name="Corporate",
    colors=TemplateColors(bg="FFFFFF", text="003366", primary="005A9E", muted="5A5A5A"),
    build_masters=_build_corporate,
    title_master="TITLE_SLIDE_CORPORATE",
    body_master="BODY_SLIDE_CORPORATE",
    heading_left=0.6,
    content_left=0.6,
    image_left=5.2,
    ai_hint="blue corporate business",
)

_TEMPLATES: Tuple[Template, ...] = (PROFESSIONAL, CREATIVE, MINIMALIST, CORPORATE)
_BY_NAME: Dict[str, Template] = {t.name: t for t in _TEMPLATES}


def list_templates() -> Tuple[Template, ...]:
    """All templates in display order; the first one is the default selection."""
    return _TEMPLATES


def default_template() -> Template:
    return _TEMPLATES[0]


def get_template(name: str) -> Template:
    """Look up a template by name, falling back to the default for unknown names."""
    return _BY_NAME.get(name, default_template())


def resolve_master_names(template: Template) -> Tuple[str, str]:
    """Return (title master, body master) identifiers for ``template``.

    Only registered template names map to their own masters; anything else
    gets the default pair.
    """
    entry = _BY_NAME.get(template.name)
    if entry is None:
        return DEFAULT_MASTER_NAMES
    return entry.title_master, entry.body_master
