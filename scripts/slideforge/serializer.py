"""Deck serializer: turns a SlideDeck plus a Template into a .pptx document.

The layout mirrors the template masters: a title slide with centered
title, subtitle and byline, then one body slide per model slide with a
heading, a bulleted content block and an optional contain-fit picture.
"""

from __future__ import annotations

import io
import re
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from loguru import logger
from pptx import Presentation
from pptx.enum.text import PP_ALIGN
from pptx.oxml import parse_xml
from pptx.oxml.ns import nsdecls, qn
from pptx.util import Inches, Pt

from .images import contain_geometry, decode_data_uri, image_size
from .masters import MasterCanvas, hex_to_rgb
from .models import AuthorDetails, BodySlide, SlideDeck
from .templates import DEFAULT_MASTER_NAMES, PROFESSIONAL, Template, resolve_master_names

SLIDE_WIDTH = Inches(10)
SLIDE_HEIGHT = Inches(5.625)

FILE_EXTENSION = ".pptx"
PRESENTATION_FORMAT = "On-screen Show (16:9)"
BULLET_CHAR = "•"

# Content box geometry, in inches.
FULL_TEXT_WIDTH = 9.0
SPLIT_TEXT_WIDTH = 4.5
CONTENT_TOP = 2.0
CONTENT_HEIGHT = 3.0
IMAGE_WIDTH = 4.5
IMAGE_HEIGHT = 2.53

_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
_APP_PROPS_PARTNAME = "/docProps/app.xml"
_EXT_PROPS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"
_CTRL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def _normalize_newlines(text: Optional[str]) -> str:
    return str(text or "").replace("\r\n", "\n").replace("\r", "\n")


def _write_lines(
    text_frame,
    text: str,
    *,
    size: int,
    color: str,
    bold: bool = False,
    align: Optional[PP_ALIGN] = None,
    bullets: bool = False,
) -> None:
    """One paragraph per line, each styled the same way."""
    text_frame.clear()
    text_frame.word_wrap = True
    for i, line in enumerate(_normalize_newlines(text).split("\n")):
        paragraph = text_frame.paragraphs[0] if i == 0 else text_frame.add_paragraph()
        if bullets:
            _apply_bullet(paragraph)
        if align is not None:
            paragraph.alignment = align
        run = paragraph.add_run()
        run.text = line
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.color.rgb = hex_to_rgb(color)


def _apply_bullet(paragraph) -> None:
    pPr = paragraph._p.get_or_add_pPr()
    pPr.set("marL", str(int(Inches(0.25))))
    pPr.set("indent", str(-int(Inches(0.25))))
    for tag in ("a:buFont", "a:buNone", "a:buAutoNum", "a:buChar", "a:buBlip"):
        for existing in pPr.findall(qn(tag)):
            pPr.remove(existing)
    pPr.append(parse_xml(f'<a:buFont {nsdecls("a")} typeface="Arial"/>'))
    pPr.append(parse_xml(f'<a:buChar {nsdecls("a")} char="{BULLET_CHAR}"/>'))


def _parse_iso_date(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def _xml_safe(text: Optional[str]) -> str:
    """Escape XML-illegal control characters as ``_xHHHH_``, the way run text is escaped."""
    return _CTRL_CHARS.sub(lambda m: f"_x{ord(m.group(0)):04X}_", str(text or ""))


def _set_extended_properties(prs, company: str) -> None:
    # python-pptx does not expose extended properties; edit docProps/app.xml in place.
    for part in prs.part.package.iter_parts():
        if str(part.partname) != _APP_PROPS_PARTNAME:
            continue
        ET.register_namespace("", _EXT_PROPS_NS)
        ET.register_namespace("vt", "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes")
        root = ET.fromstring(part.blob)
        for tag, value in (("PresentationFormat", PRESENTATION_FORMAT), ("Company", _xml_safe(company))):
            node = root.find(f"{{{_EXT_PROPS_NS}}}{tag}")
            if node is None:
                node = ET.SubElement(root, f"{{{_EXT_PROPS_NS}}}{tag}")
            node.text = value
        part._blob = ET.tostring(root, xml_declaration=True, encoding="UTF-8", method="xml")
        return
    logger.debug("No extended properties part; company and format not recorded")


def _set_properties(prs, deck: SlideDeck, author: AuthorDetails) -> None:
    core = prs.core_properties
    core.author = _xml_safe(author.username)
    core.last_modified_by = _xml_safe(author.username)
    core.title = _xml_safe(deck.title_slide.title)
    core.subject = _xml_safe(deck.title_slide.subtitle)
    core.revision = 1
    stamp = _parse_iso_date(author.date)
    if stamp is not None:
        core.created = stamp
        core.modified = stamp
    _set_extended_properties(prs, author.institution)


def _resolve_masters(canvas: MasterCanvas, template: Template):
    title_name, body_name = resolve_master_names(template)
    if not (canvas.has_master(title_name) and canvas.has_master(body_name)):
        logger.debug(f"Template {template.name!r} has no {title_name}/{body_name} masters; using defaults")
        title_name, body_name = DEFAULT_MASTER_NAMES
        if not (canvas.has_master(title_name) and canvas.has_master(body_name)):
            PROFESSIONAL.register_masters(canvas)
    return canvas.find(title_name), canvas.find(body_name)


def _add_title_slide(prs, layout, deck: SlideDeck, template: Template, author: AuthorDetails) -> None:
    colors = template.colors
    slide = prs.slides.add_slide(layout)

    title_box = slide.shapes.add_textbox(Inches(0.5), Inches(1.5), Inches(9), Inches(1))
    _write_lines(
        title_box.text_frame, deck.title_slide.title, size=44, color=colors.text, bold=True, align=PP_ALIGN.CENTER
    )

    subtitle_box = slide.shapes.add_textbox(Inches(0.5), Inches(2.6), Inches(9), Inches(0.75))
    _write_lines(subtitle_box.text_frame, deck.title_slide.subtitle, size=24, color=colors.muted, align=PP_ALIGN.CENTER)

    byline_box = slide.shapes.add_textbox(Inches(0.5), Inches(4.0), Inches(9), Inches(0.5))
    _write_lines(byline_box.text_frame, author.byline, size=14, color=colors.muted, align=PP_ALIGN.CENTER)


def _add_body_slide(prs, layout, content: BodySlide, template: Template) -> None:
    colors = template.colors
    slide = prs.slides.add_slide(layout)

    heading_box = slide.shapes.add_textbox(
        Inches(template.heading_left), Inches(1.0), Inches(FULL_TEXT_WIDTH), Inches(0.75)
    )
    _write_lines(heading_box.text_frame, content.heading, size=28, color=colors.primary, bold=True)

    has_image = content.has_image
    text_width = SPLIT_TEXT_WIDTH if has_image else FULL_TEXT_WIDTH
    content_box = slide.shapes.add_textbox(
        Inches(template.content_left), Inches(CONTENT_TOP), Inches(text_width), Inches(CONTENT_HEIGHT)
    )
    _write_lines(content_box.text_frame, content.content, size=16, color=colors.text, bullets=True)

    if has_image:
        _, blob = decode_data_uri(content.image_data_uri)
        left, top, width, height = contain_geometry(
            image_size(blob),
            x=Inches(template.image_left),
            y=Inches(CONTENT_TOP),
            cx=Inches(IMAGE_WIDTH),
            cy=Inches(IMAGE_HEIGHT),
        )
        slide.shapes.add_picture(io.BytesIO(blob), left, top, width=width, height=height)


def build_presentation(deck: SlideDeck, template: Template, author: AuthorDetails) -> Presentation:
    """Assemble the in-memory presentation for ``deck`` styled by ``template``."""
    prs = Presentation()
    prs.slide_width = SLIDE_WIDTH
    prs.slide_height = SLIDE_HEIGHT
    _set_properties(prs, deck, author)

    canvas = MasterCanvas(prs)
    template.register_masters(canvas)
    title_layout, body_layout = _resolve_masters(canvas, template)

    _add_title_slide(prs, title_layout, deck, template, author)
    for idx, content in enumerate(deck.body_slides, start=1):
        logger.debug(f"Slide {idx + 1}: {content.heading!r} (image={content.has_image})")
        _add_body_slide(prs, body_layout, content, template)
    return prs


def _normalize_archive(blob: bytes) -> bytes:
    """Rewrite the package with fixed member timestamps so equal decks give equal bytes."""
    out = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(blob)) as src, zipfile.ZipFile(out, "w", zipfile.ZIP_DEFLATED) as dst:
        for info in src.infolist():
            member = zipfile.ZipInfo(info.filename, date_time=_ZIP_EPOCH)
            member.compress_type = zipfile.ZIP_DEFLATED
            member.external_attr = 0o600 << 16
            dst.writestr(member, src.read(info.filename))
    return out.getvalue()


def render_document(deck: SlideDeck, template: Template, author: AuthorDetails) -> bytes:
    prs = build_presentation(deck, template, author)
    buffer = io.BytesIO()
    prs.save(buffer)
    return _normalize_archive(buffer.getvalue())


def output_filename(deck: SlideDeck) -> str:
    """File name for the exported deck.

    Spaces and path separators in the title become underscores so the file
    always lands inside the output directory; an empty title gives
    ``presentation.pptx``.
    """
    stem = deck.title_slide.title.replace(" ", "_").replace("/", "_").replace("\\", "_")
    return f"{stem or 'presentation'}{FILE_EXTENSION}"


def export_document(
    deck: SlideDeck,
    template: Template,
    author: AuthorDetails,
    output_dir: Path | str = ".",
) -> Path:
    """Serialize the deck and write it into ``output_dir``; returns the written path."""
    data = render_document(deck, template, author)
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / output_filename(deck)
    path.write_bytes(data)
    logger.info(f"Exported {deck.slide_count} slides with template {template.name!r} to {path}")
    return path
