"""Named master definitions drawn onto python-pptx slide layouts.

python-pptx cannot create slide layouts, so a master is registered by
claiming one of the default template's layouts, stripping its placeholders,
renaming it and drawing the master's background and decoration onto it.
Slides added on that layout inherit the decoration.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_AUTO_SHAPE_TYPE, MSO_CONNECTOR
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml import parse_xml
from pptx.oxml.ns import nsdecls, qn
from pptx.shapes.shapetree import SlideShapes
from pptx.util import Inches, Pt

# Blank first, then layouts whose placeholders are cheap to strip.
_CLAIM_ORDER = (6, 5, 1, 0, 2, 3, 4, 7, 8, 9, 10)

_ALIGNMENTS = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
}

# Fixed field id keeps repeated exports byte-identical.
_SLIDE_NUMBER_FIELD_ID = "{5C3B7A54-0E0F-4B5E-9C1D-2D7F3A6B8E10}"


def hex_to_rgb(value: str) -> RGBColor:
    return RGBColor.from_string(value.lstrip("#").upper())


class MasterCanvas:
    """Registers named masters on a presentation handle."""

    def __init__(self, prs):
        self.prs = prs

    @property
    def slide_width_in(self) -> float:
        return float(int(self.prs.slide_width)) / float(Inches(1))

    @property
    def slide_height_in(self) -> float:
        return float(int(self.prs.slide_height)) / float(Inches(1))

    def find(self, name: str):
        for layout in self.prs.slide_layouts:
            if layout.name == name:
                return layout
        return None

    def has_master(self, name: str) -> bool:
        return self.find(name) is not None

    def define(self, name: str, *, background: str) -> "MasterDrawing":
        """Register (or redraw) the master called ``name`` and return a drawing surface for it."""
        layout = self.find(name)
        if layout is None:
            layout = self._claim_layout()
            layout._element.cSld.name = name
            logger.debug(f"Registered master {name}")
        else:
            logger.debug(f"Redrawing master {name}")

        sp_tree = layout.shapes._spTree
        for shape in list(layout.shapes):
            sp_tree.remove(shape._element)

        fill = layout.background.fill
        fill.solid()
        fill.fore_color.rgb = hex_to_rgb(background)
        return MasterDrawing(layout, width_in=self.slide_width_in, height_in=self.slide_height_in)

    def _claim_layout(self):
        layouts = list(self.prs.slide_layouts)
        taken = {layout.name for layout in layouts if layout.name.isupper()}
        order = [i for i in _CLAIM_ORDER if i < len(layouts)]
        order += [i for i in range(len(layouts)) if i not in order]
        for idx in order:
            if layouts[idx].name not in taken:
                return layouts[idx]
        raise RuntimeError("No free slide layout left to register a master on")


class MasterDrawing:
    """Drawing helpers for the decoration of one master."""

    def __init__(self, layout, *, width_in: float, height_in: float):
        self.layout = layout
        self.width_in = width_in
        self.height_in = height_in
        # Layout shape trees have no add_* API; reuse the slide factory on the layout's tree.
        self.shapes = SlideShapes(layout.shapes._spTree, layout)

    def _extent(self, value: Optional[float], available: float) -> float:
        return available if value is None else value

    def rect(self, *, x: float, y: float, w: Optional[float] = None, h: Optional[float] = None, fill: str):
        """Filled rectangle; a ``None`` extent spans the rest of the slide."""
        width = self._extent(w, self.width_in - x)
        height = self._extent(h, self.height_in - y)
        shape = self.shapes.add_shape(
            MSO_AUTO_SHAPE_TYPE.RECTANGLE, Inches(x), Inches(y), Inches(width), Inches(height)
        )
        shape.fill.solid()
        shape.fill.fore_color.rgb = hex_to_rgb(fill)
        shape.line.fill.background()
        return shape

    def rule(self, *, x: float, y: float, w: Optional[float] = None, color: str, weight: float):
        width = self._extent(w, self.width_in - x)
        line = self.shapes.add_connector(
            MSO_CONNECTOR.STRAIGHT, Inches(x), Inches(y), Inches(x + width), Inches(y)
        )
        line.line.color.rgb = hex_to_rgb(color)
        line.line.width = Pt(weight)
        return line

    def text(
        self,
        text: str,
        *,
        x: float,
        y: float,
        w: Optional[float] = None,
        h: float = 0.4,
        color: str,
        size: int,
        align: str = "left",
        bold: bool = False,
        middle: bool = False,
    ):
        box = self._textbox(x, y, w, h, middle=middle)
        paragraph = box.text_frame.paragraphs[0]
        paragraph.alignment = _ALIGNMENTS[align]
        run = paragraph.add_run()
        run.text = text
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.color.rgb = hex_to_rgb(color)
        return box

    def slide_number(
        self,
        *,
        x: float,
        y: float,
        w: Optional[float] = None,
        h: float = 0.3,
        color: str,
        size: int,
        align: str = "left",
        prefix: str = "",
    ):
        """Text box holding a slide-number field, optionally preceded by static text."""
        box = self._textbox(x, y, w, h)
        paragraph = box.text_frame.paragraphs[0]
        paragraph.alignment = _ALIGNMENTS[align]
        if prefix:
            run = paragraph.add_run()
            run.text = prefix
            run.font.size = Pt(size)
            run.font.color.rgb = hex_to_rgb(color)

        fld = parse_xml(
            f'<a:fld {nsdecls("a")} id="{_SLIDE_NUMBER_FIELD_ID}" type="slidenum">'
            f'<a:rPr lang="en-US" sz="{size * 100}">'
            f'<a:solidFill><a:srgbClr val="{color.lstrip("#").upper()}"/></a:solidFill>'
            "</a:rPr><a:t>‹#›</a:t></a:fld>"
        )
        end = paragraph._p.find(qn("a:endParaRPr"))
        if end is not None:
            end.addprevious(fld)
        else:
            paragraph._p.append(fld)
        return box

    def _textbox(self, x: float, y: float, w: Optional[float], h: float, *, middle: bool = False):
        width = self._extent(w, self.width_in - x)
        box = self.shapes.add_textbox(Inches(x), Inches(y), Inches(width), Inches(h))
        frame = box.text_frame
        frame.word_wrap = True
        if middle:
            frame.vertical_anchor = MSO_ANCHOR.MIDDLE
        return box
