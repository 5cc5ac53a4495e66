from __future__ import annotations

import base64
import io
import sys
import zipfile
from dataclasses import replace
from pathlib import Path

import pytest
from PIL import Image
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.oxml.ns import qn
from pptx.util import Inches

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from slideforge import (  # noqa: E402
    AuthorDetails,
    BodySlide,
    ImagePayloadError,
    SlideDeck,
    TitleSlide,
    build_presentation,
    export_document,
    get_template,
    output_filename,
    render_document,
)
from slideforge.templates import CORPORATE, CREATIVE, Template, TemplateColors  # noqa: E402

AUTHOR = AuthorDetails(username="Jane", institution="Acme U", date="2024-05-01")


def _png_data_uri(size=(400, 100), color=(200, 30, 30)) -> str:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def _climate_deck(**slide_changes) -> SlideDeck:
    slide = BodySlide(heading="Intro", content="Line one\nLine two", image_prompt="forest")
    return SlideDeck(
        title_slide=TitleSlide(title="Climate Policy", subtitle="2024 Review"),
        body_slides=[replace(slide, **slide_changes)],
    )


def _pictures(slide) -> list:
    return [shape for shape in slide.shapes if shape.shape_type == MSO_SHAPE_TYPE.PICTURE]


def test_example_deck_layout() -> None:
    prs = build_presentation(_climate_deck(), get_template("Professional"), AUTHOR)

    assert len(prs.slides) == 2
    title_slide, body_slide = prs.slides[0], prs.slides[1]
    assert title_slide.slide_layout.name == "TITLE_SLIDE"
    assert body_slide.slide_layout.name == "BODY_SLIDE"

    texts = [shape.text_frame.text for shape in title_slide.shapes]
    assert texts == ["Climate Policy", "2024 Review", "By Jane, Acme U\n2024-05-01"]

    heading, content = list(body_slide.shapes)
    assert heading.text_frame.text == "Intro"
    assert content.text_frame.text == "Line one\nLine two"
    assert len(content.text_frame.paragraphs) == 2
    assert content.width == Inches(9)
    assert not _pictures(body_slide)
    assert output_filename(_climate_deck()) == "Climate_Policy.pptx"


def test_body_content_is_bulleted() -> None:
    prs = build_presentation(_climate_deck(), get_template("Professional"), AUTHOR)
    content = list(prs.slides[1].shapes)[1]

    for paragraph in content.text_frame.paragraphs:
        bu_char = paragraph._p.pPr.find(qn("a:buChar"))
        assert bu_char is not None
        assert bu_char.get("char") == "•"


def test_slide_with_image_narrows_text_and_adds_picture() -> None:
    deck = _climate_deck(image_data_uri=_png_data_uri(size=(400, 100)))
    prs = build_presentation(deck, get_template("Professional"), AUTHOR)

    body_slide = prs.slides[1]
    content = list(body_slide.shapes)[1]
    assert content.width == Inches(4.5)

    pictures = _pictures(body_slide)
    assert len(pictures) == 1
    picture = pictures[0]
    # 4:1 image in a 4.5 x 2.53 box is width-bound and vertically centered.
    assert picture.left == Inches(5.0)
    assert picture.width == Inches(4.5)
    assert abs(picture.height - Inches(1.125)) <= 1
    expected_top = Inches(2.0) + (Inches(2.53) - Inches(1.125)) / 2
    assert abs(picture.top - expected_top) <= 1


def test_corporate_offsets_shift_heading_content_and_image() -> None:
    deck = _climate_deck(image_data_uri=_png_data_uri(size=(100, 100)))
    prs = build_presentation(deck, CORPORATE, AUTHOR)

    heading, content, picture = list(prs.slides[1].shapes)
    assert heading.left == Inches(0.6)
    assert content.left == Inches(0.6)
    # Square image is height-bound and centered horizontally inside the box at 5.2in.
    assert picture.left > Inches(5.2)
    assert picture.left + picture.width < Inches(5.2 + 4.5)
    assert prs.slides[1].slide_layout.name == "BODY_SLIDE_CORPORATE"


def test_empty_body_slides_yield_title_only_document() -> None:
    deck = SlideDeck(title_slide=TitleSlide(title="Solo", subtitle=""))
    prs = build_presentation(deck, get_template("Minimalist"), AUTHOR)
    assert len(prs.slides) == 1
    assert prs.slides[0].slide_layout.name == "TITLE_SLIDE_MINIMALIST"


def test_slides_follow_model_order() -> None:
    slides = [BodySlide(heading=f"Section {i}", content=f"Point {i}") for i in range(5)]
    deck = SlideDeck(title_slide=TitleSlide(title="Ordered"), body_slides=slides)
    prs = build_presentation(deck, CREATIVE, AUTHOR)

    assert len(prs.slides) == 1 + len(slides)
    headings = [list(slide.shapes)[0].text_frame.text for slide in list(prs.slides)[1:]]
    assert headings == [f"Section {i}" for i in range(5)]


def test_unicode_and_multiline_text_preserved() -> None:
    content = "Ünïcödé ✓ — résumé\n日本語のテキスト\n\nlast line"
    deck = SlideDeck(
        title_slide=TitleSlide(title="Café Politique", subtitle="Überblick"),
        body_slides=[BodySlide(heading="Ωmega", content=content)],
    )
    prs = build_presentation(deck, get_template("Professional"), AUTHOR)

    assert list(prs.slides[0].shapes)[0].text_frame.text == "Café Politique"
    heading, body = list(prs.slides[1].shapes)
    assert heading.text_frame.text == "Ωmega"
    assert body.text_frame.text == content


def test_render_is_byte_identical_for_identical_inputs() -> None:
    deck = _climate_deck(image_data_uri=_png_data_uri())
    first = render_document(deck, get_template("Corporate"), AUTHOR)
    second = render_document(deck, get_template("Corporate"), AUTHOR)
    assert first == second
    assert zipfile.is_zipfile(io.BytesIO(first))


def test_unknown_template_falls_back_to_default_masters() -> None:
    # A custom template whose builder registers masters under its own names.
    mystery = replace(CREATIVE, name="Mystery")
    prs = build_presentation(_climate_deck(), mystery, AUTHOR)
    assert prs.slides[0].slide_layout.name == "TITLE_SLIDE"
    assert prs.slides[1].slide_layout.name == "BODY_SLIDE"


def test_template_without_masters_does_not_raise() -> None:
    bare = Template(
        name="Bare",
        colors=TemplateColors(bg="FFFFFF", text="000000", primary="FF0000", muted="888888"),
        build_masters=lambda canvas, template: None,
    )
    prs = build_presentation(_climate_deck(), bare, AUTHOR)
    assert [slide.slide_layout.name for slide in prs.slides] == ["TITLE_SLIDE", "BODY_SLIDE"]


def _app_properties(data: bytes) -> str:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return archive.read("docProps/app.xml").decode("utf-8")


def test_document_properties_come_from_author_and_title() -> None:
    prs = build_presentation(_climate_deck(), get_template("Professional"), AUTHOR)
    core = prs.core_properties
    assert core.author == "Jane"
    assert core.title == "Climate Policy"
    assert core.subject == "2024 Review"
    assert core.created.date().isoformat() == "2024-05-01"


def test_company_is_written_to_extended_properties() -> None:
    app_xml = _app_properties(render_document(_climate_deck(), get_template("Professional"), AUTHOR))
    assert "<Company>Acme U</Company>" in app_xml


def test_company_markup_is_escaped() -> None:
    author = replace(AUTHOR, institution="Acme & Co <U>")
    app_xml = _app_properties(render_document(_climate_deck(), get_template("Professional"), author))
    assert "<Company>Acme &amp; Co &lt;U&gt;</Company>" in app_xml


def test_presentation_format_matches_widescreen_size() -> None:
    app_xml = _app_properties(render_document(_climate_deck(), CORPORATE, AUTHOR))
    assert "<PresentationFormat>On-screen Show (16:9)</PresentationFormat>" in app_xml
    assert "4:3" not in app_xml


def test_control_characters_in_title_do_not_break_export() -> None:
    deck = SlideDeck(title_slide=TitleSlide(title="Intro\x1b", subtitle="Tab\there"))
    author = replace(AUTHOR, username="Jane\x07", institution="Acme\x1fU")
    prs = build_presentation(deck, get_template("Professional"), author)

    core = prs.core_properties
    assert core.title == "Intro_x001B_"
    assert core.subject == "Tab\there"
    assert core.author == "Jane_x0007_"

    data = render_document(deck, get_template("Professional"), author)
    assert "<Company>Acme_x001F_U</Company>" in _app_properties(data)
    reopened = Presentation(io.BytesIO(data))
    assert reopened.core_properties.title == "Intro_x001B_"


def _first_run_style(shape):
    font = shape.text_frame.paragraphs[0].runs[0].font
    return str(font.color.rgb), font.size.pt, bool(font.bold)


def test_text_blocks_use_template_colors_sizes_and_weight() -> None:
    prs = build_presentation(_climate_deck(), CORPORATE, AUTHOR)
    title, subtitle, byline = list(prs.slides[0].shapes)
    heading, content = list(prs.slides[1].shapes)

    assert _first_run_style(title) == ("003366", 44, True)
    assert _first_run_style(subtitle) == ("5A5A5A", 24, False)
    assert _first_run_style(byline) == ("5A5A5A", 14, False)
    assert _first_run_style(heading) == ("005A9E", 28, True)
    assert _first_run_style(content) == ("003366", 16, False)
    # Every line of a multi-line block carries the same styling.
    assert {str(p.runs[0].font.color.rgb) for p in content.text_frame.paragraphs} == {"003366"}


def test_malformed_image_payload_propagates() -> None:
    deck = _climate_deck(image_data_uri="data:image/png;base64,@@not-base64@@")
    with pytest.raises(ImagePayloadError):
        render_document(deck, get_template("Professional"), AUTHOR)


def test_export_document_writes_named_file(tmp_path: Path) -> None:
    path = export_document(_climate_deck(), get_template("Professional"), AUTHOR, tmp_path / "out")

    assert path == tmp_path / "out" / "Climate_Policy.pptx"
    reopened = Presentation(str(path))
    assert len(reopened.slides) == 2
    assert reopened.slides[1].slide_layout.name == "BODY_SLIDE"


def test_output_filename_replaces_spaces_and_path_separators() -> None:
    def name(title: str) -> str:
        return output_filename(SlideDeck(title_slide=TitleSlide(title=title)))

    assert name("Q3 Results  Draft-v2") == "Q3_Results__Draft-v2.pptx"
    assert name("Q3/Q4 Plan") == "Q3_Q4_Plan.pptx"
    assert name("..\\Budget") == ".._Budget.pptx"
    assert name("") == "presentation.pptx"


def test_export_deck_from_sample_file(tmp_path: Path) -> None:
    from slideforge import export_deck_from_file

    sample = Path(__file__).resolve().parents[1] / "assets" / "sample_deck.json"
    path = export_deck_from_file(deck_path=sample, output_dir=tmp_path, author=AUTHOR, template_name="Minimalist")

    prs = Presentation(str(path))
    assert path.name == "Climate_Policy.pptx"
    assert len(prs.slides) == 4
    assert prs.slides[3].slide_layout.name == "BODY_SLIDE_MINIMALIST"
