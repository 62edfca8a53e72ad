"""End-to-end tests for PPTXReader."""

import asyncio

import pytest

from factories import (
    PNG_BYTES,
    build_deck,
    build_package,
    corrupt_part,
    pic_element,
    presentation_xml,
    rect_sp,
    relationship,
    slide_xml,
    theme_xml,
)
from pptxdom import CancellationToken, PPTXReader, decode_pptx
from pptxdom.config import Settings
from pptxdom.dom.schema import (
    BackgroundSource,
    ImageElement,
    ImportSettings,
    MediaKind,
    ParseStage,
    ShapeElement,
    ShapeKind,
    TargetSlideSize,
    TextElement,
)

CUSTOM_4_3 = ImportSettings(
    target_slide_size=TargetSlideSize(preset="custom", width=960, height=720)
)


@pytest.fixture
def reader(settings) -> PPTXReader:
    return PPTXReader(settings)


@pytest.fixture
def media_deck() -> bytes:
    """One slide with a picture, plus an unknown media part."""
    return build_deck(
        [slide_xml(pic_element(rel_id="rId2"))],
        slide_rels={1: relationship("rId2", "image", "../media/image1.png")},
        extra_parts={
            "ppt/media/image1.png": PNG_BYTES,
            "ppt/media/blob.xyz": b"\x00\x01",
        },
    )


class TestGeometry:
    """Tests for slide size and canvas scaling."""

    def test_default_target_scales_4_3_deck(self, reader, simple_deck) -> None:
        result = reader.read(simple_deck)
        presentation = result.data

        assert result.success
        assert presentation.slide_size.width == pytest.approx(960)
        assert presentation.slide_size.height == pytest.approx(720)
        assert presentation.scale == pytest.approx(1.5)
        assert presentation.canvas_size.width == pytest.approx(1440)
        assert presentation.canvas_size.height == pytest.approx(1080)

    def test_custom_target_matching_deck(self, reader, simple_deck) -> None:
        presentation = reader.read(simple_deck, import_settings=CUSTOM_4_3).data

        assert presentation.scale == pytest.approx(1.0)

    def test_element_geometry_scaled(self, reader, simple_deck) -> None:
        shape = reader.read(simple_deck).data.slides[0].elements[0]

        assert shape.position.x == pytest.approx(144)
        assert shape.position.y == pytest.approx(144)
        assert shape.size.width == pytest.approx(288)

    def test_widescreen_deck(self, reader) -> None:
        data = build_deck([slide_xml()], slide_size=(12192000, 6858000))

        presentation = reader.read(data).data

        assert presentation.slide_size.width == pytest.approx(1280)
        assert presentation.scale == pytest.approx(1.5)


class TestSlides:
    """Tests for slide assembly."""

    def test_simple_deck(self, reader, simple_deck) -> None:
        result = reader.read(simple_deck)
        first, second = result.data.slides

        assert result.warnings == []
        assert result.errors == []
        assert (first.id, first.name, first.number) == ("slide-256", "Intro", 1)
        assert (second.id, second.name, second.number) == ("slide-257", "Slide 2", 2)
        assert first.part_name == "ppt/slides/slide1.xml"
        assert first.layout.part_name == "ppt/slideLayouts/slideLayout1.xml"
        assert first.layout.name == "Title and Content"
        assert first.theme_id == "theme-1"

    def test_element_kinds(self, reader, simple_deck) -> None:
        first, second = reader.read(simple_deck).data.slides

        (shape,) = first.elements
        (text,) = second.elements
        assert isinstance(shape, ShapeElement)
        assert shape.id == "slide-256/2"
        assert shape.shape_type == ShapeKind.RECTANGLE
        assert shape.fill.color.hex == "#FF0000"
        assert isinstance(text, TextElement)
        assert text.text_body.text == "Hello"

    def test_slides_ordered_by_part_number(self, reader) -> None:
        slides = [slide_xml(name=f"S{n}") for n in range(1, 11)]

        result = reader.read(build_deck(slides, reverse=True))

        assert [slide.name for slide in result.data.slides] == [f"S{n}" for n in range(1, 11)]
        assert [slide.number for slide in result.data.slides] == list(range(1, 11))

    def test_malformed_slide_is_skipped(self, reader) -> None:
        data = build_deck([slide_xml(rect_sp()), "<p:sld><broken", slide_xml(rect_sp())])

        result = reader.read(data)

        assert result.success
        assert [slide.number for slide in result.data.slides] == [1, 3]
        assert len(result.warnings) == 1
        assert "slide 2" in result.warnings[0]
        assert "ppt/slides/slide2.xml" in result.warnings[0]

    def test_wrong_root_is_skipped(self, reader) -> None:
        data = build_deck([slide_xml(), presentation_xml(1)])

        result = reader.read(data)

        assert len(result.data.slides) == 1
        assert "slide 2" in result.warnings[0]

    def test_decode_is_repeatable(self, reader, simple_deck) -> None:
        first = reader.read(simple_deck)
        second = reader.read(simple_deck)

        assert first.data == second.data
        assert first.warnings == second.warnings

    def test_parallel_matches_sequential(self, reader) -> None:
        slides = [slide_xml(rect_sp(text=f"Slide {n}"), name=f"S{n}") for n in range(1, 9)]
        data = build_deck(slides)
        parallel = PPTXReader(Settings(_env_file=None, max_workers=4))

        assert parallel.read(data).data == reader.read(data).data

    def test_hidden_slide(self, reader) -> None:
        data = build_deck([slide_xml(attrs=' show="0"'), slide_xml()])

        first, second = reader.read(data).data.slides

        assert first.hidden
        assert not second.hidden


class TestPresentationPart:
    """Tests for the presentation part and slide id list."""

    def test_declared_more_than_present(self, reader) -> None:
        data = build_deck([slide_xml(), slide_xml()], declared_slides=3)

        result = reader.read(data)

        assert result.data.slide_count == 2
        assert result.data.declared_slide_count == 3
        assert any("declares 3 slides" in warning for warning in result.warnings)

    def test_undeclared_slide_gets_positional_id(self, reader) -> None:
        data = build_deck([slide_xml(), slide_xml()], declared_slides=1)

        result = reader.read(data)

        assert [slide.id for slide in result.data.slides] == ["slide-256", "slide-2"]
        assert any("declares 1 slides" in warning for warning in result.warnings)

    def test_missing_presentation_part(self, reader) -> None:
        data = build_package({"ppt/slides/slide1.xml": slide_xml()})

        result = reader.read(data)

        assert not result.success
        assert result.data is None
        assert "ppt/presentation.xml" in result.errors[0]

    def test_broken_presentation_part(self, reader) -> None:
        data = build_package({"ppt/presentation.xml": "<p:presentation"})

        result = reader.read(data)

        assert not result.success
        assert "Unreadable" in result.errors[0]

    @pytest.mark.parametrize("data", [b"", b"not a zip file"])
    def test_not_a_package(self, reader, data) -> None:
        result = reader.read(data)

        assert not result.success
        assert len(result.errors) == 1


class TestThemesAndBackgrounds:
    """Tests for theme resolution and background inheritance."""

    def test_theme_fonts_applied(self, reader, simple_deck) -> None:
        text = reader.read(simple_deck).data.slides[1].elements[0]

        assert text.text_body.paragraphs[0].runs[0].style.font_family == "Verdana"

    def test_scheme_colors_resolved(self, reader) -> None:
        fill = '<a:solidFill><a:schemeClr val="accent1"/></a:solidFill>'
        data = build_deck([slide_xml(rect_sp(fill=fill))])

        shape = reader.read(data).data.slides[0].elements[0]

        assert shape.fill.color.hex == "#4472C4"

    def test_master_background_inherited(self, reader, simple_deck) -> None:
        background = reader.read(simple_deck).data.slides[0].background

        assert background.source == BackgroundSource.MASTER
        assert background.fill.color.hex == "#EEEEEE"

    def test_master_background_disabled(self, reader, simple_deck) -> None:
        settings = ImportSettings(include_master_background=False)

        slide = reader.read(simple_deck, import_settings=settings).data.slides[0]

        assert slide.background is None

    def test_slide_background_wins(self, reader) -> None:
        background = (
            '<p:bg><p:bgPr><a:solidFill><a:schemeClr val="accent1"/></a:solidFill>'
            "<a:effectLst/></p:bgPr></p:bg>"
        )
        data = build_deck([slide_xml(background=background)])

        slide = reader.read(data).data.slides[0]

        assert slide.background.source == BackgroundSource.SLIDE
        assert slide.background.fill.color.hex == "#4472C4"

    def test_masters_and_themes_listed(self, reader, simple_deck) -> None:
        presentation = reader.read(simple_deck).data

        (master,) = presentation.masters
        (theme,) = presentation.themes
        assert master.id == "master-1"
        assert master.theme_id == "theme-1"
        assert master.layout_ids == ["ppt/slideLayouts/slideLayout1.xml"]
        assert master.background.fill.color.hex == "#EEEEEE"
        assert theme.name == "Test Theme"
        assert theme.color_scheme.accent1.hex == "#4472C4"

    def test_theme_without_colors(self, reader) -> None:
        data = build_deck([slide_xml()], theme=theme_xml(with_colors=False))

        result = reader.read(data)

        assert result.success
        assert result.data.themes[0].color_scheme.accent1.hex == "#5B9BD5"
        assert len(result.warnings) == 1


class TestMedia:
    """Tests for media collection and image elements."""

    def test_media_listed(self, reader, media_deck) -> None:
        result = reader.read(media_deck)

        (media,) = result.data.media
        assert media.id == "media-1"
        assert media.kind == MediaKind.IMAGE
        assert media.mime_type == "image/png"
        assert media.size == len(PNG_BYTES)
        assert media.data == PNG_BYTES
        assert any("unknown type" in warning for warning in result.warnings)

    def test_media_data_not_embedded(self, media_deck) -> None:
        reader = PPTXReader(Settings(_env_file=None, embed_media_data=False))

        (media,) = reader.read(media_deck).data.media

        assert media.data is None
        assert media.content_hash is not None

    def test_image_element_links_media(self, reader, media_deck) -> None:
        presentation = reader.read(media_deck).data

        (image,) = presentation.slides[0].elements
        assert isinstance(image, ImageElement)
        assert image.source.part_name == "ppt/media/image1.png"
        assert image.source.content_hash == presentation.media[0].content_hash

    def test_images_disabled(self, reader, media_deck) -> None:
        settings = ImportSettings(import_images=False)

        presentation = reader.read(media_deck, import_settings=settings).data

        assert presentation.slides[0].elements == []
        assert len(presentation.media) == 1


class TestDamagedParts:
    """Tests for archive entries that fail to inflate."""

    def test_damaged_theme_uses_default(self, reader, simple_deck) -> None:
        data = corrupt_part(simple_deck, "ppt/theme/theme1.xml")

        result = reader.read(data)

        assert result.success
        assert len(result.data.slides) == 2
        assert len(result.data.masters) == 1
        assert result.data.themes == []
        assert len(result.warnings) == 1
        assert "ppt/theme/theme1.xml" in result.warnings[0]
        text = result.data.slides[1].elements[0]
        assert text.text_body.paragraphs[0].runs[0].style.font_family == "Arial"

    def test_damaged_theme_with_parallel_slides(self, simple_deck) -> None:
        reader = PPTXReader(Settings(_env_file=None, max_workers=4))

        result = reader.read(corrupt_part(simple_deck, "ppt/theme/theme1.xml"))

        assert [slide.number for slide in result.data.slides] == [1, 2]
        assert len(result.warnings) == 1

    def test_damaged_master_is_skipped(self, reader, simple_deck) -> None:
        data = corrupt_part(simple_deck, "ppt/slideMasters/slideMaster1.xml")

        result = reader.read(data)

        assert result.success
        assert len(result.data.slides) == 2
        assert result.data.masters == []
        assert len(result.data.themes) == 1
        assert len(result.warnings) == 1
        assert "ppt/slideMasters/slideMaster1.xml" in result.warnings[0]

    def test_damaged_media_is_skipped(self, reader) -> None:
        data = build_deck(
            [slide_xml(rect_sp()), slide_xml()],
            extra_parts={"ppt/media/image1.png": PNG_BYTES, "ppt/media/image2.png": PNG_BYTES},
        )

        result = reader.read(corrupt_part(data, "ppt/media/image2.png"))

        assert result.success
        assert len(result.data.slides) == 2
        assert [media.part_name for media in result.data.media] == ["ppt/media/image1.png"]
        assert len(result.warnings) == 1
        assert "ppt/media/image2.png" in result.warnings[0]

    def test_damaged_image_keeps_picture(self, reader, media_deck) -> None:
        result = reader.read(corrupt_part(media_deck, "ppt/media/image1.png"))

        (image,) = result.data.slides[0].elements
        assert isinstance(image, ImageElement)
        assert image.source.part_name == "ppt/media/image1.png"
        assert image.source.content_hash is None
        assert result.data.media == []
        assert any("unreadable" in warning for warning in result.warnings)

    def test_invalid_slide_size_uses_default(self, reader) -> None:
        data = build_deck([slide_xml(rect_sp())], slide_size=(-9144000, 6858000))

        result = reader.read(data)

        assert result.success
        assert result.data.slide_size.width == pytest.approx(960)
        assert result.data.slide_size.height == pytest.approx(720)
        assert result.data.scale == pytest.approx(1.5)
        assert len(result.warnings) == 1
        assert "Invalid slide size" in result.warnings[0]


class TestProgressAndCancellation:
    """Tests for progress events and cooperative cancellation."""

    def test_progress_events(self, reader, simple_deck) -> None:
        events = []

        reader.read(simple_deck, on_progress=events.append)

        progress = [event.progress for event in events]
        assert events[0].stage == ParseStage.INITIALIZING
        assert events[0].progress == 0
        assert events[-1].stage == ParseStage.COMPLETED
        assert events[-1].progress == 100
        assert progress == sorted(progress)
        assert [e.current_slide for e in events if e.current_slide] == [1, 2]

    def test_error_event(self, reader) -> None:
        events = []

        reader.read(b"garbage", on_progress=events.append)

        assert [event.stage for event in events] == [ParseStage.INITIALIZING, ParseStage.ERROR]

    def test_failing_callback_does_not_abort(self, reader, simple_deck) -> None:
        def explode(event) -> None:
            raise RuntimeError("listener crashed")

        result = reader.read(simple_deck, on_progress=explode)

        assert result.success
        assert len(result.data.slides) == 2

    def test_cancel_before_start(self, reader, simple_deck) -> None:
        token = CancellationToken()
        token.cancel()

        result = reader.read(simple_deck, cancel_token=token)

        assert result.success
        assert result.cancelled
        assert result.data.slides == []
        assert result.data.masters == []
        assert any("cancelled" in warning for warning in result.warnings)

    def test_cancel_mid_decode(self, reader) -> None:
        data = build_deck([slide_xml(), slide_xml(), slide_xml()])
        token = CancellationToken()

        def on_progress(event) -> None:
            if event.current_slide == 1:
                token.cancel()

        result = reader.read(data, on_progress=on_progress, cancel_token=token)

        assert result.cancelled
        assert len(result.data.slides) == 1
        assert "returning 1 of 3 slides" in result.warnings[-1]


class TestEntryPoints:
    """Tests for the async and functional entry points."""

    def test_read_async(self, reader, simple_deck) -> None:
        result = asyncio.run(reader.read_async(simple_deck, file_name="deck.pptx"))

        assert result.success
        assert result.data.slide_count == 2

    def test_decode_pptx(self, settings, simple_deck) -> None:
        result = decode_pptx(simple_deck, settings, import_settings=CUSTOM_4_3)

        assert result.data.scale == pytest.approx(1.0)

    def test_python_pptx_deck(self, reader, pptx_deck) -> None:
        result = reader.read(pptx_deck, import_settings=CUSTOM_4_3)
        first, second = result.data.slides

        assert result.success
        assert [element.type for element in first.elements] == ["shape", "text", "line", "image"]

        shape, text, line, image = first.elements
        assert shape.shape_type == ShapeKind.ROUNDED_RECTANGLE
        assert shape.fill.color.hex == "#0D9488"
        assert shape.position.x == pytest.approx(96)
        run = text.text_body.paragraphs[0].runs[0]
        assert run.text == "Quarterly results"
        assert run.style.bold
        assert run.style.font_size == pytest.approx(28)
        assert not run.style.font_family.startswith("+")
        assert line.end.x - line.start.x == pytest.approx(288)
        assert image.source.mime_type == "image/png"

        texts = [e.text_body.text for e in second.elements if isinstance(e, TextElement)]
        assert "Agenda" in texts
        assert result.data.masters
        assert result.data.themes
