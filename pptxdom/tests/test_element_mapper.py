"""Tests for mapping shape trees onto elements."""

import hashlib

import pytest

from factories import PNG_BYTES, build_package, pic_element, rect_sp, rels_xml, sp_tree
from pptxdom.cache import ImageCache
from pptxdom.dom.schema import (
    GroupElement,
    ImageElement,
    ImportSettings,
    LineElement,
    ShapeElement,
    ShapeKind,
    TextElement,
)
from pptxdom.mapper import ElementMapper, MappingContext
from pptxdom.parser.package import PPTXPackage
from pptxdom.parser.relationships import parse_relationships

SLIDE_PART = "ppt/slides/slide1.xml"

CONNECTOR = (
    '<p:cxnSp><p:nvCxnSpPr><p:cNvPr id="6" name="Straight Connector 5"/><p:cNvCxnSpPr/><p:nvPr/></p:nvCxnSpPr>'
    '<p:spPr><a:xfrm flipH="1"><a:off x="0" y="0"/><a:ext cx="914400" cy="457200"/></a:xfrm>'
    '<a:prstGeom prst="line"><a:avLst/></a:prstGeom>'
    '<a:ln w="12700"><a:solidFill><a:srgbClr val="000000"/></a:solidFill><a:tailEnd type="triangle"/></a:ln>'
    "</p:spPr></p:cxnSp>"
)

TABLE_FRAME = (
    '<p:graphicFrame><p:nvGraphicFramePr><p:cNvPr id="5" name="Table 1"/><p:cNvGraphicFramePr/><p:nvPr/>'
    '</p:nvGraphicFramePr><p:xfrm><a:off x="0" y="0"/><a:ext cx="914400" cy="914400"/></p:xfrm>'
    '<a:graphic><a:graphicData uri="http://schemas.openxmlformats.org/drawingml/2006/table"><a:tbl/>'
    "</a:graphicData></a:graphic></p:graphicFrame>"
)


def freeform(path: str) -> str:
    return (
        '<p:sp><p:nvSpPr><p:cNvPr id="7" name="Freeform 6"/><p:cNvSpPr/><p:nvPr/></p:nvSpPr>'
        '<p:spPr><a:xfrm><a:off x="0" y="0"/><a:ext cx="914400" cy="914400"/></a:xfrm>'
        f'<a:custGeom><a:pathLst><a:path w="100" h="100">{path}</a:path></a:pathLst></a:custGeom>'
        '<a:solidFill><a:srgbClr val="00FF00"/></a:solidFill></p:spPr></p:sp>'
    )


def group(*children: str, shape_id: int = 10) -> str:
    return (
        f'<p:grpSp><p:nvGrpSpPr><p:cNvPr id="{shape_id}" name="Group {shape_id}"/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
        '<p:grpSpPr><a:xfrm><a:off x="914400" y="0"/><a:ext cx="1828800" cy="914400"/>'
        '<a:chOff x="0" y="0"/><a:chExt cx="914400" cy="914400"/></a:xfrm></p:grpSpPr>'
        + "".join(children)
        + "</p:grpSp>"
    )


@pytest.fixture
def mapper() -> ElementMapper:
    return ElementMapper()


@pytest.fixture
def map_shapes(mapper, parse_fragment):
    """Map a shape tree built from shape XML strings."""

    def _map(*shapes: str, scale: float = 1.0, context: MappingContext = None):
        return mapper.map(parse_fragment(sp_tree(*shapes)), 1, "slide-256", scale, context)

    return _map


@pytest.fixture
def image_context() -> MappingContext:
    """Context whose package holds one PNG under two part names."""
    package = PPTXPackage.from_bytes(
        build_package({"ppt/media/image1.png": PNG_BYTES, "ppt/media/image2.png": PNG_BYTES})
    )
    relationships = parse_relationships(
        SLIDE_PART,
        rels_xml(
            ("rId2", "image", "../media/image1.png"),
            ("rId3", "image", "../media/image2.png"),
            ("rId4", "image", "../media/image9.png"),
        ).encode("utf-8"),
    )
    return MappingContext(relationships=relationships, package=package, image_cache=ImageCache())


class TestShapes:
    """Tests for ``p:sp`` mapping."""

    def test_rectangle_geometry(self, map_shapes) -> None:
        """A rectangle at one inch offset lands at 96px."""
        result = map_shapes(rect_sp())
        (shape,) = result.elements

        assert isinstance(shape, ShapeElement)
        assert shape.id == "slide-256/2"
        assert shape.name == "Rectangle 1"
        assert shape.shape_type == ShapeKind.RECTANGLE
        assert (shape.position.x, shape.position.y) == pytest.approx((96.0, 96.0))
        assert (shape.size.width, shape.size.height) == pytest.approx((192.0, 192.0))
        assert shape.fill.color.hex == "#FF0000"
        assert result.warnings == []

    def test_scale_applies_to_position_and_size(self, map_shapes) -> None:
        (shape,) = map_shapes(rect_sp(), scale=0.5).elements

        assert shape.position.x == pytest.approx(48.0)
        assert shape.size.width == pytest.approx(96.0)

    def test_rotation_hidden_and_locked(self, map_shapes) -> None:
        xml = (
            rect_sp()
            .replace("<a:xfrm>", '<a:xfrm rot="5400000">')
            .replace('name="Rectangle 1"', 'name="Rectangle 1" hidden="1"')
            .replace("<p:cNvSpPr/>", '<p:cNvSpPr><a:spLocks noMove="1"/></p:cNvSpPr>')
        )
        (shape,) = map_shapes(xml).elements

        assert shape.rotation == pytest.approx(90.0)
        assert not shape.visible
        assert shape.locked

    def test_text_box(self, map_shapes) -> None:
        (element,) = map_shapes(rect_sp(3, "TextBox 2", fill="", text="Hello", tx_box=True)).elements

        assert isinstance(element, TextElement)
        assert element.text_body.text == "Hello"
        assert element.text_body.paragraphs[0].runs[0].style.font_size == pytest.approx(24.0)

    def test_unfilled_rectangle_with_text_is_text(self, map_shapes) -> None:
        (element,) = map_shapes(rect_sp(fill="", text="Placeholder")).elements
        assert isinstance(element, TextElement)

    def test_filled_shape_keeps_text(self, map_shapes) -> None:
        (element,) = map_shapes(rect_sp(preset="ellipse", text="Label")).elements

        assert isinstance(element, ShapeElement)
        assert element.shape_type == ShapeKind.ELLIPSE
        assert element.text_body.text == "Label"

    def test_rounded_rectangle_radius(self, map_shapes) -> None:
        xml = rect_sp(preset="roundRect", cy=914400).replace(
            "<a:avLst/>", '<a:avLst><a:gd name="adj" fmla="val 50000"/></a:avLst>'
        )
        (shape,) = map_shapes(xml).elements

        assert shape.shape_type == ShapeKind.ROUNDED_RECTANGLE
        assert shape.adjustments == {"adj": 50000.0}
        assert shape.corner_radius == pytest.approx(48.0)

    def test_rounded_rectangle_default_radius(self, map_shapes) -> None:
        (shape,) = map_shapes(rect_sp(preset="roundRect", cy=914400)).elements
        assert shape.corner_radius == pytest.approx(96.0 * 16667 / 100000)

    def test_straight_custom_geometry_is_polygon(self, map_shapes) -> None:
        (shape,) = map_shapes(
            freeform(
                '<a:moveTo><a:pt x="0" y="0"/></a:moveTo><a:lnTo><a:pt x="100" y="0"/></a:lnTo>'
                '<a:lnTo><a:pt x="50" y="100"/></a:lnTo><a:close/>'
            )
        ).elements

        assert shape.shape_type == ShapeKind.POLYGON
        assert [coord for p in shape.points for coord in (p.x, p.y)] == pytest.approx([0, 0, 96, 0, 48, 96])

    def test_curved_custom_geometry_is_freeform(self, map_shapes) -> None:
        (shape,) = map_shapes(
            freeform(
                '<a:moveTo><a:pt x="0" y="0"/></a:moveTo>'
                '<a:cubicBezTo><a:pt x="10" y="10"/><a:pt x="20" y="20"/><a:pt x="100" y="100"/></a:cubicBezTo>'
            )
        ).elements

        assert shape.shape_type == ShapeKind.FREEFORM
        assert len(shape.path) == 2


class TestLines:
    """Tests for connectors and line presets."""

    def test_connector_with_flip(self, map_shapes) -> None:
        (line,) = map_shapes(CONNECTOR).elements

        assert isinstance(line, LineElement)
        assert (line.start.x, line.start.y) == pytest.approx((96.0, 0.0))
        assert (line.end.x, line.end.y) == pytest.approx((0.0, 48.0))
        assert line.tail.type == "triangle"
        assert line.head is None

    def test_line_preset_on_shape(self, map_shapes) -> None:
        (line,) = map_shapes(rect_sp(preset="line")).elements
        assert isinstance(line, LineElement)


class TestGroups:
    """Tests for group mapping."""

    def test_children_mapped_through_child_space(self, map_shapes) -> None:
        (grp,) = map_shapes(group(rect_sp(x=457200, y=0, cx=457200, cy=457200))).elements
        (child,) = grp.children

        assert isinstance(grp, GroupElement)
        assert (grp.position.x, grp.size.width) == pytest.approx((96.0, 192.0))
        assert child.id == "slide-256/10/2"
        assert (child.position.x, child.position.y) == pytest.approx((192.0, 0.0))
        assert (child.size.width, child.size.height) == pytest.approx((96.0, 48.0))

    def test_nested_groups(self, map_shapes) -> None:
        (outer,) = map_shapes(group(group(rect_sp(), shape_id=11))).elements
        (inner,) = outer.children

        assert inner.children[0].id == "slide-256/10/11/2"

    def test_empty_group_omitted(self, map_shapes) -> None:
        result = map_shapes(group())

        assert result.elements == []
        assert result.warnings == []


class TestPictures:
    """Tests for picture mapping."""

    def test_picture_properties(self, map_shapes, image_context) -> None:
        xml = pic_element(
            blip_extra='<a:alphaModFix amt="50000"/><a:lum bright="20000" contrast="-10000"/>'
        ).replace("<a:stretch>", '<a:srcRect l="10000" r="10000"/><a:stretch>')

        (image,) = map_shapes(xml, context=image_context).elements

        assert isinstance(image, ImageElement)
        assert image.description == "Logo"
        assert image.opacity == pytest.approx(0.5)
        assert image.crop.left == pytest.approx(0.1)
        assert image.crop.right == pytest.approx(0.1)
        assert image.adjustments.brightness == pytest.approx(0.2)
        assert image.adjustments.contrast == pytest.approx(-0.1)
        assert image.source.part_name == "ppt/media/image1.png"
        assert image.source.mime_type == "image/png"
        assert image.source.content_hash == hashlib.sha256(PNG_BYTES).hexdigest()
        assert image.source.data_uri is None

    def test_grayscale_and_no_crop(self, map_shapes, image_context) -> None:
        xml = pic_element(blip_extra="<a:grayscl/>").replace(
            "<a:stretch>", '<a:srcRect l="0" t="0" r="0" b="0"/><a:stretch>'
        )
        (image,) = map_shapes(xml, context=image_context).elements

        assert image.crop is None
        assert image.adjustments.saturation == -1.0

    def test_duplicate_images_share_canonical_part(self, map_shapes, image_context) -> None:
        result = map_shapes(
            pic_element(4, "rId2"),
            pic_element(5, "rId3"),
            context=image_context,
        )

        assert [image.source.part_name for image in result.elements] == [
            "ppt/media/image1.png",
            "ppt/media/image1.png",
        ]

    def test_embedded_data_uri(self, map_shapes, image_context) -> None:
        image_context.embed_image_data = True
        (image,) = map_shapes(pic_element(), context=image_context).elements

        assert image.source.data_uri.startswith("data:image/png;base64,")

    def test_missing_image_part(self, map_shapes, image_context) -> None:
        result = map_shapes(pic_element(rel_id="rId4"), context=image_context)
        (image,) = result.elements

        assert image.source.part_name == "ppt/media/image9.png"
        assert image.source.content_hash is None
        assert any("missing" in warning for warning in result.warnings)

    def test_picture_without_reference_is_skipped(self, map_shapes, image_context) -> None:
        """A broken picture is dropped with a warning; siblings survive."""
        broken = pic_element().replace(' r:embed="rId2"', "")
        result = map_shapes(rect_sp(), broken, context=image_context)

        assert len(result.elements) == 1
        assert len(result.warnings) == 1
        assert "Picture 3" in result.warnings[0]
        assert result.warnings[0].startswith("Slide 1:")


class TestUnsupportedContent:
    """Tests for graphic frames and markup compatibility."""

    def test_table_frame_warns(self, map_shapes) -> None:
        result = map_shapes(TABLE_FRAME, rect_sp())

        assert len(result.elements) == 1
        assert len(result.warnings) == 1
        assert "table" in result.warnings[0]
        assert "Table 1" in result.warnings[0]

    def test_alternate_content_prefers_choice(self, map_shapes) -> None:
        xml = (
            '<mc:AlternateContent><mc:Choice Requires="p14">'
            f"{rect_sp(8, 'Choice')}</mc:Choice>"
            f"<mc:Fallback>{rect_sp(9, 'Fallback')}</mc:Fallback></mc:AlternateContent>"
        )
        (element,) = map_shapes(xml).elements
        assert element.name == "Choice"

    def test_alternate_content_falls_back(self, map_shapes) -> None:
        xml = (
            '<mc:AlternateContent><mc:Choice Requires="p14"/>'
            f"<mc:Fallback>{rect_sp(9, 'Fallback')}</mc:Fallback></mc:AlternateContent>"
        )
        (element,) = map_shapes(xml).elements
        assert element.name == "Fallback"

    def test_unexpected_failure_is_an_error(self, mapper, map_shapes, monkeypatch) -> None:
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(mapper, "_map_shape", boom)
        result = map_shapes(rect_sp(), pic_element())

        assert [type(e) for e in result.elements] == [ImageElement]
        assert len(result.errors) == 1
        assert "boom" in result.errors[0]

    def test_no_tree(self, mapper) -> None:
        assert mapper.map(None, 1, "slide-1").elements == []


class TestImportFlags:
    """Tests for element kind gating."""

    def test_images_disabled(self, map_shapes, image_context) -> None:
        image_context.settings = ImportSettings(import_images=False)
        result = map_shapes(pic_element(), rect_sp(), context=image_context)

        assert [type(e) for e in result.elements] == [ShapeElement]
        assert result.warnings == []

    def test_shapes_disabled(self, map_shapes) -> None:
        context = MappingContext(settings=ImportSettings(import_shapes=False))
        result = map_shapes(
            rect_sp(),
            rect_sp(3, "Labelled", text="Label"),
            CONNECTOR,
            context=context,
        )

        (element,) = result.elements
        assert isinstance(element, TextElement)
        assert element.name == "Labelled"

    def test_text_disabled(self, map_shapes) -> None:
        context = MappingContext(settings=ImportSettings(import_text=False))
        result = map_shapes(
            rect_sp(3, "TextBox 2", fill="", text="Hello", tx_box=True),
            rect_sp(4, "Labelled", text="Label"),
            context=context,
        )

        (element,) = result.elements
        assert isinstance(element, ShapeElement)
        assert element.text_body is None
