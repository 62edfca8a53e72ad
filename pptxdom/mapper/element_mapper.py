"""Map a slide's shape tree onto domain elements.

The mapper walks ``p:spTree`` in document order and dispatches every child
on its kind (shape, group, picture, connector, graphic frame). Positions and
sizes go through the group coordinate space, EMU to pixel conversion and the
canvas scale in one place. A failure while mapping one element is recorded
and that element is dropped; the rest of the slide is unaffected.
"""

import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from pptxdom.cache.image_cache import ImageCache
from pptxdom.dom.schema import (
    Crop,
    Element,
    GroupElement,
    ImageAdjustments,
    ImageElement,
    ImageSource,
    ImportSettings,
    LineElement,
    NoFill,
    PathCommandType,
    Point,
    ShapeElement,
    ShapeKind,
    Size,
    TextBody,
    TextElement,
)
from pptxdom.engine.units import (
    emu_to_pixels,
    percent_to_fraction,
    signed_percent_to_fraction,
)
from pptxdom.errors import PPTXDomError
from pptxdom.mapper.shape_types import (
    DEFAULT_ROUND_RECT_ADJ,
    LINE_PRESETS,
    shape_kind_for_preset,
)
from pptxdom.parser.media import mime_type_for
from pptxdom.parser.package import PPTXPackage
from pptxdom.parser.path_parser import PathParser
from pptxdom.parser.relationships import Relationships
from pptxdom.parser.style_extractor import StyleExtractor
from pptxdom.parser.text_parser import TextParser
from pptxdom.parser.transform_parser import CoordinateSpace, TransformParser, Xfrm
from pptxdom.parser.xml_tree import XmlNode


logger = logging.getLogger(__name__)

SHAPE_TAGS = frozenset({"sp", "grpSp", "pic", "cxnSp", "graphicFrame", "contentPart"})

# Data problems the mapper expects to meet in real decks
EXPECTED_ERRORS = (PPTXDomError, ValidationError, ValueError, KeyError, TypeError, AttributeError)

GRAPHIC_FRAME_KINDS = {
    "table": "table",
    "chart": "chart",
    "diagram": "SmartArt diagram",
    "ole": "OLE object",
}

LOCK_ATTRIBUTES = ("noMove", "noResize", "noGrp", "noSelect")


@dataclass
class MappingContext:
    """Per-part inputs the mapper needs besides the shape tree."""

    settings: ImportSettings = field(default_factory=ImportSettings)
    relationships: Optional[Relationships] = None
    package: Optional[PPTXPackage] = None
    image_cache: Optional[ImageCache] = None
    embed_image_data: bool = False
    label: str = "Slide"


@dataclass
class MappingResult:
    """Outcome of mapping one shape tree."""

    elements: list[Element] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class ElementMapper:
    """Translates shape tree nodes into ``Element`` variants.

    An instance accumulates warnings for one ``map`` call at a time; create
    one per slide when mapping slides concurrently.
    """

    def __init__(self):
        self.transform_parser = TransformParser()
        self.style_extractor = StyleExtractor()
        self.text_parser = TextParser()
        self.path_parser = PathParser()
        self._warnings: list[str] = []
        self._errors: list[str] = []
        self._where = ""

    def map(
        self,
        sp_tree: Optional[XmlNode],
        slide_index: int,
        slide_id: str,
        scale: float = 1.0,
        context: Optional[MappingContext] = None,
    ) -> MappingResult:
        """Map a shape tree.

        Args:
            sp_tree: The ``p:spTree`` element; None yields no elements.
            slide_index: 1-based number of the slide (or master).
            slide_id: Id prefix for the produced elements.
            scale: Canvas scale applied uniformly to positions and sizes.
            context: Relationships, package access, caches and import flags.

        Returns:
            MappingResult with elements in document order.
        """
        self._warnings = []
        self._errors = []
        context = context or MappingContext()
        self._where = f"{context.label} {slide_index}"

        elements: list[Element] = []
        if sp_tree is not None:
            elements = self._map_children(sp_tree, CoordinateSpace(), scale, context, slide_id)

        logger.debug(f"{self._where}: mapped {len(elements)} top-level elements")
        return MappingResult(elements=elements, warnings=self._warnings, errors=self._errors)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _map_children(
        self,
        container: XmlNode,
        space: CoordinateSpace,
        scale: float,
        context: MappingContext,
        parent_id: str,
    ) -> list[Element]:
        elements: list[Element] = []
        for child in container:
            for node in self._expand(child):
                try:
                    element = self._map_node(node, space, scale, context, parent_id)
                except EXPECTED_ERRORS as exc:
                    self._warn(f"{self._where}: skipped {self._describe(node)}: {exc}")
                    continue
                except Exception as exc:
                    message = f"{self._where}: failed to map {self._describe(node)}: {exc!r}"
                    logger.exception(message)
                    self._errors.append(message)
                    continue
                if element is not None:
                    elements.append(element)
        return elements

    def _expand(self, node: XmlNode) -> list[XmlNode]:
        """Unwrap ``mc:AlternateContent`` into the shape elements it offers.

        XML structure example:
            <mc:AlternateContent>
                <mc:Choice Requires="p14"><p:sp>...</p:sp></mc:Choice>
                <mc:Fallback><p:pic>...</p:pic></mc:Fallback>
            </mc:AlternateContent>
        """
        if node.tag in SHAPE_TAGS:
            return [node]
        if node.tag != "AlternateContent":
            return []

        for choice in node.all("Choice"):
            shapes = [child for child in choice if child.tag in SHAPE_TAGS]
            if shapes:
                return shapes
        fallback = node.first("Fallback")
        if fallback is None:
            return []
        return [child for child in fallback if child.tag in SHAPE_TAGS]

    def _map_node(
        self,
        node: XmlNode,
        space: CoordinateSpace,
        scale: float,
        context: MappingContext,
        parent_id: str,
    ) -> Optional[Element]:
        if node.tag == "sp":
            return self._map_shape(node, space, scale, context, parent_id)
        if node.tag == "grpSp":
            return self._map_group(node, space, scale, context, parent_id)
        if node.tag == "pic":
            return self._map_picture(node, space, scale, context, parent_id)
        if node.tag == "cxnSp":
            if not context.settings.import_shapes:
                return None
            return self._map_line(node, space, scale, parent_id)
        if node.tag == "graphicFrame":
            self._warn(
                f"{self._where}: {self._graphic_frame_kind(node)} {self._describe(node)} "
                f"is not supported and was skipped"
            )
            return None
        self._warn(f"{self._where}: {self._describe(node)} is not supported and was skipped")
        return None

    # ------------------------------------------------------------------
    # Common fields
    # ------------------------------------------------------------------

    def _non_visual(self, node: XmlNode) -> tuple[Optional[XmlNode], Optional[XmlNode]]:
        """The ``cNvPr`` element and the kind-specific ``cNv*Pr`` sibling."""
        for child in node:
            if child.tag.startswith("nv"):
                c_nv_pr = child.first("cNvPr")
                specific = next(
                    (c for c in child if c.tag.startswith("cNv") and c.tag != "cNvPr"),
                    None,
                )
                return c_nv_pr, specific
        return None, None

    def _describe(self, node: XmlNode) -> str:
        c_nv_pr, _ = self._non_visual(node)
        if c_nv_pr is None:
            return f"<{node.tag}>"
        return f"<{node.tag}> '{c_nv_pr.attr('name', '')}' (id {c_nv_pr.attr('id', '?')})"

    def _base_fields(
        self,
        node: XmlNode,
        xfrm: Xfrm,
        space: CoordinateSpace,
        scale: float,
        parent_id: str,
    ) -> dict[str, Any]:
        c_nv_pr, specific = self._non_visual(node)
        shape_id = c_nv_pr.attr("id") if c_nv_pr is not None else None
        if not shape_id:
            shape_id = f"{node.tag}{node.line or 0}"

        locked = False
        if specific is not None:
            for locks in specific:
                if locks.tag.endswith("Locks") and any(
                    locks.bool_attr(name) for name in LOCK_ATTRIBUTES
                ):
                    locked = True

        x, y = space.map_point(xfrm.x, xfrm.y)
        cx, cy = space.map_size(xfrm.cx, xfrm.cy)
        return {
            "id": f"{parent_id}/{shape_id}",
            "name": c_nv_pr.attr("name", "") if c_nv_pr is not None else "",
            "position": Point(x=emu_to_pixels(x) * scale, y=emu_to_pixels(y) * scale),
            "size": Size(width=emu_to_pixels(cx) * scale, height=emu_to_pixels(cy) * scale),
            "rotation": xfrm.rotation,
            "flip_h": xfrm.flip_h,
            "flip_v": xfrm.flip_v,
            "visible": not (c_nv_pr is not None and c_nv_pr.bool_attr("hidden")),
            "locked": locked,
        }

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def _map_shape(
        self,
        sp: XmlNode,
        space: CoordinateSpace,
        scale: float,
        context: MappingContext,
        parent_id: str,
    ) -> Optional[Element]:
        """Map ``p:sp`` to a text box, a shape or a line.

        XML structure example:
            <p:sp>
                <p:nvSpPr><p:cNvPr id="2" name="Rectangle 1"/><p:cNvSpPr/><p:nvPr/></p:nvSpPr>
                <p:spPr>
                    <a:xfrm><a:off x="914400" y="914400"/><a:ext cx="1828800" cy="1828800"/></a:xfrm>
                    <a:prstGeom prst="rect"><a:avLst/></a:prstGeom>
                    <a:solidFill><a:srgbClr val="FF0000"/></a:solidFill>
                </p:spPr>
                <p:txBody>...</p:txBody>
            </p:sp>
        """
        settings = context.settings
        sp_pr = sp.first("spPr")
        style = sp.first("style")
        prst_geom = sp_pr.first("prstGeom") if sp_pr is not None else None
        cust_geom = sp_pr.first("custGeom") if sp_pr is not None else None
        preset = prst_geom.attr("prst") if prst_geom is not None else None

        if preset in LINE_PRESETS:
            if not settings.import_shapes:
                return None
            return self._map_line(sp, space, scale, parent_id)

        xfrm = self.transform_parser.extract_transform(sp)
        fields = self._base_fields(sp, xfrm, space, scale, parent_id)

        text_body: Optional[TextBody] = None
        if settings.import_text:
            text_body = self.text_parser.parse_text_body(
                sp.first("txBody"), scale, context.relationships
            )
        has_text = text_body is not None and text_body.has_text

        fill = self.style_extractor.extract_fill(sp_pr, style, context.relationships)
        stroke = self.style_extractor.extract_stroke(sp_pr, style, scale)

        _, specific = self._non_visual(sp)
        is_text_box = specific is not None and specific.bool_attr("txBox")
        plain_frame = (
            isinstance(fill, NoFill)
            and not stroke.visible
            and cust_geom is None
            and preset in (None, "rect")
        )

        if is_text_box:
            # Text boxes stay text even when empty; without text import they vanish
            if text_body is None:
                return None
            return TextElement(text_body=text_body, **fields)
        if has_text and (plain_frame or not settings.import_shapes):
            return TextElement(text_body=text_body, **fields)
        if not settings.import_shapes:
            return None

        shape_type = shape_kind_for_preset(preset)
        path = []
        points = []
        if cust_geom is not None:
            path = self.path_parser.extract_path_commands(
                cust_geom, fields["size"].width, fields["size"].height, xfrm.cx, xfrm.cy
            )
            points = self.path_parser.extract_points(path)
            straight = all(
                cmd.type in (PathCommandType.MOVE_TO, PathCommandType.LINE_TO, PathCommandType.CLOSE)
                for cmd in path
            )
            shape_type = ShapeKind.POLYGON if path and straight else ShapeKind.FREEFORM

        adjustments = self._extract_adjustments(prst_geom)
        corner_radius = None
        if preset == "roundRect":
            adj = adjustments.get("adj", DEFAULT_ROUND_RECT_ADJ)
            shorter = min(fields["size"].width, fields["size"].height)
            corner_radius = shorter * adj / 100000

        return ShapeElement(
            shape_type=shape_type,
            preset=preset,
            adjustments=adjustments,
            fill=fill,
            stroke=stroke,
            effects=self.style_extractor.extract_effects(sp_pr, scale),
            corner_radius=corner_radius,
            path=path,
            points=points,
            text_body=text_body if has_text else None,
            **fields,
        )

    def _extract_adjustments(self, prst_geom: Optional[XmlNode]) -> dict[str, float]:
        """Read ``<a:avLst><a:gd name="adj" fmla="val 25000"/></a:avLst>``."""
        adjustments: dict[str, float] = {}
        av_lst = prst_geom.first("avLst") if prst_geom is not None else None
        if av_lst is None:
            return adjustments
        for gd in av_lst.all("gd"):
            name = gd.attr("name")
            formula = (gd.attr("fmla") or "").split()
            if name and len(formula) == 2 and formula[0] == "val":
                try:
                    adjustments[name] = float(formula[1])
                except ValueError:
                    continue
        return adjustments

    def _map_line(
        self,
        node: XmlNode,
        space: CoordinateSpace,
        scale: float,
        parent_id: str,
    ) -> LineElement:
        """Map a connector or line preset; flips choose which corners are the ends."""
        xfrm = self.transform_parser.extract_transform(node)
        fields = self._base_fields(node, xfrm, space, scale, parent_id)
        sp_pr = node.first("spPr")
        stroke = self.style_extractor.extract_stroke(sp_pr, node.first("style"), scale)

        left = fields["position"].x
        top = fields["position"].y
        right = left + fields["size"].width
        bottom = top + fields["size"].height
        start_x, end_x = (right, left) if xfrm.flip_h else (left, right)
        start_y, end_y = (bottom, top) if xfrm.flip_v else (top, bottom)

        return LineElement(
            start=Point(x=start_x, y=start_y),
            end=Point(x=end_x, y=end_y),
            stroke=stroke,
            head=stroke.head,
            tail=stroke.tail,
            **fields,
        )

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def _map_group(
        self,
        grp_sp: XmlNode,
        space: CoordinateSpace,
        scale: float,
        context: MappingContext,
        parent_id: str,
    ) -> Optional[GroupElement]:
        """Map ``p:grpSp``; children are placed through the group's child space."""
        xfrm = self.transform_parser.extract_transform(grp_sp)
        fields = self._base_fields(grp_sp, xfrm, space, scale, parent_id)
        children = self._map_children(
            grp_sp, space.nested(xfrm), scale, context, fields["id"]
        )
        if not children:
            return None
        return GroupElement(children=children, **fields)

    # ------------------------------------------------------------------
    # Pictures
    # ------------------------------------------------------------------

    def _map_picture(
        self,
        pic: XmlNode,
        space: CoordinateSpace,
        scale: float,
        context: MappingContext,
        parent_id: str,
    ) -> Optional[ImageElement]:
        """Map ``p:pic``.

        XML structure example:
            <p:pic>
                <p:nvPicPr><p:cNvPr id="4" name="Picture 3" descr="Logo"/>...</p:nvPicPr>
                <p:blipFill>
                    <a:blip r:embed="rId2">
                        <a:alphaModFix amt="50000"/>
                        <a:lum bright="20000" contrast="-10000"/>
                    </a:blip>
                    <a:srcRect l="10000" t="0" r="10000" b="0"/>
                    <a:stretch><a:fillRect/></a:stretch>
                </p:blipFill>
                <p:spPr>...</p:spPr>
            </p:pic>
        """
        if not context.settings.import_images:
            return None

        blip_fill = pic.first("blipFill")
        blip = blip_fill.first("blip") if blip_fill is not None else None
        rel_id = (blip.attr("r:embed") or blip.attr("r:link")) if blip is not None else None
        if not rel_id:
            raise ValueError("picture has no image reference")

        xfrm = self.transform_parser.extract_transform(pic)
        fields = self._base_fields(pic, xfrm, space, scale, parent_id)
        c_nv_pr, _ = self._non_visual(pic)

        opacity = 1.0
        alpha_mod = blip.first("alphaModFix")
        if alpha_mod is not None:
            opacity = percent_to_fraction(alpha_mod.float_attr("amt", 100000.0))

        return ImageElement(
            source=self._image_source(rel_id, context),
            crop=self._extract_crop(blip_fill.first("srcRect")),
            adjustments=self._extract_adjustments_from_blip(blip),
            description=c_nv_pr.attr("descr") if c_nv_pr is not None else None,
            opacity=opacity,
            **fields,
        )

    def _image_source(self, rel_id: str, context: MappingContext) -> ImageSource:
        relationships = context.relationships
        part_name = relationships.target_part(rel_id) if relationships is not None else None
        if part_name is None or context.package is None or not context.package.has(part_name):
            if part_name is not None:
                self._warn(f"{self._where}: image part {part_name} is missing from the package")
            return ImageSource(relationship_id=rel_id, part_name=part_name)

        try:
            data = context.package.read(part_name)
        except PPTXDomError as exc:
            self._warn(f"{self._where}: image part {part_name} is unreadable: {exc}")
            return ImageSource(relationship_id=rel_id, part_name=part_name)
        digest = None
        canonical = part_name
        if context.image_cache is not None:
            digest, canonical = context.image_cache.register(part_name, data)
        else:
            digest = ImageCache.digest(data)

        mime_type = mime_type_for(part_name)
        data_uri = None
        if context.embed_image_data:
            data_uri = f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"

        return ImageSource(
            relationship_id=rel_id,
            part_name=canonical,
            content_hash=digest,
            mime_type=mime_type,
            data_uri=data_uri,
        )

    def _extract_crop(self, src_rect: Optional[XmlNode]) -> Optional[Crop]:
        if src_rect is None:
            return None
        crop = Crop(
            left=signed_percent_to_fraction(src_rect.float_attr("l", 0.0)),
            top=signed_percent_to_fraction(src_rect.float_attr("t", 0.0)),
            right=signed_percent_to_fraction(src_rect.float_attr("r", 0.0)),
            bottom=signed_percent_to_fraction(src_rect.float_attr("b", 0.0)),
        )
        if crop == Crop():
            return None
        return crop

    def _extract_adjustments_from_blip(self, blip: XmlNode) -> Optional[ImageAdjustments]:
        brightness = contrast = saturation = None
        lum = blip.first("lum")
        if lum is not None:
            if lum.attr("bright") is not None:
                brightness = max(-1.0, min(1.0, signed_percent_to_fraction(lum.float_attr("bright", 0.0))))
            if lum.attr("contrast") is not None:
                contrast = max(-1.0, min(1.0, signed_percent_to_fraction(lum.float_attr("contrast", 0.0))))
        if blip.first("grayscl") is not None:
            saturation = -1.0
        if brightness is None and contrast is None and saturation is None:
            return None
        return ImageAdjustments(brightness=brightness, contrast=contrast, saturation=saturation)

    # ------------------------------------------------------------------
    # Unsupported content
    # ------------------------------------------------------------------

    def _graphic_frame_kind(self, frame: XmlNode) -> str:
        graphic_data = frame.find("graphic", "graphicData")
        uri = graphic_data.attr("uri", "") if graphic_data is not None else ""
        suffix = uri.rstrip("/").rsplit("/", 1)[-1]
        return GRAPHIC_FRAME_KINDS.get(suffix, "graphic frame")

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self._warnings.append(message)
