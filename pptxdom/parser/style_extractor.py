"""Extract visual styles from shape XML.

Includes fill, stroke, and effects (shadow, glow, reflection, soft edges),
plus slide backgrounds. Colors are resolved against the default palette here;
scheme colors are re-resolved against the real theme by the theme applier.
"""

from typing import Optional

from pptxdom.dom.schema import (
    Arrowhead,
    BackgroundSource,
    ColorInfo,
    Effects,
    Fill,
    Glow,
    GradientFill,
    GradientStop,
    GradientType,
    ImageFill,
    NoFill,
    Reflection,
    Shadow,
    SlideBackground,
    SolidFill,
    Stroke,
    StrokeType,
)
from pptxdom.engine.colors import DEFAULT_COLOR, parse_color
from pptxdom.engine.units import (
    angle_to_degrees,
    emu_to_pixels,
    percent_to_fraction,
)
from pptxdom.parser.relationships import Relationships
from pptxdom.parser.xml_tree import XmlNode

# Fill elements, any of which may appear in spPr/bgPr
FILL_TAGS = ("noFill", "solidFill", "gradFill", "blipFill", "pattFill", "grpFill")

# PowerPoint's default hairline when a line only comes from the shape style
DEFAULT_STYLE_LINE_WIDTH_EMU = 9525


class StyleExtractor:
    """Extracts visual styles from DrawingML property elements."""

    # Map OOXML dash presets onto our three stroke kinds
    DASH_STYLE_MAP = {
        "solid": StrokeType.SOLID,
        "dash": StrokeType.DASHED,
        "lgDash": StrokeType.DASHED,
        "sysDash": StrokeType.DASHED,
        "dashDot": StrokeType.DASHED,
        "lgDashDot": StrokeType.DASHED,
        "lgDashDotDot": StrokeType.DASHED,
        "sysDashDot": StrokeType.DASHED,
        "sysDashDotDot": StrokeType.DASHED,
        "dot": StrokeType.DOTTED,
        "sysDot": StrokeType.DOTTED,
    }

    CAP_MAP = {"rnd": "round", "sq": "square", "flat": "butt"}

    GRADIENT_PATH_MAP = {
        "circle": GradientType.RADIAL,
        "rect": GradientType.RECTANGULAR,
        "shape": GradientType.PATH,
    }

    # ------------------------------------------------------------------
    # Fill
    # ------------------------------------------------------------------

    def extract_fill(
        self,
        properties: Optional[XmlNode],
        style: Optional[XmlNode] = None,
        relationships: Optional[Relationships] = None,
    ) -> Fill:
        """Extract the fill of a shape.

        Args:
            properties: ``p:spPr`` (or ``p:bgPr``) element.
            style: Optional ``p:style`` element; its ``a:fillRef`` color is
                used when the properties declare no fill.
            relationships: Part relationships used to resolve picture fills.

        Returns:
            Fill object (NoFill, SolidFill, GradientFill or ImageFill).

        XML structure example:
            <p:spPr>
                <a:solidFill><a:srgbClr val="4472C4"/></a:solidFill>
            </p:spPr>
        """
        fill_elem = properties.first_of(*FILL_TAGS) if properties is not None else None

        if fill_elem is None:
            return self._extract_style_fill(style)

        if fill_elem.tag == "solidFill":
            return SolidFill(color=parse_color(fill_elem) or DEFAULT_COLOR)
        if fill_elem.tag == "gradFill":
            return self._extract_gradient_fill(fill_elem)
        if fill_elem.tag == "blipFill":
            return self._extract_image_fill(fill_elem, relationships)
        if fill_elem.tag == "pattFill":
            # Patterns collapse to their foreground color
            color = parse_color(fill_elem.first("fgClr"))
            return SolidFill(color=color) if color is not None else NoFill()

        return NoFill()

    def _extract_style_fill(self, style: Optional[XmlNode]) -> Fill:
        """Fill implied by ``<a:fillRef idx="1"><a:schemeClr val="accent1"/></a:fillRef>``."""
        if style is None:
            return NoFill()
        fill_ref = style.first("fillRef")
        if fill_ref is None or fill_ref.int_attr("idx", 0) == 0:
            return NoFill()
        color = parse_color(fill_ref)
        return SolidFill(color=color) if color is not None else NoFill()

    def _extract_gradient_fill(self, grad_fill: XmlNode) -> GradientFill:
        """Extract a gradient.

        XML structure:
            <a:gradFill rotWithShape="1">
                <a:gsLst>
                    <a:gs pos="0"><a:schemeClr val="accent1"/></a:gs>
                    <a:gs pos="100000"><a:srgbClr val="FFFFFF"/></a:gs>
                </a:gsLst>
                <a:lin ang="5400000" scaled="0"/>
            </a:gradFill>
        """
        stops: list[GradientStop] = []
        gs_lst = grad_fill.first("gsLst")
        if gs_lst is not None:
            for gs in gs_lst.all("gs"):
                stops.append(
                    GradientStop(
                        position=percent_to_fraction(gs.float_attr("pos", 0.0)),
                        color=parse_color(gs) or DEFAULT_COLOR,
                    )
                )
        stops.sort(key=lambda stop: stop.position)

        gradient_type = GradientType.LINEAR
        angle = 0.0
        lin = grad_fill.first("lin")
        path = grad_fill.first("path")
        if lin is not None:
            angle = angle_to_degrees(lin.float_attr("ang", 0.0))
        elif path is not None:
            gradient_type = self.GRADIENT_PATH_MAP.get(path.attr("path", ""), GradientType.PATH)

        return GradientFill(gradient_type=gradient_type, angle=angle, stops=stops)

    def _extract_image_fill(
        self,
        blip_fill: XmlNode,
        relationships: Optional[Relationships],
    ) -> ImageFill:
        blip = blip_fill.first("blip")
        rel_id = blip.attr("r:embed") if blip is not None else None
        return ImageFill(
            relationship_id=rel_id,
            part_name=relationships.target_part(rel_id) if relationships else None,
        )

    # ------------------------------------------------------------------
    # Stroke
    # ------------------------------------------------------------------

    def extract_stroke(
        self,
        properties: Optional[XmlNode],
        style: Optional[XmlNode] = None,
        scale: float = 1.0,
    ) -> Stroke:
        """Extract the outline of a shape.

        Args:
            properties: ``p:spPr`` element holding ``a:ln``.
            style: Optional ``p:style`` element; its ``a:lnRef`` supplies the
                color when the line declares none.
            scale: Canvas scale applied to the width.

        Returns:
            Stroke; ``StrokeType.NONE`` when the shape has no visible outline.

        XML structure example:
            <a:ln w="12700" cap="rnd">
                <a:solidFill><a:srgbClr val="000000"/></a:solidFill>
                <a:prstDash val="dash"/>
                <a:round/>
                <a:tailEnd type="triangle" w="med" len="med"/>
            </a:ln>
        """
        ln = properties.first("ln") if properties is not None else None
        style_color = self._style_line_color(style)

        if ln is None:
            if style_color is None:
                return Stroke()
            return Stroke(
                type=StrokeType.SOLID,
                color=style_color,
                width=emu_to_pixels(DEFAULT_STYLE_LINE_WIDTH_EMU) * scale,
            )

        if ln.first("noFill") is not None:
            return Stroke(type=StrokeType.NONE)

        color = parse_color(ln.first("solidFill")) or style_color
        if color is None and ln.first("gradFill") is not None:
            gradient = self._extract_gradient_fill(ln.first("gradFill"))
            color = gradient.stops[0].color if gradient.stops else None
        if color is None:
            color = DEFAULT_COLOR

        width_emu = ln.int_attr("w", DEFAULT_STYLE_LINE_WIDTH_EMU) or 0
        dash = ln.first("prstDash")
        stroke_type = StrokeType.SOLID
        if dash is not None:
            stroke_type = self.DASH_STYLE_MAP.get(dash.attr("val", "solid"), StrokeType.SOLID)
        elif ln.first("custDash") is not None:
            stroke_type = StrokeType.DASHED

        join = "round"
        if ln.first("bevel") is not None:
            join = "bevel"
        elif ln.first("miter") is not None:
            join = "miter"

        return Stroke(
            type=stroke_type,
            color=color,
            width=emu_to_pixels(width_emu) * scale,
            cap=self.CAP_MAP.get(ln.attr("cap", "flat"), "butt"),
            join=join,
            head=self._arrowhead(ln.first("headEnd")),
            tail=self._arrowhead(ln.first("tailEnd")),
        )

    def _style_line_color(self, style: Optional[XmlNode]) -> Optional[ColorInfo]:
        if style is None:
            return None
        ln_ref = style.first("lnRef")
        if ln_ref is None or ln_ref.int_attr("idx", 0) == 0:
            return None
        return parse_color(ln_ref)

    def _arrowhead(self, end: Optional[XmlNode]) -> Optional[Arrowhead]:
        """Line end decoration; ``type="none"`` means no arrowhead."""
        if end is None:
            return None
        end_type = end.attr("type", "none")
        if end_type == "none":
            return None
        return Arrowhead(type=end_type, width=end.attr("w", "med"), length=end.attr("len", "med"))

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def extract_effects(self, properties: Optional[XmlNode], scale: float = 1.0) -> Effects:
        """Extract effects from ``a:effectLst``."""
        effect_lst = properties.first("effectLst") if properties is not None else None
        if effect_lst is None:
            return Effects()

        soft_edge = effect_lst.first("softEdge")
        return Effects(
            shadow=self._extract_shadow(effect_lst, scale),
            glow=self._extract_glow(effect_lst, scale),
            reflection=self._extract_reflection(effect_lst, scale),
            soft_edge_radius=(
                emu_to_pixels(soft_edge.int_attr("rad", 0)) * scale
                if soft_edge is not None
                else None
            ),
        )

    def _extract_shadow(self, effect_lst: XmlNode, scale: float) -> Optional[Shadow]:
        """Extract shadow effect from effect list.

        XML structure:
            <a:outerShdw blurRad="50800" dist="38100" dir="2700000"
                         algn="tl" rotWithShape="0">
                <a:srgbClr val="000000">
                    <a:alpha val="50000"/>
                </a:srgbClr>
            </a:outerShdw>
        """
        shadow_elem = effect_lst.first("outerShdw")
        shadow_type = "outer"

        if shadow_elem is None:
            shadow_elem = effect_lst.first("innerShdw")
            shadow_type = "inner"

        if shadow_elem is None:
            return None

        color = parse_color(shadow_elem) or ColorInfo(alpha=0.5)
        return Shadow(
            type=shadow_type,
            color=color,
            blur_radius=emu_to_pixels(shadow_elem.int_attr("blurRad", 50800)) * scale,
            distance=emu_to_pixels(shadow_elem.int_attr("dist", 38100)) * scale,
            angle=angle_to_degrees(shadow_elem.float_attr("dir", 2700000.0)),
        )

    def _extract_glow(self, effect_lst: XmlNode, scale: float) -> Optional[Glow]:
        """Extract glow effect.

        XML structure:
            <a:glow rad="63500">
                <a:schemeClr val="accent1"><a:alpha val="40000"/></a:schemeClr>
            </a:glow>
        """
        glow_elem = effect_lst.first("glow")
        if glow_elem is None:
            return None

        return Glow(
            color=parse_color(glow_elem) or DEFAULT_COLOR,
            radius=emu_to_pixels(glow_elem.int_attr("rad", 0)) * scale,
        )

    def _extract_reflection(self, effect_lst: XmlNode, scale: float) -> Optional[Reflection]:
        """Extract reflection effect.

        XML structure:
            <a:reflection blurRad="6350" stA="52000" endA="300"
                          endPos="35000" dist="0" dir="5400000"/>
        """
        refl_elem = effect_lst.first("reflection")
        if refl_elem is None:
            return None

        return Reflection(
            blur_radius=emu_to_pixels(refl_elem.int_attr("blurRad", 0)) * scale,
            distance=emu_to_pixels(refl_elem.int_attr("dist", 0)) * scale,
            start_alpha=percent_to_fraction(refl_elem.float_attr("stA", 50000.0)),
            end_alpha=percent_to_fraction(refl_elem.float_attr("endA", 0.0)),
        )

    # ------------------------------------------------------------------
    # Background
    # ------------------------------------------------------------------

    def extract_background(
        self,
        c_sld: Optional[XmlNode],
        source: BackgroundSource = BackgroundSource.SLIDE,
        relationships: Optional[Relationships] = None,
    ) -> Optional[SlideBackground]:
        """Extract a slide or master background.

        XML structure example:
            <p:cSld>
                <p:bg>
                    <p:bgPr><a:solidFill><a:srgbClr val="FFFFFF"/></a:solidFill></p:bgPr>
                </p:bg>
            </p:cSld>
            or
            <p:bg><p:bgRef idx="1001"><a:schemeClr val="bg1"/></p:bgRef></p:bg>
        """
        bg = c_sld.first("bg") if c_sld is not None else None
        if bg is None:
            return None

        bg_pr = bg.first("bgPr")
        if bg_pr is not None:
            return SlideBackground(
                fill=self.extract_fill(bg_pr, relationships=relationships),
                source=source,
            )

        bg_ref = bg.first("bgRef")
        if bg_ref is not None:
            color = parse_color(bg_ref)
            if color is not None:
                return SlideBackground(fill=SolidFill(color=color), source=source)

        return None

