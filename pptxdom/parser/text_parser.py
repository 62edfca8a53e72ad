"""Extract paragraphs and runs from DrawingML text bodies.

Parses <p:txBody> (or <a:txBody>) into a ``TextBody``: body properties,
paragraph alignment/indentation/bullets and run-level character formatting.
Hyperlink ids are resolved to URLs through the part's relationships.
"""

import logging
from typing import Optional

from pptxdom.dom.schema import (
    AutoFit,
    Bullet,
    BulletType,
    Hyperlink,
    Insets,
    Paragraph,
    RunStyle,
    TextAlignment,
    TextBody,
    TextRun,
    VerticalAlignment,
)
from pptxdom.engine.colors import parse_color
from pptxdom.engine.units import (
    emu_to_pixels,
    hundredths_to_points,
    percent_to_fraction,
    points_to_pixels,
    signed_percent_to_fraction,
)
from pptxdom.parser.relationships import Relationships
from pptxdom.parser.xml_tree import XmlNode


logger = logging.getLogger(__name__)

ALIGNMENT_MAP = {
    "l": TextAlignment.LEFT,
    "ctr": TextAlignment.CENTER,
    "r": TextAlignment.RIGHT,
    "just": TextAlignment.JUSTIFY,
    "justLow": TextAlignment.JUSTIFY,
    "dist": TextAlignment.JUSTIFY,
    "thaiDist": TextAlignment.JUSTIFY,
}

ANCHOR_MAP = {
    "t": VerticalAlignment.TOP,
    "ctr": VerticalAlignment.MIDDLE,
    "b": VerticalAlignment.BOTTOM,
    "just": VerticalAlignment.MIDDLE,
    "dist": VerticalAlignment.MIDDLE,
}

DEFAULT_FONT_SIZE_PT = 18.0

# bodyPr inset defaults (0.1" left/right, 0.05" top/bottom)
DEFAULT_LR_INSET_EMU = 91440
DEFAULT_TB_INSET_EMU = 45720


class TextParser:
    """Extracts text bodies from shape XML."""

    def parse_text_body(
        self,
        tx_body: Optional[XmlNode],
        scale: float = 1.0,
        relationships: Optional[Relationships] = None,
    ) -> Optional[TextBody]:
        """Parse a text body.

        Args:
            tx_body: The ``p:txBody`` element.
            scale: Canvas scale applied to pixel sizes.
            relationships: Part relationships for hyperlink resolution.

        Returns:
            TextBody, or None when ``tx_body`` is None.

        XML structure example:
            <p:txBody>
                <a:bodyPr wrap="square" anchor="ctr"><a:normAutofit fontScale="90000"/></a:bodyPr>
                <a:lstStyle/>
                <a:p>
                    <a:pPr algn="ctr"/>
                    <a:r><a:rPr lang="en-US" sz="2400" b="1"/><a:t>Hello</a:t></a:r>
                </a:p>
            </p:txBody>
        """
        if tx_body is None:
            return None

        body_pr = tx_body.first("bodyPr")
        level_styles = self._extract_level_styles(tx_body.first("lstStyle"), scale, relationships)
        paragraphs = [
            self.parse_paragraph(p, scale, relationships, level_styles)
            for p in tx_body.all("p")
        ]

        auto_fit = AutoFit.NONE
        font_scale = 1.0
        word_wrap = True
        anchor = VerticalAlignment.TOP
        insets = Insets(
            left=emu_to_pixels(DEFAULT_LR_INSET_EMU) * scale,
            top=emu_to_pixels(DEFAULT_TB_INSET_EMU) * scale,
            right=emu_to_pixels(DEFAULT_LR_INSET_EMU) * scale,
            bottom=emu_to_pixels(DEFAULT_TB_INSET_EMU) * scale,
        )

        if body_pr is not None:
            norm_autofit = body_pr.first("normAutofit")
            if norm_autofit is not None:
                auto_fit = AutoFit.SHRINK
                font_scale = percent_to_fraction(norm_autofit.float_attr("fontScale", 100000.0)) or 1.0
            elif body_pr.first("spAutoFit") is not None:
                auto_fit = AutoFit.SHAPE
            word_wrap = body_pr.attr("wrap", "square") != "none"
            anchor = ANCHOR_MAP.get(body_pr.attr("anchor", "t"), VerticalAlignment.TOP)
            insets = Insets(
                left=emu_to_pixels(body_pr.int_attr("lIns", DEFAULT_LR_INSET_EMU)) * scale,
                top=emu_to_pixels(body_pr.int_attr("tIns", DEFAULT_TB_INSET_EMU)) * scale,
                right=emu_to_pixels(body_pr.int_attr("rIns", DEFAULT_LR_INSET_EMU)) * scale,
                bottom=emu_to_pixels(body_pr.int_attr("bIns", DEFAULT_TB_INSET_EMU)) * scale,
            )

        return TextBody(
            paragraphs=paragraphs,
            auto_fit=auto_fit,
            font_scale=font_scale,
            word_wrap=word_wrap,
            vertical_alignment=anchor,
            insets=insets,
        )

    def parse_paragraph(
        self,
        p: XmlNode,
        scale: float = 1.0,
        relationships: Optional[Relationships] = None,
        level_styles: Optional[dict[int, RunStyle]] = None,
    ) -> Paragraph:
        """Parse one ``a:p`` into runs plus paragraph properties."""
        p_pr = p.first("pPr")
        level = min(max(p_pr.int_attr("lvl", 0), 0), 8) if p_pr is not None else 0

        base_style = (level_styles or {}).get(level) or self._default_style(scale)
        if p_pr is not None and p_pr.first("defRPr") is not None:
            base_style, _ = self.parse_run_properties(p_pr.first("defRPr"), scale, relationships, base_style)

        runs: list[TextRun] = []
        for child in p:
            if child.tag in ("r", "fld"):
                style, hyperlink = self.parse_run_properties(
                    child.first("rPr"), scale, relationships, base_style
                )
                t = child.first("t")
                text = (t.text or "") if t is not None else ""
                runs.append(TextRun(text=text, style=style, hyperlink=hyperlink))
            elif child.tag == "br":
                style, _ = self.parse_run_properties(child.first("rPr"), scale, relationships, base_style)
                runs.append(TextRun(text="\n", style=style))

        if p_pr is None:
            return Paragraph(runs=runs, level=level)

        base_size_px = base_style.font_size_px
        return Paragraph(
            runs=runs,
            alignment=ALIGNMENT_MAP.get(p_pr.attr("algn", "l"), TextAlignment.LEFT),
            level=level,
            margin_left=emu_to_pixels(p_pr.int_attr("marL", 0)) * scale,
            indent=emu_to_pixels(p_pr.int_attr("indent", 0)) * scale,
            space_before=self._spacing(p_pr.first("spcBef"), scale, base_size_px),
            space_after=self._spacing(p_pr.first("spcAft"), scale, base_size_px),
            line_spacing=self._line_spacing(p_pr.first("lnSpc")),
            bullet=self._extract_bullet(p_pr),
        )

    def parse_run_properties(
        self,
        r_pr: Optional[XmlNode],
        scale: float = 1.0,
        relationships: Optional[Relationships] = None,
        base: Optional[RunStyle] = None,
    ) -> tuple[RunStyle, Optional[Hyperlink]]:
        """Parse ``a:rPr`` on top of an inherited base style.

        XML structure example:
            <a:rPr lang="en-US" sz="2400" b="1" i="0" u="sng" strike="noStrike" baseline="30000">
                <a:solidFill><a:schemeClr val="tx1"/></a:solidFill>
                <a:latin typeface="+mj-lt"/>
                <a:hlinkClick r:id="rId3" tooltip="Open"/>
            </a:rPr>
        """
        base = base or self._default_style(scale)
        if r_pr is None:
            return base, None

        font_size = base.font_size
        if r_pr.attr("sz") is not None:
            size = hundredths_to_points(r_pr.float_attr("sz", font_size * 100))
            if size > 0:
                font_size = size

        latin = r_pr.first("latin")
        font_family = latin.attr("typeface") if latin is not None else None

        underline = base.underline
        if r_pr.attr("u") is not None:
            underline = r_pr.attr("u") != "none"

        strikethrough = base.strikethrough
        if r_pr.attr("strike") is not None:
            strikethrough = r_pr.attr("strike") != "noStrike"

        color = parse_color(r_pr.first("solidFill")) or base.color

        baseline = base.baseline
        if r_pr.attr("baseline") is not None:
            baseline = signed_percent_to_fraction(r_pr.float_attr("baseline", 0.0))

        style = RunStyle(
            font_family=font_family or base.font_family,
            font_size=font_size,
            font_size_px=points_to_pixels(font_size) * scale,
            bold=r_pr.bool_attr("b", base.bold),
            italic=r_pr.bool_attr("i", base.italic),
            underline=underline,
            strikethrough=strikethrough,
            color=color,
            baseline=baseline,
        )
        return style, self._extract_hyperlink(r_pr.first("hlinkClick"), relationships)

    def _default_style(self, scale: float) -> RunStyle:
        return RunStyle(
            font_size=DEFAULT_FONT_SIZE_PT,
            font_size_px=points_to_pixels(DEFAULT_FONT_SIZE_PT) * scale,
        )

    def _extract_level_styles(
        self,
        lst_style: Optional[XmlNode],
        scale: float,
        relationships: Optional[Relationships],
    ) -> dict[int, RunStyle]:
        """Per-level default run styles from ``a:lstStyle/a:lvlNpPr/a:defRPr``."""
        styles: dict[int, RunStyle] = {}
        if lst_style is None:
            return styles
        for level in range(9):
            lvl_pr = lst_style.first(f"lvl{level + 1}pPr")
            if lvl_pr is None or lvl_pr.first("defRPr") is None:
                continue
            styles[level], _ = self.parse_run_properties(lvl_pr.first("defRPr"), scale, relationships)
        return styles

    def _extract_hyperlink(
        self,
        hlink: Optional[XmlNode],
        relationships: Optional[Relationships],
    ) -> Optional[Hyperlink]:
        if hlink is None:
            return None
        rel_id = hlink.attr("r:id") or None
        url = relationships.url(rel_id) if relationships is not None else None
        if url is None and hlink.attr("action"):
            url = hlink.attr("action")
        return Hyperlink(url=url, relationship_id=rel_id, tooltip=hlink.attr("tooltip"))

    def _extract_bullet(self, p_pr: XmlNode) -> Optional[Bullet]:
        """Extract list marker properties; None means inherited."""
        if p_pr.first("buNone") is not None:
            return Bullet(type=BulletType.NONE)

        bu_font = p_pr.first("buFont")
        font = bu_font.attr("typeface") if bu_font is not None else None

        bu_char = p_pr.first("buChar")
        if bu_char is not None:
            return Bullet(type=BulletType.CHAR, char=bu_char.attr("char", "•"), font=font)

        bu_auto = p_pr.first("buAutoNum")
        if bu_auto is not None:
            return Bullet(
                type=BulletType.AUTO_NUMBER,
                scheme=bu_auto.attr("type", "arabicPeriod"),
                start_at=bu_auto.int_attr("startAt", 1),
                font=font,
            )
        return None

    def _spacing(self, node: Optional[XmlNode], scale: float, font_size_px: float) -> float:
        """Paragraph spacing in pixels.

        XML structure:
            <a:spcBef><a:spcPts val="600"/></a:spcBef>
            <a:spcAft><a:spcPct val="20000"/></a:spcAft>
        """
        if node is None:
            return 0.0
        pts = node.first("spcPts")
        if pts is not None:
            return points_to_pixels(hundredths_to_points(pts.float_attr("val", 0.0))) * scale
        pct = node.first("spcPct")
        if pct is not None:
            return signed_percent_to_fraction(pct.float_attr("val", 0.0)) * font_size_px
        return 0.0

    def _line_spacing(self, node: Optional[XmlNode]) -> Optional[float]:
        if node is None:
            return None
        pct = node.first("spcPct")
        if pct is not None:
            return signed_percent_to_fraction(pct.float_attr("val", 100000.0))
        return None
