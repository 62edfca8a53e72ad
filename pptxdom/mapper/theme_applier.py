"""Second pass that applies a theme to mapped elements.

Geometry mapping resolves scheme colors against the default palette and
leaves theme font references (``+mn-lt``) in place. This pass walks the
mapped tree once, re-resolving every scheme color against the slide's theme
and color map and replacing font references with theme typefaces. Models are
frozen, so substituted elements are copies.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from pptxdom.dom.schema import (
    ColorInfo,
    Effects,
    Element,
    Fill,
    GradientFill,
    GroupElement,
    LineElement,
    Paragraph,
    RGBColor,
    RunStyle,
    ShapeElement,
    SlideBackground,
    SolidFill,
    Stroke,
    TextBody,
    TextElement,
    Theme,
)
from pptxdom.engine import colors


@dataclass(frozen=True)
class ResolvedTheme:
    """A theme flattened into lookup tables."""

    theme: Theme
    palette: dict[str, RGBColor] = field(default_factory=dict)
    fonts: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_theme(cls, theme: Theme) -> "ResolvedTheme":
        palette = {slot: info.rgb for slot, info in theme.color_scheme.as_dict().items()}

        fonts: dict[str, str] = {}
        for prefix, collection in (("mj", theme.font_scheme.major), ("mn", theme.font_scheme.minor)):
            latin = collection.latin.typeface or "Arial"
            fonts[f"+{prefix}-lt"] = latin
            fonts[f"+{prefix}-ea"] = collection.east_asian.typeface or latin
            fonts[f"+{prefix}-cs"] = collection.complex_script.typeface or latin
        return cls(theme=theme, palette=palette, fonts=fonts)

    def font(self, family: str) -> str:
        """Resolve a theme font reference; other names pass through."""
        if family.startswith("+"):
            return self.fonts.get(family, self.fonts.get("+mn-lt", "Arial"))
        return family


class ThemeApplier:
    """Substitutes theme colors and fonts into an element tree."""

    def __init__(
        self,
        resolved: ResolvedTheme,
        color_map: Optional[Mapping[str, str]] = None,
    ):
        self.resolved = resolved
        self.color_map = dict(color_map) if color_map else None

    def apply(self, elements: list[Element]) -> list[Element]:
        """Return ``elements`` with theme values substituted, recursing into groups."""
        return [self._apply_element(element) for element in elements]

    def apply_background(self, background: Optional[SlideBackground]) -> Optional[SlideBackground]:
        if background is None:
            return None
        return background.model_copy(update={"fill": self._fill(background.fill)})

    def _apply_element(self, element: Element) -> Element:
        if isinstance(element, GroupElement):
            return element.model_copy(update={"children": self.apply(element.children)})
        if isinstance(element, TextElement):
            return element.model_copy(update={"text_body": self._text_body(element.text_body)})
        if isinstance(element, ShapeElement):
            return element.model_copy(
                update={
                    "fill": self._fill(element.fill),
                    "stroke": self._stroke(element.stroke),
                    "effects": self._effects(element.effects),
                    "text_body": self._text_body(element.text_body),
                }
            )
        if isinstance(element, LineElement):
            return element.model_copy(update={"stroke": self._stroke(element.stroke)})
        return element

    def _color(self, info: Optional[ColorInfo]) -> Optional[ColorInfo]:
        if info is None or not info.is_scheme:
            return info
        return colors.resolve(info, self.resolved.palette, self.color_map)

    def _fill(self, fill: Fill) -> Fill:
        if isinstance(fill, SolidFill):
            return fill.model_copy(update={"color": self._color(fill.color)})
        if isinstance(fill, GradientFill):
            stops = [
                stop.model_copy(update={"color": self._color(stop.color)}) for stop in fill.stops
            ]
            return fill.model_copy(update={"stops": stops})
        return fill

    def _stroke(self, stroke: Stroke) -> Stroke:
        if stroke.color is None:
            return stroke
        return stroke.model_copy(update={"color": self._color(stroke.color)})

    def _effects(self, effects: Effects) -> Effects:
        if effects.is_empty:
            return effects
        update = {}
        if effects.shadow is not None:
            update["shadow"] = effects.shadow.model_copy(
                update={"color": self._color(effects.shadow.color)}
            )
        if effects.glow is not None:
            update["glow"] = effects.glow.model_copy(
                update={"color": self._color(effects.glow.color)}
            )
        return effects.model_copy(update=update)

    def _run_style(self, style: RunStyle) -> RunStyle:
        return style.model_copy(
            update={
                "font_family": self.resolved.font(style.font_family),
                "color": self._color(style.color),
            }
        )

    def _paragraph(self, paragraph: Paragraph) -> Paragraph:
        runs = [
            run.model_copy(update={"style": self._run_style(run.style)}) for run in paragraph.runs
        ]
        return paragraph.model_copy(update={"runs": runs})

    def _text_body(self, body: Optional[TextBody]) -> Optional[TextBody]:
        if body is None:
            return None
        return body.model_copy(
            update={"paragraphs": [self._paragraph(p) for p in body.paragraphs]}
        )
