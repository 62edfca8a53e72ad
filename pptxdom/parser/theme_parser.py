"""Extract color and font schemes from theme parts.

Parses ``ppt/theme/themeN.xml``. The parser never raises: a missing or broken
scheme falls back to the Office defaults and a warning is reported, because
a broken theme must not abort the deck.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from pptxdom.dom.schema import (
    COLOR_SLOTS,
    ColorInfo,
    ColorScheme,
    FontCollection,
    FontInfo,
    FontScheme,
    RGBColor,
    Theme,
)
from pptxdom.engine.colors import DEFAULT_SCHEME_COLORS, decode_color_element, find_color_element
from pptxdom.errors import MalformedXMLError
from pptxdom.parser.xml_tree import XmlNode, decode_xml


logger = logging.getLogger(__name__)

DEFAULT_FONT = FontInfo(
    typeface="Arial",
    panose="020B0604020202020204",
    pitch_family=34,
    charset=0,
)


def default_color_scheme() -> ColorScheme:
    """The Office palette as a color scheme."""
    slots = {
        slot: ColorInfo(value=value, rgb=RGBColor.from_hex(value))
        for slot, value in DEFAULT_SCHEME_COLORS.items()
    }
    return ColorScheme(name="Office", **slots)


def default_font_scheme() -> FontScheme:
    collection = FontCollection(latin=DEFAULT_FONT)
    return FontScheme(name="Office", major=collection, minor=collection)


def default_theme(number: int = 1, part_name: Optional[str] = None) -> Theme:
    """Theme used when a deck has none or its theme cannot be read."""
    return Theme(
        id=f"theme-{number}",
        name="Office Theme",
        number=number,
        part_name=part_name,
        color_scheme=default_color_scheme(),
        font_scheme=default_font_scheme(),
    )


@dataclass
class ThemeParseResult:
    """A theme plus the warnings produced while reading it."""

    theme: Theme
    warnings: list[str] = field(default_factory=list)


class ThemeParser:
    """Extracts theme color and font schemes."""

    def parse_bytes(
        self,
        data: bytes,
        number: int = 1,
        part_name: Optional[str] = None,
    ) -> ThemeParseResult:
        """Decode and parse a theme part, degrading to the default theme."""
        try:
            root = decode_xml(data, part_name)
        except MalformedXMLError as exc:
            message = f"Theme {number} could not be read, using default theme: {exc}"
            logger.warning(message)
            return ThemeParseResult(theme=default_theme(number, part_name), warnings=[message])
        return self.parse(root, number, part_name)

    def parse(
        self,
        root: Optional[XmlNode],
        number: int = 1,
        part_name: Optional[str] = None,
    ) -> ThemeParseResult:
        """Parse a decoded theme part.

        Args:
            root: The ``a:theme`` element.
            number: Trailing number of the theme part file name.
            part_name: Package path of the part.

        Returns:
            ThemeParseResult; its theme is always populated.

        XML structure example:
            <a:theme name="Office Theme">
                <a:themeElements>
                    <a:clrScheme name="Office">
                        <a:dk1><a:sysClr val="windowText" lastClr="000000"/></a:dk1>
                        <a:accent1><a:srgbClr val="5B9BD5"/></a:accent1>
                        ...
                    </a:clrScheme>
                    <a:fontScheme name="Office">
                        <a:majorFont><a:latin typeface="Calibri Light"/></a:majorFont>
                        <a:minorFont><a:latin typeface="Calibri"/></a:minorFont>
                    </a:fontScheme>
                </a:themeElements>
            </a:theme>
        """
        if root is None or not root.is_a("theme"):
            found = root.tag if root is not None else "nothing"
            message = f"Theme {number} has unexpected root <{found}>, using default theme"
            logger.warning(message)
            return ThemeParseResult(theme=default_theme(number, part_name), warnings=[message])

        warnings: list[str] = []
        elements = root.first("themeElements")

        clr_scheme = elements.first("clrScheme") if elements is not None else None
        try:
            color_scheme = self._extract_color_scheme(clr_scheme)
        except (ValueError, TypeError) as exc:
            color_scheme = None
            logger.debug(f"Color scheme of theme {number} unreadable: {exc}")
        if color_scheme is None:
            message = f"Theme {number} has no usable color scheme, using default palette"
            logger.warning(message)
            warnings.append(message)
            color_scheme = default_color_scheme()

        font_node = elements.first("fontScheme") if elements is not None else None
        font_scheme = self._extract_font_scheme(font_node)
        if font_scheme is None:
            message = f"Theme {number} has no font scheme, using default fonts"
            logger.warning(message)
            warnings.append(message)
            font_scheme = default_font_scheme()

        theme = Theme(
            id=f"theme-{number}",
            name=root.attr("name") or f"Theme {number}",
            number=number,
            part_name=part_name,
            color_scheme=color_scheme,
            font_scheme=font_scheme,
        )
        return ThemeParseResult(theme=theme, warnings=warnings)

    def _extract_color_scheme(self, clr_scheme: Optional[XmlNode]) -> Optional[ColorScheme]:
        """Extract the twelve color slots; absent slots take the default color."""
        if clr_scheme is None:
            return None

        defaults = default_color_scheme()
        slots: dict[str, ColorInfo] = {}
        for slot in COLOR_SLOTS:
            color_elem = find_color_element(clr_scheme.first(slot))
            if color_elem is None:
                slots[slot] = defaults.slot(slot)
                continue
            slots[slot] = decode_color_element(color_elem)

        return ColorScheme(name=clr_scheme.attr("name") or "Custom", **slots)

    def _extract_font_scheme(self, font_scheme: Optional[XmlNode]) -> Optional[FontScheme]:
        if font_scheme is None:
            return None

        return FontScheme(
            name=font_scheme.attr("name") or "Custom",
            major=self._extract_font_collection(font_scheme.first("majorFont")),
            minor=self._extract_font_collection(font_scheme.first("minorFont")),
        )

    def _extract_font_collection(self, node: Optional[XmlNode]) -> FontCollection:
        if node is None:
            return FontCollection(latin=DEFAULT_FONT)

        return FontCollection(
            latin=self._extract_font(node.first("latin")) or DEFAULT_FONT,
            east_asian=self._extract_font(node.first("ea")) or FontInfo(typeface="", panose=None),
            complex_script=self._extract_font(node.first("cs")) or FontInfo(typeface="", panose=None),
        )

    def _extract_font(self, node: Optional[XmlNode]) -> Optional[FontInfo]:
        """Extract a font face.

        XML structure:
            <a:latin typeface="Calibri" panose="020F0502020204030204"
                     pitchFamily="34" charset="0"/>
        """
        if node is None:
            return None
        return FontInfo(
            typeface=node.attr("typeface", ""),
            panose=node.attr("panose"),
            pitch_family=node.int_attr("pitchFamily"),
            charset=node.int_attr("charset"),
        )
