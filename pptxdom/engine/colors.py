"""
colors.py: DrawingML color decoding.

Turns color elements (``srgbClr``, ``schemeClr``, ``sysClr``...) into
``ColorInfo`` values with a resolved RGB. Resolution is pure: the palette
a scheme reference resolves against is passed in, defaulting to the Office
palette below.

XML structure example:
    <a:solidFill>
        <a:schemeClr val="accent1">
            <a:lumMod val="75000"/>
            <a:alpha val="50000"/>
        </a:schemeClr>
    </a:solidFill>
"""

import colorsys
from typing import Mapping, Optional

from pptxdom.dom.schema import ColorInfo, ColorKind, RGBColor
from pptxdom.engine.units import (
    angle_to_degrees,
    clamp,
    percent_to_fraction,
    signed_percent_to_fraction,
)
from pptxdom.parser.xml_tree import XmlNode

# =============================================================================
# LOOKUP TABLES
# =============================================================================

DEFAULT_SCHEME_COLORS: dict[str, str] = {
    "dk1": "000000",
    "lt1": "FFFFFF",
    "dk2": "44546A",
    "lt2": "E7E6E6",
    "accent1": "5B9BD5",
    "accent2": "ED7D31",
    "accent3": "A5A5A5",
    "accent4": "FFC000",
    "accent5": "4472C4",
    "accent6": "70AD47",
    "hlink": "0563C1",
    "folHlink": "954F72",
}

# Default master color map (p:clrMap)
SCHEME_ALIASES: dict[str, str] = {
    "bg1": "lt1",
    "tx1": "dk1",
    "bg2": "lt2",
    "tx2": "dk2",
}

SYSTEM_COLORS: dict[str, str] = {
    "window": "FFFFFF",
    "windowText": "000000",
    "menu": "F0F0F0",
    "menuText": "000000",
    "btnFace": "F0F0F0",
    "btnText": "000000",
    "highlight": "0078D7",
    "highlightText": "FFFFFF",
}

PRESET_COLORS: dict[str, str] = {
    "black": "000000",
    "white": "FFFFFF",
    "red": "FF0000",
    "green": "008000",
    "lime": "00FF00",
    "blue": "0000FF",
    "yellow": "FFFF00",
    "cyan": "00FFFF",
    "magenta": "FF00FF",
    "orange": "FFA500",
    "purple": "800080",
    "gray": "808080",
    "grey": "808080",
    "silver": "C0C0C0",
    "navy": "000080",
    "maroon": "800000",
    "teal": "008080",
    "olive": "808000",
}

# Precedence when a container carries more than one color element
COLOR_TAGS = ("srgbClr", "scrgbClr", "hslClr", "prstClr", "schemeClr", "sysClr")

DEFAULT_PALETTE: dict[str, RGBColor] = {
    slot: RGBColor.from_hex(value) for slot, value in DEFAULT_SCHEME_COLORS.items()
}

DEFAULT_COLOR = ColorInfo()


# =============================================================================
# MODIFIERS
# =============================================================================


def apply_tint(color: RGBColor, tint: float) -> RGBColor:
    """Lighten linearly toward white: ``base + (1 - base) * tint``."""
    tint = clamp(tint, 0.0, 1.0)
    return RGBColor(
        r=color.r + (1 - color.r) * tint,
        g=color.g + (1 - color.g) * tint,
        b=color.b + (1 - color.b) * tint,
    )


def apply_shade(color: RGBColor, shade: float) -> RGBColor:
    """Darken linearly toward black: ``base * (1 - shade)``."""
    shade = clamp(shade, 0.0, 1.0)
    return RGBColor(
        r=color.r * (1 - shade),
        g=color.g * (1 - shade),
        b=color.b * (1 - shade),
    )


def apply_luminance(
    color: RGBColor,
    lum_mod: Optional[float] = None,
    lum_off: Optional[float] = None,
) -> RGBColor:
    """Scale and offset lightness in HLS space (``lumMod``/``lumOff``)."""
    if lum_mod is None and lum_off is None:
        return color
    h, l, s = colorsys.rgb_to_hls(color.r, color.g, color.b)
    l = clamp(l * (lum_mod if lum_mod is not None else 1.0) + (lum_off or 0.0), 0.0, 1.0)
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return RGBColor(r=r, g=g, b=b)


def apply_modifiers(base: RGBColor, info: ColorInfo) -> RGBColor:
    """Apply lum, tint and shade modifiers of ``info`` to ``base``."""
    color = apply_luminance(base, info.lum_mod, info.lum_off)
    if info.tint is not None:
        color = apply_tint(color, info.tint)
    if info.shade is not None:
        color = apply_shade(color, info.shade)
    return color


# =============================================================================
# RESOLUTION
# =============================================================================


def resolve_scheme_slot(
    name: str,
    palette: Optional[Mapping[str, RGBColor]] = None,
    color_map: Optional[Mapping[str, str]] = None,
) -> Optional[RGBColor]:
    """Resolve a scheme slot name, following the master color map for aliases.

    Args:
        name: Slot or alias name, e.g. ``accent1`` or ``tx1``.
        palette: Slot colors; defaults to the Office palette.
        color_map: Alias mapping from the master's ``p:clrMap``.

    Returns:
        The base color, or None for unknown names.
    """
    palette = palette if palette is not None else DEFAULT_PALETTE
    mapping = color_map if color_map else SCHEME_ALIASES
    slot = mapping.get(name, SCHEME_ALIASES.get(name, name))
    return palette.get(slot)


def resolve_base(
    info: ColorInfo,
    palette: Optional[Mapping[str, RGBColor]] = None,
    color_map: Optional[Mapping[str, str]] = None,
    placeholder: Optional[RGBColor] = None,
) -> RGBColor:
    """Resolve the unmodified base color of ``info``."""
    if info.kind == ColorKind.SCHEME:
        if info.value == "phClr":
            return placeholder or RGBColor()
        return resolve_scheme_slot(info.value, palette, color_map) or RGBColor()
    if info.kind == ColorKind.SYSTEM:
        return RGBColor.from_hex(SYSTEM_COLORS.get(info.value, "000000"))
    try:
        return RGBColor.from_hex(info.value)
    except ValueError:
        return RGBColor()


def resolve(
    info: ColorInfo,
    palette: Optional[Mapping[str, RGBColor]] = None,
    color_map: Optional[Mapping[str, str]] = None,
    placeholder: Optional[RGBColor] = None,
) -> ColorInfo:
    """Return a copy of ``info`` with ``rgb`` recomputed against ``palette``."""
    base = resolve_base(info, palette, color_map, placeholder)
    return info.model_copy(update={"rgb": apply_modifiers(base, info)})


def _read_modifiers(element: XmlNode) -> dict[str, Optional[float]]:
    modifiers: dict[str, Optional[float]] = {}
    tint = element.first("tint")
    if tint is not None:
        modifiers["tint"] = percent_to_fraction(tint.float_attr("val", 0.0))
    shade = element.first("shade")
    if shade is not None:
        modifiers["shade"] = percent_to_fraction(shade.float_attr("val", 0.0))
    alpha = element.first("alpha")
    if alpha is not None:
        modifiers["alpha"] = percent_to_fraction(alpha.float_attr("val", 100000.0))
    lum_mod = element.first("lumMod")
    if lum_mod is not None:
        modifiers["lum_mod"] = max(0.0, signed_percent_to_fraction(lum_mod.float_attr("val", 100000.0)))
    lum_off = element.first("lumOff")
    if lum_off is not None:
        modifiers["lum_off"] = signed_percent_to_fraction(lum_off.float_attr("val", 0.0))
    return modifiers


def _hsl_to_hex(element: XmlNode) -> str:
    # hue in 60,000ths of a degree, sat/lum in 1000ths of a percent
    hue = angle_to_degrees(element.float_attr("hue", 0.0)) / 360.0
    sat = percent_to_fraction(element.float_attr("sat", 0.0))
    lum = percent_to_fraction(element.float_attr("lum", 0.0))
    r, g, b = colorsys.hls_to_rgb(hue % 1.0, lum, sat)
    return RGBColor(r=r, g=g, b=b).to_hex().lstrip("#")


def _scrgb_to_hex(element: XmlNode) -> str:
    channels = [
        percent_to_fraction(element.float_attr(name, 0.0)) for name in ("r", "g", "b")
    ]
    return RGBColor(r=channels[0], g=channels[1], b=channels[2]).to_hex().lstrip("#")


def find_color_element(container: Optional[XmlNode]) -> Optional[XmlNode]:
    """Pick the color element inside ``container`` by precedence."""
    if container is None:
        return None
    for tag in COLOR_TAGS:
        element = container.first(tag)
        if element is not None:
            return element
    return None


def decode_color_element(
    element: XmlNode,
    palette: Optional[Mapping[str, RGBColor]] = None,
    color_map: Optional[Mapping[str, str]] = None,
    placeholder: Optional[RGBColor] = None,
) -> ColorInfo:
    """Decode one color element into a resolved ``ColorInfo``.

    Unknown or valueless elements degrade to black rather than failing.
    """
    kind = ColorKind.RGB
    value = "000000"

    if element.is_a("srgbClr"):
        value = (element.attr("val") or "000000").upper()
    elif element.is_a("scrgbClr"):
        value = _scrgb_to_hex(element)
    elif element.is_a("hslClr"):
        value = _hsl_to_hex(element)
    elif element.is_a("prstClr"):
        value = PRESET_COLORS.get(element.attr("val", ""), "000000")
    elif element.is_a("schemeClr"):
        kind = ColorKind.SCHEME
        value = element.attr("val") or "tx1"
    elif element.is_a("sysClr"):
        last_color = element.attr("lastClr")
        if last_color:
            value = last_color.upper()
        else:
            kind = ColorKind.SYSTEM
            value = element.attr("val") or "windowText"

    info = ColorInfo(kind=kind, value=value, **_read_modifiers(element))
    return resolve(info, palette, color_map, placeholder)


def parse_color(
    container: Optional[XmlNode],
    palette: Optional[Mapping[str, RGBColor]] = None,
    color_map: Optional[Mapping[str, str]] = None,
    placeholder: Optional[RGBColor] = None,
) -> Optional[ColorInfo]:
    """Decode the color held by a container such as ``a:solidFill``.

    Returns:
        The resolved color, or None when the container holds no color element.
    """
    element = find_color_element(container)
    if element is None:
        return None
    return decode_color_element(element, palette, color_map, placeholder)
