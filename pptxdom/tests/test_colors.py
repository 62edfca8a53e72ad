"""Tests for DrawingML color decoding and resolution."""

import pytest

from pptxdom.dom.schema import ColorInfo, ColorKind, RGBColor
from pptxdom.engine.colors import (
    DEFAULT_PALETTE,
    apply_shade,
    apply_tint,
    parse_color,
    resolve,
    resolve_scheme_slot,
)


class TestColorPrecedence:
    """Tests for picking and decoding color elements."""

    def test_srgb_literal(self, parse_fragment) -> None:
        """``srgbClr val="FF0000"`` resolves to pure red."""
        info = parse_color(parse_fragment('<a:solidFill><a:srgbClr val="FF0000"/></a:solidFill>'))

        assert info.kind == ColorKind.RGB
        assert (info.rgb.r, info.rgb.g, info.rgb.b) == (1.0, 0.0, 0.0)
        assert info.hex == "#FF0000"

    def test_rgb_wins_over_scheme(self, parse_fragment) -> None:
        """An explicit RGB literal beats a scheme reference in the same container."""
        container = parse_fragment(
            '<a:fillRef idx="1"><a:schemeClr val="accent1"/><a:srgbClr val="00FF00"/></a:fillRef>'
        )
        info = parse_color(container)

        assert info.kind == ColorKind.RGB
        assert info.hex == "#00FF00"

    def test_scheme_wins_over_system(self, parse_fragment) -> None:
        container = parse_fragment(
            '<a:solidFill><a:sysClr val="window"/><a:schemeClr val="accent2"/></a:solidFill>'
        )
        info = parse_color(container)

        assert info.kind == ColorKind.SCHEME
        assert info.value == "accent2"

    def test_system_color_without_last_color(self, parse_fragment) -> None:
        info = parse_color(parse_fragment('<a:solidFill><a:sysClr val="window"/></a:solidFill>'))

        assert info.kind == ColorKind.SYSTEM
        assert info.hex == "#FFFFFF"

    def test_system_color_uses_last_color(self, parse_fragment) -> None:
        info = parse_color(
            parse_fragment('<a:solidFill><a:sysClr val="windowText" lastClr="112233"/></a:solidFill>')
        )

        assert info.kind == ColorKind.RGB
        assert info.hex == "#112233"

    def test_empty_container_yields_none(self, parse_fragment) -> None:
        assert parse_color(parse_fragment("<a:solidFill/>")) is None
        assert parse_color(None) is None

    def test_unknown_scheme_slot_is_black(self, parse_fragment) -> None:
        info = parse_color(parse_fragment('<a:solidFill><a:schemeClr val="nope"/></a:solidFill>'))
        assert info.hex == "#000000"

    def test_preset_color(self, parse_fragment) -> None:
        info = parse_color(parse_fragment('<a:solidFill><a:prstClr val="blue"/></a:solidFill>'))
        assert info.hex == "#0000FF"


class TestModifiers:
    """Tests for tint, shade and alpha."""

    def test_tint_moves_toward_white(self) -> None:
        color = apply_tint(RGBColor(r=0.2, g=0.4, b=1.0), 0.5)
        assert color.r == pytest.approx(0.6)
        assert color.g == pytest.approx(0.7)
        assert color.b == pytest.approx(1.0)

    def test_shade_moves_toward_black(self) -> None:
        color = apply_shade(RGBColor(r=0.2, g=0.4, b=1.0), 0.5)
        assert color.r == pytest.approx(0.1)
        assert color.g == pytest.approx(0.2)
        assert color.b == pytest.approx(0.5)

    def test_scheme_accent1_with_half_tint(self, parse_fragment) -> None:
        """accent1 with tint 50% is accent1 lightened halfway toward white."""
        info = parse_color(
            parse_fragment(
                '<a:solidFill><a:schemeClr val="accent1"><a:tint val="50000"/></a:schemeClr></a:solidFill>'
            )
        )
        base = DEFAULT_PALETTE["accent1"]

        assert info.tint == pytest.approx(0.5)
        assert info.rgb.r == pytest.approx(base.r + (1 - base.r) * 0.5)
        assert info.rgb.g == pytest.approx(base.g + (1 - base.g) * 0.5)
        assert info.rgb.b == pytest.approx(base.b + (1 - base.b) * 0.5)

    @pytest.mark.parametrize("encoded", ["-50000", "0", "150000", "9999999"])
    def test_modifiers_clamped(self, parse_fragment, encoded: str) -> None:
        """Out-of-range tint, shade and alpha still resolve into [0, 1]."""
        info = parse_color(
            parse_fragment(
                f'<a:solidFill><a:srgbClr val="808080"><a:tint val="{encoded}"/>'
                f'<a:shade val="{encoded}"/><a:alpha val="{encoded}"/></a:srgbClr></a:solidFill>'
            )
        )

        assert 0.0 <= info.tint <= 1.0
        assert 0.0 <= info.shade <= 1.0
        assert 0.0 <= info.alpha <= 1.0
        for channel in (info.rgb.r, info.rgb.g, info.rgb.b):
            assert 0.0 <= channel <= 1.0

    def test_alpha(self, parse_fragment) -> None:
        info = parse_color(
            parse_fragment('<a:solidFill><a:srgbClr val="000000"><a:alpha val="25000"/></a:srgbClr></a:solidFill>')
        )
        assert info.alpha == pytest.approx(0.25)


class TestSchemeResolution:
    """Tests for resolving scheme references against a palette."""

    def test_aliases_follow_default_map(self) -> None:
        assert resolve_scheme_slot("tx1") == DEFAULT_PALETTE["dk1"]
        assert resolve_scheme_slot("bg1") == DEFAULT_PALETTE["lt1"]

    def test_master_color_map_overrides_aliases(self) -> None:
        """A dark master maps bg1 to dk1."""
        assert resolve_scheme_slot("bg1", color_map={"bg1": "dk1"}) == DEFAULT_PALETTE["dk1"]

    def test_resolve_against_custom_palette(self) -> None:
        palette = dict(DEFAULT_PALETTE, accent1=RGBColor.from_hex("4472C4"))
        info = resolve(ColorInfo(kind=ColorKind.SCHEME, value="accent1"), palette)
        assert info.hex == "#4472C4"

    def test_placeholder_color(self) -> None:
        info = resolve(
            ColorInfo(kind=ColorKind.SCHEME, value="phClr"),
            placeholder=RGBColor.from_hex("ABCDEF"),
        )
        assert info.hex == "#ABCDEF"
