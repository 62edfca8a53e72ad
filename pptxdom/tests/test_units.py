"""Tests for EMU, point, pixel, angle and percentage conversions."""

import pytest

from pptxdom.engine.units import (
    DEFAULT_SLIDE_HEIGHT_EMU,
    DEFAULT_SLIDE_WIDTH_EMU,
    angle_to_degrees,
    emu_to_pixels,
    emu_to_points,
    hundredths_to_points,
    normalize_rotation,
    percent_to_fraction,
    pixels_to_emu,
    pixels_to_points,
    points_to_emu,
    points_to_pixels,
    signed_percent_to_fraction,
)


class TestLengthConversions:
    """Tests for length unit conversions."""

    def test_one_inch_is_96_pixels(self) -> None:
        """914400 EMU is one inch, which is 96 CSS pixels."""
        assert emu_to_pixels(914400) == pytest.approx(96.0)

    def test_default_slide_size(self) -> None:
        """The natural default slide is 10 x 7.5 inches."""
        assert DEFAULT_SLIDE_WIDTH_EMU == 9144000
        assert DEFAULT_SLIDE_HEIGHT_EMU == 6858000
        assert emu_to_pixels(DEFAULT_SLIDE_WIDTH_EMU) == pytest.approx(960.0)
        assert emu_to_pixels(DEFAULT_SLIDE_HEIGHT_EMU) == pytest.approx(720.0)

    @pytest.mark.parametrize("emu", [0, 1, 12700, 914399, 914400, 9144000, 123456789])
    def test_emu_pixel_round_trip_within_one_unit(self, emu: int) -> None:
        """Converting to pixels and back loses at most integer rounding."""
        assert abs(pixels_to_emu(emu_to_pixels(emu)) - emu) <= 1

    def test_pixels_to_emu_returns_int(self) -> None:
        assert isinstance(pixels_to_emu(10.3), int)

    def test_points_and_pixels(self) -> None:
        """72 points make an inch, 96 pixels make an inch."""
        assert points_to_pixels(72) == pytest.approx(96.0)
        assert points_to_pixels(18) == pytest.approx(24.0)
        assert pixels_to_points(96) == pytest.approx(72.0)

    def test_points_and_emu(self) -> None:
        assert emu_to_points(12700) == pytest.approx(1.0)
        assert points_to_emu(1) == 12700

    def test_hundredths_of_a_point(self) -> None:
        """``sz="2400"`` is a 24pt font."""
        assert hundredths_to_points(2400) == pytest.approx(24.0)


class TestAngles:
    """Tests for rotation decoding."""

    def test_sixty_thousandths(self) -> None:
        assert angle_to_degrees(5400000) == pytest.approx(90.0)
        assert angle_to_degrees(60000) == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "degrees,expected",
        [(0, 0), (90, 90), (360, 0), (450, 90), (-90, 270)],
    )
    def test_normalize_rotation(self, degrees: float, expected: float) -> None:
        assert normalize_rotation(degrees) == pytest.approx(expected)


class TestPercentages:
    """Tests for ×100000 encoded percentages."""

    def test_full_scale(self) -> None:
        assert percent_to_fraction(100000) == pytest.approx(1.0)
        assert percent_to_fraction(50000) == pytest.approx(0.5)

    @pytest.mark.parametrize("encoded", [-250000, -1, 0, 1, 99999, 100001, 5000000])
    def test_clamped_to_unit_interval(self, encoded: float) -> None:
        """Out-of-range encodings still resolve into [0, 1]."""
        assert 0.0 <= percent_to_fraction(encoded) <= 1.0

    def test_signed_values_are_not_clamped(self) -> None:
        """Offsets such as lumOff and baseline keep their sign."""
        assert signed_percent_to_fraction(-25000) == pytest.approx(-0.25)
        assert signed_percent_to_fraction(30000) == pytest.approx(0.3)
