"""
units.py: OOXML unit conversions.

All length, angle and percentage decoding goes through this module. OOXML
stores lengths in EMUs (English Metric Units, 914400 per inch), angles in
60,000ths of a degree and percentages in 1000ths of a percent.
"""

from pptx.util import Emu, Inches, Pt

# =============================================================================
# BASE CONSTANTS
# =============================================================================

EMU_PER_INCH = Inches(1)
EMU_PER_PT = Pt(1)
PIXELS_PER_INCH = 96
POINTS_PER_INCH = 72
EMU_PER_PIXEL = EMU_PER_INCH / PIXELS_PER_INCH

ANGLE_UNITS_PER_DEGREE = 60000
PERCENT_UNITS = 100000

# =============================================================================
# NATURAL SLIDE SIZE (4:3, used when presentation.xml carries no sldSz)
# =============================================================================

DEFAULT_SLIDE_WIDTH_EMU = Emu(Inches(10))
DEFAULT_SLIDE_HEIGHT_EMU = Emu(Inches(7.5))

# =============================================================================
# LENGTHS
# =============================================================================


def emu_to_pixels(emu: float) -> float:
    """Convert EMUs to pixels at 96 DPI."""
    return emu * PIXELS_PER_INCH / EMU_PER_INCH


def pixels_to_emu(pixels: float) -> int:
    """Convert pixels at 96 DPI back to whole EMUs."""
    return int(round(pixels * EMU_PER_INCH / PIXELS_PER_INCH))


def points_to_pixels(points: float) -> float:
    """Convert typographic points to pixels."""
    return points * PIXELS_PER_INCH / POINTS_PER_INCH


def pixels_to_points(pixels: float) -> float:
    """Convert pixels to typographic points."""
    return pixels * POINTS_PER_INCH / PIXELS_PER_INCH


def emu_to_points(emu: float) -> float:
    """Convert EMUs to points (line widths, spacing)."""
    return emu / EMU_PER_PT


def points_to_emu(points: float) -> int:
    """Convert points to whole EMUs."""
    return int(round(points * EMU_PER_PT))


def hundredths_to_points(value: float) -> float:
    """Decode font sizes and spacing stored in 1/100 pt (``sz="1800"``)."""
    return value / 100.0


# =============================================================================
# ANGLES & PERCENTAGES
# =============================================================================


def angle_to_degrees(value: float) -> float:
    """Decode an OOXML angle (60,000ths of a degree)."""
    return value / ANGLE_UNITS_PER_DEGREE


def normalize_rotation(degrees: float) -> float:
    """Normalize rotation to the 0-360 range."""
    normalized = degrees % 360.0
    if normalized < 0:
        normalized += 360.0
    return normalized


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))


def percent_to_fraction(value: float) -> float:
    """Decode a percentage (100000 == 100%) into a fraction clamped to [0, 1]."""
    return clamp(value / PERCENT_UNITS, 0.0, 1.0)


def signed_percent_to_fraction(value: float) -> float:
    """Decode a percentage without clamping (offsets, brightness, crop)."""
    return value / PERCENT_UNITS
