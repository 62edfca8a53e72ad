"""Preset geometry name to shape kind lookup.

OOXML defines roughly two hundred preset outlines; they collapse onto the
handful of kinds a renderer distinguishes. Unknown presets are rectangles.
"""

from pptxdom.dom.schema import ShapeKind

PRESET_SHAPE_KINDS: dict[str, ShapeKind] = {
    # Basic shapes
    "rect": ShapeKind.RECTANGLE,
    "snip1Rect": ShapeKind.RECTANGLE,
    "snip2SameRect": ShapeKind.RECTANGLE,
    "snip2DiagRect": ShapeKind.RECTANGLE,
    "snipRoundRect": ShapeKind.RECTANGLE,
    "roundRect": ShapeKind.ROUNDED_RECTANGLE,
    "round1Rect": ShapeKind.ROUNDED_RECTANGLE,
    "round2SameRect": ShapeKind.ROUNDED_RECTANGLE,
    "round2DiagRect": ShapeKind.ROUNDED_RECTANGLE,
    "ellipse": ShapeKind.ELLIPSE,
    "triangle": ShapeKind.TRIANGLE,
    "rtTriangle": ShapeKind.TRIANGLE,
    "diamond": ShapeKind.DIAMOND,
    "parallelogram": ShapeKind.PARALLELOGRAM,
    "trapezoid": ShapeKind.TRAPEZOID,
    "pentagon": ShapeKind.PENTAGON,
    "homePlate": ShapeKind.PENTAGON,
    "hexagon": ShapeKind.HEXAGON,
    "heptagon": ShapeKind.POLYGON,
    "octagon": ShapeKind.OCTAGON,
    "decagon": ShapeKind.POLYGON,
    "dodecagon": ShapeKind.POLYGON,
    "plus": ShapeKind.PLUS,
    "mathPlus": ShapeKind.PLUS,
    "frame": ShapeKind.FRAME,
    "halfFrame": ShapeKind.FRAME,
    "plaque": ShapeKind.RECTANGLE,
    # Arrows
    "leftArrow": ShapeKind.ARROW,
    "rightArrow": ShapeKind.ARROW,
    "upArrow": ShapeKind.ARROW,
    "downArrow": ShapeKind.ARROW,
    "leftRightArrow": ShapeKind.ARROW,
    "upDownArrow": ShapeKind.ARROW,
    "quadArrow": ShapeKind.ARROW,
    "leftRightUpArrow": ShapeKind.ARROW,
    "bentArrow": ShapeKind.ARROW,
    "bentUpArrow": ShapeKind.ARROW,
    "uturnArrow": ShapeKind.ARROW,
    "curvedRightArrow": ShapeKind.ARROW,
    "curvedLeftArrow": ShapeKind.ARROW,
    "curvedUpArrow": ShapeKind.ARROW,
    "curvedDownArrow": ShapeKind.ARROW,
    "stripedRightArrow": ShapeKind.ARROW,
    "notchedRightArrow": ShapeKind.ARROW,
    "chevron": ShapeKind.ARROW,
    "circularArrow": ShapeKind.ARROW,
    # Lines and connectors
    "line": ShapeKind.LINE,
    "lineInv": ShapeKind.LINE,
    "straightConnector1": ShapeKind.LINE,
    "bentConnector2": ShapeKind.LINE,
    "bentConnector3": ShapeKind.LINE,
    "bentConnector4": ShapeKind.LINE,
    "bentConnector5": ShapeKind.LINE,
    "curvedConnector2": ShapeKind.LINE,
    "curvedConnector3": ShapeKind.LINE,
    "curvedConnector4": ShapeKind.LINE,
    "curvedConnector5": ShapeKind.LINE,
    # Stars and banners
    "star4": ShapeKind.STAR,
    "star5": ShapeKind.STAR,
    "star6": ShapeKind.STAR,
    "star7": ShapeKind.STAR,
    "star8": ShapeKind.STAR,
    "star10": ShapeKind.STAR,
    "star12": ShapeKind.STAR,
    "star16": ShapeKind.STAR,
    "star24": ShapeKind.STAR,
    "star32": ShapeKind.STAR,
    "irregularSeal1": ShapeKind.STAR,
    "irregularSeal2": ShapeKind.STAR,
    "ribbon": ShapeKind.BANNER,
    "ribbon2": ShapeKind.BANNER,
    "ellipseRibbon": ShapeKind.BANNER,
    "ellipseRibbon2": ShapeKind.BANNER,
    "verticalScroll": ShapeKind.BANNER,
    "horizontalScroll": ShapeKind.BANNER,
    "wave": ShapeKind.WAVE,
    "doubleWave": ShapeKind.WAVE,
    # Callouts
    "callout1": ShapeKind.CALLOUT,
    "callout2": ShapeKind.CALLOUT,
    "callout3": ShapeKind.CALLOUT,
    "accentCallout1": ShapeKind.CALLOUT,
    "accentCallout2": ShapeKind.CALLOUT,
    "accentCallout3": ShapeKind.CALLOUT,
    "borderCallout1": ShapeKind.CALLOUT,
    "borderCallout2": ShapeKind.CALLOUT,
    "borderCallout3": ShapeKind.CALLOUT,
    "wedgeRectCallout": ShapeKind.CALLOUT,
    "wedgeRoundRectCallout": ShapeKind.CALLOUT,
    "wedgeEllipseCallout": ShapeKind.CALLOUT,
    "cloudCallout": ShapeKind.CALLOUT,
    # Flowchart
    "flowChartProcess": ShapeKind.RECTANGLE,
    "flowChartAlternateProcess": ShapeKind.ROUNDED_RECTANGLE,
    "flowChartDecision": ShapeKind.DIAMOND,
    "flowChartInputOutput": ShapeKind.PARALLELOGRAM,
    "flowChartPredefinedProcess": ShapeKind.RECTANGLE,
    "flowChartInternalStorage": ShapeKind.RECTANGLE,
    "flowChartDocument": ShapeKind.RECTANGLE,
    "flowChartMultidocument": ShapeKind.RECTANGLE,
    "flowChartTerminator": ShapeKind.ROUNDED_RECTANGLE,
    "flowChartPreparation": ShapeKind.HEXAGON,
    "flowChartManualInput": ShapeKind.TRAPEZOID,
    "flowChartManualOperation": ShapeKind.TRAPEZOID,
    "flowChartConnector": ShapeKind.ELLIPSE,
    "flowChartOffpageConnector": ShapeKind.PENTAGON,
    "flowChartMagneticDisk": ShapeKind.CYLINDER,
    "flowChartMagneticDrum": ShapeKind.CYLINDER,
    "flowChartDirectAccessStorage": ShapeKind.CYLINDER,
    "flowChartOnlineStorage": ShapeKind.RECTANGLE,
    "flowChartDisplay": ShapeKind.RECTANGLE,
    "flowChartMerge": ShapeKind.TRIANGLE,
    "flowChartExtract": ShapeKind.TRIANGLE,
    # Decorative
    "cube": ShapeKind.CUBE,
    "can": ShapeKind.CYLINDER,
    "bevel": ShapeKind.RECTANGLE,
    "foldedCorner": ShapeKind.RECTANGLE,
    "donut": ShapeKind.DONUT,
    "noSmoking": ShapeKind.DONUT,
    "blockArc": ShapeKind.ARC,
    "arc": ShapeKind.ARC,
    "chord": ShapeKind.CHORD,
    "pie": ShapeKind.PIE,
    "pieWedge": ShapeKind.PIE,
    "heart": ShapeKind.HEART,
    "lightningBolt": ShapeKind.LIGHTNING,
    "sun": ShapeKind.SUN,
    "moon": ShapeKind.MOON,
    "smileyFace": ShapeKind.ELLIPSE,
    "cloud": ShapeKind.CLOUD,
    "teardrop": ShapeKind.ELLIPSE,
    "leftBracket": ShapeKind.BRACKET,
    "rightBracket": ShapeKind.BRACKET,
    "leftBrace": ShapeKind.BRACKET,
    "rightBrace": ShapeKind.BRACKET,
    "bracketPair": ShapeKind.BRACKET,
    "bracePair": ShapeKind.BRACKET,
}

# Presets on <p:sp> that are really straight lines
LINE_PRESETS = frozenset(
    name for name, kind in PRESET_SHAPE_KINDS.items() if kind == ShapeKind.LINE
)

# Default corner rounding of roundRect, as a fraction of the shorter side (adj=16667)
DEFAULT_ROUND_RECT_ADJ = 16667


def shape_kind_for_preset(preset: str | None) -> ShapeKind:
    """Map a preset geometry name to a shape kind; unknown names are rectangles."""
    if not preset:
        return ShapeKind.RECTANGLE
    return PRESET_SHAPE_KINDS.get(preset, ShapeKind.RECTANGLE)
