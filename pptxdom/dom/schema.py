"""Pydantic v2 models for the decoded presentation object model.

This module defines the render-agnostic tree a PPTX package is decoded into.
Geometry is in pixels at the target canvas scale, font sizes are in points,
and colors are normalized to 0-1 channels. All models are frozen once built.
"""

from enum import Enum
from typing import Annotated, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ShapeKind(str, Enum):
    """Normalized shape categories preset geometries map onto."""

    RECTANGLE = "rectangle"
    ROUNDED_RECTANGLE = "roundedRectangle"
    ELLIPSE = "ellipse"
    TRIANGLE = "triangle"
    LINE = "line"
    ARROW = "arrow"
    STAR = "star"
    POLYGON = "polygon"
    FREEFORM = "freeform"
    # Extended decorative types
    DIAMOND = "diamond"
    PARALLELOGRAM = "parallelogram"
    TRAPEZOID = "trapezoid"
    PENTAGON = "pentagon"
    HEXAGON = "hexagon"
    OCTAGON = "octagon"
    CALLOUT = "callout"
    CUBE = "cube"
    CYLINDER = "cylinder"
    PYRAMID = "pyramid"
    HEART = "heart"
    LIGHTNING = "lightning"
    SUN = "sun"
    MOON = "moon"
    CLOUD = "cloud"
    ARC = "arc"
    DONUT = "donut"
    PIE = "pie"
    CHORD = "chord"
    PLUS = "plus"
    WAVE = "wave"
    BRACKET = "bracket"
    BANNER = "banner"
    FRAME = "frame"


class ColorKind(str, Enum):
    """How a color was specified in the source XML."""

    RGB = "rgb"
    SCHEME = "scheme"
    SYSTEM = "system"


class PathCommandType(str, Enum):
    """Path command types for freeform shapes."""

    MOVE_TO = "moveTo"
    LINE_TO = "lineTo"
    CURVE_TO = "curveTo"  # Cubic Bezier
    QUAD_TO = "quadTo"  # Quadratic Bezier
    ARC_TO = "arcTo"
    CLOSE = "close"


class GradientType(str, Enum):
    """Gradient fill types."""

    LINEAR = "linear"
    RADIAL = "radial"
    RECTANGULAR = "rectangular"
    PATH = "path"


class StrokeType(str, Enum):
    """Line styles after dash presets are collapsed."""

    NONE = "none"
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class TextAlignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class VerticalAlignment(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


class AutoFit(str, Enum):
    NONE = "none"
    SHRINK = "shrink"
    SHAPE = "shape"


class BulletType(str, Enum):
    NONE = "none"
    CHAR = "char"
    AUTO_NUMBER = "autoNumber"


class BackgroundSource(str, Enum):
    """Which part a slide background was taken from."""

    SLIDE = "slide"
    LAYOUT = "layout"
    MASTER = "master"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"


class ParseStage(str, Enum):
    """Decode stages, in the order they are reported."""

    INITIALIZING = "initializing"
    LOADING = "loading"
    PARSING = "parsing"
    COMPLETED = "completed"
    ERROR = "error"


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


# ============================================================================
# Geometry Models
# ============================================================================


class Point(BaseModel):
    """A point in pixels."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class Size(BaseModel):
    """Width and height in pixels."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(default=0.0, ge=0)
    height: float = Field(default=0.0, ge=0)


class Rect(BaseModel):
    """Axis-aligned rectangle in pixels."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    width: float = Field(default=0.0, ge=0)
    height: float = Field(default=0.0, ge=0)

    @property
    def right(self) -> float:
        """Right edge position."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Bottom edge position."""
        return self.y + self.height


class PathCommand(BaseModel):
    """A single path command for freeform shapes, in element-local pixels."""

    model_config = ConfigDict(frozen=True)

    type: PathCommandType
    x: Optional[float] = None
    y: Optional[float] = None
    # Control points for curves
    x1: Optional[float] = None
    y1: Optional[float] = None
    x2: Optional[float] = None
    y2: Optional[float] = None
    # Arc parameters
    width_radius: Optional[float] = None
    height_radius: Optional[float] = None
    start_angle: Optional[float] = Field(default=None, description="Arc start angle in degrees")
    swing_angle: Optional[float] = Field(default=None, description="Arc swing angle in degrees")


# ============================================================================
# Color Models
# ============================================================================


class RGBColor(BaseModel):
    """An RGB color with channels normalized to 0-1."""

    model_config = ConfigDict(frozen=True)

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    @field_validator("r", "g", "b")
    @classmethod
    def _clamp_channel(cls, value: float) -> float:
        return _clamp_unit(value)

    @classmethod
    def from_hex(cls, value: str) -> "RGBColor":
        """Build a color from ``RRGGBB`` or ``#RRGGBB``.

        Raises:
            ValueError: If the string is not six hex digits.
        """
        clean = value.strip().lstrip("#")
        if len(clean) != 6:
            raise ValueError(f"Invalid hex color: {value!r}")
        r, g, b = (int(clean[i:i + 2], 16) for i in (0, 2, 4))
        return cls(r=r / 255.0, g=g / 255.0, b=b / 255.0)

    def to_hex(self) -> str:
        """Render as ``#RRGGBB``."""
        return "#" + "".join(f"{round(c * 255):02X}" for c in (self.r, self.g, self.b))


BLACK = RGBColor()
WHITE = RGBColor(r=1.0, g=1.0, b=1.0)


class ColorInfo(BaseModel):
    """A color as specified in the source plus its resolved RGB value.

    ``value`` holds the hex literal for rgb colors, the slot name for scheme
    references and the system color name for system references. Modifiers are
    fractions; ``rgb`` is the base color with lum/tint/shade applied.
    """

    model_config = ConfigDict(frozen=True)

    kind: ColorKind = ColorKind.RGB
    value: str = "000000"
    rgb: RGBColor = Field(default_factory=RGBColor)
    tint: Optional[float] = None
    shade: Optional[float] = None
    alpha: float = 1.0
    lum_mod: Optional[float] = None
    lum_off: Optional[float] = None

    @field_validator("tint", "shade")
    @classmethod
    def _clamp_modifier(cls, value: Optional[float]) -> Optional[float]:
        return None if value is None else _clamp_unit(value)

    @field_validator("alpha")
    @classmethod
    def _clamp_alpha(cls, value: float) -> float:
        return _clamp_unit(value)

    @property
    def is_scheme(self) -> bool:
        return self.kind == ColorKind.SCHEME

    @property
    def hex(self) -> str:
        return self.rgb.to_hex()


# ============================================================================
# Fill & Stroke Models
# ============================================================================


class NoFill(BaseModel):
    """No fill (transparent)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["none"] = "none"


class SolidFill(BaseModel):
    """Solid color fill."""

    model_config = ConfigDict(frozen=True)

    type: Literal["solid"] = "solid"
    color: ColorInfo


class GradientStop(BaseModel):
    """A color stop in a gradient."""

    model_config = ConfigDict(frozen=True)

    position: float = Field(ge=0.0, le=1.0, description="Position along gradient (0-1)")
    color: ColorInfo


class GradientFill(BaseModel):
    """Gradient fill."""

    model_config = ConfigDict(frozen=True)

    type: Literal["gradient"] = "gradient"
    gradient_type: GradientType = GradientType.LINEAR
    angle: float = Field(default=0.0, description="Linear gradient angle in degrees")
    stops: list[GradientStop] = Field(default_factory=list)


class ImageFill(BaseModel):
    """Picture fill referencing an embedded image part."""

    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    relationship_id: Optional[str] = None
    part_name: Optional[str] = None


Fill = Annotated[
    Union[NoFill, SolidFill, GradientFill, ImageFill],
    Field(discriminator="type"),
]


class Arrowhead(BaseModel):
    """Line end decoration."""

    model_config = ConfigDict(frozen=True)

    type: str = "triangle"
    width: str = "med"
    length: str = "med"


class Stroke(BaseModel):
    """Stroke/outline properties."""

    model_config = ConfigDict(frozen=True)

    type: StrokeType = StrokeType.NONE
    color: Optional[ColorInfo] = None
    width: float = Field(default=0.0, ge=0, description="Stroke width in pixels")
    cap: Literal["round", "square", "butt"] = "butt"
    join: Literal["round", "bevel", "miter"] = "round"
    head: Optional[Arrowhead] = None
    tail: Optional[Arrowhead] = None

    @property
    def visible(self) -> bool:
        return self.type != StrokeType.NONE and self.width > 0


# ============================================================================
# Effects Models
# ============================================================================


class Shadow(BaseModel):
    """Shadow effect."""

    model_config = ConfigDict(frozen=True)

    type: Literal["outer", "inner"] = "outer"
    color: ColorInfo
    blur_radius: float = 0.0
    distance: float = 0.0
    angle: float = Field(default=0.0, description="Direction in degrees")


class Glow(BaseModel):
    """Glow effect."""

    model_config = ConfigDict(frozen=True)

    color: ColorInfo
    radius: float = 0.0


class Reflection(BaseModel):
    """Reflection effect."""

    model_config = ConfigDict(frozen=True)

    blur_radius: float = 0.0
    distance: float = 0.0
    start_alpha: float = 0.5
    end_alpha: float = 0.0


class Effects(BaseModel):
    """Visual effects container."""

    model_config = ConfigDict(frozen=True)

    shadow: Optional[Shadow] = None
    glow: Optional[Glow] = None
    reflection: Optional[Reflection] = None
    soft_edge_radius: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.shadow is None
            and self.glow is None
            and self.reflection is None
            and self.soft_edge_radius is None
        )


# ============================================================================
# Text Models
# ============================================================================


class RunStyle(BaseModel):
    """Character formatting of a text run.

    ``font_family`` may still be a theme font reference such as ``+mn-lt``
    until the theme has been applied.
    """

    model_config = ConfigDict(frozen=True)

    font_family: str = "+mn-lt"
    font_size: float = Field(default=18.0, gt=0, description="Font size in points")
    font_size_px: float = Field(default=24.0, gt=0, description="Font size in canvas pixels")
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    color: Optional[ColorInfo] = None
    baseline: float = Field(default=0.0, description="Superscript (>0) or subscript (<0) offset")

    @property
    def font_weight(self) -> str:
        return "bold" if self.bold else "normal"

    @property
    def font_style(self) -> str:
        return "italic" if self.italic else "normal"

    @property
    def text_decoration(self) -> str:
        if self.underline:
            return "underline"
        if self.strikethrough:
            return "line-through"
        return "none"


class Hyperlink(BaseModel):
    """Click action on a run."""

    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None
    relationship_id: Optional[str] = None
    tooltip: Optional[str] = None


class TextRun(BaseModel):
    """A run of text with consistent formatting."""

    model_config = ConfigDict(frozen=True)

    text: str
    style: RunStyle = Field(default_factory=RunStyle)
    hyperlink: Optional[Hyperlink] = None


class Bullet(BaseModel):
    """List marker of a paragraph."""

    model_config = ConfigDict(frozen=True)

    type: BulletType = BulletType.NONE
    char: Optional[str] = None
    scheme: Optional[str] = Field(default=None, description="Auto-number scheme, e.g. arabicPeriod")
    start_at: int = 1
    font: Optional[str] = None


class Paragraph(BaseModel):
    """A paragraph of text runs."""

    model_config = ConfigDict(frozen=True)

    runs: list[TextRun] = Field(default_factory=list)
    alignment: TextAlignment = TextAlignment.LEFT
    level: int = Field(default=0, ge=0, le=8)
    margin_left: float = 0.0
    indent: float = 0.0
    space_before: float = 0.0
    space_after: float = 0.0
    line_spacing: Optional[float] = Field(default=None, description="Multiple of single spacing")
    bullet: Optional[Bullet] = None

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


class Insets(BaseModel):
    """Text body insets in pixels."""

    model_config = ConfigDict(frozen=True)

    left: float = 9.6
    top: float = 4.8
    right: float = 9.6
    bottom: float = 4.8


class TextBody(BaseModel):
    """Text content of a text box or shape."""

    model_config = ConfigDict(frozen=True)

    paragraphs: list[Paragraph] = Field(default_factory=list)
    auto_fit: AutoFit = AutoFit.NONE
    font_scale: float = Field(default=1.0, gt=0, le=1.0)
    word_wrap: bool = True
    vertical_alignment: VerticalAlignment = VerticalAlignment.TOP
    insets: Insets = Field(default_factory=Insets)

    @property
    def text(self) -> str:
        return "\n".join(paragraph.text for paragraph in self.paragraphs)

    @property
    def has_text(self) -> bool:
        return any(run.text.strip() for p in self.paragraphs for run in p.runs)


# ============================================================================
# Element Models
# ============================================================================


class ElementBase(BaseModel):
    """Fields shared by every element variant."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    position: Point = Field(default_factory=Point)
    size: Size = Field(default_factory=Size)
    rotation: float = Field(default=0.0, description="Clockwise rotation in degrees")
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    visible: bool = True
    locked: bool = False
    flip_h: bool = False
    flip_v: bool = False

    @property
    def bounds(self) -> Rect:
        return Rect(
            x=self.position.x,
            y=self.position.y,
            width=self.size.width,
            height=self.size.height,
        )


class TextElement(ElementBase):
    """A text box."""

    type: Literal["text"] = "text"
    text_body: TextBody = Field(default_factory=TextBody)


class ShapeElement(ElementBase):
    """A preset or custom geometry shape, optionally carrying text."""

    type: Literal["shape"] = "shape"
    shape_type: ShapeKind = ShapeKind.RECTANGLE
    preset: Optional[str] = Field(default=None, description="OOXML preset geometry name")
    adjustments: dict[str, float] = Field(default_factory=dict)
    fill: Fill = Field(default_factory=NoFill)
    stroke: Stroke = Field(default_factory=Stroke)
    effects: Effects = Field(default_factory=Effects)
    corner_radius: Optional[float] = None
    path: list[PathCommand] = Field(default_factory=list)
    points: list[Point] = Field(default_factory=list)
    text_body: Optional[TextBody] = None


class ImageSource(BaseModel):
    """Where an image's bytes live."""

    model_config = ConfigDict(frozen=True)

    relationship_id: Optional[str] = None
    part_name: Optional[str] = None
    content_hash: Optional[str] = None
    mime_type: Optional[str] = None
    data_uri: Optional[str] = None


class Crop(BaseModel):
    """Crop insets as fractions of the source image."""

    model_config = ConfigDict(frozen=True)

    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0


class ImageAdjustments(BaseModel):
    """Relative color adjustments, each in -1..1."""

    model_config = ConfigDict(frozen=True)

    brightness: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    contrast: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    saturation: Optional[float] = Field(default=None, ge=-1.0, le=1.0)


class ImageElement(ElementBase):
    """A picture."""

    type: Literal["image"] = "image"
    source: ImageSource = Field(default_factory=ImageSource)
    crop: Optional[Crop] = None
    adjustments: Optional[ImageAdjustments] = None
    description: Optional[str] = None


class LineElement(ElementBase):
    """A straight line or connector."""

    type: Literal["line"] = "line"
    start: Point = Field(default_factory=Point)
    end: Point = Field(default_factory=Point)
    stroke: Stroke = Field(default_factory=Stroke)
    head: Optional[Arrowhead] = None
    tail: Optional[Arrowhead] = None


class GroupElement(ElementBase):
    """A group owning its child elements."""

    type: Literal["group"] = "group"
    children: list["Element"] = Field(default_factory=list)


Element = Annotated[
    Union[TextElement, ShapeElement, ImageElement, GroupElement, LineElement],
    Field(discriminator="type"),
]

GroupElement.model_rebuild()


def iter_elements(elements: list[Element]) -> Iterator[Element]:
    """Yield elements depth-first, descending into groups."""
    for element in elements:
        yield element
        if isinstance(element, GroupElement):
            yield from iter_elements(element.children)


# ============================================================================
# Slide Models
# ============================================================================


class SlideBackground(BaseModel):
    """Background fill of a slide or master."""

    model_config = ConfigDict(frozen=True)

    fill: Fill = Field(default_factory=NoFill)
    source: BackgroundSource = BackgroundSource.SLIDE


class LayoutReference(BaseModel):
    """The layout a slide is based on."""

    model_config = ConfigDict(frozen=True)

    relationship_id: Optional[str] = None
    part_name: Optional[str] = None
    name: Optional[str] = None
    master_id: Optional[str] = None


class Slide(BaseModel):
    """A decoded slide."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    number: int = Field(ge=1, description="1-based position in the deck")
    part_name: str = ""
    elements: list[Element] = Field(default_factory=list)
    background: Optional[SlideBackground] = None
    layout: Optional[LayoutReference] = None
    hidden: bool = False
    theme_id: Optional[str] = None

    def find_element(self, element_id: str) -> Optional[Element]:
        """Get an element by id, searching inside groups."""
        for element in iter_elements(self.elements):
            if element.id == element_id:
                return element
        return None


class MasterSlide(BaseModel):
    """A decoded slide master."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    number: int = Field(ge=1)
    part_name: str = ""
    elements: list[Element] = Field(default_factory=list)
    background: Optional[SlideBackground] = None
    color_map: dict[str, str] = Field(default_factory=dict)
    layout_ids: list[str] = Field(default_factory=list)
    theme_id: Optional[str] = None


# ============================================================================
# Theme Models
# ============================================================================

COLOR_SLOTS = (
    "dk1", "lt1", "dk2", "lt2",
    "accent1", "accent2", "accent3", "accent4", "accent5", "accent6",
    "hlink", "folHlink",
)


class FontInfo(BaseModel):
    """A font face reference from the theme."""

    model_config = ConfigDict(frozen=True)

    typeface: str = "Arial"
    panose: Optional[str] = "020B0604020202020204"
    pitch_family: Optional[int] = 34
    charset: Optional[int] = 0


class FontCollection(BaseModel):
    """Fonts for each script family."""

    model_config = ConfigDict(frozen=True)

    latin: FontInfo = Field(default_factory=FontInfo)
    east_asian: FontInfo = Field(default_factory=lambda: FontInfo(typeface="", panose=None))
    complex_script: FontInfo = Field(default_factory=lambda: FontInfo(typeface="", panose=None))


class FontScheme(BaseModel):
    """Heading (major) and body (minor) fonts."""

    model_config = ConfigDict(frozen=True)

    name: str = "Office"
    major: FontCollection = Field(default_factory=FontCollection)
    minor: FontCollection = Field(default_factory=FontCollection)


class ColorScheme(BaseModel):
    """The twelve theme color slots."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = "Office"
    dk1: ColorInfo
    lt1: ColorInfo
    dk2: ColorInfo
    lt2: ColorInfo
    accent1: ColorInfo
    accent2: ColorInfo
    accent3: ColorInfo
    accent4: ColorInfo
    accent5: ColorInfo
    accent6: ColorInfo
    hlink: ColorInfo
    fol_hlink: ColorInfo = Field(alias="folHlink")

    def slot(self, name: str) -> Optional[ColorInfo]:
        """Get a slot by its OOXML name (``folHlink`` included)."""
        if name == "folHlink":
            return self.fol_hlink
        if name in COLOR_SLOTS:
            return getattr(self, name)
        return None

    def as_dict(self) -> dict[str, ColorInfo]:
        return {name: self.slot(name) for name in COLOR_SLOTS}


class Theme(BaseModel):
    """A decoded theme part."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    number: int = Field(default=1, ge=1)
    part_name: Optional[str] = None
    color_scheme: ColorScheme
    font_scheme: FontScheme = Field(default_factory=FontScheme)


# ============================================================================
# Media & Presentation Models
# ============================================================================


class MediaFile(BaseModel):
    """An embedded media part."""

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    id: str
    name: str
    part_name: str
    kind: MediaKind
    size: int = Field(ge=0, description="Size in bytes")
    mime_type: str = "application/octet-stream"
    content_hash: Optional[str] = None
    data: Optional[bytes] = None


class Presentation(BaseModel):
    """Root of the decoded tree."""

    model_config = ConfigDict(frozen=True)

    slides: list[Slide] = Field(default_factory=list)
    masters: list[MasterSlide] = Field(default_factory=list)
    themes: list[Theme] = Field(default_factory=list)
    media: list[MediaFile] = Field(default_factory=list)
    slide_size: Size = Field(description="Natural slide size in pixels")
    canvas_size: Size = Field(description="Target canvas size in pixels")
    scale: float = Field(default=1.0, gt=0)
    slide_count: int = Field(default=0, ge=0)
    declared_slide_count: int = Field(default=0, ge=0)

    def get_slide(self, number: int) -> Optional[Slide]:
        for slide in self.slides:
            if slide.number == number:
                return slide
        return None

    def statistics(self) -> dict[str, int]:
        """Count elements by type plus text characters across all slides."""
        stats = {
            "slides": len(self.slides),
            "masters": len(self.masters),
            "themes": len(self.themes),
            "media": len(self.media),
            "text": 0,
            "shape": 0,
            "image": 0,
            "group": 0,
            "line": 0,
            "characters": 0,
        }
        for slide in self.slides:
            for element in iter_elements(slide.elements):
                stats[element.type] += 1
                body = getattr(element, "text_body", None)
                if body is not None:
                    stats["characters"] += len(body.text)
        return stats


# ============================================================================
# Import Settings & Results
# ============================================================================

TARGET_PRESETS: dict[str, tuple[int, int]] = {
    "1920x1080": (1920, 1080),
    "1280x720": (1280, 720),
}

MIN_CUSTOM_DIMENSION = 100
MAX_CUSTOM_DIMENSION = 4000


class TargetSlideSize(BaseModel):
    """The pixel canvas decoded slides are fitted to."""

    model_config = ConfigDict(frozen=True)

    preset: Literal["1920x1080", "1280x720", "custom"] = "1920x1080"
    width: Optional[int] = None
    height: Optional[int] = None

    @model_validator(mode="after")
    def _check_custom(self) -> "TargetSlideSize":
        if self.preset != "custom":
            return self
        for label, value in (("width", self.width), ("height", self.height)):
            if value is None:
                raise ValueError(f"Custom slide size requires a {label}")
            if not MIN_CUSTOM_DIMENSION <= value <= MAX_CUSTOM_DIMENSION:
                raise ValueError(
                    f"Custom slide {label} must be between {MIN_CUSTOM_DIMENSION} "
                    f"and {MAX_CUSTOM_DIMENSION} px, got {value}"
                )
        return self

    def dimensions(self) -> Size:
        """Resolve the target canvas in pixels."""
        if self.preset == "custom":
            return Size(width=self.width, height=self.height)
        width, height = TARGET_PRESETS[self.preset]
        return Size(width=width, height=height)


class ImportSettings(BaseModel):
    """Caller choices controlling which element kinds are emitted."""

    model_config = ConfigDict(frozen=True)

    include_master_background: bool = True
    import_images: bool = True
    import_shapes: bool = True
    import_text: bool = True
    target_slide_size: TargetSlideSize = Field(default_factory=TargetSlideSize)

    @model_validator(mode="after")
    def _check_kinds(self) -> "ImportSettings":
        if not (self.import_images or self.import_shapes or self.import_text):
            raise ValueError("At least one of images, shapes or text must be imported")
        return self


class ParseProgress(BaseModel):
    """A progress event emitted while decoding."""

    model_config = ConfigDict(frozen=True)

    stage: ParseStage
    progress: float = Field(ge=0.0, le=100.0)
    message: str = ""
    current_slide: Optional[int] = None
    total_slides: Optional[int] = None


class ParseResult(BaseModel):
    """Terminal outcome of a decode."""

    model_config = ConfigDict(frozen=True)

    success: bool
    data: Optional[Presentation] = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    processing_time_ms: float = Field(default=0.0, ge=0.0)
    cancelled: bool = False

    @model_validator(mode="after")
    def _no_data_on_failure(self) -> "ParseResult":
        if not self.success and self.data is not None:
            raise ValueError("A failed result cannot carry presentation data")
        return self
