"""pptxdom - decode PowerPoint packages into a normalized document model.

Decodes a PPTX byte buffer into a render-agnostic ``Presentation`` tree:
- Slides, slide masters, themes and media parts
- Shapes, text boxes, images, lines and groups with pixel geometry
- Fills, strokes and effects with theme colors resolved to RGB
- Paragraphs and runs with character formatting and hyperlinks

Example:
    from pptxdom import decode_pptx

    result = decode_pptx(data, file_name="deck.pptx")
    for warning in result.warnings:
        print(warning)
"""

from pptxdom.config import Settings, get_settings
from pptxdom.dom.schema import (
    ImportSettings,
    ParseProgress,
    ParseResult,
    Presentation,
    TargetSlideSize,
)
from pptxdom.errors import (
    InvalidPartError,
    MalformedXMLError,
    PackageCorruptError,
    PackageError,
    PackageTooLargeError,
    PartNotFoundError,
    PPTXDomError,
    PresentationPartError,
)
from pptxdom.parser.pptx_reader import CancellationToken, PPTXReader, decode_pptx

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "ImportSettings",
    "InvalidPartError",
    "MalformedXMLError",
    "PackageCorruptError",
    "PackageError",
    "PackageTooLargeError",
    "ParseProgress",
    "ParseResult",
    "PartNotFoundError",
    "PPTXDomError",
    "PPTXReader",
    "Presentation",
    "PresentationPartError",
    "Settings",
    "TargetSlideSize",
    "decode_pptx",
    "get_settings",
]
