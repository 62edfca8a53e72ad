"""Translation of shape trees into domain elements."""

from pptxdom.mapper.element_mapper import ElementMapper, MappingContext, MappingResult
from pptxdom.mapper.theme_applier import ResolvedTheme, ThemeApplier

__all__ = [
    "ElementMapper",
    "MappingContext",
    "MappingResult",
    "ResolvedTheme",
    "ThemeApplier",
]
