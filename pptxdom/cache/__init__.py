"""Per-decode caches threaded through the mapper."""

from pptxdom.cache.image_cache import ImageCache
from pptxdom.cache.theme_cache import ThemeCache

__all__ = ["ImageCache", "ThemeCache"]
