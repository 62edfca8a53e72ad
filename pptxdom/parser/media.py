"""Classify media parts by file extension."""

import posixpath
from typing import Optional

from pptxdom.dom.schema import MediaKind

MEDIA_TYPES: dict[str, tuple[MediaKind, str]] = {
    # Images
    ".jpg": (MediaKind.IMAGE, "image/jpeg"),
    ".jpeg": (MediaKind.IMAGE, "image/jpeg"),
    ".png": (MediaKind.IMAGE, "image/png"),
    ".gif": (MediaKind.IMAGE, "image/gif"),
    ".bmp": (MediaKind.IMAGE, "image/bmp"),
    ".svg": (MediaKind.IMAGE, "image/svg+xml"),
    ".tif": (MediaKind.IMAGE, "image/tiff"),
    ".tiff": (MediaKind.IMAGE, "image/tiff"),
    ".emf": (MediaKind.IMAGE, "image/x-emf"),
    ".wmf": (MediaKind.IMAGE, "image/x-wmf"),
    ".webp": (MediaKind.IMAGE, "image/webp"),
    # Video
    ".mp4": (MediaKind.VIDEO, "video/mp4"),
    ".avi": (MediaKind.VIDEO, "video/x-msvideo"),
    ".mov": (MediaKind.VIDEO, "video/quicktime"),
    ".wmv": (MediaKind.VIDEO, "video/x-ms-wmv"),
    ".m4v": (MediaKind.VIDEO, "video/x-m4v"),
    # Audio
    ".mp3": (MediaKind.AUDIO, "audio/mpeg"),
    ".wav": (MediaKind.AUDIO, "audio/wav"),
    ".m4a": (MediaKind.AUDIO, "audio/mp4"),
    ".wma": (MediaKind.AUDIO, "audio/x-ms-wma"),
    ".aac": (MediaKind.AUDIO, "audio/aac"),
    ".ogg": (MediaKind.AUDIO, "audio/ogg"),
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def _extension(part_name: str) -> str:
    return posixpath.splitext(part_name)[1].lower()


def media_type_for(part_name: str) -> Optional[tuple[MediaKind, str]]:
    """``(kind, mime_type)`` for a media part, or None for unknown extensions."""
    return MEDIA_TYPES.get(_extension(part_name))


def mime_type_for(part_name: str) -> str:
    media_type = media_type_for(part_name)
    return media_type[1] if media_type else DEFAULT_MIME_TYPE
