"""Read-only access to the parts of a PPTX package.

A PPTX file is a ZIP archive of XML and binary parts. ``PPTXPackage`` indexes
the archive directory up front and only inflates a part when it is read.
"""

import io
import logging
import posixpath
import re
import threading
import zipfile
import zlib
from dataclasses import dataclass
from typing import Optional

from pptxdom.errors import (
    PackageCorruptError,
    PackageTooLargeError,
    PartNotFoundError,
)


logger = logging.getLogger(__name__)

PRESENTATION_PART = "ppt/presentation.xml"
SLIDES_DIR = "ppt/slides"
SLIDE_MASTERS_DIR = "ppt/slideMasters"
SLIDE_LAYOUTS_DIR = "ppt/slideLayouts"
THEMES_DIR = "ppt/theme"
MEDIA_DIR = "ppt/media"

_TRAILING_NUMBER = re.compile(r"(\d+)(?=\.[^./]+$)")


@dataclass(frozen=True)
class PackageEntry:
    """One entry of the archive directory."""

    path: str
    is_dir: bool
    size: int
    compressed_size: int


def part_number(part_name: str) -> Optional[int]:
    """Extract the trailing integer of a part's file name.

    Example:
        part_number("ppt/slides/slide12.xml") -> 12
    """
    match = _TRAILING_NUMBER.search(posixpath.basename(part_name))
    return int(match.group(1)) if match else None


class PPTXPackage:
    """Lazily extracted view over a PPTX archive.

    Reads are serialized with a lock so slide parsing threads can share one
    package.
    """

    def __init__(self, archive: zipfile.ZipFile):
        self._archive = archive
        self._lock = threading.Lock()
        self._entries: dict[str, PackageEntry] = {}
        for info in archive.infolist():
            path = info.filename.lstrip("/")
            self._entries[path] = PackageEntry(
                path=path,
                is_dir=info.is_dir(),
                size=info.file_size,
                compressed_size=info.compress_size,
            )

    @classmethod
    def from_bytes(cls, data: bytes, max_size: Optional[int] = None) -> "PPTXPackage":
        """Open a package held in memory.

        Args:
            data: Raw package bytes.
            max_size: Optional upper bound on ``len(data)``.

        Returns:
            The opened package.

        Raises:
            PackageTooLargeError: If ``data`` exceeds ``max_size``.
            PackageCorruptError: If ``data`` is not a ZIP archive.
        """
        if max_size is not None and len(data) > max_size:
            raise PackageTooLargeError(len(data), max_size)
        if not data:
            raise PackageCorruptError("Package is empty")

        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as exc:
            raise PackageCorruptError(f"Not a valid ZIP archive: {exc}") from exc

        package = cls(archive)
        logger.debug(f"Opened package with {len(package._entries)} entries")
        return package

    def __enter__(self) -> "PPTXPackage":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._archive.close()

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_entries(self) -> list[PackageEntry]:
        """All archive entries, files and directories alike."""
        return list(self._entries.values())

    def entries_under(self, prefix: str) -> list[PackageEntry]:
        """Entries whose path starts with ``prefix``."""
        return [entry for path, entry in self._entries.items() if path.startswith(prefix)]

    def has(self, path: str) -> bool:
        entry = self._entries.get(path.lstrip("/"))
        return entry is not None and not entry.is_dir

    def numbered_parts(self, directory: str, stem: str, extension: str = ".xml") -> list[str]:
        """Part names like ``<directory>/<stem>N<extension>`` ordered by N.

        Archive enumeration order is ignored.
        """
        pattern = re.compile(
            rf"^{re.escape(directory)}/{re.escape(stem)}(\d+){re.escape(extension)}$"
        )
        found = []
        for path, entry in self._entries.items():
            if entry.is_dir:
                continue
            match = pattern.match(path)
            if match:
                found.append((int(match.group(1)), path))
        return [path for _, path in sorted(found)]

    def files_under(self, directory: str) -> list[str]:
        """Non-directory part names directly or indirectly under ``directory``."""
        prefix = directory.rstrip("/") + "/"
        return sorted(
            entry.path for entry in self.entries_under(prefix) if not entry.is_dir
        )

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read(self, path: str) -> bytes:
        """Inflate a part.

        Raises:
            PartNotFoundError: If no such file part exists.
            PackageCorruptError: If the part's compressed data is damaged.
        """
        path = path.lstrip("/")
        if not self.has(path):
            raise PartNotFoundError(path)
        try:
            with self._lock:
                return self._archive.read(path)
        except (zipfile.BadZipFile, zlib.error) as exc:
            raise PackageCorruptError(f"Cannot inflate {path}: {exc}") from exc

    def size_of(self, path: str) -> int:
        entry = self._entries.get(path.lstrip("/"))
        if entry is None:
            raise PartNotFoundError(path)
        return entry.size

