"""Exception hierarchy for the decoding pipeline.

Only package-level failures and a broken presentation part abort a decode.
Everything else is raised by the lower layers and converted into warnings by
the mapper and the reader.
"""


class PPTXDomError(Exception):
    """Base class for all decoder errors."""


class PackageError(PPTXDomError):
    """The package as a whole cannot be used."""


class PackageCorruptError(PackageError):
    """The byte stream is not a readable ZIP archive."""


class PackageTooLargeError(PackageError):
    """The package exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Package is {size} bytes, limit is {limit} bytes")


class PartNotFoundError(PPTXDomError, KeyError):
    """A named part does not exist in the package."""

    def __init__(self, part_name: str):
        self.part_name = part_name
        super().__init__(part_name)

    def __str__(self) -> str:
        return f"Part not found: {self.part_name}"


class MalformedXMLError(PPTXDomError):
    """An XML part could not be parsed."""

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        offset: int | None = None,
        part_name: str | None = None,
    ):
        self.line = line
        self.column = column
        self.offset = offset
        self.part_name = part_name
        location = []
        if part_name:
            location.append(part_name)
        if line is not None:
            location.append(f"line {line}, column {column}")
        if offset is not None:
            location.append(f"byte offset {offset}")
        suffix = f" ({', '.join(location)})" if location else ""
        super().__init__(f"Malformed XML{suffix}: {message}")


class InvalidPartError(PPTXDomError):
    """A part parsed as XML but its root element is not what was expected."""

    def __init__(self, part_name: str, expected: str, found: str):
        self.part_name = part_name
        self.expected = expected
        self.found = found
        super().__init__(
            f"Unexpected root element in {part_name}: expected <{expected}>, found <{found}>"
        )


class PresentationPartError(PPTXDomError):
    """The mandatory presentation part is missing or unusable."""
