"""Namespace-agnostic XML tree for OOXML parts.

Parts are parsed with lxml into an immutable ``XmlNode`` tree. Lookups match
the local name of a tag regardless of the prefix a producer chose, so
``first("sp")`` and ``first("p:sp")`` find the same child. Namespaced
attributes are keyed by a canonical prefix (``r:id``), which keeps
``id`` and ``r:id`` on the same element apart.
"""

import logging
import re
from typing import Any, Iterator, Optional, Union

from lxml import etree

from pptxdom.errors import MalformedXMLError


logger = logging.getLogger(__name__)

# Canonical prefixes for the namespaces found in presentation parts
NAMESPACES = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "mc": "http://schemas.openxmlformats.org/markup-compatibility/2006",
    "c": "http://schemas.openxmlformats.org/drawingml/2006/chart",
    "dgm": "http://schemas.openxmlformats.org/drawingml/2006/diagram",
    "pic": "http://schemas.openxmlformats.org/drawingml/2006/picture",
    "a14": "http://schemas.microsoft.com/office/drawing/2010/main",
    "p14": "http://schemas.microsoft.com/office/powerpoint/2010/main",
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
    "xml": "http://www.w3.org/XML/1998/namespace",
}
_PREFIX_FOR_NAMESPACE = {uri: prefix for prefix, uri in NAMESPACES.items()}

ATTRIBUTE_PREFIX = "@"
TEXT_KEY = "#text"

_INT_PATTERN = re.compile(r"^-?(0|[1-9]\d*)$")
_FLOAT_PATTERN = re.compile(r"^-?(0|[1-9]\d*)\.\d+$")

_TRUE_VALUES = frozenset({"true", "1", "on"})
_FALSE_VALUES = frozenset({"false", "0", "off"})


def local_name(name: str) -> str:
    """Strip a ``prefix:`` or ``{namespace}`` qualifier from a name."""
    if "}" in name:
        return name.split("}", 1)[1]
    if ":" in name:
        return name.split(":", 1)[1]
    return name


def coerce_attribute(value: str) -> Union[str, int, float, bool]:
    """Coerce numeric and boolean attribute strings for the generic view.

    Hex-like strings with leading zeros (``"000000"``) are left alone.
    """
    if value in ("true", "false"):
        return value == "true"
    if _INT_PATTERN.match(value):
        return int(value)
    if _FLOAT_PATTERN.match(value):
        return float(value)
    return value


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    """Interpret an OOXML boolean attribute value."""
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


class XmlNode:
    """An element of a decoded part.

    Attributes:
        tag: Local tag name without prefix.
        prefix: Canonical prefix of the tag's namespace, or None.
        attrs: Attribute values keyed by local name, or ``prefix:local``
            for namespaced attributes.
        children: Child elements in document order.
        text: Direct text content of the element, unstripped.
        line: Source line the element started on, when known.
    """

    __slots__ = ("tag", "prefix", "attrs", "children", "text", "line")

    def __init__(
        self,
        tag: str,
        prefix: Optional[str] = None,
        attrs: Optional[dict[str, str]] = None,
        children: tuple["XmlNode", ...] = (),
        text: Optional[str] = None,
        line: Optional[int] = None,
    ):
        self.tag = tag
        self.prefix = prefix
        self.attrs = attrs or {}
        self.children = tuple(children)
        self.text = text
        self.line = line

    def __repr__(self) -> str:
        return f"<XmlNode {self.qualified_name} attrs={len(self.attrs)} children={len(self.children)}>"

    def __iter__(self) -> Iterator["XmlNode"]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    @property
    def local_name(self) -> str:
        return self.tag

    @property
    def qualified_name(self) -> str:
        return f"{self.prefix}:{self.tag}" if self.prefix else self.tag

    def is_a(self, *names: str) -> bool:
        """Check whether this element's local name is one of ``names``."""
        return self.tag in {local_name(name) for name in names}

    # ------------------------------------------------------------------
    # Child lookups
    # ------------------------------------------------------------------

    def first(self, name: str) -> Optional["XmlNode"]:
        """Get the first child whose local name matches."""
        wanted = local_name(name)
        for child in self.children:
            if child.tag == wanted:
                return child
        return None

    def all(self, name: str) -> list["XmlNode"]:
        """Get every child whose local name matches, in document order."""
        wanted = local_name(name)
        return [child for child in self.children if child.tag == wanted]

    def find(self, *path: str) -> Optional["XmlNode"]:
        """Follow a chain of first-child lookups.

        Example:
            sp.find("spPr", "xfrm", "off")
        """
        node: Optional[XmlNode] = self
        for name in path:
            if node is None:
                return None
            node = node.first(name)
        return node

    def first_of(self, *names: str) -> Optional["XmlNode"]:
        """Get the first child matching any of ``names``."""
        wanted = {local_name(name) for name in names}
        for child in self.children:
            if child.tag in wanted:
                return child
        return None

    def descendants(self, name: Optional[str] = None) -> Iterator["XmlNode"]:
        """Walk all descendants depth-first, optionally filtered by local name."""
        wanted = local_name(name) if name else None
        for child in self.children:
            if wanted is None or child.tag == wanted:
                yield child
            yield from child.descendants(name)

    # ------------------------------------------------------------------
    # Attribute accessors
    # ------------------------------------------------------------------

    def attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get an attribute value.

        A prefixed name (``r:embed``) also matches the same local name under
        any other prefix; an unprefixed name only matches unprefixed attributes.
        """
        if name in self.attrs:
            return self.attrs[name]
        if ":" in name:
            suffix = ":" + local_name(name)
            for key, value in self.attrs.items():
                if key.endswith(suffix):
                    return value
        return default

    def int_attr(self, name: str, default: Optional[int] = None) -> Optional[int]:
        """Get an attribute as int, falling back to ``default`` when absent or invalid."""
        value = self.attr(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            try:
                return int(float(value))
            except (ValueError, OverflowError):
                return default

    def float_attr(self, name: str, default: Optional[float] = None) -> Optional[float]:
        """Get an attribute as float, falling back to ``default`` when absent or invalid."""
        value = self.attr(name)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    def bool_attr(self, name: str, default: bool = False) -> bool:
        """Get an OOXML boolean attribute (true/1/on, false/0/off)."""
        return parse_bool(self.attr(name), default)

    @property
    def text_content(self) -> str:
        """Own text plus all descendant text, in document order."""
        parts = [self.text or ""]
        parts.extend(child.text_content for child in self.children)
        return "".join(parts)

    # ------------------------------------------------------------------
    # Generic view
    # ------------------------------------------------------------------

    def to_generic(self) -> dict[str, Any]:
        """Render the attributed generic map of this element.

        Attributes appear under ``@name`` keys with numeric and boolean
        coercion, text under ``#text``, and child tags under their qualified
        name; a tag that repeats maps to a list.

        Example:
            <p:sldIdLst><p:sldId id="256" r:id="rId2"/></p:sldIdLst>
            -> {"p:sldId": {"@id": 256, "@r:id": "rId2"}}
        """
        result: dict[str, Any] = {
            f"{ATTRIBUTE_PREFIX}{key}": coerce_attribute(value)
            for key, value in self.attrs.items()
        }
        if self.text is not None and self.text.strip():
            result[TEXT_KEY] = self.text.strip()
        for child in self.children:
            key = child.qualified_name
            rendered = child.to_generic()
            if key not in result:
                result[key] = rendered
            elif isinstance(result[key], list):
                result[key].append(rendered)
            else:
                result[key] = [result[key], rendered]
        return result


def _prefix_for(namespace: Optional[str], nsmap: dict) -> Optional[str]:
    if not namespace:
        return None
    if namespace in _PREFIX_FOR_NAMESPACE:
        return _PREFIX_FOR_NAMESPACE[namespace]
    for prefix, uri in nsmap.items():
        if uri == namespace and prefix:
            return prefix
    return "ns"


def _convert(element: Any) -> XmlNode:
    qname = etree.QName(element)
    nsmap = element.nsmap
    attrs: dict[str, str] = {}
    for key, value in element.attrib.items():
        attr_name = etree.QName(key)
        attr_prefix = _prefix_for(attr_name.namespace, nsmap)
        if attr_prefix:
            attrs[f"{attr_prefix}:{attr_name.localname}"] = value
        else:
            attrs[attr_name.localname] = value

    children = tuple(
        _convert(child) for child in element if isinstance(child.tag, str)
    )
    return XmlNode(
        tag=qname.localname,
        prefix=_prefix_for(qname.namespace, nsmap),
        attrs=attrs,
        children=children,
        text=element.text,
        line=element.sourceline,
    )


def _byte_offset(data: bytes, line: int, column: int) -> int:
    lines = data.split(b"\n")
    offset = sum(len(chunk) + 1 for chunk in lines[: max(line - 1, 0)])
    return offset + max(column - 1, 0)


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
        huge_tree=False,
    )


def decode_xml(data: Union[bytes, str], part_name: Optional[str] = None) -> XmlNode:
    """Parse an XML part into an ``XmlNode`` tree.

    Args:
        data: Raw part bytes or text.
        part_name: Package path, used only in error messages.

    Returns:
        The root element.

    Raises:
        MalformedXMLError: If the input is not well-formed XML.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else data
    if not raw.strip():
        raise MalformedXMLError("Document is empty", offset=0, part_name=part_name)

    try:
        root = etree.fromstring(raw, _make_parser())
    except etree.XMLSyntaxError as exc:
        line, column = exc.position if exc.position else (None, None)
        offset = _byte_offset(raw, line, column) if line is not None else None
        logger.debug(f"XML syntax error in {part_name or '<memory>'}: {exc.msg}")
        raise MalformedXMLError(
            exc.msg or str(exc),
            line=line,
            column=column,
            offset=offset,
            part_name=part_name,
        ) from exc

    return _convert(root)
