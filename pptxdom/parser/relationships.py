"""Parse OPC relationship parts (``_rels/*.rels``).

Every part that points at another part (slide → layout, master → theme,
slide → image, run → hyperlink) does so through a relationship id resolved
here.

XML structure example:
    <Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
        <Relationship Id="rId1"
            Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/slideLayout"
            Target="../slideLayouts/slideLayout1.xml"/>
        <Relationship Id="rId2"
            Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink"
            Target="https://example.com" TargetMode="External"/>
    </Relationships>
"""

import posixpath
from dataclasses import dataclass, field
from typing import Optional

from pptx.opc.constants import RELATIONSHIP_TARGET_MODE as RTM
from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from pptxdom.parser.package import PPTXPackage
from pptxdom.parser.xml_tree import decode_xml

__all__ = ["RT", "Relationship", "Relationships", "load_relationships", "rels_path_for"]


def rels_path_for(part_name: str) -> str:
    """Path of the relationship part belonging to ``part_name``.

    Example:
        rels_path_for("ppt/slides/slide1.xml") -> "ppt/slides/_rels/slide1.xml.rels"
    """
    directory, name = posixpath.split(part_name)
    return posixpath.join(directory, "_rels", f"{name}.rels")


def resolve_target(source_part: str, target: str) -> str:
    """Resolve a relative relationship target against its source part."""
    if target.startswith("/"):
        return posixpath.normpath(target.lstrip("/"))
    base = posixpath.dirname(source_part)
    return posixpath.normpath(posixpath.join(base, target))


def _type_suffix(rel_type: str) -> str:
    # Strict OOXML uses different URIs with the same final segment
    return rel_type.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class Relationship:
    """A single relationship entry."""

    id: str
    type: str
    target: str
    external: bool = False
    part_name: Optional[str] = None

    def is_type(self, rel_type: str) -> bool:
        return _type_suffix(self.type) == _type_suffix(rel_type)


@dataclass
class Relationships:
    """Relationship table of one source part."""

    source: str
    by_id: dict[str, Relationship] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.by_id)

    def __contains__(self, rel_id: str) -> bool:
        return rel_id in self.by_id

    def get(self, rel_id: Optional[str]) -> Optional[Relationship]:
        if rel_id is None:
            return None
        return self.by_id.get(rel_id)

    def target_part(self, rel_id: Optional[str]) -> Optional[str]:
        """Internal part name a relationship id points to."""
        rel = self.get(rel_id)
        return rel.part_name if rel is not None else None

    def url(self, rel_id: Optional[str]) -> Optional[str]:
        """Raw target of a relationship, used for hyperlinks."""
        rel = self.get(rel_id)
        return rel.target if rel is not None else None

    def of_type(self, rel_type: str) -> list[Relationship]:
        return [rel for rel in self.by_id.values() if rel.is_type(rel_type)]

    def first_of_type(self, rel_type: str) -> Optional[Relationship]:
        matches = self.of_type(rel_type)
        return matches[0] if matches else None


def parse_relationships(source: str, data: bytes) -> Relationships:
    """Decode a ``.rels`` part.

    Raises:
        MalformedXMLError: If the part is not well-formed XML.
    """
    root = decode_xml(data, rels_path_for(source))
    table = Relationships(source=source)
    for node in root.all("Relationship"):
        rel_id = node.attr("Id")
        target = node.attr("Target")
        if not rel_id or target is None:
            continue
        external = node.attr("TargetMode") == RTM.EXTERNAL
        table.by_id[rel_id] = Relationship(
            id=rel_id,
            type=node.attr("Type", ""),
            target=target,
            external=external,
            part_name=None if external else resolve_target(source, target),
        )
    return table


def load_relationships(package: PPTXPackage, source: str) -> Relationships:
    """Load the relationships of ``source``; an absent rels part yields an empty table."""
    path = rels_path_for(source)
    if not package.has(path):
        return Relationships(source=source)
    return parse_relationships(source, package.read(path))
