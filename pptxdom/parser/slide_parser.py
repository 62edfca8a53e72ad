"""Parse slide and slide master parts.

Slides and masters share the ``p:cSld`` layout (name, background, shape
tree); the shape tree is handed to the element mapper. Layouts are never
emitted on their own but are read for the layout reference and for the
slide → layout → master → theme chain, through ``PartIndex``.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from pptxdom.dom.schema import (
    BackgroundSource,
    LayoutReference,
    MasterSlide,
    Slide,
    SlideBackground,
)
from pptxdom.errors import InvalidPartError, PPTXDomError
from pptxdom.mapper.element_mapper import ElementMapper, MappingContext
from pptxdom.parser.package import PPTXPackage, part_number
from pptxdom.parser.relationships import RT, Relationships, load_relationships
from pptxdom.parser.style_extractor import StyleExtractor
from pptxdom.parser.xml_tree import XmlNode, decode_xml


logger = logging.getLogger(__name__)


def master_id_for(part_name: Optional[str]) -> Optional[str]:
    """Stable id of a master part, e.g. ``master-1``."""
    if not part_name:
        return None
    return f"master-{part_number(part_name) or 1}"


def theme_id_for(part_name: Optional[str]) -> Optional[str]:
    """Stable id of a theme part, e.g. ``theme-1``."""
    if not part_name:
        return None
    return f"theme-{part_number(part_name) or 1}"


def extract_color_map(clr_map: Optional[XmlNode]) -> dict[str, str]:
    """Read ``<p:clrMap bg1="lt1" tx1="dk1" .../>`` into a dict."""
    if clr_map is None:
        return {}
    return {name: str(value) for name, value in clr_map.attrs.items()}


# ============================================================================
# Layout and master lookups
# ============================================================================


@dataclass(frozen=True)
class LayoutInfo:
    """What a slide needs to know about its layout."""

    part_name: str
    name: Optional[str] = None
    master_part: Optional[str] = None
    background: Optional[SlideBackground] = None


@dataclass(frozen=True)
class MasterInfo:
    """What a slide needs to know about its master."""

    part_name: str
    color_map: dict[str, str] = field(default_factory=dict)
    theme_part: Optional[str] = None
    background: Optional[SlideBackground] = None


class PartIndex:
    """Memoised layout and master lookups for one decode.

    Unreadable layouts and masters resolve to None; the master stage of the
    reader reports broken masters itself.
    """

    def __init__(self, package: PPTXPackage):
        self.package = package
        self.style_extractor = StyleExtractor()
        self._layouts: dict[str, Optional[LayoutInfo]] = {}
        self._masters: dict[str, Optional[MasterInfo]] = {}
        self._lock = threading.Lock()

    def layout(self, part_name: Optional[str]) -> Optional[LayoutInfo]:
        if not part_name:
            return None
        with self._lock:
            if part_name not in self._layouts:
                self._layouts[part_name] = self._load_layout(part_name)
            return self._layouts[part_name]

    def master(self, part_name: Optional[str]) -> Optional[MasterInfo]:
        if not part_name:
            return None
        with self._lock:
            if part_name not in self._masters:
                self._masters[part_name] = self._load_master(part_name)
            return self._masters[part_name]

    def _load_layout(self, part_name: str) -> Optional[LayoutInfo]:
        try:
            root = decode_xml(self.package.read(part_name), part_name)
            relationships = load_relationships(self.package, part_name)
        except PPTXDomError as exc:
            logger.warning(f"Layout {part_name} unreadable: {exc}")
            return None

        c_sld = root.first("cSld")
        master_rel = relationships.first_of_type(RT.SLIDE_MASTER)
        return LayoutInfo(
            part_name=part_name,
            name=c_sld.attr("name") if c_sld is not None else None,
            master_part=master_rel.part_name if master_rel is not None else None,
            background=self.style_extractor.extract_background(
                c_sld, BackgroundSource.LAYOUT, relationships
            ),
        )

    def _load_master(self, part_name: str) -> Optional[MasterInfo]:
        try:
            root = decode_xml(self.package.read(part_name), part_name)
            relationships = load_relationships(self.package, part_name)
        except PPTXDomError as exc:
            logger.debug(f"Master {part_name} unreadable: {exc}")
            return None

        theme_rel = relationships.first_of_type(RT.THEME)
        return MasterInfo(
            part_name=part_name,
            color_map=extract_color_map(root.first("clrMap")),
            theme_part=theme_rel.part_name if theme_rel is not None else None,
            background=self.style_extractor.extract_background(
                root.first("cSld"), BackgroundSource.MASTER, relationships
            ),
        )


# ============================================================================
# Slide and master parsers
# ============================================================================


@dataclass
class SlideParseResult:
    slide: Slide
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class MasterParseResult:
    master: MasterSlide
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class SlideParser:
    """Turns a decoded ``p:sld`` into a ``Slide``."""

    def __init__(self, part_index: Optional[PartIndex] = None):
        self.part_index = part_index
        self.style_extractor = StyleExtractor()

    def parse(
        self,
        root: XmlNode,
        number: int,
        part_name: str,
        slide_id: str,
        scale: float = 1.0,
        context: Optional[MappingContext] = None,
    ) -> SlideParseResult:
        """Parse one slide part.

        Args:
            root: Decoded slide part.
            number: 1-based position of the slide in the deck.
            part_name: Package path of the part.
            slide_id: Id of the slide, also the element id prefix.
            scale: Canvas scale.
            context: Mapping context carrying the slide's relationships.

        Returns:
            SlideParseResult with the mapper's warnings and errors.

        Raises:
            InvalidPartError: If the root element is not ``sld``.

        XML structure example:
            <p:sld show="0">
                <p:cSld name="Agenda">
                    <p:bg>...</p:bg>
                    <p:spTree>...</p:spTree>
                </p:cSld>
                <p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>
            </p:sld>
        """
        if not root.is_a("sld"):
            raise InvalidPartError(part_name, "sld", root.tag)

        context = context or MappingContext()
        c_sld = root.first("cSld")
        mapping = ElementMapper().map(
            c_sld.first("spTree") if c_sld is not None else None,
            number,
            slide_id,
            scale,
            context,
        )

        name = c_sld.attr("name") if c_sld is not None else None
        slide = Slide(
            id=slide_id,
            name=name or f"Slide {number}",
            number=number,
            part_name=part_name,
            elements=mapping.elements,
            background=self.style_extractor.extract_background(
                c_sld, BackgroundSource.SLIDE, context.relationships
            ),
            layout=self._layout_reference(context.relationships),
            hidden=root.attr("show") is not None and not root.bool_attr("show", True),
        )
        return SlideParseResult(slide=slide, warnings=mapping.warnings, errors=mapping.errors)

    def _layout_reference(self, relationships: Optional[Relationships]) -> Optional[LayoutReference]:
        if relationships is None:
            return None
        layout_rel = relationships.first_of_type(RT.SLIDE_LAYOUT)
        if layout_rel is None:
            return None

        info = self.part_index.layout(layout_rel.part_name) if self.part_index else None
        return LayoutReference(
            relationship_id=layout_rel.id,
            part_name=layout_rel.part_name,
            name=info.name if info is not None else None,
            master_id=master_id_for(info.master_part) if info is not None else None,
        )


class MasterParser:
    """Turns a decoded ``p:sldMaster`` into a ``MasterSlide``."""

    def __init__(self):
        self.style_extractor = StyleExtractor()

    def parse(
        self,
        root: XmlNode,
        number: int,
        part_name: str,
        scale: float = 1.0,
        context: Optional[MappingContext] = None,
    ) -> MasterParseResult:
        """Parse one slide master part.

        Raises:
            InvalidPartError: If the root element is not ``sldMaster``.

        XML structure example:
            <p:sldMaster>
                <p:cSld><p:bg>...</p:bg><p:spTree>...</p:spTree></p:cSld>
                <p:clrMap bg1="lt1" tx1="dk1" bg2="lt2" tx2="dk2" accent1="accent1" .../>
                <p:sldLayoutIdLst>
                    <p:sldLayoutId id="2147483649" r:id="rId1"/>
                </p:sldLayoutIdLst>
            </p:sldMaster>
        """
        if not root.is_a("sldMaster"):
            raise InvalidPartError(part_name, "sldMaster", root.tag)

        context = context or MappingContext(label="Master")
        relationships = context.relationships
        master_id = master_id_for(part_name)
        c_sld = root.first("cSld")
        mapping = ElementMapper().map(
            c_sld.first("spTree") if c_sld is not None else None,
            number,
            master_id,
            scale,
            context,
        )

        layout_ids: list[str] = []
        id_list = root.first("sldLayoutIdLst")
        if id_list is not None:
            for item in id_list.all("sldLayoutId"):
                rel_id = item.attr("r:id")
                target = relationships.target_part(rel_id) if relationships is not None else None
                layout_ids.append(target or rel_id or str(item.attr("id", "")))

        theme_rel = relationships.first_of_type(RT.THEME) if relationships is not None else None
        name = c_sld.attr("name") if c_sld is not None else None
        master = MasterSlide(
            id=master_id,
            name=name or f"Slide Master {number}",
            number=number,
            part_name=part_name,
            elements=mapping.elements,
            background=self.style_extractor.extract_background(
                c_sld, BackgroundSource.MASTER, relationships
            ),
            color_map=extract_color_map(root.first("clrMap")),
            layout_ids=layout_ids,
            theme_id=theme_id_for(theme_rel.part_name) if theme_rel is not None else None,
        )
        return MasterParseResult(master=master, warnings=mapping.warnings, errors=mapping.errors)
