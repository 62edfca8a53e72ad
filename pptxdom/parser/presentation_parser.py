"""Parse ``ppt/presentation.xml``.

Extracts the ordered slide and master reference lists and the natural slide
size. Themes are not listed in the part itself, so theme references come from
the presentation's relationship table.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pptxdom.dom.schema import Size
from pptxdom.engine.units import (
    DEFAULT_SLIDE_HEIGHT_EMU,
    DEFAULT_SLIDE_WIDTH_EMU,
    emu_to_pixels,
)
from pptxdom.errors import InvalidPartError
from pptxdom.parser.package import PRESENTATION_PART, part_number
from pptxdom.parser.relationships import RT, Relationships
from pptxdom.parser.xml_tree import XmlNode


logger = logging.getLogger(__name__)


class PartReference(BaseModel):
    """A numeric id plus relationship id pair from an id list."""

    model_config = ConfigDict(frozen=True)

    id: int
    relationship_id: Optional[str] = None
    part_name: Optional[str] = None


class PresentationInfo(BaseModel):
    """Typed content of the presentation part."""

    model_config = ConfigDict(frozen=True)

    slide_refs: list[PartReference] = Field(default_factory=list)
    master_refs: list[PartReference] = Field(default_factory=list)
    theme_refs: list[PartReference] = Field(default_factory=list)
    slide_width_emu: int = Field(default=DEFAULT_SLIDE_WIDTH_EMU, gt=0)
    slide_height_emu: int = Field(default=DEFAULT_SLIDE_HEIGHT_EMU, gt=0)
    notes_width_emu: Optional[int] = None
    notes_height_emu: Optional[int] = None
    warnings: list[str] = Field(default_factory=list)

    @property
    def slide_size(self) -> Size:
        """Natural slide size in pixels."""
        return Size(
            width=emu_to_pixels(self.slide_width_emu),
            height=emu_to_pixels(self.slide_height_emu),
        )

    @property
    def declared_slide_count(self) -> int:
        return len(self.slide_refs)

    def slide_id_for_part(self, part_name: str) -> Optional[int]:
        """The ``sldId@id`` whose relationship targets ``part_name``."""
        for ref in self.slide_refs:
            if ref.part_name == part_name:
                return ref.id
        return None


class PresentationParser:
    """Extracts reference lists and slide size from the presentation part."""

    def parse(
        self,
        root: XmlNode,
        relationships: Optional[Relationships] = None,
    ) -> PresentationInfo:
        """Parse the presentation part.

        Args:
            root: Decoded ``p:presentation`` element.
            relationships: The part's relationship table, used to map
                relationship ids to slide and master part names.

        Returns:
            PresentationInfo with every absent field defaulted.

        Raises:
            InvalidPartError: If the root element is not ``presentation``.

        XML structure example:
            <p:presentation>
                <p:sldMasterIdLst><p:sldMasterId id="2147483648" r:id="rId1"/></p:sldMasterIdLst>
                <p:sldIdLst><p:sldId id="256" r:id="rId2"/></p:sldIdLst>
                <p:sldSz cx="9144000" cy="6858000" type="screen4x3"/>
                <p:notesSz cx="6858000" cy="9144000"/>
            </p:presentation>
        """
        if not root.is_a("presentation"):
            raise InvalidPartError(PRESENTATION_PART, "presentation", root.tag)

        slide_refs = self._extract_refs(root.first("sldIdLst"), "sldId", relationships)
        master_refs = self._extract_refs(
            root.first("sldMasterIdLst"), "sldMasterId", relationships
        )
        theme_refs = self._extract_theme_refs(relationships)

        warnings: list[str] = []
        width, height = DEFAULT_SLIDE_WIDTH_EMU, DEFAULT_SLIDE_HEIGHT_EMU
        sld_sz = root.first("sldSz")
        if sld_sz is not None:
            cx = sld_sz.int_attr("cx", width)
            cy = sld_sz.int_attr("cy", height)
            if cx > 0 and cy > 0:
                width, height = cx, cy
            else:
                message = (
                    f"Invalid slide size {cx}x{cy} EMU; using {width}x{height} EMU"
                )
                logger.warning(message)
                warnings.append(message)

        notes_width = notes_height = None
        notes_sz = root.first("notesSz")
        if notes_sz is not None:
            notes_width = notes_sz.int_attr("cx")
            notes_height = notes_sz.int_attr("cy")

        info = PresentationInfo(
            slide_refs=slide_refs,
            master_refs=master_refs,
            theme_refs=theme_refs,
            slide_width_emu=width,
            slide_height_emu=height,
            notes_width_emu=notes_width,
            notes_height_emu=notes_height,
            warnings=warnings,
        )
        logger.debug(
            f"Presentation declares {len(slide_refs)} slides, "
            f"{len(master_refs)} masters, size {width}x{height} EMU"
        )
        return info

    def _extract_refs(
        self,
        id_list: Optional[XmlNode],
        item_name: str,
        relationships: Optional[Relationships],
    ) -> list[PartReference]:
        if id_list is None:
            return []

        refs: list[PartReference] = []
        for position, item in enumerate(id_list.all(item_name), start=1):
            rel_id = item.attr("r:id")
            refs.append(
                PartReference(
                    id=item.int_attr("id", position),
                    relationship_id=rel_id,
                    part_name=relationships.target_part(rel_id) if relationships else None,
                )
            )
        return refs

    def _extract_theme_refs(self, relationships: Optional[Relationships]) -> list[PartReference]:
        if relationships is None:
            return []

        refs = [
            PartReference(
                id=part_number(rel.part_name) or 0,
                relationship_id=rel.id,
                part_name=rel.part_name,
            )
            for rel in relationships.of_type(RT.THEME)
            if rel.part_name
        ]
        return sorted(refs, key=lambda ref: ref.id)
