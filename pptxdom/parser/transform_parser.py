"""Extract transformation properties from shape XML.

Parses <a:xfrm> (or <p:xfrm> on graphic frames) to extract offset, extent,
rotation and flips. Rotation is stored in 60,000ths of a degree in PPTX and
converted to degrees. Values stay in EMUs; the element mapper converts them.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict

from pptxdom.engine.units import angle_to_degrees, normalize_rotation
from pptxdom.parser.xml_tree import XmlNode


class Xfrm(BaseModel):
    """Raw transform of a shape in EMUs."""

    model_config = ConfigDict(frozen=True)

    x: int = 0
    y: int = 0
    cx: int = 0
    cy: int = 0
    rotation: float = 0.0
    flip_h: bool = False
    flip_v: bool = False
    # Group child coordinate space
    child_x: Optional[int] = None
    child_y: Optional[int] = None
    child_cx: Optional[int] = None
    child_cy: Optional[int] = None


@dataclass(frozen=True)
class CoordinateSpace:
    """Affine mapping from a (possibly nested) group's child space to slide EMUs."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    def map_point(self, x: float, y: float) -> tuple[float, float]:
        return self.offset_x + x * self.scale_x, self.offset_y + y * self.scale_y

    def map_size(self, cx: float, cy: float) -> tuple[float, float]:
        return cx * self.scale_x, cy * self.scale_y

    def nested(self, group: Xfrm) -> "CoordinateSpace":
        """Space of a group's children, given the group's own transform.

        A child at ``x`` lands at ``off.x + (x - chOff.x) * ext.cx / chExt.cx``
        in the group's parent space.
        """
        child_x = group.child_x if group.child_x is not None else group.x
        child_y = group.child_y if group.child_y is not None else group.y
        sx = group.cx / group.child_cx if group.child_cx else 1.0
        sy = group.cy / group.child_cy if group.child_cy else 1.0
        return CoordinateSpace(
            offset_x=self.offset_x + self.scale_x * (group.x - child_x * sx),
            offset_y=self.offset_y + self.scale_y * (group.y - child_y * sy),
            scale_x=self.scale_x * sx,
            scale_y=self.scale_y * sy,
        )


class TransformParser:
    """Extracts transformation properties from shape XML."""

    # Property containers holding the xfrm, by element kind
    PROPERTY_CONTAINERS = ("spPr", "grpSpPr")

    def find_xfrm(self, shape: XmlNode) -> Optional[XmlNode]:
        """Find the xfrm element of a shape.

        The xfrm element lives in different places depending on the shape type:
        - <p:sp><p:spPr><a:xfrm> for shapes, pictures and connectors
        - <p:grpSp><p:grpSpPr><a:xfrm> for groups
        - <p:graphicFrame><p:xfrm> for tables and charts
        """
        for container_name in self.PROPERTY_CONTAINERS:
            container = shape.first(container_name)
            if container is not None:
                xfrm = container.first("xfrm")
                if xfrm is not None:
                    return xfrm
        return shape.first("xfrm")

    def extract_transform(self, shape: XmlNode) -> Xfrm:
        """Extract transform properties from a shape.

        A missing xfrm yields a zero-size transform at the origin.

        Args:
            shape: The shape element (``p:sp``, ``p:pic``, ``p:grpSp``...).

        Returns:
            Xfrm in EMUs and degrees.

        XML structure example:
            <a:xfrm rot="5400000" flipH="1" flipV="0">
                <a:off x="914400" y="914400"/>
                <a:ext cx="2743200" cy="914400"/>
                <a:chOff x="0" y="0"/>   <!-- groups only -->
                <a:chExt cx="2743200" cy="914400"/>
            </a:xfrm>
        """
        xfrm = self.find_xfrm(shape)
        if xfrm is None:
            return Xfrm()

        off = xfrm.first("off")
        ext = xfrm.first("ext")
        ch_off = xfrm.first("chOff")
        ch_ext = xfrm.first("chExt")

        return Xfrm(
            x=off.int_attr("x", 0) if off is not None else 0,
            y=off.int_attr("y", 0) if off is not None else 0,
            cx=max(ext.int_attr("cx", 0), 0) if ext is not None else 0,
            cy=max(ext.int_attr("cy", 0), 0) if ext is not None else 0,
            rotation=normalize_rotation(angle_to_degrees(xfrm.float_attr("rot", 0.0))),
            flip_h=xfrm.bool_attr("flipH"),
            flip_v=xfrm.bool_attr("flipV"),
            child_x=ch_off.int_attr("x", 0) if ch_off is not None else None,
            child_y=ch_off.int_attr("y", 0) if ch_off is not None else None,
            child_cx=ch_ext.int_attr("cx", 0) if ch_ext is not None else None,
            child_cy=ch_ext.int_attr("cy", 0) if ch_ext is not None else None,
        )
