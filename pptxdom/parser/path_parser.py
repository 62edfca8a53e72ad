"""Extract Bezier path commands from custom geometry.

Parses <a:custGeom><a:pathLst> XML to extract moveTo, lineTo, cubicBezTo,
quadBezTo, arcTo, and close commands. Coordinates are scaled from path
space to element-local pixels.
"""

from typing import Optional

from pptxdom.dom.schema import PathCommand, PathCommandType, Point
from pptxdom.engine.units import angle_to_degrees
from pptxdom.parser.xml_tree import XmlNode


class PathParser:
    """Extracts path commands from custom geometry XML."""

    def extract_path_commands(
        self,
        cust_geom: Optional[XmlNode],
        width: float,
        height: float,
        extent_cx: int = 0,
        extent_cy: int = 0,
    ) -> list[PathCommand]:
        """Extract path commands from a custom geometry element.

        Args:
            cust_geom: The <a:custGeom> element.
            width: Element width in pixels for coordinate scaling.
            height: Element height in pixels for coordinate scaling.
            extent_cx: Shape width in EMUs, the path space when a path has no ``w``.
            extent_cy: Shape height in EMUs, the path space when a path has no ``h``.

        Returns:
            List of PathCommand objects in element-local pixels.
        """
        commands: list[PathCommand] = []
        if cust_geom is None:
            return commands

        path_lst = cust_geom.first("pathLst")
        if path_lst is None:
            return commands

        for path_elem in path_lst.all("path"):
            commands.extend(
                self._parse_path_element(path_elem, width, height, extent_cx, extent_cy)
            )

        return commands

    def extract_points(self, commands: list[PathCommand]) -> list[Point]:
        """Polygon vertices: the end point of every move, line and curve command."""
        return [
            Point(x=cmd.x, y=cmd.y)
            for cmd in commands
            if cmd.type != PathCommandType.CLOSE and cmd.x is not None and cmd.y is not None
        ]

    def _parse_path_element(
        self,
        path_elem: XmlNode,
        width: float,
        height: float,
        extent_cx: int,
        extent_cy: int,
    ) -> list[PathCommand]:
        """Parse a single <a:path> element.

        The path's own ``w``/``h`` define its coordinate space; when absent,
        coordinates are shape EMUs and the extent is used instead.
        """
        commands: list[PathCommand] = []

        path_width = path_elem.int_attr("w", 0) or extent_cx
        path_height = path_elem.int_attr("h", 0) or extent_cy
        scale_x = width / path_width if path_width > 0 else 1.0
        scale_y = height / path_height if path_height > 0 else 1.0

        for child in path_elem:
            cmd = self._parse_command(child, scale_x, scale_y)
            if cmd:
                commands.append(cmd)

        return commands

    def _parse_command(
        self,
        elem: XmlNode,
        scale_x: float,
        scale_y: float,
    ) -> Optional[PathCommand]:
        """Parse a single path command element."""
        if elem.tag == "moveTo":
            return self._parse_point_command(elem, PathCommandType.MOVE_TO, scale_x, scale_y)
        elif elem.tag == "lnTo":
            return self._parse_point_command(elem, PathCommandType.LINE_TO, scale_x, scale_y)
        elif elem.tag == "cubicBezTo":
            return self._parse_cubic_bezier(elem, scale_x, scale_y)
        elif elem.tag == "quadBezTo":
            return self._parse_quad_bezier(elem, scale_x, scale_y)
        elif elem.tag == "arcTo":
            return self._parse_arc_to(elem, scale_x, scale_y)
        elif elem.tag == "close":
            return PathCommand(type=PathCommandType.CLOSE)

        return None

    def _scaled(self, pt: XmlNode, scale_x: float, scale_y: float) -> tuple[float, float]:
        return pt.float_attr("x", 0.0) * scale_x, pt.float_attr("y", 0.0) * scale_y

    def _parse_point_command(
        self,
        elem: XmlNode,
        command_type: PathCommandType,
        scale_x: float,
        scale_y: float,
    ) -> Optional[PathCommand]:
        """Parse moveTo or lnTo.

        XML structure:
        <a:moveTo><a:pt x="0" y="0"/></a:moveTo>
        """
        pt = elem.first("pt")
        if pt is None:
            return None

        x, y = self._scaled(pt, scale_x, scale_y)
        return PathCommand(type=command_type, x=x, y=y)

    def _parse_cubic_bezier(
        self,
        elem: XmlNode,
        scale_x: float,
        scale_y: float,
    ) -> Optional[PathCommand]:
        """Parse cubic Bezier curve command.

        XML structure:
        <a:cubicBezTo>
            <a:pt x="100" y="200"/>  <!-- Control point 1 -->
            <a:pt x="300" y="400"/>  <!-- Control point 2 -->
            <a:pt x="500" y="500"/>  <!-- End point -->
        </a:cubicBezTo>
        """
        points = elem.all("pt")
        if len(points) < 3:
            return None

        x1, y1 = self._scaled(points[0], scale_x, scale_y)
        x2, y2 = self._scaled(points[1], scale_x, scale_y)
        x, y = self._scaled(points[2], scale_x, scale_y)

        return PathCommand(type=PathCommandType.CURVE_TO, x=x, y=y, x1=x1, y1=y1, x2=x2, y2=y2)

    def _parse_quad_bezier(
        self,
        elem: XmlNode,
        scale_x: float,
        scale_y: float,
    ) -> Optional[PathCommand]:
        """Parse quadratic Bezier curve command."""
        points = elem.all("pt")
        if len(points) < 2:
            return None

        x1, y1 = self._scaled(points[0], scale_x, scale_y)
        x, y = self._scaled(points[1], scale_x, scale_y)

        return PathCommand(type=PathCommandType.QUAD_TO, x=x, y=y, x1=x1, y1=y1)

    def _parse_arc_to(
        self,
        elem: XmlNode,
        scale_x: float,
        scale_y: float,
    ) -> PathCommand:
        """Parse arcTo command.

        XML structure:
        <a:arcTo wR="100000" hR="100000" stAng="0" swAng="5400000"/>
        """
        return PathCommand(
            type=PathCommandType.ARC_TO,
            width_radius=elem.float_attr("wR", 0.0) * scale_x,
            height_radius=elem.float_attr("hR", 0.0) * scale_y,
            start_angle=angle_to_degrees(elem.float_attr("stAng", 0.0)),
            swing_angle=angle_to_degrees(elem.float_attr("swAng", 0.0)),
        )
