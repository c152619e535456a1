from functools import reduce
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional

from cadquery import Edge, Face, Matrix, Shape, Shell, Solid, Vector, Wire, exporters
from scipy.spatial import ConvexHull as sphull
from numpy import array, ndarray

from .engine import GeometryEngine, GeometryExporter

# Linear deflection used when curved shapes are reduced to points for hulls and projections.
TESSELLATION_TOLERANCE = 0.05


class _CadQueryStepExporter(GeometryExporter[Shape]):
    """
    Exporter for cadquery that can export STEP files
    """

    @staticmethod
    def file_type() -> str:
        return ".step"

    @staticmethod
    def export_geometry(shape: Shape, path: Path, header: str = ""):
        logging.info("Exporting to %s", path)
        exporters.export(w=shape, fname=str(path), exportType=exporters.ExportTypes.STEP)


def _tuple(vector) -> tuple:
    return tuple(float(item) for item in vector)


class CadQueryEngine(GeometryEngine[Shape]):
    """
    CadQuery geometry engine.

    Shapes are evaluated eagerly by OCC. Segment counts are ignored, since OCC works with exact surfaces.
    """

    @staticmethod
    def box(width: float, height: float, depth: float, center: bool = True) -> Shape:
        shape = Solid.makeBox(width, height, depth)
        if center:
            shape = shape.translate(Vector(-width / 2, -height / 2, -depth / 2))
        return shape

    @staticmethod
    def cylinder(radius: float, height: float, segments: Optional[int] = None, center: bool = True) -> Shape:
        shape = Solid.makeCylinder(radius, height)
        if center:
            shape = shape.translate(Vector(0, 0, -height / 2))
        return shape

    @staticmethod
    def sphere(radius: float, segments: Optional[int] = None) -> Shape:
        return Solid.makeSphere(radius)

    @staticmethod
    def cone(radius_bottom: float, radius_top: float, height: float,
             segments: Optional[int] = None, center: bool = False) -> Shape:
        shape = Solid.makeCone(radius1=radius_bottom, radius2=radius_top, height=height)
        if center:
            shape = shape.translate(Vector(0, 0, -height / 2))
        return shape

    @staticmethod
    def square(width: float, height: float, center: bool = True) -> Shape:
        shape = Face.makePlane(width, height)
        if not center:
            shape = shape.translate(Vector(width / 2, height / 2, 0))
        return shape

    @staticmethod
    def polyhedron(points: Sequence[Sequence[float]], faces: Sequence[Sequence[int]]) -> Shape:
        logging.debug("polyhedron()")
        points = [_tuple(point) for point in points]
        shell_faces = [CadQueryEngine._face_from_points([points[index] for index in face]) for face in faces]
        return Solid.makeSolid(Shell.makeShell(shell_faces))

    @staticmethod
    def rotate(shape: Shape, euler_degrees: ndarray) -> Shape:
        origin = (0, 0, 0)
        shape = shape.rotate(startVector=origin, endVector=(1, 0, 0), angleDegrees=float(euler_degrees[0]))
        shape = shape.rotate(startVector=origin, endVector=(0, 1, 0), angleDegrees=float(euler_degrees[1]))
        shape = shape.rotate(startVector=origin, endVector=(0, 0, 1), angleDegrees=float(euler_degrees[2]))
        return shape

    @staticmethod
    def translate(shape: Shape, vector: ndarray) -> Shape:
        return shape.translate(Vector(*_tuple(vector)))

    @staticmethod
    def scale(shape: Shape, vector: ndarray) -> Shape:
        sx, sy, sz = _tuple(vector)
        matrix = Matrix([
            [sx, 0, 0, 0],
            [0, sy, 0, 0],
            [0, 0, sz, 0],
            [0, 0, 0, 1],
        ])
        return shape.transformGeometry(matrix)

    @staticmethod
    def mirror(shape: Shape, vector: ndarray) -> Shape:
        if isinstance(vector, str):
            return shape.mirror(vector)
        return shape.mirror(_tuple(vector))

    @staticmethod
    def union(shapes: Iterable[Shape]) -> Shape:
        logging.debug("union()")
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        if len(shapes) == 1:
            return shapes[0].copy()
        return reduce(lambda x, y: x.fuse(y), shapes)

    @staticmethod
    def difference(initial_shape: Shape, subtractions: Iterable[Shape]) -> Shape:
        logging.debug("difference()")
        subtractions = list(subtractions)
        if not subtractions:
            return initial_shape.copy()
        return reduce(lambda initial, to_remove: initial.cut(to_remove), subtractions, initial_shape)

    @staticmethod
    def intersect(shapes: Iterable[Shape]) -> Shape:
        logging.debug("intersect()")
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        if len(shapes) == 1:
            return shapes[0].copy()
        return reduce(lambda x, y: x.intersect(y), shapes)

    @staticmethod
    def convex_hull(shapes: Iterable[Shape]) -> Shape:
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        vertices = []
        for shape in shapes:
            vertices.extend(CadQueryEngine._points_of(shape))

        return CadQueryEngine._hull_from_points(vertices)

    @staticmethod
    def project(shape: Shape) -> Shape:
        """
        Project onto the XY plane.

        Only the convex outline of the projection is kept, which is exact for the convex markers it is used on.
        """
        points = [(x, y) for x, y, _z in CadQueryEngine._points_of(shape)]
        hull_calc = sphull(points)
        outline = [(points[index][0], points[index][1], 0.0) for index in hull_calc.vertices]
        return CadQueryEngine._face_from_points(outline)

    @staticmethod
    def linear_extrude(shape: Shape, height: float, scale: float = 1.0, center: bool = False) -> Shape:
        outer = shape.outerWire()
        if scale == 1.0:
            solid = Solid.extrudeLinear(outer, [], Vector(0, 0, height))
        else:
            top = outer.scale(scale).translate(Vector(0, 0, height))
            solid = Solid.makeLoft([outer, top], True)
        if center:
            solid = solid.translate(Vector(0, 0, -height / 2))
        return solid

    @staticmethod
    def color(shape: Shape, rgb: Sequence[float]) -> Shape:
        return shape

    @staticmethod
    def _points_of(shape: Shape) -> list:
        vertices, _triangles = shape.tessellate(TESSELLATION_TOLERANCE)
        points = [v.toTuple() for v in vertices]
        # Planar faces carry no interior vertices, so the corners are added explicitly.
        points.extend(v.toTuple() for v in shape.Vertices())
        return points

    @staticmethod
    def _face_from_points(points):
        edges = []
        num_pnts = len(points)
        for i in range(len(points)):
            p1 = points[i]
            p2 = points[(i + 1) % num_pnts]
            edges.append(Edge.makeLine(Vector(*p1), Vector(*p2)))

        return Face.makeFromWires(Wire.assembleEdges(edges))

    @staticmethod
    def _hull_from_points(points):
        points = array(points)
        hull_calc = sphull(points)

        faces = []
        for face_items in hull_calc.simplices:
            fpnts = [_tuple(points[item]) for item in face_items]
            faces.append(CadQueryEngine._face_from_points(fpnts))

        return Solid.makeSolid(Shell.makeShell(faces))

    @staticmethod
    def exporters() -> Iterable[GeometryExporter[Shape]]:
        return [_CadQueryStepExporter()]
