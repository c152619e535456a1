import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional

import solid as sl
from solid.solidpython import OpenSCADObject
from numpy import ndarray

from .engine import GeometryEngine, GeometryExporter


def _vector(vector) -> list:
    return [float(item) for item in vector]


def _mirror_vector(vector) -> list:
    if isinstance(vector, str):
        # Plane names, as accepted by the cadquery engine.
        normals = {'XY': (0, 0, 1), 'XZ': (0, 1, 0), 'YZ': (1, 0, 0)}
        return _vector(normals[vector])
    return _vector(vector)


class _SolidScadExporter(GeometryExporter[OpenSCADObject]):
    """
    Exporter for solidpython that writes OpenSCAD source
    """

    @staticmethod
    def file_type() -> str:
        return ".scad"

    @staticmethod
    def export_geometry(shape: OpenSCADObject, path: Path, header: str = ""):
        logging.info("Exporting to %s", path)
        sl.scad_render_to_file(shape, filepath=str(path), file_header=header)


class SolidEngine(GeometryEngine[OpenSCADObject]):
    """
    SolidPython geometry engine.

    Nothing is evaluated here: every call returns a node of an OpenSCAD expression tree,
    which is rendered by OpenSCAD once exported.
    """

    @staticmethod
    def box(width: float, height: float, depth: float, center: bool = True) -> OpenSCADObject:
        return sl.cube(size=_vector((width, height, depth)), center=center)

    @staticmethod
    def cylinder(radius: float, height: float, segments: Optional[int] = None, center: bool = True) -> OpenSCADObject:
        return sl.cylinder(r=float(radius), h=float(height), center=center, segments=segments)

    @staticmethod
    def sphere(radius: float, segments: Optional[int] = None) -> OpenSCADObject:
        return sl.sphere(r=float(radius), segments=segments)

    @staticmethod
    def cone(radius_bottom: float, radius_top: float, height: float,
             segments: Optional[int] = None, center: bool = False) -> OpenSCADObject:
        return sl.cylinder(r1=float(radius_bottom), r2=float(radius_top), h=float(height),
                           center=center, segments=segments)

    @staticmethod
    def square(width: float, height: float, center: bool = True) -> OpenSCADObject:
        return sl.square(size=_vector((width, height)), center=center)

    @staticmethod
    def polyhedron(points: Sequence[Sequence[float]], faces: Sequence[Sequence[int]]) -> OpenSCADObject:
        logging.debug("polyhedron()")
        return sl.polyhedron(
            points=[_vector(point) for point in points],
            faces=[[int(index) for index in face] for face in faces],
        )

    @staticmethod
    def rotate(shape: OpenSCADObject, euler_degrees: ndarray) -> OpenSCADObject:
        return sl.rotate(a=_vector(euler_degrees))(shape)

    @staticmethod
    def translate(shape: OpenSCADObject, vector: ndarray) -> OpenSCADObject:
        return sl.translate(v=_vector(vector))(shape)

    @staticmethod
    def scale(shape: OpenSCADObject, vector: ndarray) -> OpenSCADObject:
        return sl.scale(v=_vector(vector))(shape)

    @staticmethod
    def mirror(shape: OpenSCADObject, vector: ndarray) -> OpenSCADObject:
        return sl.mirror(v=_mirror_vector(vector))(shape)

    @staticmethod
    def union(shapes: Iterable[OpenSCADObject]) -> OpenSCADObject:
        logging.debug("union()")
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        return sl.union()(*shapes)

    @staticmethod
    def difference(initial_shape: OpenSCADObject, subtractions: Iterable[OpenSCADObject]) -> OpenSCADObject:
        logging.debug("difference()")
        subtractions = list(subtractions)
        if not subtractions:
            return initial_shape
        return sl.difference()(initial_shape, *subtractions)

    @staticmethod
    def intersect(shapes: Iterable[OpenSCADObject]) -> OpenSCADObject:
        logging.debug("intersect()")
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        return sl.intersection()(*shapes)

    @staticmethod
    def convex_hull(shapes: Iterable[OpenSCADObject]) -> OpenSCADObject:
        shapes = list(shapes)
        if not shapes:
            raise ValueError("shapes cannot be empty")

        return sl.hull()(*shapes)

    @staticmethod
    def project(shape: OpenSCADObject) -> OpenSCADObject:
        return sl.projection(cut=False)(shape)

    @staticmethod
    def linear_extrude(shape: OpenSCADObject, height: float, scale: float = 1.0, center: bool = False) -> OpenSCADObject:
        return sl.linear_extrude(height=float(height), center=center, scale=float(scale))(shape)

    @staticmethod
    def color(shape: OpenSCADObject, rgb: Sequence[float]) -> OpenSCADObject:
        return sl.color(c=_vector(rgb))(shape)

    @staticmethod
    def exporters() -> Iterable[GeometryExporter[OpenSCADObject]]:
        return [_SolidScadExporter()]
