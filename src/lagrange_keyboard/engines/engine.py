from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Generic, Optional, TypeVar

from numpy import ndarray

TGeometry = TypeVar("TGeometry")


class GeometryExporter(ABC, Generic[TGeometry]):
    """
    A class that encapsulates the ability to export geometry.
    """

    @staticmethod
    @abstractmethod
    def file_type() -> str:
        """
        The file extension this exporter supports
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def export_geometry(shape: TGeometry, path: Path, header: str = ""):
        """
        Export the given shape to path.

        The header is passed through to formats that support one (e.g. global resolution settings).
        """
        raise NotImplementedError


class GeometryEngine(ABC, Generic[TGeometry]):
    """
    Engine base class.

    Dimensions are in millimeters, angles passed to `rotate` are in degrees.
    All operations that manipulate shapes return copies; no in-place manipulation is performed.
    Primitives are centered on the origin unless `center=False` is given, in which case
    they extend along the positive axes (boxes) or upwards from the XY plane (cylinders, cones).
    """

    @staticmethod
    @abstractmethod
    def box(width: float, height: float, depth: float, center: bool = True) -> TGeometry:
        """
        Create a box with the given dimensions.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def cylinder(radius: float, height: float, segments: Optional[int] = None, center: bool = True) -> TGeometry:
        """
        Create a cylinder with the given dimensions.

        The number of segments may be provided, but this may be ignored on some engines.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def sphere(radius: float, segments: Optional[int] = None) -> TGeometry:
        """
        Create a sphere with the given radius.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def cone(radius_bottom: float, radius_top: float, height: float,
             segments: Optional[int] = None, center: bool = False) -> TGeometry:
        """
        Create a cone with the given radii and height.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def square(width: float, height: float, center: bool = True) -> TGeometry:
        """
        Create a planar rectangle in the XY plane.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def polyhedron(points: Sequence[Sequence[float]], faces: Sequence[Sequence[int]]) -> TGeometry:
        """
        Create a solid from explicit vertices and faces.

        Faces index into `points`, and are wound clockwise when viewed from outside.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def rotate(shape: TGeometry, euler_degrees: ndarray) -> TGeometry:
        """
        Rotate the shape by the given euler angles in degrees, and return a copy.

        Rotations are applied about X, then Y, then Z.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def translate(shape: TGeometry, vector: ndarray) -> TGeometry:
        """
        Translate the given shape, and return a copy.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def scale(shape: TGeometry, vector: ndarray) -> TGeometry:
        """
        Scale the given shape, and return a copy.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def mirror(shape: TGeometry, vector: ndarray) -> TGeometry:
        """
        Mirror the given shape about the plane through the origin normal to vector, and return a copy
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def union(shapes: Iterable[TGeometry]) -> TGeometry:
        """
        Create a new shape from the union of multiple other shapes
        It is an error to pass an empty collection.
        If `shapes` contains a single element, a copy is returned.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def difference(initial_shape: TGeometry, subtractions: Iterable[TGeometry]) -> TGeometry:
        """
        Create a new shape from the subtraction of multiple shapes from a starting shape.
        If `subtractions` is empty, a copy of `initial_shape` is returned.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def intersect(shapes: Iterable[TGeometry]) -> TGeometry:
        """
        Create a new shape from the intersection of multiple shapes.
        It is an error to pass an empty collection.
        If `shapes` contains a single element, a copy is returned.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def convex_hull(shapes: Iterable[TGeometry]) -> TGeometry:
        """
        Construct a convex hull from the collection of multiple shapes.
        It is an error to pass an empty collection.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def project(shape: TGeometry) -> TGeometry:
        """
        Project the shape onto the XY plane, yielding a planar shape.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def linear_extrude(shape: TGeometry, height: float, scale: float = 1.0, center: bool = False) -> TGeometry:
        """
        Extrude a planar shape along Z, optionally scaling the top by `scale`.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def color(shape: TGeometry, rgb: Sequence[float]) -> TGeometry:
        """
        Tag the shape with a display color. Engines without color support return the shape as is.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def exporters() -> Iterable[GeometryExporter[TGeometry]]:
        """
        Get the exporters this engine supports.
        """
        raise NotImplementedError
