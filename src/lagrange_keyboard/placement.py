from enum import Enum
import functools
import inspect
import logging
import math
from typing import Any, Optional

import numpy as np

from .engines.engine import GeometryEngine
from .generate_configuration import Configuration
from .topology import GridCoordinate, Section, TopologyGrid


class PlacementMode(Enum):
    TRANSFORM = 'transform'  # wrap a solid in rotate/translate nodes
    COMPUTE = 'compute'      # carry a point through the same transforms


def rotate_around_x(position, angle):
    t_matrix = np.array(
        [
            [1, 0, 0],
            [0, math.cos(angle), -math.sin(angle)],
            [0, math.sin(angle), math.cos(angle)],
        ]
    )
    return np.matmul(t_matrix, position)


def rotate_around_z(position, angle):
    t_matrix = np.array(
        [
            [math.cos(angle), -math.sin(angle), 0],
            [math.sin(angle), math.cos(angle), 0],
            [0, 0, 1],
        ]
    )
    return np.matmul(t_matrix, position)


def translate_position(position, vector):
    return np.asarray(position, dtype=float) + np.asarray(vector, dtype=float)


def central_angle(length, radius):
    """
    The angle subtended by a chord of the given length on a circle of the given radius.
    """
    return 2 * math.atan(length / 2 / radius)


def thumb_key_phase(column, row):
    """
    Initial phase and per-key increment along the thumb arc, in radians.
    """
    if row in (1, 2):
        return math.radians(-37 / 2), math.radians(111 / 2)
    return math.radians(12 if column == 0 else 10), math.radians(55 / 2)


def thumb_key_offset(config: Configuration, column, row):
    if row == 1:
        return [0, -20, -8]
    if row == 2:
        return [0, -42, -16]
    if column == 0:
        return [0, config.keycap_length * 1 / 2 * (3 / 2 - config.thumb_key_scale), 0]
    if column == 3:
        return [0, -4, 0]
    return [0, 0, 0]


def thumb_key_slope(column, row):
    if row == 1:
        return math.radians(33)
    if row == 2:
        return math.radians(6)
    return 0


def is_generator(subject) -> bool:
    """
    Generators are plain callables producing a solid per coordinate.  Solids themselves may be callable.
    """
    return inspect.isfunction(subject) or inspect.ismethod(subject) or isinstance(subject, functools.partial)


def is_point(subject) -> bool:
    return subject is None or isinstance(subject, (list, tuple, np.ndarray))


class KeyPlacer:
    """
    Places solids at, or computes points relative to, the key plates.

    Local points are normalized so that (1, 1, 0) is the outer corner of the top face of a plate, whatever
    the key's size.  The same transform chain serves both placement modes; only the primitive rotate and
    translate operations differ.
    """

    def __init__(self, config: Configuration, engine: GeometryEngine, grid: Optional[TopologyGrid] = None):
        self.config = config
        self.engine = engine
        self.grid = grid if grid is not None else TopologyGrid(config)

    ##########################################
    ## Primitive operations for either mode ##
    ##########################################

    def _x_rot(self, shape, angle):
        return self.engine.rotate(shape, [math.degrees(angle), 0, 0])

    def _z_rot(self, shape, angle):
        return self.engine.rotate(shape, [0, 0, math.degrees(angle)])

    def _operations(self, mode: PlacementMode):
        if mode is PlacementMode.TRANSFORM:
            return self.engine.translate, self._x_rot, self._z_rot
        return translate_position, rotate_around_x, rotate_around_z

    ##########################
    ## Key size and scaling ##
    ##########################

    def key_scale(self, coordinate: GridCoordinate) -> tuple:
        section, i, j = self.grid.resolve(coordinate)
        if section is Section.THUMB:
            if (i, j) == (0, 0):
                return 1, self.config.thumb_key_scale
            if (i, j) in ((1, 0), (2, 0)):
                return 1, 3 / 2
            return 1, 1

        return (self.config.last_column_scale if i == self.grid.last_column else 1), 1

    def scale_to_key(self, coordinate: GridCoordinate, x, y, z) -> np.ndarray:
        """
        Scale normalized plate coordinates to world space.

        Recessed columns of the main section and some thumb keys are stretched, to make room for keycaps.
        """
        section, i, j = self.grid.resolve(coordinate)
        stretch = [1, 1, 1]
        if section is Section.THUMB:
            if (i, j) == (0, 0) and x < 0 < y:
                stretch = [1, 1.1, 1]
            elif (i, j) == (1, 0) and y > 0:
                stretch = [1, 1.02, 1]
            elif (i, j) == (3, 0) and y < 0:
                stretch = [1, 17 / 16, 1]
        elif (i == 2 and j != self.grid.last_row) or (i == 3 and x > 0):
            stretch = [6 / 5, 1, 1]

        sx, sy = self.key_scale(coordinate)
        size = [self.config.plate_size, self.config.plate_size, self.config.plate_thickness]
        return np.array([float(value) for value in (x, y, z)]) * stretch * [sx / 2, sy / 2, 1 / 2] * size

    ####################
    ## Main placement ##
    ####################

    def _location(self, phase, scale, spacings, radius):
        plate_size = self.config.plate_size
        angle = (phase + scale / 2) * central_angle(plate_size, radius)
        for spacing in spacings:
            angle += central_angle(plate_size + spacing, radius)
        return angle

    def key_angles(self, coordinate: GridCoordinate) -> tuple:
        """
        The column angle and row angle of a main section key, in radians.
        """
        config = self.config
        _, i, j = self.grid.resolve(coordinate)
        theta = self._location(config.column_phase[i], 1,
                               [config.row_spacing[i]] * j, config.column_radius[i])
        phi = self._location(config.row_phase, self.key_scale(coordinate)[0],
                             config.column_spacing[:i], config.row_radius)
        return theta, phi

    def apply_key_geometry(self, shape, translate_fn, rotate_x_fn, rotate_z_fn, coordinate: GridCoordinate, offset):
        config = self.config
        _, i, j = self.grid.resolve(coordinate)
        theta, phi = self.key_angles(coordinate)
        plate_size = config.plate_size

        shape = translate_fn(shape, offset)

        if self.grid.is_palm_key(coordinate):
            shape = translate_fn(shape, config.palm_key_offset)
            shape = translate_fn(shape, [0, -plate_size / 2, 0])
            shape = rotate_x_fn(shape, math.pi / 2)
            shape = translate_fn(shape, [0, plate_size / 2, 0])

        column_radius = config.column_radius[i]
        shape = translate_fn(shape, [0, 0, -column_radius])
        shape = rotate_x_fn(shape, -theta)
        shape = translate_fn(shape, [0, 0, column_radius])

        shape = translate_fn(shape, [0, 0, -config.row_radius])
        shape = rotate_x_fn(shape, math.pi / 2)
        shape = rotate_z_fn(shape, -phi)
        shape = rotate_x_fn(shape, -math.pi / 2)
        shape = translate_fn(shape, [0, 0, config.row_radius])

        shape = translate_fn(shape, [0, config.column_offset[i], 0])
        shape = translate_fn(shape, [0, 0, config.column_height[i]])
        shape = translate_fn(shape, [0, 0, config.global_z_offset])

        return shape

    #####################
    ## Thumb placement ##
    #####################

    def thumb_origin(self) -> np.ndarray:
        """
        The point the thumb cluster hangs from: the lower-right corner of main key (1, -2), plus the tuning offset.
        """
        corner = self.position(GridCoordinate(Section.MAIN, 1, -2), 1, -1, 0)
        return corner + np.asarray(self.config.thumb_offset, dtype=float)

    def apply_thumb_geometry(self, shape, translate_fn, rotate_x_fn, rotate_z_fn, coordinate: GridCoordinate, offset):
        config = self.config
        _, i, j = coordinate

        shape = translate_fn(shape, offset)
        shape = rotate_x_fn(shape, thumb_key_slope(i, j))

        shape = translate_fn(shape, thumb_key_offset(config, i, j))

        phase, increment = thumb_key_phase(i, j)
        shape = translate_fn(shape, [0, config.thumb_radius, 0])
        shape = rotate_x_fn(shape, -config.thumb_slant)
        shape = rotate_z_fn(shape, phase + increment * i)
        shape = rotate_x_fn(shape, config.thumb_slant)
        shape = translate_fn(shape, [0, -config.thumb_radius, 0])

        shape = translate_fn(shape, self.thumb_origin())

        return shape

    ###############
    ## Interface ##
    ###############

    def place(self, coordinate: GridCoordinate, local_point=(0, 0, 0), subject: Any = None,
              mode: Optional[PlacementMode] = None):
        """
        Place `subject` at `local_point` of the key at `coordinate`.

        In transform mode `subject` is a solid, or a generator called with the coordinate to produce one.
        In compute mode it is a displacement (default the origin) and the resulting point is returned.
        When no mode is given it is inferred from the subject.
        """
        if mode is None:
            mode = PlacementMode.COMPUTE if is_point(subject) else PlacementMode.TRANSFORM

        if mode is PlacementMode.TRANSFORM:
            if subject is None:
                raise ValueError("transform mode needs a solid or a generator to place")
            shape = subject(coordinate) if is_generator(subject) else subject
        else:
            shape = np.zeros(3) if subject is None else np.asarray(subject, dtype=float)

        x, y, z = local_point
        offset = self.scale_to_key(coordinate, x, y, z)
        translate_fn, rotate_x_fn, rotate_z_fn = self._operations(mode)

        if coordinate.section is Section.THUMB:
            return self.apply_thumb_geometry(shape, translate_fn, rotate_x_fn, rotate_z_fn, coordinate, offset)
        return self.apply_key_geometry(shape, translate_fn, rotate_x_fn, rotate_z_fn, coordinate, offset)

    def key_place(self, shape, coordinate: GridCoordinate, x=0, y=0, z=0):
        return self.place(coordinate, (x, y, z), shape, PlacementMode.TRANSFORM)

    def position(self, coordinate: GridCoordinate, x=0, y=0, z=0, point=None) -> np.ndarray:
        return self.place(coordinate, (x, y, z), point, PlacementMode.COMPUTE)

    def key_placed_shapes(self, shape) -> list:
        logging.debug("key_placed_shapes()")
        return [self.key_place(shape, coordinate) for coordinate in self.grid.main_keys()]

    def thumb_placed_shapes(self, shape) -> list:
        logging.debug("thumb_placed_shapes()")
        return [self.key_place(shape, coordinate) for coordinate in self.grid.thumb_keys()]
