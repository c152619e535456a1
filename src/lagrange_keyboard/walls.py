from enum import Enum
from fractions import Fraction
import logging
from typing import NamedTuple, Optional

import numpy as np

from .boundary import BoundaryCurve
from .connectors import ConnectorSynthesizer
from .placement import KeyPlacer
from .topology import GridCoordinate, Section
from .util import Delay


class WallTopologyError(ValueError):
    """
    Consecutive parts of the case outline fail to share a junction.
    """


class Side(Enum):
    BACK = 'back'
    RIGHT = 'right'
    FRONT = 'front'
    THUMB = 'thumb'
    LEFT = 'left'


SIDE_ORDER = (Side.BACK, Side.RIGHT, Side.FRONT, Side.THUMB, Side.LEFT)


class WallSegment(NamedTuple):
    """
    A point on the case outline: an edge point of a key plate, plus an optional offset overriding the
    side's default, per component.
    """
    side: Side
    column: int
    row: int
    x: float
    y: float
    dx: Optional[float] = None
    dy: Optional[float] = None
    dz: Optional[float] = None

    @property
    def section(self) -> Section:
        return Section.THUMB if self.side is Side.THUMB else Section.MAIN

    @property
    def coordinate(self) -> GridCoordinate:
        return GridCoordinate(self.section, self.column, self.row)

    @property
    def endpoint(self) -> tuple:
        """
        The (section, column, row, x, y) identity of the segment, ignoring side and offsets.
        """
        return self.section, self.column, self.row, self.x, self.y


# The front wall, from the palm key to the last row of column 3.  Main section indices may be negative.
FRONT_WALL = [
    (-1, -1, 1, -1, -1 / 4, 1 / 4),
    (-1, -1, -1, -1, 1 / 4, 1 / 4),
    (-1, -1, -1, 1, -5, -8, 0),
    (-2, -2, 1, -1, -9, -4),
    (-2, -2, 0, -1, 0, -4),
    (-2, -2, -1, -1, 3, -4),
    (3, -1, 1, -1, 0, -3, -9 / 2),
    (3, -1, 0, -1, 4, -3, -9 / 2),
    (3, -1, -1, -1),
]

# Around the thumb cluster, from its outer corner to key (1, 0).
THUMB_WALL = [
    (0, 1, 1, 1),
    (0, 1, 1, -1, 1 / 2, 0, -2),
    (1, 2, 1, -1, 1, -1),
    (1, 2, -1, -1, -1, -1),
    (2, 1, -1, -1, -1 / 2, 0, -2),
    (2, 1, -1, 1, -1 / 2, -1, -2),
    (3, 0, -1, -1, -1 / 2, 17 / 8, -5),
    (3, 0, -1, 1, 1 / 2, -7 / 4, -3),
    (3, 0, -1, 1, 7 / 4, -1 / 2, -3),
    (3, 0, 1, 1, -3, 1 / 2, -5),
    (2, 0, -1, 1, 0, 1),
    (2, 0, 1, 1, 0, 1),
    (1, 0, -1, 1),
]

# Thumb keys whose lower wall point isn't pushed out and down.
THUMB_STRAIGHT_KEYS = frozenset({(3, 0), (0, 1), (2, 1)})
THUMB_STRAIGHT_EDGES = frozenset({(1, 0, -1), (2, 0, 1)})


def default_offsets(segment: WallSegment, last_row: int) -> list:
    """
    Inward offset of the wall from the plate edge, per side, with local tuning.
    """
    side, i, j, x, y = segment.side, segment.column, segment.row, segment.x, segment.y

    if side is Side.BACK:
        return [0, 0, -15]
    if side is Side.RIGHT:
        return {
            (0, 1): [-1 / 4, -5 / 2, -5 / 2],
            (3, -1): [-3 / 8, 3 / 2, -19 / 8],
            (4, 1): [-3 / 8, -3 / 2, -19 / 8],
            (4, -1): [-1 / 4, 1 / 4, -5 / 2],
        }.get((j, y), [-1 / 4, 0, -5 / 2])
    if side is Side.LEFT:
        return [0, 2 if (j, y) == (3, -1) else 0, -15]
    if side is Side.FRONT:
        if (i, j, x, y) == (3, last_row, -1, -1):
            return [7, -5, -6]
        return [0, 1 / 2, -5 if i == 4 else -5 / 2]

    if (i, j, x) == (1, 0, -1):
        return [1, 0, -3 / 2]
    if (i, j, x, y) == (0, 1, 1, 1):
        return [0, -3 / 8, -2]
    return [0, 0, -6]


def _negate(value):
    return None if value is None else -value


class PerimeterTracer:
    """
    Traces the case outline as one closed loop, side by side.

    Each side starts with the last segment of the previous one and the left side ends where the back
    side starts.
    """

    def __init__(self, placer: KeyPlacer):
        self.placer = placer
        self.grid = placer.grid
        self._trace = Delay(self._build_trace)

    def _segment(self, side: Side, entry) -> WallSegment:
        i, j, x, y, *offsets = entry
        if side is not Side.THUMB:
            i, j = self.grid.column(i), self.grid.row(j)
        return WallSegment(side, i, j, x, y, *offsets)

    def back(self) -> list:
        grid = self.grid
        segments = [WallSegment(Side.LEFT, 0, 0, -1, 1)]
        for i in grid.layout_columns:
            scale = self.placer.key_scale(GridCoordinate(Section.MAIN, i, 0))[0]
            step = Fraction(1, 2) / Fraction(scale).limit_denominator(1000)
            x = Fraction(-1)
            while x < 1:
                segments.append(WallSegment(Side.BACK, i, 0, x, 1))
                x += step
            segments.append(WallSegment(Side.BACK, i, 0, 1, 1))
        return segments

    def right(self) -> list:
        last_column = self.grid.last_column
        segments = [WallSegment(Side.BACK, last_column, 0, 1, 1)]
        for j in self.grid.layout_rows:
            for y in (1, -1):
                segments.append(WallSegment(Side.RIGHT, last_column, j, 1, y))
        return segments

    def front(self) -> list:
        segments = [WallSegment(Side.RIGHT, self.grid.last_column, self.grid.last_row, 1, -1)]
        return segments + [self._segment(Side.FRONT, entry) for entry in FRONT_WALL]

    def thumb(self) -> list:
        segments = [WallSegment(Side.FRONT, 3, self.grid.last_row, -1, -1)]
        return segments + [self._segment(Side.THUMB, entry) for entry in THUMB_WALL]

    def left(self) -> list:
        segments = [WallSegment(Side.THUMB, 1, 0, -1, 1)]
        for j in reversed(self.grid.layout_rows):
            if not self.grid.in_layout(0, j):
                continue
            for y in (-1, 1):
                segments.append(WallSegment(Side.LEFT, 0, j, -1, y))
        return segments

    def _build_trace(self) -> list:
        logging.debug("trace()")
        sides = [self.back(), self.right(), self.front(), self.thumb(), self.left()]
        validate_junctions(sides)
        return sides

    def trace(self) -> list:
        """
        Segments per side, in the order back, right, front, thumb, left.
        """
        return self._trace.get()

    def pairs(self) -> list:
        return [pair for side in self.trace() for pair in zip(side, side[1:])]


def validate_junctions(sides):
    for k, side in enumerate(sides):
        previous = sides[k - 1]
        if side[0] != previous[-1]:
            raise WallTopologyError(
                f"{SIDE_ORDER[k - 1].value} side ends at {previous[-1]} but "
                f"{SIDE_ORDER[k].value} side starts at {side[0]}"
            )


class WallBracer:
    """
    Builds the wall panels and the bottom cover shards along the traced outline.
    """

    def __init__(self, placer: KeyPlacer, connectors: ConnectorSynthesizer, tracer: Optional[PerimeterTracer] = None,
                 navel: bool = True):
        self.placer = placer
        self.config = placer.config
        self.engine = placer.engine
        self.grid = placer.grid
        self.connectors = connectors
        self.tracer = tracer if tracer is not None else PerimeterTracer(placer)
        self.boundary = BoundaryCurve(placer)
        self.navel = navel

    ############
    ## Points ##
    ############

    def wall_place(self, segment: WallSegment, z, dx, dy, dz) -> np.ndarray:
        defaults = default_offsets(segment, self.grid.last_row)
        offsets = [default if given is None else given for given, default in zip((dx, dy, dz), defaults)]

        if segment.side is Side.BACK:
            return self.boundary.point(segment.column, segment.row, segment.x, segment.y, z, offsets[1])
        return self.placer.position(segment.coordinate, segment.x, segment.y, z, point=offsets)

    def wall_place_a(self, segment: WallSegment) -> np.ndarray:
        """
        The upper wall point, level with the top of the plate.
        """
        return self.wall_place(segment, 0, segment.dx, segment.dy, segment.dz)

    def wall_place_b(self, segment: WallSegment) -> np.ndarray:
        """
        The lower wall point, from which the wall drops straight to the floor.
        """
        side, i, j, x, y, dx, dy, dz = segment

        if side is Side.LEFT:
            return self.wall_place(segment, -4, 8, {(0, 1): -10, (3, -1): 6}.get((j, y), 0), dz)
        if side is Side.BACK:
            return self.wall_place(segment, -4, dx, -8, dz)
        if side is Side.THUMB and (i, j) not in THUMB_STRAIGHT_KEYS and (i, j, x) not in THUMB_STRAIGHT_EDGES:
            return self.wall_place(segment, -5, _negate(dx), _negate(dy), dz)
        if side is not Side.THUMB and (i, j) == (self.grid.last_column, self.grid.last_row) and y != 1:
            return self.wall_place(segment, -3, dx, dy, dz)
        return self.wall_place_a(segment)

    def inner_point(self, segment: WallSegment) -> np.ndarray:
        return self.placer.position(segment.coordinate, segment.x, segment.y, 0)

    def flattened(self, segment: WallSegment) -> np.ndarray:
        point = np.array(self.wall_place_b(segment), dtype=float)
        point[2] = 0
        return point

    def is_degenerate(self, pair) -> bool:
        first, second = pair
        return all(
            np.allclose(point(first), point(second), rtol=0, atol=1e-9)
            for point in (self.inner_point, self.wall_place_a, self.wall_place_b)
        )

    ##############
    ## Geometry ##
    ##############

    def sections(self, segment: WallSegment) -> list:
        """
        The plate edge kernel, spheres at the upper and lower wall points, and a thin disc under the latter.
        """
        engine = self.engine
        sphere = engine.sphere(self.config.wall_thickness / 2)
        shape_a = engine.translate(sphere, self.wall_place_a(segment))
        shape_b = engine.translate(sphere, self.wall_place_b(segment))
        return [
            self.connectors.web_kernel(segment.coordinate, segment.x, segment.y),
            shape_a,
            shape_b,
            engine.linear_extrude(engine.project(shape_b), 1 / 10),
        ]

    def levels(self, pair) -> list:
        """
        The sections of both segments, paired up level by level, from the plate edge down to the floor.
        """
        first, second = pair
        return list(zip(self.sections(first), self.sections(second)))

    def strip(self, lower, upper):
        """
        The quad between two consecutive levels, as two triangular hulls.
        """
        return self.engine.union([
            self.engine.convex_hull([lower[0], lower[1], upper[1]]),
            self.engine.convex_hull([lower[0], upper[0], upper[1]]),
        ])

    def is_collapsed(self, pair) -> bool:
        """
        Whether the lower wall points coincide with the upper ones at both segments.
        """
        return all(
            np.allclose(self.wall_place_a(segment), self.wall_place_b(segment), rtol=0, atol=1e-9)
            for segment in pair
        )

    def brace(self, pair):
        """
        One wall panel between the two segments of the pair, or None for a degenerate pair.

        Strips of zero height, where the lower wall points coincide with the upper ones, are left out.
        """
        if self.is_degenerate(pair):
            logging.debug("Skipping degenerate wall panel at %s", pair)
            return None

        levels = self.levels(pair)
        skipped = 1 if self.is_collapsed(pair) else None
        strips = [self.strip(lower, upper)
                  for k, (lower, upper) in enumerate(zip(levels, levels[1:]))
                  if k != skipped]
        return self.engine.union(strips)

    def gusset(self, pair):
        """
        The lowest strip of the panel, from the lower wall points to the floor.
        """
        levels = self.levels(pair)
        return self.strip(levels[-2], levels[-1])

    def panels(self) -> list:
        logging.debug("wall panels()")
        return [panel for panel in (self.brace(pair) for pair in self.tracer.pairs()) if panel is not None]

    ################
    ## Floor plan ##
    ################

    def cover_navel(self):
        """
        A small block under the middle of the cover, towards which the cover shards are hulled.
        """
        position = self.placer.position(GridCoordinate(Section.MAIN, 3, 1))
        position[2] = 0
        block = self.engine.box(1, 1, self.config.cover_thickness, center=False)
        return self.engine.translate(block, position)

    def cover_shard(self, pair):
        """
        A pie-shaped slice of the bottom cover, under one wall panel.
        """
        shapes = [
            self.engine.scale(self.sections(segment)[-1], [1, 1, self.config.cover_thickness * 10])
            for segment in pair
        ]
        if self.navel:
            shapes.insert(0, self.cover_navel())
        return self.engine.convex_hull(shapes)

    def cover_shards(self) -> list:
        logging.debug("cover_shards()")
        return [self.cover_shard(pair) for pair in self.tracer.pairs()]
