from dataclasses import dataclass
import logging
import math
from typing import Optional

import numpy as np

from .threads import ThreadGenerator, ThreadSpec
from .topology import Section
from .util import line_normal, one_over_norm
from .walls import WallBracer

DEFAULT_BOSS_PARAMETERS = (1 / 2, 1)


@dataclass(frozen=True)
class BossDescriptor:
    """
    A screw boss on the wall between two segment endpoints, given as (section, column, row, x, y).

    It sits at `fraction` of the way from one lower wall point to the other, inset by `inset` boss radii.
    """
    endpoints: frozenset
    fraction: float = DEFAULT_BOSS_PARAMETERS[0]
    inset: float = DEFAULT_BOSS_PARAMETERS[1]


def _boss(first, second, parameters=DEFAULT_BOSS_PARAMETERS) -> BossDescriptor:
    return BossDescriptor(frozenset((first, second)), *parameters)


def _key(i, j, x, y):
    return Section.MAIN, i, j, x, y


def _thumb(i, j, x, y):
    return Section.THUMB, i, j, x, y


SCREW_BOSSES = [
    # Right side
    _boss(_key(5, 3, 1, -1), _key(5, 3, 1, 1), (5 / 8, 1)),
    _boss(_key(5, 0, 1, 1), _key(5, 0, 1, -1)),
    # Top side
    _boss(_key(4, 0, 0, 1), _key(4, 0, 1 / 2, 1)),
    _boss(_key(2, 0, 0, 1), _key(2, 0, 1 / 2, 1)),
    _boss(_key(0, 0, 0, 1), _key(0, 0, -1 / 2, 1)),
    # Left side
    _boss(_key(0, 1, -1, -1), _key(0, 2, -1, 1)),
    _boss(_key(0, 3, -1, -1), _thumb(1, 0, -1, 1)),
    # Front side
    _boss(_thumb(2, 1, -1, 1), _thumb(2, 1, -1, -1)),
    _boss(_thumb(0, 1, 1, 1), _thumb(0, 1, 1, -1)),
    _boss(_key(4, 3, 0, -1), _key(4, 3, -1, -1)),
]


class BossPlacer:
    """
    Places screw bosses, and the matching cover countersinks and threads, on the wall.
    """

    def __init__(self, walls: WallBracer, threads: ThreadGenerator, bosses=None):
        self.walls = walls
        self.config = walls.config
        self.engine = walls.engine
        self.threads = threads
        self.bosses = SCREW_BOSSES if bosses is None else bosses

    ############
    ## Lookup ##
    ############

    def default_indexes(self) -> Optional[list]:
        # Case test builds only cut out around the test locations.
        if self.config.case_test_build:
            return list(self.config.case_test_locations)
        return None

    def lookup(self, pair, indexes=None) -> Optional[BossDescriptor]:
        """
        The boss between the endpoints of the pair, in either order, or None.  `indexes` restricts the table.
        """
        endpoints = frozenset(segment.endpoint for segment in pair)
        for index, boss in enumerate(self.bosses):
            if indexes is not None and index not in indexes:
                continue
            if boss.endpoints == endpoints:
                return boss
        return None

    def boss_position(self, pair, fraction, inset) -> np.ndarray:
        """
        A point on the floor, along the line between the lower wall points, displaced inwards along its normal.
        """
        a, b = (np.asarray(self.walls.wall_place_b(segment), dtype=float) for segment in pair)
        normal = line_normal(a, b)
        position = a + (b - a) * fraction
        displacement = normal * inset * self.config.screw_boss_radius * one_over_norm(normal)
        return np.array([position[0] + displacement[0], position[1] + displacement[1], 0])

    def boss_place(self, pair, fraction, inset, shape):
        return self.engine.translate(shape, self.boss_position(pair, fraction, inset))

    ##############
    ## Features ##
    ##############

    def screw_boss(self, pair, indexes=None):
        """
        The boss, hulled with the bottom of the wall to form a gusset.
        """
        boss = self.lookup(pair, indexes if indexes is not None else self.default_indexes())
        if boss is None:
            return None

        config = self.config
        radius = config.screw_boss_radius
        # The height yields a 45 degree gusset.
        tall = self.engine.cylinder(radius, config.screw_boss_height + 2 * radius - config.wall_thickness / 2,
                                    center=False)
        short = self.engine.cylinder(radius, config.screw_boss_height, center=False)

        return self.engine.convex_hull([
            self.engine.intersect([self.walls.gusset(pair), self.boss_place(pair, boss.fraction, 0, tall)]),
            self.boss_place(pair, boss.fraction, boss.inset, short),
        ])

    def countersink(self, radius, height, through=0, below=0):
        """
        A countersunk hole: the head cone, with an optional shaft of length `through` and clearance `below`.
        """
        engine = self.engine
        head_radius = radius + height * math.tan(self.config.cover_countersink_angle / 2)
        shapes = [engine.cone(head_radius, radius, height)]
        if through > 0:
            shapes.append(engine.translate(engine.cylinder(radius, through + 1, center=False), [0, 0, -1]))
        if below > 0:
            shapes.append(engine.translate(engine.cylinder(head_radius, below, center=False), [0, 0, -below]))
        return engine.union(shapes)

    def screw_countersink(self, pair):
        boss = self.lookup(pair, self.default_indexes())
        if boss is None:
            return None

        config = self.config
        height = config.cover_countersink_height
        shape = self.countersink(config.cover_countersink_diameter / 2, height, 50, 50)
        return self.boss_place(pair, boss.fraction, boss.inset, self.engine.translate(shape, [0, 0, -height]))

    def screw_thread(self, pair):
        boss = self.lookup(pair, self.default_indexes())
        if boss is None:
            return None

        spec = ThreadSpec.from_config(self.config.cover_fastener_thread)
        return self.boss_place(pair, boss.fraction, boss.inset, self.threads.screw_thread(spec))

    def test_cutout(self, pair):
        """
        A block around the boss, for test prints of part of the case.
        """
        boss = self.lookup(pair, self.default_indexes())
        if boss is None:
            return None

        volume = self.config.case_test_volume
        size, offset = volume[:3], volume[3:]
        shape = self.engine.translate(self.engine.box(*size), offset)
        return self.boss_place(pair, boss.fraction, boss.inset, shape)

    ######################
    ## Over the outline ##
    ######################

    def placed(self, feature) -> list:
        """
        The feature at every wall pair that has a boss.
        """
        logging.debug("placed %s", feature.__name__)
        shapes = (feature(pair) for pair in self.walls.tracer.pairs())
        return [shape for shape in shapes if shape is not None]
