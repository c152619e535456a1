"""
The tenting stand and its boot.

The stand is a rotational extrusion of a strip running along the edge of the bottom cover.  Each section
is scaled so as to end up with a straight projection, a radial one, or something in between, as selected
by `stand_shape_factor`.  The axis of rotation is chosen so that a minimum thickness remains at the outer
edge of the resulting wedge.
"""

import itertools
import logging
import math

import numpy as np

from .bosses import BossPlacer
from .util import Delay, line_normal, one_over_norm
from .walls import WallTopologyError


def hull_columns(engine, columns) -> list:
    """
    Stitch each column of (item, next item) pairs along the sweep with triangular hulls.
    """
    shapes = []
    for column in columns:
        for (a, b), (c, d) in zip(column, column[1:]):
            shapes.append(engine.union([
                engine.convex_hull(a + b + c),
                engine.convex_hull(b + c + d),
            ]))
    return shapes


class StandSweep:

    def __init__(self, bosses: BossPlacer):
        self.bosses = bosses
        self.walls = bosses.walls
        self.config = bosses.config
        self.engine = bosses.engine

        self._baseline = Delay(self._build_baseline)
        self._origin = Delay(self._build_origin)

    ##############
    ## Baseline ##
    ##############

    def _build_baseline(self) -> list:
        logging.debug("stand baseline()")
        pairs = [tuple(self.walls.flattened(segment) for segment in pair) for pair in self.walls.tracer.pairs()]
        count = len(pairs)
        return list(itertools.islice(itertools.cycle(pairs), count - 1, count - 1 + self.config.stand_baseline_length))

    def baseline(self) -> list:
        """
        Flattened lower wall points of the outline pairs, starting with the last pair.
        """
        return self._baseline.get()

    def _build_origin(self) -> float:
        return max(point[0] for pair in self.baseline() for point in pair) + self.config.wall_thickness / 2

    def origin(self) -> float:
        return self._origin.get()

    def pivot(self) -> float:
        config = self.config
        return self.origin() + config.stand_minimum_thickness[2] / math.sin(config.stand_tenting_angle)

    def xform(self, theta, shape):
        """
        Rotate about the Y-parallel axis through the pivot.  `theta` is in radians.
        """
        t = self.pivot()
        shape = self.engine.translate(shape, [-t, 0, 0])
        shape = self.engine.rotate(shape, [0, math.degrees(theta), 0])
        return self.engine.translate(shape, [t, 0, 0])

    ##############
    ## Sections ##
    ##############

    def section(self, s, kernel, outer=False) -> list:
        """
        Place the kernel along the strip, rotated to `s` (0 to 1) of the tenting angle.

        Each point of the periphery is displaced along the mean of the normals of the two edges that share
        it.  Returns one list of placed kernels per point.
        """
        config = self.config
        theta = -s * config.stand_tenting_angle
        x_max = self.origin()
        factor = config.stand_shape_factor

        items = []
        for (a, b), (b_next, c) in zip(self.baseline(), self.baseline()[1:]):
            if not np.array_equal(b, b_next):
                raise WallTopologyError(f"Stand baseline pairs ({a}, {b}) and ({b_next}, {c}) don't share a point")

            u = line_normal(a, b) + line_normal(b, c)
            n = u * one_over_norm(u) * config.stand_width

            # Scale with 1 / cos θ, to get a straight projection.
            p = np.array(b, dtype=float)
            p[0] = (1 - factor) * p[0] + factor * ((p[0] - x_max) / math.cos(theta) + x_max)
            p_outer = p + [n[0], n[1], 0]

            points = [p] if outer else [p, p_outer]
            items.append([self.xform(theta, self.engine.translate(kernel, q)) for q in points])

        return items

    def _columns(self, sections) -> list:
        """
        Transpose per-section runs of consecutive item pairs into per-edge columns along the sweep.
        """
        runs = [list(zip(items, items[1:])) for items in sections]
        return [list(column) for column in zip(*runs)]

    def _sweep_steps(self) -> int:
        degrees = math.degrees(self.config.stand_tenting_angle)
        return int(math.ceil(degrees / 2 if self.config.draft else degrees))

    ############
    ## Bosses ##
    ############

    def stand_boss(self, pair):
        config = self.config
        boss = self.bosses.lookup(pair, config.stand_boss_indexes)
        if boss is None:
            return None

        height = config.cover_countersink_height
        shape = self.engine.difference(
            self.bosses.countersink(config.cover_countersink_diameter / 2 - 1 / 4, height),
            [self.engine.translate(self.engine.box(10, 10, 10), [0, 0, 5 + height - 1])],
        )
        return self.bosses.boss_place(pair, boss.fraction, boss.inset, shape)

    def stand_boss_cutout(self, pair):
        config = self.config
        boss = self.bosses.lookup(pair, config.stand_boss_indexes)
        if boss is None:
            return None

        shape = self.bosses.countersink(config.cover_countersink_diameter / 2, config.cover_countersink_height, 50,
                                        config.stand_minimum_thickness[0] + min(config.stand_cutout_radius))
        shape = self.engine.translate(shape, [0, 0, -3 / 2])
        return self.bosses.boss_place(pair, boss.fraction, boss.inset, shape)

    ###########
    ## Parts ##
    ###########

    def cutout(self):
        """
        The wedge cut out of the outer parts of the stand, hulled from shapes placed along its periphery.
        """
        config = self.config
        engine = self.engine
        split_first, split_second = config.stand_split_points
        (radius, radius_next), (depth, depth_next) = config.stand_cutout_radius, config.stand_cutout_depth
        inset = -(5 + config.wall_thickness / 2)
        slab = engine.box(10, 1, 1 / 10)

        a = self.section(0, engine.translate(slab, [inset, 0, -config.stand_minimum_thickness[0]]), True)
        c = self.section(1, engine.translate(slab, [inset, 0, config.stand_minimum_thickness[1]]), True)
        b = self.section(config.stand_cutout_position,
                         engine.translate(engine.sphere(radius), [radius * depth, 0, 0]), True)[split_first]
        b_next = self.section(config.stand_cutout_position,
                              engine.translate(engine.sphere(radius_next), [radius_next * depth_next, 0, 0]),
                              True)[split_second]

        def shifted(shapes, offsets):
            return [engine.translate(shape, [0, y, 0]) for y in offsets for shape in shapes]

        return engine.union([
            engine.convex_hull(shifted(a[0] + c[0] + b, (0, 100))),
            engine.convex_hull(shifted(a[-1] + c[-1] + b_next, (-100, 0))),
            engine.convex_hull(a[0] + c[0] + a[-1] + c[-1] + b + b_next),
        ])

    def stand(self):
        logging.debug("stand()")
        config = self.config
        engine = self.engine
        n = self._sweep_steps()
        kernel = engine.translate(engine.cylinder(config.wall_thickness / 2, 1 / 10), [0, 0, -1 / 20])

        columns = self._columns([self.section(i / n, kernel) for i in range(n + 1)])
        split_first, split_second = config.stand_split_points
        part_a = columns[:split_first]
        part_b = columns[split_first:split_second]
        part_c = list(reversed(columns[split_second:]))

        # The upper portion of the parts that get cut out serves no purpose.
        part_a = [column[n // 2:] if k < 12 else column for k, column in enumerate(part_a)]
        part_c = [column[n // 2:] if k < 6 else column for k, column in enumerate(part_c)]

        outer = engine.difference(
            engine.union(hull_columns(engine, part_a) + hull_columns(engine, part_c)),
            [self.cutout()],
        )

        shape = engine.difference(
            engine.union(self.bosses.placed(self.stand_boss) + hull_columns(engine, part_b) + [outer]),
            self.bosses.placed(self.stand_boss_cutout),
        )
        return engine.translate(shape, [0, 0, 1 - config.cover_thickness])

    def boot(self):
        """
        A shell around the bottom of the stand, with a floor.

        It is the difference of the lower part of the sweep with the kernel inflated and deflated by the
        boot wall offsets.
        """
        logging.debug("boot()")
        config = self.config
        engine = self.engine
        n = int(math.ceil(math.degrees(config.stand_tenting_angle)))

        shells = []
        for delta in config.boot_wall_thickness:
            last = n // 2 if delta > 0 else n
            steps = [0, last] if config.draft else range(0, last)

            sections = []
            for i in steps:
                height = config.boot_bottom_thickness if i == 0 and delta > 0 else 1 / 10
                kernel = engine.translate(engine.cylinder(config.wall_thickness / 2 + delta, height), [0, 0, -height / 2])
                sections.append(self.section((n - i) / n, kernel))

            shells.append(engine.union(hull_columns(engine, self._columns(sections))))

        ceiling = engine.translate(engine.box(1000, 1000, 1000), [0, 0, 500 + 1 / 10 + config.boot_wall_height])
        shape = engine.difference(
            shells[0],
            shells[1:] + [self.xform(-config.stand_tenting_angle, ceiling)] + self.bosses.placed(self.stand_boss_cutout),
        )
        return engine.translate(shape, [0, 0, 1 - config.cover_thickness])
