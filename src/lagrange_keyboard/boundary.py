import logging

import numpy as np

from .placement import KeyPlacer
from .topology import GridCoordinate, Section

# Offsets of the middle anchor from the right edge of key (3, 0), left and right of the discontinuity.
INNER_ANCHOR_OFFSET = (-23 / 4, 0, -65 / 4)
OUTER_ANCHOR_OFFSET = (0, 23 / 4, -13)
# Columns left of this one use the inner offset, which breaks the curve between the second and third column.
DISCONTINUITY_COLUMN = 2
LAST_ANCHOR_OFFSET = (-1, -5 / 4, -13 / 4)


class LagrangeCurve:
    """
    A 3D curve through a set of anchors, parameterized by world X and interpolated with the Lagrange polynomial.
    """

    def __init__(self, knots, anchors):
        self.knots = [float(knot) for knot in knots]
        self.anchors = [np.asarray(anchor, dtype=float) for anchor in anchors]
        if len(self.knots) != len(self.anchors):
            raise ValueError("every anchor needs a knot")

    def weights(self, u: float) -> list:
        weights = []
        for k, knot in enumerate(self.knots):
            weight = 1.0
            for m, other in enumerate(self.knots):
                if m != k:
                    weight *= (u - other) / (knot - other)
            weights.append(weight)
        return weights

    def evaluate(self, u: float) -> np.ndarray:
        return sum(weight * anchor for weight, anchor in zip(self.weights(u), self.anchors))


class BoundaryCurve:
    """
    The back wall follows a smooth curve through three points measured from the first row, rather than
    the (much more uneven) outline of the keys themselves.
    """

    def __init__(self, placer: KeyPlacer):
        self.placer = placer
        self.config = placer.config

    def _main(self, i, j=0):
        return GridCoordinate(Section.MAIN, i, j)

    def curve(self, column: int, y, z, dy) -> LagrangeCurve:
        config = self.config
        position = self.placer.position
        last_column = self.placer.grid.last_column
        xx, yy, zz = INNER_ANCHOR_OFFSET if column < DISCONTINUITY_COLUMN else OUTER_ANCHOR_OFFSET

        knots = [
            position(self._main(0), -1, y, 0)[0],
            position(self._main(3), 1, y, 0)[0],
            position(self._main(last_column), 1, y, 0)[0],
        ]

        anchors = [
            position(self._main(0), -1, y, z,
                     point=[10 if z < 0 else 0, 1 / 2 * (1 - y) * config.plate_size + dy, -15]),
            position(self._main(3), 1, y, 5 / 13 * z,
                     point=[xx, 5 / 13 * dy + yy, zz]),
            position(self._main(last_column), 1, y, 0,
                     point=list(LAST_ANCHOR_OFFSET)),
        ]

        return LagrangeCurve(knots, anchors)

    def point(self, column: int, row: int, x, y, z, dy) -> np.ndarray:
        logging.debug("boundary point()")
        u = self.placer.position(self._main(column, row), x, y, 0)[0]
        return self.curve(column, y, z, dy).evaluate(u)
