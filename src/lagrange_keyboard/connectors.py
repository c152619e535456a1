from dataclasses import dataclass, field
import functools
import logging
import math
from typing import NamedTuple, Optional

from .placement import KeyPlacer, thumb_key_offset
from .topology import GridCoordinate, Section
from .util import Delay, sign


class KernelRef(NamedTuple):
    section: Section
    column: int
    row: int
    x: float
    y: float
    z: float = 0

    @property
    def coordinate(self) -> GridCoordinate:
        return GridCoordinate(self.section, self.column, self.row)


def K(i, j, x, y, z=0) -> KernelRef:
    return KernelRef(Section.MAIN, i, j, x, y, z)


def T(i, j, x, y, z=0) -> KernelRef:
    return KernelRef(Section.THUMB, i, j, x, y, z)


@dataclass
class ConnectorGroup:
    """
    An ordered run of web kernels, joined by hulling every three consecutive kernels.

    The group is only built when every key in `requires` exists.  Generated groups record the kind of
    adjacency and the key they start from.
    """
    kind: str
    kernels: list
    requires: list = field(default_factory=list)
    origin: Optional[tuple] = None

    def required_keys(self) -> list:
        keys = [kernel.coordinate for kernel in self.kernels]
        return list(dict.fromkeys(list(self.requires) + keys))


# Adjacencies that aren't generated, since the hand-authored groups below cover them.
ROW_EXCEPTIONS = frozenset({(1, -2)})
DIAGONAL_EXCEPTIONS = frozenset({(1, -3)})


def main_seam_groups() -> list:
    """
    Odds and ends of the main section, which aren't regular enough to handle in a loop.
    """
    return [
        ConnectorGroup('seam', [K(1, -2, 1, -1), K(1, -2, 1, 1), K(2, -2, -1, -1), K(1, -3, 1, -1)],
                       requires=[GridCoordinate(Section.MAIN, 1, -2), GridCoordinate(Section.MAIN, 2, -2)]),
        ConnectorGroup('seam', [K(2, 1, -1, 1), K(1, 0, 1, 1), K(2, 0, -1, -1), K(2, 0, -1, 1)],
                       requires=[GridCoordinate(Section.MAIN, 2, 0), GridCoordinate(Section.MAIN, 1, 0)]),
        ConnectorGroup('seam', [K(3, -2, 1, -1), K(4, -2, -1, -1), K(3, -1, 1, 1), K(3, -1, 1, -1)],
                       requires=[GridCoordinate(Section.MAIN, 3, -1), GridCoordinate(Section.MAIN, 3, -2),
                                 GridCoordinate(Section.MAIN, 4, -2)]),
        # Palm key
        ConnectorGroup('palm', [K(-1, -2, -1, -1), K(-1, -1, -1, 1), K(-2, -2, 1, -1)],
                       requires=[GridCoordinate(Section.MAIN, -1, -2), GridCoordinate(Section.MAIN, -2, -2)]),
    ]


def thumb_cluster_groups(z: float, y: float) -> list:
    """
    The thumb cluster and its seam to the main section.

    `z` lowers the kernel at the inner corner of thumb key (0, 0) to the second thumb row, `y` pulls the
    kernel on the left edge of main key (2, -1) down.
    """
    return [
        ConnectorGroup('thumb', [T(0, 0, 1, -1), T(1, 0, 1, -1), T(0, 0, -1, -1), T(1, 0, 1, 1),
                                 T(0, 0, -1, 1), T(0, 0, -1, 1), T(0, 0, 1, 1)]),
        ConnectorGroup('thumb', [T(2, 0, 1, 1), T(1, 0, -1, 1), T(2, 0, 1, -1), T(1, 0, -1, -1),
                                 T(1, 1, -1, 1), T(1, 0, 1, -1), T(1, 1, 1, 1)]),
        ConnectorGroup('thumb', [T(0, 0, 1, -1, z), T(1, 1, 1, 1), T(0, 1, -1, 1), T(1, 1, 1, -1),
                                 T(0, 1, -1, -1), T(1, 2, 1, 1), T(0, 1, 1, -1), T(1, 2, 1, -1)]),
        ConnectorGroup('thumb', [T(2, 1, -1, 1), T(3, 0, -1, -1), T(2, 1, 1, 1), T(3, 0, 1, -1),
                                 T(2, 0, -1, -1), T(3, 0, 1, 1), T(2, 0, -1, 1)]),
        ConnectorGroup('thumb', [T(2, 0, 1, -1), T(2, 0, -1, -1), T(1, 1, -1, 1), T(2, 1, 1, 1),
                                 T(1, 1, -1, -1), T(2, 1, 1, -1), T(1, 2, -1, 1), T(2, 1, -1, -1),
                                 T(1, 2, -1, -1)]),
        ConnectorGroup('thumb', [T(1, 1, -1, -1), T(1, 2, -1, 1), T(1, 1, 1, -1), T(1, 2, 1, 1)]),
        ConnectorGroup('thumb-seam', [K(1, -2, -1, -1), K(0, -2, 1, -1), T(0, 0, -1, 1), K(0, -2, -1, -1),
                                      T(1, 0, 1, 1), T(1, 0, -1, 1)],
                       requires=[GridCoordinate(Section.MAIN, 0, -2)]),
        ConnectorGroup('thumb-seam', [T(0, 1, -1, 1), T(0, 1, 1, 1), T(0, 0, 1, -1, z), K(3, -1, -1, -1),
                                      K(2, -1, -1, -1), K(2, -1, 1, -1)]),
        ConnectorGroup('thumb-seam', [T(1, 1, 1, 1), T(1, 0, 1, -1), T(0, 0, 1, -1, z), T(0, 0, 1, -1),
                                      K(2, -1, -1, -1), T(0, 0, 1, 1), K(2, -1, -1, y), T(0, 0, -1, 1),
                                      K(1, -2, 1, -1), K(1, -2, -1, -1)]),
        ConnectorGroup('thumb-seam', [K(2, -1, -1, y), K(2, -1, -1, 1), K(1, -2, 1, -1), K(2, -2, -1, -1)]),
    ]


class ConnectorSynthesizer:
    """
    Stitches neighboring key plates together with fillets that keep the plate chamfer.

    Groups and their geometry are computed on first use and kept for the life of the synthesizer.
    """

    def __init__(self, placer: KeyPlacer):
        self.placer = placer
        self.engine = placer.engine
        self.grid = placer.grid
        self.config = placer.config

        self._main_groups = Delay(self._build_main_groups)
        self._thumb_groups = Delay(self._build_thumb_groups)
        self._connectors = Delay(lambda: self._build(self.main_groups()))
        self._thumb_connectors = Delay(lambda: self._build(self.thumb_groups()))

    #################
    ## Web kernels ##
    #################

    def _kernel_at(self, x, y, _coordinate: GridCoordinate):
        thickness = self.config.plate_thickness
        radius = thickness / 4 / math.cos(math.pi / 8)
        dx, dy = (sign(item) * -1 / 4 * thickness for item in (x, y))

        kernels = []
        for s in (-1, 1):
            kernel = self.engine.sphere(radius, segments=8)
            kernel = self.engine.rotate(kernel, [0, 0, 22.5])
            kernels.append(self.engine.translate(kernel, [dx, dy, thickness / s / 4]))

        return self.engine.translate(self.engine.convex_hull(kernels), [0, 0, -thickness / 2])

    def web_kernel(self, coordinate: GridCoordinate, x, y, z=0):
        """
        A small solid at the plate edge.  Hulling kernels of neighboring plates yields connectors of
        consistent width.
        """
        return self.placer.place(coordinate, (x, y, z), functools.partial(self._kernel_at, x, y))

    def triangle_hulls(self, shapes):
        shapes = list(shapes)
        return self.engine.union([
            self.engine.convex_hull(shapes[k:k + 3]) for k in range(len(shapes) - 2)
        ])

    ############
    ## Groups ##
    ############

    def _resolve(self, kernel: KernelRef) -> KernelRef:
        coordinate = self.grid.resolve(kernel.coordinate)
        return kernel._replace(column=coordinate.column, row=coordinate.row)

    def _admit(self, groups) -> list:
        admitted = []
        for group in groups:
            if all(self.grid.exists(key) for key in group.required_keys()):
                group.kernels = [self._resolve(kernel) for kernel in group.kernels]
                admitted.append(group)
        return admitted

    def generated_groups(self) -> list:
        logging.debug("generated_groups()")
        grid = self.grid
        columns = list(grid.columns)
        rows = list(grid.rows)
        row_exceptions = {(grid.column(i), grid.row(j)) for i, j in ROW_EXCEPTIONS}
        diagonal_exceptions = {(grid.column(i), grid.row(j)) for i, j in DIAGONAL_EXCEPTIONS}

        def key(i, j):
            return GridCoordinate(Section.MAIN, i, j)

        groups = []

        # Column 2 is staggered by one row with respect to column 1.
        def shift(i, j):
            return j + 1 if i == 1 else j

        for i in columns[:-1]:
            for j in rows:
                if (i, j) in row_exceptions:
                    continue
                groups.append(ConnectorGroup(
                    'row',
                    [K(i, j, 1, 1), K(i, j, 1, -1), K(i + 1, shift(i, j), -1, 1), K(i + 1, shift(i, j), -1, -1)],
                    requires=[key(i, j), key(i + 1, j)],
                    origin=(i, j),
                ))

        for i in columns:
            for j in rows[:-1]:
                groups.append(ConnectorGroup(
                    'column',
                    [K(i, j, -1, -1), K(i, j, 1, -1), K(i, j + 1, -1, 1), K(i, j + 1, 1, 1)],
                    origin=(i, j),
                ))

        for i in columns[:-1]:
            for j in rows[:-1]:
                if (i, j) in diagonal_exceptions:
                    continue
                groups.append(ConnectorGroup(
                    'diagonal',
                    [K(i, j, 1, -1), K(i, j + 1, 1, 1),
                     K(i + 1, shift(i, j), -1, -1), K(i + 1, shift(i, j + 1), -1, 1)],
                    requires=[key(i + s, j + t) for s in (0, 1) for t in (0, 1)],
                    origin=(i, j),
                ))

        return groups

    def _build_main_groups(self) -> list:
        return self._admit(main_seam_groups() + self.generated_groups())

    def _build_thumb_groups(self) -> list:
        z = thumb_key_offset(self.config, 0, 1)[2] / self.config.plate_thickness
        return self._admit(thumb_cluster_groups(z, -5 / 16))

    def main_groups(self) -> list:
        return self._main_groups.get()

    def thumb_groups(self) -> list:
        return self._thumb_groups.get()

    ##############
    ## Geometry ##
    ##############

    def _build(self, groups) -> list:
        logging.debug("connectors()")
        return [
            self.triangle_hulls(self.web_kernel(kernel.coordinate, kernel.x, kernel.y, kernel.z)
                                for kernel in group.kernels)
            for group in groups
        ]

    def connectors(self) -> list:
        return self._connectors.get()

    def thumb_connectors(self) -> list:
        return self._thumb_connectors.get()
