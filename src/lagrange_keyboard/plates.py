import logging
import math

from .placement import KeyPlacer
from .topology import GridCoordinate


class KeyPlate:
    """
    Switch plates with chamfered edges, sized per key.
    """

    def __init__(self, placer: KeyPlacer):
        self.placer = placer
        self.config = placer.config
        self.engine = placer.engine

    def nub(self, side: int):
        config = self.config
        nub = self.engine.box(config.nub_width * 1.1, 5, config.nub_height, center=False)
        nub = self.engine.mirror(nub, [0, 0, 1])
        nub = self.engine.translate(nub, [-(config.plate_hole_size / 2 + config.nub_width / 10), -5 / 2, 0])
        return self.engine.rotate(nub, [0, 0, 90 * side])

    def undercut(self):
        """
        Room under the plate for the switch tabs, tapering towards the nubs.
        """
        config = self.config
        engine = self.engine
        hole = config.plate_hole_size
        depth = 5
        lip = 3 / 4
        drop = config.nub_height + lip
        size = hole + 2 * lip

        taper = engine.linear_extrude(engine.square(size, size), lip + config.nub_width,
                                      scale=(hole - 2 * config.nub_width) / size)
        block = engine.translate(engine.box(size, size, depth - drop), [0, 0, (drop - depth) / 2])
        return engine.translate(engine.union([taper, block]), [0, 0, -drop])

    def key_plate(self, coordinate: GridCoordinate):
        """
        The plate of a single key, with its top surface at the origin.
        """
        config = self.config
        engine = self.engine
        thickness = config.plate_thickness
        radius = thickness / 4 / math.cos(math.pi / 8)

        corners = []
        for s in (-1, 1):
            for t in (-1, 1):
                for u in (1, -1):
                    x, y, z = self.placer.scale_to_key(coordinate, s, t, u)
                    corner = engine.rotate(engine.sphere(radius, segments=8), [0, 0, 22.5])
                    corners.append(engine.translate(corner, [x - thickness / 4 * s, y - thickness / 4 * t, z / 2]))

        hole = engine.box(config.plate_hole_size, config.plate_hole_size, 2 * thickness)
        plate = engine.translate(engine.difference(engine.convex_hull(corners), [hole]), [0, 0, -thickness / 2])

        nubs = [self.nub(side) for side in config.nub_sides]
        if nubs:
            plate = engine.union([plate] + nubs)

        return engine.difference(plate, [self.undercut()])

    def plates(self) -> list:
        logging.debug("key plates()")
        return self.placer.key_placed_shapes(self.key_plate)

    def thumb_plates(self) -> list:
        logging.debug("thumb plates()")
        return self.placer.thumb_placed_shapes(self.key_plate)
