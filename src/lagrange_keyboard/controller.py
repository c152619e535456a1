import logging

from .engines.engine import GeometryEngine
from .generate_configuration import Configuration
from .threads import ThreadGenerator, ThreadSpec


class ControllerMount:
    """
    Mounting features of the controller board, which hangs upside down from the bottom cover.

    Positions are measured from the upper-left corner of the board.
    """

    def __init__(self, config: Configuration, engine: GeometryEngine, threads: ThreadGenerator):
        self.config = config
        self.engine = engine
        self.threads = threads

    def pcb_place(self, flip: bool, shape):
        """
        Move board-local geometry into place.  The left side is mirrored as a whole later, so it gets flipped here.
        """
        config = self.config
        if flip:
            shape = self.engine.translate(shape, [0, -config.pcb_size[1], 0])
        else:
            shape = self.engine.mirror(shape, [0, 1, 0])
        shape = self.engine.rotate(shape, [0, 180, 0])
        return self.engine.translate(shape, config.pcb_position)

    def hole_positions(self) -> list:
        width, height = self.config.pcb_size
        _, dx, dy = self.config.pcb_mount_hole
        return [
            ((s + 1) / 2 * width - s * dx, (t + 1) / 2 * height - t * dy, 0)
            for s in (-1, 1) for t in (-1, 1)
        ]

    def boss(self):
        config = self.config
        engine = self.engine
        spec = ThreadSpec.from_config(config.pcb_fastener_thread)
        size = 6.8
        # A little taller than the thread, to leave a couple of solid layers at the bottom.
        height = spec.length + spec.diameter / 2 + 4 / 5
        z = config.pcb_position[2]

        body = engine.intersect([engine.box(size, size, height), engine.cylinder(4, height)])
        body = engine.translate(body, [0, 0, z - height / 2])
        thread = engine.translate(self.threads.thread(spec.extended(spec.pitch)), [0, 0, z - (height + spec.pitch)])
        return engine.difference(body, [thread])

    def bosses(self):
        logging.debug("pcb bosses()")
        boss = self.boss()
        return self.engine.union([self.engine.translate(boss, position) for position in self.hole_positions()])

    def connector_cutout(self, size, position):
        """
        A pocket for a board connector, with a chamfer at the mouth.
        """
        config = self.config
        engine = self.engine
        clearance = 0.8
        a, b, c = size[0] + clearance, size[1] + clearance, size[2]
        x, y = (value - clearance / 2 for value in position)

        pocket = engine.translate(engine.box(a, b, c, center=False), [x, y, config.pcb_thickness])

        # The chamfer flares by half a millimeter on every side.
        chamfer = engine.convex_hull([
            engine.box(a, b, 1 / 100, center=False),
            engine.translate(engine.box(a + 1, b + 1, 1 / 100, center=False), [-1 / 2, -1 / 2, 1 / 2 - 1 / 100]),
        ])
        chamfer = engine.translate(chamfer, [-a / 2, -b / 2, 0])
        mouth = engine.translate(engine.box(a + 1, b + 1, 50), [0, 0, 50 / 2 + 1 / 2])
        mouth = engine.translate(engine.union([chamfer, mouth]),
                                 [x + a / 2, y + b / 2, config.pcb_position[2] + config.cover_thickness - 3 / 2])

        return engine.union([pocket, mouth])

    def connector_cutouts(self):
        config = self.config
        return self.engine.union([
            self.connector_cutout(config.pcb_usb_size, config.pcb_usb_position),
            self.connector_cutout(config.pcb_6p6c_size, config.pcb_6p6c_position),
        ])

    def button_hole(self):
        config = self.config
        hole = self.engine.cylinder(config.pcb_button_diameter / 2, 50)
        return self.engine.translate(hole, [*config.pcb_button_position, 0])
