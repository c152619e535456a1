import logging
import math
import pathlib
from typing import NamedTuple, Optional

from .bosses import BossPlacer
from .connectors import ConnectorSynthesizer
from .controller import ControllerMount
from .engines.engine import GeometryEngine
from .generate_configuration import Configuration
from .placement import KeyPlacer
from .plates import KeyPlate
from .stand import StandSweep
from .threads import ThreadGenerator
from .topology import TopologyGrid
from .walls import PerimeterTracer, WallBracer

PART_NAMES = ('top', 'bottom', 'stand', 'boot')

# How much the walls and bosses cut out of the cover are inflated, for clearance.
COVER_CLEARANCE = 1 / 2


class OutputSpec(NamedTuple):
    side: str
    parts: tuple
    tenting: Optional[int] = None  # sign of the tenting rotation, or None to leave the part flat


OUTPUTS = {
    'right': OutputSpec('right', ('top',)),
    'right-cover': OutputSpec('right', ('bottom',)),
    'right-stand': OutputSpec('right', ('stand',), 1),
    'right-boot': OutputSpec('right', ('boot',), 1),
    'right-subassembly': OutputSpec('right', ('top', 'bottom')),
    'right-assembly': OutputSpec('right', ('top', 'bottom', 'stand'), 1),
    'left': OutputSpec('left', ('top',)),
    'left-cover': OutputSpec('left', ('bottom',)),
    'left-stand': OutputSpec('left', ('stand',), -1),
    'left-boot': OutputSpec('left', ('boot',), -1),
    'left-subassembly': OutputSpec('left', ('top', 'bottom')),
    'left-assembly': OutputSpec('left', ('top', 'bottom', 'stand'), -1),
    # Other mixes of parts, useful during development.
    'custom-assembly': OutputSpec('right', ('bottom', 'stand')),
}


class Assembly:
    """
    Wires the components together and combines their solids into the printable parts.
    """

    def __init__(self, config: Configuration, engine: GeometryEngine):
        self.config = config
        self.engine = engine
        self.grid = TopologyGrid(config)

        self.placer = KeyPlacer(config, engine, self.grid)
        self.connectors = ConnectorSynthesizer(self.placer)
        self.tracer = PerimeterTracer(self.placer)
        self.walls = WallBracer(self.placer, self.connectors, self.tracer)
        self.threads = ThreadGenerator(config, engine)
        self.bosses = BossPlacer(self.walls, self.threads)
        self.stand_sweep = StandSweep(self.bosses)
        self.plates = KeyPlate(self.placer)
        self.controller = ControllerMount(config, engine, self.threads)

        # Slightly fatter walls and bosses, without the navel, to cut out of the cover.
        inflated = config.replace(wall_thickness=config.wall_thickness + COVER_CLEARANCE,
                                  screw_boss_radius=config.screw_boss_radius + COVER_CLEARANCE / 2)
        inflated_placer = KeyPlacer(inflated, engine, self.grid)
        self.inflated_walls = WallBracer(inflated_placer, ConnectorSynthesizer(inflated_placer), self.tracer,
                                         navel=False)
        self.inflated_bosses = BossPlacer(self.inflated_walls, self.threads)

    def header(self) -> str:
        fa, fs = self.config.resolution
        return f"$fa = {fa};\n$fs = {fs};\n"

    ###########
    ## Parts ##
    ###########

    def top(self):
        logging.debug("top()")
        engine = self.engine
        shapes = self.connectors.connectors() + self.plates.plates()

        if self.grid.build_thumb:
            shapes += self.connectors.thumb_connectors() + self.plates.thumb_plates()

        if self.grid.build_walls:
            bosses = self.bosses.placed(self.bosses.screw_boss)
            if bosses:
                shapes.append(engine.difference(engine.union(bosses),
                                                self.bosses.placed(self.bosses.screw_thread)))
            shapes += self.walls.panels()

        shape = engine.union(shapes)
        if self.config.case_color:
            shape = engine.color(shape, self.config.case_color)
        return shape

    def bottom(self, left: bool = False):
        """
        The cover: pie-shaped shards hulled towards the navel, minus room for the walls, bosses and board.
        """
        logging.debug("bottom()")
        engine = self.engine
        config = self.config
        controller = self.controller

        cover = engine.translate(engine.union(self.walls.cover_shards()), [0, 0, 1 - config.cover_thickness])
        body = engine.union([cover, controller.pcb_place(left, controller.bosses())])

        countersinks = self.bosses.placed(self.bosses.screw_countersink)
        cutouts = [
            controller.pcb_place(left, controller.connector_cutouts()),
            controller.pcb_place(left, controller.button_hole()),
        ]
        cutouts += self.inflated_walls.cover_shards()
        cutouts += self.inflated_bosses.placed(self.inflated_bosses.screw_boss)
        if countersinks:
            cutouts.append(engine.translate(
                engine.union(countersinks),
                [0, 0, config.cover_countersink_height - config.cover_thickness + 1],
            ))

        return engine.difference(body, cutouts)

    def stand(self):
        return self.stand_sweep.stand()

    def boot(self):
        return self.stand_sweep.boot()

    def assembly(self, side: str, parts):
        """
        The union of the named parts for one side.  The left side is the mirror image of the right one.
        """
        parts = set(parts)
        unknown = parts - set(PART_NAMES)
        if unknown:
            raise ValueError(f"Unknown parts: {', '.join(sorted(unknown))}")

        left = side == 'left'
        engine = self.engine

        shapes = []
        if 'top' in parts:
            shapes.append(self.top())
        if 'bottom' in parts:
            shapes.append(self.bottom(left))
        if 'stand' in parts:
            shapes.append(self.stand())
        if 'boot' in parts:
            shapes.append(self.boot())

        shape = engine.union(shapes)

        if self.config.case_test_build:
            shape = engine.intersect([shape, engine.convex_hull(self.bosses.placed(self.bosses.test_cutout))])

        if left:
            shape = engine.mirror(shape, [1, 0, 0])
        return shape

    def tented(self, shape, sign: int):
        """
        Tilt a part into the pose it takes when sitting on the stand.
        """
        config = self.config
        shape = self.engine.translate(shape, [0, 0, -config.cover_thickness])
        shape = self.engine.rotate(shape, [0, sign * math.degrees(config.stand_tenting_angle), 0])
        return self.engine.translate(shape, [-sign * self.stand_sweep.origin(), 0, 0])

    #############
    ## Outputs ##
    #############

    def build(self, name: str):
        try:
            spec = OUTPUTS[name]
        except KeyError:
            raise ValueError(f"No part `{name}'") from None

        logging.info("Building %s", name)
        shape = self.assembly(spec.side, spec.parts)
        if spec.tenting is not None:
            shape = self.tented(shape, spec.tenting)
        return shape

    def export(self, name: str, shape, save_dir: Optional[pathlib.Path] = None) -> list:
        save_dir = pathlib.Path(self.config.save_dir if save_dir is None else save_dir)
        save_dir.mkdir(parents=True, exist_ok=True)

        paths = []
        for exporter in self.engine.exporters():
            path = save_dir / f"{name}{exporter.file_type()}"
            exporter.export_geometry(shape, path, self.header())
            paths.append(path)
        return paths
