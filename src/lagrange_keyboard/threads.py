"""Helical thread solids for the screw bosses."""

from collections import Counter
from dataclasses import dataclass
import logging
import math

from .engines.engine import GeometryEngine
from .generate_configuration import Configuration


@dataclass(frozen=True)
class ThreadSpec:
    diameter: float
    pitch: float
    length: float

    @classmethod
    def from_config(cls, values) -> "ThreadSpec":
        diameter, pitch, length = values
        return cls(diameter, pitch, length)

    def extended(self, extra: float) -> "ThreadSpec":
        return ThreadSpec(self.diameter, self.pitch, self.length + extra)


def thread_steps(diameter: float, pitch: float, length: float, fs: float) -> tuple:
    """
    Subdivisions per half turn and total number of profile steps.

    The subdivision matches $fs: fs = dθ * D / 2 = π * D / (2 * a).
    A coarse $fs still gets one subdivision per half turn.
    """
    a = max(1, int(math.pi * diameter / 2 / fs))
    steps = int(2 * a * length / pitch)
    return a, steps


def thread_polyhedron(diameter: float, pitch: float, length: float, fs: float) -> tuple:
    """
    Vertices and faces of a thread of major diameter `diameter`.

    Each step carries five profile vertices (root, flank, crest, flank, root).  The upper root of a step
    lies on the lower root of the step one turn up, and faces always use the latter, so that the surface
    is closed.  The top of the thread is conical, so female threads print without support.
    """
    a, steps = thread_steps(diameter, pitch, length, fs)
    d_theta = math.pi / a
    thread_height = math.sqrt(3) / 2 * pitch
    minor_diameter = diameter - 10 / 8 * thread_height
    crest_diameter = diameter + thread_height / 4

    points = [[0.0, 0.0, 0.0]]
    for i in range(steps):
        angle = i * d_theta
        z = angle * pitch / 2 / math.pi
        inner = [minor_diameter / 2 * math.cos(angle), minor_diameter / 2 * math.sin(angle)]
        outer = [crest_diameter / 2 * math.cos(angle), crest_diameter / 2 * math.sin(angle)]
        points.extend([
            inner + [z - pitch / 2],
            inner + [z - pitch * 3 / 8],
            outer + [z],
            inner + [z + pitch * 3 / 8],
            inner + [z + pitch / 2],
        ])
    points.append([0.0, 0.0, length + diameter / 2])
    top = len(points) - 1

    turn = 2 * a

    def vertex(i, k):
        if k == 4 and i + turn < steps:
            return 1 + 5 * (i + turn)
        return 1 + 5 * i + k

    faces = [[0] + [vertex(0, k) for k in range(4, -1, -1)]]

    for i in range(turn):
        faces.append([0, vertex(i, 0), vertex(i + 1, 0)])

    for i in range(steps - 1):
        for j in range(4):
            p0, p1, p2, p3 = vertex(i, j), vertex(i, j + 1), vertex(i + 1, j + 1), vertex(i + 1, j)
            faces.append([p0, p1, p2])
            faces.append([p0, p2, p3])

    for i in range(turn):
        faces.append([top, vertex(steps - 1 - i, 4), vertex(steps - 2 - i, 4)])

    faces.append([top] + [vertex(steps - 1, k) for k in range(5)])

    return points, faces


def validate_manifold(faces) -> list:
    """
    Edges not shared by exactly two faces, as sorted vertex pairs.
    """
    edges = Counter()
    for face in faces:
        for start, end in zip(face, face[1:] + face[:1]):
            edges[tuple(sorted((start, end)))] += 1
    return sorted(edge for edge, count in edges.items() if count != 2)


class ThreadGenerator:
    """
    Builds threads at the configured resolution.  Draft and mock builds get a plain cylinder with a conical cap.
    """

    def __init__(self, config: Configuration, engine: GeometryEngine):
        self.engine = engine
        self.mock = config.draft or config.mock_threads
        self.fs = config.resolution[1]

    def thread(self, spec: ThreadSpec):
        logging.debug("thread()")
        if self.mock:
            radius = spec.diameter / 2
            return self.engine.union([
                self.engine.cylinder(radius, spec.length, center=False),
                self.engine.translate(self.engine.cone(radius, 0, radius), [0, 0, spec.length]),
            ])

        points, faces = thread_polyhedron(spec.diameter, spec.pitch, spec.length, self.fs)
        return self.engine.polyhedron(points, faces)

    def screw_thread(self, spec: ThreadSpec):
        """
        An internal thread with one more turn below the floor, for clean differences at the bottom face.
        """
        return self.engine.translate(self.thread(spec.extended(spec.pitch)), [0, 0, -spec.pitch])
