import math

import numpy as np
import pytest

from lagrange_keyboard.engines.solid_engine import SolidEngine
from lagrange_keyboard.generate_configuration import Configuration, shape_config
from lagrange_keyboard.placement import KeyPlacer


class PointEngine:
    """
    Moves points through translate and rotate the way an engine moves solids, with OpenSCAD's X, Y, Z
    rotation order.
    """

    @staticmethod
    def translate(shape, vector):
        return np.asarray(shape, dtype=float) + np.asarray(vector, dtype=float)

    @staticmethod
    def rotate(shape, euler_degrees):
        x, y, z = (math.radians(float(angle)) for angle in euler_degrees)
        rx = np.array([[1, 0, 0], [0, math.cos(x), -math.sin(x)], [0, math.sin(x), math.cos(x)]])
        ry = np.array([[math.cos(y), 0, math.sin(y)], [0, 1, 0], [-math.sin(y), 0, math.cos(y)]])
        rz = np.array([[math.cos(z), -math.sin(z), 0], [math.sin(z), math.cos(z), 0], [0, 0, 1]])
        return rz @ ry @ rx @ np.asarray(shape, dtype=float)


@pytest.fixture
def config() -> Configuration:
    return Configuration(shape_config)


@pytest.fixture
def engine() -> SolidEngine:
    return SolidEngine()


@pytest.fixture
def point_engine() -> PointEngine:
    return PointEngine()


@pytest.fixture
def placer(config, engine) -> KeyPlacer:
    return KeyPlacer(config, engine)
