import numpy as np
import pytest
import solid as sl

from lagrange_keyboard.engines.solid_engine import SolidEngine


def render(shape) -> str:
    return sl.scad_render(shape)


def test_primitives(engine):
    assert "cube" in render(engine.box(1, 2, 3))
    assert "cylinder" in render(engine.cylinder(1, 2))
    assert "cylinder" in render(engine.cone(2, 1, 3))
    assert "sphere" in render(engine.sphere(1, segments=8))
    assert "square" in render(engine.square(1, 1))
    assert "polyhedron" in render(engine.polyhedron([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]],
                                                     [[0, 1, 2], [0, 3, 1], [0, 2, 3], [1, 3, 2]]))


def test_numpy_vectors_are_accepted(engine):
    shape = engine.translate(engine.box(1, 1, 1), np.array([1.5, 0, -2]))
    assert "translate" in render(shape)
    assert "1.5" in render(shape)


def test_mirror_planes(engine):
    by_name = render(engine.mirror(engine.box(1, 1, 1), 'YZ'))
    by_normal = render(engine.mirror(engine.box(1, 1, 1), [1, 0, 0]))
    assert by_name == by_normal


def test_combinators(engine):
    a, b = engine.box(1, 1, 1), engine.sphere(1)

    assert "union" in render(engine.union([a, b]))
    assert "intersection" in render(engine.intersect([a, b]))
    assert "hull" in render(engine.convex_hull([a, b]))
    assert "difference" in render(engine.difference(a, [b]))
    assert engine.difference(a, []) is a


@pytest.mark.parametrize("operation", ["union", "intersect", "convex_hull"])
def test_empty_collections_are_rejected(engine, operation):
    with pytest.raises(ValueError):
        getattr(engine, operation)([])


def test_planar_operations(engine):
    extruded = engine.linear_extrude(engine.project(engine.sphere(1)), 1 / 10, scale=0.5)
    text = render(extruded)
    assert "linear_extrude" in text
    assert "projection" in text


def test_export(engine, tmp_path):
    exporters = list(engine.exporters())
    assert [exporter.file_type() for exporter in exporters] == [".scad"]

    path = tmp_path / "part.scad"
    exporters[0].export_geometry(engine.color(engine.box(1, 1, 1), [1, 0, 0]), path, "$fa = 12;\n$fs = 2;\n")

    text = path.read_text()
    assert "$fa = 12;" in text
    assert "color" in text
    assert "cube" in text


def test_engine_is_stateless():
    assert SolidEngine.box(1, 1, 1) is not SolidEngine.box(1, 1, 1)
