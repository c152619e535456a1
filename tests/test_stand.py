import math

import numpy as np
import pytest

from lagrange_keyboard.bosses import BossPlacer
from lagrange_keyboard.connectors import ConnectorSynthesizer
from lagrange_keyboard.placement import KeyPlacer
from lagrange_keyboard.stand import StandSweep, hull_columns
from lagrange_keyboard.threads import ThreadGenerator
from lagrange_keyboard.walls import WallBracer, WallTopologyError


def make_sweep(config, engine) -> StandSweep:
    placer = KeyPlacer(config, engine)
    walls = WallBracer(placer, ConnectorSynthesizer(placer))
    return StandSweep(BossPlacer(walls, ThreadGenerator(config, engine)))


@pytest.fixture
def sweep(config, engine) -> StandSweep:
    return make_sweep(config, engine)


def test_baseline(sweep, config):
    baseline = sweep.baseline()
    pairs = sweep.walls.tracer.pairs()

    assert len(baseline) == config.stand_baseline_length
    # It starts with the last pair of the outline.
    np.testing.assert_array_equal(baseline[0][0], sweep.walls.flattened(pairs[-1][0]))
    np.testing.assert_array_equal(baseline[1][0], sweep.walls.flattened(pairs[0][0]))
    assert all(point[2] == 0 for pair in baseline for point in pair)


def test_baseline_pairs_share_points(sweep):
    baseline = sweep.baseline()
    for (_, b), (c, _) in zip(baseline, baseline[1:]):
        np.testing.assert_array_equal(b, c)


def test_baseline_is_computed_once(sweep):
    assert sweep.baseline() is sweep.baseline()


def test_origin_and_pivot(sweep, config):
    x_max = max(point[0] for pair in sweep.baseline() for point in pair)

    assert sweep.origin() == pytest.approx(x_max + config.wall_thickness / 2)
    assert sweep.pivot() == pytest.approx(
        sweep.origin() + config.stand_minimum_thickness[2] / math.sin(config.stand_tenting_angle))


def test_sections(sweep, engine):
    kernel = engine.sphere(1)
    items = sweep.section(0.5, kernel)

    assert len(items) == len(sweep.baseline()) - 1
    assert all(len(item) == 2 for item in items)
    assert all(len(item) == 1 for item in sweep.section(0.5, kernel, outer=True))


def test_broken_baseline_is_fatal(sweep, engine, monkeypatch):
    first, second = sweep.baseline()[:2]
    broken = [first, (second[0] + [1, 0, 0], second[1])]
    monkeypatch.setattr(sweep, "baseline", lambda: broken)

    with pytest.raises(WallTopologyError):
        sweep.section(0, engine.sphere(1))


def test_sweep_steps(config, engine):
    assert make_sweep(config, engine)._sweep_steps() == 18
    assert make_sweep(config.replace(draft=False), engine)._sweep_steps() == 35


def test_hull_columns(engine):
    items = [[engine.sphere(1)], [engine.sphere(2)], [engine.sphere(3)]]
    column = list(zip(items, items[1:]))

    shapes = hull_columns(engine, [column, column])
    assert len(shapes) == 2
    assert all(len(shape.children) == 2 for shape in shapes)


def test_stand_bosses(sweep, config):
    assert len(sweep.bosses.placed(sweep.stand_boss)) == len(config.stand_boss_indexes)
    assert len(sweep.bosses.placed(sweep.stand_boss_cutout)) == len(config.stand_boss_indexes)


def test_stand_and_boot_build(sweep):
    assert sweep.stand().name == 'translate'
    assert sweep.boot().name == 'translate'
