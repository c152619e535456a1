import numpy as np
import pytest

from lagrange_keyboard.connectors import ConnectorSynthesizer
from lagrange_keyboard.placement import KeyPlacer
from lagrange_keyboard.walls import (
    SIDE_ORDER,
    PerimeterTracer,
    Side,
    WallBracer,
    WallSegment,
    WallTopologyError,
    default_offsets,
    validate_junctions,
)


@pytest.fixture
def tracer(placer) -> PerimeterTracer:
    return PerimeterTracer(placer)


@pytest.fixture
def bracer(placer, tracer) -> WallBracer:
    return WallBracer(placer, ConnectorSynthesizer(placer), tracer)


def test_sides_form_a_closed_loop(tracer):
    sides = tracer.trace()

    assert len(sides) == len(SIDE_ORDER)
    for k, side in enumerate(sides):
        assert side[0] == sides[k - 1][-1]


def test_loop_closes_in_space(bracer, tracer):
    sides = tracer.trace()
    for k, side in enumerate(sides):
        for point in (bracer.wall_place_a, bracer.wall_place_b):
            np.testing.assert_allclose(point(side[0]), point(sides[k - 1][-1]), rtol=0, atol=1e-6)


def test_pairs(tracer):
    pairs = tracer.pairs()

    assert len(pairs) >= 40
    for (_, b), (c, _) in zip(pairs, pairs[1:]):
        assert b == c


def test_back_wall_steps_scale_with_the_key(tracer):
    back = tracer.back()
    last = [segment for segment in back if segment.column == 5]
    first = [segment for segment in back if segment.column == 0 and segment.side is Side.BACK]

    assert [segment.x for segment in first] == [-1, -1 / 2, 0, 1 / 2, 1]
    assert len(last) == 7


def test_mismatched_junction_is_fatal():
    a = WallSegment(Side.BACK, 0, 0, -1, 1)
    b = WallSegment(Side.BACK, 0, 0, 1, 1)
    c = WallSegment(Side.RIGHT, 0, 0, 1, -1)

    validate_junctions([[a, b], [b, a]])
    with pytest.raises(WallTopologyError, match="right side starts"):
        validate_junctions([[a, b], [c, a], [a, a], [a, a], [a, a]])


def test_default_offsets(placer):
    last_row = placer.grid.last_row

    assert default_offsets(WallSegment(Side.BACK, 2, 0, 0, 1), last_row) == [0, 0, -15]
    assert default_offsets(WallSegment(Side.RIGHT, 5, 4, 1, -1), last_row) == [-1 / 4, 1 / 4, -5 / 2]
    assert default_offsets(WallSegment(Side.FRONT, 3, 4, -1, -1), last_row) == [7, -5, -6]
    assert default_offsets(WallSegment(Side.THUMB, 2, 1, -1, 1), last_row) == [0, 0, -6]


def test_only_the_palm_corner_is_degenerate(bracer, tracer):
    degenerate = [pair for pair in tracer.pairs() if bracer.is_degenerate(pair)]

    assert len(degenerate) == 1
    (first, second), = degenerate
    assert (first.side, second.side) == (Side.RIGHT, Side.FRONT)
    assert first.endpoint == second.endpoint
    assert bracer.brace(degenerate[0]) is None


def test_panels(bracer, tracer):
    panels = bracer.panels()

    assert len(panels) == len(tracer.pairs()) - 1
    assert len(panels) >= 40


def test_front_wall_drops_straight(bracer, tracer):
    pair = next(pair for pair in tracer.pairs()
                if all(segment.side is Side.FRONT and segment.column == 3 for segment in pair))
    assert bracer.is_collapsed(pair)
    assert not bracer.is_degenerate(pair)


def test_sections(bracer, tracer):
    segment = tracer.back()[1]
    assert len(bracer.sections(segment)) == 4
    assert len(bracer.levels(tracer.pairs()[0])) == 4


def test_flattened_points_are_on_the_floor(bracer, tracer):
    for segment in tracer.left():
        point = bracer.flattened(segment)
        assert point[2] == 0
        assert point[:2] == pytest.approx(bracer.wall_place_b(segment)[:2])


def test_cover_shards(bracer, tracer, placer):
    assert len(bracer.cover_shards()) == len(tracer.pairs())

    bare = WallBracer(placer, bracer.connectors, tracer, navel=False)
    pair = tracer.pairs()[0]
    assert len(bracer.cover_shard(pair).children) == 3
    assert len(bare.cover_shard(pair).children) == 2


@pytest.mark.parametrize("flag", ["key_test_build", "thumb_test_build"])
def test_test_builds_trace_the_whole_outline(config, engine, tracer, flag):
    reduced = PerimeterTracer(KeyPlacer(config.replace(**{flag: True}), engine))

    assert reduced.trace() == tracer.trace()
