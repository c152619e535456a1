import numpy as np
import pytest

from lagrange_keyboard.boundary import BoundaryCurve, LagrangeCurve


def test_curve_passes_through_anchors():
    anchors = [[0, 0, 0], [1, 2, 3], [4, -1, 2]]
    curve = LagrangeCurve([-2, 0.5, 7], anchors)

    for knot, anchor in zip(curve.knots, anchors):
        np.testing.assert_allclose(curve.evaluate(knot), anchor, rtol=0, atol=1e-12)


def test_weights_sum_to_one():
    curve = LagrangeCurve([0, 1, 3], [[0, 0, 0]] * 3)
    for u in (-2, 0.25, 2, 10):
        assert sum(curve.weights(u)) == pytest.approx(1)


def test_curve_extrapolates():
    # Three collinear anchors define a straight line.
    curve = LagrangeCurve([0, 1, 2], [[0, 0, 0], [1, 1, 1], [2, 2, 2]])
    np.testing.assert_allclose(curve.evaluate(5), [5, 5, 5])


def test_knots_need_anchors():
    with pytest.raises(ValueError):
        LagrangeCurve([0, 1], [[0, 0, 0]])


def test_boundary_anchors(placer):
    boundary = BoundaryCurve(placer)

    for column in (0, 4):
        curve = boundary.curve(column, 1, -4, -8)
        for knot, anchor in zip(curve.knots, curve.anchors):
            np.testing.assert_allclose(curve.evaluate(knot), anchor, rtol=0, atol=1e-9)


def test_boundary_is_discontinuous_between_the_second_and_third_column(placer):
    boundary = BoundaryCurve(placer)

    inner, outer = boundary.curve(1, 1, 0, 0), boundary.curve(2, 1, 0, 0)
    assert inner.knots == outer.knots
    assert not np.allclose(inner.anchors[1], outer.anchors[1])
    np.testing.assert_allclose(boundary.curve(2, 1, 0, 0).anchors[1], boundary.curve(5, 1, 0, 0).anchors[1])


def test_boundary_point_at_the_first_column(placer):
    boundary = BoundaryCurve(placer)
    curve = boundary.curve(0, 1, 0, 0)

    np.testing.assert_allclose(boundary.point(0, 0, -1, 1, 0, 0), curve.anchors[0], rtol=0, atol=1e-9)
