import math
from operator import length_hint

import mpmath as mpm
import numpy as np
import pytest

from splinekit.control_points import ControlVec
from splinekit.errors import InvalidConfigurationError, OutOfRangeError
from splinekit.knots import KnotVector
from splinekit.splines import BSpline

CTRL = [(50, 50), (50, 300), (300, 300), (300, 500)]


def _close(a, b, tol=1e-6):
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    assert a.shape == b.shape
    assert np.max(np.abs(a - b)) <= tol


def _make_clamped_curve(**kwargs):
    return BSpline(ControlVec(2, CTRL, **kwargs), clamped=True)


def test_clamped_curve_scenario():
    curve = _make_clamped_curve()
    assert curve.knots.to_list() == [0.0, 0.0, 0.0, 1.0, 2.0, 2.0, 2.0]
    assert tuple(curve.range()) == (0.0, 2.0)
    _close(curve.at(0), (50, 50))
    _close(curve.at(2), (300, 500))
    _close(curve.at(1), (175, 300))
    _close(curve.at(0.5), (81.25, 237.5))

    points = list(curve.quantize(1))
    assert len(points) == 3
    _close(points[0], (50, 50))
    _close(points[1], curve.at(1))
    _close(points[2], (300, 500))


@pytest.mark.parametrize('degree', [1, 2, 3, 4])
def test_clamped_curve_interpolates_end_points(degree):
    rng = np.random.default_rng(degree)
    ctrl = rng.uniform(-5, 5, size=(degree + 3, 3))
    curve = BSpline.from_points(ctrl, degree, clamped=True)
    start, end = curve.range()
    _close(curve.at(start), ctrl[0], tol=1e-9)
    _close(curve.at(end), ctrl[-1], tol=1e-9)


def test_uniform_curve_hits_midpoints():
    curve = BSpline.from_points(CTRL, 2)
    assert curve.knots.to_list() == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    _close(curve.at(2), (50, 175))
    _close(curve.at(3), (175, 300))
    _close(curve.at(4), (300, 400))


def test_wrapping_curve_is_closed():
    square = [(0, 0), (1, 0), (1, 1), (0, 1)]
    curve = BSpline(ControlVec.wrapped(2, square))
    assert len(curve.knots) == 2 + 6 + 1
    start, end = curve.range()
    assert (start, end) == (2.0, 6.0)
    _close(curve.at(start), curve.at(end), tol=1e-12)
    _close(curve.at(start), (0.5, 0.0))


def test_explicit_knots():
    curve = BSpline(ControlVec(2, CTRL), [0, 0, 0, 1, 3, 3, 3])
    _close(curve.at(3), (300, 500))

    knots = KnotVector([0, 0, 0, 1, 3, 3, 3], 2)
    same = BSpline(ControlVec(2, CTRL), knots)
    assert same.knots is knots
    _close(same.at(2), curve.at(2))


def test_quantize_restartable_and_length_exact():
    curve = _make_clamped_curve()
    samples = curve.quantize(0.3)
    assert len(samples) == len(curve.quantize_range(0.3))
    first = [tuple(p) for p in samples]
    second = [tuple(p) for p in samples]
    assert first == second
    assert len(first) == len(samples)

    it = iter(samples)
    assert length_hint(it) == len(samples)
    next(it)
    assert length_hint(it) == len(samples) - 1


def test_quantize_range_ends_exactly():
    curve = _make_clamped_curve()
    params = list(curve.quantize_range(0.7))
    assert params[0] == 0.0
    assert params[-1] == 2.0
    assert [float(u) for u in params] == pytest.approx([0.0, 0.7, 1.4, 2.0])


def test_at_out_of_range():
    curve = _make_clamped_curve()
    with pytest.raises(OutOfRangeError):
        curve.at(2.0001)
    with pytest.raises(OutOfRangeError):
        curve.at(-1)
    with pytest.raises(OutOfRangeError):
        curve.at(math.nan)


def test_insufficient_control_points():
    with pytest.raises(InvalidConfigurationError,
                       match='insufficient control points, must have at least degree\\+1'):
        BSpline.from_points([(0, 0), (1, 1)], 2)


@pytest.mark.parametrize('knots', [
    [0, 0, 0, 1, 2, 2],
    [0, 0, 0, 1, 2, 2, 2, 2],
])
def test_knot_length_mismatch(knots):
    with pytest.raises(InvalidConfigurationError, match='length'):
        BSpline(ControlVec(2, CTRL), knots)


def test_knot_degree_mismatch():
    with pytest.raises(InvalidConfigurationError, match='degree'):
        BSpline(ControlVec(2, CTRL), KnotVector.clamped(1, 5))


def test_clamped_rejects_unclamped_knots():
    with pytest.raises(InvalidConfigurationError, match='clamped'):
        BSpline(ControlVec(2, CTRL), [0, 1, 2, 3, 4, 5, 6], clamped=True)


def test_wrapping_cannot_be_clamped():
    with pytest.raises(InvalidConfigurationError):
        BSpline(ControlVec.wrapped(2, CTRL), clamped=True)


def test_degree_zero_curve_rejected():
    with pytest.raises(InvalidConfigurationError):
        BSpline.from_points(CTRL, 0)


def test_control_vec_type_checked():
    with pytest.raises(TypeError):
        BSpline(CTRL)


def test_dtype_mismatch_rejected():
    with pytest.raises(InvalidConfigurationError):
        BSpline(ControlVec(2, CTRL, dtype='float32'), dtype='float64')


def test_editing_points_and_knots():
    curve = _make_clamped_curve()
    curve.control_points[0] = (0, 0)
    _close(curve.at(0), (0, 0))

    curve.knots.pinch(3, 0)
    curve.knots[3] = 1.5
    _close(curve.at(2), (300, 500))


def test_changing_degree_without_new_knots_fails():
    curve = _make_clamped_curve()
    curve.control_vec.degree = 3
    with pytest.raises(InvalidConfigurationError):
        curve.at(1)


class TestScalarTypes:

    def test_float32(self):
        curve = _make_clamped_curve(dtype='float32')
        point = curve.at(1)
        assert point.dtype == np.float32
        _close(point, (175, 300), tol=1e-3)

    def test_float32_rejects_parameter_just_past_end(self):
        curve = _make_clamped_curve(dtype='float32')
        with pytest.raises(OutOfRangeError):
            curve.at(2.00000001)
        _close(curve.at(2), (300, 500), tol=1e-3)

    def test_longdouble(self):
        curve = _make_clamped_curve(dtype='longdouble')
        point = curve.at(0.5)
        assert point.dtype == np.longdouble
        _close(point, (81.25, 237.5))

    def test_mpf(self):
        curve = _make_clamped_curve(dtype='mpf')
        assert curve.dtype == 'mpf'
        point = curve.at(mpm.mpf(1) / 3)
        assert all(isinstance(c, mpm.mpf) for c in point)
        reference = BSpline(ControlVec(2, CTRL, dtype='float64'), clamped=True).at(1 / 3)
        _close(point, reference, tol=1e-9)

    def test_default_dtype_from_settings(self, monkeypatch):
        from splinekit import config

        monkeypatch.setenv(config.SPLINEKIT_DTYPE, 'float32')
        config.clear_cache()
        curve = BSpline.from_points(CTRL, 2, clamped=True)
        assert curve.dtype == 'float32'
        assert curve.knots.dtype == 'float32'
