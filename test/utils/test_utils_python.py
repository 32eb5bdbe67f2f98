# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
import pytest
import numpy as np

import filter_lab.dsp.utils as utils
from filter_lab.dsp.errors import InvalidSpec


@pytest.mark.parametrize("x, y", (2*np.random.rand(50, 2)-1) + 1j*(2*np.random.rand(50, 2)-1))
def test_complex_arithmetic(x, y):
    assert utils.c_add(x, y) == pytest.approx(x + y)
    assert utils.c_mul(x, y) == pytest.approx(x * y)
    assert utils.c_div(x, y) == pytest.approx(x / y)
    assert utils.c_abs(x) == pytest.approx(abs(x))
    assert utils.c_pow(x, -2) == pytest.approx(x**-2)


def test_complex_arrays():
    x = np.array([1 + 1j, 2, -1j])
    np.testing.assert_allclose(utils.c_mul(x, 1j), [-1 + 1j, 2j, 1])
    np.testing.assert_allclose(utils.c_abs(x), [np.sqrt(2), 2, 1])
    np.testing.assert_allclose(utils.c_arg(x), [np.pi / 4, 0, -np.pi / 2])


def test_c_div_by_zero():
    with pytest.raises(ZeroDivisionError):
        utils.c_div(1, 0)
    with pytest.raises(ZeroDivisionError):
        utils.c_div([1, 2], [1, 0j])


def test_is_real():
    assert utils.is_real(0.5)
    assert utils.is_real(0.5 + 1e-12j)
    assert not utils.is_real(0.5 + 1e-6j)


def test_evaluate_polynomial():
    # 1 + 2z^-1 + 3z^-2
    assert utils.evaluate_polynomial([1, 2, 3], 1) == 6
    assert utils.evaluate_polynomial([1, 2, 3], -1) == 2
    np.testing.assert_allclose(utils.evaluate_polynomial([1, 2, 3], [2, 1j]), [2.75, 1 - 2j - 3])


@pytest.mark.parametrize(
    "phase, wrapped",
    [(0, 0), (180, 180), (-180, 180), (190, -170), (-190, 170), (720, 0), (-540, 180), (359, -1)],
)
def test_wrap_degrees(phase, wrapped):
    assert utils.wrap_degrees([phase])[0] == pytest.approx(wrapped)


@pytest.mark.parametrize("x, expected", [(1e-3, -60), (0.1, -20), (1, 0), (10, 20), (-10, 20), (1000, 60)])
def test_db(x, expected):
    assert utils.db(x) == pytest.approx(expected)


def test_db_zero():
    assert np.isfinite(utils.db(0))


@pytest.mark.parametrize("fs, duration, n", [(100, 0.29, 29), (8000, 1, 8000), (44100, 0.1, 4410), (48000, 0, 0)])
def test_n_samples(fs, duration, n):
    assert utils.n_samples(fs, duration) == n


def test_range_checks():
    assert utils.check_positive(1.0, "x") == 1.0
    assert utils.check_non_negative(0.0, "x") == 0.0
    with pytest.raises(InvalidSpec) as e:
        utils.check_positive(0, "duration")
    assert e.value.field == "duration"
    with pytest.raises(InvalidSpec):
        utils.check_non_negative(-1e-9, "amplitude")
    with pytest.raises(InvalidSpec):
        utils.check_positive(float("nan"), "sample_rate")
