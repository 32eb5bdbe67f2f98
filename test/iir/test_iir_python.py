# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
import pytest
import numpy as np

import filter_lab.dsp.design as design
import filter_lab.dsp.iir as iir
from filter_lab.dsp.errors import EmptyInput
from filter_lab.models import Coefficients, Signal

from test_utils import make_spec, difference_equation


@pytest.mark.parametrize("method", ["butterworth", "chebyshev1"])
@pytest.mark.parametrize("filter_type", ["lowpass", "highpass", "bandpass", "bandstop"])
@pytest.mark.parametrize("seed", [1, 2, 3])
def test_apply_against_reference(method, filter_type, seed):
    coeffs, _ = design.synthesize(make_spec(design_method=method, filter_type=filter_type, order=3))
    np.random.seed(seed)
    x = 2 * np.random.rand(500) - 1

    y = iir.apply(coeffs, x)
    assert len(y) == len(x)
    np.testing.assert_allclose(y, difference_equation(coeffs.b, coeffs.a, x), atol=1e-12)


def test_apply_fir():
    coeffs = Coefficients(b=[0.5, 0.5], a=[1.0])
    np.testing.assert_allclose(iir.apply(coeffs, [2, 4, 6, 8]), [1, 3, 5, 7])


def test_apply_unnormalised():
    # coefficients are scaled so that a[0] == 1 before filtering
    coeffs = Coefficients(b=[2.0], a=[2.0, -1.0])
    np.testing.assert_allclose(coeffs.a, [1, -0.5])
    np.testing.assert_allclose(iir.apply(coeffs, [1, 0, 0]), [1, 0.5, 0.25])


def test_apply_zero_state():
    # every call starts from rest
    coeffs = Coefficients(b=[1.0], a=[1.0, -0.9])
    x = np.ones(10)
    np.testing.assert_array_equal(iir.apply(coeffs, x), iir.apply(coeffs, x))


def test_apply_nan_propagates():
    coeffs = Coefficients(b=[1.0], a=[1.0])
    y = iir.apply(coeffs, [1.0, np.nan, 2.0])
    assert y[0] == 1
    assert np.isnan(y[1])
    assert y[2] == 2

    coeffs = Coefficients(b=[1.0], a=[1.0, -0.5])
    y = iir.apply(coeffs, [np.inf, 0.0])
    assert np.all(np.isinf(y))


def test_apply_empty():
    coeffs = Coefficients(b=[1.0], a=[1.0])
    with pytest.raises(EmptyInput):
        iir.apply(coeffs, [])


def test_apply_signal():
    coeffs = Coefficients(b=[1.0, 1.0], a=[1.0])
    out = iir.apply_signal(coeffs, Signal(samples=[1.0, 0.0, 0.0], sample_rate=8000))

    assert out.sample_rate == 8000
    np.testing.assert_array_equal(out.samples, [1, 1, 0])


def test_convolve():
    np.testing.assert_array_equal(iir.convolve([1, 2], [1, 1]), [1, 3, 2])
    np.testing.assert_array_equal(iir.convolve([3], [1, 2, 3]), [3, 6, 9])


@pytest.mark.parametrize("p, q", [([], [1]), ([1], []), ([], [])])
def test_convolve_empty(p, q):
    with pytest.raises(EmptyInput):
        iir.convolve(p, q)


def test_unit_signals():
    np.testing.assert_array_equal(iir.unit_impulse(4), [1, 0, 0, 0])
    np.testing.assert_array_equal(iir.unit_step(3), [1, 1, 1])
    assert len(iir.unit_impulse(0)) == 0
