# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
import pytest
import numpy as np
import scipy.signal as spsig

import filter_lab.dsp.analysis as analysis
import filter_lab.dsp.design as design
import filter_lab.dsp.iir as iir
import filter_lab.dsp.signal_gen as gen
from filter_lab.dsp.errors import DegenerateFilter, EmptyInput, InvalidSpec
from filter_lab.models import Coefficients, Signal, SignalSpec

from test_utils import make_spec


@pytest.mark.parametrize("fs", [8000, 16000, 44100, 48000, 96000])
@pytest.mark.parametrize("num_points", [10, 100, 1000])
def test_response_frequencies(fs, num_points):
    f = analysis.response_frequencies(fs, num_points)

    assert f[0] == 1
    assert f[-1] <= fs / 2
    assert f[-1] + fs / (2 * num_points) > fs / 2
    np.testing.assert_allclose(np.diff(f), fs / (2 * num_points))


def test_response_frequencies_includes_nyquist():
    # 1 Hz steps land exactly on fs/2
    f = analysis.response_frequencies(2000, 1000)
    assert len(f) == 1000
    assert f[-1] == 1000


@pytest.mark.parametrize("fs, num_points", [(0, 100), (-48000, 100), (48000, 0), (1, 100)])
def test_response_frequencies_invalid(fs, num_points):
    with pytest.raises(InvalidSpec):
        analysis.response_frequencies(fs, num_points)


def test_identity_response():
    coeffs = Coefficients(b=[1.0], a=[1.0])
    response = analysis.frequency_response(coeffs, 48000)

    np.testing.assert_allclose(response.magnitudes, 0, atol=1e-9)
    np.testing.assert_allclose(response.phases, 0, atol=1e-9)


@pytest.mark.parametrize("filter_type", ["lowpass", "highpass", "bandpass", "bandstop"])
@pytest.mark.parametrize("order", [1, 2, 4])
def test_response_against_scipy(filter_type, order):
    spec = make_spec(filter_type=filter_type, order=order)
    coeffs, _ = design.synthesize(spec)
    response = analysis.frequency_response(coeffs, spec.sample_rate)

    _, h = spsig.freqz(coeffs.b, coeffs.a, worN=response.frequencies, fs=spec.sample_rate)
    top = response.magnitudes > -100
    np.testing.assert_allclose(response.magnitudes[top], 20 * np.log10(np.abs(h[top])), atol=1e-6)


def test_phase_wrapped():
    # 10 sample delay, phase rotates many times across the band
    coeffs = Coefficients(b=np.eye(11)[10], a=[1.0])
    response = analysis.frequency_response(coeffs, 48000)

    assert np.all(response.phases <= 180)
    assert np.all(response.phases > -180)


def test_degenerate_filter(monkeypatch):
    coeffs = Coefficients(b=[1.0], a=[1.0, 1.0])
    monkeypatch.setattr(analysis.utils, "evaluate_polynomial", lambda c, z: np.zeros(np.shape(z), dtype=complex))

    with pytest.raises(DegenerateFilter) as e:
        analysis.frequency_response(coeffs, 48000)
    assert e.value.frequency == 1


@pytest.mark.parametrize("delay", [0, 1, 3, 10])
def test_group_delay_of_delay_line(delay):
    fs = 48000
    coeffs = Coefficients(b=np.eye(delay + 1)[delay], a=[1.0])
    response = analysis.frequency_response(coeffs, fs)

    gd = analysis.group_delay(response.frequencies, response.phases, fs)
    assert len(gd) == len(response.frequencies) - 2
    np.testing.assert_allclose(gd, delay, atol=1e-6)

    gd_seconds = analysis.group_delay(response.frequencies, response.phases)
    np.testing.assert_allclose(gd_seconds, delay / fs, atol=1e-10)


def test_group_delay_against_scipy():
    spec = make_spec(order=4)
    coeffs, _ = design.synthesize(spec)
    response = analysis.frequency_response(coeffs, spec.sample_rate, num_points=4000)

    gd = analysis.group_delay(response.frequencies, response.phases, spec.sample_rate)
    _, ref = spsig.group_delay((coeffs.b, coeffs.a), w=response.frequencies[1:-1], fs=spec.sample_rate)

    # compare through the passband, the central difference is coarse elsewhere
    passband = response.frequencies[1:-1] < 800
    np.testing.assert_allclose(gd[passband], ref[passband], rtol=1e-3)


@pytest.mark.parametrize(
    "frequencies, phases",
    [
        ([1, 2], [0, 0]),
        ([1, 2, 3], [0, 0]),
        ([], []),
    ],
)
def test_group_delay_invalid(frequencies, phases):
    with pytest.raises(InvalidSpec):
        analysis.group_delay(frequencies, phases)


@pytest.mark.parametrize("method", ["butterworth", "chebyshev1"])
@pytest.mark.parametrize("filter_type", ["lowpass", "highpass", "bandpass", "bandstop"])
def test_impulse_response_matches_apply(method, filter_type):
    coeffs, _ = design.synthesize(make_spec(design_method=method, filter_type=filter_type))

    for n in [1, 2, 50, 100]:
        np.testing.assert_array_equal(analysis.impulse_response(coeffs, n), iir.apply(coeffs, iir.unit_impulse(n)))
        np.testing.assert_array_equal(analysis.step_response(coeffs, n), iir.apply(coeffs, iir.unit_step(n)))


def test_fir_time_response():
    coeffs = Coefficients(b=[1.0, 2.0, 3.0], a=[1.0])

    np.testing.assert_array_equal(analysis.impulse_response(coeffs, 5), [1, 2, 3, 0, 0])
    np.testing.assert_array_equal(analysis.step_response(coeffs, 5), [1, 3, 6, 6, 6])


def test_one_pole_time_response():
    coeffs = Coefficients(b=[1.0], a=[1.0, -0.5])
    n = np.arange(20)

    np.testing.assert_allclose(analysis.impulse_response(coeffs, 20), 0.5**n)
    np.testing.assert_allclose(analysis.step_response(coeffs, 20), 2 - 0.5**n)


def test_time_response_lengths():
    coeffs = Coefficients(b=[1.0, 1.0], a=[1.0])

    assert len(analysis.impulse_response(coeffs, 0)) == 0
    assert len(analysis.step_response(coeffs, 0)) == 0
    with pytest.raises(InvalidSpec):
        analysis.impulse_response(coeffs, -1)
    with pytest.raises(InvalidSpec):
        analysis.step_response(coeffs, -1)


@pytest.mark.parametrize("order", [1, 2, 4, 8])
def test_butterworth_step_settles(order):
    coeffs, _ = design.synthesize(make_spec(order=order))
    step = analysis.step_response(coeffs, 2000)
    assert step[-1] == pytest.approx(1, abs=1e-6)


def test_time_response():
    spec = make_spec()
    coeffs, _ = design.synthesize(spec)
    freq = analysis.frequency_response(coeffs, spec.sample_rate, num_points=500)
    time = analysis.time_response(coeffs, spec.sample_rate, length=64, freq_response=freq)

    assert len(time.impulse) == 64
    assert len(time.step) == 64
    assert len(time.group_delay) == len(freq.frequencies) - 2
    np.testing.assert_array_equal(time.group_delay_frequencies, freq.frequencies[1:-1])


def test_design():
    spec = make_spec(filter_type="bandpass", order=3)
    result = analysis.design(spec, num_points=200, response_length=32)

    assert result.spec == spec
    assert result.coefficients.a[0] == 1
    assert len(result.pole_zero.poles) == 6
    assert len(result.frequency_response.frequencies) == 200
    assert len(result.time_response.impulse) == 32


@pytest.mark.parametrize("freq", [100, 440, 1000, 3000])
@pytest.mark.parametrize("fs", [8000, 44100, 48000])
def test_sine_spectrum_peak(freq, fs):
    signal = gen.generate(SignalSpec(waveform="sine", frequency=freq, sample_rate=fs, duration=0.5))
    spec = analysis.spectrum(signal)

    assert abs(analysis.peak_frequency(spec) - freq) <= spec.bin_width


def test_spectrum_scaling():
    fs = 8000
    t = np.arange(fs) / fs
    samples = 0.5 + 0.25 * np.sin(2 * np.pi * 1000 * t)
    spec = analysis.spectrum(Signal(samples=samples, sample_rate=fs))

    assert len(spec.frequencies) == fs // 2 + 1
    assert spec.bin_width == 1
    assert spec.magnitudes[0] == pytest.approx(0.5)
    assert spec.magnitudes[1000] == pytest.approx(0.25)
    assert analysis.peak_frequency(spec) == 1000
    assert analysis.peak_frequency(spec, include_dc=True) == 0


def test_spectrum_empty():
    with pytest.raises(EmptyInput):
        analysis.spectrum(Signal(samples=[], sample_rate=48000))
