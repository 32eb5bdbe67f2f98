# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Frequency and time domain analysis of IIR filters and signals."""

import logging

import numpy as np
import numpy.typing as npt

from filter_lab.dsp import iir
from filter_lab.dsp import utils as utils
from filter_lab.dsp.design import synthesize
from filter_lab.dsp.errors import DegenerateFilter, EmptyInput, InvalidSpec
from filter_lab.models import (
    Coefficients,
    FilterDesign,
    FilterSpec,
    FrequencyResponse,
    Signal,
    Spectrum,
    TimeResponse,
)
from filter_lab.models.fields import DEFAULT_NUM_POINTS, DEFAULT_RESPONSE_LENGTH

logger = logging.getLogger(__name__)


def response_frequencies(sample_rate: float, num_points: int) -> npt.NDArray[np.float64]:
    """
    The frequency axis used by :py:func:`frequency_response`.

    Starts at 1 Hz and steps by ``sample_rate/(2*num_points)`` up to and
    including the Nyquist frequency where it falls on the grid.

    Raises
    ------
    InvalidSpec
        If ``num_points`` is less than 1, or the sample rate is too low for
        any point to fit below the Nyquist frequency.
    """
    utils.check_positive(sample_rate, "sample_rate")
    if num_points < 1:
        raise InvalidSpec("num_points", f"must be at least 1, got {num_points}")

    nyquist = sample_rate / 2
    step = sample_rate / (2 * num_points)
    # small offset so that a Nyquist exactly on the grid is included
    count = int(np.floor((nyquist - 1) / step + 1e-9)) + 1
    if count < 1:
        raise InvalidSpec("sample_rate", f"must be at least 2 Hz, got {sample_rate:g}")
    return 1 + step * np.arange(count)


def frequency_response(
    coeffs: Coefficients, sample_rate: float, num_points: int = DEFAULT_NUM_POINTS
) -> FrequencyResponse:
    """
    Calculate the frequency response of a filter.

    H(z) = B(z)/A(z) is evaluated on the unit circle, at
    ``z = exp(j*2*pi*f/sample_rate)`` for each frequency on the
    :py:func:`response_frequencies` axis.

    Parameters
    ----------
    coeffs : Coefficients
        The filter.
    sample_rate : float
        Sample rate in Hz.
    num_points : int, optional
        Sets the frequency step to ``sample_rate/(2*num_points)``, by
        default 1000.

    Returns
    -------
    FrequencyResponse
        Magnitudes in dB and phases in degrees.

    Raises
    ------
    DegenerateFilter
        If the denominator is exactly zero at one of the frequencies.
    """
    f = response_frequencies(sample_rate, num_points)
    w = 2 * np.pi * f / sample_rate
    z = np.exp(1j * w)

    num = utils.evaluate_polynomial(coeffs.b, z)
    den = utils.evaluate_polynomial(coeffs.a, z)

    zero_den = np.flatnonzero(den == 0)
    if len(zero_den) > 0:
        raise DegenerateFilter(float(f[zero_den[0]]))

    h = utils.c_div(num, den)
    magnitudes = utils.db(h)
    phases = utils.wrap_degrees(np.degrees(utils.c_arg(h)))

    return FrequencyResponse(frequencies=f, magnitudes=magnitudes, phases=phases)


def group_delay(frequencies, phases, sample_rate=None) -> npt.NDArray[np.float64]:
    """
    Calculate the group delay from a sampled phase response.

    The phase is unwrapped and differentiated by central difference,
    ``-(phase[i+1] - phase[i-1]) / (2*pi*(f[i+1] - f[i-1]))``, so the
    result is only defined at the interior points: the result matches
    ``frequencies[1:-1]``. The phase difference spans two grid steps, so it
    is divided by the two step span ``f[i+1] - f[i-1]``. Dividing it by the
    one step span ``f[i+1] - f[i]`` instead would report twice the true
    delay, 2 samples for a one sample delay line.

    Parameters
    ----------
    frequencies : array_like
        Ascending frequencies in Hz.
    phases : array_like
        Phase at each frequency in degrees, as in
        :py:attr:`FrequencyResponse.phases`.
    sample_rate : float, optional
        If given, the delay is returned in samples rather than seconds.

    Returns
    -------
    npt.NDArray[np.float64]
        The group delay, two points shorter than ``frequencies``.

    Raises
    ------
    InvalidSpec
        If there are fewer than 3 points or the inputs differ in length.
    """
    f = np.asarray(frequencies, dtype=float)
    phase = np.asarray(phases, dtype=float)
    if len(f) != len(phase):
        raise InvalidSpec("phases", "must be the same length as frequencies")
    if len(f) < 3:
        raise InvalidSpec("frequencies", f"need at least 3 points, got {len(f)}")

    phase = np.unwrap(np.radians(phase))
    delay = -(phase[2:] - phase[:-2]) / (2 * np.pi * (f[2:] - f[:-2]))
    if sample_rate is not None:
        delay = delay * sample_rate
    return delay


def _check_length(length: int) -> int:
    if length < 0:
        raise InvalidSpec("length", f"must not be negative, got {length}")
    return int(length)


def impulse_response(coeffs: Coefficients, length: int) -> npt.NDArray[np.float64]:
    """The first ``length`` samples of the response to a unit impulse."""
    if _check_length(length) == 0:
        return np.zeros(0)
    return iir.apply(coeffs, iir.unit_impulse(length))


def step_response(coeffs: Coefficients, length: int) -> npt.NDArray[np.float64]:
    """The first ``length`` samples of the response to a unit step."""
    if _check_length(length) == 0:
        return np.zeros(0)
    return iir.apply(coeffs, iir.unit_step(length))


def time_response(
    coeffs: Coefficients,
    sample_rate: float,
    length: int = DEFAULT_RESPONSE_LENGTH,
    num_points: int = DEFAULT_NUM_POINTS,
    freq_response: FrequencyResponse | None = None,
) -> TimeResponse:
    """
    Calculate the impulse response, step response and group delay.

    Parameters
    ----------
    coeffs : Coefficients
        The filter.
    sample_rate : float
        Sample rate in Hz.
    length : int, optional
        Number of samples of impulse and step response, by default 100.
    num_points : int, optional
        Frequency resolution for the group delay, see
        :py:func:`frequency_response`.
    freq_response : FrequencyResponse, optional
        A previously calculated frequency response of ``coeffs``, to avoid
        evaluating it twice.

    Returns
    -------
    TimeResponse
        The group delay is in samples.
    """
    if freq_response is None:
        freq_response = frequency_response(coeffs, sample_rate, num_points)

    f = freq_response.frequencies
    if len(f) >= 3:
        delay = group_delay(f, freq_response.phases, sample_rate)
        delay_f = f[1:-1]
    else:
        delay = np.zeros(0)
        delay_f = np.zeros(0)

    return TimeResponse(
        impulse=impulse_response(coeffs, length),
        step=step_response(coeffs, length),
        group_delay=delay,
        group_delay_frequencies=delay_f,
    )


def design(
    spec: FilterSpec,
    num_points: int = DEFAULT_NUM_POINTS,
    response_length: int = DEFAULT_RESPONSE_LENGTH,
) -> FilterDesign:
    """
    Synthesise a filter and analyse it.

    Parameters
    ----------
    spec : FilterSpec
        The filter request.
    num_points : int, optional
        Frequency resolution, see :py:func:`frequency_response`.
    response_length : int, optional
        Number of samples of impulse and step response.

    Returns
    -------
    FilterDesign
        The coefficients, roots, frequency response and time response.
    """
    coeffs, roots = synthesize(spec)
    freq = frequency_response(coeffs, spec.sample_rate, num_points)
    time = time_response(coeffs, spec.sample_rate, response_length, freq_response=freq)

    return FilterDesign(
        spec=spec,
        coefficients=coeffs,
        pole_zero=roots,
        frequency_response=freq,
        time_response=time,
    )


def spectrum(signal: Signal) -> Spectrum:
    """
    Calculate the one sided magnitude spectrum of a signal.

    The FFT is scaled so that a sinusoid of amplitude A that falls on a
    bin reads A, and a DC offset reads its value.

    Parameters
    ----------
    signal : Signal
        The signal to analyse.

    Returns
    -------
    Spectrum
        Bins from DC to the Nyquist frequency, spaced ``fs/len(signal)``.

    Raises
    ------
    EmptyInput
        If the signal has no samples.
    """
    n = len(signal.samples)
    if n == 0:
        raise EmptyInput("cannot analyse an empty signal")

    mags = np.abs(np.fft.rfft(signal.samples)) / n
    # every bin except DC (and Nyquist, for even n) also has a negative frequency image
    if n % 2 == 0:
        mags[1:-1] *= 2
    else:
        mags[1:] *= 2
    freqs = np.fft.rfftfreq(n, 1 / signal.sample_rate)

    logger.debug("spectrum of %d samples, bin width %g Hz", n, signal.sample_rate / n)
    return Spectrum(frequencies=freqs, magnitudes=mags)


def peak_frequency(spec: Spectrum, include_dc: bool = False) -> float:
    """
    Frequency of the largest bin of a spectrum.

    Parameters
    ----------
    spec : Spectrum
        The spectrum to search.
    include_dc : bool, optional
        If False (the default), the DC bin is ignored unless it is the only
        bin.
    """
    mags = spec.magnitudes
    start = 0 if include_dc or len(mags) == 1 else 1
    return float(spec.frequencies[start + int(np.argmax(mags[start:]))])
