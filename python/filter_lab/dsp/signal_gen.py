# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Signal generator DSP utilities."""

import logging

import numpy as np

from filter_lab.dsp import utils as utils
from filter_lab.dsp.errors import InvalidSpec
from filter_lab.models import Signal, SignalSpec

logger = logging.getLogger(__name__)

# number of white noise registers summed by the Voss-McCartney generator
PINK_REGISTERS = 16

# harmonics of the fundamental used by the multitone generator
MULTITONE_HARMONICS = (1, 2, 3, 5)

PULSE_DUTY_CYCLE = 0.5

NOISE_WAVEFORMS = ("white_noise", "pink_noise")


def time_axis(fs: float, length: float) -> np.ndarray:
    """Sample times in seconds for ``length`` seconds at sample rate ``fs``."""
    return np.arange(utils.n_samples(fs, length)) / fs


def _cycles(t: np.ndarray, freq: float, phase: float) -> np.ndarray:
    """Fractional position in the period at each time, in [0, 1)."""
    return np.mod(freq * t + phase / (2 * np.pi), 1.0)


def sine(fs: float, length: float, freq: float, amplitude: float, phase: float = 0.0) -> np.ndarray:
    """
    Generate a sinusoidal signal.

    Parameters
    ----------
    fs : float
        The sampling frequency in Hz.
    length : float
        The duration of the signal in seconds.
    freq : float
        The frequency of the sinusoid in Hz.
    amplitude : float
        The amplitude of the sinusoid.
    phase : float, optional
        The initial phase in radians, by default 0.

    Returns
    -------
    np.ndarray
        The generated sinusoidal signal.
    """
    t = time_axis(fs, length)
    return amplitude * np.sin(2 * np.pi * freq * t + phase)


def cosine(fs: float, length: float, freq: float, amplitude: float, phase: float = 0.0) -> np.ndarray:
    """Generate a cosine signal, see :py:func:`sine` for the parameters."""
    t = time_axis(fs, length)
    return amplitude * np.cos(2 * np.pi * freq * t + phase)


def square(fs: float, length: float, freq: float, amplitude: float, phase: float = 0.0) -> np.ndarray:
    """
    Generate a square wave.

    The output is the sign of a sine wave of the same frequency and phase,
    with zero crossings counted as positive.
    """
    t = time_axis(fs, length)
    return amplitude * np.where(np.sin(2 * np.pi * freq * t + phase) >= 0, 1.0, -1.0)


def sawtooth(fs: float, length: float, freq: float, amplitude: float, phase: float = 0.0) -> np.ndarray:
    """Generate a rising sawtooth wave between -amplitude and amplitude."""
    t = time_axis(fs, length)
    return amplitude * (2 * _cycles(t, freq, phase) - 1)


def triangle(fs: float, length: float, freq: float, amplitude: float, phase: float = 0.0) -> np.ndarray:
    """Generate a triangle wave, peaking half way through each period."""
    t = time_axis(fs, length)
    x = _cycles(t, freq, phase)
    return amplitude * np.where(x < 0.5, 4 * x - 1, 3 - 4 * x)


def chirp(
    fs: float,
    length: float,
    amplitude: float,
    start: float,
    stop: float,
    phase: float = 0.0,
) -> np.ndarray:
    """
    Generate a linear chirp.

    The frequency term sweeps linearly from ``start`` to ``stop`` over the
    full duration: ``sin(2*pi*(start + (stop - start)*t/length)*t + phase)``.

    Parameters
    ----------
    fs : float
        The sample rate of the signal.
    length : float
        The duration of the signal in seconds.
    amplitude : float
        The amplitude of the signal.
    start : float
        The starting frequency of the chirp signal in Hz.
    stop : float
        The ending frequency of the chirp signal in Hz.
    phase : float, optional
        The initial phase in radians.

    Returns
    -------
    np.ndarray
        The generated chirp signal.
    """
    t = time_axis(fs, length)
    inst_freq = start + (stop - start) * t / length
    return amplitude * np.sin(2 * np.pi * inst_freq * t + phase)


def fm(
    fs: float,
    length: float,
    freq: float,
    amplitude: float,
    mod_freq: float,
    mod_index: float,
    phase: float = 0.0,
) -> np.ndarray:
    """
    Generate a frequency modulated sinusoid.

    ``mod_index`` is the peak deviation of the carrier frequency in Hz.
    """
    t = time_axis(fs, length)
    inst_freq = freq + mod_index * np.sin(2 * np.pi * mod_freq * t)
    return amplitude * np.sin(2 * np.pi * inst_freq * t + phase)


def am(
    fs: float,
    length: float,
    freq: float,
    amplitude: float,
    mod_freq: float,
    mod_index: float,
    phase: float = 0.0,
) -> np.ndarray:
    """Generate an amplitude modulated sinusoid with modulation depth ``mod_index``."""
    t = time_axis(fs, length)
    carrier = np.sin(2 * np.pi * freq * t + phase)
    return amplitude * carrier * (1 + mod_index * np.sin(2 * np.pi * mod_freq * t))


def pulse(fs: float, length: float, freq: float, amplitude: float) -> np.ndarray:
    """Generate a pulse train, ``amplitude`` for the first half of each period and 0 after."""
    t = time_axis(fs, length)
    position = np.mod(t * freq, 1.0)
    return np.where(position < PULSE_DUTY_CYCLE, amplitude, 0.0)


def multitone(fs: float, length: float, freq: float, amplitude: float, phase: float = 0.0) -> np.ndarray:
    """Generate the sum of sines at 1, 2, 3 and 5 times ``freq``, each of ``amplitude/4``."""
    t = time_axis(fs, length)
    signal = np.zeros(len(t))
    for harmonic in MULTITONE_HARMONICS:
        signal += amplitude / len(MULTITONE_HARMONICS) * np.sin(2 * np.pi * harmonic * freq * t + phase)
    return signal


def white_noise(
    fs: float, length: float, amplitude: float, rng: np.random.Generator | None = None
) -> np.ndarray:
    """
    Generate uniformly distributed white noise.

    Parameters
    ----------
    fs : float
        The sampling frequency of the signal.
    length : float
        The duration of the signal in seconds.
    amplitude : float
        The peak amplitude of the noise.
    rng : numpy.random.Generator, optional
        Source of randomness, a new unseeded generator by default.

    Returns
    -------
    np.ndarray
        Independent samples drawn from ``uniform(-amplitude, amplitude)``.
    """
    rng = np.random.default_rng() if rng is None else rng
    return amplitude * rng.uniform(-1.0, 1.0, utils.n_samples(fs, length))


def pink_noise(
    fs: float, length: float, amplitude: float, rng: np.random.Generator | None = None
) -> np.ndarray:
    """
    Generate pink noise with the Voss-McCartney algorithm.

    16 white noise registers are kept, and at sample n register
    ``n % 16`` is refreshed with a new uniform value. The output is the
    mean of the registers scaled by ``amplitude``.

    Parameters
    ----------
    fs : float
        The sample rate of the generated signal.
    length : float
        The length of the generated signal in seconds.
    amplitude : float
        The amplitude of the generated signal.
    rng : numpy.random.Generator, optional
        Source of randomness, a new unseeded generator by default.

    Returns
    -------
    np.ndarray
        The generated pink noise signal.

    References
    ----------
    - https://www.firstpr.com.au/dsp/pink-noise/
    """
    rng = np.random.default_rng() if rng is None else rng
    n = utils.n_samples(fs, length)
    white = rng.uniform(-1.0, 1.0, n)

    # the registers always hold the last 16 white values (zero before the
    # first refresh), so their sum is a 16 sample running sum
    registers = np.convolve(white, np.ones(PINK_REGISTERS))[:n]
    return amplitude * registers / PINK_REGISTERS


def normalise(signal: np.ndarray, amplitude: float) -> np.ndarray:
    """Scale a signal so its peak absolute value is ``amplitude``.

    Silent (all zero) and empty signals are returned unchanged.
    """
    if len(signal) == 0:
        return signal
    peak = np.max(np.abs(signal))
    if peak == 0 or not np.isfinite(peak):
        return signal
    return signal / peak * amplitude


def check_signal_spec(spec: SignalSpec) -> None:
    """
    Check a signal request can be generated.

    Raises
    ------
    InvalidSpec
        If a parameter is out of range. The exception names the field.
    """
    utils.check_positive(spec.duration, "duration")
    utils.check_positive(spec.sample_rate, "sample_rate")
    utils.check_non_negative(spec.amplitude, "amplitude")
    utils.check_non_negative(spec.noise_level, "noise_level")
    if spec.waveform not in NOISE_WAVEFORMS:
        utils.check_positive(spec.frequency, "frequency")
    if spec.waveform in ("am", "fm", "chirp"):
        utils.check_non_negative(spec.modulation_frequency, "modulation_frequency")


def _waveform(spec: SignalSpec, rng: np.random.Generator) -> np.ndarray:
    fs = spec.sample_rate
    length = spec.duration
    f = spec.frequency
    amp = spec.amplitude
    phase = spec.phase

    if spec.waveform == "sine":
        return sine(fs, length, f, amp, phase)
    if spec.waveform == "cosine":
        return cosine(fs, length, f, amp, phase)
    if spec.waveform == "square":
        return square(fs, length, f, amp, phase)
    if spec.waveform == "sawtooth":
        return sawtooth(fs, length, f, amp, phase)
    if spec.waveform == "triangle":
        return triangle(fs, length, f, amp, phase)
    if spec.waveform == "chirp":
        return chirp(fs, length, amp, f, spec.modulation_frequency, phase)
    if spec.waveform == "fm":
        return fm(fs, length, f, amp, spec.modulation_frequency, spec.modulation_index, phase)
    if spec.waveform == "am":
        return am(fs, length, f, amp, spec.modulation_frequency, spec.modulation_index, phase)
    if spec.waveform == "pulse":
        return pulse(fs, length, f, amp)
    if spec.waveform == "multitone":
        return multitone(fs, length, f, amp, phase)
    if spec.waveform == "white_noise":
        return white_noise(fs, length, amp, rng)
    if spec.waveform == "pink_noise":
        return pink_noise(fs, length, amp, rng)

    raise InvalidSpec("waveform", f"unknown waveform {spec.waveform!r}")


def generate(spec: SignalSpec) -> Signal:
    """
    Generate a test signal.

    The waveform is synthesised, uniform noise of peak ``noise_level`` is
    added if requested, and the result is normalised so that its peak
    absolute value is ``amplitude``.

    Parameters
    ----------
    spec : SignalSpec
        The signal request.

    Returns
    -------
    Signal
        ``floor(duration*sample_rate)`` samples at ``sample_rate``.

    Raises
    ------
    InvalidSpec
        If the duration or sample rate is not positive, or another
        parameter is out of range.
    """
    check_signal_spec(spec)
    logger.debug(
        "generating %s, %g Hz, %g s at %g Hz", spec.waveform, spec.frequency, spec.duration, spec.sample_rate
    )

    rng = np.random.default_rng(spec.seed)
    signal = _waveform(spec, rng)

    if spec.noise_level > 0:
        signal = signal + spec.noise_level * rng.uniform(-1.0, 1.0, len(signal))

    signal = normalise(signal, spec.amplitude)
    return Signal(samples=signal, sample_rate=spec.sample_rate)
