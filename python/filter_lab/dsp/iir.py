# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Direct form IIR filtering and polynomial convolution."""

import logging

import numpy as np
import numpy.typing as npt
import scipy.signal as spsig

from filter_lab.dsp.errors import EmptyInput
from filter_lab.models import Coefficients, Signal

logger = logging.getLogger(__name__)


def apply(coeffs: Coefficients, input) -> npt.NDArray[np.float64]:
    """
    Filter a signal with an IIR transfer function.

    This implements the difference equation:
    `y[n] = b0*x[n] + b1*x[n-1] + ... - a1*y[n-1] - a2*y[n-2] - ...`

    with zero initial conditions on every call. It is the only filtering
    routine in the engine; the impulse and step responses are computed by
    passing a unit impulse or unit step through it.

    Parameters
    ----------
    coeffs : Coefficients
        The filter, normalised so that ``a[0] == 1``.
    input : array_like
        The input samples.

    Returns
    -------
    npt.NDArray[np.float64]
        The filtered samples, the same length as ``input``. NaN and Inf
        samples are propagated.

    Raises
    ------
    EmptyInput
        If ``input`` has no samples.
    """
    x = np.asarray(input, dtype=float)
    if x.ndim != 1:
        x = x.ravel()
    if len(x) == 0:
        raise EmptyInput("cannot filter an empty signal")

    logger.debug("filtering %d samples, len(b)=%d len(a)=%d", len(x), len(coeffs.b), len(coeffs.a))
    y = spsig.lfilter(coeffs.b, coeffs.a, x)
    return np.asarray(y, dtype=float)


def apply_signal(coeffs: Coefficients, signal: Signal) -> Signal:
    """Filter a Signal, keeping its sample rate."""
    return Signal(samples=apply(coeffs, signal.samples), sample_rate=signal.sample_rate)


def convolve(p, q) -> npt.NDArray[np.float64]:
    """
    Full linear convolution of two sequences.

    When ``p`` and ``q`` are polynomial coefficients, this is their
    product: ``convolve([1, 2], [1, 1])`` is ``[1, 3, 2]``.

    Raises
    ------
    EmptyInput
        If either sequence is empty.
    """
    p = np.asarray(p)
    q = np.asarray(q)
    if p.size == 0 or q.size == 0:
        raise EmptyInput("cannot convolve an empty sequence")
    return np.convolve(p, q)


def unit_impulse(length: int) -> npt.NDArray[np.float64]:
    """A unit sample at n=0 followed by zeros."""
    x = np.zeros(length)
    if length > 0:
        x[0] = 1.0
    return x


def unit_step(length: int) -> npt.NDArray[np.float64]:
    """A unit step starting at n=0."""
    return np.ones(length)
