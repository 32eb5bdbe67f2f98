# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Utility functions used by the DSP engine.

Includes the complex arithmetic helpers shared by the synthesis and
analysis code. They accept Python complex numbers or numpy arrays and
operate elementwise.
"""

import math

import numpy as np

from filter_lab.dsp.errors import InvalidSpec

FLT_MIN = np.finfo(float).tiny

# roots with an imaginary part smaller than this are treated as real
REAL_TOL = 1e-10


def db(input):
    """Convert an amplitude to decibels (20*log10(abs(x)))."""
    out = 20 * np.log10(np.abs(input) + FLT_MIN)
    return out


def c_add(x, y):
    """Add two complex values."""
    return np.add(x, y, dtype=complex)


def c_mul(x, y):
    """Multiply two complex values."""
    return np.multiply(x, y, dtype=complex)


def c_div(x, y):
    """Divide two complex values.

    Raises
    ------
    ZeroDivisionError
        If any element of ``y`` is exactly zero.
    """
    y = np.asarray(y, dtype=complex)
    if np.any(y == 0):
        raise ZeroDivisionError("complex division by zero")
    return np.divide(x, y, dtype=complex)


def c_pow(x, n):
    """Raise a complex value to a (possibly negative) power."""
    return np.power(np.asarray(x, dtype=complex), n)


def c_abs(x):
    """Magnitude of a complex value."""
    return np.abs(x)


def c_arg(x):
    """Argument of a complex value in radians, in the range [-pi, pi]."""
    return np.angle(x)


def is_real(root, tol=REAL_TOL) -> bool:
    """Return True if a root is close enough to the real axis to be treated as real."""
    return abs(complex(root).imag) < tol


def evaluate_polynomial(coeffs, z):
    """Evaluate ``sum(coeffs[i] * z**-i)`` at each point of ``z``.

    Parameters
    ----------
    coeffs : array_like
        Polynomial coefficients in increasing powers of z^-1.
    z : complex or array_like
        Points in the z-plane.

    Returns
    -------
    complex or numpy.ndarray
        The polynomial value at each point.
    """
    z = np.asarray(z, dtype=complex)
    total = np.zeros_like(z)
    for i, c in enumerate(coeffs):
        total = c_add(total, c_mul(c, c_pow(z, -i)))
    return total


def wrap_degrees(phase):
    """Wrap a phase in degrees to the interval (-180, 180]."""
    wrapped = np.mod(np.asarray(phase, dtype=float) + 180.0, 360.0) - 180.0
    wrapped[wrapped == -180.0] = 180.0
    return wrapped


def n_samples(fs: float, duration: float) -> int:
    """Number of samples in ``duration`` seconds at sample rate ``fs``.

    The product is rounded to 9 decimal places before taking the floor, so
    that float error such as ``0.29 * 100 = 28.999999999999996`` does not
    lose a sample.
    """
    return int(math.floor(round(duration * fs, 9)))


def check_positive(value: float, field: str) -> float:
    """Raise InvalidSpec if ``value`` is not strictly positive."""
    if not value > 0:
        raise InvalidSpec(field, f"must be greater than 0, got {value}")
    return value


def check_non_negative(value: float, field: str) -> float:
    """Raise InvalidSpec if ``value`` is negative."""
    if not value >= 0:
        raise InvalidSpec(field, f"must not be negative, got {value}")
    return value
