# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""IIR filter synthesis from classical analog prototypes.

Analog prototype poles are placed for a unit cutoff, scaled to the
prewarped cutoff frequency, and mapped to the z-plane with the bilinear
transform, following Neil Robertson's article "Designing Cascaded Biquad
Filters Using the Pole-Zero Method"
(`https://www.dsprelated.com/showarticle/1137.php`_). The z-plane roots
are then multiplied out into a single transfer function.
"""

import logging
import warnings

import numpy as np
import numpy.typing as npt

from filter_lab.dsp import utils as utils
from filter_lab.dsp.errors import InvalidSpec, UnsupportedCombination
from filter_lab.dsp.iir import convolve
from filter_lab.models import Coefficients, FilterSpec, PoleZeroSet

logger = logging.getLogger(__name__)

# filter types each design method has a formula for
SUPPORTED_TYPES = {
    "butterworth": ("lowpass", "highpass", "bandpass", "bandstop"),
    "chebyshev1": ("lowpass", "highpass", "bandpass", "bandstop"),
    "elliptic": ("lowpass",),
}

# allowed gap between the direct form denominator and its designed poles
REALISATION_TOL_DB = 0.1
# the gap is only measured where the designed response is above this
REALISATION_FLOOR_DB = -60.0
REALISATION_POINTS = 64


def _pole_angles(order: int) -> npt.NDArray[np.float64]:
    k = np.arange(order)
    return np.pi * (2 * k + 1) / (2 * order)


def butterworth_poles(order: int) -> npt.NDArray[np.complex128]:
    """
    Analog Butterworth prototype poles for a cutoff of 1 rad/s.

    Parameters
    ----------
    order : int
        Number of poles.

    Returns
    -------
    npt.NDArray[np.complex128]
        The poles ``-sin(theta_k) + j*cos(theta_k)``, with
        ``theta_k = pi*(2k+1)/(2*order)``.
    """
    theta = _pole_angles(order)
    return -np.sin(theta) + 1j * np.cos(theta)


def chebyshev1_poles(order: int, ripple_db: float) -> npt.NDArray[np.complex128]:
    """
    Analog Chebyshev type I prototype poles for a passband edge of 1 rad/s.

    Parameters
    ----------
    order : int
        Number of poles.
    ripple_db : float
        Peak to peak passband ripple in dB.

    Returns
    -------
    npt.NDArray[np.complex128]
        The prototype poles.
    """
    epsilon = np.sqrt(10 ** (ripple_db / 10) - 1)
    mu = np.arcsinh(1 / epsilon) / order
    theta = _pole_angles(order)
    return -np.sinh(mu) * np.sin(theta) + 1j * np.cosh(mu) * np.cos(theta)


def prewarp(filter_freq: float, fs: float) -> float:
    """Prewarped analog cutoff for the bilinear transform.

    The normalised angular cutoff is ``wc = pi*filter_freq/(fs/2)``, and the
    analog frequency that the bilinear transform maps onto it is
    ``tan(wc/2)``.
    """
    wc = np.pi * filter_freq / (fs / 2)
    return float(np.tan(wc / 2))


def bilinear(analog_roots) -> npt.NDArray[np.complex128]:
    """Map s-plane roots to the z-plane, ``z = (1 + s)/(1 - s)``."""
    s = np.asarray(analog_roots, dtype=complex)
    return utils.c_div(utils.c_add(1, s), utils.c_add(1, -s))


def roots_to_polynomial(roots, field: str = "roots") -> npt.NDArray[np.float64]:
    """
    Multiply out a set of roots into polynomial coefficients.

    Each real root contributes a first order factor ``(1, -re)``, and each
    conjugate pair contributes a second order factor
    ``(1, -2*re, re**2 + im**2)``. The leading coefficient is always 1.

    Parameters
    ----------
    roots : array_like
        Roots in the z-plane. Complex roots must come in conjugate pairs.
    field : str, optional
        Name reported in the error if the roots are not conjugate
        symmetric.

    Returns
    -------
    npt.NDArray[np.float64]
        Coefficients in increasing powers of z^-1.

    Raises
    ------
    InvalidSpec
        If a complex root has no conjugate partner.
    """
    roots = np.asarray(roots, dtype=complex)
    poly = np.array([1.0])

    upper = []
    lower = []
    for root in roots:
        if utils.is_real(root):
            poly = convolve(poly, [1.0, -root.real])
        elif root.imag > 0:
            upper.append(root)
        else:
            lower.append(root)

    unmatched = list(lower)
    for root in upper:
        match = next(
            (n for n, other in enumerate(unmatched) if np.isclose(other, np.conj(root), rtol=1e-8, atol=1e-10)),
            None,
        )
        if match is None:
            raise InvalidSpec(field, f"complex root {root} has no conjugate partner")
        unmatched.pop(match)
        poly = convolve(poly, [1.0, -2 * root.real, root.real**2 + root.imag**2])

    if unmatched:
        raise InvalidSpec(field, f"complex root {unmatched[0]} has no conjugate partner")

    return poly


def _normalise_gain(b, a, z_ref: complex):
    """Scale b so that |H(z_ref)| is 1."""
    num = abs(complex(utils.evaluate_polynomial(b, z_ref)))
    den = abs(complex(utils.evaluate_polynomial(a, z_ref)))
    if num == 0:
        return b
    return b * (den / num)


def make_lowpass(prototype_poles, filter_freq: float, fs: float) -> tuple[Coefficients, PoleZeroSet]:
    """
    Realise a digital lowpass filter from unit cutoff analog poles.

    The analog poles are scaled to the prewarped cutoff, and mapped to
    the z-plane. All the zeros are at z = -1. The numerator is scaled for
    unity gain at DC.

    Parameters
    ----------
    prototype_poles : array_like
        Analog prototype poles for a cutoff of 1 rad/s.
    filter_freq : float
        Cutoff frequency in Hz.
    fs : float
        Sample rate in Hz.

    Returns
    -------
    tuple[Coefficients, PoleZeroSet]
        The transfer function and its z-plane roots.
    """
    analog = np.asarray(prototype_poles, dtype=complex) * prewarp(filter_freq, fs)
    poles = bilinear(analog)
    zeros = -np.ones(len(poles), dtype=complex)

    a = roots_to_polynomial(poles, "poles")
    b = roots_to_polynomial(zeros, "zeros")
    b = _normalise_gain(b, a, 1.0)

    return Coefficients(b=b, a=a), PoleZeroSet(poles=poles, zeros=zeros)


def make_highpass(prototype_poles, filter_freq: float, fs: float) -> tuple[Coefficients, PoleZeroSet]:
    """
    Realise a digital highpass filter from unit cutoff analog poles.

    The lowpass to highpass transform ``s -> wc/s`` moves each analog pole
    to ``wc/p``, and all the zeros to z = 1 (DC). The numerator is scaled
    for unity gain at the Nyquist frequency. See also "Design IIR Highpass
    Filters" (`https://www.dsprelated.com/showarticle/1135.php`_).

    Parameters
    ----------
    prototype_poles : array_like
        Analog prototype poles for a cutoff of 1 rad/s.
    filter_freq : float
        Cutoff frequency in Hz.
    fs : float
        Sample rate in Hz.

    Returns
    -------
    tuple[Coefficients, PoleZeroSet]
        The transfer function and its z-plane roots.
    """
    analog = utils.c_div(prewarp(filter_freq, fs), np.asarray(prototype_poles, dtype=complex))
    poles = bilinear(analog)
    zeros = np.ones(len(poles), dtype=complex)

    a = roots_to_polynomial(poles, "poles")
    b = roots_to_polynomial(zeros, "zeros")
    b = _normalise_gain(b, a, -1.0)

    return Coefficients(b=b, a=a), PoleZeroSet(poles=poles, zeros=zeros)


def _prototype(spec: FilterSpec) -> npt.NDArray[np.complex128]:
    if spec.design_method == "butterworth":
        return butterworth_poles(spec.order)

    if spec.design_method == "elliptic":
        # no elliptic rational design yet, the output is a Chebyshev type I filter
        warnings.warn(
            "elliptic filters are approximated by a Chebyshev type I design, "
            "stopband_attenuation (%.1f dB) is ignored" % spec.stopband_attenuation,
            UserWarning,
        )

    return chebyshev1_poles(spec.order, spec.passband_ripple)


def check_spec(spec: FilterSpec) -> None:
    """
    Check a filter request can be synthesised.

    Raises
    ------
    UnsupportedCombination
        If the design method has no formula for the filter type.
    InvalidSpec
        If a parameter is out of range. The exception names the field.
    """
    if spec.filter_type not in SUPPORTED_TYPES[spec.design_method]:
        raise UnsupportedCombination(spec.design_method, spec.filter_type)

    utils.check_positive(spec.sample_rate, "sample_rate")
    if spec.order < 1:
        raise InvalidSpec("order", f"must be at least 1, got {spec.order}")
    if not 0 < spec.low_cutoff < spec.nyquist:
        raise InvalidSpec(
            "low_cutoff",
            f"must be between 0 and {spec.nyquist:g} Hz (fs/2), got {spec.low_cutoff:g}",
        )
    if spec.is_band:
        if spec.high_cutoff is None:
            raise InvalidSpec("high_cutoff", f"is required for {spec.filter_type} filters")
        if not spec.low_cutoff < spec.high_cutoff < spec.nyquist:
            raise InvalidSpec(
                "high_cutoff",
                f"must be between low_cutoff ({spec.low_cutoff:g} Hz) and "
                f"{spec.nyquist:g} Hz (fs/2), got {spec.high_cutoff:g}",
            )
    if spec.design_method != "butterworth":
        utils.check_positive(spec.passband_ripple, "passband_ripple")


def check_realisation(spec: FilterSpec, coeffs: Coefficients, roots: PoleZeroSet) -> None:
    """
    Check the multiplied out transfer function still behaves like its roots.

    High order filters with a low cutoff have their poles clustered close
    to z = 1. Rounding the direct form denominator to double precision can
    then move those poles a long way, even outside the unit circle. The
    denominator is checked in two ways: its own roots must lie inside the
    unit circle, and its magnitude must match the product of the designed
    pole factors to within ``REALISATION_TOL_DB`` wherever the designed
    response is above ``REALISATION_FLOOR_DB``.

    Raises
    ------
    InvalidSpec
        Against ``order`` if either check fails.
    """
    remedy = "use a lower order or a higher cutoff frequency"

    realised = np.roots(coeffs.a)
    radius = float(np.max(np.abs(realised))) if len(realised) else 0.0
    if radius >= 1:
        raise InvalidSpec(
            "order",
            f"an order {spec.order} filter at this cutoff has numerically unstable "
            f"direct form coefficients (a pole at |z| = {radius:.6f}), {remedy}",
        )

    nyquist = spec.nyquist
    freqs = np.concatenate([[0.0], np.geomspace(nyquist * 1e-4, nyquist, REALISATION_POINTS)])
    z = np.exp(1j * np.pi * freqs / nyquist)

    num = utils.evaluate_polynomial(coeffs.b, z)
    den = utils.evaluate_polynomial(coeffs.a, z)
    factored = np.prod(utils.c_add(1, -utils.c_div(roots.poles[:, np.newaxis], z[np.newaxis, :])), axis=0)

    designed_db = utils.db(utils.c_div(num, factored))
    error_db = np.abs(utils.db(factored) - utils.db(den))
    error_db = error_db[designed_db > REALISATION_FLOOR_DB]
    if len(error_db) and np.max(error_db) > REALISATION_TOL_DB:
        raise InvalidSpec(
            "order",
            f"an order {spec.order} filter at this cutoff loses {np.max(error_db):.2f} dB "
            f"of accuracy in its direct form coefficients, {remedy}",
        )


def synthesize(spec: FilterSpec) -> tuple[Coefficients, PoleZeroSet]:
    """
    Design an IIR filter.

    Lowpass and highpass filters are realised directly from the analog
    prototype. Bandpass filters cascade a lowpass at the upper band edge
    with a highpass at the lower band edge, multiplying the two transfer
    functions. Bandstop filters add a lowpass at the lower band edge to a
    highpass at the upper band edge, ``H = H_lp + H_hp``, rather than
    cascading them, which would stop every frequency. The bandstop zeros
    are the roots of the summed numerator. Neither is a true band
    transform of the prototype.

    Parameters
    ----------
    spec : FilterSpec
        The filter request.

    Returns
    -------
    tuple[Coefficients, PoleZeroSet]
        The normalised transfer function (``a[0] == 1``) and its z-plane
        poles and zeros.

    Raises
    ------
    UnsupportedCombination
        If the design method has no formula for the filter type, e.g. an
        elliptic highpass.
    InvalidSpec
        If the order is less than 1 or a cutoff is outside (0, fs/2), or
        against ``order`` if the direct form coefficients cannot represent
        the design accurately (see ``check_realisation``).
    """
    check_spec(spec)
    logger.debug(
        "designing order %d %s %s filter, cutoff %s/%s Hz, fs %s Hz",
        spec.order,
        spec.design_method,
        spec.filter_type,
        spec.low_cutoff,
        spec.high_cutoff,
        spec.sample_rate,
    )

    proto = _prototype(spec)
    fs = spec.sample_rate

    if spec.filter_type == "lowpass":
        coeffs, roots = make_lowpass(proto, spec.low_cutoff, fs)
    elif spec.filter_type == "highpass":
        coeffs, roots = make_highpass(proto, spec.low_cutoff, fs)
    else:
        if spec.filter_type == "bandpass":
            lp, lp_roots = make_lowpass(proto, spec.high_cutoff, fs)
            hp, hp_roots = make_highpass(proto, spec.low_cutoff, fs)
            b = convolve(lp.b, hp.b)
            zeros = np.concatenate([lp_roots.zeros, hp_roots.zeros])
        else:
            lp, lp_roots = make_lowpass(proto, spec.low_cutoff, fs)
            hp, hp_roots = make_highpass(proto, spec.high_cutoff, fs)
            b = convolve(lp.b, hp.a) + convolve(hp.b, lp.a)
            zeros = np.roots(b)
        a = convolve(lp.a, hp.a)
        poles = np.concatenate([lp_roots.poles, hp_roots.poles])
        coeffs, roots = Coefficients(b=b, a=a), PoleZeroSet(poles=poles, zeros=zeros)

    check_realisation(spec, coeffs, roots)
    return coeffs, roots
