# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Models for filter design requests and results."""

from typing import Literal, Optional

import numpy as np
from pydantic import AliasChoices, Field, field_validator, model_validator

from filter_lab.models.fields import (
    DEFAULT_CUTOFF,
    DEFAULT_FS,
    DEFAULT_HIGH_CUTOFF,
    DEFAULT_ORDER,
    DEFAULT_RIPPLE_DB,
    DEFAULT_STOPBAND_DB,
    ComplexArray,
    EngineModel,
    FloatArray,
)

FilterType = Literal["lowpass", "highpass", "bandpass", "bandstop"]
DesignMethod = Literal["butterworth", "chebyshev1", "elliptic"]

# spellings used by existing callers
_TYPE_NAMES = {
    "low": "lowpass",
    "high": "highpass",
    "band": "bandpass",
    "stop": "bandstop",
    "notch": "bandstop",
}
_METHOD_NAMES = {
    "chebyshev": "chebyshev1",
    "chebyshevi": "chebyshev1",
    "chebyshevtypei": "chebyshev1",
    "cheby1": "chebyshev1",
    "ellip": "elliptic",
    "butter": "butterworth",
}


def _squash(name: str) -> str:
    return "".join(c for c in name.lower() if c.isalnum())


class FilterSpec(EngineModel):
    """A filter design request.

    Range checks (order, cutoffs against the Nyquist frequency) are made
    by :py:func:`filter_lab.dsp.design.synthesize`, so that a spec built
    directly and a spec parsed from JSON fail in the same way.

    Attributes
    ----------
    filter_type : {"lowpass", "highpass", "bandpass", "bandstop"}
        The kind of filter.
    design_method : {"butterworth", "chebyshev1", "elliptic"}
        The analog prototype family.
    order : int
        Order of the analog prototype. Band filters are twice this order.
    low_cutoff : float
        Cutoff frequency in Hz, or the lower band edge.
    high_cutoff : float, optional
        Upper band edge in Hz, only used by band filters.
    passband_ripple : float
        Passband ripple in dB.
    stopband_attenuation : float
        Stopband attenuation in dB. Accepted for elliptic designs, which
        are currently approximated and ignore it.
    sample_rate : float
        Sample rate in Hz.
    """

    filter_type: FilterType = Field(
        default="lowpass",
        validation_alias=AliasChoices("filter_type", "filterType", "type"),
        serialization_alias="filterType",
    )
    design_method: DesignMethod = Field(
        default="butterworth",
        validation_alias=AliasChoices("design_method", "designMethod", "filterDesign", "method"),
        serialization_alias="designMethod",
    )
    order: int = DEFAULT_ORDER(validation_alias=AliasChoices("order", "filterOrder"))
    low_cutoff: float = DEFAULT_CUTOFF()
    high_cutoff: Optional[float] = DEFAULT_HIGH_CUTOFF()
    passband_ripple: float = DEFAULT_RIPPLE_DB()
    stopband_attenuation: float = DEFAULT_STOPBAND_DB()
    sample_rate: float = DEFAULT_FS()

    @field_validator("filter_type", mode="before")
    @classmethod
    def _normalise_type(cls, value):
        if isinstance(value, str):
            name = _squash(value)
            return _TYPE_NAMES.get(name, name)
        return value

    @field_validator("design_method", mode="before")
    @classmethod
    def _normalise_method(cls, value):
        if isinstance(value, str):
            name = _squash(value)
            return _METHOD_NAMES.get(name, name)
        return value

    @property
    def nyquist(self) -> float:
        """Half the sample rate."""
        return self.sample_rate / 2

    @property
    def is_band(self) -> bool:
        """True for bandpass and bandstop filters."""
        return self.filter_type in ("bandpass", "bandstop")


class Coefficients(EngineModel):
    """The transfer function H(z) = B(z)/A(z) of an IIR filter.

    The coefficients are normalised on construction so that ``a[0] == 1``.

    Attributes
    ----------
    b : numpy.ndarray
        Numerator coefficients, in increasing powers of z^-1.
    a : numpy.ndarray
        Denominator coefficients, in increasing powers of z^-1.
    """

    b: FloatArray
    a: FloatArray

    @model_validator(mode="before")
    @classmethod
    def _normalise(cls, data):
        if not isinstance(data, dict) or "a" not in data or "b" not in data:
            return data
        b = np.array(data["b"], dtype=float, ndmin=1)
        a = np.array(data["a"], dtype=float, ndmin=1)
        if len(b) < 1:
            raise ValueError("b must contain at least one coefficient")
        if len(a) < 1:
            raise ValueError("a must contain at least one coefficient")
        if a[0] == 0:
            raise ValueError("a[0] must not be zero")
        return {**data, "b": b / a[0], "a": a / a[0]}

    @property
    def order(self) -> int:
        """The order of the filter, the larger polynomial degree."""
        return max(len(self.b), len(self.a)) - 1


class PoleZeroSet(EngineModel):
    """The z-plane poles and zeros of a realised filter."""

    poles: ComplexArray
    zeros: ComplexArray


class FrequencyResponse(EngineModel):
    """H(e^jw) sampled from 1 Hz up to the Nyquist frequency.

    Attributes
    ----------
    frequencies : numpy.ndarray
        Ascending frequencies in Hz.
    magnitudes : numpy.ndarray
        Magnitude response in dB.
    phases : numpy.ndarray
        Phase response in degrees, wrapped to (-180, 180].
    """

    frequencies: FloatArray
    magnitudes: FloatArray
    phases: FloatArray

    @model_validator(mode="after")
    def _check_lengths(self):
        if not len(self.frequencies) == len(self.magnitudes) == len(self.phases):
            raise ValueError("frequencies, magnitudes and phases must be the same length")
        return self


class TimeResponse(EngineModel):
    """Time domain behaviour of a filter.

    Attributes
    ----------
    impulse : numpy.ndarray
        Response to a unit sample at n=0.
    step : numpy.ndarray
        Response to a unit step starting at n=0.
    group_delay : numpy.ndarray
        Group delay in samples.
    group_delay_frequencies : numpy.ndarray
        Frequency axis of ``group_delay`` in Hz. This is the frequency
        response axis without its first and last points.
    """

    impulse: FloatArray
    step: FloatArray
    group_delay: FloatArray
    group_delay_frequencies: FloatArray

    @model_validator(mode="after")
    def _check_lengths(self):
        if len(self.group_delay) != len(self.group_delay_frequencies):
            raise ValueError("group_delay and group_delay_frequencies must be the same length")
        return self


class FilterDesign(EngineModel):
    """Everything known about a synthesised filter."""

    spec: FilterSpec
    coefficients: Coefficients
    pole_zero: PoleZeroSet
    frequency_response: FrequencyResponse
    time_response: TimeResponse
