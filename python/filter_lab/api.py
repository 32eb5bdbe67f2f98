# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Plain dict request/response functions around the engine.

These are what a transport layer (HTTP handler, job queue, CLI) calls
with a JSON decoded request. The responses contain only JSON
serialisable lists, numbers and strings, using the camelCase keys the
presentation layer indexes.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import numpy as np
from pydantic import BaseModel, ValidationError

from filter_lab.dsp import analysis, iir, signal_gen
from filter_lab.dsp.errors import InvalidSpec
from filter_lab.models import Coefficients, FilterSpec, Signal, SignalSpec
from filter_lab.models.fields import DEFAULT_NUM_POINTS, DEFAULT_RESPONSE_LENGTH

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


def _parse(model: type[ModelType], data: Any, field: str | None = None) -> ModelType:
    """Validate ``data`` as ``model``, converting pydantic errors to InvalidSpec."""
    if not isinstance(data, dict):
        raise InvalidSpec(field or model.__name__, "expected an object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        loc = ".".join(str(part) for part in error["loc"])
        if field:
            loc = f"{field}.{loc}" if loc else field
        raise InvalidSpec(loc or model.__name__, error["msg"]) from e


def _int_option(request: dict, key: str, default: int) -> int:
    value = request.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSpec(key, f"must be an integer, got {value!r}")
    return value


def _json(model: BaseModel) -> dict:
    return model.model_dump(mode="json")


def _finite_list(arr) -> list:
    # JSON has no NaN or Infinity, those samples are sent as null
    return [float(x) if np.isfinite(x) else None for x in arr]


def design_filter(request: dict) -> dict:
    """
    Design a filter and analyse it.

    Parameters
    ----------
    request : dict
        ``{filterType, designMethod, lowCutoff, highCutoff?, order,
        ripple?, stopbandAttenuation?, sampleRate, numPoints?,
        responseLength?}``. snake_case keys are also accepted.

    Returns
    -------
    dict
        ``{coefficients: {b, a}, poles, zeros, frequencyResponse:
        {frequencies, magnitudes, phases}, timeResponse: {impulse, step,
        groupDelay, groupDelayFrequencies}}``.
    """
    spec = _parse(FilterSpec, request)
    num_points = _int_option(request, "numPoints", DEFAULT_NUM_POINTS)
    length = _int_option(request, "responseLength", DEFAULT_RESPONSE_LENGTH)

    result = analysis.design(spec, num_points=num_points, response_length=length)
    roots = _json(result.pole_zero)
    time = _json(result.time_response)

    return {
        "coefficients": _json(result.coefficients),
        "poles": roots["poles"],
        "zeros": roots["zeros"],
        "frequencyResponse": _json(result.frequency_response),
        "timeResponse": {
            "impulse": time["impulse"],
            "step": time["step"],
            "groupDelay": time["group_delay"],
            "groupDelayFrequencies": time["group_delay_frequencies"],
        },
    }


def generate_signal(request: dict) -> dict:
    """
    Generate a test signal.

    Parameters
    ----------
    request : dict
        The :py:class:`SignalSpec` fields, e.g. ``{waveform, frequency,
        amplitude, duration, sampleRate, phase, modulationFrequency,
        modulationIndex, noiseLevel, seed}``.

    Returns
    -------
    dict
        ``{signal, time, sampleRate, duration, parameters}``.
    """
    spec = _parse(SignalSpec, request)
    signal = signal_gen.generate(spec)

    return {
        "signal": signal.samples.tolist(),
        "time": signal.time.tolist(),
        "sampleRate": signal.sample_rate,
        "duration": spec.duration,
        "parameters": spec.model_dump(mode="json", by_alias=True),
    }


def apply_filter(request: dict) -> dict:
    """
    Filter a signal.

    Parameters
    ----------
    request : dict
        ``{signal: {samples, sampleRate}, coefficients: {b, a}}``.

    Returns
    -------
    dict
        ``{signal, sampleRate, filtered}``, where ``signal`` holds the
        filtered samples. NaN and infinite samples, for example from NaN
        input or an unstable filter, are returned as ``None`` so that the
        response is valid JSON.
    """
    if not isinstance(request, dict):
        raise InvalidSpec("request", "expected an object")
    signal = _parse(Signal, request.get("signal"), "signal")
    coeffs = _parse(Coefficients, request.get("coefficients"), "coefficients")
    logger.debug("applying order %d filter to %d samples", coeffs.order, len(signal))

    filtered = iir.apply_signal(coeffs, signal)
    return {
        "signal": _finite_list(filtered.samples),
        "sampleRate": filtered.sample_rate,
        "filtered": True,
    }


def analyze_signal(request: dict) -> dict:
    """
    Calculate the magnitude spectrum of a signal.

    Parameters
    ----------
    request : dict
        ``{signal: {samples, sampleRate}}``.

    Returns
    -------
    dict
        ``{frequencies, magnitudes, magnitudesDb, peakFrequency}``. As in
        :py:func:`apply_filter`, non-finite values are returned as ``None``.
    """
    if not isinstance(request, dict):
        raise InvalidSpec("request", "expected an object")
    signal = _parse(Signal, request.get("signal"), "signal")
    spec = analysis.spectrum(signal)

    return {
        "frequencies": spec.frequencies.tolist(),
        "magnitudes": _finite_list(spec.magnitudes),
        "magnitudesDb": _finite_list(spec.magnitudes_db),
        "peakFrequency": analysis.peak_frequency(spec),
    }
