# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Shared field types and defaults for the filter_lab models."""

from functools import partial
from typing import Annotated, Any

import numpy as np
from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    WithJsonSchema,
)
from pydantic.alias_generators import to_camel


class EngineModel(BaseModel):
    """Base model for all engine inputs and outputs.

    Models are immutable once built, ignore unknown keys, and accept
    either snake_case field names or their camelCase aliases.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        arbitrary_types_allowed=True,
    )


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def _to_float_array(value: Any) -> np.ndarray:
    try:
        arr = np.array(value, dtype=float)
    except (TypeError, ValueError) as e:
        raise ValueError(f"expected a sequence of numbers ({e})") from e
    if arr.ndim != 1:
        raise ValueError(f"expected a 1-D sequence, got {arr.ndim} dimensions")
    return _readonly(arr)


def _to_complex(value: Any) -> complex:
    if isinstance(value, dict):
        return complex(value.get("real", 0.0), value.get("imag", 0.0))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return complex(value[0], value[1])
    return complex(value)


def _to_complex_array(value: Any) -> np.ndarray:
    if isinstance(value, np.ndarray):
        arr = np.array(value, dtype=complex)
    else:
        try:
            arr = np.array([_to_complex(v) for v in value], dtype=complex)
        except (TypeError, ValueError) as e:
            raise ValueError(f"expected a sequence of complex numbers ({e})") from e
    if arr.ndim != 1:
        raise ValueError(f"expected a 1-D sequence, got {arr.ndim} dimensions")
    return _readonly(arr)


def _complex_to_json(arr: np.ndarray) -> list[dict[str, float]]:
    return [{"real": float(c.real), "imag": float(c.imag)} for c in arr]


FloatArray = Annotated[
    np.ndarray,
    BeforeValidator(_to_float_array),
    PlainSerializer(lambda arr: arr.tolist(), return_type=list[float], when_used="json"),
    WithJsonSchema({"type": "array", "items": {"type": "number"}}),
]
"""A read-only 1-D float64 array that serialises to a JSON list."""

ComplexArray = Annotated[
    np.ndarray,
    BeforeValidator(_to_complex_array),
    PlainSerializer(_complex_to_json, return_type=list[dict[str, float]], when_used="json"),
    WithJsonSchema(
        {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"real": {"type": "number"}, "imag": {"type": "number"}},
            },
        }
    ),
]
"""A read-only 1-D complex128 array that serialises to ``[{"real", "imag"}]``."""


DEFAULT_ORDER = partial(Field, default=4, description="Order of the analog prototype.")
DEFAULT_CUTOFF = partial(
    Field,
    default=1000.0,
    validation_alias=AliasChoices("low_cutoff", "lowCutoff", "cutoffFreq", "cutoff"),
    serialization_alias="lowCutoff",
    description="Cutoff frequency in Hz, the lower band edge for band filters.",
)
DEFAULT_HIGH_CUTOFF = partial(
    Field,
    default=None,
    validation_alias=AliasChoices("high_cutoff", "highCutoff", "highCutoffFreq"),
    serialization_alias="highCutoff",
    description="Upper band edge in Hz, used by bandpass and bandstop filters.",
)
DEFAULT_RIPPLE_DB = partial(
    Field,
    default=0.5,
    validation_alias=AliasChoices("passband_ripple", "passbandRipple", "ripple"),
    serialization_alias="passbandRipple",
    description="Passband ripple in dB for Chebyshev and elliptic designs.",
)
DEFAULT_STOPBAND_DB = partial(
    Field, default=40.0, description="Stopband attenuation in dB for elliptic designs."
)
DEFAULT_FS = partial(Field, default=44100.0, description="Sample rate in Hz.")

DEFAULT_FREQ = partial(Field, default=1000.0, description="Fundamental frequency in Hz.")
DEFAULT_AMPLITUDE = partial(Field, default=1.0, description="Peak amplitude of the signal.")
DEFAULT_DURATION = partial(Field, default=1.0, description="Duration of the signal in seconds.")
DEFAULT_PHASE = partial(Field, default=0.0, description="Initial phase in radians.")
DEFAULT_MOD_FREQ = partial(
    Field,
    default=100.0,
    validation_alias=AliasChoices(
        "modulation_frequency", "modulationFrequency", "modulationFreq"
    ),
    serialization_alias="modulationFrequency",
    description="Modulating frequency in Hz, or the chirp end frequency.",
)
DEFAULT_MOD_INDEX = partial(Field, default=1.0, description="Modulation index for AM and FM.")
DEFAULT_NOISE_LEVEL = partial(
    Field, default=0.0, description="Peak level of the uniform noise added to the signal."
)

DEFAULT_NUM_POINTS = 1000
DEFAULT_RESPONSE_LENGTH = 100
