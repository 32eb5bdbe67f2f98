# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""The pydantic models of the engine inputs and outputs."""

from .filter import (
    FilterSpec,
    Coefficients,
    PoleZeroSet,
    FrequencyResponse,
    TimeResponse,
    FilterDesign,
)
from .signal import Signal, SignalSpec, Spectrum
