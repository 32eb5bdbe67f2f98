# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Models for signals, signal generation requests and spectra."""

from typing import Literal, Optional

import numpy as np
from pydantic import AliasChoices, Field, field_validator

from filter_lab.models.fields import (
    DEFAULT_AMPLITUDE,
    DEFAULT_DURATION,
    DEFAULT_FREQ,
    DEFAULT_FS,
    DEFAULT_MOD_FREQ,
    DEFAULT_MOD_INDEX,
    DEFAULT_NOISE_LEVEL,
    DEFAULT_PHASE,
    EngineModel,
    FloatArray,
)
from filter_lab.dsp import utils

WAVEFORMS = (
    "sine",
    "cosine",
    "square",
    "sawtooth",
    "triangle",
    "chirp",
    "fm",
    "am",
    "pulse",
    "multitone",
    "white_noise",
    "pink_noise",
)

Waveform = Literal[
    "sine",
    "cosine",
    "square",
    "sawtooth",
    "triangle",
    "chirp",
    "fm",
    "am",
    "pulse",
    "multitone",
    "white_noise",
    "pink_noise",
]

_WAVEFORM_NAMES = {"noise": "white_noise", "white": "white_noise", "pink": "pink_noise"}


class Signal(EngineModel):
    """A real valued discrete-time signal.

    Attributes
    ----------
    samples : numpy.ndarray
        The sample values in chronological order.
    sample_rate : float
        Sample rate in Hz.
    """

    samples: FloatArray
    sample_rate: float = Field(
        validation_alias=AliasChoices("sample_rate", "sampleRate", "fs"),
        serialization_alias="sampleRate",
    )

    @field_validator("sample_rate")
    @classmethod
    def _check_fs(cls, value):
        if not value > 0:
            raise ValueError("sample_rate must be greater than 0")
        return value

    @property
    def duration(self) -> float:
        """Length of the signal in seconds."""
        return len(self.samples) / self.sample_rate

    @property
    def time(self) -> np.ndarray:
        """Time of each sample in seconds."""
        return np.arange(len(self.samples)) / self.sample_rate

    def __len__(self):
        return len(self.samples)


class SignalSpec(EngineModel):
    """A signal generation request.

    Range checks are made by :py:func:`filter_lab.dsp.signal_gen.generate`.

    Attributes
    ----------
    waveform : str
        One of :py:data:`WAVEFORMS`. ``"noise"`` is accepted as an alias of
        ``"white_noise"``.
    frequency : float
        Fundamental (or chirp start) frequency in Hz.
    amplitude : float
        Peak amplitude of the normalised output.
    duration : float
        Length of the signal in seconds.
    sample_rate : float
        Sample rate in Hz.
    phase : float
        Initial phase in radians.
    modulation_frequency : float
        Modulating frequency for AM/FM, or the end frequency of a chirp.
    modulation_index : float
        Modulation depth for AM and frequency deviation in Hz for FM.
    noise_level : float
        Peak level of uniform noise added before normalisation.
    seed : int, optional
        Seed for the random generator, for reproducible noise.
    """

    waveform: Waveform = Field(
        default="sine",
        validation_alias=AliasChoices("waveform", "signalType", "signal_type", "kind"),
    )
    frequency: float = DEFAULT_FREQ()
    amplitude: float = DEFAULT_AMPLITUDE()
    duration: float = DEFAULT_DURATION()
    sample_rate: float = DEFAULT_FS()
    phase: float = DEFAULT_PHASE()
    modulation_frequency: float = DEFAULT_MOD_FREQ()
    modulation_index: float = DEFAULT_MOD_INDEX()
    noise_level: float = DEFAULT_NOISE_LEVEL()
    seed: Optional[int] = None

    @field_validator("waveform", mode="before")
    @classmethod
    def _normalise_waveform(cls, value):
        if isinstance(value, str):
            name = value.strip().lower().replace("-", "_").replace(" ", "_")
            return _WAVEFORM_NAMES.get(name, name)
        return value


class Spectrum(EngineModel):
    """One sided magnitude spectrum of a signal.

    Attributes
    ----------
    frequencies : numpy.ndarray
        Bin centre frequencies in Hz, from 0 to the Nyquist frequency.
    magnitudes : numpy.ndarray
        Linear magnitude of each bin, scaled so that a sine of amplitude
        A reads A at its bin.
    """

    frequencies: FloatArray
    magnitudes: FloatArray

    @property
    def magnitudes_db(self) -> np.ndarray:
        """Magnitudes in dB."""
        return utils.db(self.magnitudes)

    @property
    def bin_width(self) -> float:
        """Spacing of the frequency bins in Hz."""
        if len(self.frequencies) < 2:
            return 0.0
        return float(self.frequencies[1] - self.frequencies[0])
