# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
import numpy as np

from filter_lab.models import FilterSpec


def make_spec(**kwargs):
    # a 48 kHz order 4 Butterworth lowpass unless told otherwise
    params = dict(
        filter_type="lowpass",
        design_method="butterworth",
        order=4,
        low_cutoff=1000.0,
        high_cutoff=4000.0,
        sample_rate=48000.0,
    )
    params.update(kwargs)
    return FilterSpec(**params)


def difference_equation(b, a, x):
    # sample by sample reference for the direct form recursion
    y = np.zeros(len(x))
    for n in range(len(x)):
        acc = 0.0
        for k in range(len(b)):
            if n - k >= 0:
                acc += b[k] * x[n - k]
        for k in range(1, len(a)):
            if n - k >= 0:
                acc -= a[k] * y[n - k]
        y[n] = acc / a[0]
    return y


def magnitude_at(freq_response, f):
    idx = np.argmin(np.abs(freq_response.frequencies - f))
    return freq_response.magnitudes[idx]
