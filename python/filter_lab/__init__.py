# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""
The filter_lab Python library.

For synthesising IIR filters, analysing their frequency and time domain
behaviour, applying them to sampled signals and generating test signals.
"""

from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("filter_lab")
except _metadata.PackageNotFoundError:
    # running from a source checkout
    __version__ = "0.0.0"
