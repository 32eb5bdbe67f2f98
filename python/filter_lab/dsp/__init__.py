# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""The numerical engine: filter synthesis, analysis, filtering and signal generation."""
