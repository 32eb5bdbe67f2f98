# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Exceptions raised by the filter_lab engine.

All engine failures are deterministic functions of their inputs, so none
of these are worth retrying without changing the request.
"""


class FilterLabError(ValueError):
    """Base exception for all engine errors."""

    pass


class InvalidSpec(FilterLabError):
    """Raised when a request parameter is malformed or out of range.

    Parameters
    ----------
    field : str
        Name of the offending field.
    message : str
        Description of what is wrong with it.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class UnsupportedCombination(FilterLabError):
    """Raised when a design method has no formula for a filter type."""

    def __init__(self, design_method: str, filter_type: str):
        self.design_method = design_method
        self.filter_type = filter_type
        super().__init__(f"{design_method} design does not support {filter_type} filters")


class DegenerateFilter(FilterLabError):
    """Raised when the denominator of H(z) is zero at an evaluated frequency."""

    def __init__(self, frequency: float):
        self.frequency = frequency
        super().__init__(f"filter denominator is zero at {frequency:g} Hz")


class EmptyInput(FilterLabError):
    """Raised when a zero length buffer is passed to the engine."""

    pass
