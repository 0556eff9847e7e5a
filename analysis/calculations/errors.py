"""
Exceptions shared by the calculation modules.
"""


class VarianceRatioError(Exception):
    """Base class for return-series calculation failures."""
    pass


class InvalidParameterError(VarianceRatioError, ValueError):
    """Raised for a bad aggregation length or an empty/too-short series."""
    pass


class NumericDegeneracyError(VarianceRatioError, ArithmeticError):
    """Raised when a zero-variance series makes a ratio undefined."""
    pass
