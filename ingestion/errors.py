"""
Exceptions raised by data providers.
"""


class DataAcquisitionError(Exception):
    """Raised when fetching or parsing external price data fails."""
    pass
