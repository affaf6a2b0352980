"""
Exception classes for curvesens library errors.

Provides a specialised exception root to distinguish errors originating
from the curvesens library from other Python exceptions, plus the two
conditions callers most often need to catch separately:

- MissingMarketDataError: a curve, FX rate, fixing or time series has been
  requested that the market data snapshot does not hold
- ParameterCountError: a calibration parameter vector does not line up with
  the curve definitions it is meant to populate

Example:
    >>> from curvesens.utils.error import LibError, MissingMarketDataError
    >>>
    >>> try:
    ...     provider.discount_factor(CurrencyTypes.JPY, dt)
    ... except MissingMarketDataError as e:
    ...     print(f"curvesens error: {e._message}")
"""


class LibError(Exception):
    """ Class to understand if the error is coming from this library """

    def __init__(self,
                 message: str):
        """ Create error object """
        super().__init__(message)
        self._message = message

    def _print(self):
        print("LibError:", self._message)


class MissingMarketDataError(LibError):
    """ Requested market data is not held by the provider. """


class ParameterCountError(LibError, IndexError):
    """ Parameter vector length inconsistent with the curve definitions. """
