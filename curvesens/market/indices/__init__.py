"""
Market indices package for rate, FX and price indices.

Provides:
- Rate index conventions (Ibor, Overnight, FX, Price)
- Historical fixing series
- A catalogue of standard index conventions
"""

from .rate_index import IborIndex, OvernightIndex, FxIndex, PriceIndex
from .time_series import DateSeries
from .index_constants import INDEX_CONVENTIONS, index_of

__all__ = ['IborIndex', 'OvernightIndex', 'FxIndex', 'PriceIndex',
           'DateSeries', 'INDEX_CONVENTIONS', 'index_of']
