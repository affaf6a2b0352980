"""
Historical fixings for an index.

A DateSeries is an immutable map from fixing date to observed value. The
provider holds one per index and pricers read it for fixings at or before
the valuation date.

Example:
    >>> series = DateSeries({Date(2, 1, 2024): 0.0519,
    ...                      Date(3, 1, 2024): 0.0520})
    >>> series.get(Date(3, 1, 2024))
    0.052
    >>> series.latest_date()
    03-JAN-2024
"""

from types import MappingProxyType
from typing import Dict, Optional

import pandas as pd

from curvesens.utils.date import Date
from curvesens.utils.error import LibError

###############################################################################


class DateSeries:
    """ Immutable date-indexed series of index fixings. """

    def __init__(self,
                 values: Optional[Dict[Date, float]] = None):
        values = {} if values is None else values
        checked = {}
        for dt, value in sorted(values.items(), key=lambda kv: kv[0]):
            if not isinstance(dt, Date):
                raise LibError(f"Series keys must be Date, got {type(dt).__name__}")
            checked[dt] = float(value)
        self._values = MappingProxyType(checked)

    @classmethod
    def of(cls, dates: list, values: list) -> "DateSeries":
        if len(dates) != len(values):
            raise LibError("Series dates and values must have the same length")
        return cls(dict(zip(dates, values)))

    @classmethod
    def empty(cls) -> "DateSeries":
        return cls({})

    def get(self, dt: Date) -> Optional[float]:
        """ The fixing on the date, or None if there is none. """
        return self._values.get(dt)

    def contains(self, dt: Date) -> bool:
        return dt in self._values

    def is_empty(self) -> bool:
        return len(self._values) == 0

    def latest_date(self) -> Date:
        if self.is_empty():
            raise LibError("Series is empty")
        return next(reversed(self._values.keys()))

    def latest_value(self) -> float:
        return self._values[self.latest_date()]

    def dates(self):
        return list(self._values.keys())

    def values(self):
        return list(self._values.values())

    def to_series(self) -> pd.Series:
        """ pandas view indexed by python dates. """
        return pd.Series(self.values(),
                         index=[dt.datetime() for dt in self.dates()],
                         dtype=float)

    def __len__(self):
        return len(self._values)

    def __iter__(self):
        return iter(self._values.items())

    def __eq__(self, other):
        if not isinstance(other, DateSeries):
            return NotImplemented
        return dict(self._values) == dict(other._values)

    def __hash__(self):
        return hash(tuple(self._values.items()))

    def __repr__(self):
        return f"DateSeries({len(self)} fixings)"

###############################################################################
