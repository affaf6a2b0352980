"""
Day count conventions.

Converts a pair of dates into an accrual year fraction. Only the
conventions needed by the curve and index model are provided; schedule
generation and holiday calendars live outside this library.

Example:
    >>> dc = DayCount(DayCountTypes.ACT_360)
    >>> year_frac, num, den = dc.year_frac(Date(1, 1, 2024), Date(1, 4, 2024))
    >>> round(year_frac, 6)
    0.252778
"""

from enum import Enum

from curvesens.utils.date import Date
from curvesens.utils.error import LibError

###############################################################################


class DayCountTypes(Enum):
    ACT_360 = 1
    ACT_365F = 2
    THIRTY_E_360 = 3

###############################################################################


class DayCount:
    """ Calculate the fractional day count between two dates. """

    def __init__(self,
                 dcc_type: DayCountTypes):
        if not isinstance(dcc_type, DayCountTypes):
            raise LibError(f"Unknown day count type {dcc_type}")
        self._type = dcc_type

    def days_in_year(self) -> float:
        if self._type == DayCountTypes.ACT_365F:
            return 365.0
        return 360.0

    def year_frac(self,
                  dt1: Date,
                  dt2: Date):
        """ Year fraction from dt1 to dt2 with the numerator and denominator
        used. Reversed dates give a negative fraction. """

        if self._type == DayCountTypes.THIRTY_E_360:
            d1 = min(dt1.d(), 30)
            d2 = min(dt2.d(), 30)
            num = 360 * (dt2.y() - dt1.y()) + 30 * (dt2.m() - dt1.m()) + (d2 - d1)
            den = 360
        else:
            num = dt2 - dt1
            den = self.days_in_year()

        return (num / den, num, den)

    def relative_year_frac(self,
                           value_dt: Date,
                           dt: Date) -> float:
        """ Signed year fraction of dt measured from the valuation date. """
        return self.year_frac(value_dt, dt)[0]

    def __repr__(self):
        return str(self._type)

###############################################################################
