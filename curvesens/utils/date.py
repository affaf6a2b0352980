"""
Date value type used throughout curvesens.

Dates are immutable and hashable so they can key fixing series and
sensitivity groupings. Business-day calendars are not modelled: the only
calendar notion supported is skipping Saturdays and Sundays.

Example:
    >>> value_dt = Date(1, 1, 2024)
    >>> value_dt.add_tenor("3M")
    01-APR-2024
    >>> value_dt.add_tenor("3M") - value_dt
    91
"""

import datetime
from functools import total_ordering

from curvesens.utils.error import LibError
from curvesens.utils.global_vars import gDaysInYear

###############################################################################

_MONTH_NAMES = ["JAN", "FEB", "MAR", "APR", "MAY", "JUN",
                "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]

###############################################################################


@total_ordering
class Date:
    """ A calendar date constructed as Date(day, month, year). """

    __slots__ = ("_dt",)

    def __init__(self, d: int, m: int, y: int):
        try:
            dt = datetime.date(y, m, d)
        except (TypeError, ValueError) as e:
            raise LibError(f"Invalid date {d}/{m}/{y}: {e}") from e
        object.__setattr__(self, "_dt", dt)

    def __setattr__(self, name, value):
        raise AttributeError("Date is immutable")

    @classmethod
    def from_datetime(cls, dt: datetime.date) -> "Date":
        return cls(dt.day, dt.month, dt.year)

    ###########################################################################

    def d(self) -> int:
        return self._dt.day

    def m(self) -> int:
        return self._dt.month

    def y(self) -> int:
        return self._dt.year

    def datetime(self) -> datetime.date:
        return self._dt

    def weekday(self) -> int:
        """ Monday is 0 and Sunday is 6. """
        return self._dt.weekday()

    def is_weekend(self) -> bool:
        return self._dt.weekday() >= 5

    ###########################################################################

    def add_days(self, num_days: int) -> "Date":
        return Date.from_datetime(self._dt + datetime.timedelta(days=int(num_days)))

    def add_weekdays(self, num_days: int) -> "Date":
        """ Move forward (or back if negative) a number of weekdays. A zero
        move returns the same date even if it falls on a weekend. """
        step = 1 if num_days >= 0 else -1
        remaining = abs(int(num_days))
        dt = self._dt
        while remaining > 0:
            dt += datetime.timedelta(days=step)
            if dt.weekday() < 5:
                remaining -= 1
        return Date.from_datetime(dt)

    def add_months(self, num_months: int) -> "Date":
        """ Add months, clipping the day to the end of the target month. """
        total = self._dt.year * 12 + (self._dt.month - 1) + int(num_months)
        y, m = divmod(total, 12)
        m += 1
        d = min(self._dt.day, _days_in_month(y, m))
        return Date(d, m, y)

    def add_years(self, num_years) -> "Date":
        """ Whole years move by months; fractional years by month when the
        fraction is a whole number of months and by days otherwise. """
        months = num_years * 12.0
        if abs(months - round(months)) < 1e-9:
            return self.add_months(int(round(months)))
        return self.add_days(int(round(num_years * gDaysInYear)))

    def add_tenor(self, tenor: str) -> "Date":
        """ Add a tenor string such as '1D', '2W', '3M', '10Y' or '-6M'. """
        if not isinstance(tenor, str) or len(tenor) < 2:
            raise LibError(f"Invalid tenor: {tenor}")

        tenor = tenor.upper()
        unit = tenor[-1]
        try:
            num = int(tenor[:-1])
        except ValueError as e:
            raise LibError(f"Invalid tenor: {tenor}") from e

        if unit == "D":
            return self.add_days(num)
        elif unit == "W":
            return self.add_days(7 * num)
        elif unit == "M":
            return self.add_months(num)
        elif unit == "Y":
            return self.add_months(12 * num)

        raise LibError(f"Unknown tenor unit in {tenor}")

    def first_of_month(self) -> "Date":
        return Date(1, self._dt.month, self._dt.year)

    def months_since(self, other: "Date") -> int:
        """ Whole calendar months between other's month and this month. """
        return (self._dt.year - other._dt.year) * 12 + \
            (self._dt.month - other._dt.month)

    ###########################################################################

    def __sub__(self, other):
        if isinstance(other, Date):
            return (self._dt - other._dt).days
        if isinstance(other, int):
            return self.add_days(-other)
        return NotImplemented

    def __eq__(self, other):
        if not isinstance(other, Date):
            return NotImplemented
        return self._dt == other._dt

    def __lt__(self, other):
        if not isinstance(other, Date):
            return NotImplemented
        return self._dt < other._dt

    def __hash__(self):
        return hash(self._dt)

    def __reduce__(self):
        return (Date, (self._dt.day, self._dt.month, self._dt.year))

    def __repr__(self):
        return f"{self._dt.day:02d}-{_MONTH_NAMES[self._dt.month - 1]}-{self._dt.year}"

    __str__ = __repr__

###############################################################################


def _days_in_month(y: int, m: int) -> int:
    if m == 12:
        return 31
    return (datetime.date(y, m + 1, 1) - datetime.date(y, m, 1)).days

###############################################################################
