"""
Rate index conventions.

Provides the closed set of indices a market data snapshot can be asked to
observe:

- IborIndex: term rate fixed in advance over a tenor (LIBOR, EURIBOR)
- OvernightIndex: one business day rate (SONIA, SOFR, ESTR)
- FxIndex: FX fixing of a currency pair (WM/Reuters, ECB)
- PriceIndex: monthly price index level (RPI, CPI-U, HICP)

Each index is an immutable value object carrying its conventions plus the
date arithmetic that turns a fixing date into the accrual period it
observes. Business days are weekdays only; holiday calendars are outside
this library.

Example:
    >>> libor = IborIndex("GBP-LIBOR-3M", CurrencyTypes.GBP, "3M",
    ...                   DayCountTypes.ACT_365F, fixing_offset_days=0)
    >>> start = libor.effective_from_fixing(Date(3, 1, 2024))
    >>> end = libor.maturity_from_effective(start)
"""

from dataclasses import dataclass

from curvesens.utils.date import Date
from curvesens.utils.day_count import DayCount, DayCountTypes
from curvesens.utils.currency import CurrencyTypes, CurrencyPair
from curvesens.utils.error import LibError

###############################################################################


def _check_common(name, offsets):
    if not isinstance(name, str) or len(name) == 0:
        raise LibError("Index name must be a non-empty string")
    for label, value in offsets.items():
        if not isinstance(value, int) or value < 0:
            raise LibError(f"{label} must be a non-negative int, got {value}")

###############################################################################


@dataclass(frozen=True)
class IborIndex:
    """ Term rate index. The rate fixed on the fixing date accrues from the
    effective date (fixing plus the spot lag) to effective plus tenor. """
    name: str
    currency: CurrencyTypes
    tenor: str
    day_count: DayCountTypes
    fixing_offset_days: int = 2

    def __post_init__(self):
        _check_common(self.name, {"fixing_offset_days": self.fixing_offset_days})
        if not isinstance(self.currency, CurrencyTypes):
            raise LibError("Ibor index currency must be a CurrencyTypes")
        if not isinstance(self.day_count, DayCountTypes):
            raise LibError("Ibor index day count must be a DayCountTypes")
        # Validates the tenor string
        Date(1, 1, 2000).add_tenor(self.tenor)

    def effective_from_fixing(self, fixing_dt: Date) -> Date:
        return fixing_dt.add_weekdays(self.fixing_offset_days)

    def maturity_from_effective(self, effective_dt: Date) -> Date:
        return effective_dt.add_tenor(self.tenor)

    def fixing_from_effective(self, effective_dt: Date) -> Date:
        return effective_dt.add_weekdays(-self.fixing_offset_days)

    def year_frac(self, start_dt: Date, end_dt: Date) -> float:
        return DayCount(self.day_count).year_frac(start_dt, end_dt)[0]

    def __str__(self):
        return self.name

###############################################################################


@dataclass(frozen=True)
class OvernightIndex:
    """ Overnight index. A fixing accrues over one business day starting
    effective_offset_days after the fixing date and is published
    publication_offset_days after it. """
    name: str
    currency: CurrencyTypes
    day_count: DayCountTypes
    publication_offset_days: int = 0
    effective_offset_days: int = 0

    def __post_init__(self):
        _check_common(self.name,
                      {"publication_offset_days": self.publication_offset_days,
                       "effective_offset_days": self.effective_offset_days})
        if not isinstance(self.currency, CurrencyTypes):
            raise LibError("Overnight index currency must be a CurrencyTypes")
        if not isinstance(self.day_count, DayCountTypes):
            raise LibError("Overnight index day count must be a DayCountTypes")

    def effective_from_fixing(self, fixing_dt: Date) -> Date:
        return fixing_dt.add_weekdays(self.effective_offset_days)

    def maturity_from_effective(self, effective_dt: Date) -> Date:
        return effective_dt.add_weekdays(1)

    def fixing_from_effective(self, effective_dt: Date) -> Date:
        return effective_dt.add_weekdays(-self.effective_offset_days)

    def publication_from_fixing(self, fixing_dt: Date) -> Date:
        return fixing_dt.add_weekdays(self.publication_offset_days)

    def year_frac(self, start_dt: Date, end_dt: Date) -> float:
        return DayCount(self.day_count).year_frac(start_dt, end_dt)[0]

    def __str__(self):
        return self.name

###############################################################################


@dataclass(frozen=True)
class FxIndex:
    """ FX fixing of a currency pair. The rate fixed on the fixing date is
    the rate for exchange on the maturity date (the spot date of the fix).
    The fixing is quoted as 1 base = rate counter. """
    name: str
    currency_pair: CurrencyPair
    maturity_offset_days: int = 2

    def __post_init__(self):
        _check_common(self.name,
                      {"maturity_offset_days": self.maturity_offset_days})
        if not isinstance(self.currency_pair, CurrencyPair):
            raise LibError("FX index requires a CurrencyPair")
        if self.currency_pair.is_identity():
            raise LibError(f"FX index {self.name} must have two distinct "
                           f"currencies, got {self.currency_pair}")

    def maturity_from_fixing(self, fixing_dt: Date) -> Date:
        return fixing_dt.add_weekdays(self.maturity_offset_days)

    def __str__(self):
        return self.name

###############################################################################


@dataclass(frozen=True)
class PriceIndex:
    """ Monthly price index. Observations are keyed by the first day of
    the reference month. """
    name: str
    currency: CurrencyTypes

    def __post_init__(self):
        _check_common(self.name, {})
        if not isinstance(self.currency, CurrencyTypes):
            raise LibError("Price index currency must be a CurrencyTypes")

    def __str__(self):
        return self.name

###############################################################################

RATE_INDEX_TYPES = (IborIndex, OvernightIndex, FxIndex, PriceIndex)

###############################################################################
