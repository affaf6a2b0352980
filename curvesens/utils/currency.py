"""
Currency types for multi-currency support.

Provides currency codes and currency pairs for use in FX rate lookups,
FX index observations and multi-currency sensitivity reporting.

Supported currencies:
- USD: US Dollar
- EUR: Euro
- GBP: British Pound Sterling
- CHF: Swiss Franc
- CAD: Canadian Dollar
- AUD: Australian Dollar
- NZD: New Zealand Dollar
- DKK: Danish Krone
- SEK: Swedish Krona
- HKD: Hong Kong Dollar
- JPY: Japanese Yen
- NOK: Norwegian Krone
- PLN: Polish Zloty
- RON: Romanian Leu
- NONE: No currency specified

Example:
    >>> pair = CurrencyPair.parse("EUR/USD")
    >>> pair.base
    <CurrencyTypes.EUR: 2>
    >>> pair.inverse()
    CurrencyPair(USD/EUR)
"""

from enum import Enum
from dataclasses import dataclass

from curvesens.utils.error import LibError

###############################################################################


class CurrencyTypes(Enum):
    USD = 1
    EUR = 2
    GBP = 3
    CHF = 4
    CAD = 5
    AUD = 6
    NZD = 7
    DKK = 8
    SEK = 9
    HKD = 10
    JPY = 11
    NOK = 12
    PLN = 13
    RON = 14
    NONE = 15

###############################################################################


@dataclass(frozen=True)
class CurrencyPair:
    """ An ordered pair of currencies, quoted as 1 base = rate counter. """
    base: CurrencyTypes
    counter: CurrencyTypes

    def __post_init__(self):
        if not isinstance(self.base, CurrencyTypes) or \
                not isinstance(self.counter, CurrencyTypes):
            raise LibError("Currency pair requires two CurrencyTypes")

    @classmethod
    def parse(cls, code: str) -> "CurrencyPair":
        """ Parse 'EUR/USD' or 'EURUSD'. """
        code = code.replace("/", "").upper()
        if len(code) != 6:
            raise LibError(f"Invalid currency pair: {code}")
        try:
            return cls(CurrencyTypes[code[:3]], CurrencyTypes[code[3:]])
        except KeyError as e:
            raise LibError(f"Invalid currency code in pair: {code}") from e

    def inverse(self) -> "CurrencyPair":
        return CurrencyPair(self.counter, self.base)

    def contains(self, currency: CurrencyTypes) -> bool:
        return currency in (self.base, self.counter)

    def is_identity(self) -> bool:
        return self.base == self.counter

    def __str__(self):
        return f"{self.base.name}/{self.counter.name}"

    def __repr__(self):
        return f"CurrencyPair({self})"

###############################################################################
