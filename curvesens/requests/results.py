"""
Result types returned by pricing and risk calls.

- Valuation: an amount in one currency
- Ladder: sensitivity per curve node label for one curve and currency, with
  a DataFrame view

Valuation arithmetic requires matching currencies. Conversion works with any
FX source exposing fx_rate(base, counter), such as FxMatrix or a rates
provider.
"""

from dataclasses import dataclass
from typing import Any, Dict

import pandas as pd

from curvesens.utils.currency import CurrencyTypes


def _same_currency(a: "Valuation", b: "Valuation", op: str):
    if a.currency is not b.currency:
        raise ValueError(f"Cannot {op} {b.currency.name} and {a.currency.name} valuations")


@dataclass(frozen=True)
class Valuation:
    """
    A monetary amount together with its currency.

    Attributes:
        amount (float): Monetary value
        currency (CurrencyTypes): Currency of the amount

    Example:
        >>> pv = Valuation(1000.0, CurrencyTypes.GBP) + Valuation(500.0, CurrencyTypes.GBP)
        >>> pv.converted_to(CurrencyTypes.USD, provider)
    """
    amount: float
    currency: CurrencyTypes = CurrencyTypes.NONE

    def __post_init__(self):
        if not isinstance(self.currency, CurrencyTypes):
            raise TypeError(f"currency must be a CurrencyTypes enum, got {type(self.currency)}")
        object.__setattr__(self, "amount", float(self.amount))

    @classmethod
    def zero(cls, currency: CurrencyTypes) -> "Valuation":
        return cls(0.0, currency)

    def __repr__(self) -> str:
        return f"{self.amount:.2f} {self.currency.name}"

    def __add__(self, other: Any) -> "Valuation":
        if not isinstance(other, Valuation):
            return NotImplemented
        _same_currency(self, other, "add")
        return Valuation(self.amount + other.amount, self.currency)

    def __radd__(self, other: Any) -> "Valuation":
        # sum() starts from 0
        if other == 0:
            return self
        return self.__add__(other)

    def __sub__(self, other: Any) -> "Valuation":
        if not isinstance(other, Valuation):
            return NotImplemented
        _same_currency(self, other, "subtract")
        return Valuation(self.amount - other.amount, self.currency)

    def __mul__(self, factor: float) -> "Valuation":
        return Valuation(self.amount * factor, self.currency)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> "Valuation":
        return Valuation(self.amount / divisor, self.currency)

    def __neg__(self) -> "Valuation":
        return Valuation(-self.amount, self.currency)

    def converted_to(self, currency: CurrencyTypes, fx) -> "Valuation":
        if currency is self.currency:
            return self
        return Valuation(self.amount * fx.fx_rate(self.currency, currency), currency)


class Ladder:
    """
    Node label to sensitivity mapping of one curve, in one currency.

    Example:
        >>> ladder = Ladder({"1Y": 10.5, "5Y": -8.2}, "GBP-SONIA", CurrencyTypes.GBP)
        >>> ladder.df
    """

    def __init__(self,
                 data: Dict[str, float],
                 curve_name: str,
                 currency: CurrencyTypes = CurrencyTypes.NONE):
        self.data = dict(data)
        self.curve_name = curve_name
        self.currency = currency

    @property
    def df(self) -> pd.DataFrame:
        """ Node labels as index, one "<CURVE>_Risk" column. """
        df = pd.DataFrame.from_dict(self.data, orient="index",
                                    columns=[f"{self.curve_name}_Risk"])
        df.index.name = "Tenor"
        return df

    def total(self) -> Valuation:
        return Valuation(sum(self.data.values()), self.currency)

    def to_dict(self) -> Dict[str, float]:
        return dict(self.data)

    def __repr__(self):
        return (f"Ladder(curve={self.curve_name}, currency={self.currency.name}, "
                f"points={len(self.data)})")
