"""
Point sensitivities.

A point sensitivity says: the value is sensitive, with coefficient
`sensitivity` expressed in `currency`, to one observed market rate. The set
of observations is closed:

- ZeroRateSensitivity: continuously compounded zero rate of a currency's
  discount curve at a date
- IborRateSensitivity: Ibor fixing on a date
- OvernightRateSensitivity: overnight rate over a period starting at a
  fixing date
- FxIndexSensitivity: FX fixing of an FX index on a date
- PriceIndexValueSensitivity: price index level of a reference month

Each variant dispatches through `accept(visitor)` to a
PointSensitivityVisitor, whose subclasses must implement one method per
variant. PointSensitivities is the immutable list returned by pricers.

Example:
    >>> sens = PointSensitivities.of(
    ...     IborRateSensitivity(libor_3m, Date(3, 1, 2024), CurrencyTypes.GBP, 2500.0),
    ...     ZeroRateSensitivity(CurrencyTypes.GBP, Date(3, 4, 2024), CurrencyTypes.GBP, -9800.0))
    >>> sens.multiplied_by(-1.0).normalized()
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Tuple

from curvesens.utils.date import Date
from curvesens.utils.currency import CurrencyTypes, CurrencyPair
from curvesens.utils.error import LibError
from curvesens.market.indices.rate_index import (IborIndex,
                                                 OvernightIndex,
                                                 FxIndex,
                                                 PriceIndex)

###############################################################################


class PointSensitivityVisitor(ABC):
    """ Double dispatch over the point sensitivity variants. A subclass that
    does not handle every variant cannot be instantiated. """

    @abstractmethod
    def visit_zero_rate(self, sens: "ZeroRateSensitivity"):
        pass

    @abstractmethod
    def visit_ibor_rate(self, sens: "IborRateSensitivity"):
        pass

    @abstractmethod
    def visit_overnight_rate(self, sens: "OvernightRateSensitivity"):
        pass

    @abstractmethod
    def visit_fx_index(self, sens: "FxIndexSensitivity"):
        pass

    @abstractmethod
    def visit_price_index_value(self, sens: "PriceIndexValueSensitivity"):
        pass

###############################################################################


class PointSensitivity:
    """ Operations shared by the point sensitivity variants. Variants are
    frozen dataclasses with `currency` and `sensitivity` fields. """

    _RANK = 0

    def _check_common(self):
        if not isinstance(self.currency, CurrencyTypes):
            raise LibError(f"{type(self).__name__} currency must be a CurrencyTypes")
        try:
            object.__setattr__(self, "sensitivity", float(self.sensitivity))
        except (TypeError, ValueError) as e:
            raise LibError(f"{type(self).__name__} sensitivity must be a number, "
                           f"got {self.sensitivity!r}") from e

    def with_currency(self, currency: CurrencyTypes):
        if currency == self.currency:
            return self
        return replace(self, currency=currency)

    def with_sensitivity(self, sensitivity: float):
        return replace(self, sensitivity=sensitivity)

    def multiplied_by(self, factor: float):
        return replace(self, sensitivity=self.sensitivity * factor)

    def converted_to(self, currency: CurrencyTypes, fx):
        """ Express the coefficient in another currency using any object
        with an fx_rate(base, counter) method. """
        if currency == self.currency:
            return self
        rate = fx.fx_rate(self.currency, currency)
        return replace(self, currency=currency, sensitivity=self.sensitivity * rate)

    def key(self) -> tuple:
        """ Everything except the coefficient. Equal keys can be merged. """
        raise NotImplementedError

    def compare_key(self) -> tuple:
        """ Sort key ordering variants first by kind then by observation. """
        return (self._RANK,) + self.key()

    def accept(self, visitor: PointSensitivityVisitor):
        raise NotImplementedError

###############################################################################


@dataclass(frozen=True)
class ZeroRateSensitivity(PointSensitivity):
    curve_currency: CurrencyTypes
    date: Date
    currency: CurrencyTypes
    sensitivity: float

    _RANK = 1

    def __post_init__(self):
        self._check_common()
        if not isinstance(self.curve_currency, CurrencyTypes):
            raise LibError("Zero rate sensitivity curve currency must be a CurrencyTypes")
        if not isinstance(self.date, Date):
            raise LibError("Zero rate sensitivity needs a Date")

    def key(self):
        return (self.curve_currency.name, self.date, self.currency.name)

    def accept(self, visitor: PointSensitivityVisitor):
        return visitor.visit_zero_rate(self)

###############################################################################


@dataclass(frozen=True)
class IborRateSensitivity(PointSensitivity):
    index: IborIndex
    fixing_date: Date
    currency: CurrencyTypes
    sensitivity: float

    _RANK = 2

    def __post_init__(self):
        self._check_common()
        if not isinstance(self.index, IborIndex):
            raise LibError("Ibor rate sensitivity needs an IborIndex")
        if not isinstance(self.fixing_date, Date):
            raise LibError("Ibor rate sensitivity needs a fixing Date")

    @classmethod
    def of(cls, index: IborIndex, fixing_date: Date, sensitivity: float,
           currency: CurrencyTypes = None) -> "IborRateSensitivity":
        return cls(index, fixing_date,
                   index.currency if currency is None else currency, sensitivity)

    def key(self):
        return (self.index.name, self.fixing_date, self.currency.name)

    def accept(self, visitor: PointSensitivityVisitor):
        return visitor.visit_ibor_rate(self)

###############################################################################


@dataclass(frozen=True)
class OvernightRateSensitivity(PointSensitivity):
    """ Sensitivity to the overnight rate compounded from the effective date
    of fixing_date to end_date. """
    index: OvernightIndex
    fixing_date: Date
    end_date: Date
    currency: CurrencyTypes
    sensitivity: float

    _RANK = 3

    def __post_init__(self):
        self._check_common()
        if not isinstance(self.index, OvernightIndex):
            raise LibError("Overnight rate sensitivity needs an OvernightIndex")
        if not isinstance(self.fixing_date, Date) or not isinstance(self.end_date, Date):
            raise LibError("Overnight rate sensitivity needs fixing and end Dates")
        if self.end_date <= self.index.effective_from_fixing(self.fixing_date):
            raise LibError(f"Overnight period end {self.end_date} must be after "
                           f"the effective date of fixing {self.fixing_date}")

    @classmethod
    def of(cls, index: OvernightIndex, fixing_date: Date, sensitivity: float,
           currency: CurrencyTypes = None) -> "OvernightRateSensitivity":
        """ Single overnight fixing, ending one business day after its
        effective date. """
        end_dt = index.maturity_from_effective(index.effective_from_fixing(fixing_date))
        return cls(index, fixing_date, end_dt,
                   index.currency if currency is None else currency, sensitivity)

    @classmethod
    def of_period(cls, index: OvernightIndex, fixing_date: Date, end_date: Date,
                  sensitivity: float,
                  currency: CurrencyTypes = None) -> "OvernightRateSensitivity":
        return cls(index, fixing_date, end_date,
                   index.currency if currency is None else currency, sensitivity)

    def key(self):
        return (self.index.name, self.fixing_date, self.end_date, self.currency.name)

    def accept(self, visitor: PointSensitivityVisitor):
        return visitor.visit_overnight_rate(self)

###############################################################################


@dataclass(frozen=True)
class FxIndexSensitivity(PointSensitivity):
    """ Sensitivity to an FX fixing. The reference currency is the base of
    the observed rate, so the rate is the index pair or its inverse. """
    index: FxIndex
    reference_currency: CurrencyTypes
    fixing_date: Date
    currency: CurrencyTypes
    sensitivity: float

    _RANK = 4

    def __post_init__(self):
        self._check_common()
        if not isinstance(self.index, FxIndex):
            raise LibError("FX index sensitivity needs an FxIndex")
        if not isinstance(self.fixing_date, Date):
            raise LibError("FX index sensitivity needs a fixing Date")
        if not self.index.currency_pair.contains(self.reference_currency):
            raise LibError(f"Reference currency {self.reference_currency} is not "
                           f"in {self.index.currency_pair}")

    def observed_pair(self) -> CurrencyPair:
        pair = self.index.currency_pair
        return pair if self.reference_currency == pair.base else pair.inverse()

    def key(self):
        return (self.index.name, self.reference_currency.name,
                self.fixing_date, self.currency.name)

    def accept(self, visitor: PointSensitivityVisitor):
        return visitor.visit_fx_index(self)

###############################################################################


@dataclass(frozen=True)
class PriceIndexValueSensitivity(PointSensitivity):
    """ Sensitivity to a price index level. The reference month is held as
    the first day of the month. """
    index: PriceIndex
    reference_month: Date
    currency: CurrencyTypes
    sensitivity: float

    _RANK = 5

    def __post_init__(self):
        self._check_common()
        if not isinstance(self.index, PriceIndex):
            raise LibError("Price index sensitivity needs a PriceIndex")
        if not isinstance(self.reference_month, Date):
            raise LibError("Price index sensitivity needs a reference month Date")
        object.__setattr__(self, "reference_month", self.reference_month.first_of_month())

    @classmethod
    def of(cls, index: PriceIndex, reference_month: Date, sensitivity: float,
           currency: CurrencyTypes = None) -> "PriceIndexValueSensitivity":
        return cls(index, reference_month,
                   index.currency if currency is None else currency, sensitivity)

    def key(self):
        return (self.index.name, self.reference_month, self.currency.name)

    def accept(self, visitor: PointSensitivityVisitor):
        return visitor.visit_price_index_value(self)

###############################################################################


class PointSensitivities:
    """ Immutable list of point sensitivities. """

    def __init__(self, sensitivities=()):
        sensitivities = tuple(sensitivities)
        for s in sensitivities:
            if not isinstance(s, PointSensitivity):
                raise LibError(f"Expected a point sensitivity, got {type(s).__name__}")
        self._sensitivities: Tuple[PointSensitivity, ...] = sensitivities

    @classmethod
    def of(cls, *sensitivities) -> "PointSensitivities":
        """ Accepts sensitivities as arguments or as one iterable. """
        if len(sensitivities) == 1 and not isinstance(sensitivities[0], PointSensitivity):
            return cls(sensitivities[0])
        return cls(sensitivities)

    @classmethod
    def empty(cls) -> "PointSensitivities":
        return cls(())

    @property
    def sensitivities(self) -> Tuple[PointSensitivity, ...]:
        return self._sensitivities

    def size(self) -> int:
        return len(self._sensitivities)

    def combined_with(self, other: "PointSensitivities") -> "PointSensitivities":
        return PointSensitivities(self._sensitivities + tuple(other))

    def multiplied_by(self, factor: float) -> "PointSensitivities":
        return PointSensitivities(s.multiplied_by(factor) for s in self._sensitivities)

    def normalized(self) -> "PointSensitivities":
        """ Merge entries with the same observation and currency, sorted. """
        merged = {}
        for s in self._sensitivities:
            k = s.compare_key()
            if k in merged:
                merged[k] = merged[k].with_sensitivity(merged[k].sensitivity + s.sensitivity)
            else:
                merged[k] = s
        return PointSensitivities(merged[k] for k in sorted(merged))

    def converted_to(self, currency: CurrencyTypes, fx) -> "PointSensitivities":
        return PointSensitivities(s.converted_to(currency, fx) for s in self._sensitivities)

    def equal_with_tolerance(self, other: "PointSensitivities", tolerance: float) -> bool:
        mine = self.normalized().sensitivities
        theirs = other.normalized().sensitivities
        mine_map = {s.compare_key(): s.sensitivity for s in mine}
        theirs_map = {s.compare_key(): s.sensitivity for s in theirs}
        for k in set(mine_map) | set(theirs_map):
            if abs(mine_map.get(k, 0.0) - theirs_map.get(k, 0.0)) > tolerance:
                return False
        return True

    def __iter__(self):
        return iter(self._sensitivities)

    def __len__(self):
        return len(self._sensitivities)

    def __getitem__(self, i):
        return self._sensitivities[i]

    def __add__(self, other):
        if not isinstance(other, PointSensitivities):
            return NotImplemented
        return self.combined_with(other)

    def __eq__(self, other):
        if not isinstance(other, PointSensitivities):
            return NotImplemented
        return self._sensitivities == other._sensitivities

    __hash__ = None

    def __repr__(self):
        return f"PointSensitivities({len(self)} sensitivities)"

###############################################################################
