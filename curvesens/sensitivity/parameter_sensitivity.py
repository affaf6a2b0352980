"""
Parameter sensitivities.

A CurrencyParameterSensitivity is the derivative of a value with respect to
every parameter of one curve, expressed in one currency. Entry i of the
vector is curve parameter i; vectors are never re-indexed. The collection
CurrencyParameterSensitivities keys entries by (curve name, currency) and
adds entries with equal keys elementwise.

Example:
    >>> sens = provider.parameter_sensitivity(point_sensitivities)
    >>> sens.get_sensitivity(CurveName("GBP-SONIA"), CurrencyTypes.GBP).ladder.df
    >>> sens.total(CurrencyTypes.GBP, provider)
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import pandas as pd

from curvesens.utils.currency import CurrencyTypes
from curvesens.utils.error import LibError
from curvesens.market.curves.curve import CurveName
from curvesens.requests.results import Valuation, Ladder
from curvesens.utils.helpers import format_table

###############################################################################


@dataclass(frozen=True)
class CurrencyParameterSensitivity:
    """
    Sensitivity of a value to each parameter of one curve, in one currency.

    Attributes:
        curve_name (CurveName): Curve the parameters belong to
        currency (CurrencyTypes): Currency of the sensitivity values
        sensitivity (np.ndarray): Read-only vector, one entry per parameter
        parameter_labels (Tuple[str]): Node labels, same length as the vector
    """
    curve_name: CurveName
    currency: CurrencyTypes
    sensitivity: np.ndarray
    parameter_labels: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if not isinstance(self.curve_name, CurveName):
            raise LibError(f"curve_name must be a CurveName, got {type(self.curve_name)}")
        if not isinstance(self.currency, CurrencyTypes):
            raise LibError(f"currency must be CurrencyTypes, got {type(self.currency)}")
        arr = np.array(self.sensitivity, dtype=float)
        if arr.ndim != 1:
            raise LibError("Parameter sensitivity must be a 1D vector")
        arr.setflags(write=False)
        object.__setattr__(self, "sensitivity", arr)
        labels = self.parameter_labels
        if labels is None:
            labels = tuple(str(i) for i in range(arr.size))
        labels = tuple(str(lbl) for lbl in labels)
        if len(labels) != arr.size:
            raise LibError(f"Expected {arr.size} parameter labels, got {len(labels)}")
        object.__setattr__(self, "parameter_labels", labels)

    @property
    def parameter_count(self) -> int:
        return self.sensitivity.size

    def key(self) -> Tuple[CurveName, CurrencyTypes]:
        return (self.curve_name, self.currency)

    def multiplied_by(self, factor: float) -> "CurrencyParameterSensitivity":
        return replace(self, sensitivity=self.sensitivity * factor)

    def plus(self, other) -> "CurrencyParameterSensitivity":
        """ Add another sensitivity of the same key, or a vector of the same
        length. """
        if isinstance(other, CurrencyParameterSensitivity):
            if other.key() != self.key():
                raise LibError(f"Cannot add sensitivity for {other.curve_name}/"
                               f"{other.currency.name} to {self.curve_name}/"
                               f"{self.currency.name}")
            other = other.sensitivity
        other = np.asarray(other, dtype=float)
        if other.shape != self.sensitivity.shape:
            raise LibError(f"Cannot add a vector of shape {other.shape} to "
                           f"{self.parameter_count} parameters of {self.curve_name}")
        return replace(self, sensitivity=self.sensitivity + other)

    def converted_to(self, currency: CurrencyTypes, fx) -> "CurrencyParameterSensitivity":
        if currency == self.currency:
            return self
        rate = fx.fx_rate(self.currency, currency)
        return replace(self, currency=currency, sensitivity=self.sensitivity * rate)

    def total(self) -> Valuation:
        return Valuation(float(np.sum(self.sensitivity)), self.currency)

    @property
    def ladder(self) -> Ladder:
        data = dict(zip(self.parameter_labels, self.sensitivity.tolist()))
        return Ladder(data, self.curve_name.name, self.currency)

    def __eq__(self, other):
        if not isinstance(other, CurrencyParameterSensitivity):
            return NotImplemented
        return self.key() == other.key() and \
            self.parameter_labels == other.parameter_labels and \
            np.array_equal(self.sensitivity, other.sensitivity)

    __hash__ = None

    def __repr__(self):
        return (f"{self.__class__.__name__}("
                f"{self.curve_name}: {self.total().amount:.6g} {self.currency.name}, "
                f"points={self.parameter_count})")

###############################################################################


class CurrencyParameterSensitivities:
    """ Immutable collection of parameter sensitivities keyed by
    (curve name, currency). Entries with the same key are summed. """

    def __init__(self, sensitivities=()):
        merged: Dict[Tuple[CurveName, CurrencyTypes], CurrencyParameterSensitivity] = {}
        for s in sensitivities:
            if not isinstance(s, CurrencyParameterSensitivity):
                raise LibError(f"Expected CurrencyParameterSensitivity, got {type(s).__name__}")
            k = s.key()
            merged[k] = merged[k].plus(s) if k in merged else s
        self._sensitivities = tuple(merged[k] for k in sorted(merged, key=_sort_key))

    @classmethod
    def of(cls, *sensitivities) -> "CurrencyParameterSensitivities":
        if len(sensitivities) == 1 and \
                not isinstance(sensitivities[0], CurrencyParameterSensitivity):
            return cls(sensitivities[0])
        return cls(sensitivities)

    @classmethod
    def empty(cls) -> "CurrencyParameterSensitivities":
        return cls(())

    @property
    def sensitivities(self) -> Tuple[CurrencyParameterSensitivity, ...]:
        return self._sensitivities

    def size(self) -> int:
        return len(self._sensitivities)

    def keys(self):
        return [s.key() for s in self._sensitivities]

    def find_sensitivity(self,
                         curve_name: CurveName,
                         currency: CurrencyTypes) -> Optional[CurrencyParameterSensitivity]:
        for s in self._sensitivities:
            if s.curve_name == curve_name and s.currency == currency:
                return s
        return None

    def get_sensitivity(self,
                        curve_name: CurveName,
                        currency: CurrencyTypes) -> CurrencyParameterSensitivity:
        found = self.find_sensitivity(curve_name, currency)
        if found is None:
            raise LibError(f"No sensitivity for curve {curve_name} in {currency.name}")
        return found

    def combined_with(self, other) -> "CurrencyParameterSensitivities":
        if isinstance(other, CurrencyParameterSensitivity):
            other = (other,)
        return CurrencyParameterSensitivities(self._sensitivities + tuple(other))

    def multiplied_by(self, factor: float) -> "CurrencyParameterSensitivities":
        return CurrencyParameterSensitivities(s.multiplied_by(factor)
                                              for s in self._sensitivities)

    def converted_to(self, currency: CurrencyTypes, fx) -> "CurrencyParameterSensitivities":
        return CurrencyParameterSensitivities(s.converted_to(currency, fx)
                                              for s in self._sensitivities)

    def total(self, currency: CurrencyTypes, fx) -> Valuation:
        """ Sum of every entry converted to one currency. """
        return sum((s.total().converted_to(currency, fx) for s in self._sensitivities),
                   Valuation.zero(currency))

    def equal_with_tolerance(self, other: "CurrencyParameterSensitivities",
                             tolerance: float) -> bool:
        """ Compare by key; a key missing on one side compares as zeros. """
        for k in set(self.keys()) | set(other.keys()):
            mine = self.find_sensitivity(*k)
            theirs = other.find_sensitivity(*k)
            a = mine.sensitivity if mine is not None else None
            b = theirs.sensitivity if theirs is not None else None
            if a is None:
                a = np.zeros_like(b)
            if b is None:
                b = np.zeros_like(a)
            if a.shape != b.shape:
                return False
            if np.any(np.abs(a - b) > tolerance):
                return False
        return True

    @property
    def df(self) -> pd.DataFrame:
        """ One row per curve parameter. """
        rows = []
        for s in self._sensitivities:
            for i, (label, value) in enumerate(zip(s.parameter_labels, s.sensitivity)):
                rows.append({"Curve": s.curve_name.name,
                             "Currency": s.currency.name,
                             "Index": i,
                             "Label": label,
                             "Sensitivity": float(value)})
        return pd.DataFrame(rows, columns=["Curve", "Currency", "Index",
                                           "Label", "Sensitivity"])

    def table(self) -> str:
        """ Printable table of every curve parameter sensitivity. """
        header = ["CURVE", "CURRENCY", "LABEL", "SENSITIVITY"]
        rows = []
        for s in self._sensitivities:
            for label, value in zip(s.parameter_labels, s.sensitivity):
                rows.append([s.curve_name.name, s.currency.name, label, round(float(value), 4)])
        return str(format_table(header, rows))

    def __iter__(self):
        return iter(self._sensitivities)

    def __len__(self):
        return len(self._sensitivities)

    def __add__(self, other: Any) -> "CurrencyParameterSensitivities":
        if not isinstance(other, (CurrencyParameterSensitivities, CurrencyParameterSensitivity)):
            return NotImplemented
        return self.combined_with(other)

    def __eq__(self, other):
        if not isinstance(other, CurrencyParameterSensitivities):
            return NotImplemented
        return self._sensitivities == other._sensitivities

    __hash__ = None

    def __repr__(self):
        parts = [f"{s.curve_name}/{s.currency.name}" for s in self._sensitivities]
        return f"{self.__class__.__name__}({', '.join(parts)})"

###############################################################################


def _sort_key(key):
    return (key[0].name, key[1].name)

###############################################################################
