"""
Discount curves for a currency.

A DiscountCurve is the discounting view of an InterpolatedNodalCurve: it
turns dates into year fractions from the valuation date and node values into
discount factors. Two parameterisations are supported:

- ZeroRateDiscountCurve: node values are continuously compounded zero
  rates, DF(t) = exp(-t z(t))
- DiscountFactorCurve: node values are discount factors, DF(t) = y(t)

Both expose how their native node coordinate maps onto discount factors and
zero rates (discount_factor_native_derivative and
zero_rate_native_derivative). The sensitivity engine projects through these
so that it never assumes one parameterisation.

At or before the valuation date the discount factor is 1.0 and all
sensitivities are zero.

The date methods measure time with the day count in the curve metadata.
Inside a rates provider every curve is evaluated through the *_from_time
methods at the provider's relative_time, so one time convention holds for
all curves in a snapshot.

Example:
    >>> curve = ZeroRateDiscountCurve(CurrencyTypes.GBP, value_dt, nodal_curve)
    >>> df = curve.discount_factor(value_dt.add_tenor("2Y"))
    >>> curve.discount_factor_parameter_sensitivity(value_dt.add_tenor("2Y"))
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

from curvesens.utils.date import Date
from curvesens.utils.day_count import DayCount, DayCountTypes
from curvesens.utils.currency import CurrencyTypes
from curvesens.utils.error import LibError
from curvesens.utils.global_types import ValueTypes
from curvesens.utils.global_vars import EFFECTIVE_ZERO, g_small
from curvesens.utils.helpers import check_argument_types, label_to_string
from curvesens.market.curves.curve import InterpolatedNodalCurve
from curvesens.sensitivity.point_sensitivity import ZeroRateSensitivity

logger = logging.getLogger(__name__)

###############################################################################


class DiscountCurve(ABC):
    """ Discount factors for one currency derived from a nodal curve. """

    def __init__(self,
                 currency: CurrencyTypes,
                 valuation_date: Date,
                 curve: InterpolatedNodalCurve):

        check_argument_types(DiscountCurve.__init__, locals())

        expected = self.native_value_type()
        if curve.metadata.y_value_type != expected:
            raise LibError(f"{type(self).__name__} needs a curve of {expected} "
                           f"values, curve {curve.name} holds "
                           f"{curve.metadata.y_value_type}")

        self._currency = currency
        self._valuation_date = valuation_date
        self._curve = curve
        dc_type = curve.metadata.day_count
        self._day_count = DayCount(dc_type if dc_type is not None
                                   else DayCountTypes.ACT_365F)

###############################################################################

    @staticmethod
    @abstractmethod
    def native_value_type() -> ValueTypes:
        """ The y value type of the nodal curve. """

    @abstractmethod
    def _df_from_time(self, t: np.ndarray) -> np.ndarray:
        """ Discount factors at strictly positive times. """

    @abstractmethod
    def _df_native_derivative(self, t: np.ndarray) -> np.ndarray:
        """ dDF/d(native value) at strictly positive times. """

    @abstractmethod
    def _zero_native_derivative(self, t: np.ndarray) -> np.ndarray:
        """ dz/d(native value) at strictly positive times. """

###############################################################################

    @property
    def currency(self) -> CurrencyTypes:
        return self._currency

    @property
    def valuation_date(self) -> Date:
        return self._valuation_date

    @property
    def curve(self) -> InterpolatedNodalCurve:
        return self._curve

    @property
    def name(self):
        return self._curve.name

    @property
    def parameter_count(self) -> int:
        return self._curve.parameter_count

    def with_curve(self, curve: InterpolatedNodalCurve) -> "DiscountCurve":
        return type(self)(self._currency, self._valuation_date, curve)

###############################################################################

    def relative_year_fraction(self, dt: Date) -> float:
        return self._day_count.relative_year_frac(self._valuation_date, dt)

    def _apply_positive(self, t, func, at_zero: float):
        """ Evaluate func on the times after the valuation date and use
        at_zero elsewhere. Scalars in, scalars out. """
        tt = np.atleast_1d(np.asarray(t, dtype=float))
        out = np.full(tt.shape, at_zero, dtype=float)
        live = tt > EFFECTIVE_ZERO
        if np.any(live):
            out[live] = func(tt[live])
        return float(out[0]) if np.ndim(t) == 0 else out

###############################################################################

    def discount_factor_from_time(self, t):
        return self._apply_positive(t, self._df_from_time, 1.0)

    def discount_factor(self, dt: Date) -> float:
        return self.discount_factor_from_time(self.relative_year_fraction(dt))

    def zero_rate_from_time(self, t):
        """ Continuously compounded zero rate. Times at or before the
        valuation date use the rate at the smallest positive time. """
        tt = np.maximum(np.asarray(t, dtype=float), EFFECTIVE_ZERO)
        df = self._df_from_time(np.atleast_1d(tt))
        out = -np.log(df) / np.atleast_1d(tt)
        return float(out[0]) if np.ndim(t) == 0 else out

    def zero_rate(self, dt: Date) -> float:
        return self.zero_rate_from_time(self.relative_year_fraction(dt))

    def zero_rate_point_sensitivity_from_time(self,
                                              t: float,
                                              dt: Date,
                                              sensitivity_currency: CurrencyTypes = None):
        """ Sensitivity of the discount factor at dt, t years from the
        valuation date, to the zero rate at dt: dDF/dz = -t DF. """
        if sensitivity_currency is None:
            sensitivity_currency = self._currency
        value = 0.0
        if t > EFFECTIVE_ZERO:
            value = -t * self.discount_factor_from_time(t)
        return ZeroRateSensitivity(self._currency, dt, sensitivity_currency, value)

    def zero_rate_point_sensitivity(self,
                                    dt: Date,
                                    sensitivity_currency: CurrencyTypes = None):
        return self.zero_rate_point_sensitivity_from_time(
            self.relative_year_fraction(dt), dt, sensitivity_currency)

###############################################################################

    def unit_parameter_sensitivity_from_time(self, t):
        """ d(native value)/d parameter_i, one row per time for vectors. """
        return self._curve.y_value_parameter_sensitivity(t)

    def unit_parameter_sensitivity(self, dt: Date) -> np.ndarray:
        return self.unit_parameter_sensitivity_from_time(self.relative_year_fraction(dt))

    def discount_factor_native_derivative(self, t):
        return self._apply_positive(t, self._df_native_derivative, 0.0)

    def zero_rate_native_derivative(self, t):
        return self._apply_positive(t, self._zero_native_derivative, 0.0)

    def discount_factor_parameter_sensitivity_from_time(self, t) -> np.ndarray:
        """ dDF(t)/d parameter_i. Vector of times gives one row per time. """
        scale = np.atleast_1d(self.discount_factor_native_derivative(t))
        unit = np.atleast_2d(self.unit_parameter_sensitivity_from_time(np.atleast_1d(t)))
        out = scale[:, None] * unit
        return out[0] if np.ndim(t) == 0 else out

    def discount_factor_parameter_sensitivity(self, dt: Date) -> np.ndarray:
        return self.discount_factor_parameter_sensitivity_from_time(
            self.relative_year_fraction(dt))

    def zero_rate_parameter_sensitivity_from_time(self, t) -> np.ndarray:
        """ dz(t)/d parameter_i. Vector of times gives one row per time. """
        scale = np.atleast_1d(self.zero_rate_native_derivative(t))
        unit = np.atleast_2d(self.unit_parameter_sensitivity_from_time(np.atleast_1d(t)))
        out = scale[:, None] * unit
        return out[0] if np.ndim(t) == 0 else out

    def zero_rate_parameter_sensitivity(self, dt: Date) -> np.ndarray:
        return self.zero_rate_parameter_sensitivity_from_time(
            self.relative_year_fraction(dt))

###############################################################################

    def __repr__(self):
        s = label_to_string("OBJECT TYPE", type(self).__name__)
        s += label_to_string("CURRENCY", self._currency)
        s += label_to_string("VALUATION DATE", self._valuation_date)
        s += label_to_string("CURVE NAME", self.name)
        s += label_to_string("DAY COUNT", self._day_count)
        return s

###############################################################################


class ZeroRateDiscountCurve(DiscountCurve):
    """ Node values are continuously compounded zero rates. """

    @staticmethod
    def native_value_type() -> ValueTypes:
        return ValueTypes.ZERO_RATE

    def _df_from_time(self, t):
        return np.exp(-t * self._curve.y_value(t))

    def _df_native_derivative(self, t):
        return -t * self._df_from_time(t)

    def _zero_native_derivative(self, t):
        return np.ones_like(t)

###############################################################################


class DiscountFactorCurve(DiscountCurve):
    """ Node values are discount factors. """

    @staticmethod
    def native_value_type() -> ValueTypes:
        return ValueTypes.DISCOUNT_FACTOR

    def __init__(self,
                 currency: CurrencyTypes,
                 valuation_date: Date,
                 curve: InterpolatedNodalCurve):
        super().__init__(currency, valuation_date, curve)
        if np.any(curve.y_values <= 0.0):
            raise LibError(f"Curve {curve.name}: discount factors must be positive")
        if np.any(np.diff(curve.y_values) > g_small):
            logger.warning("Curve %s: discount factors increase between nodes", curve.name)

    def _df_from_time(self, t):
        return np.asarray(self._curve.y_value(t), dtype=float)

    def _df_native_derivative(self, t):
        return np.ones_like(t)

    def _zero_native_derivative(self, t):
        return -1.0 / (t * self._df_from_time(t))

###############################################################################
