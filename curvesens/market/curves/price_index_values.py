"""
Price index values for inflation pricing.

PriceIndexValues combines a monthly PriceIndex, its historical fixings and a
nodal curve of forward index levels. The curve x values are months since the
valuation month and its y values are index levels. The latest fixing is
added in front of the curve nodes as a fixed anchor, so interpolation runs
from the last known level into the forward curve. The anchor is not a curve
parameter: unit parameter sensitivities have the curve's own length.

An optional seasonality of twelve multiplicative factors, one per calendar
month, is applied to forward levels.

Example:
    >>> values = PriceIndexValues(rpi, value_dt, nodal_curve, rpi_fixings)
    >>> values.value(Date(1, 6, 2026))
    >>> values.unit_parameter_sensitivity(Date(1, 6, 2026))
"""

from dataclasses import replace
from typing import Optional

import numpy as np

from curvesens.utils.date import Date
from curvesens.utils.error import LibError, MissingMarketDataError
from curvesens.utils.global_types import ValueTypes
from curvesens.utils.helpers import check_argument_types, label_to_string
from curvesens.market.curves.curve import InterpolatedNodalCurve
from curvesens.market.indices.rate_index import PriceIndex
from curvesens.market.indices.time_series import DateSeries

###############################################################################


class PriceIndexValues:
    """ Historical fixings plus forward curve for one price index. """

    def __init__(self,
                 index: PriceIndex,
                 valuation_date: Date,
                 curve: InterpolatedNodalCurve,
                 fixings: DateSeries,
                 seasonality: Optional[tuple] = None):

        check_argument_types(self.__init__, locals())

        if fixings.is_empty():
            raise MissingMarketDataError(f"Price index {index} needs at least "
                                         f"one historical fixing")

        if curve.metadata.x_value_type != ValueTypes.MONTHS:
            raise LibError(f"Price curve {curve.name} must have MONTHS x values")

        if curve.metadata.y_value_type != ValueTypes.PRICE_INDEX:
            raise LibError(f"Price curve {curve.name} must have PRICE_INDEX y values")

        if seasonality is None:
            seasonality = (1.0,) * 12
        seasonality = tuple(float(f) for f in seasonality)
        if len(seasonality) != 12:
            raise LibError("Seasonality must have one factor per calendar month")
        for month, factor in enumerate(seasonality, start=1):
            if factor <= 0.0:
                raise LibError(f"Seasonality factors must be positive. "
                               f"Month {month} has factor {factor}")

        self._index = index
        self._valuation_date = valuation_date
        self._valuation_month = valuation_date.first_of_month()
        self._curve = curve
        self._fixings = fixings
        self._seasonality = seasonality

        last_month = fixings.latest_date().first_of_month()
        last_nb_month = float(last_month.months_since(self._valuation_month))
        if last_nb_month >= curve.x_values[0]:
            raise LibError("The first estimation month should be after the "
                           "last known index fixing")

        labels = ("fixing",) + curve.metadata.parameter_labels
        self._extended_curve = InterpolatedNodalCurve(
            replace(curve.metadata, parameter_labels=labels),
            np.concatenate([[last_nb_month], curve.x_values]),
            np.concatenate([[fixings.latest_value()], curve.y_values]),
            curve.interpolator)

###############################################################################

    @property
    def index(self) -> PriceIndex:
        return self._index

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

    @property
    def fixings(self) -> DateSeries:
        return self._fixings

    @property
    def seasonality(self) -> tuple:
        return self._seasonality

    def with_curve(self, curve: InterpolatedNodalCurve) -> "PriceIndexValues":
        return PriceIndexValues(self._index, self._valuation_date, curve,
                                self._fixings, self._seasonality)

###############################################################################

    def number_of_months(self, month: Date) -> float:
        return float(month.first_of_month().months_since(self._valuation_month))

    def is_fixed(self, month: Date) -> bool:
        return self._fixings.contains(month.first_of_month())

    def value(self, month: Date) -> float:
        """ Index level for the reference month: the fixing when published,
        the seasonally adjusted curve level otherwise. """
        month = month.first_of_month()
        fixing = self._fixings.get(month)
        if fixing is not None:
            return fixing
        value = self._extended_curve.y_value(self.number_of_months(month))
        return value * self._seasonality[month.m() - 1]

    def unit_parameter_sensitivity(self, month: Date) -> np.ndarray:
        """ d value(month) / d curve parameter_i. Zero for fixed months. """
        month = month.first_of_month()
        if self._fixings.contains(month):
            return np.zeros(self.parameter_count)
        sens = self._extended_curve.y_value_parameter_sensitivity(
            self.number_of_months(month))
        # the first entry belongs to the fixing anchor
        return sens[1:] * self._seasonality[month.m() - 1]

###############################################################################

    def __repr__(self):
        s = label_to_string("OBJECT TYPE", type(self).__name__)
        s += label_to_string("INDEX", self._index)
        s += label_to_string("VALUATION DATE", self._valuation_date)
        s += label_to_string("CURVE NAME", self.name)
        s += label_to_string("NUM FIXINGS", len(self._fixings))
        return s

###############################################################################
