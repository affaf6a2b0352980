"""
Projection of point sensitivities onto curve parameters.

ParameterSensitivityAggregator groups resolved point sensitivities into four
families and projects each group onto the parameters of the curve behind it:

- zero rate: sum_k s_k dz(t_k)/dp on the discount curve of the currency
- Ibor and overnight forwards: with Fwd = (DF(start)/DF(end) - 1) / a

      dFwd/dDF(start) = 1 / (DF(end) a)
      dFwd/dDF(end)   = -DF(start) / (DF(end)^2 a)

  chained with dDF/dp of the index curve at start and end
- price index: sum_k s_k d value(month_k)/dp of the price index values

Times are the provider's relative_time of each date. dz/dp and dDF/dp come
from the curve itself, so zero rate and discount factor parameterised
curves project correctly. Groups are keyed by the curve and the settlement
currency; families that land on the same curve name and currency are
summed. FX index sensitivities must be resolved first and raise if they
reach the aggregator.

ParameterSensitivityCalculator composes a resolver and an aggregator; it is
what a provider's parameter_sensitivity delegates to.

Example:
    >>> calculator = ParameterSensitivityCalculator()
    >>> sens = calculator.sensitivity(point_sensitivities, provider)
"""

import logging
from collections import defaultdict

import numpy as np

from curvesens.utils.error import LibError
from curvesens.sensitivity.point_sensitivity import PointSensitivityVisitor
from curvesens.sensitivity.parameter_sensitivity import (CurrencyParameterSensitivity,
                                                         CurrencyParameterSensitivities)
from curvesens.sensitivity.resolver import SensitivityResolver

logger = logging.getLogger(__name__)

###############################################################################


class _SensitivityGrouper(PointSensitivityVisitor):
    """ Accumulates the entries of one aggregation call by family and by
    (curve key, settlement currency). """

    def __init__(self):
        self.zero_rate = defaultdict(list)
        self.ibor = defaultdict(list)
        self.overnight = defaultdict(list)
        self.price_index = defaultdict(list)

    def visit_zero_rate(self, sens):
        self.zero_rate[(sens.curve_currency, sens.currency)].append(
            (sens.date, sens.sensitivity))

    def visit_ibor_rate(self, sens):
        index = sens.index
        start_dt = index.effective_from_fixing(sens.fixing_date)
        end_dt = index.maturity_from_effective(start_dt)
        self.ibor[(index, sens.currency)].append(
            (start_dt, end_dt, index.year_frac(start_dt, end_dt), sens.sensitivity))

    def visit_overnight_rate(self, sens):
        index = sens.index
        start_dt = index.effective_from_fixing(sens.fixing_date)
        end_dt = sens.end_date
        self.overnight[(index, sens.currency)].append(
            (start_dt, end_dt, index.year_frac(start_dt, end_dt), sens.sensitivity))

    def visit_fx_index(self, sens):
        raise LibError(f"FX index sensitivity to {sens.index} on {sens.fixing_date} "
                       f"must be resolved before aggregation")

    def visit_price_index_value(self, sens):
        self.price_index[(sens.index, sens.currency)].append(
            (sens.reference_month, sens.sensitivity))

    def size(self) -> int:
        return len(self.zero_rate) + len(self.ibor) + \
            len(self.overnight) + len(self.price_index)

###############################################################################


def _times(provider, dates) -> np.ndarray:
    return np.array([provider.relative_time(dt) for dt in dates], dtype=float)


def _forward_rate_projection(provider, curve, entries) -> np.ndarray:
    """ sum_k s_k dFwd_k/dp for simply compounded forwards on one curve. """
    starts = _times(provider, [e[0] for e in entries])
    ends = _times(provider, [e[1] for e in entries])
    accruals = np.array([e[2] for e in entries], dtype=float)
    coeffs = np.array([e[3] for e in entries], dtype=float)

    df_start = curve.discount_factor_from_time(starts)
    df_end = curve.discount_factor_from_time(ends)
    d_start = 1.0 / (df_end * accruals)
    d_end = -df_start / (df_end * df_end * accruals)

    sens_start = curve.discount_factor_parameter_sensitivity_from_time(starts)
    sens_end = curve.discount_factor_parameter_sensitivity_from_time(ends)
    return (coeffs * d_start) @ sens_start + (coeffs * d_end) @ sens_end


def _zero_rate_projection(provider, curve, entries) -> np.ndarray:
    times = _times(provider, [e[0] for e in entries])
    coeffs = np.array([e[1] for e in entries], dtype=float)
    return coeffs @ curve.zero_rate_parameter_sensitivity_from_time(times)


def _price_index_projection(values, entries) -> np.ndarray:
    out = np.zeros(values.parameter_count)
    for month, coeff in entries:
        out += coeff * values.unit_parameter_sensitivity(month)
    return out


def _emit(curve, currency, vector) -> CurrencyParameterSensitivity:
    return CurrencyParameterSensitivity(curve.name, currency, vector,
                                        curve.curve.metadata.parameter_labels)

###############################################################################


class ParameterSensitivityAggregator:
    """ Projects point sensitivities with no FX index entries onto curve
    parameters, one vector per (curve name, currency). """

    def aggregate(self, sensitivities, provider) -> CurrencyParameterSensitivities:
        grouper = _SensitivityGrouper()
        num_points = 0
        for sens in sensitivities:
            sens.accept(grouper)
            num_points += 1

        result = []

        for (ccy, settle_ccy), entries in grouper.zero_rate.items():
            curve = provider.discount_curve(ccy)
            result.append(_emit(curve, settle_ccy,
                                _zero_rate_projection(provider, curve, entries)))

        for family in (grouper.ibor, grouper.overnight):
            for (index, settle_ccy), entries in family.items():
                curve = provider.index_curve(index)
                result.append(_emit(curve, settle_ccy,
                                    _forward_rate_projection(provider, curve, entries)))

        for (index, settle_ccy), entries in grouper.price_index.items():
            values = provider.price_index_values(index)
            result.append(_emit(values, settle_ccy,
                                _price_index_projection(values, entries)))

        out = CurrencyParameterSensitivities(result)
        logger.debug("Aggregated %d point sensitivities in %d groups into %d curve "
                     "sensitivities", num_points, grouper.size(), out.size())
        return out

###############################################################################


class ParameterSensitivityCalculator:
    """ Resolution followed by aggregation. A calculator constructed
    without arguments owns a fresh resolver and aggregator. """

    def __init__(self,
                 resolver: SensitivityResolver = None,
                 aggregator: ParameterSensitivityAggregator = None):
        self._resolver = resolver if resolver is not None else SensitivityResolver()
        self._aggregator = aggregator if aggregator is not None \
            else ParameterSensitivityAggregator()

    @property
    def resolver(self) -> SensitivityResolver:
        return self._resolver

    @property
    def aggregator(self) -> ParameterSensitivityAggregator:
        return self._aggregator

    def sensitivity(self, sensitivities, provider) -> CurrencyParameterSensitivities:
        resolved = self._resolver.resolve(sensitivities, provider)
        return self._aggregator.aggregate(resolved, provider)

###############################################################################
