"""
Immutable market data snapshot for pricing and risk.

ImmutableRatesProvider holds, for one valuation date:

- a discount curve per currency
- a forward curve per Ibor or overnight index
- price index values per price index
- an FX matrix
- historical fixings per index

and answers the queries pricers make (discount factors, FX rates, index
rates and their point sensitivities). The maps are read-only views; a
changed snapshot is a new provider, built with to_builder() or with_curve().

Fixing rules for index observations are keyed on the date a fixing becomes
known: the fixing date for Ibor and FX indices, the publication date for
overnight indices.
- known before the valuation date: the fixing must be in the fixing series
- known on the valuation date: the series is used when it holds the fixing
  and the forward curve otherwise
- known later: the forward curves are used
Observations that are fixed have no point sensitivity.

Every curve is evaluated at relative_time(date), the year fraction from the
valuation date in the provider's day count.

Example:
    >>> provider = (ImmutableRatesProvider.builder(value_dt)
    ...             .discount_curve(CurrencyTypes.GBP, sonia_curve)
    ...             .index_curve(sonia, sonia_curve)
    ...             .build())
    >>> provider.discount_factor(CurrencyTypes.GBP, value_dt.add_tenor("5Y"))
"""

import logging
from types import MappingProxyType
from typing import Dict, Optional

from curvesens.utils.date import Date
from curvesens.utils.day_count import DayCount, DayCountTypes
from curvesens.utils.currency import CurrencyTypes, CurrencyPair
from curvesens.utils.error import LibError, MissingMarketDataError
from curvesens.utils.helpers import check_argument_types, label_to_string
from curvesens.market.indices.rate_index import (IborIndex,
                                                 OvernightIndex,
                                                 FxIndex,
                                                 PriceIndex,
                                                 RATE_INDEX_TYPES)
from curvesens.market.indices.time_series import DateSeries
from curvesens.market.curves.curve import CurveName, InterpolatedNodalCurve
from curvesens.market.curves.discount_curve import DiscountCurve
from curvesens.market.curves.price_index_values import PriceIndexValues
from curvesens.market.fx.fx_matrix import FxMatrix
from curvesens.sensitivity.point_sensitivity import (PointSensitivities,
                                                     ZeroRateSensitivity,
                                                     IborRateSensitivity,
                                                     OvernightRateSensitivity,
                                                     FxIndexSensitivity,
                                                     PriceIndexValueSensitivity)
from curvesens.sensitivity.aggregator import ParameterSensitivityCalculator
from curvesens.sensitivity.parameter_sensitivity import CurrencyParameterSensitivities

logger = logging.getLogger(__name__)

###############################################################################


class ImmutableRatesProvider:
    """ Immutable snapshot of rates market data on a valuation date. """

    def __init__(self,
                 valuation_date: Date,
                 fx_matrix: FxMatrix = None,
                 discount_curves: Optional[Dict] = None,
                 index_curves: Optional[Dict] = None,
                 price_index_values: Optional[Dict] = None,
                 time_series: Optional[Dict] = None,
                 day_count: DayCountTypes = DayCountTypes.ACT_365F,
                 sensitivity_calculator: ParameterSensitivityCalculator = None):

        check_argument_types(self.__init__, locals())

        discount_curves = dict(discount_curves or {})
        index_curves = dict(index_curves or {})
        price_index_values = dict(price_index_values or {})
        time_series = dict(time_series or {})

        for ccy, curve in discount_curves.items():
            if not isinstance(ccy, CurrencyTypes) or not isinstance(curve, DiscountCurve):
                raise LibError("Discount curves map CurrencyTypes to DiscountCurve")
            if curve.currency != ccy:
                raise LibError(f"Discount curve {curve.name} is for "
                               f"{curve.currency.name}, not {ccy.name}")
            self._check_date(curve, valuation_date)

        for index, curve in index_curves.items():
            if not isinstance(index, (IborIndex, OvernightIndex)) or \
                    not isinstance(curve, DiscountCurve):
                raise LibError("Index curves map Ibor or overnight indices to DiscountCurve")
            self._check_date(curve, valuation_date)

        for index, values in price_index_values.items():
            if not isinstance(index, PriceIndex) or not isinstance(values, PriceIndexValues):
                raise LibError("Price index values map PriceIndex to PriceIndexValues")
            if values.index != index:
                raise LibError(f"Price index values for {values.index} stored under {index}")
            self._check_date(values, valuation_date)

        for index, series in time_series.items():
            if not isinstance(index, RATE_INDEX_TYPES) or not isinstance(series, DateSeries):
                raise LibError("Time series map rate indices to DateSeries")

        self._valuation_date = valuation_date
        self._fx_matrix = fx_matrix if fx_matrix is not None else FxMatrix.empty()
        self._discount_curves = MappingProxyType(discount_curves)
        self._index_curves = MappingProxyType(index_curves)
        self._price_index_values = MappingProxyType(price_index_values)
        self._time_series = MappingProxyType(time_series)
        self._day_count_type = day_count
        self._day_count = DayCount(day_count)
        self._sensitivity_calculator = sensitivity_calculator \
            if sensitivity_calculator is not None else ParameterSensitivityCalculator()

        logger.debug("Rates provider on %s: %d discount curves, %d index curves, "
                     "%d price indices, %d fixing series", valuation_date,
                     len(discount_curves), len(index_curves),
                     len(price_index_values), len(time_series))

    @staticmethod
    def _check_date(market_object, valuation_date: Date):
        if market_object.valuation_date != valuation_date:
            raise LibError(f"{market_object.name} has valuation date "
                           f"{market_object.valuation_date}, provider has {valuation_date}")

###############################################################################

    @classmethod
    def builder(cls, valuation_date: Date) -> "ImmutableRatesProviderBuilder":
        return ImmutableRatesProviderBuilder(valuation_date)

    def to_builder(self) -> "ImmutableRatesProviderBuilder":
        b = ImmutableRatesProviderBuilder(self._valuation_date)
        b._fx_matrix = self._fx_matrix
        b._discount_curves = dict(self._discount_curves)
        b._index_curves = dict(self._index_curves)
        b._price_index_values = dict(self._price_index_values)
        b._time_series = dict(self._time_series)
        b._day_count = self._day_count_type
        b._sensitivity_calculator = self._sensitivity_calculator
        return b

###############################################################################

    @property
    def valuation_date(self) -> Date:
        return self._valuation_date

    @property
    def day_count(self) -> DayCountTypes:
        return self._day_count_type

    @property
    def fx_matrix(self) -> FxMatrix:
        return self._fx_matrix

    @property
    def discount_curves(self):
        return self._discount_curves

    @property
    def index_curves(self):
        return self._index_curves

    @property
    def price_index_values_map(self):
        return self._price_index_values

    @property
    def time_series_map(self):
        return self._time_series

    @property
    def sensitivity_calculator(self) -> ParameterSensitivityCalculator:
        return self._sensitivity_calculator

    def relative_time(self, dt: Date) -> float:
        """ Signed year fraction from the valuation date in the provider's
        day count. """
        return self._day_count.relative_year_frac(self._valuation_date, dt)

###############################################################################

    def discount_curve(self, currency: CurrencyTypes) -> DiscountCurve:
        curve = self._discount_curves.get(currency)
        if curve is None:
            raise MissingMarketDataError(f"No discount curve for {currency.name}")
        return curve

    def index_curve(self, index) -> DiscountCurve:
        curve = self._index_curves.get(index)
        if curve is None:
            raise MissingMarketDataError(f"No forward curve for index {index}")
        return curve

    def price_index_values(self, index: PriceIndex) -> PriceIndexValues:
        values = self._price_index_values.get(index)
        if values is None:
            raise MissingMarketDataError(f"No price index values for {index}")
        return values

    def find_time_series(self, index) -> Optional[DateSeries]:
        return self._time_series.get(index)

    def time_series(self, index) -> DateSeries:
        series = self._time_series.get(index)
        if series is None:
            raise MissingMarketDataError(f"No fixing series for index {index}")
        return series

    def curves(self) -> Dict[CurveName, InterpolatedNodalCurve]:
        """ Every distinct nodal curve in the snapshot keyed by name. """
        out = {}
        holders = list(self._discount_curves.values()) + \
            list(self._index_curves.values()) + list(self._price_index_values.values())
        for holder in holders:
            out.setdefault(holder.name, holder.curve)
        return out

    def find_curve(self, name: CurveName) -> Optional[InterpolatedNodalCurve]:
        return self.curves().get(name)

    def with_curve(self, name: CurveName, curve: InterpolatedNodalCurve) -> "ImmutableRatesProvider":
        """ New provider in which every use of the named curve sees the
        given nodal curve. """
        if name not in self.curves():
            raise MissingMarketDataError(f"No curve named {name} in the provider")

        def _swap(holders):
            return {k: (v.with_curve(curve) if v.name == name else v)
                    for k, v in holders.items()}

        b = self.to_builder()
        b._discount_curves = _swap(self._discount_curves)
        b._index_curves = _swap(self._index_curves)
        b._price_index_values = _swap(self._price_index_values)
        return b.build()

###############################################################################

    def discount_factor(self, currency: CurrencyTypes, dt: Date) -> float:
        return self.discount_curve(currency).discount_factor_from_time(self.relative_time(dt))

    def zero_rate_point_sensitivity(self,
                                    currency: CurrencyTypes,
                                    dt: Date,
                                    sensitivity_currency: CurrencyTypes = None) -> ZeroRateSensitivity:
        return self.discount_curve(currency).zero_rate_point_sensitivity_from_time(
            self.relative_time(dt), dt, sensitivity_currency)

    def fx_rate(self, base: CurrencyTypes, counter: CurrencyTypes) -> float:
        return self._fx_matrix.fx_rate(base, counter)

###############################################################################

    def _historic_fixing(self, index, fixing_dt: Date,
                         known_dt: Date = None) -> Optional[float]:
        """ The fixing to use instead of the forward, or None when the
        observation is still forward looking. known_dt is the date the
        fixing becomes known and defaults to the fixing date. """
        known_dt = fixing_dt if known_dt is None else known_dt
        if known_dt > self._valuation_date:
            return None
        series = self._time_series.get(index)
        value = series.get(fixing_dt) if series is not None else None
        if value is None and known_dt < self._valuation_date:
            raise MissingMarketDataError(f"Missing fixing for {index} on {fixing_dt}")
        return value

    def _overnight_fixing(self, index: OvernightIndex, fixing_dt: Date) -> Optional[float]:
        return self._historic_fixing(index, fixing_dt,
                                     index.publication_from_fixing(fixing_dt))

    def _is_fixed(self, index, fixing_dt: Date) -> bool:
        return self._historic_fixing(index, fixing_dt) is not None

    def _simple_forward(self, curve: DiscountCurve, start_dt: Date, end_dt: Date,
                        year_frac: float) -> float:
        df_start = curve.discount_factor_from_time(self.relative_time(start_dt))
        df_end = curve.discount_factor_from_time(self.relative_time(end_dt))
        return (df_start / df_end - 1.0) / year_frac

###############################################################################

    def ibor_index_rate(self, index: IborIndex, fixing_dt: Date) -> float:
        fixing = self._historic_fixing(index, fixing_dt)
        if fixing is not None:
            return fixing
        start_dt = index.effective_from_fixing(fixing_dt)
        end_dt = index.maturity_from_effective(start_dt)
        return self._simple_forward(self.index_curve(index), start_dt, end_dt,
                                    index.year_frac(start_dt, end_dt))

    def ibor_index_rate_sensitivity(self,
                                    index: IborIndex,
                                    fixing_dt: Date,
                                    currency: CurrencyTypes = None) -> PointSensitivities:
        if self._is_fixed(index, fixing_dt):
            return PointSensitivities.empty()
        return PointSensitivities.of(IborRateSensitivity.of(index, fixing_dt, 1.0, currency))

    def overnight_index_rate(self, index: OvernightIndex, fixing_dt: Date) -> float:
        fixing = self._overnight_fixing(index, fixing_dt)
        if fixing is not None:
            return fixing
        start_dt = index.effective_from_fixing(fixing_dt)
        end_dt = index.maturity_from_effective(start_dt)
        return self._simple_forward(self.index_curve(index), start_dt, end_dt,
                                    index.year_frac(start_dt, end_dt))

    def overnight_index_rate_sensitivity(self,
                                         index: OvernightIndex,
                                         fixing_dt: Date,
                                         currency: CurrencyTypes = None) -> PointSensitivities:
        if self._overnight_fixing(index, fixing_dt) is not None:
            return PointSensitivities.empty()
        return PointSensitivities.of(OvernightRateSensitivity.of(index, fixing_dt, 1.0, currency))

    def _check_period(self, index: OvernightIndex, start_fixing_dt: Date, end_dt: Date):
        if start_fixing_dt < self._valuation_date:
            raise LibError(f"Overnight period for {index} must start on or after "
                           f"the valuation date, got {start_fixing_dt}")
        if end_dt <= index.effective_from_fixing(start_fixing_dt):
            raise LibError(f"Overnight period for {index} ends on {end_dt}, "
                           f"before it starts")

    def overnight_index_rate_period(self,
                                    index: OvernightIndex,
                                    start_fixing_dt: Date,
                                    end_dt: Date) -> float:
        """ Simply compounded forward rate from the effective date of the
        first fixing to end_dt. """
        self._check_period(index, start_fixing_dt, end_dt)
        start_dt = index.effective_from_fixing(start_fixing_dt)
        return self._simple_forward(self.index_curve(index), start_dt, end_dt,
                                    index.year_frac(start_dt, end_dt))

    def overnight_index_rate_period_sensitivity(self,
                                                index: OvernightIndex,
                                                start_fixing_dt: Date,
                                                end_dt: Date,
                                                currency: CurrencyTypes = None) -> PointSensitivities:
        self._check_period(index, start_fixing_dt, end_dt)
        return PointSensitivities.of(
            OvernightRateSensitivity.of_period(index, start_fixing_dt, end_dt, 1.0, currency))

###############################################################################

    @staticmethod
    def _observed_pair(index: FxIndex, base_ccy: CurrencyTypes) -> CurrencyPair:
        pair = index.currency_pair
        if not pair.contains(base_ccy):
            raise LibError(f"{base_ccy.name} is not a currency of {index}")
        return pair if base_ccy == pair.base else pair.inverse()

    def fx_index_rate(self, index: FxIndex, base_ccy: CurrencyTypes, fixing_dt: Date) -> float:
        """ Rate for 1 base_ccy in the other currency of the index. Fixings
        are stored in the index quotation and inverted when needed. """
        pair = self._observed_pair(index, base_ccy)
        fixing = self._historic_fixing(index, fixing_dt)
        if fixing is not None:
            return fixing if pair == index.currency_pair else 1.0 / fixing

        maturity_dt = index.maturity_from_fixing(fixing_dt)
        df_base = self.discount_factor(pair.base, maturity_dt)
        df_counter = self.discount_factor(pair.counter, maturity_dt)
        return self.fx_rate(pair.base, pair.counter) * df_base / df_counter

    def fx_index_rate_sensitivity(self,
                                  index: FxIndex,
                                  base_ccy: CurrencyTypes,
                                  fixing_dt: Date,
                                  currency: CurrencyTypes = None) -> PointSensitivities:
        pair = self._observed_pair(index, base_ccy)
        if self._is_fixed(index, fixing_dt):
            return PointSensitivities.empty()
        currency = pair.counter if currency is None else currency
        return PointSensitivities.of(FxIndexSensitivity(index, base_ccy, fixing_dt, currency, 1.0))

###############################################################################

    def price_index_value(self, index: PriceIndex, month: Date) -> float:
        return self.price_index_values(index).value(month)

    def price_index_value_sensitivity(self,
                                      index: PriceIndex,
                                      month: Date,
                                      currency: CurrencyTypes = None) -> PointSensitivities:
        if self.price_index_values(index).is_fixed(month):
            return PointSensitivities.empty()
        return PointSensitivities.of(PriceIndexValueSensitivity.of(index, month, 1.0, currency))

###############################################################################

    def parameter_sensitivity(self, point_sensitivities) -> CurrencyParameterSensitivities:
        """ Project point sensitivities onto the parameters of the curves in
        this snapshot. """
        return self._sensitivity_calculator.sensitivity(point_sensitivities, self)

###############################################################################

    def __repr__(self):
        s = label_to_string("OBJECT TYPE", type(self).__name__)
        s += label_to_string("VALUATION DATE", self._valuation_date)
        s += label_to_string("DISCOUNT CURVES",
                             [f"{c.name}: {k.name}" for k, c in self._discount_curves.items()],
                             list_format=True)
        s += label_to_string("INDEX CURVES",
                             [f"{k}: {c.name}" for k, c in self._index_curves.items()],
                             list_format=True)
        s += label_to_string("PRICE INDICES",
                             [str(k) for k in self._price_index_values], list_format=True)
        s += label_to_string("FX", self._fx_matrix)
        return s

###############################################################################


class ImmutableRatesProviderBuilder:
    """ Mutable builder for an ImmutableRatesProvider. """

    def __init__(self, valuation_date: Date):
        self._valuation_date = valuation_date
        self._fx_matrix = None
        self._discount_curves = {}
        self._index_curves = {}
        self._price_index_values = {}
        self._time_series = {}
        self._day_count = DayCountTypes.ACT_365F
        self._sensitivity_calculator = None

    def fx_matrix(self, fx_matrix: FxMatrix):
        self._fx_matrix = fx_matrix
        return self

    def discount_curve(self, currency: CurrencyTypes, curve: DiscountCurve):
        self._discount_curves[currency] = curve
        return self

    def index_curve(self, index, curve: DiscountCurve):
        self._index_curves[index] = curve
        return self

    def price_index_values(self, index: PriceIndex, values: PriceIndexValues):
        self._price_index_values[index] = values
        return self

    def time_series(self, index, series: DateSeries):
        self._time_series[index] = series
        return self

    def day_count(self, day_count: DayCountTypes):
        self._day_count = day_count
        return self

    def sensitivity_calculator(self, calculator: ParameterSensitivityCalculator):
        self._sensitivity_calculator = calculator
        return self

    def build(self) -> ImmutableRatesProvider:
        return ImmutableRatesProvider(self._valuation_date,
                                      fx_matrix=self._fx_matrix,
                                      discount_curves=self._discount_curves,
                                      index_curves=self._index_curves,
                                      price_index_values=self._price_index_values,
                                      time_series=self._time_series,
                                      day_count=self._day_count,
                                      sensitivity_calculator=self._sensitivity_calculator)

###############################################################################
