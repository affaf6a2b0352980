"""
Tests for ImmutableRatesProvider: market data lookups, index rates and the
fixing rules, immutability and curve replacement.
"""
import math

import pytest

from curvesens.utils.date import Date
from curvesens.utils.currency import CurrencyTypes
from curvesens.utils.error import LibError, MissingMarketDataError
from curvesens.market.curves.curve import CurveName
from curvesens.market.curves.discount_curve import ZeroRateDiscountCurve
from curvesens.market.indices.time_series import DateSeries
from curvesens.provider.rates_provider import ImmutableRatesProvider
from curvesens.sensitivity.aggregator import ParameterSensitivityCalculator
from curvesens.sensitivity.point_sensitivity import (PointSensitivities,
                                                     ZeroRateSensitivity,
                                                     IborRateSensitivity,
                                                     OvernightRateSensitivity,
                                                     FxIndexSensitivity,
                                                     PriceIndexValueSensitivity)

GBP = CurrencyTypes.GBP
USD = CurrencyTypes.USD
JPY = CurrencyTypes.JPY


class TestDiscounting:

    def test_discount_factor_matches_curve(self, sample_provider):
        dt = Date(15, 1, 2026)
        expected = sample_provider.discount_curve(GBP).discount_factor(dt)
        assert sample_provider.discount_factor(GBP, dt) == pytest.approx(expected)
        assert 0.0 < expected < 1.0

    def test_discount_factor_on_valuation_date_is_one(self, sample_provider, standard_value_date):
        assert sample_provider.discount_factor(USD, standard_value_date) == 1.0

    def test_missing_currency_raises(self, sample_provider):
        with pytest.raises(MissingMarketDataError):
            sample_provider.discount_factor(JPY, Date(15, 1, 2026))

    def test_missing_currency_is_a_lib_error(self, sample_provider):
        with pytest.raises(LibError):
            sample_provider.discount_curve(JPY)

    def test_relative_time(self, sample_provider):
        # 2024 is a leap year
        assert sample_provider.relative_time(Date(15, 1, 2025)) == pytest.approx(366.0 / 365.0)

    def test_curves_are_evaluated_at_provider_time(self, sample_provider):
        # the USD curve carries ACT_360, the provider measures time in ACT_365F
        dt = Date(15, 7, 2025)
        curve = sample_provider.discount_curve(USD)
        t = sample_provider.relative_time(dt)
        assert curve.relative_year_fraction(dt) != pytest.approx(t)
        assert sample_provider.discount_factor(USD, dt) == pytest.approx(
            curve.discount_factor_from_time(t))

        sens = sample_provider.zero_rate_point_sensitivity(USD, dt)
        assert sens.sensitivity == pytest.approx(-t * sample_provider.discount_factor(USD, dt))

    def test_zero_rate_point_sensitivity(self, sample_provider):
        dt = Date(15, 1, 2027)
        sens = sample_provider.zero_rate_point_sensitivity(GBP, dt)
        t = sample_provider.relative_time(dt)
        assert isinstance(sens, ZeroRateSensitivity)
        assert sens.curve_currency == GBP
        assert sens.currency == GBP
        assert sens.sensitivity == pytest.approx(-t * sample_provider.discount_factor(GBP, dt))

    def test_zero_rate_point_sensitivity_other_currency(self, sample_provider):
        sens = sample_provider.zero_rate_point_sensitivity(GBP, Date(15, 1, 2027), USD)
        assert sens.curve_currency == GBP
        assert sens.currency == USD

    def test_fx_rate(self, sample_provider):
        assert sample_provider.fx_rate(GBP, USD) == pytest.approx(1.27)
        assert sample_provider.fx_rate(USD, GBP) == pytest.approx(1.0 / 1.27)


class TestIborRates:

    def test_forward_rate(self, sample_provider, gbp_libor_3m):
        fixing = Date(15, 10, 2024)
        start = gbp_libor_3m.effective_from_fixing(fixing)
        end = gbp_libor_3m.maturity_from_effective(start)
        curve = sample_provider.index_curve(gbp_libor_3m)
        accrual = gbp_libor_3m.year_frac(start, end)
        expected = (curve.discount_factor(start) / curve.discount_factor(end) - 1.0) / accrual

        rate = sample_provider.ibor_index_rate(gbp_libor_3m, fixing)
        assert rate == pytest.approx(expected)
        assert rate > 0.0

    def test_forward_rate_sensitivity(self, sample_provider, gbp_libor_3m):
        fixing = Date(15, 10, 2024)
        sens = sample_provider.ibor_index_rate_sensitivity(gbp_libor_3m, fixing)
        assert sens.size() == 1
        point = sens[0]
        assert isinstance(point, IborRateSensitivity)
        assert point.index == gbp_libor_3m
        assert point.fixing_date == fixing
        assert point.currency == GBP
        assert point.sensitivity == 1.0

    def test_sensitivity_currency_override(self, sample_provider, gbp_libor_3m):
        sens = sample_provider.ibor_index_rate_sensitivity(gbp_libor_3m, Date(15, 10, 2024), USD)
        assert sens[0].currency == USD

    def test_historic_fixing(self, sample_provider, gbp_libor_3m):
        fixing = Date(12, 1, 2024)
        assert sample_provider.ibor_index_rate(gbp_libor_3m, fixing) == 0.0531
        assert sample_provider.ibor_index_rate_sensitivity(gbp_libor_3m, fixing).size() == 0

    def test_missing_past_fixing_raises(self, sample_provider, gbp_libor_3m):
        with pytest.raises(MissingMarketDataError):
            sample_provider.ibor_index_rate(gbp_libor_3m, Date(10, 1, 2024))
        with pytest.raises(MissingMarketDataError):
            sample_provider.ibor_index_rate_sensitivity(gbp_libor_3m, Date(10, 1, 2024))

    def test_valuation_date_without_fixing_uses_forward(self, sample_provider,
                                                        gbp_libor_3m, standard_value_date):
        start = gbp_libor_3m.effective_from_fixing(standard_value_date)
        end = gbp_libor_3m.maturity_from_effective(start)
        curve = sample_provider.index_curve(gbp_libor_3m)
        expected = (curve.discount_factor(start) / curve.discount_factor(end) - 1.0) / \
            gbp_libor_3m.year_frac(start, end)
        assert sample_provider.ibor_index_rate(gbp_libor_3m, standard_value_date) == \
            pytest.approx(expected)
        assert sample_provider.ibor_index_rate_sensitivity(
            gbp_libor_3m, standard_value_date).size() == 1

    def test_valuation_date_with_fixing_uses_series(self, sample_provider,
                                                    gbp_libor_3m, standard_value_date):
        series = DateSeries({Date(12, 1, 2024): 0.0531, standard_value_date: 0.0540})
        provider = sample_provider.to_builder().time_series(gbp_libor_3m, series).build()
        assert provider.ibor_index_rate(gbp_libor_3m, standard_value_date) == 0.0540
        assert provider.ibor_index_rate_sensitivity(gbp_libor_3m, standard_value_date).size() == 0

    def test_missing_index_curve_raises(self, standard_value_date, gbp_libor_3m):
        provider = ImmutableRatesProvider(standard_value_date)
        with pytest.raises(MissingMarketDataError):
            provider.ibor_index_rate(gbp_libor_3m, Date(15, 10, 2024))


class TestOvernightRates:

    def test_single_day_forward(self, sample_provider, sonia):
        # flat zero rate of 5.2% before the first node
        rate = sample_provider.overnight_index_rate(sonia, Date(17, 1, 2024))
        expected = (math.exp(0.052 / 365.0) - 1.0) * 365.0
        assert rate == pytest.approx(expected, rel=1e-9)

    def test_single_day_sensitivity(self, sample_provider, sonia):
        fixing = Date(19, 1, 2024)
        sens = sample_provider.overnight_index_rate_sensitivity(sonia, fixing)
        point = sens[0]
        assert isinstance(point, OvernightRateSensitivity)
        assert point.fixing_date == fixing
        # Friday fixing accrues over the weekend
        assert point.end_date == Date(22, 1, 2024)

    def test_historic_fixing(self, sample_provider, sonia):
        fixing = Date(12, 1, 2024)
        assert sample_provider.overnight_index_rate(sonia, fixing) == 0.0519
        assert sample_provider.overnight_index_rate_sensitivity(sonia, fixing).size() == 0

    def test_missing_past_fixing_raises(self, sample_provider, sonia):
        with pytest.raises(MissingMarketDataError):
            sample_provider.overnight_index_rate(sonia, Date(10, 1, 2024))


class TestOvernightPublication:
    """Overnight fixings are historic once published, not once fixed"""

    @staticmethod
    def _with_sonia_fixings(provider, sonia, fixings):
        return provider.to_builder().time_series(sonia, DateSeries(fixings)).build()

    @staticmethod
    def _forward(provider, index, fixing_dt):
        curve = provider.index_curve(index)
        start = index.effective_from_fixing(fixing_dt)
        end = index.maturity_from_effective(start)
        df_start = curve.discount_factor_from_time(provider.relative_time(start))
        df_end = curve.discount_factor_from_time(provider.relative_time(end))
        return (df_start / df_end - 1.0) / index.year_frac(start, end)

    def test_published_today_and_missing_uses_forward(self, sample_provider, sonia):
        # Friday's fixing is published on Monday, the valuation date
        fixing = Date(12, 1, 2024)
        assert sonia.publication_from_fixing(fixing) == sample_provider.valuation_date
        provider = self._with_sonia_fixings(sample_provider, sonia,
                                            {Date(11, 1, 2024): 0.0519})

        rate = provider.overnight_index_rate(sonia, fixing)
        assert rate == pytest.approx(self._forward(provider, sonia, fixing))

        sens = provider.overnight_index_rate_sensitivity(sonia, fixing)
        assert sens.size() == 1
        assert isinstance(sens[0], OvernightRateSensitivity)
        assert sens[0].fixing_date == fixing

    def test_published_today_and_present_is_fixed(self, sample_provider, sonia):
        fixing = Date(12, 1, 2024)
        provider = self._with_sonia_fixings(sample_provider, sonia,
                                            {Date(11, 1, 2024): 0.0519, fixing: 0.0525})
        assert provider.overnight_index_rate(sonia, fixing) == 0.0525
        assert provider.overnight_index_rate_sensitivity(sonia, fixing).size() == 0

    def test_fixed_today_published_tomorrow_uses_forward(self, sample_provider, sonia):
        fixing = sample_provider.valuation_date
        assert sonia.publication_from_fixing(fixing) == Date(16, 1, 2024)
        provider = self._with_sonia_fixings(sample_provider, sonia,
                                            {Date(12, 1, 2024): 0.0519, fixing: 0.0999})

        rate = provider.overnight_index_rate(sonia, fixing)
        assert rate == pytest.approx((math.exp(0.052 / 365.0) - 1.0) * 365.0, rel=1e-9)

        sens = provider.overnight_index_rate_sensitivity(sonia, fixing)
        assert sens.size() == 1
        assert sens[0].fixing_date == fixing
        curve_sens = provider.parameter_sensitivity(sens)
        assert curve_sens.find_sensitivity(CurveName("GBP-SONIA"), GBP) is not None

    def test_published_before_today_and_missing_raises(self, sample_provider, sonia):
        provider = self._with_sonia_fixings(sample_provider, sonia,
                                            {Date(12, 1, 2024): 0.0519})
        with pytest.raises(MissingMarketDataError):
            provider.overnight_index_rate(sonia, Date(11, 1, 2024))
        with pytest.raises(MissingMarketDataError):
            provider.overnight_index_rate_sensitivity(sonia, Date(11, 1, 2024))

    def test_ibor_keys_on_fixing_date(self, sample_provider, gbp_libor_3m):
        provider = sample_provider.to_builder().time_series(
            gbp_libor_3m, DateSeries({Date(11, 1, 2024): 0.0532})).build()
        with pytest.raises(MissingMarketDataError):
            provider.ibor_index_rate(gbp_libor_3m, Date(12, 1, 2024))

    def test_period_rate(self, sample_provider, sonia, standard_value_date):
        end = Date(15, 4, 2024)
        t = sample_provider.relative_time(end)
        expected = (math.exp(0.052 * t) - 1.0) / sonia.year_frac(standard_value_date, end)
        rate = sample_provider.overnight_index_rate_period(sonia, standard_value_date, end)
        assert rate == pytest.approx(expected, rel=1e-9)

    def test_period_sensitivity(self, sample_provider, sonia, standard_value_date):
        end = Date(15, 7, 2024)
        sens = sample_provider.overnight_index_rate_period_sensitivity(
            sonia, standard_value_date, end)
        assert sens.size() == 1
        assert sens[0].fixing_date == standard_value_date
        assert sens[0].end_date == end
        assert sens[0].sensitivity == 1.0

    def test_period_starting_in_the_past_raises(self, sample_provider, sonia):
        with pytest.raises(LibError):
            sample_provider.overnight_index_rate_period(sonia, Date(12, 1, 2024),
                                                        Date(15, 4, 2024))

    def test_period_ending_before_start_raises(self, sample_provider, sonia):
        with pytest.raises(LibError):
            sample_provider.overnight_index_rate_period_sensitivity(
                sonia, Date(17, 1, 2024), Date(17, 1, 2024))


class TestFxIndexRates:

    def test_forward_rate(self, sample_provider, gbp_usd_wm):
        fixing = Date(17, 1, 2024)
        maturity = gbp_usd_wm.maturity_from_fixing(fixing)
        expected = 1.27 * sample_provider.discount_factor(GBP, maturity) / \
            sample_provider.discount_factor(USD, maturity)
        assert sample_provider.fx_index_rate(gbp_usd_wm, GBP, fixing) == pytest.approx(expected)
        assert sample_provider.fx_index_rate(gbp_usd_wm, USD, fixing) == \
            pytest.approx(1.0 / expected)

    def test_historic_fixing(self, sample_provider, gbp_usd_wm):
        fixing = Date(12, 1, 2024)
        assert sample_provider.fx_index_rate(gbp_usd_wm, GBP, fixing) == 1.2750
        assert sample_provider.fx_index_rate(gbp_usd_wm, USD, fixing) == \
            pytest.approx(1.0 / 1.2750)
        assert sample_provider.fx_index_rate_sensitivity(gbp_usd_wm, GBP, fixing).size() == 0

    def test_sensitivity_currency_defaults_to_counter(self, sample_provider, gbp_usd_wm):
        fixing = Date(17, 1, 2024)
        sens = sample_provider.fx_index_rate_sensitivity(gbp_usd_wm, GBP, fixing)
        point = sens[0]
        assert isinstance(point, FxIndexSensitivity)
        assert point.reference_currency == GBP
        assert point.currency == USD

        inverted = sample_provider.fx_index_rate_sensitivity(gbp_usd_wm, USD, fixing)
        assert inverted[0].currency == GBP

    def test_currency_outside_pair_raises(self, sample_provider, gbp_usd_wm):
        with pytest.raises(LibError):
            sample_provider.fx_index_rate(gbp_usd_wm, JPY, Date(17, 1, 2024))


class TestPriceIndexValues:

    def test_fixed_month(self, sample_provider, rpi):
        month = Date(1, 6, 2023)
        assert sample_provider.price_index_value(rpi, month) == 373.2
        assert sample_provider.price_index_value_sensitivity(rpi, month).size() == 0

    def test_forward_month(self, sample_provider, rpi):
        month = Date(1, 4, 2024)
        expected = 378.3 + (384.0 - 378.3) * 4.0 / 7.0
        assert sample_provider.price_index_value(rpi, month) == pytest.approx(expected)
        sens = sample_provider.price_index_value_sensitivity(rpi, month)
        assert isinstance(sens[0], PriceIndexValueSensitivity)
        assert sens[0].currency == GBP

    def test_missing_price_index_raises(self, standard_value_date, rpi):
        provider = ImmutableRatesProvider(standard_value_date)
        with pytest.raises(MissingMarketDataError):
            provider.price_index_value(rpi, Date(1, 4, 2024))


class TestImmutability:

    def test_maps_are_read_only(self, sample_provider, gbp_sonia_nodal, standard_value_date):
        curve = ZeroRateDiscountCurve(JPY, standard_value_date, gbp_sonia_nodal)
        with pytest.raises(TypeError):
            sample_provider.discount_curves[JPY] = curve
        with pytest.raises(TypeError):
            del sample_provider.index_curves[list(sample_provider.index_curves)[0]]

    def test_builder_does_not_change_source(self, sample_provider, sofr):
        builder = sample_provider.to_builder()
        builder._index_curves.pop(sofr)
        assert sofr in sample_provider.index_curves
        assert sofr not in builder.build().index_curves

    def test_curves(self, sample_provider):
        names = {n.name for n in sample_provider.curves()}
        assert names == {"GBP-SONIA", "USD-SOFR", "GBP-LIBOR-3M", "GB-RPI-CURVE"}
        assert sample_provider.find_curve(CurveName("EUR-ESTR")) is None

    def test_with_curve_replaces_every_holder(self, sample_provider, sonia, sofr, gbp_sonia_nodal):
        bumped = gbp_sonia_nodal.with_parameter(2, 0.0500)
        provider = sample_provider.with_curve(gbp_sonia_nodal.name, bumped)

        assert provider.discount_curve(GBP).curve is bumped
        assert provider.index_curve(sonia).curve is bumped
        assert provider.index_curve(sofr) is sample_provider.index_curve(sofr)
        assert sample_provider.discount_curve(GBP).curve is gbp_sonia_nodal
        assert provider.valuation_date == sample_provider.valuation_date

    def test_with_curve_price_index(self, sample_provider, rpi, rpi_nodal):
        bumped = rpi_nodal.with_parameter(0, 385.0)
        provider = sample_provider.with_curve(rpi_nodal.name, bumped)
        assert provider.price_index_values(rpi).curve is bumped
        assert provider.price_index_values(rpi).fixings is \
            sample_provider.price_index_values(rpi).fixings

    def test_with_unknown_curve_raises(self, sample_provider, gbp_sonia_nodal):
        with pytest.raises(MissingMarketDataError):
            sample_provider.with_curve(CurveName("EUR-ESTR"), gbp_sonia_nodal)


class _RecordingCalculator(ParameterSensitivityCalculator):

    def __init__(self):
        super().__init__()
        self.calls = 0

    def sensitivity(self, sensitivities, provider):
        self.calls += 1
        return super().sensitivity(sensitivities, provider)


class TestSensitivityCalculator:

    def test_each_provider_owns_a_calculator(self, standard_value_date):
        a = ImmutableRatesProvider(standard_value_date)
        b = ImmutableRatesProvider(standard_value_date)
        assert isinstance(a.sensitivity_calculator, ParameterSensitivityCalculator)
        assert a.sensitivity_calculator is not b.sensitivity_calculator

    def test_injected_calculator_is_used(self, sample_provider):
        calculator = _RecordingCalculator()
        provider = sample_provider.to_builder().sensitivity_calculator(calculator).build()
        assert provider.sensitivity_calculator is calculator

        point = provider.zero_rate_point_sensitivity(GBP, Date(15, 1, 2027))
        result = provider.parameter_sensitivity(PointSensitivities.of(point))
        assert calculator.calls == 1
        assert result.size() == 1

    def test_derived_providers_keep_the_calculator(self, sample_provider, gbp_sonia_nodal):
        bumped = sample_provider.with_curve(gbp_sonia_nodal.name,
                                            gbp_sonia_nodal.with_parameter(0, 0.06))
        assert bumped.sensitivity_calculator is sample_provider.sensitivity_calculator


class TestConstruction:

    def test_valuation_date_mismatch(self, standard_value_date, gbp_sonia_nodal):
        curve = ZeroRateDiscountCurve(GBP, Date(16, 1, 2024), gbp_sonia_nodal)
        with pytest.raises(LibError):
            ImmutableRatesProvider.builder(standard_value_date).discount_curve(GBP, curve).build()

    def test_discount_curve_currency_mismatch(self, standard_value_date, gbp_sonia_nodal):
        curve = ZeroRateDiscountCurve(GBP, standard_value_date, gbp_sonia_nodal)
        with pytest.raises(LibError):
            ImmutableRatesProvider(standard_value_date, discount_curves={USD: curve})

    def test_index_curve_key_type(self, standard_value_date, gbp_sonia_nodal, rpi):
        curve = ZeroRateDiscountCurve(GBP, standard_value_date, gbp_sonia_nodal)
        with pytest.raises(LibError):
            ImmutableRatesProvider(standard_value_date, index_curves={rpi: curve})

    def test_argument_types(self):
        with pytest.raises(LibError):
            ImmutableRatesProvider("2024-01-15")

    def test_time_series_lookup(self, sample_provider, sofr, gbp_libor_3m):
        assert sample_provider.find_time_series(sofr) is None
        with pytest.raises(MissingMarketDataError):
            sample_provider.time_series(sofr)
        assert sample_provider.time_series(gbp_libor_3m).get(Date(11, 1, 2024)) == 0.0532

    def test_empty_provider(self, standard_value_date):
        provider = ImmutableRatesProvider(standard_value_date)
        assert provider.curves() == {}
        assert len(provider.fx_matrix.currencies()) == 0

    def test_repr(self, sample_provider):
        text = repr(sample_provider)
        assert "ImmutableRatesProvider" in text
        assert "GBP-SONIA" in text
