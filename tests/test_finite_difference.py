"""
Analytic curve sensitivities against bump and revalue.

A small GBP portfolio touching every point sensitivity family is valued on
the multi-curve provider; the engine's parameter sensitivities must agree
with FiniteDifferenceSensitivityCalculator.
"""
import numpy as np
import pytest

from curvesens.utils.date import Date
from curvesens.utils.currency import CurrencyTypes
from curvesens.utils.error import LibError
from curvesens.market.curves.curve import CurveName
from curvesens.requests.results import Valuation
from curvesens.sensitivity.finite_difference import FiniteDifferenceSensitivityCalculator

from pricers import (FixedCashflow, IborCoupon, OvernightPeriodCoupon, FxResetCashflow,
                     InflationCashflow, portfolio_value, portfolio_point_sensitivities)

GBP = CurrencyTypes.GBP
USD = CurrencyTypes.USD

NOTIONAL = 1_000_000.0
# analytic and bumped vectors agree to about 1e-7 relative
TOLERANCE = 1e-7 * NOTIONAL


@pytest.fixture
def portfolio(sonia, gbp_libor_3m, gbp_usd_wm, rpi, standard_value_date):
    return [
        FixedCashflow(GBP, Date(15, 1, 2029), NOTIONAL),
        IborCoupon(gbp_libor_3m, Date(15, 10, 2024), Date(15, 1, 2025), NOTIONAL, 0.25),
        OvernightPeriodCoupon(sonia, standard_value_date, Date(15, 1, 2025),
                              Date(17, 1, 2025), NOTIONAL),
        FxResetCashflow(gbp_usd_wm, USD, Date(15, 7, 2025), Date(17, 7, 2025), NOTIONAL),
        InflationCashflow(rpi, Date(1, 3, 2026), 378.3, Date(15, 6, 2026), NOTIONAL),
    ]


class TestPortfolioSensitivities:

    def test_portfolio_is_in_one_currency(self, portfolio, sample_provider):
        value = portfolio_value(portfolio, sample_provider)
        assert value.currency == GBP
        assert value.amount > 0.0

    @pytest.mark.numerical
    def test_analytic_matches_finite_difference(self, portfolio, sample_provider):
        points = portfolio_point_sensitivities(portfolio, sample_provider)
        analytic = sample_provider.parameter_sensitivity(points)

        fd = FiniteDifferenceSensitivityCalculator(shift=1e-6).sensitivity(
            sample_provider, lambda p: portfolio_value(portfolio, p))

        assert analytic.equal_with_tolerance(fd, TOLERANCE)
        assert {k[0].name for k in fd.keys()} == \
            {"GBP-SONIA", "USD-SOFR", "GBP-LIBOR-3M", "GB-RPI-CURVE"}

    @pytest.mark.numerical
    @pytest.mark.parametrize("index", range(5))
    def test_each_trade(self, portfolio, sample_provider, index):
        trade = portfolio[index]
        analytic = sample_provider.parameter_sensitivity(
            trade.point_sensitivities(sample_provider))
        fd = FiniteDifferenceSensitivityCalculator().sensitivity(sample_provider, trade.value)
        assert analytic.equal_with_tolerance(fd, TOLERANCE)

    def test_fx_reset_touches_both_discount_curves(self, portfolio, sample_provider):
        trade = portfolio[3]
        analytic = sample_provider.parameter_sensitivity(
            trade.point_sensitivities(sample_provider))
        usd = analytic.get_sensitivity(CurveName("USD-SOFR"), GBP)
        assert np.any(usd.sensitivity != 0.0)

    def test_fixed_observations_have_no_curve_risk(self, sample_provider, gbp_libor_3m):
        trade = IborCoupon(gbp_libor_3m, Date(12, 1, 2024), Date(15, 4, 2024), NOTIONAL, 0.25)
        analytic = sample_provider.parameter_sensitivity(
            trade.point_sensitivities(sample_provider))
        # only discounting remains
        assert analytic.find_sensitivity(CurveName("GBP-LIBOR-3M"), GBP) is None
        assert analytic.find_sensitivity(CurveName("GBP-SONIA"), GBP) is not None


class TestFiniteDifferenceCalculator:

    def test_shift_must_be_positive(self):
        with pytest.raises(LibError):
            FiniteDifferenceSensitivityCalculator(shift=0.0)
        with pytest.raises(LibError):
            FiniteDifferenceSensitivityCalculator(shift=-1e-4)

    def test_defaults(self):
        calc = FiniteDifferenceSensitivityCalculator()
        assert calc.shift == pytest.approx(1e-6)
        assert calc.central

    def test_forward_difference(self, sample_provider):
        trade = FixedCashflow(GBP, Date(15, 1, 2029), 1.0)
        central = FiniteDifferenceSensitivityCalculator(shift=1e-6).sensitivity(
            sample_provider, trade.value)
        forward = FiniteDifferenceSensitivityCalculator(shift=1e-6, central=False).sensitivity(
            sample_provider, trade.value)
        assert central.equal_with_tolerance(forward, 1e-4)

    def test_value_function_must_return_valuation(self, sample_provider):
        with pytest.raises(LibError):
            FiniteDifferenceSensitivityCalculator().sensitivity(sample_provider, lambda p: 1.0)

    def test_unused_curves_are_zero(self, sample_provider):
        trade = FixedCashflow(USD, Date(15, 1, 2026), NOTIONAL)
        fd = FiniteDifferenceSensitivityCalculator().sensitivity(sample_provider, trade.value)
        gbp = fd.get_sensitivity(CurveName("GBP-SONIA"), USD)
        np.testing.assert_array_equal(gbp.sensitivity, np.zeros(6))
        assert fd.get_sensitivity(CurveName("USD-SOFR"), USD).parameter_labels == \
            ("0.25", "1", "2", "5", "10")

    def test_currency_follows_valuation(self, sample_provider):
        fd = FiniteDifferenceSensitivityCalculator().sensitivity(
            sample_provider, lambda p: Valuation(p.discount_factor(GBP, Date(15, 1, 2026)), USD))
        assert {k[1] for k in fd.keys()} == {USD}

    def test_bumped_currency_must_match_base(self, sample_provider):
        def value_fn(p):
            ccy = GBP if p is sample_provider else USD
            return Valuation(p.discount_factor(GBP, Date(15, 1, 2026)), ccy)

        with pytest.raises(LibError, match="USD"):
            FiniteDifferenceSensitivityCalculator().sensitivity(sample_provider, value_fn)
