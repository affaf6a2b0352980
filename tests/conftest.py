"""
Pytest configuration file for curvesens library tests
Provides common fixtures and test configuration
"""
import os
import sys
import pytest

# Add the curvesens package to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

# Import key modules for fixtures
from curvesens.utils.date import Date
from curvesens.utils.currency import CurrencyTypes
from curvesens.utils.day_count import DayCountTypes
from curvesens.utils.global_types import InterpTypes
from curvesens.market.indices.index_constants import index_of
from curvesens.market.indices.time_series import DateSeries
from curvesens.market.curves.discount_curve import ZeroRateDiscountCurve, DiscountFactorCurve
from curvesens.market.curves.price_index_values import PriceIndexValues
from curvesens.market.fx.fx_matrix import FxMatrix
from curvesens.provider.rates_provider import ImmutableRatesProvider

from market_builders import zero_rate_curve, discount_factor_curve, price_curve


@pytest.fixture(scope="session")
def standard_value_date():
    """Standard valuation date for tests (a Monday)"""
    return Date(15, 1, 2024)


@pytest.fixture(scope="session")
def sonia():
    return index_of("GBP-SONIA")


@pytest.fixture(scope="session")
def sofr():
    return index_of("USD-SOFR")


@pytest.fixture(scope="session")
def gbp_libor_3m():
    return index_of("GBP-LIBOR-3M")


@pytest.fixture(scope="session")
def gbp_usd_wm():
    return index_of("GBP/USD-WM")


@pytest.fixture(scope="session")
def rpi():
    return index_of("GB-RPI")


@pytest.fixture(scope="session")
def gbp_sonia_nodal():
    """GBP SONIA zero rates, also used for GBP discounting"""
    return zero_rate_curve("GBP-SONIA",
                           [0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
                           [0.0520, 0.0515, 0.0495, 0.0460, 0.0420, 0.0410],
                           labels=["3M", "6M", "1Y", "2Y", "5Y", "10Y"])


@pytest.fixture(scope="session")
def gbp_libor_nodal():
    """GBP LIBOR 3M forwarding curve of discount factors"""
    return discount_factor_curve("GBP-LIBOR-3M",
                                 [0.5, 1.0, 2.0, 5.0, 10.0],
                                 [0.9740, 0.9490, 0.9040, 0.7990, 0.6490],
                                 labels=["6M", "1Y", "2Y", "5Y", "10Y"])


@pytest.fixture(scope="session")
def usd_sofr_nodal():
    """USD SOFR zero rates interpolated with PCHIP"""
    return zero_rate_curve("USD-SOFR",
                           [0.25, 1.0, 2.0, 5.0, 10.0],
                           [0.0535, 0.0510, 0.0470, 0.0420, 0.0415],
                           interp=InterpTypes.PCHIP,
                           day_count=DayCountTypes.ACT_360)


@pytest.fixture(scope="session")
def rpi_nodal():
    """RPI forward levels against months since the valuation month"""
    return price_curve("GB-RPI-CURVE", [6.0, 12.0, 24.0, 60.0],
                       [384.0, 391.0, 402.0, 438.0])


@pytest.fixture(scope="session")
def rpi_fixings():
    """Monthly RPI fixings up to December 2023"""
    months = [Date(1, m, 2023) for m in range(1, 13)]
    levels = [360.4, 362.7, 365.1, 368.3, 371.1, 373.2,
              374.0, 375.5, 376.5, 378.0, 377.7, 378.3]
    return DateSeries.of(months, levels)


@pytest.fixture(scope="session")
def sample_fx_matrix():
    return FxMatrix({"GBPUSD": 1.27, "EURUSD": 1.09})


@pytest.fixture(scope="session")
def sample_provider(standard_value_date, sonia, sofr, gbp_libor_3m, gbp_usd_wm, rpi,
                    gbp_sonia_nodal, gbp_libor_nodal, usd_sofr_nodal, rpi_nodal,
                    rpi_fixings, sample_fx_matrix):
    """Multi-curve GBP/USD provider with RPI and some historical fixings"""
    value_dt = standard_value_date
    gbp_curve = ZeroRateDiscountCurve(CurrencyTypes.GBP, value_dt, gbp_sonia_nodal)
    usd_curve = ZeroRateDiscountCurve(CurrencyTypes.USD, value_dt, usd_sofr_nodal)
    libor_curve = DiscountFactorCurve(CurrencyTypes.GBP, value_dt, gbp_libor_nodal)

    libor_fixings = DateSeries({Date(11, 1, 2024): 0.0532, Date(12, 1, 2024): 0.0531})
    sonia_fixings = DateSeries({Date(11, 1, 2024): 0.0519, Date(12, 1, 2024): 0.0519})
    wm_fixings = DateSeries({Date(12, 1, 2024): 1.2750})

    return (ImmutableRatesProvider.builder(value_dt)
            .fx_matrix(sample_fx_matrix)
            .discount_curve(CurrencyTypes.GBP, gbp_curve)
            .discount_curve(CurrencyTypes.USD, usd_curve)
            .index_curve(sonia, gbp_curve)
            .index_curve(sofr, usd_curve)
            .index_curve(gbp_libor_3m, libor_curve)
            .price_index_values(rpi, PriceIndexValues(rpi, value_dt, rpi_nodal, rpi_fixings))
            .time_series(gbp_libor_3m, libor_fixings)
            .time_series(sonia, sonia_fixings)
            .time_series(gbp_usd_wm, wm_fixings)
            .time_series(rpi, rpi_fixings)
            .build())


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom test markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow (may take longer to run)")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "numerical: marks tests with numerical precision requirements")


# Pytest collection hooks
def pytest_collection_modifyitems(config, items):
    """Modify test collection to add default markers"""
    for item in items:
        # Add 'unit' marker to all tests by default
        if not any(item.iter_markers()):
            item.add_marker(pytest.mark.unit)

        # Mark integration tests
        if "integration" in item.name or item.fspath.basename.startswith("test_integration"):
            item.add_marker(pytest.mark.integration)


# Utility functions for tests
@pytest.fixture
def tolerance():
    """Standard numerical tolerance for floating point comparisons"""
    return 1e-6


@pytest.fixture
def strict_tolerance():
    """Strict numerical tolerance for high precision tests"""
    return 1e-10
