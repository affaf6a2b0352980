"""
Sensitivity package.

Provides:
- Point sensitivities to zero rates, index forwards, FX index rates and
  price index values
- Parameter sensitivities keyed by curve and currency
- Resolution of FX index sensitivities and projection onto curve parameters
- Market quote and finite difference sensitivities
"""

from .point_sensitivity import (PointSensitivity, PointSensitivityVisitor,
                                ZeroRateSensitivity, IborRateSensitivity,
                                OvernightRateSensitivity, FxIndexSensitivity,
                                PriceIndexValueSensitivity, PointSensitivities)
from .parameter_sensitivity import (CurrencyParameterSensitivity,
                                    CurrencyParameterSensitivities)
from .resolver import SensitivityResolver
from .aggregator import ParameterSensitivityAggregator, ParameterSensitivityCalculator
from .market_quote import MarketQuoteSensitivityCalculator
from .finite_difference import FiniteDifferenceSensitivityCalculator

__all__ = ['PointSensitivity', 'PointSensitivityVisitor', 'ZeroRateSensitivity',
           'IborRateSensitivity', 'OvernightRateSensitivity', 'FxIndexSensitivity',
           'PriceIndexValueSensitivity', 'PointSensitivities',
           'CurrencyParameterSensitivity', 'CurrencyParameterSensitivities',
           'SensitivityResolver', 'ParameterSensitivityAggregator',
           'ParameterSensitivityCalculator', 'MarketQuoteSensitivityCalculator',
           'FiniteDifferenceSensitivityCalculator']
