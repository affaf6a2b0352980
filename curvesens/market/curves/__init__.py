"""
Curves package.

Provides:
- JAX interpolation of node values with parameter sensitivities
- Nodal curves with names and metadata
- Discount curves parameterised by zero rates or discount factors
- Price index values combining fixings and a forward curve
"""

from .interpolator_ad import InterpolatorAd
from .curve import CurveName, CurveMetadata, InterpolatedNodalCurve
from .discount_curve import DiscountCurve, ZeroRateDiscountCurve, DiscountFactorCurve
from .price_index_values import PriceIndexValues

__all__ = ['InterpolatorAd', 'CurveName', 'CurveMetadata',
           'InterpolatedNodalCurve', 'DiscountCurve', 'ZeroRateDiscountCurve',
           'DiscountFactorCurve', 'PriceIndexValues']
