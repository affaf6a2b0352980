"""
Global type enumerations for curves, curve metadata and sensitivities.

Provides enumeration types used throughout the curvesens library for:
- Interpolation schemes applied to curve node values
- The meaning of curve x and y values
- The keys of the curve information map

Interpolation types:
- LINEAR: linear in the node values
- LOG_LINEAR: linear in the log of the node values (flat forwards when the
  node values are discount factors)
- NATURAL_CUBIC: natural cubic spline through the node values
- PCHIP: monotone piecewise cubic Hermite through the node values

All schemes extrapolate flat in the node values on both sides.

Example:
    >>> definition = CurveDefinition(
    ...     name=CurveName("GBP-SONIA"),
    ...     y_value_type=ValueTypes.ZERO_RATE,
    ...     x_values=[0.25, 1.0, 5.0],
    ...     interpolator=InterpTypes.LINEAR,
    ...     discount_currencies=(CurrencyTypes.GBP,)
    ... )
"""

from enum import Enum


class InterpTypes(Enum):
    LINEAR = 1
    LOG_LINEAR = 2
    NATURAL_CUBIC = 3
    PCHIP = 4

class ValueTypes(Enum):
    YEAR_FRACTION = 1
    MONTHS = 2
    ZERO_RATE = 3
    DISCOUNT_FACTOR = 4
    PRICE_INDEX = 5

class CurveInfoTypes(Enum):
    DAY_COUNT = 1
    JACOBIAN = 2
    PV_SENSITIVITY_TO_MARKET_QUOTE = 3
