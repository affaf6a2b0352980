"""
curvesens: curve sensitivities for rates, FX and inflation pricing.

Subpackages:
- utils: dates, day counts, currencies, errors and helpers
- market: indices, fixings, curves and FX rates
- sensitivity: point and parameter sensitivities and their projection
- provider: the immutable rates provider
- calibration: curve definitions and provider regeneration
- requests: valuation and risk ladder results
"""

__version__ = "0.1.0"
