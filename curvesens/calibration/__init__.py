"""
Calibration support: curve definitions, calibration Jacobians and
regeneration of a rates provider from a parameter vector.
"""

from .curve_definition import CurveDefinition, JacobianCalibrationMatrix
from .generator import RatesProviderGenerator, generate_provider

__all__ = ['CurveDefinition', 'JacobianCalibrationMatrix',
           'RatesProviderGenerator', 'generate_provider']
