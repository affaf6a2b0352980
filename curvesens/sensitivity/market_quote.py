"""
Market quote sensitivities.

Curves produced by calibration carry a JacobianCalibrationMatrix in their
metadata: d parameter / d market quote for all curves calibrated together.
MarketQuoteSensitivityCalculator chains a parameter sensitivity with that
matrix,

    dPV/dquote = dPV/dparam x dparam/dquote

and splits the row over the quotes of each curve listed in the Jacobian
order. Results for the same curve and currency are summed, so a
sensitivity to one curve can spread onto every curve it was calibrated
with.

Example:
    >>> param_sens = provider.parameter_sensitivity(point_sensitivities)
    >>> quote_sens = MarketQuoteSensitivityCalculator().sensitivity(param_sens, provider)
"""

from curvesens.utils.error import LibError, MissingMarketDataError
from curvesens.utils.global_types import CurveInfoTypes
from curvesens.sensitivity.parameter_sensitivity import (CurrencyParameterSensitivity,
                                                         CurrencyParameterSensitivities)

###############################################################################


class MarketQuoteSensitivityCalculator:
    """ Projects parameter sensitivities onto calibration market quotes. """

    def sensitivity(self,
                    parameter_sensitivities: CurrencyParameterSensitivities,
                    provider) -> CurrencyParameterSensitivities:
        result = []
        for sens in parameter_sensitivities:
            curve = provider.find_curve(sens.curve_name)
            if curve is None:
                raise MissingMarketDataError(f"No curve named {sens.curve_name} in the provider")

            jacobian = curve.metadata.find_info(CurveInfoTypes.JACOBIAN)
            if jacobian is None:
                raise LibError(f"Market quote sensitivity needs calibration Jacobian "
                               f"information on curve {sens.curve_name}")
            if jacobian.jacobian.shape[0] != sens.parameter_count:
                raise LibError(f"Jacobian of {sens.curve_name} has "
                               f"{jacobian.jacobian.shape[0]} rows for "
                               f"{sens.parameter_count} parameters")

            quote_sens = sens.sensitivity @ jacobian.jacobian
            for name, piece in jacobian.split(quote_sens):
                result.append(CurrencyParameterSensitivity(
                    name, sens.currency, piece, _labels(provider, name, piece.size)))

        return CurrencyParameterSensitivities(result)

###############################################################################


def _labels(provider, name, count):
    curve = provider.find_curve(name)
    if curve is None or curve.parameter_count != count:
        return None
    return curve.metadata.parameter_labels

###############################################################################
