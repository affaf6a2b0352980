"""
Finite difference parameter sensitivities.

Bumps every parameter of every curve in a provider, revalues, and returns
the differences as CurrencyParameterSensitivities keyed like the analytic
engine's output, so the two can be compared with equal_with_tolerance.
Central differences are used by default:

    dV/dp_i ~ (V(p_i + h) - V(p_i - h)) / 2h

value_fn takes a provider and returns a Valuation; the result is in the
Valuation's currency.

Example:
    >>> fd = FiniteDifferenceSensitivityCalculator(shift=1e-6)
    >>> fd_sens = fd.sensitivity(provider, lambda p: pricer.value(trade, p))
    >>> fd_sens.equal_with_tolerance(analytic_sens, 1e-6)
"""

import logging

import numpy as np

from curvesens.utils.error import LibError
from curvesens.utils.global_vars import DEFAULT_FD_SHIFT
from curvesens.requests.results import Valuation
from curvesens.sensitivity.parameter_sensitivity import (CurrencyParameterSensitivity,
                                                         CurrencyParameterSensitivities)

logger = logging.getLogger(__name__)

###############################################################################


class FiniteDifferenceSensitivityCalculator:
    """ Bump and revalue sensitivity to every curve parameter. """

    def __init__(self, shift: float = DEFAULT_FD_SHIFT, central: bool = True):
        if shift <= 0.0:
            raise LibError(f"Finite difference shift must be positive, got {shift}")
        self._shift = shift
        self._central = central

    @property
    def shift(self) -> float:
        return self._shift

    @property
    def central(self) -> bool:
        return self._central

    def sensitivity(self, provider, value_fn) -> CurrencyParameterSensitivities:
        base = _as_valuation(value_fn(provider))
        result = []
        num_values = 1

        for name, curve in provider.curves().items():
            sens = np.zeros(curve.parameter_count)
            for i in range(curve.parameter_count):
                p = curve.parameter(i)
                up = self._value(provider, value_fn, name,
                                 curve.with_parameter(i, p + self._shift), base)
                if self._central:
                    down = self._value(provider, value_fn, name,
                                       curve.with_parameter(i, p - self._shift), base)
                    sens[i] = (up - down) / (2.0 * self._shift)
                    num_values += 2
                else:
                    sens[i] = (up - base.amount) / self._shift
                    num_values += 1
            result.append(CurrencyParameterSensitivity(name, base.currency, sens,
                                                       curve.metadata.parameter_labels))

        logger.debug("Finite difference sensitivity over %d curves with %d valuations",
                     len(result), num_values)
        return CurrencyParameterSensitivities(result)

    def _value(self, provider, value_fn, name, bumped, base: Valuation) -> float:
        value = _as_valuation(value_fn(provider.with_curve(name, bumped)))
        if value.currency is not base.currency:
            raise LibError(f"Bumped value of {name} is in {value.currency.name}, "
                           f"base value is in {base.currency.name}")
        return value.amount

###############################################################################


def _as_valuation(value) -> Valuation:
    if not isinstance(value, Valuation):
        raise LibError(f"value_fn must return a Valuation, got {type(value).__name__}")
    return value

###############################################################################
