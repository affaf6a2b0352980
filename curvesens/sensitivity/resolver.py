"""
Resolution of FX index sensitivities into discount curve sensitivities.

The forward FX rate of an observed pair (B, C) fixing on F is

    fx(B, C) * DF_B(M) / DF_C(M),   M = index.maturity_from_fixing(F)

so a sensitivity s to that rate is exactly a pair of discount factor
sensitivities:

    dRate/dDF_B(M) = fx(B, C) / DF_C(M)
    dRate/dDF_C(M) = -fx(B, C) * DF_B(M) / DF_C(M)^2

Each is chained with dDF/dz of its own curve at M and emitted as a
ZeroRateSensitivity in the settlement currency of the original. Every other
point sensitivity passes through unchanged.
"""

import logging

from curvesens.sensitivity.point_sensitivity import (PointSensitivities,
                                                     PointSensitivityVisitor,
                                                     FxIndexSensitivity)

logger = logging.getLogger(__name__)

###############################################################################


class _FxIndexResolvingVisitor(PointSensitivityVisitor):
    """ Maps each point sensitivity to the tuple that replaces it. """

    def __init__(self, provider):
        self._provider = provider

    def visit_zero_rate(self, sens):
        return (sens,)

    def visit_ibor_rate(self, sens):
        return (sens,)

    def visit_overnight_rate(self, sens):
        return (sens,)

    def visit_price_index_value(self, sens):
        return (sens,)

    def visit_fx_index(self, sens: FxIndexSensitivity):
        pair = sens.observed_pair()
        base, counter = pair.base, pair.counter
        maturity_dt = sens.index.maturity_from_fixing(sens.fixing_date)

        provider = self._provider
        df_base = provider.discount_factor(base, maturity_dt)
        df_counter = provider.discount_factor(counter, maturity_dt)
        fx_spot = provider.fx_rate(base, counter)

        weight_base = sens.sensitivity * fx_spot / df_counter
        weight_counter = -sens.sensitivity * fx_spot * df_base / (df_counter * df_counter)

        zero_base = provider.zero_rate_point_sensitivity(base, maturity_dt, sens.currency)
        zero_counter = provider.zero_rate_point_sensitivity(counter, maturity_dt, sens.currency)
        return (zero_base.multiplied_by(weight_base),
                zero_counter.multiplied_by(weight_counter))

###############################################################################


class SensitivityResolver:
    """ Rewrites FX index point sensitivities as zero rate sensitivities on
    the discount curves of the two currencies of the observed pair. """

    def resolve(self, sensitivities, provider) -> PointSensitivities:
        visitor = _FxIndexResolvingVisitor(provider)
        resolved = []
        num_in = 0
        for sens in sensitivities:
            num_in += 1
            resolved.extend(sens.accept(visitor))

        logger.debug("Resolved %d point sensitivities into %d",
                     num_in, len(resolved))
        return PointSensitivities(resolved)

###############################################################################
