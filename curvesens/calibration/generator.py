"""
Regeneration of a rates provider from a calibration parameter vector.

A root finder iterating on curve node values needs a complete provider for
every trial vector. RatesProviderGenerator holds a base provider and an
ordered list of CurveDefinitions; generate() slices the flat vector by the
definitions' parameter counts, builds each curve and places it in every
discount, forward and price index entry the definition names. Entries not
touched by any definition keep the base provider's objects. The base is never
modified.

Example:
    >>> generator = RatesProviderGenerator(base_provider, [sonia_def, rpi_def])
    >>> provider = generator.generate(np.concatenate([sonia_nodes, rpi_nodes]))
    >>> provider.discount_factor(CurrencyTypes.GBP, Date(15, 6, 2030))
"""

import logging
from typing import Dict, List, Optional

import numpy as np

from curvesens.utils.error import LibError, MissingMarketDataError, ParameterCountError
from curvesens.utils.global_types import ValueTypes
from curvesens.market.curves.discount_curve import ZeroRateDiscountCurve, DiscountFactorCurve
from curvesens.market.curves.price_index_values import PriceIndexValues
from curvesens.calibration.curve_definition import CurveDefinition

logger = logging.getLogger(__name__)

_DISCOUNT_CURVE_TYPES = {ValueTypes.ZERO_RATE: ZeroRateDiscountCurve,
                         ValueTypes.DISCOUNT_FACTOR: DiscountFactorCurve}

###############################################################################


class RatesProviderGenerator:
    """ Builds providers from parameter vectors for a fixed set of curve
    definitions over a base provider. """

    def __init__(self, base, definitions: List[CurveDefinition]):
        definitions = tuple(definitions)
        names = [d.name for d in definitions]
        duplicates = sorted({n.name for n in names if names.count(n) > 1})
        if duplicates:
            raise LibError(f"Curve definitions must have unique names: {duplicates}")

        for d in definitions:
            if not isinstance(d, CurveDefinition):
                raise LibError(f"Expected CurveDefinition, got {type(d).__name__}")
            is_price = d.y_value_type == ValueTypes.PRICE_INDEX
            if is_price and (d.discount_currencies or d.forward_indices):
                raise LibError(f"Price index curve {d.name} can only be used for price indices")
            if not is_price and d.price_indices:
                raise LibError(f"Curve {d.name} of {d.y_value_type} cannot "
                               f"forward price indices")
            if not (d.discount_currencies or d.forward_indices or d.price_indices):
                raise LibError(f"Curve {d.name} is not used by any market data entry")

        self._base = base
        self._definitions = definitions
        self._parameter_count = sum(d.parameter_count for d in definitions)

    @property
    def base(self):
        return self._base

    @property
    def definitions(self):
        return self._definitions

    @property
    def parameter_count(self) -> int:
        return self._parameter_count

###############################################################################

    def generate(self,
                 parameters,
                 jacobians: Optional[Dict] = None,
                 sensitivities_to_market_quote: Optional[Dict] = None):
        """ New provider with every defined curve built from its slice of
        parameters. jacobians and sensitivities_to_market_quote are keyed by
        CurveName; names without an entry get nothing attached. """
        parameters = np.asarray(parameters, dtype=float).ravel()
        if parameters.size != self._parameter_count:
            raise ParameterCountError(f"Definitions need {self._parameter_count} "
                                      f"parameters, got {parameters.size}")

        jacobians = jacobians or {}
        sensitivities_to_market_quote = sensitivities_to_market_quote or {}

        builder = self._base.to_builder()
        valuation_date = self._base.valuation_date
        offset = 0

        for definition in self._definitions:
            count = definition.parameter_count
            curve = definition.build_curve(parameters[offset:offset + count],
                                           jacobians.get(definition.name),
                                           sensitivities_to_market_quote.get(definition.name))
            offset += count

            if definition.y_value_type == ValueTypes.PRICE_INDEX:
                for index in definition.price_indices:
                    fixings = self._base.find_time_series(index)
                    if fixings is None:
                        raise MissingMarketDataError(f"Price index curve {definition.name} "
                                                     f"needs a fixing series for {index}")
                    previous = self._base.price_index_values_map.get(index)
                    seasonality = previous.seasonality if previous is not None else None
                    builder.price_index_values(
                        index, PriceIndexValues(index, valuation_date, curve,
                                                fixings, seasonality))
                continue

            curve_type = _DISCOUNT_CURVE_TYPES[definition.y_value_type]
            for ccy in definition.discount_currencies:
                builder.discount_curve(ccy, curve_type(ccy, valuation_date, curve))
            for index in definition.forward_indices:
                builder.index_curve(index, curve_type(index.currency, valuation_date, curve))

        logger.debug("Generated provider on %s from %d curves and %d parameters",
                     valuation_date, len(self._definitions), parameters.size)
        return builder.build()

###############################################################################


def generate_provider(base,
                      definitions: List[CurveDefinition],
                      parameters,
                      jacobians: Optional[Dict] = None,
                      sensitivities_to_market_quote: Optional[Dict] = None):
    """ One-shot form of RatesProviderGenerator.generate. """
    generator = RatesProviderGenerator(base, definitions)
    return generator.generate(parameters, jacobians, sensitivities_to_market_quote)

###############################################################################
