"""
FX rates between currencies.

FxMatrix holds a set of quoted FX rates and answers the rate for any pair
that can be reached through them. Crosses are found by a shortest path
search over the quoted pairs (fewest conversions), and a currency can be
forced to route through another one, e.g. PLN via EUR.

Rates are quoted as 1 base = rate counter. The rate of a currency against
itself is 1.0; an unreachable pair raises MissingMarketDataError.

Example:
    >>> fx = FxMatrix({"EURUSD": 1.08, "GBPUSD": 1.27})
    >>> fx.fx_rate(CurrencyTypes.EUR, CurrencyTypes.GBP)
    0.8503937007874016
"""

import heapq
import itertools
import logging
from types import MappingProxyType
from typing import Dict, List, Optional, Tuple

from curvesens.utils.currency import CurrencyTypes, CurrencyPair
from curvesens.utils.error import LibError, MissingMarketDataError

logger = logging.getLogger(__name__)

###############################################################################


def _to_pair(pair) -> CurrencyPair:
    if isinstance(pair, CurrencyPair):
        return pair
    if isinstance(pair, str):
        return CurrencyPair.parse(pair)
    raise LibError(f"Cannot read a currency pair from {pair}")

###############################################################################


class FxMatrix:
    """ Immutable set of FX rates with cross rate routing. """

    def __init__(self,
                 fx_rates: Optional[Dict] = None,
                 overrides: Optional[Dict] = None):
        rates = {}
        graph: Dict[CurrencyTypes, Dict[CurrencyTypes, float]] = {}

        for key, rate in (fx_rates or {}).items():
            pair = _to_pair(key)
            rate = float(rate)
            if pair.is_identity():
                raise LibError(f"FX rate for {pair} must be between two currencies")
            if rate <= 0.0:
                raise LibError(f"FX rate for {pair} must be positive, got {rate}")
            rates[pair] = rate
            graph.setdefault(pair.base, {})[pair.counter] = rate
            graph.setdefault(pair.counter, {})[pair.base] = 1.0 / rate

        routes = {}
        for ccy, via in (overrides or {}).items():
            if not isinstance(ccy, CurrencyTypes) or not isinstance(via, CurrencyTypes):
                raise LibError("FX routing overrides map CurrencyTypes to CurrencyTypes")
            routes[ccy] = via

        self._fx_rates = MappingProxyType(rates)
        self._graph = MappingProxyType({k: MappingProxyType(v) for k, v in graph.items()})
        self._overrides = MappingProxyType(routes)

    @classmethod
    def empty(cls) -> "FxMatrix":
        return cls({})

    @property
    def fx_rates(self):
        return self._fx_rates

    def currencies(self):
        return set(self._graph.keys())

    def with_rate(self, pair, rate: float) -> "FxMatrix":
        rates = dict(self._fx_rates)
        pair = _to_pair(pair)
        rates.pop(pair.inverse(), None)
        rates[pair] = rate
        return FxMatrix(rates, dict(self._overrides))

    def with_override(self, ccy: CurrencyTypes, via: CurrencyTypes) -> "FxMatrix":
        overrides = dict(self._overrides)
        overrides[ccy] = via
        return FxMatrix(dict(self._fx_rates), overrides)

###############################################################################

    def _shortest_path(self,
                       src: CurrencyTypes,
                       tgt: CurrencyTypes) -> Tuple[Optional[float], List[CurrencyTypes]]:
        if src not in self._graph or tgt not in self._graph:
            return None, []

        visited = set()
        order = itertools.count()
        heap = [(0, next(order), src, 1.0, [])]  # hops, tie break, ccy, rate, path

        while heap:
            hops, _, current, rate, path = heapq.heappop(heap)
            if current in visited:
                continue
            visited.add(current)
            path = path + [current]

            if current == tgt:
                return rate, path

            for neighbor, step in self._graph.get(current, {}).items():
                if neighbor not in visited:
                    heapq.heappush(heap, (hops + 1, next(order), neighbor,
                                          rate * step, path))

        return None, []

    def fx_rate_with_path(self,
                          base: CurrencyTypes,
                          counter: CurrencyTypes) -> Tuple[float, List[CurrencyTypes]]:
        """ Rate for 1 base in counter and the currencies it was routed
        through. """
        if base == counter:
            return 1.0, [base]

        via = self._overrides.get(base)
        if via is not None and via != counter:
            r1, path1 = self._shortest_path(base, via)
            r2, path2 = self._shortest_path(via, counter)
            if r1 is None or r2 is None:
                rate, path = None, []
            else:
                rate, path = r1 * r2, path1 + path2[1:]
        else:
            rate, path = self._shortest_path(base, counter)

        if rate is None:
            raise MissingMarketDataError(f"No FX rate available for "
                                         f"{base.name}/{counter.name}")

        logger.debug("FX %s/%s routed via %s", base.name, counter.name,
                     [c.name for c in path])
        return rate, path

    def fx_rate(self,
                base: CurrencyTypes,
                counter: CurrencyTypes) -> float:
        return self.fx_rate_with_path(base, counter)[0]

    def fx_rate_for_pair(self, pair) -> float:
        pair = _to_pair(pair)
        return self.fx_rate(pair.base, pair.counter)

    def convert(self,
                amount: float,
                from_ccy: CurrencyTypes,
                to_ccy: CurrencyTypes) -> float:
        return amount * self.fx_rate(from_ccy, to_ccy)

###############################################################################

    def __eq__(self, other):
        if not isinstance(other, FxMatrix):
            return NotImplemented
        return dict(self._fx_rates) == dict(other._fx_rates) and \
            dict(self._overrides) == dict(other._overrides)

    __hash__ = None

    def __repr__(self):
        quotes = ", ".join(f"{p}={r}" for p, r in self._fx_rates.items())
        return f"FxMatrix({quotes})"

###############################################################################
