from curvesens.utils.currency import CurrencyTypes, CurrencyPair
from curvesens.utils.day_count import DayCountTypes
from curvesens.utils.error import LibError
from curvesens.market.indices.rate_index import (IborIndex,
                                                 OvernightIndex,
                                                 FxIndex,
                                                 PriceIndex)


INDEX_CONVENTIONS = {
    "GBP-LIBOR-3M": {
        "type": "IBOR",
        "currency": CurrencyTypes.GBP,
        "conventions": {
            "tenor": "3M",
            "day_count": DayCountTypes.ACT_365F,
            "fixing_offset_days": 0
        }
    },

    "USD-LIBOR-3M": {
        "type": "IBOR",
        "currency": CurrencyTypes.USD,
        "conventions": {
            "tenor": "3M",
            "day_count": DayCountTypes.ACT_360,
            "fixing_offset_days": 2
        }
    },

    "EUR-EURIBOR-6M": {
        "type": "IBOR",
        "currency": CurrencyTypes.EUR,
        "conventions": {
            "tenor": "6M",
            "day_count": DayCountTypes.ACT_360,
            "fixing_offset_days": 2
        }
    },

    "GBP-SONIA": {
        "type": "OVERNIGHT",
        "currency": CurrencyTypes.GBP,
        "conventions": {
            "day_count": DayCountTypes.ACT_365F,
            "publication_offset_days": 1,
            "effective_offset_days": 0
        }
    },

    "USD-SOFR": {
        "type": "OVERNIGHT",
        "currency": CurrencyTypes.USD,
        "conventions": {
            "day_count": DayCountTypes.ACT_360,
            "publication_offset_days": 1,
            "effective_offset_days": 0
        }
    },

    "EUR-ESTR": {
        "type": "OVERNIGHT",
        "currency": CurrencyTypes.EUR,
        "conventions": {
            "day_count": DayCountTypes.ACT_360,
            "publication_offset_days": 1,
            "effective_offset_days": 0
        }
    },

    "EUR/USD-ECB": {
        "type": "FX",
        "currency_pair": "EUR/USD",
        "conventions": {
            "maturity_offset_days": 2
        }
    },

    "GBP/USD-WM": {
        "type": "FX",
        "currency_pair": "GBP/USD",
        "conventions": {
            "maturity_offset_days": 2
        }
    },

    "GB-RPI": {
        "type": "PRICE",
        "currency": CurrencyTypes.GBP,
        "conventions": {}
    },

    "US-CPI-U": {
        "type": "PRICE",
        "currency": CurrencyTypes.USD,
        "conventions": {}
    },

    "EU-HICP": {
        "type": "PRICE",
        "currency": CurrencyTypes.EUR,
        "conventions": {}
    },
}


def index_of(name: str):
    """ Build the standard index registered under the name. """
    if name not in INDEX_CONVENTIONS:
        raise LibError(f"No conventions registered for index {name}")

    entry = INDEX_CONVENTIONS[name]
    conventions = entry["conventions"]
    index_type = entry["type"]

    if index_type == "IBOR":
        return IborIndex(name, entry["currency"], **conventions)
    elif index_type == "OVERNIGHT":
        return OvernightIndex(name, entry["currency"], **conventions)
    elif index_type == "FX":
        return FxIndex(name, CurrencyPair.parse(entry["currency_pair"]),
                       **conventions)
    elif index_type == "PRICE":
        return PriceIndex(name, entry["currency"])

    raise LibError(f"Unknown index type {index_type} for {name}")
