from .rates_provider import ImmutableRatesProvider, ImmutableRatesProviderBuilder

__all__ = ['ImmutableRatesProvider', 'ImmutableRatesProviderBuilder']
