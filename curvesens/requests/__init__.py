from .results import Valuation, Ladder

__all__ = ['Valuation', 'Ladder']
