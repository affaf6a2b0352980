from .fx_matrix import FxMatrix

__all__ = ['FxMatrix']
