"""Shared numeric constants used across the curvesens package."""

gDaysInYear = 365.0  #: Standard number of days in a year
g_small = 1e-12       #: Small epsilon value for numerical checks

EFFECTIVE_ZERO = 1e-10  #: Year fraction treated as zero by the curves
DEFAULT_FD_SHIFT = 1e-6  #: Parameter bump used by finite difference risk
