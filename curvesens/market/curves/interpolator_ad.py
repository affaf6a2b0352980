"""
JAX interpolation of curve node values.

Every scheme is written as a pure function of (t, x, y) so that JAX can
differentiate it both with respect to the evaluation point t (curve slope)
and with respect to the node values y (unit parameter sensitivity, via
forward-mode jacfwd). The compiled kernels are module level and keyed on the
interpolation type, so curves of the same shape share one compilation.

All schemes extrapolate flat in the node values outside [x[0], x[-1]].

Example:
    >>> interp = InterpolatorAd(InterpTypes.PCHIP)
    >>> interp.fit([0.5, 1.0, 2.0, 5.0], [0.040, 0.042, 0.045, 0.047])
    >>> interp.interpolate(1.5)
    >>> interp.parameter_sensitivity(1.5)   # d value / d y_i
"""

import jax
import jax.numpy as jnp
import numpy as np
from functools import partial

from curvesens.utils.error import LibError
from curvesens.utils.global_types import InterpTypes

jax.config.update("jax_enable_x64", True)

###############################################################################


def _safe_divide(num, den, cond):
    # Keeps the unselected jnp.where branch finite so derivatives stay clean
    return num / jnp.where(cond, den, 1.0)


def _compute_pchip_slopes(x, y):
    # Monotonic cubic Hermite (PCHIP) slopes with three point end conditions
    h = x[1:] - x[:-1]
    m = (y[1:] - y[:-1]) / h
    d = jnp.zeros_like(y)

    def _compute_di(i, val):
        cond = (m[i-1] * m[i]) > 0
        w1 = 2 * h[i] + h[i-1]
        w2 = h[i] + 2 * h[i-1]
        denom = _safe_divide(w1, m[i-1], cond) + _safe_divide(w2, m[i], cond)
        di = jnp.where(cond, _safe_divide(w1 + w2, denom, cond), 0.0)
        return val.at[i].set(di)

    d = jax.lax.fori_loop(1, x.size-1, _compute_di, d)
    d = d.at[0].set(_pchip_edge(h[0], h[1], m[0], m[1]))
    d = d.at[-1].set(_pchip_edge(h[-1], h[-2], m[-1], m[-2]))
    return d


def _pchip_edge(h0, h1, m0, m1):
    d = ((2 * h0 + h1) * m0 - h0 * m1) / (h0 + h1)
    d = jnp.where(jnp.sign(d) != jnp.sign(m0), 0.0, d)
    overshoot = (jnp.sign(m0) != jnp.sign(m1)) & (jnp.abs(d) > 3.0 * jnp.abs(m0))
    return jnp.where(overshoot, 3.0 * m0, d)


def _pchip_eval(t, x, y, d):
    idx = jnp.clip(jnp.searchsorted(x, t) - 1, 0, x.size-2)
    x0 = x[idx]; x1 = x[idx+1]
    y0 = y[idx]; y1 = y[idx+1]
    d0 = d[idx]; d1 = d[idx+1]
    h = x1 - x0
    s = (t - x0) / h
    h00 = 2*s**3 - 3*s**2 + 1
    h10 = s**3 - 2*s**2 + s
    h01 = -2*s**3 + 3*s**2
    h11 = s**3 - s**2
    return h00*y0 + h10*h*d0 + h01*y1 + h11*h*d1

###############################################################################


def _natural_cubic_second_derivatives(x, y):
    """ Second derivatives at the nodes of the natural cubic spline, zero at
    both ends, from the tridiagonal system on the interior nodes. """
    n = x.size
    if n < 3:
        return jnp.zeros_like(y)

    h = x[1:] - x[:-1]
    m = (y[1:] - y[:-1]) / h
    rhs = 6.0 * (m[1:] - m[:-1])

    diag = 2.0 * (h[:-1] + h[1:])
    off = h[1:-1]
    a = jnp.diag(diag)
    if n > 3:
        a = a + jnp.diag(off, 1) + jnp.diag(off, -1)

    interior = jnp.linalg.solve(a, rhs)
    return jnp.concatenate([jnp.zeros(1), interior, jnp.zeros(1)])


def _cubic_eval(t, x, y, m2):
    idx = jnp.clip(jnp.searchsorted(x, t) - 1, 0, x.size-2)
    x0 = x[idx]; x1 = x[idx+1]
    y0 = y[idx]; y1 = y[idx+1]
    h = x1 - x0
    a = (x1 - t) / h
    b = (t - x0) / h
    return a*y0 + b*y1 + ((a**3 - a)*m2[idx] + (b**3 - b)*m2[idx+1]) * h*h / 6.0

###############################################################################


def _prepare(interp_type, x, y):
    """ Node-level quantities that do not depend on the evaluation point. """
    if interp_type == InterpTypes.PCHIP and x.size > 2:
        return _compute_pchip_slopes(x, y)
    elif interp_type == InterpTypes.NATURAL_CUBIC:
        return _natural_cubic_second_derivatives(x, y)
    elif interp_type == InterpTypes.LOG_LINEAR:
        return jnp.log(y)
    return y


def _eval_scalar(interp_type, t, x, y, aux):
    if interp_type == InterpTypes.LINEAR:
        return jnp.interp(t, x, y)
    elif interp_type == InterpTypes.LOG_LINEAR:
        return jnp.exp(jnp.interp(t, x, aux))
    elif interp_type == InterpTypes.NATURAL_CUBIC:
        tc = jnp.clip(t, x[0], x[-1])
        return _cubic_eval(tc, x, y, aux)
    elif interp_type == InterpTypes.PCHIP:
        if x.size == 2:
            return jnp.interp(t, x, y)
        tc = jnp.clip(t, x[0], x[-1])
        return _pchip_eval(tc, x, y, aux)
    else:
        raise LibError(f"Invalid interpolation scheme {interp_type}")


def _curve_values(interp_type, t, x, y):
    aux = _prepare(interp_type, x, y)
    return jax.vmap(lambda tv: _eval_scalar(interp_type, tv, x, y, aux))(t)

###############################################################################


@partial(jax.jit, static_argnums=(0,))
def _values(interp_type, t, x, y):
    return _curve_values(interp_type, t, x, y)


@partial(jax.jit, static_argnums=(0,))
def _parameter_jacobian(interp_type, t, x, y):
    # rows are evaluation points, columns are node values
    return jax.jacfwd(lambda yy: _curve_values(interp_type, t, x, yy))(y)


@partial(jax.jit, static_argnums=(0,))
def _first_derivative(interp_type, t, x, y):
    aux = _prepare(interp_type, x, y)
    slope = jax.grad(lambda tv: _eval_scalar(interp_type, tv, x, y, aux))
    return jax.vmap(slope)(t)

###############################################################################


class InterpolatorAd:
    """ Interpolator over fixed nodes whose values are differentiable
    inputs. """

    def __init__(self, interpolator_type: InterpTypes):
        if not isinstance(interpolator_type, InterpTypes):
            raise LibError(f"Unknown interpolation type {interpolator_type}")
        self._interp_type = interpolator_type
        self._times = None
        self._values = None

    @property
    def interp_type(self):
        return self._interp_type

    def fit(self, times, values):
        x = jnp.asarray(times, dtype=jnp.float64)
        y = jnp.asarray(values, dtype=jnp.float64)
        if x.ndim != 1 or x.shape != y.shape:
            raise LibError("Interpolation nodes and values must be 1D and the same size")
        if x.size < 2:
            raise LibError("Interpolation needs at least two nodes")
        if bool(jnp.any(jnp.diff(x) <= 0.0)):
            raise LibError("Interpolation nodes must be strictly increasing")
        if self._interp_type == InterpTypes.LOG_LINEAR and bool(jnp.any(y <= 0.0)):
            raise LibError("Log-linear interpolation needs positive node values")
        self._times = x
        self._values = y

    def _check_fitted(self):
        if self._values is None:
            raise LibError("Interpolator has not been fitted.")

    def interpolate(self, t):
        """ Value at t. A scalar t gives a float, a vector a numpy array. """
        self._check_fitted()
        tt = jnp.atleast_1d(jnp.asarray(t, dtype=jnp.float64))
        out = np.asarray(_values(self._interp_type, tt, self._times, self._values))
        return float(out[0]) if np.ndim(t) == 0 else out

    def first_derivative(self, t):
        """ Slope of the interpolated function at t. """
        self._check_fitted()
        tt = jnp.atleast_1d(jnp.asarray(t, dtype=jnp.float64))
        out = np.asarray(_first_derivative(self._interp_type, tt, self._times, self._values))
        return float(out[0]) if np.ndim(t) == 0 else out

    def parameter_sensitivity(self, t):
        """ Derivative of the value at t with respect to each node value.
        A scalar t gives a vector of node count length, a vector of times a
        matrix with one row per time. """
        self._check_fitted()
        tt = jnp.atleast_1d(jnp.asarray(t, dtype=jnp.float64))
        out = np.asarray(_parameter_jacobian(self._interp_type, tt, self._times, self._values))
        return out[0] if np.ndim(t) == 0 else out

###############################################################################
