"""
Nodal curves and their metadata.

Provides the curve abstraction the sensitivity engine projects onto:

- CurveName: unique identifier of a curve
- CurveMetadata: name, meaning of the x and y values, day count, node
  labels and a calibration information map
- InterpolatedNodalCurve: node values interpolated by one of the JAX
  schemes, with a unit parameter sensitivity at any point

The node values are the curve parameters: parameter i is node value i and
the unit parameter sensitivity at x is d y(x) / d y_i for every i. Curves
are immutable; the with_* methods return new curves.

Example:
    >>> curve = InterpolatedNodalCurve(
    ...     CurveMetadata(CurveName("GBP-SONIA"), ValueTypes.YEAR_FRACTION,
    ...                   ValueTypes.ZERO_RATE, DayCountTypes.ACT_365F),
    ...     x_values=[0.5, 1.0, 2.0, 5.0],
    ...     y_values=[0.040, 0.042, 0.045, 0.047],
    ...     interpolator=InterpTypes.LINEAR)
    >>> curve.y_value(1.5)
    0.0435
    >>> curve.y_value_parameter_sensitivity(1.5)
    array([0. , 0.5, 0.5, 0. ])
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Optional

import numpy as np

from curvesens.utils.error import LibError
from curvesens.utils.day_count import DayCountTypes
from curvesens.utils.global_types import InterpTypes, ValueTypes, CurveInfoTypes
from curvesens.utils.helpers import check_argument_types, label_to_string
from curvesens.market.curves.interpolator_ad import InterpolatorAd

###############################################################################


@dataclass(frozen=True, order=True)
class CurveName:
    """ Unique name of a curve. Two curves with the same name are the same
    curve for risk purposes. """
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or len(self.name) == 0:
            raise LibError("Curve name must be a non-empty string")

    def __str__(self):
        return self.name

###############################################################################


def _read_only(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr

###############################################################################


@dataclass(frozen=True)
class CurveMetadata:
    """ Descriptive data attached to a curve. The info map holds calibration
    annotations keyed by CurveInfoTypes. """
    curve_name: CurveName
    x_value_type: ValueTypes
    y_value_type: ValueTypes
    day_count: Optional[DayCountTypes] = None
    parameter_labels: Optional[tuple] = None
    info: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if not isinstance(self.curve_name, CurveName):
            raise LibError("Curve metadata needs a CurveName")
        if self.parameter_labels is not None:
            object.__setattr__(self, "parameter_labels",
                               tuple(str(lbl) for lbl in self.parameter_labels))
        if not isinstance(self.info, MappingProxyType):
            object.__setattr__(self, "info", MappingProxyType(dict(self.info)))
        for key in self.info:
            if not isinstance(key, CurveInfoTypes):
                raise LibError(f"Curve info keys must be CurveInfoTypes, got {key}")

    def find_info(self, key: CurveInfoTypes):
        """ The info value for the key or None. """
        return self.info.get(key)

    def with_info(self, key: CurveInfoTypes, value) -> "CurveMetadata":
        info = dict(self.info)
        info[key] = value
        return replace(self, info=MappingProxyType(info))

    def with_parameter_labels(self, labels) -> "CurveMetadata":
        return replace(self, parameter_labels=tuple(labels))

###############################################################################


class InterpolatedNodalCurve:
    """ A curve defined by node values at fixed x positions and an
    interpolation scheme. The node values are the curve parameters. """

    def __init__(self,
                 metadata: CurveMetadata,
                 x_values: (list, tuple, np.ndarray),
                 y_values: (list, tuple, np.ndarray),
                 interpolator: InterpTypes = InterpTypes.LINEAR):

        check_argument_types(self.__init__, locals())

        x = _read_only(x_values)
        y = _read_only(y_values)
        if x.ndim != 1 or x.shape != y.shape:
            raise LibError(f"Curve {metadata.curve_name}: x and y values must be "
                           f"1D arrays of the same size")
        if x.size < 2:
            raise LibError(f"Curve {metadata.curve_name} needs at least two nodes")
        if np.any(np.diff(x) <= 0.0):
            raise LibError(f"Curve {metadata.curve_name}: x values must be strictly increasing")

        if metadata.parameter_labels is None:
            metadata = metadata.with_parameter_labels([f"{v:g}" for v in x])
        elif len(metadata.parameter_labels) != x.size:
            raise LibError(f"Curve {metadata.curve_name}: {len(metadata.parameter_labels)} "
                           f"labels for {x.size} parameters")

        self._metadata = metadata
        self._x_values = x
        self._y_values = y
        self._interp_type = interpolator
        self._interpolator = InterpolatorAd(interpolator)
        self._interpolator.fit(x, y)

###############################################################################

    @property
    def name(self) -> CurveName:
        return self._metadata.curve_name

    @property
    def metadata(self) -> CurveMetadata:
        return self._metadata

    @property
    def x_values(self) -> np.ndarray:
        return self._x_values

    @property
    def y_values(self) -> np.ndarray:
        return self._y_values

    @property
    def interpolator(self) -> InterpTypes:
        return self._interp_type

    @property
    def parameter_count(self) -> int:
        return self._y_values.size

    def parameter(self, index: int) -> float:
        return float(self._y_values[index])

###############################################################################

    def y_value(self, x):
        return self._interpolator.interpolate(x)

    def first_derivative(self, x):
        return self._interpolator.first_derivative(x)

    def y_value_parameter_sensitivity(self, x) -> np.ndarray:
        """ Unit parameter sensitivity: d y(x) / d parameter_i. A vector of
        x values gives one row per x. """
        return self._interpolator.parameter_sensitivity(x)

###############################################################################

    def with_y_values(self, y_values) -> "InterpolatedNodalCurve":
        return InterpolatedNodalCurve(self._metadata, self._x_values,
                                      np.asarray(y_values, dtype=float),
                                      self._interp_type)

    def with_parameter(self, index: int, value: float) -> "InterpolatedNodalCurve":
        if index < 0 or index >= self.parameter_count:
            raise LibError(f"Parameter index {index} out of range for curve "
                           f"{self.name} with {self.parameter_count} parameters")
        y = self._y_values.copy()
        y[index] = value
        return self.with_y_values(y)

    def with_perturbation(self, shifts) -> "InterpolatedNodalCurve":
        shifts = np.asarray(shifts, dtype=float)
        if shifts.shape != self._y_values.shape:
            raise LibError("Perturbation must have one shift per parameter")
        return self.with_y_values(self._y_values + shifts)

    def with_metadata(self, metadata: CurveMetadata) -> "InterpolatedNodalCurve":
        return InterpolatedNodalCurve(metadata, self._x_values,
                                      self._y_values, self._interp_type)

###############################################################################

    def __repr__(self):
        s = label_to_string("OBJECT TYPE", type(self).__name__)
        s += label_to_string("CURVE NAME", self.name)
        s += label_to_string("INTERPOLATOR", self._interp_type)
        s += label_to_string("X VALUES", list(self._x_values), list_format=True)
        s += label_to_string("Y VALUES", list(self._y_values), list_format=True)
        return s

###############################################################################
