"""
Curve definitions for calibration.

A CurveDefinition describes one curve to be rebuilt from a slice of a
calibration parameter vector:

- the curve name and the meaning of its node values (ZERO_RATE,
  DISCOUNT_FACTOR or PRICE_INDEX)
- the node positions (year fractions, or months for price index curves)
- the interpolator, day count and node labels
- where the curve is used: discount currencies, forward indices and price
  indices

JacobianCalibrationMatrix records d parameter / d market quote for the
curves calibrated together. Rows are the parameters of the curve it is
attached to, columns the market quotes of every curve in the order listed.

Example:
    >>> definition = CurveDefinition(
    ...     name=CurveName("GBP-SONIA"),
    ...     y_value_type=ValueTypes.ZERO_RATE,
    ...     x_values=[0.25, 1.0, 2.0, 5.0, 10.0],
    ...     interpolator=InterpTypes.LINEAR,
    ...     node_labels=["3M", "1Y", "2Y", "5Y", "10Y"],
    ...     discount_currencies=(CurrencyTypes.GBP,),
    ...     forward_indices=(sonia,))
    >>> curve = definition.build_curve([0.04, 0.041, 0.042, 0.043, 0.044])
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from curvesens.utils.currency import CurrencyTypes
from curvesens.utils.day_count import DayCountTypes
from curvesens.utils.error import LibError, ParameterCountError
from curvesens.utils.global_types import InterpTypes, ValueTypes, CurveInfoTypes
from curvesens.market.indices.rate_index import IborIndex, OvernightIndex, PriceIndex
from curvesens.market.curves.curve import CurveName, CurveMetadata, InterpolatedNodalCurve

###############################################################################


@dataclass(frozen=True)
class JacobianCalibrationMatrix:
    """
    Sensitivity of curve parameters to calibration market quotes.

    Attributes:
        order (Tuple[Tuple[CurveName, int]]): Curves calibrated together and
            their parameter counts, in column order
        jacobian (np.ndarray): Read-only matrix, one row per parameter of the
            owning curve, one column per market quote
    """
    order: Tuple[Tuple[CurveName, int], ...]
    jacobian: np.ndarray

    def __post_init__(self):
        order = tuple((name, int(count)) for name, count in self.order)
        for name, count in order:
            if not isinstance(name, CurveName) or count <= 0:
                raise LibError("Jacobian order holds (CurveName, positive count) pairs")
        jac = np.array(self.jacobian, dtype=float)
        if jac.ndim != 2:
            raise LibError("Jacobian must be a matrix")
        if jac.shape[1] != sum(count for _, count in order):
            raise LibError(f"Jacobian has {jac.shape[1]} columns for "
                           f"{sum(c for _, c in order)} market quotes")
        jac.setflags(write=False)
        object.__setattr__(self, "order", order)
        object.__setattr__(self, "jacobian", jac)

    @property
    def total_parameter_count(self) -> int:
        return self.jacobian.shape[1]

    def split(self, vector) -> list:
        """ Cut a vector over all market quotes into one piece per curve. """
        vector = np.asarray(vector, dtype=float)
        if vector.size != self.total_parameter_count:
            raise ParameterCountError(f"Expected {self.total_parameter_count} values, "
                                      f"got {vector.size}")
        pieces = []
        offset = 0
        for name, count in self.order:
            pieces.append((name, vector[offset:offset + count]))
            offset += count
        return pieces

    def __eq__(self, other):
        if not isinstance(other, JacobianCalibrationMatrix):
            return NotImplemented
        return self.order == other.order and np.array_equal(self.jacobian, other.jacobian)

    __hash__ = None

###############################################################################


_CURVE_VALUE_TYPES = (ValueTypes.ZERO_RATE,
                      ValueTypes.DISCOUNT_FACTOR,
                      ValueTypes.PRICE_INDEX)


@dataclass(frozen=True)
class CurveDefinition:
    """ Definition of one calibrated curve and the market data entries it
    populates. """
    name: CurveName
    y_value_type: ValueTypes
    x_values: tuple
    interpolator: InterpTypes = InterpTypes.LINEAR
    day_count: DayCountTypes = DayCountTypes.ACT_365F
    node_labels: Optional[tuple] = None
    discount_currencies: Tuple[CurrencyTypes, ...] = field(default_factory=tuple)
    forward_indices: tuple = field(default_factory=tuple)
    price_indices: Tuple[PriceIndex, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.name, CurveName):
            raise LibError("Curve definition needs a CurveName")
        if self.y_value_type not in _CURVE_VALUE_TYPES:
            raise LibError(f"Cannot calibrate curves of {self.y_value_type}")

        x = tuple(float(v) for v in self.x_values)
        if len(x) < 2 or any(b <= a for a, b in zip(x, x[1:])):
            raise LibError(f"Curve {self.name}: at least two strictly increasing "
                           f"node positions are needed")
        object.__setattr__(self, "x_values", x)

        if self.node_labels is not None:
            labels = tuple(str(lbl) for lbl in self.node_labels)
            if len(labels) != len(x):
                raise LibError(f"Curve {self.name}: {len(labels)} labels for "
                               f"{len(x)} nodes")
            object.__setattr__(self, "node_labels", labels)

        object.__setattr__(self, "discount_currencies", tuple(self.discount_currencies))
        object.__setattr__(self, "forward_indices", tuple(self.forward_indices))
        object.__setattr__(self, "price_indices", tuple(self.price_indices))

        for ccy in self.discount_currencies:
            if not isinstance(ccy, CurrencyTypes):
                raise LibError(f"Discount currency {ccy} is not a CurrencyTypes")
        for index in self.forward_indices:
            if not isinstance(index, (IborIndex, OvernightIndex)):
                raise LibError(f"Forward index {index} must be an Ibor or overnight index")
        for index in self.price_indices:
            if not isinstance(index, PriceIndex):
                raise LibError(f"Price index {index} must be a PriceIndex")

    @property
    def parameter_count(self) -> int:
        return len(self.x_values)

    @property
    def x_value_type(self) -> ValueTypes:
        if self.y_value_type == ValueTypes.PRICE_INDEX:
            return ValueTypes.MONTHS
        return ValueTypes.YEAR_FRACTION

    def metadata(self) -> CurveMetadata:
        return CurveMetadata(self.name,
                             self.x_value_type,
                             self.y_value_type,
                             self.day_count,
                             self.node_labels,
                             {CurveInfoTypes.DAY_COUNT: self.day_count})

    def build_curve(self,
                    parameters,
                    jacobian: JacobianCalibrationMatrix = None,
                    market_quote_sensitivity=None) -> InterpolatedNodalCurve:
        """ Nodal curve with the given node values. A Jacobian and a PV
        sensitivity to market quotes, when given, are attached to the
        metadata. """
        parameters = np.asarray(parameters, dtype=float)
        if parameters.size != self.parameter_count:
            raise ParameterCountError(f"Curve {self.name} has {self.parameter_count} "
                                      f"parameters, got {parameters.size}")

        metadata = self.metadata()
        if jacobian is not None:
            if jacobian.jacobian.shape[0] != self.parameter_count:
                raise LibError(f"Jacobian for {self.name} has {jacobian.jacobian.shape[0]} "
                               f"rows, curve has {self.parameter_count} parameters")
            metadata = metadata.with_info(CurveInfoTypes.JACOBIAN, jacobian)
        if market_quote_sensitivity is not None:
            sens = np.array(market_quote_sensitivity, dtype=float)
            sens.setflags(write=False)
            metadata = metadata.with_info(CurveInfoTypes.PV_SENSITIVITY_TO_MARKET_QUOTE, sens)

        return InterpolatedNodalCurve(metadata, self.x_values, parameters, self.interpolator)

###############################################################################
