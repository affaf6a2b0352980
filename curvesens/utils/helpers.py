"""
Helper functions shared across curvesens.

Provides:
- label_to_string and format_table for object representations
- check_argument_types, which validates call arguments against the
  function annotations
"""

import numpy as np
from typing import Union
from prettytable import PrettyTable

from .error import LibError


###############################################################################


def label_to_string(label: str,
                    value: (float, str),
                    separator: str = "\n",
                    list_format: bool = False):
    """ Format label/value pairs for a unified formatting. """
    # Format option for lists such that all values are aligned:
    # Label: value1
    #        value2
    #        ...
    label = str(label)

    if list_format and type(value) is list and len(value) > 0:
        s = label + ": "
        labelSpacing = " " * len(s)
        s += str(value[0])

        for v in value[1:]:
            s += "\n" + labelSpacing + str(v)
        s += separator

        return s
    else:
        return f"{label}: {value}{separator}"

###############################################################################


def format_table(header: (list, tuple),
                 rows: (list, tuple)):
    """ Format a 2D array into a table-like string using a wrapper around
    PrettyTable to get a nice formatting. """

    t = PrettyTable(header)
    num_cols = len(header)

    if len(rows) == 0:
        return ""

    for row in rows:
        if len(row) != num_cols:
            raise ValueError("Header and Row Size must match!")

        t.add_row(row)

    return t

###############################################################################


def to_usable_type(t):
    """ Convert a type such that it can be used with `isinstance` """
    if hasattr(t, '__origin__'):
        origin = t.__origin__
        # t comes from the `typing` module
        if origin is list:
            return (list, tuple, np.ndarray)
        elif origin is Union:
            types = t.__args__
            return tuple(to_usable_type(tp) for tp in types)
        return origin
    else:
        # t is a normal type
        if t is float:
            return (int, float, np.floating)
        if t is int:
            return (int, np.integer)
        if isinstance(t, tuple):
            return tuple(to_usable_type(tp) for tp in t)

    return t

###############################################################################


def _flatten_types(usable_type):
    if isinstance(usable_type, tuple):
        out = ()
        for tp in usable_type:
            out += _flatten_types(tp)
        return out
    return (usable_type,)

###############################################################################


def check_argument_types(func, values):
    """ Check that all values passed into a function are of the same type
    as the function annotations. If a value has not been annotated, or has
    been passed as None, it will not be checked. """
    for value_name, annotation_type in func.__annotations__.items():

        if value_name == "return" or value_name not in values:
            continue

        if isinstance(annotation_type, str):
            continue

        value = values[value_name]
        if value is None:
            continue

        usable_type = _flatten_types(to_usable_type(annotation_type))
        usable_type = tuple(tp for tp in usable_type if isinstance(tp, type))
        if len(usable_type) == 0:
            continue

        if not isinstance(value, usable_type):
            raise LibError(
                f"Argument Type Error in {func.__qualname__}: argument "
                f"'{value_name}' has type {type(value).__name__}, allowed "
                f"types are {[tp.__name__ for tp in usable_type]}")

###############################################################################
