"""
Value categories used to dispatch deep equality checks.

Categories:
    - REFERENCE: weakref.ref objects (dereferenced before comparing)
    - SEQUENCE: list, tuple, numpy ndarray
    - AGGREGATE: dataclass instances, namedtuples, types.SimpleNamespace
    - FLOAT: float, np.floating
    - OTHER: everything else (int, bool, complex, str, bytes, enum, dict, set, None, exceptions, etc.)
"""

import dataclasses
import weakref
import numpy as np
from enum import Enum
from types import SimpleNamespace
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, List, Tuple


ReferenceTypes = (weakref.ReferenceType,)
SequenceTypes = (list, tuple, np.ndarray)
FloatTypes = (float, np.floating)


class ValueKind(Enum):
    REFERENCE = 'reference'
    SEQUENCE = 'sequence'
    AGGREGATE = 'aggregate'
    FLOAT = 'float'
    OTHER = 'other'


def is_aggregate(obj: 'Any') -> 'bool':
    """True if obj is a record-like value with fixed named fields"""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return True
    return _is_namedtuple(obj) or isinstance(obj, SimpleNamespace)


def _is_namedtuple(obj):
    return isinstance(obj, tuple) and isinstance(getattr(type(obj), '_fields', None), tuple)


def get_kind(obj: 'Any') -> 'ValueKind':
    """Returns the ValueKind of the given object

    Aggregates are checked before sequences so that namedtuples are compared field by field.
    """
    if isinstance(obj, ReferenceTypes):
        return ValueKind.REFERENCE
    elif is_aggregate(obj):
        return ValueKind.AGGREGATE
    elif isinstance(obj, FloatTypes):
        return ValueKind.FLOAT
    elif isinstance(obj, SequenceTypes):
        return ValueKind.SEQUENCE
    return ValueKind.OTHER


def aggregate_fields(obj: 'Any') -> 'List[Tuple[str, Any]]':
    """Returns a list of (field_name, value) tuples for the given aggregate, in declaration order

    Args:
        obj (Any): a dataclass instance, namedtuple or SimpleNamespace

    Raises:
        TypeError: if obj is not an aggregate
    """
    if _is_namedtuple(obj):
        return list(zip(obj._fields, obj))
    elif isinstance(obj, SimpleNamespace):
        return list(vars(obj).items())
    elif dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return [(f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj)]
    raise TypeError("Object of type %s is not an aggregate" % repr(type(obj).__name__))


def dereference(ref: 'weakref.ReferenceType') -> 'Any':
    """Returns the referent of `ref`, or None if it has been garbage collected"""
    return ref()
