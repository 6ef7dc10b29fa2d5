"""
Utils for determining deep equality of objects, allowing a small margin of error between floating point values

Handled types (see :mod:`~gstats_tabletest.pytypes` for how objects are categorized):
    - weakref.ref (compared by their referents while both are alive)
    - float, np.floating (equal if within `epsilon` of one another)
    - list, tuple, numpy ndarray (compared elementwise, in order)
    - dataclass instances, namedtuples, SimpleNamespace (compared field by field, in declaration order)
    - dict (same keys, values compared recursively with no float tolerance)
    - falls back on built-in __eq__ for everything else (int, bool, str, bytes, enum, set, etc.). Objects must be of
      the same type, or both be ints/complex/strs/bytes (builtin or numpy).
      Exceptions are compared using their type and args.

Self-referential objects are safe to compare: every pair of containers currently being compared is recorded, and
meeting the same pair again is treated as equal.
"""

import numpy as np
from .printing import print_truncated
from .pytypes import ValueKind, get_kind, aggregate_fields, dereference
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Dict, Optional, Tuple
    from .reporting import Reporter


EPSILON = 1e-5

_MAX_STR_LEN = 1000
_ROOT_PATH = '<root>'

# Groups of types whose values can be compared to one another using '=='. Bool's are never an int.
_INTERCHANGEABLE_TYPES = ((int, np.integer), (complex, np.complexfloating), (str, np.str_), (bytes, np.bytes_))
_BOOL_TYPES = (bool, np.bool_)


def is_equal(a: 'Any', b: 'Any', epsilon: 'float' = EPSILON, reporter: 'Optional[Reporter]' = None) -> 'Tuple[bool, str]':
    """
    Recursively determines whether `a` and `b` are deep equal, allowing float components to differ by less than
    `epsilon`.

    Returns a tuple of (equal, message). On a mismatch, the message describes why the values differ, prefixed by the
    location of the first differing sub-value (eg: '[2].weight'). The message is empty when the objects are equal.

    NOTE: this is not meant to be fast. Its purpose is to find the first difference between two objects and explain it.

    Args:
        a (Any): object to check equality
        b (Any): object to check equality
        epsilon (float): maximum absolute difference allowed between floating point values. Defaults to EPSILON.
        reporter (Optional[Reporter]): if not None, floating point mismatches are logged to this reporter. Defaults
            to None.

    Raises:
        EqualityCheckingError: if there was an unexpected error while checking equality
    """
    if isinstance(epsilon, bool) or not isinstance(epsilon, (int, float, np.floating, np.integer)) or not epsilon >= 0:
        raise ValueError("`epsilon` must be a non-negative number, not %s" % repr(epsilon))

    # The visit record only lives for this call
    return _is_equal(a, b, float(epsilon), reporter, {}, '')


def equal(a: 'Any', b: 'Any', epsilon: 'float' = EPSILON, raise_err: 'bool' = False) -> 'bool':
    """
    Boolean version of :func:`~gstats_tabletest.equality.is_equal`

    Args:
        a (Any): object to check equality
        b (Any): object to check equality
        epsilon (float): maximum absolute difference allowed between floating point values. Defaults to EPSILON.
        raise_err (bool): if True, then an ``EqualityError`` will be raised whenever `a` and `b` are unequal, with
            the message explaining where they differ. Defaults to False.
    """
    ok, message = is_equal(a, b, epsilon=epsilon)
    if not ok and raise_err:
        raise EqualityError(a, b, message)
    return ok


def _is_equal(a, b, epsilon, reporter, visited, path):
    """Does the work of is_equal(), keeping track of the pairs of containers currently being compared in `visited`"""
    # If we've seen this pair before, then we haven't found a problem so far
    key = (id(a), id(b))
    if key in visited:
        return True, ''

    kind = get_kind(a)
    if kind is not get_kind(b):
        return _eq_fail(path, "Not same types: %s != %s" % (repr(type(a).__name__), repr(type(b).__name__)))

    try:
        if kind is ValueKind.REFERENCE:
            ref_a, ref_b = dereference(a), dereference(b)
            if ref_a is not None and ref_b is not None:
                _visit(visited, key, a, b)
                return _is_equal(ref_a, ref_b, epsilon, reporter, visited, path + '()')

        elif kind is ValueKind.FLOAT:
            return _float_equal(a, b, epsilon, reporter, path)

        elif kind is ValueKind.SEQUENCE:
            _visit(visited, key, a, b)
            return _sequence_equal(a, b, epsilon, reporter, visited, path)

        elif kind is ValueKind.AGGREGATE:
            _visit(visited, key, a, b)
            return _aggregate_equal(a, b, epsilon, reporter, visited, path)

        # Dictionaries are walked to keep cycles safe, but their values get no float tolerance
        elif isinstance(a, dict) and isinstance(b, dict):
            _visit(visited, key, a, b)
            return _dict_equal(a, b, reporter, visited, path)

        # Cover anything else, including dead references
        return _fallback_equal(a, b, path)

    except EqualityCheckingError:
        raise
    except Exception:
        raise EqualityCheckingError("Could not determine equality between objects at %s\na: %s\nb: %s" %
            (path or _ROOT_PATH, _limit_str(a), _limit_str(b)))


def _visit(visited, key, a, b):
    """Registers the pair. Both objects are kept alive so that their id's can't be reused until the call finishes"""
    visited[key] = (a, b)


def _float_equal(a, b, epsilon, reporter, path):
    fa, fb = float(a), float(b)

    # Covers infinities, and keeps NaN equal to itself
    if fa == fb or (np.isnan(fa) and np.isnan(fb)):
        return True, ''

    # Not sure if diff is negative or positive
    diff = fa - fb
    if diff < epsilon and -diff < epsilon:
        return True, ''

    ok, message = _eq_fail(path, "Failing on a floating-point comparison: %r != %r" % (fa, fb))
    if reporter is not None:
        reporter.log(message)
    return ok, message


def _sequence_equal(a, b, epsilon, reporter, visited, path):
    # 0-d numpy arrays have no length, check their single item instead
    a_scalar, b_scalar = _is_0d_array(a), _is_0d_array(b)
    if a_scalar and b_scalar:
        return _is_equal(a[()], b[()], epsilon, reporter, visited, path)
    elif a_scalar or b_scalar:
        return _eq_fail(path, "Objects had different dimensions: a 0-d array cannot equal a sequence")

    if len(a) != len(b):
        return _eq_fail(path, "Objects had different lengths: %d != %d" % (len(a), len(b)))

    # Return right away on the first unequal element
    for i, (_checking_a, _checking_b) in enumerate(zip(a, b)):
        ok, message = _is_equal(_checking_a, _checking_b, epsilon, reporter, visited, '%s[%d]' % (path, i))
        if not ok:
            return False, message

    return True, ''


def _aggregate_equal(a, b, epsilon, reporter, visited, path):
    fields_a, fields_b = aggregate_fields(a), aggregate_fields(b)
    if len(fields_a) != len(fields_b):
        return _eq_fail(path, "Number of fields do not match: %d != %d" % (len(fields_a), len(fields_b)))

    # Fields are matched by position, named after those of `a`
    for (name, _checking_a), (_, _checking_b) in zip(fields_a, fields_b):
        ok, message = _is_equal(_checking_a, _checking_b, epsilon, reporter, visited, '%s.%s' % (path, name))
        if not ok:
            return False, message

    return True, ''


def _dict_equal(a, b, reporter, visited, path):
    if type(a) is not type(b):
        return _eq_fail(path, "Deep-equality fallback failed: objects are of different types %s and %s" %
            (repr(type(a).__name__), repr(type(b).__name__)))

    if a.keys() != b.keys():
        return _eq_fail(path, "Dictionaries had different .keys(): %s != %s" % (_limit_str(list(a)), _limit_str(list(b))))

    # Values are compared with a zero epsilon: only exactly equal floats pass
    for k in a:
        ok, message = _is_equal(a[k], b[k], 0.0, reporter, visited, "%s[%r]" % (path, k))
        if not ok:
            return False, message

    return True, ''


def _fallback_equal(a, b, path):
    if a is b:
        return True, ''

    if not _compatible_types(a, b):
        return _eq_fail(path, "Deep-equality fallback failed: objects are of different types %s and %s" %
            (repr(type(a).__name__), repr(type(b).__name__)))

    # Exceptions only define identity equality, compare their arguments instead
    if isinstance(a, BaseException):
        checked = a.args == b.args
    else:
        checked = a == b

    if not isinstance(checked, bool):
        checked = bool(np.all(checked))

    if not checked:
        return _eq_fail(path, "Deep-equality fallback failed: %s != %s" % (_limit_str(a), _limit_str(b)))
    return True, ''


def _compatible_types(a, b):
    """Whether a and b are of types that can be compared using '=='"""
    if type(a) is type(b):
        return True
    if isinstance(a, _BOOL_TYPES) or isinstance(b, _BOOL_TYPES):
        return isinstance(a, _BOOL_TYPES) and isinstance(b, _BOOL_TYPES)
    return any(isinstance(a, types) and isinstance(b, types) for types in _INTERCHANGEABLE_TYPES)


def _is_0d_array(a):
    return isinstance(a, np.ndarray) and a.ndim == 0


def _eq_fail(path, message):
    return False, '%s: %s' % (path or _ROOT_PATH, message)


def _limit_str(a, limit=_MAX_STR_LEN):
    return print_truncated(repr(a), limit=limit)


class EqualityError(Exception):
    """Error raised whenever an :func:`~gstats_tabletest.equality.equal` check returns false and `raise_err=True`"""

    def __init__(self, a, b, message=None):
        message = "Values are not equal" if message is None else message
        super().__init__("Object a (%s) is not equal to object b (%s)\na: %s\nb: %s\nMessage: %s" % \
            (repr(type(a).__name__), repr(type(b).__name__), _limit_str(a), _limit_str(b), message))


class EqualityCheckingError(Exception):
    """Error raised whenever there is an unexpected problem attempting to check equality between two objects"""
