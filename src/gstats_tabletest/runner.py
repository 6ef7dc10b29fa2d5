"""
Table test runners.

Each test case is a pair of (inputs, expected outputs). An aggregate (dataclass instance, namedtuple or SimpleNamespace)
is spread into one positional argument/expected result per field, in declaration order, while anything else is used
as a single argument/expected result:

    Case = namedtuple('Case', ['x', 'y'])
    Result = namedtuple('Result', ['quotient', 'remainder'])

    run_all_tests(divmod, [Case(7, 2), Case(9, 3)], [Result(3, 1), Result(3, 0)])
"""

import inspect
from .equality import EPSILON, EqualityCheckingError, is_equal
from .printing import print_truncated
from .pytypes import is_aggregate, aggregate_fields
from .reporting import PytestReporter, TestAuthoringError
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Callable, List, Optional, Sequence, Tuple
    from .reporting import Reporter


_POSITIONAL_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def run_test(fn: 'Callable', invals: 'Any', expectvals: 'Any', reporter: 'Optional[Reporter]' = None,
    epsilon: 'float' = EPSILON) -> 'Tuple[bool, str]':
    """
    Runs `fn` using `invals` as parameters, checking the results against `expectvals`

    Results are checked in order using :func:`~gstats_tabletest.equality.is_equal`, stopping at the first one that
    differs. Expected and actual values of that result are logged to the reporter.

    Args:
        fn (Callable): the function under test
        invals (Any): the input values. An aggregate is passed as one positional argument per field.
        expectvals (Any): the expected values. If this is an aggregate with more than one field, `fn` must return a
            tuple with one element per field.
        reporter (Optional[Reporter]): where to send logs and fatal errors. Defaults to a new PytestReporter.
        epsilon (float): maximum absolute difference allowed between floating point values. Defaults to EPSILON.

    Returns:
        Tuple[bool, str]: whether or not the test passed, along with the reason it failed (empty if it passed)

    Raises:
        TestAuthoringError: if the number of inputs doesn't match the function's parameters, the function has required
            keyword-only parameters, or the number of expected values doesn't match the function's results
    """
    reporter = PytestReporter() if reporter is None else reporter

    inputs, _ = _split_values(invals)
    expected, names = _split_values(expectvals)

    sig = _signature(fn)
    if sig is not None:
        arity = _input_arity(sig)
        if not _arity_accepts(arity, len(inputs)):
            _fatal(reporter, "The number of in params (%d) doesn't match function parameters (%s)." %
                (len(inputs), _arity_str(arity)))

        keyword_only = _required_keyword_only(sig)
        if keyword_only:
            _fatal(reporter, "The function has required keyword-only parameters that in params cannot fill: %s" %
                ', '.join(keyword_only))

    got = fn(*inputs)

    # A single expected value is checked against the whole return value
    if len(expected) == 1:
        got = (got,)
    elif not isinstance(got, tuple) or len(got) != len(expected):
        _fatal(reporter, "The number of expect params (%d) doesn't match function results (%s)." %
            (len(expected), len(got) if isinstance(got, tuple) else 'a single non-tuple value'))

    for i, (_got, _expected) in enumerate(zip(got, expected)):
        # An error while comparing fails this case only, so the rest of a batch still runs
        try:
            ok, message = is_equal(_got, _expected, epsilon=epsilon, reporter=reporter)
        except EqualityCheckingError as e:
            ok, message = False, str(e)

        if not ok:
            # If this function returns more than one result, figure out the name of problem result
            name = ' (%s)' % names[i] if len(got) > 1 else ''
            reporter.log("Expected%s: %s\n" % (name, print_truncated(_expected)))
            reporter.log("Got     %s: %s\n" % (name, print_truncated(_got)))
            return False, message

    return True, ''


def run_all_tests(fn: 'Callable', all_invals: 'Sequence[Any]', all_expectvals: 'Sequence[Any]',
    reporter: 'Optional[Reporter]' = None, epsilon: 'float' = EPSILON) -> 'List[str]':
    """
    Runs every test case with :func:`~gstats_tabletest.runner.run_test`, reporting every failing case

    Failing cases do not stop the batch. Once all cases have run, ``reporter.finish()`` is called, which for the
    default PytestReporter fails the current test if any case failed.

    Args:
        fn (Callable): the function under test
        all_invals (Sequence[Any]): list/tuple of input values, one per case
        all_expectvals (Sequence[Any]): list/tuple of expected values, one per case
        reporter (Optional[Reporter]): where to send logs and failures. Defaults to a new PytestReporter.
        epsilon (float): maximum absolute difference allowed between floating point values. Defaults to EPSILON.

    Returns:
        List[str]: the failure messages of this batch

    Raises:
        TestAuthoringError: if the tables are not lists/tuples of the same length, or any case is malformed
    """
    reporter = PytestReporter() if reporter is None else reporter

    if not isinstance(all_invals, (list, tuple)):
        _fatal(reporter, "all_invals is not a list or tuple: %s" % repr(type(all_invals).__name__))
    if not isinstance(all_expectvals, (list, tuple)):
        _fatal(reporter, "all_expectvals is not a list or tuple: %s" % repr(type(all_expectvals).__name__))
    if len(all_invals) != len(all_expectvals):
        _fatal(reporter, "Number of input tests (%d) doesn't match number of expected results (%d)" %
            (len(all_invals), len(all_expectvals)))

    failures = []
    for i, (invals, expectvals) in enumerate(zip(all_invals, all_expectvals)):
        reporter.log("Testing case %d" % i)
        ok, message = run_test(fn, invals, expectvals, reporter=reporter, epsilon=epsilon)
        if not ok:
            failures.append("FAIL case %d (%s)" % (i, message))
            reporter.fail(failures[-1])

    reporter.finish()
    return failures


def _split_values(vals):
    """Returns a list of values and a list of their names (None's if `vals` is not an aggregate)"""
    if is_aggregate(vals):
        fields = aggregate_fields(vals)
        return [v for _, v in fields], [n for n, _ in fields]
    return [vals], [None]


def _fatal(reporter, message):
    """Hands `message` to reporter.fatal(), making sure the test is aborted even if the reporter doesn't raise"""
    reporter.fatal(message)
    raise TestAuthoringError(message)


def _signature(fn):
    """Returns the signature of `fn`, or None if it has none to inspect (some builtins), leaving the call to check"""
    try:
        return inspect.signature(fn)
    except (TypeError, ValueError):
        return None


def _required_keyword_only(sig):
    """Names of keyword-only parameters without defaults, which positional in params can never fill"""
    return [p.name for p in sig.parameters.values()
        if p.kind is inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty]


def _input_arity(sig):
    """Returns a tuple of (min, max) number of positional arguments `sig` accepts, with max=None if unbounded"""
    required, total = 0, 0
    for param in sig.parameters.values():
        if param.kind in _POSITIONAL_KINDS:
            total += 1
            if param.default is inspect.Parameter.empty:
                required += 1
        elif param.kind is inspect.Parameter.VAR_POSITIONAL:
            total = None
            break

    return required, total


def _arity_accepts(arity, count):
    min_args, max_args = arity
    return min_args <= count and (max_args is None or count <= max_args)


def _arity_str(arity):
    min_args, max_args = arity
    if max_args is None:
        return 'at least %d' % min_args
    return str(min_args) if min_args == max_args else '%d to %d' % (min_args, max_args)
