"""
Tests for the gstats_tabletest.runner file.
"""

from gstats_tabletest.equality import EPSILON
from gstats_tabletest.printing import TRUNCATION_MARKER
from gstats_tabletest.reporting import PytestReporter, Reporter, TestAuthoringError
from gstats_tabletest.runner import run_all_tests, run_test
from collections import namedtuple
from dataclasses import dataclass
import math
import numpy as np
import pytest


_Args = namedtuple('_Args', ['x', 'y'])
_DivMod = namedtuple('_DivMod', ['quotient', 'remainder'])
_DivModExtra = namedtuple('_DivModExtra', ['quotient', 'remainder', 'extra'])


@dataclass
class _Polar:
    r: float
    theta: float


def _to_polar(x, y):
    return math.hypot(x, y), math.atan2(y, x)


def _halve(x):
    return x / 2


def _broken_halve(x):
    return x / 2 if x != 4 else 0.0


def _total(*args):
    return sum(args)


def _scaled(x, scale=1.0):
    return x * scale


def _needs_keyword(x, *, k):
    return x * k


def _pair_array(i):
    return {'v': np.array([i, i])}


class _LenientReporter(Reporter):
    """Reporter whose fatal() only records the message"""

    def fatal(self, message):
        self.logs.append(message)


def test_single_input_single_output():
    """Values that are not aggregates are passed as a single argument, and checked against the single result"""
    reporter = Reporter()
    assert run_test(_halve, 3.0, 1.5, reporter=reporter) == (True, '')
    assert run_test(_halve, 3.0, 1.5 + EPSILON / 2, reporter=reporter) == (True, '')
    assert run_test(len, [1, 2], 2, reporter=reporter) == (True, '')
    assert reporter.logs == []


def test_aggregate_inputs_and_outputs():
    """Aggregates are spread into arguments and expected results"""
    reporter = Reporter()
    assert run_test(divmod, _Args(7, 2), _DivMod(3, 1), reporter=reporter) == (True, '')
    assert run_test(_to_polar, _Args(0.0, 2.0), _Polar(2.0, math.pi / 2), reporter=reporter) == (True, '')

    # A tuple expected value is a single result, not one result per element
    assert run_test(divmod, _Args(7, 2), (3, 1), reporter=reporter) == (True, '')


def test_mismatch_logs_named_values():
    """The first differing result is logged along with its name"""
    reporter = Reporter()
    ok, message = run_test(divmod, _Args(7, 2), _DivMod(3, 2), reporter=reporter)
    assert not ok
    assert 'Deep-equality fallback failed' in message
    assert reporter.logs == ['Expected (remainder): 2\n', 'Got      (remainder): 1\n']


def test_mismatch_stops_at_first_result():
    reporter = Reporter()
    ok, message = run_test(divmod, _Args(7, 2), _DivMod(4, 2), reporter=reporter)
    assert not ok
    assert reporter.logs == ['Expected (quotient): 4\n', 'Got      (quotient): 3\n']


def test_mismatch_single_output_has_no_name():
    reporter = Reporter()
    ok, message = run_test(_halve, 3.0, 2.0, reporter=reporter)
    assert not ok
    assert 'floating-point comparison' in message
    assert reporter.logs[-2:] == ['Expected: 2.0\n', 'Got     : 1.5\n']


def test_mismatch_output_is_truncated():
    reporter = Reporter()
    ok, _ = run_test(list, ['a'] * 10_000, ['b'] * 10_000, reporter=reporter)
    assert not ok
    assert all(log.endswith(TRUNCATION_MARKER + '\n') for log in reporter.logs)


def test_input_arity():
    """The number of inputs must be accepted by the function's signature"""
    reporter = Reporter()
    assert run_test(_total, _Args(1, 2), 3, reporter=reporter) == (True, '')
    assert run_test(_scaled, 2.0, 2.0, reporter=reporter) == (True, '')
    assert run_test(_scaled, _Args(2.0, 3.0), 6.0, reporter=reporter) == (True, '')

    with pytest.raises(TestAuthoringError, match='in params'):
        run_test(_halve, _Args(1, 2), 0.5, reporter=reporter)
    with pytest.raises(TestAuthoringError, match='in params'):
        run_test(_to_polar, 1.0, _Polar(1.0, 0.0), reporter=reporter)


def test_output_arity():
    """The number of expected values must match the number of returned values"""
    reporter = Reporter()
    with pytest.raises(TestAuthoringError, match='expect params'):
        run_test(_halve, 1.0, _DivMod(0.5, 0), reporter=reporter)
    with pytest.raises(TestAuthoringError, match='expect params'):
        run_test(divmod, _Args(7, 2), _DivModExtra(3, 1, 0), reporter=reporter)


def test_run_all_tests_reports_every_failure():
    """A failing case doesn't stop later cases from running"""
    reporter = Reporter()
    failures = run_all_tests(_broken_halve, [1.0, 2.0, 4.0, 6.0, 8.0], [0.5, 1.0, 2.0, 3.0, 4.0], reporter=reporter)

    assert len(failures) == 1
    assert failures[0].startswith('FAIL case 2 (')
    assert reporter.failures == failures
    for i in range(5):
        assert "Testing case %d" % i in reporter.logs


def test_run_all_tests_passing():
    reporter = PytestReporter()
    assert run_all_tests(divmod, (_Args(7, 2), _Args(9, 3)), (_DivMod(3, 1), _DivMod(3, 0)), reporter=reporter) == []


def test_run_all_tests_pytest_reporter_fails():
    """The default reporter fails the test after the whole batch ran"""
    with pytest.raises(pytest.fail.Exception, match='FAIL case 2'):
        run_all_tests(_broken_halve, [1.0, 2.0, 4.0], [0.5, 1.0, 2.0])


def test_run_all_tests_with_fixture(table_reporter):
    run_all_tests(_to_polar, [_Args(1.0, 0.0), _Args(0.0, -3.0)], [_Polar(1.0, 0.0), _Polar(3.0, -math.pi / 2)],
        reporter=table_reporter)


def test_run_all_tests_authoring_errors():
    reporter = Reporter()
    with pytest.raises(TestAuthoringError, match='all_invals'):
        run_all_tests(_halve, 1.0, [0.5], reporter=reporter)
    with pytest.raises(TestAuthoringError, match='all_expectvals'):
        run_all_tests(_halve, [1.0], {0.5}, reporter=reporter)
    with pytest.raises(TestAuthoringError, match="doesn't match number of expected"):
        run_all_tests(_halve, [1.0, 2.0], [0.5], reporter=reporter)


def test_required_keyword_only_is_authoring_error():
    """Keyword-only parameters without defaults can't be filled by in params"""
    with pytest.raises(TestAuthoringError, match='keyword-only parameters .*: k'):
        run_test(_needs_keyword, 2.0, 4.0, reporter=Reporter())


def test_fatal_aborts_with_non_raising_reporter():
    """Authoring errors abort even if the reporter's fatal() returns"""
    reporter = _LenientReporter()
    with pytest.raises(TestAuthoringError, match='in params'):
        run_test(_halve, _Args(1, 2), 0.5, reporter=reporter)
    with pytest.raises(TestAuthoringError, match='expect params'):
        run_test(_halve, 1.0, _DivMod(0.5, 0), reporter=reporter)
    with pytest.raises(TestAuthoringError, match='all_invals'):
        run_all_tests(_halve, 1.0, [0.5], reporter=reporter)
    assert reporter.failures == []


def test_run_all_tests_with_dict_results():
    """Dictionaries holding arrays are compared key by key, and only the differing case fails"""
    reporter = Reporter()
    failures = run_all_tests(_pair_array, [1, 2, 3],
        [{'v': np.array([1, 1])}, {'v': np.array([0, 0])}, {'v': np.array([3, 3])}], reporter=reporter)

    assert len(failures) == 1
    assert failures[0].startswith("FAIL case 1 (['v'][0]:"), failures[0]


def test_checking_error_fails_only_its_case():
    """An error raised while comparing fails that case, and later cases still run"""
    class _BadEq:
        def __init__(self, val):
            self.val = val

        def __eq__(self, other):
            if self.val == 'bad':
                raise RuntimeError("no")
            return isinstance(other, _BadEq) and self.val == other.val

    reporter = Reporter()
    failures = run_all_tests(_BadEq, ['ok', 'bad', 'ok'], [_BadEq('ok'), _BadEq('bad'), _BadEq('nope')],
        reporter=reporter)

    assert [f.split(' (')[0] for f in failures] == ['FAIL case 1', 'FAIL case 2']
    assert 'Could not determine equality' in failures[0]
    assert 'Testing case 2' in reporter.logs
