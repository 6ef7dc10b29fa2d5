from .equality import EPSILON, EqualityCheckingError, EqualityError, equal, is_equal
from .printing import MAX_PRINT_LEN, TRUNCATION_MARKER, print_truncated
from .pytypes import ValueKind, get_kind
from .reporting import PytestReporter, Reporter, TestAuthoringError
from .runner import run_all_tests, run_test

__all__ = ['EPSILON', 'EqualityCheckingError', 'EqualityError', 'equal', 'is_equal', 'MAX_PRINT_LEN',
    'TRUNCATION_MARKER', 'print_truncated', 'ValueKind', 'get_kind', 'PytestReporter', 'Reporter',
    'TestAuthoringError', 'run_all_tests', 'run_test']
