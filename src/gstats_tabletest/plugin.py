"""
pytest plugin, registered through the ``pytest11`` entry point
"""

import pytest
from .reporting import PytestReporter


@pytest.fixture
def table_reporter(request):
    """A PytestReporter named after the requesting test, to pass to run_test()/run_all_tests()"""
    return PytestReporter(name=request.node.nodeid)
