"""
Reporters collect the output of table test runs and decide what a failure means to the surrounding test framework.

A reporter needs four methods:
    - log(message): diagnostic output
    - fail(message): mark a single case as failed, the batch keeps going
    - fatal(message): abort, the test itself is broken (wrong number of arguments, malformed tables, etc.)
    - finish(): called once a batch is done
"""

import logging
import pytest
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import List, Optional


_LOGGER = logging.getLogger('gstats_tabletest')


class TestAuthoringError(Exception):
    """Error raised when a table test is malformed, as opposed to the code under test being wrong"""

    # Keep pytest from trying to collect this as a test class
    __test__ = False


class Reporter:
    """Records log messages and case failures, raising TestAuthoringError on fatal errors"""

    def __init__(self, name: 'Optional[str]' = None):
        self.name = name
        self.logs: 'List[str]' = []
        self.failures: 'List[str]' = []

    def _prefix(self, message):
        return message if self.name is None else '[%s] %s' % (self.name, message)

    def log(self, message: 'str') -> 'None':
        self.logs.append(message)
        _LOGGER.info(self._prefix(message))

    def fail(self, message: 'str') -> 'None':
        self.failures.append(message)
        _LOGGER.error(self._prefix(message))

    def fatal(self, message: 'str') -> 'None':
        _LOGGER.critical(self._prefix(message))
        raise TestAuthoringError(message)

    def finish(self) -> 'None':
        pass

    @property
    def failed(self) -> 'bool':
        return len(self.failures) > 0


class PytestReporter(Reporter):
    """Reporter that fails the current pytest test once a batch finishes with any failed cases"""

    def finish(self) -> 'None':
        if self.failed:
            pytest.fail("%d table test case(s) failed:\n%s" % (len(self.failures), '\n'.join(self.failures)), pytrace=False)
