"""
Bounded-length string conversion for diagnostic output
"""

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any


MAX_PRINT_LEN = 5000
TRUNCATION_MARKER = '\n[...output truncated...]'


def print_truncated(val: 'Any', limit: 'int' = MAX_PRINT_LEN) -> 'str':
    """Returns str(val), cut down to `limit` characters followed by TRUNCATION_MARKER if it is any longer

    Args:
        val (Any): the object to convert
        limit (int): maximum number of characters of `val` to keep. Defaults to MAX_PRINT_LEN.
    """
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
        raise ValueError("`limit` must be a non-negative int, not %s" % repr(limit))

    result = str(val)
    if len(result) <= limit:
        return result
    return result[:limit] + TRUNCATION_MARKER
