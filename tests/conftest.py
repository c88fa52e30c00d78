import sys

import pytest


@pytest.fixture
def shallow_stack():
    """Run with Python's default recursion limit, whatever earlier tests set."""
    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(1000)
    yield
    sys.setrecursionlimit(limit)


@pytest.fixture
def deep_parens():
    return 'println ' + '(' * 3000 + '1' + ')' * 3000 + ';'
