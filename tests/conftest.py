"""Pytest configuration for tests.

No sys.path hacks - tests should import from the installed safe_json_value package.
"""

import pytest

from safe_json_value.kernel import hooks


@pytest.fixture(autouse=True)
def no_running_hooks():
    """Every test starts and ends with no hook marked as running."""
    assert hooks._running_hooks.get() == frozenset()
    yield
    assert hooks._running_hooks.get() == frozenset()
