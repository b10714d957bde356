"""Pytest configuration for integration tests.

Everything under tests/integration is marked as an integration test so
the stress runs can be deselected with -m "not integration".
"""

import pytest


def pytest_collection_modifyitems(items):
    """Mark tests collected from this directory as integration tests."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
