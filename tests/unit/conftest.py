"""Conftest for unit tests - automatically mark every memsearch test under tests/unit as a unit test."""

import pytest


def pytest_collection_modifyitems(config, items):
    """Add the unit marker to every collected test in the unit directory."""
    for item in items:
        if "unit" in str(item.path):
            item.add_marker(pytest.mark.unit)
