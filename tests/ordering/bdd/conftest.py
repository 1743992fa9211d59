"""Shared BDD fixtures for the Ordering domain."""

import pytest


@pytest.fixture()
def outcome():
    """Container for the last checkout result or failure."""
    return {"result": None, "exc": None}
