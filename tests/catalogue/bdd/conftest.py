"""Shared BDD fixtures and step definitions for the Catalogue domain."""

import pytest
from catalogue.category.management import CreateCategory, ManageCategoryHandler
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from shared.exceptions import ConflictError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured write errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a category named "{name}"'), target_fixture="category_id")
def existing_category(session, name):
    return ManageCategoryHandler(session).create_category(CreateCategory(name=name))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the action fails with a validation error")
def action_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then("the write is refused as a conflict")
def write_refused_as_conflict(error):
    assert error["exc"] is not None, "Expected a conflict but none was raised"
    assert isinstance(error["exc"], ConflictError)
