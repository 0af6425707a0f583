import pytest

from import_engine.duplicates import Decision, decide, resolve
from import_engine.run_config import DuplicatePolicy
from tests.factories import PageFactory


@pytest.mark.parametrize("policy", list(DuplicatePolicy))
def test_no_existing_page_always_creates(policy):
    assert decide(None, policy) is Decision.CREATE


@pytest.mark.parametrize("policy,expected", [
    (DuplicatePolicy.SKIP, Decision.SKIP),
    (DuplicatePolicy.CREATE_UNIQUE, Decision.CREATE_UNIQUE),
    (DuplicatePolicy.MODIFY, Decision.MODIFY),
])
def test_existing_page_follows_policy(session, articles, policy, expected):
    existing = PageFactory(parent=articles, name="foo")
    assert decide(existing, policy) is expected


def test_resolve_create_unique_renames(session, articles):
    existing = PageFactory(parent=articles, name="foo")
    decision, found, name = resolve(session, articles, "foo", DuplicatePolicy.CREATE_UNIQUE)
    assert decision is Decision.CREATE_UNIQUE
    assert found.id == existing.id
    assert name == "foo-1"


def test_resolve_keeps_name_for_other_decisions(session, articles):
    PageFactory(parent=articles, name="foo")
    assert resolve(session, articles, "foo", DuplicatePolicy.MODIFY)[2] == "foo"
    assert resolve(session, articles, "bar", DuplicatePolicy.CREATE_UNIQUE) == (
        Decision.CREATE, None, "bar")
