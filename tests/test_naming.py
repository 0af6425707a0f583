import pytest

from db.models import Page
from schema.naming import MAX_NAME_LENGTH, is_valid_name, page_name
from services.name_service import unique_name
from tests.factories import PageFactory


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("  Café  Crème 2024! ", "cafe-creme-2024"),
    ("Foo", "foo"),
    ("FOO", "foo"),
    ("a_b.c", "a_b.c"),
    ("--Leading & trailing--", "leading-trailing"),
    ("日本語", ""),
    ("", ""),
])
def test_page_name(text, expected):
    assert page_name(text) == expected


def test_page_name_is_truncated():
    assert len(page_name("x" * 300)) == MAX_NAME_LENGTH


def test_is_valid_name():
    assert is_valid_name("hello-world")
    assert not is_valid_name("Hello World")
    assert not is_valid_name("")


def test_unique_name_returns_candidate_when_free(session, articles):
    assert unique_name(session, "foo", articles) == "foo"


def test_unique_name_appends_first_free_suffix(session, articles):
    PageFactory(parent=articles, name="foo")
    PageFactory(parent=articles, name="foo-1")
    PageFactory(parent=articles, name="foo-3")
    assert unique_name(session, "foo", articles) == "foo-2"


def test_unique_name_counts_hidden_and_trashed_pages(session, articles):
    PageFactory(parent=articles, name="foo", status=Page.STATUS_HIDDEN)
    PageFactory(parent=articles, name="foo-1", status=Page.STATUS_TRASH)
    assert unique_name(session, "foo", articles) == "foo-2"


def test_unique_name_is_scoped_to_parent(session, articles, categories):
    PageFactory(parent=categories, name="foo")
    assert unique_name(session, "foo", articles) == "foo"
