import pytest

import config
import schema
from db import engine as db_engine
from db import get_session, init_db
from services.file_service import FileService
from services.pages_service import PagesService
from tests.factories import PageFactory

TEST_SCHEMA = {
    "fields": {
        "title":      {"type": "title"},
        "body":       {"type": "textarea"},
        "summary":    {"type": "text"},
        "email":      {"type": "email"},
        "price":      {"type": "float"},
        "stock":      {"type": "integer"},
        "featured":   {"type": "checkbox"},
        "colour":     {"type": "options", "options": ["Red", "Green", "Blue"]},
        "images":     {"type": "file", "max_files": 0},
        "cover":      {"type": "file", "max_files": 1},
        "categories": {"type": "page", "parent": "/categories/", "template": "category"},
        "author":     {"type": "page", "parent": "/authors/", "template": "author",
                       "multiple": False},
        "tags":       {"type": "page"},
        "pass":       {"type": "password"},
    },
    "templates": {
        "home":     ["title"],
        "section":  ["title"],
        "category": ["title", "summary"],
        "author":   ["title", "email"],
        "article":  ["title", "body", "summary", "email", "price", "stock", "featured",
                     "colour", "images", "cover", "categories", "author", "tags", "pass"],
    },
}


@pytest.fixture(autouse=True)
def _schema():
    """Load the test schema for every test."""
    schema.load_dict(TEST_SCHEMA)
    yield


@pytest.fixture
def session(tmp_path):
    """Fresh SQLite database per test, with the root page in place."""
    init_db(f"sqlite:///{tmp_path / 'test.sqlite'}")
    s = get_session()
    PageFactory._meta.sqlalchemy_session = s
    yield s
    s.close()
    db_engine.dispose()


@pytest.fixture
def root(session):
    return PagesService.get_root(session)


@pytest.fixture
def articles(root):
    """/articles/ - the usual import destination."""
    return PageFactory(parent=root, name="articles", title="Articles", template="section")


@pytest.fixture
def categories(root):
    return PageFactory(parent=root, name="categories", title="Categories", template="section")


@pytest.fixture
def authors(root):
    return PageFactory(parent=root, name="authors", title="Authors", template="section")


@pytest.fixture
def source_dir(tmp_path):
    d = tmp_path / "source"
    d.mkdir()
    return d


@pytest.fixture
def files(tmp_path, source_dir):
    return FileService(files_dir=tmp_path / "files", source_dir=source_dir, timeout=1)


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Flask app on a temporary database and schema."""
    import json
    from main import create_app

    schema_path = tmp_path / "schema.json"
    schema_path.write_text(json.dumps(TEST_SCHEMA), encoding="utf-8")
    monkeypatch.setattr(config, "SCHEMA_PATH", schema_path)
    monkeypatch.setattr(config, "DB_URL", f"sqlite:///{tmp_path / 'api.sqlite'}")
    monkeypatch.setattr(config, "FILES_DIR", tmp_path / "files")
    monkeypatch.setattr(config, "FILES_SOURCE_DIR", tmp_path / "source")

    app = create_app()
    app.config["TESTING"] = True
    yield app
    db_engine.dispose()


@pytest.fixture
def client(app):
    """Return a Flask test client."""
    return app.test_client()
