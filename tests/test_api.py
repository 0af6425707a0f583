import io
import json

from tests.factories import csv_bytes


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_schema_templates(client):
    resp = client.get("/api/v1/schema/templates")
    assert resp.status_code == 200
    assert "article" in resp.get_json()


def test_schema_template_lists_importable_fields(client):
    data = client.get("/api/v1/schema/template/article").get_json()
    names = [f["name"] for f in data["fields"]]
    assert names[0] == "title"
    assert "pass" not in names
    cover = next(f for f in data["fields"] if f["name"] == "cover")
    assert cover["max_files"] == 1


def test_schema_unknown_template(client):
    resp = client.get("/api/v1/schema/template/nope")
    assert resp.status_code == 404


def test_import_raw_body(client):
    body = csv_bytes([["title", "body"], ["Foo", "X"], ["", "Y"]])
    resp = client.post("/api/v1/import?template=article&parent=/", data=body,
                       content_type="text/csv")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["total_rows"] == 2
    assert data["imported"] == 1
    assert [m["outcome"] for m in data["messages"]] == ["created", "failed"]
    assert data["messages"][0]["reason"] == "Created page /foo/"


def test_import_multipart_with_columns(client):
    body = csv_bytes([["Headline"], ["Foo"]])
    resp = client.post("/api/v1/import", data={
        "template": "article",
        "duplicates": "create-unique",
        "columns": json.dumps({"Headline": "title"}),
        "csv_file": (io.BytesIO(body), "pages.csv"),
    }, content_type="multipart/form-data")
    assert resp.status_code == 200
    assert resp.get_json()["imported"] == 1


def test_import_rerun_skips(client):
    body = csv_bytes([["title"], ["Foo"]])
    client.post("/api/v1/import?template=article", data=body, content_type="text/csv")
    data = client.post("/api/v1/import?template=article", data=body,
                       content_type="text/csv").get_json()
    assert data["imported"] == 0
    assert data["skipped"] == 1


def test_import_empty_body(client):
    resp = client.post("/api/v1/import?template=article", data=b"", content_type="text/csv")
    assert resp.status_code == 400


def test_import_missing_upload(client):
    resp = client.post("/api/v1/import", data={"template": "article"},
                       content_type="multipart/form-data")
    assert resp.status_code == 400


def test_import_bad_parameters(client):
    body = csv_bytes([["title"], ["Foo"]])
    for query in ("", "template=article&duplicates=merge", "template=article&max_rows=x",
                  "template=article&columns=[1]"):
        resp = client.post(f"/api/v1/import?{query}", data=body, content_type="text/csv")
        assert resp.status_code == 400, query
        assert "error" in resp.get_json()


def test_import_unknown_destination(client):
    body = csv_bytes([["title"], ["Foo"]])
    resp = client.post("/api/v1/import?template=article&parent=/missing/", data=body,
                       content_type="text/csv")
    assert resp.status_code == 400
    assert "does not exist" in resp.get_json()["error"]


def test_seed_imports_into_empty_parent(app, tmp_path, monkeypatch):
    import config
    from main import _seed_if_empty

    seed = tmp_path / "seed.csv"
    seed.write_bytes(csv_bytes([["title"], ["Welcome"], ["About"]]))
    monkeypatch.setattr(config, "SEED_CSV_PATH", seed)
    monkeypatch.setattr(config, "SEED_PARENT", "/")
    monkeypatch.setattr(config, "SEED_TEMPLATE", "article")

    _seed_if_empty()
    client = app.test_client()
    data = client.post("/api/v1/import?template=article", data=seed.read_bytes(),
                       content_type="text/csv").get_json()
    assert data["skipped"] == 2

    # Parent no longer empty: a second seed is a no-op
    seed.write_bytes(csv_bytes([["title"], ["Other"]]))
    _seed_if_empty()
    data = client.post("/api/v1/import?template=article", data=seed.read_bytes(),
                       content_type="text/csv").get_json()
    assert data["created"] == 1
