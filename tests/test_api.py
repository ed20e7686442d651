"""HTTP controller tests against a temporary notes database."""
import sqlite3

from notepad.db import DATABASE_NAME


def _add_abort_trigger(tmp_path, event):
    conn = sqlite3.connect(str(tmp_path / "api" / DATABASE_NAME))
    try:
        conn.execute(
            f"CREATE TRIGGER abort_{event.lower()} BEFORE {event} ON notes "
            "BEGIN SELECT RAISE(ABORT, 'no'); END"
        )
        conn.commit()
    finally:
        conn.close()


def _create(client, title="Groceries", body="Milk, eggs"):
    resp = client.post("/notes", json={"title": title, "body": body})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Healthy"}


def test_health_db_reports_schema_version(client):
    resp = client.get("/health/db")
    assert resp.status_code == 200
    assert resp.json() == {"status": "up", "schema_version": 1}


def test_health_db_reports_down(client, tmp_path, monkeypatch):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    monkeypatch.setenv("NOTES_DB_DIR", str(blocker / "nested"))

    body = client.get("/health/db").json()
    assert body["status"] == "down"
    assert body["error"]


def test_create_and_get(client):
    created = _create(client)
    assert created == {"id": 1, "title": "Groceries", "body": "Milk, eggs"}

    resp = client.get(f"/notes/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == created


def test_create_strips_title(client):
    created = _create(client, title="  Padded  ")
    assert created["title"] == "Padded"


def test_create_rejects_empty_title(client):
    resp = client.post("/notes", json={"title": "", "body": "x"})
    assert resp.status_code == 422


def test_create_requires_body(client):
    resp = client.post("/notes", json={"title": "x"})
    assert resp.status_code == 422


def test_list_notes(client):
    _create(client, "A", "B")
    _create(client, "C", "D")

    resp = client.get("/notes")
    assert resp.status_code == 200
    assert sorted((n["title"], n["body"]) for n in resp.json()) == [("A", "B"), ("C", "D")]


def test_get_missing_is_404(client):
    resp = client.get("/notes/99")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Note not found"


def test_partial_update_keeps_omitted_fields(client):
    created = _create(client, "Old", "old body")

    resp = client.put(f"/notes/{created['id']}", json={"title": "New"})
    assert resp.status_code == 200
    assert resp.json() == {"id": created["id"], "title": "New", "body": "old body"}

    assert client.get(f"/notes/{created['id']}").json()["title"] == "New"


def test_update_missing_is_404(client):
    resp = client.put("/notes/99", json={"title": "X", "body": "Y"})
    assert resp.status_code == 404


def test_delete(client):
    created = _create(client)

    resp = client.delete(f"/notes/{created['id']}")
    assert resp.status_code == 204

    assert client.get(f"/notes/{created['id']}").status_code == 404
    assert client.get("/notes").json() == []


def test_delete_missing_is_404(client):
    resp = client.delete("/notes/99")
    assert resp.status_code == 404


def test_failed_update_is_500(client, tmp_path):
    created = _create(client, "Old", "old body")
    _add_abort_trigger(tmp_path, "UPDATE")

    resp = client.put(f"/notes/{created['id']}", json={"title": "New"})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to update note"

    assert client.get(f"/notes/{created['id']}").json()["title"] == "Old"


def test_failed_delete_is_500(client, tmp_path):
    created = _create(client)
    _add_abort_trigger(tmp_path, "DELETE")

    resp = client.delete(f"/notes/{created['id']}")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to delete note"

    assert client.get(f"/notes/{created['id']}").status_code == 200
