"""Pytest configuration and shared fixtures."""
import pytest

from notepad.store import NoteStore


@pytest.fixture()
def store_dir(tmp_path):
    return tmp_path / "storage"


@pytest.fixture()
def store(store_dir):
    note_store = NoteStore(store_dir).open()
    try:
        yield note_store
    finally:
        note_store.close()


@pytest.fixture()
def client(tmp_path, monkeypatch):
    # Point the API at a temp database before the app opens any store
    monkeypatch.setenv("NOTES_DB_DIR", str(tmp_path / "api"))
    monkeypatch.delenv("NOTES_DB_NAME", raising=False)
    from fastapi.testclient import TestClient
    from notepad.api.main import app

    with TestClient(app) as test_client:
        yield test_client
