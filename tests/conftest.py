import pytest
from fastapi.testclient import TestClient

from user_todo_api.db import SQLiteStore
from user_todo_api.main import create_app
from user_todo_api.repositories import InMemoryStore
from user_todo_api.settings import Settings


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "sqlite":
        s = SQLiteStore(str(tmp_path / "store.db"))
    else:
        s = InMemoryStore()
    yield s
    s.close()


@pytest.fixture
def client():
    app = create_app(Settings(), store=InMemoryStore())
    with TestClient(app) as c:
        yield c


@pytest.fixture
def sqlite_client(tmp_path):
    settings = Settings(persistence_backend="sqlite", sqlite_db_path=str(tmp_path / "api.db"))
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


def create_user(client, name="Alice", email="alice@example.com"):
    res = client.post("/users", json={"name": name, "email": email})
    assert res.status_code == 201, res.text
    return res.json()


def create_todo(client, user_id, title="Buy groceries", description="Milk, eggs, bread"):
    res = client.post("/todos", json={"user_id": user_id, "title": title, "description": description})
    assert res.status_code == 201, res.text
    return res.json()
