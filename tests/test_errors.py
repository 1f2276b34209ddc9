from fastapi.testclient import TestClient

from taskdeck.tasks import store

def auth(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

def test_unexpected_error_is_logged_500(app, free_jwt, monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise RuntimeError("database on fire")

    monkeypatch.setattr(store, "list_tasks", boom)
    client = TestClient(app, raise_server_exceptions=False)

    with caplog.at_level("ERROR"):
        r = client.get("/tasks", headers=auth(free_jwt))

    assert r.status_code == 500
    assert r.json() == {"message": "Server error"}
    assert "database on fire" not in r.text
    assert any("unhandled error on GET /tasks" in rec.getMessage() for rec in caplog.records)

def test_validation_errors_are_400_with_message(client, free_jwt):
    r = client.post("/tasks", json={"title": "x", "tags": "not-a-list"}, headers=auth(free_jwt))
    assert r.status_code == 400
    body = r.json()
    assert list(body) == ["message"]
    assert body["message"].startswith("tags:")
