from taskdeck import db
from taskdeck.routes import health

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_ready_when_dependencies_answer(client, monkeypatch):
    monkeypatch.setattr(health, "check_redis", lambda: None)

    r = client.get("/ready")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "checks": {"db": True, "redis": True}}

def test_unready_reports_failures(client, monkeypatch):
    monkeypatch.setattr(health, "check_db", lambda: None)
    monkeypatch.setattr(health, "check_redis", lambda: "ConnectionError: redis down")

    r = client.get("/ready")
    assert r.status_code == 503
    assert r.json() == {
        "status": "unready",
        "checks": {"db": True, "redis": False},
        "errors": {"redis": "ConnectionError: redis down"},
    }

def test_describe_error_keeps_first_line():
    assert db.describe_error(ValueError("first\nsecond")) == "ValueError: first"
    assert db.describe_error(ValueError()) == "ValueError"
