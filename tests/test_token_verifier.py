from datetime import timedelta

import jwt
import sqlalchemy as sa

from taskdeck.auth.deps import INVALID_TOKEN, MISSING_TOKEN, verify_token
from taskdeck.auth.tokens import issue_access_token
from taskdeck.config import settings
from taskdeck.models.user import User

def _user(db, email: str = "verifier@example.com") -> User:
    u = User(email=email, password_hash="not-a-real-hash")
    db.add(u)
    db.commit()
    return u

def test_missing_header_is_401(client):
    r = client.get("/tasks")
    assert r.status_code == 401
    assert r.json() == {"message": MISSING_TOKEN}

def test_non_bearer_scheme_is_401(client):
    r = client.get("/tasks", headers={"authorization": "Basic dXNlcjpwYXNz"})
    assert r.status_code == 401
    assert r.json()["message"] == MISSING_TOKEN

def test_garbage_token_is_401(client):
    r = client.get("/tasks", headers={"authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401
    assert r.json()["message"] == INVALID_TOKEN

def test_expired_token_is_401(client, db_session):
    u = _user(db_session)
    token = issue_access_token(u.id, expires_in=timedelta(minutes=-5))

    r = client.get("/tasks", headers={"authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["message"] == INVALID_TOKEN

def test_wrong_signature_is_401(client, db_session):
    u = _user(db_session)
    forged = jwt.encode(
        {"sub": str(u.id), "iss": settings.jwt_issuer, "aud": settings.jwt_audience},
        "some-other-secret",
        algorithm="HS256",
    )

    r = client.get("/tasks", headers={"authorization": f"Bearer {forged}"})
    assert r.status_code == 401

def test_token_for_deleted_user_is_401(client, db_session):
    u = _user(db_session)
    token = issue_access_token(u.id)
    db_session.delete(u)
    db_session.commit()

    r = client.get("/tasks", headers={"authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["message"] == INVALID_TOKEN

def test_verify_token_returns_explicit_result(db_session):
    u = _user(db_session)

    ok = verify_token(db_session, issue_access_token(u.id))
    assert ok.ok
    assert ok.user.id == u.id
    assert ok.reason is None

    missing = verify_token(db_session, None)
    assert not missing.ok
    assert missing.reason == MISSING_TOKEN

    bad = verify_token(db_session, "garbage")
    assert bad.user is None
    assert bad.reason == INVALID_TOKEN

def test_verify_token_does_not_load_password(db_session):
    u = _user(db_session)
    user_id = u.id
    db_session.expunge_all()

    result = verify_token(db_session, issue_access_token(user_id))
    assert result.ok
    assert "password_hash" in sa.inspect(result.user).unloaded

def test_valid_token_reaches_handler(client, free_jwt):
    r = client.get("/tasks", headers={"Authorization": f"Bearer {free_jwt}"})
    assert r.status_code == 200
    assert r.json() == {"tasks": []}
