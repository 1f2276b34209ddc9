import os

# must be set before taskdeck.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("APP_ENV", "test")

import time
import uuid

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from taskdeck.db import get_db, make_engine
from taskdeck.main import create_app
from taskdeck.models import Base
from taskdeck.models.enums import Plan, SubscriptionStatus
from taskdeck.models.user import User

@pytest.fixture()
def db_session() -> Session:
    engine = make_engine(os.environ["DATABASE_URL"])

    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session: Session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()

@pytest.fixture()
def app(db_session: Session) -> FastAPI:
    app = create_app()

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return app

@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)

def _login(client, email: str) -> str:
    r = client.post("/auth/request-link", json={"email": email})
    assert r.status_code == 200, r.text
    token = r.json()["token"]

    r = client.post("/auth/redeem", json={"token": token})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]

def _auth(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

@pytest.fixture()
def make_user(client, db_session):
    """Sign a user in through the magic-link flow and put them on ``plan``; returns a bearer token."""

    def _make(email: str | None = None, plan: Plan = Plan.free) -> str:
        # unique per test run to avoid collisions
        email = email or f"user+{int(time.time())}_{uuid.uuid4().hex[:8]}@example.com"
        jwt = _login(client, email)
        if plan != Plan.free:
            user = db_session.scalar(select(User).where(User.email == email.lower()))
            assert user is not None
            user.plan = plan
            user.subscription_status = SubscriptionStatus.active
            db_session.commit()
        return jwt

    return _make

@pytest.fixture()
def free_jwt(make_user) -> str:
    return make_user(plan=Plan.free)

@pytest.fixture()
def pro_jwt(make_user) -> str:
    return make_user(plan=Plan.pro)
