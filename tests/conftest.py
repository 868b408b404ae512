"""Pytest configuration and fixtures."""

import os
import uuid
from typing import Iterator, Optional

# Settings are read at import time, so they must be in place before fitlog loads.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("FRONTEND_ORIGIN", "http://frontend.test")
os.environ.setdefault("BACKEND_URL", "http://api.test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from fitlog import models  # noqa: F401 - register tables
from fitlog.api.deps import current_user_id, get_custody, get_garmin_client
from fitlog.app import create_app
from fitlog.core import SECRET_KEY, GarminConfig, get_session
from fitlog.models import User
from fitlog.services.custody import SecretCustody
from fitlog.services.garmin import GarminClient

from .helpers import FakeGarmin


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def user(db_session: Session) -> User:
    user = User(email="runner@example.com", name="Runner")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def connected_user(db_session: Session, user: User) -> User:
    user.garmin_access_token = "A1"
    user.garmin_access_token_secret = "AS1"
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def garmin_config() -> GarminConfig:
    return GarminConfig(
        consumer_key="K1",
        consumer_secret="S1",
        callback_url="http://api.test/api/auth/garmin/callback",
        settings_url="http://frontend.test/settings",
        signin_url="http://frontend.test/auth/signin",
    )


@pytest.fixture
def garmin() -> FakeGarmin:
    return FakeGarmin()


@pytest.fixture
def garmin_client(garmin_config: GarminConfig, garmin: FakeGarmin) -> GarminClient:
    return GarminClient(garmin_config, transport=garmin.transport)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_user_id(user: User) -> Optional[uuid.UUID]:
    """The user the browser is signed in as; override to ``None`` for signed-out."""

    return user.id


@pytest.fixture
def app(db_session, garmin_config, garmin_client, clock, session_user_id):
    app = create_app(garmin_config)
    app.dependency_overrides[get_session] = lambda: db_session
    app.dependency_overrides[current_user_id] = lambda: session_user_id
    app.dependency_overrides[get_garmin_client] = lambda: garmin_client
    app.dependency_overrides[get_custody] = lambda: SecretCustody(SECRET_KEY, clock=clock)
    return app


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
