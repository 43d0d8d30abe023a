"""Shared fixtures: in-memory database and API client.

Settings are read at import time, so the environment is prepared before any
application module is imported.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models.models  # noqa: F401
from core.database import get_session
from core.security import create_access_token
from main import app


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
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def auth_headers(owner_id):
    return {"Authorization": f"Bearer {create_access_token({'user_id': owner_id})}"}


@pytest.fixture
def other_auth_headers():
    return {"Authorization": f"Bearer {create_access_token({'user_id': uuid.uuid4()})}"}
