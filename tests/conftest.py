import os

# Settings are read at import time, so configure before importing the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["OPENAI_API_KEY"] = ""
os.environ["RESPONSE_CACHE_ENABLED"] = "false"

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from blogsmith.main import app
from blogsmith.core.database import Base, get_db
from blogsmith.api.dependencies import get_generation_gateway
from blogsmith.services.generation_service import GenerationGateway
from blogsmith.services.response_cache import response_cache


def make_completion(content):
    """Build an object shaped like an OpenAI chat completion response"""
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def engine():
    # One shared in-memory connection so every session sees the same data
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def provider_client():
    """Stand-in for the OpenAI client; tests set chat.completions.create behaviour"""
    client = MagicMock()
    client.chat.completions.create.return_value = make_completion(
        '{"title": "A Default Title", "content": "Default generated content body."}'
    )
    return client


@pytest.fixture
def gateway(provider_client):
    return GenerationGateway(client=provider_client, models=["test-model"])


@pytest.fixture
def client(session_factory, gateway):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_generation_gateway] = lambda: gateway
    response_cache.clear()

    yield TestClient(app)

    app.dependency_overrides.clear()
    response_cache.clear()


def signup(client, name="Alice", email="alice@example.com", password="secret123"):
    res = client.post("/auth/signup", json={"name": name, "email": email, "password": password})
    assert res.status_code == 201, res.text
    return res.json()["data"]


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    return signup(client)


@pytest.fixture
def bob(client):
    return signup(client, name="Bob", email="bob@example.com", password="hunter22")
