import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["LLM_API_KEY"] = "test-key"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_llm_client, get_quiz_generator
from app.db.base import Base
from app.db.session import engine
from app.main import app
from fakes import FakeLLM, make_generator, signup


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def install_llm():
    """Route the app's LLM dependencies to a scripted FakeLLM."""

    def install(*responses, configured=True):
        llm = FakeLLM(*responses, configured=configured)
        app.dependency_overrides[get_llm_client] = lambda: llm
        app.dependency_overrides[get_quiz_generator] = lambda: make_generator(llm)
        return llm

    return install


@pytest.fixture
def user(client):
    return signup(client)


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {user['token']}"}


@pytest.fixture
def course(client, auth_headers):
    r = client.post(
        "/api/courses",
        headers=auth_headers,
        json={"name": "Algorithms", "provider": "Coursera", "mainSkills": ["graphs", "sorting"]},
    )
    assert r.status_code == 201, r.text
    return r.json()
