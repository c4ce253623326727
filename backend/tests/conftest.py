import os

# 必须在导入应用之前设置，测试使用内存数据库
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient

from promptnexus.db.database import Base, engine
from promptnexus.main import app


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    def _register(username, password="secret123", display_name=None, **extra):
        payload = {
            "username": username,
            "password": password,
            "displayName": display_name or username.title(),
        }
        payload.update(extra)
        response = client.post("/api/register", json=payload)
        assert response.status_code == 200, response.text
        return response.json()
    return _register


@pytest.fixture
def create_prompt(client):
    def _create(author_id, title="Test", content="1234567890", **extra):
        payload = {"title": title, "content": content, "authorId": author_id}
        payload.update(extra)
        response = client.post("/api/prompts", json=payload)
        assert response.status_code == 200, response.text
        return response.json()["prompt"]
    return _create
