from fastapi.testclient import TestClient

from promptnexus.main import app
from promptnexus.services.aggregation import DEFAULT_DESCRIPTION
from promptnexus.services.text_service import TextService, get_text_service


def test_create_prompt_defaults(register, create_prompt):
    bob = register("bob")["user"]
    prompt = create_prompt(bob["id"])

    assert prompt["title"] == "Test"
    assert prompt["content"] == "1234567890"
    assert prompt["authorId"] == bob["id"]
    assert prompt["author"]["username"] == "bob"
    assert prompt["viewCount"] == 0
    assert prompt["copyCount"] == 0
    assert prompt["rating"] == 0
    assert prompt["ratingCount"] == 0
    assert prompt["favoriteCount"] == 0
    assert prompt["isFavorited"] is False
    assert prompt["category"] == "Other"
    assert prompt["tags"] == []
    assert prompt["description"] == DEFAULT_DESCRIPTION
    assert prompt["createdAt"]


def test_create_prompt_normalizes_tags_model_and_category(register, create_prompt):
    bob = register("bob")["user"]
    prompt = create_prompt(
        bob["id"], tags=" sql, python ,,sql", model="gpt-4o", category="coding"
    )
    assert prompt["tags"] == ["sql", "python"]
    assert prompt["model"] == "GPT-4o"
    assert prompt["modelKind"] == "known"
    assert prompt["category"] == "Coding"

    custom = create_prompt(bob["id"], model="My Finetune", tags=["a", " b "])
    assert custom["model"] == "My Finetune"
    assert custom["modelKind"] == "custom"
    assert custom["tags"] == ["a", "b"]


def test_create_prompt_missing_fields(client, register):
    bob = register("bob")["user"]
    response = client.post("/api/prompts", json={"title": "Test", "authorId": bob["id"]})
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "缺少必填字段"}

    response = client.post("/api/prompts", json={"title": "Test", "content": "1234567890"})
    assert response.status_code == 400


def test_create_prompt_validation(client, register):
    bob = register("bob")["user"]
    response = client.post("/api/prompts", json={
        "title": "Test", "content": "too short", "authorId": bob["id"]
    })
    assert response.status_code == 400
    assert response.json()["message"] == "提示词内容至少需要10个字符"

    response = client.post("/api/prompts", json={
        "title": "Test", "content": "1234567890", "category": "Cooking", "authorId": bob["id"]
    })
    assert response.status_code == 400
    assert response.json()["message"] == "请选择有效的分类"


def test_create_prompt_with_token_uses_session_user(client, register):
    data = register("bob")
    response = client.post(
        "/api/prompts",
        json={"title": "Test", "content": "1234567890"},
        headers={"Authorization": f"Bearer {data['token']}"},
    )
    assert response.status_code == 200
    assert response.json()["prompt"]["authorId"] == data["user"]["id"]


def test_list_prompts_newest_first_with_favorites(client, register, create_prompt):
    bob = register("bob")["user"]
    first = create_prompt(bob["id"], title="First")
    second = create_prompt(bob["id"], title="Second")
    client.post(f"/api/prompts/{first['id']}/favorite", json={"userId": bob["id"]})

    listed = client.get("/api/prompts", params={"userId": bob["id"]}).json()
    assert [p["id"] for p in listed] == [second["id"], first["id"]]
    assert listed[1]["isFavorited"] is True
    assert listed[1]["favoriteCount"] == 1
    assert listed[0]["isFavorited"] is False

    anonymous = client.get("/api/prompts").json()
    assert all(p["isFavorited"] is False for p in anonymous)
    assert anonymous[1]["favoriteCount"] == 1


def test_list_prompts_filters(client, register, create_prompt):
    bob = register("bob")["user"]
    create_prompt(bob["id"], title="SQL helper", category="Coding", model="GPT-4o")
    create_prompt(bob["id"], title="Blog writer", category="Writing", content="Write a blog post about cats")

    coding = client.get("/api/prompts", params={"category": "Coding"}).json()
    assert [p["title"] for p in coding] == ["SQL helper"]

    by_model = client.get("/api/prompts", params={"model": "gpt-4o"}).json()
    assert [p["title"] for p in by_model] == ["SQL helper"]

    search = client.get("/api/prompts", params={"search": "CATS"}).json()
    assert [p["title"] for p in search] == ["Blog writer"]

    assert len(client.get("/api/prompts", params={"category": "All"}).json()) == 2


def test_get_prompt_not_found(client):
    response = client.get("/api/prompts/does-not-exist")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_update_prompt_by_author(client, register, create_prompt):
    bob = register("bob")["user"]
    prompt = create_prompt(bob["id"])

    response = client.put(f"/api/prompts/{prompt['id']}", json={
        "title": "Better title", "content": "A much better content", "tags": ["x"],
        "requesterId": bob["id"]
    })
    assert response.status_code == 200
    updated = response.json()["prompt"]
    assert updated["title"] == "Better title"
    assert updated["content"] == "A much better content"
    assert updated["tags"] == ["x"]


def test_update_prompt_by_non_author_is_forbidden(client, register, create_prompt):
    alice = register("alice")["user"]
    bob = register("bob")["user"]
    prompt = create_prompt(bob["id"])

    response = client.put(f"/api/prompts/{prompt['id']}", json={
        "title": "Hijacked", "content": "1234567890 hijacked", "requesterId": alice["id"]
    })
    assert response.status_code == 403
    assert response.json()["success"] is False

    unchanged = client.get(f"/api/prompts/{prompt['id']}").json()
    assert unchanged["title"] == "Test"
    assert unchanged["content"] == "1234567890"


def test_update_unknown_prompt(client, register):
    bob = register("bob")["user"]
    response = client.put("/api/prompts/missing", json={"title": "Test", "requesterId": bob["id"]})
    assert response.status_code == 404


def test_delete_prompt_requires_author_or_admin(client, register, create_prompt):
    alice = register("alice")["user"]
    bob = register("bob")["user"]
    carol = register("carol")["user"]
    first = create_prompt(bob["id"])
    second = create_prompt(bob["id"])

    response = client.delete(f"/api/prompts/{first['id']}")
    assert response.status_code == 401

    response = client.delete(f"/api/prompts/{first['id']}", params={"requesterId": carol["id"]})
    assert response.status_code == 403

    response = client.delete(f"/api/prompts/{first['id']}", params={"requesterId": bob["id"]})
    assert response.json() == {"success": True}

    response = client.delete(f"/api/prompts/{second['id']}", params={"requesterId": alice["id"]})
    assert response.json() == {"success": True}

    assert client.get("/api/prompts").json() == []


def test_delete_prompt_is_idempotent(client, register, create_prompt):
    bob = register("bob")["user"]
    prompt = create_prompt(bob["id"])
    url = f"/api/prompts/{prompt['id']}"
    assert client.delete(url, params={"requesterId": bob["id"]}).json() == {"success": True}
    assert client.delete(url, params={"requesterId": bob["id"]}).json() == {"success": True}


def test_optimize_falls_back_to_original(client):
    response = client.post("/api/prompts/optimize", json={"content": "write a poem"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "content": "write a poem"}


class FakeTextService(TextService):
    def __init__(self):
        super().__init__(api_key="test-key")

    def generate_description(self, content):
        return "Summarizes the given text."

    def optimize_prompt(self, original):
        return original.upper()


def test_description_generated_in_background(client, register):
    app.dependency_overrides[get_text_service] = FakeTextService
    bob = register("bob")["user"]

    response = client.post("/api/prompts", json={
        "title": "Test", "content": "1234567890", "authorId": bob["id"]
    })
    prompt_id = response.json()["prompt"]["id"]

    fetched = client.get(f"/api/prompts/{prompt_id}").json()
    assert fetched["description"] == "Summarizes the given text."

    optimized = client.post("/api/prompts/optimize", json={"content": "abc"}).json()
    assert optimized["content"] == "ABC"


def test_explicit_description_is_kept(client, register, create_prompt):
    app.dependency_overrides[get_text_service] = FakeTextService
    bob = register("bob")["user"]
    prompt = create_prompt(bob["id"], description="Mine")
    assert client.get(f"/api/prompts/{prompt['id']}").json()["description"] == "Mine"


class BrokenTextService(TextService):
    def __init__(self):
        super().__init__(api_key="test-key")

    def optimize_prompt(self, original):
        raise RuntimeError("boom")


def test_unexpected_error_uses_error_envelope():
    app.dependency_overrides[get_text_service] = BrokenTextService
    client = TestClient(app, raise_server_exceptions=False)
    response = client.post("/api/prompts/optimize", json={"content": "abc"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "服务器内部错误"}


def test_error_envelope_is_documented(client):
    schema = client.get("/openapi.json").json()
    assert "ErrorResponse" in schema["components"]["schemas"]
    responses = schema["paths"]["/api/prompts/{prompt_id}"]["get"]["responses"]
    assert {"400", "404"} <= set(responses)
