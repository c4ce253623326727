from promptnexus.db.database import SessionLocal
from promptnexus.models import Favorite, Follow, Prompt, PromptRating


def test_get_users_lists_public_profiles_with_prompts(client, register, create_prompt):
    register("alice")
    bob = register("bob")["user"]
    create_prompt(bob["id"], title="Bob prompt")

    users = client.get("/api/users").json()
    assert {u["username"] for u in users} == {"alice", "bob"}
    for user in users:
        assert "password" not in user
        assert "passwordHash" not in user

    bob_entry = next(u for u in users if u["username"] == "bob")
    assert [p["title"] for p in bob_entry["prompts"]] == ["Bob prompt"]


def test_get_user_by_username(client, register):
    register("alice", bio="hello")
    response = client.get("/api/users/ALICE")
    assert response.status_code == 200
    body = response.json()
    assert body["username"] == "alice"
    assert body["bio"] == "hello"
    assert body["followerCount"] == 0

    assert client.get("/api/users/ghost").status_code == 404


def test_admin_deletes_user_and_everything_goes(client, register, create_prompt):
    alice = register("alice")["user"]
    bob = register("bob")["user"]
    carol = register("carol")["user"]

    bob_prompt = create_prompt(bob["id"], title="Bob prompt")
    carol_prompt = create_prompt(carol["id"], title="Carol prompt")

    # alice 收藏并评分 bob 的提示词，bob 收藏并评分 carol 的提示词
    client.post(f"/api/prompts/{bob_prompt['id']}/favorite", json={"userId": alice["id"]})
    client.post(f"/api/prompts/{bob_prompt['id']}/rate", json={"rating": 5, "raterId": alice["id"]})
    client.post(f"/api/prompts/{carol_prompt['id']}/favorite", json={"userId": bob["id"]})
    client.post(f"/api/prompts/{carol_prompt['id']}/rate", json={"rating": 2, "raterId": bob["id"]})
    client.post("/api/users/carol/follow", json={"followerId": bob["id"]})
    client.post("/api/users/bob/follow", json={"followerId": alice["id"]})

    response = client.delete("/api/users/bob", params={"requesterId": alice["id"]})
    assert response.json() == {"success": True}

    assert client.get("/api/users/bob").status_code == 404
    assert [p["title"] for p in client.get("/api/prompts").json()] == ["Carol prompt"]

    db = SessionLocal()
    try:
        assert db.query(Prompt).filter(Prompt.author_id == bob["id"]).count() == 0
        assert db.query(Favorite).filter(Favorite.user_id == bob["id"]).count() == 0
        assert db.query(Favorite).filter(Favorite.prompt_id == bob_prompt["id"]).count() == 0
        assert db.query(PromptRating).filter(PromptRating.user_id == bob["id"]).count() == 0
        assert db.query(PromptRating).filter(PromptRating.prompt_id == bob_prompt["id"]).count() == 0
        assert db.query(Follow).count() == 0
    finally:
        db.close()

    carol_detail = client.get("/api/users/carol").json()
    assert carol_detail["followerCount"] == 0
    assert carol_detail["prompts"][0]["favoriteCount"] == 0
    assert carol_detail["prompts"][0]["rating"] == 0
    assert carol_detail["prompts"][0]["ratingCount"] == 0


def test_deleting_rater_recomputes_rating_of_other_prompts(client, register, create_prompt):
    alice = register("alice")["user"]
    bob = register("bob")["user"]
    carol = register("carol")["user"]
    prompt = create_prompt(carol["id"])
    url = f"/api/prompts/{prompt['id']}/rate"

    client.post(url, json={"rating": 1, "raterId": bob["id"]})
    before = client.post(url, json={"rating": 5, "raterId": alice["id"]}).json()
    assert (before["rating"], before["ratingCount"]) == (3.0, 2)

    client.delete("/api/users/bob", params={"requesterId": alice["id"]})

    after = client.get(f"/api/prompts/{prompt['id']}").json()
    assert (after["rating"], after["ratingCount"]) == (5.0, 1)

    # 之后再评分也基于剩余的评分计算
    again = client.post(url, json={"rating": 3, "raterId": carol["id"]}).json()
    assert (again["rating"], again["ratingCount"]) == (4.0, 2)


def test_delete_user_requires_admin(client, register):
    register("alice")
    bob = register("bob")["user"]
    register("carol")

    response = client.delete("/api/users/carol", params={"requesterId": bob["id"]})
    assert response.status_code == 403
    assert client.get("/api/users/carol").status_code == 200

    assert client.delete("/api/users/carol").status_code == 401


def test_delete_unknown_user(client, register):
    alice = register("alice")["user"]
    response = client.delete("/api/users/ghost", params={"requesterId": alice["id"]})
    assert response.status_code == 404


def test_update_profile_only_changes_given_fields(client, register):
    register("alice", bio="old bio")
    response = client.put("/api/users/profile", json={
        "username": "alice", "displayName": "Alice Liddell", "linkedinUrl": "https://linkedin.com/in/alice"
    })
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["displayName"] == "Alice Liddell"
    assert user["linkedinUrl"] == "https://linkedin.com/in/alice"
    assert user["bio"] == "old bio"


def test_update_profile_of_another_user_is_forbidden(client, register):
    register("alice")
    bob = register("bob")["user"]
    register("carol")

    response = client.put("/api/users/profile", json={
        "username": "carol", "bio": "hacked", "requesterId": bob["id"]
    })
    assert response.status_code == 403
    assert client.get("/api/users/carol").json()["bio"] != "hacked"


def test_update_profile_validation(client, register):
    register("alice")
    assert client.put("/api/users/profile", json={"bio": "x"}).status_code == 400
    assert client.put("/api/users/profile", json={"username": "ghost", "bio": "x"}).status_code == 404
    response = client.put("/api/users/profile", json={"username": "alice", "displayName": "  "})
    assert response.status_code == 400


def test_promote_and_demote(client, register):
    alice = register("alice")["user"]
    bob = register("bob")["user"]

    response = client.put("/api/users/bob/admin", json={"isAdmin": True, "requesterId": alice["id"]})
    assert response.json()["user"]["isAdmin"] is True

    response = client.put("/api/users/bob/admin", json={"isAdmin": False, "requesterId": alice["id"]})
    assert response.json()["user"]["isAdmin"] is False

    response = client.put("/api/users/alice/admin", json={"isAdmin": False, "requesterId": bob["id"]})
    assert response.status_code == 403


def test_follow_toggle(client, register):
    alice = register("alice")["user"]
    register("bob")

    on = client.post("/api/users/bob/follow", json={"followerId": alice["id"]}).json()
    assert on == {"success": True, "following": True, "followerCount": 1}

    status = client.get("/api/users/bob/follow", params={"followerId": alice["id"]}).json()
    assert status["following"] is True

    off = client.post("/api/users/bob/follow", json={"followerId": alice["id"]}).json()
    assert off == {"success": True, "following": False, "followerCount": 0}

    assert client.get("/api/users/alice").json()["followingCount"] == 0


def test_cannot_follow_self(client, register):
    alice = register("alice")["user"]
    response = client.post("/api/users/alice/follow", json={"followerId": alice["id"]})
    assert response.status_code == 400
    assert response.json()["message"] == "不能关注自己"


def test_rebuild_avatars(client, register):
    alice = register("alice")["user"]
    bob = register("bob", avatarUrl="https://example.com/bob.png")["user"]

    assert client.post("/api/users/avatars/rebuild", json={"requesterId": bob["id"]}).status_code == 403

    body = client.post("/api/users/avatars/rebuild", json={"requesterId": alice["id"]}).json()
    assert body == {"success": True, "updated": 1}
    assert "seed=bob" in client.get("/api/users/bob").json()["avatarUrl"]


def test_follow_conflict_reports_stored_state(client, register, monkeypatch):
    from promptnexus.api import users as users_api

    alice = register("alice")["user"]
    register("bob")
    client.post("/api/users/bob/follow", json={"followerId": alice["id"]})

    # 第一次查询看不到已有的关注记录，插入时触发唯一约束冲突
    original = users_api.find_follow
    calls = []

    def lookup(db, follower_id, following_id):
        calls.append(follower_id)
        if len(calls) == 1:
            return None
        return original(db, follower_id, following_id)

    monkeypatch.setattr(users_api, "find_follow", lookup)
    body = client.post("/api/users/bob/follow", json={"followerId": alice["id"]}).json()
    assert body == {"success": True, "following": True, "followerCount": 1}
