import pytest


@pytest.fixture
def users(register):
    admin = register("alice")["user"]
    member = register("bob")["user"]
    return admin, member


def test_submit_feedback(client):
    response = client.post("/api/feedback", json={"from": "bob", "message": "Great site"})
    assert response.status_code == 200
    feedback = response.json()["feedback"]
    assert feedback["from"] == "bob"
    assert feedback["message"] == "Great site"
    assert feedback["read"] is False


def test_submit_feedback_requires_fields(client):
    response = client.post("/api/feedback", json={"from": "bob"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "缺少必填字段"}

    assert client.post("/api/feedback", json={"from": " ", "message": "hi"}).status_code == 400


def test_feedback_admin_workflow(client, users):
    admin, _ = users
    first = client.post("/api/feedback", json={"from": "bob", "message": "first"}).json()["feedback"]
    client.post("/api/feedback", json={"from": "carol", "message": "second"})

    listed = client.get("/api/feedback", params={"requesterId": admin["id"]}).json()
    assert [f["message"] for f in listed] == ["second", "first"]

    count = client.get("/api/feedback/unread-count", params={"requesterId": admin["id"]}).json()
    assert count == {"success": True, "count": 2}

    marked = client.put(f"/api/feedback/{first['id']}/read", json={"requesterId": admin["id"]}).json()
    assert marked["feedback"]["read"] is True
    count = client.get("/api/feedback/unread-count", params={"requesterId": admin["id"]}).json()
    assert count["count"] == 1

    url = f"/api/feedback/{first['id']}"
    assert client.delete(url, params={"requesterId": admin["id"]}).json() == {"success": True}
    assert client.delete(url, params={"requesterId": admin["id"]}).json() == {"success": True}
    listed = client.get("/api/feedback", params={"requesterId": admin["id"]}).json()
    assert [f["message"] for f in listed] == ["second"]


def test_feedback_management_requires_admin(client, users):
    _, member = users
    feedback = client.post("/api/feedback", json={"from": "bob", "message": "hi"}).json()["feedback"]

    assert client.get("/api/feedback", params={"requesterId": member["id"]}).status_code == 403
    assert client.get("/api/feedback").status_code == 401
    response = client.put(f"/api/feedback/{feedback['id']}/read", json={"requesterId": member["id"]})
    assert response.status_code == 403
    response = client.delete(f"/api/feedback/{feedback['id']}", params={"requesterId": member["id"]})
    assert response.status_code == 403


def test_mark_unknown_feedback(client, users):
    admin, _ = users
    response = client.put("/api/feedback/missing/read", json={"requesterId": admin["id"]})
    assert response.status_code == 404


def test_setting_defaults(client):
    assert client.get("/api/settings/ads_enabled").json() == {"success": True, "value": "false"}
    assert client.get("/api/settings/ad_config").json()["value"] == "{}"
    assert client.get("/api/settings/unknown_key").json() == {"success": True, "value": None}


def test_set_setting_upserts(client, users):
    admin, _ = users
    url = "/api/settings/ads_enabled"

    response = client.put(url, json={"value": "true", "requesterId": admin["id"]})
    assert response.json() == {"success": True}
    assert client.get(url).json()["value"] == "true"

    client.put(url, json={"value": "false", "requesterId": admin["id"]})
    assert client.get(url).json()["value"] == "false"

    listed = client.get("/api/settings", params={"requesterId": admin["id"]}).json()
    assert [(s["key"], s["value"]) for s in listed] == [("ads_enabled", "false")]


def test_set_setting_requires_admin(client, users):
    _, member = users
    response = client.put("/api/settings/ads_enabled", json={"value": "true", "requesterId": member["id"]})
    assert response.status_code == 403
    assert client.get("/api/settings/ads_enabled").json()["value"] == "false"
    assert client.get("/api/settings", params={"requesterId": member["id"]}).status_code == 403
