def test_health_and_version(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"

    v = client.get("/version")
    assert v.status_code == 200
    assert v.json().get("app") == "projects-api"


def test_audit_log_records_mutations(client):
    created = client.post("/", json={"title": "Audit me"}).json()
    client.patch(f"/{created['id']}", json={"completed": True})
    client.delete(f"/{created['id']}")
    client.delete(f"/{created['id']}")

    res = client.get("/api/logs/search", params={"page": 1, "size": 50})
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 4
    # newest first
    assert [(it["action"], it["outcome"]) for it in body["items"]] == [
        ("DELETE_PROJECT", "NOT_FOUND"),
        ("DELETE_PROJECT", "OK"),
        ("UPDATE_PROJECT", "OK"),
        ("CREATE_PROJECT", "OK"),
    ]
    assert all(it["project_id"] == created["id"] for it in body["items"])

    only_updates = client.get("/api/logs/search", params={"action": "UPDATE_PROJECT"}).json()
    assert only_updates["total"] == 1
    upd = only_updates["items"][0]
    assert upd["payload"] == {"completed": True}
    assert upd["before"]["completed"] is None
    assert upd["after"]["completed"] is True

    by_project = client.get("/api/logs/search", params={"project_id": created["id"], "outcome": "OK"}).json()
    assert by_project["total"] == 3


def test_audit_log_records_validation_failure(client):
    res = client.post("/", json={"due": "not a date"})
    assert res.status_code == 400

    logs = client.get("/api/logs/search", params={"action": "CREATE_PROJECT"}).json()
    assert logs["total"] == 1
    rec = logs["items"][0]
    assert rec["outcome"] == "INVALID"
    assert rec["project_id"] is None
    assert "title" in rec["detail"]
    assert rec["payload"] == {"due": "not a date"}


def test_audit_search_by_text(client):
    client.post("/", json={"title": "needle in payload"})
    client.post("/", json={"title": "other"})
    found = client.get("/api/logs/search", params={"query": "needle"}).json()
    assert found["total"] == 1
    assert found["items"][0]["after"]["title"] == "needle in payload"
