import uuid

from sqlalchemy import func, select

from taskdeck.models.task import Task

def auth(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

def create(client, jwt: str, **body) -> dict:
    r = client.post("/tasks", json=body, headers=auth(jwt))
    assert r.status_code == 201, r.text
    return r.json()["task"]

def test_create_task_defaults(client, free_jwt):
    r = client.post("/tasks", json={"title": "buy milk"}, headers=auth(free_jwt))
    assert r.status_code == 201, r.text

    body = r.json()
    assert body["message"] == "Task created successfully"
    task = body["task"]
    assert task["title"] == "buy milk"
    assert task["status"] == "open"
    assert task["priority"] == "medium"
    assert task["description"] is None
    assert task["dueDate"] is None
    assert task["tags"] == []
    uuid.UUID(task["id"])
    uuid.UUID(task["userId"])
    assert "createdAt" in task and "updatedAt" in task

def test_create_task_with_all_fields(client, free_jwt):
    task = create(
        client,
        free_jwt,
        title="quarterly report",
        description="numbers for q3",
        priority="high",
        dueDate="2026-11-01T09:00:00Z",
        tags=["work", "finance"],
    )
    assert task["priority"] == "high"
    assert task["description"] == "numbers for q3"
    assert task["dueDate"].startswith("2026-11-01T09:00:00")
    assert task["tags"] == ["work", "finance"]

def test_create_with_blank_due_date_leaves_it_absent(client, free_jwt):
    task = create(client, free_jwt, title="no deadline", dueDate="")
    assert task["dueDate"] is None

def test_create_without_title_is_400_and_persists_nothing(client, db_session, free_jwt):
    for body in ({}, {"title": ""}, {"title": "   "}, {"description": "orphan"}):
        r = client.post("/tasks", json=body, headers=auth(free_jwt))
        assert r.status_code == 400, r.text
        assert r.json() == {"message": "Task title is required"}

    assert db_session.scalar(select(func.count()).select_from(Task)) == 0

def test_create_with_bad_priority_is_400(client, free_jwt):
    r = client.post("/tasks", json={"title": "x", "priority": "whenever"}, headers=auth(free_jwt))
    assert r.status_code == 400
    assert "priority" in r.json()["message"]

def test_title_longer_than_column_is_400(client, db_session, free_jwt):
    r = client.post("/tasks", json={"title": "x" * 301}, headers=auth(free_jwt))
    assert r.status_code == 400, r.text
    assert r.json()["message"].startswith("title:")
    assert db_session.scalar(select(func.count()).select_from(Task)) == 0

    task = create(client, free_jwt, title="x" * 300)
    r = client.put(f"/tasks/{task['id']}", json={"title": "y" * 301}, headers=auth(free_jwt))
    assert r.status_code == 400, r.text
    assert r.json()["message"].startswith("title:")

def test_list_filters_by_status_and_priority(client, free_jwt):
    a = create(client, free_jwt, title="a", priority="high")
    b = create(client, free_jwt, title="b", priority="low")
    create(client, free_jwt, title="c", priority="high")
    r = client.put(f"/tasks/{a['id']}", json={"status": "completed"}, headers=auth(free_jwt))
    assert r.status_code == 200

    r = client.get("/tasks", params={"priority": "high"}, headers=auth(free_jwt))
    assert sorted(t["title"] for t in r.json()["tasks"]) == ["a", "c"]

    r = client.get("/tasks", params={"status": "completed"}, headers=auth(free_jwt))
    assert [t["title"] for t in r.json()["tasks"]] == ["a"]

    r = client.get("/tasks", params={"status": "open", "priority": "low"}, headers=auth(free_jwt))
    assert [t["id"] for t in r.json()["tasks"]] == [b["id"]]

    # empty filter values are ignored
    r = client.get("/tasks", params={"status": "", "priority": ""}, headers=auth(free_jwt))
    assert len(r.json()["tasks"]) == 3

def test_list_rejects_unknown_filter_value(client, free_jwt):
    r = client.get("/tasks", params={"status": "sleeping"}, headers=auth(free_jwt))
    assert r.status_code == 400

def test_list_sorting(client, free_jwt):
    for title in ("bravo", "alpha", "charlie"):
        create(client, free_jwt, title=title)

    r = client.get("/tasks", params={"sortBy": "title", "sortOrder": "asc"}, headers=auth(free_jwt))
    assert [t["title"] for t in r.json()["tasks"]] == ["alpha", "bravo", "charlie"]

    r = client.get("/tasks", params={"sortBy": "title", "sortOrder": "desc"}, headers=auth(free_jwt))
    assert [t["title"] for t in r.json()["tasks"]] == ["charlie", "bravo", "alpha"]

    # default: newest first
    r = client.get("/tasks", headers=auth(free_jwt))
    assert [t["title"] for t in r.json()["tasks"]] == ["charlie", "alpha", "bravo"]

    r = client.get("/tasks", params={"sortBy": "created_at", "sortOrder": "asc"}, headers=auth(free_jwt))
    assert [t["title"] for t in r.json()["tasks"]] == ["bravo", "alpha", "charlie"]

def test_list_rejects_unknown_sort_field(client, free_jwt):
    r = client.get("/tasks", params={"sortBy": "password"}, headers=auth(free_jwt))
    assert r.status_code == 400
    assert "password" in r.json()["message"]

def test_get_single_task(client, free_jwt):
    t = create(client, free_jwt, title="look me up")
    r = client.get(f"/tasks/{t['id']}", headers=auth(free_jwt))
    assert r.status_code == 200
    assert r.json()["task"]["title"] == "look me up"

def test_update_is_partial(client, free_jwt):
    t = create(client, free_jwt, title="draft", description="v1", priority="low", tags=["a"])

    r = client.put(f"/tasks/{t['id']}", json={"priority": "urgent"}, headers=auth(free_jwt))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Task updated successfully"
    updated = body["task"]
    assert updated["priority"] == "urgent"
    assert updated["title"] == "draft"
    assert updated["description"] == "v1"
    assert updated["tags"] == ["a"]

def test_update_due_date_null_clears_and_omitted_keeps(client, free_jwt):
    t = create(client, free_jwt, title="deadline", dueDate="2026-12-24T18:00:00Z")

    r = client.put(f"/tasks/{t['id']}", json={"title": "renamed"}, headers=auth(free_jwt))
    assert r.status_code == 200
    assert r.json()["task"]["dueDate"].startswith("2026-12-24T18:00:00")

    r = client.put(f"/tasks/{t['id']}", json={"dueDate": None}, headers=auth(free_jwt))
    assert r.status_code == 200
    assert r.json()["task"]["dueDate"] is None
    assert r.json()["task"]["title"] == "renamed"

def test_update_description_and_tags_nullable(client, free_jwt):
    t = create(client, free_jwt, title="x", description="to be removed", tags=["t"])

    r = client.put(f"/tasks/{t['id']}", json={"description": None, "tags": None}, headers=auth(free_jwt))
    assert r.status_code == 200
    assert r.json()["task"]["description"] is None
    assert r.json()["task"]["tags"] == []

def test_update_rejects_null_for_required_fields(client, free_jwt):
    t = create(client, free_jwt, title="keep me")

    for field in ("title", "status", "priority"):
        r = client.put(f"/tasks/{t['id']}", json={field: None}, headers=auth(free_jwt))
        assert r.status_code == 400, field

    r = client.put(f"/tasks/{t['id']}", json={"title": ""}, headers=auth(free_jwt))
    assert r.status_code == 400

    r = client.get(f"/tasks/{t['id']}", headers=auth(free_jwt))
    assert r.json()["task"]["title"] == "keep me"

def test_update_missing_task_is_404(client, free_jwt):
    r = client.put(f"/tasks/{uuid.uuid4()}", json={"title": "x"}, headers=auth(free_jwt))
    assert r.status_code == 404
    assert r.json() == {"message": "Task not found"}

def test_malformed_id_is_404(client, free_jwt):
    assert client.get("/tasks/not-a-uuid", headers=auth(free_jwt)).status_code == 404
    assert client.delete("/tasks/not-a-uuid", headers=auth(free_jwt)).status_code == 404

def test_delete_task(client, db_session, free_jwt):
    t = create(client, free_jwt, title="temporary")

    r = client.delete(f"/tasks/{t['id']}", headers=auth(free_jwt))
    assert r.status_code == 200
    assert r.json() == {"message": "Task deleted successfully"}
    assert db_session.get(Task, uuid.UUID(t["id"])) is None

    r = client.delete(f"/tasks/{t['id']}", headers=auth(free_jwt))
    assert r.status_code == 404
