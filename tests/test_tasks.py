# tests/test_tasks.py

from __future__ import annotations

import pytest
from postgrest.exceptions import APIError

from app.modules.tasks.schemas import TaskStatus, TaskUpdate
from app.modules.tasks.service import TaskService

from conftest import MISSING_ID, add_member, create_task


def history_of(db, task_id: str) -> list[tuple[str, str]]:
    rows = sorted((r for r in db.tables["task_history"] if r["task_id"] == task_id), key=lambda r: r["changed_at"])
    return [(r["old_status"], r["new_status"]) for r in rows]


def fail_history_writes(db, monkeypatch) -> None:
    original = db.insert_rows

    def insert_rows(table, payload):
        if table == "task_history":
            raise APIError({"code": "53100", "message": "could not extend file: No space left on device"})
        return original(table, payload)

    monkeypatch.setattr(db, "insert_rows", insert_rows)


def test_create_task_defaults_and_history(client, db, alice, household) -> None:
    task = create_task(client, household, alice, title="  Take out trash  ")
    assert task["title"] == "Take out trash"
    assert task["status"] == "To Do"
    assert task["completed"] is False
    assert task["priority"] == "medium"
    assert task["category"] == "General"
    assert task["created_by"] == alice.id
    assert history_of(db, task["id"]) == [("created", "To Do")]


def test_create_task_requires_membership(client, bob, household) -> None:
    response = client.post("/api/v1/tasks", json={"household_id": household["id"], "title": "Sneaky"}, headers=bob.headers)
    assert response.status_code == 403


def test_create_task_in_missing_household(client, admin) -> None:
    response = client.post("/api/v1/tasks", json={"household_id": MISSING_ID, "title": "Ghost"}, headers=admin.headers)
    assert response.status_code == 404


def test_create_task_with_malformed_household_id(client, admin) -> None:
    response = client.post("/api/v1/tasks", json={"household_id": "missing", "title": "Ghost"}, headers=admin.headers)
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid identifier"}


def test_failed_history_write_discards_new_task(client, db, alice, household, monkeypatch) -> None:
    fail_history_writes(db, monkeypatch)
    response = client.post("/api/v1/tasks", json={"household_id": household["id"], "title": "Mop"}, headers=alice.headers)
    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}
    assert db.tables["tasks"] == []
    assert db.tables["task_history"] == []


def test_assignee_must_belong_to_household(client, alice, household) -> None:
    other = client.post("/api/v1/households", json={"name": "Lake House"}, headers=alice.headers).json()
    stranger = add_member(client, other, alice, name="Stranger")
    response = client.post(
        "/api/v1/tasks",
        json={"household_id": household["id"], "title": "Mop", "assigned_to": stranger["id"]},
        headers=alice.headers,
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Tasks can only be assigned to members of the same household"}


def test_create_task_validation(client, alice, household) -> None:
    url = "/api/v1/tasks"
    assert client.post(url, json={"household_id": household["id"], "title": "   "}, headers=alice.headers).status_code == 400
    assert client.post(url, json={"household_id": household["id"], "title": "x" * 101}, headers=alice.headers).status_code == 400
    bad_status = {"household_id": household["id"], "title": "Dust", "status": "Pending"}
    assert client.post(url, json=bad_status, headers=alice.headers).status_code == 400


def test_complete_task_records_transition(client, db, alice, household) -> None:
    task = create_task(client, household, alice)
    response = client.put(f"/api/v1/tasks/{task['id']}", json={"completed": True}, headers=alice.headers)
    assert response.status_code == 200
    assert response.json()["status"] == "Done"
    assert response.json()["completed"] is True
    assert history_of(db, task["id"]) == [("created", "To Do"), ("To Do", "Done")]


def test_double_toggle_restores_status(client, db, alice, household) -> None:
    task = create_task(client, household, alice, status="In Progress")
    url = f"/api/v1/tasks/{task['id']}"

    client.put(url, json={"completed": True}, headers=alice.headers)
    reopened = client.put(url, json={"completed": False}, headers=alice.headers)
    assert reopened.json()["status"] == "In Progress"
    assert history_of(db, task["id"]) == [
        ("created", "In Progress"),
        ("In Progress", "Done"),
        ("Done", "In Progress"),
    ]


def test_reopen_task_created_as_done(client, alice, household) -> None:
    task = create_task(client, household, alice, status="Done")
    reopened = client.put(f"/api/v1/tasks/{task['id']}", json={"completed": False}, headers=alice.headers)
    assert reopened.json()["status"] == "In Progress"


def test_same_status_writes_no_history(client, db, alice, household) -> None:
    task = create_task(client, household, alice)
    url = f"/api/v1/tasks/{task['id']}"
    assert client.put(url, json={"status": "To Do"}, headers=alice.headers).status_code == 200
    assert client.put(url, json={"completed": False}, headers=alice.headers).status_code == 200
    assert history_of(db, task["id"]) == [("created", "To Do")]


def test_update_fields_without_status_change(client, db, alice, household) -> None:
    task = create_task(client, household, alice)
    response = client.put(
        f"/api/v1/tasks/{task['id']}",
        json={"title": "Deep clean the kitchen", "priority": "high", "due_date": "2024-07-01"},
        headers=alice.headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Deep clean the kitchen"
    assert body["priority"] == "high"
    assert body["due_date"] == "2024-07-01"
    assert body["status"] == "To Do"
    assert len(history_of(db, task["id"])) == 1


def test_failed_history_write_keeps_old_status(client, db, alice, household, monkeypatch) -> None:
    task = create_task(client, household, alice)
    fail_history_writes(db, monkeypatch)

    response = client.put(f"/api/v1/tasks/{task['id']}", json={"completed": True}, headers=alice.headers)
    assert response.status_code == 500
    stored = next(t for t in db.tables["tasks"] if t["id"] == task["id"])
    assert stored["status"] == "To Do"
    assert history_of(db, task["id"]) == [("created", "To Do")]


def test_status_and_completed_must_agree(client, alice, household) -> None:
    task = create_task(client, household, alice)
    response = client.put(
        f"/api/v1/tasks/{task['id']}",
        json={"status": "In Progress", "completed": True},
        headers=alice.headers,
    )
    assert response.status_code == 400


def test_lost_status_race_is_conflict(client, db, alice, household, monkeypatch) -> None:
    task = create_task(client, household, alice)
    original = db._rpcs["update_task"]

    def update_task(**params):
        # another writer moves the task between our read and our write
        row = next(t for t in db.tables["tasks"] if t["id"] == task["id"])
        row["status"] = "In Progress"
        return original(**params)

    monkeypatch.setitem(db._rpcs, "update_task", update_task)

    response = client.put(f"/api/v1/tasks/{task['id']}", json={"completed": True}, headers=alice.headers)
    assert response.status_code == 409
    assert db.tables["tasks"][0]["status"] == "In Progress"
    assert history_of(db, task["id"]) == [("created", "To Do")]


def test_get_missing_task(client, alice) -> None:
    response = client.get(f"/api/v1/tasks/{MISSING_ID}", headers=alice.headers)
    assert response.status_code == 404
    assert response.json() == {"message": f"Task with id {MISSING_ID} not found"}


def test_malformed_task_id_is_bad_request(client, alice) -> None:
    assert client.get("/api/v1/tasks/nope", headers=alice.headers).status_code == 400
    assert client.put("/api/v1/tasks/nope", json={"completed": True}, headers=alice.headers).status_code == 400
    assert client.delete("/api/v1/tasks/nope", headers=alice.headers).status_code == 400


def test_delete_task_keeps_history(client, db, alice, household) -> None:
    task = create_task(client, household, alice)
    client.post(f"/api/v1/tasks/{task['id']}/comments", json={"content": "Later"}, headers=alice.headers)

    response = client.delete(f"/api/v1/tasks/{task['id']}", headers=alice.headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Task deleted successfully"}
    assert db.tables["tasks"] == []
    assert db.tables["comments"] == []
    assert history_of(db, task["id"]) == [("created", "To Do"), ("To Do", "deleted")]

    history = client.get(f"/api/v1/tasks/{task['id']}/history", headers=alice.headers).json()
    assert [(h["old_status"], h["new_status"]) for h in history] == [("To Do", "deleted"), ("created", "To Do")]
    assert client.get(f"/api/v1/tasks/{task['id']}", headers=alice.headers).status_code == 404


@pytest.mark.parametrize(
    "status, completed, expected",
    [
        (None, True, TaskStatus.DONE),
        (TaskStatus.IN_PROGRESS, None, TaskStatus.IN_PROGRESS),
        (None, None, TaskStatus.TODO),
    ],
)
def test_resolve_status_for_open_task(db, status, completed, expected) -> None:
    service = TaskService(db)
    update = TaskUpdate(status=status, completed=completed)
    assert service.resolve_status({"id": "t1", "status": "To Do"}, update) == expected
