# tests/test_task_history.py

from __future__ import annotations

from conftest import add_member, create_task


def transitions(entries: list[dict]) -> list[tuple[str, str, str]]:
    return [(e["task_title"], e["old_status"], e["new_status"]) for e in entries]


def test_history_is_newest_first_with_names(client, alice, household) -> None:
    task = create_task(client, household, alice)
    client.put(f"/api/v1/tasks/{task['id']}", json={"status": "In Progress"}, headers=alice.headers)

    entries = client.get("/api/v1/history", headers=alice.headers).json()
    assert transitions(entries) == [
        ("Clean the kitchen", "To Do", "In Progress"),
        ("Clean the kitchen", "created", "To Do"),
    ]
    assert {e["changed_by_name"] for e in entries} == {"Alice"}


def test_history_filters(client, alice, bob, household) -> None:
    add_member(client, household, alice, user_id=bob.id)
    kitchen = create_task(client, household, alice)
    trash = create_task(client, household, bob, title="Take out trash")
    client.put(f"/api/v1/tasks/{trash['id']}", json={"completed": True}, headers=bob.headers)

    by_task = client.get("/api/v1/history", params={"task_id": kitchen["id"]}, headers=alice.headers).json()
    assert transitions(by_task) == [("Clean the kitchen", "created", "To Do")]

    by_user = client.get("/api/v1/history", params={"user_id": bob.id}, headers=alice.headers).json()
    assert transitions(by_user) == [
        ("Take out trash", "To Do", "Done"),
        ("Take out trash", "created", "To Do"),
    ]

    combined = client.get(
        "/api/v1/history",
        params={"household_id": household["id"], "task_id": trash["id"], "user_id": alice.id},
        headers=alice.headers,
    ).json()
    assert combined == []


def test_history_sorting(client, alice, bob, household) -> None:
    add_member(client, household, alice, user_id=bob.id)
    create_task(client, household, bob, title="Water plants")
    create_task(client, household, alice, title="Laundry")

    by_task = client.get("/api/v1/history", params={"sort_by": "task"}, headers=alice.headers).json()
    assert [e["task_title"] for e in by_task] == ["Laundry", "Water plants"]

    by_user = client.get("/api/v1/history", params={"sort_by": "user"}, headers=alice.headers).json()
    assert [e["changed_by_name"] for e in by_user] == ["Alice", "Bob"]

    assert client.get("/api/v1/history", params={"sort_by": "size"}, headers=alice.headers).status_code == 400


def test_history_is_scoped_to_callers_households(client, alice, bob, admin, household) -> None:
    create_task(client, household, alice)
    assert client.get("/api/v1/history", headers=bob.headers).json() == []
    assert client.get("/api/v1/history", params={"household_id": household["id"]}, headers=bob.headers).status_code == 403
    assert len(client.get("/api/v1/history", headers=admin.headers).json()) == 1


def test_household_history_includes_deleted_tasks(client, alice, household) -> None:
    task = create_task(client, household, alice)
    client.delete(f"/api/v1/tasks/{task['id']}", headers=alice.headers)

    entries = client.get(f"/api/v1/households/{household['id']}/history", headers=alice.headers).json()
    assert [(e["old_status"], e["new_status"]) for e in entries] == [("To Do", "deleted"), ("created", "To Do")]
    assert entries[0]["task_title"] is None


def test_history_stats(client, alice, bob, household) -> None:
    add_member(client, household, alice, user_id=bob.id)
    kitchen = create_task(client, household, alice)
    create_task(client, household, bob, title="Take out trash")
    client.put(f"/api/v1/tasks/{kitchen['id']}", json={"completed": True}, headers=bob.headers)

    stats = client.get("/api/v1/history/stats", headers=alice.headers).json()
    assert stats == {"total_changes": 3, "completed": 1, "active_users": 2}

    kitchen_stats = client.get("/api/v1/history/stats", params={"task_id": kitchen["id"]}, headers=alice.headers).json()
    assert kitchen_stats == {"total_changes": 2, "completed": 1, "active_users": 2}


def test_history_stats_empty(client, bob) -> None:
    stats = client.get("/api/v1/history/stats", headers=bob.headers).json()
    assert stats == {"total_changes": 0, "completed": 0, "active_users": 0}
