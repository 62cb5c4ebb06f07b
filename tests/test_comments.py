# tests/test_comments.py

from __future__ import annotations

from conftest import MISSING_ID, add_member, create_task


def comments_url(task: dict) -> str:
    return f"/api/v1/tasks/{task['id']}/comments"


def test_add_and_list_comments_in_order(client, alice, bob, household) -> None:
    add_member(client, household, alice, user_id=bob.id)
    task = create_task(client, household, alice)

    first = client.post(comments_url(task), json={"content": "  I started this morning.  "}, headers=alice.headers)
    assert first.status_code == 201
    assert first.json()["content"] == "I started this morning."
    assert first.json()["user_name"] == "Alice"
    client.post(comments_url(task), json={"content": "I'll do the dishes"}, headers=bob.headers)

    listed = client.get(comments_url(task), headers=bob.headers).json()
    assert [(c["user_name"], c["content"]) for c in listed] == [
        ("Alice", "I started this morning."),
        ("Bob", "I'll do the dishes"),
    ]


def test_empty_comment_is_rejected(client, alice, household) -> None:
    task = create_task(client, household, alice)
    response = client.post(comments_url(task), json={"content": "   "}, headers=alice.headers)
    assert response.status_code == 400
    assert response.json() == {"message": "Content is required"}


def test_comment_on_missing_task(client, alice) -> None:
    response = client.post(f"/api/v1/tasks/{MISSING_ID}/comments", json={"content": "hello"}, headers=alice.headers)
    assert response.status_code == 404


def test_outsider_cannot_comment(client, alice, bob, household) -> None:
    task = create_task(client, household, alice)
    assert client.post(comments_url(task), json={"content": "hi"}, headers=bob.headers).status_code == 403
    assert client.get(comments_url(task), headers=bob.headers).status_code == 403


def test_only_author_edits(client, alice, bob, household) -> None:
    add_member(client, household, alice, user_id=bob.id)
    task = create_task(client, household, alice)
    comment = client.post(comments_url(task), json={"content": "Original"}, headers=alice.headers).json()
    url = f"{comments_url(task)}/{comment['id']}"

    assert client.put(url, json={"content": "Hijacked"}, headers=bob.headers).status_code == 403

    edited = client.put(url, json={"content": "Edited"}, headers=alice.headers)
    assert edited.status_code == 200
    assert edited.json()["content"] == "Edited"
    assert edited.json()["updated_at"] is not None


def test_admin_may_delete_any_comment(client, db, alice, bob, admin, household) -> None:
    add_member(client, household, alice, user_id=bob.id)
    task = create_task(client, household, alice)
    comment = client.post(comments_url(task), json={"content": "Mine"}, headers=alice.headers).json()
    url = f"{comments_url(task)}/{comment['id']}"

    assert client.delete(url, headers=bob.headers).status_code == 403
    response = client.delete(url, headers=admin.headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Comment deleted"}
    assert db.tables["comments"] == []
    assert client.delete(url, headers=admin.headers).status_code == 404


def test_comment_must_belong_to_task(client, alice, household) -> None:
    first = create_task(client, household, alice)
    second = create_task(client, household, alice, title="Take out trash")
    comment = client.post(comments_url(first), json={"content": "On the first"}, headers=alice.headers).json()

    response = client.put(f"{comments_url(second)}/{comment['id']}", json={"content": "moved"}, headers=alice.headers)
    assert response.status_code == 404
