# tests/test_tasks_crud.py

from pathlib import Path

import pytest

from app.models import Task, TaskDocument

from .helpers import create_task, pdf, user_id, utc_in


@pytest.fixture()
def seeded(client, user_headers, admin_headers, other_headers):
    """A handful of tasks spread over three accounts"""
    admin = user_id(client, admin_headers)
    user = user_id(client, user_headers)
    return {
        "mine": create_task(client, user_headers, title="Alpha report", priority="high"),
        "mine_done": create_task(client, user_headers, title="Beta cleanup", status="completed", description="archive alpha"),
        "assigned_to_user": create_task(client, admin_headers, title="Gamma review", assigned_to=user),
        "admin_only": create_task(client, admin_headers, title="Delta budget", assigned_to=admin),
        "others": create_task(client, other_headers, title="Epsilon notes"),
    }


def _titles(response):
    assert response.status_code == 200, response.text
    return sorted(task["title"] for task in response.json()["tasks"])


def test_user_lists_created_and_assigned_tasks(client, user_headers, seeded):
    response = client.get("/api/tasks", headers=user_headers)
    assert _titles(response) == ["Alpha report", "Beta cleanup", "Gamma review"]
    assert response.json()["pagination"] == {"page": 1, "limit": 10, "total": 3, "pages": 1}


def test_admin_lists_every_task(client, admin_headers, seeded):
    response = client.get("/api/tasks", headers=admin_headers)
    assert len(_titles(response)) == 5


def test_list_filters(client, user_headers, admin_headers, seeded):
    assert _titles(client.get("/api/tasks", params={"status": "completed"}, headers=user_headers)) == ["Beta cleanup"]
    assert _titles(client.get("/api/tasks", params={"priority": "high"}, headers=user_headers)) == ["Alpha report"]
    # Search covers title and description, case-insensitively
    assert _titles(client.get("/api/tasks", params={"search": "ALPHA"}, headers=user_headers)) == [
        "Alpha report",
        "Beta cleanup",
    ]
    admin = user_id(client, admin_headers)
    assert _titles(client.get("/api/tasks", params={"assigned_to": admin}, headers=admin_headers)) == ["Delta budget"]


def test_list_pagination_and_sorting(client, admin_headers, seeded):
    response = client.get(
        "/api/tasks",
        params={"page": 2, "limit": 2, "sort_by": "title", "sort_order": "asc"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert [task["title"] for task in body["tasks"]] == ["Delta budget", "Epsilon notes"]
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}


@pytest.mark.parametrize(
    "params, field",
    [
        ({"sort_by": "password_hash"}, "sort_by"),
        ({"sort_order": "sideways"}, "sort_order"),
        ({"status": "done"}, "status"),
        ({"page": 0}, "page"),
        ({"limit": 1000}, "limit"),
    ],
)
def test_list_rejects_bad_query(client, user_headers, params, field):
    response = client.get("/api/tasks", params=params, headers=user_headers)
    assert response.status_code == 400
    assert field in response.json()["errors"]


def test_get_task_permissions(client, user_headers, other_headers, seeded):
    assert client.get(f"/api/tasks/{seeded['assigned_to_user']['id']}", headers=user_headers).status_code == 200
    response = client.get(f"/api/tasks/{seeded['mine']['id']}", headers=other_headers)
    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Access denied"}


def test_missing_task_is_404(client, user_headers):
    response = client.get("/api/tasks/9999", headers=user_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Task not found"


def test_patch_changes_only_supplied_fields(client, user_headers, seeded):
    task = seeded["mine"]
    response = client.patch(f"/api/tasks/{task['id']}", json={"status": "in_progress"}, headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Task updated successfully"
    updated = body["task"]
    assert updated["status"] == "in_progress"
    assert updated["title"] == task["title"]
    assert updated["priority"] == task["priority"]
    assert updated["description"] == task["description"]


def test_put_accepts_form_fields(client, user_headers, seeded):
    task = seeded["mine"]
    due = utc_in(days=3).isoformat()
    response = client.put(
        f"/api/tasks/{task['id']}",
        data={"title": "Alpha report v2", "due_date": due},
        headers=user_headers,
    )
    assert response.status_code == 200
    updated = response.json()["task"]
    assert updated["title"] == "Alpha report v2"
    assert updated["due_date"] == due


def test_null_assignee_clears_assignment(client, admin_headers, seeded):
    task = seeded["assigned_to_user"]
    response = client.patch(f"/api/tasks/{task['id']}", json={"assigned_to": None}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["task"]["assigned_to"] is None
    assert response.json()["task"]["assigned_to_email"] is None


@pytest.mark.parametrize(
    "body, status_code, message",
    [
        ({}, 400, "No valid fields to update"),
        ({"assigned_to": 9999}, 400, "Assigned user not found"),
        ({"status": None}, 400, "Validation failed"),
        ({"title": ""}, 400, "Validation failed"),
        ({"priority": "urgent"}, 400, "Validation failed"),
    ],
)
def test_patch_rejections_leave_task_unchanged(client, user_headers, db, seeded, body, status_code, message):
    task = seeded["mine"]
    response = client.patch(f"/api/tasks/{task['id']}", json=body, headers=user_headers)

    assert response.status_code == status_code
    assert response.json()["message"] == message
    db.expire_all()
    stored = db.get(Task, task["id"])
    assert stored.title == task["title"]
    assert stored.assigned_to is None


def test_assignee_can_update_but_not_delete(client, user_headers, seeded):
    task = seeded["assigned_to_user"]
    response = client.patch(f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=user_headers)
    assert response.status_code == 200

    response = client.delete(f"/api/tasks/{task['id']}", headers=user_headers)
    assert response.status_code == 403


def test_unrelated_user_cannot_touch_task(client, other_headers, seeded):
    task_id = seeded["mine"]["id"]
    assert client.patch(f"/api/tasks/{task_id}", json={"title": "Mine now"}, headers=other_headers).status_code == 403
    assert client.delete(f"/api/tasks/{task_id}", headers=other_headers).status_code == 403


def test_delete_removes_documents_and_files(client, user_headers, db):
    task = create_task(client, user_headers, files=[pdf("a.pdf"), pdf("b.pdf")], title="Short lived")
    paths = [Path(doc["file_path"]) for doc in task["documents"]]
    assert all(path.exists() for path in paths)

    response = client.delete(f"/api/tasks/{task['id']}", headers=user_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Task deleted successfully"}

    assert client.get(f"/api/tasks/{task['id']}", headers=user_headers).status_code == 404
    db.expire_all()
    assert db.query(TaskDocument).filter(TaskDocument.task_id == task["id"]).count() == 0
    assert not any(path.exists() for path in paths)


def test_admin_can_delete_any_task(client, admin_headers, seeded):
    response = client.delete(f"/api/tasks/{seeded['others']['id']}", headers=admin_headers)
    assert response.status_code == 200
