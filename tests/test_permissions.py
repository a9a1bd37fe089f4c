# tests/test_permissions.py

import pytest

from app.core.exceptions import PermissionDenied
from app.core.permissions import (
    TaskCapability,
    UserCapability,
    authorize_task,
    authorize_user,
    can_on_task,
    can_on_user,
)
from app.models import Task, User, UserRole

ADMIN = User(id=1, email="admin@test.com", role=UserRole.ADMIN)
CREATOR = User(id=2, email="creator@test.com", role=UserRole.USER)
ASSIGNEE = User(id=3, email="assignee@test.com", role=UserRole.USER)
STRANGER = User(id=4, email="stranger@test.com", role=UserRole.USER)

TASK = Task(id=10, title="Shared", created_by=CREATOR.id, assigned_to=ASSIGNEE.id)

ASSIGNEE_ALLOWED = {
    TaskCapability.VIEW,
    TaskCapability.UPDATE,
    TaskCapability.UPLOAD_DOCUMENT,
    TaskCapability.DOWNLOAD_DOCUMENT,
}


@pytest.mark.parametrize("capability", list(TaskCapability))
def test_admin_and_creator_hold_every_task_capability(capability):
    assert can_on_task(ADMIN, capability, TASK)
    assert can_on_task(CREATOR, capability, TASK)


@pytest.mark.parametrize("capability", list(TaskCapability))
def test_assignee_capabilities(capability):
    assert can_on_task(ASSIGNEE, capability, TASK) == (capability in ASSIGNEE_ALLOWED)


@pytest.mark.parametrize("capability", list(TaskCapability))
def test_stranger_holds_nothing(capability):
    assert not can_on_task(STRANGER, capability, TASK)


def test_unassigned_task_grants_nothing_to_others():
    task = Task(id=11, title="Solo", created_by=CREATOR.id, assigned_to=None)
    assert not can_on_task(ASSIGNEE, TaskCapability.VIEW, task)


def test_authorize_task_raises():
    with pytest.raises(PermissionDenied) as excinfo:
        authorize_task(ASSIGNEE, TaskCapability.DELETE, TASK)
    assert excinfo.value.status_code == 403


def test_user_capabilities():
    assert can_on_user(CREATOR, UserCapability.MANAGE_PROFILE, CREATOR.id)
    assert not can_on_user(CREATOR, UserCapability.MANAGE_PROFILE, ADMIN.id)
    assert not can_on_user(CREATOR, UserCapability.CHANGE_ROLE, CREATOR.id)
    assert not can_on_user(CREATOR, UserCapability.DELETE, STRANGER.id)
    for capability in UserCapability:
        assert can_on_user(ADMIN, capability, CREATOR.id)


def test_authorize_user_messages():
    with pytest.raises(PermissionDenied) as excinfo:
        authorize_user(CREATOR, UserCapability.MANAGE_PROFILE, ADMIN.id)
    assert excinfo.value.message == "Access denied"

    with pytest.raises(PermissionDenied) as excinfo:
        authorize_user(CREATOR, UserCapability.DELETE, STRANGER.id)
    assert excinfo.value.message == "Admin access required"
