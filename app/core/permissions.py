"""
Permissions - Capability checks evaluated once per request

Routes never test roles themselves; they declare the capability they need and
the dependency in app.core.dependencies resolves the resource and calls authorize().
"""

import enum
import logging

from sqlalchemy import or_, true

from app.core.exceptions import PermissionDenied
from app.models import Task, User

logger = logging.getLogger(__name__)

class TaskCapability(str, enum.Enum):
    VIEW = "view"
    UPDATE = "update"
    DELETE = "delete"
    UPLOAD_DOCUMENT = "upload_document"
    DOWNLOAD_DOCUMENT = "download_document"
    DELETE_DOCUMENT = "delete_document"

class UserCapability(str, enum.Enum):
    MANAGE_PROFILE = "manage_profile"  # Change email or password
    CHANGE_ROLE = "change_role"
    DELETE = "delete"

# Capabilities a task's assignee holds in addition to viewing
_ASSIGNEE_CAPABILITIES = frozenset({
    TaskCapability.VIEW,
    TaskCapability.UPDATE,
    TaskCapability.UPLOAD_DOCUMENT,
    TaskCapability.DOWNLOAD_DOCUMENT,
})

def can_on_task(actor: User, capability: TaskCapability, task: Task) -> bool:
    """Admins hold every capability, creators hold all on their own tasks, assignees a subset"""
    if actor.is_admin:
        return True
    if task.created_by == actor.id:
        return True
    if task.assigned_to is not None and task.assigned_to == actor.id:
        return capability in _ASSIGNEE_CAPABILITIES
    return False

def can_on_user(actor: User, capability: UserCapability, target_id: int) -> bool:
    if actor.is_admin:
        return True
    if capability == UserCapability.MANAGE_PROFILE:
        return actor.id == target_id
    return False

def authorize_task(actor: User, capability: TaskCapability, task: Task) -> None:
    if not can_on_task(actor, capability, task):
        logger.warning(f"⚠️  User {actor.email} denied '{capability.value}' on task {task.id}")
        raise PermissionDenied("Access denied")

def authorize_user(actor: User, capability: UserCapability, target_id: int) -> None:
    if not can_on_user(actor, capability, target_id):
        logger.warning(f"⚠️  User {actor.email} denied '{capability.value}' on user {target_id}")
        raise PermissionDenied("Admin access required" if capability != UserCapability.MANAGE_PROFILE else "Access denied")

def visible_tasks_clause(actor: User):
    """SQL filter for the tasks an actor may list: all for admins, created or assigned otherwise"""
    if actor.is_admin:
        return true()
    return or_(Task.created_by == actor.id, Task.assigned_to == actor.id)
