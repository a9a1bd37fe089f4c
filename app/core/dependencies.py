"""
FastAPI Dependencies - Reusable dependency injection functions
"""

from typing import Callable, Optional
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session, selectinload

from app.core.config import Settings
from app.core.exceptions import AuthenticationFailed, NotFound, PermissionDenied
from app.core.permissions import TaskCapability, authorize_task
from app.core.security import decode_token
from app.database import get_db
from app.models import Task, User
from app.utils.file_storage import FileStore

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme - expects "Authorization: Bearer <token>" header.
# auto_error is off so a missing token gets our own 401 envelope.
security = HTTPBearer(auto_error=False)

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_file_store(request: Request) -> FileStore:
    return request.app.state.file_store

def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    config: Settings = Depends(get_app_settings),
) -> User:
    """
    Dependency to get currently authenticated user from JWT token.

    Process:
        1. Extract token from Authorization header
        2. Verify token signature and expiration against the app's SECRET_KEY
        3. Fetch user from database

    Raises:
        AuthenticationFailed (401): token missing, invalid, expired, or user not found
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationFailed("Access token required")

    user_id = decode_token(credentials.credentials, config)

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️  Token valid but user {user_id} not found")
        raise AuthenticationFailed("User not found")

    request.state.user_id = user.id  # Picked up by the error handlers for log context
    logger.debug(f"✅ Authenticated user: {user.email}")
    return user

def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """
    Dependency that ensures user has admin role.

    Raises:
        PermissionDenied (403): If user is not admin
    """
    if not current_user.is_admin:
        logger.warning(f"⚠️  Non-admin user {current_user.email} attempted admin access")
        raise PermissionDenied("Admin access required")
    return current_user

def load_task(db: Session, task_id: int) -> Task:
    task = (
        db.query(Task)
        .options(selectinload(Task.documents), selectinload(Task.creator), selectinload(Task.assignee))
        .filter(Task.id == task_id)
        .first()
    )
    if task is None:
        raise NotFound("Task not found")
    return task

def task_with_capability(capability: TaskCapability) -> Callable[..., Task]:
    """
    Build a dependency that loads the task named by the {task_id} path parameter
    and authorizes the current user for `capability` against it.

    Usage:
        @router.delete("/{task_id}")
        def delete_task(task: Task = Depends(task_with_capability(TaskCapability.DELETE))):
            ...
    """
    def dependency(
        task_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> Task:
        task = load_task(db, task_id)
        authorize_task(current_user, capability, task)
        return task

    return dependency
