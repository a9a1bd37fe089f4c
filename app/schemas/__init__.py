"""
Schemas Package - Exports all Pydantic schemas
"""

from app.schemas.common import Pagination, MessageResponse
from app.schemas.user import (
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
    TokenResponse,
    UserDetailResponse,
    UserListResponse,
)
from app.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    TaskDocumentResponse,
    TaskListQuery,
    TaskDetailResponse,
    TaskListResponse,
    DocumentListResponse,
)

__all__ = [
    "Pagination",
    "MessageResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserUpdate",
    "TokenResponse",
    "UserDetailResponse",
    "UserListResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "TaskDocumentResponse",
    "TaskListQuery",
    "TaskDetailResponse",
    "TaskListResponse",
    "DocumentListResponse",
]
