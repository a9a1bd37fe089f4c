"""
Task Schemas - Pydantic models for task operations
"""

from datetime import date, datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.database import utcnow
from app.models.task import TaskStatus, TaskPriority
from app.schemas.common import Pagination

# DO NOT import from app.schemas here - causes circular import

TITLE_MAX_LENGTH = 255
SORTABLE_FIELDS = ("created_at", "updated_at", "due_date", "title", "status", "priority")

def _blank_to_none(v: Any) -> Any:
    """Form posts send "" for untouched optional inputs"""
    if isinstance(v, str) and not v.strip():
        return None
    return v

def parse_due_date(v: Any) -> Optional[datetime]:
    """
    Accept an ISO-8601 date or datetime (string, date or datetime).
    Aware values are converted to naive UTC; date-only values mean midnight UTC.
    """
    v = _blank_to_none(v)
    if v is None:
        return None
    if isinstance(v, datetime):
        parsed = v
    elif isinstance(v, date):
        parsed = datetime(v.year, v.month, v.day)
    elif isinstance(v, str):
        try:
            parsed = datetime.fromisoformat(v.strip())
        except ValueError:
            raise ValueError("Invalid date format (YYYY-MM-DD)")
    else:
        raise ValueError("Invalid date format (YYYY-MM-DD)")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed

def parse_enum(v: Any, enum_cls, message: str):
    v = _blank_to_none(v)
    if v is None:
        return None
    try:
        return enum_cls(v)
    except ValueError:
        raise ValueError(message)

def parse_user_id(v: Any) -> Optional[int]:
    v = _blank_to_none(v)
    if v is None:
        return None
    if isinstance(v, bool):
        raise ValueError("Invalid user ID")
    if isinstance(v, int):
        return v
    if isinstance(v, str) and v.strip().lstrip("-").isdigit():
        return int(v.strip())
    raise ValueError("Invalid user ID")

class TaskCreate(BaseModel):
    """
    Fields accepted when creating a task.

    Validated before anything is written: title 1-255 characters after trimming,
    status/priority from their enumerations, due_date not earlier than now,
    assigned_to an integer user id.
    """
    title: Optional[str] = Field(default=None, validate_default=True)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Title is required")
        v = str(v).strip()
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError("Title must be between 1-255 characters")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v):
        return _blank_to_none(v.strip() if isinstance(v, str) else v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return parse_enum(v, TaskStatus, "Invalid status value")

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v):
        return parse_enum(v, TaskPriority, "Invalid priority value")

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, v):
        parsed = parse_due_date(v)
        # Only strictly earlier dates are rejected
        if parsed is not None and parsed < utcnow():
            raise ValueError("Due date cannot be in the past")
        return parsed

    @field_validator("assigned_to", mode="before")
    @classmethod
    def validate_assigned_to(cls, v):
        return parse_user_id(v)

class TaskUpdate(BaseModel):
    """
    Patch for an existing task - only fields present in the request are applied.
    An explicit null clears description, due_date or assigned_to.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Title cannot be empty")
        v = str(v).strip()
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError("Title must be between 1-255 characters")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v):
        return _blank_to_none(v.strip() if isinstance(v, str) else v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if v is None:
            raise ValueError("Invalid status value")
        return parse_enum(v, TaskStatus, "Invalid status value")

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, v):
        if v is None:
            raise ValueError("Invalid priority value")
        return parse_enum(v, TaskPriority, "Invalid priority value")

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, v):
        return parse_due_date(v)

    @field_validator("assigned_to", mode="before")
    @classmethod
    def validate_assigned_to(cls, v):
        return parse_user_id(v)

    def changes(self) -> dict:
        """Field -> new value for every field the client supplied"""
        return self.model_dump(exclude_unset=True)

class TaskDocumentResponse(BaseModel):
    id: int
    task_id: int
    filename: str
    original_name: str
    file_path: str
    uploaded_at: datetime

    class Config:
        from_attributes = True

class TaskResponse(BaseModel):
    """Task as returned by the API, documents in upload order"""
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    assigned_to: Optional[int] = None
    created_by: int
    assigned_to_email: Optional[str] = None
    created_by_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    documents: List[TaskDocumentResponse] = []

    class Config:
        from_attributes = True

class TaskListQuery(BaseModel):
    """Validated query string for GET /api/tasks"""
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    search: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[int] = None
    sort_by: str = "created_at"
    sort_order: str = "DESC"

    @field_validator("search", "status", "priority", "assigned_to", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return _blank_to_none(v)

    @field_validator("sort_by")
    @classmethod
    def validate_sort_by(cls, v):
        if v not in SORTABLE_FIELDS:
            raise ValueError(f"sort_by must be one of: {', '.join(SORTABLE_FIELDS)}")
        return v

    @field_validator("sort_order", mode="before")
    @classmethod
    def validate_sort_order(cls, v):
        v = str(v).upper()
        if v not in ("ASC", "DESC"):
            raise ValueError("sort_order must be ASC or DESC")
        return v

class TaskDetailResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    task: TaskResponse

class TaskListResponse(BaseModel):
    success: bool = True
    tasks: List[TaskResponse]
    pagination: Pagination

class DocumentListResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    documents: List[TaskDocumentResponse]
