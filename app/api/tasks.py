"""
Tasks API - Create, list, read, update and delete tasks
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload
from starlette.concurrency import run_in_threadpool

from app.api.forms import read_submission
from app.core.config import Settings
from app.core.dependencies import get_app_settings, get_current_user, get_file_store, task_with_capability
from app.core.exceptions import ValidationFailed, field_errors
from app.core.permissions import TaskCapability, visible_tasks_clause
from app.database import get_db
from app.models import Task, User
from app.schemas import (
    MessageResponse,
    Pagination,
    TaskCreate,
    TaskDetailResponse,
    TaskListQuery,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)
from app.services import tasks as task_service
from app.utils.file_storage import FileStore

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("", response_model=TaskDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    file_store: FileStore = Depends(get_file_store),
    config: Settings = Depends(get_app_settings),
):
    """
    Create a task with up to three PDF documents.

    Accepts a JSON body, or multipart form data with the task fields as text
    parts and the PDFs under "documents". Text fields and upload constraints are
    checked before any file is written; the task row and its document rows are
    inserted in one transaction.

    Returns:
        201 with the task and its documents in upload order

    Raises:
        400: validation failed, unknown assignee, non-PDF upload
        413: too many files or a file over the size cap
        409: uniqueness conflict
        500: any other failure (files written for this request are removed)
    """
    logger.info(f"➡️  Create task request from: {current_user.email}")
    fields, uploads, form = await read_submission(request, config.MAX_DOCUMENTS_PER_TASK)
    try:
        try:
            payload = TaskCreate.model_validate(fields)
        except ValidationError as e:
            errors = field_errors(e)
            logger.warning(f"⚠️  Task validation failed for {current_user.email}: {errors}")
            raise ValidationFailed(errors=errors)

        def create() -> TaskResponse:
            task = task_service.create_task(db, current_user, payload, uploads, file_store, config)
            return TaskResponse.model_validate(task)

        # Blocking store and file I/O stays off the event loop
        task = await run_in_threadpool(create)
    finally:
        if form is not None:
            await form.close()

    return TaskDetailResponse(message="Task created successfully", task=task)

@router.get("", response_model=TaskListResponse)
def list_tasks(
    page: int = Query(1),
    limit: int = Query(10),
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    assigned_to: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("DESC"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Get paginated tasks visible to the current user.

    Regular users see tasks they created or are assigned to; admins see all.
    """
    try:
        params = TaskListQuery(
            page=page,
            limit=limit,
            search=search,
            status=status_filter,
            priority=priority,
            assigned_to=assigned_to,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ValidationError as e:
        raise ValidationFailed(errors=field_errors(e))

    query = db.query(Task).filter(visible_tasks_clause(current_user))

    # Apply filters
    if params.search:
        pattern = f"%{params.search}%"
        query = query.filter(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
    if params.status:
        query = query.filter(Task.status == params.status)
    if params.priority:
        query = query.filter(Task.priority == params.priority)
    if params.assigned_to is not None:
        query = query.filter(Task.assigned_to == params.assigned_to)

    total = query.count()

    column = getattr(Task, params.sort_by)
    ordering = column.asc() if params.sort_order == "ASC" else column.desc()
    offset = (params.page - 1) * params.limit
    tasks = (
        query.options(selectinload(Task.documents), selectinload(Task.creator), selectinload(Task.assignee))
        .order_by(ordering, Task.id.desc())
        .offset(offset)
        .limit(params.limit)
        .all()
    )

    logger.info(f"✅ Returning {len(tasks)} tasks (total: {total}) to {current_user.email}")
    return TaskListResponse(
        tasks=[TaskResponse.model_validate(task) for task in tasks],
        pagination=Pagination.build(params.page, params.limit, total),
    )

@router.get("/{task_id}", response_model=TaskDetailResponse)
def get_task(task: Task = Depends(task_with_capability(TaskCapability.VIEW))):
    """Get a single task with its documents"""
    return TaskDetailResponse(task=TaskResponse.model_validate(task))

@router.api_route("/{task_id}", methods=["PUT", "PATCH"], response_model=TaskDetailResponse)
async def update_task(
    request: Request,
    task: Task = Depends(task_with_capability(TaskCapability.UPDATE)),
    db: Session = Depends(get_db),
    config: Settings = Depends(get_app_settings),
):
    """
    Update a task. Only the fields present in the body change; an explicit
    null clears description, due_date or assigned_to.
    """
    fields, _, form = await read_submission(request, config.MAX_DOCUMENTS_PER_TASK)
    if form is not None:
        await form.close()
    try:
        patch = TaskUpdate.model_validate(fields)
    except ValidationError as e:
        raise ValidationFailed(errors=field_errors(e))

    def update() -> TaskResponse:
        return TaskResponse.model_validate(task_service.update_task(db, task, patch))

    updated = await run_in_threadpool(update)
    return TaskDetailResponse(message="Task updated successfully", task=updated)

@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task: Task = Depends(task_with_capability(TaskCapability.DELETE)),
    db: Session = Depends(get_db),
    file_store: FileStore = Depends(get_file_store),
):
    """Delete a task; its documents and their files go with it"""
    task_service.delete_task(db, task, file_store)
    return MessageResponse(message="Task deleted successfully")
