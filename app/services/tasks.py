"""
Task Service - Transactional task and document writes with compensating file cleanup

Every function here takes the request's Session and the app's FileStore
explicitly. Files written during a call are removed again if the call fails,
so a failed request never leaves orphaned uploads behind.
"""

from typing import List, Optional, Sequence
import logging

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.exceptions import (
    AppError,
    Conflict,
    PayloadTooLarge,
    ReferenceNotFound,
    TaskCreationFailed,
    UploadRejected,
    ValidationFailed,
    is_unique_violation,
)
from app.models import Task, TaskDocument, TaskPriority, TaskStatus, User
from app.schemas.task import TaskCreate, TaskUpdate
from app.utils.file_storage import FileStore, StoredFile

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

# Patch field -> Task attribute. Only these can change through an update.
TASK_PATCH_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "due_date": "due_date",
}

def check_upload_constraints(uploads: Sequence[UploadFile], max_files: int) -> None:
    """
    Reject a batch of uploads before anything is written.

    Raises:
        PayloadTooLarge: more than max_files files
        UploadRejected: a file that is not a PDF
    """
    if len(uploads) > max_files:
        raise PayloadTooLarge("Too many files uploaded")
    for upload in uploads:
        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type != PDF_CONTENT_TYPE:
            logger.warning(f"⚠️  Rejected upload '{upload.filename}' with content type {content_type!r}")
            raise UploadRejected("Only PDF files are allowed")

def get_assignee(db: Session, user_id: Optional[int]) -> Optional[User]:
    """Resolve an assignee id, treating an unknown id as a validation failure"""
    if user_id is None:
        return None
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.warning(f"⚠️  Assigned user {user_id} not found")
        raise ReferenceNotFound("Assigned user not found")
    return user

def store_uploads(file_store: FileStore, uploads: Sequence[UploadFile]) -> List[StoredFile]:
    """Write uploads in order; on failure remove whatever this call already wrote"""
    stored: List[StoredFile] = []
    try:
        for upload in uploads:
            stored.append(file_store.save(upload.file, upload.filename or "document.pdf"))
    except Exception:
        file_store.cleanup(stored)
        raise
    return stored

def _add_documents(db: Session, task: Task, stored: Sequence[StoredFile]) -> List[TaskDocument]:
    documents = []
    for item in stored:
        document = TaskDocument(filename=item.filename, original_name=item.original_name, file_path=item.path)
        task.documents.append(document)
        db.flush()  # One INSERT per document, in upload order
        documents.append(document)
    return documents

def create_task(
    db: Session,
    actor: User,
    payload: TaskCreate,
    uploads: Sequence[UploadFile],
    file_store: FileStore,
    config: Settings,
) -> Task:
    """
    Create a task together with its documents, all or nothing.

    Steps:
        1. Check upload count and content types
        2. Confirm the assignee exists
        3. Write the files
        4. In one transaction insert the task, then one document row per file
        5. Commit, or roll back and delete every file written in step 3

    Raises:
        UploadRejected / PayloadTooLarge: upload constraints violated
        ReferenceNotFound: assigned_to names no user
        Conflict: a uniqueness constraint fired
        TaskCreationFailed: any other failure inside the transaction
    """
    check_upload_constraints(uploads, config.MAX_DOCUMENTS_PER_TASK)
    assignee = get_assignee(db, payload.assigned_to)

    stored = store_uploads(file_store, uploads)
    try:
        task = Task(
            title=payload.title,
            description=payload.description,
            status=payload.status or TaskStatus.PENDING,
            priority=payload.priority or TaskPriority.MEDIUM,
            due_date=payload.due_date,
            creator=actor,
            assignee=assignee,
        )
        db.add(task)
        db.flush()  # INSERT the task and read back its id
        _add_documents(db, task, stored)
        db.commit()
    except AppError:
        db.rollback()
        file_store.cleanup(stored)
        raise
    except Exception as e:
        db.rollback()
        file_store.cleanup(stored)
        logger.error(f"❌ Task creation failed for {actor.email}: {str(e)}", exc_info=True)
        if isinstance(e, IntegrityError) and is_unique_violation(e):
            raise Conflict("Task with similar attributes already exists") from e
        raise TaskCreationFailed(error=None if config.is_production else str(e)) from e

    logger.info(f"✅ Task {task.id} created by {actor.email} with {len(stored)} document(s)")
    return task

def attach_documents(
    db: Session,
    task: Task,
    uploads: Sequence[UploadFile],
    file_store: FileStore,
    config: Settings,
) -> List[TaskDocument]:
    """
    Add documents to an existing task under the same all-or-nothing contract as create_task.

    Raises:
        UploadRejected: no files, wrong type, or the per-task cap would be exceeded
        PayloadTooLarge: too many files in one request or a file over the size cap
    """
    if not uploads:
        raise UploadRejected("No files uploaded")
    check_upload_constraints(uploads, config.MAX_DOCUMENTS_PER_TASK)
    if len(task.documents) + len(uploads) > config.MAX_DOCUMENTS_PER_TASK:
        raise UploadRejected(f"Maximum {config.MAX_DOCUMENTS_PER_TASK} documents allowed per task")

    stored = store_uploads(file_store, uploads)
    try:
        documents = _add_documents(db, task, stored)
        db.commit()
    except Exception:
        db.rollback()
        file_store.cleanup(stored)
        raise

    logger.info(f"✅ Attached {len(documents)} document(s) to task {task.id}")
    return documents

def update_task(db: Session, task: Task, patch: TaskUpdate) -> Task:
    """
    Apply only the supplied fields of `patch` to `task`.

    Raises:
        ValidationFailed: the patch supplies nothing
        ReferenceNotFound: assigned_to names no user
    """
    changes = patch.changes()
    if not changes:
        raise ValidationFailed("No valid fields to update")

    for field, attribute in TASK_PATCH_FIELDS.items():
        if field in changes:
            setattr(task, attribute, changes[field])
    if "assigned_to" in changes:
        task.assignee = get_assignee(db, changes["assigned_to"])

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(task)
    logger.info(f"✅ Task {task.id} updated ({', '.join(sorted(changes))})")
    return task

def delete_task(db: Session, task: Task, file_store: FileStore) -> None:
    """Delete a task and its document rows, then remove the files (best-effort)"""
    paths = [document.file_path for document in task.documents]
    task_id = task.id
    db.delete(task)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    file_store.delete_all(paths)
    logger.info(f"🗑️  Task {task_id} deleted with {len(paths)} document(s)")

def delete_document(db: Session, document: TaskDocument, file_store: FileStore) -> None:
    path, document_id, task_id = document.file_path, document.id, document.task_id
    document.task.documents.remove(document)  # delete-orphan removes the row
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    file_store.delete(path)
    logger.info(f"🗑️  Document {document_id} removed from task {task_id}")

def delete_user(db: Session, user: User, file_store: FileStore) -> None:
    """
    Delete a user. Tasks they created go with them (documents included);
    tasks assigned to them are unassigned. Files of deleted tasks are removed after commit.
    """
    paths = [document.file_path for task in user.tasks_created for document in task.documents]
    user_id = user.id
    db.delete(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    file_store.delete_all(paths)
    logger.info(f"🗑️  User {user_id} deleted with {len(paths)} document file(s)")
