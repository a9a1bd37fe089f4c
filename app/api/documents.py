"""
Task Documents API - Upload, download and delete the PDFs attached to a task
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.api.forms import read_submission
from app.core.config import Settings
from app.core.dependencies import get_app_settings, get_file_store, task_with_capability
from app.core.exceptions import NotFound
from app.core.permissions import TaskCapability
from app.database import get_db
from app.models import Task
from app.schemas import DocumentListResponse, MessageResponse, TaskDocumentResponse
from app.services import tasks as task_service
from app.utils.file_storage import FileStore

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/{task_id}/upload", response_model=DocumentListResponse, status_code=status.HTTP_201_CREATED)
async def upload_documents(
    request: Request,
    task: Task = Depends(task_with_capability(TaskCapability.UPLOAD_DOCUMENT)),
    db: Session = Depends(get_db),
    file_store: FileStore = Depends(get_file_store),
    config: Settings = Depends(get_app_settings),
):
    """
    Attach PDFs (multipart field "documents") to an existing task.

    Raises:
        400: no files, non-PDF, or the task would exceed its document cap
        413: too many files in one request or a file over the size cap
    """
    _, uploads, form = await read_submission(request, config.MAX_DOCUMENTS_PER_TASK)
    try:
        def attach():
            documents = task_service.attach_documents(db, task, uploads, file_store, config)
            return [TaskDocumentResponse.model_validate(document) for document in documents]

        documents = await run_in_threadpool(attach)
    finally:
        if form is not None:
            await form.close()

    return DocumentListResponse(message="Documents uploaded successfully", documents=documents)

@router.get("/{task_id}/download/{filename}")
def download_document(
    filename: str,
    task: Task = Depends(task_with_capability(TaskCapability.DOWNLOAD_DOCUMENT)),
    file_store: FileStore = Depends(get_file_store),
):
    """Stream a stored PDF back under its original name"""
    document = next((doc for doc in task.documents if doc.filename == filename), None)
    if document is None:
        raise NotFound("Document not found")
    if not file_store.exists(document.file_path):
        logger.error(f"❌ Document {document.id} has no file at {document.file_path}")
        raise NotFound("File not found")

    return FileResponse(
        document.file_path,
        media_type="application/pdf",
        filename=document.original_name,
    )

@router.delete("/{task_id}/documents/{document_id}", response_model=MessageResponse)
def delete_document(
    document_id: int,
    task: Task = Depends(task_with_capability(TaskCapability.DELETE_DOCUMENT)),
    db: Session = Depends(get_db),
    file_store: FileStore = Depends(get_file_store),
):
    """Remove one document row and its file"""
    document = next((doc for doc in task.documents if doc.id == document_id), None)
    if document is None:
        raise NotFound("Document not found")

    task_service.delete_document(db, document, file_store)
    return MessageResponse(message="Document deleted successfully")
