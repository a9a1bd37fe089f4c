"""
Request Body Helpers - Read task submissions sent as JSON or multipart form data
"""

from typing import Any, Dict, List, Optional, Tuple
import json

from fastapi import Request
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from app.core.exceptions import PayloadTooLarge, UploadRejected, ValidationFailed

DOCUMENTS_FIELD = "documents"  # Multipart field name carrying the PDF parts

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

async def read_submission(request: Request, max_files: int) -> Tuple[Dict[str, Any], List[UploadFile], Optional[FormData]]:
    """
    Split a request body into text fields and uploaded files.

    The multipart parser stops as soon as more than `max_files` file parts arrive,
    so an oversized batch is never spooled to disk.

    Returns (fields, uploads, form). `form` is the parsed multipart form the
    caller must close, or None for JSON bodies.

    Raises:
        PayloadTooLarge: more than max_files file parts
        UploadRejected: a file part under any field other than "documents", or a malformed form
        ValidationFailed: a JSON body that is not an object
    """
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await _parse_form(request, max_files)
        fields: Dict[str, Any] = {}
        uploads: List[UploadFile] = []
        try:
            for key, value in form.multi_items():
                if isinstance(value, UploadFile):
                    if key != DOCUMENTS_FIELD:
                        raise UploadRejected("Unexpected file field")
                    if value.filename:  # Browsers send an empty part for an untouched file input
                        uploads.append(value)
                else:
                    fields[key] = value
        except Exception:
            await form.close()
            raise
        return fields, uploads, form

    raw = await request.body()
    if not raw.strip():
        return {}, [], None
    try:
        body = json.loads(raw)
    except ValueError:
        raise ValidationFailed("Invalid JSON body")
    if not isinstance(body, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return body, [], None

async def _parse_form(request: Request, max_files: int) -> FormData:
    try:
        return await request.form(max_files=max_files)
    except (StarletteHTTPException, MultiPartException) as e:
        detail = str(getattr(e, "detail", None) or getattr(e, "message", None) or e)
        if detail.startswith("Too many files"):
            raise PayloadTooLarge("Too many files uploaded")
        raise UploadRejected(detail)
