# controller/document_staging.py
import logging
import os
from typing import Dict
from uuid import uuid4
from fastapi import Request
from starlette.datastructures import UploadFile
from config.settings import settings
from model.submission import SubmissionFile
from util.constants import DOCUMENT_FIELDS
from util.enums import ErrorMessage
from util.errors import AppError
from util.functions import remove_quietly

logger = logging.getLogger(__name__)

CHUNK_BYTES = 1024 * 1024


async def _stage_one(field_name: str, upload: UploadFile) -> SubmissionFile:
    max_bytes = settings.max_file_bytes
    if upload.size is not None and upload.size > max_bytes:
        raise AppError.of(ErrorMessage.FILE_TOO_LARGE)

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    path = os.path.join(settings.UPLOAD_DIR, uuid4().hex)
    written = 0
    try:
        with open(path, "wb") as out:
            while True:
                chunk = await upload.read(CHUNK_BYTES)
                if not chunk:
                    break
                written += len(chunk)
                # Hard cap while reading (works even if no size was announced)
                if written > max_bytes:
                    raise AppError.of(ErrorMessage.FILE_TOO_LARGE)
                out.write(chunk)
    except BaseException:
        remove_quietly(path)
        raise

    return SubmissionFile(
        field_name=field_name,
        filename=upload.filename or field_name,
        mime_type=upload.content_type or "application/octet-stream",
        path=path,
    )


async def stage_documents(request: Request) -> Dict[str, SubmissionFile]:
    """
    Parse the multipart body and copy every document to its own temp file.
    Accepts only the known document fields, one file each, at least one file.
    On any rejection the files staged so far are removed again.
    """
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > settings.max_file_bytes * len(DOCUMENT_FIELDS):
        raise AppError.of(ErrorMessage.FILE_TOO_LARGE)

    staged: Dict[str, SubmissionFile] = {}
    async with request.form() as form:
        try:
            for name, value in form.multi_items():
                if not isinstance(value, UploadFile):
                    continue
                if name not in DOCUMENT_FIELDS:
                    logger.info("stage.rejected field=%s reason=unknown", name)
                    raise AppError.of(ErrorMessage.UNKNOWN_FIELD)
                if name in staged:
                    logger.info("stage.rejected field=%s reason=duplicate", name)
                    raise AppError.of(ErrorMessage.DUPLICATE_FIELD)
                staged[name] = await _stage_one(name, value)
        except BaseException:
            for f in staged.values():
                remove_quietly(f.path)
            raise

    if not staged:
        raise AppError.of(ErrorMessage.NO_DOCUMENTS)
    logger.debug("stage.ok fields=%s", ",".join(staged))
    return staged
