from typing import List
from fastapi import APIRouter, Depends, File, UploadFile, status
from starlette.concurrency import run_in_threadpool

from turismo.api.v1.schemas import UploadOut
from turismo.core import ValidationError
from turismo.roles import Role
from turismo.security import role_required
from turismo.storage import MAX_FILES, upload_media, validate_upload


router = APIRouter()


@router.post(
    "",
    response_model=UploadOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(role_required(Role.agent))],
)
async def upload_files(files: List[UploadFile] = File(...)):
    """Store package media; returns the public URL and media type of each file"""
    if len(files) > MAX_FILES:
        raise ValidationError(f"Too many files (max {MAX_FILES})", field="files")
    # Reject the whole batch before anything is stored
    for f in files:
        validate_upload(f)
    stored = [await run_in_threadpool(upload_media, f) for f in files]
    return UploadOut(files=stored)
